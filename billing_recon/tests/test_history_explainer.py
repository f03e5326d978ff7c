"""
History Explainer Tests.
"""

from datetime import datetime

import pytest

from billing_recon.app.core.exceptions import AccountNotFoundError
from billing_recon.app.domain.reconciliation.drift_scanner import DriftScanner
from billing_recon.app.domain.reconciliation.history_explainer import HistoryExplainer


@pytest.mark.asyncio
async def test_explain_running_sums(store, create_account):
    """Scenario D: +200, -50, +10 in order gives 200, 150, 160 and no mismatch."""
    account_id = await create_account("dave", 160, [200, -50, 10])
    
    explanation = await HistoryExplainer(store).explain(account_id)
    
    assert [line.running_sum for line in explanation.entries] == [200, 150, 160]
    assert [line.amount for line in explanation.entries] == [200, -50, 10]
    assert explanation.ledger_sum == 160
    assert explanation.mismatch == 0
    assert explanation.username == "dave"


@pytest.mark.asyncio
async def test_explain_orders_by_created_at_then_id(store, create_account):
    """Entries inserted out of chronological order are replayed chronologically."""
    late = datetime(2024, 3, 1)
    early = datetime(2024, 1, 1)
    account_id = await create_account(
        "erin", 0, [5, 7, 11], created_at=[late, early, early]
    )
    
    explanation = await HistoryExplainer(store).explain(account_id)
    
    assert [line.amount for line in explanation.entries] == [7, 11, 5]
    ids = [line.entry_id for line in explanation.entries[:2]]
    assert ids == sorted(ids)
    assert [line.running_sum for line in explanation.entries] == [7, 18, 23]


@pytest.mark.asyncio
async def test_explain_mismatch_equals_scan_drift(store, create_account):
    """Consistency: explainer mismatch equals scanner drift on the same data."""
    account_id = await create_account("frank", 90, [100, -40, 3])
    
    explanation = await HistoryExplainer(store).explain(account_id)
    [row] = await DriftScanner(store).scan(account_id)
    
    assert explanation.mismatch == row.drift == 27


@pytest.mark.asyncio
async def test_explain_account_without_entries(store, create_account):
    account_id = await create_account("gina", 500)
    
    explanation = await HistoryExplainer(store).explain(account_id)
    
    assert explanation.entries == []
    assert explanation.ledger_sum == 0
    assert explanation.mismatch == 500


@pytest.mark.asyncio
async def test_explain_unknown_account(store):
    """Scenario E: missing account raises NotFound."""
    with pytest.raises(AccountNotFoundError) as exc_info:
        await HistoryExplainer(store).explain(424242)
    
    assert exc_info.value.error_code == "ERR_NOT_FOUND_001"
    assert "424242" in exc_info.value.message
