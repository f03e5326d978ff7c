"""
Drift Scanner.

Compares every account's cached balance with the sum of its ledger.
READ-ONLY.
"""

from typing import List, Optional

from sqlalchemy import Select, func, select

from billing_recon.app.core.observability import logger
from billing_recon.app.db.store import StoreAdapter
from billing_recon.app.domain.reconciliation.drift import compute_drift
from billing_recon.app.models.account import Account
from billing_recon.app.models.ledger_entry import LedgerEntry
from billing_recon.app.schemas.reconciliation import DriftRow


def ledger_sum_column():
    """COALESCE(SUM(amount), 0) so accounts without entries sum to 0."""
    return func.coalesce(func.sum(LedgerEntry.amount), 0)


def build_drift_query(account_id: Optional[int] = None, drifted_only: bool = False) -> Select:
    """
    Aggregate balance vs ledger sum per account.
    
    Args:
        account_id: Restrict to a single account
        drifted_only: Keep only accounts whose balance differs from the sum
    """
    stmt = (
        select(
            Account.id.label("account_id"),
            Account.username,
            Account.credits.label("balance"),
            ledger_sum_column().label("ledger_sum"),
        )
        .select_from(Account)
        .outerjoin(LedgerEntry, LedgerEntry.account_id == Account.id)
        .group_by(Account.id, Account.username, Account.credits)
    )
    
    if account_id is not None:
        stmt = stmt.where(Account.id == account_id)
    
    if drifted_only:
        stmt = stmt.having(Account.credits != ledger_sum_column())
    
    return stmt


class DriftScanner:

    def __init__(self, store: StoreAdapter):
        self.store = store

    async def scan(self, account_id: Optional[int] = None, drifted_only: bool = False) -> List[DriftRow]:
        """
        Compute drift for one or all accounts.
        
        An unknown account_id yields an empty list, not an error.
        
        Returns:
            Rows sorted by |drift| descending, then account id
        """
        rows = await self.store.query(build_drift_query(account_id, drifted_only))
        
        results = [
            DriftRow(
                account_id=row["account_id"],
                username=row["username"],
                balance=int(row["balance"]),
                ledger_sum=int(row["ledger_sum"]),
                drift=compute_drift(row["balance"], row["ledger_sum"]),
            )
            for row in rows
        ]
        results.sort(key=lambda r: (-abs(r.drift), r.account_id))
        
        logger.info(
            "Drift scan complete",
            extra={
                "account_id": account_id,
                "accounts_scanned": len(results),
                "accounts_drifted": sum(1 for r in results if r.has_drift),
            }
        )
        return results
