"""
Reconciliation result schemas.
"""

import enum
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class DriftRow(BaseModel):
    """One account's balance compared with its ledger sum."""
    account_id: int
    username: str
    balance: int
    ledger_sum: int
    drift: int

    @property
    def has_drift(self) -> bool:
        return self.drift != 0


class LedgerHistoryLine(BaseModel):
    """A ledger entry together with the running sum up to and including it."""
    entry_id: int
    created_at: datetime
    amount: int
    type: str
    description: Optional[str] = None
    running_sum: int


class LedgerExplanation(BaseModel):
    """Chronological replay of one account's ledger."""
    account_id: int
    username: str
    balance: int
    entries: List[LedgerHistoryLine]
    ledger_sum: int
    mismatch: int


class RepairStatus(str, enum.Enum):
    """Per-account repair result."""
    REPAIRED = "REPAIRED"  # Compensating entry committed
    SKIPPED = "SKIPPED"  # Nothing left to repair when re-read inside the transaction
    FAILED = "FAILED"  # Transaction rolled back


class RepairOutcome(BaseModel):
    """What happened to one account during a repair run."""
    account_id: int
    username: str
    status: RepairStatus
    balance: Optional[int] = None
    ledger_sum_before: Optional[int] = None
    adjustment: int = 0
    ledger_sum_after: Optional[int] = None
    entry_id: Optional[int] = None
    error: Optional[str] = None


class RepairReport(BaseModel):
    """Outcomes of a repair run, in processing order."""
    outcomes: List[RepairOutcome] = []

    @property
    def nothing_to_repair(self) -> bool:
        return not self.outcomes

    def count(self, status: RepairStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)
