"""
Drift arithmetic shared by the scan, explain and repair paths.

All values are integer credit units.
"""

from itertools import accumulate
from typing import Iterable, List


def ledger_sum(amounts: Iterable[int]) -> int:
    """Sum of entry amounts; exactly 0 for an empty ledger."""
    return sum((int(amount) for amount in amounts), 0)


def compute_drift(balance: int, ledger_total: int) -> int:
    """Signed drift: cached balance minus ledger sum."""
    return int(balance) - int(ledger_total)


def running_sums(amounts: Iterable[int]) -> List[int]:
    """Running ledger sum after each entry, in the order given."""
    return list(accumulate(int(amount) for amount in amounts))


def adjustment_description(adjustment: int) -> str:
    return f"System repair for balance drift (Delta: {adjustment})"
