"""
Ledger enumerations.
"""

import enum


class LedgerEntryType(str, enum.Enum):
    """
    Known ledger entry kinds.
    
    The column itself is an open set; billing code may write kinds not listed here.
    """
    ADDITION = "addition"  # Purchases, subscription grants
    DEDUCTION = "deduction"  # Usage charges
    RESERVATION = "reservation"  # Credits held for a running job
    DEBIT_CAPTURE = "debit_capture"  # Zero-amount marker closing a reservation
    REFUND = "refund"  # Reservation returned
    RECONCILIATION_ADJUSTMENT = "reconciliation_adjustment"  # Compensating entry written by repair
