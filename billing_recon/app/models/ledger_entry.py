"""
Ledger Entry database model.

Append-only record of every balance-changing event.
"""

from sqlalchemy import Column, Integer, ForeignKey, DateTime, String, Text, UniqueConstraint, event
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from billing_recon.app.db.session import Base
from billing_recon.app.core.exceptions import LedgerImmutableError


class LedgerEntry(Base):
    """
    Ledger Entry model.
    
    Positive amounts credit the account, negative amounts debit it.
    NO updates or deletions allowed (rows only disappear with their account).
    """
    __tablename__ = "ledger_entries"
    __table_args__ = (
        UniqueConstraint("account_id", "request_id", name="uq_ledger_account_request"),
    )
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    
    # Linkage
    account_id = Column(
        Integer,
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    
    # Entry details
    amount = Column(Integer, nullable=False)
    type = Column(String(50), nullable=False)  # see LedgerEntryType; open set
    description = Column(Text, nullable=True)
    
    # Idempotency keys written by billing code
    request_id = Column(String(36), nullable=True)
    operation_id = Column(String(50), nullable=True, index=True)
    
    # Timestamps (Immutable - no updated_at)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    
    account = relationship("Account", back_populates="ledger_entries")
    
    def __repr__(self):
        return f"<LedgerEntry(id={self.id}, type='{self.type}', amount={self.amount})>"


@event.listens_for(LedgerEntry, "before_update")
def prevent_ledger_update(mapper, connection, target):
    """Reject ORM updates of existing entries."""
    raise LedgerImmutableError(target.id, "update")


@event.listens_for(LedgerEntry, "before_delete")
def prevent_ledger_delete(mapper, connection, target):
    """Reject ORM deletes of existing entries."""
    raise LedgerImmutableError(target.id, "delete")
