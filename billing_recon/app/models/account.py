"""
Account database model.

Holds the cached spendable credit balance mutated by billing code.
"""

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from billing_recon.app.db.session import Base


class Account(Base):
    """
    Account model.
    
    `credits` is the cached balance. Reconciliation reads it and treats it
    as the value of record; it never writes it.
    """
    __tablename__ = "accounts"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    username = Column(String(100), unique=True, index=True, nullable=False)
    
    # Cached balance (integer credit units)
    credits = Column(Integer, default=0, nullable=False)
    
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    
    # Entries are removed by the database cascade, not by the ORM
    ledger_entries = relationship(
        "LedgerEntry",
        back_populates="account",
        passive_deletes=True,
        lazy="select",
    )
    
    def __repr__(self):
        return f"<Account(id={self.id}, username='{self.username}', credits={self.credits})>"
