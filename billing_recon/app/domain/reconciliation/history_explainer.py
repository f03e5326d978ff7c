"""
History Explainer.

Replays one account's ledger in chronological order. Purely diagnostic.
"""

from sqlalchemy import select

from billing_recon.app.core.exceptions import AccountNotFoundError
from billing_recon.app.db.store import StoreAdapter
from billing_recon.app.domain.reconciliation.drift import compute_drift, ledger_sum, running_sums
from billing_recon.app.models.account import Account
from billing_recon.app.models.ledger_entry import LedgerEntry
from billing_recon.app.schemas.reconciliation import LedgerExplanation, LedgerHistoryLine


class HistoryExplainer:

    def __init__(self, store: StoreAdapter):
        self.store = store

    async def explain(self, account_id: int) -> LedgerExplanation:
        """
        Replay the ledger of a single account.
        
        The account row and its entries are read inside one transaction so
        the mismatch is computed against a single snapshot. Entries are
        ordered by creation time, ties broken by entry id.
        
        Raises:
            AccountNotFoundError: If the account does not exist
        """
        async with self.store.transaction() as db:
            account = (await db.execute(
                select(Account.id, Account.username, Account.credits).where(Account.id == account_id)
            )).one_or_none()
            
            if account is None:
                raise AccountNotFoundError(account_id)
            
            entries = (await db.execute(
                select(
                    LedgerEntry.id,
                    LedgerEntry.amount,
                    LedgerEntry.type,
                    LedgerEntry.description,
                    LedgerEntry.created_at,
                )
                .where(LedgerEntry.account_id == account_id)
                .order_by(LedgerEntry.created_at.asc(), LedgerEntry.id.asc())
            )).all()
        
        amounts = [entry.amount for entry in entries]
        lines = [
            LedgerHistoryLine(
                entry_id=entry.id,
                created_at=entry.created_at,
                amount=int(entry.amount),
                type=entry.type,
                description=entry.description,
                running_sum=running,
            )
            for entry, running in zip(entries, running_sums(amounts))
        ]
        total = ledger_sum(amounts)
        
        return LedgerExplanation(
            account_id=account.id,
            username=account.username,
            balance=int(account.credits),
            entries=lines,
            ledger_sum=total,
            mismatch=compute_drift(account.credits, total),
        )
