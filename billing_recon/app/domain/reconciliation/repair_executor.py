"""
Repair Executor.

Eliminates drift by appending a compensating ledger entry per account.

Direction: the cached balance is the value of record and the LEDGER is
adjusted to match it. Balances and existing entries are never modified.
Each account is repaired in its own transaction; a failure on one account
is reported and the run moves on to the next.
"""

from functools import partial
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from billing_recon.app.core.config import settings
from billing_recon.app.core.exceptions import RepairInvariantError, StoreFaultError
from billing_recon.app.core.observability import logger
from billing_recon.app.db.store import StoreAdapter
from billing_recon.app.domain.reconciliation.drift import adjustment_description, compute_drift
from billing_recon.app.domain.reconciliation.drift_scanner import DriftScanner, ledger_sum_column
from billing_recon.app.models.account import Account
from billing_recon.app.models.ledger_entry import LedgerEntry
from billing_recon.app.schemas.reconciliation import (
    DriftRow, RepairOutcome, RepairReport, RepairStatus
)


async def read_ledger_sum(db: AsyncSession, account_id: int) -> int:
    result = await db.execute(
        select(ledger_sum_column()).where(LedgerEntry.account_id == account_id)
    )
    return int(result.scalar_one())


class RepairExecutor:

    def __init__(self, store: StoreAdapter, adjustment_type: str = None):
        self.store = store
        self.adjustment_type = adjustment_type or settings.recon_adjustment_type

    async def repair(self, account_id: Optional[int] = None) -> RepairReport:
        """
        Repair every drifted account (or only ``account_id``).
        
        Flow:
        1. Select accounts whose balance differs from their ledger sum
        2. Repair each one in its own transaction
        3. Collect per-account outcomes (failures included)
        
        Returns:
            RepairReport; empty when nothing drifted
        """
        drifted = await DriftScanner(self.store).scan(account_id, drifted_only=True)
        
        report = RepairReport()
        for row in drifted:
            report.outcomes.append(await self.repair_account(row))
        
        if report.count(RepairStatus.FAILED):
            logger.error(
                "Repair run finished with failures",
                extra={"failed": report.count(RepairStatus.FAILED), "total": len(report.outcomes)}
            )
        return report

    async def repair_account(self, row: DriftRow) -> RepairOutcome:
        """
        Repair a single account in one scoped transaction.
        
        Store faults and invariant violations roll the transaction back and
        come back as a FAILED outcome instead of propagating.
        """
        try:
            return await self.store.run_in_transaction(partial(self._apply_adjustment, row))
        except (StoreFaultError, RepairInvariantError) as e:
            logger.exception(
                "Account repair failed",
                extra={"account_id": row.account_id, "error_code": e.error_code}
            )
            return RepairOutcome(
                account_id=row.account_id,
                username=row.username,
                status=RepairStatus.FAILED,
                balance=row.balance,
                ledger_sum_before=row.ledger_sum,
                error=e.message,
            )

    async def _apply_adjustment(self, row: DriftRow, db: AsyncSession) -> RepairOutcome:
        # Lock the account and re-read both sides; the scan may be stale by now.
        account = (await db.execute(
            select(Account).where(Account.id == row.account_id).with_for_update()
        )).scalar_one_or_none()
        
        if account is None:
            logger.warning("Account vanished before repair", extra={"account_id": row.account_id})
            return RepairOutcome(
                account_id=row.account_id,
                username=row.username,
                status=RepairStatus.SKIPPED,
                error="Account no longer exists",
            )
        
        balance = int(account.credits)
        before = await read_ledger_sum(db, account.id)
        adjustment = compute_drift(balance, before)
        
        if adjustment == 0:
            logger.warning(
                "Drift resolved concurrently, skipping",
                extra={"account_id": account.id, "scanned_drift": row.drift}
            )
            return RepairOutcome(
                account_id=account.id,
                username=account.username,
                status=RepairStatus.SKIPPED,
                balance=balance,
                ledger_sum_before=before,
                ledger_sum_after=before,
            )
        
        entry = LedgerEntry(
            account_id=account.id,
            amount=adjustment,
            type=self.adjustment_type,
            description=adjustment_description(adjustment),
        )
        db.add(entry)
        await db.flush()
        
        after = await read_ledger_sum(db, account.id)
        remaining = compute_drift(balance, after)
        if remaining != 0:
            raise RepairInvariantError(account.id, remaining)
        
        logger.info(
            "Compensating entry applied",
            extra={
                "account_id": account.id,
                "entry_id": entry.id,
                "adjustment": adjustment,
                "ledger_sum_before": before,
                "ledger_sum_after": after,
            }
        )
        return RepairOutcome(
            account_id=account.id,
            username=account.username,
            status=RepairStatus.REPAIRED,
            balance=balance,
            ledger_sum_before=before,
            adjustment=adjustment,
            ledger_sum_after=after,
            entry_id=entry.id,
        )
