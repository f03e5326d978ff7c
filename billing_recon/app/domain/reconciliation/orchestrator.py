"""
Reconciliation Orchestrator.

Dispatches one mode per invocation to exactly one engine, prints the
report and decides the process exit code.
"""

import enum
from typing import Callable, Optional

from billing_recon.app.core.config import settings
from billing_recon.app.core.exceptions import (
    AppException, ConfigurationError, InvalidModeError, MissingAccountIdError
)
from billing_recon.app.core.observability import logger
from billing_recon.app.db.store import StoreAdapter
from billing_recon.app.domain.reconciliation.drift_scanner import DriftScanner
from billing_recon.app.domain.reconciliation.history_explainer import HistoryExplainer
from billing_recon.app.domain.reconciliation.repair_executor import RepairExecutor
from billing_recon.app.services.reporting import (
    format_drift_table, format_explanation, format_repair_report
)

SUPPORTED_SOURCE_OF_TRUTH = "balance"


class ReconciliationMode(str, enum.Enum):
    CHECK = "check"
    EXPLAIN = "explain"
    REPAIR = "repair"


def parse_mode(mode: str) -> ReconciliationMode:
    try:
        return ReconciliationMode((mode or "").strip().lower())
    except ValueError:
        raise InvalidModeError(mode, [m.value for m in ReconciliationMode])


class ReconciliationOrchestrator:

    def __init__(self, store: StoreAdapter, echo: Callable[[str], None] = print):
        self.store = store
        self.echo = echo

    async def run(self, mode: str = "check", account_id: Optional[int] = None) -> int:
        """
        Run one reconciliation mode.
        
        Returns:
            Process exit code: 0 when a recognized mode completes (drift
            found or not), 1 on a fatal fault or a missing required account.
        """
        try:
            self._check_settings()
            selected = parse_mode(mode)
            self.echo(f"\n--- {settings.app_name} ({selected.value.upper()}) ---")
            
            if selected == ReconciliationMode.CHECK:
                await self._run_check(account_id)
            elif selected == ReconciliationMode.EXPLAIN:
                await self._run_explain(account_id)
            else:
                await self._run_repair(account_id)
            return 0
        
        except AppException as e:
            if e.exit_code:
                logger.error(e.message, extra={"error_code": e.error_code, "details": e.details})
            self.echo(f"Error: {e.message}")
            return e.exit_code
        
        except Exception as e:
            logger.exception("Unhandled reconciliation fault")
            self.echo(f"Fatal error: {e}")
            return 1

    def _check_settings(self):
        source = settings.recon_source_of_truth.strip().lower()
        if source != SUPPORTED_SOURCE_OF_TRUTH:
            raise ConfigurationError(
                f"Unsupported recon_source_of_truth '{settings.recon_source_of_truth}'. "
                f"Repair only aligns the ledger to the cached balance.",
                details={"recon_source_of_truth": settings.recon_source_of_truth}
            )

    async def _run_check(self, account_id: Optional[int]):
        self.echo("Fetching ledger vs balance data...\n")
        rows = await DriftScanner(self.store).scan(account_id)
        for line in format_drift_table(rows):
            self.echo(line)

    async def _run_explain(self, account_id: Optional[int]):
        if account_id is None:
            raise MissingAccountIdError(ReconciliationMode.EXPLAIN.value)
        explanation = await HistoryExplainer(self.store).explain(account_id)
        self.echo("")
        for line in format_explanation(explanation):
            self.echo(line)

    async def _run_repair(self, account_id: Optional[int]):
        target = f"Account {account_id}" if account_id is not None else "ALL accounts"
        self.echo(f"Repairing drift for {target}...")
        report = await RepairExecutor(self.store).repair(account_id)
        for line in format_repair_report(report):
            self.echo(line)
