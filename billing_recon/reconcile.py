"""
Billing reconciliation command.

Usage:
    billing-reconcile --mode check [--account-id 42]
    billing-reconcile --mode explain --account-id 42
    billing-reconcile --mode repair [--account-id 42]
"""

import argparse
import asyncio
import sys
from typing import Optional, Sequence

from billing_recon.app.core.config import settings
from billing_recon.app.core.observability import configure_logging
from billing_recon.app.db.session import dispose_engine
from billing_recon.app.db.store import StoreAdapter
from billing_recon.app.domain.reconciliation.orchestrator import ReconciliationOrchestrator

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class ReconcileArgumentParser(argparse.ArgumentParser):
    """Usage errors exit with 1, like every other failed run."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = ReconcileArgumentParser(
        prog="billing-reconcile",
        description="Detect, explain and repair drift between cached balances and the credit ledger.",
    )
    # Validated by the orchestrator so an unknown mode is reported, not a usage error.
    parser.add_argument("--mode", default="check", help="check | explain | repair (default: check)")
    parser.add_argument(
        "--account-id", "--user-id",
        dest="account_id",
        type=int,
        default=None,
        help="Restrict to one account (required for explain)",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=settings.log_level,
        help="Logging level (default: %(default)s)",
    )
    return parser


async def reconcile(mode: str, account_id: Optional[int], store: StoreAdapter = None) -> int:
    orchestrator = ReconciliationOrchestrator(store or StoreAdapter())
    try:
        return await orchestrator.run(mode, account_id)
    finally:
        if store is None:
            await dispose_engine()


def main(argv: Sequence[str] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    return asyncio.run(reconcile(args.mode, args.account_id))


if __name__ == "__main__":
    sys.exit(main())
