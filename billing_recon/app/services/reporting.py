"""
Human-readable report formatting.

Turns engine results into lines for stdout. No I/O here.
"""

from typing import List

from billing_recon.app.schemas.reconciliation import (
    DriftRow, LedgerExplanation, RepairReport, RepairStatus
)

DRIFT_MARKER = "⚠️"
OK_MARKER = "✅"


def format_drift_table(rows: List[DriftRow]) -> List[str]:
    lines = [
        "ID | Username | Balance | Ledger Sum | Drift",
        "-" * 50,
    ]
    for row in rows:
        marker = DRIFT_MARKER if row.has_drift else OK_MARKER
        lines.append(f"{row.account_id} | {row.username} | {row.balance} | {row.ledger_sum} | {row.drift} {marker}")
    
    drift_count = sum(1 for row in rows if row.has_drift)
    lines.append("")
    lines.append(f"Scan complete. Found {drift_count} accounts with drift.")
    return lines


def format_explanation(explanation: LedgerExplanation) -> List[str]:
    lines = [
        f"Explaining Account: {explanation.username} (ID: {explanation.account_id})",
        f"Reported Balance: {explanation.balance}",
        "",
        "Ledger History:",
        "ID    | Created At                | Amount | Running Sum | Type                      | Description",
        "-" * 100,
    ]
    for line in explanation.entries:
        lines.append(
            f"{str(line.entry_id).ljust(5)} | {line.created_at.isoformat().ljust(25)} | "
            f"{str(line.amount).ljust(6)} | {str(line.running_sum).ljust(11)} | "
            f"{line.type.ljust(25)} | {line.description or ''}"
        )
    lines.append("-" * 100)
    lines.append(f"Final Ledger Sum: {explanation.ledger_sum}")
    lines.append(f"Balance Mismatch: {explanation.mismatch}")
    return lines


def format_repair_report(report: RepairReport) -> List[str]:
    if report.nothing_to_repair:
        return ["No drift detected. Nothing to repair."]
    
    lines = []
    for outcome in report.outcomes:
        if outcome.status == RepairStatus.REPAIRED:
            lines.append(
                f"{OK_MARKER} Account {outcome.username} repaired: Balance {outcome.balance}, "
                f"Ledger {outcome.ledger_sum_before} -> {outcome.ledger_sum_after} "
                f"(Adjustment: {outcome.adjustment})"
            )
        elif outcome.status == RepairStatus.SKIPPED:
            reason = outcome.error or "drift already resolved"
            lines.append(f"Account {outcome.username} skipped: {reason}")
        else:
            lines.append(f"❌ Account {outcome.username} NOT repaired: {outcome.error}")
    
    lines.append("")
    lines.append(
        f"Repair complete. Repaired: {report.count(RepairStatus.REPAIRED)}, "
        f"Skipped: {report.count(RepairStatus.SKIPPED)}, "
        f"Failed: {report.count(RepairStatus.FAILED)}."
    )
    return lines
