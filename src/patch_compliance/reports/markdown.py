"""Canonical Markdown rendering of a compliance run.

The document layout is fixed so the same inputs always produce the same
bytes: a title with the report date, the scope, an optional activity
window note, the fleet summary table and the per-machine detail table.
"""

from datetime import datetime
from typing import List, Optional, Sequence, Tuple
from zoneinfo import ZoneInfo

from patch_compliance.analysis.aggregator import activity_cutoff, is_active
from patch_compliance.models import ComplianceRow, FleetSummary
from patch_compliance.utils.timestamps import normalize_timestamp

DEFAULT_TITLE = "Patch Compliance Report"
DETAIL_ROW_LIMIT = 50
LAST_SYNC_FORMAT = "%Y-%m-%d %H:%M"
NEVER_SYNCED = "never"

SUMMARY_HEADERS = ("Metric", "Count")
DETAIL_HEADERS = (
    "Computer",
    "Needed",
    "Failed",
    "Pending Reboot",
    "Installed",
    "Not Applicable",
    "Last Sync",
    "Groups",
)


def summary_metrics(
    summary: FleetSummary,
    activity_window_days: int = 0,
) -> List[Tuple[str, int]]:
    """Fleet summary metrics in report order.

    Seven metrics when an activity window is configured, six otherwise.
    """
    metrics = [("Total machines", summary.total_machines)]
    if activity_window_days > 0:
        metrics.append(
            (f"Active machines (last {activity_window_days} days)", summary.active_machines or 0)
        )
    metrics.extend([
        ("Machines needing updates", summary.any_needed),
        ("Machines with failed updates", summary.any_failed),
        ("Machines pending reboot", summary.any_pending_reboot),
        ("Needed updates (total)", summary.needed_updates),
        ("Failed updates (total)", summary.failed_updates),
    ])
    return metrics


def select_detail_rows(
    rows: Sequence[ComplianceRow],
    cutoff: Optional[datetime] = None,
    limit: int = DETAIL_ROW_LIMIT,
) -> List[ComplianceRow]:
    """Pick the rows shown in the per-machine table.

    Rows are restricted to those synced after cutoff (when given), then
    ordered by needed count descending. The sort is stable, so machines
    with equal counts keep their input order.
    """
    candidates = [row for row in rows if cutoff is None or is_active(row, cutoff)]
    return sorted(candidates, key=lambda row: row.needed, reverse=True)[:limit]


def format_last_sync(value: Optional[datetime], tz: ZoneInfo) -> str:
    """Format a last-sync time for the detail table."""
    if value is None:
        return NEVER_SYNCED
    return value.astimezone(tz).strftime(LAST_SYNC_FORMAT)


def format_groups(group_names: Sequence[str]) -> str:
    """Join group names, replacing pipes so they cannot split a table cell."""
    return ", ".join(name.replace("|", "-") for name in group_names)


def _table(headers: Sequence[str], body: Sequence[Sequence[object]]) -> List[str]:
    lines = [
        "| " + " | ".join(headers) + " |",
        "|" + "---|" * len(headers),
    ]
    for cells in body:
        lines.append("| " + " | ".join(str(cell) for cell in cells) + " |")
    return lines


def render_markdown(
    scope: str,
    summary: FleetSummary,
    rows: Sequence[ComplianceRow],
    generated_at: datetime,
    activity_window_days: int = 0,
    display_timezone: str = "UTC",
    title: str = DEFAULT_TITLE,
) -> str:
    """Render the canonical Markdown report.

    Args:
        scope: Scope label shown on the scope line
        summary: Fleet summary for the rows
        rows: All compliance rows in scope, in collection order
        generated_at: Report time; drives the title date and activity cutoff
        activity_window_days: Recency window in days (0 = off)
        display_timezone: IANA timezone for the title date and last-sync column
        title: Document title

    Returns:
        Markdown text with "\\n" line endings and a trailing newline
    """
    tz = ZoneInfo(display_timezone)
    generated_at = normalize_timestamp(generated_at)
    report_date = generated_at.astimezone(tz).strftime("%Y-%m-%d")

    lines = [
        f"# {title} - {report_date}",
        "",
        f"**Scope:** {scope}",
        "",
    ]

    cutoff = None
    if activity_window_days > 0:
        cutoff = activity_cutoff(generated_at, activity_window_days)
        lines.extend([
            f"**Activity window:** last {activity_window_days} days "
            "(detail table and active count only)",
            "",
        ])

    lines.extend(["## Fleet Summary", ""])
    lines.extend(_table(SUMMARY_HEADERS, summary_metrics(summary, activity_window_days)))
    lines.extend(["", "## Per-Machine Detail", ""])

    detail = [
        (
            row.computer_name,
            row.needed,
            row.failed,
            row.pending_reboot,
            row.installed,
            row.not_applicable,
            format_last_sync(row.last_sync, tz),
            format_groups(row.group_names),
        )
        for row in select_detail_rows(rows, cutoff)
    ]
    lines.extend(_table(DETAIL_HEADERS, detail))

    return "\n".join(lines) + "\n"
