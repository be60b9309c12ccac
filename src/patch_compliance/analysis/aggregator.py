"""Fleet-wide reduction of compliance rows."""

from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from patch_compliance.models import ComplianceRow, FleetSummary
from patch_compliance.utils.timestamps import normalize_timestamp


def activity_cutoff(now: datetime, activity_window_days: int) -> datetime:
    """Earliest last-sync time (exclusive) that still counts as active."""
    return now - timedelta(days=activity_window_days)


def is_active(row: ComplianceRow, cutoff: datetime) -> bool:
    """Check whether a row synced strictly after the cutoff.

    Machines that never synced are never active.
    """
    return row.last_sync is not None and row.last_sync > cutoff


def summarize_fleet(
    rows: Iterable[ComplianceRow],
    activity_window_days: int = 0,
    now: Optional[datetime] = None,
) -> FleetSummary:
    """Reduce compliance rows to fleet summary statistics.

    Every count and sum covers all rows. The activity window only decides
    active_machines; needed_updates and failed_updates include stale
    machines.

    Args:
        rows: Compliance rows in scope, in any order
        activity_window_days: Recency window in days (0 = no filtering)
        now: Reference time, naive values read as UTC; captured once here
            when not given

    Returns:
        FleetSummary; active_machines is None when no window is configured

    Raises:
        ValueError: If activity_window_days is negative
    """
    if activity_window_days < 0:
        raise ValueError(f"activity_window_days must be >= 0, got {activity_window_days}")

    cutoff = None
    if activity_window_days > 0:
        now = normalize_timestamp(now) if now is not None else datetime.now(timezone.utc)
        cutoff = activity_cutoff(now, activity_window_days)

    total = active = any_needed = any_failed = any_pending = 0
    needed_updates = failed_updates = 0

    for row in rows:
        total += 1
        if cutoff is not None and is_active(row, cutoff):
            active += 1
        if row.needed > 0:
            any_needed += 1
        if row.failed > 0:
            any_failed += 1
        if row.pending_reboot > 0:
            any_pending += 1
        needed_updates += row.needed
        failed_updates += row.failed

    return FleetSummary(
        total_machines=total,
        active_machines=active if cutoff is not None else None,
        any_needed=any_needed,
        any_failed=any_failed,
        any_pending_reboot=any_pending,
        needed_updates=needed_updates,
        failed_updates=failed_updates,
    )
