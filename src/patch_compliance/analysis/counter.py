"""Per-machine update state counting."""

from collections import Counter
from typing import Dict, Iterable

import structlog

from patch_compliance.models import (
    ComplianceRow,
    MachineIdentity,
    UpdateState,
    UpdateStateRecord,
)

logger = structlog.get_logger(__name__)


def count_update_states(records: Iterable[UpdateStateRecord]) -> Dict[UpdateState, int]:
    """Count a machine's update records by state.

    Legacy "NotInstalled" tags count as NEEDED. Records whose tag does not
    map to an UpdateState are skipped without incrementing anything.

    Args:
        records: Raw (update, state) records for one machine, in any order

    Returns:
        Dict with an entry for every UpdateState, zero when absent
    """
    counts: Counter = Counter()
    for record in records:
        state = UpdateState.from_raw(record.state)
        if state is None:
            logger.debug("unknown_update_state", state=record.state, update_id=record.update_id)
            continue
        counts[state] += 1

    return {state: counts[state] for state in UpdateState}


def build_compliance_row(
    machine: MachineIdentity,
    records: Iterable[UpdateStateRecord],
) -> ComplianceRow:
    """Build the compliance row for one machine.

    The machine's name, groups, OS description and last-sync time are
    copied unchanged; the five counts come from its records only.
    """
    counts = count_update_states(records)
    return ComplianceRow(
        computer_name=machine.computer_name,
        group_names=list(machine.group_names),
        os_description=machine.os_description,
        last_sync=machine.last_sync,
        installed=counts[UpdateState.INSTALLED],
        not_applicable=counts[UpdateState.NOT_APPLICABLE],
        needed=counts[UpdateState.NEEDED],
        failed=counts[UpdateState.FAILED],
        pending_reboot=counts[UpdateState.PENDING_REBOOT],
    )
