"""Shared enumerations for the patch compliance models."""

from enum import Enum
from typing import Dict, Optional


class UpdateState(str, Enum):
    """Installation state of one update on one machine."""

    INSTALLED = "Installed"
    NOT_APPLICABLE = "NotApplicable"
    NEEDED = "Needed"
    FAILED = "Failed"
    PENDING_REBOOT = "PendingReboot"

    @classmethod
    def from_raw(cls, tag: Optional[str]) -> Optional["UpdateState"]:
        """Map a raw server state tag to an UpdateState.

        Matching is case-insensitive. The legacy "NotInstalled" tag maps to
        NEEDED. Unrecognized tags (Unknown, Downloaded, ...) return None.
        """
        if not tag:
            return None
        return _RAW_STATES.get(tag.strip().lower())


_RAW_STATES: Dict[str, UpdateState] = {
    "installed": UpdateState.INSTALLED,
    "notapplicable": UpdateState.NOT_APPLICABLE,
    "needed": UpdateState.NEEDED,
    "notinstalled": UpdateState.NEEDED,
    "failed": UpdateState.FAILED,
    "installedpendingreboot": UpdateState.PENDING_REBOOT,
    "pendingreboot": UpdateState.PENDING_REBOOT,
}
