"""Source interface for machine and update-state data.

The collection phase depends only on this Protocol, so the HTTP client
can be replaced by any object that enumerates machines and their states
(an export file, a test double).
"""

from __future__ import annotations

from typing import List, Optional, Protocol, runtime_checkable

from patch_compliance.models import MachineIdentity, UpdateStateRecord


@runtime_checkable
class ComplianceSource(Protocol):
    """Protocol for patch compliance data sources."""

    def list_machines(self, scope: Optional[str] = None) -> List[MachineIdentity]:
        """List machines, optionally restricted to one computer group.

        Raises:
            ScopeNotFoundError: The named group does not exist.
            SourceUnavailableError: The source cannot be read.
        """
        ...

    def get_update_states(self, machine_id: str) -> List[UpdateStateRecord]:
        """Get the raw (update, state) records for one machine.

        Raises:
            SourceUnavailableError: The source cannot be read.
        """
        ...
