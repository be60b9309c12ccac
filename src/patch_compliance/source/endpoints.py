"""API endpoint definitions for the patch server administrative API."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Endpoints:
    """Collection of API endpoints used by the reporter.

    Attributes:
        groups: Computer group list endpoint (GET)
        computers: Computer list endpoint (GET, optional groupId query)
        update_states: Per-computer update state endpoint (GET)
    """

    groups: str
    computers: str
    update_states: str


ENDPOINTS = Endpoints(
    groups="/api/computer-groups",
    computers="/api/computers",
    update_states="/api/computers/{machine_id}/update-states",
)
