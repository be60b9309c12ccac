"""Data models for the patch compliance reporter."""

from .compliance import ComplianceRow, FleetSummary, MachineIdentity, UpdateStateRecord
from .enums import UpdateState
from .report import Report

__all__ = [
    "ComplianceRow",
    "FleetSummary",
    "MachineIdentity",
    "Report",
    "UpdateState",
    "UpdateStateRecord",
]
