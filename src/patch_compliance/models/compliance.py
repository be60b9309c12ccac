"""Machine, compliance row and fleet summary models."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from patch_compliance.utils.timestamps import parse_last_sync


class MachineIdentity(BaseModel):
    """A machine registered on the patch server, with its static metadata."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Server-side machine identifier")
    computer_name: str = Field(..., description="Display name (usually the FQDN)")
    group_names: List[str] = Field(default_factory=list, description="Computer groups, in server order")
    os_description: str = Field(default="", description="Operating system description")
    last_sync: Optional[datetime] = Field(
        default=None, description="Last check-in with the server (None = never)"
    )

    @field_validator("last_sync", mode="before")
    @classmethod
    def normalize_last_sync(cls, v):
        """Accept any timestamp format the server emits; sentinels become None."""
        return parse_last_sync(v)


class UpdateStateRecord(BaseModel):
    """One (update, raw state tag) pair reported for a machine."""

    model_config = ConfigDict(frozen=True)

    update_id: str = Field(..., description="Server-side update identifier")
    state: str = Field(..., description="Raw state tag as reported by the server")


class ComplianceRow(BaseModel):
    """Per-machine update compliance counts.

    Created once per machine from that machine's state records and never
    modified afterwards.
    """

    model_config = ConfigDict(frozen=True)

    computer_name: str
    group_names: List[str] = Field(default_factory=list)
    os_description: str = ""
    last_sync: Optional[datetime] = None
    installed: int = Field(default=0, ge=0)
    not_applicable: int = Field(default=0, ge=0)
    needed: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    pending_reboot: int = Field(default=0, ge=0)

    @field_validator("last_sync", mode="before")
    @classmethod
    def normalize_last_sync(cls, v):
        """Store last-sync times as UTC; never-synced sentinels become None."""
        return parse_last_sync(v)

    @property
    def groups_display(self) -> str:
        """Group names joined for display."""
        return ", ".join(self.group_names)

    @property
    def total_recognized(self) -> int:
        """Number of state records that mapped to a known state."""
        return (
            self.installed
            + self.not_applicable
            + self.needed
            + self.failed
            + self.pending_reboot
        )


class FleetSummary(BaseModel):
    """Fleet-wide statistics reduced from a set of compliance rows."""

    model_config = ConfigDict(frozen=True)

    total_machines: int = 0
    active_machines: Optional[int] = Field(
        default=None, description="Rows synced within the activity window; None when no window"
    )
    any_needed: int = 0
    any_failed: int = 0
    any_pending_reboot: int = 0
    needed_updates: int = 0
    failed_updates: int = 0
