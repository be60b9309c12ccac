"""Report model for one compliance run."""

from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from .compliance import ComplianceRow, FleetSummary


class Report(BaseModel):
    """Rendered compliance report in both representations.

    Produced once per run by ReportGenerator; never updated in place.
    """

    model_config = ConfigDict(frozen=True)

    scope: str = Field(..., description="Scope label the report covers")
    generated_at: datetime = Field(..., description="When this report was generated")
    activity_window_days: int = Field(default=0, description="Activity window used (0 = off)")
    summary: FleetSummary
    rows: List[ComplianceRow] = Field(default_factory=list, description="All rows in scope")
    markdown: str = Field(..., description="Canonical Markdown document")
    html: str = Field(..., description="HTML document converted from the Markdown")
