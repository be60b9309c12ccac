"""Collection, rendering and delivery phases of one report run."""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

import structlog

from patch_compliance.analysis import build_compliance_row
from patch_compliance.config import ReportSettings
from patch_compliance.delivery import DeliveryManager, DeliveryResult
from patch_compliance.models import ComplianceRow, Report
from patch_compliance.reports import ReportGenerator
from patch_compliance.source import ComplianceSource, PatchServerClient

logger = structlog.get_logger(__name__)


@dataclass
class RunResult:
    """Everything one run produced."""

    report: Report
    delivery: DeliveryResult


def collect_rows(source: ComplianceSource, scope: Optional[str] = None) -> List[ComplianceRow]:
    """Build one compliance row per machine in scope.

    Any source error propagates and ends the run; no machine is ever
    given a zero-filled row, which would read as fully compliant.

    Raises:
        ScopeNotFoundError: The named group does not exist.
        SourceUnavailableError: Machines or states could not be read.
    """
    machines = source.list_machines(scope)
    rows = []
    for machine in machines:
        records = source.get_update_states(machine.id)
        row = build_compliance_row(machine, records)
        logger.debug(
            "row_built",
            computer=row.computer_name,
            needed=row.needed,
            failed=row.failed,
            records=len(records),
        )
        rows.append(row)

    logger.info("rows_collected", count=len(rows), scope=scope or "all")
    return rows


def run_report(
    settings: ReportSettings,
    source: Optional[ComplianceSource] = None,
    generated_at: Optional[datetime] = None,
) -> RunResult:
    """Run the full pipeline: collect, render, write files, notify.

    Args:
        settings: Run configuration
        source: Data source; a PatchServerClient for settings.base_url when None
        generated_at: Report time (defaults to now)

    Returns:
        RunResult with the report and per-sink delivery outcome

    Raises:
        PatchServerError: Collection failed; nothing was written.
        FileDeliveryError: The report files could not be written.
    """
    if source is None:
        with PatchServerClient(settings) as client:
            rows = collect_rows(client, settings.scope)
    else:
        rows = collect_rows(source, settings.scope)

    generator = ReportGenerator(
        display_timezone=settings.timezone,
        report_title=settings.report_title,
    )
    report = generator.generate(
        scope=settings.scope_label,
        rows=rows,
        activity_window_days=settings.activity_window_days,
        generated_at=generated_at,
    )

    delivery = DeliveryManager.from_settings(settings).deliver(report)
    return RunResult(report=report, delivery=delivery)
