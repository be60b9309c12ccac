"""Report generator composing aggregation, Markdown rendering and HTML conversion.

Provides the ReportGenerator class that turns the compliance rows of one
run into a Report holding both representations.
"""

from datetime import datetime, timezone
from typing import Optional, Sequence

import structlog

from patch_compliance.analysis import summarize_fleet
from patch_compliance.models import ComplianceRow, Report
from patch_compliance.utils.timestamps import normalize_timestamp

from .converter import create_environment, markdown_to_html
from .markdown import DEFAULT_TITLE, render_markdown

logger = structlog.get_logger(__name__)


class ReportGenerator:
    """Generator for Markdown and HTML compliance reports.

    Attributes:
        env: Jinja2 Environment for the HTML document skeleton
        display_timezone: IANA timezone for dates in the report
        report_title: Title for generated reports
    """

    def __init__(
        self,
        display_timezone: str = "UTC",
        report_title: str = DEFAULT_TITLE,
    ) -> None:
        """Initialize ReportGenerator.

        Args:
            display_timezone: IANA timezone name for date display
                (e.g., 'Europe/Berlin'). Defaults to 'UTC'.
            report_title: Title for generated reports.
        """
        self.display_timezone = display_timezone
        self.report_title = report_title
        self.env = create_environment()

    def generate(
        self,
        scope: str,
        rows: Sequence[ComplianceRow],
        activity_window_days: int = 0,
        generated_at: Optional[datetime] = None,
    ) -> Report:
        """Aggregate rows and render the report in both formats.

        The same generated_at drives the activity cutoff for the summary
        and for the detail table.

        Args:
            scope: Scope label for the report
            rows: All compliance rows in scope
            activity_window_days: Recency window in days (0 = off)
            generated_at: Report time (defaults to now; naive values are UTC)

        Returns:
            Report with summary, Markdown and HTML
        """
        if generated_at is None:
            generated_at = datetime.now(timezone.utc)
        else:
            generated_at = normalize_timestamp(generated_at)
        rows = list(rows)

        summary = summarize_fleet(rows, activity_window_days, now=generated_at)
        markdown = render_markdown(
            scope=scope,
            summary=summary,
            rows=rows,
            generated_at=generated_at,
            activity_window_days=activity_window_days,
            display_timezone=self.display_timezone,
            title=self.report_title,
        )
        html = markdown_to_html(markdown, title=f"{self.report_title} - {scope}", env=self.env)

        logger.info(
            "report_rendered",
            scope=scope,
            total_machines=summary.total_machines,
            needed_updates=summary.needed_updates,
            markdown_bytes=len(markdown.encode("utf-8")),
        )

        return Report(
            scope=scope,
            generated_at=generated_at,
            activity_window_days=activity_window_days,
            summary=summary,
            rows=rows,
            markdown=markdown,
            html=html,
        )
