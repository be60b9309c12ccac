"""File output of the Markdown and HTML reports."""

from pathlib import Path
from typing import List
from zoneinfo import ZoneInfo
import shutil
import tempfile

import structlog

from patch_compliance.models import Report

from .exceptions import FileDeliveryError

log = structlog.get_logger()


class FileDelivery:
    """Writes <prefix>-<YYYYMMDD>.md and .html siblings for each report."""

    def __init__(
        self,
        output_dir: str,
        prefix: str = "PatchCompliance",
        timezone: str = "UTC",
    ) -> None:
        """Initialize file delivery.

        Args:
            output_dir: Directory path for report output (created if missing)
            prefix: File name prefix
            timezone: Timezone for the date in file names
        """
        self.output_dir = Path(output_dir)
        self.prefix = prefix
        self.timezone = timezone

    def _ensure_output_dir(self) -> None:
        """Create output directory if it doesn't exist."""
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def _generate_filename(self, report: Report, extension: str) -> str:
        """Generate date-based filename.

        Format: PatchCompliance-20261018.md
        """
        timestamp = report.generated_at.astimezone(ZoneInfo(self.timezone))
        return f"{self.prefix}-{timestamp.strftime('%Y%m%d')}.{extension}"

    def _atomic_write(self, path: Path, content: str) -> None:
        """Write file atomically (write to temp, then rename)."""
        temp_fd, temp_path = tempfile.mkstemp(
            dir=self.output_dir,
            prefix=".tmp-",
            suffix=path.suffix,
        )
        try:
            with open(temp_fd, "w", encoding="utf-8", newline="") as f:
                f.write(content)
            shutil.move(temp_path, path)
        except Exception:
            Path(temp_path).unlink(missing_ok=True)
            raise

    def save(self, report: Report) -> List[Path]:
        """Save the Markdown and HTML representations of a report.

        A later run on the same date overwrites that date's files.

        Args:
            report: Rendered report

        Returns:
            Paths of the Markdown and HTML files, in that order

        Raises:
            FileDeliveryError: If saving fails
        """
        try:
            self._ensure_output_dir()
            saved_paths: List[Path] = []

            for extension, content in (("md", report.markdown), ("html", report.html)):
                path = self.output_dir / self._generate_filename(report, extension)
                self._atomic_write(path, content)
                saved_paths.append(path)
                log.info("report_saved", path=str(path), format=extension)

            return saved_paths

        except PermissionError as e:
            log.error("file_permission_error", path=str(self.output_dir), error=str(e))
            raise FileDeliveryError(
                f"Permission denied writing to {self.output_dir}: {e}"
            )
        except OSError as e:
            log.error("file_write_error", error=str(e))
            raise FileDeliveryError(f"Failed to write report file: {e}")
