"""Tests for file delivery."""

import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytest

from patch_compliance.delivery.file import FileDelivery, FileDeliveryError
from patch_compliance.models import FleetSummary, Report


@pytest.fixture
def sample_report() -> Report:
    """Create sample report for testing."""
    return Report(
        scope="All Computers",
        generated_at=datetime(2026, 10, 18, 22, 30, tzinfo=timezone.utc),
        summary=FleetSummary(),
        markdown="# Report\n",
        html="<!DOCTYPE html><html></html>",
    )


@pytest.fixture
def temp_output_dir():
    """Create temporary output directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


class TestFileDeliveryFilename:
    """Test filename generation."""

    def test_filename_format(self, sample_report: Report) -> None:
        """Filename follows <prefix>-<YYYYMMDD>.<ext>."""
        delivery = FileDelivery(output_dir="/tmp", prefix="WSUS-Compliance")
        assert delivery._generate_filename(sample_report, "md") == "WSUS-Compliance-20261018.md"

    def test_filename_timezone(self, sample_report: Report) -> None:
        """The date follows the configured timezone."""
        delivery = FileDelivery(output_dir="/tmp", timezone="Europe/Berlin")
        # 22:30 UTC is already the next day in Berlin
        assert delivery._generate_filename(sample_report, "html") == "PatchCompliance-20261019.html"


class TestFileDeliverySave:
    """Test file saving functionality."""

    def test_save_writes_both_files(self, sample_report: Report, temp_output_dir: Path) -> None:
        delivery = FileDelivery(output_dir=str(temp_output_dir))
        paths = delivery.save(sample_report)

        assert [p.name for p in paths] == [
            "PatchCompliance-20261018.md",
            "PatchCompliance-20261018.html",
        ]
        assert paths[0].read_text(encoding="utf-8") == "# Report\n"
        assert paths[1].read_text(encoding="utf-8") == "<!DOCTYPE html><html></html>"

    def test_creates_output_dir(self, sample_report: Report, temp_output_dir: Path) -> None:
        target = temp_output_dir / "nested" / "reports"
        FileDelivery(output_dir=str(target)).save(sample_report)
        assert (target / "PatchCompliance-20261018.md").exists()

    def test_no_temp_files_left(self, sample_report: Report, temp_output_dir: Path) -> None:
        FileDelivery(output_dir=str(temp_output_dir)).save(sample_report)
        assert not list(temp_output_dir.glob(".tmp-*"))

    def test_line_endings_preserved(self, temp_output_dir: Path) -> None:
        report = Report(
            scope="x",
            generated_at=datetime(2026, 10, 18, tzinfo=timezone.utc),
            summary=FleetSummary(),
            markdown="a\nb\n",
            html="",
        )
        paths = FileDelivery(output_dir=str(temp_output_dir)).save(report)
        assert paths[0].read_bytes() == b"a\nb\n"

    def test_unicode_content(self, temp_output_dir: Path) -> None:
        report = Report(
            scope="Büro",
            generated_at=datetime(2026, 10, 18, tzinfo=timezone.utc),
            summary=FleetSummary(),
            markdown="**Scope:** Büro\n",
            html="<p>Büro</p>",
        )
        paths = FileDelivery(output_dir=str(temp_output_dir)).save(report)
        assert "Büro" in paths[0].read_text(encoding="utf-8")

    def test_unwritable_dir(self, sample_report: Report, temp_output_dir: Path) -> None:
        """A path blocked by a regular file raises FileDeliveryError."""
        blocker = temp_output_dir / "file"
        blocker.write_text("x")
        delivery = FileDelivery(output_dir=str(blocker / "sub"))
        with pytest.raises(FileDeliveryError):
            delivery.save(sample_report)
