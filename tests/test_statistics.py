"""Tests for statistics aggregation and rendering."""

from pathlib import Path

from mediasort.config import Config
from mediasort.models import MediaType, OperationKind, SupportedFile, SupportLevel
from mediasort.planner.planner import Planner
from mediasort.report.statistics import (
    PHASE_RESOLUTION,
    PHASE_SCANNING,
    aggregate,
    format_statistics,
)
from mediasort.report.units import format_bytes, format_duration, plural
from mediasort.scanner.scanner import ScanIssue, ScanResult

TARGET = Path("/target")


def _file(
    name: str,
    date: str,
    device: str | None = None,
    size: int = 100,
    media_type: MediaType = MediaType.IMAGE,
    support: SupportLevel = SupportLevel.FULL,
    directory: str = "/pics",
) -> SupportedFile:
    return SupportedFile(
        source_path=Path(directory) / name,
        source_root=Path("/pics"),
        directory=Path(directory),
        file_name=name,
        extension=name.rsplit(".", 1)[-1],
        media_type=media_type,
        support=support,
        date=date,
        date_source="exif_original",
        device=device,
        size=size,
    )


def _plan(files: list[SupportedFile], existing: set[Path] | None = None, copy: bool = True):
    config = Config()
    config.folders.target_dir = TARGET
    config.options.copy_not_move = copy
    existing = existing or set()
    planner = Planner(config, exists=lambda p: p in existing, is_read_only=lambda _: False)
    return planner.plan(files)


def _files() -> list[SupportedFile]:
    return [
        _file("IMG_1.jpg", "2017.06.22", "Canon", size=100),
        _file("IMG_2.jpg", "2017.06.22", "Huawei", size=200),
        _file("IMG_1.jpg", "2017.06.22", "Canon", size=100, directory="/pics/copy"),
        _file("VID_1.mp4", "2017.06.23", size=1000, media_type=MediaType.VIDEO),
        _file("notes.txt", "2017.06.23", media_type=MediaType.UNKNOWN, support=SupportLevel.UNSUPPORTED),
    ]


class TestAggregate:
    """Tests for aggregate."""

    def test_operation_counts_sum_to_entries(self):
        plan = _plan(_files())

        stats = aggregate(plan)

        assert stats.files_total == len(plan.entries) == 5
        assert sum(stats.operations.values()) == stats.files_total
        assert stats.count(OperationKind.COPY) == 3
        assert stats.count(OperationKind.SKIP_DUPLICATE) == 1
        assert stats.count(OperationKind.SKIP_UNSUPPORTED) == 1

    def test_transfer_bytes_match_copied_files(self):
        plan = _plan(_files())

        stats = aggregate(plan)

        expected = sum(e.file.size for e in plan.entries if e.operation.is_transfer)
        assert stats.transfer_bytes == expected == 1300

    def test_moves_counted_by_media(self):
        plan = _plan(_files(), copy=False)

        stats = aggregate(plan)

        assert stats.media_count(MediaType.IMAGE, OperationKind.MOVE) == 2
        assert stats.media_count(MediaType.VIDEO, OperationKind.MOVE) == 1
        assert stats.media_count(MediaType.IMAGE, OperationKind.SKIP_DUPLICATE) == 1

    def test_folder_counts(self):
        plan = _plan(_files(), existing={TARGET / "2017.06.22"})

        stats = aggregate(plan)

        # 2017.06.22 has two devices; the single video goes to one-offs
        assert stats.date_folders_total == 1
        assert stats.date_folders_to_create == 0
        assert stats.device_folders_total == 2
        assert stats.device_folders_to_create == 2
        assert stats.oneoffs_used
        assert stats.oneoffs_files == 1

    def test_existing_targets_counted(self):
        existing = {TARGET / "2017.06.22" / "Canon" / "IMG_1.jpg"}
        plan = _plan(_files(), existing=existing)

        stats = aggregate(plan)

        # the duplicate copy points at the same existing target
        assert stats.count(OperationKind.SKIP_EXISTS) == 2
        assert stats.transfer_bytes == 1200

    def test_scan_counters(self):
        plan = _plan(_files())
        scan = ScanResult(
            source_roots=[Path("/pics")],
            directories_scanned=3,
            directories_ignored=2,
            issues=[ScanIssue(path=Path("/pics/locked"), message="denied")],
        )

        stats = aggregate(plan, scan, {PHASE_SCANNING: 1.5})

        assert stats.directories_ignored == 2
        assert stats.directories_unreadable == 1
        assert stats.total_duration == 1.5

    def test_empty_plan(self):
        stats = aggregate(_plan([]))

        assert stats.files_total == 0
        assert stats.transfer_bytes == 0
        assert not stats.oneoffs_used


class TestFormatStatistics:
    """Tests for format_statistics."""

    def test_rows_present(self):
        stats = aggregate(_plan(_files()), durations={PHASE_SCANNING: 0.5, PHASE_RESOLUTION: 0.25})

        lines = format_statistics(stats)

        assert any(line.startswith("Total files:") and "5 (" in line for line in lines)
        assert any(line.startswith("Images to move|copy|skip:") and line.endswith("│0│2│1│") for line in lines)
        assert any(line.startswith("Time scanning:") and line.endswith("0.500s") for line in lines)
        assert not any(line.startswith("Time classification:") for line in lines)
        assert any(line.startswith("Total time taken:") and line.endswith("0.750s") for line in lines)

    def test_folder_row_width(self):
        stats = aggregate(_plan(_files()))

        lines = format_statistics(stats)
        row = next(line for line in lines if line.startswith("Device folders"))

        # one digit of file counts gives two-character folder cells
        assert row.endswith("│ 2│ 2│")


class TestUnits:
    """Tests for the unit formatting helpers."""

    def test_format_bytes(self):
        assert format_bytes(0) == "0.00 B"
        assert format_bytes(1536) == "1.50 KB"
        assert format_bytes(3 * 1024 * 1024) == "3.00 MB"

    def test_format_duration(self):
        assert format_duration(0.25) == "0.250s"

    def test_plural(self):
        assert plural(1, "file") == "1 file"
        assert plural(0, "file") == "0 files"
        assert plural(3, "device") == "3 devices"
