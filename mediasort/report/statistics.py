"""Plan statistics aggregation and rendering."""

import math
from collections import Counter
from dataclasses import dataclass, field

from mediasort.models import ExecutionPlan, FolderKind, MediaType, OperationKind
from mediasort.report.units import format_bytes, format_duration
from mediasort.scanner.scanner import ScanResult

PHASE_SCANNING = "scanning"
PHASE_CLASSIFICATION = "classification"
PHASE_RESOLUTION = "resolution"
PHASE_FORMATTING = "formatting"

PHASES = (PHASE_SCANNING, PHASE_CLASSIFICATION, PHASE_RESOLUTION, PHASE_FORMATTING)

SKIP_OPERATIONS = (
    OperationKind.SKIP_EXISTS,
    OperationKind.SKIP_DUPLICATE,
    OperationKind.SKIP_UNSUPPORTED,
)

_RULE = "-" * 54


@dataclass
class Statistics:
    """Snapshot of counts, sizes and phase durations for one plan."""

    files_total: int = 0
    files_size: int = 0
    operations: Counter = field(default_factory=Counter)
    by_media: Counter = field(default_factory=Counter)
    transfer_bytes: int = 0
    date_folders_total: int = 0
    date_folders_to_create: int = 0
    device_folders_total: int = 0
    device_folders_to_create: int = 0
    oneoffs_used: bool = False
    oneoffs_files: int = 0
    unsupported_skipped: int = 0
    metadata_unreadable: int = 0
    directories_ignored: int = 0
    directories_unreadable: int = 0
    durations: dict[str, float] = field(default_factory=dict)

    def count(self, operation: OperationKind) -> int:
        return self.operations[operation]

    def media_count(self, media_type: MediaType, *operations: OperationKind) -> int:
        return sum(self.by_media[(media_type, op)] for op in operations)

    @property
    def total_duration(self) -> float:
        return sum(self.durations.values())


def aggregate(
    plan: ExecutionPlan,
    scan: ScanResult | None = None,
    durations: dict[str, float] | None = None,
) -> Statistics:
    """Fold a plan (and optionally its scan) into a Statistics snapshot."""
    stats = Statistics(durations=dict(durations or {}))

    for entry in plan.entries:
        stats.files_total += 1
        stats.operations[entry.operation] += 1
        stats.by_media[(entry.file.media_type, entry.operation)] += 1

        if entry.file.is_supported:
            stats.files_size += entry.file.size
        if entry.operation.is_transfer:
            stats.transfer_bytes += entry.file.size
        if entry.folder_kind is FolderKind.ONEOFFS:
            stats.oneoffs_files += 1
        if entry.operation is OperationKind.SKIP_UNSUPPORTED:
            stats.unsupported_skipped += 1

    for folder in plan.folders:
        if folder.kind is FolderKind.DATE:
            stats.date_folders_total += 1
            if not folder.exists:
                stats.date_folders_to_create += 1
        elif folder.kind is FolderKind.DEVICE:
            stats.device_folders_total += 1
            if not folder.exists:
                stats.device_folders_to_create += 1
        elif folder.kind is FolderKind.ONEOFFS:
            stats.oneoffs_used = True

    if scan is not None:
        stats.metadata_unreadable = scan.metadata_errors
        stats.directories_ignored = scan.directories_ignored
        stats.directories_unreadable = len(scan.issues)

    return stats


def format_statistics(stats: Statistics) -> list[str]:
    """Render the statistics table shown after the preview."""
    file_digits = len(str(stats.files_total))
    dir_digits = math.ceil(file_digits * 3 / 2)

    def cells(values: list[int], width: int) -> str:
        return "│" + "│".join(str(v).rjust(width) for v in values) + "│"

    def media_row(label: str, media_type: MediaType) -> str:
        values = [
            stats.media_count(media_type, OperationKind.MOVE),
            stats.media_count(media_type, OperationKind.COPY),
            stats.media_count(media_type, *SKIP_OPERATIONS),
        ]
        return f"{label:<32}{cells(values, file_digits)}"

    def folder_row(label: str, to_create: int, total: int) -> str:
        return f"{label:<32}{cells([to_create, total], dir_digits)}"

    lines = [
        _RULE,
        f"{'Total files:':<32}{stats.files_total} ({format_bytes(stats.files_size)})",
        f"{'Planned transfer size:':<32}{format_bytes(stats.transfer_bytes)}",
        _RULE,
        media_row("Images to move|copy|skip:", MediaType.IMAGE),
        media_row("Videos to move|copy|skip:", MediaType.VIDEO),
        media_row("Audios to move|copy|skip:", MediaType.AUDIO),
        _RULE,
        folder_row(
            "Date folders   to create|total:",
            stats.date_folders_to_create,
            stats.date_folders_total,
        ),
        folder_row(
            "Device folders to create|total:",
            stats.device_folders_to_create,
            stats.device_folders_total,
        ),
        f"{'One-offs folder files:':<32}{stats.oneoffs_files}",
        _RULE,
        f"{'Target files existing:':<32}{stats.count(OperationKind.SKIP_EXISTS)}",
        f"{'Duplicate files to skip:':<32}{stats.count(OperationKind.SKIP_DUPLICATE)}",
        f"{'Unknown files to skip:':<32}{stats.unsupported_skipped}",
        f"{'Unreadable metadata:':<32}{stats.metadata_unreadable}",
        f"{'Source folders to skip:':<32}{stats.directories_ignored}",
        f"{'Source folders unreadable:':<32}{stats.directories_unreadable}",
        _RULE,
    ]

    for phase in PHASES:
        if phase in stats.durations:
            label = f"Time {phase}:"
            lines.append(f"{label:<32}{format_duration(stats.durations[phase])}")
    lines.append(_RULE)
    lines.append(f"{'Total time taken:':<32}{format_duration(stats.total_duration)}")
    lines.append(_RULE)

    return lines
