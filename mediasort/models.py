"""Data models shared by the scanner, planner and report modules."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path, PurePath


class MediaType(Enum):
    """Media category derived from a file extension."""

    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    UNKNOWN = "unknown"


class SupportLevel(Enum):
    """How much of a file's metadata could be used for sorting."""

    FULL = "full"
    PARTIAL = "partial"
    UNSUPPORTED = "unsupported"


class OperationKind(Enum):
    """Planned operation for a single source file."""

    COPY = "copy"
    MOVE = "move"
    SKIP_EXISTS = "skip_exists"
    SKIP_DUPLICATE = "skip_duplicate"
    SKIP_UNSUPPORTED = "skip_unsupported"

    @property
    def is_transfer(self) -> bool:
        return self in (OperationKind.COPY, OperationKind.MOVE)


class FolderKind(Enum):
    """Kind of target folder an entry is placed in."""

    DATE = "date"
    DEVICE = "device"
    ONEOFFS = "oneoffs"


@dataclass(frozen=True)
class ParsedFilename:
    """Parsed components of a filename."""

    full: str
    base: str
    extension: str | None


@dataclass(frozen=True)
class EmbeddedMetadata:
    """Capture date and device fields read from a file's embedded metadata."""

    date_original: datetime | None = None
    date_modified: datetime | None = None
    make: str | None = None
    model: str | None = None


@dataclass(frozen=True)
class RawFile:
    """A regular file as seen by the scanner, before classification."""

    path: Path
    source_root: Path
    directory: Path
    parsed_filename: ParsedFilename
    size: int
    modified: float
    metadata: EmbeddedMetadata | None = None
    metadata_error: str | None = None
    read_error: str | None = None


@dataclass(frozen=True)
class SupportedFile:
    """One classified input file.

    The capture date is always set; it falls back to the filesystem
    modification time when no embedded date is available.
    """

    source_path: Path
    source_root: Path
    directory: Path
    file_name: str
    extension: str | None
    media_type: MediaType
    support: SupportLevel
    date: str  # YYYY.MM.DD
    date_source: str  # 'exif_original', 'exif_modified' or 'fs_modified'
    device: str | None
    size: int
    reason: str | None = None

    @property
    def is_supported(self) -> bool:
        return self.support is not SupportLevel.UNSUPPORTED


@dataclass
class DateGroup:
    """All supported files sharing one capture date, keyed by device.

    The ``None`` key holds files whose device could not be determined.
    """

    date: str
    devices: dict[str | None, list[SupportedFile]] = field(default_factory=dict)

    def add(self, file: SupportedFile) -> None:
        self.devices.setdefault(file.device, []).append(file)

    @property
    def file_count(self) -> int:
        return sum(len(files) for files in self.devices.values())

    @property
    def size(self) -> int:
        return sum(f.size for files in self.devices.values() for f in files)

    @property
    def identified_device_count(self) -> int:
        return sum(1 for device in self.devices if device is not None)

    @property
    def device_count(self) -> int:
        identified = self.identified_device_count
        if identified == 0 and None in self.devices:
            return 1
        return identified

    def sorted_devices(self) -> list[tuple[str | None, list[SupportedFile]]]:
        """Return device buckets ordered by name with the unknown bucket last."""
        keys = sorted(self.devices, key=lambda d: (d is None, d or ""))
        return [(key, sort_files(self.devices[key])) for key in keys]


class DeviceDateTree:
    """Supported files grouped by capture date, then by device."""

    def __init__(self) -> None:
        self._groups: dict[str, DateGroup] = {}

    def add(self, file: SupportedFile) -> None:
        group = self._groups.get(file.date)
        if group is None:
            group = DateGroup(date=file.date)
            self._groups[file.date] = group
        group.add(file)

    def get(self, date: str) -> DateGroup | None:
        return self._groups.get(date)

    def groups(self) -> list[DateGroup]:
        """Return date groups in chronological order."""
        return [self._groups[key] for key in sorted(self._groups)]

    @property
    def file_count(self) -> int:
        return sum(g.file_count for g in self._groups.values())

    def __len__(self) -> int:
        return len(self._groups)


@dataclass(frozen=True)
class TargetPlanEntry:
    """One row of the execution plan."""

    file: SupportedFile
    target_dir: PurePath | None
    folder_kind: FolderKind | None
    depth: int
    operation: OperationKind
    reason: str


@dataclass(frozen=True)
class FolderPlan:
    """A target folder referenced by the plan."""

    path: PurePath
    kind: FolderKind
    exists: bool


@dataclass
class ExecutionPlan:
    """Ordered plan handed to an executor or rendered as a preview."""

    target_root: Path
    entries: list[TargetPlanEntry]
    folders: list[FolderPlan]
    tree: DeviceDateTree
    unsupported_extensions: dict[Path, str] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not any(e.file.is_supported for e in self.entries)

    def entries_in(self, target_dir: PurePath) -> list[TargetPlanEntry]:
        return [e for e in self.entries if e.target_dir == target_dir]


def sort_files(files: list[SupportedFile]) -> list[SupportedFile]:
    """Order files by name, then by source path for stable ties."""
    return sorted(files, key=lambda f: (f.file_name, str(f.source_path)))
