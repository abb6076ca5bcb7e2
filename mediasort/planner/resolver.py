"""Per-date folder layout decisions."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePath

from mediasort.config import UNKNOWN_DEVICE_DIR_NAME, Config
from mediasort.models import DateGroup, FolderKind
from mediasort.planner.path_builder import build_date_folder, build_device_folder


class GroupStrategy(Enum):
    """Folder strategy chosen for one date group."""

    ONEOFFS = "oneoffs"  # whole group goes to the shared one-offs folder
    DATE = "date"  # dedicated date folder, files placed directly inside
    DATE_DEVICE = "date_device"  # dedicated date folder with device folders


@dataclass(frozen=True)
class Placement:
    """Where the files of one device bucket land."""

    target_dir: PurePath
    kind: FolderKind
    depth: int


@dataclass
class GroupLayout:
    """Result of resolving a date group's folder layout."""

    date: str
    strategy: GroupStrategy
    placements: dict[str | None, Placement] = field(default_factory=dict)

    def placement(self, device: str | None) -> Placement:
        return self.placements[device]

    @property
    def device_folders(self) -> list[PurePath]:
        """Device folders in bucket order, each listed once."""
        folders: list[PurePath] = []
        for p in self.placements.values():
            if p.kind is FolderKind.DEVICE and p.target_dir not in folders:
                folders.append(p.target_dir)
        return folders


def resolve_group_layout(group: DateGroup, config: Config) -> GroupLayout:
    """Decide the folder layout for all files of one capture date.

    Rules, in order:
    1. Two or more identified devices always get a date folder with one
       folder per device, regardless of the minimum file count. Files with
       no known device stay in the date folder itself, or go to an
       "Unknown" folder when device folders are always created.
    2. Otherwise, a group with more than ``min_files_per_dir`` files gets
       its own date folder. A single device next to files with no known
       device gets its own folder, unless the group is just one file of
       each. A single device on its own stays flat in the date folder.
       With ``always_create_device_subdirs`` every bucket gets a folder,
       "Unknown" included.
    3. Otherwise the whole group goes to the one-offs folder.

    Args:
        group: DateGroup with files bucketed by device.
        config: Resolved configuration.

    Returns:
        GroupLayout with a placement for every device bucket of the group.
    """
    always_device = config.options.always_create_device_subdirs
    date_dir = build_date_folder(group.date)
    layout = GroupLayout(date=group.date, strategy=GroupStrategy.DATE)

    if group.identified_device_count >= 2:
        layout.strategy = GroupStrategy.DATE_DEVICE
        for device, _ in group.sorted_devices():
            layout.placements[device] = _device_placement(date_dir, device, always_device)
        return layout

    if group.file_count > config.folders.min_files_per_dir:
        if not always_device and not _device_beside_unknown(group):
            for device in group.devices:
                layout.placements[device] = Placement(date_dir, FolderKind.DATE, 0)
            return layout
        layout.strategy = GroupStrategy.DATE_DEVICE
        for device, _ in group.sorted_devices():
            layout.placements[device] = _device_placement(date_dir, device, always_device)
        return layout

    layout.strategy = GroupStrategy.ONEOFFS
    oneoffs = PurePath(config.folders.oneoffs_dir_name)
    for device in group.devices:
        layout.placements[device] = Placement(oneoffs, FolderKind.ONEOFFS, 0)
    return layout


def _device_beside_unknown(group: DateGroup) -> bool:
    if group.identified_device_count != 1 or None not in group.devices:
        return False
    # one file with a device and one without stay together
    return group.file_count > 2


def _device_placement(date_dir: PurePath, device: str | None, always_device: bool) -> Placement:
    if device is not None:
        return Placement(build_device_folder(date_dir, device), FolderKind.DEVICE, 1)
    if always_device:
        return Placement(
            build_device_folder(date_dir, UNKNOWN_DEVICE_DIR_NAME), FolderKind.DEVICE, 1
        )
    return Placement(date_dir, FolderKind.DATE, 0)
