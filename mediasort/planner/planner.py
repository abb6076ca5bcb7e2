"""Main Planner class that turns classified files into an execution plan."""

import logging
import os
from collections.abc import Callable, Iterable
from pathlib import Path, PurePath

from mediasort.config import Config
from mediasort.models import (
    DeviceDateTree,
    ExecutionPlan,
    FolderKind,
    FolderPlan,
    MediaType,
    OperationKind,
    SupportedFile,
    TargetPlanEntry,
)
from mediasort.planner.path_builder import DuplicateIndex, build_date_folder
from mediasort.planner.resolver import GroupLayout, GroupStrategy, Placement, resolve_group_layout

logger = logging.getLogger(__name__)

REASON_COPY = "file will be copied"
REASON_MOVE = "file will be moved"
REASON_EXISTS = "target file exists, will be skipped"
REASON_DUPLICATE = "duplicate source file, will be skipped"
REASON_READ_ONLY = "source is read only, file will be copied"
REASON_UNSUPPORTED = "unsupported file, will be skipped"


def _is_read_only(path: Path) -> bool:
    return not os.access(path, os.W_OK)


class Planner:
    """Orchestrates planning of file target locations.

    The Planner groups classified files by capture date and device, decides
    the folder layout of every date group, and assigns each file an
    operation. It does not create folders or move or copy files; the
    filesystem is only checked for existing targets.
    """

    def __init__(
        self,
        config: Config,
        exists: Callable[[Path], bool] = Path.exists,
        is_read_only: Callable[[Path], bool] = _is_read_only,
    ) -> None:
        """Initialize the Planner.

        Args:
            config: Resolved configuration.
            exists: Callable telling whether a target path already exists.
            is_read_only: Callable telling whether a source file cannot be moved.
        """
        self.config = config
        self.exists = exists
        self.is_read_only = is_read_only

    def plan(self, files: Iterable[SupportedFile]) -> ExecutionPlan:
        """Build the ordered execution plan for a set of classified files.

        Args:
            files: Classified files, in any order.

        Returns:
            ExecutionPlan with entries in display order.
        """
        ordered = sorted(files, key=lambda f: (str(f.directory), f.file_name, str(f.source_path)))
        target_root = self.config.folders.target_dir

        tree = DeviceDateTree()
        unsupported: list[SupportedFile] = []
        for file in ordered:
            if file.is_supported:
                tree.add(file)
            else:
                unsupported.append(file)

        layouts = {group.date: resolve_group_layout(group, self.config) for group in tree.groups()}

        placements = {}
        duplicates = DuplicateIndex()
        is_duplicate: set[Path] = set()
        for file in ordered:
            if not file.is_supported:
                continue
            placement = layouts[file.date].placement(file.device)
            placements[file.source_path] = placement
            if not duplicates.claim(file.file_name, placement.target_dir, file.source_path):
                is_duplicate.add(file.source_path)

        entries: list[TargetPlanEntry] = []
        folders: list[FolderPlan] = []
        folder_exists: dict[PurePath, bool] = {}

        def add_folder(path: PurePath, kind: FolderKind) -> None:
            if path in folder_exists:
                return
            folder_exists[path] = self.exists(target_root / path)
            folders.append(FolderPlan(path=path, kind=kind, exists=folder_exists[path]))

        def add_entry(file: SupportedFile) -> None:
            placement = placements[file.source_path]
            operation, reason = self._decide(file, placement, file.source_path in is_duplicate)
            entries.append(
                TargetPlanEntry(
                    file=file,
                    target_dir=placement.target_dir,
                    folder_kind=placement.kind,
                    depth=placement.depth,
                    operation=operation,
                    reason=reason,
                )
            )

        oneoffs: list[SupportedFile] = []
        for group in tree.groups():
            layout = layouts[group.date]
            if layout.strategy is GroupStrategy.ONEOFFS:
                oneoffs.extend(f for _, bucket in group.sorted_devices() for f in bucket)
                continue

            add_folder(build_date_folder(group.date), FolderKind.DATE)
            for device_folder in layout.device_folders:
                add_folder(device_folder, FolderKind.DEVICE)

            for _, bucket in _display_buckets(group.sorted_devices(), layout):
                for file in bucket:
                    add_entry(file)

        if oneoffs:
            add_folder(PurePath(self.config.folders.oneoffs_dir_name), FolderKind.ONEOFFS)
            for file in sorted(oneoffs, key=lambda f: (f.date, f.file_name, str(f.source_path))):
                add_entry(file)

        unsupported_extensions: dict[Path, str] = {}
        for file in sorted(unsupported, key=lambda f: str(f.source_path)):
            entries.append(
                TargetPlanEntry(
                    file=file,
                    target_dir=None,
                    folder_kind=None,
                    depth=0,
                    operation=OperationKind.SKIP_UNSUPPORTED,
                    reason=REASON_UNSUPPORTED,
                )
            )
            if file.media_type is MediaType.UNKNOWN:
                unsupported_extensions[file.source_path] = file.extension or ""

        plan = ExecutionPlan(
            target_root=target_root,
            entries=entries,
            folders=folders,
            tree=tree,
            unsupported_extensions=unsupported_extensions,
        )

        if plan.is_empty:
            logger.info("No supported media files found, nothing to plan")
        else:
            logger.info(
                "Planned %d file(s) into %d folder(s) (%d date groups)",
                tree.file_count,
                len(folders),
                len(tree),
            )
        return plan

    def _decide(
        self, file: SupportedFile, placement: Placement, duplicate: bool
    ) -> tuple[OperationKind, str]:
        """Pick the operation for one supported file.

        An existing target wins over a duplicate, and both win over copy or move.
        """
        target = self.config.folders.target_dir / placement.target_dir / file.file_name
        if self.exists(target):
            return OperationKind.SKIP_EXISTS, REASON_EXISTS
        if duplicate:
            return OperationKind.SKIP_DUPLICATE, REASON_DUPLICATE
        if self.config.options.copy_not_move:
            return OperationKind.COPY, REASON_COPY
        if self.is_read_only(file.source_path):
            return OperationKind.COPY, REASON_READ_ONLY
        return OperationKind.MOVE, REASON_MOVE


def _display_buckets(
    buckets: list[tuple[str | None, list[SupportedFile]]], layout: GroupLayout
) -> list[tuple[str | None, list[SupportedFile]]]:
    """Order buckets so device folders come first and files placed in the date folder last."""
    in_device = [b for b in buckets if layout.placement(b[0]).kind is FolderKind.DEVICE]
    in_date = [b for b in buckets if layout.placement(b[0]).kind is not FolderKind.DEVICE]
    merged_date = sorted(
        (f for _, files in in_date for f in files),
        key=lambda f: (f.file_name, str(f.source_path)),
    )
    if merged_date:
        return in_device + [(None, merged_date)]
    return in_device
