"""Dry-run preview rendering of an execution plan.

Sample output::

    TARGET FILE                 SOURCE PATH          OPERATION STATUS
    [2017.06.22] (2 devices, 4 files, 3.34 MB) ..... [new folder will be created]
     ├── [Canon EOS 100D] ........................... [new folder will be created]
     │   ├── IMG_01.jpg <--- IMG_01.jpg ........... file will be copied
     │   └── IMG_02.jpg <--- IMG_02.jpg ........... target file exists, will be skipped
     └── IMG_09.jpg <-------- IMG_09.jpg ........... file will be copied
"""

from collections.abc import Iterator
from dataclasses import dataclass

from mediasort.config import Config
from mediasort.models import (
    ExecutionPlan,
    FolderKind,
    FolderPlan,
    OperationKind,
    SupportedFile,
    TargetPlanEntry,
)
from mediasort.report.units import format_bytes, plural

TREE_INDENT_WIDTH = 5
TREE_MID = " ├── "
TREE_LAST = " └── "
TREE_PIPE = " │   "
TREE_BLANK = "     "
TREE_ELIDED = " ·-- "

STATUS_NEW_FOLDER = "[new folder will be created]"
STATUS_FOLDER_EXISTS = "[target folder exists, will not create]"

HEADER_TARGET = "TARGET FILE"
HEADER_SOURCE = "SOURCE PATH"
HEADER_STATUS = "OPERATION STATUS"

# Minimum run of filler characters between columns
_MIN_FILL = 3


def indent_width(depth: int) -> int:
    """Width of the tree prefix for an entry at ``depth``."""
    return TREE_INDENT_WIDTH * (depth + 1)


@dataclass(frozen=True)
class Widths:
    max_path_len: int
    source_width: int

    @property
    def status_column(self) -> int:
        # entry + " <" + dashes + " " + source + " " + dots + " "
        return self.max_path_len + self.source_width + 2 * _MIN_FILL + 5


class LayoutFormatter:
    """Renders an execution plan as an aligned, optionally compacted tree.

    The formatter only reads the plan; compaction affects the rendered
    lines and nothing else.
    """

    def __init__(self, config: Config, has_multiple_sources: bool = False) -> None:
        self.config = config
        self.has_multiple_sources = has_multiple_sources

    @property
    def compacting_threshold(self) -> int:
        if self.config.options.verbose:
            return 0
        return self.config.folders.compacting_threshold

    def source_display(self, file: SupportedFile) -> str:
        if self.has_multiple_sources:
            return str(file.source_path)
        return file.file_name

    def compute_widths(self, plan: ExecutionPlan) -> Widths | None:
        """Compute column widths, or None when alignment is disabled."""
        if not self.config.options.align_file_output:
            return None

        max_path_len = 0
        source_width = 0
        for entry in plan.entries:
            source_width = max(source_width, len(self.source_display(entry.file)))
            if entry.target_dir is None:
                continue
            max_path_len = max(max_path_len, indent_width(entry.depth) + len(entry.file.file_name))

        return Widths(max_path_len=max_path_len, source_width=source_width)

    def render(self, plan: ExecutionPlan) -> list[str]:
        widths = self.compute_widths(plan)
        lines = self._header(widths)

        for folder in plan.folders:
            if folder.kind is FolderKind.DATE:
                lines.extend(self._render_date_folder(plan, folder, widths))
                lines.append("")
            elif folder.kind is FolderKind.ONEOFFS:
                lines.extend(self._render_oneoffs_folder(plan, folder, widths))
                lines.append("")

        unsupported = [e for e in plan.entries if e.operation is OperationKind.SKIP_UNSUPPORTED]
        if unsupported:
            lines.append(f"[unsupported] ({plural(len(unsupported), 'file')})")
            lines.extend(self._render_entries(unsupported, "", widths))
            lines.append("")

        return lines

    def _header(self, widths: Widths | None) -> list[str]:
        if widths is None:
            return [f"{HEADER_TARGET} <--- {HEADER_SOURCE} ... {HEADER_STATUS}", ""]

        source_column = widths.max_path_len + _MIN_FILL + 3
        header = (
            HEADER_TARGET.ljust(source_column)
            + HEADER_SOURCE.ljust(widths.status_column - source_column)
            + HEADER_STATUS
        )
        separator = "-" * len(header)
        return [separator, header, separator]

    def _render_date_folder(
        self, plan: ExecutionPlan, folder: FolderPlan, widths: Widths | None
    ) -> list[str]:
        group = plan.tree.get(str(folder.path))
        label = f"[{folder.path}]"
        if group is not None:
            label += (
                f" ({plural(group.device_count, 'device')}, "
                f"{plural(group.file_count, 'file')}, {format_bytes(group.size)})"
            )
        lines = [self._folder_line(label, folder, widths)]

        device_folders = [
            f
            for f in plan.folders
            if f.kind is FolderKind.DEVICE and f.path.parent == folder.path
        ]
        direct_entries = plan.entries_in(folder.path)
        children = len(device_folders) + (1 if direct_entries else 0)

        for i, device_folder in enumerate(device_folders):
            is_last = i == children - 1 and not direct_entries
            branch = TREE_LAST if is_last else TREE_MID
            label = f"{branch}[{device_folder.path.name}]"
            lines.append(self._folder_line(label, device_folder, widths))
            continuation = TREE_BLANK if is_last else TREE_PIPE
            lines.extend(
                self._render_entries(plan.entries_in(device_folder.path), continuation, widths)
            )

        lines.extend(self._render_entries(direct_entries, "", widths))
        return lines

    def _render_oneoffs_folder(
        self, plan: ExecutionPlan, folder: FolderPlan, widths: Widths | None
    ) -> list[str]:
        entries = plan.entries_in(folder.path)
        size = sum(e.file.size for e in entries)
        label = f"[{folder.path}] ({plural(len(entries), 'file')}, {format_bytes(size)})"
        return [self._folder_line(label, folder, widths)] + self._render_entries(entries, "", widths)

    def _render_entries(
        self, entries: list[TargetPlanEntry], continuation: str, widths: Widths | None
    ) -> list[str]:
        items = list(self._compact(entries))
        shown = [i for i, (entry, _) in enumerate(items) if entry is not None]
        last_shown = shown[-1] if shown else -1

        lines = []
        for i, (entry, elided) in enumerate(items):
            if entry is None:
                lines.append(
                    f"{continuation}{TREE_ELIDED}({elided} entries elided with same status)"
                )
                continue
            branch = TREE_LAST if i == last_shown else TREE_MID
            lines.append(self._file_line(f"{continuation}{branch}", entry, widths))
        return lines

    def _compact(
        self, entries: list[TargetPlanEntry]
    ) -> Iterator[tuple[TargetPlanEntry | None, int]]:
        """Yield (entry, 0) for shown entries and (None, n) for elided runs."""
        threshold = self.compacting_threshold
        run_operation: OperationKind | None = None
        run_length = 0
        elided = 0

        for entry in entries:
            if entry.operation is run_operation:
                run_length += 1
            else:
                if elided:
                    yield None, elided
                    elided = 0
                run_operation = entry.operation
                run_length = 1

            if threshold and run_length > threshold:
                elided += 1
                continue
            yield entry, 0

        if elided:
            yield None, elided

    def _file_line(self, prefix: str, entry: TargetPlanEntry, widths: Widths | None) -> str:
        name = entry.file.file_name
        source = self.source_display(entry.file)
        if widths is None:
            return f"{prefix}{name} <--- {source} ... {entry.reason}"

        entry_width = len(prefix) + len(name)
        arrow = "<" + "-" * max(widths.max_path_len - entry_width + _MIN_FILL, _MIN_FILL)
        dots = "." * (widths.source_width - len(source) + _MIN_FILL)
        return f"{prefix}{name} {arrow} {source} {dots} {entry.reason}"

    def _folder_line(self, label: str, folder: FolderPlan, widths: Widths | None) -> str:
        status = STATUS_FOLDER_EXISTS if folder.exists else STATUS_NEW_FOLDER
        if widths is None:
            return f"{label} ... {status}"

        dots = "." * max(widths.status_column - len(label) - 2, _MIN_FILL)
        return f"{label} {dots} {status}"
