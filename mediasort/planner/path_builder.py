"""Target path construction and duplicate handling."""

import re
from dataclasses import dataclass, field
from pathlib import Path, PurePath

_UNSAFE_SEGMENT = re.compile(r"[/\\\x00]")


def build_date_folder(date: str) -> PurePath:
    """Build the date folder path for a capture date.

    Target structure: YYYY.MM.DD

    Args:
        date: Capture date formatted as YYYY.MM.DD.

    Returns:
        Relative folder path.
    """
    return PurePath(date)


def build_device_folder(date_dir: PurePath, device: str) -> PurePath:
    """Build a device folder path inside a date folder.

    Path separators in the device name are replaced so the name stays a
    single path segment.

    Args:
        date_dir: Date folder the device folder lives in.
        device: Device name, already passed through the custom name table.

    Returns:
        Relative folder path.
    """
    return date_dir / sanitize_segment(device)


def sanitize_segment(name: str) -> str:
    cleaned = _UNSAFE_SEGMENT.sub("-", name).strip()
    if cleaned in ("", ".", ".."):
        return "_"
    return cleaned


@dataclass
class DuplicateIndex:
    """Tracks which source claimed each (file name, target folder) pair.

    The first source to claim a pair wins; later sources colliding on the
    same pair are duplicates. The same file name in a different target
    folder is never a duplicate.
    """

    claims: dict[tuple[str, PurePath], Path] = field(default_factory=dict)

    def claim(self, file_name: str, target_dir: PurePath, source: Path) -> bool:
        """Claim a target slot for ``source``.

        Args:
            file_name: Name the file will have in the target folder.
            target_dir: Resolved relative target folder.
            source: Source path of the file.

        Returns:
            True if the slot was free or already held by ``source``, False
            if another source got there first.
        """
        key = (file_name, target_dir)
        owner = self.claims.setdefault(key, source)
        return owner == source
