"""Filesystem listing utilities for scanning directories."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from mediasort.models import ParsedFilename

logger = logging.getLogger(__name__)


@dataclass
class FileEntry:
    path: Path
    parsed_filename: ParsedFilename
    size: int = 0
    modified: float = 0.0
    error: str | None = None


@dataclass
class DirectoryListing:
    """Direct children of one directory."""

    path: Path
    files: list[FileEntry] = field(default_factory=list)
    subdirs: list[Path] = field(default_factory=list)


def parse_filename(filename: str) -> ParsedFilename:
    if not filename:
        return ParsedFilename(full=filename, base=filename, extension=None)

    dot_index = filename.rfind(".")

    if dot_index <= 0 or dot_index == len(filename) - 1:
        return ParsedFilename(full=filename, base=filename.rstrip("."), extension=None)

    extension = filename[dot_index + 1 :].lower()
    base = filename[:dot_index]

    return ParsedFilename(full=filename, base=base, extension=extension)


def list_directory(directory: Path) -> DirectoryListing:
    """List the regular files and subdirectories directly inside ``directory``.

    Symlinks are skipped. Files that cannot be stat'ed or are not readable by
    the current user are still returned, with ``error`` set.

    Raises:
        OSError: If the directory itself cannot be listed.
    """
    listing = DirectoryListing(path=directory)

    with os.scandir(directory) as entries:
        for entry in sorted(entries, key=lambda e: e.name):
            if entry.is_symlink():
                continue
            if entry.is_dir(follow_symlinks=False):
                listing.subdirs.append(Path(entry.path))
                continue
            file_entry = _process_entry(entry)
            if file_entry:
                listing.files.append(file_entry)

    return listing


def _process_entry(entry: os.DirEntry) -> FileEntry | None:
    path = Path(entry.path)
    parsed = parse_filename(entry.name)

    try:
        if not entry.is_file(follow_symlinks=False):
            return None

        stat_result = entry.stat(follow_symlinks=False)
    except FileNotFoundError:
        logger.warning("File disappeared during scan: %s", entry.path)
        return None
    except OSError as e:
        logger.warning("Could not stat %s: %s", entry.path, e)
        return FileEntry(path=path, parsed_filename=parsed, error=str(e))

    if not os.access(entry.path, os.R_OK):
        logger.warning("Permission denied: %s", entry.path)
        return FileEntry(
            path=path,
            parsed_filename=parsed,
            size=stat_result.st_size,
            modified=stat_result.st_mtime,
            error="permission denied",
        )

    return FileEntry(
        path=path,
        parsed_filename=parsed,
        size=stat_result.st_size,
        modified=stat_result.st_mtime,
    )
