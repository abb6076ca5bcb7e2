"""Main scanner implementation."""

import logging
from collections.abc import Callable
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from pathlib import Path

from mediasort.classifier import is_base_extension
from mediasort.config import Config
from mediasort.extractor.reader import MetadataReader, MetadataResult
from mediasort.models import RawFile
from mediasort.scanner.filesystem import DirectoryListing, list_directory

logger = logging.getLogger(__name__)

SOURCE_UNREADABLE = "source_unreadable"


@dataclass
class ScanIssue:
    """A directory that could not be listed and was left out of the scan."""

    path: Path
    message: str
    kind: str = SOURCE_UNREADABLE


@dataclass
class DirectoryBatch:
    """Files found directly inside one directory, owned by the worker that listed it."""

    directory: Path
    source_root: Path
    files: list[RawFile]
    subdirs: list[Path]


@dataclass
class ScanResult:
    source_roots: list[Path]
    files: list[RawFile] = field(default_factory=list)
    directories_scanned: int = 0
    directories_ignored: int = 0
    issues: list[ScanIssue] = field(default_factory=list)

    @property
    def has_multiple_sources(self) -> bool:
        return self.directories_scanned > 1

    @property
    def metadata_errors(self) -> int:
        return sum(1 for f in self.files if f.metadata_error)

    def by_source(self) -> dict[Path, list[RawFile]]:
        """Group files by the configured root they were found under, keeping scan order."""
        grouped: dict[Path, list[RawFile]] = {root: [] for root in self.source_roots}
        for raw in self.files:
            grouped.setdefault(raw.source_root, []).append(raw)
        return grouped


class Scanner:
    """Lists source directories in parallel and reads embedded metadata per directory.

    Every directory is one unit of work. Subdirectories discovered by a unit
    are submitted as new units once it completes, so deep trees do not hold
    up their siblings.
    """

    def __init__(
        self,
        config: Config,
        reader: MetadataReader,
        lister: Callable[[Path], DirectoryListing] = list_directory,
    ) -> None:
        self.config = config
        self.reader = reader
        self.lister = lister

    def scan(self) -> ScanResult:
        recursive = self.config.options.source_recursive
        roots = self._distinct_roots(recursive)
        result = ScanResult(source_roots=roots)

        logger.info(
            "Scanning %d source folder(s) with %d thread(s)",
            len(roots),
            self.config.advanced.max_threads,
        )

        with ThreadPoolExecutor(max_workers=self.config.advanced.max_threads) as executor:
            pending: dict[Future[DirectoryBatch], Path] = {
                executor.submit(self._scan_directory, root, root): root for root in roots
            }

            while pending:
                done, _ = wait(pending, return_when=FIRST_COMPLETED)
                for future in done:
                    directory = pending.pop(future)
                    try:
                        batch = future.result()
                    except Exception as e:
                        logger.warning("Could not read source folder %s: %s", directory, e)
                        result.issues.append(ScanIssue(path=directory, message=str(e)))
                        continue

                    result.files.extend(batch.files)
                    result.directories_scanned += 1

                    if recursive:
                        for subdir in batch.subdirs:
                            child = executor.submit(self._scan_directory, subdir, batch.source_root)
                            pending[child] = subdir
                    else:
                        result.directories_ignored += len(batch.subdirs)

        result.files.sort(key=lambda f: (str(f.directory), f.parsed_filename.full))

        logger.info(
            "Scanned %d file(s) in %d folder(s), %d unreadable",
            len(result.files),
            result.directories_scanned,
            len(result.issues),
        )
        return result

    def _distinct_roots(self, recursive: bool) -> list[Path]:
        """Drop repeated roots and, when recursing, roots inside another root."""
        by_real: dict[Path, Path] = {}
        for root in self.config.folders.source_dirs:
            by_real.setdefault(root.resolve(), root)

        roots = []
        for real, root in by_real.items():
            if recursive and any(o != real and real.is_relative_to(o) for o in by_real):
                logger.info("Source folder %s is inside another source folder, skipping", root)
                continue
            roots.append(root)
        return roots

    def _scan_directory(self, directory: Path, source_root: Path) -> DirectoryBatch:
        listing = self.lister(directory)

        to_read = [
            entry.path
            for entry in listing.files
            if entry.error is None and is_base_extension(entry.parsed_filename.extension)
        ]
        requested = set(to_read)
        try:
            metadata = self.reader.read_batch(to_read) if to_read else {}
        except Exception as e:
            logger.warning("Could not read metadata in %s: %s", directory, e)
            metadata = {path: MetadataResult(error=str(e)) for path in to_read}

        files = []
        for entry in listing.files:
            found = metadata.get(entry.path)
            metadata_error = None
            if entry.path in requested and found is None:
                metadata_error = "no metadata found"
            elif found is not None:
                metadata_error = found.error

            files.append(
                RawFile(
                    path=entry.path,
                    source_root=source_root,
                    directory=directory,
                    parsed_filename=entry.parsed_filename,
                    size=entry.size,
                    modified=entry.modified,
                    metadata=found.metadata if found else None,
                    metadata_error=metadata_error,
                    read_error=entry.error,
                )
            )

        return DirectoryBatch(
            directory=directory,
            source_root=source_root,
            files=files,
            subdirs=listing.subdirs,
        )
