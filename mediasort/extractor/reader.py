"""Embedded metadata readers used by the scanner."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from mediasort.extractor.exiftool import ExiftoolRunner
from mediasort.extractor.parser import parse_embedded_metadata
from mediasort.models import EmbeddedMetadata

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MetadataResult:
    metadata: EmbeddedMetadata | None = None
    error: str | None = None


class MetadataReader(Protocol):
    """Reads embedded metadata for a batch of files from one directory."""

    def read_batch(self, paths: list[Path]) -> dict[Path, MetadataResult]:
        """Return a result per path. Paths missing from the result had no metadata."""


class ExiftoolMetadataReader:
    """Reads capture dates and device fields with one exiftool call per batch."""

    def __init__(self, runner: ExiftoolRunner | None = None) -> None:
        self.runner = runner or ExiftoolRunner()

    def read_batch(self, paths: list[Path]) -> dict[Path, MetadataResult]:
        if not paths:
            return {}

        by_name = {str(p): p for p in paths}
        results: dict[Path, MetadataResult] = {}

        for result in self.runner.extract_batch(list(by_name)):
            path = by_name[result.source_file]
            if result.error:
                logger.debug("Metadata unreadable for %s: %s", path, result.error)
                results[path] = MetadataResult(error=result.error)
            else:
                results[path] = MetadataResult(metadata=parse_embedded_metadata(result.metadata))

        return results


class NullMetadataReader:
    """Reader used when exiftool is unavailable; every file falls back to mtime."""

    def read_batch(self, paths: list[Path]) -> dict[Path, MetadataResult]:
        return {}
