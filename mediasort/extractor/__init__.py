"""Embedded metadata extraction from image, video and audio files."""

from mediasort.extractor.exiftool import ExiftoolNotFoundError, ExiftoolRunner
from mediasort.extractor.reader import (
    ExiftoolMetadataReader,
    MetadataReader,
    MetadataResult,
    NullMetadataReader,
)

__all__ = [
    "ExiftoolRunner",
    "ExiftoolNotFoundError",
    "ExiftoolMetadataReader",
    "MetadataReader",
    "MetadataResult",
    "NullMetadataReader",
]
