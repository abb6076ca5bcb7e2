"""Scanner module for filesystem traversal."""

from .filesystem import DirectoryListing, FileEntry, list_directory, parse_filename
from .scanner import DirectoryBatch, Scanner, ScanIssue, ScanResult

__all__ = [
    "Scanner",
    "ScanIssue",
    "ScanResult",
    "DirectoryBatch",
    "DirectoryListing",
    "FileEntry",
    "list_directory",
    "parse_filename",
]
