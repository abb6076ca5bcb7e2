"""Preview rendering and statistics for execution plans."""

from mediasort.report.formatter import LayoutFormatter, Widths
from mediasort.report.statistics import Statistics, aggregate, format_statistics

__all__ = [
    "LayoutFormatter",
    "Statistics",
    "Widths",
    "aggregate",
    "format_statistics",
]
