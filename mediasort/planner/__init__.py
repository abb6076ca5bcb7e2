"""Target layout resolution and execution planning."""

from mediasort.planner.path_builder import DuplicateIndex
from mediasort.planner.planner import Planner
from mediasort.planner.resolver import GroupLayout, GroupStrategy, Placement, resolve_group_layout

__all__ = [
    "DuplicateIndex",
    "GroupLayout",
    "GroupStrategy",
    "Placement",
    "Planner",
    "resolve_group_layout",
]
