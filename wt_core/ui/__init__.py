"""Interactive UI components for wt-core."""

from .picker import WorktreePicker, pick, filter_candidates

__all__ = ["WorktreePicker", "pick", "filter_candidates"]
