"""Domain models for wt-core."""
