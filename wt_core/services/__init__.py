"""Services for wt-core."""
