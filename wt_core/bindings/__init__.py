"""Shell bindings shipped with wt-core (read by ``wt-core init``)."""
