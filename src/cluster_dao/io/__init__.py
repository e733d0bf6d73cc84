"""I/O layer: cluster connections and role-based routing."""
