"""Domain dependency graph."""
