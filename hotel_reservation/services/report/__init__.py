"""Console report services."""
