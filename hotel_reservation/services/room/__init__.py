"""Room inventory services."""
