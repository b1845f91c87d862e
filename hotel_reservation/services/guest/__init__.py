"""Guest registry services."""
