"""Admin account services."""
