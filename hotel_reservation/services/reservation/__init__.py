"""Reservation lifecycle and booking services."""
