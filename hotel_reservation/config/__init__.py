"""
Configuration package for the hotel reservation system.

Settings are read from the environment (and an optional .env file) and
handed explicitly to the store, services and admin server.
"""

from hotel_reservation.config.settings import Settings, get_settings

__all__ = ['Settings', 'get_settings']
