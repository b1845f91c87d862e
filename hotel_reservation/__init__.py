"""
Hotel reservation engine.

Room allocation, the reservation lifecycle and billing over a
SQLAlchemy inventory store, plus a line-based admin console server.
"""

__version__ = "1.0.0"
