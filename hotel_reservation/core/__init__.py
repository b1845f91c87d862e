# hotel_reservation/core/__init__.py
"""Cross-cutting pieces: exceptions and logging."""
