"""
Date helpers for stay ranges.

Stays are half-open ranges [check_in, check_out): the check-out day is
free for the next guest.
"""

from datetime import date, datetime


def ranges_overlap(start_a: date, end_a: date, start_b: date, end_b: date) -> bool:
    """[a, b) and [c, d) overlap iff a < d and c < b"""
    return start_a < end_b and start_b < end_a


def parse_date(value: str) -> date:
    """Parse an ISO (YYYY-MM-DD) date, raising ValueError otherwise"""
    return datetime.strptime(value.strip(), "%Y-%m-%d").date()
