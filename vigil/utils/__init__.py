"""Utilities for Vigil."""

from .clock import utc_now, ensure_aware, to_zone, sunday_weekday, parse_hhmm, minute_of_day

__all__ = ["utc_now", "ensure_aware", "to_zone", "sunday_weekday", "parse_hhmm", "minute_of_day"]
