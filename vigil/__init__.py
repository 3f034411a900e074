"""Vigil - alert evaluation and debouncing engine."""

__version__ = "0.1.0"
