"""Delivery interface for batched trigger events."""

from .base import BaseNotifier
from .log import LogNotifier

__all__ = ["BaseNotifier", "LogNotifier"]
