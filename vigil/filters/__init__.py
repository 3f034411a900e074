"""Pre-evaluation gating of alerts."""

from .base import BaseGate, GateContext, GatePipeline
from .gates import (
    StatusGate,
    ExpiryGate,
    QuietHoursGate,
    CooldownGate,
    DailyCapGate,
    DEFAULT_GATES,
    check_gates,
    is_in_quiet_hours,
)

__all__ = [
    "BaseGate",
    "GateContext",
    "GatePipeline",
    "StatusGate",
    "ExpiryGate",
    "QuietHoursGate",
    "CooldownGate",
    "DailyCapGate",
    "DEFAULT_GATES",
    "check_gates",
    "is_in_quiet_hours",
]
