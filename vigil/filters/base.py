"""Base gate interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from loguru import logger
from pydantic import BaseModel, Field

from vigil.schemas import Alert, GateDecision


class GateContext(BaseModel):
    """Inputs a gate may consult besides the alert itself."""
    now: datetime
    triggers_today: int = Field(0, ge=0)
    timezone: Optional[str] = Field(None, description="Fallback zone for quiet hours")


class BaseGate(ABC):
    """Interface for pre-evaluation checks on an alert."""

    name: str = "gate"

    @abstractmethod
    def check(self, alert: Alert, ctx: GateContext) -> Optional[str]:
        """
        Check an alert.
        Return None to let it through, or the reason it is blocked.
        """
        pass


class GatePipeline:
    """Chains gates together, stopping at the first that blocks."""

    def __init__(self, gates: List[BaseGate]):
        self.gates = gates

    def run(self, alert: Alert, ctx: GateContext) -> GateDecision:
        for gate in self.gates:
            reason = gate.check(alert, ctx)
            if reason is not None:
                logger.debug(f"Alert {alert.id} blocked by {gate.name}: {reason}")
                return GateDecision(passed=False, gate=gate.name, reason=reason)
        return GateDecision(passed=True)
