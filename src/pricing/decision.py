"""Go/no-go decision recorded at the end of an experiment review."""

from dataclasses import dataclass
from enum import Enum


class DecisionStatus(str, Enum):
    SHIP = "SHIP"
    ITERATE = "ITERATE"
    KILL = "KILL"


@dataclass(frozen=True)
class Decision:
    status: DecisionStatus
    rationale: str = ""


def record_decision(status: DecisionStatus | str, rationale: str = "") -> Decision:
    """Build a Decision, accepting the status enum or its name in any case."""
    if not isinstance(status, DecisionStatus):
        try:
            status = DecisionStatus(str(status).strip().upper())
        except ValueError:
            valid = ", ".join(s.value for s in DecisionStatus)
            raise ValueError(f"Unknown decision status {status!r}, expected one of: {valid}")
    return Decision(status=status, rationale=rationale.strip())
