from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..ui.console import Operator
    from .context import RunContext


class StepStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"  # rendered, never entered by the engine


class StepAction(Protocol):
    def execute(self, context: RunContext, operator: Operator) -> str | None:
        """Do the step's work; return an optional summary or raise on failure."""


@dataclass(eq=False)
class Step:
    number: int
    title: str
    action: StepAction
    description: str = ""
    status: StepStatus = field(default=StepStatus.PENDING)

    def render_details(self) -> str:
        return (self.description or "").strip()


@dataclass(frozen=True)
class StepOutcome:
    status: StepStatus
    duration_s: float
    message: str = ""


def validate_steps(steps: list[Step]) -> None:
    """Reject step lists whose numbers are not positive and strictly increasing."""

    previous = 0
    for s in steps:
        if s.number <= 0:
            raise ValueError(f"Step numbers must be positive: {s.number} ({s.title!r})")
        if s.number <= previous:
            raise ValueError(f"Step numbers must be unique and increasing: {s.number} after {previous}")
        previous = s.number
