"""Interactive, linear script runner.

Walks an operator through an ordered list of setup steps: execute the current
step, go back one, or quit. State lives in memory for a single run.
"""

from __future__ import annotations

from .core.context import RunContext
from .core.engine import RunOutcome, StepEngine
from .core.errors import CommandFailed, PreconditionFailed, ProcessLaunchFailed, StepError
from .core.model import Step, StepStatus

__version__ = "0.1.0"

__all__ = [
    "CommandFailed",
    "PreconditionFailed",
    "ProcessLaunchFailed",
    "RunContext",
    "RunOutcome",
    "Step",
    "StepEngine",
    "StepError",
    "StepStatus",
    "__version__",
]
