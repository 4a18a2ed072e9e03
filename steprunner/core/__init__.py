"""Engine, step model, session context and text patch primitives."""

from .context import RunContext
from .engine import RunOutcome, StepEngine
from .errors import CommandFailed, PreconditionFailed, ProcessLaunchFailed, StepError
from .model import Step, StepOutcome, StepStatus
from .patch import (
    PatchResult,
    PatchStatus,
    apply_patches,
    ensure_line_present,
    insert_after_marker,
    insert_before_marker,
    replace_block_starting_with,
)

__all__ = [
    "CommandFailed",
    "PatchResult",
    "PatchStatus",
    "PreconditionFailed",
    "ProcessLaunchFailed",
    "RunContext",
    "RunOutcome",
    "Step",
    "StepEngine",
    "StepError",
    "StepOutcome",
    "StepStatus",
    "apply_patches",
    "ensure_line_present",
    "insert_after_marker",
    "insert_before_marker",
    "replace_block_starting_with",
]
