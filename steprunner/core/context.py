from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from .config import RunnerSettings
from .errors import PreconditionFailed


def resolve_directory(path: str | Path) -> Path:
    """Expand $VARS and ~ in *path*; raise ValueError unless the result is absolute."""

    resolved = Path(os.path.expandvars(str(path))).expanduser()
    if not resolved.is_absolute():
        raise ValueError(f"Working directory must be absolute: {path}")
    return resolved


@dataclass
class RunContext:
    """Session state shared by every step action of one run.

    The working directory is chosen by the first step and read by all later
    ones. Nothing here outlives the process.
    """

    settings: RunnerSettings = field(default_factory=RunnerSettings)
    working_directory: Path | None = None

    def set_working_directory(self, path: str | Path) -> Path:
        if self.working_directory is not None:
            raise RuntimeError(f"Working directory already set to {self.working_directory}")

        resolved = resolve_directory(path)
        self.working_directory = resolved
        return resolved

    def require_working_directory(self) -> Path:
        if self.working_directory is None:
            raise PreconditionFailed("Working directory not set. Execute step 1 first.")
        return self.working_directory
