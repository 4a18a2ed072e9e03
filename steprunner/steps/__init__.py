"""Step kinds and the demonstration step table."""

from .kinds import (
    ChooseWorkingDirectory,
    CreateDirectory,
    CreateFile,
    ManualPause,
    PatchFile,
    RunCommand,
    RunInteractive,
    relative,
)

__all__ = [
    "ChooseWorkingDirectory",
    "CreateDirectory",
    "CreateFile",
    "ManualPause",
    "PatchFile",
    "RunCommand",
    "RunInteractive",
    "relative",
]
