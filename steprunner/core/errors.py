from __future__ import annotations


class StepError(Exception):
    """Base class for failures raised by step actions.

    The engine catches every exception at the step boundary; this base exists so
    callers can tell an expected step failure apart from a bug in a step.
    """


class PreconditionFailed(StepError):
    """A step needs session state (the working directory) that is not set yet."""


class CommandFailed(StepError):
    def __init__(self, command: str, exit_code: int, output: str | None = None) -> None:
        super().__init__(f"Command '{command}' failed with exit code {exit_code}.")
        self.command = command
        self.exit_code = exit_code
        self.output = output


class ProcessLaunchFailed(StepError):
    def __init__(self, command: str, reason: str) -> None:
        super().__init__(f"Failed to start '{command}': {reason}")
        self.command = command
        self.reason = reason


def captured_output(exc: BaseException) -> str | None:
    """Return the command output carried by *exc*, if any."""

    if isinstance(exc, CommandFailed):
        return exc.output
    return None
