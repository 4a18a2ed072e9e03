from __future__ import annotations

import contextlib
import logging
import os
import shlex
import signal
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping, Sequence

from ..core.errors import CommandFailed, ProcessLaunchFailed
from .log_format import StepLogRecord, format_standard_log


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessResult:
    command: str
    exit_code: int
    stdout: str = ""
    stderr: str = ""
    duration_s: float = 0.0

    @property
    def output(self) -> str:
        parts = [p.rstrip("\n") for p in (self.stdout, self.stderr) if p.strip()]
        return "\n".join(parts)


def format_command(args: Sequence[str]) -> str:
    return " ".join(shlex.quote(str(p)) for p in args)


def build_argv(command: str | Sequence[str], shell: Sequence[str] | None) -> list[str]:
    """Turn *command* into an argv list.

    A list is used as-is. A string is handed, as one argument, to the *shell*
    prefix (e.g. ``pwsh -NoProfile -Command``); without a shell it is split
    with shlex.
    """

    if not isinstance(command, str):
        return [str(p) for p in command]
    if shell:
        return [*shell, command]
    return shlex.split(command)


def _display(command: str | Sequence[str]) -> str:
    return command if isinstance(command, str) else format_command(command)


def _write_log(log_file: Path, title: str, step_number: int | None, cwd: str | Path, result: ProcessResult) -> None:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    record = StepLogRecord(
        step_title=title,
        step_number=step_number,
        working_directory=str(cwd),
        command=result.command,
        duration_s=result.duration_s,
        exit_code=result.exit_code,
        stdout=result.stdout,
        stderr=result.stderr,
    )
    log_file.write_text(format_standard_log(record), encoding="utf-8")


def run_captured(
    command: str | Sequence[str],
    *,
    cwd: str | Path,
    shell: Sequence[str] | None = None,
    env_overrides: Mapping[str, str] | None = None,
    echo: Callable[[ProcessResult], None] | None = None,
    log_file: Path | None = None,
    log_title: str = "",
    log_step: int | None = None,
) -> ProcessResult:
    """Run *command* with stdout/stderr captured and wait for it to exit.

    Output is decoded as UTF-8; undecodable bytes become U+FFFD rather than
    failing the step. Raises CommandFailed on a non-zero exit and
    ProcessLaunchFailed when the program cannot be started at all.
    """

    argv = build_argv(command, shell)
    command_str = _display(command)
    env = {**os.environ, **(env_overrides or {})}

    logger.debug("Running (captured) in %s: %s", cwd, format_command(argv))
    start = time.monotonic()
    try:
        proc = subprocess.run(
            argv,
            cwd=str(cwd),
            capture_output=True,
            encoding="utf-8",
            errors="replace",
            env=env,
        )
    except OSError as exc:
        raise ProcessLaunchFailed(command_str, str(exc)) from exc

    result = ProcessResult(
        command=command_str,
        exit_code=proc.returncode,
        stdout=proc.stdout or "",
        stderr=proc.stderr or "",
        duration_s=time.monotonic() - start,
    )

    if log_file is not None:
        try:
            _write_log(log_file, log_title or command_str, log_step, cwd, result)
        except OSError as exc:
            logger.warning("Failed to write command log %s: %s", log_file, exc)

    if echo is not None:
        echo(result)

    if result.exit_code != 0:
        logger.debug("Command exited with %d: %s", result.exit_code, command_str)
        raise CommandFailed(command_str, result.exit_code, result.output)

    return result


def _swallow_sigint(signum, frame) -> None:
    logger.debug("Ctrl+C left to the interactive child")


@contextlib.contextmanager
def _child_owns_sigint():
    """Swallow Ctrl+C in the runner while an interactive child is in charge.

    A no-op handler rather than SIG_IGN: caught signals reset to the default
    action across exec, ignored ones stay ignored in the child.
    """

    try:
        previous = signal.signal(signal.SIGINT, _swallow_sigint)
    except ValueError:
        # Not on the main thread; leave signal handling alone.
        yield
        return
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def run_interactive(program: str, args: str | Sequence[str] = (), *, cwd: str | Path) -> int:
    """Run *program* attached to the current terminal and return its exit code.

    The child owns stdin/stdout/stderr until it exits. A non-zero exit code is
    only logged: the operator, not the runner, decides whether it was a failure.
    """

    arg_list = shlex.split(args) if isinstance(args, str) else [str(a) for a in args]
    argv = [program, *arg_list]
    command_str = format_command(argv)

    logger.debug("Running (interactive) in %s: %s", cwd, command_str)
    with _child_owns_sigint():
        try:
            proc = subprocess.run(argv, cwd=str(cwd))
        except OSError as exc:
            raise ProcessLaunchFailed(command_str, str(exc)) from exc

    if proc.returncode != 0:
        logger.warning("Interactive command exited with code %d: %s", proc.returncode, command_str)
    return proc.returncode
