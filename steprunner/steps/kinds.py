"""Step actions, one class per kind of step.

Each action is a small frozen dataclass with an ``execute(context, operator)``
method. The engine never looks inside; the step table builds them as data.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Sequence

from ..core.context import RunContext, resolve_directory
from ..core.errors import PreconditionFailed, StepError
from ..core.patch import Patch
from ..ui.console import Operator
from ..utils.files import ensure_dir, patch_file, write_if_absent
from ..utils.subproc import ProcessResult, run_captured, run_interactive


logger = logging.getLogger(__name__)


# Resolves a path under the working directory, or None when its anchor (e.g. a
# generated project folder) is not there yet.
PathResolver = Callable[[Path], "Path | None"]
CommandBuilder = Callable[[Path], "str | Sequence[str] | None"]


def relative(*parts: str) -> PathResolver:
    def _resolve(root: Path) -> Path:
        return root.joinpath(*parts)

    return _resolve


@dataclass(frozen=True)
class ChooseWorkingDirectory:
    """Ask for the folder to work in, create it, and record it in the context."""

    prompt: str = "Enter absolute path of an empty (or new) folder to use"

    def execute(self, context: RunContext, operator: Operator) -> str | None:
        if context.working_directory is not None:
            return f"Using working directory: {context.working_directory}"

        raw = operator.ask(self.prompt).strip()
        if not raw:
            raise StepError("Path cannot be empty")

        try:
            path = resolve_directory(raw)
        except ValueError as exc:
            raise StepError(str(exc)) from exc

        ensure_dir(path)
        context.set_working_directory(path)
        logger.info("Working directory set to %s", path)
        return f"Using working directory: {path}"


@dataclass(frozen=True)
class CreateDirectory:
    target: PathResolver

    def execute(self, context: RunContext, operator: Operator) -> str | None:
        root = context.require_working_directory()
        path = self.target(root)
        if path is None:
            operator.warning("Target folder's parent project was not found; skipping.")
            return "Nothing to create."
        created = ensure_dir(path)
        return f"Created {path}" if created else f"{path} already exists."


@dataclass(frozen=True)
class CreateFile:
    target: PathResolver
    content: str

    def execute(self, context: RunContext, operator: Operator) -> str | None:
        root = context.require_working_directory()
        path = self.target(root)
        if path is None:
            operator.warning("Target file's project was not found; skipping.")
            return "Nothing to create."
        if write_if_absent(path, self.content):
            return f"Created {path.name}"
        operator.warning(f"{path.name} already exists; skipping.")
        return f"{path.name} left unchanged."


@dataclass(frozen=True)
class PatchFile:
    """Apply idempotent text patches to an existing file."""

    target: PathResolver
    patches: tuple[Patch, ...]
    required: bool = False

    def execute(self, context: RunContext, operator: Operator) -> str | None:
        root = context.require_working_directory()
        path = self.target(root)
        if path is None or not path.is_file():
            shown = path if path is not None else "target file"
            if self.required:
                raise PreconditionFailed(f"{shown} not found. Complete the earlier steps first.")
            operator.warning(f"{shown} not found; skipping.")
            return "Nothing to patch."

        result = patch_file(path, *self.patches)
        if result.missed:
            operator.warning(
                f"Expected anchor not found in {path.name}; {result.missed} of {len(self.patches)} edit(s) not applied."
            )
        if result.changed:
            if result.missed:
                return f"Updated {path.name} ({result.missed} edit(s) skipped: anchor not found)."
            return f"Updated {path.name}"
        if result.missed:
            return f"{path.name} left unchanged (anchor not found)."
        return f"{path.name} already up to date."


def _echo(operator: Operator) -> Callable[[ProcessResult], None]:
    def _show(result: ProcessResult) -> None:
        if result.stdout.strip():
            operator.info(result.stdout.rstrip())
        if result.stderr.strip():
            operator.warning(result.stderr.rstrip())

    return _show


@dataclass(frozen=True)
class RunCommand:
    """Run a command with captured output; non-zero exit fails the step.

    ``command`` is either a fixed command or a builder receiving the working
    directory. A builder returning None means there is nothing to do (for
    example, a reference that is already present).
    """

    command: str | Sequence[str] | CommandBuilder
    log_name: str | None = None
    log_title: str = ""
    log_step: int | None = None
    skip_message: str = "Nothing to do; skipping."

    def _resolve(self, root: Path) -> str | Sequence[str] | None:
        if callable(self.command):
            return self.command(root)
        return self.command

    def execute(self, context: RunContext, operator: Operator) -> str | None:
        root = context.require_working_directory()
        command = self._resolve(root)
        if command is None:
            operator.info(self.skip_message)
            return self.skip_message

        log_dir = context.settings.log_dir
        log_file = log_dir / self.log_name if (log_dir is not None and self.log_name) else None

        shown = command if isinstance(command, str) else " ".join(command)
        operator.info(f"Running: {shown}")
        result = run_captured(
            command,
            cwd=root,
            shell=context.settings.shell,
            echo=_echo(operator),
            log_file=log_file,
            log_title=self.log_title or self.log_name or "",
            log_step=self.log_step,
        )
        return f"Command finished in {result.duration_s:.1f}s"


@dataclass(frozen=True)
class RunInteractive:
    """Hand the terminal to a command; its exit code is advisory only."""

    program: str
    args: str | Sequence[str] = ()
    intro: str = ""
    outro: str = ""

    def execute(self, context: RunContext, operator: Operator) -> str | None:
        root = context.require_working_directory()
        if self.intro:
            operator.info(self.intro)

        code = run_interactive(self.program, self.args, cwd=root)
        if code != 0:
            operator.warning(f"Process exited with code {code}. Continue if acceptable.")
        if self.outro:
            operator.info(self.outro)
        return f"Interactive command exited with code {code}"


@dataclass(frozen=True)
class ManualPause:
    """A step the operator performs outside the runner."""

    instructions: str = ""
    requires_working_directory: bool = False
    checklist: tuple[str, ...] = field(default_factory=tuple)

    def execute(self, context: RunContext, operator: Operator) -> str | None:
        if self.requires_working_directory:
            context.require_working_directory()

        operator.warning("Manual action required. Perform the step externally, then continue.")
        if self.instructions:
            operator.info(self.instructions)
        for item in self.checklist:
            operator.info(f" - {item}")
        operator.pause()
        return "Manual step acknowledged."
