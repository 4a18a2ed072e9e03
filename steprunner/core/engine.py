from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Sequence

from ..ui.console import Operator
from .context import RunContext
from .errors import captured_output
from .model import Step, StepOutcome, StepStatus, validate_steps
from .summary import RunSummary, StepSummary, write_summary


logger = logging.getLogger(__name__)


CHOICE_EXECUTE = "Execute step"
CHOICE_BACK = "Go back"
CHOICE_QUIT = "Quit"
MENU_CHOICES = (CHOICE_EXECUTE, CHOICE_BACK, CHOICE_QUIT)


class RunOutcome(str, Enum):
    COMPLETED = "completed"
    QUIT = "quit"
    ABORTED = "aborted"
    INTERRUPTED = "interrupted"


EXIT_CODES = {
    RunOutcome.COMPLETED: 0,
    RunOutcome.QUIT: 0,
    RunOutcome.ABORTED: 1,
    RunOutcome.INTERRUPTED: 130,
}


class StepEngine:
    """Operator-driven, strictly sequential walk over an ordered step list.

    ``cursor`` indexes the step the operator is looking at. Only that step can
    be executed; going back is a pure cursor move and never undoes anything.
    The run ends when the cursor moves past the last step, the operator
    confirms quit, or declines to continue after a failure.
    """

    def __init__(self, steps: Sequence[Step], operator: Operator, context: RunContext | None = None) -> None:
        self.steps = list(steps)
        validate_steps(self.steps)

        self.operator = operator
        self.context = context if context is not None else RunContext()
        self.cursor = 0
        self.outcome: RunOutcome | None = None

        self._durations: dict[int, float] = {}
        self._started = time.monotonic()

        if not self.steps:
            self.outcome = RunOutcome.COMPLETED

    @property
    def finished(self) -> bool:
        return self.outcome is not None

    @property
    def exit_code(self) -> int | None:
        return None if self.outcome is None else EXIT_CODES[self.outcome]

    @property
    def current_step(self) -> Step | None:
        if self.finished or self.cursor >= len(self.steps):
            return None
        return self.steps[self.cursor]

    def _finish(self, outcome: RunOutcome) -> None:
        self.outcome = outcome
        logger.info("Run finished: %s (cursor=%d/%d)", outcome.value, self.cursor, len(self.steps))

    def _advance(self) -> None:
        self.cursor += 1
        if self.cursor >= len(self.steps):
            self._finish(RunOutcome.COMPLETED)

    def execute_current(self) -> StepOutcome:
        """Run the action of the step under the cursor and apply the result."""

        step = self.current_step
        if step is None:
            raise RuntimeError("Run already finished; no step to execute")

        logger.info("Executing step %d: %s", step.number, step.title)
        start = time.monotonic()
        try:
            message = step.action.execute(self.context, self.operator)
        except Exception as exc:
            duration = time.monotonic() - start
            self._durations[step.number] = duration
            step.status = StepStatus.FAILED
            self._handle_failure(step, exc)
            return StepOutcome(status=step.status, duration_s=duration, message=str(exc))

        duration = time.monotonic() - start
        self._durations[step.number] = duration
        step.status = StepStatus.COMPLETED
        message = message or f"Step {step.number} completed."
        self.operator.success(message)
        self._advance()
        return StepOutcome(status=step.status, duration_s=duration, message=message)

    def _handle_failure(self, step: Step, exc: Exception) -> None:
        logger.info("Step %d failed: %s", step.number, exc)
        logger.debug("Step %d failure detail", step.number, exc_info=exc)

        self.operator.error(f"Error executing step {step.number}: {exc}")
        output = captured_output(exc)
        if output is not None:
            self.operator.show_output(output or "<no output>", title="Command output")

        if self.operator.confirm("Continue to next step anyway?", default=False):
            logger.info("Continuing past failed step %d", step.number)
            self._advance()
            return

        self._finish(RunOutcome.ABORTED)

    def go_back(self) -> int:
        if self.finished:
            raise RuntimeError("Run already finished")
        self.cursor = max(self.cursor - 1, 0)
        return self.cursor

    def quit(self) -> bool:
        if self.finished:
            raise RuntimeError("Run already finished")
        if self.operator.confirm(
            "Are you sure you want to quit? Progress is not saved; a new run starts at step 1.",
            default=False,
        ):
            self._finish(RunOutcome.QUIT)
            return True
        return False

    def run(self) -> int:
        """Drive the menu loop until the run ends and return the exit code."""

        try:
            while not self.finished:
                step = self.steps[self.cursor]
                self.operator.show_step(step, self.cursor, len(self.steps))
                choice = self.operator.choose(f"Step {step.number}: {step.title}", MENU_CHOICES)

                if choice == CHOICE_QUIT:
                    self.quit()
                elif choice == CHOICE_BACK:
                    self.go_back()
                elif choice == CHOICE_EXECUTE:
                    self.execute_current()
                else:
                    logger.warning("Ignoring unknown menu choice %r", choice)
        except (KeyboardInterrupt, EOFError):
            self._finish(RunOutcome.INTERRUPTED)

        self._report()
        return EXIT_CODES[self.outcome]

    def summary(self) -> RunSummary:
        outcome = self.outcome
        return RunSummary(
            outcome=outcome.value if outcome is not None else "running",
            exit_code=EXIT_CODES[outcome] if outcome is not None else -1,
            total_duration_s=time.monotonic() - self._started,
            profile=self.context.settings.profile,
            working_directory=str(self.context.working_directory) if self.context.working_directory else None,
            steps=[
                StepSummary(
                    number=s.number,
                    title=s.title,
                    status=s.status.value,
                    duration_s=self._durations.get(s.number, 0.0),
                )
                for s in self.steps
            ],
        )

    def _report(self) -> None:
        self.operator.show_steps_table(self.steps)
        if self.outcome == RunOutcome.COMPLETED:
            self.operator.success("All scripted steps completed (some may have required manual actions).")
        elif self.outcome == RunOutcome.ABORTED:
            self.operator.warning("Exiting.")
        elif self.outcome == RunOutcome.INTERRUPTED:
            self.operator.warning("Interrupted.")

        log_dir = self.context.settings.log_dir
        if log_dir is None:
            return
        try:
            write_summary(log_dir, self.summary())
        except OSError as exc:
            logger.warning("Failed to write run summary to %s: %s", log_dir, exc)
