from __future__ import annotations

import os
import tempfile
from collections import deque
from pathlib import Path

import pytest


# Safety default: during pytest, never read the operator's real config.
os.environ["STEPRUNNER_CONFIG_DIR"] = tempfile.mkdtemp(prefix="steprunner-test-config-")
for _var in ("STEPRUNNER_CONFIG_PATH", "STEPRUNNER_SHELL", "STEPRUNNER_LOG_DIR", "STEPRUNNER_DEBUG"):
    os.environ.pop(_var, None)


class ScriptedOperator:
    """Operator double that answers from queues and records what it was shown.

    Running out of scripted answers raises AssertionError so a test cannot
    hang waiting on input.
    """

    def __init__(self, *, choices=(), confirms=(), answers=()):
        self.choices = deque(choices)
        self.confirms = deque(confirms)
        self.answers = deque(answers)
        self.events: list[tuple[str, str]] = []
        self.pauses = 0
        self.shown_steps: list[int] = []

    def _pop(self, queue: deque, what: str):
        if not queue:
            raise AssertionError(f"Unexpected {what} request; script exhausted")
        return queue.popleft()

    def show_header(self, title, subtitle=""):
        self.events.append(("header", title))

    def show_prerequisites(self, items):
        self.events.append(("prerequisites", str(len(items))))

    def show_steps_table(self, steps):
        self.events.append(("table", str(len(steps))))

    def show_step(self, step, index, total):
        self.shown_steps.append(step.number)

    def choose(self, title, choices):
        picked = self._pop(self.choices, "choice")
        assert picked in choices, f"{picked!r} not offered in {choices!r}"
        return picked

    def confirm(self, question, default=False):
        self.events.append(("confirm", question))
        return self._pop(self.confirms, "confirm")

    def ask(self, prompt):
        return self._pop(self.answers, "ask")

    def pause(self, message=None):
        self.pauses += 1

    def info(self, message):
        self.events.append(("info", message))

    def success(self, message):
        self.events.append(("success", message))

    def warning(self, message):
        self.events.append(("warning", message))

    def error(self, message):
        self.events.append(("error", message))

    def show_output(self, text, title="output"):
        self.events.append(("output", text))

    def messages(self, kind: str) -> list[str]:
        return [m for k, m in self.events if k == kind]


@pytest.fixture
def scripted_operator():
    def _make(**kwargs) -> ScriptedOperator:
        return ScriptedOperator(**kwargs)

    return _make


@pytest.fixture
def run_context(tmp_path: Path):
    """A RunContext whose working directory is already chosen."""

    from steprunner.core.context import RunContext

    ctx = RunContext()
    ctx.set_working_directory(tmp_path / "work")
    (tmp_path / "work").mkdir()
    return ctx
