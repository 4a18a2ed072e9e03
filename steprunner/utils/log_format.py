from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone


def iso_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class StepLogRecord:
    step_title: str
    command: str
    working_directory: str
    duration_s: float
    exit_code: int
    stdout: str
    stderr: str
    step_number: int | None = None


def _heading(record: StepLogRecord) -> str:
    if record.step_number is None:
        return record.step_title
    return f"Step {record.step_number:02d}: {record.step_title}"


def format_standard_log(record: StepLogRecord) -> str:
    duration_text = f"({record.duration_s:.1f}s)"
    stdout = record.stdout if record.stdout.strip() else "(no stdout)"
    stderr = record.stderr if record.stderr.strip() else "(no stderr)"

    return (
        f"=== {_heading(record)} - {iso_now()} ===\n"
        f"Working Directory: {record.working_directory}\n"
        f"Command: {record.command}\n"
        f"Duration: {duration_text}\n"
        f"Exit Code: {record.exit_code}\n\n"
        f"=== STDOUT ===\n{stdout}\n\n"
        f"=== STDERR ===\n{stderr}\n\n"
        f"=== END ===\n"
    )


_SLUG_RE = re.compile(r"[^a-z0-9]+")


def step_log_name(number: int, title: str) -> str:
    """File name for a step's command log, e.g. ``step-03-enable-default-watch.log``."""

    slug = _SLUG_RE.sub("-", title.lower()).strip("-")[:48].rstrip("-") or "step"
    return f"step-{number:02d}-{slug}.log"
