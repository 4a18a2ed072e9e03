from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path


@dataclass(frozen=True)
class StepSummary:
    number: int
    title: str
    status: str  # pending|completed|failed|skipped
    duration_s: float


@dataclass(frozen=True)
class RunSummary:
    outcome: str  # completed|quit|aborted|interrupted
    exit_code: int
    total_duration_s: float
    steps: list[StepSummary]
    profile: str = "full"
    working_directory: str | None = None

    @property
    def completed(self) -> int:
        return sum(1 for s in self.steps if s.status == "completed")

    @property
    def failed(self) -> list[StepSummary]:
        return [s for s in self.steps if s.status == "failed"]


def _md_cell(text: str) -> str:
    return text.replace("|", "\\|")


def render_markdown(summary: RunSummary) -> str:
    """Operator-facing run report: header facts, failed steps, then every step."""

    lines = [
        "# Run summary",
        "",
        f"- Outcome: {summary.outcome} (exit code {summary.exit_code})",
        f"- Profile: {summary.profile}",
        f"- Working directory: {summary.working_directory or '(not chosen)'}",
        f"- Completed: {summary.completed}/{len(summary.steps)} in {summary.total_duration_s:.1f}s",
    ]

    if summary.failed:
        lines += ["", "## Failed steps", ""]
        lines += [f"- Step {s.number}: {s.title}" for s in summary.failed]

    lines += ["", "| Step | Title | Status | Duration |", "|---:|---|---|---:|"]
    for s in summary.steps:
        lines.append(f"| {s.number} | {_md_cell(s.title)} | {s.status} | {s.duration_s:.1f}s |")

    return "\n".join(lines) + "\n"


def write_summary(log_dir: Path, summary: RunSummary) -> None:
    log_dir.mkdir(parents=True, exist_ok=True)

    (log_dir / "run-summary.json").write_text(json.dumps(asdict(summary), indent=2) + "\n", encoding="utf-8")
    (log_dir / "run-summary.md").write_text(render_markdown(summary), encoding="utf-8")
