from __future__ import annotations

import argparse
import logging
from typing import Iterable

from ..steps.step_defs import PREREQUISITES
from ..steps.step_defs import steps as all_steps
from ..ui.console import Operator, RichOperator
from .config import load_settings
from .context import RunContext
from .engine import StepEngine
from .logging_setup import configure_logging
from .model import Step
from .profiles import PROFILES


logger = logging.getLogger(__name__)


def _list_profiles() -> None:
    print("Available profiles:")
    for name, profile in sorted(PROFILES.items()):
        print(f"  {name:<8} - {profile.description}")


def _list_steps(steps: list[Step]) -> None:
    for s in steps:
        print(f"  {s.number:>2}  {s.title}")


def _select_steps(profile: str) -> list[Step]:
    steps = all_steps()
    prof = PROFILES[profile]
    if prof.include_steps is None:
        return steps

    include = {n.lower() for n in prof.include_steps}
    return [s for s in steps if s.title.lower() in include]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="steprunner",
        description="Walk through a scripted setup one step at a time.",
    )
    parser.add_argument("--profile", choices=sorted(PROFILES.keys()), help="Run a predefined subset of steps")
    parser.add_argument("--list-profiles", action="store_true", help="List profiles and exit")
    parser.add_argument("--list-steps", action="store_true", help="List the selected steps and exit")
    parser.add_argument("--log-dir", help="Write command logs and a run summary to this directory")
    parser.add_argument("--shell", help="Shell used for string commands, e.g. 'bash -c'")
    parser.add_argument("--no-prerequisites", action="store_true", help="Skip the prerequisites screen")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Iterable[str] | None = None, *, operator: Operator | None = None) -> int:
    args = build_parser().parse_args(list(argv) if argv is not None else None)

    settings = load_settings(
        profile=args.profile,
        log_dir=args.log_dir,
        shell=args.shell,
        debug=True if args.verbose else None,
        show_prerequisites=False if args.no_prerequisites else None,
    )
    configure_logging(verbose=settings.debug)

    if args.list_profiles:
        _list_profiles()
        return 0

    if settings.profile not in PROFILES:
        print(f"Unknown profile: {settings.profile!r}")
        return 2

    selected = _select_steps(settings.profile)

    if args.list_steps:
        _list_steps(selected)
        return 0

    if not selected:
        print("No steps selected.")
        return 2

    logger.debug("Profile %s: %d steps, shell=%s", settings.profile, len(selected), settings.shell)

    operator = operator or RichOperator()
    operator.show_header("PhotoGallery script runner", "Interactive runner: execute, go back, or quit at each step.")

    if settings.show_prerequisites:
        operator.show_prerequisites(PREREQUISITES)
        try:
            operator.pause("Complete the prerequisites above, then continue.")
        except (KeyboardInterrupt, EOFError):
            return 130

    engine = StepEngine(selected, operator, RunContext(settings=settings))
    return engine.run()
