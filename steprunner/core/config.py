"""Runner configuration.

Settings come from, in increasing priority: built-in defaults, the JSON config
file, environment variables, and explicit overrides (the CLI flags).

Paths:
- STEPRUNNER_CONFIG_DIR, else XDG_CONFIG_HOME/steprunner, else ~/.config/steprunner
- STEPRUNNER_CONFIG_PATH overrides the config.json location entirely
"""

from __future__ import annotations

import json
import logging
import os
import shlex
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any


logger = logging.getLogger(__name__)


DEFAULT_SHELL: tuple[str, ...] = ("pwsh", "-NoProfile", "-Command")

DEFAULTS: dict[str, Any] = {
    "shell": list(DEFAULT_SHELL),
    "log_dir": None,
    "debug": False,
    "show_prerequisites": True,
    "profile": "full",
}


@dataclass(frozen=True)
class RunnerSettings:
    shell: tuple[str, ...] = field(default=DEFAULT_SHELL)
    log_dir: Path | None = None
    debug: bool = False
    show_prerequisites: bool = True
    profile: str = "full"


def config_dir() -> Path:
    p = os.environ.get("STEPRUNNER_CONFIG_DIR")
    if p:
        return Path(p)

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "steprunner"

    return Path.home() / ".config" / "steprunner"


def config_file_path() -> Path:
    p = os.environ.get("STEPRUNNER_CONFIG_PATH")
    if p:
        return Path(p)
    return config_dir() / "config.json"


def load_config_settings(*, config_file: Path, defaults: dict[str, Any], logger) -> dict[str, Any]:
    """Load config JSON merged over *defaults*.

    Unknown keys are dropped. A missing file yields a copy of the defaults; an
    unreadable or malformed one is logged and also yields the defaults.
    """

    if not config_file.exists():
        return dict(defaults)

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            loaded = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Failed to load config %s: %s", config_file, e)
        return dict(defaults)

    if not isinstance(loaded, dict):
        logger.warning("Ignoring config %s: expected a JSON object", config_file)
        return dict(defaults)

    known = {k: v for k, v in loaded.items() if k in defaults}
    return {**defaults, **known}


def _parse_shell(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        parts = shlex.split(value)
    elif isinstance(value, (list, tuple)):
        parts = [str(p) for p in value]
    else:
        parts = []
    return tuple(parts) if parts else DEFAULT_SHELL


def _truthy(value: str | None) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "on"}


def _from_mapping(raw: dict[str, Any]) -> RunnerSettings:
    log_dir = raw.get("log_dir")
    return RunnerSettings(
        shell=_parse_shell(raw.get("shell")),
        log_dir=Path(log_dir).expanduser() if log_dir else None,
        debug=bool(raw.get("debug")),
        show_prerequisites=bool(raw.get("show_prerequisites", True)),
        profile=str(raw.get("profile") or "full"),
    )


def load_settings(**overrides: Any) -> RunnerSettings:
    """Resolve the effective settings.

    Keyword overrides with a value of None are ignored, so CLI flags that were
    not given do not mask the file or environment.
    """

    raw = load_config_settings(config_file=config_file_path(), defaults=DEFAULTS, logger=logger)

    env_shell = os.environ.get("STEPRUNNER_SHELL")
    if env_shell:
        raw["shell"] = env_shell
    env_log_dir = os.environ.get("STEPRUNNER_LOG_DIR")
    if env_log_dir:
        raw["log_dir"] = env_log_dir
    if _truthy(os.environ.get("STEPRUNNER_DEBUG")):
        raw["debug"] = True

    settings = _from_mapping(raw)

    given = {k: v for k, v in overrides.items() if v is not None}
    if "shell" in given:
        given["shell"] = _parse_shell(given["shell"])
    if "log_dir" in given:
        given["log_dir"] = Path(given["log_dir"]).expanduser()
    return replace(settings, **given)
