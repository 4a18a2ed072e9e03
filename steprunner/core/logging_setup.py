from __future__ import annotations

import logging
import os


def configure_logging(*, verbose: bool = False) -> None:
    """Configure root logging for the runner.

    Does nothing if handlers are already installed. Defaults to WARNING so log
    lines do not interleave with the operator prompts; --verbose or
    STEPRUNNER_DEBUG switch to DEBUG.
    """

    if logging.getLogger().handlers:
        return

    level = logging.DEBUG if (verbose or os.environ.get("STEPRUNNER_DEBUG")) else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
