from __future__ import annotations

import logging
import os

import coloredlogs  # type: ignore[import]

LOG_LEVEL_ENV_VAR = "ALAMIRA_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"

# aiohttp logs every simulator request and client connection on its own
NOISY_LOGGERS = ("aiohttp.access", "aiohttp.server", "aiohttp.client")


def setup_logging(level: str | None = None) -> None:
    """Install coloured console logging for the CLI and simulator.

    The level comes from ``level``, else ``ALAMIRA_LOG_LEVEL``, else INFO.
    aiohttp's own loggers stay at WARNING unless DEBUG is requested.
    """
    resolved = (level or os.environ.get(LOG_LEVEL_ENV_VAR, "INFO")).upper()

    coloredlogs.install(
        level=resolved,
        fmt=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        field_styles={**coloredlogs.DEFAULT_FIELD_STYLES, "name": {"color": "cyan"}},
    )

    noisy_level = logging.DEBUG if resolved == "DEBUG" else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)
