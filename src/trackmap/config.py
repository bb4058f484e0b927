"""Environment-driven settings.

Reads ``TRACKMAP_*`` variables from the environment (a ``.env`` file is loaded
by the web app and the scripts via python-dotenv before this is consulted).
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TextIO

from trackmap.track.projection import WindowConfig

_handler: logging.Handler | None = None


@dataclass(frozen=True)
class Settings:
    min_window: int = 10
    window_fraction: float = 0.15
    max_backward: float = 0.04
    log_level: str = "INFO"

    def window_config(self) -> WindowConfig:
        return WindowConfig(min_window=self.min_window, window_fraction=self.window_fraction)


def _read(environ: Mapping[str, str], name: str, cast, default):
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw.strip())
    except ValueError as exc:
        raise ValueError(f"Invalid value for {name}: {raw!r}") from exc


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build :class:`Settings` from *environ* (defaults to ``os.environ``).

    Raises:
        ValueError: If a variable cannot be parsed or is out of range.
    """
    env = os.environ if environ is None else environ
    settings = Settings(
        min_window=_read(env, "TRACKMAP_MIN_WINDOW", int, Settings.min_window),
        window_fraction=_read(env, "TRACKMAP_WINDOW_FRACTION", float, Settings.window_fraction),
        max_backward=_read(env, "TRACKMAP_MAX_BACKWARD", float, Settings.max_backward),
        log_level=_read(env, "TRACKMAP_LOG_LEVEL", str.upper, Settings.log_level),
    )
    if settings.max_backward < 0:
        raise ValueError("TRACKMAP_MAX_BACKWARD must be >= 0")
    if not isinstance(logging.getLevelName(settings.log_level), int):
        raise ValueError(f"Unknown TRACKMAP_LOG_LEVEL: {settings.log_level!r}")
    # Surface window errors here rather than on the first request.
    settings.window_config()
    return settings


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(settings: Settings, stream: TextIO | None = None) -> logging.Handler:
    """Send ``trackmap`` log records at the configured level to *stream*.

    *stream* defaults to ``sys.stderr``.  Calling this again replaces the
    handler installed by the previous call instead of adding a second one.

    Returns:
        The installed handler.
    """
    global _handler
    logger = logging.getLogger("trackmap")
    logger.setLevel(settings.log_level)
    if _handler is not None:
        logger.removeHandler(_handler)
    _handler = logging.StreamHandler(sys.stderr if stream is None else stream)
    _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(_handler)
    return _handler
