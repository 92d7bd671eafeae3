from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from slideship.core.layout import LayoutConfig

logger = logging.getLogger(__name__)


def get_redis_url() -> str:
    return os.environ.get("REDIS_URL", "redis://localhost:6379/0")


def get_source() -> str:
    return os.environ.get("SLIDESHIP_SOURCE", "slides.md")


def get_log_level() -> str:
    level = os.environ.get("SLIDESHIP_LOG_LEVEL", "INFO").upper()
    if level not in logging.getLevelNamesMapping():
        logger.warning("ignoring unknown SLIDESHIP_LOG_LEVEL=%r, using INFO", level)
        return "INFO"
    return level


def _env_number(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("ignoring malformed %s=%r, using %s", name, raw, default)
        return default
    if value < 0:
        logger.warning("ignoring negative %s=%r, using %s", name, raw, default)
        return default
    return value


@dataclass(frozen=True, slots=True)
class AppConfig:
    source: str = "slides.md"
    poll_interval_s: float = 2.0
    canvas: LayoutConfig = LayoutConfig()
    redis_url: str = "redis://localhost:6379/0"
    log_level: str = "INFO"

    @property
    def polling_enabled(self) -> bool:
        return self.poll_interval_s > 0


def load_config() -> AppConfig:
    """Read the app configuration from the environment."""

    defaults = LayoutConfig()
    canvas = LayoutConfig(
        width=int(_env_number("SLIDESHIP_CANVAS_WIDTH", defaults.width)),
        height=int(_env_number("SLIDESHIP_CANVAS_HEIGHT", defaults.height)),
        padding=int(_env_number("SLIDESHIP_CANVAS_PADDING", defaults.padding)),
    )
    return AppConfig(
        source=get_source(),
        poll_interval_s=_env_number("SLIDESHIP_POLL_INTERVAL_S", 2.0),
        canvas=canvas,
        redis_url=get_redis_url(),
        log_level=get_log_level(),
    )
