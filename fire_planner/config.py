"""Runtime settings read from the environment.

Env vars:
  FIRE_PLANNER_STATE_PATH=<path.json>  -> where the session snapshot is kept
                                          (default user_data/fire_state.json,
                                          empty string keeps state in memory only)
  FIRE_PLANNER_CURRENCY=INR            -> currency shown in new plans
  FIRE_PLANNER_LOG_LEVEL=INFO          -> root log level
  FIRE_PLANNER_HOST=127.0.0.1          -> backend bind address
  FIRE_PLANNER_PORT=8000               -> backend port
  FIRE_PLANNER_DEBUG=1                 -> Flask debug mode
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from .data_model.plan import DEFAULT_CURRENCY

DEFAULT_STATE_PATH = os.path.join("user_data", "fire_state.json")
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class Settings:
    state_path: str | None = DEFAULT_STATE_PATH
    currency: str = DEFAULT_CURRENCY
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False


def _env_flag(name: str) -> bool:
    return str(os.getenv(name, "")).lower() in _TRUTHY


def load_settings() -> Settings:
    state_path = os.getenv("FIRE_PLANNER_STATE_PATH", DEFAULT_STATE_PATH)
    try:
        port = int(os.getenv("FIRE_PLANNER_PORT", 8000))
    except ValueError:
        port = 8000
    return Settings(
        state_path=state_path or None,
        currency=os.getenv("FIRE_PLANNER_CURRENCY", DEFAULT_CURRENCY) or DEFAULT_CURRENCY,
        log_level=os.getenv("FIRE_PLANNER_LOG_LEVEL", "INFO").upper(),
        host=os.getenv("FIRE_PLANNER_HOST", "127.0.0.1"),
        port=port,
        debug=_env_flag("FIRE_PLANNER_DEBUG"),
    )


def configure_logging(level: str = "INFO") -> None:
    """Install a single stream handler on the root logger (idempotent)."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    else:
        root.setLevel(level)
