# Area: Shared
"""
gameshow_sync._shared.config — Session configuration
====================================================

Loads and validates per-client configuration.

Sources, lowest to highest precedence:
    1. Field defaults
    2. JSON config file (``--config`` / ``load_config(path)``)
    3. Environment variables (``.env`` files are read via python-dotenv)

Environment variables:
    GAMESHOW_GAME_ID, GAMESHOW_PARTICIPANT_ID, GAMESHOW_PARTICIPANT_KIND,
    GAMESHOW_DISPLAY_NAME, GAMESHOW_DB_PATH, GAMESHOW_LOG_FILE,
    GAMESHOW_LOG_LEVEL, GAMESHOW_PRESENCE_TIMEOUT, GAMESHOW_PRESENCE_INTERVAL,
    GAMESHOW_TICK_INTERVAL, GAMESHOW_DRIVES_TIMER, GAMESHOW_STRICT_ACTIONS
"""

from __future__ import annotations
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from ..errors import ConfigError

logger = logging.getLogger("gameshow_sync.config")

# Fixed policy: a participant unseen for this long is marked disconnected
PRESENCE_TIMEOUT_SECONDS = 30.0
PRESENCE_INTERVAL_SECONDS = 10.0
TICK_INTERVAL_SECONDS = 1.0

ENV_MAPPINGS = {
    "GAMESHOW_GAME_ID": "game_id",
    "GAMESHOW_PARTICIPANT_ID": "participant_id",
    "GAMESHOW_PARTICIPANT_KIND": "participant_kind",
    "GAMESHOW_DISPLAY_NAME": "display_name",
    "GAMESHOW_DB_PATH": "db_path",
    "GAMESHOW_LOG_FILE": "log_file",
    "GAMESHOW_LOG_LEVEL": "log_level",
    "GAMESHOW_PRESENCE_TIMEOUT": "presence_timeout_seconds",
    "GAMESHOW_PRESENCE_INTERVAL": "presence_interval_seconds",
    "GAMESHOW_TICK_INTERVAL": "tick_interval_seconds",
    "GAMESHOW_DRIVES_TIMER": "drives_timer",
    "GAMESHOW_STRICT_ACTIONS": "strict_actions",
}


class SessionConfig(BaseModel):
    """Configuration for one client of a session."""

    game_id: str = ""
    participant_id: str = "host-desktop"
    participant_kind: str = "host-desktop"
    display_name: str = ""
    db_path: str = "gameshow.db"
    log_file: Optional[str] = "gameshow_sync.log"
    log_level: str = "INFO"
    presence_timeout_seconds: float = Field(default=PRESENCE_TIMEOUT_SECONDS, gt=0)
    presence_interval_seconds: float = Field(default=PRESENCE_INTERVAL_SECONDS, gt=0)
    tick_interval_seconds: float = Field(default=TICK_INTERVAL_SECONDS, gt=0)
    # Exactly one client per session should drive the countdown
    drives_timer: bool = False
    strict_actions: bool = False


def load_config(
    config_path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> SessionConfig:
    """
    Load config from file and environment.

    Args:
        config_path: Optional path to a JSON config file
        environ: Environment mapping (defaults to os.environ after loading .env)
        overrides: Explicit values applied last

    Returns:
        Validated SessionConfig

    Raises:
        ConfigError: If the file is unreadable or a value is invalid
    """
    data: Dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {config_path}")
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise ConfigError(f"Could not read config file {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config file must hold a JSON object: {config_path}")

    if environ is None:
        load_dotenv()
        environ = os.environ

    for env_key, config_key in ENV_MAPPINGS.items():
        if env_key in environ:
            data[config_key] = environ[env_key]

    if overrides:
        data.update(overrides)

    try:
        config = SessionConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    logger.debug(f"Loaded config for participant {config.participant_id}")
    return config
