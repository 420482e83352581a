"""
Configuration management for the flow builder.

Settings are resolved in this order:
1. Environment variables (FLOWBUILDER_*), typically loaded from .env by app.py
2. config.json in the project root
3. Built-in defaults

Config is stored in config.json next to the project root.
"""

import json
import logging
import os
from dataclasses import dataclass
from typing import Optional

from flowbuilder.notifications import NOTIFICATION_TIMEOUT_MS
from flowbuilder.paths import get_config_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    title: str = "Chatbot Flow Builder"
    port: int = 8080
    notification_timeout_ms: int = NOTIFICATION_TIMEOUT_MS
    node_id_prefix: str = "node-"
    log_level: str = "INFO"
    export_path: Optional[str] = None


def load_config() -> dict:
    """Load configuration from config.json."""
    config_path = get_config_path()
    if config_path.exists():
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError):
            return {}
    return {}


def _lookup(env_name: str, config: dict, key: str):
    value = os.environ.get(env_name)
    if value:
        return value
    return config.get(key)


def _as_int(raw, default: int, name: str) -> int:
    if raw is None or raw == '':
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        logger.warning(f"Invalid {name}={raw!r}, using default {default}")
        return default
    if value <= 0:
        logger.warning(f"{name} must be positive, using default {default}")
        return default
    return value


def load_settings() -> Settings:
    """Build Settings from the environment and config.json."""
    config = load_config()
    defaults = Settings()
    return Settings(
        title=_lookup("FLOWBUILDER_TITLE", config, "title") or defaults.title,
        port=_as_int(_lookup("FLOWBUILDER_PORT", config, "port"), defaults.port, "port"),
        notification_timeout_ms=_as_int(
            _lookup("FLOWBUILDER_NOTIFICATION_TIMEOUT_MS", config, "notification_timeout_ms"),
            defaults.notification_timeout_ms,
            "notification_timeout_ms",
        ),
        node_id_prefix=_lookup("FLOWBUILDER_NODE_ID_PREFIX", config, "node_id_prefix") or defaults.node_id_prefix,
        log_level=str(_lookup("FLOWBUILDER_LOG_LEVEL", config, "log_level") or defaults.log_level).upper(),
        export_path=_lookup("FLOWBUILDER_EXPORT_PATH", config, "export_path") or None,
    )
