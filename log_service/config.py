"""Configuration — frozen dataclasses built from defaults, an optional YAML file, and env vars.

Precedence, lowest to highest: ``DEFAULTS`` < YAML file at ``CONFIG_PATH`` < environment.
"""

import copy
import logging
import os
from dataclasses import dataclass

import yaml

from log_service.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULTS = {
    "service": {
        "table_name": "",
        "store_backend": "sqlite",
        "database_path": "logs.db",
        "recent_limit": 100,
        "max_message_length": 10000,
        "host": "0.0.0.0",
        "port": 5000,
    },
    "dashboard": {
        "ingest_url": "",
        "query_url": "",
        "refresh_interval_seconds": 5,
        "notice_seconds": 5,
        "auto_refresh": True,
        "request_timeout_seconds": 10.0,
        "host": "0.0.0.0",
        "port": 3000,
    },
}

STORE_BACKENDS = ("memory", "sqlite")


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes")


def _convert(kind, name, value):
    """Cast a config value, naming the offending setting on failure."""
    try:
        return kind(value)
    except (TypeError, ValueError):
        label = "an integer" if kind is int else "a number"
        raise ConfigurationError(f"{name} must be {label}, got {value!r}") from None


def _section(config, name) -> dict:
    """One top-level section; a null or scalar section falls back to defaults."""
    section = config.get(name)
    if not isinstance(section, dict):
        if section is not None:
            logger.warning("Config section %r is not a mapping, using defaults", name)
        return copy.deepcopy(DEFAULTS[name])
    return section


def _deep_merge(base, override):
    """Recursively merge override dict into base dict."""
    result = copy.deepcopy(base)
    for key, value in override.items():
        if (
            key in result
            and isinstance(result[key], dict)
            and isinstance(value, dict)
        ):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def load_yaml(path=None) -> dict:
    """Defaults merged with the YAML file at *path* (or ``CONFIG_PATH``)."""
    config = copy.deepcopy(DEFAULTS)
    path = path or os.environ.get("CONFIG_PATH")
    if not path:
        return config

    try:
        with open(path, "r") as f:
            user_config = yaml.safe_load(f)
    except FileNotFoundError:
        logger.info("Config file %s not found, using defaults", path)
        return config
    except yaml.YAMLError:
        logger.warning("Invalid YAML in %s, using defaults", path)
        return config

    if user_config and isinstance(user_config, dict):
        config = _deep_merge(config, user_config)
    return config


@dataclass(frozen=True)
class ServiceConfig:
    table_name: str = ""
    store_backend: str = "sqlite"
    database_path: str = "logs.db"
    recent_limit: int = 100
    max_message_length: int = 10000
    host: str = "0.0.0.0"
    port: int = 5000

    def validate(self) -> "ServiceConfig":
        if not self.table_name:
            raise ConfigurationError("LOG_TABLE_NAME is not configured")
        if self.store_backend not in STORE_BACKENDS:
            raise ConfigurationError(
                f"Unknown store backend {self.store_backend!r}; expected one of: {', '.join(STORE_BACKENDS)}"
            )
        if self.recent_limit < 1:
            raise ConfigurationError("RECENT_LIMIT must be a positive integer")
        if self.max_message_length < 1:
            raise ConfigurationError("MAX_MESSAGE_LENGTH must be a positive integer")
        return self


@dataclass(frozen=True)
class DashboardConfig:
    ingest_url: str = ""
    query_url: str = ""
    refresh_interval_seconds: int = 5
    notice_seconds: int = 5
    auto_refresh: bool = True
    request_timeout_seconds: float = 10.0
    host: str = "0.0.0.0"
    port: int = 3000

    def validate(self) -> "DashboardConfig":
        missing = [name for name, value in (("INGEST_URL", self.ingest_url), ("QUERY_URL", self.query_url))
                   if not value]
        if missing:
            raise ConfigurationError(f"{' and '.join(missing)} not configured")
        return self


def load_service_config(path=None) -> ServiceConfig:
    """Build ServiceConfig from YAML ``service:`` section and environment variables."""
    section = _section(load_yaml(path), "service")
    return ServiceConfig(
        table_name=os.environ.get("LOG_TABLE_NAME", section["table_name"]) or "",
        store_backend=os.environ.get("STORE_BACKEND", section["store_backend"]),
        database_path=os.environ.get("DATABASE_PATH", section["database_path"]),
        recent_limit=_convert(int, "RECENT_LIMIT", os.environ.get("RECENT_LIMIT", section["recent_limit"])),
        max_message_length=_convert(
            int, "MAX_MESSAGE_LENGTH", os.environ.get("MAX_MESSAGE_LENGTH", section["max_message_length"])
        ),
        host=os.environ.get("API_HOST", section["host"]),
        port=_convert(int, "API_PORT", os.environ.get("API_PORT", section["port"])),
    )


def load_dashboard_config(path=None) -> DashboardConfig:
    """Build DashboardConfig from YAML ``dashboard:`` section and environment variables."""
    section = _section(load_yaml(path), "dashboard")
    return DashboardConfig(
        ingest_url=os.environ.get("INGEST_URL", section["ingest_url"]) or "",
        query_url=os.environ.get("QUERY_URL", section["query_url"]) or "",
        refresh_interval_seconds=_convert(
            int,
            "REFRESH_INTERVAL_SECONDS",
            os.environ.get("REFRESH_INTERVAL_SECONDS", section["refresh_interval_seconds"]),
        ),
        notice_seconds=_convert(int, "NOTICE_SECONDS", os.environ.get("NOTICE_SECONDS", section["notice_seconds"])),
        auto_refresh=_parse_bool(os.environ.get("AUTO_REFRESH", section["auto_refresh"])),
        request_timeout_seconds=_convert(
            float,
            "REQUEST_TIMEOUT_SECONDS",
            os.environ.get("REQUEST_TIMEOUT_SECONDS", section["request_timeout_seconds"]),
        ),
        host=os.environ.get("DASHBOARD_HOST", section["host"]),
        port=_convert(int, "DASHBOARD_PORT", os.environ.get("DASHBOARD_PORT", section["port"])),
    )
