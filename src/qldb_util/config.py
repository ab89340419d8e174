"""
Ledger connection and logging configuration.

Settings are loaded from multiple sources with a clear priority order:

    1. Environment variables (highest priority) - for containerized deployments
    2. Config file (config/qldb.ini, or an explicit path) - for static deployments
    3. Built-in defaults (lowest priority) - sensible fallbacks

Nothing is loaded at import time. The caller (normally the CLI) calls
``load_config()`` once and passes the resulting ``LedgerSettings`` to every
core function explicitly.

Usage:
    from qldb_util.config import load_config
    from qldb_util.executor import execute_query

    cfg = load_config()
    rows = execute_query(cfg.ledger.ledger_name, "SELECT * FROM Cars", settings=cfg.ledger)

Environment Variable Mapping:
    QLDB_LEDGER                        -> ledger.ledger_name
    AWS_REGION / AWS_DEFAULT_REGION    -> ledger.region
    AWS_ACCESS_KEY_ID                  -> ledger.access_key_id
    AWS_SECRET_ACCESS_KEY              -> ledger.secret_access_key
    AWS_SESSION_TOKEN                  -> ledger.session_token
    QLDB_ENDPOINT_URL                  -> ledger.endpoint_url
    QLDB_MAX_CONCURRENT_TRANSACTIONS   -> ledger.max_concurrent_transactions
    QLDB_LOG_LEVEL                     -> logging.level
    QLDB_LOG_FORMAT                    -> logging.format
"""

import configparser
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

# =============================================================================
# PATH CONFIGURATION
# =============================================================================

# Project root directory (contains src/, config/)
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Config file paths
CONFIG_DIR = PROJECT_ROOT / "config"
CONFIG_FILE = CONFIG_DIR / "qldb.ini"
CONFIG_EXAMPLE = CONFIG_DIR / "qldb.example.ini"

_LOG_FORMATS = ("simple", "detailed", "json")
_LOG_LEVELS = frozenset(logging.getLevelNamesMapping())


# =============================================================================
# CONFIGURATION DATACLASSES
# =============================================================================


@dataclass
class LedgerSettings:
    """Ledger driver configuration."""

    ledger_name: str | None = None
    region: str | None = None
    access_key_id: str | None = None
    secret_access_key: str | None = None
    session_token: str | None = None
    endpoint_url: str | None = None
    max_concurrent_transactions: int = 10

    def driver_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``QldbDriver``, omitting unset values."""
        candidates = {
            "region_name": self.region,
            "aws_access_key_id": self.access_key_id,
            "aws_secret_access_key": self.secret_access_key,
            "aws_session_token": self.session_token,
            "endpoint_url": self.endpoint_url,
        }
        kwargs: dict[str, Any] = {k: v for k, v in candidates.items() if v}
        kwargs["max_concurrent_transactions"] = self.max_concurrent_transactions
        return kwargs

    def __repr__(self) -> str:
        secret = "***" if self.secret_access_key else None
        return (
            f"LedgerSettings(ledger_name={self.ledger_name!r}, region={self.region!r}, "
            f"access_key_id={self.access_key_id!r}, secret_access_key={secret!r}, "
            f"endpoint_url={self.endpoint_url!r}, "
            f"max_concurrent_transactions={self.max_concurrent_transactions!r})"
        )


@dataclass
class LoggingSettings:
    """Logging configuration."""

    level: str = "INFO"
    format: Literal["simple", "detailed", "json"] = "detailed"


@dataclass
class QldbConfig:
    """
    Complete configuration.

    Aggregates all settings sections. Build one with ``load_config()``.
    """

    ledger: LedgerSettings = field(default_factory=LedgerSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)


# =============================================================================
# CONFIGURATION LOADING
# =============================================================================


def _load_from_ini(parser: configparser.ConfigParser, cfg: QldbConfig) -> None:
    """Load configuration from parsed INI file into QldbConfig."""
    # Ledger section
    if parser.has_section("ledger"):
        for option in (
            "ledger_name",
            "region",
            "access_key_id",
            "secret_access_key",
            "session_token",
            "endpoint_url",
        ):
            if parser.has_option("ledger", option):
                setattr(cfg.ledger, option, parser.get("ledger", option) or None)
        if parser.has_option("ledger", "max_concurrent_transactions"):
            cfg.ledger.max_concurrent_transactions = parser.getint(
                "ledger", "max_concurrent_transactions"
            )

    # Logging section
    if parser.has_section("logging"):
        if parser.has_option("logging", "level"):
            val = parser.get("logging", "level").upper()
            if val in _LOG_LEVELS:
                cfg.logging.level = val
        if parser.has_option("logging", "format"):
            val = parser.get("logging", "format").lower()
            if val in _LOG_FORMATS:
                cfg.logging.format = val  # type: ignore[assignment]


def _apply_env_overrides(cfg: QldbConfig) -> None:
    """Apply environment variable overrides to configuration."""
    # Ledger settings
    if env_ledger := os.getenv("QLDB_LEDGER"):
        cfg.ledger.ledger_name = env_ledger
    if env_region := os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION"):
        cfg.ledger.region = env_region
    if env_key_id := os.getenv("AWS_ACCESS_KEY_ID"):
        cfg.ledger.access_key_id = env_key_id
    if env_secret := os.getenv("AWS_SECRET_ACCESS_KEY"):
        cfg.ledger.secret_access_key = env_secret
    if env_token := os.getenv("AWS_SESSION_TOKEN"):
        cfg.ledger.session_token = env_token
    if env_endpoint := os.getenv("QLDB_ENDPOINT_URL"):
        cfg.ledger.endpoint_url = env_endpoint
    if env_max := os.getenv("QLDB_MAX_CONCURRENT_TRANSACTIONS"):
        cfg.ledger.max_concurrent_transactions = int(env_max)

    # Logging settings
    if env_log := os.getenv("QLDB_LOG_LEVEL"):
        if env_log.upper() in _LOG_LEVELS:
            cfg.logging.level = env_log.upper()
    if env_format := os.getenv("QLDB_LOG_FORMAT"):
        if env_format.lower() in _LOG_FORMATS:
            cfg.logging.format = env_format.lower()  # type: ignore[assignment]


def load_config(config_file: Path | str | None = None) -> QldbConfig:
    """
    Load configuration from all sources with proper priority.

    Priority (highest wins):
        1. Environment variables
        2. ``config_file`` if given, else config/qldb.ini
        3. config/qldb.example.ini (fallback for development)
        4. Built-in defaults

    Args:
        config_file: Optional explicit INI path. Must exist when given.

    Returns:
        QldbConfig: Fully populated configuration object.

    Raises:
        FileNotFoundError: ``config_file`` was given but does not exist.
    """
    cfg = QldbConfig()

    # Determine which config file to use
    source: Path | None = None
    if config_file is not None:
        source = Path(config_file)
        if not source.exists():
            raise FileNotFoundError(f"Config file not found: {source}")
    elif CONFIG_FILE.exists():
        source = CONFIG_FILE
    elif CONFIG_EXAMPLE.exists():
        # Use example as fallback for development
        source = CONFIG_EXAMPLE

    # Load from INI file if available
    if source:
        parser = configparser.ConfigParser()
        parser.read(source)
        _load_from_ini(parser, cfg)

    # Apply environment variable overrides (highest priority)
    _apply_env_overrides(cfg)

    return cfg


# =============================================================================
# LOGGING SETUP
# =============================================================================


class JsonLogFormatter(logging.Formatter):
    """Render each log record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


_FORMATS = {
    "simple": "%(levelname)s %(message)s",
    "detailed": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
}


def configure_logging(settings: LoggingSettings) -> None:
    """Install a root stream handler according to ``settings``.

    Replaces handlers from any earlier call so repeated CLI invocations in
    one process do not duplicate output.
    """
    handler = logging.StreamHandler()
    if settings.format == "json":
        handler.setFormatter(JsonLogFormatter())
    else:
        handler.setFormatter(logging.Formatter(_FORMATS.get(settings.format, _FORMATS["detailed"])))
    logging.basicConfig(level=settings.level.upper(), handlers=[handler], force=True)
