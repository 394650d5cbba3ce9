"""YAML config loader for store connection and ingest tuning.

Credentials may be supplied through ``REVIEWSTORE_USERNAME`` and
``REVIEWSTORE_PASSWORD`` instead of the file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from reviewstore.errors import ConfigError
from reviewstore.lib.logging_config import get_logger

logger = get_logger("config_loader")

DEFAULT_CONFIG_PATH = Path("config/reviewstore.yaml")

BACKENDS = ("cassandra", "duckdb")

DEFAULT_WORKERS = 128
DEFAULT_QUEUE_SIZE = 512
DEFAULT_TIMEOUT_SECONDS = 3600.0
DEFAULT_GRACE_SECONDS = 30.0
MAX_WORKERS = 1024


@dataclass(frozen=True)
class StoreSettings:
    """Where and how to open the store.

    Attributes:
        backend: ``cassandra`` or ``duckdb``.
        secure_connect_bundle: Astra secure connect bundle (cassandra only).
        database: DuckDB file path, or ``:memory:`` (duckdb only).
        username: Client id / user name.
        password: Client secret / password.
        keyspace: Keyspace (cassandra) or schema (duckdb) holding the tables.
    """

    backend: str = "cassandra"
    secure_connect_bundle: str | None = None
    database: str = ":memory:"
    username: str | None = None
    password: str | None = None
    keyspace: str = "reviews"

    @property
    def location(self) -> str:
        """The path the connector receives as its first argument."""
        if self.backend == "duckdb":
            return self.database
        return self.secure_connect_bundle or ""


@dataclass(frozen=True)
class IngestSettings:
    """Bulk-ingest tuning knobs.

    Attributes:
        workers: Number of concurrent worker threads.
        queue_size: Tasks allowed to wait for a free worker.
        timeout_seconds: Cumulative bound on one ingest run.
        grace_seconds: Time in-flight writes get after a timeout.
    """

    workers: int = DEFAULT_WORKERS
    queue_size: int = DEFAULT_QUEUE_SIZE
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    grace_seconds: float = DEFAULT_GRACE_SECONDS


def load_config(config_path: Path) -> dict[str, Any]:
    """Load and validate configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Parsed configuration dictionary.

    Raises:
        FileNotFoundError: If config file does not exist.
        ConfigError: If config values are out of valid range.
    """
    config_path = Path(config_path)
    if not config_path.exists():
        msg = f"Config file not found: {config_path}"
        raise FileNotFoundError(msg)

    with open(config_path, encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    if not isinstance(config, dict):
        msg = f"Config root must be a mapping, got {type(config).__name__}"
        raise ConfigError(msg)

    validate_config(config)
    logger.info("Loaded config from %s", config_path)
    return config


def validate_config(config: dict[str, Any]) -> None:
    """Validate configuration values.

    Args:
        config: Configuration dictionary to validate.

    Raises:
        ConfigError: If any config value is invalid.
    """
    store = config.get("store") or {}
    backend = store.get("backend", "cassandra")
    if backend not in BACKENDS:
        msg = f"Backend must be one of {BACKENDS}, got {backend!r}"
        raise ConfigError(msg)

    keyspace = store.get("keyspace", "reviews")
    if not isinstance(keyspace, str) or not keyspace:
        msg = f"Keyspace must be a non-empty string, got {keyspace!r}"
        raise ConfigError(msg)

    ingest = config.get("ingest") or {}

    workers = ingest.get("workers", DEFAULT_WORKERS)
    if not isinstance(workers, int) or workers < 1 or workers > MAX_WORKERS:
        msg = f"Workers must be between 1 and {MAX_WORKERS}, got {workers}"
        raise ConfigError(msg)

    queue_size = ingest.get("queue_size", DEFAULT_QUEUE_SIZE)
    if not isinstance(queue_size, int) or queue_size < 1:
        msg = f"Queue size must be a positive integer, got {queue_size}"
        raise ConfigError(msg)

    timeout = ingest.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)
    if not isinstance(timeout, (int, float)) or timeout <= 0:
        msg = f"Timeout must be a positive number of seconds, got {timeout}"
        raise ConfigError(msg)

    grace = ingest.get("grace_seconds", DEFAULT_GRACE_SECONDS)
    if not isinstance(grace, (int, float)) or grace < 0:
        msg = f"Grace period must be zero or more seconds, got {grace}"
        raise ConfigError(msg)


def store_settings(config: dict[str, Any]) -> StoreSettings:
    """Build StoreSettings from a validated config, applying env overrides."""
    store = config.get("store") or {}
    return StoreSettings(
        backend=store.get("backend", "cassandra"),
        secure_connect_bundle=store.get("secure_connect_bundle"),
        database=str(store.get("database", ":memory:")),
        username=os.environ.get("REVIEWSTORE_USERNAME", store.get("username")),
        password=os.environ.get("REVIEWSTORE_PASSWORD", store.get("password")),
        keyspace=store.get("keyspace", "reviews"),
    )


def ingest_settings(config: dict[str, Any]) -> IngestSettings:
    """Build IngestSettings from a validated config."""
    ingest = config.get("ingest") or {}
    return IngestSettings(
        workers=ingest.get("workers", DEFAULT_WORKERS),
        queue_size=ingest.get("queue_size", DEFAULT_QUEUE_SIZE),
        timeout_seconds=float(ingest.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)),
        grace_seconds=float(ingest.get("grace_seconds", DEFAULT_GRACE_SECONDS)),
    )
