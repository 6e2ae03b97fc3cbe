# ============================================================================
# jsonstub/base/config.py
# Process Configuration
# ============================================================================
#
# PURPOSE:
# Settings that are fixed for the lifetime of the process: where the content
# and config roots live, how to log, how big the live log window is, and
# where to listen. Everything comes from JSONSTUB_* environment variables.
#
# NOT IN HERE:
# The operator-editable settings (ping/refresh endpoints, route table, log
# ignore list, log toggle) live as text files under config_dir and are read
# fresh on every request by jsonstub.data.config_store.ConfigStore.
#
# ============================================================================

from __future__ import annotations

import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "on", "yes")


# ============================================================================
# File Storage Configuration
# ============================================================================

@dataclass(frozen=True)
class StorageConfig:
    # Root that relative content/config dirs hang off
    base_dir: Path = field(default_factory=Path.cwd)

    # Served JSON tree (json/ next to the server by default)
    content_dir_name: str = "json"

    # Operator configuration files (refresh_endpoint.txt, routes.txt, ...)
    config_dir_name: str = "config"

    # Absolute overrides; None means "under base_dir"
    content_dir_override: Optional[Path] = None
    config_dir_override: Optional[Path] = None

    @property
    def content_dir(self) -> Path:
        return self.content_dir_override or self.base_dir / self.content_dir_name

    @property
    def config_dir(self) -> Path:
        return self.config_dir_override or self.base_dir / self.config_dir_name


# ============================================================================
# Logging Configuration
# ============================================================================

@dataclass(frozen=True)
class LogConfig:
    level: str = "INFO"

    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    # Dev tool: console only unless asked
    file_enabled: bool = False

    # Stored in base_dir
    file_name: str = "jsonstub.log"

    max_file_size_mb: int = 10

    backup_count: int = 5


# ============================================================================
# Live Request Log Configuration
# ============================================================================

@dataclass(frozen=True)
class LogHubConfig:
    # Lines kept for the initial dashboard render (oldest evicted first)
    history_size: int = 200

    # Per-subscriber queue; a slower browser tab loses lines past this
    subscriber_buffer: int = 256


# ============================================================================
# Content Watcher Configuration
# ============================================================================

@dataclass(frozen=True)
class WatchConfig:
    enabled: bool = True

    # Seconds between directory scans
    poll_interval: float = 1.0


# ============================================================================
# Master Configuration Container
# ============================================================================

@dataclass
class StubConfig:
    storage: StorageConfig = field(default_factory=StorageConfig)
    log: LogConfig = field(default_factory=LogConfig)
    log_hub: LogHubConfig = field(default_factory=LogHubConfig)
    watch: WatchConfig = field(default_factory=WatchConfig)

    debug: bool = False

    api_host: str = "127.0.0.1"

    api_port: int = 3000

    @classmethod
    def from_env(cls) -> "StubConfig":
        base_dir = Path(os.getenv("JSONSTUB_BASE_DIR", str(Path.cwd())))
        content_dir = os.getenv("JSONSTUB_CONTENT_DIR")
        config_dir = os.getenv("JSONSTUB_CONFIG_DIR")
        storage = StorageConfig(
            base_dir=base_dir,
            content_dir_override=Path(content_dir) if content_dir else None,
            config_dir_override=Path(config_dir) if config_dir else None,
        )

        log = LogConfig(
            level=os.getenv("JSONSTUB_LOG_LEVEL", "INFO"),
            file_enabled=_env_flag("JSONSTUB_LOG_FILE", "false"),
        )

        log_hub = LogHubConfig(
            history_size=int(os.getenv("JSONSTUB_LOG_HISTORY", "200")),
            subscriber_buffer=int(os.getenv("JSONSTUB_LOG_BUFFER", "256")),
        )

        watch = WatchConfig(
            enabled=_env_flag("JSONSTUB_WATCH", "true"),
            poll_interval=float(os.getenv("JSONSTUB_WATCH_INTERVAL", "1.0")),
        )

        return cls(
            storage=storage,
            log=log,
            log_hub=log_hub,
            watch=watch,
            debug=_env_flag("JSONSTUB_DEBUG", "false"),
            api_host=os.getenv("JSONSTUB_API_HOST", "127.0.0.1"),
            api_port=int(os.getenv("JSONSTUB_API_PORT", "3000")),
        )


# ============================================================================
# Global Configuration Singleton
# ============================================================================

_config: Optional[StubConfig] = None


def get_config() -> StubConfig:
    """
    Get the global configuration instance.

    Loaded from the environment on first use and reused afterwards.
    """
    global _config
    if _config is None:
        _config = StubConfig.from_env()
    return _config


def set_config(config: StubConfig) -> None:
    """Replace the global configuration (mainly used for testing)."""
    global _config
    _config = config


def setup_logging(config: Optional[StubConfig] = None) -> None:
    """
    Configure Python's logging system based on our settings.

    Console always, plus a rotating file under base_dir when enabled.
    Call this once at application startup.
    """
    cfg = config or get_config()

    handlers: List[logging.Handler] = [logging.StreamHandler()]

    if cfg.log.file_enabled:
        from logging.handlers import RotatingFileHandler
        cfg.storage.base_dir.mkdir(parents=True, exist_ok=True)
        log_path = cfg.storage.base_dir / cfg.log.file_name
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=cfg.log.max_file_size_mb * 1024 * 1024,
            backupCount=cfg.log.backup_count,
        )
        handlers.append(file_handler)

    level = "DEBUG" if cfg.debug else cfg.log.level.upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=cfg.log.format,
        handlers=handlers,
        force=True,
    )
