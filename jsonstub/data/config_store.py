"""
jsonstub/data/config_store.py

Operator configuration persisted as small plain-text files under config_dir.

Layout (one file per key):
  refresh_endpoint.txt   POST endpoint answered with the refresh-token response
  ping_endpoint.txt      GET endpoint answered with the ping response
  log_ignore.txt         one ignore pattern per line (exact path or prefix/*)
  log_enabled.txt        on/off/true/false/1, empty means on
  routes.txt             METHOD PATH FILE per line, # comments allowed

There is no in-memory copy: every read goes back to disk so an
operator editing a file by hand sees the change on the next request. Reads
never fail (a missing or unreadable file is the normal first-run state and
yields the default); writes raise StubError so the HTTP layer can answer 500.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from jsonstub.base.path_guard import normalize_endpoint
from jsonstub.data.route_table import RouteMapping, format_route_lines, parse_route_lines
from jsonstub.errors import ErrorCode, StubError

logger = logging.getLogger(__name__)

REFRESH_ENDPOINT = "refresh_endpoint"
PING_ENDPOINT = "ping_endpoint"
LOG_IGNORE = "log_ignore"
LOG_ENABLED = "log_enabled"
ROUTES = "routes"

DEFAULT_REFRESH_ENDPOINT = "/api/v1/authentication/refresh"
DEFAULT_PING_ENDPOINT = "/api/v1/ping"

# Always active, never written to log_ignore.txt
DEFAULT_LOG_IGNORE_PATTERNS = ("/", "/events")

_SCALAR_DEFAULTS = {
    REFRESH_ENDPOINT: DEFAULT_REFRESH_ENDPOINT,
    PING_ENDPOINT: DEFAULT_PING_ENDPOINT,
    LOG_ENABLED: "on",
}

_TRUTHY = ("on", "true", "1")


def normalize_log_pattern(raw: str) -> Optional[str]:
    """
    Validate one ignore pattern, returning its canonical form or None.

    A leading slash is added when missing. Backslashes are refused, and `*`
    is only allowed as the final `/*` of a prefix pattern.
    """
    value = raw.strip()
    if not value:
        return None
    if not value.startswith("/"):
        value = "/" + value
    if "\\" in value:
        return None
    body = value[:-2] if value.endswith("/*") else value
    if "*" in body:
        return None
    return value


def matches_ignore_pattern(path: str, patterns: Iterable[str]) -> bool:
    for pattern in patterns:
        if pattern.endswith("/*"):
            prefix = pattern[:-1]
            base = prefix.rstrip("/")
            # "/json/*" covers "/json", "/json/" and anything under "/json/"
            if path == base or path.startswith(prefix):
                return True
        elif path == pattern:
            return True
    return False


class ConfigStore:
    """Read/write access to the operator configuration directory."""

    def __init__(self, config_dir: Path):
        self.config_dir = Path(config_dir)

    # ------------------------------------------------------------------
    # Raw file access
    # ------------------------------------------------------------------

    def _path(self, key: str) -> Path:
        return self.config_dir / f"{key}.txt"

    def _read_text(self, key: str) -> str:
        try:
            return self._path(key).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            return ""

    def _write_text(self, key: str, data: str) -> None:
        path = self._path(key)
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(data, encoding="utf-8")
        except OSError as e:
            logger.error(f"[ConfigStore] Failed to write {path}: {e}")
            raise StubError(
                ErrorCode.CONFIG_WRITE_FAILED,
                f"Could not persist {key}",
                details={"path": str(path), "error": str(e)},
            ) from e

    # ------------------------------------------------------------------
    # Scalars
    # ------------------------------------------------------------------

    def read_scalar(self, key: str) -> str:
        value = self._read_text(key).strip()
        return value or _SCALAR_DEFAULTS.get(key, "")

    def write_scalar(self, key: str, value: str) -> None:
        self._write_text(key, value)

    def refresh_endpoint(self) -> str:
        return self.read_scalar(REFRESH_ENDPOINT)

    def ping_endpoint(self) -> str:
        return self.read_scalar(PING_ENDPOINT)

    def set_refresh_endpoint(self, path: Optional[str]) -> str:
        value = normalize_endpoint(path)
        self.write_scalar(REFRESH_ENDPOINT, value)
        logger.info(f"[ConfigStore] Refresh endpoint set to {value}")
        return value

    def set_ping_endpoint(self, path: Optional[str]) -> str:
        value = normalize_endpoint(path)
        self.write_scalar(PING_ENDPOINT, value)
        logger.info(f"[ConfigStore] Ping endpoint set to {value}")
        return value

    def log_enabled(self) -> bool:
        return self.read_scalar(LOG_ENABLED).lower() in _TRUTHY

    def set_log_enabled(self, enabled: bool) -> None:
        self.write_scalar(LOG_ENABLED, "on" if enabled else "off")
        logger.info(f"[ConfigStore] Request logging {'enabled' if enabled else 'disabled'}")

    # ------------------------------------------------------------------
    # Log ignore patterns
    # ------------------------------------------------------------------

    def read_log_ignore_patterns(self) -> List[str]:
        """Built-in defaults first, then the valid lines of log_ignore.txt."""
        patterns = list(DEFAULT_LOG_IGNORE_PATTERNS)
        lines = [line for line in self._read_text(LOG_IGNORE).splitlines() if line.strip()]
        valid = [p for p in (normalize_log_pattern(line) for line in lines) if p is not None]
        self._report_drops(LOG_IGNORE, len(lines) - len(valid))
        patterns.extend(valid)
        return patterns

    def configured_log_ignore_patterns(self) -> List[str]:
        """Only the operator-supplied patterns (what the settings form edits)."""
        return self.read_log_ignore_patterns()[len(DEFAULT_LOG_IGNORE_PATTERNS):]

    def write_log_ignore_patterns(self, raw_lines: Iterable[str]) -> List[str]:
        """Normalise, drop invalid entries and persist. Returns what was written."""
        patterns = [p for p in (normalize_log_pattern(line) for line in raw_lines) if p is not None]
        self._write_text(LOG_IGNORE, "\n".join(patterns))
        return patterns

    def is_log_ignored(self, path: str) -> bool:
        return matches_ignore_pattern(path, self.read_log_ignore_patterns())

    def should_log(self, path: str) -> bool:
        return self.log_enabled() and not self.is_log_ignored(path)

    # ------------------------------------------------------------------
    # Route table
    # ------------------------------------------------------------------

    def read_route_table(self) -> List[RouteMapping]:
        lines = self._read_text(ROUTES).splitlines()
        mappings, dropped = parse_route_lines(lines)
        self._report_drops(ROUTES, dropped)
        return mappings

    def write_route_table(self, mappings: Sequence[RouteMapping]) -> None:
        self._write_text(ROUTES, format_route_lines(mappings))

    def _report_drops(self, key: str, dropped: int) -> None:
        if dropped > 0:
            logger.warning(f"[ConfigStore] Ignored {dropped} invalid line(s) in {self._path(key)}")
