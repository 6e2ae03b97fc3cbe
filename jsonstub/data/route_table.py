"""Module route_table: (method, /api path) -> file mappings and request resolution."""
#
# PURPOSE:
# The routing decision behind every /api/* request. Mappings live in
# config/routes.txt (through ConfigStore) and are re-read on each call, so
# the table is never stale with respect to the file.
#
# INVARIANTS:
# - At most one mapping per (method, path); upsert is last-write-wins.
# - Nothing reaches ConfigStore without passing the path_guard validators.
# - The ping (GET) and refresh (POST) endpoints are checked before the table.
#

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Iterable, List, Optional, Sequence, Tuple

from jsonstub.base.path_guard import (
    is_route_token,
    is_safe_rel_path,
    normalize_api_path,
    normalize_mapped_file,
    normalize_method,
)
from jsonstub.errors import ErrorCode, StubError

if TYPE_CHECKING:
    from jsonstub.data.config_store import ConfigStore

logger = logging.getLogger(__name__)

PING_RESPONSE_FILE = "ping/response.json"
PING_FALLBACK = b'{"status":"success"}'

REFRESH_RESPONSE_FILE = "authentication/refresh.json"
REFRESH_FALLBACK = b'{"status":"success","data":{"access_token":"dev_access_token"}}'


@dataclass(frozen=True)
class RouteMapping:
    method: str
    path: str
    file: str

    @classmethod
    def create(cls, method: Optional[str], path: Optional[str], file: Optional[str]) -> "RouteMapping":
        """Validate raw operator input. Raises StubError on the first bad field."""
        return cls(
            method=normalize_method(method),
            path=normalize_api_path(path),
            file=normalize_mapped_file(file),
        )

    @classmethod
    def from_stored(cls, method: str, path: str, file: str) -> "RouteMapping":
        """
        Validate an entry read back from routes.txt.

        Unlike create(), the file is kept exactly as stored; only its safety
        is checked.
        """
        if not is_safe_rel_path(file) or not is_route_token(file):
            raise StubError(
                ErrorCode.ROUTE_FILE_INVALID,
                "Stored file is not a relative path inside the content root",
                details={"file": file},
            )
        return cls(method=normalize_method(method), path=normalize_api_path(path), file=file)

    @property
    def key(self) -> Tuple[str, str]:
        return (self.method, self.path)

    def to_line(self) -> str:
        return f"{self.method} {self.path} {self.file}"

    def to_dict(self) -> dict:
        return {"method": self.method, "path": self.path, "file": self.file}


def parse_route_lines(lines: Iterable[str]) -> Tuple[List[RouteMapping], int]:
    """
    Parse routes.txt content.

    Blank lines and `#` comments are skipped. A line that does not validate
    is dropped on its own; the rest of the table is still returned.

    Returns:
        (mappings, number of dropped lines)
    """
    mappings: List[RouteMapping] = []
    dropped = 0
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        parts = line.split()
        if len(parts) < 3:
            dropped += 1
            continue
        try:
            mappings.append(RouteMapping.from_stored(parts[0], parts[1], parts[2]))
        except StubError:
            dropped += 1
    return mappings, dropped


def format_route_lines(mappings: Sequence[RouteMapping]) -> str:
    return "".join(f"{m.to_line()}\n" for m in mappings)


class ResolutionKind(Enum):
    PING = "ping"
    REFRESH = "refresh"
    MAPPED = "mapped"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class Resolution:
    """
    Outcome of resolving an /api/* request.

    `file` is relative to the content root. For the built-in endpoints it
    names the optional override file and `fallback` is served when that
    file cannot be read.
    """
    kind: ResolutionKind
    file: Optional[str] = None
    fallback: Optional[bytes] = None

    @property
    def found(self) -> bool:
        return self.kind is not ResolutionKind.NOT_FOUND


class RouteTable:
    """Mapping operations on top of ConfigStore's routes.txt."""

    def __init__(self, store: "ConfigStore"):
        self.store = store

    def all(self) -> List[RouteMapping]:
        return self.store.read_route_table()

    def find(self, method: str, path: str) -> Optional[str]:
        # Linear scan; tables are tens of entries
        for mapping in self.all():
            if mapping.method == method and mapping.path == path:
                return mapping.file
        return None

    def upsert(self, mapping: RouteMapping) -> None:
        mappings = [m for m in self.all() if m.key != mapping.key]
        mappings.append(mapping)
        self.store.write_route_table(mappings)
        logger.info(f"[RouteTable] {mapping.method} {mapping.path} -> {mapping.file}")

    def set(self, method: Optional[str], path: Optional[str], file: Optional[str]) -> RouteMapping:
        """Validate raw input and upsert it."""
        mapping = RouteMapping.create(method, path, file)
        self.upsert(mapping)
        return mapping

    def remove_where(self, predicate: Callable[[RouteMapping], bool]) -> int:
        """Drop every matching mapping in a single write. Returns how many went."""
        current = self.all()
        kept = [m for m in current if not predicate(m)]
        removed = len(current) - len(kept)
        if removed:
            self.store.write_route_table(kept)
            logger.info(f"[RouteTable] Removed {removed} mapping(s)")
        return removed

    def remove(self, method: Optional[str], path: Optional[str]) -> int:
        key = (normalize_method(method), normalize_api_path(path))
        return self.remove_where(lambda m: m.key == key)

    def remove_under(self, folder: str) -> int:
        """Cascade for folder deletion: mappings whose file lives in `folder`."""
        prefix = folder.rstrip("/") + "/"
        return self.remove_where(lambda m: m.file.startswith(prefix))

    def resolve(self, method: str, api_path: str) -> Resolution:
        method = method.upper()
        if method == "GET" and api_path == self.store.ping_endpoint():
            return Resolution(ResolutionKind.PING, PING_RESPONSE_FILE, PING_FALLBACK)
        if method == "POST" and api_path == self.store.refresh_endpoint():
            return Resolution(ResolutionKind.REFRESH, REFRESH_RESPONSE_FILE, REFRESH_FALLBACK)

        file = self.find(method, api_path)
        if file is None:
            return Resolution(ResolutionKind.NOT_FOUND)
        return Resolution(ResolutionKind.MAPPED, file)
