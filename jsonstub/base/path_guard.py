# ============================================================================
# jsonstub/base/path_guard.py
# Traversal Defense for Every Filesystem Access
# ============================================================================
#
# PURPOSE:
# Decides whether an operator- or request-supplied path fragment is safe to
# join onto the content root or the config root. Every other component trusts
# these checks, so they reject anything that is not obviously a bare relative
# path instead of resolving and comparing prefixes.
#
# TWO LAYERS:
# 1. Pure predicates: is_safe_segment() / is_safe_rel_path() never raise.
# 2. Validators: normalize_* normalise route/endpoint input and raise
#    StubError on rejection, before any I/O happens.
#
# ============================================================================

from __future__ import annotations

from typing import Optional

from jsonstub.errors import ErrorCode, StubError

API_PREFIX = "/api/"
ALLOWED_METHODS = ("GET", "POST")

# Characters that never appear in a plain name on any platform we serve from.
_FORBIDDEN_CHARS = ("/", "\\", "\x00")


def is_safe_segment(segment: str) -> bool:
    """A single directory or file name: not empty, not a dot entry, no separator."""
    if not segment or segment in (".", ".."):
        return False
    return not any(ch in segment for ch in _FORBIDDEN_CHARS)


def is_safe_rel_path(path: str) -> bool:
    """
    Every component of `path` must be a plain, non-empty name.

    Rejects absolute paths, parent references, current-dir markers and empty
    components (leading, doubled or trailing separators).
    """
    if not path or "\\" in path:
        return False
    return all(is_safe_segment(part) for part in path.split("/"))


def is_route_token(value: str) -> bool:
    """
    Usable as one field of a routes.txt line: no whitespace or control characters.

    Lines are `METHOD PATH FILE` split on whitespace, so anything else would
    change the meaning of the stored entry.
    """
    return bool(value) and not any(ch.isspace() or not ch.isprintable() for ch in value)


def is_safe_api_path(path: str) -> bool:
    """An externally exposed stub path: `/api/...` and traversal-safe below the root."""
    if not path.startswith(API_PREFIX):
        return False
    return is_safe_rel_path(path.lstrip("/"))


def normalize_method(method: Optional[str]) -> str:
    """Upper-case and validate an HTTP method for the route table."""
    value = (method or "").strip().upper()
    if value not in ALLOWED_METHODS:
        raise StubError(
            ErrorCode.ROUTE_METHOD_INVALID,
            f"Method must be one of {', '.join(ALLOWED_METHODS)}",
            details={"method": method},
        )
    return value


def normalize_api_path(path: Optional[str]) -> str:
    value = (path or "").strip()
    if not is_safe_api_path(value) or not is_route_token(value):
        raise StubError(
            ErrorCode.ROUTE_PATH_INVALID,
            f"Path must start with {API_PREFIX} with no traversal or whitespace",
            details={"path": path},
        )
    return value


def normalize_endpoint(path: Optional[str]) -> str:
    """Same rules as a mapped API path, reported as an endpoint error."""
    value = (path or "").strip()
    if not is_safe_api_path(value) or not is_route_token(value):
        raise StubError(
            ErrorCode.ENDPOINT_INVALID,
            f"Endpoint must start with {API_PREFIX} with no traversal or whitespace",
            details={"path": path},
        )
    return value


def normalize_mapped_file(file: Optional[str]) -> str:
    """
    Normalise a file reference relative to the content root.

    Accepts the forms shown in the UI (`/json/a/b.json`, `json/a/b.json`,
    `a/b.json`) and returns the bare relative path.
    """
    value = (file or "").strip()
    for prefix in ("/json/", "json/"):
        if value.startswith(prefix):
            value = value[len(prefix):]
            break
    if value.startswith("/") or not is_safe_rel_path(value) or not is_route_token(value):
        raise StubError(
            ErrorCode.ROUTE_FILE_INVALID,
            "File must be a relative path inside the content root",
            details={"file": file},
        )
    return value


def require_segment(name: Optional[str], field: str = "name") -> str:
    value = name or ""
    if not is_safe_segment(value):
        raise StubError(
            ErrorCode.PATH_UNSAFE,
            f"Invalid {field}",
            details={field: name},
        )
    return value
