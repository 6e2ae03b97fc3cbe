"""Structured error taxonomy for jsonstub."""
#
# PURPOSE:
# Gives every failure the stub server can report a stable error code and an
# HTTP status, so handlers raise one exception type and the API layer turns
# it into a consistent JSON body.
#
# ERROR CODE FORMAT:
# - PATH_XXX: Path safety rejections
# - ROUTE_XXX: Route mapping validation / lookup errors
# - FORM_XXX: Missing or malformed form input
# - CONFIG_XXX: Operator configuration persistence errors
# - CONTENT_XXX: Content root (json/) errors
# - SYSTEM_XXX: Anything else
#
# USAGE:
#   from jsonstub.errors import StubError, ErrorCode
#
#   raise StubError(
#       ErrorCode.ROUTE_METHOD_INVALID,
#       "Unsupported method",
#       details={"method": "PUT"}
#   )
#
import json
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    # Validation
    PATH_UNSAFE = "PATH_001"
    ROUTE_METHOD_INVALID = "ROUTE_001"
    ROUTE_PATH_INVALID = "ROUTE_002"
    ROUTE_FILE_INVALID = "ROUTE_003"
    ENDPOINT_INVALID = "ROUTE_004"
    FORM_FIELD_MISSING = "FORM_001"
    UPLOAD_EMPTY = "FORM_002"

    # Not found
    ROUTE_NOT_FOUND = "ROUTE_404"
    CONTENT_NOT_FOUND = "CONTENT_404"

    # Persistence
    CONFIG_WRITE_FAILED = "CONFIG_001"
    CONTENT_READ_FAILED = "CONTENT_001"
    CONTENT_WRITE_FAILED = "CONTENT_002"

    # System
    SYSTEM_INTERNAL_ERROR = "SYSTEM_001"


class StubError(Exception):
    """
    Base exception for jsonstub with structured error information.

    Attributes:
        code: ErrorCode enum value (e.g. "ROUTE_001")
        message: Human-readable error message
        details: Optional dictionary with additional context
        http_status: HTTP status code used by the API layer
    """

    HTTP_STATUS_MAP: Dict[ErrorCode, int] = {
        # Validation rejections
        ErrorCode.PATH_UNSAFE: 400,
        ErrorCode.ROUTE_METHOD_INVALID: 400,
        ErrorCode.ROUTE_PATH_INVALID: 400,
        ErrorCode.ROUTE_FILE_INVALID: 400,
        ErrorCode.ENDPOINT_INVALID: 400,
        ErrorCode.FORM_FIELD_MISSING: 400,
        ErrorCode.UPLOAD_EMPTY: 400,

        # Not found
        ErrorCode.ROUTE_NOT_FOUND: 404,
        ErrorCode.CONTENT_NOT_FOUND: 404,

        # Persistence failures
        ErrorCode.CONFIG_WRITE_FAILED: 500,
        ErrorCode.CONTENT_READ_FAILED: 500,
        ErrorCode.CONTENT_WRITE_FAILED: 500,

        ErrorCode.SYSTEM_INTERNAL_ERROR: 500,
    }

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        http_status: Optional[int] = None
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        self.http_status = http_status or self.HTTP_STATUS_MAP.get(code, 500)

        super().__init__(f"[{code.value}] {message}")

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.http_status < 500

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for JSON serialization."""
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
            "http_status": self.http_status
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)


__all__ = ["ErrorCode", "StubError"]
