"""Error raised by the runtime client for every failed request."""

from collections.abc import Mapping, Sequence
from typing import Any

TIMEOUT = "TIMEOUT"
NETWORK_ERROR = "NETWORK_ERROR"
HTTP_ERROR = "HTTP_ERROR"
UNKNOWN_ERROR = "UNKNOWN_ERROR"
AUTH_ERROR = "AUTH_ERROR"
AUTHZ_ERROR = "AUTHZ_ERROR"
VALIDATION_ERROR = "VALIDATION_ERROR"
NOT_FOUND = "NOT_FOUND"

USER_MESSAGES = {
    400: "Invalid request. Please check your input.",
    401: "Authentication required. Please log in.",
    403: "Access denied. You do not have permission to perform this action.",
    404: "The requested resource was not found.",
    408: "Request timed out. Please try again.",
    429: "Too many requests. Please try again later.",
    500: "Internal server error. Please try again later.",
    502: "Bad gateway. The server is temporarily unavailable.",
    503: "Service unavailable. Please try again later.",
    504: "Gateway timeout. The server took too long to respond.",
}


class APIError(Exception):
    """
    A failed API call.

    Args:
        status: HTTP status code, 0 for network failures
        code: Machine-readable error code
        message: Human-readable message
        details: Field-level error details, each with ``field`` and ``message``
    """

    def __init__(
        self,
        status: int,
        code: str,
        message: str,
        details: Sequence[Mapping[str, Any]] | None = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.code = code
        self.message = message
        self.details: list[dict[str, Any]] = [dict(detail) for detail in details or []]

    def __repr__(self) -> str:
        return f"APIError(status={self.status}, code={self.code!r}, message={self.message!r})"

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status < 500

    @property
    def is_server_error(self) -> bool:
        return 500 <= self.status < 600

    @property
    def is_network_error(self) -> bool:
        return self.status == 0

    @property
    def is_timeout_error(self) -> bool:
        return self.code == TIMEOUT

    @property
    def is_auth_error(self) -> bool:
        return self.status == 401 or self.code == AUTH_ERROR

    @property
    def is_authz_error(self) -> bool:
        return self.status == 403 or self.code == AUTHZ_ERROR

    @property
    def is_validation_error(self) -> bool:
        return self.status == 400 or self.code == VALIDATION_ERROR

    @property
    def is_not_found_error(self) -> bool:
        return self.status == 404 or self.code == NOT_FOUND

    def get_field_errors(self) -> dict[str, list[str]]:
        """All detail messages grouped by field."""
        field_errors: dict[str, list[str]] = {}
        for detail in self.details:
            field_errors.setdefault(str(detail.get("field", "")), []).append(str(detail.get("message", "")))
        return field_errors

    def get_field_error(self, field_name: str) -> str | None:
        for detail in self.details:
            if detail.get("field") == field_name:
                return str(detail.get("message", ""))
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": "APIError",
            "message": self.message,
            "status": self.status,
            "code": self.code,
            "details": self.details,
        }

    def to_user_message(self) -> str:
        if self.status in USER_MESSAGES:
            return USER_MESSAGES[self.status]
        if self.is_network_error:
            return "Network error. Please check your connection and try again."
        return self.message or "An unexpected error occurred."

    @classmethod
    def auth_error(cls, message: str = "Authentication required") -> "APIError":
        return cls(401, AUTH_ERROR, message)

    @classmethod
    def timeout_error(cls, message: str = "Request timed out") -> "APIError":
        return cls(408, TIMEOUT, message)

    @classmethod
    def network_error(cls, message: str = "Network request failed") -> "APIError":
        return cls(0, NETWORK_ERROR, message)
