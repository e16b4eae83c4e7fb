"""Authentication strategies for the runtime client.

A strategy is a stateless object that produces the headers for one request.
Construct one and pass it in ``APIClientConfig.auth``.
"""

import base64
import binascii
import json
import time
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, Protocol, runtime_checkable

from proto2fetch.runtime.errors import APIError


@runtime_checkable
class AuthProvider(Protocol):
    def get_auth_headers(self) -> dict[str, str]: ...


class SimpleAuth:
    """Static token sent as ``Authorization: <token_type> <token>``."""

    def __init__(self, token: str, token_type: str = "Bearer") -> None:
        self.token = token
        self.token_type = token_type

    def get_auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"{self.token_type} {self.token}"}


class CustomAuth:
    """Headers produced by a user callback on every request."""

    def __init__(self, header_provider: Callable[[], dict[str, str]]) -> None:
        self.header_provider = header_provider

    def get_auth_headers(self) -> dict[str, str]:
        return dict(self.header_provider())


class JWTAuth:
    """
    Bearer JWT with an expiry check before each request.

    Args:
        token: The JWT
        on_expired: Called to obtain a fresh token once the current one expired
    """

    def __init__(self, token: str, on_expired: Callable[[], str] | None = None) -> None:
        self.token = token
        self.on_expired = on_expired

    def get_auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._valid_token()}"}

    def _valid_token(self) -> str:
        if is_token_expired(self.token):
            if self.on_expired is None:
                raise APIError.auth_error("JWT token expired and no refresh handler provided")
            self.token = self.on_expired()
        return self.token


def parse_token(token: str) -> dict[str, Any]:
    """
    Decode the payload of a JWT without verifying its signature.

    Raises:
        APIError: If the token is not a well-formed JWT
    """
    parts = token.split(".")
    if len(parts) != 3 or not parts[1]:
        raise APIError.auth_error("Invalid JWT token format")

    payload = parts[1] + "=" * (-len(parts[1]) % 4)
    try:
        decoded = json.loads(base64.urlsafe_b64decode(payload))
    except (binascii.Error, ValueError) as e:
        raise APIError.auth_error("Invalid JWT token format") from e

    if not isinstance(decoded, dict):
        raise APIError.auth_error("Invalid JWT token format")
    return decoded


def _expiration(token: str) -> float | None:
    exp = parse_token(token).get("exp")
    return float(exp) if isinstance(exp, (int, float)) else None


def is_token_expired(token: str) -> bool:
    """A token without ``exp`` never expires; an unparsable one counts as expired."""
    try:
        exp = _expiration(token)
    except APIError:
        return True
    return exp is not None and exp < time.time()


def get_token_expiration(token: str) -> datetime | None:
    try:
        exp = _expiration(token)
    except APIError:
        return None
    return datetime.fromtimestamp(exp, tz=timezone.utc) if exp is not None else None


def get_time_until_expiration(token: str) -> int | None:
    """Seconds until the token expires, never negative."""
    try:
        exp = _expiration(token)
    except APIError:
        return None
    if exp is None:
        return None
    return max(0, int(exp - time.time()))
