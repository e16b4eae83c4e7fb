from proto2fetch.runtime.auth import (
    AuthProvider,
    CustomAuth,
    JWTAuth,
    SimpleAuth,
    get_time_until_expiration,
    get_token_expiration,
    is_token_expired,
    parse_token,
)
from proto2fetch.runtime.client import APIClient, APIClientConfig, RequestHooks, RetryConfig, create_api_client
from proto2fetch.runtime.errors import APIError
from proto2fetch.runtime.search_params import object_to_search_params

__all__ = [
    "APIClient",
    "APIClientConfig",
    "APIError",
    "AuthProvider",
    "CustomAuth",
    "JWTAuth",
    "RequestHooks",
    "RetryConfig",
    "SimpleAuth",
    "create_api_client",
    "get_time_until_expiration",
    "get_token_expiration",
    "is_token_expired",
    "object_to_search_params",
    "parse_token",
]
