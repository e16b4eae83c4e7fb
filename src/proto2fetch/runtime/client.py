"""A ``requests`` based client speaking the same wire conventions as generated clients."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, TypeVar

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from proto2fetch import log
from proto2fetch.runtime.auth import AuthProvider
from proto2fetch.runtime.errors import HTTP_ERROR, UNKNOWN_ERROR, APIError
from proto2fetch.runtime.search_params import SearchParams, object_to_search_params

DEFAULT_TIMEOUT = 10.0
DEFAULT_RETRY_METHODS = ("GET", "PUT", "HEAD", "DELETE", "OPTIONS", "TRACE")
DEFAULT_RETRY_STATUS_CODES = (408, 413, 429, 500, 502, 503, 504)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryConfig:
    limit: int = 2
    methods: tuple[str, ...] = DEFAULT_RETRY_METHODS
    status_codes: tuple[int, ...] = DEFAULT_RETRY_STATUS_CODES
    backoff_factor: float = 0.3


@dataclass
class RequestHooks:
    """
    Callbacks run around every request, in list order.

    A hook returning ``None`` keeps the object it was given.

    Args:
        before_request: Receive the outgoing ``requests.Request`` before it is sent
        after_response: Receive every response before its status is checked
        before_error: Receive the ``APIError`` built from an HTTP error response
    """

    before_request: list[Callable[[requests.Request], requests.Request | None]] = field(default_factory=list)
    after_response: list[Callable[[requests.Response], requests.Response | None]] = field(default_factory=list)
    before_error: list[Callable[[APIError], APIError | None]] = field(default_factory=list)


def run_hooks(hooks: list[Callable[[T], T | None]], value: T) -> T:
    for hook in hooks:
        result = hook(value)
        if result is not None:
            value = result
    return value


@dataclass
class APIClientConfig:
    """
    Runtime client settings.

    Args:
        base_url: Prefix for every request path
        timeout: Per-request timeout in seconds
        auth: Strategy producing the auth headers
        headers: Headers sent with every request
        retry: Retry policy; ``None`` disables retries
        debug: Log every request at DEBUG level
        hooks: Callbacks run around every request
    """

    base_url: str
    timeout: float = DEFAULT_TIMEOUT
    auth: AuthProvider | None = None
    headers: dict[str, str] = field(default_factory=dict)
    retry: RetryConfig | None = None
    debug: bool = False
    hooks: RequestHooks = field(default_factory=RequestHooks)


class APIClient:
    def __init__(self, config: APIClientConfig, session: requests.Session | None = None) -> None:
        self.config = config
        self.session = session or self._create_session(config)

    @staticmethod
    def _create_session(config: APIClientConfig) -> requests.Session:
        session = requests.Session()
        if config.retry is not None:
            retries = Retry(
                total=config.retry.limit,
                backoff_factor=config.retry.backoff_factor,
                status_forcelist=config.retry.status_codes,
                allowed_methods=frozenset(method.upper() for method in config.retry.methods),
                raise_on_status=False,
            )
            adapter = HTTPAdapter(max_retries=retries)
            session.mount("http://", adapter)
            session.mount("https://", adapter)
        return session

    def object_to_search_params(self, obj: Mapping[str, Any]) -> SearchParams:
        return object_to_search_params(obj)

    def build_url(self, path: str, path_params: Mapping[str, Any] | None = None) -> str:
        for key, value in (path_params or {}).items():
            path = path.replace(f"{{{key}}}", str(value))
        return f"{self.config.base_url.rstrip('/')}/{path.lstrip('/')}"

    def request(
        self,
        method: str,
        path: str,
        data: Any = None,
        *,
        search_params: SearchParams | Mapping[str, Any] | None = None,
        path_params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        skip_auth: bool = False,
    ) -> Any:
        """
        Send one request and decode the JSON response.

        Args:
            method: HTTP verb
            path: Path relative to the base URL, may contain ``{param}`` placeholders
            data: JSON body, ignored for GET
            search_params: Query parameters
            path_params: Values substituted into the path placeholders
            headers: Extra headers for this request
            skip_auth: Do not add the auth headers

        Returns:
            Any: The decoded JSON body, or None for an empty response

        Raises:
            APIError: For HTTP errors, timeouts, network failures and auth failures
        """
        method = method.upper()
        url = self.build_url(path, path_params)

        request_headers = dict(self.config.headers)
        if not skip_auth and self.config.auth is not None:
            request_headers.update(self.config.auth.get_auth_headers())
        request_headers.update(headers or {})

        if isinstance(search_params, Mapping):
            search_params = object_to_search_params(search_params)

        outgoing = requests.Request(
            method,
            url,
            headers=request_headers,
            json=data if data is not None and method != "GET" else None,
            params=search_params or None,
        )
        outgoing = run_hooks(self.config.hooks.before_request, outgoing)

        if self.config.debug:
            log.debug(f"{outgoing.method} {outgoing.url}")

        try:
            response = self.session.request(
                outgoing.method,
                outgoing.url,
                params=outgoing.params or None,
                json=outgoing.json,
                headers=outgoing.headers,
                timeout=self.config.timeout,
            )
            response = run_hooks(self.config.hooks.after_response, response)
            response.raise_for_status()
        except requests.HTTPError as e:
            raise run_hooks(self.config.hooks.before_error, self._http_error(e.response)) from e
        except requests.Timeout as e:
            raise APIError.timeout_error() from e
        except requests.ConnectionError as e:
            raise APIError.network_error() from e
        except requests.RequestException as e:
            raise APIError(500, UNKNOWN_ERROR, str(e) or "An unknown error occurred") from e

        if not response.content:
            return None
        return response.json()

    @staticmethod
    def _http_error(response: requests.Response) -> APIError:
        try:
            body = response.json()
        except ValueError:
            body = None

        if not isinstance(body, dict):
            return APIError(response.status_code, HTTP_ERROR, f"HTTP {response.status_code}: {response.reason}")

        code = body.get("code")
        return APIError(
            response.status_code,
            str(code) if code is not None else HTTP_ERROR,
            body.get("message") or f"HTTP {response.status_code}: {response.reason}",
            body.get("details") or [],
        )


def create_api_client(config: APIClientConfig) -> APIClient:
    return APIClient(config)
