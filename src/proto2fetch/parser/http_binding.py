"""Resolve HTTP bindings and OpenAPI operation docs from RPC method options.

Method options arrive as a plain mapping. Depending on how the options were
produced, a custom extension shows up either as one nested object keyed by the
extension name (``{"[google.api.http]": {"get": "/v1/users"}}``) or as
dot-flattened keys (``{"(google.api.http).get": "/v1/users"}``). Both shapes are
accepted.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from proto2fetch.parser.models import HttpVerb

HTTP_EXTENSION = "google.api.http"
OPENAPI_OPERATION_EXTENSION = "grpc.gateway.protoc_gen_openapiv2.options.openapiv2_operation"

# Lookup order when a rule (incorrectly) carries more than one verb.
HTTP_VERBS: tuple[HttpVerb, ...] = ("GET", "POST", "PUT", "DELETE", "PATCH")

DEFAULT_HTTP_VERB: HttpVerb = "POST"

OptionLookup = Callable[[Mapping[str, Any], str], dict[str, Any] | None]


@dataclass(frozen=True)
class HttpBinding:
    verb: HttpVerb
    path: str


@dataclass(frozen=True)
class OpenApiOperation:
    description: str | None = None
    summary: str | None = None
    tags: list[str] = field(default_factory=list)


def default_http_binding(method_name: str) -> HttpBinding:
    """The binding applied to methods without an HTTP annotation."""
    return HttpBinding(verb=DEFAULT_HTTP_VERB, path=f"/{method_name}")


def lookup_nested_option(options: Mapping[str, Any], extension: str) -> dict[str, Any] | None:
    """Strategy A: the extension is a single key holding an object."""
    for key in (f"[{extension}]", f"({extension})", extension):
        value = options.get(key)
        if isinstance(value, Mapping) and value:
            return dict(value)
    return None


def lookup_flattened_option(options: Mapping[str, Any], extension: str) -> dict[str, Any] | None:
    """Strategy B: the extension is spread over ``(extension).key`` entries."""
    prefix = f"({extension})."
    flattened = {key[len(prefix) :]: value for key, value in options.items() if key.startswith(prefix)}
    return flattened or None


OPTION_LOOKUP_STRATEGIES: tuple[OptionLookup, ...] = (lookup_nested_option, lookup_flattened_option)


def find_extension_option(options: Mapping[str, Any] | None, extension: str) -> dict[str, Any] | None:
    """Return the value of a custom option, trying each lookup strategy in turn."""
    if not options:
        return None
    for strategy in OPTION_LOOKUP_STRATEGIES:
        value = strategy(options, extension)
        if value is not None:
            return value
    return None


def resolve_http_binding(method_name: str, options: Mapping[str, Any] | None) -> HttpBinding:
    """Extract the HTTP verb and path of a method, falling back to POST /<method_name>."""
    http_rule = find_extension_option(options, HTTP_EXTENSION)
    if http_rule:
        for verb in HTTP_VERBS:
            path = http_rule.get(verb.lower())
            if isinstance(path, str) and path:
                return HttpBinding(verb=verb, path=path)

    return default_http_binding(method_name)


def resolve_openapi_operation(options: Mapping[str, Any] | None) -> OpenApiOperation:
    operation = find_extension_option(options, OPENAPI_OPERATION_EXTENSION)
    if not operation:
        return OpenApiOperation()

    tags = operation.get("tags") or []
    if isinstance(tags, str):
        tags = [tags]

    return OpenApiOperation(
        description=operation.get("description") or None,
        summary=operation.get("summary") or None,
        tags=[str(tag) for tag in tags],
    )
