"""Generate the ``client.ts`` module: one client class covering every service."""

import re
from dataclasses import dataclass, field

from proto2fetch import log
from proto2fetch.errors import MethodNameCollisionError
from proto2fetch.generators.rendering import (
    create_template_environment,
    doc_lines,
    ts_string_literal,
    ts_template_text,
)
from proto2fetch.generators.type_mapping import to_camel_case
from proto2fetch.generators.types import FILTER_MARKER, SORT_MARKER, unique_messages_containing
from proto2fetch.parser.models import ParsedSchema, ProtoMethod, ProtoService

PATH_PARAM_PATTERN = re.compile(r"\{([^}]+)\}")

EMPTY_TYPE = "Empty"

RUNTIME_ORIGIN = "`${typeof window !== 'undefined' ? window.location.origin : 'http://localhost:3000'}`"


@dataclass
class ClientMethod:
    name: str
    parameters: str
    output_type: str
    body: list[str]
    doc: list[str] = field(default_factory=list)


@dataclass
class MethodGroup:
    comment: str | None
    methods: list[ClientMethod]


@dataclass
class BuilderHelper:
    entity: str
    builder: str


def extract_path_params(path: str) -> list[str]:
    """
    Field paths referenced by ``{...}`` placeholders of an HTTP path template.

    A placeholder may carry a segment pattern (``{name=projects/*}``); only the
    field path before ``=`` is returned.
    """
    return [match.group(1).split("=", 1)[0].strip() for match in PATH_PARAM_PATTERN.finditer(path)]


def param_expression(param: str) -> str:
    return ".".join(to_camel_case(segment) for segment in param.split("."))


def substitute_path_params(path: str) -> str:
    """Rewrite ``{param}`` placeholders as ``${request.<param>}`` template expressions."""
    return PATH_PARAM_PATTERN.sub(
        lambda match: f"${{request.{param_expression(match.group(1).split('=', 1)[0].strip())}}}",
        ts_template_text(path),
    )


def binding_key(method: ProtoMethod) -> tuple[str, str, str, str]:
    return (method.input_type_name, method.output_type_name, method.http_verb, method.http_path)


class APIClientGenerator:
    """
    Renders the client class and its helper functions.

    Args:
        client_name: Name of the generated class
        base_url: Default base URL; the runtime origin is used when empty
        include_comments: Emit JSDoc for the class and its methods
        filter_builders: Emit ``create<Entity>Filter()`` helpers
        sort_builders: Emit ``create<Entity>Sort()`` helpers
    """

    def __init__(
        self,
        client_name: str = "APIClient",
        base_url: str | None = None,
        include_comments: bool = True,
        filter_builders: bool = True,
        sort_builders: bool = True,
    ) -> None:
        self.client_name = client_name
        self.base_url = base_url.strip() if base_url else ""
        self.include_comments = include_comments
        self.filter_builders = filter_builders
        self.sort_builders = sort_builders
        self.env = create_template_environment()

    def generate_client(self, schema: ParsedSchema) -> str:
        """
        Render the client class.

        Raises:
            MethodNameCollisionError: If two services bind the same method name differently
        """
        groups = self._build_groups(schema.services)
        default_base_url = ts_string_literal(self.base_url) if self.base_url else RUNTIME_ORIGIN

        template = self.env.get_template("client.ts.j2")
        return template.render(
            client_name=self.client_name,
            default_base_url=default_base_url,
            include_comments=self.include_comments,
            groups=groups,
        )

    def _build_groups(self, services: list[ProtoService]) -> list[MethodGroup]:
        owners: dict[str, tuple[str, tuple[str, str, str, str]]] = {}
        groups: list[MethodGroup] = []

        for service in services:
            methods: list[ClientMethod] = []
            for method in service.methods:
                name = to_camel_case(method.name)
                key = binding_key(method)

                if name in owners:
                    owner, owner_key = owners[name]
                    if owner_key != key:
                        raise MethodNameCollisionError(name, owner, service.name)
                    log.debug(f"Method '{name}' of {service.name} duplicates {owner}, skipping")
                    continue

                owners[name] = (service.name, key)
                methods.append(self._build_method(name, method))

            comment = service.description.splitlines()[0] if self.include_comments and service.description else None
            groups.append(MethodGroup(comment=comment, methods=methods))

        return groups

    def _build_method(self, name: str, method: ProtoMethod) -> ClientMethod:
        path_params = extract_path_params(method.http_path)
        output_type = method.output_type_name
        verb = method.http_verb

        if path_params:
            body = [f"const path = `{substitute_path_params(method.http_path)}`;"]
        else:
            body = [f"const path = {ts_string_literal(method.http_path)};"]

        # Only top-level fields can be destructured out of the request.
        destructured = list(dict.fromkeys(param_expression(param) for param in path_params if "." not in param))
        call = f"return this.client.request<Types.{output_type}>('{verb}', path"

        if verb == "GET" and method.input_type_name == EMPTY_TYPE:
            parameters = "options?: RequestOptions"
            body.append(f"{call}, undefined, options);")
        else:
            parameters = f"request: Types.{method.input_type_name}, options?: RequestOptions"
            if verb == "GET":
                query = "request"
                if destructured:
                    body.append(f"const {{ {', '.join(destructured)}, ...query }} = request;")
                    query = "query"
                body.append(f"const searchParams = this.client.objectToSearchParams({query});")
                body.extend([f"{call}, undefined, {{", "  searchParams,", "  ...options", "});"])
            elif destructured:
                body.append(f"const {{ {', '.join(destructured)}, ...body }} = request;")
                body.append(f"{call}, body, options);")
            else:
                body.append(f"{call}, request, options);")

        return ClientMethod(
            name=name,
            parameters=parameters,
            output_type=output_type,
            body=body,
            doc=self._method_doc(method),
        )

    def _method_doc(self, method: ProtoMethod) -> list[str]:
        if not self.include_comments:
            return []
        doc = doc_lines(method.description)
        if method.summary:
            doc.append(f"@summary {method.summary}")
        if method.tags:
            doc.append(f"@tags {', '.join(method.tags)}")
        return doc

    def generate_helper_methods(self, schema: ParsedSchema) -> str:
        """Render pagination helpers and the filter/sort builder factories."""
        filter_helpers = None
        if self.filter_builders:
            filter_helpers = [
                BuilderHelper(entity=message.name.replace(FILTER_MARKER, "", 1), builder=f"{message.name}Builder")
                for message in unique_messages_containing(schema.messages, FILTER_MARKER)
            ]

        sort_helpers = None
        if self.sort_builders:
            sort_helpers = [
                BuilderHelper(entity=message.name.replace(SORT_MARKER, "", 1), builder=f"{message.name}Builder")
                for message in unique_messages_containing(schema.messages, SORT_MARKER)
            ]

        template = self.env.get_template("helpers.ts.j2")
        return template.render(filter_helpers=filter_helpers, sort_helpers=sort_helpers)


def transform(
    schema: ParsedSchema,
    client_name: str = "APIClient",
    base_url: str | None = None,
    include_comments: bool = True,
    filter_builders: bool = True,
    sort_builders: bool = True,
) -> str:
    """
    Render the complete ``client.ts`` source.

    Args:
        schema: The parsed schema
        client_name: Name of the generated class
        base_url: Default base URL baked into the constructor
        include_comments: Emit JSDoc
        filter_builders: Emit filter builder factories
        sort_builders: Emit sort builder factories

    Returns:
        str: TypeScript source text

    Raises:
        MethodNameCollisionError: If two services bind the same method name differently
    """
    log.info(f"Generating {client_name} for {len(schema.services)} services")

    generator = APIClientGenerator(client_name, base_url, include_comments, filter_builders, sort_builders)
    sections = [generator.generate_client(schema), generator.generate_helper_methods(schema)]
    return "\n".join(section.rstrip("\n") + "\n" for section in sections)


def translate_to_client(
    schema: ParsedSchema,
    client_name: str = "APIClient",
    base_url: str | None = None,
    include_comments: bool = True,
    filter_builders: bool = True,
    sort_builders: bool = True,
) -> str:
    return transform(schema, client_name, base_url, include_comments, filter_builders, sort_builders)
