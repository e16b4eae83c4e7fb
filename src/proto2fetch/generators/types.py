"""Generate the ``types.ts`` module: interfaces, enums, utility types and builders."""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from proto2fetch import log
from proto2fetch.generators.rendering import create_template_environment, doc_lines
from proto2fetch.generators.type_mapping import (
    TIMESTAMP_TYPE,
    TypeMappingOptions,
    map_field_type,
    to_camel_case,
    to_pascal_case,
)
from proto2fetch.parser.models import ParsedSchema, ProtoEnum, ProtoMessage

FILTER_MARKER = "Filter"
SORT_MARKER = "Sort"

FILTER_SUFFIXES = ("Like", "After", "Before")

SORT_ENTRY_TYPE = "SortDirection"
INLINE_SORT_LIST_TYPE = "Array<{ field: string; direction: 'asc' | 'desc' }>"

# Sort fields offered when a Sort message declares none of its own.
FALLBACK_SORT_FIELDS = ("id", "name", "created_at", "updated_at", "email", "phone")


@dataclass
class TsProperty:
    name: str
    type: str
    optional: bool
    doc: list[str] = field(default_factory=list)


@dataclass
class TsInterface:
    name: str
    properties: list[TsProperty]
    doc: list[str] = field(default_factory=list)


@dataclass
class TsEnum:
    name: str
    union: str
    doc: list[str] = field(default_factory=list)


@dataclass
class FilterSetter:
    method: str
    type: str


@dataclass
class FilterBuilder:
    name: str
    target: str
    setters: list[FilterSetter]


@dataclass
class SortMethod:
    name: str
    field: str


@dataclass
class SortBuilder:
    name: str
    methods: list[SortMethod]


def unique_messages_containing(messages: Iterable[ProtoMessage], marker: str) -> list[ProtoMessage]:
    """Messages whose name contains ``marker``, first occurrence of each name only."""
    seen: set[str] = set()
    selected: list[ProtoMessage] = []
    for message in messages:
        if marker in message.name and message.name not in seen:
            seen.add(message.name)
            selected.append(message)
    return selected


def sort_messages_by_dependency(messages: Sequence[ProtoMessage]) -> list[ProtoMessage]:
    """
    Order messages so that each one follows the messages its fields reference.

    Depth-first over field type names; input order is kept wherever the
    dependencies allow it. A cycle is reported and the edge closing it is ignored.

    Args:
        messages: Messages in declaration order

    Returns:
        list[ProtoMessage]: The same messages, one entry per distinct name
    """
    by_name = {message.name: message for message in messages}
    visited: set[str] = set()
    visiting: set[str] = set()
    ordered: list[ProtoMessage] = []

    def visit(message: ProtoMessage) -> None:
        if message.name in visited:
            return
        if message.name in visiting:
            log.warning(f"Circular dependency detected involving {message.name}, keeping best-effort order")
            return

        visiting.add(message.name)
        for message_field in message.fields:
            dependency = by_name.get(message_field.type_name.removesuffix("[]"))
            if dependency is not None and dependency.name not in visited:
                visit(dependency)
        visiting.discard(message.name)

        visited.add(message.name)
        ordered.append(message)

    for message in messages:
        visit(message)

    return ordered


class TypeScriptTypeGenerator:
    """
    Renders message interfaces, enum unions, utility types and filter/sort builders.

    Args:
        options: Date and 64-bit integer mapping policies
        include_comments: Emit descriptions as JSDoc
        filter_builders: Filter builder classes will be emitted alongside the types
        sort_builders: Sort builder classes will be emitted alongside the types
    """

    def __init__(
        self,
        options: TypeMappingOptions | None = None,
        include_comments: bool = True,
        filter_builders: bool = True,
        sort_builders: bool = True,
    ) -> None:
        self.options = options or TypeMappingOptions()
        self.include_comments = include_comments
        self.filter_builders = filter_builders
        self.sort_builders = sort_builders
        self.env = create_template_environment()

    def _doc(self, description: str | None) -> list[str]:
        return doc_lines(description) if self.include_comments else []

    def builder_names(self, messages: Sequence[ProtoMessage]) -> set[str]:
        """Class names taken by the enabled filter and sort builders."""
        names: set[str] = set()
        if self.filter_builders:
            names.update(f"{message.name}Builder" for message in unique_messages_containing(messages, FILTER_MARKER))
        if self.sort_builders:
            names.update(f"{message.name}Builder" for message in unique_messages_containing(messages, SORT_MARKER))
        return names

    def generate_types(self, schema: ParsedSchema) -> str:
        """Render interfaces, enums and the utility types not shadowed by a schema type or builder class."""
        defined: set[str] = set()

        interfaces: list[TsInterface] = []
        for message in sort_messages_by_dependency(schema.messages):
            if message.name in defined:
                continue
            defined.add(message.name)
            interfaces.append(self._build_interface(message))

        enums: list[TsEnum] = []
        for enum in schema.enums:
            if enum.name in defined:
                continue
            defined.add(enum.name)
            enums.append(self._build_enum(enum))

        log.debug(f"Rendering {len(interfaces)} interfaces and {len(enums)} enums")

        template = self.env.get_template("types.ts.j2")
        return template.render(
            interfaces=interfaces,
            enums=enums,
            defined=defined | self.builder_names(schema.messages),
            date_type=self.options.date_type,
        )

    def _build_interface(self, message: ProtoMessage) -> TsInterface:
        properties = [
            TsProperty(
                name=to_camel_case(message_field.name),
                type=map_field_type(message_field, self.options),
                optional=message_field.optional,
                doc=self._doc(message_field.description),
            )
            for message_field in message.fields
        ]
        return TsInterface(name=message.name, properties=properties, doc=self._doc(message.description))

    def _build_enum(self, enum: ProtoEnum) -> TsEnum:
        union = " | ".join(f"'{value}'" for value in enum.values) or "never"
        return TsEnum(name=enum.name, union=union, doc=self._doc(enum.description))

    def generate_filter_builders(self, messages: Sequence[ProtoMessage]) -> str:
        builders = [self._build_filter_builder(message) for message in unique_messages_containing(messages, FILTER_MARKER)]
        return self.env.get_template("filter_builders.ts.j2").render(builders=builders)

    def _build_filter_builder(self, message: ProtoMessage) -> FilterBuilder:
        setters: list[FilterSetter] = []
        generated: set[str] = set()

        def add(method: str, ts_type: str) -> None:
            if method not in generated:
                generated.add(method)
                setters.append(FilterSetter(method=method, type=ts_type))

        for message_field in message.fields:
            name = to_camel_case(message_field.name)
            add(name, map_field_type(message_field, self.options))

            if name.endswith(FILTER_SUFFIXES) or message_field.is_map:
                continue
            if message_field.type_name == "string":
                add(f"{name}Like", "string")
            elif message_field.type_name == TIMESTAMP_TYPE:
                add(f"{name}After", self.options.date_type)
                add(f"{name}Before", self.options.date_type)

        return FilterBuilder(name=f"{message.name}Builder", target=message.name, setters=setters)

    def generate_sort_builders(self, messages: Sequence[ProtoMessage], enums: Sequence[ProtoEnum] = ()) -> str:
        builders = [self._build_sort_builder(message) for message in unique_messages_containing(messages, SORT_MARKER)]
        schema_names = {message.name for message in messages} | {enum.name for enum in enums}
        list_type = INLINE_SORT_LIST_TYPE if SORT_ENTRY_TYPE in schema_names else f"{SORT_ENTRY_TYPE}[]"
        return self.env.get_template("sort_builders.ts.j2").render(builders=builders, list_type=list_type)

    @staticmethod
    def _build_sort_builder(message: ProtoMessage) -> SortBuilder:
        field_names = [message_field.name for message_field in message.fields] or list(FALLBACK_SORT_FIELDS)

        methods: list[SortMethod] = []
        generated: set[str] = set()
        for field_name in field_names:
            method = f"by{to_pascal_case(field_name)}"
            if method not in generated:
                generated.add(method)
                methods.append(SortMethod(name=method, field=field_name))

        return SortBuilder(name=f"{message.name}Builder", methods=methods)


def transform(
    schema: ParsedSchema,
    options: TypeMappingOptions | None = None,
    include_comments: bool = True,
    filter_builders: bool = True,
    sort_builders: bool = True,
) -> str:
    """
    Render the complete ``types.ts`` source.

    Args:
        schema: The parsed schema
        options: Date and 64-bit integer mapping policies
        include_comments: Emit descriptions as JSDoc
        filter_builders: Append filter builder classes
        sort_builders: Append sort builder classes

    Returns:
        str: TypeScript source text
    """
    log.info(f"Generating TypeScript types for {len(schema.messages)} messages")

    generator = TypeScriptTypeGenerator(options, include_comments, filter_builders, sort_builders)
    sections = [generator.generate_types(schema)]
    if filter_builders:
        sections.append(generator.generate_filter_builders(schema.messages))
    if sort_builders:
        sections.append(generator.generate_sort_builders(schema.messages, schema.enums))

    return "\n".join(section.rstrip("\n") + "\n" for section in sections)


def translate_to_types(
    schema: ParsedSchema,
    options: TypeMappingOptions | None = None,
    include_comments: bool = True,
    filter_builders: bool = True,
    sort_builders: bool = True,
) -> str:
    return transform(schema, options, include_comments, filter_builders, sort_builders)
