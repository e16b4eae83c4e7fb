"""Extract services, messages and enums from compiled .proto descriptors."""

from collections.abc import Sequence
from pathlib import Path
from typing import Any

from google.protobuf import descriptor_pb2, descriptor_pool, json_format, message_factory

from proto2fetch import log
from proto2fetch.parser.http_binding import resolve_http_binding, resolve_openapi_operation
from proto2fetch.parser.loader import SchemaLoader, find_proto_files
from proto2fetch.parser.models import (
    ParsedSchema,
    ProtoEnum,
    ProtoField,
    ProtoMessage,
    ProtoMethod,
    ProtoService,
    SchemaFile,
)

FieldDescriptor = descriptor_pb2.FieldDescriptorProto

SCALAR_TYPE_NAMES = {
    FieldDescriptor.TYPE_DOUBLE: "double",
    FieldDescriptor.TYPE_FLOAT: "float",
    FieldDescriptor.TYPE_INT64: "int64",
    FieldDescriptor.TYPE_UINT64: "uint64",
    FieldDescriptor.TYPE_INT32: "int32",
    FieldDescriptor.TYPE_FIXED64: "uint64",
    FieldDescriptor.TYPE_FIXED32: "uint32",
    FieldDescriptor.TYPE_BOOL: "boolean",
    FieldDescriptor.TYPE_STRING: "string",
    FieldDescriptor.TYPE_BYTES: "bytes",
    FieldDescriptor.TYPE_UINT32: "uint32",
    FieldDescriptor.TYPE_SFIXED32: "int32",
    FieldDescriptor.TYPE_SFIXED64: "int64",
    FieldDescriptor.TYPE_SINT32: "int32",
    FieldDescriptor.TYPE_SINT64: "int64",
}

# google.protobuf wrapper messages carry a single nullable scalar.
WRAPPER_TYPE_NAMES = {
    "google.protobuf.DoubleValue": "double",
    "google.protobuf.FloatValue": "float",
    "google.protobuf.Int64Value": "int64",
    "google.protobuf.UInt64Value": "uint64",
    "google.protobuf.Int32Value": "int32",
    "google.protobuf.UInt32Value": "uint32",
    "google.protobuf.BoolValue": "boolean",
    "google.protobuf.StringValue": "string",
    "google.protobuf.BytesValue": "bytes",
}

# Well-known messages with a fixed TypeScript shape keep their qualified name.
QUALIFIED_WELL_KNOWN_TYPES = frozenset(
    {
        "google.protobuf.Duration",
        "google.protobuf.FieldMask",
        "google.protobuf.Struct",
        "google.protobuf.Any",
        "google.protobuf.Value",
        "google.protobuf.ListValue",
    }
)

# Source code info path components, see descriptor.proto.
FILE_MESSAGE_TYPE = 4
FILE_ENUM_TYPE = 5
FILE_SERVICE = 6
MESSAGE_FIELD = 2
MESSAGE_NESTED_TYPE = 3
MESSAGE_ENUM_TYPE = 4
SERVICE_METHOD = 2

SCHEMA_TITLE = "Generated API Client"
SCHEMA_VERSION = "1.0.0"
SCHEMA_DESCRIPTION = "TypeScript API client generated from protobuf definitions"


def simple_name(type_name: str) -> str:
    """Last segment of a (possibly fully qualified) type name."""
    return type_name.rsplit(".", 1)[-1]


def clean_comment(comment: str) -> str | None:
    lines = [line.strip() for line in comment.strip().splitlines()]
    text = "\n".join(line for line in lines if line)
    return text or None


class OptionsDecoder:
    """
    Decode option messages against every file compiled alongside a schema.

    Options are re-parsed with a message class from a private descriptor pool, so
    any custom extension whose definition could be loaded (google.api.http, the
    OpenAPI operation annotation, ...) shows up in the decoded mapping.
    """

    def __init__(self, descriptor_set: descriptor_pb2.FileDescriptorSet | None = None) -> None:
        self.pool = descriptor_pool.DescriptorPool()
        self.pool.AddSerializedFile(descriptor_pb2.DESCRIPTOR.serialized_pb)

        file_names: list[str] = []
        if descriptor_set is not None:
            for file_descriptor in descriptor_set.file:
                if file_descriptor.name != descriptor_pb2.DESCRIPTOR.name:
                    self.pool.AddSerializedFile(file_descriptor.SerializeToString())
                    file_names.append(file_descriptor.name)

        # Building the classes registers every extension with the class it extends.
        message_factory.GetMessageClassesForFiles(file_names, self.pool)

        method_options = self.pool.FindMessageTypeByName("google.protobuf.MethodOptions")
        self.method_options_class = message_factory.GetMessageClass(method_options)

    def method_options(self, options: descriptor_pb2.MethodOptions) -> dict[str, Any]:
        decoded = self.method_options_class.FromString(options.SerializeToString())
        return json_format.MessageToDict(decoded, descriptor_pool=self.pool)


class DescriptorExtractor:
    """Turns one FileDescriptorProto into a SchemaFile."""

    def __init__(
        self,
        file_descriptor: descriptor_pb2.FileDescriptorProto,
        options_decoder: OptionsDecoder | None = None,
    ) -> None:
        self.file_descriptor = file_descriptor
        self.options_decoder = options_decoder or OptionsDecoder()
        self.proto2 = file_descriptor.syntax in ("", "proto2")
        self.comments = self._index_comments(file_descriptor)

    @staticmethod
    def _index_comments(file_descriptor: descriptor_pb2.FileDescriptorProto) -> dict[tuple[int, ...], str]:
        comments: dict[tuple[int, ...], str] = {}
        for location in file_descriptor.source_code_info.location:
            comment = clean_comment(location.leading_comments) or clean_comment(location.trailing_comments)
            if comment:
                comments[tuple(location.path)] = comment
        return comments

    def extract(self, imports: Sequence[str] = ()) -> SchemaFile:
        package = self.file_descriptor.package
        scope = f".{package}" if package else ""

        messages: list[ProtoMessage] = []
        enums: list[ProtoEnum] = []

        for index, enum in enumerate(self.file_descriptor.enum_type):
            enums.append(self._extract_enum(enum, (FILE_ENUM_TYPE, index)))

        for index, message in enumerate(self.file_descriptor.message_type):
            self._extract_message(message, (FILE_MESSAGE_TYPE, index), scope, messages, enums)

        services = [
            self._extract_service(service, (FILE_SERVICE, index))
            for index, service in enumerate(self.file_descriptor.service)
        ]

        return SchemaFile(
            package_name=package,
            services=services,
            messages=messages,
            enums=enums,
            imports=list(imports),
        )

    def _extract_service(
        self, service: descriptor_pb2.ServiceDescriptorProto, path: tuple[int, ...]
    ) -> ProtoService:
        methods = [
            self._extract_method(method, (*path, SERVICE_METHOD, index)) for index, method in enumerate(service.method)
        ]
        return ProtoService(name=service.name, methods=methods, description=self.comments.get(path))

    def _extract_method(self, method: descriptor_pb2.MethodDescriptorProto, path: tuple[int, ...]) -> ProtoMethod:
        options = self.options_decoder.method_options(method.options) if method.HasField("options") else {}
        binding = resolve_http_binding(method.name, options)
        operation = resolve_openapi_operation(options)

        return ProtoMethod(
            name=method.name,
            input_type_name=simple_name(method.input_type),
            output_type_name=simple_name(method.output_type),
            http_verb=binding.verb,
            http_path=binding.path,
            description=operation.description or self.comments.get(path),
            summary=operation.summary,
            tags=operation.tags,
        )

    def _extract_message(
        self,
        message: descriptor_pb2.DescriptorProto,
        path: tuple[int, ...],
        scope: str,
        messages: list[ProtoMessage],
        enums: list[ProtoEnum],
    ) -> None:
        """Append the message, then its nested messages and enums (map entries excluded)."""
        full_name = f"{scope}.{message.name}"
        map_entries = {
            f"{full_name}.{nested.name}": nested for nested in message.nested_type if nested.options.map_entry
        }

        fields = [
            self._extract_field(field, (*path, MESSAGE_FIELD, index), map_entries)
            for index, field in enumerate(message.field)
        ]
        messages.append(ProtoMessage(name=message.name, fields=fields, description=self.comments.get(path)))

        for index, nested in enumerate(message.nested_type):
            if nested.options.map_entry:
                continue
            self._extract_message(nested, (*path, MESSAGE_NESTED_TYPE, index), full_name, messages, enums)

        for index, enum in enumerate(message.enum_type):
            enums.append(self._extract_enum(enum, (*path, MESSAGE_ENUM_TYPE, index)))

    def _extract_field(
        self,
        field: descriptor_pb2.FieldDescriptorProto,
        path: tuple[int, ...],
        map_entries: dict[str, descriptor_pb2.DescriptorProto],
    ) -> ProtoField:
        description = self.comments.get(path)
        map_entry = map_entries.get(field.type_name) if field.type == FieldDescriptor.TYPE_MESSAGE else None

        if map_entry is not None:
            key_field, value_field = map_entry.field[0], map_entry.field[1]
            value_type, _ = self._field_type(value_field)
            key_type, _ = self._field_type(key_field)
            return ProtoField(
                name=field.name,
                type_name=value_type,
                field_number=field.number,
                description=description,
                map_key_type_name=key_type,
            )

        type_name, is_wrapper = self._field_type(field)
        optional = (
            is_wrapper
            or field.HasField("oneof_index")
            or (self.proto2 and field.label == FieldDescriptor.LABEL_OPTIONAL)
        )
        return ProtoField(
            name=field.name,
            type_name=type_name,
            repeated=field.label == FieldDescriptor.LABEL_REPEATED,
            optional=optional,
            field_number=field.number,
            description=description,
        )

    @staticmethod
    def _field_type(field: descriptor_pb2.FieldDescriptorProto) -> tuple[str, bool]:
        """Canonical type name of a field, and whether it is a wrapper type."""
        if field.type in SCALAR_TYPE_NAMES:
            return SCALAR_TYPE_NAMES[field.type], False

        qualified_name = field.type_name.lstrip(".")
        if qualified_name in WRAPPER_TYPE_NAMES:
            return WRAPPER_TYPE_NAMES[qualified_name], True
        if qualified_name in QUALIFIED_WELL_KNOWN_TYPES:
            return qualified_name, False
        return simple_name(qualified_name), False

    def _extract_enum(self, enum: descriptor_pb2.EnumDescriptorProto, path: tuple[int, ...]) -> ProtoEnum:
        return ProtoEnum(
            name=enum.name,
            values=[value.name for value in enum.value],
            description=self.comments.get(path),
        )


def extract_schema_file(
    file_descriptor: descriptor_pb2.FileDescriptorProto,
    imports: Sequence[str] = (),
    descriptor_set: descriptor_pb2.FileDescriptorSet | None = None,
) -> SchemaFile:
    return DescriptorExtractor(file_descriptor, OptionsDecoder(descriptor_set)).extract(imports)


def schema_metadata(files: Sequence[SchemaFile]) -> dict[str, str | None]:
    """API metadata, present only when at least one file declares a service."""
    if any(schema_file.services for schema_file in files):
        return {"title": SCHEMA_TITLE, "version": SCHEMA_VERSION, "description": SCHEMA_DESCRIPTION}
    return {"title": None, "version": None, "description": None}


class ProtoParser:
    """
    Parse a directory of .proto files into a ParsedSchema.

    A file that fails to load is logged and skipped; it never aborts the scan.
    """

    def __init__(self, include_paths: Sequence[Path] = ()) -> None:
        self.loader = SchemaLoader(include_paths)
        self.skipped_imports: set[str] = set()

    def parse_file(self, path: Path) -> SchemaFile:
        loaded = self.loader.load(Path(path))
        self.skipped_imports.update(loaded.skipped_imports)
        return extract_schema_file(loaded.descriptor, loaded.imports, loaded.descriptor_set)

    def parse_directory(self, root: Path) -> ParsedSchema:
        root = Path(root)
        proto_files = find_proto_files(root)
        if not proto_files:
            log.warning(f"No .proto files found in {root}")

        files: list[SchemaFile] = []
        for path in proto_files:
            log.debug(f"Parsing {path}")
            try:
                files.append(self.parse_file(path))
            except Exception as e:
                log.warning(f"Skipping {path}: {e}")

        log.info(f"Parsed {len(files)} of {len(proto_files)} proto file(s)")
        if self.skipped_imports:
            log.warning(f"Unresolved imports were skipped: {', '.join(sorted(self.skipped_imports))}")
            log.hint("Add the directories holding them with --include-path to keep their annotations")
        return ParsedSchema(files=files, **schema_metadata(files))


def parse_proto_directory(root: Path, include_paths: Sequence[Path] = ()) -> ParsedSchema:
    """
    Parse every .proto file below a directory.

    Args:
        root: Directory to scan recursively
        include_paths: Extra directories searched for imports

    Returns:
        ParsedSchema: The merged schema
    """
    return ProtoParser(include_paths).parse_directory(root)
