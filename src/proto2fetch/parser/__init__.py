from proto2fetch.parser.models import (
    HttpVerb,
    ParsedSchema,
    ProtoEnum,
    ProtoField,
    ProtoMessage,
    ProtoMethod,
    ProtoService,
    SchemaFile,
)
from proto2fetch.parser.parser import ProtoParser, parse_proto_directory

__all__ = [
    "HttpVerb",
    "ParsedSchema",
    "ProtoEnum",
    "ProtoField",
    "ProtoMessage",
    "ProtoMethod",
    "ProtoService",
    "ProtoParser",
    "SchemaFile",
    "parse_proto_directory",
]
