"""Mapping from canonical protobuf type names to TypeScript types."""

from dataclasses import dataclass
from typing import Literal

from caseconverter import camelcase, pascalcase

from proto2fetch.parser.models import ProtoField

DateType = Literal["Date", "string"]
BigintType = Literal["bigint", "string"]

SCALAR_TYPES = {
    "string": "string",
    "bool": "boolean",
    "boolean": "boolean",
    "int32": "number",
    "uint32": "number",
    "float": "number",
    "double": "number",
    "bytes": "Uint8Array",
}

INT64_TYPES = frozenset({"int64", "uint64"})

TIMESTAMP_TYPE = "Timestamp"

WELL_KNOWN_TYPES = {
    "google.protobuf.Duration": "string",
    "google.protobuf.FieldMask": "string",
    "google.protobuf.Struct": "Record<string, unknown>",
    "google.protobuf.Any": "Record<string, unknown>",
    "google.protobuf.Value": "unknown",
    "google.protobuf.ListValue": "unknown[]",
}


@dataclass(frozen=True)
class TypeMappingOptions:
    date_as_string: bool = False
    bigint_as_string: bool = False

    @classmethod
    def from_policies(cls, date_type: DateType = "Date", bigint_type: BigintType = "bigint") -> "TypeMappingOptions":
        return cls(date_as_string=date_type == "string", bigint_as_string=bigint_type == "string")

    @property
    def date_type(self) -> str:
        return "string" if self.date_as_string else "Date"

    @property
    def bigint_type(self) -> str:
        return "string" if self.bigint_as_string else "bigint"


def map_type(type_name: str, repeated: bool = False, options: TypeMappingOptions | None = None) -> str:
    """
    Map a canonical protobuf type name to a TypeScript type.

    Message and enum references pass through unchanged.

    Args:
        type_name: Canonical type name as produced by the parser
        repeated: Wrap the result as an array type
        options: Date and 64-bit integer policies

    Returns:
        str: The TypeScript type expression
    """
    options = options or TypeMappingOptions()

    if type_name in SCALAR_TYPES:
        ts_type = SCALAR_TYPES[type_name]
    elif type_name in INT64_TYPES:
        ts_type = options.bigint_type
    elif type_name == TIMESTAMP_TYPE:
        ts_type = options.date_type
    else:
        ts_type = WELL_KNOWN_TYPES.get(type_name, type_name)

    return f"{ts_type}[]" if repeated else ts_type


def map_field_type(field: ProtoField, options: TypeMappingOptions | None = None) -> str:
    """TypeScript type of a field, with map fields rendered as records."""
    if field.is_map:
        return f"Record<string, {map_type(field.type_name, False, options)}>"
    return map_type(field.type_name, field.repeated, options)


def to_camel_case(name: str) -> str:
    """Convert a snake_case (or PascalCase) identifier to camelCase."""
    return camelcase(name)


def to_pascal_case(name: str) -> str:
    return pascalcase(name)
