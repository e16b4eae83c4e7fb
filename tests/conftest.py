from pathlib import Path
from typing import Any

import pytest
from hypothesis import strategies as st

from proto2fetch.parser import ParsedSchema, parse_proto_directory
from proto2fetch.parser.models import (
    ProtoEnum,
    ProtoField,
    ProtoMessage,
    ProtoMethod,
    ProtoService,
    SchemaFile,
)


class TestSchemaData:
    TESTS_DATA_DIR: Path = Path(__file__).parent / "data"

    PROTOS_DIR: Path = TESTS_DATA_DIR / "protos"
    USER_SERVICE: Path = PROTOS_DIR / "user_service.proto"
    ORDER_SERVICE: Path = PROTOS_DIR / "order_service.proto"
    COMMON: Path = PROTOS_DIR / "common.proto"

    BROKEN_DIR: Path = TESTS_DATA_DIR / "broken"
    NO_SERVICES_DIR: Path = TESTS_DATA_DIR / "no_services"
    LEGACY: Path = TESTS_DATA_DIR / "legacy.proto"
    SETTINGS: Path = TESTS_DATA_DIR / "settings.proto"

    # Trimmed copies of vendor annotation definitions
    GOOGLEAPIS_DIR: Path = TESTS_DATA_DIR / "googleapis"
    OPENAPIV2_DIR: Path = TESTS_DATA_DIR / "openapiv2"


@pytest.fixture(scope="module")
def include_paths() -> list[Path]:
    assert TestSchemaData.GOOGLEAPIS_DIR.exists(), f"Missing include dir: {TestSchemaData.GOOGLEAPIS_DIR}"
    assert TestSchemaData.OPENAPIV2_DIR.exists(), f"Missing include dir: {TestSchemaData.OPENAPIV2_DIR}"
    return [TestSchemaData.GOOGLEAPIS_DIR, TestSchemaData.OPENAPIV2_DIR]


@pytest.fixture(scope="module")
def parsed_schema(include_paths: list[Path]) -> ParsedSchema:
    return parse_proto_directory(TestSchemaData.PROTOS_DIR, [*include_paths, TestSchemaData.PROTOS_DIR])


def make_field(name: str, type_name: str = "string", number: int = 1, **kwargs: Any) -> ProtoField:
    return ProtoField(name=name, type_name=type_name, field_number=number, **kwargs)


def make_message(name: str, *fields: ProtoField, description: str | None = None) -> ProtoMessage:
    return ProtoMessage(name=name, fields=list(fields), description=description)


def make_method(
    name: str,
    input_type: str,
    output_type: str,
    verb: str = "POST",
    path: str | None = None,
    **kwargs: Any,
) -> ProtoMethod:
    return ProtoMethod(
        name=name,
        input_type_name=input_type,
        output_type_name=output_type,
        http_verb=verb,
        http_path=path or f"/{name}",
        **kwargs,
    )


def make_schema(
    messages: list[ProtoMessage] | None = None,
    services: list[ProtoService] | None = None,
    enums: list[ProtoEnum] | None = None,
) -> ParsedSchema:
    schema_file = SchemaFile(
        package_name="test.v1",
        messages=messages or [],
        services=services or [],
        enums=enums or [],
    )
    return ParsedSchema(files=[schema_file])


# snake_case identifiers made of words with at least two letters
snake_case_identifiers = st.from_regex(r"[a-z]{2,8}(_[a-z]{2,8}){0,3}", fullmatch=True)


@st.composite
def scalar_fields(draw: st.DrawFn) -> ProtoField:
    return make_field(
        draw(snake_case_identifiers),
        draw(st.sampled_from(["string", "boolean", "int32", "uint32", "float", "double", "bytes", "int64", "uint64"])),
        draw(st.integers(min_value=1, max_value=536870911)),
        repeated=draw(st.booleans()),
        optional=draw(st.booleans()),
    )
