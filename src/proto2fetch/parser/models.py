"""Pydantic models for the parsed protobuf schema."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field

HttpVerb = Literal["GET", "POST", "PUT", "DELETE", "PATCH"]


class SchemaModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class ProtoField(SchemaModel):
    """A message field with its type normalized to a canonical name."""

    name: str
    type_name: str
    repeated: bool = False
    optional: bool = False
    field_number: int = Field(ge=1)
    description: str | None = None
    map_key_type_name: str | None = None

    @property
    def is_map(self) -> bool:
        return self.map_key_type_name is not None


class ProtoMessage(SchemaModel):
    """A message type.

    ``is_request`` and ``is_response`` are naming heuristics (the name ends with
    ``Request``/``Response``); the schema itself carries no such role.
    """

    name: str
    fields: list[ProtoField] = Field(default_factory=list)
    description: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_request(self) -> bool:
        return self.name.endswith("Request")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_response(self) -> bool:
        return self.name.endswith("Response")


class ProtoEnum(SchemaModel):
    """An enum type, kept by value name only."""

    name: str
    values: list[str] = Field(default_factory=list)
    description: str | None = None


class ProtoMethod(SchemaModel):
    """An RPC method and its HTTP binding.

    When the source method carries no HTTP annotation, ``http_verb`` is POST and
    ``http_path`` is ``/<name>``. That is a generator policy, not a schema fact.
    """

    name: str
    input_type_name: str
    output_type_name: str
    http_verb: HttpVerb = "POST"
    http_path: str
    description: str | None = None
    summary: str | None = None
    tags: list[str] = Field(default_factory=list)


class ProtoService(SchemaModel):
    name: str
    methods: list[ProtoMethod] = Field(default_factory=list)
    description: str | None = None


class SchemaFile(SchemaModel):
    """Everything extracted from one .proto file."""

    package_name: str = ""
    services: list[ProtoService] = Field(default_factory=list)
    messages: list[ProtoMessage] = Field(default_factory=list)
    enums: list[ProtoEnum] = Field(default_factory=list)
    imports: list[str] = Field(default_factory=list)


class ParsedSchema(SchemaModel):
    """All files of one directory scan."""

    files: list[SchemaFile] = Field(default_factory=list)
    title: str | None = None
    version: str | None = None
    description: str | None = None

    @property
    def services(self) -> list[ProtoService]:
        return [service for schema_file in self.files for service in schema_file.services]

    @property
    def messages(self) -> list[ProtoMessage]:
        return [message for schema_file in self.files for message in schema_file.messages]

    @property
    def enums(self) -> list[ProtoEnum]:
        return [enum for schema_file in self.files for enum in schema_file.enums]

    @property
    def methods(self) -> list[ProtoMethod]:
        return [method for service in self.services for method in service.methods]
