"""Generator options and the YAML/JSON configuration file loader."""

import json
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal, cast

import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from proto2fetch import log
from proto2fetch.errors import ConfigError
from proto2fetch.generators.type_mapping import TypeMappingOptions

CONFIG_FILE_NAMES = ("proto2fetch.yaml", "proto2fetch.yml", "proto2fetch.json")

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


class GeneratorOptions(BaseModel):
    """Everything one generation run needs. Keys are accepted in snake_case or camelCase."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel, extra="forbid")

    schema_path: Path = Field(validation_alias=AliasChoices("schema_path", "schemaPath", "proto_path", "protoPath"))
    output_dir: Path
    base_url: str | None = None
    package_name: str | None = None
    client_name: str = "APIClient"
    include_comments: bool = True
    generate_filter_builders: bool = True
    generate_sort_builders: bool = True
    date_type: Literal["Date", "string"] = "Date"
    bigint_type: Literal["bigint", "string"] = "bigint"
    include_paths: list[Path] = Field(default_factory=list)

    @field_validator("base_url", "package_name")
    @classmethod
    def blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        return value or None

    @field_validator("client_name")
    @classmethod
    def validate_client_name(cls, value: str) -> str:
        if not IDENTIFIER_PATTERN.match(value):
            raise ValueError(f"'{value}' is not a valid TypeScript identifier")
        return value

    @property
    def type_mapping(self) -> TypeMappingOptions:
        return TypeMappingOptions.from_policies(self.date_type, self.bigint_type)


def discover_config_file(directory: Path | None = None) -> Path | None:
    """Return the first proto2fetch config file found in ``directory`` (default: cwd)."""
    directory = directory or Path.cwd()
    for name in CONFIG_FILE_NAMES:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def load_config_file(config_path: Path) -> dict[str, Any]:
    """
    Read a YAML or JSON configuration file.

    Args:
        config_path: Path to the configuration file

    Returns:
        dict[str, Any]: The raw configuration mapping (empty for an empty file)

    Raises:
        ConfigError: If the file cannot be read or parsed, or its root is not a mapping
    """
    try:
        with config_path.open("r", encoding="utf-8") as f:
            raw = json.load(f) if config_path.suffix == ".json" else yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config file {config_path}: {e}") from e
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Invalid config file {config_path}: {e}") from e

    log.debug(f"Loaded config from {config_path}")

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config root must be a mapping, got {type(raw).__name__}")

    return cast(dict[str, Any], raw)


def build_options(config: Mapping[str, Any], overrides: Mapping[str, Any] | None = None) -> GeneratorOptions:
    """
    Validate configuration values into GeneratorOptions.

    Overrides win over config values for the same field, whichever key style
    either side uses.

    Raises:
        ConfigError: If validation fails
    """
    merged: dict[str, Any] = {}
    for source in (config, overrides or {}):
        for key, value in source.items():
            name = _field_name(key)
            merged = {k: v for k, v in merged.items() if _field_name(k) != name}
            merged[key] = value

    try:
        return GeneratorOptions.model_validate(merged)
    except ValidationError as e:
        raise ConfigError(f"Invalid generator options: {e}") from e


def _field_name(key: str) -> str:
    for name, info in GeneratorOptions.model_fields.items():
        aliases = {name, info.alias}
        if isinstance(info.validation_alias, AliasChoices):
            aliases.update(choice for choice in info.validation_alias.choices if isinstance(choice, str))
        if key in aliases:
            return name
    return key


def validate_paths(options: GeneratorOptions) -> None:
    """
    Check the input paths before any generation work starts.

    Raises:
        ConfigError: If the schema path does not exist or is not a directory
    """
    if not options.schema_path.exists():
        raise ConfigError(f"Proto path does not exist: {options.schema_path}")
    if not options.schema_path.is_dir():
        raise ConfigError(f"Proto path is not a directory: {options.schema_path}")
    for include_path in options.include_paths:
        if not include_path.is_dir():
            log.warning(f"Include path is not a directory: {include_path}")
