from proto2fetch.generators.client import APIClientGenerator, translate_to_client
from proto2fetch.generators.type_mapping import TypeMappingOptions, map_field_type, map_type, to_camel_case
from proto2fetch.generators.types import TypeScriptTypeGenerator, sort_messages_by_dependency, translate_to_types

__all__ = [
    "APIClientGenerator",
    "TypeMappingOptions",
    "TypeScriptTypeGenerator",
    "map_field_type",
    "map_type",
    "sort_messages_by_dependency",
    "to_camel_case",
    "translate_to_client",
    "translate_to_types",
]
