"""Package scaffolding for the generated client: package.json and README.md."""

import json
from typing import Any

from proto2fetch.generators.rendering import create_template_environment, ts_string_literal
from proto2fetch.generators.type_mapping import to_camel_case
from proto2fetch.parser.models import ParsedSchema

DEFAULT_PACKAGE_NAME = "generated-api-client"
DEFAULT_DESCRIPTION = "Generated API client from protobuf definitions"
README_DESCRIPTION = "Auto-generated TypeScript API client from protobuf definitions."
EXAMPLE_BASE_URL = "https://api.example.com"
MAX_USAGE_EXAMPLES = 3


def build_package_json(schema: ParsedSchema, package_name: str | None = None) -> dict[str, Any]:
    return {
        "name": package_name or DEFAULT_PACKAGE_NAME,
        "version": "1.0.0",
        "description": schema.description or DEFAULT_DESCRIPTION,
        "main": "./client.js",
        "types": "./client.d.ts",
        "scripts": {"build": "tsc", "dev": "tsc --watch"},
        "dependencies": {"proto2fetch": "^1.0.0"},
        "devDependencies": {"typescript": "^5.0.0"},
    }


def generate_package_json(schema: ParsedSchema, package_name: str | None = None) -> str:
    return json.dumps(build_package_json(schema, package_name), indent=2) + "\n"


def generate_readme(
    schema: ParsedSchema,
    package_name: str | None = None,
    client_name: str = "APIClient",
    base_url: str | None = None,
) -> str:
    """Render the README of the generated package, with up to three example calls."""
    examples = [
        {
            "comment": method.summary or method.description or method.name,
            "name": to_camel_case(method.name),
            "result": "result" if index == 0 else f"result{index + 1}",
            "argument": "" if method.http_verb == "GET" and method.input_type_name == "Empty" else "request",
        }
        for index, method in enumerate(schema.methods[:MAX_USAGE_EXAMPLES])
    ]
    for example in examples:
        example["comment"] = example["comment"].splitlines()[0]

    template = create_template_environment().get_template("README.md.j2")
    content = template.render(
        title=package_name or schema.title or "Generated API Client",
        description=schema.description or README_DESCRIPTION,
        package_name=package_name or DEFAULT_PACKAGE_NAME,
        client_name=client_name,
        base_url=ts_string_literal(base_url or EXAMPLE_BASE_URL),
        examples=examples,
    )
    return content.rstrip("\n") + "\n"
