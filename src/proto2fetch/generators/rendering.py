"""Shared Jinja environment for the TypeScript templates."""

import json

from jinja2 import Environment, PackageLoader, select_autoescape

AUTO_GENERATED_NOTICE = "// This file is auto-generated. Do not edit manually."


def create_template_environment() -> Environment:
    env = Environment(
        loader=PackageLoader("proto2fetch.generators", "templates"),
        autoescape=select_autoescape(),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.globals["auto_generated_notice"] = AUTO_GENERATED_NOTICE
    return env


def doc_lines(description: str | None) -> list[str]:
    """Split a description into JSDoc-safe lines."""
    if not description:
        return []
    return [line.replace("*/", "*\\/") for line in description.splitlines() if line.strip()]


def ts_string_literal(value: str) -> str:
    """Quote ``value`` as a single-quoted TypeScript string literal."""
    escaped = json.dumps(value, ensure_ascii=False)[1:-1].replace('\\"', '"').replace("'", "\\'")
    return f"'{escaped}'"


def ts_template_text(value: str) -> str:
    """Escape ``value`` for use as literal text inside a template literal."""
    return value.replace("\\", "\\\\").replace("`", "\\`").replace("${", "\\${")
