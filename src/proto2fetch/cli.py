import logging
import sys
from pathlib import Path
from typing import Any

import rich_click as click
from click.core import ParameterSource
from rich.traceback import install

from proto2fetch import __version__, log
from proto2fetch.config import build_options, discover_config_file, load_config_file, validate_paths
from proto2fetch.errors import ConfigError, MethodNameCollisionError, Proto2FetchError
from proto2fetch.generator import generate

EXPLICIT_SOURCES = (ParameterSource.COMMANDLINE, ParameterSource.ENVIRONMENT)

# CLI parameter name -> GeneratorOptions field
OPTION_FIELDS = {
    "proto_path": "schema_path",
    "output_dir": "output_dir",
    "base_url": "base_url",
    "package_name": "package_name",
    "client_name": "client_name",
    "include_comments": "include_comments",
    "generate_filter_builders": "generate_filter_builders",
    "generate_sort_builders": "generate_sort_builders",
    "date_type": "date_type",
    "bigint_type": "bigint_type",
    "include_paths": "include_paths",
}


def configure_logging(log_level: str, log_file: Path | None) -> None:
    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w")
        file_handler.setFormatter(logging.Formatter("%(asctime)s:%(levelname)s:%(message)s"))
        log.addHandler(file_handler)

    log.setLevel(log_level.upper())
    if log_level.upper() == "DEBUG":
        _ = install(show_locals=True)


def explicit_overrides(ctx: click.Context, values: dict[str, Any]) -> dict[str, Any]:
    """Values the user actually passed, keyed by GeneratorOptions field."""
    overrides: dict[str, Any] = {}
    for param_name, field_name in OPTION_FIELDS.items():
        if ctx.get_parameter_source(param_name) not in EXPLICIT_SOURCES:
            continue
        value = values[param_name]
        overrides[field_name] = list(value) if isinstance(value, tuple) else value
    return overrides


@click.command(context_settings={"auto_envvar_prefix": "PROTO2FETCH"})
@click.option(
    "--proto-path",
    "-p",
    type=click.Path(path_type=Path),
    help="Directory containing the .proto files",
)
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(file_okay=False, path_type=Path),
    help="Output directory for the generated files",
)
@click.option("--base-url", help="Base URL baked into the client (default: the runtime origin)")
@click.option("--package-name", help="Name of the generated npm package")
@click.option("--client-name", default="APIClient", show_default=True, help="Name of the generated client class")
@click.option(
    "--comments/--no-comments",
    "include_comments",
    default=True,
    show_default=True,
    help="Emit JSDoc comments",
)
@click.option(
    "--filter-builders/--no-filter-builders",
    "generate_filter_builders",
    default=True,
    show_default=True,
    help="Generate filter builder classes",
)
@click.option(
    "--sort-builders/--no-sort-builders",
    "generate_sort_builders",
    default=True,
    show_default=True,
    help="Generate sort builder classes",
)
@click.option(
    "--date-type",
    type=click.Choice(["Date", "string"]),
    default="Date",
    show_default=True,
    help="TypeScript type for Timestamp fields",
)
@click.option(
    "--bigint-type",
    type=click.Choice(["bigint", "string"]),
    default="bigint",
    show_default=True,
    help="TypeScript type for int64/uint64 fields",
)
@click.option(
    "--include-path",
    "include_paths",
    type=click.Path(file_okay=False, path_type=Path),
    multiple=True,
    help="Extra directory searched for imports (e.g. googleapis). Can be specified multiple times.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML or JSON config file (default: proto2fetch.yaml/.yml/.json in the working directory)",
)
@click.option(
    "-l",
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default="INFO",
    help="Log level",
    show_default=True,
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help="Log file",
)
@click.version_option(__version__)
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Path | None,
    log_level: str,
    log_file: Path | None,
    **values: Any,
) -> None:
    """Generate a typed TypeScript HTTP client from protobuf definitions."""
    configure_logging(log_level, log_file)

    try:
        config_path = config_path or discover_config_file()
        config = load_config_file(config_path) if config_path else {}
        options = build_options(config, explicit_overrides(ctx, values))
        validate_paths(options)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    try:
        generate(options)
    except MethodNameCollisionError as e:
        log.error(str(e))
        sys.exit(1)
    except OSError as e:
        log.error(f"File I/O error: {e}")
        sys.exit(1)
    except Proto2FetchError as e:
        log.error(f"Generation failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    cli()
