"""End-to-end generation: parse the schema directory and write the client package."""

from pathlib import Path

from proto2fetch import log
from proto2fetch.config import GeneratorOptions
from proto2fetch.generators.client import translate_to_client
from proto2fetch.generators.package import generate_package_json, generate_readme
from proto2fetch.generators.types import translate_to_types
from proto2fetch.parser import ParsedSchema, ProtoParser
from proto2fetch.writer import write_generated_file

TYPES_FILE = "types.ts"
CLIENT_FILE = "client.ts"
PACKAGE_FILE = "package.json"
README_FILE = "README.md"


class Proto2FetchGenerator:
    """Runs the parser and both synthesizers, then writes the output files."""

    def __init__(self, options: GeneratorOptions) -> None:
        self.options = options
        self.parser = ProtoParser([*options.include_paths, options.schema_path])

    def render(self, schema: ParsedSchema) -> dict[str, str]:
        """Render every output file of the package, keyed by file name."""
        options = self.options
        return {
            TYPES_FILE: translate_to_types(
                schema,
                options.type_mapping,
                include_comments=options.include_comments,
                filter_builders=options.generate_filter_builders,
                sort_builders=options.generate_sort_builders,
            ),
            CLIENT_FILE: translate_to_client(
                schema,
                client_name=options.client_name,
                base_url=options.base_url,
                include_comments=options.include_comments,
                filter_builders=options.generate_filter_builders,
                sort_builders=options.generate_sort_builders,
            ),
            PACKAGE_FILE: generate_package_json(schema, options.package_name),
            README_FILE: generate_readme(schema, options.package_name, options.client_name, options.base_url),
        }

    def generate(self) -> list[Path]:
        """
        Generate the client package into the output directory.

        Returns:
            list[Path]: The written files

        Raises:
            MethodNameCollisionError: If two services bind one method name differently
            OSError: If the output cannot be written
        """
        log.rule("proto2fetch")
        log.info(f"Parsing protobuf files in {self.options.schema_path}")
        schema = self.parser.parse_directory(self.options.schema_path)

        log.summary(
            "Parsed schema",
            {
                "Files": len(schema.files),
                "Services": len(schema.services),
                "Messages": len(schema.messages),
                "Enums": len(schema.enums),
            },
        )

        rendered = self.render(schema)

        output_dir = self.options.output_dir
        output_dir.mkdir(parents=True, exist_ok=True)

        written: list[Path] = []
        for file_name, content in rendered.items():
            path = output_dir / file_name
            write_generated_file(content, path)
            written.append(path)

        log.success(f"Generated {len(written)} files in {output_dir}")
        return written


def generate(options: GeneratorOptions) -> list[Path]:
    """Create and run the generator."""
    return Proto2FetchGenerator(options).generate()
