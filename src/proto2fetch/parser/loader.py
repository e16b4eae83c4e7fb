"""Load .proto files into descriptors with protoc, tolerating unresolvable imports."""

import tempfile
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from importlib import resources
from pathlib import Path

from google.api import annotations_pb2
from google.protobuf import descriptor_pb2
from grpc_tools import protoc

from proto2fetch import log
from proto2fetch.errors import SchemaLoadError
from proto2fetch.parser.sanitizer import (
    extract_imports,
    extract_package,
    remove_imports,
    strip_custom_options,
)

WELL_KNOWN_PREFIX = "google/protobuf/"
WELL_KNOWN_PACKAGE = "google.protobuf"
VENDOR_MARKERS = ("google/", "protoc-gen-")


class ImportKind(str, Enum):
    WELL_KNOWN = "well_known"
    FILE = "file"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class ResolvedImport:
    target: str
    kind: ImportKind
    path: Path | None = None


@dataclass
class StagedFile:
    source: Path
    text: str
    package: str
    skipped_imports: list[str] = field(default_factory=list)


@dataclass
class LoadedSchemaFile:
    """A compiled schema file with the imports seen while loading it."""

    path: Path
    descriptor: descriptor_pb2.FileDescriptorProto
    descriptor_set: descriptor_pb2.FileDescriptorSet
    imports: list[str]
    skipped_imports: list[str]


def well_known_proto_root() -> Path:
    """Directory holding the google/protobuf/*.proto files bundled with grpcio-tools."""
    return Path(str(resources.files("grpc_tools") / "_proto"))


def annotations_proto_root() -> Path | None:
    """Site root of googleapis-common-protos, if it ships the google/api .proto sources."""
    root = Path(annotations_pb2.__file__).resolve().parent.parent.parent
    if (root / "google" / "api" / "annotations.proto").is_file():
        return root
    return None


def is_vendor_import(target: str) -> bool:
    return any(marker in target for marker in VENDOR_MARKERS)


class ImportResolver:
    """
    Decide where an import comes from.

    Well-known ``google/protobuf/*`` types resolve to the definitions bundled
    with the compiler. Other vendor imports (``google/...``, ``protoc-gen-...``)
    resolve only through the include paths and are skipped otherwise. Local
    imports resolve relative to the importing file, then through the include
    paths, and are skipped when neither has them.
    """

    def __init__(self, include_paths: Sequence[Path] = ()) -> None:
        self.include_paths = [Path(path) for path in include_paths]
        annotations_root = annotations_proto_root()
        if annotations_root is not None and annotations_root not in self.include_paths:
            self.include_paths.append(annotations_root)
        self.well_known_root = well_known_proto_root()

    def resolve(self, origin: Path, target: str) -> ResolvedImport:
        if target.startswith(WELL_KNOWN_PREFIX) and (self.well_known_root / target).is_file():
            return ResolvedImport(target, ImportKind.WELL_KNOWN)

        if not is_vendor_import(target):
            candidate = origin.parent / target
            if candidate.is_file():
                return ResolvedImport(target, ImportKind.FILE, candidate)

        for include_path in self.include_paths:
            candidate = include_path / target
            if candidate.is_file():
                return ResolvedImport(target, ImportKind.FILE, candidate)

        return ResolvedImport(target, ImportKind.SKIPPED)


class SchemaLoader:
    """Stage a .proto file with its resolvable imports and compile it with protoc."""

    def __init__(self, include_paths: Sequence[Path] = ()) -> None:
        self.resolver = ImportResolver(include_paths)

    def load(self, path: Path) -> LoadedSchemaFile:
        """
        Compile one schema file to a FileDescriptorProto.

        Args:
            path: The .proto file to load

        Returns:
            LoadedSchemaFile: The descriptor with source info, plus the raw and skipped imports

        Raises:
            SchemaLoadError: If the file cannot be read or protoc rejects it
        """
        path = Path(path)
        staged: dict[str, StagedFile] = {}
        self._stage(path, path.name, staged)

        with tempfile.TemporaryDirectory(prefix="proto2fetch-") as tmp:
            staging_root = Path(tmp) / "protos"
            self._write_staged(staged, staging_root)
            descriptor_set, descriptor = self._compile(path, path.name, staging_root, Path(tmp) / "descriptor_set.pb")

        skipped = staged[path.name].skipped_imports
        for target in skipped:
            log.debug(f"Skipped unresolved import '{target}' in {path}")

        return LoadedSchemaFile(
            path=path,
            descriptor=descriptor,
            descriptor_set=descriptor_set,
            imports=extract_imports(staged[path.name].text),
            skipped_imports=list(skipped),
        )

    def _stage(self, source: Path, import_name: str, staged: dict[str, StagedFile]) -> None:
        if import_name in staged:
            return

        try:
            text = source.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise SchemaLoadError(str(source), str(e)) from e

        staged_file = StagedFile(source=source, text=text, package=extract_package(text))
        staged[import_name] = staged_file

        for target in extract_imports(text):
            resolved = self.resolver.resolve(source, target)
            if resolved.kind is ImportKind.SKIPPED:
                staged_file.skipped_imports.append(target)
            elif resolved.kind is ImportKind.FILE and resolved.path is not None:
                self._stage(resolved.path, target, staged)

    def _write_staged(self, staged: dict[str, StagedFile], staging_root: Path) -> None:
        loaded_packages = {staged_file.package for staged_file in staged.values() if staged_file.package}
        loaded_packages.add(WELL_KNOWN_PACKAGE)

        def is_known_extension(extension: str) -> bool:
            # Unqualified names refer to the enclosing scope.
            if "." not in extension:
                return True
            return any(extension.startswith(f"{package}.") for package in loaded_packages)

        for import_name, staged_file in staged.items():
            text = staged_file.text
            if staged_file.skipped_imports:
                text = remove_imports(text, staged_file.skipped_imports)
                text = strip_custom_options(text, is_known_extension)

            destination = staging_root / import_name
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_text(text, encoding="utf-8")

    def _compile(
        self, source: Path, import_name: str, staging_root: Path, descriptor_out: Path
    ) -> tuple[descriptor_pb2.FileDescriptorSet, descriptor_pb2.FileDescriptorProto]:
        arguments = [
            "grpc_tools.protoc",
            f"--proto_path={staging_root}",
            f"--proto_path={self.resolver.well_known_root}",
            f"--descriptor_set_out={descriptor_out}",
            "--include_imports",
            "--include_source_info",
            import_name,
        ]
        log.debug(f"Compiling {source} with protoc")
        status = protoc.main(arguments)
        if status != 0 or not descriptor_out.is_file():
            raise SchemaLoadError(str(source), f"protoc exited with status {status}")

        descriptor_set = descriptor_pb2.FileDescriptorSet.FromString(descriptor_out.read_bytes())
        for file_descriptor in descriptor_set.file:
            if file_descriptor.name == import_name:
                return descriptor_set, file_descriptor

        raise SchemaLoadError(str(source), "compiled descriptor set does not contain the file")


def find_proto_files(root: Path) -> list[Path]:
    """All .proto files below a directory, in a stable order."""
    root = Path(root)
    if not root.is_dir():
        return []
    return sorted(path for path in root.rglob("*.proto") if path.is_file())

