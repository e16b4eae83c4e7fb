from pathlib import Path

from proto2fetch import log


def write_generated_file(content: str, output_path: Path) -> None:
    """
    Write generated source text verbatim to the specified output file.

    Args:
        content: The generated file content
        output_path: Path where the file should be written
    """
    log.debug(f"Writing generated file to: {output_path}")

    try:
        data = content.encode("utf-8")
        output_path.write_bytes(data)
        log.info(f"Wrote {len(data)} bytes to {output_path}")
    except OSError as e:
        log.error(f"Failed to write {output_path}: {e}")
        raise
