"""Text-level rewrites applied to a .proto source before it is compiled.

When an import cannot be resolved, the declarations it provides are missing and
any custom option referring to them would make protoc reject the whole file.
These helpers drop such imports and options while leaving comments, strings and
everything else untouched.
"""

import re
from collections.abc import Callable, Iterable

IDENTIFIER_CHARS = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_")

OPENERS = "{[("
CLOSERS = "}])"

OPTION_STATEMENT_PATTERN = re.compile(r"option\s*\(\s*\.?([\w.]+)\s*\)")
CUSTOM_OPTION_ENTRY_PATTERN = re.compile(r"\s*\(\s*\.?([\w.]+)\s*\)")
IMPORT_PATTERN = re.compile(r"""^\s*import\s+(?:(?:public|weak)\s+)?["']([^"']+)["']\s*;""", re.MULTILINE)
PACKAGE_PATTERN = re.compile(r"^\s*package\s+([\w.]+)\s*;", re.MULTILINE)


def extract_imports(text: str) -> list[str]:
    """Return the import paths declared in a .proto source, in order."""
    return [match.group(1) for match in IMPORT_PATTERN.finditer(text)]


def extract_package(text: str) -> str:
    match = PACKAGE_PATTERN.search(text)
    return match.group(1) if match else ""


def remove_imports(text: str, targets: Iterable[str]) -> str:
    """Drop the import statements of the given paths."""
    for target in targets:
        pattern = re.compile(
            r"""^[ \t]*import\s+(?:(?:public|weak)\s+)?["']""" + re.escape(target) + r"""["']\s*;[^\n]*""",
            re.MULTILINE,
        )
        text = pattern.sub("", text)
    return text


def _comment_end(text: str, index: int) -> int | None:
    if text.startswith("//", index):
        end = text.find("\n", index)
        return len(text) if end == -1 else end
    if text.startswith("/*", index):
        end = text.find("*/", index + 2)
        return len(text) if end == -1 else end + 2
    return None


def _string_end(text: str, index: int) -> int:
    quote = text[index]
    index += 1
    while index < len(text):
        char = text[index]
        if char == "\\":
            index += 2
            continue
        if char == quote or char == "\n":
            return index + 1
        index += 1
    return len(text)


def _scan_to(text: str, index: int, stop_chars: str) -> int:
    """Index of the first stop char at nesting depth 0, skipping comments and strings."""
    depth = 0
    while index < len(text):
        comment_end = _comment_end(text, index)
        if comment_end is not None:
            index = comment_end
            continue

        char = text[index]
        if char in "\"'":
            index = _string_end(text, index)
            continue
        if depth == 0 and char in stop_chars:
            return index
        if char in OPENERS:
            depth += 1
        elif char in CLOSERS:
            depth -= 1
        index += 1

    return len(text)


def _split_top_level(text: str) -> list[str]:
    entries: list[str] = []
    start = 0
    while start <= len(text):
        end = _scan_to(text, start, ",")
        entries.append(text[start:end])
        start = end + 1
    return entries


def strip_custom_options(text: str, keep: Callable[[str], bool]) -> str:
    """
    Remove custom (parenthesized) options whose extension name is rejected by ``keep``.

    Handles ``option (ext) = ...;`` statements, including aggregate values and the
    dot-suffixed ``option (ext).key = ...;`` form, and ``[(ext) = ...]`` entries in
    field and enum value option lists.

    Args:
        text: The .proto source
        keep: Predicate receiving the extension name without parentheses

    Returns:
        str: The rewritten source
    """
    output: list[str] = []
    index = 0

    while index < len(text):
        comment_end = _comment_end(text, index)
        if comment_end is not None:
            output.append(text[index:comment_end])
            index = comment_end
            continue

        char = text[index]
        if char in "\"'":
            end = _string_end(text, index)
            output.append(text[index:end])
            index = end
            continue

        if char == "[":
            close = _scan_to(text, index + 1, "]")
            entries = _split_top_level(text[index + 1 : close])
            kept = [entry for entry in entries if _keep_option_entry(entry, keep)]
            if len(kept) == len(entries):
                output.append(text[index : close + 1])
            elif kept:
                output.append("[" + ",".join(kept) + "]")
            index = close + 1
            continue

        match = OPTION_STATEMENT_PATTERN.match(text, index)
        if match and (index == 0 or text[index - 1] not in IDENTIFIER_CHARS):
            end = _scan_to(text, match.end(), ";")
            if keep(match.group(1)):
                output.append(text[index : end + 1])
            index = end + 1
            continue

        output.append(char)
        index += 1

    return "".join(output)


def _keep_option_entry(entry: str, keep: Callable[[str], bool]) -> bool:
    match = CUSTOM_OPTION_ENTRY_PATTERN.match(entry)
    if not match:
        return True
    return keep(match.group(1))
