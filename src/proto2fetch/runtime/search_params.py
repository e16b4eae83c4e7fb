"""Query-string serialization shared by every generated GET call."""

from collections.abc import Mapping, Sequence
from datetime import date, datetime
from enum import Enum
from typing import Any

SearchParams = list[tuple[str, str]]


def format_scalar(value: Any) -> str:
    """Render a scalar the way the JavaScript runtime stringifies it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return format_scalar(value.value)
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def _append(params: SearchParams, key: str, value: Any) -> None:
    if value is None:
        return

    if isinstance(value, Mapping):
        for sub_key, sub_value in value.items():
            _append(params, f"{key}.{sub_key}", sub_value)
    elif _is_sequence(value):
        for index, item in enumerate(value):
            if isinstance(item, Mapping) or _is_sequence(item):
                _append(params, f"{key}[{index}]", item)
            elif item is not None:
                params.append((key, format_scalar(item)))
    else:
        params.append((key, format_scalar(value)))


def object_to_search_params(obj: Mapping[str, Any]) -> SearchParams:
    """
    Flatten a request object into ordered query parameters.

    ``None`` values are dropped. Lists of scalars repeat their key, list items
    that are objects use ``key[i].field`` keys, nested objects use ``key.sub``
    keys, and empty lists or objects produce nothing.

    Args:
        obj: The request object

    Returns:
        SearchParams: ``(key, value)`` pairs, suitable for ``requests``' ``params``
    """
    params: SearchParams = []
    for key, value in obj.items():
        _append(params, str(key), value)
    return params
