"""
Key Casing — camelCase <-> snake_case at the storage boundary

Stored rows and the Python models use snake_case; documents exported by
the web client use camelCase. Conversion is recursive over dicts and
lists. Mapping-valued fields keyed by parameter codes (values, ratings,
outputs) keep their inner keys verbatim, so "Z1" never becomes "_z1".
"""

import re
from typing import Any, Callable, Iterable, Literal


Casing = Literal["snake", "camel"]

# Fields whose dict keys are data, not attribute names
PRESERVED_FIELDS = frozenset({"values", "ratings", "outputs"})

_UPPER = re.compile(r"[A-Z]")
_UNDERSCORE_WORD = re.compile(r"_(\w)")


def to_snake_case(name: str) -> str:
    """camelCase -> camel_case. Other separators are left alone."""
    return _UPPER.sub(lambda m: f"_{m.group(0).lower()}", name)


def to_camel_case(name: str) -> str:
    """snake_case -> snakeCase."""
    return _UNDERSCORE_WORD.sub(lambda m: m.group(1).upper(), name)


def convert_keys(
    obj: Any,
    to: Casing,
    preserve: Iterable[str] = PRESERVED_FIELDS,
) -> Any:
    """
    Recursively convert dict keys to the requested casing.

    Args:
        obj: dict, list, or scalar
        to: "snake" or "camel"
        preserve: Field names (in either casing) whose dict value keeps
            its keys unchanged

    Returns:
        A new structure; the input is not modified
    """
    if to not in ("snake", "camel"):
        raise ValueError(f"unknown casing '{to}'")
    convert: Callable[[str], str] = to_snake_case if to == "snake" else to_camel_case
    preserved = {to_snake_case(name) for name in preserve}
    return _convert(obj, convert, preserved)


def _convert(obj: Any, convert: Callable[[str], str], preserved: set) -> Any:
    if isinstance(obj, dict):
        converted = {}
        for key, value in obj.items():
            new_key = convert(key) if isinstance(key, str) else key
            if isinstance(key, str) and to_snake_case(key) in preserved and isinstance(value, dict):
                converted[new_key] = dict(value)
            else:
                converted[new_key] = _convert(value, convert, preserved)
        return converted
    if isinstance(obj, list):
        return [_convert(item, convert, preserved) for item in obj]
    return obj
