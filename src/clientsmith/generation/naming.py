from __future__ import annotations

import keyword
import re

_NON_ALNUM = re.compile(r"[^0-9A-Za-z]+")
_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_HAS_ALNUM = re.compile(r"[0-9A-Za-z]")


def snake_case(raw: str) -> str:
    """Convert an arbitrary name to a lowercase snake_case identifier body.

    Example:
        >>> snake_case("getHTTPStatus")
        'get_http_status'
        >>> snake_case("list-pets")
        'list_pets'
    """
    value = _NON_ALNUM.sub("_", raw)
    value = _ACRONYM_BOUNDARY.sub(r"\1_\2", value)
    value = _CAMEL_BOUNDARY.sub(r"\1_\2", value)
    return re.sub(r"_+", "_", value).strip("_").lower()


def pascal_case(raw: str) -> str:
    return "".join(part.capitalize() for part in snake_case(raw).split("_") if part)


def has_alnum(raw: str) -> bool:
    return bool(_HAS_ALNUM.search(raw))


def avoid_keyword(name: str, reserved: frozenset[str] = frozenset()) -> str:
    if keyword.iskeyword(name) or name in reserved:
        return f"{name}_"
    return name
