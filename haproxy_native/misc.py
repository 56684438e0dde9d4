"""String, timeout and size helpers shared by the configuration and runtime code."""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any

_INT_RE = re.compile(r"[+-]?[0-9]+")

_TIMEOUT_UNITS = (
    ("ms", 1),
    ("s", 1000),
    ("m", 1000 * 60),
    ("h", 1000 * 60 * 60),
    ("d", 1000 * 60 * 60 * 24),
)

_SIZE_UNITS = (
    ("k", 1024),
    ("m", 1024 * 1024),
    ("g", 1024 * 1024 * 1024),
)

_CAMEL_SPECIAL = (
    ("Http", "HTTP"),
    ("Uri", "URI"),
    ("http", "HTTP"),
    ("tcp", "TCP"),
    ("Tcp", "TCP"),
    ("Id", "ID"),
    ("Tls", "TLS"),
)


def _parse_int(text: str) -> int:
    """Parse a strict decimal integer, returning 0 when the text is not one."""
    if _INT_RE.fullmatch(text):
        return int(text)
    return 0


def string_in_slice(a: str, items: Iterable[str]) -> bool:
    """Return True if ``a`` is one of ``items``."""
    return a in items


def _is_upper(ch: str) -> bool:
    return "A" <= ch <= "Z"


def _is_lower(ch: str) -> bool:
    return "a" <= ch <= "z"


def camel_case(field_name: str, init_case: bool) -> str:
    """Turn a snake, dash or space separated name into camel case."""
    parts = []
    cap_next = init_case
    for ch in field_name.strip(" "):
        if _is_upper(ch) or "0" <= ch <= "9":
            parts.append(ch)
        elif _is_lower(ch):
            parts.append(ch.upper() if cap_next else ch)
        cap_next = ch in "_ -"
    result = "".join(parts)
    for old, new in _CAMEL_SPECIAL:
        result = result.replace(old, new)
    return result


def _split_case(field_name: str, sep: str) -> str:
    text = field_name.strip(" ")
    out = ""
    for i, ch in enumerate(text):
        # acronyms are kept together as words, e.g. JSONData -> json_data
        case_changes = False
        if i + 1 < len(text):
            nxt = text[i + 1]
            case_changes = (_is_upper(ch) and _is_lower(nxt)) or (
                _is_lower(ch) and _is_upper(nxt)
            )
        if i > 0 and out[-1] != sep and case_changes:
            if _is_upper(ch):
                out += sep + ch
            elif _is_lower(ch):
                out += ch + sep
        elif ch == " ":
            out += sep
        else:
            out += ch
    return out.lower()


def snake_case(field_name: str) -> str:
    """Turn a camel case name into snake case."""
    return _split_case(field_name, "_").replace("httpuri", "http_uri")


def dash_case(field_name: str) -> str:
    """Turn a camel case name into dash case."""
    return _split_case(field_name, "-").replace("httpuri", "http-uri")


def _parse_with_units(value: str, units: tuple[tuple[str, int], ...]) -> int | None:
    for suffix, factor in units:
        if value.endswith(suffix):
            number = _parse_int(value[: -len(suffix)]) * factor
            break
    else:
        number = _parse_int(value)
    return number or None


def parse_timeout(value: str) -> int | None:
    """Parse an HAProxy timeout into milliseconds; None for zero or invalid."""
    return _parse_with_units(value, _TIMEOUT_UNITS)


def parse_size(value: str) -> int | None:
    """Parse an HAProxy size (k, m, g suffixes) into bytes; None for zero or invalid."""
    return _parse_with_units(value, _SIZE_UNITS)


def obj_in_array(value: str, items: Iterable[Any], identifier: str) -> bool:
    """Return True if any item has attribute ``identifier`` equal to ``value``."""
    return get_obj_by_field(items, identifier, value) is not None


def get_obj_by_field(items: Iterable[Any], identifier: str, value: str) -> Any:
    """Return the first item whose attribute ``identifier`` equals ``value``."""
    for item in items:
        if getattr(item, identifier) == value:
            return item
    return None