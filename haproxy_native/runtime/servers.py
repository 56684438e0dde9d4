"""Parsing of the runtime API ``show servers state`` output."""

from __future__ import annotations

import re
from dataclasses import dataclass

_INT_RE = re.compile(r"[+-]?[0-9]+")

_SUPPORTED_FORMAT = "1"
_FORMAT_ERROR = "Unsupported output format version, supporting format version 1"

_ADMIN_STATES = {
    "0": "ready",
    "1": "maint",
    "2": "maint",
    "4": "maint",
    "20": "maint",
    "40": "maint",
    "8": "drain",
    "10": "drain",
}

_OPERATIONAL_STATES = {
    "0": "down",
    "3": "stopping",
    "1": "up",
    "2": "up",
}

_MIN_FIELDS = 19


@dataclass
class RuntimeServer:
    """Runtime state of one backend server."""

    id: str = ""
    name: str = ""
    address: str = ""
    port: int | None = None
    admin_state: str = ""
    operational_state: str = ""


def _check_format(lines: list[str]) -> None:
    if lines[0].strip() != _SUPPORTED_FORMAT:
        raise ValueError(_FORMAT_ERROR)


def _is_data_line(line: str) -> bool:
    stripped = line.strip()
    return bool(stripped) and not line.startswith("#") and stripped != _SUPPORTED_FORMAT


def parse_runtime_server(line: str) -> RuntimeServer | None:
    """Parse one server state line; None if it has too few fields."""
    fields = line.split(" ")
    if len(fields) < _MIN_FIELDS:
        return None
    port_text = fields[18]
    port = int(port_text) if _INT_RE.fullmatch(port_text) else None
    return RuntimeServer(
        id=fields[2],
        name=fields[3],
        address=fields[4],
        port=port,
        admin_state=_ADMIN_STATES.get(fields[6], ""),
        operational_state=_OPERATIONAL_STATES.get(fields[5], ""),
    )


def parse_runtime_servers(output: str) -> list[RuntimeServer]:
    """Parse every server of ``show servers state`` output.

    Raises ValueError if the output is not in format version 1.
    """
    lines = output.split("\n")
    _check_format(lines)
    servers = []
    for line in lines[1:]:
        if not _is_data_line(line):
            continue
        server = parse_runtime_server(line)
        if server is not None:
            servers.append(server)
    return servers


def find_runtime_server(output: str, server: str) -> RuntimeServer | None:
    """Return the state of the server named ``server``, or None if absent.

    Raises ValueError if the output is not in format version 1.
    """
    lines = output.split("\n")
    _check_format(lines)
    for line in lines:
        if not _is_data_line(line):
            continue
        fields = line.split(" ")
        if len(fields) < 4 or fields[3] != server:
            continue
        return parse_runtime_server(line)
    return None