"""Parsing of the runtime API ``show table`` output."""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

_INT_RE = re.compile(r"[+-]?[0-9]+")

_TABLE_PREFIX = "# table:"


@dataclass
class StickTable:
    """Description of one stick table."""

    name: str = ""
    type: str = ""
    size: int | None = None
    used: int | None = None
    process: int | None = None


@dataclass
class StickTableEntry:
    """One entry of a stick table."""

    id: str = ""
    key: str = ""
    use: bool = False
    exp: int | None = None
    server_id: int | None = None
    gpc0: int | None = None
    gpc0_rate: int | None = None
    gpc1: int | None = None
    gpc1_rate: int | None = None
    conn_cnt: int | None = None
    conn_cur: int | None = None
    conn_rate: int | None = None
    sess_cnt: int | None = None
    sess_rate: int | None = None
    http_req_cnt: int | None = None
    http_req_rate: int | None = None
    http_err_cnt: int | None = None
    http_err_rate: int | None = None
    bytes_in_cnt: int | None = None
    bytes_in_rate: int | None = None
    bytes_out_cnt: int | None = None
    bytes_out_rate: int | None = None


# Counter names that match exactly -> entry attribute.
_EXACT_COUNTERS = {
    "server_id": "server_id",
    "gpc_0": "gpc0",
    "gpc_1": "gpc1",
    "conn_cnt": "conn_cnt",
    "conn_cur": "conn_cur",
    "sess_cnt": "sess_cnt",
    "http_req_cnt": "http_req_cnt",
    "http_err_cnt": "http_err_cnt",
    "bytes_in_cnt": "bytes_in_cnt",
    "bytes_out_cnt": "bytes_out_cnt",
    "exp": "exp",
}

# Rate names carry their period in parentheses, e.g. ``conn_rate(10000)``.
_RATE_PREFIXES = {
    "gpc_0_rate(": "gpc0_rate",
    "gpc_1_rate(": "gpc1_rate",
    "conn_rate(": "conn_rate",
    "sess_rate(": "sess_rate",
    "http_req_rate(": "http_req_rate",
    "http_err_rate(": "http_err_rate",
    "bytes_in_rate(": "bytes_in_rate",
    "bytes_out_rate(": "bytes_out_rate",
}


def _to_int(text: str) -> int | None:
    text = text.strip()
    return int(text) if _INT_RE.fullmatch(text) else None


def parse_stick_table(line: str, process: int) -> StickTable | None:
    """Parse one ``# table:`` description line; None for any other line."""
    if not line.startswith(_TABLE_PREFIX):
        return None
    table = StickTable(process=process)
    for part in line.split(","):
        if part.startswith(_TABLE_PREFIX):
            table.name = part[len(_TABLE_PREFIX):].strip()
        elif part.startswith(" type:"):
            table.type = part[len(" type:"):].strip()
        elif part.startswith(" size:"):
            table.size = _to_int(part[len(" size:"):]) or 0
        elif part.startswith(" used:"):
            table.used = _to_int(part[len(" used:"):]) or 0
    return table


def parse_stick_tables(output: str, process: int) -> list[StickTable]:
    """Parse every table description found in ``show table`` output."""
    tables = []
    for line in output.split("\n"):
        stripped = line.strip()
        if not stripped or not stripped.startswith(_TABLE_PREFIX):
            continue
        table = parse_stick_table(line, process)
        if table is not None:
            tables.append(table)
    return tables


def parse_stick_table_entry(line: str) -> StickTableEntry | None:
    """Parse one ``<id>: key=value ...`` entry line; None if it has no id."""
    entry_id, sep, rest = line.partition(":")
    if not sep:
        return None
    entry = StickTableEntry(id=entry_id)
    for token in rest.strip().split(" "):
        parts = token.split("=")
        if len(parts) < 2:
            continue
        name, value = parts[0], parts[1]
        if name in _EXACT_COUNTERS:
            number = _to_int(value)
            if number is not None:
                setattr(entry, _EXACT_COUNTERS[name], number)
        elif name == "use":
            entry.use = value.strip() == "1"
        elif name == "key":
            entry.key = value.strip()
        else:
            for prefix, attr in _RATE_PREFIXES.items():
                if name.startswith(prefix):
                    number = _to_int(value)
                    if number is not None:
                        setattr(entry, attr, number)
                    break
    return entry


def parse_stick_table_entries(output: str) -> list[StickTableEntry]:
    """Parse the entries of ``show table <name>`` output, skipping comments."""
    entries = []
    for line in output.split("\n"):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        entry = parse_stick_table_entry(line)
        if entry is not None:
            entries.append(entry)
    return entries


def table_entries_command(name: str, filters: Sequence[str], key: str) -> str:
    """Build the ``show table`` command; only the first filter is used."""
    command = f"show table {name}"
    if filters:
        command = f"{command} data.{filters[0]}"
    if key:
        command = f"{command} key {key}"
    return command