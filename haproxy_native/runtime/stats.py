"""Parsing of the runtime API ``show stat`` CSV output."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

_INT_RE = re.compile(r"[+-]?[0-9]+")


@dataclass
class NativeStat:
    """Statistics for one frontend, backend or server."""

    name: str = ""
    type: str = ""
    backend_name: str = ""
    stats: dict[str, int | str] = field(default_factory=dict)


@dataclass
class NativeStatsCollection:
    """All statistics reported by one runtime API."""

    runtime_api: str = ""
    stats: list[NativeStat] = field(default_factory=list)
    error: str = ""


def _convert(value: str) -> int | str:
    return int(value) if _INT_RE.fullmatch(value) else value


def parse_stats(raw: str, runtime_api: str) -> NativeStatsCollection:
    """Parse raw ``show stat`` output; the leading ``# `` of the header is dropped."""
    lines = raw[2:].split("\n")
    keys = lines[0].split(",")
    stats = []
    for line in lines[1:]:
        values = line.split(",")
        if len(values) < len(keys):
            continue
        data = {key: _convert(value) for key, value in zip(keys, values) if value}
        kind = values[1].lower()
        if kind in ("backend", "frontend"):
            stat = NativeStat(name=values[0], type=kind)
        else:
            stat = NativeStat(name=kind, type="server", backend_name=values[0])
        stat.stats = data
        stats.append(stat)
    return NativeStatsCollection(runtime_api=runtime_api, stats=stats)