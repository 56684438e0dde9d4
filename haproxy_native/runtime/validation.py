"""Validation of values accepted by the runtime API server commands."""

from __future__ import annotations

import re

_INT_RE = re.compile(r"[+-]?[0-9]+")

_STATES = frozenset({"ready", "drain", "maint"})
_HEALTHS = frozenset({"up", "stopping", "down"})


def server_state_valid(state: str) -> bool:
    """Return True if ``state`` is a valid server admin state."""
    return state in _STATES


def server_health_valid(health: str) -> bool:
    """Return True if ``health`` is a valid server health."""
    return health in _HEALTHS


def server_weight_valid(weight: str) -> bool:
    """Return True for a weight of 0-256 or a percentage of 0%-100%."""
    if weight.endswith("%"):
        percent = weight[:-1]
        if not _INT_RE.fullmatch(percent):
            return False
        return 0 <= int(percent) <= 100
    if not _INT_RE.fullmatch(weight):
        return False
    return 0 <= int(weight) <= 256