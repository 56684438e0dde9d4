"""TCP request rules (``tcp-request`` lines) of a frontend or backend."""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass, field

from haproxy_native.misc import parse_timeout

_ACTIONS = ("accept", "reject")


class TCPActionKind(enum.Enum):
    """The kind of a ``tcp-request`` or ``tcp-response`` line."""

    CONNECTION = "connection"
    CONTENT = "content"
    INSPECT_DELAY = "inspect-delay"
    SESSION = "session"


@dataclass
class TCPAction:
    """A TCP rule line as it appears in the configuration."""

    kind: TCPActionKind
    action: list[str] = field(default_factory=list)
    cond: str = ""
    cond_test: str = ""
    timeout: str = ""


@dataclass
class TCPRequestRule:
    """A TCP request rule as exposed to API users."""

    id: int | None = None
    type: str = ""
    action: str = ""
    cond: str = ""
    cond_test: str = ""
    timeout: int | None = None


_CONDITIONAL = (TCPActionKind.CONNECTION, TCPActionKind.CONTENT, TCPActionKind.SESSION)


def parse_tcp_request_rule(action: TCPAction) -> TCPRequestRule | None:
    """Build a rule model from a configuration line; None if unsupported."""
    if action.kind is TCPActionKind.INSPECT_DELAY:
        return TCPRequestRule(
            type=TCPActionKind.INSPECT_DELAY.value,
            timeout=parse_timeout(action.timeout),
        )
    if action.kind in _CONDITIONAL:
        verb = " ".join(action.action)
        if verb not in _ACTIONS:
            return None
        return TCPRequestRule(
            type=action.kind.value,
            action=verb,
            cond=action.cond,
            cond_test=action.cond_test,
        )
    return None


def serialize_tcp_request_rule(rule: TCPRequestRule) -> TCPAction | None:
    """Build a configuration line from a rule model; None if it cannot be expressed."""
    try:
        kind = TCPActionKind(rule.type)
    except ValueError:
        return None
    if kind is TCPActionKind.INSPECT_DELAY:
        if rule.timeout is None:
            return None
        return TCPAction(kind=kind, timeout=str(rule.timeout))
    return TCPAction(
        kind=kind,
        action=[rule.action],
        cond=rule.cond,
        cond_test=rule.cond_test,
    )


def parse_tcp_request_rules(actions: Iterable[TCPAction]) -> list[TCPRequestRule]:
    """Parse configuration lines into rules numbered by their position."""
    rules = []
    for index, action in enumerate(actions):
        rule = parse_tcp_request_rule(action)
        if rule is not None:
            rule.id = index
            rules.append(rule)
    return rules