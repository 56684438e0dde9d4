"""TCP response rules (``tcp-response`` lines) of a backend."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from haproxy_native.configuration.tcp_request import TCPAction, TCPActionKind
from haproxy_native.misc import parse_timeout

_ACTIONS = ("accept", "reject")


@dataclass
class TCPResponseRule:
    """A TCP response rule as exposed to API users."""

    id: int | None = None
    type: str = ""
    action: str = ""
    cond: str = ""
    cond_test: str = ""
    timeout: int | None = None


def parse_tcp_response_rule(action: TCPAction) -> TCPResponseRule | None:
    """Build a rule model from a configuration line; None if unsupported."""
    if action.kind is TCPActionKind.INSPECT_DELAY:
        return TCPResponseRule(
            type=TCPActionKind.INSPECT_DELAY.value,
            timeout=parse_timeout(action.timeout),
        )
    if action.kind is TCPActionKind.CONTENT:
        verb = " ".join(action.action)
        if verb not in _ACTIONS:
            return None
        return TCPResponseRule(
            type=TCPActionKind.CONTENT.value,
            action=verb,
            cond=action.cond,
            cond_test=action.cond_test,
        )
    return None


def serialize_tcp_response_rule(rule: TCPResponseRule) -> TCPAction | None:
    """Build a configuration line from a rule model; None if it cannot be expressed."""
    if rule.type == TCPActionKind.CONTENT.value:
        return TCPAction(
            kind=TCPActionKind.CONTENT,
            action=[rule.action],
            cond=rule.cond,
            cond_test=rule.cond_test,
        )
    if rule.type == TCPActionKind.INSPECT_DELAY.value and rule.timeout is not None:
        return TCPAction(kind=TCPActionKind.INSPECT_DELAY, timeout=str(rule.timeout))
    return None


def parse_tcp_response_rules(actions: Iterable[TCPAction]) -> list[TCPResponseRule]:
    """Parse configuration lines into rules numbered by their position."""
    rules = []
    for index, action in enumerate(actions):
        rule = parse_tcp_response_rule(action)
        if rule is not None:
            rule.id = index
            rules.append(rule)
    return rules