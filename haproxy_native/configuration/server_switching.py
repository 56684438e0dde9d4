"""Server switching rules (``use-server`` lines) of a backend."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass
class UseServer:
    """A ``use-server`` line as it appears in the configuration."""

    name: str = ""
    cond: str = ""
    cond_test: str = ""


@dataclass
class ServerSwitchingRule:
    """A server switching rule as exposed to API users."""

    id: int | None = None
    target_server: str = ""
    cond: str = ""
    cond_test: str = ""


def parse_server_switching_rule(use_server: UseServer) -> ServerSwitchingRule:
    """Build a rule model from a configuration line; the id is left unset."""
    return ServerSwitchingRule(
        target_server=use_server.name,
        cond=use_server.cond,
        cond_test=use_server.cond_test,
    )


def serialize_server_switching_rule(rule: ServerSwitchingRule) -> UseServer:
    """Build a configuration line from a rule model."""
    return UseServer(
        name=rule.target_server,
        cond=rule.cond,
        cond_test=rule.cond_test,
    )


def parse_server_switching_rules(
    use_servers: Iterable[UseServer],
) -> list[ServerSwitchingRule]:
    """Parse configuration lines into rules numbered by their position."""
    rules = []
    for index, use_server in enumerate(use_servers):
        rule = parse_server_switching_rule(use_server)
        rule.id = index
        rules.append(rule)
    return rules