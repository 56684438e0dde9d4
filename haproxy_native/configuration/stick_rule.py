"""Stick rules (``stick`` lines) of a backend."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass
class Stick:
    """A ``stick`` line as it appears in the configuration."""

    type: str = ""
    table: str = ""
    pattern: str = ""
    cond: str = ""
    cond_test: str = ""


@dataclass
class StickRule:
    """A stick rule as exposed to API users."""

    id: int | None = None
    type: str = ""
    table: str = ""
    pattern: str = ""
    cond: str = ""
    cond_test: str = ""


def parse_stick_rule(stick: Stick) -> StickRule:
    """Build a rule model from a configuration line; the id is left unset."""
    return StickRule(
        type=stick.type,
        table=stick.table,
        pattern=stick.pattern,
        cond=stick.cond,
        cond_test=stick.cond_test,
    )


def serialize_stick_rule(rule: StickRule) -> Stick:
    """Build a configuration line from a rule model."""
    return Stick(
        type=rule.type,
        table=rule.table,
        pattern=rule.pattern,
        cond=rule.cond,
        cond_test=rule.cond_test,
    )


def parse_stick_rules(sticks: Iterable[Stick]) -> list[StickRule]:
    """Parse configuration lines into rules numbered by their position."""
    rules = []
    for index, stick in enumerate(sticks):
        rule = parse_stick_rule(stick)
        rule.id = index
        rules.append(rule)
    return rules