"""Log targets (``log`` lines) of a frontend or backend."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass
class Log:
    """A ``log`` line as it appears in the configuration."""

    address: str = ""
    facility: str = ""
    format: str = ""
    global_: bool = False
    length: int = 0
    level: str = ""
    min_level: str = ""
    no_log: bool = False


@dataclass
class LogTarget:
    """A log target as exposed to API users."""

    id: int | None = None
    address: str = ""
    facility: str = ""
    format: str = ""
    global_: bool = False
    length: int = 0
    level: str = ""
    minlevel: str = ""
    nolog: bool = False


def parse_log_target(log: Log) -> LogTarget:
    """Build a log target model from a configuration line; the id is left unset."""
    return LogTarget(
        address=log.address,
        facility=log.facility,
        format=log.format,
        global_=log.global_,
        length=log.length,
        level=log.level,
        minlevel=log.min_level,
        nolog=log.no_log,
    )


def serialize_log_target(target: LogTarget) -> Log:
    """Build a configuration line from a log target model."""
    return Log(
        address=target.address,
        facility=target.facility,
        format=target.format,
        global_=target.global_,
        length=target.length,
        level=target.level,
        min_level=target.minlevel,
        no_log=target.nolog,
    )


def parse_log_targets(logs: Iterable[Log]) -> list[LogTarget]:
    """Parse configuration lines into log targets numbered by their position."""
    targets = []
    for index, log in enumerate(logs):
        target = parse_log_target(log)
        target.id = index
        targets.append(target)
    return targets