"""Servers of a backend and their options on ``server`` lines."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Union

from haproxy_native.misc import parse_timeout

_INT_RE = re.compile(r"[+-]?[0-9]+")

ENABLED = "enabled"
DISABLED = "disabled"

# Toggle options: option word -> (Server attribute, value it sets).
_WORD_TOGGLES = {
    "backup": ("backup", ENABLED),
    "no-backup": ("backup", DISABLED),
    "disabled": ("maintenance", ENABLED),
    "enabled": ("maintenance", DISABLED),
    "check": ("check", ENABLED),
    "no-check": ("check", DISABLED),
    "agent-check": ("agent_check", ENABLED),
    "no-agent-check": ("agent_check", DISABLED),
    "ssl": ("ssl", ENABLED),
    "no-ssl": ("ssl", DISABLED),
    "tls-tickets": ("tls_tickets", ENABLED),
    "no-tls-tickets": ("tls_tickets", DISABLED),
    "send-proxy": ("send_proxy", ENABLED),
    "no-send-proxy": ("send_proxy", DISABLED),
    "send-proxy-v2": ("send_proxy_v2", ENABLED),
    "no-send-proxy-v2": ("send_proxy_v2", DISABLED),
}

# Plain string valued options: option name -> Server attribute.
_STRING_VALUES = {
    "cookie": "cookie",
    "crt": "ssl_certificate",
    "ca-file": "ssl_cafile",
    "verify": "verify",
    "on-error": "on_error",
    "on-marked-down": "on_marked_down",
    "on-marked-up": "on_marked_up",
    "agent-addr": "agent_addr",
    "agent-send": "agent_send",
}


@dataclass(frozen=True)
class ServerOptionWord:
    """A server option that is a single word, such as ``check``."""

    name: str


@dataclass(frozen=True)
class ServerOptionValue:
    """A server option followed by a value, such as ``maxconn 1000``."""

    name: str
    value: str


ServerOption = Union[ServerOptionWord, ServerOptionValue]


@dataclass
class ServerLine:
    """A ``server`` line as it appears in the configuration."""

    name: str = ""
    address: str = ""
    params: list[ServerOption] = field(default_factory=list)


@dataclass
class Server:
    """A backend server as exposed to API users."""

    name: str = ""
    address: str = ""
    port: int | None = None
    backup: str = ""
    maintenance: str = ""
    check: str = ""
    agent_check: str = ""
    ssl: str = ""
    tls_tickets: str = ""
    allow_0rtt: bool = False
    send_proxy: str = ""
    send_proxy_v2: str = ""
    maxconn: int | None = None
    weight: int | None = None
    health_check_port: int | None = None
    cookie: str = ""
    ssl_certificate: str = ""
    ssl_cafile: str = ""
    inter: int | None = None
    verify: str = ""
    on_error: str = ""
    on_marked_down: str = ""
    on_marked_up: str = ""
    agent_addr: str = ""
    agent_inter: int | None = None
    agent_port: int | None = None
    agent_send: str = ""


def _to_int(text: str) -> int | None:
    if _INT_RE.fullmatch(text):
        return int(text)
    return None


def _apply_value(server: Server, option: ServerOptionValue) -> None:
    name, value = option.name, option.value
    if name in _STRING_VALUES:
        setattr(server, _STRING_VALUES[name], value)
    elif name in ("maxconn", "weight", "agent-port"):
        number = _to_int(value)
        if number:
            setattr(server, name.replace("-", "_"), number)
    elif name == "port":
        number = _to_int(value)
        if number is not None:
            server.health_check_port = number
    elif name == "inter":
        server.inter = parse_timeout(value)
    elif name == "agent-inter":
        server.agent_inter = parse_timeout(value)


def parse_server(line: ServerLine) -> Server:
    """Build a server model from a configuration line."""
    server = Server(name=line.name)
    host, sep, rest = line.address.partition(":")
    server.address = host
    if sep:
        port_text = rest.split(":", 1)[0]
        if port_text:
            server.port = _to_int(port_text)
    for option in line.params:
        if isinstance(option, ServerOptionWord):
            if option.name in _WORD_TOGGLES:
                attr, value = _WORD_TOGGLES[option.name]
                setattr(server, attr, value)
            elif option.name == "allow-0rtt":
                server.allow_0rtt = True
        elif isinstance(option, ServerOptionValue):
            _apply_value(server, option)
    return server


def _toggle(value: str, on_word: str, off_word: str) -> list[ServerOption]:
    if value == ENABLED:
        return [ServerOptionWord(on_word)]
    if value == DISABLED:
        return [ServerOptionWord(off_word)]
    return []


def _text(name: str, value: str) -> list[ServerOption]:
    return [ServerOptionValue(name, value)] if value else []


def _number(name: str, value: int | None) -> list[ServerOption]:
    return [ServerOptionValue(name, str(value))] if value is not None else []


def serialize_server(server: Server) -> ServerLine:
    """Build a configuration line from a server model."""
    if server.port is not None:
        address = f"{server.address}:{server.port}"
    else:
        address = server.address
    params: list[ServerOption] = [
        *_toggle(server.backup, "backup", "no-backup"),
        *_toggle(server.maintenance, "disabled", "enabled"),
        *_toggle(server.check, "check", "no-check"),
        *_toggle(server.agent_check, "agent-check", "no-agent-check"),
        *_text("agent-addr", server.agent_addr),
        *_number("agent-port", server.agent_port),
        *_number("agent-inter", server.agent_inter),
        *_text("agent-send", server.agent_send),
        *_toggle(server.ssl, "ssl", "no-ssl"),
        *_toggle(server.tls_tickets, "tls-tickets", "no-tls-tickets"),
    ]
    if server.allow_0rtt:
        params.append(ServerOptionWord("allow-0rtt"))
    params += [
        *_number("maxconn", server.maxconn),
        *_number("weight", server.weight),
        *_number("inter", server.inter),
        *_text("cookie", server.cookie),
        *_text("crt", server.ssl_certificate),
        *_text("ca-file", server.ssl_cafile),
        *_text("verify", server.verify),
        *_text("on-error", server.on_error),
        *_text("on-marked-down", server.on_marked_down),
        *_text("on-marked-up", server.on_marked_up),
        *_number("port", server.health_check_port),
        *_toggle(server.send_proxy, "send-proxy", "no-send-proxy"),
        *_toggle(server.send_proxy_v2, "send-proxy-v2", "no-send-proxy-v2"),
    ]
    return ServerLine(name=server.name, address=address, params=params)


def parse_servers(lines: Iterable[ServerLine]) -> list[Server]:
    """Parse configuration lines into server models, in order."""
    return [parse_server(line) for line in lines]


def find_server(servers: Sequence[Server], name: str) -> tuple[Server, int] | None:
    """Return the server with ``name`` and its position, or None if absent."""
    for index, server in enumerate(servers):
        if server.name == name:
            return server, index
    return None