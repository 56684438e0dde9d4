"""Access to one HAProxy runtime API socket."""

from __future__ import annotations

import socket
import threading
import time
from collections.abc import Sequence

from haproxy_native.runtime.info import ProcessInfo, parse_info
from haproxy_native.runtime.servers import (
    RuntimeServer,
    find_runtime_server,
    parse_runtime_servers,
)
from haproxy_native.runtime.stats import NativeStatsCollection, parse_stats
from haproxy_native.runtime.stick_tables import (
    StickTable,
    StickTableEntry,
    parse_stick_table,
    parse_stick_table_entries,
    parse_stick_tables,
    table_entries_command,
)
from haproxy_native.runtime.validation import (
    server_health_valid,
    server_state_valid,
    server_weight_valid,
)

_BUFFER_SIZE = 1024
_TIMEOUT = 30.0
_RETRIES = 1
_SEVERITY_ERRORS = ("3:", "2:", "1:", "0:")


class RuntimeAPIError(Exception):
    """Raised when a runtime API command fails or cannot be sent."""


def check_response(raw: str, command: str) -> str:
    """Return the response body, raising if HAProxy reported an error severity."""
    if len(raw) > 3 and raw[1:3] in _SEVERITY_ERRORS:
        raise RuntimeAPIError(f"[{raw[1]}] {raw[3:]} [{command}]")
    return raw[1:]


class SingleRuntime:
    """One runtime API, either a stats socket or a worker behind a master socket.

    ``worker`` is non-zero in master-worker mode; ``process`` is the HAProxy
    process number this runtime answers for.
    """

    def __init__(self, socket_path: str, worker: int = 0, process: int = 0) -> None:
        self.socket_path = socket_path
        self.worker = worker
        self.process = process
        self._lock = threading.Lock()

    def _full_command(self, command: str) -> str:
        if self.worker > 0:
            return (
                f"@{self.worker} set severity-output number;"
                f"@{self.worker} {command}\n"
            )
        return f"set severity-output number;{command}\n"

    def _read_from_socket(self, command: str) -> str:
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as api:
            api.settimeout(_TIMEOUT)
            api.connect(self.socket_path)
            api.sendall(self._full_command(command).encode())
            time.sleep(0.002)
            chunks = []
            while True:
                try:
                    chunk = api.recv(_BUFFER_SIZE)
                except OSError:
                    break
                if not chunk:
                    break
                chunks.append(chunk)
                if len(chunk) < _BUFFER_SIZE:
                    break
        result = b"".join(chunks).decode("utf-8", errors="replace")
        return result.removesuffix("\n> ").removesuffix("\n")

    def execute_raw(self, command: str) -> str:
        """Run ``command`` and return the raw response; one retry on failure."""
        last_error: OSError | None = None
        for _ in range(_RETRIES + 1):
            try:
                with self._lock:
                    return self._read_from_socket(command)
            except TimeoutError as err:
                last_error = err
            except OSError as err:
                last_error = err
        if isinstance(last_error, TimeoutError):
            raise RuntimeAPIError("timeout reached") from last_error
        raise RuntimeAPIError(str(last_error)) from last_error

    def _raw_or_raise(self, command: str) -> str:
        try:
            return self.execute_raw(command)
        except RuntimeAPIError as err:
            raise RuntimeAPIError(f"{err} [{command}]") from err

    def execute(self, command: str) -> None:
        """Run ``command``, raising if it fails."""
        check_response(self._raw_or_raise(command), command)

    def execute_with_response(self, command: str) -> str:
        """Run ``command`` and return its response, raising if it fails."""
        return check_response(self._raw_or_raise(command), command)

    def get_stats(self) -> NativeStatsCollection:
        """Fetch ``show stat``; a failure is reported in the ``error`` field."""
        if self.worker != 0:
            runtime_api = f"{self.socket_path}@{self.worker}"
        else:
            runtime_api = self.socket_path
        try:
            raw = self.execute_raw("show stat")
        except RuntimeAPIError as err:
            return NativeStatsCollection(runtime_api=runtime_api, error=str(err))
        return parse_stats(raw, runtime_api)

    def get_info(self) -> ProcessInfo:
        """Fetch ``show info typed``; a failure is reported in the ``error`` field."""
        try:
            raw = self.execute_raw("show info typed")
        except RuntimeAPIError as err:
            return ProcessInfo(runtime_api=self.socket_path, error=str(err))
        return ProcessInfo(runtime_api=self.socket_path, info=parse_info(raw))

    def set_frontend_max_conn(self, frontend: str, maxconn: int) -> None:
        """Set maxconn of a frontend."""
        self.execute(f"set maxconn frontend {frontend} {maxconn}")

    def set_server_addr(self, backend: str, server: str, ip: str, port: int = 0) -> None:
        """Set the address, and the port if positive, of a server."""
        if port > 0:
            command = f"set server {backend}/{server} addr {ip} port {port}"
        else:
            command = f"set server {backend}/{server} addr {ip}"
        self.execute(command)

    def set_server_state(self, backend: str, server: str, state: str) -> None:
        """Set the admin state of a server: ready, drain or maint."""
        if not server_state_valid(state):
            raise RuntimeAPIError("bad request")
        self.execute(f"set server {backend}/{server} state {state}")

    def set_server_weight(self, backend: str, server: str, weight: str) -> None:
        """Set the weight of a server, absolute or as a percentage."""
        if not server_weight_valid(weight):
            raise RuntimeAPIError("bad request")
        self.execute(f"set server {backend}/{server} weight {weight}")

    def set_server_health(self, backend: str, server: str, health: str) -> None:
        """Set the health of a server: up, stopping or down."""
        if not server_health_valid(health):
            raise RuntimeAPIError("bad request")
        self.execute(f"set server {backend}/{server} health {health}")

    def set_server_check_port(self, backend: str, server: str, port: int) -> None:
        """Set the health check port of a server (1-65535)."""
        if not 0 < port <= 65535:
            raise RuntimeAPIError("bad request")
        self.execute(f"set server {backend}/{server} check-port {port}")

    def enable_agent_check(self, backend: str, server: str) -> None:
        """Enable the agent check of a server."""
        self.execute(f"enable agent {backend}/{server}")

    def disable_agent_check(self, backend: str, server: str) -> None:
        """Disable the agent check of a server."""
        self.execute(f"disable agent {backend}/{server}")

    def set_server_agent_addr(self, backend: str, server: str, addr: str) -> None:
        """Set the agent address of a server."""
        self.execute(f"set server {backend}/{server} agent-addr {addr}")

    def set_server_agent_send(self, backend: str, server: str, send: str) -> None:
        """Set the string sent to the agent of a server."""
        self.execute(f"set server {backend}/{server} agent-send {send}")

    def _servers_state_output(self, backend: str) -> str:
        return self.execute_with_response(f"show servers state {backend}")

    def get_servers_state(self, backend: str) -> list[RuntimeServer]:
        """Return the runtime state of every server of a backend."""
        output = self._servers_state_output(backend)
        try:
            return parse_runtime_servers(output)
        except ValueError as err:
            raise RuntimeAPIError(str(err)) from err

    def get_server_state(self, backend: str, server: str) -> RuntimeServer | None:
        """Return the runtime state of one server, or None if it is absent."""
        output = self._servers_state_output(backend)
        try:
            return find_runtime_server(output, server)
        except ValueError as err:
            raise RuntimeAPIError(str(err)) from err

    def show_tables(self) -> list[StickTable]:
        """Return the descriptions of all stick tables."""
        response = self.execute_with_response("show table")
        return parse_stick_tables(response, self.process)

    def show_table(self, name: str) -> StickTable | None:
        """Return the description of the stick table ``name``, or None."""
        response = self.execute_with_response("show table")
        for line in response.split("\n"):
            table = parse_stick_table(line, self.process)
            if table is not None and table.name == name:
                return table
        return None

    def get_table_entries(
        self, name: str, filters: Sequence[str] = (), key: str = ""
    ) -> list[StickTableEntry]:
        """Return the entries of a stick table; only the first filter is used."""
        command = table_entries_command(name, filters, key)
        return parse_stick_table_entries(self.execute_with_response(command))