"""Access to the runtime APIs of all HAProxy processes at once."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import TypeVar

from haproxy_native.runtime.info import ProcessInfo
from haproxy_native.runtime.servers import RuntimeServer
from haproxy_native.runtime.single import RuntimeAPIError, SingleRuntime
from haproxy_native.runtime.stats import NativeStatsCollection
from haproxy_native.runtime.stick_tables import StickTable, StickTableEntry

DEFAULT_SOCKET_PATH = "/var/run/haproxy.sock"

_T = TypeVar("_T")


def _wrapped(runtime: SingleRuntime, call: Callable[[SingleRuntime], _T]) -> _T:
    try:
        return call(runtime)
    except RuntimeAPIError as err:
        raise RuntimeAPIError(f"{runtime.socket_path} {err}") from err


class Client:
    """Sends runtime API commands to every configured HAProxy process."""

    def __init__(self) -> None:
        self.runtimes: list[SingleRuntime] = []

    def init(
        self,
        socket_paths: Sequence[str],
        master_socket_path: str = "",
        nbproc: int = 0,
    ) -> None:
        """Use one stats socket per path, plus ``nbproc`` workers of a master socket."""
        self.runtimes = [
            SingleRuntime(path, 0, index) for index, path in enumerate(socket_paths)
        ]
        if master_socket_path and nbproc:
            self.runtimes.extend(
                SingleRuntime(master_socket_path, i, i) for i in range(1, nbproc + 1)
            )

    def init_with_sockets(self, socket_paths: Mapping[int, str]) -> None:
        """Use one stats socket per process number."""
        self.runtimes = [
            SingleRuntime(path, 0, process) for process, path in socket_paths.items()
        ]

    def init_with_master_socket(self, master_socket_path: str, nbproc: int = 0) -> None:
        """Use ``nbproc`` workers (at least one) behind a master socket."""
        if nbproc == 0:
            nbproc = 1
        if not master_socket_path:
            raise RuntimeAPIError("Master socket not configured")
        self.runtimes = [
            SingleRuntime(master_socket_path, i, i) for i in range(1, nbproc + 1)
        ]

    def _each(self, call: Callable[[SingleRuntime], object]) -> None:
        for runtime in self.runtimes:
            _wrapped(runtime, call)

    def get_stats(self) -> list[NativeStatsCollection]:
        """Return the statistics of every runtime."""
        return [runtime.get_stats() for runtime in self.runtimes]

    def get_info(self) -> list[ProcessInfo]:
        """Return the process information of every runtime."""
        return [runtime.get_info() for runtime in self.runtimes]

    def set_frontend_max_conn(self, frontend: str, maxconn: int) -> None:
        """Set maxconn of a frontend in every process."""
        self._each(lambda r: r.set_frontend_max_conn(frontend, maxconn))

    def set_server_addr(self, backend: str, server: str, ip: str, port: int = 0) -> None:
        """Set the address of a server in every process."""
        self._each(lambda r: r.set_server_addr(backend, server, ip, port))

    def set_server_state(self, backend: str, server: str, state: str) -> None:
        """Set the admin state of a server in every process."""
        self._each(lambda r: r.set_server_state(backend, server, state))

    def set_server_weight(self, backend: str, server: str, weight: str) -> None:
        """Set the weight of a server in every process."""
        self._each(lambda r: r.set_server_weight(backend, server, weight))

    def set_server_health(self, backend: str, server: str, health: str) -> None:
        """Set the health of a server in every process."""
        self._each(lambda r: r.set_server_health(backend, server, health))

    def enable_agent_check(self, backend: str, server: str) -> None:
        """Enable the agent check of a server in every process."""
        self._each(lambda r: r.enable_agent_check(backend, server))

    def disable_agent_check(self, backend: str, server: str) -> None:
        """Disable the agent check of a server in every process."""
        self._each(lambda r: r.disable_agent_check(backend, server))

    def set_server_agent_addr(self, backend: str, server: str, addr: str) -> None:
        """Set the agent address of a server in every process."""
        self._each(lambda r: r.set_server_agent_addr(backend, server, addr))

    def set_server_agent_send(self, backend: str, server: str, send: str) -> None:
        """Set the agent send string of a server in every process."""
        self._each(lambda r: r.set_server_agent_send(backend, server, send))

    def _same_everywhere(self, call: Callable[[SingleRuntime], _T], message: str) -> _T | None:
        previous: _T | None = None
        for index, runtime in enumerate(self.runtimes):
            try:
                current = call(runtime)
            except RuntimeAPIError:
                current = None
            if index > 0 and current != previous:
                raise RuntimeAPIError(message)
            previous = current
        return previous

    def get_servers_state(self, backend: str) -> list[RuntimeServer] | None:
        """Return the servers' runtime state, which must agree across processes."""
        return self._same_everywhere(
            lambda r: r.get_servers_state(backend),
            "Servers states differ in multiple runtime APIs",
        )

    def get_server_state(self, backend: str, server: str) -> RuntimeServer | None:
        """Return one server's runtime state, which must agree across processes."""
        return self._same_everywhere(
            lambda r: r.get_server_state(backend, server),
            "Server states differ in multiple runtime APIs",
        )

    def set_server_check_port(self, backend: str, server: str, port: int) -> None:
        """Set the health check port of a server in every process."""
        self._each(lambda r: r.set_server_check_port(backend, server, port))

    def show_tables(self, process: int = 0) -> list[StickTable]:
        """Return stick tables of one process, or of all when ``process`` is 0."""
        tables: list[StickTable] = []
        for runtime in self.runtimes:
            if process == 0 or runtime.process == process:
                tables.extend(_wrapped(runtime, SingleRuntime.show_tables))
        return tables

    def get_table_entries(
        self,
        name: str,
        process: int,
        filters: Sequence[str] = (),
        key: str = "",
    ) -> list[StickTableEntry]:
        """Return the entries of a stick table in the given process."""
        for runtime in self.runtimes:
            if runtime.process != process:
                continue
            return _wrapped(runtime, lambda r: r.get_table_entries(name, filters, key))
        return []

    def show_table(self, name: str, process: int) -> StickTable | None:
        """Return the description of a stick table in the given process, or None."""
        table = None
        for runtime in self.runtimes:
            if runtime.process != process:
                continue
            table = _wrapped(runtime, lambda r: r.show_table(name))
        return table

    def execute_raw(self, command: str) -> list[str]:
        """Run ``command`` in every process and return the raw responses."""
        return [
            _wrapped(runtime, lambda r: r.execute_raw(command))
            for runtime in self.runtimes
        ]


def default_client() -> Client:
    """Return a client using the default runtime socket path."""
    client = Client()
    client.init([DEFAULT_SOCKET_PATH], "", 0)
    return client