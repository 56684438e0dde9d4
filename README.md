# haproxy-native

A Python library for working with HAProxy. It talks to the HAProxy runtime
API over a UNIX socket and parses what the API returns, and it maps single
configuration lines (servers, log targets, server switching rules, stick
rules and TCP request/response rules) to plain Python objects and back.

It has no third-party dependencies.

## Installation

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Runtime API

`haproxy_native.runtime.client.Client` sends commands to one or more HAProxy
processes at once, either through one stats socket per process or through
the master socket in master-worker mode.

```python
from haproxy_native.runtime.client import Client

client = Client()
client.init_with_sockets({1: "/var/run/haproxy.sock"})

client.set_server_state("web", "srv1", "drain")
client.set_server_weight("web", "srv1", "50%")
client.set_server_addr("web", "srv1", "10.0.0.5", 8080)
client.set_frontend_max_conn("fe_http", 2000)

for process_info in client.get_info():
    print(process_info.runtime_api, process_info.info, process_info.error)

for collection in client.get_stats():
    for stat in collection.stats:
        print(stat.name, stat.type, stat.stats)

servers = client.get_servers_state("web")
tables = client.show_tables(0)          # 0 means every process
table = client.show_table("st_src", 1)
entries = client.get_table_entries("st_src", 1, ["conn_cnt gt 10"], "")
responses = client.execute_raw("show info")
```

Other ways to set up a client:

```python
client = Client()
client.init(["/var/run/haproxy.sock"], "", 0)
client.init_with_master_socket("/var/run/haproxy-master.sock", 4)
```

`default_client()` returns a client bound to `/var/run/haproxy.sock`
(`DEFAULT_SOCKET_PATH`).

Commands that change state are sent to every process; the first failure
raises `RuntimeAPIError` with the socket path in its message.
`get_servers_state` and `get_server_state` raise if the processes disagree.
`get_stats` and `get_info` never raise: a failed runtime is reported in the
`error` field of its result.

### One process

`haproxy_native.runtime.single.SingleRuntime(socket_path, worker, process)`
addresses a single runtime API and has the same commands
(`execute_raw`, `execute`, `execute_with_response`, `get_stats`,
`get_info`, `set_server_*`, `enable_agent_check`, `disable_agent_check`,
`get_servers_state`, `get_server_state`, `show_tables`, `show_table`,
`get_table_entries`). A non-zero `worker` prefixes commands with
`@<worker>` for use behind a master socket. A command is retried once if
the connection fails.

Errors reported by HAProxy (severity 0 to 3) are raised as
`RuntimeAPIError`; `check_response(raw, command)` does that check on a raw
response. Invalid states (`ready`, `drain`, `maint`), healths (`up`,
`stopping`, `down`), weights (0-256 or 0%-100%) and check ports (1-65535)
are rejected with `RuntimeAPIError("bad request")` before anything is sent.
The checks themselves are in `haproxy_native.runtime.validation`:
`server_state_valid`, `server_health_valid`, `server_weight_valid`.

### Output parsers

The parsers work on text and can be used without a socket:

- `haproxy_native.runtime.info.parse_info` — `show info typed` into a
  `ProcessInfoItem`.
- `haproxy_native.runtime.stats.parse_stats` — `show stat` CSV into a
  `NativeStatsCollection` of `NativeStat`.
- `haproxy_native.runtime.servers.parse_runtime_servers`,
  `parse_runtime_server`, `find_runtime_server` — `show servers state`
  (format version 1 only; other versions raise `ValueError`) into
  `RuntimeServer`.
- `haproxy_native.runtime.stick_tables.parse_stick_tables`,
  `parse_stick_table`, `parse_stick_table_entries`,
  `parse_stick_table_entry` — `show table` output into `StickTable` and
  `StickTableEntry`; `table_entries_command` builds the command (only the
  first filter is used).

## Configuration objects

Each module in `haproxy_native.configuration` pairs a configuration-line
type with its model and provides `parse_*` and `serialize_*` functions,
plus a function that parses a list of lines and numbers the results by
position.

```python
from haproxy_native.configuration.server_options import (
    ServerLine, ServerOptionValue, ServerOptionWord, parse_server, serialize_server,
)

line = ServerLine(
    name="web1",
    address="192.168.1.1:9200",
    params=[ServerOptionWord("check"), ServerOptionValue("inter", "2s")],
)
server = parse_server(line)      # Server(port=9200, check="enabled", inter=2000, ...)
line = serialize_server(server)  # back to a ServerLine
```

| Module | Line type | Model |
| --- | --- | --- |
| `server_options` | `ServerLine` | `Server` (also `parse_servers`, `find_server`) |
| `log_target` | `Log` | `LogTarget` |
| `server_switching` | `UseServer` | `ServerSwitchingRule` |
| `stick_rule` | `Stick` | `StickRule` |
| `tcp_request` | `TCPAction` (`TCPActionKind`) | `TCPRequestRule` |
| `tcp_response` | `TCPAction` | `TCPResponseRule` |

TCP rules are supported for the `accept` and `reject` actions and for
`inspect-delay`; other lines parse to `None` and are left out of the
numbered lists.

## Helpers

`haproxy_native.misc` provides case conversion (`camel_case`,
`snake_case`, `dash_case`), HAProxy value parsing (`parse_timeout` returns
milliseconds, `parse_size` returns bytes, both `None` for zero or invalid
input) and small lookups (`string_in_slice`, `obj_in_array`,
`get_obj_by_field`).

## What this package does not do

It does not read or write HAProxy configuration files. There is no parser
for a whole configuration, no versioning of configuration files, no
transactions, no backups and no check of a configuration with the
`haproxy` binary. The configuration modules only convert single lines that
you have already obtained to and from model objects. There is no command
line tool.