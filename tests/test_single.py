import os
import shutil
import socketserver
import tempfile
import threading

import pytest

from haproxy_native.runtime.single import (
    RuntimeAPIError,
    SingleRuntime,
    check_response,
)


class _Handler(socketserver.StreamRequestHandler):
    def handle(self):
        raw = self.rfile.readline().decode()
        self.server.received.append(raw)
        line = raw.rstrip("\n")
        command = line.split(";", 1)[1] if ";" in line else line
        if command.startswith("@"):
            command = command.split(" ", 1)[1]
        self.server.commands.append(command)
        self.wfile.write(self.server.responses.get(command, "").encode())


@pytest.fixture
def haproxy():
    directory = tempfile.mkdtemp()
    servers = []

    def start(responses=None, name="haproxy.sock"):
        path = os.path.join(directory, name)
        server = socketserver.ThreadingUnixStreamServer(path, _Handler)
        server.received = []
        server.commands = []
        server.responses = responses or {}
        server.path = path
        threading.Thread(target=server.serve_forever, daemon=True).start()
        servers.append(server)
        return server

    yield start
    for server in servers:
        server.shutdown()
        server.server_close()
    shutil.rmtree(directory, ignore_errors=True)


SERVER_LINE = "3 bk 1 srv1 10.0.0.1 2 0 1 1 0 0 0 0 0 0 0 0 - 8080"


def test_check_response_error_severity():
    with pytest.raises(RuntimeAPIError) as err:
        check_response("\n3:Unknown command.", "show nothing")
    assert str(err.value) == "[3] Unknown command. [show nothing]"


def test_check_response_body():
    assert check_response("\nhello", "cmd") == "hello"
    assert check_response("", "cmd") == ""


def test_execute_raw_sends_severity_prefix_and_trims(haproxy):
    fake = haproxy({"show info typed": "result\n> "})
    runtime = SingleRuntime(fake.path, 0, 1)
    assert runtime.execute_raw("show info typed") == "result"
    assert fake.received == ["set severity-output number;show info typed\n"]


def test_worker_prefix(haproxy):
    fake = haproxy({"show stat": "x"})
    runtime = SingleRuntime(fake.path, 2, 2)
    runtime.execute_raw("show stat")
    assert fake.received == ["@2 set severity-output number;@2 show stat\n"]


def test_missing_socket_raises():
    runtime = SingleRuntime("/nonexistent/dir/haproxy.sock", 0, 1)
    with pytest.raises(RuntimeAPIError):
        runtime.execute_raw("show info")
    with pytest.raises(RuntimeAPIError) as err:
        runtime.execute("show info")
    assert str(err.value).endswith("[show info]")


def test_get_info_reports_connection_error():
    path = "/nonexistent/dir/haproxy.sock"
    info = SingleRuntime(path, 0, 1).get_info()
    assert info.runtime_api == path
    assert info.info is None
    assert info.error


def test_get_info_parses(haproxy):
    fake = haproxy(
        {"show info typed": "1.0.Version.1:POS:str:2.0.5\n6.0.Pid.1:MGP:u32:4242"}
    )
    info = SingleRuntime(fake.path, 0, 1).get_info()
    assert info.error == ""
    assert info.info.version == "2.0.5"
    assert info.info.pid == 4242


def test_get_stats(haproxy):
    fake = haproxy({"show stat": "# pxname,svname,scur\nfe,FRONTEND,3\nbk,srv1,1"})
    stats = SingleRuntime(fake.path, 0, 1).get_stats()
    assert stats.runtime_api == fake.path
    assert [(s.name, s.type) for s in stats.stats] == [
        ("fe", "frontend"),
        ("srv1", "server"),
    ]
    assert stats.stats[1].backend_name == "bk"


def test_get_stats_worker_api_name(haproxy):
    fake = haproxy({"show stat": "# pxname,svname\n"})
    stats = SingleRuntime(fake.path, 3, 3).get_stats()
    assert stats.runtime_api == f"{fake.path}@3"


def test_set_frontend_max_conn(haproxy):
    fake = haproxy()
    SingleRuntime(fake.path, 0, 1).set_frontend_max_conn("fe", 100)
    assert fake.commands == ["set maxconn frontend fe 100"]


def test_execute_error_response(haproxy):
    fake = haproxy({"set maxconn frontend fe 10": "\n2:No such frontend.\n"})
    with pytest.raises(RuntimeAPIError) as err:
        SingleRuntime(fake.path, 0, 1).set_frontend_max_conn("fe", 10)
    assert str(err.value) == "[2] No such frontend. [set maxconn frontend fe 10]"


def test_set_server_addr_with_and_without_port(haproxy):
    fake = haproxy()
    runtime = SingleRuntime(fake.path, 0, 1)
    runtime.set_server_addr("bk", "srv", "10.0.0.2", 8080)
    runtime.set_server_addr("bk", "srv", "10.0.0.3", 0)
    assert fake.commands == [
        "set server bk/srv addr 10.0.0.2 port 8080",
        "set server bk/srv addr 10.0.0.3",
    ]


def test_server_setters_commands(haproxy):
    fake = haproxy()
    runtime = SingleRuntime(fake.path, 0, 1)
    runtime.set_server_state("bk", "srv", "drain")
    runtime.set_server_weight("bk", "srv", "50%")
    runtime.set_server_health("bk", "srv", "up")
    runtime.set_server_check_port("bk", "srv", 8081)
    runtime.enable_agent_check("bk", "srv")
    runtime.disable_agent_check("bk", "srv")
    runtime.set_server_agent_addr("bk", "srv", "10.0.0.9")
    runtime.set_server_agent_send("bk", "srv", "hello")
    assert fake.commands == [
        "set server bk/srv state drain",
        "set server bk/srv weight 50%",
        "set server bk/srv health up",
        "set server bk/srv check-port 8081",
        "enable agent bk/srv",
        "disable agent bk/srv",
        "set server bk/srv agent-addr 10.0.0.9",
        "set server bk/srv agent-send hello",
    ]


@pytest.mark.parametrize(
    "call",
    [
        lambda r: r.set_server_state("bk", "srv", "sleeping"),
        lambda r: r.set_server_weight("bk", "srv", "300"),
        lambda r: r.set_server_health("bk", "srv", "great"),
        lambda r: r.set_server_check_port("bk", "srv", 0),
        lambda r: r.set_server_check_port("bk", "srv", 70000),
    ],
)
def test_invalid_values_rejected_without_sending(haproxy, call):
    fake = haproxy()
    with pytest.raises(RuntimeAPIError, match="bad request"):
        call(SingleRuntime(fake.path, 0, 1))
    assert fake.commands == []


def test_get_servers_state(haproxy):
    fake = haproxy({"show servers state bk": "\n1\n# be_id be_name\n" + SERVER_LINE})
    servers = SingleRuntime(fake.path, 0, 1).get_servers_state("bk")
    assert len(servers) == 1
    server = servers[0]
    assert (server.name, server.address, server.port) == ("srv1", "10.0.0.1", 8080)
    assert server.admin_state == "ready"
    assert server.operational_state == "up"


def test_get_servers_state_bad_format(haproxy):
    fake = haproxy({"show servers state bk": "\n2\n"})
    with pytest.raises(RuntimeAPIError, match="Unsupported output format version"):
        SingleRuntime(fake.path, 0, 1).get_servers_state("bk")


def test_get_server_state(haproxy):
    fake = haproxy({"show servers state bk": "\n1\n" + SERVER_LINE})
    runtime = SingleRuntime(fake.path, 0, 1)
    assert runtime.get_server_state("bk", "srv1").id == "1"
    assert runtime.get_server_state("bk", "other") is None


def test_show_tables_and_table(haproxy):
    fake = haproxy(
        {"show table": "\n# table: tbl, type: ip, size:100, used:1\n"
         "# table: other, type: integer, size:10, used:0"}
    )
    runtime = SingleRuntime(fake.path, 0, 4)
    tables = runtime.show_tables()
    assert [t.name for t in tables] == ["tbl", "other"]
    assert all(t.process == 4 for t in tables)
    table = runtime.show_table("other")
    assert (table.type, table.size, table.used) == ("integer", 10, 0)
    assert runtime.show_table("missing") is None


def test_get_table_entries(haproxy):
    command = "show table tbl data.conn_cnt key 10.1.1.1"
    fake = haproxy(
        {command: "\n# table: tbl, type: ip, size:100, used:1\n"
         "0x1: key=10.1.1.1 use=0 exp=100 conn_cnt=5"}
    )
    entries = SingleRuntime(fake.path, 0, 1).get_table_entries(
        "tbl", ["conn_cnt", "conn_cur"], "10.1.1.1"
    )
    assert fake.commands == [command]
    assert len(entries) == 1
    assert entries[0].key == "10.1.1.1"
    assert entries[0].conn_cnt == 5