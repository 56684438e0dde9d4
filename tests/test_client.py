import os
import shutil
import socketserver
import tempfile
import threading

import pytest

from haproxy_native.runtime.client import Client, default_client
from haproxy_native.runtime.single import RuntimeAPIError


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


def _line(name, port):
    return f"3 bk 1 {name} 10.0.0.1 2 0 1 1 0 0 0 0 0 0 0 0 - {port}"


def test_default_client_uses_default_socket():
    client = default_client()
    assert [r.socket_path for r in client.runtimes] == ["/var/run/haproxy.sock"]


def test_init_with_master_socket_requires_path():
    with pytest.raises(RuntimeAPIError, match="Master socket not configured"):
        Client().init_with_master_socket("", 0)


def test_init_with_master_socket_defaults_to_one_worker():
    client = Client()
    client.init_with_master_socket("/tmp/master.sock", 0)
    assert [(r.worker, r.process) for r in client.runtimes] == [(1, 1)]


def test_init_sockets_and_master():
    client = Client()
    client.init(["/tmp/a.sock", "/tmp/b.sock"], "/tmp/master.sock", 2)
    assert [(r.socket_path, r.worker, r.process) for r in client.runtimes] == [
        ("/tmp/a.sock", 0, 0),
        ("/tmp/b.sock", 0, 1),
        ("/tmp/master.sock", 1, 1),
        ("/tmp/master.sock", 2, 2),
    ]


def test_init_with_sockets_keeps_process_numbers():
    client = Client()
    client.init_with_sockets({3: "/tmp/c.sock", 5: "/tmp/d.sock"})
    assert sorted(r.process for r in client.runtimes) == [3, 5]


def test_command_reaches_every_runtime(haproxy):
    first = haproxy(name="a.sock")
    second = haproxy(name="b.sock")
    client = Client()
    client.init_with_sockets({1: first.path, 2: second.path})
    client.set_frontend_max_conn("fe", 20)
    assert first.commands == ["set maxconn frontend fe 20"]
    assert second.commands == first.commands


def test_error_is_prefixed_with_socket_path(haproxy):
    fake = haproxy({"enable agent bk/srv": "\n1:No such server.\n"})
    client = Client()
    client.init_with_sockets({1: fake.path})
    with pytest.raises(RuntimeAPIError) as err:
        client.enable_agent_check("bk", "srv")
    assert str(err.value).startswith(f"{fake.path} ")


def test_master_socket_workers(haproxy):
    fake = haproxy({"show info typed": "1.0.Version.1:POS:str:2.0.5"})
    client = Client()
    client.init_with_master_socket(fake.path, 2)
    infos = client.get_info()
    assert [i.info.version for i in infos] == ["2.0.5", "2.0.5"]
    assert sorted(fake.received) == [
        "@1 set severity-output number;@1 show info typed\n",
        "@2 set severity-output number;@2 show info typed\n",
    ]


def test_execute_raw_collects_all(haproxy):
    first = haproxy({"show info": "one"}, name="a.sock")
    second = haproxy({"show info": "two"}, name="b.sock")
    client = Client()
    client.init([first.path, second.path])
    assert client.execute_raw("show info") == ["one", "two"]


def test_get_stats_per_runtime(haproxy):
    fake = haproxy({"show stat": "# pxname,svname\nfe,FRONTEND"})
    client = Client()
    client.init([fake.path])
    stats = client.get_stats()
    assert len(stats) == 1
    assert stats[0].stats[0].name == "fe"


def test_servers_state_agreeing(haproxy):
    response = {"show servers state bk": "\n1\n" + _line("srv1", 80)}
    first = haproxy(response, name="a.sock")
    second = haproxy(response, name="b.sock")
    client = Client()
    client.init([first.path, second.path])
    servers = client.get_servers_state("bk")
    assert [s.name for s in servers] == ["srv1"]
    assert client.get_server_state("bk", "srv1").port == 80


def test_servers_state_differing(haproxy):
    first = haproxy({"show servers state bk": "\n1\n" + _line("srv1", 80)}, name="a.sock")
    second = haproxy({"show servers state bk": "\n1\n" + _line("srv1", 81)}, name="b.sock")
    client = Client()
    client.init([first.path, second.path])
    with pytest.raises(RuntimeAPIError, match="Servers states differ"):
        client.get_servers_state("bk")
    with pytest.raises(RuntimeAPIError, match="Server states differ"):
        client.get_server_state("bk", "srv1")


def test_show_tables_filters_by_process(haproxy):
    first = haproxy({"show table": "\n# table: t1, type: ip, size:1, used:0"}, name="a.sock")
    second = haproxy({"show table": "\n# table: t2, type: ip, size:1, used:0"}, name="b.sock")
    client = Client()
    client.init_with_sockets({1: first.path, 2: second.path})
    assert sorted(t.name for t in client.show_tables(0)) == ["t1", "t2"]
    assert [t.name for t in client.show_tables(2)] == ["t2"]
    assert client.show_table("t1", 1).process == 1
    assert client.show_table("t1", 9) is None


def test_get_table_entries_by_process(haproxy):
    fake = haproxy({"show table t1": "\n0x1: key=k1 use=1"})
    client = Client()
    client.init_with_sockets({1: fake.path})
    entries = client.get_table_entries("t1", 1, [], "")
    assert [(e.key, e.use) for e in entries] == [("k1", True)]
    assert client.get_table_entries("t1", 2, [], "") == []
    assert fake.commands == ["show table t1"]