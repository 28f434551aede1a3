import socket
import threading

import pytest

from netfilesend.session import (
    TITLE_OFFLINE,
    TITLE_ONLINE,
    TITLE_WAITING,
    Session,
    main,
)
from netfilesend.transfer import Mode


def _receive_until(session, count=1, limit=10000):
    saved = []
    for _ in range(limit):
        if len(saved) >= count or not session.connected:
            break
        saved.extend(session.receive())
    return saved


@pytest.fixture
def pair(tmp_path):
    server = Session(port=0, base_dir=tmp_path / "srv")
    server.start_server()
    client = Session(port=server.address[1], base_dir=tmp_path / "cli")
    client.start_client()
    server.accept()
    yield server, client
    client.stop()
    server.stop()


def test_initial_state():
    session = Session()
    assert session.mode is Mode.RESET
    assert session.title == TITLE_OFFLINE
    assert session.port == 30000
    assert session.host == "127.0.0.1"
    assert session.connected is False


def test_start_server_sets_mode_and_title():
    with Session(port=0) as server:
        server.start_server()
        assert server.mode is Mode.SERVER
        assert server.title == TITLE_WAITING
        assert server.address[1] > 0


def test_connection_updates_both_sides(pair):
    server, client = pair
    assert server.title == TITLE_ONLINE
    assert client.title == TITLE_ONLINE
    assert client.mode is Mode.CLIENT
    assert server.connected and client.connected
    assert server.initial_receive_buffer == server.buffer_size(socket.SO_RCVBUF)
    assert client.initial_send_buffer == client.buffer_size(socket.SO_SNDBUF)


def test_client_sends_file_to_server(pair, tmp_path):
    server, client = pair
    source = tmp_path / "note.txt"
    content = bytes(range(256)) * 20
    source.write_bytes(content)
    header = client.send_file(source)
    assert header.name == "note.txt"
    saved = _receive_until(server)
    assert saved == [tmp_path / "srv" / "server" / "note.txt"]
    assert saved[0].read_bytes() == content
    assert server.received_bytes == 0


def test_server_sends_file_to_client(pair, tmp_path):
    server, client = pair
    source = tmp_path / "back.bin"
    source.write_bytes(b"payload")
    server.send_file(source)
    saved = _receive_until(client)
    assert saved == [tmp_path / "cli" / "client" / "back.bin"]
    assert saved[0].read_bytes() == b"payload"


def test_large_file_in_thread(pair, tmp_path):
    server, client = pair
    source = tmp_path / "big.bin"
    content = bytes(i % 251 for i in range(300_000))
    source.write_bytes(content)
    sender = threading.Thread(target=client.send_file, args=(source,))
    sender.start()
    saved = _receive_until(server)
    sender.join()
    assert saved[0].read_bytes() == content


def test_peer_close_stops_session(pair):
    server, client = pair
    client.stop()
    assert client.mode is Mode.RESET
    assert _receive_until(server) == []
    assert server.connected is False
    assert server.mode is Mode.RESET
    assert server.title == TITLE_OFFLINE


def test_stop_resets_state(pair):
    server, _ = pair
    server.stop()
    assert server.mode is Mode.RESET
    assert server.title == TITLE_OFFLINE
    assert server.buffer_size(socket.SO_RCVBUF) == -1


def test_buffer_size_without_socket():
    assert Session().buffer_size(socket.SO_SNDBUF) == -1


def test_set_buffers_report_actual_size(pair):
    server, client = pair
    actual = client.set_receive_buffer(8192)
    assert actual == client.buffer_size(socket.SO_RCVBUF)
    restored = client.set_send_buffer(0, reset=True)
    assert restored == client.buffer_size(socket.SO_SNDBUF)
    assert restored >= client.initial_send_buffer


def test_operations_need_connection(tmp_path):
    session = Session()
    with pytest.raises(RuntimeError):
        session.send_file(tmp_path / "x")
    with pytest.raises(RuntimeError):
        session.receive()
    with pytest.raises(RuntimeError):
        session.set_receive_buffer(8192)
    with pytest.raises(RuntimeError):
        session.accept()


def test_start_twice_is_rejected():
    with Session(port=0) as server:
        server.start_server()
        with pytest.raises(RuntimeError):
            server.start_server()
        with pytest.raises(RuntimeError):
            server.start_client()


def test_client_without_server_fails():
    probe = socket.socket()
    probe.bind(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()
    session = Session(port=port)
    with pytest.raises(ConnectionError):
        session.start_client()
    assert session.mode is Mode.RESET
    assert session.title == TITLE_OFFLINE


def test_malformed_header_raises(pair):
    server, client = pair
    client._working_socket().sendall(b"\x01\x00\x00\x00" + b"\x41\x00" * 512)
    with pytest.raises(ValueError):
        _receive_until(server)
    assert server.received_bytes == 0


def test_main_client_sends_file(tmp_path, capsys):
    source = tmp_path / "data.bin"
    source.write_bytes(b"hello world")
    with Session(port=0, base_dir=tmp_path / "out") as server:
        server.start_server()
        port = server.address[1]
        assert main(["client", "--port", str(port), str(source)]) == 0
        server.accept()
        saved = _receive_until(server)
    assert saved[0].read_bytes() == b"hello world"
    assert "data.bin" in capsys.readouterr().out


def test_main_reports_connection_failure(tmp_path, capsys):
    probe = socket.socket()
    probe.bind(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()
    assert main(["client", "--port", str(port), "--dir", str(tmp_path)]) == 1
    assert "netfilesend" in capsys.readouterr().err