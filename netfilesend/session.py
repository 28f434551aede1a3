"""A network session that sends and receives files as server or client."""

from __future__ import annotations

import argparse
import socket
import sys
from pathlib import Path

from netfilesend.transfer import (
    Mode,
    Receiver,
    ServiceLog,
    save_received,
    send_file as _send_file,
)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 30000
DEFAULT_BUFFER_SIZE = 65536

TITLE_OFFLINE = "No network!"
TITLE_WAITING = "Server is waiting for a connection!"
TITLE_ONLINE = "Network is working!"


class Session:
    """One listening or connecting endpoint with a single working connection."""

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        base_dir: str | Path = ".",
        log: ServiceLog | None = None,
    ) -> None:
        self.host = host
        self.port = port
        self.base_dir = Path(base_dir)
        self.log = log if log is not None else ServiceLog()
        self.mode = Mode.RESET
        self.title = TITLE_OFFLINE
        self.initial_receive_buffer = DEFAULT_BUFFER_SIZE
        self.initial_send_buffer = DEFAULT_BUFFER_SIZE
        self._listener: socket.socket | None = None
        self._sock: socket.socket | None = None
        self._receiver = Receiver(self.log)

    def __enter__(self) -> Session:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    @property
    def connected(self) -> bool:
        """Whether a working connection is open."""
        return self._sock is not None

    @property
    def address(self) -> tuple[str, int]:
        """Local address of the listening or working socket."""
        sock = self._listener if self._listener is not None else self._sock
        if sock is None:
            raise RuntimeError("session has no open socket")
        host, port = sock.getsockname()[:2]
        return host, port

    @property
    def received_bytes(self) -> int:
        """Bytes of the file being received so far, header included."""
        return self._receiver.received()

    def start_server(self) -> None:
        """Bind to the port on every interface and start listening."""
        if self.mode is not Mode.RESET:
            raise RuntimeError("session is already started")
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            listener.bind(("", self.port))
        except OSError:
            listener.close()
            self.log.add("Error creating the listening socket!")
            raise
        try:
            listener.listen()
        except OSError:
            listener.close()
            self.log.add("Error enabling listening!")
            raise
        self._listener = listener
        self.mode = Mode.SERVER
        self.title = TITLE_WAITING

    def accept(self) -> None:
        """Wait for a client and make its connection the working socket."""
        if self._listener is None:
            raise RuntimeError("server is not listening")
        try:
            conn, _ = self._listener.accept()
        except OSError:
            self.log.add("Error accepting the working socket!")
            raise
        if self._sock is not None:
            self._sock.close()
        self._sock = conn
        self._on_connected()

    def start_client(self) -> None:
        """Connect to the server at ``host``:``port``."""
        if self.mode is not Mode.RESET:
            raise RuntimeError("session is already started")
        try:
            sock = socket.create_connection((self.host, self.port))
        except OSError as exc:
            self.stop()
            raise ConnectionError(
                "Connection attempt was rejected! Perhaps the server is not created yet!"
            ) from exc
        self._sock = sock
        self.mode = Mode.CLIENT
        self._on_connected()

    def _on_connected(self) -> None:
        self.title = TITLE_ONLINE
        self.initial_receive_buffer = self.buffer_size(socket.SO_RCVBUF)
        self.initial_send_buffer = self.buffer_size(socket.SO_SNDBUF)

    def stop(self) -> None:
        """Close every socket and return to the initial state."""
        for sock in (self._listener, self._sock):
            if sock is not None:
                sock.close()
        self._listener = None
        self._sock = None
        self._receiver.reset()
        self.mode = Mode.RESET
        self.title = TITLE_OFFLINE

    def _working_socket(self) -> socket.socket:
        if self._sock is None:
            raise RuntimeError("no working connection")
        return self._sock

    def send_file(self, path: str | Path):
        """Send the file at ``path`` over the working connection."""
        return _send_file(self._working_socket(), path, self.log)

    def receive(self) -> list[Path]:
        """Read what has arrived; save completed files and return their paths.

        When the peer closes the connection the session is stopped.
        """
        sock = self._working_socket()
        size = self.buffer_size(socket.SO_RCVBUF)
        if size > 0:
            self.log.add(f"Receive buffer size - {size}")
        else:
            self.log.add("Receive buffer error!")
            size = DEFAULT_BUFFER_SIZE
        try:
            data = sock.recv(size)
        except BlockingIOError:
            self.log.add("Receive blocked!")
            return []
        except OSError as exc:
            self.log.add(f"Unknown receive error - {exc.errno}. Clearing memory!")
            self._receiver.reset()
            raise
        if not data:
            self.stop()
            return []
        try:
            files = self._receiver.feed(data)
        except ValueError:
            self._receiver.reset()
            raise
        saved = []
        for received in files:
            target = save_received(received, self.mode, self.base_dir)
            self.log.add(f"File received - {received.name}")
            saved.append(target)
        return saved

    def buffer_size(self, option: int) -> int:
        """Size of the working socket's buffer ``option``, or -1 if unavailable."""
        if self._sock is None:
            return -1
        try:
            return self._sock.getsockopt(socket.SOL_SOCKET, option)
        except OSError:
            return -1

    def _set_buffer(self, option: int, size: int, initial: int) -> int:
        sock = self._working_socket()
        try:
            sock.setsockopt(socket.SOL_SOCKET, option, size)
        except OSError as exc:
            self.log.add(f"Error setting the buffer size - {exc.errno}")
            raise
        return self.buffer_size(option)

    def set_receive_buffer(self, size: int, reset: bool = False) -> int:
        """Set the receive buffer, or restore the initial size; return the actual size."""
        if reset:
            size = self.initial_receive_buffer
        return self._set_buffer(socket.SO_RCVBUF, size, self.initial_receive_buffer)

    def set_send_buffer(self, size: int, reset: bool = False) -> int:
        """Set the send buffer, or restore the initial size; return the actual size."""
        if reset:
            size = self.initial_send_buffer
        return self._set_buffer(socket.SO_SNDBUF, size, self.initial_send_buffer)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="netfilesend",
        description="Send files to a peer, or receive files until the peer closes.",
    )
    parser.add_argument("mode", choices=["server", "client"])
    parser.add_argument("files", nargs="*", help="files to send after connecting")
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--dir", default=".", help="where received files are saved")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run one session from the command line and return the exit status."""
    args = _build_parser().parse_args(argv)
    session = Session(args.host, args.port, args.dir)
    try:
        with session:
            if args.mode == "server":
                session.start_server()
                session.accept()
            else:
                session.start_client()
            if args.files:
                for path in args.files:
                    header = session.send_file(path)
                    print(f"sent {header.name} ({header.length} bytes)")
            else:
                while session.connected:
                    for target in session.receive():
                        print(f"received {target}")
    except (OSError, ValueError) as exc:
        print(f"netfilesend: {exc}", file=sys.stderr)
        return 1
    return 0