"""Sending and receiving files over a connected stream socket."""

from __future__ import annotations

import enum
import select
import socket
from dataclasses import dataclass
from pathlib import Path

from netfilesend.protocol import HEADER_SIZE, FileHeader


class Mode(enum.Enum):
    """Role the application is working in."""

    RESET = enum.auto()
    SERVER = enum.auto()
    CLIENT = enum.auto()


class ServiceLog:
    """Numbered service messages, newest first."""

    def __init__(self) -> None:
        self._messages: list[str] = []

    def add(self, message: str) -> str:
        """Record ``message`` with its sequence number and return the entry."""
        entry = f"{len(self._messages) + 1}.{message}"
        self._messages.insert(0, entry)
        return entry

    def clear(self) -> None:
        """Remove every message."""
        self._messages.clear()

    def messages(self) -> list[str]:
        """Return the entries, newest first."""
        return list(self._messages)

    def __len__(self) -> int:
        return len(self._messages)


@dataclass(frozen=True)
class ReceivedFile:
    """A file fully read from the stream."""

    name: str
    data: bytes


class Receiver:
    """Reassembles header-prefixed files from stream chunks."""

    def __init__(self, log: ServiceLog | None = None) -> None:
        self._log = log
        self._buffer = bytearray()
        self.header: FileHeader | None = None

    def feed(self, data: bytes) -> list[ReceivedFile]:
        """Consume ``data``; return the files it completes, in order."""
        self._buffer.extend(data)
        done: list[ReceivedFile] = []
        while True:
            if self.header is None:
                if len(self._buffer) < HEADER_SIZE:
                    break
                self.header = FileHeader.unpack(bytes(self._buffer[:HEADER_SIZE]))
                del self._buffer[:HEADER_SIZE]
                if self._log is not None:
                    self._log.add("File header received!")
            length = self.header.length
            if len(self._buffer) < length:
                break
            done.append(ReceivedFile(self.header.name, bytes(self._buffer[:length])))
            del self._buffer[:length]
            self.header = None
        return done

    def reset(self) -> None:
        """Drop any partially received file."""
        self._buffer.clear()
        self.header = None

    def received(self) -> int:
        """Bytes of the current transfer received so far, header included."""
        extra = HEADER_SIZE if self.header is not None else 0
        return len(self._buffer) + extra


def save_received(received: ReceivedFile, mode: Mode, base_dir: str | Path = ".") -> Path:
    """Write ``received`` into the ``client`` or ``server`` folder under ``base_dir``."""
    name = Path(received.name).name
    if not name:
        raise ValueError(f"invalid file name: {received.name!r}")
    folder = Path(base_dir) / ("client" if mode is Mode.CLIENT else "server")
    folder.mkdir(parents=True, exist_ok=True)
    target = folder / name
    target.write_bytes(received.data)
    return target


def send_buffer(sock: socket.socket, data: bytes, log: ServiceLog) -> int:
    """Send all of ``data`` in pieces no larger than the socket's send buffer."""
    view = memoryview(data)
    sent_total = 0
    while sent_total < len(view):
        try:
            buffer_size = sock.getsockopt(socket.SOL_SOCKET, socket.SO_SNDBUF)
        except OSError:
            log.add("Send buffer size error!")
            raise
        remaining = len(view) - sent_total
        chunk = remaining if buffer_size <= 0 else min(remaining, buffer_size)
        log.add(f"Send buffer size - {buffer_size}")
        try:
            sent = sock.send(view[sent_total:sent_total + chunk])
        except BlockingIOError:
            log.add("Send buffer temporarily unavailable!")
            select.select([], [sock], [])
            continue
        except OSError as exc:
            log.add(f"Send error - {exc.errno}")
            raise
        sent_total += sent
        log.add(f"Sent actual - {sent}")
    return sent_total


def send_file(sock: socket.socket, path: str | Path, log: ServiceLog) -> FileHeader:
    """Send the header of ``path`` and then its content."""
    path = Path(path)
    content = path.read_bytes()
    header = FileHeader(path.name, len(content))
    send_buffer(sock, header.pack(), log)
    send_buffer(sock, content, log)
    return header


def file_size(path: str | Path) -> int:
    """Size of the file at ``path`` in bytes."""
    return Path(path).stat().st_size