"""Wire format of a file transfer: a fixed-size header followed by the content."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from pathlib import Path

NAME_CHARS = 512
"""Capacity of the name field in UTF-16 code units, terminator included."""

NAME_BYTES = NAME_CHARS * 2
_LENGTH = struct.Struct("<i")
HEADER_SIZE = _LENGTH.size + NAME_BYTES
"""Size of a packed header in bytes."""

_MAX_LENGTH = 2**31 - 1


@dataclass(frozen=True)
class FileHeader:
    """Name and length of the file that follows the header on the wire."""

    name: str
    length: int

    def __post_init__(self) -> None:
        if not 0 <= self.length <= _MAX_LENGTH:
            raise ValueError(f"file length out of range: {self.length}")
        encoded = self.name.encode("utf-16-le")
        # One code unit is kept for the terminating zero.
        if len(encoded) > NAME_BYTES - 2:
            raise ValueError(f"file name too long: {self.name!r}")
        if "\x00" in self.name:
            raise ValueError("file name contains a NUL character")

    def pack(self) -> bytes:
        """Return the header as it is sent: length, then the padded UTF-16 name."""
        name = self.name.encode("utf-16-le").ljust(NAME_BYTES, b"\x00")
        return _LENGTH.pack(self.length) + name

    @classmethod
    def unpack(cls, data: bytes) -> FileHeader:
        """Decode a header from the first HEADER_SIZE bytes of ``data``."""
        if len(data) < HEADER_SIZE:
            raise ValueError(
                f"header needs {HEADER_SIZE} bytes, got {len(data)}"
            )
        (length,) = _LENGTH.unpack_from(data)
        raw = bytes(data[_LENGTH.size:HEADER_SIZE])
        end = next(
            (i for i in range(0, NAME_BYTES, 2) if raw[i:i + 2] == b"\x00\x00"),
            None,
        )
        if end is None:
            raise ValueError("file name is not terminated")
        try:
            name = raw[:end].decode("utf-16-le")
        except UnicodeDecodeError as exc:
            raise ValueError("file name is not valid UTF-16") from exc
        return cls(name, length)

    @classmethod
    def for_path(cls, path: str | Path) -> FileHeader:
        """Build the header for the file at ``path``."""
        path = Path(path)
        return cls(path.name, path.stat().st_size)


def encode_file(path: str | Path) -> bytes:
    """Return the complete transfer of ``path``: header followed by content."""
    path = Path(path)
    content = path.read_bytes()
    return FileHeader(path.name, len(content)).pack() + content