"""SSH wire-format primitives (RFC 4251, section 5).

Used for building and reading SSHSIG signature blobs.
"""

from __future__ import annotations

import struct


def pack_uint32(value: int) -> bytes:
    """Encode ``value`` as a big-endian unsigned 32-bit integer."""
    return struct.pack(">I", value)


def pack_string(data: bytes | str) -> bytes:
    """Encode ``data`` as a length-prefixed SSH ``string``."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return pack_uint32(len(data)) + data


def pack_mpint(value: int) -> bytes:
    """Encode a non-negative integer as an SSH ``mpint``.

    Zero is the empty string; a leading zero byte is added when the most
    significant bit is set so the value stays positive.
    """
    if value < 0:
        raise ValueError("negative mpint values are not supported")
    if value == 0:
        return pack_string(b"")
    raw = value.to_bytes((value.bit_length() + 7) // 8, "big")
    if raw[0] & 0x80:
        raw = b"\x00" + raw
    return pack_string(raw)


class WireReader:
    """Sequential reader over an SSH wire-format buffer."""

    def __init__(self, data: bytes) -> None:
        self._data = data
        self._offset = 0

    @property
    def remaining(self) -> int:
        return len(self._data) - self._offset

    def at_end(self) -> bool:
        return self.remaining == 0

    def read_bytes(self, count: int) -> bytes:
        if count < 0 or count > self.remaining:
            raise ValueError(
                f"truncated SSH data: wanted {count} bytes, {self.remaining} left"
            )
        chunk = self._data[self._offset : self._offset + count]
        self._offset += count
        return chunk

    def read_uint32(self) -> int:
        (value,) = struct.unpack(">I", self.read_bytes(4))
        return value

    def read_string(self) -> bytes:
        return self.read_bytes(self.read_uint32())

    def read_text(self) -> str:
        return self.read_string().decode("utf-8")

    def read_mpint(self) -> int:
        return int.from_bytes(self.read_string(), "big", signed=True)
