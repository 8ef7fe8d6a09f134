"""Decode ROSMSG binary data into Python values."""

from __future__ import annotations

import io
import struct
from collections.abc import Sequence
from typing import Any, BinaryIO

from .budget import ByteBudget
from .encoder import Encoder
from .errors import (
    BadMapEntry,
    BadStringData,
    EndOfBuffer,
    Overflow,
    UnsupportedCharType,
    UnsupportedDeserializerMethod,
    UnsupportedEnumType,
)
from .types import (
    FORMAT_CHARS,
    TYPE_SIZES,
    RosType,
    ScalarKind,
    check_map_entry_type,
    takes_no_bytes,
)

_U32 = struct.Struct("<I")


def read_exact(reader: BinaryIO, size: int) -> bytes:
    """Read `size` bytes, fewer only if the stream ends first.

    Raw streams may return short reads before their end, so reading goes on
    until the stream returns no data.
    """
    data = bytearray()
    while len(data) < size:
        chunk = reader.read(size - len(data))
        if not chunk:
            break
        data.extend(chunk)
    return bytes(data)


class Decoder:
    """Reads ROSMSG values from a binary stream.

    The decoder does not read the outer length prefix of a message. The
    caller passes the number of bytes the value is expected to occupy, and
    every read is checked against that budget before the stream is touched.
    Prefer `from_reader` and `from_bytes` unless several values are read
    back to back.

    Example:
        data = b"\\x0d\\0\\0\\0Hello, World!\\xae"
        decoder = Decoder(io.BytesIO(data), len(data))
        decoder.decode_str()                    # "Hello, World!"
        decoder.decode_scalar(ScalarKind.UINT8)  # 0xAE
    """

    def __init__(self, reader: BinaryIO, expected_length: int) -> None:
        self._reader = reader
        self._budget = ByteBudget(expected_length)
        self._depth = 0

    def into_inner(self) -> BinaryIO:
        """Return the underlying stream."""
        return self._reader

    def is_fully_read(self) -> bool:
        """Check whether the expected length has been consumed."""
        return self._budget.is_exhausted()

    def remaining(self) -> int:
        return self._budget.remaining()

    def _read(self, size: int) -> bytes:
        data = read_exact(self._reader, size)
        if len(data) != size:
            raise EndOfBuffer(f"Expected {size} bytes, stream provided {len(data)}")
        return data

    def _pop_length(self) -> int:
        self._budget.reserve(4)
        return _U32.unpack(self._read(4))[0]

    def decode_scalar(self, kind: ScalarKind) -> Any:
        """Decode one fixed width scalar."""
        size = TYPE_SIZES[kind]
        self._budget.reserve(size)
        data = self._read(size)
        value = struct.unpack(FORMAT_CHARS[kind], data)[0]
        if kind == ScalarKind.BOOL:
            return value != 0
        return value

    def decode_bytes(self) -> bytes:
        """Decode a length-prefixed byte buffer."""
        length = self._pop_length()
        self._budget.reserve(length)
        return self._read(length)

    def decode_str(self) -> str:
        """Decode a length-prefixed UTF-8 string."""
        data = self.decode_bytes()
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as err:
            raise BadStringData(f"String data is not valid UTF-8: {err}") from err

    def decode_seq(self, element: RosType) -> list[Any]:
        """Decode a count-prefixed sequence of `element` values."""
        count = self._pop_length()
        # The budget cannot bound a count of zero-width elements
        if count > self.remaining() and takes_no_bytes(element):
            raise Overflow(
                f"Sequence of {count} empty elements exceeds the {self.remaining()} bytes left"
            )
        self._depth += 1
        try:
            return [element.decode(self) for _ in range(count)]
        finally:
            self._depth -= 1

    def decode_tuple(self, elements: Sequence[RosType]) -> list[Any]:
        """Decode a fixed list of elements with no count prefix."""
        self._depth += 1
        try:
            return [element.decode(self) for element in elements]
        finally:
            self._depth -= 1

    def decode_map(self, key: RosType, value: RosType) -> dict[Any, Any]:
        """Decode a map of `key=value` entries.

        A map at the top of a scope owns the whole scope. A map nested in an
        aggregate reads its own region length first and is decoded by a
        separate decoder bounded to that region.
        """
        check_map_entry_type(key)
        check_map_entry_type(value)

        if self._depth == 0:
            return self._decode_map_entries(key, value)

        length = self._pop_length()
        self._budget.reserve(length)
        region = Decoder(io.BytesIO(self._read(length)), length)
        return region._decode_map_entries(key, value)

    def _decode_map_entries(self, key: RosType, value: RosType) -> dict[Any, Any]:
        result: dict[Any, Any] = {}
        while not self.is_fully_read():
            entry = self.decode_str()
            name, sep, text = entry.partition("=")
            if not sep:
                raise BadMapEntry(f"Map entry {entry!r} has no '=' separator")
            result[_decode_entry_part(name, key)] = _decode_entry_part(text, value)
        return result

    def decode_char(self) -> Any:
        raise UnsupportedCharType()

    def decode_enum(self, name: str) -> Any:
        raise UnsupportedEnumType(f"{name} cannot be decoded: enums are not supported")

    def decode_any(self) -> Any:
        raise UnsupportedDeserializerMethod("decode_any")

    def decode_ignored_any(self) -> Any:
        raise UnsupportedDeserializerMethod("decode_ignored_any")


def _decode_entry_part(text: str, t: RosType) -> Any:
    # Each side of an entry is written back out as a string and decoded by
    # its own decoder, so it goes through the same type-directed path
    encoder = Encoder()
    encoder.encode_str(text)
    data = encoder.getvalue()
    return t.decode(Decoder(io.BytesIO(data), len(data)))
