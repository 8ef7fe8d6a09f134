"""Encode Python values as ROSMSG binary data."""

from __future__ import annotations

import struct
from collections.abc import Mapping, Sequence
from typing import Any

from .budget import MAX_LENGTH, ByteBudget
from .errors import (
    BadMapEntry,
    BadStringData,
    InvalidValue,
    Overflow,
    UnsupportedCharType,
    UnsupportedDeserializerMethod,
    UnsupportedEnumType,
)
from .types import FORMAT_CHARS, BytesType, RosType, ScalarKind, check_map_entry_type

_U32 = struct.Struct("<I")


class Encoder:
    """Writes ROSMSG values into an in-memory buffer.

    Like `Decoder`, the encoder produces a bare value without the outer
    length prefix; `to_bytes` and `to_writer` add it. Every write is
    reserved against `max_length`.
    """

    def __init__(self, max_length: int = MAX_LENGTH) -> None:
        self._buf = bytearray()
        self._budget = ByteBudget(max_length)
        self._depth = 0

    def getvalue(self) -> bytes:
        return bytes(self._buf)

    def __len__(self) -> int:
        return len(self._buf)

    def _write(self, data: bytes) -> None:
        self._budget.reserve(len(data))
        self._buf.extend(data)

    def _push_length(self, length: int) -> None:
        if length > MAX_LENGTH:
            raise Overflow(f"Length {length} does not fit in a u32 prefix")
        self._write(_U32.pack(length))

    def encode_scalar(self, kind: ScalarKind, value: Any) -> None:
        """Encode one fixed width scalar."""
        if kind == ScalarKind.BOOL:
            if not isinstance(value, int):
                raise InvalidValue(f"{value!r} cannot be encoded as {kind}")
            value = 1 if value else 0
        try:
            data = struct.pack(FORMAT_CHARS[kind], value)
        except (struct.error, OverflowError, TypeError) as err:
            raise InvalidValue(f"{value!r} cannot be encoded as {kind}: {err}") from err
        self._write(data)

    def encode_bytes(self, value: Any) -> None:
        """Encode a length-prefixed byte buffer."""
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise InvalidValue(f"Expected bytes, got {type(value).__name__}")
        data = bytes(value)
        self._push_length(len(data))
        self._write(data)

    def encode_str(self, value: Any) -> None:
        """Encode a length-prefixed UTF-8 string."""
        if not isinstance(value, str):
            raise InvalidValue(f"Expected str, got {type(value).__name__}")
        try:
            data = value.encode("utf-8")
        except UnicodeEncodeError as err:
            raise BadStringData(f"String cannot be encoded as UTF-8: {err}") from err
        self.encode_bytes(data)

    def encode_seq(self, element: RosType, values: Any) -> None:
        """Encode a count-prefixed sequence."""
        if isinstance(values, (str, Mapping)) or not isinstance(values, (Sequence, bytes)):
            raise InvalidValue(f"Expected a sequence, got {type(values).__name__}")
        self._push_length(len(values))
        self._depth += 1
        try:
            for value in values:
                element.encode(self, value)
        finally:
            self._depth -= 1

    def encode_tuple(self, elements: Sequence[RosType], values: Any) -> None:
        """Encode a fixed list of elements with no count prefix."""
        if isinstance(values, (str, Mapping)) or not isinstance(values, (Sequence, bytes)):
            raise InvalidValue(f"Expected a tuple, got {type(values).__name__}")
        if len(values) != len(elements):
            raise InvalidValue(f"Expected {len(elements)} elements, got {len(values)}")
        self._depth += 1
        try:
            for element, value in zip(elements, values):
                element.encode(self, value)
        finally:
            self._depth -= 1

    def encode_map(self, key: RosType, value: RosType, mapping: Any) -> None:
        """Encode a map as `key=value` entries.

        Mirrors `Decoder.decode_map`: a nested map is preceded by the byte
        length of its entries, a top-level map is not.
        """
        check_map_entry_type(key)
        check_map_entry_type(value)
        if not isinstance(mapping, Mapping):
            raise InvalidValue(f"Expected a mapping, got {type(mapping).__name__}")

        if self._depth == 0:
            self._encode_map_entries(key, value, mapping)
            return

        region = Encoder(self._budget.remaining())
        region._encode_map_entries(key, value, mapping)
        self._push_length(len(region))
        self._write(region.getvalue())

    def _encode_map_entries(self, key: RosType, value: RosType, mapping: Mapping) -> None:
        for k, v in mapping.items():
            name = _entry_text(k, key)
            if "=" in name:
                raise BadMapEntry(f"Map key {name!r} must not contain '='")
            self.encode_str(f"{name}={_entry_text(v, value)}")

    def encode_char(self, value: Any) -> None:
        raise UnsupportedCharType()

    def encode_enum(self, name: str, value: Any) -> None:
        raise UnsupportedEnumType(f"{name} cannot be encoded: enums are not supported")

    def encode_any(self, value: Any) -> None:
        raise UnsupportedDeserializerMethod("encode_any")


def _entry_text(value: Any, t: RosType) -> str:
    if isinstance(t, BytesType) and isinstance(value, (bytes, bytearray)):
        try:
            return bytes(value).decode("utf-8")
        except UnicodeDecodeError as err:
            raise BadStringData(f"Map entry bytes are not valid UTF-8: {err}") from err
    if not isinstance(value, str):
        raise InvalidValue(f"Map keys and values must be str, got {type(value).__name__}")
    return value
