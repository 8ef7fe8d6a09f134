"""Runtime type descriptors for ROSMSG serialization.

These dataclasses describe the shape of a value. The codec never inspects
them itself: each descriptor asks the decoder or encoder for exactly one
shape category at a time and reassembles the results into a Python value.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from .errors import (
    BadMapEntry,
    InvalidValue,
    UnsupportedCharType,
    UnsupportedDeserializerMethod,
    UnsupportedEnumType,
)

if TYPE_CHECKING:
    from .decoder import Decoder
    from .encoder import Encoder

__all__ = [
    "ScalarKind",
    "RosType",
    "ScalarType",
    "TextType",
    "BytesType",
    "UnitType",
    "SequenceType",
    "TupleType",
    "MapType",
    "StructField",
    "StructType",
    "CharType",
    "EnumType",
    "OptionalType",
    "AnyType",
    "SCALAR_TYPES",
    "TEXT",
    "BYTES",
    "UNIT",
]


class ScalarKind(StrEnum):
    """Fixed width scalar kinds."""

    BOOL = "bool"
    INT8 = "int8"
    UINT8 = "uint8"
    INT16 = "int16"
    UINT16 = "uint16"
    INT32 = "int32"
    UINT32 = "uint32"
    INT64 = "int64"
    UINT64 = "uint64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"


# Map scalar kinds to little-endian struct formats
FORMAT_CHARS = {
    ScalarKind.BOOL: "<B",
    ScalarKind.INT8: "<b",
    ScalarKind.UINT8: "<B",
    ScalarKind.INT16: "<h",
    ScalarKind.UINT16: "<H",
    ScalarKind.INT32: "<i",
    ScalarKind.UINT32: "<I",
    ScalarKind.INT64: "<q",
    ScalarKind.UINT64: "<Q",
    ScalarKind.FLOAT32: "<f",
    ScalarKind.FLOAT64: "<d",
}

# Size in bytes for each kind
TYPE_SIZES = {
    ScalarKind.BOOL: 1,
    ScalarKind.INT8: 1,
    ScalarKind.UINT8: 1,
    ScalarKind.INT16: 2,
    ScalarKind.UINT16: 2,
    ScalarKind.INT32: 4,
    ScalarKind.UINT32: 4,
    ScalarKind.INT64: 8,
    ScalarKind.UINT64: 8,
    ScalarKind.FLOAT32: 4,
    ScalarKind.FLOAT64: 8,
}


class RosType:
    """Base class for all type descriptors."""

    __slots__ = ()

    def decode(self, decoder: Decoder) -> Any:
        raise NotImplementedError

    def encode(self, encoder: Encoder, value: Any) -> None:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class ScalarType(RosType):
    """A fixed width little-endian scalar."""

    kind: ScalarKind

    @property
    def size(self) -> int:
        return TYPE_SIZES[self.kind]

    def decode(self, decoder: Decoder) -> Any:
        return decoder.decode_scalar(self.kind)

    def encode(self, encoder: Encoder, value: Any) -> None:
        encoder.encode_scalar(self.kind, value)


@dataclass(frozen=True, slots=True)
class TextType(RosType):
    """A length-prefixed UTF-8 string."""

    def decode(self, decoder: Decoder) -> str:
        return decoder.decode_str()

    def encode(self, encoder: Encoder, value: Any) -> None:
        encoder.encode_str(value)


@dataclass(frozen=True, slots=True)
class BytesType(RosType):
    """A length-prefixed opaque byte buffer."""

    def decode(self, decoder: Decoder) -> bytes:
        return decoder.decode_bytes()

    def encode(self, encoder: Encoder, value: Any) -> None:
        encoder.encode_bytes(value)


@dataclass(frozen=True, slots=True)
class UnitType(RosType):
    """A value with no wire representation, decoded as None."""

    def decode(self, decoder: Decoder) -> None:
        return None

    def encode(self, encoder: Encoder, value: Any) -> None:
        return None


@dataclass(frozen=True, slots=True)
class SequenceType(RosType):
    """A count-prefixed list of homogeneous elements."""

    element: RosType

    def decode(self, decoder: Decoder) -> list[Any]:
        return decoder.decode_seq(self.element)

    def encode(self, encoder: Encoder, value: Any) -> None:
        encoder.encode_seq(self.element, value)


@dataclass(frozen=True, slots=True)
class TupleType(RosType):
    """A fixed-arity list of elements with no count prefix."""

    elements: tuple[RosType, ...]

    def decode(self, decoder: Decoder) -> tuple[Any, ...]:
        return tuple(decoder.decode_tuple(self.elements))

    def encode(self, encoder: Encoder, value: Any) -> None:
        encoder.encode_tuple(self.elements, value)


@dataclass(frozen=True, slots=True)
class MapType(RosType):
    """A string map written as `key=value` text lines."""

    key: RosType
    value: RosType

    def decode(self, decoder: Decoder) -> dict[Any, Any]:
        return decoder.decode_map(self.key, self.value)

    def encode(self, encoder: Encoder, value: Any) -> None:
        encoder.encode_map(self.key, self.value, value)


@dataclass(frozen=True, slots=True)
class StructField:
    """A named member of a struct."""

    name: str
    type: RosType


@dataclass(eq=False)
class StructType(RosType):
    """A struct: its fields encoded back to back in declaration order.

    `factory` rebuilds the host value from decoded fields passed as keyword
    arguments. Without a factory, decoded structs are plain dicts.
    `fields` may be filled in after construction so that self-referential
    types can point at their own descriptor.
    """

    name: str
    fields: tuple[StructField, ...] = field(default=(), repr=False)
    factory: Callable[..., Any] | None = None

    def decode(self, decoder: Decoder) -> Any:
        values = decoder.decode_tuple([f.type for f in self.fields])
        kwargs = {f.name: v for f, v in zip(self.fields, values)}
        if self.factory is None:
            return kwargs
        return self.factory(**kwargs)

    def encode(self, encoder: Encoder, value: Any) -> None:
        encoder.encode_tuple([f.type for f in self.fields], self._field_values(value))

    def _field_values(self, value: Any) -> list[Any]:
        values = []
        for f in self.fields:
            try:
                if isinstance(value, Mapping):
                    values.append(value[f.name])
                else:
                    values.append(getattr(value, f.name))
            except (KeyError, AttributeError) as err:
                raise InvalidValue(f"{self.name} value is missing field {f.name!r}") from err
        return values


@dataclass(frozen=True, slots=True)
class CharType(RosType):
    """A single character. ROSMSG has no such scalar, so this always fails."""

    def decode(self, decoder: Decoder) -> Any:
        return decoder.decode_char()

    def encode(self, encoder: Encoder, value: Any) -> None:
        encoder.encode_char(value)


@dataclass(frozen=True, slots=True)
class EnumType(RosType):
    """A sum type. The wire carries no discriminant, so this always fails."""

    name: str

    def decode(self, decoder: Decoder) -> Any:
        return decoder.decode_enum(self.name)

    def encode(self, encoder: Encoder, value: Any) -> None:
        encoder.encode_enum(self.name, value)


@dataclass(frozen=True, slots=True)
class OptionalType(RosType):
    """An optional value, treated as the two-variant sum type it is."""

    inner: RosType

    def decode(self, decoder: Decoder) -> Any:
        return decoder.decode_enum("Optional")

    def encode(self, encoder: Encoder, value: Any) -> None:
        encoder.encode_enum("Optional", value)


@dataclass(frozen=True, slots=True)
class AnyType(RosType):
    """Self-describing decoding, impossible since the wire has no type tags."""

    def decode(self, decoder: Decoder) -> Any:
        return decoder.decode_any()

    def encode(self, encoder: Encoder, value: Any) -> None:
        encoder.encode_any(value)


SCALAR_TYPES = {kind.value: ScalarType(kind) for kind in ScalarKind}
TEXT = TextType()
BYTES = BytesType()
UNIT = UnitType()


def check_map_entry_type(t: RosType) -> None:
    """Reject map key and value types other than text, before any byte moves."""
    if isinstance(t, (TextType, BytesType)):
        return
    if isinstance(t, CharType):
        raise UnsupportedCharType()
    if isinstance(t, EnumType):
        raise UnsupportedEnumType(f"{t.name} cannot be a map key or value")
    if isinstance(t, OptionalType):
        raise UnsupportedEnumType("Optional values cannot be map keys or values")
    if isinstance(t, AnyType):
        raise UnsupportedDeserializerMethod("decode_any")
    raise BadMapEntry(f"Map keys and values must be strings, not {t}")


def takes_no_bytes(t: RosType) -> bool:
    """Check whether every value of `t` encodes to zero bytes."""
    if isinstance(t, UnitType):
        return True
    if isinstance(t, TupleType):
        return all(takes_no_bytes(e) for e in t.elements)
    if isinstance(t, StructType):
        return all(takes_no_bytes(f.type) for f in t.fields)
    return False
