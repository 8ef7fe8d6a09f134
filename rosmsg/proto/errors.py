"""Error taxonomy for ROSMSG encoding and decoding."""

from enum import StrEnum, auto
from typing import ClassVar

__all__ = [
    "ErrorKind",
    "RosmsgError",
    "MalformedDataError",
    "UnsupportedTypeError",
    "Overflow",
    "Underflow",
    "EndOfBuffer",
    "BadStringData",
    "BadMapEntry",
    "UnsupportedEnumType",
    "UnsupportedCharType",
    "UnsupportedDeserializerMethod",
    "InvalidValue",
]


class ErrorKind(StrEnum):
    """Identifies the kind of a codec failure."""

    OVERFLOW = auto()
    UNDERFLOW = auto()
    END_OF_BUFFER = auto()
    BAD_STRING_DATA = auto()
    BAD_MAP_ENTRY = auto()
    UNSUPPORTED_ENUM_TYPE = auto()
    UNSUPPORTED_CHAR_TYPE = auto()
    UNSUPPORTED_DESERIALIZER_METHOD = auto()
    INVALID_VALUE = auto()


class RosmsgError(RuntimeError):
    """Base exception for all codec failures."""

    kind: ClassVar[ErrorKind]
    default_message: ClassVar[str] = "ROSMSG codec failure"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class MalformedDataError(RosmsgError):
    """The wire data does not match the requested type."""


class UnsupportedTypeError(RosmsgError):
    """The requested type cannot be expressed in ROSMSG."""


class Overflow(MalformedDataError):
    """A nested length claim exceeds the enclosing budget."""

    kind = ErrorKind.OVERFLOW
    default_message = "Attempted to read or write beyond the declared length"


class Underflow(MalformedDataError):
    """A top-level value did not consume its whole declared length."""

    kind = ErrorKind.UNDERFLOW
    default_message = "Value did not consume the declared length"


class EndOfBuffer(MalformedDataError):
    """The byte source ran out while the budget still allowed reading."""

    kind = ErrorKind.END_OF_BUFFER
    default_message = "Unexpected end of buffer"


class BadStringData(MalformedDataError):
    """Text data is not valid UTF-8."""

    kind = ErrorKind.BAD_STRING_DATA
    default_message = "String data is not valid UTF-8"


class BadMapEntry(MalformedDataError):
    """A map entry is not a `key=value` text line."""

    kind = ErrorKind.BAD_MAP_ENTRY
    default_message = "Map entry is not a key=value string"


class UnsupportedEnumType(UnsupportedTypeError):
    kind = ErrorKind.UNSUPPORTED_ENUM_TYPE
    default_message = "Enums, unions and optional values are not supported"


class UnsupportedCharType(UnsupportedTypeError):
    kind = ErrorKind.UNSUPPORTED_CHAR_TYPE
    default_message = "Single characters are not supported, use one character strings"


class UnsupportedDeserializerMethod(UnsupportedTypeError):
    """Raised for requests that need type information the wire does not carry."""

    kind = ErrorKind.UNSUPPORTED_DESERIALIZER_METHOD

    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__(f"Unsupported deserializer method: {method}")


class InvalidValue(RosmsgError):
    """A host value does not fit the type it is encoded as."""

    kind = ErrorKind.INVALID_VALUE
    default_message = "Value does not fit its declared type"
