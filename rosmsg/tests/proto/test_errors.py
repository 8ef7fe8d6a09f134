"""Tests for the error taxonomy"""

from rosmsg.proto import (
    BadMapEntry,
    BadStringData,
    EndOfBuffer,
    ErrorKind,
    InvalidValue,
    MalformedDataError,
    Overflow,
    RosmsgError,
    Underflow,
    UnsupportedCharType,
    UnsupportedDeserializerMethod,
    UnsupportedEnumType,
    UnsupportedTypeError,
)


def describe_error_kinds():
    def separates_malformed_data_from_unsupported_types(expect):
        for error in (Overflow, Underflow, EndOfBuffer, BadStringData, BadMapEntry):
            expect(issubclass(error, MalformedDataError)) == True
            expect(issubclass(error, UnsupportedTypeError)) == False

        for error in (UnsupportedEnumType, UnsupportedCharType, UnsupportedDeserializerMethod):
            expect(issubclass(error, UnsupportedTypeError)) == True
            expect(issubclass(error, MalformedDataError)) == False

    def are_runtime_errors(expect):
        expect(issubclass(RosmsgError, RuntimeError)) == True
        expect(issubclass(InvalidValue, RosmsgError)) == True

    def carry_their_kind(expect):
        expect(Overflow().kind) == ErrorKind.OVERFLOW
        expect(Underflow().kind) == ErrorKind.UNDERFLOW
        expect(BadMapEntry("x").kind) == ErrorKind.BAD_MAP_ENTRY
        expect(UnsupportedCharType().kind) == "unsupported_char_type"

    def use_default_messages(expect):
        expect(str(EndOfBuffer())) == "Unexpected end of buffer"
        expect(str(EndOfBuffer("custom"))) == "custom"

    def name_the_unsupported_method(expect):
        error = UnsupportedDeserializerMethod("decode_any")
        expect(error.method) == "decode_any"
        expect(str(error)).includes("decode_any")
