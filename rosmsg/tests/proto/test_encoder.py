"""Tests for encoding"""

import typing
from dataclasses import dataclass

from pytest import raises

from rosmsg.proto import (
    BadMapEntry,
    BadStringData,
    Char,
    Encoder,
    EnumType,
    InvalidValue,
    Overflow,
    ScalarKind,
    Struct,
    UnsupportedCharType,
    UnsupportedDeserializerMethod,
    UnsupportedEnumType,
    from_bytes,
    rosmsg_field,
    to_bytes,
)


@dataclass
class Tagged(Struct):
    tags: dict[str, str]
    n: int = rosmsg_field(type="uint8")


def describe_scalars():
    def writes_u8(expect):
        expect(to_bytes(150, "uint8")) == bytes([1, 0, 0, 0, 150])

    def writes_signed_integers(expect):
        expect(to_bytes(-100, "int8")) == bytes([1, 0, 0, 0, 156])
        expect(to_bytes(-30000, "int16")) == bytes([2, 0, 0, 0, 0xD0, 0x8A])
        expect(to_bytes(-2000000000, "int32")) == bytes([4, 0, 0, 0, 0x00, 0x6C, 0xCA, 0x88])

    def writes_wide_integers(expect):
        expect(to_bytes(0xAB9876543210AABB, "uint64")) == bytes(
            [8, 0, 0, 0, 0xBB, 0xAA, 0x10, 0x32, 0x54, 0x76, 0x98, 0xAB]
        )

    def writes_floats(expect):
        expect(to_bytes(1005.75, "float32")) == bytes([4, 0, 0, 0, 0x00, 0x70, 0x7B, 0x44])
        expect(to_bytes(1005.75, float)) == bytes(
            [8, 0, 0, 0, 0x00, 0x00, 0x00, 0x00, 0x00, 0x6E, 0x8F, 0x40]
        )

    def writes_canonical_bools(expect):
        expect(to_bytes(True, bool)) == bytes([1, 0, 0, 0, 1])
        expect(to_bytes(False, bool)) == bytes([1, 0, 0, 0, 0])
        expect(to_bytes(5, bool)) == bytes([1, 0, 0, 0, 1])

    def rejects_non_integer_bools(expect):
        for value in ("no", [0], None, 1.0):
            with raises(InvalidValue):
                to_bytes(value, bool)

    def rejects_out_of_range_integers(expect):
        with raises(InvalidValue):
            to_bytes(256, "uint8")
        with raises(InvalidValue):
            to_bytes(-1, "uint32")

    def rejects_wrong_python_types(expect):
        with raises(InvalidValue):
            to_bytes("12", "int32")
        with raises(InvalidValue):
            to_bytes(1.5, "uint16")


def describe_strings():
    def writes_string(expect):
        expect(to_bytes("Hello, World!", str)) == bytes([17, 0, 0, 0, 13, 0, 0, 0]) + b"Hello, World!"

    def writes_empty_string(expect):
        expect(to_bytes("", str)) == bytes([4, 0, 0, 0, 0, 0, 0, 0])

    def writes_bytes(expect):
        expect(to_bytes(b"\xff\x00", bytes)) == bytes([6, 0, 0, 0, 2, 0, 0, 0, 0xFF, 0x00])

    def rejects_unencodable_strings(expect):
        with raises(BadStringData):
            to_bytes("\ud800", str)

    def rejects_non_strings(expect):
        with raises(InvalidValue):
            to_bytes(b"abc", str)
        with raises(InvalidValue):
            to_bytes("abc", bytes)


def describe_aggregates():
    def writes_tuple(expect):
        expect(to_bytes((1026, 4104), "uint16[2]")) == bytes([4, 0, 0, 0, 2, 4, 8, 16])

    def writes_vector(expect):
        expect(to_bytes([7, 1025, 33, 57], "int16[]")) == bytes(
            [12, 0, 0, 0, 4, 0, 0, 0, 7, 0, 1, 4, 33, 0, 57, 0]
        )

    def writes_byte_strings_as_uint8_vectors(expect):
        expect(to_bytes(b"\x01\x02", "uint8[]")) == bytes([6, 0, 0, 0, 2, 0, 0, 0, 1, 2])

    def writes_string_vectors(expect):
        expect(to_bytes(["a", "bc"], list[str])) == bytes(
            [15, 0, 0, 0, 2, 0, 0, 0, 1, 0, 0, 0, 97, 2, 0, 0, 0, 98, 99]
        )

    def rejects_wrong_tuple_arity(expect):
        with raises(InvalidValue):
            to_bytes((1, 2, 3), "uint16[2]")

    def rejects_non_sequences(expect):
        with raises(InvalidValue):
            to_bytes("abc", list[str])
        with raises(InvalidValue):
            to_bytes(5, "uint8[]")

    def writes_unit_as_nothing(expect):
        expect(to_bytes(None, None)) == bytes([0, 0, 0, 0])


def describe_maps():
    def writes_empty_map(expect):
        expect(to_bytes({}, dict[str, str])) == bytes([0, 0, 0, 0])

    def writes_single_entry(expect):
        expect(to_bytes({"abc": "123"}, dict[str, str])) == bytes([11, 0, 0, 0, 7, 0, 0, 0]) + b"abc=123"

    def writes_entries_in_order(expect):
        expected = bytes([15, 0, 0, 0, 3, 0, 0, 0]) + b"a=1" + bytes([4, 0, 0, 0]) + b"b==2"
        expect(to_bytes({"a": "1", "b": "=2"}, dict[str, str])) == expected

    def writes_byte_values(expect):
        expect(to_bytes({"k": b"v"}, dict[str, bytes])) == bytes([7, 0, 0, 0, 3, 0, 0, 0]) + b"k=v"

    def prefixes_nested_maps_with_their_length(expect):
        packed = Tagged(tags={"a": "1"}, n=7).pack()
        expect(packed) == bytes([12, 0, 0, 0, 7, 0, 0, 0, 3, 0, 0, 0]) + b"a=1" + bytes([7])
        expect(Tagged.unpack(packed)) == (Tagged(tags={"a": "1"}, n=7), len(packed))

    def rejects_keys_with_separator(expect):
        with raises(BadMapEntry):
            to_bytes({"a=b": "c"}, dict[str, str])

    def rejects_non_text_entries(expect):
        with raises(InvalidValue):
            to_bytes({"a": 1}, dict[str, str])
        with raises(BadMapEntry):
            to_bytes({}, dict[str, float])
        with raises(UnsupportedCharType):
            to_bytes({}, dict[Char, str])

    def rejects_non_mappings(expect):
        with raises(InvalidValue):
            to_bytes([("a", "b")], dict[str, str])


def describe_unsupported_types():
    def rejects_chars(expect):
        with raises(UnsupportedCharType):
            to_bytes("a", Char)

    def rejects_enums(expect):
        with raises(UnsupportedEnumType):
            to_bytes(1, EnumType("Color"))

    def rejects_any(expect):
        with raises(UnsupportedDeserializerMethod):
            to_bytes(1, typing.Any)


def describe_length_limits():
    def rejects_payloads_above_max_length(expect):
        with raises(Overflow):
            to_bytes("Hello, World!", str, max_length=16)
        expect(len(to_bytes("Hello, World!", str, max_length=17))) == 21

    def counts_every_write(expect):
        encoder = Encoder(max_length=3)
        encoder.encode_scalar(ScalarKind.UINT16, 1)
        with raises(Overflow):
            encoder.encode_scalar(ScalarKind.UINT16, 2)
        expect(len(encoder)) == 2

    def round_trips_through_decoder(expect):
        value = ([1, 2, 3], "text", {"k": "v"})
        packed = to_bytes(value, tuple[list[bool], str, dict[str, str]])
        expect(from_bytes(packed, tuple[list[bool], str, dict[str, str]])) == (
            [True, True, True],
            "text",
            {"k": "v"},
        )
