"""Struct base class for ROSMSG message types."""

import io
from typing import Self

from .framing import from_reader, to_bytes
from .schema import struct_type
from .types import StructType


class Struct:
    """Base class for message structs.

    Subclasses should be @dataclass decorated. Fields are serialized in
    declaration order; fields whose annotation has no fixed wire width
    (such as `int`) declare it with rosmsg_field().

    Example:
        @dataclass
        class Pose(Struct):
            seq: int = rosmsg_field(type="uint32")
            frame_id: str
            position: tuple[float, float, float]
            covariance: list[float]
            header: OtherStruct  # nested dataclasses need no rosmsg_field
    """

    @classmethod
    def rosmsg_type(cls) -> StructType:
        """Return the type descriptor of this struct."""
        return struct_type(cls)

    def pack(self) -> bytes:
        """Pack this struct into a length-prefixed message."""
        return to_bytes(self, struct_type(type(self)))

    @classmethod
    def unpack(cls, data: bytes | memoryview, offset: int = 0) -> tuple[Self, int]:
        """Unpack a struct from a length-prefixed message.

        Args:
            data: The bytes to unpack from.
            offset: Starting offset in data.

        Returns:
            Tuple of (instance, bytes_consumed).
        """
        stream = io.BytesIO(memoryview(data)[offset:])
        instance = from_reader(stream, struct_type(cls))
        return instance, stream.tell()
