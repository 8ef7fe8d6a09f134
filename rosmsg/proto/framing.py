"""Length-prefix framing for ROSMSG messages.

Every message is a little-endian u32 byte length followed by exactly that
many bytes holding one encoded value.
"""

import io
import logging
import struct
from typing import Any, BinaryIO

from .budget import MAX_LENGTH
from .decoder import Decoder, read_exact
from .encoder import Encoder
from .errors import EndOfBuffer, Overflow, Underflow
from .schema import type_for
from .types import RosType

logger = logging.getLogger(__name__)

_U32 = struct.Struct("<I")


def _read_length(reader: BinaryIO) -> int:
    data = read_exact(reader, 4)
    if len(data) != 4:
        raise EndOfBuffer("Stream ended inside the message length prefix")
    return _U32.unpack(data)[0]


def _check_length(length: int, max_length: int) -> None:
    if length > max_length:
        raise Overflow(f"Message length {length} exceeds the maximum of {max_length}")


def _decode_payload(reader: BinaryIO, length: int, rostype: RosType) -> Any:
    decoder = Decoder(reader, length)
    value = rostype.decode(decoder)
    if not decoder.is_fully_read():
        raise Underflow(f"{decoder.remaining()} of {length} declared bytes were not consumed")
    logger.debug("Decoded %d byte message as %s", length, rostype)
    return value


def from_reader(reader: BinaryIO, msg_type: Any, *, max_length: int = MAX_LENGTH) -> Any:
    """Read one message from a binary stream.

    Args:
        reader: The stream to read from. Only the bytes of one message are
            consumed.
        msg_type: The expected type: a descriptor, a type expression such as
            "uint16[]", or a Python annotation such as `dict[str, str]`.
        max_length: Largest message length accepted.

    Returns:
        The decoded value.
    """
    rostype = type_for(msg_type)
    length = _read_length(reader)
    _check_length(length, max_length)
    return _decode_payload(reader, length, rostype)


def from_bytes(
    data: bytes | bytearray | memoryview, msg_type: Any, *, max_length: int = MAX_LENGTH
) -> Any:
    """Decode one message from bytes. Bytes after the message are ignored."""
    return from_reader(io.BytesIO(data), msg_type, max_length=max_length)


def from_str(text: str, msg_type: Any, *, max_length: int = MAX_LENGTH) -> Any:
    """Decode one message from the UTF-8 encoding of `text`."""
    return from_bytes(text.encode("utf-8"), msg_type, max_length=max_length)


def to_bytes(value: Any, msg_type: Any, *, max_length: int = MAX_LENGTH) -> bytes:
    """Encode one message, length prefix included."""
    rostype = type_for(msg_type)
    encoder = Encoder(max_length)
    rostype.encode(encoder, value)
    payload = encoder.getvalue()
    logger.debug("Encoded %s as %d byte message", rostype, len(payload))
    return _U32.pack(len(payload)) + payload


def to_writer(writer: BinaryIO, value: Any, msg_type: Any, *, max_length: int = MAX_LENGTH) -> int:
    """Encode one message into a binary stream.

    Returns:
        The number of bytes written.
    """
    data = to_bytes(value, msg_type, max_length=max_length)
    writer.write(data)
    return len(data)


class Framer:
    """Splits a received byte stream into length-prefixed messages."""

    def __init__(self, max_length: int = MAX_LENGTH) -> None:
        self._max_length = max_length
        self._buffer = bytearray()

    def encode_frame(self, payload: bytes) -> bytes:
        """Prefix an encoded value with its length."""
        _check_length(len(payload), self._max_length)
        return _U32.pack(len(payload)) + payload

    def encode_message(self, value: Any, msg_type: Any) -> bytes:
        """Encode a value as a complete message."""
        return to_bytes(value, msg_type, max_length=self._max_length)

    def decode_frame(self) -> bytes | None:
        """Pop the payload of the next complete message, if one is buffered.

        Raises:
            Overflow: if the next message declares a length above
                `max_length`. The receive buffer is cleared.
        """
        if len(self._buffer) < 4:
            return None

        length = _U32.unpack_from(self._buffer)[0]
        if length > self._max_length:
            logger.debug("Discarding %d buffered bytes, frame too long", len(self._buffer))
            self._buffer.clear()
            _check_length(length, self._max_length)

        if len(self._buffer) < 4 + length:
            return None

        payload = bytes(self._buffer[4 : 4 + length])
        del self._buffer[: 4 + length]
        logger.debug("Found %d byte frame, %d bytes still buffered", length, len(self._buffer))
        return payload

    def decode_message(self, msg_type: Any) -> Any | None:
        """Decode the next complete message, if one is buffered."""
        rostype = type_for(msg_type)
        payload = self.decode_frame()
        if payload is None:
            return None
        return _decode_payload(io.BytesIO(payload), len(payload), rostype)

    def clear_buffer(self) -> None:
        """Clear the receive buffer."""
        self._buffer.clear()

    def append_buffer(self, data: bytes) -> None:
        """Append data to the receive buffer."""
        self._buffer.extend(data)

    @property
    def buffered(self) -> int:
        return len(self._buffer)
