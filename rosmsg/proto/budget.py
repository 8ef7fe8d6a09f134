"""Byte budget accounting for a single encode or decode scope."""

from .errors import Overflow

# Largest length a u32 prefix can express
MAX_LENGTH = 0xFFFFFFFF


class ByteBudget:
    """Tracks how many bytes the current scope may still consume or produce.

    Every primitive read or write reserves its width here first, so a bad
    length prefix is caught before the underlying stream is touched.
    """

    __slots__ = ("_remaining",)

    def __init__(self, length: int) -> None:
        if length < 0:
            raise ValueError("budget length must not be negative")
        self._remaining = length

    def reserve(self, size: int) -> None:
        """Take `size` bytes from the budget.

        Raises:
            Overflow: if fewer than `size` bytes remain.
        """
        if size > self._remaining:
            raise Overflow(f"Requested {size} bytes but only {self._remaining} remain")
        self._remaining -= size

    def remaining(self) -> int:
        return self._remaining

    def is_exhausted(self) -> bool:
        return self._remaining == 0

    def __repr__(self) -> str:
        return f"ByteBudget(remaining={self._remaining})"
