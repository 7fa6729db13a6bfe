"""Byte buffers and endianness conversions."""

from __future__ import annotations

import enum
import struct
import sys
from collections.abc import Iterator
from typing import Any

_VALID_WIDTHS = (1, 2, 4, 8)


class Endianness(enum.Enum):
    """Byte order of multi-byte values."""

    BIG = "big"
    LITTLE = "little"


class Buffer:
    """A fixed-size view over a block of bytes."""

    def __init__(self, view: memoryview) -> None:
        self._view = view

    def get(self) -> memoryview:
        """Return the underlying byte view."""
        return self._view

    def cast(self, fmt: str = "B") -> memoryview:
        """Return the buffer viewed as items of the given struct format."""
        return self._view.cast(fmt)

    def __len__(self) -> int:
        return self._view.nbytes

    def __iter__(self) -> Iterator[int]:
        return iter(self._view)

    def __bytes__(self) -> bytes:
        return self._view.tobytes()

    def _offset(self, index: int, fmt: str) -> int:
        size = len(self)
        if index < 0 or index >= size:
            raise IndexError(
                f"Index out of bounds: {index} is >= the buffer size, which is {size}."
            )
        item_size = struct.calcsize(fmt)
        offset = index * item_size
        if offset + item_size > size:
            raise IndexError(
                f"Index out of bounds: item {index} of {item_size} bytes "
                f"does not fit in a buffer of {size} bytes."
            )
        return offset

    def get_at(self, index: int, fmt: str = "B") -> Any:
        """Return the item at ``index`` when the buffer is read as ``fmt`` items."""
        offset = self._offset(index, fmt)
        return struct.unpack_from(fmt, self._view, offset)[0]

    def set_at(self, index: int, value: Any, fmt: str = "B") -> None:
        """Store ``value`` at ``index`` when the buffer is read as ``fmt`` items."""
        offset = self._offset(index, fmt)
        struct.pack_into(fmt, self._view, offset, value)


def make_buffer(data: Any, size: int) -> Buffer:
    """Wrap the first ``size`` bytes of an existing buffer without copying."""
    if data is None:
        raise ValueError("The buffer pointer is equal to None.")
    view = memoryview(data).cast("B")
    if size < 0 or size > view.nbytes:
        raise ValueError(
            f"Requested size {size} does not fit in the given data of {view.nbytes} bytes."
        )
    return Buffer(view[:size])


def make_buffer_with_size(size: int) -> Buffer:
    """Create a zero-filled buffer that owns its memory."""
    if size < 0:
        raise ValueError(f"Buffer size cannot be negative: {size}.")
    return Buffer(memoryview(bytearray(size)))


def current_endianness() -> Endianness:
    """Return the byte order of the running machine."""
    return Endianness(sys.byteorder)


def network_endianness() -> Endianness:
    """Return the network byte order."""
    return Endianness.BIG


def _check_value(value: int, width: int) -> None:
    if width not in _VALID_WIDTHS:
        raise ValueError(f"Unsupported width {width}; expected one of {_VALID_WIDTHS}.")
    if not 0 <= value < (1 << (8 * width)):
        raise ValueError(f"Value {value} does not fit in {width} unsigned byte(s).")


def swap_bytes(value: int, width: int) -> int:
    """Reverse the byte order of an unsigned integer of ``width`` bytes."""
    _check_value(value, width)
    return int.from_bytes(value.to_bytes(width, "little"), "big")


def swap_buffer(buffer: Buffer) -> Buffer:
    """Return a new buffer holding the bytes of ``buffer`` in reverse order."""
    result = make_buffer_with_size(len(buffer))
    result.get()[:] = bytes(buffer)[::-1]
    return result


def convert(value: int, width: int, source: Endianness, target: Endianness) -> int:
    """Convert an unsigned integer from one byte order to another."""
    _check_value(value, width)
    if source is target:
        return value
    return swap_bytes(value, width)


def convert_buffer(buffer: Buffer, source: Endianness, target: Endianness) -> Buffer:
    """Convert a buffer from one byte order to another."""
    if source is target:
        return buffer
    return swap_buffer(buffer)