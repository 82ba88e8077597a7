"""Chunked iteration over firmware and OS payloads."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional, Union

ONE28_K = 128 * 1024

BytesLike = Union[bytes, bytearray, memoryview]


class FwComponent(Enum):
    """Parts of a firmware image that the device can request."""

    DNX_HEADER = "dnx_header"
    PROFILE_HEADER_SIZE = "profile_header_size"
    PROFILE_HEADER = "profile_header"
    MIP = "mip"
    LOFW = "lofw"
    HIFW = "hifw"
    PSFW1 = "psfw1"
    PSFW2 = "psfw2"
    SSFW = "ssfw"
    ROM_PATCH = "rom_patch"
    VED_FW = "ved_fw"


def _check_chunk_size(chunk_size: int) -> None:
    if chunk_size <= 0:
        raise ValueError(f"chunk size must be positive, got {chunk_size}")


def _chunk_count(data_size: int, chunk_size: int) -> int:
    return -(-data_size // chunk_size) if data_size else 0


def _slice_next(data: bytes, offset: int, chunk_size: int) -> bytes:
    return data[offset : min(offset + chunk_size, len(data))]


class ChunkIterator:
    """Iterates a firmware component in fixed-size chunks with a residual."""

    def __init__(self, data: BytesLike, chunk_size: int = ONE28_K) -> None:
        _check_chunk_size(chunk_size)
        self._data = bytes(data)
        self._chunk_size = chunk_size
        self._offset = 0
        self._current = 0

    def total(self) -> int:
        """Number of chunks, counting a trailing partial chunk."""
        return _chunk_count(len(self._data), self._chunk_size)

    def current(self) -> int:
        """Number of chunks produced so far."""
        return self._current

    def is_last(self) -> bool:
        """True when the next chunk (if any) is the final one."""
        return self._current + 1 >= self.total()

    def reset(self) -> None:
        """Start again from the first chunk."""
        self._offset = 0
        self._current = 0

    def __iter__(self) -> Iterator[bytes]:
        return self

    def __next__(self) -> bytes:
        if self._offset >= len(self._data):
            raise StopIteration
        chunk = _slice_next(self._data, self._offset, self._chunk_size)
        self._offset += len(chunk)
        self._current += 1
        return chunk


class OsChunkIterator:
    """Iterates an OS image in fixed-size chunks."""

    def __init__(self, data: BytesLike, chunk_size: int) -> None:
        _check_chunk_size(chunk_size)
        self._data = bytes(data)
        self._chunk_size = chunk_size
        self._offset = 0
        self._current = 0

    def total(self) -> int:
        """Number of chunks, counting a trailing partial chunk."""
        return _chunk_count(len(self._data), self._chunk_size)

    def current(self) -> int:
        """Number of chunks produced so far."""
        return self._current

    def remaining(self) -> int:
        """Bytes not yet produced."""
        return max(len(self._data) - self._offset, 0)

    def progress_pct(self) -> int:
        """Percentage of chunks produced; 100 for an empty payload."""
        total = self.total()
        if total == 0:
            return 100
        return (self._current * 100) // total

    def reset(self) -> None:
        """Start again from the first chunk."""
        self._offset = 0
        self._current = 0

    def __iter__(self) -> Iterator[bytes]:
        return self

    def __next__(self) -> bytes:
        if self._offset >= len(self._data):
            raise StopIteration
        chunk = _slice_next(self._data, self._offset, self._chunk_size)
        self._offset += len(chunk)
        self._current += 1
        return chunk


def _state_next(state: "ChunkState | OsChunkState", data: BytesLike) -> Optional[bytes]:
    if state.offset >= len(data) or state.offset >= state.data_size:
        return None
    remaining = min(state.data_size - state.offset, len(data) - state.offset)
    length = min(remaining, state.chunk_size)
    chunk = bytes(data[state.offset : state.offset + length])
    state.offset += length
    state.current += 1
    return chunk


@dataclass
class ChunkState:
    """Tracks progress through a payload sent one chunk per request."""

    data_size: int = 0
    chunk_size: int = ONE28_K
    current: int = field(default=0, init=False)
    total: int = field(default=0, init=False)
    offset: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        if self.data_size:
            _check_chunk_size(self.chunk_size)
        self.total = _chunk_count(self.data_size, self.chunk_size)

    def next_chunk(self, data: BytesLike) -> Optional[bytes]:
        """Return the next chunk of ``data`` and advance, or None when done."""
        return _state_next(self, data)

    def is_done(self) -> bool:
        """True once every chunk has been handed out."""
        return self.current >= self.total

    def reset(self) -> None:
        """Start again from the first chunk."""
        self.current = 0
        self.offset = 0

    def progress_pct(self) -> int:
        """Percentage of chunks handed out; 100 for an empty payload."""
        if self.total == 0:
            return 100
        return (self.current * 100) // self.total


@dataclass
class OsChunkState:
    """Chunk tracking for OS image transfers."""

    data_size: int = 0
    chunk_size: int = ONE28_K
    current: int = field(default=0, init=False)
    total: int = field(default=0, init=False)
    offset: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        if self.data_size:
            _check_chunk_size(self.chunk_size)
        self.total = _chunk_count(self.data_size, self.chunk_size)

    def next_chunk(self, data: BytesLike) -> Optional[bytes]:
        """Return the next chunk of ``data`` and advance, or None when done."""
        return _state_next(self, data)

    def is_done(self) -> bool:
        """True once every chunk has been handed out."""
        return self.current >= self.total

    def reset(self) -> None:
        """Start again from the first chunk."""
        self.current = 0
        self.offset = 0

    def progress_pct(self) -> int:
        """Percentage of chunks handed out; 100 for an empty payload."""
        if self.total == 0:
            return 100
        return (self.current * 100) // self.total