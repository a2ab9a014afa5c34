"""Offset-based memory planning and views into the planned buffer."""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Optional

import numpy as np

from .common import GraphError

if TYPE_CHECKING:
    from .data_type import DataType
    from .runtime import Runtime

__all__ = ["Blob", "Allocator"]


class Blob:
    """A region of a runtime buffer starting at ``offset``."""

    def __init__(self, runtime: "Runtime", buffer, offset: int = 0) -> None:
        self.runtime = runtime
        self.buffer = (
            buffer
            if isinstance(buffer, np.ndarray)
            else np.frombuffer(buffer, dtype=np.uint8)
        )
        self.offset = offset

    def view(self, dtype: "DataType", count: int) -> np.ndarray:
        """A flat writable array of ``count`` elements of ``dtype``."""
        np_dtype = dtype.numpy_dtype
        end = self.offset + count * np_dtype.itemsize
        if end > self.buffer.nbytes:
            raise GraphError("Blob view exceeds the underlying buffer")
        return self.buffer[self.offset:end].view(np_dtype)

    def __repr__(self) -> str:
        return f"Blob(offset={self.offset:#x})"


class Allocator:
    """Plans tensor placement as offsets, then allocates one buffer of peak size."""

    def __init__(self, runtime: "Runtime") -> None:
        self.runtime = runtime
        self._used = 0
        self._peak = 0
        # Every supported element type fits in eight bytes.
        self.alignment = 8
        self._ptr: Optional[np.ndarray] = None
        self.free_blocks: Dict[int, int] = {}

    @property
    def used(self) -> int:
        """Bytes currently in use at the end of the planned region."""
        return self._used

    @property
    def peak(self) -> int:
        """Largest number of bytes ever in use."""
        return self._peak

    def _aligned(self, size: int) -> int:
        return ((size - 1) // self.alignment + 1) * self.alignment

    def _check_planning(self) -> None:
        if self._ptr is not None:
            raise GraphError("Allocator memory has already been materialised")

    def _grow(self, size: int) -> int:
        offset = self._used
        self._used += size
        self._peak = max(self._peak, self._used)
        return offset

    def alloc(self, size: int) -> int:
        """Reserve ``size`` bytes and return their offset (best fit)."""
        self._check_planning()
        size = self._aligned(size)
        best: Optional[int] = None
        min_waste = None
        for start, length in sorted(self.free_blocks.items()):
            if length >= size and (min_waste is None or length - size < min_waste):
                min_waste = length - size
                best = start
        if best is None:
            return self._grow(size)
        length = self.free_blocks.pop(best)
        if length > size:
            self.free_blocks[best + size] = length - size
        return best

    def free(self, addr: int, size: int) -> None:
        """Return ``size`` bytes at ``addr``, merging with neighbouring free blocks."""
        self._check_planning()
        size = self._aligned(size)
        blocks = self.free_blocks
        blocks[addr] = size

        following = addr + size
        if following in blocks:
            blocks[addr] += blocks[following]
            del blocks[following]

        for start, length in sorted(blocks.items()):
            if start + length == addr:
                blocks[start] = length + blocks.get(addr, 0)
                blocks.pop(addr, None)
                break

        if blocks:
            last = max(blocks)
            if last + blocks[last] == self._used:
                self._used = last
                del blocks[last]

    def get_ptr(self) -> np.ndarray:
        """Allocate the real buffer on first call and return it."""
        if self._ptr is None:
            self._ptr = self.runtime.alloc(self._peak)
            print(f"Allocator really alloc: {id(self._ptr):#x} {self._peak} bytes")
        return self._ptr

    def info(self) -> None:
        """Print current and peak usage."""
        print(f"Used memory: {self._used}, peak memory: {self._peak}")

    def __del__(self) -> None:
        ptr = getattr(self, "_ptr", None)
        if ptr is not None:
            try:
                self.runtime.dealloc(ptr)
            except Exception:
                pass