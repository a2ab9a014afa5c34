"""Element data types, numbered as in the ONNX element-type table."""

from __future__ import annotations

import functools
from enum import Enum

import numpy as np

from .common import GraphError

__all__ = ["DataType"]


@functools.total_ordering
class DataType(Enum):
    """Tensor element type."""

    Undefine = 0
    Float32 = 1
    UInt8 = 2
    Int8 = 3
    UInt16 = 4
    Int16 = 5
    Int32 = 6
    Int64 = 7
    String = 8
    Bool = 9
    Float16 = 10
    Double = 11
    UInt32 = 12
    UInt64 = 13
    BFloat16 = 16

    def __lt__(self, other):
        if not isinstance(other, DataType):
            return NotImplemented
        return self.value < other.value

    def __str__(self) -> str:
        return self.name

    @property
    def size(self) -> int:
        """Bytes per element of the storage type."""
        return _SIZES[self]

    @property
    def cpu_type(self) -> int:
        """Index of the host type used for this element type, or -1."""
        return _CPU_TYPES[self]

    @property
    def numpy_dtype(self) -> np.dtype:
        """The numpy type elements are stored as on the host."""
        return _NUMPY_TYPES[self]

    @classmethod
    def from_index(cls, index: int) -> "DataType":
        """Look up a data type by its numeric index."""
        try:
            return cls(index)
        except ValueError:
            raise GraphError(f"Unsupported data type index {index}") from None


_SIZES = {
    DataType.Undefine: 0,
    DataType.Float32: 4,
    DataType.UInt8: 1,
    DataType.Int8: 1,
    DataType.UInt16: 2,
    DataType.Int16: 2,
    DataType.Int32: 4,
    DataType.Int64: 8,
    DataType.String: 32,
    DataType.Bool: 1,
    DataType.Float16: 2,
    DataType.Double: 8,
    DataType.UInt32: 4,
    DataType.UInt64: 8,
    DataType.BFloat16: 2,
}

_CPU_TYPES = {
    DataType.Undefine: -1,
    DataType.Float32: 0,
    DataType.UInt8: 2,
    DataType.Int8: 3,
    DataType.UInt16: 4,
    DataType.Int16: 5,
    DataType.Int32: 6,
    DataType.Int64: 7,
    DataType.String: -1,
    DataType.Bool: 3,
    DataType.Float16: 4,
    DataType.Double: 9,
    DataType.UInt32: 1,
    DataType.UInt64: 8,
    DataType.BFloat16: 4,
}

# Bool is held as int8, Float16 and BFloat16 as raw uint16 bit patterns.
_NUMPY_TYPES = {
    DataType.Undefine: np.dtype(np.bool_),
    DataType.Float32: np.dtype(np.float32),
    DataType.UInt8: np.dtype(np.uint8),
    DataType.Int8: np.dtype(np.int8),
    DataType.UInt16: np.dtype(np.uint16),
    DataType.Int16: np.dtype(np.int16),
    DataType.Int32: np.dtype(np.int32),
    DataType.Int64: np.dtype(np.int64),
    DataType.String: np.dtype("S1"),
    DataType.Bool: np.dtype(np.int8),
    DataType.Float16: np.dtype(np.uint16),
    DataType.Double: np.dtype(np.float64),
    DataType.UInt32: np.dtype(np.uint32),
    DataType.UInt64: np.dtype(np.uint64),
    DataType.BFloat16: np.dtype(np.uint16),
}