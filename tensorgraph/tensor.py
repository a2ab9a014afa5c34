"""Tensors: shaped, typed values that flow between operators."""

from __future__ import annotations

import math
import weakref
from typing import TYPE_CHECKING, Any, Callable, List, Optional

import numpy as np

from .common import GraphError, GraphObject, new_fuid, vec_to_string
from .data_type import DataType

if TYPE_CHECKING:
    from .allocator import Blob
    from .runtime import Runtime

__all__ = ["Tensor"]


def _format_element(value: Any, kind: str) -> str:
    if kind == "f":
        return format(float(value), "g")
    if kind in "iub":
        return str(int(value))
    return str(value)


class Tensor(GraphObject):
    """A tensor in a graph, optionally bound to memory through a blob."""

    def __init__(self, shape, dtype: DataType, runtime: "Runtime") -> None:
        super().__init__()
        self.dtype = dtype
        self.runtime = runtime
        self._shape: List[int] = [int(d) for d in shape]
        self._size = math.prod(self._shape)
        self._fuid = new_fuid()
        self._targets: List[weakref.ref] = []
        self._source: Optional[weakref.ref] = None
        self._blob: Optional["Blob"] = None

    def __copy__(self):
        clone = super().__copy__()
        clone._shape = list(self._shape)
        clone._targets = list(self._targets)
        return clone

    @property
    def size(self) -> int:
        """Number of elements."""
        return self._size

    @property
    def bytes(self) -> int:
        """Storage size in bytes."""
        return self._size * self.dtype.size

    @property
    def dims(self) -> List[int]:
        """A copy of the shape."""
        return list(self._shape)

    @property
    def rank(self) -> int:
        """Number of dimensions."""
        return len(self._shape)

    @property
    def fuid(self) -> int:
        """Family id, shared with clones."""
        return self._fuid

    def set_shape(self, shape) -> None:
        """Replace the shape and recompute the element count."""
        self._shape = [int(d) for d in shape]
        self._size = math.prod(self._shape)

    @property
    def blob(self) -> Optional["Blob"]:
        """The memory this tensor is bound to, if any."""
        return self._blob

    def set_data_blob(self, blob: "Blob") -> None:
        """Bind the tensor to memory."""
        self._blob = blob

    @property
    def data(self) -> np.ndarray:
        """Flat writable view of the tensor's elements."""
        if self._blob is None:
            raise GraphError("Tensor has no data")
        return self._blob.view(self.dtype, self._size)

    def set_data(self, generator: Callable[[np.ndarray, int, DataType], None]) -> None:
        """Fill the tensor's memory with ``generator(data, size, dtype)``."""
        generator(self.data, self._size, self.dtype)

    @property
    def targets(self) -> list:
        """Operators that read this tensor."""
        return [ref() for ref in self._targets]

    @property
    def source(self):
        """The operator that produces this tensor, or ``None``."""
        return self._source() if self._source is not None else None

    def _add_target(self, op) -> None:
        self._targets.append(weakref.ref(op))

    def _set_source(self, op) -> None:
        self._source = weakref.ref(op) if op is not None else None

    def _remove_target(self, op) -> None:
        self._targets = [ref for ref in self._targets if ref() is not op]

    def data_to_string(self) -> str:
        """Nested bracketed listing of the elements, one innermost row per line."""
        if not self._shape:
            raise GraphError("Cannot format the data of a rank-0 tensor")
        values = self.data
        kind = values.dtype.kind
        spans = [math.prod(self._shape[j:]) for j in range(len(self._shape))]
        column = spans[-1]
        parts = [f"Tensor: {self.guid}\n"]
        for i, value in enumerate(values):
            parts.append("[" * sum(1 for s in spans if i % s == 0))
            parts.append(_format_element(value, kind))
            parts.append("]" * sum(1 for s in spans if i % s == s - 1))
            if i != self._size - 1:
                parts.append(", ")
            if i % column == column - 1:
                parts.append("\n")
        return "".join(parts)

    def print_data(self) -> None:
        """Print :meth:`data_to_string`."""
        if not self.runtime.is_cpu():
            raise GraphError("Unimplemented")
        print(self.data_to_string())

    def equal_data(self, other, relative_error: float = 1e-6) -> bool:
        """Compare elements with another tensor or a sequence of values."""
        if isinstance(other, Tensor):
            if self._blob is None or other._blob is None:
                raise GraphError("Tensor has no data")
            if self.dtype != other.dtype:
                raise GraphError("Data types differ")
            if not (self.runtime.is_cpu() and other.runtime.is_cpu()):
                raise GraphError("Data is not on the host")
            if self._size != other._size:
                return False
            expected = other.data
        else:
            expected = np.asarray(other)
            if expected.size != self._size:
                raise GraphError("Size of expected data does not match tensor")
            expected = expected.reshape(-1).astype(self.dtype.numpy_dtype)
        return _equal_elements(self.data, expected, relative_error)

    def __str__(self) -> str:
        data = repr(self._blob) if self._blob is not None else "nullptr data"
        text = (
            f"Tensor {self.guid}, Fuid {self._fuid}, shape {vec_to_string(self._shape)}"
            f", dtype {self.dtype}, {self.runtime}, {data}\n"
        )
        source = self.source
        text += f", source {source.guid}" if source is not None else ", source None"
        text += ", targets " + vec_to_string(op.guid for op in self.targets)
        return text


def _equal_elements(actual: np.ndarray, expected: np.ndarray, tolerance: float) -> bool:
    if actual.dtype.kind not in "fc":
        return bool(np.array_equal(actual, expected))
    a = actual.astype(np.float64)
    b = expected.astype(np.float64)
    abs_a, abs_b = np.abs(a), np.abs(b)
    smallest = np.minimum(abs_a, abs_b)
    largest = np.maximum(abs_a, abs_b)
    diff = np.abs(a - b)
    with np.errstate(divide="ignore", invalid="ignore"):
        relative = diff / np.where(largest == 0, 1.0, largest)
    bad = np.where(smallest == 0, diff > tolerance, relative > tolerance)
    mismatches = np.flatnonzero(bad)
    if mismatches.size:
        i = int(mismatches[0])
        print(f"Error on {i}: {a[i]:f} {b[i]:f}")
        return False
    return True