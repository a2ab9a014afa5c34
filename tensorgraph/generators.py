"""Fillers that write initial values into tensor storage."""

from __future__ import annotations

import numpy as np

from .common import GraphError
from .data_type import DataType

__all__ = [
    "DataGenerator",
    "IncrementalGenerator",
    "ValueGenerator",
    "OneGenerator",
    "ZeroGenerator",
]


class DataGenerator:
    """Callable that fills the first ``size`` elements of a flat array."""

    _SUPPORTED = (DataType.UInt32, DataType.Float32)

    def __call__(self, data: np.ndarray, size: int, dtype: DataType) -> None:
        if dtype not in self._SUPPORTED:
            raise GraphError(f"Unimplemented: no generator for {dtype}")
        self.fill(data[:size])

    def fill(self, data: np.ndarray) -> None:
        """Write values into ``data`` in place."""
        raise GraphError("Unimplemented")


class IncrementalGenerator(DataGenerator):
    """Fills with 0, 1, 2, ..."""

    def fill(self, data: np.ndarray) -> None:
        data[...] = np.arange(data.size, dtype=data.dtype)


class ValueGenerator(DataGenerator):
    """Fills every element with one value."""

    def __init__(self, value) -> None:
        self.value = value

    def fill(self, data: np.ndarray) -> None:
        data[...] = self.value


class OneGenerator(ValueGenerator):
    """Fills with ones."""

    def __init__(self) -> None:
        super().__init__(1)


class ZeroGenerator(ValueGenerator):
    """Fills with zeros."""

    def __init__(self) -> None:
        super().__init__(0)