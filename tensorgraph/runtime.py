"""Runtimes: where graphs are executed and memory comes from."""

from __future__ import annotations

import weakref
from abc import ABC, abstractmethod
from typing import Any

import numpy as np

from .common import GraphError
from .kernel import Device, KernelRegistry

__all__ = ["Runtime", "NativeCpuRuntime"]

_WORD = 8


class Runtime(ABC):
    """A device that can allocate memory and run a graph."""

    def __init__(self, device: Device) -> None:
        self.device = device

    @abstractmethod
    def run(self, graph: Any) -> None:
        """Execute every operator of ``graph``."""

    @abstractmethod
    def alloc(self, size: int) -> np.ndarray:
        """Allocate at least ``size`` bytes."""

    @abstractmethod
    def dealloc(self, buffer: np.ndarray) -> None:
        """Release a buffer returned by :meth:`alloc`."""

    def is_cpu(self) -> bool:
        """Whether memory of this runtime is host memory."""
        return True

    @abstractmethod
    def __str__(self) -> str:
        """Name of the runtime."""


class NativeCpuRuntime(Runtime):
    """Runs graphs on the host with the registered CPU kernels."""

    _instance: "NativeCpuRuntime | None" = None

    def __init__(self) -> None:
        super().__init__(Device.CPU)
        self._live: "weakref.WeakValueDictionary[int, np.ndarray]" = (
            weakref.WeakValueDictionary()
        )

    @classmethod
    def get_instance(cls) -> "NativeCpuRuntime":
        """The shared CPU runtime."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def run(self, graph: Any) -> None:
        from . import cpu_kernels  # noqa: F401  registers the built-in kernels

        registry = KernelRegistry.get_instance()
        for op in graph.operators:
            kernel = registry.get_kernel((self.device, int(op.op_type)))
            kernel.compute(op, self)

    def alloc(self, size: int) -> np.ndarray:
        """Zeroed bytes, rounded up to a whole number of 8-byte words."""
        words = (size + _WORD - 1) // _WORD
        buffer = np.zeros(words * _WORD, dtype=np.uint8)
        self._live[id(buffer)] = buffer
        return buffer

    def dealloc(self, buffer: np.ndarray) -> None:
        if self._live.get(id(buffer)) is not buffer:
            raise GraphError("Buffer was not allocated by this runtime")
        del self._live[id(buffer)]

    def __str__(self) -> str:
        return "CPU Runtime"