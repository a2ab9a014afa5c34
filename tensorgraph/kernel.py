"""Kernels and the registry that maps (device, operator kind) to a kernel."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, NamedTuple, Tuple

from .common import GraphError
from .op_type import op_type_name

__all__ = [
    "Device",
    "Kernel",
    "KernelRecord",
    "KernelRegistry",
    "register_kernel",
    "device_to_str",
    "get_kernel_attrs_str",
]


class Device(Enum):
    """Device a kernel runs on."""

    CPU = 1


KernelAttrs = Tuple[Device, int]


class Kernel(ABC):
    """Computes one kind of operator on one device."""

    @abstractmethod
    def compute(self, op: Any, context: Any) -> None:
        """Execute ``op``, reading inputs and writing outputs in place."""


class KernelRecord(NamedTuple):
    """A registered kernel with its name and registration number."""

    kernel: Kernel
    name: str
    id: int


def _normalize(key: KernelAttrs) -> KernelAttrs:
    device, op_type = key
    return device, int(op_type)


class KernelRegistry:
    """Maps kernel attributes to kernels."""

    _instance: "KernelRegistry | None" = None

    def __init__(self) -> None:
        self._kernels: Dict[KernelAttrs, KernelRecord] = {}
        self._count = 0

    @classmethod
    def get_instance(cls) -> "KernelRegistry":
        """The process-wide registry."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def __contains__(self, key: KernelAttrs) -> bool:
        return _normalize(key) in self._kernels

    def register_kernel(self, key: KernelAttrs, kernel: Kernel, name: str) -> bool:
        """Register ``kernel`` under ``key``; a key may be registered only once."""
        key = _normalize(key)
        if key in self._kernels:
            raise GraphError("Kernel already registered")
        self._count += 1
        self._kernels[key] = KernelRecord(kernel, name, self._count)
        return True

    def get_kernel(self, key: KernelAttrs) -> Kernel:
        """The kernel registered under ``key``."""
        record = self._kernels.get(_normalize(key))
        if record is None:
            raise GraphError(
                "Kernel not found for key {" + get_kernel_attrs_str(key) + "}"
            )
        return record.kernel

    def get_kernel_item(self, key: KernelAttrs) -> KernelRecord:
        """The full record for ``key``; raises ``KeyError`` if absent."""
        return self._kernels[_normalize(key)]


def register_kernel(device: Device, op_type: int, name: str):
    """Class decorator registering an instance of the kernel in the global registry."""

    def decorate(cls):
        KernelRegistry.get_instance().register_kernel((device, op_type), cls(), name)
        return cls

    return decorate


def device_to_str(device: Device) -> str:
    """Short name of a device."""
    if device is Device.CPU:
        return "CPU"
    raise GraphError("Unimplemented")


def get_kernel_attrs_str(attrs: KernelAttrs) -> str:
    """Readable form of kernel attributes, e.g. ``"CPU, Add"``."""
    device, op_type = attrs
    return f"{device_to_str(device)}, {op_type_name(op_type)}"