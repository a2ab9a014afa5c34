"""Shared building blocks: the error type, object identifiers and formatting."""

from __future__ import annotations

import itertools
import numbers
from abc import ABC, abstractmethod
from typing import Any, Iterable

__all__ = ["GraphError", "GraphObject", "new_fuid", "vec_to_string"]


class GraphError(RuntimeError):
    """Raised when a graph, tensor or operator is used in an invalid way."""


_guid_counter = itertools.count(1)
_fuid_counter = itertools.count(1)


def _new_guid() -> int:
    return next(_guid_counter)


def new_fuid() -> int:
    """Return a fresh family id. Cloned tensors share the id of their origin."""
    return next(_fuid_counter)


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, numbers.Integral):
        return str(int(value))
    if isinstance(value, numbers.Real):
        return f"{float(value):g}"
    return str(value)


def vec_to_string(values: Iterable[Any]) -> str:
    """Format a sequence as ``[a,b,c]``."""
    return "[" + ",".join(_format_value(v) for v in values) + "]"


class GraphObject(ABC):
    """Base of graph members; each instance, including copies, gets its own guid."""

    def __init__(self) -> None:
        self._guid = _new_guid()

    @property
    def guid(self) -> int:
        """The globally unique id of this object."""
        return self._guid

    def __copy__(self):
        clone = type(self).__new__(type(self))
        clone.__dict__.update(self.__dict__)
        clone._guid = _new_guid()
        return clone

    @abstractmethod
    def __str__(self) -> str:
        """A human readable description."""

    def print(self) -> None:
        """Write the description to standard output."""
        print(str(self))