"""Operator kinds."""

from __future__ import annotations

from enum import IntEnum

__all__ = ["OpType", "op_type_name"]


class OpType(IntEnum):
    """Kind of a graph operator."""

    Unknown = 0
    Add = 1
    Cast = 2
    Clip = 3
    Concat = 4
    Div = 5
    Mul = 6
    MatMul = 7
    Relu = 8
    Sub = 9
    Transpose = 10

    def __str__(self) -> str:
        return self.name


def op_type_name(value: int) -> str:
    """Name of the operator kind with this number, ``"Unknown"`` if none."""
    try:
        return OpType(value).name
    except ValueError:
        return "Unknown"