"""Shape helpers shared by operators and kernels."""

from __future__ import annotations

from typing import List, Sequence

from .common import GraphError

__all__ = ["infer_broadcast", "get_real_axis", "locate_index", "delocate_index"]

Shape = List[int]


def infer_broadcast(a: Sequence[int], b: Sequence[int]) -> Shape:
    """Bidirectional broadcast shape of ``a`` and ``b``, aligned at the right."""
    longer, shorter = (a, b) if len(a) > len(b) else (b, a)
    offset = len(longer) - len(shorter)
    tail = [max(x, y) for x, y in zip(longer[offset:], shorter)]
    return list(longer[:offset]) + tail


def get_real_axis(axis: int, rank: int) -> int:
    """Turn a possibly negative axis into an index in ``range(rank)``."""
    if rank < 1:
        raise GraphError(f"rank must be at least 1, got {rank}")
    if not -rank <= axis <= rank - 1:
        raise GraphError(f"axis {axis} out of range for rank {rank}")
    return axis + rank if axis < 0 else axis


def locate_index(index: int, shape: Sequence[int]) -> Shape:
    """Multi-dimensional position of a flat row-major index."""
    position = []
    for extent in reversed(shape):
        index, remainder = divmod(index, extent)
        position.append(remainder)
    position.reverse()
    return position


def delocate_index(
    shape_index: Sequence[int], shape: Sequence[int], stride: Sequence[int]
) -> int:
    """Flat offset of a position, wrapping each coordinate into ``shape``."""
    if len(shape_index) != len(shape):
        raise GraphError("index rank does not match shape rank")
    if len(shape) != len(stride):
        raise GraphError("shape rank does not match stride rank")
    return sum(
        (coord % extent) * step
        for coord, extent, step in zip(shape_index, shape, stride)
    )