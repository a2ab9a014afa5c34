"""Reference CPU kernels, registered with the global kernel registry on import."""

from __future__ import annotations

import math
from typing import Callable, Dict, Sequence

import numpy as np

from .common import GraphError
from .data_type import DataType
from .kernel import Device, Kernel, register_kernel
from .op_type import OpType

__all__ = [
    "NaiveConcat",
    "NativeElementWise",
    "NaiveTranspose",
    "NativeUnary",
    "ClipKernel",
]

_SUPPORTED_TYPES = (DataType.Float32, DataType.UInt32)


def _check_dtype(op) -> DataType:
    dtype = op.dtype
    if dtype not in _SUPPORTED_TYPES:
        raise GraphError(f"Unimplemented: no CPU kernel for {dtype}")
    return dtype


def _store(tensor, values: np.ndarray) -> None:
    target = tensor.data
    target[...] = np.asarray(values).reshape(-1).astype(target.dtype, copy=False)


def _broadcast_offsets(shape: Sequence[int], out_shape: Sequence[int]) -> np.ndarray:
    """Flat offsets into a row-major array of ``shape`` for every output element."""
    rank = len(out_shape)
    padded = [1] * (rank - len(shape)) + list(shape)
    count = math.prod(out_shape)
    remaining = np.arange(count, dtype=np.int64)
    offsets = np.zeros(count, dtype=np.int64)
    step = 1
    for out_extent, extent in zip(reversed(out_shape), reversed(padded)):
        coord = remaining % out_extent
        remaining = remaining // out_extent
        offsets += (coord % extent) * step
        step *= extent
    return offsets


@register_kernel(Device.CPU, OpType.Concat, "ConcatNaive_CPU")
class NaiveConcat(Kernel):
    """Copies each input into its block of the output along the concat axis."""

    def compute(self, op, context) -> None:
        _check_dtype(op)
        pieces = [t.data.reshape(t.dims) for t in op.inputs]
        _store(op.get_output(), np.concatenate(pieces, axis=op.dim))


def _divide(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    if a.dtype.kind in "ui":
        return np.floor_divide(a, b)
    return np.true_divide(a, b)


_BINARY: Dict[OpType, Callable[[np.ndarray, np.ndarray], np.ndarray]] = {
    OpType.Add: np.add,
    OpType.Sub: np.subtract,
    OpType.Mul: np.multiply,
    OpType.Div: _divide,
}


@register_kernel(Device.CPU, OpType.Div, "divNaive_CPU")
@register_kernel(Device.CPU, OpType.Mul, "mulNaive_CPU")
@register_kernel(Device.CPU, OpType.Sub, "subNaive_CPU")
@register_kernel(Device.CPU, OpType.Add, "addNaive_CPU")
class NativeElementWise(Kernel):
    """Binary arithmetic with broadcasting of both inputs to the output shape."""

    def compute(self, op, context) -> None:
        _check_dtype(op)
        function = _BINARY.get(op.op_type)
        if function is None:
            raise GraphError("Unimplemented")
        a, b = op.inputs
        output = op.get_output()
        out_shape = output.dims
        lhs = a.data[_broadcast_offsets(a.dims, out_shape)]
        rhs = b.data[_broadcast_offsets(b.dims, out_shape)]
        with np.errstate(all="ignore"):
            result = function(lhs, rhs)
        _store(output, result)


@register_kernel(Device.CPU, OpType.Transpose, "TransposeNaive_CPU")
class NaiveTranspose(Kernel):
    """Writes the input with its dimensions reordered by the permutation."""

    def compute(self, op, context) -> None:
        _check_dtype(op)
        source = op.inputs[0]
        arranged = source.data.reshape(source.dims).transpose(op.permute)
        _store(op.outputs[0], arranged)


@register_kernel(Device.CPU, OpType.Relu, "reluNaive_CPU")
class NativeUnary(Kernel):
    """Element-wise activations."""

    def compute(self, op, context) -> None:
        _check_dtype(op)
        if op.op_type != OpType.Relu:
            raise GraphError("Unimplemented")
        values = op.inputs[0].data
        output = op.get_output()
        _store(output, np.maximum(values[: output.size], values.dtype.type(0)))


@register_kernel(Device.CPU, OpType.Clip, "Clip_CPU")
class ClipKernel(Kernel):
    """Replaces values below the minimum or above the maximum by that bound."""

    def compute(self, op, context) -> None:
        _check_dtype(op)
        output = op.get_output()
        values = op.inputs[0].data[: output.size]
        result = values.astype(np.float64)
        if op.max_value is not None:
            result = np.where(values > op.max_value, op.max_value, result)
        if op.min_value is not None:
            result = np.where(values < op.min_value, op.min_value, result)
        _store(output, result)