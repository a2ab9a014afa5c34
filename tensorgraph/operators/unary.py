"""Single-input operators: activations, clipping and type casts."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, List, Optional, Sequence

from ..common import vec_to_string
from ..data_type import DataType
from ..op_type import OpType
from ..operator import Operator

if TYPE_CHECKING:
    from ..graph import Graph
    from ..tensor import Tensor

__all__ = ["UnaryOp", "ReluOp", "ClipOp", "CastType", "CastOp"]


class _SingleInput(Operator):
    def num_inputs(self) -> int:
        return 1

    def num_outputs(self) -> int:
        return 1

    def infer_shape(self, inputs: Sequence["Tensor"]) -> List[List[int]]:
        return [inputs[0].dims]

    def __str__(self) -> str:
        source = self.inputs[0]
        return (
            f"{self.op_type.name}[{self.guid}]({vec_to_string(source.dims)},"
            f"input={source.guid},output={self.outputs[0].guid})"
        )


class UnaryOp(_SingleInput):
    """Base of element-wise unary operators; the output keeps the input shape."""

    def __init__(
        self,
        op_type: OpType,
        graph: Optional["Graph"],
        input: "Tensor",
        output: Optional["Tensor"],
    ) -> None:
        super().__init__(op_type, [input], [output])
        self._validate(graph)

    def infer_shape(self, inputs: Sequence["Tensor"]) -> List[List[int]]:
        return [inputs[0].dims]


class ReluOp(UnaryOp):
    """Rectified linear unit."""

    def __init__(self, graph, input, output) -> None:
        super().__init__(OpType.Relu, graph, input, output)


class ClipOp(_SingleInput):
    """Limits values to ``[min_value, max_value]``; either bound may be absent."""

    def __init__(
        self,
        graph: Optional["Graph"],
        input: "Tensor",
        output: Optional["Tensor"],
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
    ) -> None:
        super().__init__(OpType.Clip, [input], [output])
        self.min_value = None if min_value is None else float(min_value)
        self.max_value = None if max_value is None else float(max_value)
        self._validate(graph)

    def infer_shape(self, inputs: Sequence["Tensor"]) -> List[List[int]]:
        return [inputs[0].dims]


class CastType(Enum):
    """Source and target element types of a cast."""

    Float2Float16 = 0
    Float2Int64 = 1
    Float2Int32 = 2
    Float2Int16 = 3
    Float2Int8 = 4
    Float2BFloat16 = 5
    Int322Float = 6
    Int322Int8 = 7
    Int322Int16 = 8
    Int322Int64 = 9
    Int162Float = 10
    Int162Int32 = 11
    Int82Float = 12
    Int82Int16 = 13
    Int82Int32 = 14
    Uint82Float = 15
    Uint82Int32 = 16
    Uint82Int64 = 17
    Int642Int32 = 18
    Int642Uint32 = 19
    Int642Float = 20
    Uint322Int64 = 21
    Float162Float = 22
    BFloat162Float = 23
    Float2Float = 24


_CAST_TARGETS = {
    CastType.Float2Float16: DataType.Float16,
    CastType.Float2Int64: DataType.Int64,
    CastType.Float2Int32: DataType.Int32,
    CastType.Float2Int16: DataType.Int16,
    CastType.Float2Int8: DataType.Int8,
    CastType.Float2BFloat16: DataType.BFloat16,
    CastType.Int322Float: DataType.Float32,
    CastType.Int322Int8: DataType.Int8,
    CastType.Int322Int16: DataType.Int16,
    CastType.Int322Int64: DataType.Int64,
    CastType.Int162Float: DataType.Float32,
    CastType.Int162Int32: DataType.Int32,
    CastType.Int82Float: DataType.Float32,
    CastType.Int82Int16: DataType.Int16,
    CastType.Int82Int32: DataType.Int32,
    CastType.Uint82Float: DataType.Float32,
    CastType.Uint82Int32: DataType.Int32,
    CastType.Uint82Int64: DataType.Int64,
    CastType.Int642Int32: DataType.Int32,
    CastType.Int642Uint32: DataType.UInt32,
    CastType.Int642Float: DataType.Float32,
    CastType.Uint322Int64: DataType.Int64,
    CastType.Float162Float: DataType.Float32,
    CastType.BFloat162Float: DataType.Float32,
    CastType.Float2Float: DataType.Float32,
}


class CastOp(_SingleInput):
    """Converts elements to another data type, keeping the shape."""

    def __init__(
        self,
        graph: Optional["Graph"],
        input: "Tensor",
        output: Optional["Tensor"],
        cast_type: CastType,
    ) -> None:
        super().__init__(OpType.Cast, [input], [output])
        self.cast_type = cast_type
        self._validate(graph)

    def infer_shape(self, inputs: Sequence["Tensor"]) -> List[List[int]]:
        return [inputs[0].dims]

    def infer_data_type(self, inputs: Optional[Sequence["Tensor"]] = None) -> List[DataType]:
        return [self.output_data_type()]

    def output_data_type(self) -> DataType:
        """The element type this cast produces."""
        return _CAST_TARGETS[self.cast_type]

    def __str__(self) -> str:
        return f"{self.op_type.name}[{self.guid}](output={self.outputs[0].guid})"