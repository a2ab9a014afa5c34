"""Binary element-wise operators with broadcasting."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Sequence

from ..common import vec_to_string
from ..op_type import OpType
from ..operator import Operator
from ..operator_utils import infer_broadcast

if TYPE_CHECKING:
    from ..graph import Graph
    from ..tensor import Tensor

__all__ = ["ElementWiseOp", "AddOp", "SubOp", "MulOp", "DivOp"]


class ElementWiseOp(Operator):
    """Base of binary element-wise operators; the output has the broadcast shape."""

    def __init__(
        self,
        op_type: OpType,
        graph: Optional["Graph"],
        input0: "Tensor",
        input1: "Tensor",
        output: Optional["Tensor"],
    ) -> None:
        super().__init__(op_type, [input0, input1], [output])
        self._validate(graph)

    def infer_shape(self, inputs: Sequence["Tensor"]) -> List[List[int]]:
        return [infer_broadcast(inputs[0].dims, inputs[1].dims)]

    def num_inputs(self) -> int:
        return 2

    def num_outputs(self) -> int:
        return 1

    def __str__(self) -> str:
        a, b = self.inputs
        return (
            f"{self.op_type.name}[{self.guid}]("
            f"{vec_to_string(a.dims)},{vec_to_string(b.dims)},"
            f"input0={a.guid},input1={b.guid},output={self.outputs[0].guid})"
        )


class AddOp(ElementWiseOp):
    """Element-wise sum."""

    def __init__(self, graph, input0, input1, output) -> None:
        super().__init__(OpType.Add, graph, input0, input1, output)


class SubOp(ElementWiseOp):
    """Element-wise difference."""

    def __init__(self, graph, input0, input1, output) -> None:
        super().__init__(OpType.Sub, graph, input0, input1, output)


class MulOp(ElementWiseOp):
    """Element-wise product."""

    def __init__(self, graph, input0, input1, output) -> None:
        super().__init__(OpType.Mul, graph, input0, input1, output)


class DivOp(ElementWiseOp):
    """Element-wise quotient."""

    def __init__(self, graph, input0, input1, output) -> None:
        super().__init__(OpType.Div, graph, input0, input1, output)