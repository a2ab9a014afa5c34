"""Batched matrix multiplication with optional transposition of the operands."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Sequence

from ..common import GraphError
from ..op_type import OpType
from ..operator import Operator

if TYPE_CHECKING:
    from ..graph import Graph
    from ..tensor import Tensor

__all__ = ["MatmulOp"]


class MatmulOp(Operator):
    """``C = op(A) @ op(B)`` over the last two dimensions, broadcasting the batch."""

    def __init__(
        self,
        graph: Optional["Graph"],
        a: "Tensor",
        b: "Tensor",
        c: Optional["Tensor"],
        trans_a: bool = False,
        trans_b: bool = False,
    ) -> None:
        super().__init__(OpType.MatMul, [a, b], [c])
        self.trans_a = trans_a
        self.trans_b = trans_b
        self.m = 0
        self.n = 0
        self.k = 0
        self._validate(graph)

    def infer_shape(self, inputs: Sequence["Tensor"]) -> List[List[int]]:
        a, b = inputs[0].dims, inputs[1].dims
        if len(a) != len(b):
            raise GraphError("Matmul: input dimensions mismatch")
        if len(a) < 2:
            raise GraphError("Matmul: inputs need at least two dimensions")
        m, k = (a[-1], a[-2]) if self.trans_a else (a[-2], a[-1])
        n, k2 = (b[-2], b[-1]) if self.trans_b else (b[-1], b[-2])
        self.m, self.n, self.k = m, n, k
        if k != k2:
            raise GraphError("Matmul: input dimensions mismatch")
        batch = [max(x, y) for x, y in zip(a[:-2], b[:-2])]
        return [batch + [m, n]]

    def num_outputs(self) -> int:
        return 1

    def __str__(self) -> str:
        a_name = "A^T" if self.trans_a else "A"
        b_name = "B^T" if self.trans_b else "B]"
        return (
            f"Matmul([{a_name},{b_name},A={self.inputs[0].guid},"
            f"B={self.inputs[1].guid},C={self.outputs[0].guid},"
            f"mnk=[{self.m},{self.n},{self.k}])"
        )