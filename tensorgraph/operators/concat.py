"""Concatenation of several tensors along one axis."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Sequence

from ..common import vec_to_string
from ..op_type import OpType
from ..operator import Operator
from ..operator_utils import get_real_axis

if TYPE_CHECKING:
    from ..graph import Graph
    from ..tensor import Tensor

__all__ = ["ConcatOp"]


class ConcatOp(Operator):
    """Joins inputs along ``dim``; all other dimensions are taken from the first input."""

    def __init__(
        self,
        graph: Optional["Graph"],
        inputs: Sequence["Tensor"],
        output: Optional["Tensor"],
        dim: int,
    ) -> None:
        super().__init__(OpType.Concat, inputs, [output])
        self.dim = get_real_axis(dim, self.inputs[0].rank)
        self._validate(graph)

    def infer_shape(self, inputs: Sequence["Tensor"]) -> List[List[int]]:
        dims = inputs[0].dims
        for tensor in inputs[1:]:
            dims[self.dim] += tensor.dims[self.dim]
        return [dims]

    def num_outputs(self) -> int:
        return 1

    def __str__(self) -> str:
        shapes = "".join(f"{vec_to_string(t.dims)}," for t in self.inputs)
        guids = "".join(f"{t.guid}," for t in self.inputs)
        return (
            f"Concat[{self.guid}]({shapes}dim={self.dim},input={guids}"
            f"output={self.outputs[0].guid})"
        )