"""Permutation of tensor dimensions."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Sequence

from ..common import GraphError, vec_to_string
from ..op_type import OpType
from ..operator import Operator

if TYPE_CHECKING:
    from ..graph import Graph
    from ..tensor import Tensor

__all__ = ["TransposeOp"]


class TransposeOp(Operator):
    """Reorders dimensions like ``numpy.transpose``; output dim ``i`` is input dim ``permute[i]``."""

    def __init__(
        self,
        graph: Optional["Graph"],
        input: "Tensor",
        output: Optional["Tensor"],
        permute: Optional[Sequence[int]] = None,
    ) -> None:
        super().__init__(OpType.Transpose, [input], [output])
        rank = input.rank
        if not permute:
            self.permute: List[int] = list(range(rank))
        else:
            if len(permute) != rank:
                raise GraphError(
                    f"Permutation of length {len(permute)} does not match rank {rank}"
                )
            self.permute = [int(p) for p in permute]
        self._validate(graph)

    def infer_shape(self, inputs: Sequence["Tensor"]) -> List[List[int]]:
        dims = inputs[0].dims
        return [[dims[p] for p in self.permute]]

    def __copy__(self):
        clone = super().__copy__()
        clone.permute = list(self.permute)
        return clone

    def num_inputs(self) -> int:
        return 1

    def num_outputs(self) -> int:
        return 1

    def __str__(self) -> str:
        source = self.inputs[0]
        return (
            f"{self.op_type.name}[{self.guid}]({vec_to_string(source.dims)},"
            f"input={source.guid},output={self.outputs[0].guid})"
        )