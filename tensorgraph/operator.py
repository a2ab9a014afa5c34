"""The operator base class: a node of the graph reading and writing tensors."""

from __future__ import annotations

import copy
import weakref
from abc import abstractmethod
from typing import TYPE_CHECKING, List, Optional, Sequence

from .common import GraphError, GraphObject
from .data_type import DataType
from .op_type import OpType

if TYPE_CHECKING:
    from .graph import Graph
    from .tensor import Tensor

__all__ = ["Operator"]

Shape = List[int]


class Operator(GraphObject):
    """A graph node with input and output tensors and links to its neighbours."""

    def __init__(
        self,
        op_type: OpType,
        inputs: Sequence[Optional["Tensor"]],
        outputs: Sequence[Optional["Tensor"]],
    ) -> None:
        super().__init__()
        self.op_type = op_type
        self.inputs: List[Optional["Tensor"]] = list(inputs)
        self.outputs: List[Optional["Tensor"]] = list(outputs)
        self._predecessors: List[weakref.ref] = []
        self._successors: List[weakref.ref] = []

    @abstractmethod
    def infer_shape(self, inputs: Sequence["Tensor"]) -> Optional[List[Shape]]:
        """Output shapes for ``inputs``, or ``None`` if inference fails."""

    def infer_data_type(self, inputs: Optional[Sequence["Tensor"]] = None) -> List[DataType]:
        """Output data types; by default every output takes the first input's type."""
        if inputs is None:
            inputs = self.inputs
        return [inputs[0].dtype] * self.num_outputs()

    def check_valid(self, graph: Optional["Graph"]) -> bool:
        """Infer output shapes; create outputs in ``graph`` or check the given ones."""
        shapes = self.infer_shape(self.inputs)
        if shapes is None:
            return False
        if len(shapes) != len(self.outputs):
            return False
        if graph is not None:
            dtypes = self.infer_data_type(self.inputs)
            for i, (shape, dtype) in enumerate(zip(shapes, dtypes)):
                if self.outputs[i] is not None:
                    raise GraphError("Find empty output while operator creation")
                self.outputs[i] = graph.add_tensor(shape, dtype)
            return True
        return all(
            list(shape) == output.dims for shape, output in zip(shapes, self.outputs)
        )

    def _validate(self, graph: Optional["Graph"]) -> None:
        if not self.check_valid(graph):
            raise GraphError(f"Invalid {self.op_type.name} operator")

    def get_output(self, index: Optional[int] = None) -> "Tensor":
        """The only output, or the output at ``index``."""
        if index is None:
            if len(self.outputs) != 1:
                raise GraphError("Unimplemented")
            return self.outputs[0]
        if not 0 <= index < len(self.outputs):
            raise GraphError("Index exceeded")
        return self.outputs[index]

    @property
    def predecessors(self) -> list:
        """Operators producing this operator's inputs."""
        return [ref() for ref in self._predecessors]

    @property
    def successors(self) -> list:
        """Operators consuming this operator's outputs."""
        return [ref() for ref in self._successors]

    @property
    def dtype(self) -> DataType:
        """Data type of the first input."""
        return self.inputs[0].dtype

    @property
    def out_dtype(self) -> DataType:
        """Data type of the single output."""
        return self.get_output().dtype

    def num_inputs(self) -> int:
        """Number of input tensors."""
        return len(self.inputs)

    def num_outputs(self) -> int:
        """Number of output tensors."""
        return len(self.outputs)

    def clone(self, new_inputs: Sequence["Tensor"], new_outputs: Sequence["Tensor"]) -> "Operator":
        """A copy of this operator wired to other tensors, without neighbours."""
        op = copy.copy(self)
        op.inputs = list(new_inputs)
        op.outputs = list(new_outputs)
        op._predecessors = []
        op._successors = []
        op._validate(None)
        return op

    def replace_input(self, old: "Tensor", new: "Tensor") -> None:
        """Replace every occurrence of ``old`` among the inputs by ``new``."""
        self.inputs = [new if t is old else t for t in self.inputs]

    def _add_predecessor(self, op: "Operator") -> None:
        self._predecessors.append(weakref.ref(op))

    def _add_successor(self, op: "Operator") -> None:
        self._successors.append(weakref.ref(op))

    def _remove_predecessor(self, op: "Operator") -> None:
        self._predecessors = [r for r in self._predecessors if r() is not op]

    def _remove_successor(self, op: "Operator") -> None:
        self._successors = [r for r in self._successors if r() is not op]