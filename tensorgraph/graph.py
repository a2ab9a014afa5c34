"""The computation graph: tensors, operators, ordering, optimisation and memory."""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, List, Optional, Sequence

from .allocator import Allocator, Blob
from .common import GraphError, GraphObject, vec_to_string
from .data_type import DataType
from .op_type import OpType
from .tensor import Tensor

if TYPE_CHECKING:
    from .operator import Operator
    from .runtime import Runtime

__all__ = ["Graph"]


def _contains(items, target) -> bool:
    return any(item is target for item in items)


def _swaps_last_two(permute: Sequence[int]) -> bool:
    rank = len(permute)
    return rank >= 2 and permute[rank - 1] == rank - 2 and permute[rank - 2] == rank - 1


class Graph(GraphObject):
    """A set of tensors and the operators connecting them."""

    def __init__(self, runtime: "Runtime") -> None:
        super().__init__()
        self.runtime = runtime
        self._tensors: List[Tensor] = []
        self._ops: List["Operator"] = []
        self.allocator = Allocator(runtime)
        self._sorted = False

    @property
    def tensors(self) -> List[Tensor]:
        """The graph's tensors."""
        return list(self._tensors)

    @property
    def operators(self) -> List["Operator"]:
        """The graph's operators, in their current order."""
        return list(self._ops)

    def add_tensor(self, shape, dtype: DataType = DataType.Float32) -> Tensor:
        """Create a tensor in this graph."""
        tensor = Tensor(shape, dtype, self.runtime)
        self._tensors.append(tensor)
        return tensor

    def add_existing_tensor(self, tensor: Tensor) -> Tensor:
        """Add a tensor created elsewhere; it must share this graph's runtime."""
        if tensor.runtime is not self.runtime:
            raise GraphError(
                f"Tensor runtime mismatch: cannot add a tenosr in {tensor.runtime}"
                f" to {self.runtime}"
            )
        self._tensors.append(tensor)
        return tensor

    def add_tensors(self, tensors: Sequence[Tensor]) -> List[Tensor]:
        """Add several existing tensors."""
        for tensor in tensors:
            self.add_existing_tensor(tensor)
        return list(tensors)

    def add_op(self, op_class, *args, **kwargs):
        """Create an operator whose outputs are created in this graph."""
        op = op_class(self, *args, **kwargs)
        self._add_operator_and_connect(op)
        return op

    def add_op_with_outputs(self, op_class, *args, **kwargs):
        """Create an operator whose output tensors are given."""
        op = op_class(None, *args, **kwargs)
        self._add_operator_and_connect(op)
        return op

    def remove_operator(self, op: "Operator") -> None:
        """Drop ``op`` from the operator list if present."""
        for i, existing in enumerate(self._ops):
            if existing is op:
                del self._ops[i]
                return

    def remove_tensor(self, tensor: Tensor) -> None:
        """Drop ``tensor`` from the tensor list if present."""
        for i, existing in enumerate(self._tensors):
            if existing is tensor:
                del self._tensors[i]
                return

    def get_tensor(self, fuid: int) -> Optional[Tensor]:
        """The tensor with family id ``fuid``, or ``None``."""
        return next((t for t in self._tensors if t.fuid == fuid), None)

    def _add_operator_and_connect(self, op: "Operator") -> None:
        self._sorted = False
        self._ops.append(op)
        for tensor in op.inputs:
            if tensor is None:
                continue
            tensor._add_target(op)
            pred = tensor.source
            if pred is not None:
                pred._add_successor(op)
                op._add_predecessor(pred)
        for tensor in op.outputs:
            if tensor is None:
                continue
            tensor._set_source(op)
            for succ in tensor.targets:
                succ._add_predecessor(op)
                op._add_successor(succ)

    def topo_sort(self) -> bool:
        """Order operators topologically; ``False`` if the graph has a cycle."""
        if self._sorted:
            return True
        ordered: List["Operator"] = []
        done = set()
        while len(ordered) < len(self._ops):
            modified = False
            for op in self._ops:
                if id(op) in done:
                    continue
                if all(t.source is None or id(t.source) in done for t in op.inputs):
                    modified = True
                    ordered.append(op)
                    done.add(id(op))
            if not modified:
                return False
        self._ops = ordered
        self._sorted = True
        return True

    def optimize(self) -> None:
        """Drop inverse transpose pairs and fold transposes into matmuls."""
        i = 0
        while i < len(self._ops) - 1:
            first, second = self._ops[i], self._ops[i + 1]
            if first.op_type != OpType.Transpose:
                i += 1
                continue
            produced = first.outputs[0]
            if second.op_type == OpType.Transpose:
                if produced is second.inputs[0] and list(first.permute) == list(
                    second.permute
                ):
                    del self._ops[i : i + 2]
                    i = 0
                    continue
            elif second.op_type == OpType.MatMul and _swaps_last_two(first.permute):
                if produced is second.inputs[0]:
                    second.trans_a = True
                    second.replace_input(second.inputs[0], first.inputs[0])
                    del self._ops[i]
                    continue
                if produced is second.inputs[1]:
                    second.trans_b = True
                    second.replace_input(second.inputs[1], first.inputs[0])
                    del self._ops[i]
                    continue
            i += 1

        used = {t.fuid for op in self._ops for t in (*op.inputs, *op.outputs)}
        self._tensors = [t for t in self._tensors if t.fuid in used]

    def shape_infer(self) -> None:
        """Recompute output shapes of every operator in order."""
        for op in self._ops:
            shapes = op.infer_shape(op.inputs)
            if shapes is None:
                raise GraphError("Shape inference failed")
            if len(shapes) != len(op.outputs):
                raise GraphError("Shape inference returned a wrong number of shapes")
            for shape, output in zip(shapes, op.outputs):
                if list(shape) != output.dims:
                    tensor = self.get_tensor(output.fuid)
                    if tensor is None:
                        raise GraphError(f"Tensor {output.fuid} is not in the graph")
                    tensor.set_shape(shape)

    def data_malloc(self) -> None:
        """Plan memory for all tensors and bind them to one real buffer."""
        if not self.topo_sort():
            raise GraphError("Graph has a cycle")
        offsets: Dict[int, int] = {}
        for tensor in self._tensors:
            if tensor.source is None:
                offsets[tensor.fuid] = self.allocator.alloc(tensor.bytes)
        for op in self._ops:
            for output in op.outputs:
                offsets[output.fuid] = self.allocator.alloc(output.bytes)
        base = self.allocator.get_ptr()
        for tensor in self._tensors:
            offset = offsets.get(tensor.fuid)
            if offset is not None:
                tensor.set_data_blob(Blob(self.runtime, base, offset))
        self.allocator.info()

    @property
    def inputs(self) -> List[Tensor]:
        """Tensors not produced by any operator."""
        return [t for t in self._tensors if t.source is None]

    @property
    def outputs(self) -> List[Tensor]:
        """Tensors not consumed by any operator."""
        return [t for t in self._tensors if not t.targets]

    def check_valid(self) -> bool:
        """Check that tensors and operators refer only to members of this graph."""
        for tensor in self._tensors:
            targets = tensor.targets
            source = tensor.source
            if not targets and source is None:
                raise GraphError(f"Tensor {tensor.fuid} is not connected")
            if any(not _contains(self._ops, op) for op in targets):
                raise GraphError(f"Target of tensor {tensor.fuid} is not in the graph")
            if source is not None and not _contains(self._ops, source):
                raise GraphError(f"Source of tensor {tensor.fuid} is not in the graph")
        for op in self._ops:
            for tensor in (*op.inputs, *op.outputs):
                if not _contains(self._tensors, tensor):
                    raise GraphError(f"Tensor of operator {op.guid} is not in the graph")
            for other in (*op.predecessors, *op.successors):
                if not _contains(self._ops, other):
                    raise GraphError(f"Neighbour of operator {op.guid} is not in the graph")
        seen = set()
        for tensor in self._tensors:
            if tensor.fuid in seen:
                raise GraphError(str(tensor.fuid))
            seen.add(tensor.fuid)
        return True

    def __str__(self) -> str:
        lines = ["Graph Tensors:\n"]
        lines.extend(f"{tensor}\n" for tensor in self._tensors)
        lines.append("Graph operators:\n")
        for op in self._ops:
            preds = vec_to_string(o.guid for o in op.predecessors)
            succs = vec_to_string(o.guid for o in op.successors)
            lines.append(f"OP {op.guid}, pred {preds}, succ {succs}, {op}\n")
        return "".join(lines)