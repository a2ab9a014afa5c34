# tensorgraph

`tensorgraph` is a small computation-graph framework. You describe tensors and the operators that join them. The package then:

- infers the shapes and data types of operator outputs,
- sorts the operators into topological order,
- applies two simple graph optimisations,
- plans memory for every tensor with a best-fit offset allocator, and
- runs the graph with reference CPU kernels built on numpy.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Building a graph

```python
from tensorgraph.data_type import DataType
from tensorgraph.graph import Graph
from tensorgraph.runtime import NativeCpuRuntime
from tensorgraph.operators.matmul import MatmulOp

runtime = NativeCpuRuntime.get_instance()
g = Graph(runtime)
a = g.add_tensor([1, 3, 5], DataType.Float32)
b = g.add_tensor([1, 5, 2], DataType.Float32)
matmul = g.add_op(MatmulOp, a, b, None)
print(matmul.get_output().dims)  # [1, 3, 2]
```

`Graph.add_op` passes the graph to the operator, which creates its output tensors in it, so pass `None` where an output goes. `Graph.add_op_with_outputs` instead connects output tensors that you already added with `Graph.add_tensor`; their shapes are checked against the inferred ones.

Other members of `Graph`:

- `tensors`, `operators`, `inputs` (tensors no operator produces) and `outputs` (tensors no operator reads),
- `add_existing_tensor` and `add_tensors` for tensors made elsewhere with the same runtime,
- `remove_operator`, `remove_tensor` and `get_tensor(fuid)`,
- `topo_sort`, which returns `False` if the graph has a cycle,
- `shape_infer`, which recomputes output shapes in operator order,
- `check_valid`, which raises if a tensor or operator refers to something outside the graph.

## Operators

| Module | Operators |
| --- | --- |
| `tensorgraph.operators.element_wise` | `AddOp`, `SubOp`, `MulOp`, `DivOp` (bidirectional broadcasting) |
| `tensorgraph.operators.matmul` | `MatmulOp` (optional `trans_a` / `trans_b`, batch dimensions broadcast) |
| `tensorgraph.operators.transpose` | `TransposeOp` (output dimension `i` is input dimension `permute[i]`) |
| `tensorgraph.operators.concat` | `ConcatOp` (negative axes allowed) |
| `tensorgraph.operators.unary` | `ReluOp`, `ClipOp`, `CastOp` with `CastType` |

Element types are members of `tensorgraph.data_type.DataType`, numbered as in the ONNX element-type table.

## Running a graph

Call `Graph.data_malloc` to give every tensor its memory. Fill the inputs with a generator from `tensorgraph.generators` (`IncrementalGenerator`, `OneGenerator`, `ZeroGenerator` or `ValueGenerator(value)`), then run the graph on the runtime:

```python
from tensorgraph.generators import IncrementalGenerator, OneGenerator
from tensorgraph.operators.concat import ConcatOp

g = Graph(runtime)
t1 = g.add_tensor([2, 2, 3, 1], DataType.Float32)
t2 = g.add_tensor([2, 2, 1, 1], DataType.Float32)
op = g.add_op(ConcatOp, [t1, t2], None, 2)
g.data_malloc()
t1.set_data(IncrementalGenerator())
t2.set_data(OneGenerator())
runtime.run(g)
op.get_output().print_data()
print(op.get_output().equal_data([0, 1, 2, 1, 3, 4, 5, 1, 6, 7, 8, 1, 9, 10, 11, 1]))
```

`NativeCpuRuntime.run` looks up a kernel for each operator in `tensorgraph.kernel.KernelRegistry`; the kernels in `tensorgraph.cpu_kernels` register themselves when that module is imported, which `run` does for you. `Tensor.data` is a flat writable numpy view of a tensor's memory, and `Tensor.equal_data` compares it with another tensor or a sequence of values, using a relative tolerance for floating-point types.

## Optimisation

`Graph.optimize` makes two changes to the operator list:

- Two adjacent transposes, where the second reads the output of the first and both use the same permutation, are both removed.
- A transpose that swaps the last two axes and is followed by a matrix multiplication reading its output is folded into that multiplication: its `trans_a` or `trans_b` flag is set and it reads the transpose's input instead.

Tensors that no remaining operator reads or writes are then dropped from the graph.

## Memory planning

`tensorgraph.allocator.Allocator` plans memory before any real memory exists:

- `alloc` returns a byte offset; sizes are rounded up to 8 bytes and the smallest free block that fits is reused.
- `free` returns a block, merges it with free neighbours and shrinks the used region when the block ends it.
- `get_ptr` allocates one buffer of the peak size on first call; after that, `alloc` and `free` raise.
- `info` prints current and peak usage.

`Graph.data_malloc` uses it to place every tensor and binds each to a `Blob` within the single buffer.

## Limits

- There is no command-line tool and no loading or saving of models; graphs are built in Python.
- The only runtime is the host CPU.
- CPU kernels exist for `Concat`, `Add`, `Sub`, `Mul`, `Div`, `Transpose`, `Relu` and `Clip`, for `Float32` and `UInt32` data only. `MatmulOp` and `CastOp` do shape and type inference but have no kernel, so running a graph that contains them raises.

Errors raise `tensorgraph.common.GraphError`.