import pytest

from tensorgraph.common import GraphError
from tensorgraph.data_type import DataType
from tensorgraph.graph import Graph
from tensorgraph.op_type import OpType
from tensorgraph.operators.element_wise import AddOp, DivOp, MulOp, SubOp
from tensorgraph.runtime import NativeCpuRuntime


@pytest.fixture
def graph():
    return Graph(NativeCpuRuntime.get_instance())


def test_shape_inference(graph):
    i0 = graph.add_tensor([2, 3, 3, 4], DataType.UInt32)
    i1 = graph.add_tensor([2, 3, 3, 4], DataType.UInt32)
    op = graph.add_op(AddOp, i0, i1, None)
    assert op.get_output().dims == [2, 3, 3, 4]


@pytest.mark.parametrize(
    "shape0, shape1",
    [
        ([2, 3, 4, 5], []),
        ([2, 3, 4, 5], [5]),
        ([4, 5], [2, 3, 4, 5]),
        ([1, 4, 5], [2, 3, 1, 1]),
        ([3, 4, 5], [2, 1, 1, 1]),
    ],
)
def test_broadcasting(graph, shape0, shape1):
    i0 = graph.add_tensor(shape0, DataType.UInt32)
    i1 = graph.add_tensor(shape1, DataType.UInt32)
    op = graph.add_op(AddOp, i0, i1, None)
    assert op.get_output().dims == [2, 3, 4, 5]


@pytest.mark.parametrize(
    "op_class, op_type",
    [(AddOp, OpType.Add), (SubOp, OpType.Sub), (MulOp, OpType.Mul), (DivOp, OpType.Div)],
)
def test_operator_kinds(graph, op_class, op_type):
    i0 = graph.add_tensor([2, 3], DataType.Float32)
    i1 = graph.add_tensor([3], DataType.Float32)
    op = graph.add_op(op_class, i0, i1, None)
    assert op.op_type == op_type
    assert op.get_output().dims == [2, 3]
    assert op.out_dtype == DataType.Float32


def test_given_output_with_matching_shape(graph):
    i0 = graph.add_tensor([2, 3], DataType.Float32)
    i1 = graph.add_tensor([2, 3], DataType.Float32)
    out = graph.add_tensor([2, 3], DataType.Float32)
    op = graph.add_op_with_outputs(MulOp, i0, i1, out)
    assert op.get_output() is out
    assert out.source is op


def test_given_output_with_wrong_shape(graph):
    i0 = graph.add_tensor([2, 3], DataType.Float32)
    i1 = graph.add_tensor([2, 3], DataType.Float32)
    out = graph.add_tensor([3, 2], DataType.Float32)
    with pytest.raises(GraphError):
        graph.add_op_with_outputs(SubOp, i0, i1, out)


def test_string_form(graph):
    i0 = graph.add_tensor([2, 3], DataType.Float32)
    i1 = graph.add_tensor([3], DataType.Float32)
    op = graph.add_op(AddOp, i0, i1, None)
    assert str(op) == (
        f"Add[{op.guid}]([2,3],[3],input0={i0.guid},input1={i1.guid},"
        f"output={op.get_output().guid})"
    )