import pytest

from tensorgraph.common import GraphError
from tensorgraph.data_type import DataType
from tensorgraph.graph import Graph
from tensorgraph.operators.matmul import MatmulOp
from tensorgraph.runtime import NativeCpuRuntime


@pytest.fixture
def graph():
    return Graph(NativeCpuRuntime.get_instance())


@pytest.mark.parametrize(
    "shape_a, shape_b, trans_a, trans_b, expected",
    [
        ([1, 3, 5], [1, 5, 2], False, False, [1, 3, 2]),
        ([3, 5, 4], [3, 5, 2], True, False, [3, 4, 2]),
        ([1, 2, 3, 5], [1, 1, 5, 2], False, False, [1, 2, 3, 2]),
        ([2, 3, 5, 4], [1, 3, 5, 2], True, False, [2, 3, 4, 2]),
        ([2, 3, 5, 4], [1, 3, 2, 5], True, True, [2, 3, 4, 2]),
    ],
)
def test_shape_inference(graph, shape_a, shape_b, trans_a, trans_b, expected):
    a = graph.add_tensor(shape_a)
    b = graph.add_tensor(shape_b)
    op = graph.add_op(MatmulOp, a, b, None, trans_a, trans_b)
    assert op.outputs[0].dims == expected


def test_default_dtype_and_flags(graph):
    a = graph.add_tensor([1, 3, 5])
    b = graph.add_tensor([1, 5, 2])
    op = graph.add_op(MatmulOp, a, b, None)
    assert op.trans_a is False
    assert op.trans_b is False
    assert op.out_dtype == DataType.Float32


def test_mnk_recorded(graph):
    a = graph.add_tensor([1, 3, 5])
    b = graph.add_tensor([1, 5, 2])
    op = graph.add_op(MatmulOp, a, b, None)
    assert (op.m, op.n, op.k) == (3, 2, 5)


def test_inner_dimension_mismatch(graph):
    a = graph.add_tensor([1, 3, 5])
    b = graph.add_tensor([1, 4, 2])
    with pytest.raises(GraphError):
        graph.add_op(MatmulOp, a, b, None)


def test_rank_mismatch(graph):
    a = graph.add_tensor([3, 5])
    b = graph.add_tensor([1, 5, 2])
    with pytest.raises(GraphError):
        graph.add_op(MatmulOp, a, b, None)


def test_setting_trans_changes_inferred_shape(graph):
    a = graph.add_tensor([2, 4, 3])
    b = graph.add_tensor([2, 4, 5])
    c = graph.add_tensor([2, 3, 5])
    op = graph.add_op_with_outputs(MatmulOp, a, b, c, True, False)
    assert op.infer_shape(op.inputs) == [[2, 3, 5]]
    op.trans_a = False
    with pytest.raises(GraphError):
        op.infer_shape(op.inputs)


def test_string_form(graph):
    a = graph.add_tensor([3, 5])
    b = graph.add_tensor([2, 5])
    op = graph.add_op(MatmulOp, a, b, None, False, True)
    c = op.get_output()
    assert c.dims == [3, 2]
    assert str(op) == (
        f"Matmul([A,B^T,A={a.guid},B={b.guid},C={c.guid},mnk=[3,2,5])"
    )