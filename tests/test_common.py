import copy

import pytest

from tensorgraph.common import GraphError, GraphObject, new_fuid, vec_to_string
from tensorgraph.data_type import DataType
from tensorgraph.runtime import NativeCpuRuntime
from tensorgraph.tensor import Tensor


class _Named(GraphObject):
    def __init__(self, label):
        super().__init__()
        self.label = label

    def __str__(self):
        return f"Named {self.label}"


def _tensor(shape):
    return Tensor(shape, DataType.Float32, NativeCpuRuntime.get_instance())


def test_vec_to_string_integers():
    assert vec_to_string([1, 2, 3]) == "[1,2,3]"


def test_vec_to_string_empty():
    assert vec_to_string([]) == "[]"


def test_vec_to_string_floats_drop_trailing_zero():
    assert vec_to_string([1.0, 2.5]) == "[1,2.5]"


def test_vec_to_string_single_element_has_no_separator():
    text = vec_to_string([42])
    assert "," not in text
    assert text.startswith("[") and text.endswith("]")


def test_vec_to_string_separator_count():
    values = list(range(10))
    assert vec_to_string(values).count(",") == len(values) - 1


def test_guids_are_increasing_and_distinct():
    first = Tensor([2], DataType.Float32, NativeCpuRuntime.get_instance())
    second = Tensor([3], DataType.Float32, NativeCpuRuntime.get_instance())
    assert second.guid > first.guid


def test_copy_receives_new_guid_but_keeps_fields():
    original = Tensor([2, 3], DataType.Float32, NativeCpuRuntime.get_instance())
    clone = copy.copy(original)
    assert clone.guid > original.guid
    assert clone.dims == [2, 3]


def test_new_fuid_strictly_increases():
    ids = [new_fuid() for _ in range(5)]
    assert ids == sorted(set(ids))


def test_print_writes_description(capsys):
    obj = _Named("printed")
    GraphObject.print(obj)
    assert capsys.readouterr().out == "Named printed\n"


def test_graph_object_requires_str():
    with pytest.raises(TypeError):
        GraphObject()


def test_graph_error_carries_message():
    error = GraphError("Unimplemented")
    assert str(error) == "Unimplemented"
    assert isinstance(error, RuntimeError)