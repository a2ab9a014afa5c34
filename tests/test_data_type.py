import pytest

from tensorgraph.common import GraphError
from tensorgraph.data_type import DataType


def test_names_match_string_form():
    assert str(DataType.from_index(1)) == "Float32"
    assert str(DataType.from_index(0)) == "Undefine"


def test_from_index_finds_bfloat16():
    assert DataType.from_index(16) is DataType.BFloat16


@pytest.mark.parametrize("index", [14, 15, -1, 17])
def test_from_index_rejects_unknown(index):
    with pytest.raises(GraphError):
        DataType.from_index(index)


def test_from_index_round_trip():
    for member in DataType:
        assert DataType.from_index(member.value) is member


@pytest.mark.parametrize(
    "dtype",
    [
        DataType.Float32,
        DataType.UInt8,
        DataType.Int8,
        DataType.UInt16,
        DataType.Int16,
        DataType.Int32,
        DataType.Int64,
        DataType.Bool,
        DataType.Float16,
        DataType.Double,
        DataType.UInt32,
        DataType.UInt64,
        DataType.BFloat16,
    ],
)
def test_size_matches_storage_type(dtype):
    assert dtype.size == dtype.numpy_dtype.itemsize


def test_undefined_has_no_size():
    assert DataType.from_index(0).size == 0


def test_cpu_type_invalid_for_string_and_undefined():
    assert DataType.from_index(8).cpu_type == -1
    assert DataType.from_index(0).cpu_type == -1


def test_cpu_type_shared_by_same_storage():
    assert DataType.from_index(9).cpu_type == 3
    assert DataType.from_index(3).cpu_type == 3
    assert DataType.from_index(10).cpu_type == 4
    assert DataType.from_index(4).cpu_type == 4
    assert DataType.from_index(16).cpu_type == 4


def test_ordering_follows_index():
    assert DataType.from_index(1) < DataType.from_index(16)
    ordered = sorted(
        [DataType.from_index(13), DataType.from_index(0), DataType.from_index(3)]
    )
    assert ordered == [DataType.Undefine, DataType.Int8, DataType.UInt64]