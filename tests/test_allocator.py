import numpy as np
import pytest

from tensorgraph.allocator import Allocator, Blob
from tensorgraph.common import GraphError
from tensorgraph.data_type import DataType
from tensorgraph.runtime import NativeCpuRuntime
from tensorgraph.tensor import Tensor

SHAPE = [1, 2, 2, 3]


@pytest.fixture
def runtime():
    return NativeCpuRuntime.get_instance()


def _tensor(runtime, shape=SHAPE):
    return Tensor(shape, DataType.Float32, runtime)


def test_alloc(runtime):
    a, b, c, d = (_tensor(runtime) for _ in range(4))
    allocator = Allocator(runtime)
    offset_a = allocator.alloc(a.bytes)
    offset_b = allocator.alloc(b.bytes)
    offset_c = allocator.alloc(c.bytes)
    allocator.free(offset_b, b.bytes)
    offset_d = allocator.alloc(d.bytes)
    assert offset_b == offset_d
    assert not (offset_a == 0 and offset_b == 0 and offset_c == 0 and offset_d == 0)


def test_alloc_with_end_free_block(runtime):
    a, b, c = (_tensor(runtime) for _ in range(3))
    d = _tensor(runtime, [2, 2, 2, 3])
    allocator = Allocator(runtime)
    allocator.alloc(a.bytes)
    allocator.alloc(b.bytes)
    offset_c = allocator.alloc(c.bytes)
    allocator.free(offset_c, c.bytes)
    offset_d = allocator.alloc(d.bytes)
    assert offset_c == offset_d


def test_get_ptr(runtime):
    allocator = Allocator(runtime)
    for _ in range(4):
        allocator.alloc(_tensor(runtime).bytes)
    ptr1 = allocator.get_ptr()
    ptr2 = allocator.get_ptr()
    assert ptr1 is ptr2
    assert len(ptr1) >= allocator.peak


def test_alloc_after_get_ptr_raises(runtime):
    allocator = Allocator(runtime)
    offset = allocator.alloc(16)
    allocator.get_ptr()
    with pytest.raises(GraphError):
        allocator.alloc(8)
    with pytest.raises(GraphError):
        allocator.free(offset, 16)


def test_sizes_are_aligned(runtime):
    allocator = Allocator(runtime)
    first = allocator.alloc(3)
    second = allocator.alloc(5)
    assert first == 0
    assert second == 8
    assert allocator.used == 16


def test_free_merges_neighbours(runtime):
    allocator = Allocator(runtime)
    offsets = [allocator.alloc(8) for _ in range(4)]
    allocator.free(offsets[0], 8)
    allocator.free(offsets[1], 8)
    assert allocator.free_blocks == {0: 16}
    assert allocator.alloc(16) == 0
    assert allocator.free_blocks == {}


def test_free_at_end_shrinks_used_but_not_peak(runtime):
    allocator = Allocator(runtime)
    allocator.alloc(8)
    tail = allocator.alloc(24)
    peak = allocator.peak
    allocator.free(tail, 24)
    assert allocator.used == tail
    assert allocator.peak == peak
    assert allocator.free_blocks == {}


def test_best_fit_prefers_smallest_block(runtime):
    allocator = Allocator(runtime)
    big = allocator.alloc(32)
    allocator.alloc(8)
    small = allocator.alloc(16)
    allocator.alloc(8)
    allocator.free(big, 32)
    allocator.free(small, 16)
    assert allocator.alloc(16) == small
    assert allocator.free_blocks == {big: 32}


def test_info_reports_usage(runtime, capsys):
    allocator = Allocator(runtime)
    allocator.alloc(48)
    allocator.info()
    out = capsys.readouterr().out
    assert out.strip() == f"Used memory: {allocator.used}, peak memory: {allocator.peak}"


def test_blob_view_writes_through(runtime):
    buffer = runtime.alloc(32)
    blob = Blob(runtime, buffer, 8)
    view = blob.view(DataType.Float32, 4)
    view[:] = [1.0, 2.0, 3.0, 4.0]
    again = Blob(runtime, buffer, 8).view(DataType.Float32, 4)
    assert again.tolist() == [1.0, 2.0, 3.0, 4.0]
    assert not np.any(buffer[:8])


def test_blob_view_out_of_bounds(runtime):
    blob = Blob(runtime, runtime.alloc(8), 8)
    with pytest.raises(GraphError):
        blob.view(DataType.Float32, 1)