import pytest

from ipmperf.calltable import CallAttr, CallTable, ModuleId, module_range
from ipmperf.hashkey import MAXSIZE_CALLTABLE


def test_attribute_bits_stored():
    table = CallTable()
    table.register(1, "a", CallAttr.RANK_ALL)
    table.register(2, "b", CallAttr.DATA_NONE)
    table.register(3, "c", CallAttr.BYTES_NELEMSIZE)
    assert int(table.attr_of(1)) == 1
    assert int(table.attr_of(2)) == 1 << 6
    assert int(table.attr_of(3)) == 1 << 34


def test_attribute_bits_distinct():
    table = CallTable()
    combined = CallAttr(0)
    for attr in CallAttr:
        combined |= attr
    table.register(0, "all", combined)
    stored = int(table.attr_of(0))
    assert bin(stored).count("1") == len(list(CallAttr))
    assert stored == (1 << 35) - 1


def test_module_ids_by_value():
    assert module_range(ModuleId(0)) == range(0, 60)
    with pytest.raises(ValueError):
        module_range(ModuleId(12))


def test_mpi_range():
    assert module_range(ModuleId.MPI) == range(0, 60)


def test_cublas_range():
    r = module_range(ModuleId.CUBLAS)
    assert r.start == 400
    assert len(r) == 180
    assert r.stop <= MAXSIZE_CALLTABLE


def test_ranges_are_contiguous():
    ordered = [ModuleId.MPI, ModuleId.MPIIO, ModuleId.POSIXIO,
               ModuleId.OMPTRACEPOINTS, ModuleId.CUDA, ModuleId.CUFFT,
               ModuleId.CUBLAS]
    ranges = [module_range(m) for m in ordered]
    for a, b in zip(ranges, ranges[1:]):
        assert a.stop == b.start
    assert module_range(ModuleId.CUDA).start == 200


def test_module_without_range():
    with pytest.raises(ValueError):
        module_range(ModuleId.PAPI)


def test_register_and_query():
    table = CallTable()
    table.register(3, "MPI_Send", CallAttr.RANK_DEST | CallAttr.DATA_TX)
    assert table.name_of(3) == "MPI_Send"
    assert table.attr_of(3) & CallAttr.DATA_TX
    assert table.is_p2p(3)
    assert 3 in table
    assert len(table) == 1


def test_collective_not_p2p():
    table = CallTable()
    table.register(7, "MPI_Bcast", CallAttr.DATA_COLLECTIVE | CallAttr.RANK_ROOT)
    assert not table.is_p2p(7)


def test_unset_activity():
    table = CallTable()
    assert table.name_of(10) is None
    assert table.attr_of(10) == CallAttr(0)
    assert not table.is_p2p(10)


@pytest.mark.parametrize("activity", [-1, MAXSIZE_CALLTABLE])
def test_out_of_range(activity):
    table = CallTable()
    with pytest.raises(IndexError):
        table.name_of(activity)
    with pytest.raises(IndexError):
        table.register(activity, "x", CallAttr.DATA_NONE)


def test_iteration_sorted():
    table = CallTable()
    table.register(9, "b", CallAttr.DATA_NONE)
    table.register(2, "a", CallAttr.DATA_NONE)
    assert [a for a, _ in table] == [2, 9]