import pytest
from hypothesis import given
from hypothesis import strategies as st

from ipmperf.hashkey import RANK_ALL, RANK_ANY_SOURCE, RANK_NULL
from ipmperf.mpi import MpiOp, MpiType, format_trace_line, keep_only_high_3bits


def test_small_values_are_unchanged():
    for value in (0, 1, 2, 3, 5, 7):
        assert keep_only_high_3bits(value) == value


@given(st.integers(min_value=0, max_value=(1 << 32) - 1))
def test_result_is_subset_of_value(value):
    result = keep_only_high_3bits(value)
    assert result & value == result
    assert bin(result).count("1") <= 3


@given(st.integers(min_value=1, max_value=(1 << 26) - 1))
def test_highest_bit_kept_below_bit_26(value):
    result = keep_only_high_3bits(value)
    assert result.bit_length() == value.bit_length()
    assert value - result < 1 << max(value.bit_length() - 3, 0)


def test_mask_quirk_at_bit_26():
    assert keep_only_high_3bits(1 << 26) == 0


@pytest.mark.parametrize("bad", [-1, 1 << 32])
def test_out_of_range_rejected(bad):
    with pytest.raises(ValueError):
        keep_only_high_3bits(bad)


@pytest.mark.parametrize("member, expected", [
    (MpiType.TWO_INT, "MPI_2INT"),
    (MpiType.DOUBLE, "MPI_DOUBLE"),
    (MpiOp.BXOR, "MPI_BXOR"),
])
def test_trace_line_carries_mpi_names(member, expected):
    line = format_trace_line(1.0, 2.0, member.mpi_name, 1, 0, 0, 0)
    assert line.split()[2] == expected


def test_trace_line_any_source():
    line = format_trace_line(1.5, 2.25, "MPI_Recv", RANK_ANY_SOURCE, 80, 3, 4)
    assert "rank=ANY_SOURCE" in line
    assert line.endswith("reg=3 cs=4")


@pytest.mark.parametrize("rank", [RANK_NULL, RANK_ALL])
def test_trace_line_hidden_ranks(rank):
    line = format_trace_line(1.0, 2.0, "MPI_Bcast", rank, 8, 0, 0)
    assert "rank=" not in line
    assert " 8B " in line


def test_trace_line_fields():
    line = format_trace_line(1.5, 2.25, "MPI_Send", 7, 80, 3, 4)
    parts = line.split()
    assert float(parts[0]) == 1.5
    assert float(parts[1]) == 2.25
    assert parts[2:] == ["MPI_Send", "80B", "rank=7", "reg=3", "cs=4"]


@given(st.floats(min_value=0, max_value=1e6, allow_nan=False))
def test_trace_timestamp_precision(t):
    line = format_trace_line(t, t, "X", 1, 0, 0, 0)
    assert abs(float(line.split()[0]) - t) <= 1e-9