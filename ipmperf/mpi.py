"""MPI reduction operations, datatypes, byte bucketing and trace lines."""

from __future__ import annotations

from enum import IntEnum

from ipmperf.hashkey import RANK_ALL, RANK_ANY_SOURCE, RANK_NULL

# Rank recorded for calls that involve all ranks or no rank at all.
RANK_ALLRANKS = 0
RANK_NORANK = 0


class MpiOp(IntEnum):
    """Reduction operations recorded for collectives."""

    MAX = 1
    MIN = 2
    SUM = 3
    PROD = 4
    LAND = 5
    BAND = 6
    LOR = 7
    BOR = 8
    LXOR = 9
    BXOR = 10
    MINLOC = 11
    MAXLOC = 12

    @property
    def mpi_name(self) -> str:
        """The MPI constant this operation stands for."""
        return f"MPI_{self.name}"


class MpiType(IntEnum):
    """Datatypes recorded for collectives."""

    CHAR = 1
    BYTE = 2
    SHORT = 3
    INT = 4
    LONG = 5
    FLOAT = 6
    DOUBLE = 7
    UNSIGNED_CHAR = 8
    UNSIGNED_SHORT = 9
    UNSIGNED = 10
    UNSIGNED_LONG = 11
    LONG_DOUBLE = 12
    LONG_LONG_INT = 13
    FLOAT_INT = 14
    LONG_INT = 15
    DOUBLE_INT = 16
    SHORT_INT = 17
    TWO_INT = 18
    LONG_DOUBLE_INT = 19
    PACKED = 20
    UB = 21
    LB = 22
    REAL = 23
    INTEGER = 24
    LOGICAL = 25
    DOUBLE_PRECISION = 26
    COMPLEX = 27
    DOUBLE_COMPLEX = 28
    INTEGER1 = 29
    INTEGER2 = 30
    INTEGER4 = 31
    REAL4 = 32
    REAL8 = 33
    TWO_INTEGER = 34
    TWO_REAL = 35
    TWO_DOUBLE_PRECISION = 36
    TWO_COMPLEX = 37
    TWO_DOUBLE_COMPLEX = 38

    @property
    def mpi_name(self) -> str:
        """The MPI constant this datatype stands for."""
        name = self.name
        if name.startswith("TWO_"):
            name = "2" + name[len("TWO_"):]
        return f"MPI_{name}"


# Mask kept for each position of the highest set bit. Entry 26 keeps the
# three bits below bit 26 rather than those starting at it.
_MASK3BITS = (
    0x1, 0x3, 0x7, 0x7 << 1, 0x7 << 2, 0x7 << 3,
    0x7 << 4, 0x7 << 5, 0x7 << 6, 0x7 << 7, 0x7 << 8, 0x7 << 9,
    0x7 << 10, 0x7 << 11, 0x7 << 12, 0x7 << 13, 0x7 << 14, 0x7 << 15,
    0x7 << 16, 0x7 << 17, 0x7 << 18, 0x7 << 19, 0x7 << 20, 0x7 << 21,
    0x7 << 22, 0x7 << 23, 0x7 << 23, 0x7 << 25, 0x7 << 26, 0x7 << 27,
    0x7 << 28, 0x7 << 29,
)


def keep_only_high_3bits(value: int) -> int:
    """Clear every bit of a 32-bit value except the three most significant set ones."""
    if not 0 <= value < 1 << 32:
        raise ValueError(f"value out of 32-bit range: {value!r}")
    lg = value.bit_length() - 1
    if lg > 0:
        value &= _MASK3BITS[lg]
    return value


def format_trace_line(t1: float, t2: float, name: str, rank: int, nbytes: int,
                      region: int, callsite: int) -> str:
    """One trace record for a call, without the trailing newline."""
    if rank in (RANK_NULL, RANK_ALL):
        rank_text = ""
    elif rank == RANK_ANY_SOURCE:
        rank_text = "rank=ANY_SOURCE"
    else:
        rank_text = f"rank={rank}"
    return f"{t1: .9f} {t2: .9f} {name} {nbytes}B {rank_text} reg={region} cs={callsite}"