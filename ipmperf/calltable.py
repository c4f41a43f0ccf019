"""The call table: names and attribute bits of every monitored activity."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, IntFlag
from typing import Iterator

from ipmperf.hashkey import MAXSIZE_CALLTABLE


class CallAttr(IntFlag):
    """Attribute bits describing ranks, data direction and byte counting."""

    RANK_ALL = 1 << 0
    RANK_DEST = 1 << 1
    RANK_NONE = 1 << 2
    RANK_ROOT = 1 << 3
    RANK_SRC = 1 << 4
    RANK_STATUS = 1 << 5

    DATA_NONE = 1 << 6
    DATA_COLLECTIVE = 1 << 7
    DATA_RX = 1 << 8
    DATA_TX = 1 << 9
    DATA_TXRX = 1 << 10

    BYTES_NONE = 1 << 11
    BYTES_NMEMB = 1 << 12
    BYTES_COUNT = 1 << 13
    BYTES_CHAR = 1 << 14
    BYTES_RETURN_NMEMB = 1 << 15
    BYTES_RETURN_COUNT = 1 << 16
    BYTES_RETURN_EOF = 1 << 17

    BYTES_SCOUNT = 1 << 18
    BYTES_STATUS = 1 << 19
    BYTES_RCOUNT = 1 << 20
    BYTES_STATUSI = 1 << 21
    BYTES_STATUSES = 1 << 22
    BYTES_RCOUNTI = 1 << 23
    BYTES_SCOUNTI = 1 << 24
    BYTES_SCOUNTS = 1 << 25

    BYTES_COUNT_DATATYPE = 1 << 26
    BYTES_EXTENT = 1 << 27
    BYTES_SIZE = 1 << 28
    BYTES_WIDTH_HEIGHT = 1 << 29

    BYTES_NX = 1 << 30
    BYTES_NXNY = 1 << 31
    BYTES_NXNYNZ = 1 << 32

    BYTES_MNK = 1 << 33
    BYTES_NELEMSIZE = 1 << 34


_P2P = CallAttr.DATA_RX | CallAttr.DATA_TX | CallAttr.DATA_TXRX


class ModuleId(IntEnum):
    """Identifiers of the monitoring modules."""

    MPI = 0
    MPIIO = 1
    POSIXIO = 2
    OMPTRACEPOINTS = 3
    CUDA = 4
    CUFFT = 5
    CUBLAS = 6
    PAPI = 7
    SELFMONITOR = 8
    CALLPATH = 9
    KEYHIST = 10
    PROCCTRL = 11
    CLUSTERING = 12


_OFFSETS = {
    ModuleId.MPI: 0,
    ModuleId.MPIIO: 60,
    ModuleId.POSIXIO: 120,
    ModuleId.OMPTRACEPOINTS: 180,
    ModuleId.CUDA: 200,
    ModuleId.CUFFT: 380,
    ModuleId.CUBLAS: 400,
}
_CUBLAS_RANGE = 180

if _OFFSETS[ModuleId.CUBLAS] + _CUBLAS_RANGE > MAXSIZE_CALLTABLE:
    raise RuntimeError("call table not big enough to hold all events")


def module_range(module: ModuleId) -> range:
    """The slice of call-table ids reserved for ``module``."""
    module = ModuleId(module)
    if module not in _OFFSETS:
        raise ValueError(f"module {module.name} has no call-table range")
    start = _OFFSETS[module]
    if module is ModuleId.CUBLAS:
        return range(start, start + _CUBLAS_RANGE)
    return range(start, _OFFSETS[ModuleId(module + 1)])


@dataclass
class CallEntry:
    """One registered activity."""

    name: str
    attr: CallAttr


class CallTable:
    """A fixed-size table of activities, indexed by activity id."""

    def __init__(self, size: int = MAXSIZE_CALLTABLE) -> None:
        self.size = size
        self._entries: dict[int, CallEntry] = {}

    def _check(self, activity: int) -> None:
        if not 0 <= activity < self.size:
            raise IndexError(f"activity {activity} outside call table of size {self.size}")

    def register(self, activity: int, name: str, attr: CallAttr) -> CallEntry:
        """Store the name and attributes of an activity."""
        self._check(activity)
        entry = CallEntry(name, CallAttr(attr))
        self._entries[activity] = entry
        return entry

    def name_of(self, activity: int) -> str | None:
        """Name of an activity, or None if it was never registered."""
        self._check(activity)
        entry = self._entries.get(activity)
        return entry.name if entry else None

    def attr_of(self, activity: int) -> CallAttr:
        """Attributes of an activity; empty if it was never registered."""
        self._check(activity)
        entry = self._entries.get(activity)
        return entry.attr if entry else CallAttr(0)

    def is_p2p(self, activity: int) -> bool:
        """True if the activity sends or receives point-to-point data."""
        return bool(self.attr_of(activity) & _P2P)

    def __contains__(self, activity: object) -> bool:
        return activity in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[tuple[int, CallEntry]]:
        return iter(sorted(self._entries.items()))