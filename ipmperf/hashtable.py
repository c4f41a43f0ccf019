"""Open-addressing hash table of per-event timing statistics."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Sequence

from ipmperf.hashkey import MAXSIZE_HASH, HashKey, KeyField

_INITIAL_T_MIN = 1.0e15


class TableFullError(Exception):
    """Raised when a new key finds no free slot."""


@dataclass
class HashEntry:
    """Timing statistics for one key."""

    key: HashKey = field(default_factory=HashKey)
    count: int = 0
    t_min: float = 0.0
    t_max: float = 0.0
    t_tot: float = 0.0


class HashTable:
    """A fixed-size table with linear probing keyed by :class:`HashKey`."""

    def __init__(self, size: int = MAXSIZE_HASH) -> None:
        if size < 1:
            raise ValueError("table size must be positive")
        self.size = size
        self._slots: list[HashEntry | None] = [None] * size
        self.space = size
        self.collisions = 0

    def _slot(self, idx: int) -> HashEntry:
        entry = self._slots[idx]
        if entry is None:
            entry = HashEntry()
            self._slots[idx] = entry
        return entry

    def __getitem__(self, idx: int) -> HashEntry:
        entry = self._slots[idx]
        return entry if entry is not None else HashEntry()

    def lookup(self, key: HashKey) -> int:
        """Index of ``key``, claiming a free slot for it if it is new."""
        idx = key.hash(self.size)
        tests = 0
        while True:
            current = self._slots[idx]
            current_key = current.key if current is not None else HashKey()
            if current_key == key:
                self._slot(idx)
                break
            if self.space > 0 and current_key.is_null():
                self._slots[idx] = HashEntry(key=key, count=0, t_min=_INITIAL_T_MIN,
                                             t_max=0.0, t_tot=0.0)
                self.space -= 1
                break
            tests += 1
            if tests >= self.size:
                self.collisions += tests
                raise TableFullError(f"no slot left for key {key}")
            idx = (idx + 1) % self.size
        self.collisions += tests
        return idx

    def add(self, key: HashKey, seconds: float) -> HashEntry:
        """Record one event of ``key`` that took ``seconds``."""
        entry = self._slot(self.lookup(key))
        entry.count += 1
        entry.t_tot += seconds
        if seconds > entry.t_max:
            entry.t_max = seconds
        if seconds < entry.t_min:
            entry.t_min = seconds
        return entry

    def _find(self, key: HashKey) -> HashEntry | None:
        idx = key.hash(self.size)
        for _ in range(self.size):
            entry = self._slots[idx]
            current_key = entry.key if entry is not None else HashKey()
            if current_key == key:
                return entry
            if current_key.is_null():
                return None
            idx = (idx + 1) % self.size
        return None

    def count_of(self, key: HashKey) -> int:
        """Number of events recorded for ``key``; zero if unknown."""
        entry = self._find(key)
        return entry.count if entry is not None else 0

    def clear(self) -> None:
        """Drop every entry."""
        self._slots = [None] * self.size
        self.space = self.size
        self.collisions = 0

    def entries(self) -> Iterator[HashEntry]:
        """Occupied entries in slot order."""
        for entry in self._slots:
            if entry is not None and not entry.key.is_null():
                yield entry

    def __len__(self) -> int:
        return sum(1 for _ in self.entries())

    def remap_callsites(self, mapping: Sequence[int], maxid: int) -> None:
        """Rewrite callsite ids of used entries in place through ``mapping``."""
        for entry in self._slots:
            if entry is None or entry.count == 0:
                continue
            cs = entry.key.get(KeyField.CALLSITE)
            if 0 <= cs <= maxid and mapping[cs] and cs != mapping[cs]:
                entry.key = entry.key.set(KeyField.CALLSITE, mapping[cs])