"""Histogram of transitions between consecutive events."""

from __future__ import annotations

import os
from collections.abc import Collection, Iterator, Sequence
from dataclasses import dataclass, field
from enum import IntFlag

from ipmperf.calltable import CallAttr, CallTable
from ipmperf.hashkey import (
    MAXSIZE_XHASH,
    RANK_ALL,
    RANK_ANY_SOURCE,
    RANK_NULL,
    HashKey,
    KeyField,
    pair_hash,
)
from ipmperf.hashtable import HashTable, TableFullError


class NodeFormat(IntFlag):
    """Parts of a key to show when it is printed."""

    CALL = 1
    RANK = 1 << 1
    BYTES = 1 << 2
    CALLSITE = 1 << 3
    REGION = 1 << 4
    COUNT = 1 << 5


REPORT_FORMAT = (NodeFormat.COUNT | NodeFormat.CALL | NodeFormat.RANK
                 | NodeFormat.BYTES | NodeFormat.CALLSITE | NodeFormat.REGION)
TRACE_FORMAT = (NodeFormat.CALL | NodeFormat.RANK | NodeFormat.BYTES
                | NodeFormat.CALLSITE | NodeFormat.REGION)


@dataclass
class Transition:
    """Number and summed time of transitions from ``skey`` to ``ekey``."""

    skey: HashKey = field(default_factory=HashKey)
    ekey: HashKey = field(default_factory=HashKey)
    count: int = 0
    t_tot: float = 0.0


class TransitionTable:
    """Fixed-size table with linear probing keyed by a pair of keys."""

    def __init__(self, size: int = MAXSIZE_XHASH) -> None:
        if size < 1:
            raise ValueError("table size must be positive")
        self.size = size
        self._slots: list[Transition | None] = [None] * size
        self.space = size
        self.collisions = 0

    def __getitem__(self, idx: int) -> Transition:
        slot = self._slots[idx]
        return slot if slot is not None else Transition()

    def lookup(self, skey: HashKey, ekey: HashKey) -> int:
        """Index of the pair, claiming a free slot for it if it is new."""
        idx = pair_hash(skey, ekey, self.size)
        tests = 0
        while True:
            slot = self._slots[idx]
            s = slot.skey if slot is not None else HashKey()
            e = slot.ekey if slot is not None else HashKey()
            if s == skey and e == ekey:
                if slot is None:
                    self._slots[idx] = Transition(skey, ekey)
                break
            if self.space > 0 and s.is_null() and e.is_null():
                self._slots[idx] = Transition(skey, ekey)
                self.space -= 1
                break
            tests += 1
            if tests >= self.size:
                self.collisions += tests
                raise TableFullError(f"no slot left for transition {skey} -> {ekey}")
            idx = (idx + 1) % self.size
        self.collisions += tests
        return idx

    def record(self, skey: HashKey, ekey: HashKey, seconds: float) -> Transition:
        """Count one transition that took ``seconds``."""
        entry = self[self.lookup(skey, ekey)]
        entry.count += 1
        entry.t_tot += seconds
        return entry

    def entries(self) -> Iterator[Transition]:
        """Occupied entries in slot order."""
        for slot in self._slots:
            if slot is not None and not (slot.skey.is_null() and slot.ekey.is_null()):
                yield slot

    def __len__(self) -> int:
        return sum(1 for _ in self.entries())

    def remap_callsites(self, mapping: Sequence[int], maxid: int) -> None:
        """Rewrite callsite ids of both keys of used entries through ``mapping``."""
        for slot in self._slots:
            if slot is None or slot.count == 0:
                continue
            slot.skey = _remap(slot.skey, mapping, maxid)
            slot.ekey = _remap(slot.ekey, mapping, maxid)


def _remap(key: HashKey, mapping: Sequence[int], maxid: int) -> HashKey:
    cs = key.get(KeyField.CALLSITE)
    if 0 <= cs <= maxid and mapping[cs] and cs != mapping[cs]:
        return key.set(KeyField.CALLSITE, mapping[cs])
    return key


def format_key(key: HashKey, fmt: NodeFormat, htable: HashTable, calltable: CallTable,
               taskid: int, wait_ids: Collection[int] = frozenset()) -> str:
    """Render a key as ``[ ... ]`` showing the parts selected by ``fmt``.

    ``wait_ids`` are activities treated like point-to-point calls for
    relative ranks and byte counts. An activity outside the call table
    gives an empty string.
    """
    rank = key.get(KeyField.RANK)
    call = key.get(KeyField.ACTIVITY)
    nbytes = key.get(KeyField.BYTES)
    csite = key.get(KeyField.CALLSITE)
    reg = key.get(KeyField.REGION)

    if not 0 <= call < calltable.size:
        return ""

    attr = calltable.attr_of(call)
    is_wait = call in wait_ids
    parts = ["[ "]

    if fmt & NodeFormat.COUNT:
        parts.append(f"{htable.count_of(key)}x ")

    if fmt & NodeFormat.CALL:
        name = calltable.name_of(call)
        parts.append(name if name else "(unset)")

    if fmt & NodeFormat.RANK:
        if rank in (RANK_NULL, RANK_ALL):
            pass
        elif rank == RANK_ANY_SOURCE:
            parts.append("/(ANY)")
        elif calltable.is_p2p(call) or is_wait:
            drank = rank - taskid
            parts.append(f"/{'+' if drank >= 0 else ''}{drank}")
        else:
            parts.append(f"/{rank}")

    if fmt & NodeFormat.BYTES and (not attr & CallAttr.DATA_NONE or is_wait):
        parts.append(f" {nbytes}B")

    if fmt & NodeFormat.CALLSITE:
        parts.append(f" cs={csite}")

    if fmt & NodeFormat.REGION:
        parts.append(f" r={reg}")

    parts.append(" ]")
    return "".join(parts)


def write_report(path: str | os.PathLike[str], table: TransitionTable, htable: HashTable,
                 calltable: CallTable, taskid: int,
                 wait_ids: Collection[int] = frozenset()) -> int:
    """Write one line per transition to ``path``; return the number of lines."""
    lines = 0
    with open(path, "w", encoding="utf-8") as out:
        for entry in table.entries():
            start = format_key(entry.skey, REPORT_FORMAT, htable, calltable, taskid, wait_ids)
            end = format_key(entry.ekey, REPORT_FORMAT, htable, calltable, taskid, wait_ids)
            out.write(f"{start} -- {entry.count} --> {end} ({entry.t_tot:4.2f}) \n")
            lines += 1
    return lines