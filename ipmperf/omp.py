"""Accounting of OpenMP parallel regions through compiler trace points."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TextIO

from ipmperf.hashkey import MAXNUM_THREADS, make_key
from ipmperf.hashtable import HashTable

OMP_OFFSET = 180
OMP_PARALLEL_ID = OMP_OFFSET
OMP_IDLE_ID = OMP_OFFSET + 1
OMP_MIN_ID = OMP_PARALLEL_ID
OMP_MAX_ID = OMP_IDLE_ID


@dataclass
class ThreadStats:
    """Per-thread figures for the current parallel region."""

    nenter: int = 0
    tenter: float = 0.0
    twork: float = 0.0
    tidle: float = 0.0

    @property
    def tpar(self) -> float:
        """Time spent in the parallel region, working or idle."""
        return self.twork + self.tidle


class OmpTracer:
    """Tracks parallel regions and records their time in a hash table.

    Only the outermost level of nested parallel regions is accounted.
    """

    def __init__(self, htable: HashTable, max_threads: int = MAXNUM_THREADS,
                 trace: TextIO | None = None) -> None:
        self.htable = htable
        self.stats = [ThreadStats() for _ in range(max_threads)]
        self.nthreads = 0
        self.maxthreads = 0
        self.num_levels = 0
        self.trace = trace

    def _trace(self, event: str, tid: int, now: float) -> None:
        if self.trace is not None:
            self.trace.write(f"{event} tid={tid} wtime={now:f}\n")

    def _check_tid(self, tid: int) -> None:
        if not 0 <= tid < len(self.stats):
            raise ValueError(f"thread id {tid} outside 0..{len(self.stats) - 1}")

    def parallel_enter(self, now: float) -> None:
        """The master thread is about to fork a team."""
        self._trace("parallel_enter", 0, now)
        self.num_levels += 1
        if self.num_levels > 1:
            return
        self.stats[0].tenter = now

    def parallel_begin(self, tid: int, nthreads: int, now: float) -> None:
        """Thread ``tid`` of a team of ``nthreads`` starts its work."""
        self._check_tid(tid)
        self._trace("parallel_begin", tid, now)
        if self.num_levels != 1:
            return
        stats = self.stats[tid]
        if tid == 0:
            if not 0 < nthreads <= len(self.stats):
                raise ValueError(f"team size {nthreads} outside 1..{len(self.stats)}")
            self.nthreads = nthreads
            self.maxthreads = max(self.maxthreads, nthreads)
        else:
            stats.tenter = now
        stats.nenter += 1

    def parallel_end(self, tid: int, now: float) -> None:
        """Thread ``tid`` has finished its work in the region."""
        self._check_tid(tid)
        self._trace("parallel_end", tid, now)
        if self.num_levels != 1:
            return
        stats = self.stats[tid]
        stats.twork = now - stats.tenter
        stats.tenter = now

    def parallel_exit(self, region: int, taskid: int, now: float) -> float | None:
        """The master thread leaves the region; returns its total time when accounted."""
        self._trace("parallel_exit", 0, now)
        if self.num_levels == 0:
            raise RuntimeError("parallel region exited without being entered")
        self.num_levels -= 1
        if self.num_levels != 0:
            return None

        team = self.stats[:self.nthreads]
        for stats in team:
            stats.tidle = now - stats.tenter
        tpar = self.stats[0].tidle + self.stats[0].twork

        self.htable.add(make_key(OMP_PARALLEL_ID, region, 0, 0, 0, 0), tpar)
        for tid, stats in enumerate(team):
            self.htable.add(make_key(OMP_IDLE_ID, region, 0, taskid, tid, 0), stats.tidle)
        return tpar