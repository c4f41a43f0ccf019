"""Banner flags and statistics gathered across tasks for the report."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntFlag


class BannerFlag(IntFlag):
    """What the banner shows and how the XML report is written."""

    FULL = 1 << 0
    HAVE_MPI = 1 << 1
    HAVE_POSIXIO = 1 << 2
    HAVE_OMP = 1 << 3
    HAVE_CUDA = 1 << 4
    HAVE_CUBLAS = 1 << 5
    HAVE_CUFFT = 1 << 6
    XML_CLUSTERED = 1 << 7
    XML_RELATIVE_RANKS = 1 << 8


@dataclass
class GlobalStats:
    """Minimum, maximum and sum of a time and of a count over tasks."""

    activity: int = 0
    dmin: float = 0.0
    dmax: float = 0.0
    dsum: float = 0.0
    nmin: int = 0
    nmax: int = 0
    nsum: int = 0

    def clear(self) -> None:
        """Reset all figures to zero; the activity is kept."""
        self.dmin = self.dmax = self.dsum = 0.0
        self.nmin = self.nmax = self.nsum = 0

    def set(self, dval: float, nval: int) -> None:
        """Set every time figure to ``dval`` and every count to ``nval``."""
        self.dmin = self.dmax = self.dsum = dval
        self.nmin = self.nmax = self.nsum = nval

    def add(self, dval: float, nval: int) -> None:
        """Add ``dval`` to every time figure and ``nval`` to every count."""
        self.dmin += dval
        self.dmax += dval
        self.dsum += dval
        self.nmin += nval
        self.nmax += nval
        self.nsum += nval