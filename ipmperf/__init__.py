"""Event keys, hash tables, transition histograms and OpenMP region timing for profilers."""

__version__ = "0.1.0"

__all__ = [
    "calltable",
    "flags",
    "hashkey",
    "hashtable",
    "keyhist",
    "mpi",
    "omp",
    "report",
]