"""128-bit event keys made of two 64-bit words with packed bit fields.

Layout of the two words (bit 63 on the left)::

    k1: aaaaaaaaaarrrrrr rrrrrrrrtttttttt cccccccccccccccc ddddddddoooossss
    k2: bbbbbbbbbbbbbbbb bbbbbbbbbbbbbbbb uupppppppppppppp pppppppppppppppp

a = activity, r = region, t = thread, c = callsite, d = datatype,
o = operation, s = resource selector, b = bytes, p = partner rank.
With selector 1 the whole of k2 holds a pointer value instead.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, replace
from enum import Enum

WORD_MASK = 0xFFFFFFFFFFFFFFFF

# Table and buffer sizes.
MAXSIZE_HASH = 65437
MAXSIZE_XHASH = 32573
MAXSIZE_HOSTNAME = 16
MAXSIZE_USERNAME = 16
MAXSIZE_ALLOCATIONNAME = 16
MAXSIZE_JOBID = 32
MAXSIZE_MACHNAME = 32
MAXSIZE_MACHINFO = 32
MAXSIZE_REGLABEL = 32
MAXSIZE_CMDLINE = 4096
MAXSIZE_FILENAME = 256
MAXNUM_REGIONS = 256
MAXNUM_REGNESTING = 32
MAXNUM_MODULES = 16
MAXNUM_MPI_OPS = 16
MAXNUM_MPI_TYPES = 64
MAXSIZE_CALLSTACKDEPTH = 30
MAXSIZE_CALLTABLE = 1024
MAXSIZE_CALLLABEL = 64
MAXNUM_CALLSITES = 8192
MAXSIZE_CYCLE = 128
MAXNUM_CYCLES = 128
MAXNUM_PAPI_EVENTS = 16
MAXNUM_PAPI_COUNTERS = 8
MAXNUM_PAPI_COMPONENTS = 8
MAXSIZE_PAPI_EVTNAME = 32
MAXNUM_THREADS = 128

# Largest value an event counter may hold.
COUNT_MAX = 4294967295


class KeyField(Enum):
    """A bit field of a key: which word it lives in, its mask and offset."""

    ACTIVITY = (1, 0xFFC0000000000000, 54)
    REGION = (1, 0x003FFF0000000000, 40)
    TID = (1, 0x000000FF00000000, 32)
    CALLSITE = (1, 0x00000000FFFF0000, 16)
    DATATYPE = (1, 0x000000000000FF00, 8)
    OPERATION = (1, 0x00000000000000F0, 4)
    SELECT = (1, 0x000000000000000F, 0)
    BYTES = (2, 0xFFFFFFFF00000000, 32)
    RANK = (2, 0x000000003FFFFFFF, 0)
    POINTER = (2, 0xFFFFFFFFFFFFFFFF, 0)

    def __init__(self, word: int, mask: int, offset: int) -> None:
        self.word = word
        self.mask = mask
        self.offset = offset

    @property
    def max_value(self) -> int:
        """Largest value the field can hold."""
        return self.mask >> self.offset

    @property
    def min_value(self) -> int:
        """Smallest value the field can hold."""
        return 0


@dataclass(frozen=True)
class HashKey:
    """An immutable 128-bit key held as two unsigned 64-bit words."""

    k1: int = 0
    k2: int = 0

    def __post_init__(self) -> None:
        for word in (self.k1, self.k2):
            if not 0 <= word <= WORD_MASK:
                raise ValueError(f"key word out of 64-bit range: {word!r}")

    def get(self, field: KeyField) -> int:
        """Return the value stored in ``field``."""
        word = self.k1 if field.word == 1 else self.k2
        return (word & field.mask) >> field.offset

    def set(self, field: KeyField, value: int) -> HashKey:
        """Return a copy with ``field`` replaced; excess high bits are dropped."""
        shifted = ((value & WORD_MASK) << field.offset) & WORD_MASK
        if field.word == 1:
            return replace(self, k1=(self.k1 & ~field.mask & WORD_MASK) | (shifted & field.mask))
        return replace(self, k2=(self.k2 & ~field.mask & WORD_MASK) | (shifted & field.mask))

    def is_null(self) -> bool:
        """True if both words are zero."""
        return self.k1 == 0 and self.k2 == 0

    def hash(self, mod: int) -> int:
        """Bucket index of this key in a table of ``mod`` slots."""
        return (self.k1 % mod + self.k2 % mod) % mod

    def show_bits(self) -> str:
        """Three lines: a digit ruler, then the bits of k1 and of k2."""
        ruler = "".join(str((63 - i) % 10) for i in range(64))
        return f"{ruler}\n{self.k1:064b}\n{self.k2:064b}\n"

    def __str__(self) -> str:
        return f"{self.k1:016X}{self.k2:016X}"


def make_key(activity: int, region: int, callsite: int, rank: int, tid: int, nbytes: int) -> HashKey:
    """Build a key from its activity, region, callsite, rank, thread and byte count."""
    key = HashKey()
    key = key.set(KeyField.ACTIVITY, activity)
    key = key.set(KeyField.REGION, region)
    key = key.set(KeyField.CALLSITE, callsite)
    key = key.set(KeyField.RANK, rank)
    key = key.set(KeyField.TID, tid)
    return key.set(KeyField.BYTES, nbytes)


def pair_hash(key1: HashKey, key2: HashKey, mod: int) -> int:
    """Bucket index of a pair of keys in a table of ``mod`` slots."""
    return (key1.hash(mod) + key2.hash(mod)) % mod


def random_key(rng: random.Random) -> HashKey:
    """A key whose words are each built from two 31-bit random draws."""
    r1, r2 = rng.getrandbits(31), rng.getrandbits(31)
    k1 = (r1 << 32) + r2
    r1, r2 = rng.getrandbits(31), rng.getrandbits(31)
    k2 = (r1 << 32) + r2
    return HashKey(k1, k2)


RANK_NULL = KeyField.RANK.max_value
RANK_ALL = KeyField.RANK.max_value - 1
RANK_ANY_SOURCE = KeyField.RANK.max_value - 2

CALLSITE_NULL = KeyField.CALLSITE.max_value
REGION_NULL = KeyField.REGION.max_value

RESOURCE_BYTES_AND_RANK = 0
RESOURCE_POINTER = 1