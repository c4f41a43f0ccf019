# ipmperf

`ipmperf` is a library of the data structures behind a profiler for parallel
programs. It packs events into fixed-width keys, counts and times them in a
hash table, keeps a histogram of transitions between events, and turns
OpenMP parallel-region trace points into work and idle time.

It has no dependencies outside the standard library.

## Modules

- `ipmperf.hashkey`: `HashKey`, an immutable 128-bit key of two 64-bit words
  (`k1`, `k2`). `KeyField` names its bit fields (activity, region, thread,
  callsite, datatype, operation, selector, bytes, rank, pointer) and gives
  each field's `max_value`. `HashKey.get(field)` reads a field,
  `HashKey.set(field, value)` returns a copy with the field replaced,
  `HashKey.hash(mod)` gives a bucket index and `HashKey.show_bits()` prints the
  bits of both words. `make_key(activity, region, callsite, rank, tid, nbytes)`
  builds a key, `pair_hash` hashes two keys together and `random_key(rng)`
  makes a key from a `random.Random`. The module also holds the table sizes
  (`MAXSIZE_HASH`, `MAXSIZE_XHASH`, ...) and the special ranks `RANK_NULL`,
  `RANK_ALL` and `RANK_ANY_SOURCE`.
- `ipmperf.calltable`: `CallTable` maps activity ids to a `CallEntry` holding a
  name and `CallAttr` flags, through `register`, `name_of`, `attr_of` and
  `is_p2p`. `ModuleId` lists the monitoring modules and `module_range(module)`
  gives the block of activity ids reserved for a module that has one.
- `ipmperf.hashtable`: `HashTable`, a fixed-size table with linear probing. For
  each key it keeps a `HashEntry` with `count`, `t_tot`, `t_min` and `t_max`.
  `lookup(key)` returns the slot index, claiming a free slot for a new key;
  `add(key, seconds)` records one event and returns its entry; `count_of`,
  `entries`, `clear` and `remap_callsites` complete it. A new key that finds
  no free slot raises `TableFullError`.
- `ipmperf.mpi`: the reduction operation codes `MpiOp` and datatype codes
  `MpiType` (each with an `mpi_name`), `keep_only_high_3bits(value)`, which
  keeps only the three highest set bits of a 32-bit size, and
  `format_trace_line(...)`, which renders one trace record.
- `ipmperf.keyhist`: `TransitionTable` counts transitions between pairs of keys
  (`lookup`, `record`, `entries`, `remap_callsites`). `format_key` renders a
  key as `[ ... ]` with the parts chosen by `NodeFormat`, and
  `write_report(path, table, htable, calltable, taskid, wait_ids)` writes one
  line per transition and returns the number of lines written.
- `ipmperf.omp`: `OmpTracer` takes the `parallel_enter`, `parallel_begin`,
  `parallel_end` and `parallel_exit` points of OpenMP parallel regions, keeps a
  `ThreadStats` per thread, accounts only the outermost nesting level, and
  records the region time and each thread's idle time in a `HashTable`. It can
  write a trace line for each point to an open text stream.
- `ipmperf.report`: `GlobalStats`, the minimum, maximum and sum of a time and a
  count gathered over tasks, with `clear`, `set` and `add`, and the
  `BannerFlag` options.
- `ipmperf.flags`: the monitor `State` values and `TaskFlag` bits;
  `clear_report`, `clear_log` and `clear_logwriter` return flags with those
  groups of bits cleared, and `format_message` prefixes a diagnostic line with
  the task rank or process id.

## Example

```python
from ipmperf.hashkey import make_key
from ipmperf.hashtable import HashTable

table = HashTable()
key = make_key(activity=5, region=1, callsite=0, rank=3, tid=0, nbytes=80)
table.add(key, 0.002)
entry = table.add(key, 0.004)

print(entry.count, entry.t_tot, entry.t_min, entry.t_max)
print(table.count_of(key))  # 2
```

## What it does not do

`ipmperf` does not attach to running programs: it does not intercept MPI,
POSIX I/O or GPU calls, and it does not hook OpenMP itself. Timestamps and
thread ids are passed in by the caller. It does not gather statistics across
processes, and it does not print a banner or write XML reports. There is no
command-line program.

## Installing

```
pip install .
```

To run the tests, install the test extra and then run pytest:

```
pip install .[test]
pytest
```