import io

import pytest

from ipmperf.hashkey import make_key
from ipmperf.hashtable import HashTable
from ipmperf.omp import OMP_IDLE_ID, OMP_PARALLEL_ID, OmpTracer


def _tracer():
    return OmpTracer(HashTable(size=101), max_threads=8)


def _run_region(tracer, region=3, taskid=5):
    t_enter, t_begin1, t_end1, t_end0, t_exit = 0.0, 1.0, 2.0, 3.0, 4.0
    tracer.parallel_enter(t_enter)
    tracer.parallel_begin(0, 2, t_enter)
    tracer.parallel_begin(1, 2, t_begin1)
    tracer.parallel_end(1, t_end1)
    tracer.parallel_end(0, t_end0)
    tpar = tracer.parallel_exit(region, taskid, t_exit)
    return tpar, t_enter, t_exit


def test_entries_use_fixed_activity_ids():
    tracer = _tracer()
    _run_region(tracer, region=2, taskid=4)
    assert tracer.htable.count_of(make_key(180, 2, 0, 0, 0, 0)) == 1
    assert tracer.htable.count_of(make_key(181, 2, 0, 4, 0, 0)) == 1


def test_parallel_time_spans_enter_to_exit():
    tracer = _tracer()
    tpar, t_enter, t_exit = _run_region(tracer)
    assert tpar == pytest.approx(t_exit - t_enter)
    assert tracer.stats[0].tpar == pytest.approx(tpar)


def test_each_thread_work_plus_idle_covers_its_span():
    tracer = _tracer()
    _run_region(tracer)
    for stats in tracer.stats[:2]:
        assert stats.twork >= 0.0
        assert stats.tidle >= 0.0
    assert tracer.stats[1].twork + tracer.stats[1].tidle == pytest.approx(4.0 - 1.0)


def test_hash_table_gets_parallel_and_idle_entries():
    tracer = _tracer()
    region, taskid = 3, 5
    _run_region(tracer, region, taskid)
    assert tracer.htable.count_of(make_key(OMP_PARALLEL_ID, region, 0, 0, 0, 0)) == 1
    for tid in range(2):
        assert tracer.htable.count_of(make_key(OMP_IDLE_ID, region, 0, taskid, tid, 0)) == 1
    assert len(tracer.htable) == 3


def test_repeated_regions_accumulate_counts():
    tracer = _tracer()
    _run_region(tracer)
    _run_region(tracer)
    assert tracer.htable.count_of(make_key(OMP_PARALLEL_ID, 3, 0, 0, 0, 0)) == 2
    assert tracer.stats[1].nenter == 2
    assert tracer.maxthreads == 2


def test_nested_regions_are_not_accounted():
    tracer = _tracer()
    tracer.parallel_enter(0.0)
    tracer.parallel_begin(0, 2, 0.0)
    tracer.parallel_enter(1.0)
    tracer.parallel_begin(1, 4, 1.0)
    assert tracer.stats[1].nenter == 0
    assert tracer.parallel_exit(0, 0, 2.0) is None
    assert len(tracer.htable) == 0
    assert tracer.num_levels == 1


def test_unbalanced_exit_raises():
    tracer = _tracer()
    with pytest.raises(RuntimeError):
        tracer.parallel_exit(0, 0, 1.0)


def test_thread_id_out_of_range():
    tracer = _tracer()
    tracer.parallel_enter(0.0)
    with pytest.raises(ValueError):
        tracer.parallel_begin(8, 2, 0.0)


def test_trace_lines_written():
    out = io.StringIO()
    tracer = OmpTracer(HashTable(size=101), max_threads=4, trace=out)
    tracer.parallel_enter(0.5)
    lines = out.getvalue().splitlines()
    assert lines == ["parallel_enter tid=0 wtime=0.500000"]