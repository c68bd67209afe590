"""
Invariants every engine must hold, checked over a handful of workloads.
"""

import random
from collections import defaultdict

import pytest

from schedsim.algorithms import simulate
from schedsim.models import Process

VARIANTS = [
    ("FCFS", False, 0),
    ("SJF", False, 0),
    ("SJF", True, 0),
    ("RR", False, 1),
    ("RR", False, 3),
    ("Priority", False, 0),
    ("Priority", True, 0),
]


def _random_workload(seed, n=8):
    rng = random.Random(seed)
    return [
        Process(
            f"P{i}",
            arrival_time=rng.randint(0, 15),
            burst_time=rng.randint(1, 7),
            priority=rng.randint(0, 4),
        )
        for i in range(n)
    ]


WORKLOADS = {
    "basic": [
        Process("P1", 0, 5, priority=2),
        Process("P2", 1, 3, priority=1),
        Process("P3", 2, 8, priority=3),
    ],
    "idle-gaps": [
        Process("A", 3, 2, priority=1),
        Process("B", 12, 4, priority=0),
        Process("C", 12, 1, priority=2),
        Process("D", 30, 3, priority=1),
    ],
    "same-arrival": [Process(f"S{i}", 0, 5 - i % 3, priority=i % 2) for i in range(6)],
    "single": [Process("only", 4, 6)],
    "random-1": _random_workload(1),
    "random-2": _random_workload(2),
    "random-3": _random_workload(3, n=15),
}

CASES = [
    pytest.param(workload, variant, id=f"{name}-{variant[0]}{'-pre' if variant[1] else ''}-q{variant[2]}")
    for name, workload in WORKLOADS.items()
    for variant in VARIANTS
]


def _run(workload, variant):
    algorithm, preemptive, quantum = variant
    return simulate(workload, algorithm, is_preemptive=preemptive, time_quantum=quantum)


@pytest.mark.parametrize("workload,variant", CASES)
def test_metric_conservation(workload, variant):
    res = _run(workload, variant)
    assert len(res.processes) == len(workload)
    for p in res.processes:
        assert p.turnaround_time == p.completion_time - p.arrival_time
        assert p.waiting_time == p.turnaround_time - p.burst_time
        assert p.response_time == p.start_time - p.arrival_time
        assert p.waiting_time >= 0
        assert 0 <= p.response_time <= p.waiting_time


@pytest.mark.parametrize("workload,variant", CASES)
def test_timeline_segments_do_not_overlap(workload, variant):
    res = _run(workload, variant)
    segments = sorted(res.timeline, key=lambda s: s.start_time)
    for seg in segments:
        assert seg.duration > 0
    for prev, nxt in zip(segments, segments[1:]):
        assert prev.end_time <= nxt.start_time


@pytest.mark.parametrize("workload,variant", CASES)
def test_each_process_gets_exactly_its_burst(workload, variant):
    res = _run(workload, variant)
    cpu = defaultdict(int)
    for seg in res.timeline:
        cpu[seg.pid] += seg.duration
    assert dict(cpu) == {p.pid: p.burst_time for p in workload}


@pytest.mark.parametrize("workload,variant", CASES)
def test_no_dispatch_before_arrival(workload, variant):
    res = _run(workload, variant)
    arrivals = {p.pid: p.arrival_time for p in workload}
    for seg in res.timeline:
        assert seg.start_time >= arrivals[seg.pid]


@pytest.mark.parametrize("workload,variant", CASES)
def test_completion_matches_last_segment(workload, variant):
    res = _run(workload, variant)
    last_end = {}
    first_start = {}
    for seg in res.timeline:
        last_end[seg.pid] = max(last_end.get(seg.pid, 0), seg.end_time)
        first_start[seg.pid] = min(first_start.get(seg.pid, seg.start_time), seg.start_time)
    for p in res.processes:
        assert p.completion_time == last_end[p.pid]
        assert p.start_time == first_start[p.pid]


@pytest.mark.parametrize("workload,variant", CASES)
def test_simulation_is_deterministic(workload, variant):
    first = _run(workload, variant)
    second = _run(workload, variant)
    assert first.timeline == second.timeline
    assert first.processes == second.processes
    assert first.averages == second.averages


@pytest.mark.parametrize("workload,variant", CASES)
def test_averages_are_arithmetic_means(workload, variant):
    res = _run(workload, variant)
    n = len(res.processes)
    assert res.averages.waiting == pytest.approx(sum(p.waiting_time for p in res.processes) / n)
    assert res.averages.turnaround == pytest.approx(sum(p.turnaround_time for p in res.processes) / n)
    assert res.averages.response == pytest.approx(sum(p.response_time for p in res.processes) / n)


@pytest.mark.parametrize("name", sorted(WORKLOADS))
@pytest.mark.parametrize("quantum", [1, 2, 4])
def test_round_robin_slices_respect_quantum(name, quantum):
    workload = WORKLOADS[name]
    res = simulate(workload, "RR", time_quantum=quantum)
    completion = {p.pid: p.completion_time for p in res.processes}
    for seg in res.timeline:
        assert seg.duration <= quantum
        if seg.duration < quantum:
            # Only a process's final slice may come up short.
            assert seg.end_time == completion[seg.pid]


@pytest.mark.parametrize("name", sorted(WORKLOADS))
def test_non_preemptive_engines_emit_one_segment_per_process(name):
    workload = WORKLOADS[name]
    for algorithm in ("FCFS", "SJF", "Priority"):
        res = simulate(workload, algorithm)
        assert len(res.timeline) == len(workload)
