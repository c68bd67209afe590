from __future__ import annotations

import logging
from collections import deque
from typing import Callable, Deque, Dict, List, Optional, Sequence, Set

from .errors import UnknownAlgorithmError
from .metrics import compute_averages, compute_system_metrics
from .models import Process, ScheduleResult, TimelineSegment

logger = logging.getLogger(__name__)

SelectionKey = Callable[[Process], int]
PreemptionRule = Callable[[Process, Process, int], bool]


def _prepare(processes: Sequence[Process]) -> List[Process]:
    # Engines only ever touch these copies; the caller's records stay as they were.
    return [p.fresh_copy() for p in processes]


def _build_result(
    algorithm: str,
    quantum: Optional[int],
    processes: List[Process],
    timeline: List[TimelineSegment],
) -> ScheduleResult:
    result = ScheduleResult(algorithm=algorithm, quantum=quantum, processes=processes, timeline=timeline)
    result.averages = compute_averages(processes)
    compute_system_metrics(result)
    return result


def next_arrival(processes: Sequence[Process]) -> Optional[int]:
    """
    Idle-advance rule: the earliest arrival among unfinished processes.

    Only called when nothing is ready, so the returned time is always in the
    future. ``None`` means every process has completed.
    """
    pending = [p.arrival_time for p in processes if p.remaining_time > 0]
    return min(pending) if pending else None


def _select(processes: Sequence[Process], time: int, key: SelectionKey) -> Optional[int]:
    """
    Index of the ready process with the smallest key. Ties go to the lowest
    index, so the caller's original ordering decides.
    """
    best: Optional[int] = None
    for i, p in enumerate(processes):
        if p.remaining_time > 0 and p.arrival_time <= time:
            if best is None or key(p) < key(processes[best]):
                best = i
    return best


def _run_non_preemptive(processes: List[Process], key: SelectionKey) -> List[TimelineSegment]:
    timeline: List[TimelineSegment] = []
    time = 0

    while True:
        idx = _select(processes, time, key)
        if idx is None:
            nxt = next_arrival(processes)
            if nxt is None:
                break
            time = nxt
            continue

        p = processes[idx]
        p.mark_started(time)

        end_time = time + p.remaining_time
        timeline.append(TimelineSegment(pid=p.pid, start_time=time, end_time=end_time))

        time = end_time
        p.finish(time)

    return timeline


def _run_preemptive(
    processes: List[Process],
    key: SelectionKey,
    preempts: PreemptionRule,
) -> List[TimelineSegment]:
    """
    Shared state machine for SRTF and preemptive Priority.

    The selected process runs until it completes or until the earliest later
    arrival for which ``preempts(arriving, running, wait)`` holds, where
    ``wait`` is the time from now until that arrival.
    """
    timeline: List[TimelineSegment] = []
    time = 0
    running: Optional[int] = None
    segment_start = 0

    while True:
        idx = _select(processes, time, key)
        if idx is None:
            if running is not None:
                timeline.append(
                    TimelineSegment(pid=processes[running].pid, start_time=segment_start, end_time=time)
                )
                running = None
            nxt = next_arrival(processes)
            if nxt is None:
                break
            time = nxt
            continue

        current = processes[idx]
        current.mark_started(time)

        if running != idx:
            if running is not None:
                timeline.append(
                    TimelineSegment(pid=processes[running].pid, start_time=segment_start, end_time=time)
                )
            segment_start = time
            running = idx

        run_time = current.remaining_time
        for p in processes:
            wait = p.arrival_time - time
            if p.remaining_time > 0 and 0 < wait < run_time and preempts(p, current, wait):
                run_time = wait

        time += run_time
        current.remaining_time -= run_time

        if current.remaining_time == 0:
            timeline.append(TimelineSegment(pid=current.pid, start_time=segment_start, end_time=time))
            current.finish(time)
            running = None

    return timeline


def _shorter_job_preempts(arriving: Process, running: Process, wait: int) -> bool:
    # The arrival's whole burst against what the running process will have left by then.
    return arriving.burst_time < running.remaining_time - wait


def _higher_priority_preempts(arriving: Process, running: Process, wait: int) -> bool:
    return arriving.priority < running.priority


def schedule_fcfs(processes: Sequence[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    First-Come First-Serve (non-preemptive) scheduling.
    """
    procs = _prepare(processes)

    time = 0
    timeline: List[TimelineSegment] = []

    # sorted() is stable: equal arrivals keep their input order.
    for p in sorted(procs, key=lambda p: p.arrival_time):
        if time < p.arrival_time:
            time = p.arrival_time

        p.mark_started(time)
        end_time = time + p.burst_time
        timeline.append(TimelineSegment(pid=p.pid, start_time=time, end_time=end_time))

        time = end_time
        p.finish(time)

    return _build_result("FCFS", None, procs, timeline)


def schedule_sjf(processes: Sequence[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Shortest Job First (non-preemptive).

    At each decision point, among processes that have arrived and are not yet
    completed, choose the one with the smallest burst time.
    """
    procs = _prepare(processes)
    timeline = _run_non_preemptive(procs, key=lambda p: p.burst_time)
    return _build_result("SJF (non-preemptive)", None, procs, timeline)


def schedule_srtf(processes: Sequence[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Shortest Remaining Time First (preemptive SJF).
    """
    procs = _prepare(processes)
    timeline = _run_preemptive(procs, key=lambda p: p.remaining_time, preempts=_shorter_job_preempts)
    return _build_result("SRTF (preemptive SJF)", None, procs, timeline)


def schedule_priority(processes: Sequence[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Static Priority scheduling (non-preemptive).

    Lower numeric priority value means higher priority. Ties go to the
    process listed first.
    """
    procs = _prepare(processes)
    timeline = _run_non_preemptive(procs, key=lambda p: p.priority)
    return _build_result("Priority (non-preemptive)", None, procs, timeline)


def schedule_priority_preemptive(processes: Sequence[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Preemptive Priority scheduling.

    A later arrival interrupts the running process only when its priority is
    strictly better; burst lengths play no part in the decision.
    """
    procs = _prepare(processes)
    timeline = _run_preemptive(procs, key=lambda p: p.priority, preempts=_higher_priority_preempts)
    return _build_result("Priority (preemptive)", None, procs, timeline)


def schedule_rr(processes: Sequence[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Round Robin scheduling with a fixed time quantum.

    A quantum that is missing or not positive is treated as 1. Processes that
    arrive during a slice are queued ahead of the process that was just
    preempted.
    """
    if quantum is None or quantum <= 0:
        quantum = 1

    procs = _prepare(processes)
    timeline: List[TimelineSegment] = []
    if not procs:
        return _build_result("Round Robin", quantum, procs, timeline)

    ready: Deque[int] = deque()
    queued: Set[int] = set()

    def enqueue(idx: int) -> None:
        if idx not in queued:
            ready.append(idx)
            queued.add(idx)

    def enqueue_arrivals(after: int, until: int) -> None:
        # Arrivals in (after, until], earliest first; equal arrivals by input order.
        arrived = [
            i
            for i, p in enumerate(procs)
            if p.remaining_time > 0 and after < p.arrival_time <= until
        ]
        for i in sorted(arrived, key=lambda i: procs[i].arrival_time):
            enqueue(i)

    time = min(p.arrival_time for p in procs)
    for i, p in enumerate(procs):
        if p.arrival_time <= time:
            enqueue(i)

    while True:
        if not ready:
            nxt = next_arrival(procs)
            if nxt is None:
                break
            enqueue_arrivals(time, nxt)
            time = nxt

        idx = ready.popleft()
        queued.discard(idx)
        p = procs[idx]
        p.mark_started(time)

        run_time = min(quantum, p.remaining_time)
        slice_start = time
        time += run_time
        timeline.append(TimelineSegment(pid=p.pid, start_time=slice_start, end_time=time))
        p.remaining_time -= run_time

        enqueue_arrivals(slice_start, time)

        if p.remaining_time > 0:
            enqueue(idx)
        else:
            p.finish(time)

    return _build_result("Round Robin", quantum, procs, timeline)


ALGORITHMS: Dict[str, Callable[..., ScheduleResult]] = {
    "fcfs": schedule_fcfs,
    "sjf": schedule_sjf,
    "srtf": schedule_srtf,
    "rr": schedule_rr,
    "priority": schedule_priority,
    "priority-preemptive": schedule_priority_preemptive,
}

# Names accepted from callers. The preemption flag only matters for SJF and Priority.
ALGORITHM_NAMES = ("FCFS", "SJF", "RR", "Priority")
_PUBLIC_KEYS = {name.lower() for name in ALGORITHM_NAMES} | {"srtf"}


def resolve_algorithm(name: str, is_preemptive: bool = False) -> str:
    """
    Map an algorithm name and preemption flag to a key of ``ALGORITHMS``.

    Only the public names (any case) and the ``SRTF`` alias are accepted;
    registry keys such as ``priority-preemptive`` are not.
    """
    key = (name or "").strip().lower()
    if key not in _PUBLIC_KEYS:
        raise UnknownAlgorithmError(name)
    if key == "sjf" and is_preemptive:
        return "srtf"
    if key == "priority" and is_preemptive:
        return "priority-preemptive"
    return key


def simulate(
    processes: Sequence[Process],
    algorithm: str,
    is_preemptive: bool = False,
    time_quantum: int = 0,
) -> ScheduleResult:
    """
    Run one simulation.

    ``processes`` must be non-empty and already validated. The returned
    result holds fresh process records in the caller's order, the timeline,
    and the average waiting/turnaround/response times.
    """
    key = resolve_algorithm(algorithm, is_preemptive)
    logger.debug("Simulating %d processes with %s (quantum=%s)", len(processes), key, time_quantum)
    return ALGORITHMS[key](processes, quantum=time_quantum if key == "rr" else None)
