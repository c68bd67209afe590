from __future__ import annotations

from typing import List

from .models import Averages, Process, ScheduleResult, SystemMetrics


def compute_averages(processes: List[Process]) -> Averages:
    """
    Arithmetic means of waiting, turnaround and response time.
    """
    if not processes:
        return Averages()

    n = len(processes)
    return Averages(
        waiting=sum(p.waiting_time for p in processes) / n,
        turnaround=sum(p.turnaround_time for p in processes) / n,
        response=sum(p.response_time for p in processes) / n,
    )


def compute_system_metrics(result: ScheduleResult) -> SystemMetrics:
    """
    Compute throughput and CPU utilization given populated per-process metrics
    and timeline segments.
    """
    if not result.processes:
        return SystemMetrics(cpu_busy_time=0, makespan=0, throughput=0.0, cpu_utilization=0.0)

    makespan = max(p.completion_time for p in result.processes)
    first_arrival = min(p.arrival_time for p in result.processes)
    cpu_busy_time = sum(seg.duration for seg in result.timeline)

    span = makespan - first_arrival
    throughput = len(result.processes) / span if span > 0 else 0.0
    cpu_utilization = cpu_busy_time / span if span > 0 else 0.0

    system = SystemMetrics(
        cpu_busy_time=cpu_busy_time,
        makespan=makespan,
        throughput=throughput,
        cpu_utilization=cpu_utilization,
    )
    result.system = system
    return system
