"""
CPU scheduling simulator.

Runs classical single-processor scheduling algorithms (FCFS, SJF, SRTF,
Round Robin, Priority) over a set of processes and reports the execution
timeline together with per-process and average performance metrics.
"""

from .algorithms import simulate
from .errors import InvalidWorkloadError, SchedulerError, UnknownAlgorithmError
from .models import Process, ScheduleResult, TimelineSegment

__all__ = [
    "simulate",
    "Process",
    "ScheduleResult",
    "TimelineSegment",
    "SchedulerError",
    "UnknownAlgorithmError",
    "InvalidWorkloadError",
]
