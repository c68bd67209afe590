from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import List, Optional


@dataclass
class Process:
    """
    One schedulable unit plus the run-state an engine fills in.

    Only ``pid``, ``arrival_time``, ``burst_time`` and ``priority`` are input;
    everything else is written by the engine while it simulates. A new
    record starts with its whole burst remaining.
    Lower ``priority`` values mean higher priority.
    """

    pid: str
    arrival_time: int
    burst_time: int
    priority: int = 0

    remaining_time: Optional[int] = None
    start_time: int = 0
    is_started: bool = False
    completion_time: int = 0
    turnaround_time: int = 0
    waiting_time: int = 0
    response_time: int = 0

    def __post_init__(self) -> None:
        if self.remaining_time is None:
            self.remaining_time = self.burst_time

    @property
    def is_complete(self) -> bool:
        return self.remaining_time == 0

    def fresh_copy(self) -> "Process":
        """Return an unstarted copy ready to be handed to an engine."""
        return replace(
            self,
            remaining_time=self.burst_time,
            start_time=0,
            is_started=False,
            completion_time=0,
            turnaround_time=0,
            waiting_time=0,
            response_time=0,
        )

    def mark_started(self, time: int) -> None:
        # Response time is captured on the first dispatch only.
        if not self.is_started:
            self.start_time = time
            self.response_time = time - self.arrival_time
            self.is_started = True

    def finish(self, time: int) -> None:
        self.remaining_time = 0
        self.completion_time = time
        self.turnaround_time = self.completion_time - self.arrival_time
        self.waiting_time = self.turnaround_time - self.burst_time


@dataclass(frozen=True)
class TimelineSegment:
    """
    One uninterrupted span [start_time, end_time) on the processor.
    """

    pid: str
    start_time: int
    end_time: int

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time


@dataclass
class Averages:
    waiting: float = 0.0
    turnaround: float = 0.0
    response: float = 0.0


@dataclass
class SystemMetrics:
    cpu_busy_time: int
    makespan: int
    throughput: float
    cpu_utilization: float


@dataclass
class ScheduleResult:
    algorithm: str
    quantum: Optional[int]
    processes: List[Process] = field(default_factory=list)
    timeline: List[TimelineSegment] = field(default_factory=list)
    averages: Averages = field(default_factory=Averages)
    system: Optional[SystemMetrics] = None


@dataclass
class SimulationRequest:
    algorithm: str
    processes: List[Process] = field(default_factory=list)
    is_preemptive: bool = False
    time_quantum: int = 0
