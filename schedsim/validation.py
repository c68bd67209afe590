"""
Checks run before a workload reaches the simulator.

The engines assume a non-empty process set with non-negative arrivals and
positive bursts; anything else is rejected here.
"""

from __future__ import annotations

from typing import Sequence, Set

from .algorithms import resolve_algorithm
from .errors import InvalidWorkloadError
from .models import Process, SimulationRequest


def validate_processes(processes: Sequence[Process]) -> None:
    if not processes:
        raise InvalidWorkloadError("No processes provided")

    seen: Set[str] = set()
    for p in processes:
        if not p.pid:
            raise InvalidWorkloadError("Process id must not be empty")
        if p.pid in seen:
            raise InvalidWorkloadError(f"Duplicate process id '{p.pid}'")
        seen.add(p.pid)

        if p.arrival_time < 0:
            raise InvalidWorkloadError(f"Process '{p.pid}': arrival time must be >= 0, got {p.arrival_time}")
        if p.burst_time <= 0:
            raise InvalidWorkloadError(f"Process '{p.pid}': burst time must be > 0, got {p.burst_time}")


def validate_request(req: SimulationRequest) -> None:
    """Raise ``UnknownAlgorithmError`` or ``InvalidWorkloadError`` for a bad request."""
    resolve_algorithm(req.algorithm, req.is_preemptive)
    validate_processes(req.processes)
