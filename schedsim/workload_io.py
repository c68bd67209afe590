from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, Dict, List, Mapping

from .errors import InvalidWorkloadError
from .models import Process, ScheduleResult, SimulationRequest
from .validation import validate_processes

# Accepted spellings per field: workload files use snake_case, the HTTP API camelCase.
_FIELD_ALIASES = {
    "pid": ("pid", "id"),
    "arrival_time": ("arrival_time", "arrivalTime"),
    "burst_time": ("burst_time", "burstTime"),
    "priority": ("priority",),
}


def load_workload(path: str | Path) -> List[Process]:
    """
    Load a workload from a JSON or CSV file into a list of Process objects.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        processes = _load_json(path)
    elif suffix == ".csv":
        processes = _load_csv(path)
    else:
        raise InvalidWorkloadError(f"Unsupported workload format: {suffix} (use .json or .csv)")

    validate_processes(processes)
    return processes


def _load_json(path: Path) -> List[Process]:
    with path.open("r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as exc:
            raise InvalidWorkloadError(f"{path}: invalid JSON ({exc})") from exc

    # A saved request body is accepted as well as a bare list.
    if isinstance(raw, dict):
        raw = raw.get("processes")

    if not isinstance(raw, list):
        raise InvalidWorkloadError("JSON workload must be a list of process objects")

    return [process_from_mapping(entry) for entry in raw]


def _load_csv(path: Path) -> List[Process]:
    processes: List[Process] = []
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            processes.append(process_from_mapping(row, strict=False))
    return processes


def _lookup(mapping: Mapping[str, Any], field_name: str) -> Any:
    for key in _FIELD_ALIASES[field_name]:
        if key in mapping:
            return mapping[key]
    raise KeyError(field_name)


def _as_int(value: Any, strict: bool = False) -> int:
    # bool is an int subclass; "true" is not a time value.
    if isinstance(value, bool):
        raise TypeError("boolean is not an integer")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{value} is not an integer")
        return int(value)
    # JSON carries real numbers; only CSV cells arrive as text.
    if strict and not isinstance(value, int):
        raise TypeError(f"{value!r} is not an integer")
    return int(value)


def process_from_mapping(mapping: Any, strict: bool = True) -> Process:
    """
    Build a Process from one workload entry.

    ``strict`` entries (JSON) must carry a string id and numeric times;
    non-strict entries (CSV rows) are all text and get converted.
    """
    if not isinstance(mapping, Mapping):
        raise InvalidWorkloadError(f"Invalid process entry: {mapping!r}")

    try:
        pid_val = _lookup(mapping, "pid")
        if pid_val is None:
            raise TypeError("missing id")
        if strict and not isinstance(pid_val, str):
            raise TypeError("id must be a string")
        pid = str(pid_val).strip()
        arrival_time = _as_int(_lookup(mapping, "arrival_time"), strict)
        burst_time = _as_int(_lookup(mapping, "burst_time"), strict)
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidWorkloadError(f"Invalid process entry: {mapping!r}") from exc

    priority_val = mapping.get("priority")
    try:
        priority = _as_int(priority_val, strict) if priority_val not in (None, "") else 0
    except (TypeError, ValueError) as exc:
        raise InvalidWorkloadError(f"Invalid priority in process entry: {mapping!r}") from exc

    return Process(
        pid=pid,
        arrival_time=arrival_time,
        burst_time=burst_time,
        priority=priority,
    )


def request_from_mapping(data: Any) -> SimulationRequest:
    """
    Decode a ``/simulate`` request body.

    Field types are checked, not coerced: ``"isPreemptive": "false"`` is an
    error rather than a truthy string.
    """
    if not isinstance(data, Mapping):
        raise InvalidWorkloadError("Invalid request format")

    algorithm = data.get("algorithm")
    if algorithm is None:
        algorithm = ""
    if not isinstance(algorithm, str):
        raise InvalidWorkloadError("'algorithm' must be a string")

    is_preemptive = data.get("isPreemptive")
    if is_preemptive is None:
        is_preemptive = False
    if not isinstance(is_preemptive, bool):
        raise InvalidWorkloadError("'isPreemptive' must be a boolean")

    time_quantum = data.get("timeQuantum")
    try:
        time_quantum = 0 if time_quantum is None else _as_int(time_quantum, strict=True)
    except (TypeError, ValueError) as exc:
        raise InvalidWorkloadError("'timeQuantum' must be an integer") from exc

    processes = data.get("processes")
    if processes is None:
        processes = []
    if not isinstance(processes, list):
        raise InvalidWorkloadError("'processes' must be a list")

    return SimulationRequest(
        algorithm=algorithm,
        processes=[process_from_mapping(entry) for entry in processes],
        is_preemptive=is_preemptive,
        time_quantum=time_quantum,
    )


def process_to_payload(p: Process) -> Dict[str, Any]:
    return {
        "id": p.pid,
        "arrivalTime": p.arrival_time,
        "burstTime": p.burst_time,
        "priority": p.priority,
        "startTime": p.start_time,
        "completionTime": p.completion_time,
        "turnaroundTime": p.turnaround_time,
        "waitingTime": p.waiting_time,
        "responseTime": p.response_time,
    }


def result_to_payload(result: ScheduleResult) -> Dict[str, Any]:
    return {
        "algorithm": result.algorithm,
        "processes": [process_to_payload(p) for p in result.processes],
        "timeline": [
            {"processId": seg.pid, "startTime": seg.start_time, "endTime": seg.end_time}
            for seg in result.timeline
        ],
        "averageWaitingTime": result.averages.waiting,
        "averageTurnaroundTime": result.averages.turnaround,
        "averageResponseTime": result.averages.response,
    }
