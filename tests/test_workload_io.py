import json
from pathlib import Path

import pytest

from schedsim.errors import InvalidWorkloadError
from schedsim.models import Process
from schedsim.workload_io import (
    load_workload,
    request_from_mapping,
    result_to_payload,
)
from schedsim.algorithms import simulate


def test_load_json(tmp_path: Path):
    p = tmp_path / "w.json"
    p.write_text('[{"pid":"A","arrival_time":0,"burst_time":3,"priority":1},'
                 '{"pid":"B","arrival_time":1,"burst_time":2}]')
    procs = load_workload(p)
    assert isinstance(procs[0], Process)
    assert procs[0].priority == 1
    assert procs[1].priority == 0
    assert procs[1].arrival_time == 1


def test_load_json_request_object_with_wire_keys(tmp_path: Path):
    p = tmp_path / "request.json"
    p.write_text(json.dumps({
        "algorithm": "RR",
        "timeQuantum": 2,
        "processes": [
            {"id": "A", "arrivalTime": 0, "burstTime": 4},
            {"id": "B", "arrivalTime": 1, "burstTime": 3, "priority": 2},
        ],
    }))
    procs = load_workload(p)
    assert [x.pid for x in procs] == ["A", "B"]
    assert procs[1].burst_time == 3
    assert procs[1].priority == 2


def test_load_csv(tmp_path: Path):
    p = tmp_path / "w.csv"
    p.write_text("pid,arrival_time,burst_time,priority\nA,0,3,1\nB,1,2,\n")
    procs = load_workload(p)
    assert procs[0].pid == "A"
    assert procs[0].priority == 1
    assert procs[1].priority == 0


def test_unsupported_suffix(tmp_path: Path):
    p = tmp_path / "w.yaml"
    p.write_text("- pid: A\n")
    with pytest.raises(InvalidWorkloadError):
        load_workload(p)


def test_invalid_json(tmp_path: Path):
    p = tmp_path / "w.json"
    p.write_text("[{")
    with pytest.raises(InvalidWorkloadError):
        load_workload(p)


@pytest.mark.parametrize("entry", [
    {"pid": "A", "arrival_time": 0},
    {"pid": "A", "arrival_time": "soon", "burst_time": 2},
    {"pid": "A", "arrival_time": 0, "burst_time": 2.5},
    {"pid": "A", "arrival_time": True, "burst_time": 2},
    {"pid": None, "arrival_time": 0, "burst_time": 2},
    "A,0,2",
])
def test_malformed_entries_are_rejected(tmp_path: Path, entry):
    p = tmp_path / "w.json"
    p.write_text(json.dumps([entry]))
    with pytest.raises(InvalidWorkloadError):
        load_workload(p)


def test_loaded_workload_is_validated(tmp_path: Path):
    p = tmp_path / "w.csv"
    p.write_text("pid,arrival_time,burst_time\nA,0,0\n")
    with pytest.raises(InvalidWorkloadError, match="burst time"):
        load_workload(p)


def test_request_from_mapping():
    req = request_from_mapping({
        "algorithm": "Priority",
        "isPreemptive": True,
        "processes": [{"id": "A", "arrivalTime": 0, "burstTime": 2, "priority": 3}],
    })
    assert req.algorithm == "Priority"
    assert req.is_preemptive is True
    assert req.time_quantum == 0
    assert req.processes == [Process("A", 0, 2, priority=3)]


def test_request_from_mapping_rejects_non_object():
    with pytest.raises(InvalidWorkloadError):
        request_from_mapping(["FCFS"])
    with pytest.raises(InvalidWorkloadError):
        request_from_mapping({"algorithm": "FCFS", "processes": {"id": "A"}})


def test_result_to_payload():
    res = simulate([Process("A", 0, 3), Process("B", 1, 2)], "FCFS")
    payload = result_to_payload(res)
    assert payload["timeline"] == [
        {"processId": "A", "startTime": 0, "endTime": 3},
        {"processId": "B", "startTime": 3, "endTime": 5},
    ]
    assert payload["processes"][1]["waitingTime"] == 2
    assert payload["processes"][1]["completionTime"] == 5
    assert payload["averageWaitingTime"] == pytest.approx(1.0)
    assert payload["averageTurnaroundTime"] == pytest.approx(3.5)
    assert payload["averageResponseTime"] == pytest.approx(1.0)


def test_csv_text_fields_are_converted(tmp_path: Path):
    p = tmp_path / "w.csv"
    p.write_text("pid,arrival_time,burst_time,priority\n1,0,3,2\n")
    procs = load_workload(p)
    assert procs[0] == Process("1", 0, 3, priority=2)


def test_json_numeric_strings_are_rejected(tmp_path: Path):
    p = tmp_path / "w.json"
    p.write_text(json.dumps([{"pid": "A", "arrival_time": "0", "burst_time": 3}]))
    with pytest.raises(InvalidWorkloadError):
        load_workload(p)


@pytest.mark.parametrize("field,value", [
    ("isPreemptive", "false"),
    ("isPreemptive", 0),
    ("timeQuantum", "2"),
    ("timeQuantum", 1.5),
    ("algorithm", 3),
])
def test_request_fields_are_type_checked(field, value):
    body = {"algorithm": "RR", "processes": [{"id": "A", "arrivalTime": 0, "burstTime": 1}]}
    body[field] = value
    with pytest.raises(InvalidWorkloadError, match=field):
        request_from_mapping(body)


def test_request_defaults_when_optional_fields_missing():
    req = request_from_mapping({"algorithm": "FCFS", "processes": []})
    assert req.is_preemptive is False
    assert req.time_quantum == 0
