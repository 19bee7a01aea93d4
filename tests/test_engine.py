import logging

import pytest

from schedsim.engine import simulate, simulate_all
from schedsim.errors import InvalidBatch, InvalidQuantum, UnknownPolicy
from schedsim.models import Process
from schedsim.policies import RoundRobinPolicy, get_policy, policy_names
from schedsim.registry import ProcessRegistry, build_batch

BATCHES = [
    [(0, 5, 2), (1, 3, 1), (2, 8, 3)],
    [(0, 5, 1), (0, 3, 1), (0, 2, 1)],
    [(3, 4, 2), (0, 1, 3), (10, 2, 0), (4, 6, 1)],
    [(0, 7, 4), (2, 4, 2), (4, 1, 3), (5, 4, 1), (5, 3, 2)],
]


def _run(records, name):
    batch = build_batch(records)
    return batch, simulate(batch, name, quantum=3 if name == "rr" else None)


@pytest.mark.parametrize("records", BATCHES)
@pytest.mark.parametrize("name", policy_names())
def test_metric_identities(records, name):
    batch, res = _run(records, name)
    bursts = sum(p.burst_time for p in batch)

    assert sum(m.turnaround_time - m.waiting_time for m in res.processes) == bursts
    assert res.system.cpu_busy_time == bursts
    for p, m in zip(batch, res.processes):
        assert m.pid == p.pid
        assert m.completion_time >= p.arrival_time + p.burst_time
        assert m.waiting_time >= 0
        assert m.start_time >= p.arrival_time


@pytest.mark.parametrize("records", BATCHES)
@pytest.mark.parametrize("name", policy_names())
def test_timeline_is_ordered_and_merged(records, name):
    _, res = _run(records, name)
    segments = res.timeline.segments

    for prev, nxt in zip(segments, segments[1:]):
        assert prev.end_time <= nxt.start_time
        if prev.end_time == nxt.start_time:
            assert prev.pid != nxt.pid
    assert segments[-1].end_time == res.timeline.end_time


@pytest.mark.parametrize("name", policy_names())
def test_runs_are_deterministic_and_isolated(name):
    batch = build_batch(BATCHES[3])
    first = simulate(batch, name, quantum=2 if name == "rr" else None)
    second = simulate(batch, name, quantum=2 if name == "rr" else None)

    assert first.timeline == second.timeline
    assert first.processes == second.processes
    assert first.avg_waiting == second.avg_waiting


def test_reusing_round_robin_instance_starts_fresh():
    batch = build_batch(BATCHES[0])
    policy = RoundRobinPolicy(2)
    assert simulate(batch, policy).timeline == simulate(batch, policy).timeline


def test_batch_is_not_mutated():
    batch = build_batch(BATCHES[0])
    before = list(batch)
    simulate(batch, "srtf")
    assert batch == before


def test_registry_states_are_independent():
    batch = build_batch(BATCHES[0])
    a = ProcessRegistry(batch)
    b = ProcessRegistry(batch)
    a.execute(1, 0, 5)
    assert a.state(1).completed
    assert b.remaining(1) == 5


def test_empty_batch_rejected():
    with pytest.raises(InvalidBatch):
        build_batch([])
    with pytest.raises(InvalidBatch):
        simulate([], "fcfs")


def test_zero_burst_rejected():
    with pytest.raises(InvalidBatch):
        build_batch([(0, 3), (1, 0)])
    with pytest.raises(InvalidBatch):
        simulate([Process(pid=1, arrival_time=0, burst_time=0)], "srtf")


def test_negative_arrival_rejected():
    with pytest.raises(InvalidBatch):
        build_batch([(-1, 3)])


def test_malformed_record_rejected():
    with pytest.raises(InvalidBatch):
        build_batch([{"arrival_time": 0}])
    with pytest.raises(InvalidBatch):
        build_batch([("a", 3)])


@pytest.mark.parametrize("quantum", [None, 0, -2])
def test_rr_requires_positive_quantum(quantum):
    batch = build_batch(BATCHES[0])
    with pytest.raises(InvalidQuantum):
        simulate(batch, "rr", quantum=quantum)


def test_unknown_policy():
    batch = build_batch(BATCHES[0])
    with pytest.raises(UnknownPolicy) as exc:
        simulate(batch, "lottery")
    assert "lottery" in str(exc.value)


def test_policy_aliases():
    assert get_policy("SJF-P").name == "srtf"
    assert get_policy("priority-np").name == "priority"
    assert get_policy("Round-Robin", 4).quantum == 4


def test_quantum_ignored_by_non_rr_policies():
    batch = build_batch(BATCHES[0])
    res = simulate(batch, "fcfs", quantum=2)
    assert res.quantum is None


def test_simulate_all_rejects_before_running():
    batch = build_batch(BATCHES[0])
    with pytest.raises(UnknownPolicy):
        simulate_all(batch, ["fcfs", "nope"])
    with pytest.raises(InvalidQuantum):
        simulate_all(batch, ["fcfs", "rr"], quantum=0)


def test_simulate_all_runs_each_policy():
    batch = build_batch(BATCHES[0])
    reports = simulate_all(batch, policy_names(), quantum=2)
    assert len(reports) == len(policy_names())
    assert reports[0].processes == simulate(batch, "fcfs").processes


def test_system_metrics():
    batch = build_batch([(0, 2), (5, 3), (6, 1)])
    res = simulate(batch, "fcfs")
    sys = res.system
    assert sys.makespan == 9
    assert sys.cpu_busy_time == 6
    assert sys.idle_time == 3
    assert sys.throughput == pytest.approx(3 / 9)
    assert sys.cpu_utilization == pytest.approx(6 / 9)


def test_response_time_tracks_first_dispatch():
    batch = build_batch([(0, 5), (0, 3)])
    res = simulate(batch, "rr", quantum=2)
    assert [m.start_time for m in res.processes] == [0, 2]
    assert [m.response_time for m in res.processes] == [0, 2]
    assert res.avg_response == 1.0


def test_quantum_with_policy_instance_is_logged(caplog):
    batch = build_batch(BATCHES[0])
    with caplog.at_level(logging.DEBUG, logger="schedsim.engine"):
        res = simulate(batch, RoundRobinPolicy(2), quantum=5)
    assert res.quantum == 2
    assert "Ignoring quantum 5" in caplog.text


@pytest.mark.parametrize("name", policy_names())
def test_late_arrival_skips_idle_time(name):
    batch = build_batch([(10**7, 1), (10**7 + 5, 2)])
    res = simulate(batch, name, quantum=2 if name == "rr" else None)
    assert res.timeline.pairs() == [(1, 10**7), (2, 10**7 + 5)]
    assert res.timeline.end_time == 10**7 + 7
    assert res.system.idle_time == 10**7 + 4
