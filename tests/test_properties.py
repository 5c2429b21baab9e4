import random
from collections import defaultdict

import pytest

from cpu_scheduler import IDLE, Policy, Process, simulate


def _random_workload(seed, n=8):
    rng = random.Random(seed)
    return [
        Process(
            f"P{i + 1}",
            arrival_time=rng.randint(0, 15),
            burst_time=rng.randint(1, 8),
            priority=rng.randint(0, 4),
        )
        for i in range(n)
    ]


WORKLOADS = {
    "simultaneous": [
        Process("P1", 0, 5, 1),
        Process("P2", 0, 2, 3),
        Process("P3", 0, 4, 2),
    ],
    "staggered": [
        Process("A", 0, 8, 3),
        Process("B", 1, 4, 1),
        Process("C", 2, 9, 4),
        Process("D", 3, 5, 2),
    ],
    "gaps": [
        Process("late", 10, 3, 0),
        Process("early", 2, 2, 5),
        Process("mid", 6, 1, 1),
    ],
    "random-1": _random_workload(1),
    "random-7": _random_workload(7),
    "random-42": _random_workload(42, n=12),
}

QUANTUM = 3


@pytest.fixture(params=list(Policy), ids=lambda p: p.value)
def policy(request):
    return request.param


@pytest.fixture(params=list(WORKLOADS), ids=str)
def workload(request):
    return WORKLOADS[request.param]


def test_timeline_is_contiguous_from_zero_to_last_completion(policy, workload):
    res = simulate(workload, policy, quantum=QUANTUM)
    timeline = res.timeline

    assert timeline[0].start == 0
    assert all(s.end > s.start for s in timeline)
    assert all(a.end == b.start for a, b in zip(timeline, timeline[1:]))
    assert timeline[-1].end == max(pm.completion_time for pm in res.metrics.processes)

    first_arrival = min(p.arrival_time for p in workload)
    if first_arrival > 0:
        assert timeline[0].process_name == IDLE
        assert timeline[0].end == first_arrival


def test_adjacent_segments_have_different_occupants(policy, workload):
    res = simulate(workload, policy, quantum=QUANTUM)
    assert all(a.process_name != b.process_name for a, b in zip(res.timeline, res.timeline[1:]))


def test_work_is_conserved(policy, workload):
    res = simulate(workload, policy, quantum=QUANTUM)

    ran = defaultdict(int)
    for seg in res.timeline:
        ran[seg.process_name] += seg.duration

    for p in workload:
        assert ran[p.name] == p.burst_time
    assert sum(ran.values()) == res.timeline[-1].end - res.timeline[0].start
    assert res.metrics.system.idle_time == ran[IDLE]


def test_no_process_runs_before_arrival(policy, workload):
    res = simulate(workload, policy, quantum=QUANTUM)
    arrivals = {p.name: p.arrival_time for p in workload}
    for seg in res.timeline:
        if not seg.is_idle:
            assert seg.start >= arrivals[seg.process_name]


def test_metrics_are_valid(policy, workload):
    res = simulate(workload, policy, quantum=QUANTUM)
    for pm in res.metrics.processes:
        assert pm.waiting_time >= 0
        assert pm.turnaround_time >= pm.burst_time
        assert pm.turnaround_time == pm.completion_time - pm.arrival_time
        assert pm.response_time <= pm.waiting_time

    n = len(workload)
    assert res.metrics.average_waiting_time == pytest.approx(
        sum(pm.waiting_time for pm in res.metrics.processes) / n
    )


def test_simulation_is_deterministic(policy, workload):
    first = simulate(workload, policy, quantum=QUANTUM)
    second = simulate(workload, policy, quantum=QUANTUM)
    assert first.timeline == second.timeline
    assert first.metrics == second.metrics


def test_idle_only_while_nothing_has_arrived(policy, workload):
    res = simulate(workload, policy, quantum=QUANTUM)
    completions = {pm.name: pm.completion_time for pm in res.metrics.processes}
    for seg in res.timeline:
        if seg.is_idle:
            waiting = [
                p for p in workload if p.arrival_time <= seg.start and completions[p.name] > seg.start
            ]
            assert waiting == []
