import pytest

from cpu_scheduler import IDLE, InternalInvariantViolation, Process, TimelineSegment
from cpu_scheduler.metrics import (
    compute_system_metrics,
    count_context_switches,
    derive_process_metrics,
    summarize_process_metrics,
)


def test_derive_process_metrics():
    pm = derive_process_metrics(Process("P1", 2, 3), start_time=4, completion_time=9)
    assert pm.turnaround_time == 7
    assert pm.waiting_time == 4
    assert pm.response_time == 2


def test_completion_before_burst_is_an_invariant_violation():
    with pytest.raises(InternalInvariantViolation):
        derive_process_metrics(Process("P1", 2, 3), start_time=2, completion_time=4)


def test_system_metrics_with_idle_lead_in():
    timeline = [TimelineSegment(IDLE, 0, 3), TimelineSegment("P1", 3, 5)]
    pm = derive_process_metrics(Process("P1", 3, 2), start_time=3, completion_time=5)

    system = compute_system_metrics([pm], timeline)
    assert system.makespan == 5
    assert system.cpu_busy_time == 2
    assert system.idle_time == 3
    assert system.cpu_utilization == pytest.approx(0.4)
    assert system.throughput == pytest.approx(0.2)


def test_context_switches_ignore_idle_boundaries():
    timeline = [
        TimelineSegment("P1", 0, 2),
        TimelineSegment("P2", 2, 3),
        TimelineSegment(IDLE, 3, 5),
        TimelineSegment("P1", 5, 6),
    ]
    assert count_context_switches(timeline) == 1


def test_summaries_of_empty_input():
    assert summarize_process_metrics([]) == {"avg_waiting": 0.0, "avg_turnaround": 0.0, "avg_response": 0.0}
    assert compute_system_metrics([], []).makespan == 0
