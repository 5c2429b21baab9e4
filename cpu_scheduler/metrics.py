from __future__ import annotations

from typing import Dict, List, Sequence

from .errors import InternalInvariantViolation
from .models import Metrics, Process, ProcessMetrics, SystemMetrics, TimelineSegment


def derive_process_metrics(
    process: Process, start_time: int, completion_time: int
) -> ProcessMetrics:
    """
    Turnaround and waiting times always use the process's original burst,
    never the remaining time the engine decremented while simulating.
    """
    turnaround_time = completion_time - process.arrival_time
    waiting_time = turnaround_time - process.burst_time

    if waiting_time < 0 or turnaround_time < process.burst_time:
        raise InternalInvariantViolation(
            f"{process.name}: turnaround {turnaround_time} is shorter than burst {process.burst_time}"
        )

    return ProcessMetrics(
        name=process.name,
        arrival_time=process.arrival_time,
        burst_time=process.burst_time,
        priority=process.priority,
        start_time=start_time,
        completion_time=completion_time,
        turnaround_time=turnaround_time,
        waiting_time=waiting_time,
        response_time=start_time - process.arrival_time,
    )


def compute_system_metrics(
    processes: Sequence[ProcessMetrics], timeline: Sequence[TimelineSegment]
) -> SystemMetrics:
    """
    Compute makespan, throughput and CPU utilization from per-process
    metrics and the timeline.
    """
    if not processes:
        return SystemMetrics(makespan=0, cpu_busy_time=0, idle_time=0, throughput=0.0, cpu_utilization=0.0)

    makespan = max(p.completion_time for p in processes)
    cpu_busy_time = sum(seg.duration for seg in timeline if not seg.is_idle)
    idle_time = sum(seg.duration for seg in timeline if seg.is_idle)

    throughput = len(processes) / makespan if makespan > 0 else 0.0
    cpu_utilization = cpu_busy_time / makespan if makespan > 0 else 0.0

    return SystemMetrics(
        makespan=makespan,
        cpu_busy_time=cpu_busy_time,
        idle_time=idle_time,
        throughput=throughput,
        cpu_utilization=cpu_utilization,
        context_switches=count_context_switches(timeline),
    )


def count_context_switches(timeline: Sequence[TimelineSegment]) -> int:
    # Only direct hand-offs between two different processes count; idle gaps don't.
    switches = 0
    for prev, nxt in zip(timeline, timeline[1:]):
        if not prev.is_idle and not nxt.is_idle and prev.process_name != nxt.process_name:
            switches += 1
    return switches


def build_metrics(
    processes: Sequence[Process],
    start_times: Dict[str, int],
    completion_times: Dict[str, int],
    timeline: Sequence[TimelineSegment],
) -> Metrics:
    per_process = [
        derive_process_metrics(p, start_times[p.name], completion_times[p.name]) for p in processes
    ]
    summary = summarize_process_metrics(per_process)

    return Metrics(
        processes=per_process,
        average_waiting_time=summary["avg_waiting"],
        average_turnaround_time=summary["avg_turnaround"],
        average_response_time=summary["avg_response"],
        system=compute_system_metrics(per_process, timeline),
    )


def summarize_process_metrics(processes: List[ProcessMetrics]) -> dict:
    """
    Return averages of the key per-process metrics for quick comparison.
    """
    if not processes:
        return {"avg_waiting": 0.0, "avg_turnaround": 0.0, "avg_response": 0.0}

    n = len(processes)
    return {
        "avg_waiting": sum(p.waiting_time for p in processes) / n,
        "avg_turnaround": sum(p.turnaround_time for p in processes) / n,
        "avg_response": sum(p.response_time for p in processes) / n,
    }
