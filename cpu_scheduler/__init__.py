"""
CPU scheduling simulator package.

Simulates a single CPU under FCFS, SJF, Priority (both preemptive and
non-preemptive) and Round Robin, producing a timeline of CPU occupancy
and per-process performance metrics.
"""

from .engine import run_algorithm, simulate, validate
from .errors import InternalInvariantViolation, InvalidConfiguration, SchedulerError
from .models import IDLE, Metrics, Policy, Process, ProcessMetrics, ScheduleResult, TimelineSegment

__all__ = [
    "IDLE",
    "InternalInvariantViolation",
    "InvalidConfiguration",
    "Metrics",
    "Policy",
    "Process",
    "ProcessMetrics",
    "ScheduleResult",
    "SchedulerError",
    "TimelineSegment",
    "run_algorithm",
    "simulate",
    "validate",
]
