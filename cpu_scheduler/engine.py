from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, List, Optional, Sequence, Union

from .errors import InternalInvariantViolation, InvalidConfiguration
from .metrics import build_metrics
from .models import IDLE, Policy, Process, ScheduleResult, TimelineSegment

logger = logging.getLogger(__name__)


@dataclass
class SimProcess:
    """
    Engine-side tracking copy of a Process, owned by a single simulation run.
    The wrapped Process is frozen and keeps the original burst for metrics.
    """

    process: Process
    seq: int
    remaining_time: int
    start_time: Optional[int] = None
    completion_time: Optional[int] = None

    @property
    def name(self) -> str:
        return self.process.name


# Ranking keys, ascending. Ties go to whichever process was admitted first.
RANKING: Dict[Policy, Callable[[SimProcess], int]] = {
    Policy.FCFS: lambda sp: sp.process.arrival_time,
    Policy.SJF: lambda sp: sp.remaining_time,
    Policy.SJF_PREEMPTIVE: lambda sp: sp.remaining_time,
    Policy.PRIORITY: lambda sp: sp.process.priority,
    Policy.PRIORITY_PREEMPTIVE: lambda sp: sp.process.priority,
}


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate(processes: Sequence[Process], policy: Policy, quantum: Optional[int] = None) -> None:
    """
    Reject input the engine cannot simulate. Raises InvalidConfiguration.
    """
    if not processes:
        raise InvalidConfiguration("At least one process is required")

    seen = set()
    for p in processes:
        if p.name == IDLE:
            raise InvalidConfiguration(f"'{IDLE}' is reserved for idle CPU time and cannot name a process")
        if p.name in seen:
            raise InvalidConfiguration(f"Duplicate process name '{p.name}'")
        seen.add(p.name)

        for field_name in ("arrival_time", "burst_time", "priority"):
            if not _is_int(getattr(p, field_name)):
                raise InvalidConfiguration(f"{p.name}: {field_name} must be an integer")
        if p.arrival_time < 0:
            raise InvalidConfiguration(f"{p.name}: arrival_time cannot be negative")
        if p.burst_time < 0:
            raise InvalidConfiguration(f"{p.name}: burst_time cannot be negative")

    if policy.uses_quantum and (not _is_int(quantum) or quantum <= 0):
        raise InvalidConfiguration("Round Robin requires a positive integer quantum (use --quantum)")


class _Simulation:
    """Single-CPU discrete-time simulation for one policy."""

    def __init__(self, processes: Sequence[Process], policy: Policy, quantum: Optional[int]) -> None:
        self.policy = policy
        self.quantum = quantum
        self.procs = [
            SimProcess(process=p, seq=i, remaining_time=p.burst_time)
            for i, p in enumerate(processes)
        ]
        self._by_name = {sp.name: sp for sp in self.procs}
        self._pending: List[SimProcess] = sorted(
            self.procs, key=lambda sp: (sp.process.arrival_time, sp.seq)
        )
        # Admission order; Round Robin treats it as a rotating FIFO queue.
        self._ready: Deque[SimProcess] = deque()
        self._completed = 0
        self.time = 0
        self.timeline: List[TimelineSegment] = []

    def run(self) -> List[TimelineSegment]:
        while self._completed < len(self.procs):
            self._admit(self.time)
            if self._completed == len(self.procs):
                break
            if not self._ready:
                self._idle_until_next_arrival()
                continue

            current = self._select()
            self._execute(current, self._slice_length(current))

        return self.timeline

    def _admit(self, now: int) -> None:
        while self._pending and self._pending[0].process.arrival_time <= now:
            sp = self._pending.pop(0)
            if sp.remaining_time == 0:
                # Nothing to run: done the moment it arrives.
                arrival = sp.process.arrival_time
                sp.start_time = arrival
                self._complete(sp, arrival)
                continue
            self._ready.append(sp)

    def _idle_until_next_arrival(self) -> None:
        if not self._pending:
            raise InternalInvariantViolation(
                f"No ready or pending process at t={self.time} with "
                f"{len(self.procs) - self._completed} process(es) incomplete"
            )
        next_arrival = self._pending[0].process.arrival_time
        logger.debug("t=%d: CPU idle until %d", self.time, next_arrival)
        self._emit(IDLE, self.time, next_arrival)
        self.time = next_arrival

    def _select(self) -> SimProcess:
        if self.policy is Policy.ROUND_ROBIN:
            return self._ready.popleft()

        # min() keeps the first of equal keys, i.e. the earliest admitted.
        chosen = min(self._ready, key=RANKING[self.policy])
        if not self.policy.preemptive:
            self._ready.remove(chosen)
        return chosen

    def _slice_length(self, sp: SimProcess) -> int:
        if self.policy is Policy.ROUND_ROBIN:
            return min(self.quantum, sp.remaining_time)
        if self.policy.preemptive:
            return 1
        return sp.remaining_time

    def _execute(self, sp: SimProcess, run_time: int) -> None:
        start = self.time
        end = start + run_time

        last = self.timeline[-1] if self.timeline else None
        if last is not None and not last.is_idle and last.process_name != sp.name:
            if self._by_name[last.process_name].completion_time is None:
                logger.debug("t=%d: %s preempted by %s", start, last.process_name, sp.name)

        if sp.start_time is None:
            sp.start_time = start
        logger.debug("t=%d: dispatch %s for %d unit(s)", start, sp.name, run_time)

        self._emit(sp.name, start, end)
        sp.remaining_time -= run_time
        self.time = end

        # Arrivals during the slice queue up ahead of a Round Robin re-enqueue.
        self._admit(end)

        if sp.remaining_time == 0:
            if sp in self._ready:
                self._ready.remove(sp)
            self._complete(sp, end)
        elif self.policy is Policy.ROUND_ROBIN:
            self._ready.append(sp)

    def _complete(self, sp: SimProcess, now: int) -> None:
        sp.completion_time = now
        self._completed += 1
        logger.debug("t=%d: %s completed", now, sp.name)

    def _emit(self, name: str, start: int, end: int) -> None:
        if end <= start:
            return
        last = self.timeline[-1] if self.timeline else None
        if last is not None and last.process_name == name and last.end == start:
            last.end = end
        else:
            self.timeline.append(TimelineSegment(process_name=name, start=start, end=end))


def simulate(
    processes: Sequence[Process],
    policy: Union[Policy, str],
    quantum: Optional[int] = None,
) -> ScheduleResult:
    """
    Run one scheduling simulation.

    Returns a ScheduleResult holding the contiguous CPU timeline (with
    explicit idle segments) and the derived metrics. ``quantum`` is only
    used by Round Robin. The engine keeps no state between calls.
    """
    policy = Policy.parse(policy)
    validate(processes, policy, quantum)
    if not policy.uses_quantum:
        quantum = None

    sim = _Simulation(processes, policy, quantum)
    timeline = sim.run()

    start_times = {sp.name: sp.start_time for sp in sim.procs}
    completion_times = {sp.name: sp.completion_time for sp in sim.procs}
    metrics = build_metrics(processes, start_times, completion_times, timeline)

    logger.info(
        "%s: %d process(es), makespan %d, avg waiting %.2f, avg turnaround %.2f",
        policy.label,
        len(processes),
        metrics.system.makespan,
        metrics.average_waiting_time,
        metrics.average_turnaround_time,
    )
    return ScheduleResult(policy=policy, quantum=quantum, timeline=timeline, metrics=metrics)


def run_algorithm(name: str, processes: List[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Dispatch by policy name, e.g. ``"fcfs"``, ``"srtf"`` or ``"Round Robin"``.
    """
    return simulate(processes, Policy.parse(name), quantum=quantum)
