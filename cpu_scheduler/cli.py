from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .engine import run_algorithm
from .errors import SchedulerError
from .gantt import build_rich_gantt
from .models import Policy, Process, ScheduleResult
from .workload_io import default_processes, load_workload

DEFAULT_QUANTUM = 2
POLICY_NAMES = [p.value for p in Policy]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cpu-scheduler",
        description="Single-CPU scheduling simulator (FCFS, SJF, Priority, Round Robin).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log every scheduling decision.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Simulate one scheduling policy on a workload.")
    run_parser.add_argument(
        "--policy",
        "-p",
        required=True,
        help=f"Policy to use ({', '.join(POLICY_NAMES)}).",
    )
    run_parser.add_argument(
        "--workload",
        "-w",
        default=None,
        help="Path to JSON or CSV workload file (default: built-in three-process demo).",
    )
    run_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=None,
        help=f"Time quantum for round robin (default: {DEFAULT_QUANTUM}; ignored by other policies).",
    )
    run_parser.add_argument(
        "--step",
        action="store_true",
        help="Show a simple time-stepped simulation in the terminal.",
    )
    run_parser.add_argument(
        "--step-delay",
        type=float,
        default=0.3,
        help="Seconds to wait between steps when --step is used (default: 0.3).",
    )

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run multiple policies on the same workload and compare average metrics.",
    )
    compare_parser.add_argument(
        "--workload",
        "-w",
        default=None,
        help="Path to JSON or CSV workload file (default: built-in three-process demo).",
    )
    compare_parser.add_argument(
        "--policies",
        "-p",
        nargs="+",
        default=POLICY_NAMES,
        help=f"Policies to compare (default: {' '.join(POLICY_NAMES)}).",
    )
    compare_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=DEFAULT_QUANTUM,
        help=f"Time quantum used for round robin when included (default: {DEFAULT_QUANTUM}).",
    )

    return parser


def configure_logging(verbose: bool, console: Console) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load(workload: Optional[str]) -> List[Process]:
    if workload is None:
        return default_processes()
    return load_workload(Path(workload))


def _print_result(result: ScheduleResult, console: Console) -> None:
    console.print(f"[bold]Policy:[/bold] {result.policy.label}")
    if result.quantum is not None:
        console.print(f"[bold]Quantum:[/bold] {result.quantum}")

    console.print()

    panel, time_marks = build_rich_gantt(result.timeline)
    console.print(panel)
    if time_marks:
        console.print(time_marks)

    console.print()

    headers = [
        "Process",
        "Arrive",
        "Burst",
        "Priority",
        "Start",
        "Complete",
        "Turnaround",
        "Wait",
        "Response",
    ]

    proc_table = Table(title="Per-process metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "center" if h in {"Process", "Priority"} else "right"
        proc_table.add_column(h, justify=justify)

    metrics = result.metrics
    for p in metrics.processes:
        proc_table.add_row(
            p.name,
            str(p.arrival_time),
            str(p.burst_time),
            str(p.priority),
            str(p.start_time),
            str(p.completion_time),
            str(p.turnaround_time),
            str(p.waiting_time),
            str(p.response_time),
        )

    console.print(proc_table)
    console.print()

    sys_table = Table(title="Summary", box=box.SIMPLE_HEAVY)
    sys_table.add_column("Metric")
    sys_table.add_column("Value", justify="right")

    sys_table.add_row("Avg waiting", f"{metrics.average_waiting_time:.2f}")
    sys_table.add_row("Avg turnaround", f"{metrics.average_turnaround_time:.2f}")
    sys_table.add_row("Avg response", f"{metrics.average_response_time:.2f}")
    if metrics.system:
        sys = metrics.system
        sys_table.add_row("Makespan", str(sys.makespan))
        sys_table.add_row("Idle time", str(sys.idle_time))
        sys_table.add_row("Throughput (proc/time)", f"{sys.throughput:.3f}")
        sys_table.add_row("CPU utilization", f"{sys.cpu_utilization*100:.1f}%")
        sys_table.add_row("Context switches", str(sys.context_switches))

    console.print(sys_table)


def _print_comparison(
    processes: List[Process], policies: List[str], quantum: int, console: Console
) -> None:
    summary_table = Table(title="Policy comparison", box=box.SIMPLE_HEAVY)
    summary_table.add_column("Policy")
    summary_table.add_column("Quantum", justify="right")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("Avg response", justify="right")
    summary_table.add_column("Makespan", justify="right")

    for name in policies:
        result = run_algorithm(name, processes, quantum=quantum)
        metrics = result.metrics
        summary_table.add_row(
            result.policy.label,
            "" if result.quantum is None else str(result.quantum),
            f"{metrics.average_waiting_time:.2f}",
            f"{metrics.average_turnaround_time:.2f}",
            f"{metrics.average_response_time:.2f}",
            str(metrics.system.makespan),
        )

    console.print(summary_table)


def _animate_result(result: ScheduleResult, delay: float, console: Console) -> None:
    """
    Simple time-stepped textual simulation using the computed schedule.
    """
    if not result.timeline:
        console.print("[red]No execution to animate.[/red]")
        return

    makespan = result.timeline[-1].end
    console.print(f"[bold]Simulating {result.policy.label}[/bold] (duration {makespan} time units)")
    console.print("[dim]Press Ctrl+C to skip animation.[/dim]")

    for t in range(makespan):
        seg = next(s for s in result.timeline if s.start <= t < s.end)
        if seg.is_idle:
            msg = f"t={t:2d}: [dim]idle[/dim]"
        else:
            msg = f"t={t:2d}: {seg.process_name} [green]{'█' * (t - seg.start + 1)}[/green]"
        console.print(msg)
        time.sleep(delay)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    console = Console()
    configure_logging(args.verbose, console)

    try:
        processes = _load(args.workload)

        if args.command == "run":
            quantum = args.quantum
            if quantum is None and Policy.parse(args.policy).uses_quantum:
                quantum = DEFAULT_QUANTUM
            result = run_algorithm(args.policy, processes, quantum=quantum)
            if args.step:
                try:
                    _animate_result(result, delay=args.step_delay, console=console)
                except KeyboardInterrupt:
                    console.print("[yellow]Animation skipped.[/yellow]")
            _print_result(result, console)
            return 0

        if args.command == "compare":
            _print_comparison(processes, args.policies, args.quantum, console)
            return 0
    except (SchedulerError, ValueError, OSError) as exc:
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        return 1

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
