from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path
from typing import List

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .engine import simulate, simulate_all
from .errors import SchedulingError
from .gantt import build_rich_gantt, render_gantt
from .models import Process, ScheduleReport
from .policies import DEFAULT_QUANTUM, POLICIES, get_policy, policy_names
from .registry import build_batch
from .workload_io import load_workload, parse_process_specs

logger = logging.getLogger(__name__)

# Numbering of the interactive menu.
MENU_POLICIES = {
    "1": "fcfs",
    "2": "sjf",
    "3": "srtf",
    "4": "priority",
    "5": "rr",
    "6": "priority-p",
}
MENU_EXIT = "7"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="schedsim",
        description="CPU scheduling simulator (FCFS, SJF, SRTF, Priority, Priority-P, RR).",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level for simulation events (default: WARNING).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run one scheduling policy on a batch.")
    run_parser.add_argument(
        "--algorithm",
        "-a",
        required=True,
        help=f"Policy to use ({', '.join(policy_names())}).",
    )
    _add_batch_arguments(run_parser)
    run_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=None,
        help="Time quantum for round robin (ignored by the other policies).",
    )
    run_parser.add_argument(
        "--plain",
        action="store_true",
        help="Print the Gantt chart as plain text instead of a colored panel.",
    )
    run_parser.add_argument(
        "--step",
        action="store_true",
        help="Show a simple time-stepped replay in the terminal.",
    )
    run_parser.add_argument(
        "--step-delay",
        type=float,
        default=0.3,
        help="Seconds to wait between steps when --step is used (default: 0.3).",
    )

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run several policies on the same batch and compare average metrics.",
    )
    _add_batch_arguments(compare_parser)
    compare_parser.add_argument(
        "--algorithms",
        "-a",
        nargs="+",
        default=policy_names(),
        help=f"Policies to compare (default: {' '.join(policy_names())}).",
    )
    compare_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=DEFAULT_QUANTUM,
        help=f"Time quantum used for round robin when included (default: {DEFAULT_QUANTUM}).",
    )

    subparsers.add_parser(
        "menu",
        help="Interactive menu: pick a policy, then enter processes by hand.",
    )

    return parser


def _add_batch_arguments(sub: argparse.ArgumentParser) -> None:
    group = sub.add_mutually_exclusive_group(required=True)
    group.add_argument(
        "--workload",
        "-w",
        help="Path to JSON or CSV workload file.",
    )
    group.add_argument(
        "--process",
        "-p",
        action="append",
        metavar="AT:BT[:PR]",
        help="Inline process as arrival:burst[:priority]; repeat for each process.",
    )


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=False, show_path=False)],
    )


def _load_batch(args: argparse.Namespace) -> List[Process]:
    if args.workload:
        return load_workload(Path(args.workload))
    return parse_process_specs(args.process)


def _print_result(report: ScheduleReport, console: Console, plain: bool = False) -> None:
    console.print(f"[bold]Algorithm:[/bold] {report.policy}")
    if report.quantum is not None:
        console.print(f"[bold]Quantum:[/bold] {report.quantum}")

    console.print()

    if plain:
        console.print("Gantt Chart:")
        console.print(render_gantt(report.timeline), markup=False, highlight=False)
    else:
        panel, time_marks = build_rich_gantt(report.timeline)
        console.print(panel)
        if time_marks:
            console.print(time_marks)

    console.print()

    show_priority = any(p.priority for p in report.processes) or "Priority" in report.policy
    headers = ["PID", "Arrive", "Burst"]
    if show_priority:
        headers.append("Priority")
    headers += ["Complete", "Turnaround", "Wait", "Response"]

    proc_table = Table(title="Per-process metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "center" if h in {"PID", "Priority"} else "right"
        proc_table.add_column(h, justify=justify)

    for p in report.processes:
        row = [p.label, str(p.arrival_time), str(p.burst_time)]
        if show_priority:
            row.append(str(p.priority))
        row += [
            str(p.completion_time),
            str(p.turnaround_time),
            str(p.waiting_time),
            str(p.response_time),
        ]
        proc_table.add_row(*row)

    console.print(proc_table)
    console.print()

    sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
    sys_table.add_column("Metric")
    sys_table.add_column("Value", justify="right")

    sys_table.add_row("Avg waiting", f"{report.avg_waiting:.2f}")
    sys_table.add_row("Avg turnaround", f"{report.avg_turnaround:.2f}")
    sys_table.add_row("Avg response", f"{report.avg_response:.2f}")
    if report.system:
        sys = report.system
        sys_table.add_row("Makespan", str(sys.makespan))
        sys_table.add_row("Idle time", str(sys.idle_time))
        sys_table.add_row("Throughput (proc/time)", f"{sys.throughput:.3f}")
        sys_table.add_row("CPU utilization", f"{sys.cpu_utilization*100:.1f}%")

    console.print(sys_table)


def _print_comparison(reports: List[ScheduleReport], console: Console, title: str) -> None:
    summary_table = Table(title=title, box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Quantum", justify="right")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("Avg response", justify="right")
    summary_table.add_column("Makespan", justify="right")

    for report in reports:
        summary_table.add_row(
            report.policy,
            "" if report.quantum is None else str(report.quantum),
            f"{report.avg_waiting:.2f}",
            f"{report.avg_turnaround:.2f}",
            f"{report.avg_response:.2f}",
            str(report.timeline.end_time),
        )

    console.print(summary_table)


def _animate_result(report: ScheduleReport, console: Console, delay: float) -> None:
    """
    Simple time-stepped textual replay of the computed timeline.
    """
    segments = report.timeline.segments
    if not segments:
        console.print("[red]No execution to animate.[/red]")
        return

    makespan = report.timeline.end_time
    console.print(f"[bold]Simulating {report.policy}[/bold] (duration {makespan} time units)")
    console.print("[dim]Press Ctrl+C to skip animation.[/dim]")

    for t in range(makespan):
        running = None
        for seg in segments:
            if seg.start_time <= t < seg.end_time:
                running = seg
                break
        msg = f"t={t:2d}: " + (running.label if running else "[idle]")
        if running:
            msg += f" [green]{'█' * (t - running.start_time + 1)}[/green]"
        console.print(msg, highlight=False)
        time.sleep(delay)


def _ask_int(prompt: str) -> int:
    while True:
        raw = input(prompt).strip()
        try:
            return int(raw)
        except ValueError:
            print("Please enter an integer.")


def _read_batch_interactive(console: Console, with_priority: bool) -> List[Process]:
    n = _ask_int("Enter number of processes: ")
    records = []
    fields = "AT BT PRIORITY" if with_priority else "AT BT"
    for pid in range(1, n + 1):
        while True:
            parts = input(f"Enter {fields} for P{pid}: ").split()
            if len(parts) == (3 if with_priority else 2):
                break
            console.print(f"[red]Expected {fields}.[/red]")
        records.append(parts)
    return build_batch(records)


def _interactive_menu(console: Console) -> None:
    while True:
        console.print("\n[bold cyan]====== CPU SCHEDULING MENU ======[/bold cyan]")
        for key, name in MENU_POLICIES.items():
            console.print(f"  [yellow]{key}[/yellow]. [white]{POLICIES[name].title}[/white]")
        console.print(f"  [yellow]{MENU_EXIT}[/yellow]. [white]Exit[/white]")

        choice = input("Enter choice: ").strip().lower()
        if choice in {MENU_EXIT, "q", "quit", "exit"}:
            return
        if choice not in MENU_POLICIES:
            console.print("[red]Invalid choice[/red]")
            continue

        name = MENU_POLICIES[choice]
        try:
            batch = _read_batch_interactive(console, with_priority=POLICIES[name].uses_priority)
            quantum = _ask_int("Enter Time Quantum: ") if name == "rr" else None
            report = simulate(batch, get_policy(name, quantum))
        except SchedulingError as exc:
            console.print(f"[red]Error: {exc}[/red]")
            continue

        _print_result(report, console)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.log_level)
    console = Console()

    try:
        if args.command == "run":
            batch = _load_batch(args)
            report = simulate(batch, args.algorithm, quantum=args.quantum)
            if args.step:
                try:
                    _animate_result(report, console, delay=args.step_delay)
                except KeyboardInterrupt:
                    console.print("[yellow]Animation skipped.[/yellow]")
            _print_result(report, console, plain=args.plain)
            return 0

        if args.command == "compare":
            batch = _load_batch(args)
            reports = simulate_all(batch, args.algorithms, quantum=args.quantum)
            title = "Algorithm comparison"
            if args.workload:
                title += f": {args.workload}"
            _print_comparison(reports, console, title)
            return 0

        if args.command == "menu":
            _interactive_menu(console)
            return 0
    except SchedulingError as exc:
        logger.debug("Rejected input", exc_info=True)
        console.print(f"[red]Error: {exc}[/red]")
        return 2

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
