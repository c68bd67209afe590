from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path
from typing import List

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .algorithms import ALGORITHMS, simulate
from .config import ServerConfig
from .gantt import build_rich_gantt, segment_at
from .models import Process, ScheduleResult
from .workload_io import load_workload

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="schedsim",
        description="CPU scheduling simulator (FCFS, SJF, SRTF, RR, Priority).",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default=None,
        help="Logging verbosity (default: WARNING, INFO for serve).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run a scheduling algorithm on a workload file.")
    run_parser.add_argument(
        "--algorithm",
        "-a",
        required=True,
        help="Algorithm to use (FCFS, SJF, RR, Priority; SRTF is preemptive SJF).",
    )
    run_parser.add_argument(
        "--preemptive",
        "-p",
        action="store_true",
        help="Use the preemptive variant (SJF becomes SRTF; Priority preempts on better priority).",
    )
    run_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to JSON or CSV workload file.",
    )
    run_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=0,
        help="Time quantum for round-robin (values <= 0 mean 1; ignored by other algorithms).",
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
        help="Run every algorithm on the same workload and compare average metrics.",
    )
    compare_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to JSON or CSV workload file.",
    )
    compare_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=2,
        help="Time quantum used for RR (default: 2).",
    )

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP simulation API.")
    serve_parser.add_argument("--host", default=None, help="Bind address (default: SCHEDSIM_HOST or 0.0.0.0).")
    serve_parser.add_argument("--port", type=int, default=None, help="Port (default: SCHEDSIM_PORT or 8080).")

    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
    )


def _print_result(result: ScheduleResult, console: Console) -> None:
    console.print(f"[bold]Algorithm:[/bold] {result.algorithm}")
    if result.quantum is not None:
        console.print(f"[bold]Quantum:[/bold] {result.quantum}")

    console.print()

    panel, _ = build_rich_gantt(result.timeline)
    console.print(panel)

    console.print()

    headers = [
        "PID",
        "Arrive",
        "Burst",
        "Priority",
        "Start",
        "Complete",
        "Wait",
        "Turnaround",
        "Response",
    ]

    proc_table = Table(title="Per-process metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "center" if h in {"PID", "Priority"} else "right"
        proc_table.add_column(h, justify=justify)

    for p in result.processes:
        proc_table.add_row(
            p.pid,
            str(p.arrival_time),
            str(p.burst_time),
            str(p.priority),
            str(p.start_time),
            str(p.completion_time),
            str(p.waiting_time),
            str(p.turnaround_time),
            str(p.response_time),
        )

    console.print(proc_table)
    console.print()

    avg = result.averages
    sys_table = Table(title="Summary", box=box.SIMPLE_HEAVY)
    sys_table.add_column("Metric")
    sys_table.add_column("Value", justify="right")

    sys_table.add_row("Avg waiting", f"{avg.waiting:.2f}")
    sys_table.add_row("Avg turnaround", f"{avg.turnaround:.2f}")
    sys_table.add_row("Avg response", f"{avg.response:.2f}")
    if result.system:
        sys_table.add_row("Makespan", str(result.system.makespan))
        sys_table.add_row("Throughput (proc/time)", f"{result.system.throughput:.3f}")
        sys_table.add_row("CPU utilization", f"{result.system.cpu_utilization * 100:.1f}%")

    console.print(sys_table)


def _compare(processes: List[Process], quantum: int, title: str, console: Console) -> None:
    summary_table = Table(title=title, box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Quantum", justify="right")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("Avg response", justify="right")

    for key, engine in ALGORITHMS.items():
        result = engine(processes, quantum=quantum if key == "rr" else None)
        summary_table.add_row(
            result.algorithm,
            "" if result.quantum is None else str(result.quantum),
            f"{result.averages.waiting:.2f}",
            f"{result.averages.turnaround:.2f}",
            f"{result.averages.response:.2f}",
        )

    console.print(summary_table)


def _animate_result(result: ScheduleResult, delay: float, console: Console) -> None:
    """
    Simple time-stepped textual replay of the computed schedule.
    """
    timeline = sorted(result.timeline, key=lambda s: (s.start_time, s.end_time))
    if not timeline:
        console.print("[red]No execution to animate.[/red]")
        return

    start = timeline[0].start_time
    makespan = timeline[-1].end_time
    console.print(f"[bold]Simulating {result.algorithm}[/bold] (t={start}..{makespan})")
    console.print("[dim]Press Ctrl+C to skip animation.[/dim]")

    for t in range(start, makespan):
        seg = segment_at(timeline, t)
        if seg is None:
            console.print(f"t={t:3d}: [dim]idle[/dim]")
        else:
            console.print(f"t={t:3d}: {seg.pid} [green]{'#' * (t - seg.start_time + 1)}[/green]")
        time.sleep(delay)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    default_level = "INFO" if args.command == "serve" else "WARNING"
    configure_logging(args.log_level or default_level)

    console = Console()

    try:
        if args.command == "run":
            processes = load_workload(Path(args.workload))
            result = simulate(
                processes,
                args.algorithm,
                is_preemptive=args.preemptive,
                time_quantum=args.quantum,
            )
            if args.step:
                try:
                    _animate_result(result, delay=args.step_delay, console=console)
                except KeyboardInterrupt:
                    console.print("[yellow]Animation skipped.[/yellow]")
            _print_result(result, console)
            return 0

        if args.command == "compare":
            workload_path = Path(args.workload)
            processes = load_workload(workload_path)
            _compare(processes, args.quantum, f"Algorithm comparison: {workload_path.name}", console)
            return 0

        if args.command == "serve":
            # Imported here so run/compare work without the web stack loaded.
            from .server import run_server

            config = ServerConfig.from_env()
            if args.host:
                config.host = args.host
            if args.port is not None:
                config.port = args.port
            run_server(config)
            return 0
    except (ValueError, OSError) as exc:
        logger.debug("Command failed", exc_info=True)
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        return 1

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
