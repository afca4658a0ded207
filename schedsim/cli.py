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

from .algorithms import ALGORITHMS, PRIORITY_ALGORITHMS, run_algorithm
from .benchmark import benchmark
from .config import DEFAULT_MLFQ_QUANTUMS, SimulationConfig, parse_quantums
from .errors import SchedulingError
from .gantt import build_rich_gantt, render_gantt
from .generator import generate_workload
from .metrics import summarize_process_metrics
from .models import Process, ScheduleResult
from .workload_io import load_workload, save_workload

logger = logging.getLogger(__name__)

DEFAULT_QUANTUMS = ",".join(str(q) for q in DEFAULT_MLFQ_QUANTUMS)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="schedsim",
        description="CPU scheduling simulator (FCFS, SJF, SRTF, RR, Priority, MLFQ).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log every simulated slice.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run a scheduling algorithm on a workload file.")
    run_parser.add_argument(
        "--algorithm",
        "-a",
        required=True,
        choices=list(ALGORITHMS),
        help="Algorithm to use.",
    )
    run_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to JSON or CSV workload file.",
    )
    _add_quantum_args(run_parser, quantum_default=None)
    _add_starvation_arg(run_parser)
    run_parser.add_argument(
        "--plain",
        action="store_true",
        help="Print the Gantt chart as plain text instead of a colored panel.",
    )
    run_parser.add_argument(
        "--step",
        action="store_true",
        help="Show a simple time-stepped simulation in the terminal.",
    )
    run_parser.add_argument(
        "--step-delay",
        type=_non_negative_float,
        default=0.3,
        help="Seconds to wait between steps when --step is used (default: 0.3).",
    )

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run multiple algorithms on the same workload and compare average metrics.",
    )
    compare_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to JSON or CSV workload file.",
    )
    compare_parser.add_argument(
        "--algorithms",
        "-a",
        nargs="+",
        choices=list(ALGORITHMS),
        default=list(ALGORITHMS),
        help="Algorithms to compare (default: all).",
    )
    _add_quantum_args(compare_parser, quantum_default=2)
    _add_starvation_arg(compare_parser)

    gen_parser = subparsers.add_parser("generate", help="Write a random workload file.")
    gen_parser.add_argument("--count", "-n", type=int, default=10, help="Number of processes (default: 10).")
    gen_parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible workloads.")
    gen_parser.add_argument("--max-arrival", type=int, default=50, help="Arrivals are drawn from [0, max) (default: 50).")
    gen_parser.add_argument("--max-burst", type=int, default=20, help="Bursts are drawn from [1, max] (default: 20).")
    gen_parser.add_argument(
        "--priority-levels",
        type=int,
        default=5,
        help="Priorities are drawn from [0, levels); 0 leaves them unset (default: 5).",
    )
    gen_parser.add_argument(
        "--output",
        "-o",
        required=True,
        help="Destination .json or .csv file.",
    )

    bench_parser = subparsers.add_parser(
        "bench",
        help="Time whole-engine runs on a random (or given) workload.",
    )
    bench_parser.add_argument(
        "--algorithms",
        "-a",
        nargs="+",
        choices=list(ALGORITHMS),
        default=["fcfs", "rr"],
        help="Algorithms to time (default: fcfs rr).",
    )
    bench_parser.add_argument("--count", "-n", type=int, default=10_000, help="Random processes to generate (default: 10000).")
    bench_parser.add_argument("--seed", type=int, default=None, help="Random seed for the generated workload.")
    bench_parser.add_argument("--workload", "-w", default=None, help="Use this workload file instead of generating one.")
    bench_parser.add_argument("--repeat", "-r", type=int, default=1, help="Runs per algorithm; best time is kept (default: 1).")
    _add_quantum_args(bench_parser, quantum_default=4)

    return parser


def _add_quantum_args(parser: argparse.ArgumentParser, quantum_default: Optional[int]) -> None:
    parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=quantum_default,
        help="Time quantum for round-robin (ignored by the other algorithms).",
    )
    parser.add_argument(
        "--quantums",
        default=DEFAULT_QUANTUMS,
        help=f"Comma-separated per-level quanta for MLFQ (default: {DEFAULT_QUANTUMS}).",
    )


def _add_starvation_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--starvation-bound",
        type=int,
        default=None,
        help="Waiting time above which a process counts as starved (default: longest burst).",
    )


def _non_negative_float(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {raw!r}") from None
    if value < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {raw}")
    return value


def _config_from_args(args: argparse.Namespace) -> SimulationConfig:
    return SimulationConfig(
        quantum=args.quantum,
        quantums=parse_quantums(args.quantums),
        starvation_bound=getattr(args, "starvation_bound", None),
    )


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _format_quantum(quantum) -> str:
    if quantum is None:
        return ""
    if isinstance(quantum, tuple):
        return "/".join(str(q) for q in quantum)
    return str(quantum)


def _print_result(result: ScheduleResult, console: Console, plain: bool = False) -> None:
    console.print(f"[bold]Algorithm:[/bold] {result.algorithm}")
    if result.quantum is not None:
        label = "Quanta" if isinstance(result.quantum, tuple) else "Quantum"
        console.print(f"[bold]{label}:[/bold] {_format_quantum(result.quantum)}")

    console.print()

    if plain:
        console.print(render_gantt(result.timeline), markup=False, highlight=False)
    else:
        panel, time_marks = build_rich_gantt(result.timeline)
        console.print(panel)
        if time_marks:
            # Panel border and padding take two columns.
            console.print("  " + time_marks, highlight=False)

    console.print()

    headers = [
        "PID",
        "Arrive",
        "Burst",
        "Start",
        "Complete",
        "Wait",
        "Turnaround",
        "Response",
        "Priority",
    ]

    proc_table = Table(title="Per-process metrics (completion order)", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "center" if h in {"PID", "Priority"} else "right"
        proc_table.add_column(h, justify=justify)

    for p in result.processes:
        proc_table.add_row(
            p.pid,
            str(p.arrival_time),
            str(p.burst_time),
            str(p.start_time),
            str(p.completion_time),
            str(p.waiting_time),
            str(p.turnaround_time),
            str(p.response_time),
            "" if p.priority is None else str(p.priority),
        )

    console.print(proc_table)
    console.print()

    summary = summarize_process_metrics(result.processes)
    if result.system:
        sys = result.system
        sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
        sys_table.add_column("Metric")
        sys_table.add_column("Value", justify="right")

        sys_table.add_row("Avg waiting", f"{summary['avg_waiting']:.2f}")
        sys_table.add_row("Avg turnaround", f"{summary['avg_turnaround']:.2f}")
        sys_table.add_row("Avg response", f"{summary['avg_response']:.2f}")
        sys_table.add_row("Makespan", str(sys.makespan))
        sys_table.add_row("Throughput (proc/time)", f"{sys.throughput:.3f}")
        sys_table.add_row("CPU utilization", f"{sys.cpu_utilization*100:.1f}%")
        sys_table.add_row("Max waiting", str(sys.max_waiting))
        sys_table.add_row("Idle time", str(sys.idle_time))
        sys_table.add_row(f"Starved (wait > {sys.starvation_bound})", str(sys.starvation_count))

        console.print(sys_table)


def _compare(processes: List[Process], algorithms: List[str], config: SimulationConfig, console: Console) -> None:
    summary_table = Table(title="Algorithm comparison", box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Quantum", justify="right")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("Avg response", justify="right")

    missing_priority = any(p.priority is None for p in processes)

    for alg in algorithms:
        if alg in PRIORITY_ALGORITHMS and missing_priority:
            console.print(f"[yellow]Skipping {alg}: workload has processes without priority.[/yellow]")
            continue
        result = run_algorithm(alg, processes, config)
        summary = summarize_process_metrics(result.processes)
        summary_table.add_row(
            result.algorithm,
            _format_quantum(result.quantum),
            f"{summary['avg_waiting']:.2f}",
            f"{summary['avg_turnaround']:.2f}",
            f"{summary['avg_response']:.2f}",
        )

    console.print(summary_table)


def _animate_result(result: ScheduleResult, delay: float, console: Console) -> None:
    """
    Simple time-stepped textual simulation using the computed schedule.
    """
    timeline = result.timeline
    if not timeline:
        console.print("[red]No execution to animate.[/red]")
        return

    makespan = timeline[-1].end_time
    console.print(f"[bold]Simulating {result.algorithm}[/bold] (duration {makespan} time units)")
    console.print("[dim]Press Ctrl+C to skip animation.[/dim]")

    for t in range(makespan):
        running = None
        bar = ""
        for sl in timeline:
            if sl.start_time <= t < sl.end_time:
                running = sl.pid
                bar = f"[green]{'█' * (t - sl.start_time + 1)}[/green]"
                break
        msg = f"t={t:2d}: " + (running or "(idle)")
        console.print(msg + (" " + bar if bar else ""), highlight=False)
        time.sleep(delay)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)
    console = Console()

    try:
        if args.command == "run":
            config = _config_from_args(args)
            processes = load_workload(Path(args.workload))
            result = run_algorithm(args.algorithm, processes, config)
            if args.step:
                try:
                    _animate_result(result, delay=args.step_delay, console=console)
                except KeyboardInterrupt:
                    console.print("[yellow]Animation skipped.[/yellow]")
            _print_result(result, console, plain=args.plain)
            return 0

        if args.command == "compare":
            config = _config_from_args(args)
            processes = load_workload(Path(args.workload))
            _compare(processes, args.algorithms, config, console)
            return 0

        if args.command == "generate":
            levels = args.priority_levels if args.priority_levels > 0 else None
            processes = generate_workload(
                args.count,
                seed=args.seed,
                max_arrival=args.max_arrival,
                max_burst=args.max_burst,
                priority_levels=levels,
            )
            path = save_workload(processes, args.output)
            console.print(f"Wrote {len(processes)} processes to [green]{path}[/green]")
            return 0

        if args.command == "bench":
            config = _config_from_args(args)
            if args.workload:
                processes = load_workload(Path(args.workload))
            else:
                processes = generate_workload(args.count, seed=args.seed)
            results = benchmark(args.algorithms, processes, config, repeat=args.repeat)

            table = Table(title=f"Benchmark ({len(processes)} processes)", box=box.SIMPLE_HEAVY)
            table.add_column("Algorithm")
            table.add_column("Best (ms)", justify="right")
            table.add_column("Mean (ms)", justify="right")
            for r in results:
                table.add_row(r.algorithm, f"{r.best_ms:.3f}", f"{r.mean_seconds * 1000:.3f}")
            console.print(table)
            return 0
    except (SchedulingError, OSError) as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        return 2

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
