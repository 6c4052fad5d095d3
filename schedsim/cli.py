from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from .algorithms import build_engine, run_algorithm
from .config import ALGORITHM_NAMES, DEFAULT_COMPARE_ALGORITHMS, DEFAULT_QUANTUM, SimulationConfig
from .errors import SchedulingError
from .metrics import performance_indicators
from .models import Process, ScheduleResult
from .workload_io import WorkloadError, load_workload

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="schedsim",
        description="Job scheduling simulator (FCFS, SJF/SRTF, Priority, Round Robin).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log every dispatch, preemption and idle jump.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run one scheduling algorithm on a workload file.")
    run_parser.add_argument(
        "--algorithm",
        "-a",
        required=True,
        choices=sorted(ALGORITHM_NAMES),
        help="Algorithm to use.",
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
        default=None,
        help=f"Time quantum for round robin (default: {DEFAULT_QUANTUM}; ignored by other algorithms).",
    )
    mode = run_parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--preemptive",
        dest="preemptive",
        action="store_const",
        const=True,
        default=None,
        help="Force preemptive mode.",
    )
    mode.add_argument(
        "--non-preemptive",
        dest="preemptive",
        action="store_const",
        const=False,
        help="Force non-preemptive mode.",
    )

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run several algorithms on the same workload and compare average metrics.",
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
        choices=sorted(ALGORITHM_NAMES),
        default=list(DEFAULT_COMPARE_ALGORITHMS),
        help=f"Algorithms to compare (default: {' '.join(DEFAULT_COMPARE_ALGORITHMS)}).",
    )
    compare_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=DEFAULT_QUANTUM,
        help=f"Time quantum used for round robin when included (default: {DEFAULT_QUANTUM}).",
    )

    return parser


def _print_result(result: ScheduleResult, console: Console) -> None:
    console.print(f"[bold]Algorithm:[/bold] {result.algorithm}")
    console.print()

    headers = [
        "Job",
        "Arrive",
        "Burst",
        "Priority",
        "Start",
        "Complete",
        "Turnaround",
        "Wait",
        "Response",
        "Slices",
    ]

    job_table = Table(title="Per-job metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "center" if h in {"Job", "Priority"} else "right"
        job_table.add_column(h, justify=justify)

    for p in sorted(result.processes, key=lambda j: (j.completion_time, j.job_id)):
        job_table.add_row(
            p.job_id,
            str(p.arrival_time),
            str(p.burst_time),
            "" if p.priority is None else str(p.priority),
            str(p.start_time),
            str(p.completion_time),
            str(p.turnaround_time),
            str(p.waiting_time),
            str(p.response_time),
            str(p.slice_count),
        )

    console.print(job_table)

    slice_table = Table(title="Execution timeline", box=box.SIMPLE_HEAVY)
    slice_table.add_column("Job", justify="center")
    slice_table.add_column("Start", justify="right")
    slice_table.add_column("End", justify="right")
    slice_table.add_column("Duration", justify="right")
    last_end = None
    for sl in result.timeline:
        if last_end is not None and sl.start_time > last_end:
            slice_table.add_row("[dim]idle[/dim]", str(last_end), str(sl.start_time), str(sl.start_time - last_end))
        slice_table.add_row(sl.job_id, str(sl.start_time), str(sl.end_time), str(sl.duration))
        last_end = sl.end_time

    console.print(slice_table)

    if result.metrics is None:
        return

    m = result.metrics
    sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
    sys_table.add_column("Metric")
    sys_table.add_column("Value", justify="right")

    sys_table.add_row("CPU utilization", f"{m.cpu_utilization:.2f}%")
    sys_table.add_row("Throughput (jobs/time)", f"{m.throughput:.3f}")
    sys_table.add_row("Avg / min / max turnaround", f"{m.avg_turnaround:.2f} / {m.min_turnaround} / {m.max_turnaround}")
    sys_table.add_row("Avg / min / max waiting", f"{m.avg_waiting:.2f} / {m.min_waiting} / {m.max_waiting}")
    sys_table.add_row("Avg / min / max response", f"{m.avg_response:.2f} / {m.min_response} / {m.max_response}")
    if result.preemptive:
        sys_table.add_row("Context switches", str(m.context_switches))
    sys_table.add_row("Scheduling length", str(m.makespan))
    sys_table.add_row("Jobs completed", str(m.job_count))

    console.print(sys_table)

    indicators = performance_indicators(m, result.policy, preemptive=result.preemptive, quantum=result.quantum)
    ind_table = Table(title="Performance indicators", box=box.SIMPLE_HEAVY)
    ind_table.add_column("Indicator")
    ind_table.add_column("Rating")
    for name, rating in indicators.items():
        ind_table.add_row(name, rating)

    console.print(ind_table)


def _run_compare(processes: List[Process], algorithms: List[str], quantum: int, console: Console) -> None:
    """
    Run each algorithm on its own copy of the workload and print one summary row per run.
    """
    summary_table = Table(title="Algorithm comparison", box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Quantum", justify="right")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("Avg response", justify="right")
    summary_table.add_column("Utilization", justify="right")
    summary_table.add_column("Switches", justify="right")

    for alg in algorithms:
        result = run_algorithm(alg, processes, quantum=quantum)
        summary_table.add_row(
            result.algorithm,
            "" if result.quantum is None else str(result.quantum),
            f"{result.metrics.avg_waiting:.2f}",
            f"{result.metrics.avg_turnaround:.2f}",
            f"{result.metrics.avg_response:.2f}",
            f"{result.metrics.cpu_utilization:.1f}%",
            str(result.metrics.context_switches),
        )

    console.print(summary_table)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format=LOG_FORMAT)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    console = Console()
    err_console = Console(stderr=True)

    try:
        processes = load_workload(Path(args.workload))
        logger.info(f"Loaded {len(processes)} jobs from {args.workload}")

        if args.command == "run":
            config = SimulationConfig(algorithm=args.algorithm, preemptive=args.preemptive, quantum=args.quantum)
            engine = build_engine(config, processes)
            engine.execute()
            result = engine.result()
            _print_result(result, console)
            return 0

        if args.command == "compare":
            _run_compare(processes, args.algorithms, args.quantum, console)
            return 0
    except (SchedulingError, WorkloadError, ValueError, OSError) as exc:
        logger.debug("Simulation aborted", exc_info=True)
        err_console.print(f"[red]Error: {exc}[/red]")
        return 2

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
