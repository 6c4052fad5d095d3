"""
Job scheduling simulation engine.

Simulates FCFS, SJF/SRTF, Priority and Round Robin scheduling of a job set
on a single virtual CPU and reports the resulting time slices and
performance metrics.
"""

from .algorithms import (
    ALGORITHMS,
    FCFSEngine,
    PriorityEngine,
    RoundRobinEngine,
    SchedulingEngine,
    SJFEngine,
    build_engine,
    run_algorithm,
)
from .config import SimulationConfig
from .errors import EmptyScheduleError, InvalidJobParameters, InvalidQuantum, SchedulingError
from .metrics import compute_metrics
from .models import CompletedJob, Process, ScheduleMetrics, ScheduleResult, TimeSlice

__all__ = [
    "ALGORITHMS",
    "CompletedJob",
    "EmptyScheduleError",
    "FCFSEngine",
    "InvalidJobParameters",
    "InvalidQuantum",
    "PriorityEngine",
    "Process",
    "RoundRobinEngine",
    "ScheduleMetrics",
    "ScheduleResult",
    "SchedulingEngine",
    "SchedulingError",
    "SimulationConfig",
    "SJFEngine",
    "TimeSlice",
    "build_engine",
    "compute_metrics",
    "run_algorithm",
]
