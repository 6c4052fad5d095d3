from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass
class Process:
    """
    One workload entry as read from a file, before it is handed to an engine.
    """

    job_id: str
    arrival_time: int
    burst_time: int
    priority: Optional[int] = None


@dataclass(frozen=True)
class TimeSlice:
    """
    One contiguous interval [start_time, end_time) during which job_id owned the CPU.
    """

    job_id: str
    start_time: int
    end_time: int

    def __post_init__(self) -> None:
        if self.end_time <= self.start_time:
            raise ValueError(
                f"Time slice for {self.job_id} must end after it starts "
                f"(start={self.start_time}, end={self.end_time})"
            )

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time


@dataclass(frozen=True)
class CompletedJob:
    """
    Read-only snapshot of a job handed out by an engine.

    Timing fields are None until the job has been dispatched or completed.
    """

    job_id: str
    arrival_time: int
    burst_time: int
    priority: Optional[int]
    remaining_time: int
    start_time: Optional[int]
    completion_time: Optional[int]
    turnaround_time: Optional[int]
    waiting_time: Optional[int]
    response_time: Optional[int]
    execution_history: Tuple[TimeSlice, ...] = ()

    @property
    def is_complete(self) -> bool:
        return self.completion_time is not None

    @property
    def slice_count(self) -> int:
        return len(self.execution_history)


@dataclass
class Job:
    """
    Engine-local simulation record for one submitted job.

    Never handed to callers directly; engines expose snapshot() copies.
    """

    job_id: str
    arrival_time: int
    burst_time: int
    priority: Optional[int] = None
    index: int = 0
    remaining_time: int = field(init=False)
    start_time: Optional[int] = field(default=None, init=False)
    completion_time: Optional[int] = field(default=None, init=False)
    turnaround_time: Optional[int] = field(default=None, init=False)
    waiting_time: Optional[int] = field(default=None, init=False)
    response_time: Optional[int] = field(default=None, init=False)
    execution_history: List[TimeSlice] = field(default_factory=list, init=False)

    def __post_init__(self) -> None:
        self.remaining_time = self.burst_time

    @property
    def is_complete(self) -> bool:
        return self.remaining_time == 0

    @property
    def has_started(self) -> bool:
        return self.start_time is not None

    def reset(self) -> None:
        self.remaining_time = self.burst_time
        self.start_time = None
        self.completion_time = None
        self.turnaround_time = None
        self.waiting_time = None
        self.response_time = None
        self.execution_history = []

    def dispatch(self, now: int) -> None:
        # Start and response are fixed by the first dispatch only.
        if self.start_time is None:
            self.start_time = now
            self.response_time = now - self.arrival_time

    def run(self, start: int, end: int) -> TimeSlice:
        time_slice = TimeSlice(job_id=self.job_id, start_time=start, end_time=end)
        if time_slice.duration > self.remaining_time:
            raise ValueError(f"{self.job_id} cannot run {time_slice.duration}, only {self.remaining_time} left")
        self.execution_history.append(time_slice)
        self.remaining_time -= time_slice.duration
        return time_slice

    def complete(self, now: int) -> None:
        self.completion_time = now
        self.turnaround_time = now - self.arrival_time
        self.waiting_time = self.turnaround_time - self.burst_time

    def snapshot(self) -> CompletedJob:
        return CompletedJob(
            job_id=self.job_id,
            arrival_time=self.arrival_time,
            burst_time=self.burst_time,
            priority=self.priority,
            remaining_time=self.remaining_time,
            start_time=self.start_time,
            completion_time=self.completion_time,
            turnaround_time=self.turnaround_time,
            waiting_time=self.waiting_time,
            response_time=self.response_time,
            execution_history=tuple(self.execution_history),
        )


@dataclass(frozen=True)
class ScheduleMetrics:
    job_count: int
    cpu_busy_time: int
    makespan: int
    cpu_utilization: float
    throughput: float
    avg_turnaround: float
    min_turnaround: int
    max_turnaround: int
    avg_waiting: float
    min_waiting: int
    max_waiting: int
    avg_response: float
    min_response: int
    max_response: int
    context_switches: int


@dataclass
class ScheduleResult:
    algorithm: str
    policy: str
    preemptive: bool
    quantum: Optional[int]
    processes: List[CompletedJob] = field(default_factory=list)
    timeline: List[TimeSlice] = field(default_factory=list)
    metrics: Optional[ScheduleMetrics] = None
