from __future__ import annotations

import logging
from collections import deque
from typing import Deque, Dict, List, MutableSequence, Optional, Sequence, Tuple, Type

from .config import DEFAULT_QUANTUM, SimulationConfig
from .errors import EmptyScheduleError, InvalidJobParameters, InvalidQuantum
from .metrics import compute_metrics
from .models import CompletedJob, Job, Process, ScheduleMetrics, ScheduleResult, TimeSlice

logger = logging.getLogger(__name__)


class SchedulingEngine:
    """
    Single-CPU discrete-event simulation shared by every policy.

    Subclasses implement _simulate(), which drives the engine-local Job
    records against one virtual clock through _run() and _finish(). Callers
    only ever see CompletedJob snapshots and immutable TimeSlices.
    """

    name = "Scheduler"
    policy = ""
    default_preemptive = False
    supports_preemption = True

    def __init__(self, preemptive: Optional[bool] = None) -> None:
        self._jobs: List[Job] = []
        self._jobs_by_id: Dict[str, Job] = {}
        self._completed: List[Job] = []
        self._timeline: List[TimeSlice] = []
        self._preemptive = self.default_preemptive
        if preemptive is not None:
            self.set_mode(preemptive)

    def add_job(self, job_id: str, arrival_time: int, burst_time: int, priority: Optional[int] = None) -> None:
        if arrival_time < 0:
            raise InvalidJobParameters("Arrival time cannot be negative", field="arrival_time", value=arrival_time)
        if burst_time <= 0:
            raise InvalidJobParameters("Burst time must be positive", field="burst_time", value=burst_time)
        if job_id in self._jobs_by_id:
            raise InvalidJobParameters("Duplicate job id", field="job_id", value=job_id)

        job = Job(job_id, arrival_time, burst_time, priority=priority, index=len(self._jobs))
        self._jobs.append(job)
        self._jobs_by_id[job_id] = job

    def add_process(self, process: Process) -> None:
        self.add_job(process.job_id, process.arrival_time, process.burst_time, process.priority)

    def set_mode(self, preemptive: bool) -> None:
        if preemptive and not self.supports_preemption:
            raise ValueError(f"{self.name} has no preemptive mode")
        self._preemptive = bool(preemptive)

    @property
    def preemptive(self) -> bool:
        return self._preemptive

    @property
    def quantum(self) -> Optional[int]:
        return None

    def mode_description(self) -> str:
        return self.name

    def execute(self) -> None:
        """
        Run the simulation from a clean state until every job has completed.
        """
        if not self._jobs:
            raise EmptyScheduleError("No jobs to schedule")

        self.reset()
        self._simulate()

        metrics = self.get_metrics()
        logger.info(
            f"{self.mode_description()}: {metrics.job_count} jobs, makespan {metrics.makespan}, "
            f"{metrics.context_switches} context switches"
        )

    def reset(self) -> None:
        """
        Restore every submitted job to its pre-simulation state.
        """
        for job in self._jobs:
            job.reset()
        self._completed = []
        self._timeline = []

    def _simulate(self) -> None:
        raise NotImplementedError

    # -- read accessors -------------------------------------------------

    def get_jobs(self) -> List[CompletedJob]:
        return [job.snapshot() for job in self._jobs]

    def get_completed_jobs(self) -> List[CompletedJob]:
        return [job.snapshot() for job in self._completed]

    def get_job(self, job_id: str) -> Optional[CompletedJob]:
        job = self._jobs_by_id.get(job_id)
        return job.snapshot() if job is not None else None

    def get_all_time_slices(self) -> List[TimeSlice]:
        return sorted(self._timeline, key=lambda s: (s.start_time, s.end_time))

    def get_metrics(self) -> ScheduleMetrics:
        return compute_metrics(self.get_completed_jobs())

    def result(self) -> ScheduleResult:
        return ScheduleResult(
            algorithm=self.mode_description(),
            policy=self.policy,
            preemptive=self._preemptive,
            quantum=self.quantum,
            processes=self.get_completed_jobs(),
            timeline=self.get_all_time_slices(),
            metrics=self.get_metrics(),
        )

    # -- helpers for _simulate -----------------------------------------

    def _arrival_order(self) -> List[Job]:
        # Stable: equal arrival times keep submission order.
        return sorted(self._jobs, key=lambda j: (j.arrival_time, j.index))

    @staticmethod
    def _admit(pending: Deque[Job], ready: MutableSequence[Job], now: int) -> List[Job]:
        """
        Move every pending job that has arrived by `now` into the ready set.
        """
        arrived: List[Job] = []
        while pending and pending[0].arrival_time <= now:
            job = pending.popleft()
            ready.append(job)
            arrived.append(job)
        return arrived

    def _idle_until(self, now: int, next_arrival: int) -> int:
        logger.debug(f"CPU idle from t={now} to t={next_arrival}")
        return max(now, next_arrival)

    def _run(self, job: Job, start: int, end: int) -> int:
        time_slice = job.run(start, end)
        self._timeline.append(time_slice)
        logger.debug(f"{job.job_id} ran [{start}, {end}), {job.remaining_time} left")
        return end

    def _finish(self, job: Job, now: int) -> None:
        job.complete(now)
        self._completed.append(job)
        logger.debug(
            f"{job.job_id} completed at t={now} "
            f"(turnaround {job.turnaround_time}, waiting {job.waiting_time}, response {job.response_time})"
        )


class FCFSEngine(SchedulingEngine):
    """
    First-Come First-Serve (non-preemptive).
    """

    name = "First-Come First-Served (FCFS)"
    policy = "fcfs"
    supports_preemption = False

    def _simulate(self) -> None:
        time = 0
        for job in self._arrival_order():
            if time < job.arrival_time:
                time = self._idle_until(time, job.arrival_time)

            job.dispatch(time)
            time = self._run(job, time, time + job.burst_time)
            self._finish(job, time)


class KeyedEngine(SchedulingEngine):
    """
    Shared loop for policies that pick the ready job with the smallest key.

    Non-preemptive: the chosen job runs to completion. Preemptive: the chosen
    job runs until its next decision point: completion or the next arrival.
    Each arrival closes the running slice. The same job then opens a new
    slice unless an arrival has a strictly smaller key, in which case it goes
    back to the ready set and the next job is selected from all ready jobs.

    Ties on the key go to the earlier arrival, then to the earlier submission.
    """

    def _selection_key(self, job: Job) -> float:
        raise NotImplementedError

    def _running_key(self, job: Job, remaining: int) -> float:
        """
        Key of the running job when `remaining` time units are still owed to it.
        """
        return self._selection_key(job)

    def _select(self, ready: Sequence[Job]) -> Job:
        return min(ready, key=lambda j: (self._selection_key(j), j.arrival_time, j.index))

    def _simulate(self) -> None:
        pending: Deque[Job] = deque(self._arrival_order())
        ready: List[Job] = []
        current: Optional[Job] = None
        time = 0

        while pending or ready or current is not None:
            self._admit(pending, ready, time)
            if current is None:
                if not ready:
                    time = self._idle_until(time, pending[0].arrival_time)
                    continue
                current = self._select(ready)
                ready.remove(current)
                current.dispatch(time)

            end = time + current.remaining_time
            if self._preemptive and pending and pending[0].arrival_time < end:
                # Every arrival inside the run is a decision point and closes the slice.
                end = pending[0].arrival_time
            time = self._run(current, time, end)

            if current.is_complete:
                self._finish(current, time)
                current = None
                continue

            arrived = self._admit(pending, ready, time)
            running_key = self._running_key(current, current.remaining_time)
            if any(self._selection_key(new) < running_key for new in arrived):
                logger.debug(f"{current.job_id} preempted at t={time} by {', '.join(j.job_id for j in arrived)}")
                ready.append(current)
                current = None


class SJFEngine(KeyedEngine):
    """
    Shortest Job First; preemptive mode is Shortest Remaining Time First.

    Non-preemptive selection compares burst times, preemptive selection and
    preemption compare remaining times.
    """

    name = "Shortest Job First"
    policy = "sjf"

    def mode_description(self) -> str:
        if self._preemptive:
            return "Preemptive Shortest Job First (SRTF)"
        return "Non-Preemptive Shortest Job First (SJF)"

    def _selection_key(self, job: Job) -> float:
        return job.remaining_time if self._preemptive else job.burst_time

    def _running_key(self, job: Job, remaining: int) -> float:
        return remaining


class PriorityEngine(KeyedEngine):
    """
    Priority scheduling; lower numeric priority value means more urgent.

    Jobs submitted without a priority rank after every prioritised job.
    Equal priority never preempts the running job.
    """

    name = "Priority Scheduling"
    policy = "priority"

    def mode_description(self) -> str:
        if self._preemptive:
            return "Preemptive Priority Scheduling"
        return "Non-Preemptive Priority Scheduling"

    def _selection_key(self, job: Job) -> float:
        return job.priority if job.priority is not None else float("inf")


class RoundRobinEngine(SchedulingEngine):
    """
    Round Robin scheduling with a fixed time quantum.

    Jobs that arrive during a slice join the ready queue before the job whose
    slice just ended is put back. In non-preemptive mode each dispatched job
    runs to completion and the quantum is nominal.
    """

    name = "Round Robin"
    policy = "rr"
    default_preemptive = True

    def __init__(self, quantum: int = DEFAULT_QUANTUM, preemptive: Optional[bool] = None) -> None:
        super().__init__(preemptive=preemptive)
        self.set_quantum(quantum)

    def set_quantum(self, quantum: int) -> None:
        if quantum is None or quantum <= 0:
            raise InvalidQuantum("Time quantum must be positive", field="quantum", value=quantum)
        self._quantum = quantum

    @property
    def quantum(self) -> int:
        return self._quantum

    def mode_description(self) -> str:
        mode = "Preemptive" if self._preemptive else "Non-Preemptive"
        return f"{mode} Round Robin (Time Quantum: {self._quantum})"

    def _simulate(self) -> None:
        pending: Deque[Job] = deque(self._arrival_order())
        ready: Deque[Job] = deque()
        time = 0

        while pending or ready:
            self._admit(pending, ready, time)
            if not ready:
                time = self._idle_until(time, pending[0].arrival_time)
                continue

            job = ready.popleft()
            job.dispatch(time)

            if self._preemptive:
                run_time = min(self._quantum, job.remaining_time)
            else:
                run_time = job.remaining_time
            time = self._run(job, time, time + run_time)

            # Arrivals during the slice queue up ahead of the job being put back.
            self._admit(pending, ready, time)

            if job.is_complete:
                self._finish(job, time)
            else:
                ready.append(job)


ALGORITHMS: Dict[str, Tuple[Type[SchedulingEngine], bool]] = {
    "fcfs": (FCFSEngine, False),
    "sjf": (SJFEngine, False),
    "srtf": (SJFEngine, True),
    "priority": (PriorityEngine, False),
    "priority-p": (PriorityEngine, True),
    "rr": (RoundRobinEngine, True),
    "rr-np": (RoundRobinEngine, False),
}


def build_engine(config: SimulationConfig, processes: Sequence[Process]) -> SchedulingEngine:
    """
    Create a fresh engine for `config` and submit a private copy of every process.
    """
    engine_cls, preemptive = ALGORITHMS[config.algorithm]
    if config.preemptive is not None:
        preemptive = config.preemptive

    if engine_cls is RoundRobinEngine:
        quantum = config.quantum if config.quantum is not None else DEFAULT_QUANTUM
        engine: SchedulingEngine = RoundRobinEngine(quantum=quantum, preemptive=preemptive)
    else:
        engine = engine_cls(preemptive=preemptive)

    for process in processes:
        engine.add_process(process)
    return engine


def run_algorithm(
    name: str,
    processes: Sequence[Process],
    quantum: Optional[int] = None,
    preemptive: Optional[bool] = None,
) -> ScheduleResult:
    """
    Build, execute and summarise one engine run on its own copy of the workload.
    """
    config = SimulationConfig(algorithm=name, preemptive=preemptive, quantum=quantum)
    engine = build_engine(config, processes)
    engine.execute()
    return engine.result()
