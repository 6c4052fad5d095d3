from __future__ import annotations

from typing import Dict, Optional, Sequence

from .models import CompletedJob, ScheduleMetrics


def compute_metrics(jobs: Sequence[CompletedJob]) -> ScheduleMetrics:
    """
    Compute aggregate statistics over a set of completed jobs.

    Makespan runs from the earliest arrival to the latest completion.
    Ratios fall back to 0 for an empty set or a zero-length schedule.
    """
    completed = [j for j in jobs if j.is_complete]
    if not completed:
        return ScheduleMetrics(
            job_count=0,
            cpu_busy_time=0,
            makespan=0,
            cpu_utilization=0.0,
            throughput=0.0,
            avg_turnaround=0.0,
            min_turnaround=0,
            max_turnaround=0,
            avg_waiting=0.0,
            min_waiting=0,
            max_waiting=0,
            avg_response=0.0,
            min_response=0,
            max_response=0,
            context_switches=0,
        )

    n = len(completed)
    makespan = max(j.completion_time for j in completed) - min(j.arrival_time for j in completed)
    cpu_busy_time = sum(j.burst_time for j in completed)

    turnaround = [j.turnaround_time for j in completed]
    waiting = [j.waiting_time for j in completed]
    response = [j.response_time for j in completed]

    return ScheduleMetrics(
        job_count=n,
        cpu_busy_time=cpu_busy_time,
        makespan=makespan,
        cpu_utilization=cpu_busy_time / makespan * 100 if makespan > 0 else 0.0,
        throughput=n / makespan if makespan > 0 else 0.0,
        avg_turnaround=sum(turnaround) / n,
        min_turnaround=min(turnaround),
        max_turnaround=max(turnaround),
        avg_waiting=sum(waiting) / n,
        min_waiting=min(waiting),
        max_waiting=max(waiting),
        avg_response=sum(response) / n,
        min_response=min(response),
        max_response=max(response),
        context_switches=count_context_switches(completed),
    )


def count_context_switches(jobs: Sequence[CompletedJob]) -> int:
    # Every slice after a job's first one counts as a switch back to it.
    return sum(max(0, j.slice_count - 1) for j in jobs)


def utilization_rating(value: float, good: float = 70.0, excellent: float = 90.0) -> str:
    if value >= excellent:
        return "Excellent"
    if value >= good:
        return "Good"
    if value >= good * 0.7:
        return "Fair"
    if value >= good * 0.5:
        return "Poor"
    return "Very Poor"


def _rate_overhead(switches: int, low: float, moderate: float) -> str:
    if switches <= low:
        return "Low"
    if switches <= moderate:
        return "Moderate"
    return "High"


def performance_indicators(
    metrics: ScheduleMetrics,
    policy: str,
    preemptive: bool = False,
    quantum: Optional[int] = None,
) -> Dict[str, str]:
    """
    Qualitative reading of a metrics summary, for display next to the numbers.

    `policy` is an engine's policy family ("fcfs", "sjf", "priority" or "rr").
    Utilization and fairness are rated the same way for every policy; the
    remaining indicators and their thresholds depend on the policy.
    """
    n = metrics.job_count
    avg_burst = metrics.cpu_busy_time / n if n else 0.0
    waiting_spread = metrics.max_waiting - metrics.min_waiting

    if policy == "fcfs":
        balanced = waiting_spread <= 2
    else:
        balanced = waiting_spread <= metrics.avg_waiting * 0.5

    indicators = {
        "CPU utilization": utilization_rating(metrics.cpu_utilization),
        "Waiting time balance": "Good" if balanced else "Could be improved",
        "Fairness": (
            "Good"
            if metrics.max_turnaround - metrics.min_turnaround <= metrics.avg_turnaround * 0.3
            else "Varies significantly"
        ),
    }

    if policy == "priority":
        indicators["Priority balance"] = (
            "Low-priority jobs may be experiencing starvation"
            if waiting_spread > 2 * metrics.avg_waiting
            else "Good balance across priority levels"
        )

    if policy in ("sjf", "priority"):
        if preemptive:
            indicators["Preemption overhead"] = _rate_overhead(metrics.context_switches, n * 0.5, n)
        if metrics.avg_turnaround <= 1.2 * avg_burst:
            indicators["Algorithm efficiency"] = "Excellent"
        elif metrics.avg_turnaround <= 1.5 * avg_burst:
            indicators["Algorithm efficiency"] = "Good"
        else:
            indicators["Algorithm efficiency"] = "Fair"

    if policy == "rr":
        indicators["Context switching overhead"] = _rate_overhead(metrics.context_switches, n * 2, n * 4)
        if quantum is not None:
            if quantum < avg_burst * 0.3:
                indicators["Time quantum efficiency"] = "Too small"
            elif quantum <= avg_burst * 0.7:
                indicators["Time quantum efficiency"] = "Optimal"
            else:
                indicators["Time quantum efficiency"] = "Too large"

    return indicators
