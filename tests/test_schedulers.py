import pytest

from schedsim.algorithms import (
    ALGORITHMS,
    FCFSEngine,
    PriorityEngine,
    RoundRobinEngine,
    SJFEngine,
    build_engine,
    run_algorithm,
)
from schedsim.config import SimulationConfig
from schedsim.models import Process, TimeSlice


def _procs():
    return [
        Process("P1", arrival_time=0, burst_time=5, priority=2),
        Process("P2", arrival_time=1, burst_time=3, priority=1),
        Process("P3", arrival_time=2, burst_time=8, priority=3),
    ]


def _mixed():
    # Priorities, simultaneous arrivals and an idle gap before E/F.
    return [
        Process("A", arrival_time=0, burst_time=7, priority=3),
        Process("B", arrival_time=2, burst_time=4, priority=1),
        Process("C", arrival_time=4, burst_time=1, priority=4),
        Process("D", arrival_time=5, burst_time=4, priority=2),
        Process("E", arrival_time=20, burst_time=3, priority=1),
        Process("F", arrival_time=20, burst_time=2, priority=5),
    ]


def _slices(result):
    return [(s.job_id, s.start_time, s.end_time) for s in result.timeline]


def test_fcfs_order():
    res = run_algorithm("fcfs", _procs())
    assert [s.job_id for s in res.timeline] == ["P1", "P2", "P3"]
    waiting = {p.job_id: p.waiting_time for p in res.processes}
    assert waiting == {"P1": 0, "P2": 4, "P3": 6}


def test_fcfs_classic_scenario():
    engine = FCFSEngine()
    for job_id, arrival, burst in [("P1", 0, 5), ("P2", 1, 3), ("P3", 2, 8), ("P4", 3, 6)]:
        engine.add_job(job_id, arrival, burst)
    engine.execute()

    jobs = engine.get_completed_jobs()
    assert [j.completion_time for j in jobs] == [5, 8, 16, 22]
    assert [j.waiting_time for j in jobs] == [0, 4, 6, 13]
    assert engine.get_metrics().avg_waiting == pytest.approx(5.75)


def test_fcfs_equal_arrivals_keep_submission_order():
    engine = FCFSEngine()
    engine.add_job("late", 3, 1)
    engine.add_job("b", 0, 2)
    engine.add_job("a", 0, 2)
    engine.execute()
    assert [s.job_id for s in engine.get_all_time_slices()] == ["b", "a", "late"]


def test_fcfs_idle_gap_jumps_clock():
    engine = FCFSEngine()
    engine.add_job("A", 2, 3)
    engine.add_job("B", 10, 1)
    engine.execute()

    assert [(s.start_time, s.end_time) for s in engine.get_all_time_slices()] == [(2, 5), (10, 11)]
    metrics = engine.get_metrics()
    assert metrics.makespan == 9
    assert metrics.cpu_utilization == pytest.approx(4 / 9 * 100)


def test_fcfs_has_no_preemptive_mode():
    with pytest.raises(ValueError):
        FCFSEngine().set_mode(True)


def test_sjf_order():
    res = run_algorithm("sjf", _procs())
    # P1 is alone at t=0 and runs to completion, then P2 < P3.
    assert [s.job_id for s in res.timeline] == ["P1", "P2", "P3"]


def test_sjf_picks_shortest_arrived_job():
    engine = SJFEngine()
    engine.add_job("long", 0, 6)
    engine.add_job("mid", 1, 4)
    engine.add_job("short", 2, 1)
    engine.execute()
    assert [(s.job_id, s.start_time, s.end_time) for s in engine.get_all_time_slices()] == [
        ("long", 0, 6),
        ("short", 6, 7),
        ("mid", 7, 11),
    ]


def test_sjf_tie_breaks_on_arrival_then_submission():
    engine = SJFEngine()
    engine.add_job("A", 0, 4)
    engine.add_job("C", 2, 2)
    engine.add_job("B", 1, 2)
    engine.add_job("D", 1, 2)
    engine.execute()
    assert [s.job_id for s in engine.get_all_time_slices()] == ["A", "B", "D", "C"]


def test_srtf_preempts_on_shorter_remaining_time():
    engine = SJFEngine(preemptive=True)
    engine.add_job("A", 0, 5)
    engine.add_job("B", 2, 2)
    engine.execute()

    assert [(s.job_id, s.start_time, s.end_time) for s in engine.get_all_time_slices()] == [
        ("A", 0, 2),
        ("B", 2, 4),
        ("A", 4, 7),
    ]
    a = engine.get_job("A")
    assert a.start_time == 0
    assert a.completion_time == 7
    assert a.waiting_time == 2
    assert a.response_time == 0
    assert engine.get_job("B").waiting_time == 0
    assert engine.get_metrics().context_switches == 1


def test_srtf_equal_remaining_time_does_not_preempt():
    engine = SJFEngine(preemptive=True)
    engine.add_job("A", 0, 5)
    engine.add_job("B", 2, 3)
    engine.execute()

    # The arrival at t=2 closes A's slice but does not preempt it.
    assert [(s.job_id, s.start_time, s.end_time) for s in engine.get_all_time_slices()] == [
        ("A", 0, 2),
        ("A", 2, 5),
        ("B", 5, 8),
    ]
    a = engine.get_job("A")
    assert a.response_time == 0
    assert a.waiting_time == 0
    assert engine.get_metrics().context_switches == 1


def test_srtf_every_arrival_splits_the_running_slice():
    engine = SJFEngine(preemptive=True)
    engine.add_job("long", 0, 6)
    engine.add_job("x", 1, 9)
    engine.add_job("y", 3, 7)
    engine.execute()

    assert engine.get_job("long").execution_history == (
        TimeSlice("long", 0, 1),
        TimeSlice("long", 1, 3),
        TimeSlice("long", 3, 6),
    )
    assert [(s.job_id, s.start_time, s.end_time) for s in engine.get_all_time_slices()][3:] == [
        ("y", 6, 13),
        ("x", 13, 22),
    ]


def test_srtf_completes():
    res = run_algorithm("srtf", _procs())
    assert {p.job_id for p in res.processes} == {"P1", "P2", "P3"}
    assert res.metrics.cpu_busy_time == sum(p.burst_time for p in _procs())
    assert _slices(res) == [("P1", 0, 1), ("P2", 1, 2), ("P2", 2, 4), ("P1", 4, 8), ("P3", 8, 16)]


def test_priority_static():
    res = run_algorithm("priority", _procs())
    # P1 is alone at t=0; once it finishes P2 has the most urgent priority.
    assert res.timeline[0].job_id == "P1"
    assert res.timeline[1].job_id == "P2"


def test_priority_preemptive_interrupts_on_more_urgent_arrival():
    res = run_algorithm("priority-p", _procs())
    assert _slices(res) == [("P1", 0, 1), ("P2", 1, 2), ("P2", 2, 4), ("P1", 4, 8), ("P3", 8, 16)]
    p2 = next(p for p in res.processes if p.job_id == "P2")
    assert p2.response_time == 0


def test_priority_equal_priority_never_preempts():
    engine = PriorityEngine(preemptive=True)
    engine.add_job("A", 0, 4, priority=1)
    engine.add_job("B", 1, 2, priority=1)
    engine.execute()
    assert [(s.job_id, s.start_time, s.end_time) for s in engine.get_all_time_slices()] == [
        ("A", 0, 1),
        ("A", 1, 4),
        ("B", 4, 6),
    ]


def test_priority_missing_priority_runs_last():
    engine = PriorityEngine()
    engine.add_job("first", 0, 1, priority=5)
    engine.add_job("none", 0, 1)
    engine.add_job("urgent", 0, 1, priority=9)
    engine.execute()
    assert [s.job_id for s in engine.get_all_time_slices()] == ["first", "urgent", "none"]


def test_rr_quantum_2():
    res = run_algorithm("rr", _procs(), quantum=2)
    assert {s.job_id for s in res.timeline} == {"P1", "P2", "P3"}
    assert sum(p.burst_time for p in _procs()) == res.metrics.cpu_busy_time


def test_rr_classic_interleaving():
    engine = RoundRobinEngine(quantum=2)
    for job_id, arrival, burst in [("P1", 0, 5), ("P2", 1, 3), ("P3", 2, 8), ("P4", 5, 2), ("P5", 6, 4)]:
        engine.add_job(job_id, arrival, burst)
    engine.execute()

    assert [(s.job_id, s.start_time, s.end_time) for s in engine.get_all_time_slices()] == [
        ("P1", 0, 2),
        ("P2", 2, 4),
        ("P3", 4, 6),
        ("P1", 6, 8),
        ("P2", 8, 9),
        ("P4", 9, 11),
        ("P5", 11, 13),
        ("P3", 13, 15),
        ("P1", 15, 16),
        ("P5", 16, 18),
        ("P3", 18, 20),
        ("P3", 20, 22),
    ]

    jobs = {j.job_id: j for j in engine.get_completed_jobs()}
    assert {k: j.completion_time for k, j in jobs.items()} == {"P1": 16, "P2": 9, "P3": 22, "P4": 11, "P5": 18}
    assert {k: j.response_time for k, j in jobs.items()} == {"P1": 0, "P2": 1, "P3": 2, "P4": 4, "P5": 5}
    for job in jobs.values():
        assert job.slice_count == -(-job.burst_time // 2)

    assert engine.get_metrics().context_switches == sum(j.slice_count - 1 for j in jobs.values()) == 7


def test_rr_non_preemptive_runs_jobs_to_completion():
    engine = RoundRobinEngine(quantum=2, preemptive=False)
    for job_id, arrival, burst in [("P1", 0, 5), ("P2", 1, 3), ("P3", 2, 8), ("P4", 5, 2), ("P5", 6, 4)]:
        engine.add_job(job_id, arrival, burst)
    engine.execute()

    assert [(s.job_id, s.start_time, s.end_time) for s in engine.get_all_time_slices()] == [
        ("P1", 0, 5),
        ("P2", 5, 8),
        ("P3", 8, 16),
        ("P4", 16, 18),
        ("P5", 18, 22),
    ]
    assert engine.get_metrics().context_switches == 0


def test_rr_idle_until_next_arrival():
    engine = RoundRobinEngine(quantum=2)
    engine.add_job("A", 0, 1)
    engine.add_job("B", 5, 3)
    engine.execute()
    assert [(s.job_id, s.start_time, s.end_time) for s in engine.get_all_time_slices()] == [
        ("A", 0, 1),
        ("B", 5, 7),
        ("B", 7, 8),
    ]


@pytest.mark.parametrize("name", sorted(ALGORITHMS))
def test_work_is_conserved(name):
    res = run_algorithm(name, _mixed(), quantum=3)
    assert sum(s.duration for s in res.timeline) == sum(p.burst_time for p in _mixed())
    assert len(res.processes) == len(_mixed())


@pytest.mark.parametrize("name", sorted(ALGORITHMS))
def test_slices_never_overlap(name):
    res = run_algorithm(name, _mixed(), quantum=3)
    for prev, cur in zip(res.timeline, res.timeline[1:]):
        assert prev.end_time <= cur.start_time


@pytest.mark.parametrize("name", sorted(ALGORITHMS))
def test_per_job_metric_identities(name):
    res = run_algorithm(name, _mixed(), quantum=3)
    for job in res.processes:
        assert job.remaining_time == 0
        assert job.completion_time == job.execution_history[-1].end_time
        assert job.start_time == job.execution_history[0].start_time
        assert job.turnaround_time == job.completion_time - job.arrival_time
        assert job.waiting_time == job.turnaround_time - job.burst_time
        assert job.response_time == job.start_time - job.arrival_time
        assert min(job.turnaround_time, job.waiting_time, job.response_time) >= 0
        assert job.start_time >= job.arrival_time


@pytest.mark.parametrize("name", sorted(ALGORITHMS))
def test_reset_then_execute_is_reproducible(name):
    engine = build_engine(SimulationConfig(algorithm=name, quantum=3), _mixed())
    engine.execute()
    first_slices = engine.get_all_time_slices()
    first_jobs = engine.get_completed_jobs()
    first_metrics = engine.get_metrics()

    engine.reset()
    engine.execute()

    assert engine.get_all_time_slices() == first_slices
    assert engine.get_completed_jobs() == first_jobs
    assert engine.get_metrics() == first_metrics


def test_engine_rerun_under_other_mode():
    engine = SJFEngine()
    engine.add_job("A", 0, 5)
    engine.add_job("B", 2, 2)

    engine.execute()
    assert len(engine.get_job("A").execution_history) == 1

    engine.reset()
    engine.set_mode(True)
    engine.execute()
    assert len(engine.get_job("A").execution_history) == 2
    assert engine.mode_description() == "Preemptive Shortest Job First (SRTF)"


def test_rr_rerun_with_new_quantum():
    engine = RoundRobinEngine(quantum=1)
    engine.add_job("A", 0, 4)
    engine.execute()
    assert engine.get_job("A").slice_count == 4

    engine.reset()
    engine.set_quantum(4)
    engine.execute()
    assert engine.get_job("A").slice_count == 1


def test_runs_do_not_share_job_state():
    procs = _procs()
    first = run_algorithm("srtf", procs)
    second = run_algorithm("rr", procs, quantum=2)
    assert first.metrics.cpu_busy_time == second.metrics.cpu_busy_time == 16
    assert [p.burst_time for p in procs] == [5, 3, 8]


@pytest.mark.parametrize(
    "name, policy",
    [
        ("fcfs", "fcfs"),
        ("sjf", "sjf"),
        ("srtf", "sjf"),
        ("priority", "priority"),
        ("priority-p", "priority"),
        ("rr", "rr"),
        ("rr-np", "rr"),
    ],
)
def test_result_carries_policy_family(name, policy):
    assert run_algorithm(name, _procs(), quantum=2).policy == policy
