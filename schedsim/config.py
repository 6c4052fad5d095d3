from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .errors import InvalidQuantum

DEFAULT_QUANTUM = 2

# CLI name -> description. Engines and default modes live in algorithms.ALGORITHMS.
ALGORITHM_NAMES = {
    "fcfs": "First-Come First-Served",
    "sjf": "Shortest Job First (non-preemptive)",
    "srtf": "Shortest Remaining Time First (preemptive SJF)",
    "priority": "Priority (non-preemptive)",
    "priority-p": "Priority (preemptive)",
    "rr": "Round Robin (preemptive)",
    "rr-np": "Round Robin (non-preemptive)",
}

DEFAULT_COMPARE_ALGORITHMS = ["fcfs", "sjf", "srtf", "priority", "priority-p", "rr"]


@dataclass
class SimulationConfig:
    """
    Which engine to build and how to configure it.

    preemptive=None keeps the mode implied by the algorithm name; quantum is
    only consulted by Round Robin and defaults to DEFAULT_QUANTUM there.
    """

    algorithm: str
    preemptive: Optional[bool] = None
    quantum: Optional[int] = None

    def __post_init__(self) -> None:
        self.algorithm = self.algorithm.lower()
        if self.algorithm not in ALGORITHM_NAMES:
            known = ", ".join(ALGORITHM_NAMES)
            raise ValueError(f"Unknown algorithm '{self.algorithm}' (choose from: {known})")
        if self.quantum is not None and self.quantum <= 0:
            raise InvalidQuantum("Time quantum must be positive", field="quantum", value=self.quantum)

    @property
    def uses_quantum(self) -> bool:
        return self.algorithm in {"rr", "rr-np"}
