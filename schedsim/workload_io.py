from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import List, Mapping

from .models import Process


class WorkloadError(ValueError):
    """Raised when a workload file cannot be turned into processes."""


def load_workload(path: str | Path) -> List[Process]:
    """
    Load a workload from a JSON or CSV file into a list of Process objects.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        return _load_json(path)
    if suffix == ".csv":
        return _load_csv(path)

    raise WorkloadError(f"Unsupported workload format: {suffix} (use .json or .csv)")


def _load_json(path: Path) -> List[Process]:
    with path.open("r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as exc:
            raise WorkloadError(f"Invalid JSON in {path}: {exc}") from exc

    if not isinstance(raw, list):
        raise WorkloadError("JSON workload must be a list of job objects")

    return [_process_from_mapping(entry) for entry in raw]


def _load_csv(path: Path) -> List[Process]:
    processes: List[Process] = []
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            processes.append(_process_from_mapping(row))
    return processes


def _process_from_mapping(mapping: Mapping) -> Process:
    try:
        # Legacy workload files name the id column "pid".
        raw_id = mapping["job_id"] if "job_id" in mapping else mapping["pid"]
        job_id = str(raw_id).strip()
        arrival_time = int(mapping["arrival_time"])
        burst_time = int(mapping["burst_time"])
        priority_val = mapping.get("priority")
        priority = int(priority_val) if priority_val not in (None, "") else None
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise WorkloadError(f"Invalid job entry: {mapping!r}") from exc

    if not job_id:
        raise WorkloadError(f"Job entry without an id: {mapping!r}")

    return Process(
        job_id=job_id,
        arrival_time=arrival_time,
        burst_time=burst_time,
        priority=priority,
    )
