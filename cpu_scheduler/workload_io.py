from __future__ import annotations

import csv
import json
import re
from pathlib import Path
from typing import Iterable, List

from .models import Process

_LEADING_ZEROS = re.compile(r"^0+(?=\d)")


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

    raise ValueError(f"Unsupported workload format: {suffix} (use .json or .csv)")


def default_processes() -> List[Process]:
    """The three-process demo workload used when no file is given."""
    return [
        Process("P1", arrival_time=0, burst_time=5, priority=1),
        Process("P2", arrival_time=0, burst_time=2, priority=3),
        Process("P3", arrival_time=0, burst_time=4, priority=2),
    ]


def next_process_name(existing: Iterable[Process]) -> str:
    return f"P{len(list(existing)) + 1}"


def coerce_int(value, *, clamp: bool = True) -> int:
    """
    Coerce a form/file value to an integer.

    Blank values become 0 and leading zeros are stripped. With ``clamp``,
    negative values are raised to 0.
    """
    if value is None:
        return 0
    if isinstance(value, bool):
        raise ValueError(f"Not an integer: {value!r}")
    if isinstance(value, int):
        number = value
    else:
        text = str(value).strip()
        if not text:
            return 0
        sign = ""
        if text[0] in "+-":
            sign, text = text[0], text[1:]
        text = _LEADING_ZEROS.sub("", text)
        if not text.isdigit():
            raise ValueError(f"Not an integer: {value!r}")
        number = int(sign + text)

    if clamp and number < 0:
        return 0
    return number


def _load_json(path: Path) -> List[Process]:
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, list):
        raise ValueError("JSON workload must be a list of process objects")

    processes: List[Process] = []
    for entry in raw:
        processes.append(_process_from_mapping(entry))

    return processes


def _load_csv(path: Path) -> List[Process]:
    processes: List[Process] = []
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            processes.append(_process_from_mapping(row))
    return processes


def _process_from_mapping(mapping) -> Process:
    try:
        name = mapping.get("name") or mapping.get("pid")
        if name is None or not str(name).strip():
            raise KeyError("name")
        arrival_time = coerce_int(mapping.get("arrival_time"))
        burst_time = coerce_int(mapping.get("burst_time"))
        priority = coerce_int(mapping.get("priority"), clamp=False)
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Invalid process entry: {mapping!r}") from exc

    return Process(
        name=str(name).strip(),
        arrival_time=arrival_time,
        burst_time=burst_time,
        priority=priority,
    )
