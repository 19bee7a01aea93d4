from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Iterable, List

from .errors import InvalidBatch
from .models import Process
from .registry import build_batch

logger = logging.getLogger(__name__)


def load_workload(path: str | Path) -> List[Process]:
    """
    Load a batch from a JSON or CSV file. Process ids follow file order.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        batch = build_batch(_load_json(path))
    elif suffix == ".csv":
        batch = build_batch(_load_csv(path))
    else:
        raise InvalidBatch(f"Unsupported workload format: {suffix} (use .json or .csv)")

    logger.info("Loaded %d processes from %s", len(batch), path)
    return batch


def _load_json(path: Path) -> list:
    try:
        with path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError as exc:
        raise InvalidBatch(f"{path}: invalid JSON ({exc})") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise InvalidBatch(f"Cannot read workload {path}: {exc}") from exc

    if not isinstance(raw, list):
        raise InvalidBatch("JSON workload must be a list of process objects")
    return raw


def _load_csv(path: Path) -> list:
    try:
        with path.open("r", encoding="utf-8", newline="") as f:
            return list(csv.DictReader(f))
    except (OSError, UnicodeDecodeError) as exc:
        raise InvalidBatch(f"Cannot read workload {path}: {exc}") from exc


def parse_process_specs(specs: Iterable[str]) -> List[Process]:
    """
    Build a batch from ``AT:BT[:PR]`` strings, e.g. ``["0:5:2", "1:3"]``.
    """
    records = []
    for spec in specs:
        parts = spec.split(":")
        if len(parts) not in (2, 3):
            raise InvalidBatch(f"Invalid process spec '{spec}' (expected AT:BT[:PR])")
        records.append(parts)
    return build_batch(records)
