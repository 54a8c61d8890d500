"""Run artifact helpers: export output and operational reporting."""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from typing import Any, Iterable


def _ensure_parent_dir(path: str) -> None:
    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)


def write_export_json(records: Iterable[dict[str, Any]], output_file: str) -> int:
    """Write exported file records as a JSON list and return the record count.

    Keys are written in insertion order so the output follows the
    record layout rather than alphabetical order.
    """
    payload = list(records)
    _ensure_parent_dir(output_file)
    with open(output_file, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)
        f.write("\n")
    return len(payload)


def write_export_error(error: dict[str, Any], output_file: str) -> str:
    """Write a structured error result in place of the export list."""
    _ensure_parent_dir(output_file)
    with open(output_file, "w", encoding="utf-8") as f:
        json.dump({"error": error}, f, indent=2, ensure_ascii=False)
        f.write("\n")
    return output_file


def write_run_report(
    report: dict[str, Any],
    run_id: str,
    output_dir: str = "output/run_reports",
) -> str:
    """Write a JSON run report and return its path."""
    os.makedirs(output_dir, exist_ok=True)
    payload = dict(report)
    payload.setdefault("run_id", run_id)
    payload.setdefault("timestamp_utc", datetime.now(timezone.utc).isoformat())
    path = os.path.join(output_dir, f"{run_id}.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, sort_keys=True)
    return path
