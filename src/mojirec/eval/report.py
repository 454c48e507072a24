"""Helpers to log evaluation summaries for trend tracking."""

from __future__ import annotations

import csv
from collections.abc import Mapping
from dataclasses import asdict, is_dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import orjson

from mojirec.eval.harness import EvalSummary


def summary_to_row(
    summary: EvalSummary | Mapping[str, object], source: str, tag: str | None = None
) -> dict:
    """Flatten EvalSummary into a CSV/JSONL-friendly row."""
    data: Mapping[str, Any] = asdict(summary) if isinstance(summary, EvalSummary) else summary
    counts = data.get("pair_counts") or {}
    return {
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "source": source,
        "tag": tag or "",
        "samples": int(data.get("samples") or 0),
        "top1_accuracy": float(data.get("top1_accuracy") or 0.0),
        "topn_hit_rate": float(data.get("topn_hit_rate") or 0.0),
        "average_best_credibility": float(data.get("average_best_credibility") or 0.0),
        "empty_results": int(data.get("empty_results") or 0),
        "pair_counts": orjson.dumps(dict(counts)).decode(),
        "notes": str(data.get("notes") or ""),
    }


def append_csv(path: Path, row: dict) -> None:
    """Append a row to a CSV file, writing headers when the file is new."""
    path.parent.mkdir(parents=True, exist_ok=True)
    is_new = not path.exists()
    with path.open("a", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=list(row.keys()))
        if is_new:
            writer.writeheader()
        writer.writerow(row)


def _default(obj: Any) -> Any:
    if is_dataclass(obj) and not isinstance(obj, type):
        return asdict(obj)
    raise TypeError(f"Cannot serialise {type(obj).__name__}")


def append_jsonl(path: Path, payload: dict) -> None:
    """Append a JSON line (UTF-8) to a log file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("ab") as f:
        f.write(orjson.dumps(payload, default=_default) + b"\n")
