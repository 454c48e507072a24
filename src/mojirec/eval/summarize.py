"""Summaries over eval logs (CSV or JSONL)."""

from __future__ import annotations

import csv
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import orjson


def _iter_csv(path: Path) -> Iterator[dict[str, str]]:
    with path.open(newline="", encoding="utf-8") as f:
        yield from csv.DictReader(f)


def _iter_jsonl(path: Path) -> Iterator[dict[str, Any]]:
    with path.open("rb") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            yield orjson.loads(line)


def summarize_log(path: Path) -> dict[str, object]:
    """Aggregate accuracy and credibility trends from a CSV/JSONL log."""
    accuracies: list[float] = []
    credibilities: list[float] = []
    samples_total = 0
    empty_total = 0
    pair_counts: dict[str, int] = {}

    iterator = _iter_csv(path) if path.suffix.lower() == ".csv" else _iter_jsonl(path)

    for entry in iterator:
        # Rows written by the CLI nest the summary under "evaluation".
        if isinstance(entry.get("evaluation"), dict):
            entry = entry["evaluation"]
        if "top1_accuracy" in entry:
            accuracies.append(float(entry["top1_accuracy"]))
        if "average_best_credibility" in entry:
            credibilities.append(float(entry["average_best_credibility"]))
        samples_total += int(entry.get("samples") or 0)
        empty_total += int(entry.get("empty_results") or 0)

        counts_raw = entry.get("pair_counts")
        if counts_raw:
            counts = orjson.loads(counts_raw) if isinstance(counts_raw, str) else counts_raw
            for pair, n in counts.items():
                pair_counts[pair] = pair_counts.get(pair, 0) + int(n)

    return {
        "entries": len(accuracies),
        "samples_total": samples_total,
        "empty_results_total": empty_total,
        "average_top1_accuracy": round(sum(accuracies) / len(accuracies), 4) if accuracies else 0.0,
        "average_best_credibility": round(sum(credibilities) / len(credibilities), 2)
        if credibilities
        else 0.0,
        "pair_counts": pair_counts,
    }
