"""Quick viewer for eval logs (CSV or JSONL).

Shows aggregate accuracy, sample totals, and best-pair counts in a Rich table.
"""

from __future__ import annotations

import argparse
import csv
from collections import Counter
from collections.abc import Iterable
from pathlib import Path

import orjson
from rich.console import Console
from rich.table import Table

from mojirec.eval.summarize import summarize_log


def _iter_entries(path: Path) -> Iterable[dict[str, object]]:
    if path.suffix.lower() == ".csv":
        with path.open(newline="", encoding="utf-8") as f:
            yield from csv.DictReader(f)
    else:
        with path.open("rb") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                yield orjson.loads(line)


def _tag_from_entry(entry: dict[str, object]) -> tuple[str, float]:
    tag = str(entry.get("tag") or "")
    accuracy = 0.0
    if "top1_accuracy" in entry:
        accuracy = float(entry["top1_accuracy"])  # type: ignore[arg-type]
    elif isinstance(entry.get("evaluation"), dict):
        accuracy = float(entry["evaluation"].get("top1_accuracy", 0.0))  # type: ignore[union-attr]
    return tag, accuracy


def main() -> None:
    parser = argparse.ArgumentParser(description="View eval logs.")
    parser.add_argument("log", type=Path, help="CSV or JSONL log file.")
    args = parser.parse_args()

    console = Console()
    summary = summarize_log(args.log)

    console.print("[bold]Aggregate[/]")
    console.print(
        f"- entries: {summary['entries']}, samples: {summary['samples_total']}, "
        f"avg top-1 accuracy: {summary['average_top1_accuracy']}, "
        f"avg best credibility: {summary['average_best_credibility']}"
    )

    pair_table = Table(title="Best-pair Counts")
    pair_table.add_column("Pair")
    pair_table.add_column("Count", justify="right")
    pair_counts = summary.get("pair_counts", {}) or {}
    for pair, count in sorted(pair_counts.items(), key=lambda kv: kv[1], reverse=True):
        pair_table.add_row(pair, str(count))
    console.print(pair_table)

    tag_counts: Counter[str] = Counter()
    tag_accuracy: Counter[str] = Counter()
    for entry in _iter_entries(args.log):
        tag, accuracy = _tag_from_entry(entry)
        if tag:
            tag_counts[tag] += 1
            tag_accuracy[tag] += accuracy
    if tag_counts:
        tag_table = Table(title="Tags")
        tag_table.add_column("Tag")
        tag_table.add_column("Entries", justify="right")
        tag_table.add_column("Avg Top-1", justify="right")
        for tag, count in tag_counts.most_common():
            avg = tag_accuracy[tag] / count if count else 0.0
            tag_table.add_row(tag, str(count), f"{avg:.4f}")
        console.print(tag_table)


if __name__ == "__main__":
    main()
