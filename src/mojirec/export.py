"""Writers for recovery outputs: JSONL for pipelines, Arrow IPC for analytics."""

from __future__ import annotations

import gzip
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import orjson
import pyarrow as pa

from mojirec.engine import BatchItem


def batch_to_records(items: Sequence[BatchItem]) -> list[dict[str, Any]]:
    """Flatten batch items into one row per input, best candidate inline."""
    rows: list[dict[str, Any]] = []
    for item in items:
        best = item.result
        rows.append(
            {
                "index": item.index,
                "original_text": item.original_text if isinstance(item.original_text, str) else repr(item.original_text),
                "success": item.success,
                "error": item.error,
                "source_encoding": best.source_encoding if best else None,
                "target_encoding": best.target_encoding if best else None,
                "recovered_text": best.recovered_text if best else None,
                "credibility": best.credibility if best else None,
                "method": best.method if best else None,
                "candidates": len(item.results),
            }
        )
    return rows


def results_to_jsonl(items: Sequence[BatchItem], path: Path, gzip_output: bool = False) -> None:
    """Write one JSON object per batch item, all candidates included."""
    path.parent.mkdir(parents=True, exist_ok=True)
    opener = gzip.open if gzip_output else open
    with opener(path, "wb") as handle:
        for item in items:
            handle.write(orjson.dumps(item.to_dict(), default=repr) + b"\n")


def results_to_arrow(items: Sequence[BatchItem], path: Path) -> None:
    """Write the flattened best-candidate rows to an Arrow IPC file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    rows = batch_to_records(items)
    schema = pa.schema(
        [
            ("index", pa.int64()),
            ("original_text", pa.string()),
            ("success", pa.bool_()),
            ("error", pa.string()),
            ("source_encoding", pa.string()),
            ("target_encoding", pa.string()),
            ("recovered_text", pa.string()),
            ("credibility", pa.float64()),
            ("method", pa.string()),
            ("candidates", pa.int64()),
        ]
    )
    table = pa.Table.from_pylist(rows, schema=schema)
    with pa.OSFile(str(path), "wb") as sink:
        with pa.ipc.new_file(sink, table.schema) as writer:
            writer.write_table(table)
