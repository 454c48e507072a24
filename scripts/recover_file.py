"""Recover every line of a text file into JSONL and Arrow outputs."""

from __future__ import annotations

from pathlib import Path

import orjson

from mojirec.engine import RecoveryEngine
from mojirec.export import results_to_arrow, results_to_jsonl


def recover_file(input_path: Path, output_dir: Path, strategy: str = "balanced") -> dict:
    lines = [line for line in input_path.read_text(encoding="utf-8").splitlines() if line.strip()]
    items = RecoveryEngine().batch_recover(lines, {"strategy": strategy, "max_results": 3})

    output_dir.mkdir(parents=True, exist_ok=True)
    jsonl_path = output_dir / f"{input_path.stem}_recovered.jsonl"
    arrow_path = output_dir / f"{input_path.stem}_recovered.arrow"

    results_to_jsonl(items, jsonl_path)
    results_to_arrow(items, arrow_path)

    return {
        "input": str(input_path),
        "lines": len(items),
        "recovered": sum(1 for item in items if item.success),
        "jsonl": str(jsonl_path),
        "arrow": str(arrow_path),
    }


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Recover mojibake line by line.")
    parser.add_argument("input", type=Path, help="UTF-8 text file, one garbled string per line.")
    parser.add_argument(
        "--output-dir", type=Path, default=Path("artifacts/recovered"), help="Where to write outputs."
    )
    parser.add_argument("--strategy", default="balanced", help="fast | balanced | aggressive.")
    args = parser.parse_args()

    summary = recover_file(args.input, args.output_dir, strategy=args.strategy)
    print(orjson.dumps(summary, option=orjson.OPT_INDENT_2).decode())
