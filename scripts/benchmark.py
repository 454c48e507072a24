"""Micro-benchmarks for the recovery engine on synthetic mojibake."""

from __future__ import annotations

import time

from mojirec.data.generator import generate_mojibake_corpus
from mojirec.engine import RecoveryEngine


def benchmark_recover(samples: int = 50, runs: int = 3, strategy: str = "balanced") -> dict[str, float]:
    corpus = generate_mojibake_corpus(count=samples)
    engine = RecoveryEngine()
    best = None
    for _ in range(runs):
        start = time.perf_counter()
        for sample in corpus:
            engine.recover(sample.garbled, {"strategy": strategy})
        elapsed = time.perf_counter() - start
        best = elapsed if best is None or elapsed < best else best
    per_second = len(corpus) / best if best else 0.0
    return {"samples": len(corpus), "best_seconds": best or 0.0, "texts_per_second": per_second}


if __name__ == "__main__":
    for name in ("fast", "balanced", "aggressive"):
        print(name, benchmark_recover(strategy=name))
