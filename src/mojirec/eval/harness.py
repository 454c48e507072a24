"""Calibration harness for the recovery engine.

Purpose:
- Measure how often the top-ranked recovery is the original sentence.
- Track average best credibility so scoring-constant changes can be compared.
- Run on the synthetic corpus or on any labelled sample list.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field

from mojirec.data.generator import MojibakeSample, generate_mojibake_corpus
from mojirec.engine import OptionsLike, RecoveryEngine, coerce_options


@dataclass
class SampleEval:
    garbled: str
    expected: str
    best_text: str | None
    best_credibility: float
    rank: int | None


@dataclass
class EvalSummary:
    samples: int
    top1_accuracy: float
    topn_hit_rate: float
    average_best_credibility: float
    empty_results: int
    pair_counts: dict[str, int]
    examples: list[SampleEval] = field(default_factory=list)
    notes: str = ""


def evaluate_corpus(
    samples: Sequence[MojibakeSample],
    options: OptionsLike = None,
    *,
    engine: RecoveryEngine | None = None,
    example_limit: int = 3,
) -> EvalSummary:
    """Run every sample through the engine and aggregate ranking quality."""
    runner = engine or RecoveryEngine()
    opts = coerce_options(options)
    top1 = hits = empty = 0
    credibilities: list[float] = []
    pair_counts: Counter[str] = Counter()
    examples: list[SampleEval] = []

    for sample in samples:
        results = runner.recover(sample.garbled, opts)
        rank = next(
            (i + 1 for i, r in enumerate(results) if r.recovered_text == sample.expected), None
        )
        if not results:
            empty += 1
        else:
            credibilities.append(results[0].credibility)
            best = results[0]
            pair_counts[f"{best.source_encoding}->{best.target_encoding}"] += 1
        if rank == 1:
            top1 += 1
        if rank is not None:
            hits += 1
        if len(examples) < example_limit:
            examples.append(
                SampleEval(
                    garbled=sample.garbled,
                    expected=sample.expected,
                    best_text=results[0].recovered_text if results else None,
                    best_credibility=results[0].credibility if results else 0.0,
                    rank=rank,
                )
            )

    total = len(samples)
    return EvalSummary(
        samples=total,
        top1_accuracy=round(top1 / total, 4) if total else 0.0,
        topn_hit_rate=round(hits / total, 4) if total else 0.0,
        average_best_credibility=round(sum(credibilities) / len(credibilities), 2)
        if credibilities
        else 0.0,
        empty_results=empty,
        pair_counts=dict(pair_counts),
        examples=examples,
        notes=f"strategy={opts.strategy} min_credibility={opts.min_credibility}",
    )


def evaluate_synthetic(
    count: int = 16,
    seed: int = 1234,
    options: OptionsLike = None,
    *,
    engine: RecoveryEngine | None = None,
) -> dict[str, object]:
    """Generate a synthetic corpus and return evaluation plus generator metadata."""
    samples = generate_mojibake_corpus(count=count, seed=seed)
    summary = evaluate_corpus(samples, options, engine=engine)
    return {
        "generator": {"count": count, "seed": seed},
        "evaluation": summary,
        "samples": [s.to_dict() for s in samples],
    }
