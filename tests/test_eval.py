from mojirec.data.generator import MojibakeSample
from mojirec.eval.harness import evaluate_corpus, evaluate_synthetic


def test_evaluate_synthetic_produces_summary():
    payload = evaluate_synthetic(count=4, seed=42)
    summary = payload["evaluation"]
    assert summary.samples == 4
    assert 0 <= summary.top1_accuracy <= summary.topn_hit_rate <= 1
    assert payload["generator"]["seed"] == 42
    assert len(payload["samples"]) == 4


def test_evaluate_corpus_scores_known_recovery():
    sample = MojibakeSample(
        garbled="HÃ¤llo WÃ¶rld",
        expected="Hällo Wörld",
        source_encoding="windows-1252",
        target_encoding="utf-8",
        category="western",
    )
    summary = evaluate_corpus([sample], {"strategy": "fast"})
    assert summary.samples == 1
    assert summary.top1_accuracy == 1.0
    assert summary.empty_results == 0
    assert summary.pair_counts == {"windows-1252->utf-8": 1}
    assert summary.examples[0].rank == 1
    assert summary.average_best_credibility > 30


def test_evaluate_corpus_counts_empty_results():
    sample = MojibakeSample(
        garbled="@" * 20,
        expected="unrecoverable",
        source_encoding="windows-1252",
        target_encoding="utf-8",
        category="western",
    )
    summary = evaluate_corpus([sample])
    assert summary.empty_results == 1
    assert summary.top1_accuracy == 0.0
    assert summary.examples[0].best_text is None


def test_evaluate_empty_corpus():
    summary = evaluate_corpus([])
    assert summary.samples == 0
    assert summary.top1_accuracy == 0.0
