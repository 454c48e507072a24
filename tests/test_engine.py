import logging
from dataclasses import replace

import pytest

from mojirec.catalog import EncodingCatalog
from mojirec.config import CatalogConfig
from mojirec.engine import (
    RecoveryEngine,
    RecoveryOptions,
    batch_recover,
    detect_categories,
    list_strategies,
    list_supported_encodings,
    quick_recover,
    recommended_pairs,
    recover,
    score_text,
)
from mojirec.errors import RecoveryInputError
from mojirec.transcoding import TranscodingTrial

GARBLED_CHINESE = "ä¸­æ–‡ä¹±ç"
GARBLED_GERMAN = "HÃ¤llo WÃ¶rld"


def _has_cjk(text: str) -> bool:
    return any("\u4e00" <= ch <= "\u9fff" for ch in text)


def test_recovers_utf8_chinese_read_as_windows_1252():
    results = recover(GARBLED_CHINESE, {"strategy": "balanced"})
    assert any(_has_cjk(r.recovered_text) and r.credibility > 50 for r in results)
    best = results[0]
    assert best.recovered_text.startswith("中文乱")
    assert (best.source_encoding, best.target_encoding) == ("windows-1252", "utf-8")
    assert best.method == "lenient"


def test_recovers_when_trailing_bytes_survive():
    results = recover(GARBLED_CHINESE + " ")
    assert results and results[0].recovered_text.startswith("中文乱")
    assert results[0].credibility > 50


def test_recovers_latin_text_with_fast_strategy():
    results = recover(GARBLED_GERMAN, {"strategy": "fast", "maxResults": 1})
    assert len(results) == 1
    assert results[0].recovered_text == "Hällo Wörld"
    assert results[0].source_encoding in {"windows-1252", "iso-8859-1"}
    assert results[0].target_encoding == "utf-8"
    assert results[0].method == "native"


def test_repeated_symbols_find_nothing():
    assert recover("@" * 20) == []


def test_clean_chinese_detection_keeps_every_category():
    assert detect_categories("这是中文") == ["chinese", "western", "japanese", "korean"]


def test_batch_captures_per_item_failures():
    items = batch_recover([GARBLED_CHINESE, 123])
    assert len(items) == 2
    assert items[0].success
    assert items[0].results
    assert items[0].result is items[0].results[0]
    assert items[1].success is False
    assert items[1].error
    assert items[1].original_text == 123
    assert items[1].index == 1


def test_batch_rejects_non_sequences():
    with pytest.raises(RecoveryInputError):
        batch_recover("not a list")
    with pytest.raises(RecoveryInputError):
        batch_recover(42)


def test_batch_item_without_results_is_not_success():
    items = batch_recover(["@" * 20])
    assert items[0].success is False
    assert items[0].error is None
    assert items[0].result is None
    assert items[0].to_dict()["result"] is None


def test_recover_validates_input():
    for bad in ("", None, 123, b"bytes"):
        with pytest.raises(RecoveryInputError):
            recover(bad)
    with pytest.raises(ValueError):
        recover("")


def test_results_sorted_bounded_and_above_threshold():
    for text in (GARBLED_CHINESE, GARBLED_GERMAN, "ÖÐÎÄ³ÌÐò", "plain text"):
        for options in (
            {"strategy": "aggressive", "max_results": 3, "min_credibility": 0},
            {"strategy": "balanced", "max_results": 5, "min_credibility": 40},
            {"strategy": "fast"},
        ):
            opts = RecoveryOptions.from_mapping(options)
            results = recover(text, opts)
            assert len(results) <= opts.max_results
            scores = [r.credibility for r in results]
            assert scores == sorted(scores, reverse=True)
            assert all(s >= opts.min_credibility for s in scores)
            assert all(r.recovered_text != text for r in results)
            keys = [(r.source_encoding, r.target_encoding) for r in results]
            assert len(keys) == len(set(keys))


def test_quick_recover_returns_single_result_or_none():
    result = quick_recover(GARBLED_GERMAN)
    assert result is not None
    assert result.recovered_text == "Hällo Wörld"
    assert quick_recover("@" * 20) is None
    with pytest.raises(RecoveryInputError):
        quick_recover("")


def test_parallel_trials_match_serial_results():
    serial = recover(GARBLED_CHINESE, {"strategy": "aggressive", "min_credibility": 0})
    parallel = recover(GARBLED_CHINESE, {"strategy": "aggressive", "min_credibility": 0, "workers": 4})
    assert [r.to_dict() for r in serial] == [r.to_dict() for r in parallel]


def test_options_are_normalized():
    opts = RecoveryOptions.from_mapping(
        {"maxResults": 500, "minCredibility": -5, "useRecommended": 0, "ignored": True}
    )
    assert opts.max_results == 100
    assert opts.min_credibility == 0
    assert opts.use_recommended is False
    assert RecoveryOptions.from_mapping({"commonEncodingsOnly": True}).strategy == "fast"
    assert RecoveryOptions.from_mapping({"commonEncodingsOnly": True, "strategy": "aggressive"}).strategy == "aggressive"
    assert RecoveryOptions(max_results=-3).normalized().max_results == 0
    assert RecoveryOptions(min_credibility=150).normalized().min_credibility == 150
    assert RecoveryOptions(strategy=" FAST ").normalized().strategy == "fast"


def test_zero_max_results_returns_nothing():
    assert recover(GARBLED_GERMAN, {"maxResults": 0}) == []
    assert batch_recover([GARBLED_GERMAN], {"max_results": 0})[0].results == []


def test_threshold_above_hundred_keeps_nothing():
    assert recover(GARBLED_GERMAN, {"strategy": "fast", "minCredibility": 150}) == []


def test_unknown_category_leaves_only_dynamic_pairs(caplog):
    engine = RecoveryEngine()
    with caplog.at_level(logging.WARNING, logger="mojirec.engine"):
        assert engine.recover(GARBLED_GERMAN, {"category": "klingon", "use_recommended": False}) == []
    assert "klingon" in caplog.text

    results = engine.recover(
        GARBLED_GERMAN,
        {"category": "klingon", "use_recommended": False, "strategy": "aggressive", "min_credibility": 0},
    )
    assert all(r.category == "dynamic" for r in results)
    assert all(p.category == "dynamic" for p in engine.recommended_pairs(GARBLED_GERMAN, {"category": "klingon"}))


def test_equal_scores_keep_candidate_order():
    def append_mark(text, source, target):
        return text + "!"

    engine = RecoveryEngine(trial=TranscodingTrial(steps=[("marked", append_mark)]))
    options = RecoveryOptions(min_credibility=0, max_results=100, use_recommended=False)
    expected = [p.key for p in engine.candidate_pairs("Hello world", options)]
    assert len(expected) > 1

    for workers in (1, 4):
        results = engine.recover("Hello world", replace(options, workers=workers))
        assert len({r.credibility for r in results}) == 1
        assert [(r.source_encoding, r.target_encoding) for r in results] == expected
        assert all(r.method == "marked" for r in results)


def test_category_filter_restricts_pairs():
    engine = RecoveryEngine()
    results = engine.recover(GARBLED_GERMAN, {"category": "western", "use_recommended": False})
    assert results
    assert all(r.category == "western" for r in results)


def test_unknown_strategy_falls_back_to_balanced():
    engine = RecoveryEngine()
    assert [r.to_dict() for r in engine.recover(GARBLED_CHINESE, {"strategy": "turbo"})] == [
        r.to_dict() for r in engine.recover(GARBLED_CHINESE, {"strategy": "balanced"})
    ]


def test_unsupported_encodings_are_skipped(caplog):
    config = CatalogConfig.from_mapping(
        {
            "supportedEncodings": {"western": ["windows-1252", "x-bogus"], "unicode": ["utf-8"]},
            "commonPairs": [
                {"sourceEncoding": "x-bogus", "targetEncoding": "utf-8", "category": "western", "priority": 1},
                {"sourceEncoding": "windows-1252", "targetEncoding": "utf-8", "category": "western", "priority": 2},
            ],
            "conversionStrategies": {"fast": {"maxAttempts": 8}, "balanced": {"maxAttempts": 40}},
            "scoring": {"short_text_score": 77},
        }
    )
    with caplog.at_level(logging.WARNING, logger="mojirec.catalog"):
        engine = RecoveryEngine(catalog=EncodingCatalog(config))
    assert "x-bogus" in caplog.text
    assert engine.scorer.config.short_text_score == 77

    results = engine.recover(GARBLED_GERMAN, {"use_recommended": False})
    assert [r.source_encoding for r in results] == ["windows-1252"]


def test_result_to_dict_is_json_ready():
    payload = recover(GARBLED_GERMAN, {"strategy": "fast"})[0].to_dict()
    assert payload["recovered_text"] == "Hällo Wörld"
    assert payload["details"]["primary_language"] in {"english", "unknown", "mixed", "chinese"}
    assert payload["details"]["stats"]["length"] == 11


def test_public_surface_helpers():
    assert list_strategies() == ["fast", "balanced", "aggressive"]
    assert list_supported_encodings("japanese") == ["shift_jis", "euc-jp"]
    assert score_text("").score == 0
    pairs = recommended_pairs(GARBLED_CHINESE, {"strategy": "fast"})
    assert pairs and all(p.category == "chinese" for p in pairs)
    engine = RecoveryEngine()
    assert engine.get_encoding_info("GBK")["category"] == "chinese"
    assert engine.is_encoding_supported("cp949")
    assert not engine.is_encoding_supported("klingon")
    assert "korean" in engine.list_categories()
