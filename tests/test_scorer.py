import pytest

from mojirec.frequency import FrequencyModel
from mojirec.scorer import CredibilityScorer, ScoringConfig, TextStats

SAMPLES = [
    "这是一个测试。",
    "Hello world, this is a simple test.",
    "Hello 你好 world 世界",
    "HÃ¤llo WÃ¶rld",
    "ä¸­æ–‡ä¹±ç",
    "\ufffd" * 6,
    "@" * 20,
    "a" * 16,
    "???",
    "123456789",
    "àáâãäåæçèé",
    "   ",
    "，。！？",
    "涓枃涔辩爜",
    "x",
]


def test_scores_and_components_stay_in_range():
    scorer = CredibilityScorer()
    for text in SAMPLES:
        report = scorer.score(text)
        for value in (
            report.score,
            report.frequency_score,
            report.language_score,
            report.structure_score,
        ):
            assert 0 <= value <= 100, text


def test_stats_ratios_are_bounded_and_disjoint():
    for text in SAMPLES:
        stats = TextStats.from_text(text)
        for ratio in (stats.chinese_ratio, stats.latin_ratio, stats.symbol_ratio, stats.letter_ratio):
            assert 0 <= ratio <= 1
        assert stats.chinese_ratio + stats.latin_ratio + stats.symbol_ratio <= 1
        assert (
            stats.chinese_count
            + stats.latin_count
            + stats.digit_count
            + stats.punctuation_count
            + stats.whitespace_count
            + stats.symbol_count
            <= stats.length
        )


def test_scoring_is_deterministic():
    scorer = CredibilityScorer()
    assert scorer.score("中文乱码测试") == scorer.score("中文乱码测试")


def test_empty_and_non_text_inputs_score_zero():
    scorer = CredibilityScorer()
    empty = scorer.score("")
    assert empty.score == 0
    assert empty.error
    assert empty.stats.length == 0
    assert empty.primary_language == "unknown"
    for value in (None, 123, b"bytes"):
        report = scorer.score(value)
        assert report.score == 0
        assert report.error


def test_clean_chinese_scores_high():
    report = CredibilityScorer().score("这是一个测试。")
    assert report.primary_language == "chinese"
    assert report.language_score == 92
    assert report.score > 70


def test_clean_chinese_beats_its_gbk_misread():
    scorer = CredibilityScorer()
    assert scorer.score("中文乱码测试").score > scorer.score("涓枃涔辩爜").score


def test_primary_language_classification():
    scorer = CredibilityScorer()
    assert scorer.primary_language(TextStats.from_text("Hello 你好 world 世界")) == "mixed"
    assert scorer.primary_language(TextStats.from_text("中文乱码测试")) == "chinese"
    assert scorer.primary_language(TextStats.from_text("Internationalization")) == "english"
    assert scorer.primary_language(TextStats.from_text("12345")) == "unknown"


def test_short_text_gets_neutral_language_score():
    scorer = CredibilityScorer()
    stats = TextStats.from_text("abc")
    assert scorer.language_score("abc", stats, scorer.primary_language(stats)) == 50


def test_invalid_sequences_reduce_language_score():
    scorer = CredibilityScorer()
    text = "ab ÃƒÂ© cd ÃƒÂ¨ ef"
    stats = TextStats.from_text(text)
    assert scorer.language_score(text, stats, scorer.primary_language(stats)) == 20


def test_repeated_single_character_is_capped():
    report = CredibilityScorer().score("a" * 16)
    assert report.language_score == 10
    assert report.score <= 30


def test_symbol_only_text_is_capped():
    scorer = CredibilityScorer()
    assert scorer.score("@" * 20).score <= 25
    assert scorer.score("@@@@####$$$$%%%%").score <= 25


def test_replacement_garbage_scores_low():
    report = CredibilityScorer().score("\ufffd" * 6)
    assert report.score < 30
    assert report.frequency_score == 0


def test_accented_latin_is_rescued_from_zero():
    assert CredibilityScorer().score("àáâãäåæçèé").score == 10


def test_garbled_patterns_reduce_structure_score():
    scorer = CredibilityScorer()
    clean = scorer.structure_score("hello there", TextStats.from_text("hello there"))
    noisy = scorer.structure_score("hello \ufffd there", TextStats.from_text("hello \ufffd there"))
    assert noisy < clean


def test_rare_ideographs_are_penalised():
    model = FrequencyModel.from_tables({"中": 500, "罕": 1})
    scorer = CredibilityScorer(frequency=model)
    assert scorer.frequency_score("中中罕") < scorer.frequency_score("中中中")
    # unknown ideographs are not averaged but still penalised
    assert scorer.frequency_score("中未") < scorer.frequency_score("中")


def test_unrecognised_text_has_zero_frequency_score():
    assert CredibilityScorer().frequency_score("@#$%") == 0


def test_scoring_config_from_mapping():
    config = ScoringConfig.from_mapping({"frequency_weight": "0.5", "short_text_length": 3})
    assert config.frequency_weight == 0.5
    assert config.short_text_length == 3
    assert isinstance(config.short_text_length, int)
    with pytest.raises(ValueError):
        ScoringConfig.from_mapping({"not_a_setting": 1})


def test_custom_config_changes_scores():
    scorer = CredibilityScorer(config=ScoringConfig(short_text_score=70))
    stats = TextStats.from_text("abc")
    assert scorer.language_score("abc", stats, "unknown") == 70


def test_report_to_dict():
    payload = CredibilityScorer().score("中文").to_dict()
    assert set(payload) >= {"score", "frequency_score", "language_score", "structure_score", "stats"}
    assert payload["stats"]["chinese_count"] == 2
