"""Credibility scoring: how much does a string look like real language?

The score blends three components, each clamped to [0, 100]:

- frequency: mean log-frequency of recognised characters, minus penalties for
  rare or unknown ideographs and long single-character runs.
- language: consistency of the dominant script, with penalties for runs of
  characters outside every recognised class.
- structure: punctuation and whitespace shares, repeated runs, and known
  garbling patterns (replacement characters, "???", long symbol runs).

Override rules run after blending so accented Latin is never scored as pure
noise, and symbol-only or single-character strings are never credible prose.
All weights and thresholds live in ``ScoringConfig``.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from dataclasses import asdict, dataclass, fields, replace
from typing import Any

from mojirec.frequency import FrequencyModel, default_frequency_model

CJK_RANGE = "\u4e00-\u9fff"
WORD_CHARS = "A-Za-z0-9_"
CHINESE_PUNCTUATION = "，。、？！：；“”‘’（）【】《》"
ASCII_PUNCTUATION = ".,!?;:\"'()\\[\\]"
RECOGNIZED = f"{CJK_RANGE}{WORD_CHARS}\\s{CHINESE_PUNCTUATION}{ASCII_PUNCTUATION}"

_CJK = re.compile(f"[{CJK_RANGE}]")
_LATIN = re.compile("[A-Za-z]")
_DIGIT = re.compile("[0-9]")
_PUNCT = re.compile(f"[{CHINESE_PUNCTUATION}{ASCII_PUNCTUATION}]")
_SPACE = re.compile(r"\s")
_SYMBOL = re.compile(f"[^{RECOGNIZED}]")
_REPLACEMENT_RUN = re.compile("\ufffd+")
_QUESTION_RUN = re.compile(r"\?{3,}")

CHINESE = "chinese"
ENGLISH = "english"
MIXED = "mixed"
UNKNOWN = "unknown"


@dataclass(frozen=True)
class ScoringConfig:
    """Tunable weights, thresholds and caps for the credibility heuristic."""

    frequency_weight: float = 0.45
    language_weight: float = 0.30
    structure_weight: float = 0.25

    # frequency component
    frequency_scale: float = 15.0
    low_frequency_threshold: int = 3
    low_frequency_penalty_scale: float = 10.0
    low_frequency_penalty_cap: float = 10.0
    zero_frequency_penalty_scale: float = 20.0
    zero_frequency_penalty_cap: float = 15.0
    frequency_repeat_min_run: int = 6
    frequency_repeat_penalty_per_char: float = 2.0
    frequency_repeat_penalty_cap: float = 30.0

    # language component
    short_text_length: int = 5
    short_text_score: float = 50.0
    invalid_sequence_min_run: int = 3
    invalid_sequence_base: float = 40.0
    invalid_sequence_penalty: float = 10.0
    repeated_text_min_run: int = 6
    repeated_text_score: float = 10.0
    chinese_ratio_threshold: float = 0.3
    chinese_score: float = 92.0
    english_ratio_threshold: float = 0.5
    english_score: float = 90.0
    mixed_ratio_threshold: float = 0.4
    mixed_score: float = 80.0
    default_language_score: float = 40.0

    # structure component
    structure_base: float = 55.0
    punctuation_min_ratio: float = 0.01
    punctuation_max_ratio: float = 0.3
    punctuation_bonus: float = 30.0
    punctuation_excess_ratio: float = 0.5
    punctuation_penalty: float = 25.0
    structure_repeat_min_run: int = 4
    structure_repeat_step: float = 10.0
    structure_repeat_cap: float = 50.0
    garbled_run_min_length: int = 5
    garbled_pattern_penalty: float = 15.0
    whitespace_min_ratio: float = 0.05
    whitespace_max_ratio: float = 0.5
    whitespace_bonus: float = 10.0
    symbol_ratio_threshold: float = 0.2
    symbol_penalty_scale: float = 80.0
    symbol_penalty_cap: float = 60.0
    no_letters_penalty: float = 20.0

    # primary language
    mixed_min_ratio: float = 0.08
    chinese_primary_ratio: float = 0.4
    english_primary_ratio: float = 0.8

    # overrides
    rescue_letter_ratio: float = 0.8
    rescue_floor: float = 10.0
    symbol_only_cap: float = 25.0
    repeated_cap_min_run: int = 8
    repeated_cap: float = 30.0

    @staticmethod
    def from_mapping(payload: Mapping[str, Any]) -> ScoringConfig:
        """Build a config from a partial mapping; unknown keys raise ValueError."""
        known = {f.name for f in fields(ScoringConfig)}
        unknown = sorted(set(payload) - set(known))
        if unknown:
            raise ValueError(f"Unknown scoring settings: {', '.join(unknown)}")
        base = ScoringConfig()
        updates = {
            name: (int(value) if isinstance(getattr(base, name), int) else float(value))
            for name, value in payload.items()
        }
        return replace(base, **updates)


@dataclass(frozen=True)
class TextStats:
    length: int = 0
    chinese_count: int = 0
    latin_count: int = 0
    digit_count: int = 0
    punctuation_count: int = 0
    whitespace_count: int = 0
    symbol_count: int = 0
    letter_count: int = 0
    chinese_ratio: float = 0.0
    latin_ratio: float = 0.0
    symbol_ratio: float = 0.0
    letter_ratio: float = 0.0

    @staticmethod
    def from_text(text: str) -> TextStats:
        length = len(text)
        if not length:
            return TextStats()
        chinese = len(_CJK.findall(text))
        latin = len(_LATIN.findall(text))
        symbols = len(_SYMBOL.findall(text))
        letters = sum(1 for ch in text if ch.isalpha())
        return TextStats(
            length=length,
            chinese_count=chinese,
            latin_count=latin,
            digit_count=len(_DIGIT.findall(text)),
            punctuation_count=len(_PUNCT.findall(text)),
            whitespace_count=len(_SPACE.findall(text)),
            symbol_count=symbols,
            letter_count=letters,
            chinese_ratio=chinese / length,
            latin_ratio=latin / length,
            symbol_ratio=symbols / length,
            letter_ratio=letters / length,
        )


@dataclass(frozen=True)
class CredibilityReport:
    score: float
    frequency_score: float
    language_score: float
    structure_score: float
    stats: TextStats
    primary_language: str
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


class CredibilityScorer:
    """Deterministic 0-100 plausibility score for any input; never raises."""

    def __init__(
        self,
        frequency: FrequencyModel | None = None,
        config: ScoringConfig | None = None,
    ) -> None:
        self.frequency = frequency or default_frequency_model()
        self.config = config or ScoringConfig()
        cfg = self.config
        self._freq_repeat = re.compile(r"(.)\1{%d,}" % (cfg.frequency_repeat_min_run - 1), re.S)
        self._struct_repeat = re.compile(r"(.)\1{%d,}" % (cfg.structure_repeat_min_run - 1), re.S)
        self._single_repeat = re.compile(r"(.)\1{%d,}" % (cfg.repeated_text_min_run - 1), re.S)
        self._capped_repeat = re.compile(r"(.)\1{%d,}" % (cfg.repeated_cap_min_run - 1), re.S)
        self._invalid_run = re.compile(f"[^{RECOGNIZED}]{{{cfg.invalid_sequence_min_run},}}")
        self._garbled_run = re.compile(f"[^{RECOGNIZED}]{{{cfg.garbled_run_min_length},}}")

    def score(self, text: object) -> CredibilityReport:
        if not isinstance(text, str):
            return self._empty_report("invalid input: expected text")
        if not text:
            return self._empty_report("empty input")

        cfg = self.config
        stats = TextStats.from_text(text)
        language = self.primary_language(stats)
        frequency_score = self.frequency_score(text)
        language_score = self.language_score(text, stats, language)
        structure_score = self.structure_score(text, stats)

        total = _clamp(
            frequency_score * cfg.frequency_weight
            + language_score * cfg.language_weight
            + structure_score * cfg.structure_weight
        )
        if stats.letter_ratio > cfg.rescue_letter_ratio and total < cfg.rescue_floor:
            total = cfg.rescue_floor
        if stats.chinese_count == 0 and stats.latin_count == 0 and stats.symbol_ratio > cfg.symbol_ratio_threshold:
            total = min(total, cfg.symbol_only_cap)
        if self._capped_repeat.fullmatch(text):
            total = min(total, cfg.repeated_cap)

        return CredibilityReport(
            score=round(total, 2),
            frequency_score=round(frequency_score, 2),
            language_score=round(language_score, 2),
            structure_score=round(structure_score, 2),
            stats=stats,
            primary_language=language,
        )

    def _empty_report(self, reason: str) -> CredibilityReport:
        return CredibilityReport(
            score=0.0,
            frequency_score=0.0,
            language_score=0.0,
            structure_score=0.0,
            stats=TextStats(),
            primary_language=UNKNOWN,
            error=reason,
        )

    def frequency_score(self, text: str) -> float:
        if not text:
            return 0.0
        cfg = self.config
        total = 0.0
        recognized = 0
        chinese_total = low = zero = 0
        for char in text:
            freq = self.frequency.get(char)
            if freq:
                total += math.log(freq + 1)
                recognized += 1
            if _CJK.match(char):
                chinese_total += 1
                cjk_freq = self.frequency.chinese_frequency(char)
                if cjk_freq == 0:
                    zero += 1
                elif cjk_freq < cfg.low_frequency_threshold:
                    low += 1
        if recognized == 0:
            return 0.0

        score = min(100.0, total / recognized * cfg.frequency_scale)
        if chinese_total and low:
            score -= min(cfg.low_frequency_penalty_cap, low / chinese_total * cfg.low_frequency_penalty_scale)
        if chinese_total and zero:
            score -= min(
                cfg.zero_frequency_penalty_cap, zero / chinese_total * cfg.zero_frequency_penalty_scale
            )
        repeated = sum(len(m.group(0)) for m in self._freq_repeat.finditer(text))
        if repeated:
            score -= min(cfg.frequency_repeat_penalty_cap, repeated * cfg.frequency_repeat_penalty_per_char)
        return _clamp(score)

    def language_score(self, text: str, stats: TextStats, language: str) -> float:
        cfg = self.config
        if stats.length < cfg.short_text_length:
            return cfg.short_text_score

        invalid = self._invalid_run.findall(text)
        if invalid:
            return max(0.0, cfg.invalid_sequence_base - len(invalid) * cfg.invalid_sequence_penalty)
        if self._single_repeat.fullmatch(text):
            return cfg.repeated_text_score

        if language == CHINESE and stats.chinese_ratio > cfg.chinese_ratio_threshold:
            return cfg.chinese_score
        if language == ENGLISH and stats.latin_ratio > cfg.english_ratio_threshold:
            return cfg.english_score
        if language == MIXED and stats.chinese_ratio + stats.latin_ratio > cfg.mixed_ratio_threshold:
            return cfg.mixed_score
        return cfg.default_language_score

    def structure_score(self, text: str, stats: TextStats) -> float:
        if not text:
            return 0.0
        cfg = self.config
        length = len(text)
        score = cfg.structure_base

        punct_ratio = len(_PUNCT.findall(text)) / length
        if cfg.punctuation_min_ratio < punct_ratio < cfg.punctuation_max_ratio:
            score += cfg.punctuation_bonus
        elif punct_ratio > cfg.punctuation_excess_ratio:
            score -= cfg.punctuation_penalty

        for match in self._struct_repeat.finditer(text):
            run = len(match.group(0))
            score -= min(cfg.structure_repeat_cap, (run - cfg.structure_repeat_min_run + 1) * cfg.structure_repeat_step)

        for pattern in (self._garbled_run, _REPLACEMENT_RUN, _QUESTION_RUN):
            matches = len(pattern.findall(text))
            score -= matches * cfg.garbled_pattern_penalty

        space_ratio = stats.whitespace_count / length
        if cfg.whitespace_min_ratio < space_ratio < cfg.whitespace_max_ratio:
            score += cfg.whitespace_bonus

        if stats.symbol_ratio > cfg.symbol_ratio_threshold:
            score -= min(cfg.symbol_penalty_cap, stats.symbol_ratio * cfg.symbol_penalty_scale)
        if stats.chinese_count == 0 and stats.latin_count == 0:
            score -= cfg.no_letters_penalty
        return _clamp(score)

    def primary_language(self, stats: TextStats) -> str:
        cfg = self.config
        if stats.chinese_ratio > cfg.mixed_min_ratio and stats.latin_ratio > cfg.mixed_min_ratio:
            return MIXED
        if stats.chinese_ratio > cfg.chinese_primary_ratio:
            return CHINESE
        if stats.latin_ratio > cfg.english_primary_ratio:
            return ENGLISH
        return UNKNOWN
