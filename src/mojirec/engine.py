"""Recovery engine: search encoding hypotheses, score survivors, rank them."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, field, replace
from functools import lru_cache
from pathlib import Path
from typing import Any

from mojirec.catalog import EncodingCatalog
from mojirec.config import DYNAMIC_CATEGORY, EncodingPair, load_catalog_config
from mojirec.errors import MojirecError, RecoveryInputError, TranscodingError
from mojirec.frequency import FrequencyModel
from mojirec.scorer import CredibilityReport, CredibilityScorer, ScoringConfig
from mojirec.transcoding import TranscodingTrial

logger = logging.getLogger(__name__)

MAX_RESULTS_LIMIT = 100

_OPTION_ALIASES = {
    "maxResults": "max_results",
    "minCredibility": "min_credibility",
    "useRecommended": "use_recommended",
}


def _clamp_int(value: Any, low: int, high: int, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return max(low, min(high, number))


def _floor_float(value: Any, low: float, default: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return max(low, number)


@dataclass(frozen=True)
class RecoveryOptions:
    max_results: int = 10
    min_credibility: float = 30.0
    strategy: str = "balanced"
    category: str | None = None
    use_recommended: bool = True
    workers: int = 1

    def normalized(self) -> RecoveryOptions:
        """Clamp counts into range and floor the credibility threshold at zero."""
        return replace(
            self,
            max_results=_clamp_int(self.max_results, 0, MAX_RESULTS_LIMIT, 10),
            min_credibility=_floor_float(self.min_credibility, 0.0, 30.0),
            strategy=str(self.strategy or "balanced").strip().lower(),
            category=str(self.category).strip().lower() if self.category else None,
            workers=_clamp_int(self.workers, 1, 32, 1),
        )

    @staticmethod
    def from_mapping(payload: Mapping[str, Any]) -> RecoveryOptions:
        """Accept camelCase or snake_case keys; unknown keys are ignored."""
        values: dict[str, Any] = {}
        for key, value in payload.items():
            name = _OPTION_ALIASES.get(key, key)
            if name in {"max_results", "min_credibility", "strategy", "category", "use_recommended", "workers"}:
                values[name] = value
        legacy_fast = payload.get("commonEncodingsOnly", payload.get("common_encodings_only"))
        if legacy_fast and "strategy" not in values:
            values["strategy"] = "fast"
        if "use_recommended" in values:
            values["use_recommended"] = bool(values["use_recommended"])
        return RecoveryOptions(**values).normalized()


OptionsLike = RecoveryOptions | Mapping[str, Any] | None


def coerce_options(options: OptionsLike = None) -> RecoveryOptions:
    if options is None:
        return RecoveryOptions()
    if isinstance(options, RecoveryOptions):
        return options.normalized()
    if isinstance(options, Mapping):
        return RecoveryOptions.from_mapping(options)
    raise RecoveryInputError(f"Unsupported options value: {type(options).__name__}")


@dataclass(frozen=True)
class RecoveryResult:
    source_encoding: str
    target_encoding: str
    recovered_text: str
    credibility: float
    details: CredibilityReport
    description: str
    category: str = ""
    method: str = "native"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class BatchItem:
    index: int
    original_text: Any
    results: list[RecoveryResult] = field(default_factory=list)
    error: str | None = None

    @property
    def result(self) -> RecoveryResult | None:
        return self.results[0] if self.results else None

    @property
    def success(self) -> bool:
        return self.error is None and bool(self.results)

    def to_dict(self) -> dict[str, Any]:
        best = self.result
        return {
            "index": self.index,
            "original_text": self.original_text,
            "success": self.success,
            "error": self.error,
            "result": best.to_dict() if best else None,
            "results": [r.to_dict() for r in self.results],
        }


def _validate_text(text: object) -> str:
    if not isinstance(text, str):
        raise RecoveryInputError(f"Text must be a string, got {type(text).__name__}")
    if not text:
        raise RecoveryInputError("Text must not be empty")
    return text


class RecoveryEngine:
    """Runs every candidate pair through the trial chain and keeps credible outputs."""

    def __init__(
        self,
        catalog: EncodingCatalog | None = None,
        scorer: CredibilityScorer | None = None,
        trial: TranscodingTrial | None = None,
    ) -> None:
        self.catalog = catalog or EncodingCatalog()
        config = self.catalog.config
        if scorer is None:
            scoring = ScoringConfig.from_mapping(config.scoring) if config.scoring else None
            scorer = CredibilityScorer(config=scoring)
        self.scorer = scorer
        self.trial = trial or TranscodingTrial(config.replacement_maps)
        self._known_categories = (
            set(config.categories)
            | {p.category for p in config.common_pairs + config.extended_pairs}
            | {DYNAMIC_CATEGORY}
        )

    @classmethod
    def from_paths(
        cls,
        catalog_path: Path | None = None,
        frequency: FrequencyModel | None = None,
    ) -> RecoveryEngine:
        """Build an engine from an alternate catalog document and/or frequency model."""
        catalog = EncodingCatalog(load_catalog_config(catalog_path) if catalog_path else None)
        scoring = catalog.config.scoring
        scorer = CredibilityScorer(
            frequency=frequency,
            config=ScoringConfig.from_mapping(scoring) if scoring else None,
        )
        return cls(catalog=catalog, scorer=scorer)

    def _category(self, category: str | None) -> str | None:
        if category and category not in self._known_categories:
            logger.warning("Unknown category %r: only dynamic pairs can match", category)
        return category

    def candidate_pairs(self, text: str, options: RecoveryOptions) -> list[EncodingPair]:
        category = self._category(options.category)
        if options.use_recommended:
            pairs = self.catalog.recommended_pairs(text, options.strategy, category)
        else:
            pairs = self.catalog.pairs(options.strategy, category)
        # The same (source, target) can sit under several categories; try it once.
        seen: set[tuple[str, str]] = set()
        unique: list[EncodingPair] = []
        for pair in pairs:
            if pair.key in seen:
                continue
            seen.add(pair.key)
            unique.append(pair)
        return unique

    def _try_pair(self, text: str, pair: EncodingPair) -> RecoveryResult | None:
        try:
            outcome = self.trial.attempt(text, pair.source_encoding, pair.target_encoding)
        except TranscodingError as exc:
            logger.debug("Skipping %s -> %s: %s", pair.source_encoding, pair.target_encoding, exc.reason)
            return None
        if outcome.text == text:
            return None
        report = self.scorer.score(outcome.text)
        return RecoveryResult(
            source_encoding=pair.source_encoding,
            target_encoding=pair.target_encoding,
            recovered_text=outcome.text,
            credibility=report.score,
            details=report,
            description=pair.description,
            category=pair.category,
            method=outcome.method,
        )

    def recover(self, text: object, options: OptionsLike = None) -> list[RecoveryResult]:
        """Return credible recoveries, best first, at most ``max_results`` of them."""
        source = _validate_text(text)
        opts = coerce_options(options)
        pairs = self.candidate_pairs(source, opts)
        logger.debug("Strategy %s: trying %d encoding pairs", opts.strategy, len(pairs))

        if opts.workers > 1 and len(pairs) > 1:
            with ThreadPoolExecutor(max_workers=opts.workers) as pool:
                outcomes = list(pool.map(lambda p: self._try_pair(source, p), pairs))
        else:
            outcomes = [self._try_pair(source, pair) for pair in pairs]

        kept = [r for r in outcomes if r is not None and r.credibility >= opts.min_credibility]
        kept.sort(key=lambda r: r.credibility, reverse=True)
        return kept[: opts.max_results]

    def quick_recover(self, text: object, options: OptionsLike = None) -> RecoveryResult | None:
        """Fast-strategy single best recovery, or None when nothing qualifies."""
        opts = replace(coerce_options(options), strategy="fast", max_results=1)
        results = self.recover(text, opts)
        return results[0] if results else None

    def batch_recover(self, texts: object, options: OptionsLike = None) -> list[BatchItem]:
        if isinstance(texts, (str, bytes, bytearray)) or not isinstance(texts, Sequence):
            raise RecoveryInputError("Batch input must be a sequence of strings")
        opts = coerce_options(options)
        items: list[BatchItem] = []
        for index, text in enumerate(texts):
            try:
                results = self.recover(text, opts)
            except MojirecError as exc:
                items.append(BatchItem(index=index, original_text=text, error=str(exc)))
                continue
            items.append(BatchItem(index=index, original_text=text, results=results))
        return items

    def score_text(self, text: object) -> CredibilityReport:
        return self.scorer.score(text)

    def detect_categories(self, text: object) -> list[str]:
        return self.catalog.detector.detect(text)  # type: ignore[arg-type]

    def recommended_pairs(self, text: object, options: OptionsLike = None) -> list[EncodingPair]:
        source = _validate_text(text)
        opts = coerce_options(options)
        return self.catalog.recommended_pairs(source, opts.strategy, self._category(opts.category))

    def list_supported_encodings(self, category: str | None = None) -> list[str]:
        return self.catalog.supported_encodings(category)

    def list_strategies(self) -> list[str]:
        return self.catalog.strategies()

    def list_categories(self) -> list[str]:
        return self.catalog.categories()

    def get_encoding_info(self, encoding: str) -> dict[str, object]:
        return self.catalog.encoding_info(encoding)

    def is_encoding_supported(self, encoding: str) -> bool:
        return self.catalog.is_supported(encoding)


@lru_cache(maxsize=1)
def default_engine() -> RecoveryEngine:
    """Shared engine over the packaged catalog and frequency table."""
    return RecoveryEngine()


def recover(text: object, options: OptionsLike = None) -> list[RecoveryResult]:
    return default_engine().recover(text, options)


def quick_recover(text: object, options: OptionsLike = None) -> RecoveryResult | None:
    return default_engine().quick_recover(text, options)


def batch_recover(texts: object, options: OptionsLike = None) -> list[BatchItem]:
    return default_engine().batch_recover(texts, options)


def score_text(text: object) -> CredibilityReport:
    return default_engine().score_text(text)


def detect_categories(text: object) -> list[str]:
    return default_engine().detect_categories(text)


def recommended_pairs(text: object, options: OptionsLike = None) -> list[EncodingPair]:
    return default_engine().recommended_pairs(text, options)


def list_supported_encodings(category: str | None = None) -> list[str]:
    return default_engine().list_supported_encodings(category)


def list_strategies() -> list[str]:
    return default_engine().list_strategies()
