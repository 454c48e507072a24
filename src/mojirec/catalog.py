"""Hypothesis catalog: which (source, target) encoding pairs to try, in what order."""

from __future__ import annotations

import logging

from mojirec.config import (
    DYNAMIC_CATEGORY,
    DYNAMIC_PRIORITY,
    CatalogConfig,
    EncodingPair,
    default_catalog_config,
)
from mojirec.detector import HeuristicTextDetector
from mojirec.transcoding import resolve_codec

logger = logging.getLogger(__name__)


class EncodingCatalog:
    def __init__(
        self,
        config: CatalogConfig | None = None,
        detector: HeuristicTextDetector | None = None,
    ) -> None:
        self.config = config or default_catalog_config()
        self.detector = detector or HeuristicTextDetector(self.config.detection_rules)
        self._curated = self.config.common_pairs + self.config.extended_pairs
        self._dynamic = tuple(self._build_dynamic_pairs())
        for name in self.config.all_encodings():
            if not resolve_codec(name).supported:
                logger.warning("Encoding %r has no codec in this runtime; its pairs will be skipped", name)

    def _build_dynamic_pairs(self) -> list[EncodingPair]:
        curated = {pair.key for pair in self._curated}
        encodings = self.config.all_encodings()
        pairs: list[EncodingPair] = []
        for source in encodings:
            for target in encodings:
                if source == target or (source, target) in curated:
                    continue
                pairs.append(
                    EncodingPair(
                        source_encoding=source,
                        target_encoding=target,
                        category=DYNAMIC_CATEGORY,
                        priority=DYNAMIC_PRIORITY,
                        description=f"{target} text shown as {source}",
                    )
                )
        return pairs

    def pairs(self, strategy: str | None = "balanced", category: str | None = None) -> list[EncodingPair]:
        """Strategy-scoped pairs, category-filtered, sorted by priority and truncated."""
        plan = self.config.strategy(strategy)
        candidates = list(self.config.common_pairs)
        if plan.include_extended:
            candidates.extend(self.config.extended_pairs)
        if plan.include_dynamic:
            candidates.extend(self._dynamic)

        if category:
            candidates = [
                p for p in candidates if p.category == category or p.category == DYNAMIC_CATEGORY
            ]

        # sorted() is stable: equal priorities keep catalog insertion order.
        candidates = sorted(candidates, key=lambda p: p.priority)
        if plan.max_attempts is not None:
            candidates = candidates[: plan.max_attempts]
        return candidates

    def recommended_pairs(
        self, text: str, strategy: str | None = "balanced", category: str | None = None
    ) -> list[EncodingPair]:
        """Narrow the strategy's pairs to the categories the detector suggests."""
        detected = set(self.detector.detect(text))
        recommended = [
            p
            for p in self.pairs(strategy, category)
            if p.category in detected or p.category == DYNAMIC_CATEGORY
        ]
        if "chinese" in detected:
            recommended.sort(key=lambda p: (p.category != "chinese", p.priority))
        return recommended

    def supported_encodings(self, category: str | None = None) -> list[str]:
        if category:
            return list(self.config.supported_encodings.get(category, ()))
        return self.config.all_encodings()

    def strategies(self) -> list[str]:
        return list(self.config.strategies)

    def categories(self) -> list[str]:
        return self.config.categories

    def is_supported(self, encoding: str) -> bool:
        return encoding.strip().lower() in self.config.all_encodings()

    def encoding_info(self, encoding: str) -> dict[str, object]:
        name = encoding.strip().lower()
        for category, names in self.config.supported_encodings.items():
            if name in names:
                return {"encoding": name, "category": category, "supported": True}
        return {"encoding": name, "category": "unknown", "supported": False}

    def replacement_map(self, name: str) -> dict[str, str]:
        return dict(self.config.replacement_maps.get(name, {}))
