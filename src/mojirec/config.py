from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from mojirec.errors import CatalogConfigError

logger = logging.getLogger(__name__)

RESOURCE_DIR = Path(__file__).resolve().parent / "resources"
DEFAULT_CATALOG_PATH = RESOURCE_DIR / "encoding_catalog.yaml"

DEFAULT_PRIORITY = 999
DYNAMIC_CATEGORY = "dynamic"
DYNAMIC_PRIORITY = 10
DEFAULT_CATEGORIES: tuple[str, ...] = ("chinese", "western", "japanese", "korean")
STRATEGY_NAMES: tuple[str, ...] = ("fast", "balanced", "aggressive")

# Which pair sets each strategy draws from.
STRATEGY_SCOPES: dict[str, tuple[bool, bool]] = {
    # name: (include_extended, include_dynamic)
    "fast": (False, False),
    "balanced": (True, False),
    "aggressive": (True, True),
}


@dataclass(frozen=True)
class EncodingPair:
    source_encoding: str
    target_encoding: str
    category: str
    priority: int = DEFAULT_PRIORITY
    description: str = ""

    @property
    def key(self) -> tuple[str, str]:
        return (self.source_encoding, self.target_encoding)

    def to_dict(self) -> dict[str, Any]:
        return {
            "source_encoding": self.source_encoding,
            "target_encoding": self.target_encoding,
            "category": self.category,
            "priority": self.priority,
            "description": self.description,
        }

    @staticmethod
    def from_mapping(payload: Mapping[str, Any]) -> EncodingPair:
        try:
            source = str(payload["sourceEncoding"]).strip().lower()
            target = str(payload["targetEncoding"]).strip().lower()
        except KeyError as exc:
            raise CatalogConfigError(f"Encoding pair is missing {exc.args[0]}: {payload}") from exc
        if not source or not target:
            raise CatalogConfigError(f"Encoding pair has an empty encoding name: {payload}")
        if source == target:
            raise CatalogConfigError(f"Encoding pair maps {source} onto itself")
        priority = payload.get("priority")
        return EncodingPair(
            source_encoding=source,
            target_encoding=target,
            category=str(payload.get("category") or "unknown"),
            priority=DEFAULT_PRIORITY if priority is None else int(priority),
            description=str(payload.get("description") or f"{source} -> {target}"),
        )


@dataclass(frozen=True)
class Strategy:
    name: str
    max_attempts: int | None
    include_extended: bool
    include_dynamic: bool


@dataclass(frozen=True)
class DetectionRules:
    chinese_indicators: tuple[str, ...] = ()
    latin_indicators: tuple[str, ...] = ()
    replacement_markers: tuple[str, ...] = ()

    @staticmethod
    def from_mapping(payload: Mapping[str, Any]) -> DetectionRules:
        return DetectionRules(
            chinese_indicators=tuple(str(s) for s in payload.get("chineseIndicators", [])),
            latin_indicators=tuple(str(s) for s in payload.get("latinIndicators", [])),
            replacement_markers=tuple(str(s) for s in payload.get("unicodeReplacementChars", [])),
        )


@dataclass(frozen=True)
class CatalogConfig:
    """Parsed catalog document. Never mutated after load."""

    supported_encodings: dict[str, tuple[str, ...]]
    common_pairs: tuple[EncodingPair, ...]
    extended_pairs: tuple[EncodingPair, ...]
    strategies: dict[str, Strategy]
    replacement_maps: dict[str, dict[str, str]]
    detection_rules: DetectionRules
    scoring: dict[str, Any] = field(default_factory=dict)

    @property
    def categories(self) -> list[str]:
        return list(self.supported_encodings)

    def all_encodings(self) -> list[str]:
        """Every supported encoding once, in declaration order."""
        seen: dict[str, None] = {}
        for names in self.supported_encodings.values():
            for name in names:
                seen.setdefault(name, None)
        return list(seen)

    def strategy(self, name: str | None) -> Strategy:
        """Resolve a strategy by name, falling back to balanced."""
        if name and name in self.strategies:
            return self.strategies[name]
        if name:
            logger.warning("Unknown strategy %r; using balanced", name)
        return self.strategies["balanced"]

    @staticmethod
    def from_mapping(payload: Mapping[str, Any]) -> CatalogConfig:
        for key in ("supportedEncodings", "commonPairs", "conversionStrategies"):
            if key not in payload:
                raise CatalogConfigError(f"Catalog document is missing '{key}'")

        supported: dict[str, tuple[str, ...]] = {}
        for category, names in dict(payload["supportedEncodings"]).items():
            supported[str(category)] = tuple(str(n).strip().lower() for n in names or [])

        strategies: dict[str, Strategy] = {}
        for name, body in dict(payload["conversionStrategies"]).items():
            include_extended, include_dynamic = STRATEGY_SCOPES.get(str(name), (True, False))
            max_attempts = (body or {}).get("maxAttempts")
            strategies[str(name)] = Strategy(
                name=str(name),
                max_attempts=int(max_attempts) if max_attempts else None,
                include_extended=include_extended,
                include_dynamic=include_dynamic,
            )
        if "balanced" not in strategies:
            raise CatalogConfigError("Catalog document must define a 'balanced' strategy")

        maps = {
            str(name): {str(k): str(v) for k, v in (table or {}).items()}
            for name, table in dict(payload.get("charReplacementMaps") or {}).items()
        }
        return CatalogConfig(
            supported_encodings=supported,
            common_pairs=tuple(EncodingPair.from_mapping(p) for p in payload["commonPairs"]),
            extended_pairs=tuple(
                EncodingPair.from_mapping(p) for p in payload.get("extendedPairs") or []
            ),
            strategies=strategies,
            replacement_maps=maps,
            detection_rules=DetectionRules.from_mapping(payload.get("autoDetectionRules") or {}),
            scoring=dict(payload.get("scoring") or {}),
        )


def load_catalog_config(path: Path | None = None) -> CatalogConfig:
    """Load a catalog document from YAML or JSON (by suffix)."""
    source = path or DEFAULT_CATALOG_PATH
    if not source.is_file():
        raise CatalogConfigError(f"Catalog document not found: {source}")
    text = source.read_text(encoding="utf-8")
    if source.suffix.lower() in {".yml", ".yaml"}:
        payload = yaml.safe_load(text)
    else:
        payload = json.loads(text)
    if not isinstance(payload, Mapping):
        raise CatalogConfigError(f"Catalog document must be a mapping: {source}")
    return CatalogConfig.from_mapping(payload)


@lru_cache(maxsize=1)
def default_catalog_config() -> CatalogConfig:
    return load_catalog_config()
