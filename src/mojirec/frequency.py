"""Character frequency tables used by the credibility scorer.

The CJK table ships as ``resources/chinese_frequency.json`` (character ->
relative usage count). At load time it is merged with built-in tables for
Chinese punctuation, Latin letters and digits into one combined lookup. The
CJK-only view is kept separately because the scorer penalises rare and
unknown ideographs against it.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType

import orjson

RESOURCE_DIR = Path(__file__).resolve().parent / "resources"
DEFAULT_FREQUENCY_PATH = RESOURCE_DIR / "chinese_frequency.json"

# Only ideographs and CJK/full-width punctuation are kept from the data file.
_CJK_TABLE_CHARS = re.compile(r"[\u4e00-\u9fff\u3000-\u303f\uff00-\uffef“”‘’]")

CHINESE_PUNCTUATION_FREQUENCY: dict[str, int] = {
    "。": 2000, "，": 1800, "、": 500, "？": 300, "！": 200,
    "：": 150, "；": 100, "“": 80, "”": 80, "‘": 60, "’": 60,
    "（": 40, "）": 40, "【": 20, "】": 20, "《": 15, "》": 15,
}

LATIN_FREQUENCY: dict[str, int] = {
    "e": 1270, "t": 906, "a": 817, "o": 751, "i": 697,
    "n": 675, "s": 633, "h": 609, "r": 599, "d": 425,
    "l": 403, "c": 278, "u": 276, "m": 241, "w": 236,
    "f": 223, "g": 202, "y": 197, "p": 193, "b": 129,
    "v": 98, "k": 77, "j": 15, "x": 15, "q": 10, "z": 7,
    "E": 127, "T": 91, "A": 82, "O": 75, "I": 70,
    "N": 68, "S": 63, "H": 61, "R": 60, "D": 43,
    "L": 40, "C": 28, "U": 28, "M": 24, "W": 24,
    "F": 22, "G": 20, "Y": 20, "P": 19, "B": 13,
    "V": 10, "K": 8, "J": 2, "X": 2, "Q": 1, "Z": 1,
}

DIGIT_FREQUENCY: dict[str, int] = {
    "0": 100, "1": 120, "2": 110, "3": 105, "4": 100,
    "5": 98, "6": 96, "7": 94, "8": 92, "9": 90,
}


@dataclass(frozen=True)
class FrequencyModel:
    """Read-only lookup of relative character frequencies."""

    combined: Mapping[str, int]
    chinese: Mapping[str, int]

    def get(self, char: str) -> int:
        return self.combined.get(char, 0)

    def chinese_frequency(self, char: str) -> int:
        return self.chinese.get(char, 0)

    def __contains__(self, char: object) -> bool:
        return char in self.combined

    def __len__(self) -> int:
        return len(self.combined)

    @staticmethod
    def from_tables(
        chinese: Mapping[str, int],
        latin: Mapping[str, int] | None = None,
        digits: Mapping[str, int] | None = None,
    ) -> FrequencyModel:
        """Merge the CJK table with punctuation, Latin and digit tables."""
        cjk: dict[str, int] = {}
        for char, freq in chinese.items():
            if len(char) != 1 or not _CJK_TABLE_CHARS.match(char):
                continue
            cjk[char] = max(int(freq), 0)
        cjk.update(CHINESE_PUNCTUATION_FREQUENCY)

        combined = dict(cjk)
        combined.update(LATIN_FREQUENCY if latin is None else latin)
        combined.update(DIGIT_FREQUENCY if digits is None else digits)
        return FrequencyModel(
            combined=MappingProxyType(combined),
            chinese=MappingProxyType(cjk),
        )


def load_frequency_model(path: Path | None = None) -> FrequencyModel:
    """Load a CJK frequency JSON document and build the combined model."""
    source = path or DEFAULT_FREQUENCY_PATH
    payload = orjson.loads(source.read_bytes())
    if not isinstance(payload, dict):
        raise ValueError(f"Frequency table must be a JSON object: {source}")
    return FrequencyModel.from_tables(payload)


@lru_cache(maxsize=1)
def default_frequency_model() -> FrequencyModel:
    """Process-wide model built from the packaged table."""
    return load_frequency_model()
