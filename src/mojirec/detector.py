"""Cheap mojibake signals used to narrow which hypothesis categories to try.

Rules (independent, additive):
- Known fragments of UTF-8/GBK Chinese shown in a Latin codepage -> chinese.
- Accented-Latin fragments of UTF-8 shown as Latin-1/Windows-1252 -> western.
- Unicode replacement characters and their GBK echoes -> unicode_errors.
When nothing fires, every default category is returned so that detection
never shrinks the search below an un-narrowed one.
"""

from __future__ import annotations

from mojirec.config import DEFAULT_CATEGORIES, DetectionRules


class HeuristicTextDetector:
    def __init__(self, rules: DetectionRules) -> None:
        self.rules = rules

    def detect(self, text: str) -> list[str]:
        if not isinstance(text, str):
            return list(DEFAULT_CATEGORIES)
        categories: list[str] = []
        if any(indicator in text for indicator in self.rules.chinese_indicators):
            categories.append("chinese")
        if any(indicator in text for indicator in self.rules.latin_indicators):
            categories.append("western")
        if any(marker in text for marker in self.rules.replacement_markers):
            categories.append("unicode_errors")
        return categories or list(DEFAULT_CATEGORIES)
