"""Synthetic labelled mojibake corpus.

Each sample takes a clean sentence, encodes it with its true encoding and
decodes the bytes with a wrong one, exactly the accident the engine reverses.
Both steps are strict; a sentence that cannot survive a pair is skipped, so
every emitted sample is known to be recoverable in principle.

Used for calibration of the scoring constants and for regression tests.
"""

from __future__ import annotations

import random
from collections.abc import Iterable, Sequence
from dataclasses import asdict, dataclass

# (source = encoding the bytes were wrongly shown as, target = true encoding, category)
DEFAULT_PAIRS: tuple[tuple[str, str, str], ...] = (
    ("windows-1252", "utf-8", "chinese"),
    ("gbk", "utf-8", "chinese"),
    ("iso-8859-1", "gbk", "chinese"),
    ("windows-1252", "utf-8", "western"),
    ("iso-8859-1", "utf-8", "western"),
    ("shift_jis", "utf-8", "japanese"),
    ("euc-kr", "utf-8", "korean"),
)

SENTENCES: dict[str, tuple[str, ...]] = {
    "chinese": (
        "中文乱码",
        "我们今天去学校上课。",
        "这个问题已经解决了。",
        "你好，欢迎使用这个工具！",
        "他说明天会下雨。",
        "中国人民的生活越来越好。",
        "请把文件发给我。",
        "我们可以一起工作吗？",
    ),
    "western": (
        "Hällo Wörld",
        "Café au lait, s'il vous plaît.",
        "Größe und Gewicht prüfen.",
        "El niño está en la montaña.",
        "Crème brûlée à la française.",
        "Ångström enhet för längd.",
    ),
    "japanese": (
        "日本語のテキストです。",
        "こんにちは、元気ですか？",
        "東京は大きな都市です。",
    ),
    "korean": (
        "안녕하세요",
        "한국어 텍스트입니다.",
        "서울은 큰 도시입니다.",
    ),
}


@dataclass
class MojibakeSample:
    garbled: str
    expected: str
    source_encoding: str
    target_encoding: str
    category: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


def garble(text: str, source: str, target: str) -> str | None:
    """Show ``target``-encoded bytes of ``text`` as if they were ``source``."""
    try:
        garbled = text.encode(target).decode(source)
    except (UnicodeEncodeError, UnicodeDecodeError, LookupError):
        return None
    return garbled if garbled != text else None


def iter_samples(
    pairs: Iterable[tuple[str, str, str]] = DEFAULT_PAIRS,
    sentences: dict[str, Sequence[str]] | None = None,
) -> Iterable[MojibakeSample]:
    """Yield every valid (sentence, pair) combination in a stable order."""
    pool = sentences or SENTENCES
    for source, target, category in pairs:
        for sentence in pool.get(category, ()):
            garbled = garble(sentence, source, target)
            if garbled is None:
                continue
            yield MojibakeSample(
                garbled=garbled,
                expected=sentence,
                source_encoding=source,
                target_encoding=target,
                category=category,
            )


def generate_mojibake_corpus(
    count: int = 16,
    *,
    seed: int = 1234,
    pairs: Sequence[tuple[str, str, str]] | None = None,
) -> list[MojibakeSample]:
    """Draw ``count`` samples (without replacement where possible) from the valid pool."""
    pool = list(iter_samples(pairs or DEFAULT_PAIRS))
    if not pool or count <= 0:
        return []
    rng = random.Random(seed)
    if count <= len(pool):
        return rng.sample(pool, count)
    return [rng.choice(pool) for _ in range(count)]
