"""Transcoding trials.

A trial reverses one presumed misinterpretation: the garbled string is
encoded back to bytes with the encoding it was wrongly decoded with, then
those bytes are decoded with the presumed-correct encoding.

Each trial runs an ordered fallback chain and accepts the first step that
succeeds:

- ``native``: strict encode, strict decode.
- ``lenient``: strict encode, decode with replacement characters, accepted
  only while replacements stay a small share of the output.
- ``substitution``: literal garbled-sequence tables from the catalog, used
  only when one of the codecs cannot be resolved in this runtime.
- ``strip``: drops characters outside the CJK/word/punctuation classes; the
  last resort for UTF-8 -> GBK-family pairs without a codec.
"""

from __future__ import annotations

import codecs
import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from functools import lru_cache

from mojirec.errors import TranscodingError, UnsupportedEncodingError

REPLACEMENT_CHAR = "\ufffd"
DEFAULT_MAX_REPLACEMENT_RATIO = 0.3

LATIN_NAMES = frozenset(
    {"iso-8859-1", "iso8859-1", "latin-1", "latin1", "windows-1252", "cp1252", "iso-8859-15"}
)
GBK_NAMES = frozenset({"gbk", "gb2312", "gb18030", "cp936"})
UTF8_NAMES = frozenset({"utf-8", "utf8", "utf_8"})

_STRIP_PATTERN = re.compile(r"[^\u4e00-\u9fffA-Za-z0-9_\s\u3000-\u303f\uff00-\uffef]")


@dataclass(frozen=True)
class Codec:
    """An encoding name bound to its codec implementation, if the runtime has one."""

    name: str
    info: codecs.CodecInfo | None = field(default=None, compare=False, repr=False)

    @property
    def supported(self) -> bool:
        return self.info is not None

    @property
    def canonical(self) -> str:
        return self.info.name if self.info is not None else self.name

    def encode(self, text: str, errors: str = "strict") -> bytes:
        if self.info is None:
            raise LookupError(self.name)
        data, _consumed = self.info.encode(text, errors)
        return data

    def decode(self, data: bytes, errors: str = "strict") -> str:
        if self.info is None:
            raise LookupError(self.name)
        text, _consumed = self.info.decode(data, errors)
        return text


@lru_cache(maxsize=256)
def resolve_codec(name: str) -> Codec:
    """Bind an encoding name to its codec once; unknown names stay unsupported."""
    normalized = name.strip().lower()
    try:
        info = codecs.lookup(normalized)
    except LookupError:
        return Codec(name=normalized)
    return Codec(name=normalized, info=info)


@dataclass(frozen=True)
class TrialOutcome:
    text: str
    method: str


TrialStep = Callable[[str, Codec, Codec], str]


def _require_codecs(source: Codec, target: Codec) -> None:
    for codec in (source, target):
        if not codec.supported:
            raise UnsupportedEncodingError(source.name, target.name, f"unknown encoding {codec.name}")


def native_step(text: str, source: Codec, target: Codec) -> str:
    _require_codecs(source, target)
    try:
        return target.decode(source.encode(text))
    except UnicodeEncodeError as exc:
        raise TranscodingError(source.name, target.name, f"not representable: {exc.reason}") from exc
    except UnicodeDecodeError as exc:
        raise TranscodingError(source.name, target.name, f"invalid bytes: {exc.reason}") from exc


def make_lenient_step(max_replacement_ratio: float = DEFAULT_MAX_REPLACEMENT_RATIO) -> TrialStep:
    def lenient_step(text: str, source: Codec, target: Codec) -> str:
        _require_codecs(source, target)
        try:
            data = source.encode(text)
        except UnicodeEncodeError as exc:
            raise TranscodingError(
                source.name, target.name, f"not representable: {exc.reason}"
            ) from exc
        recovered = target.decode(data, errors="replace")
        introduced = recovered.count(REPLACEMENT_CHAR) - text.count(REPLACEMENT_CHAR)
        if not recovered.strip(REPLACEMENT_CHAR):
            raise TranscodingError(source.name, target.name, "only replacement characters")
        if introduced > 0 and introduced / len(recovered) > max_replacement_ratio:
            raise TranscodingError(source.name, target.name, "too many replacement characters")
        return recovered

    return lenient_step


def replacement_map_name(source: str, target: str) -> str:
    """Pick the substitution table for a pair of encoding names."""
    if source in LATIN_NAMES and target in UTF8_NAMES:
        return "latin1ToUtf8"
    if source in LATIN_NAMES and target in GBK_NAMES:
        return "latin1ToGbk"
    return "htmlEntities"


def apply_replacements(text: str, table: Mapping[str, str]) -> str:
    """Replace garbled sequences literally, longest sequence first."""
    fixed = text
    for garbled in sorted(table, key=len, reverse=True):
        if garbled:
            fixed = fixed.replace(garbled, table[garbled])
    return fixed


def make_substitution_step(maps: Mapping[str, Mapping[str, str]]) -> TrialStep:
    def substitution_step(text: str, source: Codec, target: Codec) -> str:
        if source.supported and target.supported:
            raise TranscodingError(source.name, target.name, "codecs available")
        if source.name in UTF8_NAMES and target.name in GBK_NAMES:
            raise TranscodingError(source.name, target.name, "no substitution table")
        table = maps.get(replacement_map_name(source.name, target.name), {})
        fixed = apply_replacements(text, table)
        if fixed == text:
            raise TranscodingError(source.name, target.name, "no known garbled sequence")
        return fixed

    return substitution_step


def strip_step(text: str, source: Codec, target: Codec) -> str:
    if source.supported and target.supported:
        raise TranscodingError(source.name, target.name, "codecs available")
    if not (source.name in UTF8_NAMES and target.name in GBK_NAMES):
        raise TranscodingError(source.name, target.name, "strip applies to utf-8 -> gbk only")
    stripped = _STRIP_PATTERN.sub("", text)
    if not stripped or stripped == text:
        raise TranscodingError(source.name, target.name, "nothing to strip")
    return stripped


class TranscodingTrial:
    """Runs the ordered fallback chain for one hypothesis pair at a time."""

    def __init__(
        self,
        replacement_maps: Mapping[str, Mapping[str, str]] | None = None,
        *,
        steps: Sequence[tuple[str, TrialStep]] | None = None,
        max_replacement_ratio: float = DEFAULT_MAX_REPLACEMENT_RATIO,
    ) -> None:
        maps = replacement_maps or {}
        self.steps: tuple[tuple[str, TrialStep], ...] = tuple(
            steps
            if steps is not None
            else (
                ("native", native_step),
                ("lenient", make_lenient_step(max_replacement_ratio)),
                ("substitution", make_substitution_step(maps)),
                ("strip", strip_step),
            )
        )

    @classmethod
    def substitution_only(cls, replacement_maps: Mapping[str, Mapping[str, str]]) -> TranscodingTrial:
        """Chain for runtimes without legacy codecs: table lookups only."""
        substitution = make_substitution_step(replacement_maps)

        # Codecs are passed without their implementation so the table steps always run.
        def table_step(text: str, source: Codec, target: Codec) -> str:
            return substitution(text, Codec(source.name), Codec(target.name))

        def strip_only(text: str, source: Codec, target: Codec) -> str:
            return strip_step(text, Codec(source.name), Codec(target.name))

        return cls(steps=(("substitution", table_step), ("strip", strip_only)))

    def attempt(self, text: str, source: str, target: str) -> TrialOutcome:
        """Return the first successful step's text; raise TranscodingError if all fail."""
        source_codec = resolve_codec(source)
        target_codec = resolve_codec(target)
        errors: list[TranscodingError] = []
        for method, step in self.steps:
            try:
                return TrialOutcome(text=step(text, source_codec, target_codec), method=method)
            except TranscodingError as exc:
                errors.append(exc)
        if not errors:
            raise TranscodingError(source, target, "no trial steps configured")
        for exc in errors:
            if isinstance(exc, UnsupportedEncodingError):
                raise exc
        raise errors[0]


def transcode(text: str, source: str, target: str) -> str:
    """Strict single-step transcode, mainly for corpus generation and sanity checks."""
    return native_step(text, resolve_codec(source), resolve_codec(target))
