"""Error taxonomy for mojibake recovery."""

from __future__ import annotations


class MojirecError(Exception):
    """Base class for all recovery errors."""


class RecoveryInputError(MojirecError, ValueError):
    """Input to a public recovery entrypoint was not usable text."""


class TranscodingError(MojirecError):
    """One hypothesis pair could not be transcoded; callers skip the pair."""

    def __init__(self, source: str, target: str, reason: str) -> None:
        super().__init__(f"{source} -> {target}: {reason}")
        self.source = source
        self.target = target
        self.reason = reason


class UnsupportedEncodingError(TranscodingError):
    """A pair names an encoding the codec layer cannot resolve."""


class CatalogConfigError(MojirecError):
    """The catalog document is missing keys or holds invalid pairs."""
