"""Registry of the VCF format versions understood by the header engine.

Every header is governed by exactly one :class:`VCFVersion`. Versions are
ordered through an explicit rank table rather than through their declaration
order, so comparisons stay stable if members are ever listed differently.
"""

from __future__ import annotations

import enum
import re
from typing import Dict, Optional

from .exceptions import MalformedLine

FORMAT_KEY = "fileformat"
LEGACY_FORMAT_KEY = "format"

_RANKS: Dict[str, int] = {
    "VCF3_2": 32,
    "VCF3_3": 33,
    "VCF4_0": 40,
    "VCF4_1": 41,
    "VCF4_2": 42,
    "VCF4_3": 43,
}

_VERSION_NUMBER_PATTERN = re.compile(r"(\d+)\.(\d+)")


class VCFVersion(enum.Enum):
    """Known VCF versions with their header key and version string."""

    VCF3_2 = ("VCRv3.2", LEGACY_FORMAT_KEY)
    VCF3_3 = ("VCFv3.3", FORMAT_KEY)
    VCF4_0 = ("VCFv4.0", FORMAT_KEY)
    VCF4_1 = ("VCFv4.1", FORMAT_KEY)
    VCF4_2 = ("VCFv4.2", FORMAT_KEY)
    VCF4_3 = ("VCFv4.3", FORMAT_KEY)

    def __init__(self, version_string: str, format_key: str) -> None:
        self.version_string = version_string
        self.format_key = format_key

    @property
    def rank(self) -> int:
        return _RANKS[self.name]

    @property
    def number(self) -> str:
        """Return the bare ``major.minor`` version number, e.g. ``"4.2"``."""
        match = _VERSION_NUMBER_PATTERN.search(self.version_string)
        return f"{match.group(1)}.{match.group(2)}"

    @property
    def is_legacy(self) -> bool:
        """True for the positional 3.x grammar."""
        return self.rank < _RANKS["VCF4_0"]

    def is_at_least(self, other: "VCFVersion") -> bool:
        return self.rank >= other.rank

    def __lt__(self, other):
        if not isinstance(other, VCFVersion):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, VCFVersion):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, VCFVersion):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, VCFVersion):
            return NotImplemented
        return self.rank >= other.rank

    def header_line(self) -> str:
        """Return the full ``##fileformat=`` line for this version."""
        return f"##{self.format_key}={self.version_string}"

    def __str__(self) -> str:
        return self.version_string

    @classmethod
    def from_string(cls, version_string: str) -> "VCFVersion":
        """Return the version whose version string equals *version_string*."""
        text = (version_string or "").strip()
        for version in cls:
            if version.version_string == text:
                return version
        raise MalformedLine(f"Unrecognized VCF version string: {version_string!r}")

    @classmethod
    def from_number(cls, number: str) -> "VCFVersion":
        """Return the version for a bare number such as ``"4.2"``."""
        match = _VERSION_NUMBER_PATTERN.search(number or "")
        if match:
            wanted = f"{match.group(1)}.{match.group(2)}"
            for version in cls:
                if version.number == wanted:
                    return version
        raise MalformedLine(f"Unrecognized VCF version number: {number!r}")

    @classmethod
    def from_header_line(cls, line: str) -> "VCFVersion":
        """Parse a ``##fileformat=VCFv4.2`` style line."""
        text = line.strip()
        if text.startswith("##"):
            text = text[2:]
        key, sep, value = text.partition("=")
        if not sep or not is_format_key(key):
            raise MalformedLine(f"Not a VCF version line: {line!r}")
        return cls.from_string(value)

    @classmethod
    def latest(cls) -> "VCFVersion":
        return max(cls, key=lambda version: version.rank)


def is_format_key(key: Optional[str]) -> bool:
    """Return True when *key* names a version line (``fileformat`` or ``format``)."""
    if key is None:
        return False
    return key in (FORMAT_KEY, LEGACY_FORMAT_KEY)


def is_version_line(line: str) -> bool:
    """Return True when *line* looks like a recognised ``##fileformat`` line."""
    try:
        VCFVersion.from_header_line(line)
    except MalformedLine:
        return False
    return True


__all__ = [
    "FORMAT_KEY",
    "LEGACY_FORMAT_KEY",
    "VCFVersion",
    "is_format_key",
    "is_version_line",
]
