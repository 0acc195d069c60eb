"""Value types for the ``Number`` and ``Type`` attributes of INFO/FORMAT lines."""

from __future__ import annotations

import enum

from .exceptions import MalformedLine
from .versions import VCFVersion

UNBOUNDED_TOKEN = "."
LEGACY_UNBOUNDED_TOKEN = "-1"


class LineCount(enum.Enum):
    """Kinds of ``Number`` declarations."""

    INTEGER = "integer"
    A = "A"
    R = "R"
    G = "G"
    UNBOUNDED = "."

    @classmethod
    def decode(cls, text: str, version: VCFVersion) -> tuple["LineCount", int | None]:
        """Return ``(count_type, fixed_count)`` for a ``Number`` value.

        ``.`` is accepted at every version and ``-1`` is the 3.x spelling of the
        same unbounded count, so both decode to :attr:`UNBOUNDED`.
        """
        value = (text or "").strip()
        if value in (UNBOUNDED_TOKEN, LEGACY_UNBOUNDED_TOKEN):
            return cls.UNBOUNDED, None
        if value in ("A", "R", "G"):
            return cls(value), None
        try:
            count = int(value)
        except ValueError as exc:
            raise MalformedLine(f"Invalid Number value {text!r} for VCF {version}") from exc
        if count < 0:
            raise MalformedLine(f"Number must not be negative, got {text!r}")
        return cls.INTEGER, count

    def encode(self, count: int | None, version: VCFVersion) -> str:
        if self is LineCount.INTEGER:
            return str(count)
        if self is LineCount.UNBOUNDED:
            return LEGACY_UNBOUNDED_TOKEN if version.is_legacy else UNBOUNDED_TOKEN
        return self.value


class LineType(enum.Enum):
    """Value types an INFO/FORMAT field may declare."""

    INTEGER = "Integer"
    FLOAT = "Float"
    STRING = "String"
    CHARACTER = "Character"
    FLAG = "Flag"

    @classmethod
    def decode(cls, text: str) -> "LineType":
        value = (text or "").strip()
        for member in cls:
            if member.value == value:
                return member
        raise MalformedLine(f"Invalid Type value {text!r}")

    def __str__(self) -> str:
        return self.value


__all__ = [
    "LEGACY_UNBOUNDED_TOKEN",
    "LineCount",
    "LineType",
    "UNBOUNDED_TOKEN",
]
