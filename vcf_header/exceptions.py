"""Custom exceptions raised while parsing, validating and merging VCF headers."""

from __future__ import annotations

from typing import Iterable, List


class VCFHeaderError(Exception):
    """Base exception for header metadata failures."""

    def __init__(self, message: str, *, warnings: Iterable[str] | None = None) -> None:
        normalized_message = message or "An unexpected VCF header error occurred."
        super().__init__(normalized_message)
        self.user_message: str = normalized_message
        self.warnings: List[str] = list(warnings or [])


class MalformedLine(VCFHeaderError):
    """Raised when a header line violates the tag grammar of its version."""


class MissingRequiredAttribute(MalformedLine):
    """Raised when a structured line lacks an attribute its kind requires."""


class VersionIncompatible(VCFHeaderError):
    """Raised when header lines are not permitted at the target VCF version."""

    def __init__(self, message: str, *, failures: Iterable[object] | None = None, warnings=None) -> None:
        super().__init__(message, warnings=warnings)
        self.failures: List[object] = list(failures or [])


class DuplicateVersionLine(VCFHeaderError):
    """Raised when a second ``fileformat`` line is supplied to one header."""


class VersionRegression(VCFHeaderError):
    """Raised when a header would move to an older VCF version."""


class IncompatibleHeaders(VCFHeaderError):
    """Raised when headers cannot be merged into one consistent header."""


class DuplicateSampleName(VCFHeaderError):
    """Raised when the genotype sample columns repeat a sample name."""


class DuplicateContigIndex(VCFHeaderError):
    """Raised when two different contig lines claim the same contig index."""


__all__ = [
    "DuplicateContigIndex",
    "DuplicateSampleName",
    "DuplicateVersionLine",
    "IncompatibleHeaders",
    "MalformedLine",
    "MissingRequiredAttribute",
    "VCFHeaderError",
    "VersionIncompatible",
    "VersionRegression",
]
