"""Version compatibility rules for header lines.

:func:`validate_line` answers whether one line may appear in a header of a
given :class:`~vcf_header.versions.VCFVersion`; it returns ``None`` for valid
lines and a :class:`ValidationFailure` describing the problem otherwise.
Structural requirements (required attributes, ``Number``/``Type`` values) are
enforced when lines are constructed and are not repeated here.

:func:`enforce_validation` turns a batch of failures into either a
:class:`~vcf_header.exceptions.VersionIncompatible` error or logged warnings,
depending on the caller's :class:`~vcf_header.config.ValidationSettings`.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional

from .config import STRICT, ValidationSettings
from .exceptions import VersionIncompatible
from .lines import (
    ALT_KEY,
    META_KEY,
    PEDIGREE_KEY,
    SAMPLE_KEY,
    HeaderLine,
    HeaderLineKind,
)
from .logging_utils import handle_critical_error, log_message
from .versions import VCFVersion

VALID_CONTIG_ID_PATTERN = re.compile(
    r"^[0-9A-Za-z!#$%&+./:;?@^_|~-][0-9A-Za-z!#$%&*+./:;=?@^_|~-]*$"
)
VALID_FIELD_ID_PATTERN = re.compile(r"^[A-Za-z_][0-9A-Za-z_.]*$")


@dataclass(frozen=True)
class ValidationFailure:
    """Why *line* is not allowed in a header of *version*."""

    line: HeaderLine
    version: VCFVersion
    reason: str

    @property
    def message(self) -> str:
        return f"{self.line.to_header_line()} is not valid for {self.version}: {self.reason}"

    def __str__(self) -> str:
        return self.message


def _requires(line: HeaderLine, version: VCFVersion, minimum: VCFVersion) -> Optional[ValidationFailure]:
    if version.is_at_least(minimum):
        return None
    return ValidationFailure(line, version, f"{line.key} header lines require {minimum} or later")


def _validate_version_line(line, version):
    if line.version is version:
        return None
    return ValidationFailure(
        line, version, f"version line declares {line.value} but the header version is {version}"
    )


def _validate_plain_line(line, version):
    if line.key == PEDIGREE_KEY and version.is_at_least(VCFVersion.VCF4_3):
        return ValidationFailure(
            line, version, "PEDIGREE header lines without an ID are only allowed before VCFv4.3"
        )
    return None


def _validate_structured_line(line, version):
    if line.key in (META_KEY, PEDIGREE_KEY):
        return _requires(line, version, VCFVersion.VCF4_3)
    if line.key in (ALT_KEY, SAMPLE_KEY):
        return _requires(line, version, VCFVersion.VCF4_0)
    return None


def _validate_contig_line(line, version):
    if version.is_at_least(VCFVersion.VCF4_3) and not VALID_CONTIG_ID_PATTERN.match(line.id):
        return ValidationFailure(line, version, f"contig ID {line.id!r} contains reserved characters")
    return None


def _validate_compound_line(line, version):
    if version.is_at_least(VCFVersion.VCF4_3) and not VALID_FIELD_ID_PATTERN.match(line.id):
        return ValidationFailure(
            line, version, f"{line.key} ID {line.id!r} must match {VALID_FIELD_ID_PATTERN.pattern}"
        )
    return None


_RULES = {
    HeaderLineKind.VERSION: _validate_version_line,
    HeaderLineKind.PLAIN: _validate_plain_line,
    HeaderLineKind.STRUCTURED: _validate_structured_line,
    HeaderLineKind.FILTER: lambda line, version: None,
    HeaderLineKind.CONTIG: _validate_contig_line,
    HeaderLineKind.INFO: _validate_compound_line,
    HeaderLineKind.FORMAT: _validate_compound_line,
}


def validate_line(line: HeaderLine, version: VCFVersion) -> Optional[ValidationFailure]:
    """Return ``None`` if *line* is allowed at *version*, else the failure."""
    return _RULES[line.kind](line, version)


def validate_lines(lines: Iterable[HeaderLine], version: VCFVersion) -> List[ValidationFailure]:
    """Return every failure found among *lines*."""
    failures = []
    for line in lines:
        failure = validate_line(line, version)
        if failure is not None:
            failures.append(failure)
    return failures


def enforce_validation(
    failures: Iterable[ValidationFailure],
    settings: Optional[ValidationSettings] = None,
    context: str = "header",
) -> None:
    """Raise or warn about *failures* according to *settings*."""

    failures = list(failures)
    if not failures:
        return
    settings = settings or STRICT
    if settings.strict:
        details = "; ".join(failure.message for failure in failures)
        handle_critical_error(
            f"The {context} contains lines that are not valid for {failures[0].version}: {details}",
            exc_cls=VersionIncompatible,
            failures=failures,
        )
    for failure in failures:
        log_message(failure.message, settings.verbose, level=logging.WARNING)


__all__ = [
    "VALID_CONTIG_ID_PATTERN",
    "VALID_FIELD_ID_PATTERN",
    "ValidationFailure",
    "enforce_validation",
    "validate_line",
    "validate_lines",
]
