"""Configuration values shared by the header engine.

Settings are passed explicitly to the calls that need them; nothing in this
module is mutated at runtime.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from .versions import VCFVersion

DEFAULT_VCF_VERSION = VCFVersion.VCF4_3
"""Version used when a header is upgraded or created without an explicit version."""

MINIMUM_MERGE_VERSION = VCFVersion.VCF4_2
"""Oldest version whose headers can take part in a merge."""

UNBOUND_DESCRIPTION = "Not provided in original VCF header"
"""Placeholder description for INFO/FORMAT lines that declare none."""


@dataclass(frozen=True)
class ValidationSettings:
    """How version-compatibility failures are treated by one caller.

    ``strict`` raises :class:`~vcf_header.exceptions.VersionIncompatible` on the
    first batch of failures; otherwise each failure is logged as a warning.
    ``verbose`` echoes repairs and warnings to stdout as well as the logger.
    """

    strict: bool = True
    verbose: bool = False

    def permissive(self) -> "ValidationSettings":
        return replace(self, strict=False)


STRICT = ValidationSettings()
PERMISSIVE = ValidationSettings(strict=False)


__all__ = [
    "DEFAULT_VCF_VERSION",
    "MINIMUM_MERGE_VERSION",
    "PERMISSIVE",
    "STRICT",
    "UNBOUND_DESCRIPTION",
    "ValidationSettings",
]
