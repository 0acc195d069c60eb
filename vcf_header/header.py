"""The :class:`VCFHeader` aggregate.

A header owns its :class:`~vcf_header.metadata.MetadataCollection`, the
genotype sample names from the ``#CHROM`` line and the caches derived from
them. Its version comes from the mandatory version line and can only move
forward: adding a newer version line re-validates every existing line first
and leaves the header untouched if any of them is not valid at the new
version.
"""

from __future__ import annotations

import enum
import logging
import os
from collections import Counter
from typing import Dict, Iterable, List, Optional, Sequence

from .config import DEFAULT_VCF_VERSION, STRICT, ValidationSettings
from .dictionary import SequenceDictionary
from .exceptions import (
    DuplicateSampleName,
    MissingRequiredAttribute,
    VCFHeaderError,
    VersionRegression,
)
from .lines import (
    ContigHeaderLine,
    FilterHeaderLine,
    FormatHeaderLine,
    HeaderLine,
    InfoHeaderLine,
)
from .logging_utils import handle_critical_error, log_message
from .metadata import MetadataCollection
from .standard import standard_format_line
from .validation import ValidationFailure, enforce_validation, validate_line
from .versions import VCFVersion

HEADER_FIELDS = ("CHROM", "POS", "ID", "REF", "ALT", "QUAL", "FILTER", "INFO")
FORMAT_FIELD = "FORMAT"
REFERENCE_KEY = "reference"
GENOTYPE_LIKELIHOODS_KEY = "GL"
GENOTYPE_PL_KEY = "PL"


class UpgradePolicy(enum.Enum):
    """What :meth:`VCFHeader.upgrade_version` does with an older header."""

    DO_NOT_UPGRADE = "do_not_upgrade"
    UPGRADE_OR_FALLBACK = "upgrade_or_fallback"
    UPGRADE_OR_FAIL = "upgrade_or_fail"


class VCFHeader:
    """Versioned metadata lines plus the genotype sample names of one VCF."""

    def __init__(
        self,
        lines: Iterable[HeaderLine],
        samples: Sequence[str] = (),
        settings: Optional[ValidationSettings] = None,
    ) -> None:
        self.settings = settings or STRICT
        lines = list(lines)
        if not any(line.is_version_line for line in lines):
            handle_critical_error(
                "A VCF header requires a ##fileformat version line",
                exc_cls=MissingRequiredAttribute,
            )

        metadata = MetadataCollection(lines, verbose=self.settings.verbose)
        version = metadata.version
        enforce_validation(metadata.validation_errors(version), self.settings, context="header")

        samples = [str(name) for name in samples]
        duplicates = sorted(name for name, count in Counter(samples).items() if count > 1)
        if duplicates:
            handle_critical_error(
                f"Sample names must be unique; duplicated: {', '.join(duplicates)}",
                exc_cls=DuplicateSampleName,
            )

        self._metadata = metadata
        self._version = version
        self._samples: List[str] = samples
        self._sorted_samples: List[str] = sorted(samples)
        self._sample_offsets: Dict[str, int] = {name: offset for offset, name in enumerate(samples)}
        self.samples_were_already_sorted = self._samples == self._sorted_samples
        self._check_for_deprecated_genotype_likelihoods()

    def _check_for_deprecated_genotype_likelihoods(self) -> None:
        if self.has_format_line(GENOTYPE_LIKELIHOODS_KEY) and not self.has_format_line(GENOTYPE_PL_KEY):
            log_message(
                f"Found {GENOTYPE_LIKELIHOODS_KEY} FORMAT field but no {GENOTYPE_PL_KEY} field; "
                f"adding a {GENOTYPE_PL_KEY} FORMAT definition",
                self.settings.verbose,
                level=logging.WARNING,
            )
            self._metadata.add(standard_format_line(GENOTYPE_PL_KEY))

    # ------------------------------------------------------------------
    # version
    # ------------------------------------------------------------------

    @property
    def version(self) -> VCFVersion:
        return self._version

    @property
    def version_line(self) -> HeaderLine:
        return self._metadata.version_line

    def add_line(self, line: HeaderLine) -> HeaderLine:
        """Add *line*, or move to the version it declares if it is a version line.

        Returns the line stored for *line*'s key, which is the pre-existing
        line when a line with the same key was already present.
        """
        if line.is_version_line:
            return self._transition_to(line)
        failure = validate_line(line, self._version)
        enforce_validation([failure] if failure else [], self.settings, context="new header line")
        return self._metadata.add(line)

    def _transition_to(self, line: HeaderLine) -> HeaderLine:
        target = line.version
        if target is self._version:
            return self._metadata.version_line
        if target < self._version:
            handle_critical_error(
                f"Cannot change the header version from {self._version} to the older {target}",
                exc_cls=VersionRegression,
            )
        enforce_validation(
            self._metadata.validation_errors(target),
            self.settings,
            context=f"header being upgraded from {self._version}",
        )
        self._metadata.replace(line)
        log_message(f"Header version changed from {self._version} to {target}", level=logging.DEBUG)
        self._version = target
        return line

    def remove_line(self, line: HeaderLine) -> Optional[HeaderLine]:
        if line.is_version_line:
            handle_critical_error(
                "The version line cannot be removed from a header",
                exc_cls=MissingRequiredAttribute,
            )
        return self._metadata.remove(line)

    def upgrade_version(
        self,
        policy: UpgradePolicy = UpgradePolicy.UPGRADE_OR_FALLBACK,
        target: VCFVersion = DEFAULT_VCF_VERSION,
    ) -> bool:
        """Try to move the header to *target*; return True if the version changed."""
        if policy is UpgradePolicy.DO_NOT_UPGRADE or self._version >= target:
            return False
        failures = self._metadata.validation_errors(target)
        if failures:
            if policy is UpgradePolicy.UPGRADE_OR_FAIL:
                enforce_validation(failures, STRICT, context=f"header being upgraded to {target}")
            log_message(
                f"Header cannot be upgraded from {self._version} to {target}; "
                f"keeping {self._version} ({len(failures)} incompatible line(s))",
                self.settings.verbose,
                level=logging.WARNING,
            )
            return False
        self._transition_to(HeaderLine.version_line(target))
        return True

    def validation_errors(self, version: Optional[VCFVersion] = None) -> List[ValidationFailure]:
        """Failures of the header's lines against *version* (default: its own)."""
        return self._metadata.validation_errors(version or self._version)

    # ------------------------------------------------------------------
    # metadata views
    # ------------------------------------------------------------------

    @property
    def metadata(self) -> MetadataCollection:
        return self._metadata

    def metadata_in_input_order(self) -> List[HeaderLine]:
        return self._metadata.in_input_order()

    def metadata_in_sorted_order(self) -> List[HeaderLine]:
        return self._metadata.in_sorted_order()

    def get_contig_lines(self) -> List[ContigHeaderLine]:
        return self._metadata.contig_lines()

    @property
    def info_lines(self) -> List[InfoHeaderLine]:
        return self._metadata.info_lines()

    @property
    def format_lines(self) -> List[FormatHeaderLine]:
        return self._metadata.format_lines()

    @property
    def filter_lines(self) -> List[FilterHeaderLine]:
        return self._metadata.filter_lines()

    @property
    def id_lines(self) -> List[HeaderLine]:
        return self._metadata.id_lines()

    def get_lines(self, key: str) -> List[HeaderLine]:
        return self._metadata.lines_for_key(key)

    def get_info_line(self, field_id: str) -> Optional[InfoHeaderLine]:
        return self._metadata.get_info_line(field_id)

    def get_format_line(self, field_id: str) -> Optional[FormatHeaderLine]:
        return self._metadata.get_format_line(field_id)

    def get_filter_line(self, filter_id: str) -> Optional[FilterHeaderLine]:
        return self._metadata.get_filter_line(filter_id)

    def has_info_line(self, field_id: str) -> bool:
        return self.get_info_line(field_id) is not None

    def has_format_line(self, field_id: str) -> bool:
        return self.get_format_line(field_id) is not None

    def has_filter_line(self, filter_id: str) -> bool:
        return self.get_filter_line(filter_id) is not None

    def other_lines(self, key: Optional[str] = None) -> List[HeaderLine]:
        lines = self._metadata.other_lines()
        if key is None:
            return lines
        return [line for line in lines if line.key == key]

    def get_other_line_unique(self, key: str) -> Optional[HeaderLine]:
        """Return the only non-typed line with *key*, or ``None``."""
        lines = self.other_lines(key)
        if len(lines) > 1:
            handle_critical_error(
                f"Expected at most one {key!r} header line but found {len(lines)}",
                exc_cls=VCFHeaderError,
            )
        return lines[0] if lines else None

    def add_other_line_unique(self, line: HeaderLine) -> HeaderLine:
        """Replace every non-typed line sharing *line*'s key with *line*."""
        failure = validate_line(line, self._version)
        enforce_validation([failure] if failure else [], self.settings, context="new header line")
        for existing in self.other_lines(line.key):
            self._metadata.remove(existing)
        return self._metadata.add(line)

    # ------------------------------------------------------------------
    # sequence dictionary
    # ------------------------------------------------------------------

    def get_sequence_dictionary(self) -> Optional[SequenceDictionary]:
        """The dictionary described by the contig lines, or ``None`` without any."""
        contigs = self.get_contig_lines()
        if not contigs:
            return None
        return SequenceDictionary(line.to_sequence_record() for line in contigs)

    def set_sequence_dictionary(self, dictionary: SequenceDictionary, assembly: Optional[str] = None) -> None:
        """Replace every contig line with one line per entry of *dictionary*."""
        new_lines = [
            ContigHeaderLine.from_sequence_record(record, assembly=assembly).with_index(position)
            for position, record in enumerate(dictionary)
        ]
        enforce_validation(
            [failure for failure in (validate_line(line, self._version) for line in new_lines) if failure],
            self.settings,
            context="sequence dictionary",
        )
        self._metadata.remove_contig_lines()
        for line in new_lines:
            self._metadata.add(line)

    # ------------------------------------------------------------------
    # samples and columns
    # ------------------------------------------------------------------

    @property
    def genotype_samples(self) -> List[str]:
        return list(self._samples)

    @property
    def n_genotype_samples(self) -> int:
        return len(self._samples)

    @property
    def sample_names_in_order(self) -> List[str]:
        return list(self._sorted_samples)

    @property
    def sample_name_to_offset(self) -> Dict[str, int]:
        return dict(self._sample_offsets)

    def has_genotyping_data(self) -> bool:
        return bool(self._samples)

    @property
    def header_fields(self) -> tuple:
        return HEADER_FIELDS

    @property
    def column_count(self) -> int:
        extra = 1 + len(self._samples) if self.has_genotyping_data() else 0
        return len(HEADER_FIELDS) + extra

    def column_line(self) -> str:
        columns = list(HEADER_FIELDS)
        if self.has_genotyping_data():
            columns.append(FORMAT_FIELD)
            columns.extend(self._samples)
        return "#" + "\t".join(columns)

    # ------------------------------------------------------------------

    def copy(self) -> "VCFHeader":
        clone = VCFHeader.__new__(VCFHeader)
        clone.settings = self.settings
        clone._metadata = self._metadata.copy()
        clone._version = self._version
        clone._samples = list(self._samples)
        clone._sorted_samples = list(self._sorted_samples)
        clone._sample_offsets = dict(self._sample_offsets)
        clone.samples_were_already_sorted = self.samples_were_already_sorted
        return clone

    def __eq__(self, other):
        if not isinstance(other, VCFHeader):
            return NotImplemented
        return (
            self._version is other._version
            and self._metadata == other._metadata
            and self._samples == other._samples
        )

    __hash__ = None

    def __repr__(self) -> str:
        return f"VCFHeader(version={self._version}, lines={len(self._metadata)}, samples={len(self._samples)})"


def reference_assembly(reference_path: str) -> Optional[str]:
    """Best-effort assembly name guessed from a reference file name."""
    name = os.path.basename(reference_path)
    if "b37" in name or "v37" in name:
        return "b37"
    if "b36" in name:
        return "b36"
    if "hg18" in name:
        return "hg18"
    if "hg19" in name:
        return "hg19"
    if "hg38" in name:
        return "hg38"
    return None


def with_updated_contigs(
    header: VCFHeader,
    dictionary: SequenceDictionary,
    reference_path: Optional[str] = None,
) -> VCFHeader:
    """Return a copy of *header* whose contig lines describe *dictionary*.

    With *reference_path* the ``##reference`` line is replaced too and the
    assembly name is guessed from the file name.
    """
    updated = header.copy()
    assembly = None
    if reference_path is not None:
        assembly = reference_assembly(reference_path)
        reference_line = HeaderLine(REFERENCE_KEY, "file://" + os.path.abspath(reference_path))
        updated.add_other_line_unique(reference_line)
    updated.set_sequence_dictionary(dictionary, assembly=assembly)
    return updated


__all__ = [
    "FORMAT_FIELD",
    "HEADER_FIELDS",
    "REFERENCE_KEY",
    "UpgradePolicy",
    "VCFHeader",
    "reference_assembly",
    "with_updated_contigs",
]
