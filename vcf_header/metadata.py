"""Ordered, de-duplicating container for the lines of one header.

Lines are keyed by ``(key, ID)`` when they carry an ID and by ``(key, value)``
otherwise, so two plain lines with the same key but different values may
coexist while an identical repeat is dropped. Adding a line whose key is
already present keeps the existing line and logs the dropped one; replacing a
line always goes through :meth:`MetadataCollection.remove` followed by
:meth:`MetadataCollection.add` (or :meth:`MetadataCollection.replace`).

The collection also holds the single version line of the header.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .exceptions import DuplicateContigIndex, DuplicateVersionLine
from .lines import (
    CONTIG_KEY,
    FILTER_KEY,
    FORMAT_KEY,
    INFO_KEY,
    ContigHeaderLine,
    FilterHeaderLine,
    FormatHeaderLine,
    HeaderLine,
    HeaderLineKind,
    InfoHeaderLine,
)
from .logging_utils import handle_critical_error, log_message
from .validation import ValidationFailure, enforce_validation, validate_lines
from .versions import VCFVersion

_VERSION_SLOT = ("version",)
_TYPED_KINDS = frozenset(
    {
        HeaderLineKind.VERSION,
        HeaderLineKind.INFO,
        HeaderLineKind.FORMAT,
        HeaderLineKind.FILTER,
        HeaderLineKind.CONTIG,
    }
)


def line_key(line: HeaderLine) -> Tuple[str, ...]:
    """Return the key *line* is stored under."""
    if line.is_version_line:
        return _VERSION_SLOT
    if line.is_id_line:
        return ("id",) + line.identity
    return ("plain",) + line.identity


class MetadataCollection:
    """The metadata lines of one header, in input order."""

    def __init__(self, lines: Iterable[HeaderLine] = (), verbose: bool = False) -> None:
        self._lines: "OrderedDict[Tuple[str, ...], HeaderLine]" = OrderedDict()
        self._contigs_by_index: Dict[int, ContigHeaderLine] = {}
        self.verbose = verbose
        for line in lines:
            self.add(line)

    # ------------------------------------------------------------------
    # mutation
    # ------------------------------------------------------------------

    def add(self, line: HeaderLine) -> HeaderLine:
        """Add *line* and return the line now stored under its key.

        A second version line is rejected. Any other line whose key is taken
        is dropped in favour of the line already present.
        """
        key = line_key(line)
        existing = self._lines.get(key)

        if line.is_version_line:
            if existing is not None:
                handle_critical_error(
                    f"Header already has a version line ({existing.to_header_line()}); "
                    f"refusing to add {line.to_header_line()}",
                    exc_cls=DuplicateVersionLine,
                )
            self._lines[key] = line
            return line

        if existing is not None:
            if existing == line:
                log_message(f"Dropping duplicate header line {line.to_header_line()}", level=logging.DEBUG)
            else:
                log_message(
                    f"Header line {line.to_header_line()} collides with existing line "
                    f"{existing.to_header_line()}; keeping the existing line",
                    self.verbose,
                    level=logging.WARNING,
                )
            return existing

        if line.kind is HeaderLineKind.CONTIG:
            holder = self._contigs_by_index.get(line.contig_index)
            if holder is not None:
                handle_critical_error(
                    f"Contig {line.id!r} uses index {line.contig_index}, "
                    f"which is already taken by contig {holder.id!r}",
                    exc_cls=DuplicateContigIndex,
                )
            self._contigs_by_index[line.contig_index] = line

        self._lines[key] = line
        return line

    def remove(self, line: HeaderLine) -> Optional[HeaderLine]:
        """Remove the line stored under *line*'s key and return it."""
        removed = self._lines.pop(line_key(line), None)
        if removed is not None and removed.kind is HeaderLineKind.CONTIG:
            self._contigs_by_index.pop(removed.contig_index, None)
        return removed

    def replace(self, line: HeaderLine) -> Optional[HeaderLine]:
        """Store *line* in place of any line with the same key; return the old line."""
        previous = self.remove(line)
        self.add(line)
        return previous

    def remove_contig_lines(self) -> List[ContigHeaderLine]:
        removed = self.contig_lines()
        for line in removed:
            self.remove(line)
        return removed

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------

    @property
    def version_line(self) -> Optional[HeaderLine]:
        return self._lines.get(_VERSION_SLOT)

    @property
    def version(self) -> Optional[VCFVersion]:
        line = self.version_line
        return None if line is None else line.version

    def find_equivalent(self, line: HeaderLine) -> Optional[HeaderLine]:
        """Return the stored line sharing *line*'s key, whatever its content."""
        return self._lines.get(line_key(line))

    def has_equivalent(self, line: HeaderLine) -> bool:
        return line_key(line) in self._lines

    def in_input_order(self) -> List[HeaderLine]:
        return list(self._lines.values())

    def in_sorted_order(self) -> List[HeaderLine]:
        """Version line first, then every other line sorted by its text encoding."""
        version_line = self.version_line
        others = sorted(
            (line for line in self._lines.values() if not line.is_version_line),
            key=lambda line: line.sort_key(),
        )
        return ([version_line] if version_line is not None else []) + others

    def contig_lines(self) -> List[ContigHeaderLine]:
        """Contig lines ordered by contig index."""
        return [self._contigs_by_index[index] for index in sorted(self._contigs_by_index)]

    def id_lines(self) -> List[HeaderLine]:
        return [line for line in self._lines.values() if line.is_id_line]

    def lines_for_key(self, key: str) -> List[HeaderLine]:
        return [line for line in self._lines.values() if line.key == key]

    def _of_kind(self, kind: HeaderLineKind) -> List[HeaderLine]:
        return [line for line in self._lines.values() if line.kind is kind]

    def info_lines(self) -> List[InfoHeaderLine]:
        return self._of_kind(HeaderLineKind.INFO)

    def format_lines(self) -> List[FormatHeaderLine]:
        return self._of_kind(HeaderLineKind.FORMAT)

    def filter_lines(self) -> List[FilterHeaderLine]:
        return self._of_kind(HeaderLineKind.FILTER)

    def other_lines(self) -> List[HeaderLine]:
        """Lines that are not version, INFO, FORMAT, FILTER or contig lines."""
        return [line for line in self._lines.values() if line.kind not in _TYPED_KINDS]

    def get_id_line(self, key: str, line_id: str) -> Optional[HeaderLine]:
        return self._lines.get(("id", key, line_id))

    def get_info_line(self, line_id: str) -> Optional[InfoHeaderLine]:
        return self.get_id_line(INFO_KEY, line_id)

    def get_format_line(self, line_id: str) -> Optional[FormatHeaderLine]:
        return self.get_id_line(FORMAT_KEY, line_id)

    def get_filter_line(self, line_id: str) -> Optional[FilterHeaderLine]:
        return self.get_id_line(FILTER_KEY, line_id)

    def get_contig_line(self, line_id: str) -> Optional[ContigHeaderLine]:
        return self.get_id_line(CONTIG_KEY, line_id)

    # ------------------------------------------------------------------
    # validation
    # ------------------------------------------------------------------

    def validation_errors(self, version: VCFVersion) -> List[ValidationFailure]:
        """Failures of every non-version line against *version*."""
        return validate_lines(
            (line for line in self._lines.values() if not line.is_version_line),
            version,
        )

    def validate_or_raise(self, version: VCFVersion, settings=None) -> None:
        enforce_validation(self.validation_errors(version), settings, context="header metadata")

    def copy(self) -> "MetadataCollection":
        clone = MetadataCollection(verbose=self.verbose)
        clone._lines = OrderedDict(self._lines)
        clone._contigs_by_index = dict(self._contigs_by_index)
        return clone

    def __iter__(self) -> Iterator[HeaderLine]:
        return iter(list(self._lines.values()))

    def __len__(self) -> int:
        return len(self._lines)

    def __contains__(self, line: object) -> bool:
        if not isinstance(line, HeaderLine):
            return False
        return self._lines.get(line_key(line)) == line

    def __eq__(self, other):
        if not isinstance(other, MetadataCollection):
            return NotImplemented
        return set(self._lines.values()) == set(other._lines.values())

    __hash__ = None


__all__ = ["MetadataCollection", "line_key"]
