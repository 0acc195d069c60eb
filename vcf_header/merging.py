"""Merge the headers of several VCF files into one consistent header.

:func:`merge_header_lines` takes the line sets and sequence dictionaries of
its inputs and returns the lines of a merged header:

* every input must be at least :data:`~vcf_header.config.MINIMUM_MERGE_VERSION`
  and the newest input version wins;
* the sequence dictionaries must reconcile into a single dictionary (the
  largest one, as long as every other dictionary is contained in it);
* lines with a new identity are added as they are, identical repeats are
  skipped, differing INFO/FORMAT definitions are reconciled, other differing
  ID-keyed lines keep their first definition and differing plain lines are
  all kept.

Failures raise :class:`~vcf_header.exceptions.IncompatibleHeaders`; the
inputs are never modified.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import List, Optional, Sequence, Tuple

from .config import MINIMUM_MERGE_VERSION
from .dictionary import DictionaryCompatibility, SequenceDictionary, compare_dictionaries
from .exceptions import IncompatibleHeaders, VersionIncompatible
from .fields import LineCount, LineType
from .header import VCFHeader
from .lines import (
    NUMBER_ATTRIBUTE,
    DESCRIPTION_ATTRIBUTE,
    CompoundHeaderLine,
    ContigHeaderLine,
    HeaderLine,
    HeaderLineKind,
)
from .logging_utils import handle_critical_error, log_message
from .metadata import line_key
from .versions import VCFVersion

_KEEP_CANDIDATE = (DictionaryCompatibility.IDENTICAL, DictionaryCompatibility.SUPERSET)
_RETRY_WITHOUT_ORDER = (DictionaryCompatibility.COMMON_SUBSET, DictionaryCompatibility.DIFFERENT_INDICES)


class HeaderConflictWarner:
    """Reports tolerated conflicts, loudly only when asked to."""

    def __init__(self, emit_warnings: bool = False) -> None:
        self.emit_warnings = emit_warnings
        self.messages: List[str] = []

    def warn(self, message: str) -> None:
        self.messages.append(message)
        log_message(message, level=logging.WARNING if self.emit_warnings else logging.DEBUG)


def newest_version(headers: Sequence[VCFHeader]) -> VCFVersion:
    """Return the newest version among *headers*, rejecting any that are too old."""
    too_old = [header.version for header in headers if header.version < MINIMUM_MERGE_VERSION]
    if too_old:
        handle_critical_error(
            f"Cannot merge headers older than {MINIMUM_MERGE_VERSION}; found "
            + ", ".join(str(version) for version in too_old),
            exc_cls=IncompatibleHeaders,
        )
    return max((header.version for header in headers), key=lambda version: version.rank)


def _describe_contigs(header: VCFHeader) -> str:
    return ", ".join(line.to_header_line() for line in header.get_contig_lines())


def common_sequence_dictionary(headers: Sequence[VCFHeader]) -> Optional[SequenceDictionary]:
    """Find the one sequence dictionary every header's contigs fit into.

    Headers without contig lines are ignored. Dictionaries are visited from
    largest to smallest so that a common superset is met before the subsets
    compared against it.
    """
    candidates: List[Tuple[VCFHeader, SequenceDictionary]] = []
    for header in headers:
        dictionary = header.get_sequence_dictionary()
        if dictionary is not None and not dictionary.is_empty():
            candidates.append((header, dictionary))
    if not candidates:
        return None

    candidates.sort(key=lambda item: len(item[1]), reverse=True)
    candidate = candidates[0][1]
    for header, dictionary in candidates[1:]:
        relationship = compare_dictionaries(candidate, dictionary, check_order=True)
        if relationship in _KEEP_CANDIDATE:
            continue
        if relationship in _RETRY_WITHOUT_ORDER:
            if compare_dictionaries(candidate, dictionary, check_order=False) is DictionaryCompatibility.SUPERSET:
                continue
            if compare_dictionaries(dictionary, candidate, check_order=False) is DictionaryCompatibility.SUPERSET:
                candidate = dictionary
                continue
        handle_critical_error(
            "Cannot merge headers whose sequence dictionaries are incompatible "
            f"({relationship.value}): {candidate.describe()} vs {dictionary.describe()}; "
            f"offending contig lines: {_describe_contigs(header)}",
            exc_cls=IncompatibleHeaders,
        )
    return candidate


def _with_attributes(line: CompoundHeaderLine, **changes) -> CompoundHeaderLine:
    attributes = line.attributes
    attributes.update(changes)
    return type(line)(attributes)


def merge_compound_lines(
    existing: CompoundHeaderLine,
    other: CompoundHeaderLine,
    warner: Optional[HeaderConflictWarner] = None,
) -> CompoundHeaderLine:
    """Reconcile two INFO (or two FORMAT) lines that share an ID.

    Differing counts of the same type widen to ``Number=.``; Integer and Float
    widen to the Float line whatever their counts. Any other type clash cannot
    be reconciled.
    """
    warner = warner or HeaderConflictWarner()
    merged = existing

    if not existing.equals_excluding_extra_attributes(other):
        if existing.line_type is other.line_type:
            merged = _with_attributes(existing, **{NUMBER_ATTRIBUTE: LineCount.UNBOUNDED.value})
            warner.warn(
                f"Promoting {existing.key} field {existing.id!r} to Number=. because of conflicting "
                f"counts: {existing.to_header_line()} vs {other.to_header_line()}"
            )
        elif {existing.line_type, other.line_type} == {LineType.INTEGER, LineType.FLOAT}:
            merged = existing if existing.line_type is LineType.FLOAT else other
            warner.warn(
                f"Promoting Integer to Float for {existing.key} field {existing.id!r}: "
                f"{existing.to_header_line()} vs {other.to_header_line()}"
            )
        else:
            handle_critical_error(
                f"Incompatible {existing.key} definitions for {existing.id!r} cannot be merged: "
                f"{existing.to_header_line()} vs {other.to_header_line()}",
                exc_cls=IncompatibleHeaders,
            )

    if merged.description != other.description:
        if not merged.has_description and other.has_description:
            merged = _with_attributes(merged, **{DESCRIPTION_ATTRIBUTE: other.description})
        warner.warn(
            f"Allowing unequal descriptions for {existing.key} field {existing.id!r}: "
            f"{existing.description!r} vs {other.description!r}"
        )
    return merged


def merge_header_lines(headers: Sequence[VCFHeader], emit_warnings: bool = False) -> List[HeaderLine]:
    """Return the lines of the header obtained by merging *headers*, in sorted order."""

    headers = list(headers)
    if not headers:
        handle_critical_error("No headers were supplied for merging", exc_cls=IncompatibleHeaders)

    version = newest_version(headers)
    dictionary = common_sequence_dictionary(headers)
    warner = HeaderConflictWarner(emit_warnings)

    merged: "OrderedDict[tuple, HeaderLine]" = OrderedDict()
    for header in headers:
        for line in header.metadata_in_sorted_order():
            if line.is_version_line or line.kind is HeaderLineKind.CONTIG:
                continue
            key = line_key(line)
            existing = merged.get(key)
            if existing is None:
                merged[key] = line
            elif existing == line:
                continue
            elif line.kind in (HeaderLineKind.INFO, HeaderLineKind.FORMAT):
                merged[key] = merge_compound_lines(existing, line, warner)
            else:
                warner.warn(
                    f"Ignoring header line already in map: this header line = {line.to_header_line()}; "
                    f"existing header = {existing.to_header_line()}"
                )

    lines: List[HeaderLine] = [HeaderLine.version_line(version)]
    lines.extend(merged.values())
    if dictionary is not None:
        lines.extend(
            ContigHeaderLine.from_sequence_record(record).with_index(position)
            for position, record in enumerate(dictionary)
        )

    try:
        merged_header = VCFHeader(lines)
    except VersionIncompatible as exc:
        handle_critical_error(
            f"The merged header is not valid for {version}: {exc.user_message}",
            exc_cls=IncompatibleHeaders,
            exc_info=exc,
        )
    return merged_header.metadata_in_sorted_order()


def merge_headers(headers: Sequence[VCFHeader], emit_warnings: bool = False, samples: Sequence[str] = ()) -> VCFHeader:
    """Merge *headers* into a new :class:`VCFHeader` carrying *samples*."""
    return VCFHeader(merge_header_lines(headers, emit_warnings), samples)


__all__ = [
    "HeaderConflictWarner",
    "common_sequence_dictionary",
    "merge_compound_lines",
    "merge_header_lines",
    "merge_headers",
    "newest_version",
]
