"""Turn header text into a :class:`~vcf_header.header.VCFHeader` and back.

The first line must be the version line; its version selects the grammar
used for every following line. Lines are dispatched on their key: INFO,
FORMAT, FILTER, contig, ALT, PEDIGREE, META and SAMPLE lines build their
typed line classes, any other ``<...>`` value becomes an ID-keyed line when
the version or the presence of an ``ID`` allows it, and everything else is a
plain ``key=value`` line. The ``#CHROM`` line supplies the sample names.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from .config import STRICT, ValidationSettings
from .exceptions import MalformedLine
from .header import FORMAT_FIELD, HEADER_FIELDS, VCFHeader
from .lines import (
    ALT_KEY,
    CONTIG_KEY,
    FILTER_KEY,
    FORMAT_KEY,
    INFO_KEY,
    META_KEY,
    PEDIGREE_KEY,
    SAMPLE_KEY,
    ContigHeaderLine,
    FilterHeaderLine,
    FormatHeaderLine,
    HeaderLine,
    InfoHeaderLine,
    StructuredHeaderLine,
)
from .logging_utils import handle_critical_error, log_message
from .versions import VCFVersion

METADATA_INDICATOR = "##"
HEADER_INDICATOR = "#"
FIELD_SEPARATOR = "\t"

PASSES_FILTERS = "PASS"
LEGACY_PASSES_FILTERS = "0"
UNFILTERED = "."

_LEGACY_TYPED_KEYS = (INFO_KEY, FORMAT_KEY, FILTER_KEY)


class FilterCache:
    """Memoizes parsed FILTER column values for one reading session."""

    def __init__(self, version: VCFVersion = VCFVersion.VCF4_3) -> None:
        self.version = version
        self._parsed: Dict[str, Optional[Tuple[str, ...]]] = {}

    def parse(self, text: str) -> Optional[Tuple[str, ...]]:
        """``None`` for unfiltered (``.``), ``()`` for PASS, else the failed filter IDs."""
        if text in self._parsed:
            return self._parsed[text]
        if not text:
            raise MalformedLine("The FILTER field must not be empty")
        if text == UNFILTERED:
            parsed = None
        elif text == PASSES_FILTERS or (self.version.is_legacy and text == LEGACY_PASSES_FILTERS):
            parsed = ()
        else:
            parsed = tuple(text.split(";"))
        self._parsed[text] = parsed
        return parsed

    def __len__(self) -> int:
        return len(self._parsed)

    def clear(self) -> None:
        self._parsed.clear()


def parse_metadata_line(
    text: str,
    version: VCFVersion,
    contig_index: int = 0,
    settings: Optional[ValidationSettings] = None,
) -> Optional[HeaderLine]:
    """Build the line object for one ``##`` line, or ``None`` if it is dropped."""

    settings = settings or STRICT
    body = text[len(METADATA_INDICATOR):] if text.startswith(METADATA_INDICATOR) else text
    index_of_equals = body.find("=")
    if index_of_equals < 1:
        if settings.strict:
            handle_critical_error(f"Unrecognized header line: {text}", exc_cls=MalformedLine)
        log_message(f"Dropping unrecognized header line: {text}", settings.verbose, level=logging.WARNING)
        return None

    key = body[:index_of_equals]
    value = body[index_of_equals + 1:]

    if version.is_legacy and key not in _LEGACY_TYPED_KEYS:
        return HeaderLine(key, value)
    if key == INFO_KEY:
        return InfoHeaderLine.from_text(key, value, version, verbose=settings.verbose)
    if key == FORMAT_KEY:
        return FormatHeaderLine.from_text(key, value, version, verbose=settings.verbose)
    if key == FILTER_KEY:
        return FilterHeaderLine.from_text(key, value, version)
    if key == CONTIG_KEY:
        return ContigHeaderLine.from_text(key, value, version, contig_index=contig_index)
    if key in (ALT_KEY, META_KEY, SAMPLE_KEY):
        return StructuredHeaderLine.from_text(key, value, version)
    if key == PEDIGREE_KEY:
        if version.is_at_least(VCFVersion.VCF4_3):
            return StructuredHeaderLine.from_text(key, value, version)
        return HeaderLine(key, value)

    stripped = value.strip()
    if stripped.startswith("<") and stripped.endswith(">"):
        if version.is_at_least(VCFVersion.VCF4_3) or "<ID=" in value:
            return StructuredHeaderLine.from_text(key, stripped, version)
    return HeaderLine(key, value)


def parse_column_line(text: str, remapped_sample_name: Optional[str] = None) -> List[str]:
    """Validate the ``#CHROM`` line and return its sample names."""

    columns = text[len(HEADER_INDICATOR):].split(FIELD_SEPARATOR)
    if len(columns) < len(HEADER_FIELDS):
        handle_critical_error(f"Not enough columns present in header line: {text}", exc_cls=MalformedLine)
    for expected, seen in zip(HEADER_FIELDS, columns):
        if expected != seen:
            handle_critical_error(
                f"Expected column {expected!r} but saw {seen!r} in header line: {text}",
                exc_cls=MalformedLine,
            )

    rest = columns[len(HEADER_FIELDS):]
    if not rest:
        samples: List[str] = []
    else:
        if rest[0] != FORMAT_FIELD:
            handle_critical_error(
                f"Expected column {FORMAT_FIELD!r} but saw {rest[0]!r} in header line: {text}",
                exc_cls=MalformedLine,
            )
        samples = rest[1:]
        if not samples:
            handle_critical_error(
                "The FORMAT column was provided but there is no genotype sample column",
                exc_cls=MalformedLine,
            )

    if remapped_sample_name is not None:
        if len(samples) != 1:
            handle_critical_error(
                f"Cannot remap the sample name to {remapped_sample_name!r} because "
                f"{'no' if not samples else 'multiple'} samples are present; "
                "only single-sample headers can be remapped",
                exc_cls=MalformedLine,
            )
        samples = [remapped_sample_name]
    return samples


def parse_header_lines(
    lines: Iterable[str],
    settings: Optional[ValidationSettings] = None,
    remapped_sample_name: Optional[str] = None,
) -> VCFHeader:
    """Parse header text lines (``##`` lines followed by the ``#CHROM`` line)."""

    settings = settings or STRICT
    cleaned = [line.rstrip("\r\n") for line in lines]
    cleaned = [line for line in cleaned if line.strip()]
    if not cleaned:
        handle_critical_error("The header is empty", exc_cls=MalformedLine)

    try:
        version = VCFVersion.from_header_line(cleaned[0])
    except MalformedLine as exc:
        handle_critical_error(
            f"The first header line must declare the VCF version, got: {cleaned[0]}",
            exc_cls=MalformedLine,
            exc_info=exc,
        )

    metadata: List[HeaderLine] = []
    samples: Optional[List[str]] = None
    contig_counter = 0
    for text in cleaned:
        if samples is not None:
            handle_critical_error(f"Unexpected line after the #CHROM line: {text}", exc_cls=MalformedLine)
        if text.startswith(METADATA_INDICATOR):
            is_contig = text.startswith(f"{METADATA_INDICATOR}{CONTIG_KEY}=") and not version.is_legacy
            line = parse_metadata_line(text, version, contig_index=contig_counter, settings=settings)
            if is_contig:
                contig_counter += 1
            if line is not None:
                metadata.append(line)
        elif text.startswith(HEADER_INDICATOR):
            samples = parse_column_line(text, remapped_sample_name)
        else:
            handle_critical_error(f"Not a header line: {text}", exc_cls=MalformedLine)

    if samples is None:
        handle_critical_error("The header has no #CHROM column line", exc_cls=MalformedLine)
    return VCFHeader(metadata, samples, settings=settings)


def parse_header_text(text: str, settings: Optional[ValidationSettings] = None) -> VCFHeader:
    return parse_header_lines(text.splitlines(), settings=settings)


def encode_header(header: VCFHeader) -> List[str]:
    """Return the header as text lines: the version line, the other lines, then ``#CHROM``."""

    version = header.version
    encoded = [header.version_line.to_header_line(version)]
    for line in header.metadata_in_input_order():
        if line.is_version_line:
            continue
        encoded.append(line.to_header_line(version))
    encoded.append(header.column_line())
    return encoded


def encode_header_text(header: VCFHeader) -> str:
    return "\n".join(encode_header(header)) + "\n"


__all__ = [
    "FilterCache",
    "encode_header",
    "encode_header_text",
    "parse_column_line",
    "parse_header_lines",
    "parse_header_text",
    "parse_metadata_line",
]
