"""Conversions between :class:`~vcf_header.header.VCFHeader` and the header
objects of :mod:`vcfpy` and :mod:`pysam`.

vcfpy headers are converted line by line, pysam variant headers through their
text form, and sequence dictionaries to and from the ``@SQ`` records of a
:class:`pysam.AlignmentHeader`.
"""

from __future__ import annotations

from collections import OrderedDict
from typing import List, Optional

from . import pysam, vcfpy
from .codec import parse_header_text, parse_metadata_line
from .config import STRICT, ValidationSettings
from .dictionary import SequenceDictionary, SequenceRecord
from .exceptions import MalformedLine
from .header import VCFHeader
from .lines import (
    CONTIG_KEY,
    HeaderLine,
    HeaderLineKind,
    make_structured_line,
)
from .logging_utils import handle_critical_error, log_message
from .versions import is_format_key

_VCFPY_TYPED_LINES = {
    HeaderLineKind.INFO: "InfoHeaderLine",
    HeaderLineKind.FORMAT: "FormatHeaderLine",
    HeaderLineKind.FILTER: "FilterHeaderLine",
    HeaderLineKind.CONTIG: "ContigHeaderLine",
}

# @SQ tag for each SequenceRecord attribute
_SQ_TAGS = (
    ("name", "SN"),
    ("length", "LN"),
    ("assembly", "AS"),
    ("md5", "M5"),
    ("uri", "UR"),
    ("species", "SP"),
)


def _vcfpy_line(line: HeaderLine):
    if not line.is_id_line:
        return vcfpy.header.HeaderLine(line.key, line.value)
    mapping = line.attributes
    class_name = _VCFPY_TYPED_LINES.get(line.kind)
    if class_name is not None:
        return getattr(vcfpy.header, class_name).from_mapping(mapping)
    return vcfpy.header.SimpleHeaderLine(line.key, line.value, mapping)


def to_vcfpy_header(header: VCFHeader):
    """Return a :class:`vcfpy.Header` holding the lines and samples of *header*."""

    lines = [_vcfpy_line(header.version_line)]
    for line in header.metadata_in_input_order():
        if line.is_version_line:
            continue
        lines.append(_vcfpy_line(line))
    return vcfpy.header.Header(lines=lines, samples=vcfpy.header.SamplesInfos(header.genotype_samples))


def from_vcfpy_header(vcfpy_header, settings: Optional[ValidationSettings] = None) -> VCFHeader:
    """Build a :class:`VCFHeader` from a :class:`vcfpy.Header`."""

    settings = settings or STRICT
    source_lines = list(getattr(vcfpy_header, "lines", []))
    version_lines = [line for line in source_lines if is_format_key(getattr(line, "key", None))]
    if not version_lines:
        handle_critical_error("The vcfpy header has no fileformat line", exc_cls=MalformedLine)
    version = HeaderLine(version_lines[0].key, version_lines[0].value).version

    lines: List[HeaderLine] = []
    contig_counter = 0
    for source in source_lines:
        key = source.key
        mapping = getattr(source, "mapping", None)
        if is_format_key(key):
            lines.append(HeaderLine(key, source.value))
        elif isinstance(mapping, dict) and mapping.get("ID") is not None:
            attributes = OrderedDict((name, value) for name, value in mapping.items())
            lines.append(
                make_structured_line(key, attributes, contig_index=contig_counter, verbose=settings.verbose)
            )
            if key == CONTIG_KEY:
                contig_counter += 1
        else:
            parsed = parse_metadata_line(f"##{key}={source.value}", version, contig_counter, settings)
            if parsed is not None:
                lines.append(parsed)

    samples = []
    sample_infos = getattr(vcfpy_header, "samples", None)
    if sample_infos is not None and hasattr(sample_infos, "names"):
        samples = list(sample_infos.names)
    return VCFHeader(lines, samples, settings=settings)


def read_vcf_header(path: str, settings: Optional[ValidationSettings] = None) -> VCFHeader:
    """Read the header of the VCF file at *path* with :mod:`vcfpy`."""

    reader = vcfpy.Reader.from_path(path)
    try:
        header = from_vcfpy_header(reader.header, settings)
    finally:
        reader.close()
    log_message(f"Read header of {path} ({header.version}, {header.n_genotype_samples} samples)")
    return header


def from_pysam_variant_header(variant_header, settings: Optional[ValidationSettings] = None) -> VCFHeader:
    """Build a :class:`VCFHeader` from a :class:`pysam.VariantHeader`."""
    return parse_header_text(str(variant_header), settings=settings)


def to_pysam_variant_header(header: VCFHeader):
    """Return a :class:`pysam.VariantHeader` with the lines and samples of *header*.

    htslib writes its own version line, so the version line of *header* is not
    copied.
    """
    variant_header = pysam.VariantHeader()
    for line in header.metadata_in_input_order():
        if line.is_version_line:
            continue
        if line.kind is HeaderLineKind.FILTER and line.id == "PASS":
            continue
        variant_header.add_line(line.to_header_line(header.version))
    for sample in header.genotype_samples:
        variant_header.add_sample(sample)
    return variant_header


def dictionary_from_alignment_header(alignment_header) -> SequenceDictionary:
    """Build a sequence dictionary from the ``@SQ`` records of a :class:`pysam.AlignmentHeader`."""

    records = []
    for entry in alignment_header.to_dict().get("SQ", []):
        values = {}
        for attribute, tag in _SQ_TAGS:
            if tag in entry:
                values[attribute] = entry[tag]
        if "length" in values:
            values["length"] = int(values["length"])
        records.append(SequenceRecord(**values))
    return SequenceDictionary(records)


def dictionary_to_alignment_header(dictionary: SequenceDictionary):
    """Return a :class:`pysam.AlignmentHeader` whose ``@SQ`` records describe *dictionary*."""

    sequences = []
    for record in dictionary:
        if record.length is None:
            handle_critical_error(
                f"Sequence {record.name!r} has no length; SAM @SQ records require LN",
                exc_cls=ValueError,
            )
        entry = {}
        for attribute, tag in _SQ_TAGS:
            value = getattr(record, attribute)
            if value is not None:
                entry[tag] = value
        sequences.append(entry)
    return pysam.AlignmentHeader.from_dict({"HD": {"VN": "1.6"}, "SQ": sequences})


__all__ = [
    "dictionary_from_alignment_header",
    "dictionary_to_alignment_header",
    "from_pysam_variant_header",
    "from_vcfpy_header",
    "read_vcf_header",
    "to_pysam_variant_header",
    "to_vcfpy_header",
]
