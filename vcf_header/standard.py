"""Definitions of well-known INFO and FORMAT fields.

These are used to repair headers that reference standard fields without
declaring them, such as the allele-count INFO fields recomputed after a merge
or the ``PL`` FORMAT field that supersedes ``GL``.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Iterable, List

from .lines import FormatHeaderLine, InfoHeaderLine
from .logging_utils import log_message

STANDARD_INFO_DEFINITIONS: dict[str, dict[str, str]] = {
    "AC": {
        "Number": "A",
        "Type": "Integer",
        "Description": "Allele count in genotypes, for each ALT allele, in the same order as listed",
    },
    "AN": {
        "Number": "1",
        "Type": "Integer",
        "Description": "Total number of alleles in called genotypes",
    },
    "AF": {
        "Number": "A",
        "Type": "Float",
        "Description": "Allele Frequency, for each ALT allele, in the same order as listed",
    },
    "DP": {
        "Number": "1",
        "Type": "Integer",
        "Description": "Approximate read depth; some reads may have been filtered",
    },
    "END": {
        "Number": "1",
        "Type": "Integer",
        "Description": "Stop position of the interval",
    },
}

STANDARD_FORMAT_DEFINITIONS: dict[str, dict[str, str]] = {
    "GT": {"Number": "1", "Type": "String", "Description": "Genotype"},
    "GQ": {"Number": "1", "Type": "Integer", "Description": "Genotype Quality"},
    "DP": {
        "Number": "1",
        "Type": "Integer",
        "Description": "Approximate read depth (reads with MQ=255 or with bad mates are filtered)",
    },
    "AD": {
        "Number": "R",
        "Type": "Integer",
        "Description": "Allelic depths for the ref and alt alleles in the order listed",
    },
    "FT": {"Number": "1", "Type": "String", "Description": "Genotype-level filter"},
    "GL": {
        "Number": "G",
        "Type": "Float",
        "Description": "Log-scaled likelihoods for genotypes as defined in the VCF specification",
    },
    "PL": {
        "Number": "G",
        "Type": "Integer",
        "Description": "Normalized, Phred-scaled likelihoods for genotypes as defined in the VCF specification",
    },
}


def _definition(table: dict, field_id: str, kind: str) -> "OrderedDict[str, str]":
    try:
        definition = table[field_id]
    except KeyError as exc:
        raise KeyError(f"No standard {kind} definition for {field_id!r}") from exc
    mapping: "OrderedDict[str, str]" = OrderedDict(ID=field_id)
    mapping.update(definition)
    return mapping


def standard_info_line(field_id: str) -> InfoHeaderLine:
    return InfoHeaderLine(_definition(STANDARD_INFO_DEFINITIONS, field_id, "INFO"))


def standard_format_line(field_id: str) -> FormatHeaderLine:
    return FormatHeaderLine(_definition(STANDARD_FORMAT_DEFINITIONS, field_id, "FORMAT"))


def ensure_standard_info_lines(
    header,
    field_ids: Iterable[str] = ("AC", "AN", "AF"),
    verbose: bool = False,
) -> List[InfoHeaderLine]:
    """Add standard INFO definitions missing from *header*; return the lines added."""

    added = []
    for field_id in field_ids:
        if header.has_info_line(field_id):
            continue
        line = standard_info_line(field_id)
        header.add_line(line)
        log_message(f"Added standard INFO definition for {field_id}", verbose, level=logging.DEBUG)
        added.append(line)
    return added


__all__ = [
    "STANDARD_FORMAT_DEFINITIONS",
    "STANDARD_INFO_DEFINITIONS",
    "ensure_standard_info_lines",
    "standard_format_line",
    "standard_info_line",
]
