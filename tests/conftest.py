"""Shared pytest fixtures for the vcf_header test suite."""

from __future__ import annotations

from typing import Iterable, Sequence

import pytest

from vcf_header import STRICT, VCFHeader, parse_header_lines

COLUMN_LINE = "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO"


def header_text_lines(
    *metadata: str,
    version: str = "VCFv4.2",
    samples: Sequence[str] = (),
) -> list:
    """Return the text lines of a minimal header with *metadata* lines."""
    column_line = COLUMN_LINE
    if samples:
        column_line += "\tFORMAT\t" + "\t".join(samples)
    return [f"##fileformat={version}", *metadata, column_line]


@pytest.fixture
def make_header():
    """Return a factory building a :class:`VCFHeader` from metadata text lines."""

    def _make(*metadata: str, version: str = "VCFv4.2", samples: Iterable[str] = (), settings=STRICT) -> VCFHeader:
        return parse_header_lines(header_text_lines(*metadata, version=version, samples=list(samples)), settings=settings)

    return _make


@pytest.fixture
def contig_lines():
    """Return a factory of ``##contig`` text lines for ``(name, length)`` pairs."""

    def _lines(*contigs):
        return [f"##contig=<ID={name},length={length}>" for name, length in contigs]

    return _lines


@pytest.fixture
def header_lines():
    """Return :func:`header_text_lines` for tests that need raw header text."""

    return header_text_lines
