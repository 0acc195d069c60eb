"""Tests for reading header text into a VCFHeader and writing it back."""

from __future__ import annotations

import logging

import pytest

from vcf_header.codec import (
    FilterCache,
    encode_header,
    encode_header_text,
    parse_column_line,
    parse_header_lines,
    parse_header_text,
    parse_metadata_line,
)
from vcf_header.config import PERMISSIVE
from vcf_header.exceptions import MalformedLine
from vcf_header.fields import LineCount, LineType
from vcf_header.lines import HeaderLineKind
from vcf_header.versions import VCFVersion

COLUMN_LINE = "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO"


@pytest.mark.parametrize(
    "text,version,kind",
    [
        ('##INFO=<ID=DP,Number=1,Type=Integer,Description="Depth">', VCFVersion.VCF4_2, HeaderLineKind.INFO),
        ('##FORMAT=<ID=GT,Number=1,Type=String,Description="Genotype">', VCFVersion.VCF4_2, HeaderLineKind.FORMAT),
        ('##FILTER=<ID=q10,Description="Quality below 10">', VCFVersion.VCF4_2, HeaderLineKind.FILTER),
        ("##contig=<ID=chr1,length=100>", VCFVersion.VCF4_2, HeaderLineKind.CONTIG),
        ('##ALT=<ID=DEL,Description="Deletion">', VCFVersion.VCF4_2, HeaderLineKind.STRUCTURED),
        ("##PEDIGREE=<Child=C,Mother=M>", VCFVersion.VCF4_2, HeaderLineKind.PLAIN),
        ("##PEDIGREE=<ID=C,Mother=M>", VCFVersion.VCF4_3, HeaderLineKind.STRUCTURED),
        ("##custom=<Foo=bar>", VCFVersion.VCF4_2, HeaderLineKind.PLAIN),
        ("##custom=<ID=x,Foo=bar>", VCFVersion.VCF4_2, HeaderLineKind.STRUCTURED),
        ("##source=caller", VCFVersion.VCF4_3, HeaderLineKind.PLAIN),
        ("##fileformat=VCFv4.3", VCFVersion.VCF4_3, HeaderLineKind.VERSION),
        ("##contig=<ID=chr1,length=100>", VCFVersion.VCF3_3, HeaderLineKind.PLAIN),
    ],
)
def test_metadata_lines_are_dispatched_on_key_and_version(text, version, kind):
    assert parse_metadata_line(text, version).kind is kind


def test_line_without_equals_is_rejected_in_strict_mode():
    with pytest.raises(MalformedLine, match="Unrecognized header line"):
        parse_metadata_line("##garbage", VCFVersion.VCF4_2)


def test_line_without_equals_is_dropped_in_permissive_mode(caplog):
    with caplog.at_level(logging.WARNING, logger="vcf_header"):
        assert parse_metadata_line("##garbage", VCFVersion.VCF4_2, settings=PERMISSIVE) is None
    assert "Dropping unrecognized header line" in caplog.text


def test_parse_header_lines_builds_header(header_lines):
    header = parse_header_lines(
        header_lines(
            '##INFO=<ID=DP,Number=1,Type=Integer,Description="Depth">',
            "##contig=<ID=chr1,length=100>",
            "##contig=<ID=chr2,length=50>",
            samples=["S1", "S2"],
        )
    )
    assert header.version is VCFVersion.VCF4_2
    assert header.genotype_samples == ["S1", "S2"]
    assert [(line.id, line.contig_index) for line in header.get_contig_lines()] == [("chr1", 0), ("chr2", 1)]
    assert header.get_info_line("DP").line_type is LineType.INTEGER


def test_parse_header_text_ignores_blank_lines_and_line_endings():
    text = "##fileformat=VCFv4.2\r\n\n##source=caller\r\n" + COLUMN_LINE + "\r\n"
    header = parse_header_text(text)
    assert [line.value for line in header.other_lines("source")] == ["caller"]
    assert not header.has_genotyping_data()


@pytest.mark.parametrize(
    "lines,message",
    [
        ([], "empty"),
        (["##source=caller", COLUMN_LINE], "must declare the VCF version"),
        (["##fileformat=VCFv9.9", COLUMN_LINE], "must declare the VCF version"),
        (["##fileformat=VCFv4.2", "##source=caller"], "no #CHROM"),
        (["##fileformat=VCFv4.2", COLUMN_LINE, "##source=caller"], "after the #CHROM line"),
        (["##fileformat=VCFv4.2", "source=caller", COLUMN_LINE], "Not a header line"),
    ],
)
def test_malformed_headers(lines, message):
    with pytest.raises(MalformedLine, match=message):
        parse_header_lines(lines)


@pytest.mark.parametrize(
    "text,message",
    [
        ("#CHROM\tPOS\tID", "Not enough columns"),
        ("#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTERS\tINFO", "'FILTER' but saw 'FILTERS'"),
        (COLUMN_LINE + "\tS1", "'FORMAT' but saw 'S1'"),
        (COLUMN_LINE + "\tFORMAT", "no genotype sample column"),
    ],
)
def test_column_line_validation(text, message):
    with pytest.raises(MalformedLine, match=message):
        parse_column_line(text)


def test_single_sample_can_be_remapped(header_lines):
    header = parse_header_lines(header_lines(samples=["original"]), remapped_sample_name="renamed")
    assert header.genotype_samples == ["renamed"]


@pytest.mark.parametrize("samples", [[], ["S1", "S2"]])
def test_remapping_requires_exactly_one_sample(header_lines, samples):
    with pytest.raises(MalformedLine, match="only single-sample headers can be remapped"):
        parse_header_lines(header_lines(samples=samples), remapped_sample_name="renamed")


def test_legacy_header_uses_positional_grammar(header_lines):
    header = parse_header_lines(
        header_lines(
            '##INFO=NS,1,Integer,"Number of Samples With Data"',
            '##INFO=AA,-1,String,"Ancestral allele, if known"',
            '##FILTER=q10,"Quality below 10"',
            "##reference=1000GenomesPilot-NCBI36",
            version="VCFv3.3",
        )
    )
    assert header.version is VCFVersion.VCF3_3
    ancestral = header.get_info_line("AA")
    assert ancestral.count_type is LineCount.UNBOUNDED
    assert ancestral.description == "Ancestral allele, if known"
    assert header.get_filter_line("q10").description == "Quality below 10"

    encoded = encode_header(header)
    assert '##INFO=AA,-1,String,"Ancestral allele, if known"' in encoded
    assert '##FILTER=q10,"Quality below 10"' in encoded


def test_legacy_line_with_wrong_number_of_values_is_rejected(header_lines):
    with pytest.raises(MalformedLine, match="positional values"):
        parse_header_lines(header_lines("##INFO=NS,1,Integer", version="VCFv3.3"))


def test_vcr_format_key_is_recognized():
    header = parse_header_lines(["##format=VCRv3.2", '##INFO=NS,1,Integer,"Samples"', COLUMN_LINE])
    assert header.version is VCFVersion.VCF3_2
    assert header.version_line.key == "format"


def test_encode_header_round_trips_canonical_text(header_lines):
    lines = header_lines(
        '##INFO=<ID=DP,Number=1,Type=Integer,Description="Depth">',
        '##FORMAT=<ID=GT,Number=1,Type=String,Description="Genotype">',
        '##FILTER=<ID=q10,Description="Quality below 10">',
        "##contig=<ID=chr1,length=100>",
        "##source=caller",
        samples=["S1"],
    )
    header = parse_header_lines(lines)
    assert encode_header(header) == lines
    assert encode_header_text(header) == "\n".join(lines) + "\n"


def test_encode_header_writes_the_current_version_first(header_lines):
    header = parse_header_lines(header_lines("##source=caller", version="VCFv4.1"))
    header.upgrade_version()
    assert encode_header(header)[0] == "##fileformat=VCFv4.3"


class TestFilterCache:
    def test_parses_filter_values(self):
        cache = FilterCache()
        assert cache.parse(".") is None
        assert cache.parse("PASS") == ()
        assert cache.parse("q10;s50") == ("q10", "s50")
        assert len(cache) == 3

    def test_legacy_zero_means_pass(self):
        assert FilterCache(VCFVersion.VCF3_3).parse("0") == ()
        assert FilterCache(VCFVersion.VCF4_2).parse("0") == ("0",)

    def test_empty_filter_is_rejected(self):
        with pytest.raises(MalformedLine):
            FilterCache().parse("")

    def test_results_are_memoized(self):
        cache = FilterCache()
        first = cache.parse("q10;s50")
        assert cache.parse("q10;s50") is first
        cache.clear()
        assert len(cache) == 0
