"""Tests for the ordered, de-duplicating metadata collection."""

from __future__ import annotations

import logging

import pytest

from vcf_header.exceptions import DuplicateContigIndex, DuplicateVersionLine
from vcf_header.lines import (
    ContigHeaderLine,
    FilterHeaderLine,
    FormatHeaderLine,
    HeaderLine,
    InfoHeaderLine,
    StructuredHeaderLine,
)
from vcf_header.metadata import MetadataCollection
from vcf_header.versions import VCFVersion


def _info(field_id: str, description: str = "desc") -> InfoHeaderLine:
    return InfoHeaderLine({"ID": field_id, "Number": "1", "Type": "Integer", "Description": description})


def _contig(name: str, index: int) -> ContigHeaderLine:
    return ContigHeaderLine({"ID": name, "length": "100"}, index)


def test_version_is_derived_from_the_version_line():
    collection = MetadataCollection([HeaderLine.version_line(VCFVersion.VCF4_1), _info("DP")])
    assert collection.version is VCFVersion.VCF4_1
    assert collection.version_line.value == "VCFv4.1"


def test_second_version_line_is_rejected():
    collection = MetadataCollection([HeaderLine.version_line(VCFVersion.VCF4_2)])
    with pytest.raises(DuplicateVersionLine):
        collection.add(HeaderLine.version_line(VCFVersion.VCF4_2))


def test_first_line_wins_and_the_drop_is_logged(caplog):
    original = _info("DP", "first")
    collection = MetadataCollection([original])
    with caplog.at_level(logging.WARNING, logger="vcf_header"):
        stored = collection.add(_info("DP", "second"))
    assert stored is original
    assert collection.get_info_line("DP").description == "first"
    assert any("keeping the existing line" in record.message for record in caplog.records)


def test_replace_is_the_only_override():
    collection = MetadataCollection([_info("DP", "first")])
    previous = collection.replace(_info("DP", "second"))
    assert previous.description == "first"
    assert collection.get_info_line("DP").description == "second"


def test_plain_lines_with_the_same_key_and_different_values_coexist():
    collection = MetadataCollection(
        [HeaderLine("sample", "foo"), HeaderLine("sample", "bar"), HeaderLine("sample", "foo")]
    )
    assert [line.value for line in collection.lines_for_key("sample")] == ["foo", "bar"]


def test_same_id_in_different_keys_does_not_collide():
    collection = MetadataCollection([_info("DP"), FormatHeaderLine({"ID": "DP", "Number": "1", "Type": "Integer"})])
    assert len(collection) == 2


def test_find_equivalent_ignores_content():
    collection = MetadataCollection([_info("DP", "first")])
    assert collection.find_equivalent(_info("DP", "other")).description == "first"
    assert collection.find_equivalent(_info("AF")) is None
    assert _info("DP", "first") in collection
    assert _info("DP", "other") not in collection


def test_remove_returns_stored_line():
    line = _info("DP")
    collection = MetadataCollection([line])
    assert collection.remove(_info("DP", "different content")) is line
    assert collection.remove(line) is None
    assert len(collection) == 0


def test_contig_lines_come_back_in_index_order_not_text_order():
    lines = [_contig("chr10", 2), _contig("chr1", 0), _contig("chr2", 1)]
    collection = MetadataCollection([HeaderLine.version_line(VCFVersion.VCF4_2), *lines])
    assert [line.contig_index for line in collection.contig_lines()] == [0, 1, 2]
    assert [line.id for line in collection.contig_lines()] == ["chr1", "chr2", "chr10"]
    sorted_ids = [line.id for line in collection.in_sorted_order() if line.key == "contig"]
    assert sorted_ids == ["chr1", "chr10", "chr2"]


def test_contig_index_collision_is_rejected():
    collection = MetadataCollection([_contig("chr1", 0)])
    with pytest.raises(DuplicateContigIndex):
        collection.add(_contig("chr2", 0))


def test_removing_a_contig_frees_its_index():
    collection = MetadataCollection([_contig("chr1", 0)])
    collection.remove(_contig("chr1", 0))
    collection.add(_contig("chr2", 0))
    assert [line.id for line in collection.contig_lines()] == ["chr2"]


def test_sorted_order_puts_version_line_first():
    collection = MetadataCollection(
        [HeaderLine("source", "tool"), _info("DP"), HeaderLine.version_line(VCFVersion.VCF4_2), HeaderLine("ALT", "x")]
    )
    sorted_lines = collection.in_sorted_order()
    assert sorted_lines[0].is_version_line
    assert [line.to_string() for line in sorted_lines[1:]] == sorted(
        line.to_string() for line in collection.in_input_order() if not line.is_version_line
    )
    assert collection.in_input_order()[0].key == "source"


def test_typed_views():
    filter_line = FilterHeaderLine({"ID": "q10", "Description": "low"})
    alt_line = StructuredHeaderLine("ALT", {"ID": "DEL", "Description": "Deletion"})
    collection = MetadataCollection(
        [HeaderLine.version_line(VCFVersion.VCF4_2), _info("DP"), filter_line, alt_line, HeaderLine("source", "x")]
    )
    assert collection.filter_lines() == [filter_line]
    assert collection.get_filter_line("q10") is filter_line
    assert collection.get_id_line("ALT", "DEL") is alt_line
    assert [line.key for line in collection.other_lines()] == ["ALT", "source"]
    assert [line.key for line in collection.id_lines()] == ["INFO", "FILTER", "ALT"]


def test_validation_errors_skip_the_version_line():
    collection = MetadataCollection(
        [HeaderLine.version_line(VCFVersion.VCF4_2), StructuredHeaderLine("META", {"ID": "m"})]
    )
    assert collection.validation_errors(VCFVersion.VCF4_3) == []
    errors = collection.validation_errors(VCFVersion.VCF4_2)
    assert [failure.line.key for failure in errors] == ["META"]


def test_copy_is_independent():
    collection = MetadataCollection([_info("DP")])
    clone = collection.copy()
    clone.add(_info("AF"))
    assert len(collection) == 1
    assert len(clone) == 2
