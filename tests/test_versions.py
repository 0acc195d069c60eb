"""Tests for the VCF version registry."""

from __future__ import annotations

import pytest

from vcf_header.exceptions import MalformedLine
from vcf_header.versions import VCFVersion, is_format_key, is_version_line


def test_versions_are_totally_ordered_by_rank():
    ordered = sorted(VCFVersion, key=lambda version: version.rank)
    assert ordered == [
        VCFVersion.VCF3_2,
        VCFVersion.VCF3_3,
        VCFVersion.VCF4_0,
        VCFVersion.VCF4_1,
        VCFVersion.VCF4_2,
        VCFVersion.VCF4_3,
    ]
    assert VCFVersion.VCF4_2 < VCFVersion.VCF4_3
    assert VCFVersion.VCF4_3 >= VCFVersion.VCF4_3
    assert not VCFVersion.VCF4_0 > VCFVersion.VCF4_1
    assert max(VCFVersion) is VCFVersion.VCF4_3


@pytest.mark.parametrize(
    "version,other,expected",
    [
        (VCFVersion.VCF4_3, VCFVersion.VCF4_2, True),
        (VCFVersion.VCF4_2, VCFVersion.VCF4_2, True),
        (VCFVersion.VCF4_1, VCFVersion.VCF4_3, False),
        (VCFVersion.VCF3_3, VCFVersion.VCF4_0, False),
    ],
)
def test_is_at_least(version, other, expected):
    assert version.is_at_least(other) is expected


def test_legacy_format_key_and_version_string():
    assert VCFVersion.VCF3_2.format_key == "format"
    assert VCFVersion.VCF3_2.version_string == "VCRv3.2"
    assert VCFVersion.VCF3_3.format_key == "fileformat"
    assert VCFVersion.VCF3_3.is_legacy
    assert not VCFVersion.VCF4_0.is_legacy


def test_from_header_line_round_trips():
    for version in VCFVersion:
        assert VCFVersion.from_header_line(version.header_line()) is version


def test_from_number():
    assert VCFVersion.from_number("4.2") is VCFVersion.VCF4_2
    assert VCFVersion.from_number("VCFv4.1") is VCFVersion.VCF4_1


@pytest.mark.parametrize("text", ["VCFv9.9", "", "vcf4.2"])
def test_unknown_version_strings_are_rejected(text):
    with pytest.raises(MalformedLine):
        VCFVersion.from_string(text)


def test_format_key_helpers():
    assert is_format_key("fileformat")
    assert is_format_key("format")
    assert not is_format_key("source")
    assert not is_format_key(None)
    assert is_version_line("##fileformat=VCFv4.2")
    assert not is_version_line("##source=VCFv4.2")
