"""Tests for the modern and legacy tag-list tokenizers."""

from __future__ import annotations

import pytest

from vcf_header.exceptions import MalformedLine
from vcf_header.tokenizer import (
    escape_quotes,
    parse_legacy_tags,
    parse_modern_tags,
    parse_tag_line,
    quote_value,
)
from vcf_header.versions import VCFVersion

COMPOUND_TAGS = ("ID", "Number", "Type", "Description")


def test_quoted_comma_is_not_a_delimiter():
    tags = parse_modern_tags('ID=foo,Description="a, b"', ("ID", "Description"))
    assert tags == {"ID": "foo", "Description": "a, b"}


def test_angle_brackets_are_stripped_and_order_preserved():
    tags = parse_modern_tags('<ID=DP,Number=1,Type=Integer,Description="Depth">', COMPOUND_TAGS)
    assert list(tags.items()) == [
        ("ID", "DP"),
        ("Number", "1"),
        ("Type", "Integer"),
        ("Description", "Depth"),
    ]


def test_whitespace_around_tags_is_trimmed():
    tags = parse_modern_tags('<ID=GC, Number=0, Type=Flag, Description="Overlap with Gencode CCDS">', COMPOUND_TAGS)
    assert tags["Number"] == "0"
    assert tags["Type"] == "Flag"
    assert tags["Description"] == "Overlap with Gencode CCDS"


def test_escaped_quotes_and_backslashes_are_unescaped():
    tags = parse_modern_tags(r'<ID=X,Description="say \"hi\" to C:\\dir">', ("ID", "Description"))
    assert tags["Description"] == 'say "hi" to C:\\dir'


def test_unknown_backslash_sequences_pass_through():
    tags = parse_modern_tags(r'<ID=X,Description="tab\there">', ("ID", "Description"))
    assert tags["Description"] == r"tab\there"


def test_extra_tags_may_follow_expected_tags():
    tags = parse_modern_tags(
        '<ID=AF,Number=A,Type=Float,Description="Frequency",Source="dbsnp",Version="138">',
        COMPOUND_TAGS,
    )
    assert tags["Source"] == "dbsnp"
    assert tags["Version"] == "138"


def test_missing_expected_tags_are_tolerated():
    tags = parse_modern_tags("<ID=DP,Number=1,Type=Integer>", COMPOUND_TAGS)
    assert "Description" not in tags


@pytest.mark.parametrize(
    "text",
    [
        "<Number=1,ID=DP,Type=Integer,Description=\"x\">",
        "<ID=DP,Type=Integer,Number=1,Description=\"x\">",
        "<ID=DP,Extra=1,Number=1,Type=Integer>",
    ],
)
def test_out_of_order_expected_tags_fail(text):
    with pytest.raises(MalformedLine):
        parse_modern_tags(text, COMPOUND_TAGS)


def test_unclosed_quote_fails():
    with pytest.raises(MalformedLine, match="Unclosed quote"):
        parse_modern_tags('<ID=X,Description="never closed>', ("ID", "Description"))


def test_empty_tag_set_fails_when_tags_are_expected():
    with pytest.raises(MalformedLine):
        parse_modern_tags("<>", ("ID",))


def test_duplicate_tag_fails():
    with pytest.raises(MalformedLine, match="Duplicate tag"):
        parse_modern_tags("<ID=a,ID=b>", ("ID",))


def test_legacy_grammar_is_positional():
    tags = parse_legacy_tags('NS,1,Integer,"Number of Samples, With Data"', COMPOUND_TAGS)
    assert tags == {
        "ID": "NS",
        "Number": "1",
        "Type": "Integer",
        "Description": "Number of Samples, With Data",
    }


@pytest.mark.parametrize("text", ["NS,1,Integer", 'NS,1,Integer,"desc",extra'])
def test_legacy_grammar_requires_exact_tag_count(text):
    with pytest.raises(MalformedLine, match="positional values"):
        parse_legacy_tags(text, COMPOUND_TAGS)


def test_parse_tag_line_dispatches_on_version():
    legacy = parse_tag_line(VCFVersion.VCF3_3, 'q10,"Quality below 10"', ("ID", "Description"))
    modern = parse_tag_line(VCFVersion.VCF4_1, '<ID=q10,Description="Quality below 10">', ("ID", "Description"))
    assert legacy == modern


def test_quote_value_rules():
    assert quote_value("plain") == "plain"
    assert quote_value("has space") == '"has space"'
    assert quote_value("a,b") == '"a,b"'
    assert quote_value("plain", force=True) == '"plain"'
    assert quote_value('say "hi"') == '"say \\"hi\\""'


def test_escape_quotes_never_double_escapes():
    assert escape_quotes('"x"') == '\\"x\\"'
    assert escape_quotes('already \\"escaped\\"') == 'already \\"escaped\\"'


def test_escape_quotes_doubles_backslashes_that_would_escape():
    assert escape_quotes("dir\\") == "dir\\\\"
    assert escape_quotes("a\\\\b") == "a\\\\\\b"
    assert escape_quotes("C:\\tmp") == "C:\\tmp"
    assert quote_value("C:\\dir\\", force=True) == '"C:\\dir\\\\"'
