"""Tag-list tokenizers for structured VCF header lines.

Structured header values such as ``<ID=DP,Number=1,Type=Integer,...>`` are
turned into an ordered ``{tag: value}`` mapping. Two grammars exist:

* the modern grammar (VCF 4.0 and later) wraps the tag list in ``<...>``,
  names every value, understands backslash escapes inside quotes and only
  checks that the expected tags it finds appear in their expected relative
  order;
* the legacy grammar (VCF 3.x) is positional: values are listed without
  names, without a wrapper, and must match the expected tags exactly.
"""

from __future__ import annotations

from collections import OrderedDict
from typing import List, Sequence

from .exceptions import MalformedLine
from .versions import VCFVersion


def parse_tag_line(
    version: VCFVersion,
    text: str,
    expected_order: Sequence[str],
) -> "OrderedDict[str, str]":
    """Parse *text* with the grammar of *version*."""
    if version.is_legacy:
        return parse_legacy_tags(text, expected_order)
    return parse_modern_tags(text, expected_order)


def parse_modern_tags(text: str, expected_order: Sequence[str]) -> "OrderedDict[str, str]":
    """Parse a ``<Tag=value,...>`` list using the VCF 4.x grammar."""

    tags: "OrderedDict[str, str]" = OrderedDict()
    builder: List[str] = []
    key = ""
    in_quotes = False
    escape = False
    last_index = len(text) - 1

    def store() -> None:
        if key in tags:
            raise MalformedLine(f"Duplicate tag {key!r} in header line: {text}")
        tags[key] = "".join(builder).strip()

    for index, char in enumerate(text):
        if in_quotes:
            if escape:
                # only \" and \\ are escapes; anything else passes through verbatim
                if char not in ('"', "\\"):
                    builder.append("\\")
                builder.append(char)
                escape = False
            elif char == "\\":
                escape = True
            elif char == '"':
                in_quotes = False
            else:
                builder.append(char)
            continue

        if char == '"':
            in_quotes = True
        elif char == "<" and index == 0:
            continue
        elif char == ">" and index == last_index:
            if key:
                store()
            key = ""
            builder.clear()
            break
        elif char == "=" and not key:
            key = "".join(builder).strip()
            builder.clear()
            if not key:
                raise MalformedLine(f"Empty tag name in header line: {text}")
        elif char == ",":
            if not key:
                raise MalformedLine(f"Value without a tag name in header line: {text}")
            store()
            key = ""
            builder.clear()
        else:
            builder.append(char)

    if in_quotes:
        raise MalformedLine(f"Unclosed quote in header line value: {text}")

    if key:
        store()
    elif "".join(builder).strip():
        raise MalformedLine(f"Value without a tag name in header line: {text}")

    if not tags and expected_order:
        raise MalformedLine(f"Header line contains no tags: {text}")

    _check_relative_order(text, tags, expected_order)
    return tags


def _check_relative_order(text: str, tags, expected_order: Sequence[str]) -> None:
    """Expected tags must appear in their relative order and before any extra tag."""

    expected_index = 0
    seen_extra = None
    for tag in tags:
        if tag in expected_order:
            if seen_extra is not None:
                raise MalformedLine(
                    f"Tag {tag!r} must appear before the additional tag {seen_extra!r} "
                    f"in header line: {text}"
                )
            position = list(expected_order).index(tag)
            if position < expected_index:
                raise MalformedLine(
                    f"Tag {tag!r} is out of order; expected order is "
                    f"{', '.join(expected_order)} in header line: {text}"
                )
            expected_index = position + 1
        elif seen_extra is None:
            seen_extra = tag


def parse_legacy_tags(text: str, expected_order: Sequence[str]) -> "OrderedDict[str, str]":
    """Parse a positional ``value,value,...`` list using the VCF 3.x grammar."""

    values: List[str] = []
    builder: List[str] = []
    in_quotes = False

    for char in text:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            values.append("".join(builder))
            builder.clear()
        else:
            builder.append(char)

    if in_quotes:
        raise MalformedLine(f"Unclosed quote in header line value: {text}")
    values.append("".join(builder))

    if len(values) != len(expected_order):
        raise MalformedLine(
            f"Expected {len(expected_order)} positional values "
            f"({', '.join(expected_order)}) but found {len(values)} in header line: {text}"
        )
    return OrderedDict(zip(expected_order, values))


def encode_tags(tags, version: VCFVersion, quoted=()) -> str:
    """Serialize a tag mapping back into the grammar of *version*."""
    if version.is_legacy:
        return ",".join(_legacy_value(value, force=tag in quoted) for tag, value in tags.items())
    parts = []
    for tag, value in tags.items():
        parts.append(f"{tag}={quote_value(value, force=tag in quoted)}")
    return "<" + ",".join(parts) + ">"


def _legacy_value(value: str, force: bool = False) -> str:
    if force or "," in value:
        return f'"{value}"'
    return value


_QUOTE_TRIGGERS = (",", " ", "\t", '"', "=")


def quote_value(value: str, force: bool = False) -> str:
    """Quote *value* when required, escaping unescaped double quotes."""

    value = str(value)
    if not force and not any(char in value for char in _QUOTE_TRIGGERS):
        return value
    return f'"{escape_quotes(value)}"'


def escape_quotes(value: str) -> str:
    """Escape *value* for use between double quotes.

    Unescaped ``"`` gain a backslash and an existing ``\\"`` is left untouched.
    A backslash that precedes another backslash or ends the value is doubled so
    it cannot escape its neighbour or the closing quote.
    """

    escaped: List[str] = []
    for index, char in enumerate(value):
        following = value[index + 1] if index + 1 < len(value) else ""
        if char == "\\" and following in ("\\", ""):
            escaped.append("\\\\")
            continue
        if char == '"' and (index == 0 or value[index - 1] != "\\"):
            escaped.append("\\")
        escaped.append(char)
    return "".join(escaped)


__all__ = [
    "encode_tags",
    "escape_quotes",
    "parse_legacy_tags",
    "parse_modern_tags",
    "parse_tag_line",
    "quote_value",
]
