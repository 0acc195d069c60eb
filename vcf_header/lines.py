"""Header line model.

Every ``##`` line of a VCF header becomes one immutable line object. The set
of kinds is closed and each object carries its :class:`HeaderLineKind` tag,
which validation, collection keys and serialization dispatch on:

``VERSION`` / ``PLAIN``
    :class:`HeaderLine`, a bare ``key=value`` pair.
``STRUCTURED``
    :class:`StructuredHeaderLine`, an ID-keyed ``key=<ID=...,...>`` line
    (ALT, META, PEDIGREE, SAMPLE and any other line carrying an ``ID``).
``FILTER``
    :class:`FilterHeaderLine`, which requires a ``Description``.
``CONTIG``
    :class:`ContigHeaderLine`, which also carries its position in the
    sequence dictionary.
``INFO`` / ``FORMAT``
    :class:`InfoHeaderLine` and :class:`FormatHeaderLine`, compound lines
    with a ``Number`` and a ``Type``.

Attribute order is preserved exactly as supplied; it is also the order used
when the line is written back out.
"""

from __future__ import annotations

import enum
import logging
from collections import OrderedDict
from math import comb
from typing import Mapping, Optional, Tuple

from .config import UNBOUND_DESCRIPTION
from .dictionary import SequenceRecord
from .exceptions import MalformedLine, MissingRequiredAttribute
from .fields import LineCount, LineType
from .logging_utils import log_message
from .tokenizer import encode_tags, parse_tag_line
from .versions import VCFVersion, is_format_key

ID_ATTRIBUTE = "ID"
DESCRIPTION_ATTRIBUTE = "Description"
NUMBER_ATTRIBUTE = "Number"
TYPE_ATTRIBUTE = "Type"

# Attributes whose values are always written in double quotes.
ALWAYS_QUOTED_ATTRIBUTES = frozenset({"Description", "Source", "Version"})

INFO_KEY = "INFO"
FORMAT_KEY = "FORMAT"
FILTER_KEY = "FILTER"
CONTIG_KEY = "contig"
ALT_KEY = "ALT"
META_KEY = "META"
PEDIGREE_KEY = "PEDIGREE"
SAMPLE_KEY = "SAMPLE"

_FORBIDDEN_KEY_CHARACTERS = ("<", ">", "=")


class HeaderLineKind(enum.Enum):
    VERSION = "version"
    PLAIN = "plain"
    STRUCTURED = "structured"
    FILTER = "filter"
    CONTIG = "contig"
    INFO = "info"
    FORMAT = "format"


def _check_key(key: str) -> str:
    if not isinstance(key, str) or not key.strip():
        raise MalformedLine("Header line key must be a non-empty string")
    if any(char in key for char in _FORBIDDEN_KEY_CHARACTERS):
        raise MalformedLine(f"Header line key {key!r} must not contain '<', '>' or '='")
    return key.strip()


class HeaderLine:
    """A plain ``##key=value`` header line, including the version line."""

    def __init__(self, key: str, value: str) -> None:
        self._key = _check_key(key)
        self._value = "" if value is None else str(value)
        if is_format_key(self._key):
            # raises MalformedLine for unknown versions
            VCFVersion.from_string(self._value)

    @classmethod
    def version_line(cls, version: VCFVersion) -> "HeaderLine":
        return cls(version.format_key, version.version_string)

    @property
    def kind(self) -> HeaderLineKind:
        if is_format_key(self._key):
            return HeaderLineKind.VERSION
        return HeaderLineKind.PLAIN

    @property
    def key(self) -> str:
        return self._key

    @property
    def value(self) -> str:
        return self._value

    @property
    def id(self) -> Optional[str]:
        return None

    @property
    def is_id_line(self) -> bool:
        return False

    @property
    def is_version_line(self) -> bool:
        return self.kind is HeaderLineKind.VERSION

    @property
    def version(self) -> Optional[VCFVersion]:
        """The version this line declares, for version lines only."""
        if not self.is_version_line:
            return None
        return VCFVersion.from_string(self._value)

    @property
    def identity(self) -> Tuple[str, str]:
        """Key used to de-duplicate lines within one header."""
        return (self._key, self._value)

    def to_string(self, version: Optional[VCFVersion] = None) -> str:
        """Encode the line without its leading ``##``."""
        return f"{self._key}={self._value}"

    def to_header_line(self, version: Optional[VCFVersion] = None) -> str:
        return "##" + self.to_string(version)

    def sort_key(self) -> str:
        return self.to_string()

    def __eq__(self, other):
        if not isinstance(other, HeaderLine):
            return NotImplemented
        if other.is_id_line:
            return False
        return self._key == other._key and self._value == other._value

    def __hash__(self) -> int:
        return hash((self._key, self._value))

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._key!r}, {self._value!r})"


class StructuredHeaderLine(HeaderLine):
    """An ID-keyed ``##key=<ID=...,...>`` line."""

    expected_tags: Tuple[str, ...] = (ID_ATTRIBUTE,)
    required_tags: Tuple[str, ...] = (ID_ATTRIBUTE,)

    def __init__(self, key: str, attributes: Mapping[str, object]) -> None:
        key = _check_key(key)
        self._key = key
        self._attributes = self._normalize_attributes(attributes)
        for name in self.required_tags_for(key):
            if name not in self._attributes:
                raise MissingRequiredAttribute(
                    f"{key} header line is missing required attribute {name!r}: {dict(attributes)}"
                )
        if not self._attributes[ID_ATTRIBUTE]:
            raise MissingRequiredAttribute(f"{key} header line has an empty ID")
        self._value = encode_tags(self._attributes, VCFVersion.VCF4_3, ALWAYS_QUOTED_ATTRIBUTES)

    @staticmethod
    def _normalize_attributes(attributes: Mapping[str, object]) -> "OrderedDict[str, str]":
        if attributes is None:
            attributes = {}
        normalized: "OrderedDict[str, str]" = OrderedDict()
        if ID_ATTRIBUTE in attributes and attributes[ID_ATTRIBUTE] is not None:
            normalized[ID_ATTRIBUTE] = str(attributes[ID_ATTRIBUTE]).strip()
        for name, value in attributes.items():
            if name == ID_ATTRIBUTE or value is None:
                continue
            _check_key(name)
            normalized[name] = str(value).strip()
        return normalized

    @classmethod
    def expected_tags_for(cls, key: str) -> Tuple[str, ...]:
        if key == ALT_KEY:
            return (ID_ATTRIBUTE, DESCRIPTION_ATTRIBUTE)
        return cls.expected_tags

    @classmethod
    def required_tags_for(cls, key: str) -> Tuple[str, ...]:
        if key == ALT_KEY:
            return (ID_ATTRIBUTE, DESCRIPTION_ATTRIBUTE)
        return cls.required_tags

    @classmethod
    def from_text(cls, key: str, text: str, version: VCFVersion) -> "StructuredHeaderLine":
        """Build a line of this class from the raw value after ``key=``."""
        return cls(key, parse_tag_line(version, text, cls.expected_tags_for(key)))

    @property
    def kind(self) -> HeaderLineKind:
        return HeaderLineKind.STRUCTURED

    @property
    def id(self) -> str:
        return self._attributes[ID_ATTRIBUTE]

    @property
    def is_id_line(self) -> bool:
        return True

    @property
    def identity(self) -> Tuple[str, str]:
        return (self._key, self.id)

    @property
    def attributes(self) -> "OrderedDict[str, str]":
        return OrderedDict(self._attributes)

    def get_attribute(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self._attributes.get(name, default)

    @property
    def description(self) -> Optional[str]:
        return self._attributes.get(DESCRIPTION_ATTRIBUTE)

    def to_string(self, version: Optional[VCFVersion] = None) -> str:
        return f"{self._key}={self._value}"

    def _content(self):
        return (self._key, dict(self._attributes))

    def __eq__(self, other):
        if not isinstance(other, HeaderLine):
            return NotImplemented
        if not other.is_id_line or other.kind is not self.kind:
            return False
        return self._content() == other._content()

    def __hash__(self) -> int:
        return hash((self.kind, self._key, frozenset(self._attributes.items())))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._key!r}, {dict(self._attributes)!r})"


class FilterHeaderLine(StructuredHeaderLine):
    """``##FILTER=<ID=...,Description="...">``."""

    expected_tags = (ID_ATTRIBUTE, DESCRIPTION_ATTRIBUTE)
    required_tags = (ID_ATTRIBUTE, DESCRIPTION_ATTRIBUTE)

    def __init__(self, attributes: Mapping[str, object], key: str = FILTER_KEY) -> None:
        super().__init__(key, attributes)

    @classmethod
    def expected_tags_for(cls, key: str) -> Tuple[str, ...]:
        return cls.expected_tags

    @classmethod
    def required_tags_for(cls, key: str) -> Tuple[str, ...]:
        return cls.required_tags

    @classmethod
    def from_text(cls, key: str, text: str, version: VCFVersion) -> "FilterHeaderLine":
        return cls(parse_tag_line(version, text, cls.expected_tags), key=key)

    @property
    def kind(self) -> HeaderLineKind:
        return HeaderLineKind.FILTER

    def to_string(self, version: Optional[VCFVersion] = None) -> str:
        if version is not None and version.is_legacy:
            legacy = OrderedDict((name, self._attributes.get(name, "")) for name in self.expected_tags)
            return f"{self._key}={encode_tags(legacy, version, ALWAYS_QUOTED_ATTRIBUTES)}"
        return super().to_string(version)


class ContigHeaderLine(StructuredHeaderLine):
    """``##contig=<ID=...,length=...>`` with its sequence dictionary position."""

    LENGTH_ATTRIBUTE = "length"
    ASSEMBLY_ATTRIBUTE = "assembly"
    MD5_ATTRIBUTE = "md5"
    URL_ATTRIBUTE = "URL"
    SPECIES_ATTRIBUTE = "species"

    def __init__(self, attributes: Mapping[str, object], contig_index: int, key: str = CONTIG_KEY) -> None:
        if not isinstance(contig_index, int) or isinstance(contig_index, bool) or contig_index < 0:
            raise MissingRequiredAttribute(
                f"contig header line requires a non-negative integer index, got {contig_index!r}"
            )
        super().__init__(key, attributes)
        self._contig_index = contig_index
        length = self._attributes.get(self.LENGTH_ATTRIBUTE)
        if length is not None:
            try:
                int(length)
            except ValueError as exc:
                raise MalformedLine(f"contig {self.id!r} has a non-integer length {length!r}") from exc

    @classmethod
    def expected_tags_for(cls, key: str) -> Tuple[str, ...]:
        return cls.expected_tags

    @classmethod
    def required_tags_for(cls, key: str) -> Tuple[str, ...]:
        return cls.required_tags

    @classmethod
    def from_text(cls, key: str, text: str, version: VCFVersion, contig_index: int = 0) -> "ContigHeaderLine":
        return cls(parse_tag_line(version, text, cls.expected_tags), contig_index, key=key)

    @property
    def kind(self) -> HeaderLineKind:
        return HeaderLineKind.CONTIG

    @property
    def contig_index(self) -> int:
        return self._contig_index

    @property
    def length(self) -> Optional[int]:
        length = self._attributes.get(self.LENGTH_ATTRIBUTE)
        return None if length is None else int(length)

    @property
    def assembly(self) -> Optional[str]:
        return self._attributes.get(self.ASSEMBLY_ATTRIBUTE)

    @property
    def md5(self) -> Optional[str]:
        return self._attributes.get(self.MD5_ATTRIBUTE)

    @property
    def url(self) -> Optional[str]:
        return self._attributes.get(self.URL_ATTRIBUTE)

    @property
    def species(self) -> Optional[str]:
        return self._attributes.get(self.SPECIES_ATTRIBUTE)

    def to_sequence_record(self) -> SequenceRecord:
        return SequenceRecord(
            name=self.id,
            length=self.length,
            index=self._contig_index,
            assembly=self.assembly,
            md5=self.md5,
            uri=self.url,
            species=self.species,
        )

    @classmethod
    def from_sequence_record(cls, record: SequenceRecord, assembly: Optional[str] = None) -> "ContigHeaderLine":
        """Build a contig line from *record*; *assembly* fills in a missing assembly name."""
        attributes: "OrderedDict[str, object]" = OrderedDict()
        attributes[ID_ATTRIBUTE] = record.name
        if record.length is not None:
            attributes[cls.LENGTH_ATTRIBUTE] = record.length
        if record.assembly or assembly:
            attributes[cls.ASSEMBLY_ATTRIBUTE] = record.assembly or assembly
        if record.md5:
            attributes[cls.MD5_ATTRIBUTE] = record.md5
        if record.uri:
            attributes[cls.URL_ATTRIBUTE] = record.uri
        if record.species:
            attributes[cls.SPECIES_ATTRIBUTE] = record.species
        return cls(attributes, max(record.index, 0))

    def with_index(self, contig_index: int) -> "ContigHeaderLine":
        return ContigHeaderLine(self._attributes, contig_index, key=self._key)

    def _content(self):
        return (self._key, dict(self._attributes), self._contig_index)

    def __hash__(self) -> int:
        return hash((self.kind, self._key, frozenset(self._attributes.items()), self._contig_index))

    def __lt__(self, other):
        if not isinstance(other, ContigHeaderLine):
            return NotImplemented
        return self._contig_index < other._contig_index

    def __repr__(self) -> str:
        return f"ContigHeaderLine({dict(self._attributes)!r}, contig_index={self._contig_index})"


class CompoundHeaderLine(StructuredHeaderLine):
    """Shared behaviour of INFO and FORMAT lines."""

    expected_tags = (ID_ATTRIBUTE, NUMBER_ATTRIBUTE, TYPE_ATTRIBUTE, DESCRIPTION_ATTRIBUTE)
    required_tags = (ID_ATTRIBUTE, NUMBER_ATTRIBUTE, TYPE_ATTRIBUTE)
    line_key = ""
    allows_flag = True

    def __init__(self, attributes: Mapping[str, object], verbose: bool = False) -> None:
        normalized = self._normalize_attributes(attributes)
        for name in self.required_tags:
            if name not in normalized:
                raise MissingRequiredAttribute(
                    f"{self.line_key} header line is missing required attribute {name!r}: {dict(normalized)}"
                )

        line_type = LineType.decode(normalized[TYPE_ATTRIBUTE])
        count_type, count = LineCount.decode(normalized[NUMBER_ATTRIBUTE], VCFVersion.VCF4_3)
        if line_type is LineType.FLAG and not self.allows_flag:
            raise MalformedLine(f"{self.line_key} field {normalized.get(ID_ATTRIBUTE)!r} cannot be of type Flag")
        if line_type is LineType.FLAG and not (count_type is LineCount.INTEGER and count == 0):
            log_message(
                f"Repairing {self.line_key} Flag field {normalized.get(ID_ATTRIBUTE)!r}: "
                f"Number={normalized[NUMBER_ATTRIBUTE]} changed to Number=0",
                verbose,
                level=logging.WARNING,
            )
            count_type, count = LineCount.INTEGER, 0
        normalized[NUMBER_ATTRIBUTE] = count_type.encode(count, VCFVersion.VCF4_3)
        normalized[TYPE_ATTRIBUTE] = line_type.value

        self._count_type = count_type
        self._count = count
        self._line_type = line_type
        super().__init__(self.line_key, normalized)

    @classmethod
    def expected_tags_for(cls, key: str) -> Tuple[str, ...]:
        return cls.expected_tags

    @classmethod
    def required_tags_for(cls, key: str) -> Tuple[str, ...]:
        return cls.required_tags

    @classmethod
    def from_text(cls, key: str, text: str, version: VCFVersion, verbose: bool = False) -> "CompoundHeaderLine":
        if key != cls.line_key:
            raise MalformedLine(f"{cls.__name__} cannot be built for key {key!r}")
        return cls(parse_tag_line(version, text, cls.expected_tags), verbose=verbose)

    @property
    def count_type(self) -> LineCount:
        return self._count_type

    @property
    def is_fixed_count(self) -> bool:
        return self._count_type is LineCount.INTEGER

    @property
    def count(self) -> int:
        """The fixed count; only defined when :attr:`is_fixed_count` is true."""
        if not self.is_fixed_count:
            raise ValueError(f"{self.line_key} field {self.id!r} has no fixed count ({self._count_type.value})")
        return self._count

    @property
    def line_type(self) -> LineType:
        return self._line_type

    @property
    def description(self) -> str:
        return self._attributes.get(DESCRIPTION_ATTRIBUTE, UNBOUND_DESCRIPTION)

    @property
    def has_description(self) -> bool:
        return DESCRIPTION_ATTRIBUTE in self._attributes

    def count_for(self, n_alleles: int, ploidy: int = 2) -> Optional[int]:
        """Number of values expected for a site with *n_alleles* alleles (REF included)."""
        if self._count_type is LineCount.INTEGER:
            return self._count
        if self._count_type is LineCount.A:
            return n_alleles - 1
        if self._count_type is LineCount.R:
            return n_alleles
        if self._count_type is LineCount.G:
            return comb(n_alleles + ploidy - 1, ploidy)
        return None

    def equals_excluding_extra_attributes(self, other: "CompoundHeaderLine") -> bool:
        """Compare ID, count and type, ignoring Description and any extra attributes."""
        return (
            self._key == other.key
            and self.id == other.id
            and self._count_type is other.count_type
            and self._count == other._count
            and self._line_type is other.line_type
        )

    def to_string(self, version: Optional[VCFVersion] = None) -> str:
        if version is not None and version.is_legacy:
            legacy = OrderedDict(
                [
                    (ID_ATTRIBUTE, self.id),
                    (NUMBER_ATTRIBUTE, self._count_type.encode(self._count, version)),
                    (TYPE_ATTRIBUTE, self._line_type.value),
                    (DESCRIPTION_ATTRIBUTE, self.description),
                ]
            )
            return f"{self._key}={encode_tags(legacy, version, ALWAYS_QUOTED_ATTRIBUTES)}"
        return super().to_string(version)


class InfoHeaderLine(CompoundHeaderLine):
    """``##INFO=<ID=...,Number=...,Type=...,Description="...">``."""

    line_key = INFO_KEY

    @property
    def kind(self) -> HeaderLineKind:
        return HeaderLineKind.INFO


class FormatHeaderLine(CompoundHeaderLine):
    """``##FORMAT=<ID=...,Number=...,Type=...,Description="...">``."""

    line_key = FORMAT_KEY
    allows_flag = False

    @property
    def kind(self) -> HeaderLineKind:
        return HeaderLineKind.FORMAT


def make_structured_line(key: str, attributes: Mapping[str, object], contig_index: int = 0, verbose: bool = False):
    """Build the typed line class matching *key* from an attribute mapping."""
    if key == INFO_KEY:
        return InfoHeaderLine(attributes, verbose=verbose)
    if key == FORMAT_KEY:
        return FormatHeaderLine(attributes, verbose=verbose)
    if key == FILTER_KEY:
        return FilterHeaderLine(attributes)
    if key == CONTIG_KEY:
        return ContigHeaderLine(attributes, contig_index)
    return StructuredHeaderLine(key, attributes)


__all__ = [
    "ALWAYS_QUOTED_ATTRIBUTES",
    "ALT_KEY",
    "CONTIG_KEY",
    "CompoundHeaderLine",
    "ContigHeaderLine",
    "FILTER_KEY",
    "FORMAT_KEY",
    "FilterHeaderLine",
    "FormatHeaderLine",
    "HeaderLine",
    "HeaderLineKind",
    "INFO_KEY",
    "InfoHeaderLine",
    "META_KEY",
    "PEDIGREE_KEY",
    "SAMPLE_KEY",
    "StructuredHeaderLine",
    "make_structured_line",
]
