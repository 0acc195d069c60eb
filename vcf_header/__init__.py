"""VCF header metadata engine.

This package parses, validates and merges the metadata header of Variant Call
Format (VCF) files: the version line, INFO/FORMAT/FILTER/contig definitions,
ALT/META/PEDIGREE/SAMPLE lines and free-form ``key=value`` lines. Importing
the package immediately verifies that the runtime dependencies :mod:`vcfpy`
and :mod:`pysam` are available, so the interoperability helpers can rely on
them without deferred import errors.
"""

from __future__ import annotations


def _import_dependency(name: str):
    try:
        module = __import__(name)
    except ImportError as exc:  # pragma: no cover - exercised when dependency missing
        raise ModuleNotFoundError(
            f"The '{name}' package is required for the VCF header engine. "
            f"Please install it with 'pip install {name}'."
        ) from exc
    return module


vcfpy = _import_dependency("vcfpy")
pysam = _import_dependency("pysam")

VCFPY_AVAILABLE = True
PYSAM_AVAILABLE = True

from .config import (  # noqa: E402
    DEFAULT_VCF_VERSION,
    MINIMUM_MERGE_VERSION,
    PERMISSIVE,
    STRICT,
    ValidationSettings,
)
from .dictionary import (  # noqa: E402
    DictionaryCompatibility,
    SequenceDictionary,
    SequenceRecord,
    compare_dictionaries,
)
from .exceptions import (  # noqa: E402
    DuplicateContigIndex,
    DuplicateSampleName,
    DuplicateVersionLine,
    IncompatibleHeaders,
    MalformedLine,
    MissingRequiredAttribute,
    VCFHeaderError,
    VersionIncompatible,
    VersionRegression,
)
from .fields import LineCount, LineType  # noqa: E402
from .header import UpgradePolicy, VCFHeader, with_updated_contigs  # noqa: E402
from .lines import (  # noqa: E402
    ContigHeaderLine,
    FilterHeaderLine,
    FormatHeaderLine,
    HeaderLine,
    HeaderLineKind,
    InfoHeaderLine,
    StructuredHeaderLine,
)
from .merging import merge_header_lines, merge_headers  # noqa: E402
from .metadata import MetadataCollection  # noqa: E402
from .tokenizer import parse_tag_line  # noqa: E402
from .validation import ValidationFailure, validate_line  # noqa: E402
from .versions import VCFVersion  # noqa: E402
from .codec import FilterCache, encode_header, parse_header_lines, parse_header_text  # noqa: E402

__all__ = [
    "vcfpy",
    "pysam",
    "VCFPY_AVAILABLE",
    "PYSAM_AVAILABLE",
    "ContigHeaderLine",
    "DEFAULT_VCF_VERSION",
    "DictionaryCompatibility",
    "DuplicateContigIndex",
    "DuplicateSampleName",
    "DuplicateVersionLine",
    "FilterCache",
    "FilterHeaderLine",
    "FormatHeaderLine",
    "HeaderLine",
    "HeaderLineKind",
    "IncompatibleHeaders",
    "InfoHeaderLine",
    "LineCount",
    "LineType",
    "MINIMUM_MERGE_VERSION",
    "MalformedLine",
    "MetadataCollection",
    "MissingRequiredAttribute",
    "PERMISSIVE",
    "STRICT",
    "SequenceDictionary",
    "SequenceRecord",
    "StructuredHeaderLine",
    "UpgradePolicy",
    "VCFHeader",
    "VCFHeaderError",
    "VCFVersion",
    "ValidationFailure",
    "ValidationSettings",
    "VersionIncompatible",
    "VersionRegression",
    "compare_dictionaries",
    "encode_header",
    "merge_header_lines",
    "merge_headers",
    "parse_header_lines",
    "parse_header_text",
    "parse_tag_line",
    "validate_line",
    "with_updated_contigs",
]
