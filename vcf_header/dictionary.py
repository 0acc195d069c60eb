"""Sequence dictionaries derived from, and turned into, ``##contig`` lines.

A :class:`SequenceDictionary` is the ordered list of reference sequences a
header declares. Converting between contig lines and dictionary records is
lossy in both directions: records carry only the attributes listed on
:class:`SequenceRecord`, and contig lines may carry extra attributes that a
dictionary does not keep.

:func:`compare_dictionaries` classifies how two dictionaries relate; the merge
engine uses it to find one dictionary all merged headers agree on.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Set


@dataclass(frozen=True)
class SequenceRecord:
    """One reference sequence. ``length`` is ``None`` when unknown."""

    name: str
    length: Optional[int] = None
    index: int = -1
    assembly: Optional[str] = None
    md5: Optional[str] = None
    uri: Optional[str] = None
    species: Optional[str] = None

    def is_equivalent(self, other: "SequenceRecord") -> bool:
        """Same name and, unless either is unknown, the same length."""
        if self.name != other.name:
            return False
        if self.length is None or other.length is None:
            return True
        return self.length == other.length


class SequenceDictionary:
    """Ordered, name-unique collection of :class:`SequenceRecord` objects.

    Records are re-indexed to their position when the dictionary is built.
    """

    def __init__(self, records: Iterable[SequenceRecord] = ()) -> None:
        self._records: List[SequenceRecord] = []
        self._by_name: Dict[str, SequenceRecord] = {}
        for record in records:
            if record.name in self._by_name:
                raise ValueError(f"Sequence {record.name!r} appears twice in the sequence dictionary")
            indexed = replace(record, index=len(self._records))
            self._records.append(indexed)
            self._by_name[record.name] = indexed

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple]) -> "SequenceDictionary":
        """Build a dictionary from ``(name, length)`` pairs."""
        return cls(SequenceRecord(name, length) for name, length in pairs)

    @property
    def records(self) -> List[SequenceRecord]:
        return list(self._records)

    @property
    def names(self) -> List[str]:
        return [record.name for record in self._records]

    def get(self, name: str) -> Optional[SequenceRecord]:
        return self._by_name.get(name)

    def index_of(self, name: str) -> int:
        record = self._by_name.get(name)
        return -1 if record is None else record.index

    def is_empty(self) -> bool:
        return not self._records

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[SequenceRecord]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __eq__(self, other):
        if not isinstance(other, SequenceDictionary):
            return NotImplemented
        return self._records == other._records

    def __hash__(self) -> int:
        return hash(tuple(self._records))

    def describe(self) -> str:
        """Compact ``[ name(length:N) ... ]`` rendering used in error messages."""
        parts = [f"{record.name}(length:{record.length if record.length is not None else 'unknown'})" for record in self._records]
        return "[ " + " ".join(parts) + (" ]" if parts else "]")

    def __repr__(self) -> str:
        return f"SequenceDictionary({self.describe()})"


class DictionaryCompatibility(enum.Enum):
    IDENTICAL = "identical"
    COMMON_SUBSET = "common_subset"
    SUPERSET = "superset"
    NO_COMMON_CONTIGS = "no_common_contigs"
    UNEQUAL_COMMON_CONTIGS = "unequal_common_contigs"
    NON_CANONICAL_HUMAN_ORDER = "non_canonical_human_order"
    OUT_OF_ORDER = "out_of_order"
    DIFFERENT_INDICES = "different_indices"


# chr1, chr2 and chr10 of hg18, hg19, b36 and b37
_HUMAN_CHR1 = {("chr1", 247249719), ("chr1", 249250621), ("1", 247249719), ("1", 249250621)}
_HUMAN_CHR2 = {("chr2", 242951149), ("chr2", 243199373), ("2", 242951149), ("2", 243199373)}
_HUMAN_CHR10 = {("chr10", 135374737), ("chr10", 135534747), ("10", 135374737), ("10", 135534747)}


def non_canonical_human_order(dictionary: SequenceDictionary) -> bool:
    """True for a known human reference whose chr1, chr2, chr10 are not in that order."""
    chr1 = chr2 = chr10 = None
    for record in dictionary:
        key = (record.name, record.length)
        if key in _HUMAN_CHR1:
            chr1 = record
        if key in _HUMAN_CHR2:
            chr2 = record
        if key in _HUMAN_CHR10:
            chr10 = record
    if chr1 is not None and chr2 is not None and chr10 is not None:
        return not (chr1.index < chr2.index < chr10.index)
    return False


def common_contig_names(first: SequenceDictionary, second: SequenceDictionary) -> Set[str]:
    return {name for name in first.names if name in second}


def _same_relative_order(common: Set[str], first: SequenceDictionary, second: SequenceDictionary) -> bool:
    order_first = [name for name in first.names if name in common]
    order_second = [name for name in second.names if name in common]
    return order_first == order_second


def _same_indices(common: Set[str], first: SequenceDictionary, second: SequenceDictionary) -> bool:
    return all(first.index_of(name) == second.index_of(name) for name in common)


def supersets(first: SequenceDictionary, second: SequenceDictionary) -> bool:
    """True if every record of *second* has an equivalent record in *first*."""
    for record in second:
        candidate = first.get(record.name)
        if candidate is None or not candidate.is_equivalent(record):
            return False
    return True


def find_unequal_common_contigs(
    common: Sequence[str], first: SequenceDictionary, second: SequenceDictionary
) -> Optional[tuple]:
    for name in common:
        a, b = first.get(name), second.get(name)
        if not a.is_equivalent(b):
            return a, b
    return None


def compare_dictionaries(
    first: SequenceDictionary,
    second: SequenceDictionary,
    check_order: bool = True,
) -> DictionaryCompatibility:
    """Classify the relationship between *first* and *second*.

    With ``check_order`` the comparison also rejects lexicographically sorted
    human references and requires common contigs to share relative order and
    absolute indices.
    """
    if check_order and (non_canonical_human_order(first) or non_canonical_human_order(second)):
        return DictionaryCompatibility.NON_CANONICAL_HUMAN_ORDER

    common = common_contig_names(first, second)
    if not common:
        return DictionaryCompatibility.NO_COMMON_CONTIGS
    if find_unequal_common_contigs(sorted(common), first, second) is not None:
        return DictionaryCompatibility.UNEQUAL_COMMON_CONTIGS

    same_order = _same_relative_order(common, first, second)
    if check_order and not same_order:
        return DictionaryCompatibility.OUT_OF_ORDER
    if same_order and len(common) == len(first) and len(common) == len(second):
        return DictionaryCompatibility.IDENTICAL
    if check_order and not _same_indices(common, first, second):
        return DictionaryCompatibility.DIFFERENT_INDICES
    if supersets(first, second):
        return DictionaryCompatibility.SUPERSET
    return DictionaryCompatibility.COMMON_SUBSET


__all__ = [
    "DictionaryCompatibility",
    "SequenceDictionary",
    "SequenceRecord",
    "common_contig_names",
    "compare_dictionaries",
    "non_canonical_human_order",
    "supersets",
]
