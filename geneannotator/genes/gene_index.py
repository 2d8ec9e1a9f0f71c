#!/usr/bin/env python3
"""
Gene interval index

Resolves a genomic position to the gene whose interval contains it. Intervals
are grouped per chromosome and sorted by (start, end); overlapping intervals
are resolved by taking the first match in that order.
"""

import bisect
import logging
import re
from typing import Collection, Dict, Iterable, List, Optional, Sequence, Tuple
from dataclasses import dataclass, field

from ..exceptions import ConfigurationError
from .sites import VariantSite, group_sites_by_chromosome

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneInterval:
    """
    Gene interval on a chromosome

    Attributes:
        chromosome: Chromosome label
        start: Start position (1-based, inclusive)
        end: End position (1-based, inclusive)
        gene: Gene name
        fields: Raw columns of the source record, used by keyword filters
    """
    chromosome: str
    start: int
    end: int
    gene: str
    fields: Tuple[str, ...] = field(default=(), compare=False, repr=False)

    def __post_init__(self):
        """Validate interval data"""
        object.__setattr__(self, "start", int(self.start))
        object.__setattr__(self, "end", int(self.end))
        if self.end < self.start:
            raise ValueError(
                f"End position cannot be less than start position: {self.chromosome}:{self.start}-{self.end}"
            )
        object.__setattr__(self, "fields", tuple(self.fields))

    def contains(self, chromosome: str, position: int) -> bool:
        """Check whether the interval contains a position"""
        return chromosome == self.chromosome and self.start <= position <= self.end

    def contains_site(self, site: VariantSite) -> bool:
        return self.contains(site.chromosome, site.position)


class GeneIntervalIndex:
    """
    Per-chromosome sorted collection of gene intervals

    Read-only after construction.
    """

    def __init__(self, intervals: Iterable[GeneInterval] = ()):
        """
        Initialize the index

        Args:
            intervals: Gene intervals, in any order
        """
        grouped: Dict[str, List[GeneInterval]] = {}
        for interval in intervals:
            grouped.setdefault(interval.chromosome, []).append(interval)

        self._intervals: Dict[str, List[GeneInterval]] = {}
        self._starts: Dict[str, List[int]] = {}
        self._max_ends: Dict[str, List[int]] = {}

        for chromosome, group in grouped.items():
            # stable: equal (start, end) keep input order
            group.sort(key=lambda iv: (iv.start, iv.end))
            self._intervals[chromosome] = group
            self._starts[chromosome] = [iv.start for iv in group]

            max_ends = []
            running = None
            for iv in group:
                running = iv.end if running is None else max(running, iv.end)
                max_ends.append(running)
            self._max_ends[chromosome] = max_ends

        logger.debug("Indexed %d gene intervals on %d chromosomes", len(self), len(self._intervals))

    def lookup(self, chromosome: str, position: int) -> Optional[str]:
        """
        Resolve a position to a gene name

        Args:
            chromosome: Chromosome label
            position: 1-based position

        Returns:
            Optional[str]: Name of the first interval (in (start, end) order)
            containing the position, None if there is none
        """
        interval = self.find(chromosome, position)
        return interval.gene if interval is not None else None

    def find(self, chromosome: str, position: int) -> Optional[GeneInterval]:
        """Return the first interval containing the position"""
        group = self._intervals.get(chromosome)
        if not group:
            return None

        # candidates are the intervals starting at or before position
        n_candidates = bisect.bisect_right(self._starts[chromosome], position)
        if n_candidates == 0:
            return None

        # the running maximum of ends first reaches position at the first interval covering it
        first = bisect.bisect_left(self._max_ends[chromosome], position, 0, n_candidates)
        if first < n_candidates:
            return group[first]
        return None

    @property
    def chromosomes(self) -> List[str]:
        return sorted(self._intervals)

    def intervals(self, chromosome: str) -> List[GeneInterval]:
        """Sorted intervals of a chromosome"""
        return list(self._intervals.get(chromosome, []))

    def __len__(self) -> int:
        return sum(len(group) for group in self._intervals.values())

    def __contains__(self, chromosome: str) -> bool:
        return chromosome in self._intervals

    def __repr__(self) -> str:
        return f"GeneIntervalIndex(intervals={len(self)}, chromosomes={len(self._intervals)})"


@dataclass(frozen=True)
class KeywordFilter:
    """
    Keyword filter on one column of an annotation table (e.g. ANNOVAR Func.refGene)

    Attributes:
        column: 0-based column index in the record fields
        mode: 'fixed' (exact match against any keyword) or 'regex' (full match of any pattern)
        keywords: Keywords or patterns
    """
    column: int
    mode: str
    keywords: Tuple[str, ...]

    _MODES = {"f": "fixed", "fixed": "fixed", "r": "regex", "regex": "regex"}

    def __post_init__(self):
        """Validate filter options"""
        mode = self._MODES.get(str(self.mode).lower())
        if mode is None:
            raise ConfigurationError(
                f"Keyword filter mode should be either 'f'/'fixed' or 'r'/'regex', got {self.mode!r}"
            )
        object.__setattr__(self, "mode", mode)
        object.__setattr__(self, "keywords", tuple(self.keywords))
        if not self.keywords:
            raise ConfigurationError("Keyword filter requires at least one keyword")
        if self.column < 0:
            raise ConfigurationError(f"Keyword filter column must be non-negative, got {self.column}")
        if mode == "regex":
            try:
                re.compile("|".join(self.keywords))
            except re.error as e:
                raise ConfigurationError(f"Invalid keyword pattern: {e}") from e

    @classmethod
    def parse(cls, column: int, option: str) -> "KeywordFilter":
        """
        Build a filter from comma-separated keywords led by the mode

        Args:
            column: 0-based column index
            option: e.g. 'f,exonic,splicing' or 'r,exonic.*'
        """
        parts = [p.strip() for p in option.split(",")]
        if len(parts) < 2:
            raise ConfigurationError(
                f"Keyword filter {option!r} has a wrong format; expected '<f|r>,keyword[,keyword...]'"
            )
        return cls(column=column, mode=parts[0], keywords=tuple(parts[1:]))

    def matches(self, value: str) -> bool:
        """Check whether a column value is kept"""
        if self.mode == "regex":
            return re.fullmatch("|".join(self.keywords), value) is not None
        return value in self.keywords

    def keep(self, record: GeneInterval) -> bool:
        """Check whether a record is kept"""
        if self.column >= len(record.fields):
            raise ValueError(
                f"Keyword filter column {self.column} exceeds the {len(record.fields)} columns of the gene map"
            )
        return self.matches(record.fields[self.column])


def filter_gene_intervals(intervals: Iterable[GeneInterval],
                          allowed_genes: Optional[Collection[str]] = None,
                          keyword_filter: Optional[KeywordFilter] = None,
                          sites_to_keep: Optional[Sequence[VariantSite]] = None) -> List[GeneInterval]:
    """
    Filter gene map records before indexing

    A record is kept when both stages pass:
    - gene stage: no allow-list is given, or the gene is in it;
    - keyword stage: no keyword filter is given, or the record matches it, or
      the record contains one of ``sites_to_keep``.

    Args:
        intervals: Parsed gene map records
        allowed_genes: Gene allow-list
        keyword_filter: Keyword filter on a record column
        sites_to_keep: Sites rescuing records rejected by the keyword filter

    Returns:
        List[GeneInterval]: Kept records in input order
    """
    allowed = set(allowed_genes) if allowed_genes is not None else None
    rescue = group_sites_by_chromosome(sites_to_keep) if sites_to_keep is not None else {}

    kept = []
    for record in intervals:
        if allowed is not None and record.gene not in allowed:
            continue
        if keyword_filter is not None and not keyword_filter.keep(record):
            if not any(record.contains_site(site) for site in rescue.get(record.chromosome, ())):
                continue
        kept.append(record)
    return kept


def build_gene_index(intervals: Iterable[GeneInterval],
                     allowed_genes: Optional[Collection[str]] = None,
                     keyword_filter: Optional[KeywordFilter] = None,
                     sites_to_keep: Optional[Sequence[VariantSite]] = None) -> GeneIntervalIndex:
    """
    Filter gene map records and build the interval index

    See filter_gene_intervals for the filtering semantics.
    """
    intervals = list(intervals)
    kept = filter_gene_intervals(intervals, allowed_genes, keyword_filter, sites_to_keep)
    if len(kept) < len(intervals):
        logger.info("Kept %d of %d gene map records after filtering", len(kept), len(intervals))
    return GeneIntervalIndex(kept)
