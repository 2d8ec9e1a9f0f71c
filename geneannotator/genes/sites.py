#!/usr/bin/env python3
"""
Variant sites

A variant site is a genomic position carrying a reference nucleotide and one
or more alternative nucleotides. Genotype vectors on tree nodes are
index-aligned with the ordered list of variant sites.
"""

from typing import Iterable, List, Sequence, Tuple, Union
from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class VariantSite:
    """
    Variant site descriptor

    Attributes:
        chromosome: Chromosome label as present in the gene map
        position: 1-based genomic position
        ref_nuc: Reference nucleotide
        alt_nucs: Alternative nucleotides, most supported first
    """
    chromosome: str
    position: int
    ref_nuc: str
    alt_nucs: Tuple[str, ...] = ()

    def __post_init__(self):
        """Validate site data"""
        if not self.chromosome:
            raise ValueError("Variant site must have a chromosome label")
        if int(self.position) < 1:
            raise ValueError(f"Variant site position must be 1-based positive integer, got {self.position}")
        object.__setattr__(self, "position", int(self.position))
        if isinstance(self.alt_nucs, str):
            object.__setattr__(self, "alt_nucs", tuple(self.alt_nucs.split(",")))
        else:
            object.__setattr__(self, "alt_nucs", tuple(self.alt_nucs))

    @property
    def alt_nuc_string(self) -> str:
        """Alternative nucleotides joined with ','"""
        return ",".join(self.alt_nucs)

    def __str__(self) -> str:
        return f"{self.chromosome}:{self.position}:{self.ref_nuc}>{self.alt_nuc_string}"


def sites_with_copy_number_change(ternary_genotypes: Union[np.ndarray, Sequence[Sequence[int]]],
                                  sites: Sequence[VariantSite]) -> List[VariantSite]:
    """
    Select variant sites whose ternary genotype calls contain a copy number change

    A call below 0 or above 3 marks a copy number change in that cell.

    Args:
        ternary_genotypes: Matrix of ternary calls, one row per site, one column per cell
        sites: Variant sites aligned with the rows

    Returns:
        List[VariantSite]: Sites with at least one copy number change, in input order
    """
    calls = np.asarray(ternary_genotypes)
    if calls.ndim == 1:
        calls = calls.reshape(-1, 1) if len(sites) != 1 else calls.reshape(1, -1)
    if calls.shape[0] != len(sites):
        raise ValueError(
            f"Number of ternary genotype rows ({calls.shape[0]}) does not match number of variant sites ({len(sites)})"
        )
    if calls.size == 0:
        return []

    changed = ((calls < 0) | (calls > 3)).any(axis=1)
    return [site for site, keep in zip(sites, changed) if keep]


def group_sites_by_chromosome(sites: Iterable[VariantSite]) -> dict:
    """Group variant sites by chromosome, keeping input order"""
    groups: dict = {}
    for site in sites:
        groups.setdefault(site.chromosome, []).append(site)
    return groups
