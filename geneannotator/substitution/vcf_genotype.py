#!/usr/bin/env python3
"""
VCF-compatible genotype strings

Translates a model genotype (e.g. '1/2') into a VCF GT string whose allele
indices point into the locus-wise list of alternative nucleotides, growing
that list when a cell carries a nucleotide not seen before.
"""

from typing import List, Optional, Sequence
from dataclasses import dataclass

from .substitution_model import SubstitutionModel


@dataclass
class CandidateAltNuc:
    """
    Locus-wise candidate alternative nucleotide

    Attributes:
        nuc: Nucleotide
        count: Number of alleles called with this nucleotide
        n_cells: Number of cells carrying this nucleotide
    """
    nuc: str
    count: int = 0
    n_cells: int = 0


def _adapt_alt_allele(locus_alt_nucs: List[CandidateAltNuc],
                      cell_alt_nuc: str,
                      existing_alt_nucs: List[str]) -> str:
    if cell_alt_nuc.upper() == "N":
        return "1"

    for index, candidate in enumerate(locus_alt_nucs):
        if candidate.nuc.upper() == cell_alt_nuc.upper():
            candidate.count += 1
            if cell_alt_nuc not in existing_alt_nucs:
                existing_alt_nucs.append(cell_alt_nuc)
                candidate.n_cells += 1
            return str(index + 1)

    locus_alt_nucs.append(CandidateAltNuc(cell_alt_nuc, count=1, n_cells=1))
    existing_alt_nucs.append(cell_alt_nuc)
    return str(len(locus_alt_nucs))


def _adapt_allele(allele: str,
                  locus_alt_nucs: List[CandidateAltNuc],
                  cell_alt_nucs: Sequence[str],
                  missing_allele: str,
                  existing_alt_nucs: List[str]) -> str:
    if allele == "0":
        return "0"
    if allele in ("-", "."):
        return missing_allele
    if allele == "1":
        nuc = cell_alt_nucs[0] if len(cell_alt_nucs) > 0 else "N"
        return _adapt_alt_allele(locus_alt_nucs, nuc, existing_alt_nucs)
    if allele == "2":
        nuc = cell_alt_nucs[1] if len(cell_alt_nucs) > 1 else "N"
        return _adapt_alt_allele(locus_alt_nucs, nuc, existing_alt_nucs)
    raise ValueError(f"Unsupported character: {allele}. Only '0', '1', '2', '-', and '.' are allowed.")


def genotype_for_vcf(model: SubstitutionModel,
                     genotype: int,
                     locus_alt_nucs: List[CandidateAltNuc],
                     cell_alt_nucs: Optional[Sequence[str]] = None,
                     missing_allele: str = ".") -> str:
    """
    Get a genotype string compatible with the VCF standard

    Args:
        model: Substitution model defining the genotype labels
        genotype: Genotype id
        locus_alt_nucs: Locus-wise alternative nucleotides; updated in place
        cell_alt_nucs: Cell-wise alternative nucleotides, most supported first
        missing_allele: Character for a missing allele

    Returns:
        str: VCF genotype, e.g. '0/2'

    Examples:
        With locus alternatives ['T', 'C'] and cell alternatives ['C'],
        genotype '0/1' becomes '0/2'.
    """
    cell_alt_nucs = cell_alt_nucs or []
    existing_alt_nucs: List[str] = []

    chromosomes = []
    for alleles in model.genotype_label(genotype).split("/"):
        chromosomes.append("".join(
            _adapt_allele(a, locus_alt_nucs, cell_alt_nucs, missing_allele, existing_alt_nucs)
            for a in alleles
        ))
    return "/".join(chromosomes)
