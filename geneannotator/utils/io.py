#!/usr/bin/env python3
"""
Input readers

Readers for the files a gene annotation run consumes: the genotyped tree,
variant site descriptions, gene maps (plain or ANNOVAR output), gene
allow-lists and ternary genotype matrices.
"""

import logging
import re
from pathlib import Path
from typing import List, Optional, Union

import numpy as np
import pandas as pd
from Bio import Phylo
from Bio.Nexus.Nexus import NexusError
from Bio.Phylo.NewickIO import NewickError

from ..annotation.annotator import GENOTYPES_FORMAT_ERROR
from ..annotation.tree import Node
from ..exceptions import ConfigurationError, GenotypeFormatError
from ..genes.gene_index import GeneInterval
from ..genes.sites import VariantSite
from .misc import open_text_file, read_first_line

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

ANNOVAR_GENE_HEADER = "Gene.refGene"
GENOTYPES_KEY = "genotypes"

_GENOTYPES_PATTERN = re.compile(GENOTYPES_KEY + r"\s*=\s*\{([^}]*)\}")


def read_variant_sites(file_path: PathLike) -> List[VariantSite]:
    """
    Read variant sites

    Each line holds chromosome, position, reference nucleotide and
    comma-separated alternative nucleotides, separated by whitespace.

    Args:
        file_path: Path to the loci info file

    Returns:
        List[VariantSite]: Sites in file order
    """
    df = pd.read_csv(file_path, sep=r"\s+", header=None, dtype=str, usecols=range(4),
                     keep_default_na=False)
    positions = pd.to_numeric(df[1], errors='coerce')
    if positions.isna().any():
        bad = df[positions.isna()].iloc[0]
        raise ValueError(f"Error! Make sure the position is a number: {';'.join(bad)}")

    sites = [
        VariantSite(chrom, int(pos), ref, tuple(alt.split(",")))
        for chrom, pos, ref, alt in zip(df[0], positions, df[2], df[3])
    ]
    logger.debug("Read %d variant sites from %s", len(sites), file_path)
    return sites


def read_gene_map(file_path: PathLike) -> List[GeneInterval]:
    """
    Read a plain gene map

    Lines starting with '#' are skipped; every other line holds chromosome,
    start, end and gene name separated by whitespace.

    Args:
        file_path: Path to the gene map

    Returns:
        List[GeneInterval]: Records in file order
    """
    records = []
    with open_text_file(file_path) as handle:
        for line_number, line in enumerate(handle, start=1):
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            fields = line.split()
            if len(fields) < 4:
                raise ValueError(f"{file_path}, line {line_number}: expected chromosome, start, end and gene")
            records.append(GeneInterval(fields[0], int(fields[1]), int(fields[2]), fields[3], tuple(fields)))

    if not records:
        raise ValueError(f"{file_path} appears empty.")
    logger.debug("Read %d gene map records from %s", len(records), file_path)
    return records


def _read_table(file_path: PathLike, sep: str) -> pd.DataFrame:
    # ANNOVAR -otherinfo rows carry more fields than header names
    df = pd.read_csv(file_path, sep=sep, dtype=str, keep_default_na=False, index_col=False)
    return df.apply(lambda col: col.str.replace('"', '', regex=False).str.strip())


def read_annovar_gene_map(file_path: PathLike, sep: str = "\t", filter_col: Optional[int] = None) -> List[GeneInterval]:
    """
    Read gene map records from ANNOVAR output

    The first three columns are chromosome, start and end; the gene name is
    taken from the 'Gene.refGene' column. All columns are kept on each record
    so keyword filters can test any of them.

    Args:
        file_path: Path to the ANNOVAR table
        sep: Column separator
        filter_col: Column a keyword filter will be applied to, checked against the header

    Returns:
        List[GeneInterval]: Records in file order
    """
    df = _read_table(file_path, sep)
    headers = [str(c).replace('"', '').strip() for c in df.columns]

    gene_col = next((i for i, h in enumerate(headers) if h.lower() == ANNOVAR_GENE_HEADER.lower()), -1)
    if gene_col < 0:
        raise ValueError(f"Error! The mutation map does not contain a column named {ANNOVAR_GENE_HEADER}")
    if filter_col is not None and filter_col >= len(headers):
        raise ConfigurationError(
            f"Error! The column index used to filter genes in the results of Annovar should not exceed {len(headers)}"
        )

    records = [
        GeneInterval(row[0], int(row[1]), int(row[2]), row[gene_col], tuple(row))
        for row in df.itertuples(index=False, name=None)
    ]
    logger.debug("Read %d ANNOVAR records from %s", len(records), file_path)
    return records


def read_gene_allowlist(file_path: PathLike, sep: str = "\t", column: int = 0) -> List[str]:
    """
    Read genes to keep

    The first line is a header. Quotes are removed and duplicate genes are
    dropped, keeping first occurrence order.

    Args:
        file_path: Path to the gene table
        sep: Column separator
        column: Column index holding gene names

    Returns:
        List[str]: Gene names
    """
    df = _read_table(file_path, sep)
    if column < 0 or column >= df.shape[1]:
        raise ConfigurationError(f"Gene column index {column} out of range for {file_path} ({df.shape[1]} columns)")
    genes = list(dict.fromkeys(df.iloc[:, column]))
    logger.debug("Read %d genes to keep from %s", len(genes), file_path)
    return genes


def read_ternary_genotypes(file_path: PathLike) -> np.ndarray:
    """
    Read the ternary genotype matrix

    One whitespace-separated row of integer calls per variant site.

    Returns:
        np.ndarray: Matrix of shape (n_sites, n_cells)
    """
    read_first_line(file_path)
    calls = np.loadtxt(file_path, dtype=int, ndmin=2)
    logger.debug("Read ternary genotypes of shape %s from %s", calls.shape, file_path)
    return calls


def parse_genotypes(comment: Optional[str]) -> Optional[List[Union[int, float]]]:
    """
    Extract the genotype vector from a node comment such as '&genotypes={0,1,1}'

    Returns:
        List of numbers, or None when the comment carries no genotypes
    """
    if not comment:
        return None
    match = _GENOTYPES_PATTERN.search(comment)
    if match is None:
        return None

    values = []
    for token in match.group(1).split(","):
        token = token.strip()
        try:
            values.append(int(token))
        except ValueError:
            try:
                values.append(float(token))
            except ValueError:
                raise GenotypeFormatError(f"{GENOTYPES_FORMAT_ERROR} Got: {token!r}") from None
    return values


def clade_to_node(clade) -> Node:
    """
    Convert a Bio.Phylo clade hierarchy to Node objects

    Node ids are assigned in preorder starting at 0.
    """
    root = None
    stack = [(clade, None)]
    next_id = 0
    while stack:
        current, parent = stack.pop()
        node = Node(next_id, name=current.name, branch_length=current.branch_length,
                    genotypes=parse_genotypes(current.comment))
        next_id += 1
        if parent is None:
            root = node
        else:
            parent.add_child(node)
        stack.extend((child, node) for child in reversed(current.clades))
    return root


def read_tree(file_path: PathLike) -> Node:
    """
    Read a single genotyped tree in Newick or Nexus format

    The format is Nexus when the first line starts with '#NEXUS'. Genotype
    vectors are read from '[&genotypes={...}]' node comments.

    Args:
        file_path: Path to the tree file

    Returns:
        Node: Tree root

    Raises:
        ValueError: The file is empty or holds more than one tree
    """
    fmt = "nexus" if read_first_line(file_path).upper().startswith("#NEXUS") else "newick"
    with open_text_file(file_path) as handle:
        try:
            trees = list(Phylo.parse(handle, fmt))
        except (NewickError, NexusError) as e:
            raise ValueError(f"Failed to parse {fmt} tree {file_path}: {e}") from e

    if len(trees) != 1:
        raise ValueError(f"Only one input tree is expected, but {len(trees)} provided.")

    root = clade_to_node(trees[0].root)
    logger.debug("Read %s tree from %s", fmt, file_path)
    return root
