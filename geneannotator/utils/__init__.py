"""
Input readers and file helpers
"""

from .io import (
    read_tree,
    read_variant_sites,
    read_gene_map,
    read_annovar_gene_map,
    read_gene_allowlist,
    read_ternary_genotypes,
    parse_genotypes,
)
from .misc import open_text_file

__all__ = [
    'read_tree',
    'read_variant_sites',
    'read_gene_map',
    'read_annovar_gene_map',
    'read_gene_allowlist',
    'read_ternary_genotypes',
    'parse_genotypes',
    'open_text_file',
]
