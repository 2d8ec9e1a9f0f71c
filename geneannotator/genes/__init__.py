"""
Variant sites and gene interval resolution
"""

from .sites import VariantSite, sites_with_copy_number_change
from .gene_index import (
    GeneInterval,
    GeneIntervalIndex,
    KeywordFilter,
    filter_gene_intervals,
    build_gene_index,
)

__all__ = [
    'VariantSite',
    'sites_with_copy_number_change',
    'GeneInterval',
    'GeneIntervalIndex',
    'KeywordFilter',
    'filter_gene_intervals',
    'build_gene_index',
]
