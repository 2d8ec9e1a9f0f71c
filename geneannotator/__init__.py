"""
Gene Annotator - annotate genotyped phylogenetic trees with gene mutation events

Main features:
- Finite genotype substitution models (mu_extended, mu_del, constrained_mu_del)
- Gene interval lookup with ANNOVAR keyword, gene list and copy number filters
- Per-branch gene event collection
- ISA / FSA classification of gene events
- Tabular output via pandas

Author: Jarning Gau
"""

__version__ = "0.1.0"
__author__ = "Jarning Gau"

# Export main API interfaces
from .api import annotate_tree, AnnotationResult
from .annotation import Node, TreeAnnotationEngine
from .genes import VariantSite, GeneInterval, GeneIntervalIndex, build_gene_index
from .substitution import SubstitutionModel, get_substitution_model

__all__ = [
    '__version__',
    '__author__',
    # Main API
    'annotate_tree',
    'AnnotationResult',
    # Building blocks
    'Node',
    'TreeAnnotationEngine',
    'VariantSite',
    'GeneInterval',
    'GeneIntervalIndex',
    'build_gene_index',
    'SubstitutionModel',
    'get_substitution_model',
]
