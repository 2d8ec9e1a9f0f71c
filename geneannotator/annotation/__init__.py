"""
Tree annotation with gene mutation events
"""

from .tree import Node, count_nodes, index_nodes
from .gene_event import GeneEvent, NodeGeneBucket, normalize_gene_name, BUCKET_KINDS
from .classifier import classify_gene_events, count_gene_events
from .annotator import TreeAnnotationEngine

__all__ = [
    'Node',
    'count_nodes',
    'index_nodes',
    'GeneEvent',
    'NodeGeneBucket',
    'normalize_gene_name',
    'BUCKET_KINDS',
    'classify_gene_events',
    'count_gene_events',
    'TreeAnnotationEngine',
]
