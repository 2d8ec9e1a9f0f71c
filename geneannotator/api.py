#!/usr/bin/env python3
"""
Gene Annotator Main API Module

Provides a simplified high-level interface for annotating a genotyped tree
with gene mutation events
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Union

import pandas as pd

from .annotation.annotator import TreeAnnotationEngine
from .annotation.classifier import classify_gene_events
from .annotation.gene_event import (
    BUCKET_FSA,
    BUCKET_FULL,
    BUCKET_ISA,
    BUCKET_KINDS,
    METADATA_FSA_SUFFIX,
    METADATA_INDEX,
    METADATA_ISA_SUFFIX,
    METADATA_KEYS,
    NodeGeneBucket,
)
from .annotation.tree import Node
from .genes.gene_index import GeneIntervalIndex
from .genes.sites import VariantSite
from .substitution.model_variants import ModelVariant
from .substitution.substitution_model import SubstitutionModel, get_substitution_model

logger = logging.getLogger(__name__)

RESULT_COLUMNS = ['node', *METADATA_KEYS, 'classification']

_KEY_SUFFIXES = {
    BUCKET_FULL: "",
    BUCKET_ISA: METADATA_ISA_SUFFIX,
    BUCKET_FSA: METADATA_FSA_SUFFIX,
}


@dataclass
class AnnotationResult:
    """
    Gene annotation results

    Attributes:
        buckets: Classified gene event bucket of every node, keyed by node id
        model: Substitution model used
        n_sites: Number of variant sites
        processing_time: Processing time in seconds
        classification: ISA (True) / FSA (False) of each distinct gene event
    """
    buckets: Dict[int, NodeGeneBucket]
    model: SubstitutionModel
    n_sites: int = 0
    processing_time: float = 0.0
    classification: Dict[Any, bool] = field(default_factory=dict)

    @property
    def num_nodes(self) -> int:
        return len(self.buckets)

    @property
    def annotated_nodes(self) -> List[int]:
        """Ids of nodes carrying at least one gene event"""
        return [node_id for node_id, bucket in self.buckets.items() if not bucket.is_empty()]

    @property
    def total_events(self) -> int:
        """Return total number of gene events over all nodes"""
        return sum(len(bucket.full) for bucket in self.buckets.values())

    @property
    def n_isa(self) -> int:
        return sum(len(bucket.isa) for bucket in self.buckets.values())

    @property
    def n_fsa(self) -> int:
        return sum(len(bucket.fsa) for bucket in self.buckets.values())

    def get_event_summary(self) -> Dict[str, int]:
        """Get evolutionary event type statistics"""
        event_counts: Dict[str, int] = {}
        for bucket in self.buckets.values():
            for gene_event in bucket.full:
                for event in gene_event.events:
                    event_counts[event.label] = event_counts.get(event.label, 0) + 1
        return event_counts

    def get_gene_summary(self) -> Dict[str, int]:
        """Get number of gene events per gene"""
        gene_counts: Dict[str, int] = {}
        for bucket in self.buckets.values():
            for gene_event in bucket.full:
                gene_counts[gene_event.gene] = gene_counts.get(gene_event.gene, 0) + 1
        return gene_counts

    def to_metadata(self) -> Dict[int, Dict[str, list]]:
        """
        Per-node annotation sequences

        Only nodes with events appear. Each carries the node index and, for
        every non-empty bucket kind, the chr, pos, ref_nuc, alt_nuc,
        event_type and gene sequences (suffixed with _isa / _fsa for the
        projections).

        Returns:
            Dict[int, Dict[str, list]]: Metadata keyed by node id
        """
        metadata = {}
        for node_id, bucket in self.buckets.items():
            if bucket.is_empty():
                continue
            entry: Dict[str, Any] = {METADATA_INDEX: node_id}
            for kind in BUCKET_KINDS:
                if not bucket.get(kind):
                    continue
                suffix = _KEY_SUFFIXES[kind]
                for key, values in bucket.columns(kind).items():
                    entry[key + suffix] = values
            metadata[node_id] = entry
        return metadata

    def to_df(self, kind: str = BUCKET_FULL) -> pd.DataFrame:
        """Convert annotation results to pandas DataFrame

        Args:
            kind: Bucket kind, one of 'full', 'isa' or 'fsa'

        Returns:
            pd.DataFrame: One row per gene event with columns:
                - node: Node id
                - chr, pos, ref_nuc, alt_nuc: Variant site
                - event_type: Evolutionary event labels joined with '|'
                - gene: Gene name
                - classification: 'ISA' or 'FSA'
        """
        if kind not in BUCKET_KINDS:
            raise ValueError(f"Unknown bucket kind: {kind}. Supported: {BUCKET_KINDS}")

        rows = []
        for node_id, bucket in self.buckets.items():
            isa_events = set(bucket.isa)
            columns = bucket.columns(kind)
            for i, gene_event in enumerate(bucket.get(kind)):
                row = {'node': node_id}
                row.update({key: values[i] for key, values in columns.items()})
                row['classification'] = 'ISA' if gene_event in isa_events else 'FSA'
                rows.append(row)

        return pd.DataFrame(rows, columns=RESULT_COLUMNS)

    def print_summary(self):
        """Print annotation results summary"""
        print(f"Gene Annotation Results Summary")
        print(f"=" * 40)
        print(f"Substitution model: {self.model.name}")
        print(f"Processing time: {self.processing_time:.2f} seconds")
        print(f"")
        print(f"Tree statistics:")
        print(f"  Total nodes: {self.num_nodes}")
        print(f"  Nodes with gene events: {len(self.annotated_nodes)}")
        print(f"  Variant sites: {self.n_sites}")
        print(f"")
        print(f"Gene event statistics:")
        print(f"  Total gene events: {self.total_events}")
        print(f"  ISA: {self.n_isa}")
        print(f"  FSA: {self.n_fsa}")
        for label, count in sorted(self.get_event_summary().items()):
            print(f"  {label} type: {count}")


def annotate_tree(
    root: Node,
    sites: Sequence[VariantSite],
    gene_index: GeneIntervalIndex,
    model: Union[int, str, ModelVariant, SubstitutionModel] = 0,
    deletion_rate: float = 0.0,
    verbose: bool = False
) -> AnnotationResult:
    """
    Annotate a genotyped tree with gene mutation events

    Args:
        root: Tree root; every node carries a genotype vector aligned with sites
        sites: Variant sites
        gene_index: Gene interval index
        model: Substitution model, or a selector for one (0: mu_extended, 1: mu_del, or a variant name)
        deletion_rate: Deletion rate used when the model is built from a selector
        verbose: Whether to show progress information and print the summary

    Returns:
        Annotation results
    """
    start_time = time.time()
    log = logger.info if verbose else logger.debug

    if isinstance(model, SubstitutionModel):
        substitution_model = model
    else:
        substitution_model = get_substitution_model(model, deletion_rate)
    log("Using substitution model: %s", substitution_model.name)

    engine = TreeAnnotationEngine(substitution_model, sites, gene_index)
    log("Collecting gene events over %d variant sites...", engine.n_sites)
    buckets = engine.collect(root)

    classification = classify_gene_events(buckets)

    result = AnnotationResult(
        buckets=buckets,
        model=substitution_model,
        n_sites=engine.n_sites,
        processing_time=time.time() - start_time,
        classification=classification,
    )
    log("Annotation completed in %.2f seconds", result.processing_time)

    if verbose:
        result.print_summary()
    return result
