#!/usr/bin/env python3
"""
Tree annotation engine

Walks a tree whose nodes carry per-site genotype vectors and collects, for
every non-root node, the gene events on the branch from its parent.
"""

import logging
import numbers
from typing import Dict, List, Optional, Sequence, Tuple

from ..exceptions import GenotypeFormatError
from ..genes.gene_index import GeneIntervalIndex
from ..genes.sites import VariantSite
from ..substitution.substitution_model import SubstitutionModel
from .classifier import classify_gene_events
from .gene_event import GeneEvent, NodeGeneBucket, normalize_gene_name
from .tree import Node, index_nodes

logger = logging.getLogger(__name__)

GENOTYPES_FORMAT_ERROR = "The genotypes parsed from the input tree can only be numbers."


class TreeAnnotationEngine:
    """
    Gene annotation of a tree

    Usage:
        engine = TreeAnnotationEngine(model, sites, gene_index)
        buckets = engine.annotate(root)
    """

    def __init__(self,
                 model: SubstitutionModel,
                 sites: Sequence[VariantSite],
                 gene_index: GeneIntervalIndex):
        """
        Initialize the engine

        Args:
            model: Substitution model classifying genotype changes
            sites: Variant sites, index-aligned with the genotype vectors
            gene_index: Gene interval index
        """
        self.model = model
        self.sites: Tuple[VariantSite, ...] = tuple(sites)
        self.gene_index = gene_index

        # gene resolution depends only on the site
        self.site_genes: List[Optional[str]] = [
            gene_index.lookup(site.chromosome, site.position) for site in self.sites
        ]
        n_in_genes = sum(1 for g in self.site_genes if g is not None)
        logger.debug("%d of %d variant sites fall in a gene", n_in_genes, len(self.sites))

    @property
    def n_sites(self) -> int:
        return len(self.sites)

    def _coerce_genotypes(self, node: Node) -> Tuple[int, ...]:
        genotypes = node.genotypes
        if genotypes is None or isinstance(genotypes, (str, bytes)):
            raise GenotypeFormatError(f"{GENOTYPES_FORMAT_ERROR} Node {node.id} has no genotype vector.")

        try:
            values = list(genotypes)
        except TypeError:
            raise GenotypeFormatError(
                f"{GENOTYPES_FORMAT_ERROR} Node {node.id} has no genotype vector."
            ) from None

        if len(values) != self.n_sites:
            raise GenotypeFormatError(
                f"Node {node.id} has {len(values)} genotypes, but {self.n_sites} variant sites are given."
            )

        coerced = []
        for site_index, value in enumerate(values):
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise GenotypeFormatError(
                    f"{GENOTYPES_FORMAT_ERROR} Node {node.id}, site {site_index}: {value!r}"
                )
            if isinstance(value, numbers.Integral):
                state = int(value)
            elif float(value).is_integer():
                state = int(value)
            else:
                raise GenotypeFormatError(
                    f"Genotype of node {node.id} at site {site_index} is not an integer code: {value!r}"
                )
            if not self.model.is_valid_state(state):
                raise GenotypeFormatError(
                    f"Genotype of node {node.id} at site {site_index} is out of range "
                    f"(0 - {self.model.n_states - 1}) for {self.model.name}: {value!r}"
                )
            coerced.append(state)
        return tuple(coerced)

    def validate(self, root: Node) -> Dict[int, Tuple[int, ...]]:
        """
        Check every node's genotype vector before anything is annotated

        Args:
            root: Tree root

        Returns:
            Dict[int, Tuple[int, ...]]: Coerced genotype vector of each node

        Raises:
            GenotypeFormatError: A vector is missing, has the wrong length or holds invalid calls
        """
        nodes = index_nodes(root)
        return {node_id: self._coerce_genotypes(node) for node_id, node in nodes.items()}

    def collect(self, root: Node) -> Dict[int, NodeGeneBucket]:
        """
        Collect the gene events of every node (first pass)

        Args:
            root: Tree root

        Returns:
            Dict[int, NodeGeneBucket]: Bucket of every node, keyed by node id,
            with only the full collection filled
        """
        genotypes = self.validate(root)
        buckets = {node_id: NodeGeneBucket(node_id) for node_id in genotypes}

        # parents are tracked on the stack rather than read from node.parent
        stack = [(child, root) for child in reversed(root.children)]
        while stack:
            node, parent = stack.pop()
            stack.extend((child, node) for child in reversed(node.children))

            child_gt = genotypes[node.id]
            parent_gt = genotypes[parent.id]
            bucket = buckets[node.id]

            for site_index, gene in enumerate(self.site_genes):
                if gene is None:
                    continue
                parent_state = parent_gt[site_index]
                child_state = child_gt[site_index]
                if parent_state == child_state:
                    continue

                events = self.model.get_evolutionary_events(parent_state, child_state)
                if events:
                    bucket.add(GeneEvent(self.sites[site_index], events, normalize_gene_name(gene)))

        logger.debug("Collected %d gene events on %d nodes",
                     sum(len(b) for b in buckets.values()), len(buckets))
        return buckets

    def annotate(self, root: Node) -> Dict[int, NodeGeneBucket]:
        """
        Collect and classify the gene events of every node

        Args:
            root: Tree root

        Returns:
            Dict[int, NodeGeneBucket]: Frozen buckets with full, ISA and FSA collections
        """
        buckets = self.collect(root)
        classify_gene_events(buckets)
        return buckets
