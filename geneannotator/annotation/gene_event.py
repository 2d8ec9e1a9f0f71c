#!/usr/bin/env python3
"""
Gene mutation events

A gene event records that a variant site inside a gene changed genotype along
the branch leading to a node, together with the evolutionary events explaining
the change. Each node owns a bucket partitioning its events into the full
collection and its ISA / FSA projections.
"""

from typing import Dict, List, Sequence, Tuple, Union
from dataclasses import dataclass, field

from ..genes.sites import VariantSite
from ..substitution.events import EvolutionaryEventType, events_to_string, sort_events


# Keys of the per-node annotation sequences
METADATA_INDEX = "index"
METADATA_CHR = "chr"
METADATA_POS = "pos"
METADATA_REF_NUC = "ref_nuc"
METADATA_ALT_NUC = "alt_nuc"
METADATA_EVENT_TYPE = "event_type"
METADATA_GENE = "gene"
METADATA_KEYS = (
    METADATA_CHR,
    METADATA_POS,
    METADATA_REF_NUC,
    METADATA_ALT_NUC,
    METADATA_EVENT_TYPE,
    METADATA_GENE,
)
METADATA_ISA_SUFFIX = "_isa"
METADATA_FSA_SUFFIX = "_fsa"

BUCKET_FULL = "full"
BUCKET_ISA = "isa"
BUCKET_FSA = "fsa"
BUCKET_KINDS = (BUCKET_FULL, BUCKET_ISA, BUCKET_FSA)

EVENT_SEPARATOR = "|"


def normalize_gene_name(gene: str) -> str:
    """Replace ';' in gene names with '/' so annotation lists stay parseable"""
    return gene.replace(";", "/")


@dataclass(frozen=True)
class GeneEvent:
    """
    Gene mutation event

    Attributes:
        site: Variant site that changed
        events: Evolutionary events explaining the change, ordered by label
        gene: Gene containing the site
    """
    site: VariantSite
    events: Tuple[EvolutionaryEventType, ...]
    gene: str

    def __post_init__(self):
        """Validate and canonicalize the event set"""
        events = sort_events(self.events)
        if not events:
            raise ValueError("Gene event requires at least one evolutionary event")
        object.__setattr__(self, "events", events)

    @property
    def is_single_mutation(self) -> bool:
        """Whether the event set is exactly the canonical single point mutation"""
        return self.events == (EvolutionaryEventType.SINGLE_MUTATION,)

    @property
    def violates_isa(self) -> bool:
        """Whether any of the events violates the infinite-sites assumption"""
        return any(e.violates_isa for e in self.events)

    @property
    def event_label(self) -> str:
        return events_to_string(self.events, EVENT_SEPARATOR)

    def __str__(self) -> str:
        return f"{self.gene}:{self.site}:{self.event_label}"


@dataclass
class NodeGeneBucket:
    """
    Gene events of one node

    ``full`` is filled while walking the tree; ``isa`` and ``fsa`` are filled by
    the classifier and together hold every entry of ``full``. The bucket is
    frozen once classified.

    Attributes:
        node_id: Id of the owning node
        full: All gene events of the node
        isa: Events consistent with the infinite-sites assumption
        fsa: Recurrent or compound events
    """
    node_id: int
    full: Union[List[GeneEvent], Tuple[GeneEvent, ...]] = field(default_factory=list)
    isa: Union[List[GeneEvent], Tuple[GeneEvent, ...]] = field(default_factory=list)
    fsa: Union[List[GeneEvent], Tuple[GeneEvent, ...]] = field(default_factory=list)
    classified: bool = False

    def add(self, event: GeneEvent):
        """Add an event to the full collection"""
        if self.classified:
            raise RuntimeError(f"Bucket of node {self.node_id} is already classified")
        self.full.append(event)

    def add_classified(self, event: GeneEvent, is_isa: bool):
        """Add an event to the ISA or FSA collection"""
        if self.classified:
            raise RuntimeError(f"Bucket of node {self.node_id} is already classified")
        (self.isa if is_isa else self.fsa).append(event)

    def freeze(self):
        """Mark classification as complete"""
        self.full = tuple(self.full)
        self.isa = tuple(self.isa)
        self.fsa = tuple(self.fsa)
        self.classified = True

    def get(self, kind: str) -> Sequence[GeneEvent]:
        """Events of a bucket kind ('full', 'isa' or 'fsa')"""
        if kind not in BUCKET_KINDS:
            raise ValueError(f"Unknown bucket kind: {kind}. Supported: {BUCKET_KINDS}")
        return getattr(self, kind)

    def columns(self, kind: str = BUCKET_FULL) -> Dict[str, list]:
        """
        Index-aligned annotation sequences of a bucket

        Args:
            kind: 'full', 'isa' or 'fsa'

        Returns:
            Dict[str, list]: chr, pos, ref_nuc, alt_nuc, event_type and gene
            sequences of equal length
        """
        events = self.get(kind)
        return {
            METADATA_CHR: [e.site.chromosome for e in events],
            METADATA_POS: [e.site.position for e in events],
            METADATA_REF_NUC: [e.site.ref_nuc for e in events],
            METADATA_ALT_NUC: [e.site.alt_nuc_string for e in events],
            METADATA_EVENT_TYPE: [e.event_label for e in events],
            METADATA_GENE: [e.gene for e in events],
        }

    def is_empty(self) -> bool:
        return len(self.full) == 0

    def __len__(self) -> int:
        return len(self.full)
