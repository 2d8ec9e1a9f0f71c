#!/usr/bin/env python3
"""
ISA / FSA classification of gene events

Runs once every node's full bucket is complete. A gene event value is
consistent with the infinite-sites assumption (ISA) only when it occurs once
in the whole tree and is a plain single mutation; any recurrent or compound
event goes to the FSA bucket.
"""

import logging
from collections import Counter
from typing import Dict, Mapping

from .gene_event import GeneEvent, NodeGeneBucket

logger = logging.getLogger(__name__)


def count_gene_events(buckets: Mapping[int, NodeGeneBucket]) -> Counter:
    """Count each distinct gene event value across all nodes"""
    counts: Counter = Counter()
    for bucket in buckets.values():
        counts.update(bucket.full)
    return counts


def is_isa_event(event: GeneEvent, occurrences: int) -> bool:
    """ISA iff the value occurs exactly once and is the canonical single mutation"""
    return occurrences == 1 and event.is_single_mutation


def classify_gene_events(buckets: Mapping[int, NodeGeneBucket]) -> Dict[GeneEvent, bool]:
    """
    Split every node's gene events into ISA and FSA buckets

    Args:
        buckets: Node buckets with complete full collections

    Returns:
        Dict[GeneEvent, bool]: Classification of each distinct value (True for ISA)
    """
    counts = count_gene_events(buckets)
    classification = {event: is_isa_event(event, n) for event, n in counts.items()}

    for bucket in buckets.values():
        for event in bucket.full:
            bucket.add_classified(event, classification[event])
        bucket.freeze()

    n_isa = sum(1 for is_isa in classification.values() if is_isa)
    logger.info("Classified %d distinct gene events: %d ISA, %d FSA",
                len(classification), n_isa, len(classification) - n_isa)
    return classification
