#!/usr/bin/env python3
"""
Genotype substitution model variants

Each variant is a plain data descriptor: the genotype alphabet, per-genotype
allele bookkeeping, the relative-rate tables and the fixed relation mapping an
ordered (parent, child) genotype pair to its evolutionary events. The generic
SubstitutionModel engine is parameterized by one of these descriptors.

Relative rate of i -> j is ``base_rates[i][j] + deletion_rate * deletion_coefficients[i][j]``.
"""

from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple, Union
from dataclasses import dataclass

from ..exceptions import ConfigurationError
from .events import EvolutionaryEventType as E


EventRelation = Mapping[Tuple[int, int], Tuple[E, ...]]
RateTable = Tuple[Tuple[float, ...], ...]


@dataclass(frozen=True)
class ModelVariant:
    """
    Descriptor of a finite genotype substitution model

    Attributes:
        name: Variant identifier
        description: Human readable description
        genotype_labels: Label of each genotype state (index = state id)
        existing_alleles: Number of alleles present in each genotype
        alt_alleles: Number of alternative alleles in each genotype
        ternary_codes: Ternary code of each genotype
        modeled_alleles: Allele counts the model covers
        base_rates: Constant part of the relative rates (n x n, diagonal ignored)
        deletion_coefficients: Multiplier of the deletion rate (n x n, diagonal ignored)
        events: Relation from (parent, child) to the events explaining it
        root_state: Genotype of the tree root
        const_state: Genotype of a constant site
    """
    name: str
    description: str
    genotype_labels: Tuple[str, ...]
    existing_alleles: Tuple[int, ...]
    alt_alleles: Tuple[int, ...]
    ternary_codes: Tuple[int, ...]
    modeled_alleles: Tuple[int, ...]
    base_rates: RateTable
    deletion_coefficients: RateTable
    events: EventRelation
    root_state: int = 0
    const_state: int = 0

    def __post_init__(self):
        """Validate table shapes and state ranges, then freeze the event relation"""
        n = len(self.genotype_labels)
        for field_name in ("existing_alleles", "alt_alleles", "ternary_codes"):
            values = getattr(self, field_name)
            if len(values) != n:
                raise ConfigurationError(
                    f"{self.name}: {field_name} should have {n} values, got {len(values)}"
                )

        for table_name in ("base_rates", "deletion_coefficients"):
            table = getattr(self, table_name)
            if len(table) != n or any(len(row) != n for row in table):
                raise ConfigurationError(f"{self.name}: {table_name} must be a {n}x{n} table")
            if any(value < 0 for row in table for value in row):
                raise ConfigurationError(f"{self.name}: {table_name} must be non-negative")

        for (parent, child), events in self.events.items():
            if not (0 <= parent < n and 0 <= child < n):
                raise ConfigurationError(f"{self.name}: transition ({parent}, {child}) out of range")
            if parent == child:
                raise ConfigurationError(f"{self.name}: identical genotypes cannot carry events")
            if not events:
                raise ConfigurationError(f"{self.name}: transition ({parent}, {child}) has no events")

        if not (0 <= self.root_state < n and 0 <= self.const_state < n):
            raise ConfigurationError(f"{self.name}: root/constant genotype out of range")

        object.__setattr__(self, "events", MappingProxyType(dict(self.events)))

    @property
    def n_states(self) -> int:
        """Number of genotype states"""
        return len(self.genotype_labels)

    @property
    def has_deletions(self) -> bool:
        """Whether the variant models allele losses"""
        return any(code < 0 for code in self.ternary_codes)


def _restrict(relation: EventRelation, n_states: int) -> EventRelation:
    """Keep the transitions among the first n_states genotypes"""
    return {
        pair: events
        for pair, events in relation.items()
        if pair[0] < n_states and pair[1] < n_states
    }


def _square(table: List[List[float]], n_states: int) -> RateTable:
    return tuple(tuple(row[:n_states]) for row in table[:n_states])


# Transitions among 0/0, 0/1, 1/1 and 1/1'
_MUTATION_EVENTS: EventRelation = {
    (0, 1): (E.SINGLE_MUTATION,),
    (0, 2): (E.COIN_HOMO_DOUBLE_MUTATION,),
    (0, 3): (E.COIN_HETERO_DOUBLE_MUTATION,),
    (1, 0): (E.SINGLE_BACK_MUTATION,),
    (1, 2): (E.HOMO_SINGLE_MUTATION_ADDITION,),
    (1, 3): (E.HETERO_SINGLE_MUTATION_ADDITION,),
    (2, 0): (E.COIN_DOUBLE_BACK_MUTATION,),
    (2, 1): (E.SINGLE_BACK_MUTATION,),
    (2, 3): (E.HETERO_SUBST_SINGLE_MUTATION,),
    (3, 0): (E.COIN_DOUBLE_BACK_MUTATION,),
    (3, 1): (E.SINGLE_BACK_MUTATION,),
    (3, 2): (E.HOMO_SUBST_SINGLE_MUTATION,),
}

# Losses of one or both alleles; 0/-, 1/- and - never regain an allele
_DELETION_EVENTS: EventRelation = {
    (0, 4): (E.SINGLE_DELETION_NOT_LOH,),
    (0, 5): (E.COIN_DELETION_AND_MUTATION,),
    (0, 6): (E.COIN_DOUBLE_DELETION,),
    (1, 4): (E.SINGLE_DELETION_LOH,),
    (1, 5): (E.SINGLE_DELETION_LOH,),
    (1, 6): (E.COIN_DOUBLE_DELETION,),
    (2, 4): (E.COIN_DELETION_AND_BACK_MUTATION,),
    (2, 5): (E.SINGLE_DELETION_NOT_LOH,),
    (2, 6): (E.COIN_DOUBLE_DELETION,),
    (3, 4): (E.COIN_DELETION_AND_BACK_MUTATION,),
    (3, 5): (E.SINGLE_DELETION_LOH,),
    (3, 6): (E.COIN_DOUBLE_DELETION,),
    (4, 5): (E.SINGLE_DELETION_MUTATION_ADDITION,),
    (4, 6): (E.SINGLE_DELETION_ADDITION,),
    (5, 4): (E.SINGLE_DELETION_BACK_MUTATION_ADDITION,),
    (5, 6): (E.SINGLE_DELETION_ADDITION,),
}

#         0/0    0/1    1/1    1/2    0/.    1/.    ./.
_MU_DEL_BASE = [
    [0.0,   1.0,   0.0,   0.0,   0.0,   0.0,   0.0],  # 0/0
    [1 / 6, 0.0,   1 / 6, 1 / 3, 0.0,   0.0,   0.0],  # 0/1
    [0.0,   1 / 3, 0.0,   2 / 3, 0.0,   0.0,   0.0],  # 1/1
    [0.0,   1 / 3, 1 / 3, 0.0,   0.0,   0.0,   0.0],  # 1/2
    [0.0,   0.0,   0.0,   0.0,   0.0,   1 / 2, 0.0],  # 0/.
    [0.0,   0.0,   0.0,   0.0,   1 / 6, 0.0,   0.0],  # 1/.
    [0.0,   0.0,   0.0,   0.0,   0.0,   0.0,   0.0],  # ./.
]

_MU_DEL_DELETION = [
    [0.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0],  # 0/0
    [0.0, 0.0, 0.0, 0.0, 0.5, 0.5, 0.0],  # 0/1
    [0.0, 0.0, 0.0, 0.0, 0.0, 1.0, 0.0],  # 1/1
    [0.0, 0.0, 0.0, 0.0, 0.0, 1.0, 0.0],  # 1/2
    [0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.5],  # 0/.
    [0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.5],  # 1/.
    [0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0],  # ./.
]

_MU_DEL_LABELS = ("0/0", "0/1", "1/1", "1/2", "0/.", "1/.", "./.")


MU_EXTENDED = ModelVariant(
    name="mu_extended",
    description="Finite mutation model with 4 genotypes (0/0, 0/1, 1/1, 1/1')",
    genotype_labels=_MU_DEL_LABELS[:4],
    existing_alleles=(2, 2, 2, 2),
    alt_alleles=(0, 1, 2, 2),
    ternary_codes=(0, 1, 2, 3),
    modeled_alleles=(2,),
    base_rates=_square(_MU_DEL_BASE, 4),
    deletion_coefficients=_square(_MU_DEL_DELETION, 4),
    events=_MUTATION_EVENTS,
)

MU_DEL = ModelVariant(
    name="mu_del",
    description="Finite mutation and deletion model with 7 genotypes",
    genotype_labels=_MU_DEL_LABELS,
    existing_alleles=(2, 2, 2, 2, 1, 1, 0),
    alt_alleles=(0, 1, 2, 2, 0, 1, 0),
    ternary_codes=(0, 1, 2, 3, -1, -2, -3),
    modeled_alleles=(0, 1, 2),
    base_rates=_square(_MU_DEL_BASE, 7),
    deletion_coefficients=_square(_MU_DEL_DELETION, 7),
    events={**_MUTATION_EVENTS, **_DELETION_EVENTS},
)

# Complete loss of a locus is disallowed; the ./. genotype is dropped
CONSTRAINED_MU_DEL = ModelVariant(
    name="constrained_mu_del",
    description="Constrained finite mutation and deletion model with 6 genotypes",
    genotype_labels=_MU_DEL_LABELS[:6],
    existing_alleles=(2, 2, 2, 2, 1, 1),
    alt_alleles=(0, 1, 2, 2, 0, 1),
    ternary_codes=(0, 1, 2, 3, -1, -2),
    modeled_alleles=(1, 2),
    base_rates=_square(_MU_DEL_BASE, 6),
    deletion_coefficients=_square(_MU_DEL_DELETION, 6),
    events=_restrict({**_MUTATION_EVENTS, **_DELETION_EVENTS}, 6),
)


MODEL_VARIANTS: Dict[str, ModelVariant] = {
    variant.name: variant for variant in (MU_EXTENDED, MU_DEL, CONSTRAINED_MU_DEL)
}

# Numeric selectors accepted on the command line
MODEL_SELECTORS: Dict[int, str] = {
    0: MU_EXTENDED.name,
    1: MU_DEL.name,
}


def get_model_variant(selector: Union[int, str, ModelVariant]) -> ModelVariant:
    """
    Resolve a model variant from a selector

    Args:
        selector: ModelVariant, variant name or numeric selector (0: mu_extended, 1: mu_del)

    Returns:
        ModelVariant: Matching descriptor
    """
    if isinstance(selector, ModelVariant):
        return selector

    name: Optional[str]
    if isinstance(selector, bool):
        name = None
    elif isinstance(selector, int):
        name = MODEL_SELECTORS.get(selector)
    elif isinstance(selector, str):
        name = MODEL_SELECTORS.get(int(selector)) if selector.isdigit() else selector.lower()
    else:
        name = None

    if name not in MODEL_VARIANTS:
        valid = sorted(MODEL_VARIANTS) + [str(k) for k in MODEL_SELECTORS]
        raise ConfigurationError(
            f"Invalid substitution model selector: {selector!r}. Supported: {valid}"
        )
    return MODEL_VARIANTS[name]
