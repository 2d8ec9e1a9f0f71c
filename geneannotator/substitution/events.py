#!/usr/bin/env python3
"""
Evolutionary event categories

Enumerates the mutation, deletion and insertion events a genotype can undergo
along a branch. Genotypes are written either as diploid calls (0/0, 0/1, 1/1,
1/1', 0/-, 1/-, -) or as triploid calls (000, 001, 011, ...).
"""

from typing import Iterable, Tuple
from enum import Enum


class EvolutionaryEventType(Enum):
    """Evolutionary event enumeration; the value is the short label"""

    # 0/0 -> 0/1, 000 -> 001
    SINGLE_MUTATION = "SM"
    # 0/0 -> 1/1, 000 -> 011
    COIN_HOMO_DOUBLE_MUTATION = "CHoDM"
    # 0/0 -> 1/1', 000 -> 011'
    COIN_HETERO_DOUBLE_MUTATION = "CHeDM"
    # 000 -> 111
    COIN_HOMO_TRIPLE_MUTATION = "CHoTM"
    # 000 -> 111'
    HYBRID_HOMO_HETERO_TRIPLE_MUTATION = "HoHeCTM"
    # 000 -> 11'1''
    HETERO_COIN_TRIPLE_MUTATION = "HeCTM"
    # 0/1 -> 0/0, 1/1 -> 0/1, 1/1' -> 0/1, 011 -> 001, 111 -> 011
    SINGLE_BACK_MUTATION = "SB"
    # 1/1 -> 0/0, 1/1' -> 0/0, 011 -> 000, 111 -> 001
    COIN_DOUBLE_BACK_MUTATION = "CDB"
    # 111 -> 000, 111' -> 000, 11'1'' -> 000
    TRIPLE_BACK_MUTATION = "TB"
    # 111 -> 011'
    HYBRID_HOMO_HETERO_SINGLE_SUBST_BACK_MUTATION = "HoHeSSB"
    # 0/1 -> 1/1, 001 -> 011, 011 -> 111
    HOMO_SINGLE_MUTATION_ADDITION = "HoSMA"
    # 001 -> 111
    HOMO_DOUBLE_MUTATION_ADDITION = "HoDMA"
    # 0/1 -> 1/1', 001 -> 011', 011' -> 11'1''
    HETERO_SINGLE_MUTATION_ADDITION = "HeSMA"
    # 001 -> 11'1''
    HETERO_DOUBLE_MUTATION_ADDITION = "HeDMA"
    # 011 -> 111', 011' -> 111'
    HYBRID_HOMO_HETERO_SINGLE_MUTATION_ADDITION = "HoHeSMA"
    # 001 -> 111'
    HYBRID_HOMO_HETERO_DOUBLE_MUTATION_ADDITION = "HoHeDMA"
    # 1/1' -> 1/1, 111' -> 111
    HOMO_SUBST_SINGLE_MUTATION = "HoSubSM"
    # 11'1'' -> 111
    HOMO_SUBST_DOUBLE_MUTATION = "HoSubDM"
    # 1/1 -> 1/1', 011 -> 011', 111' -> 11'1''
    HETERO_SUBST_SINGLE_MUTATION = "HeSubSM"
    # 111 -> 11'1''
    HETERO_SUBST_DOUBLE_MUTATION = "HeSubDM"
    # 011' -> 011, 111 -> 111', 11'1'' -> 111'
    HYBRID_HOMO_HETERO_SUBST_SINGLE_MUTATION = "HoHeSubSM"
    # 011' -> 111
    HOMO_SINGLE_SUBST_AND_MUTATION = "HoSSubM"
    # 011 -> 11'1''
    HETERO_SINGLE_SUBST_AND_MUTATION = "HeSSubM"
    # 0/1 -> 0/- or 1/-, 1/1' -> 1/-, 001 -> 0/0, 111' -> 1/1
    SINGLE_DELETION_LOH = "SDLOH"
    # 001 -> 0/-, 011 -> 1/-, 011' -> 0/-
    LOSS_OF_HETEROZYGOSITY_DOUBLE_DELETION = "LOHDD"
    # 0/0 -> 0/-, 1/1 -> 1/-, 000 -> 0/0, 011 -> 0/1
    SINGLE_DELETION_NOT_LOH = "SDNLOH"
    # 0/0 -> 1/-, 000 -> 0/1
    COIN_DELETION_AND_MUTATION = "CDM"
    # 001 -> 1/1
    SINGLE_DELETION_AND_HOMO_SINGLE_MUTATION_ADDITION = "SDHoSMA"
    # 001 -> 1/1'
    SINGLE_DELETION_AND_HETERO_SINGLE_MUTATION_ADDITION = "SDHeSMA"
    # 000 -> 1/1
    SINGLE_DELETION_AND_HOMO_COIN_DOUBLE_MUTATION = "SDHoCDM"
    # 000 -> 1/1'
    SINGLE_DELETION_AND_HETERO_COIN_DOUBLE_MUTATION = "SDHeCDM"
    # 1/1 -> 0/-, 1/1' -> 0/-, 011 -> 0/0, 111 -> 0/1
    COIN_DELETION_AND_BACK_MUTATION = "CDBM"
    # 111 -> 0/0, 111' -> 0/0, 11'1'' -> 0/0
    SINGLE_DELETION_AND_DOUBLE_BACK_MUTATION = "SDDB"
    # 0/- -> 1/-
    SINGLE_DELETION_MUTATION_ADDITION = "SDMA"
    # 011' -> 1/1, 11'1'' -> 1/1
    SINGLE_DELETION_AND_HOMO_SUBST_SINGLE_MUTATION = "SDHoSubSA"
    # 011 -> 1/1', 111 -> 1/1'
    SINGLE_DELETION_AND_HETERO_SUBST_SINGLE_MUTATION = "SDHeSubSA"
    # 1/- -> 0/-
    SINGLE_DELETION_BACK_MUTATION_ADDITION = "SDBA"
    # 0/- -> -, 1/- -> -
    SINGLE_DELETION_ADDITION = "SDA"
    # 0/0 -> -, 0/1 -> -, 1/1 -> -, 1/1' -> -, 000 -> 0/-, 111 -> 1/-
    COIN_DOUBLE_DELETION = "CDD"
    # 000 -> 1/-
    DOUBLE_DELETION_AND_SINGLE_MUTATION = "DDSM"
    # 111 -> 0/-, 111' -> 0/-, 11'1'' -> 0/-
    DOUBLE_DELETION_AND_SINGLE_BACK_MUTATION = "DDSB"
    # 000 -> -, 001 -> -, 011 -> -, 111 -> -
    TRIPLE_DELETION = "TD"
    # 0/0 -> 000, 0/1 -> 001, 1/1 -> 111, 0/- -> 0/0, 1/- -> 1/1
    SINGLE_INSERTION = "SI"
    # 0/- -> 000, 1/- -> 111
    DOUBLE_INSERTION = "DI"
    # 0/0 -> 001, 0/1 -> 011', 0/- -> 0/1, 0/- -> 1/1
    SINGLE_INSERTION_AND_MUTATION = "SIM"
    # 0/- -> 001, 0/- -> 011, 0/- -> 111
    DOUBLE_INSERTION_AND_MUTATION = "DIM"
    # 0/1 -> 000, 1/1 -> 001, 1/1' -> 011', 1/- -> 0/0
    SINGLE_INSERTION_AND_BACK_MUTATION = "SIB"
    # 1/- -> 000, 1/- -> 001, 1/- -> 011
    DOUBLE_INSERTION_AND_BACK_MUTATION = "DIB"
    # 0/1 -> 111, 0/1 -> 111', 0/1 -> 11'1''
    SINGLE_INSERTION_AND_MUTATION_ADDITION = "SIMA"
    # 1/1 -> 011', 1/- -> 1/1'
    SINGLE_INSERTION_AND_BACK_AND_SUBST_MUTATION = "SIBSubM"
    # 1/- -> 011'
    DOUBLE_INSERTION_AND_BACK_AND_SUBST_MUTATION = "DIBSubM"
    # 1/1 -> 111', 1/1 -> 11'1'', 1/1' -> 111
    SINGLE_INSERTION_AND_SUBST_MUTATION = "SISubM"
    # 1/- -> 111', 1/- -> 11'1''
    DOUBLE_INSERTION_AND_SUBST_MUTATION = "DISubM"

    @property
    def label(self) -> str:
        """Short label used in annotations"""
        return self.value

    @property
    def violates_isa(self) -> bool:
        """Whether the event violates the infinite-sites assumption"""
        return self is not EvolutionaryEventType.SINGLE_MUTATION

    @classmethod
    def from_label(cls, label: str) -> "EvolutionaryEventType":
        """Look up an event by its short label"""
        try:
            return cls(label)
        except ValueError:
            raise ValueError(f"Unknown evolutionary event label: {label}") from None

    def __lt__(self, other):
        if not isinstance(other, EvolutionaryEventType):
            return NotImplemented
        return self.value < other.value

    def __str__(self) -> str:
        return self.value


def sort_events(events: Iterable[EvolutionaryEventType]) -> Tuple[EvolutionaryEventType, ...]:
    """Deduplicate events and order them by label"""
    return tuple(sorted(set(events)))


def events_to_string(events: Iterable[EvolutionaryEventType], separator: str = "") -> str:
    """Join event labels, e.g. (SM, SDLOH) -> 'SM|SDLOH' with separator '|'"""
    return separator.join(e.label for e in events)
