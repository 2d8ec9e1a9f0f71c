"""
Genotype substitution models
"""

from .events import EvolutionaryEventType, sort_events, events_to_string
from .model_variants import (
    ModelVariant,
    MU_EXTENDED,
    MU_DEL,
    CONSTRAINED_MU_DEL,
    MODEL_VARIANTS,
    get_model_variant,
)
from .substitution_model import SubstitutionModel, get_substitution_model
from .vcf_genotype import CandidateAltNuc, genotype_for_vcf

__all__ = [
    'EvolutionaryEventType',
    'sort_events',
    'events_to_string',
    'ModelVariant',
    'MU_EXTENDED',
    'MU_DEL',
    'CONSTRAINED_MU_DEL',
    'MODEL_VARIANTS',
    'get_model_variant',
    'SubstitutionModel',
    'get_substitution_model',
    'CandidateAltNuc',
    'genotype_for_vcf',
]
