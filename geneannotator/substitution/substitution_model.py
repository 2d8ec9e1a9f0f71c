#!/usr/bin/env python3
"""
Finite genotype substitution model

Builds the normalized continuous-time rate matrix of a model variant and
classifies the evolutionary events turning one genotype into another.
"""

import logging
import math
from typing import List, Tuple, Union

import numpy as np
import pandas as pd
from scipy.linalg import expm

from ..exceptions import ConfigurationError, InvalidTransitionError
from .events import EvolutionaryEventType, sort_events
from .model_variants import ModelVariant, MU_EXTENDED, get_model_variant

logger = logging.getLogger(__name__)


class SubstitutionModel:
    """
    Genotype substitution model parameterized by a ModelVariant

    The model is read-only after construction and can be shared freely.
    """

    def __init__(self, variant: Union[ModelVariant, str, int] = MU_EXTENDED, deletion_rate: float = 0.0):
        """
        Initialize the substitution model

        Args:
            variant: Model variant descriptor, name or numeric selector
            deletion_rate: Deletion rate relative to the mutation rate (non-negative)
        """
        self.variant = get_model_variant(variant)

        try:
            deletion_rate = float(deletion_rate)
        except (TypeError, ValueError):
            raise ConfigurationError(
                f"deletion_rate should be a number, got {deletion_rate!r} ({self.variant.name})"
            ) from None
        if math.isnan(deletion_rate) or deletion_rate < 0.0:
            raise ConfigurationError(
                f"deletion_rate is out of bound, which should not be smaller than 0 ({self.variant.name})"
            )
        if deletion_rate > 0.0 and not self.variant.has_deletions:
            logger.warning("%s does not model deletions; deletion_rate=%g is ignored",
                           self.variant.name, deletion_rate)
        self.deletion_rate = deletion_rate

        self.relative_rates = self.setup_relative_rates()
        self.rate_matrix = self.setup_rate_matrix()
        logger.debug("Initialized %s with %d genotypes (deletion_rate=%g)",
                     self.variant.name, self.n_states, self.deletion_rate)

    @property
    def name(self) -> str:
        return self.variant.name

    @property
    def n_states(self) -> int:
        """Number of genotype states"""
        return self.variant.n_states

    @property
    def root_state(self) -> int:
        """Genotype of the tree root"""
        return self.variant.root_state

    @property
    def const_state(self) -> int:
        """Genotype of a constant site"""
        return self.variant.const_state

    @property
    def modeled_alleles(self) -> Tuple[int, ...]:
        return self.variant.modeled_alleles

    def setup_relative_rates(self) -> np.ndarray:
        """
        Compute the off-diagonal relative rates

        Returns:
            np.ndarray: n*(n-1) rates in row-major order, diagonal entries skipped
        """
        n = self.n_states
        base = np.asarray(self.variant.base_rates, dtype=np.float64)
        coefficients = np.asarray(self.variant.deletion_coefficients, dtype=np.float64)
        rates = base + self.deletion_rate * coefficients
        return rates[~np.eye(n, dtype=bool)]

    def setup_rate_matrix(self) -> np.ndarray:
        """
        Build the rate matrix from the relative rates

        Off-diagonal entries are the relative rates, the diagonal is the negative
        row sum, and the whole matrix is scaled to one expected substitution per
        unit branch length.

        Returns:
            np.ndarray: n x n normalized rate matrix
        """
        n = self.n_states
        matrix = np.zeros((n, n), dtype=np.float64)
        matrix[~np.eye(n, dtype=bool)] = self.relative_rates
        np.fill_diagonal(matrix, -matrix.sum(axis=1))

        subst = -np.trace(matrix)
        if subst <= 0.0:
            raise ConfigurationError(f"{self.name}: rate matrix has no non-zero rates")
        return matrix / subst

    def get_transition_probabilities(self, branch_length: float) -> np.ndarray:
        """
        Transition probability matrix P(t) = exp(Q t)

        Args:
            branch_length: Branch length in expected substitutions

        Returns:
            np.ndarray: n x n matrix whose rows sum to 1
        """
        if branch_length < 0:
            raise ValueError(f"Branch length must be non-negative, got {branch_length}")
        return expm(self.rate_matrix * branch_length)

    def is_valid_state(self, state) -> bool:
        """Check whether state is a genotype id of this model"""
        return isinstance(state, (int, np.integer)) and not isinstance(state, bool) \
            and 0 <= state < self.n_states

    def get_evolutionary_events(self, parent_state: int, child_state: int) -> Tuple[EvolutionaryEventType, ...]:
        """
        Get the evolutionary events turning the parent genotype into the child genotype

        Args:
            parent_state: Genotype of the parent
            child_state: Genotype of the child

        Returns:
            Tuple[EvolutionaryEventType, ...]: Events ordered by label; empty if genotypes are equal

        Raises:
            InvalidTransitionError: The pair is not a transition of this model
        """
        if not (self.is_valid_state(parent_state) and self.is_valid_state(child_state)):
            raise InvalidTransitionError(parent_state, child_state, self.name)
        if parent_state == child_state:
            return ()

        events = self.variant.events.get((int(parent_state), int(child_state)))
        if events is None:
            raise InvalidTransitionError(parent_state, child_state, self.name)
        return sort_events(events)

    def _check_state(self, state: int) -> int:
        if not self.is_valid_state(state):
            raise IndexError(f"Index exceeds the boundary (0 - {self.n_states - 1}): {state}")
        return int(state)

    def genotype_label(self, state: int) -> str:
        """Label of a genotype, e.g. '0/1'"""
        return self.variant.genotype_labels[self._check_state(state)]

    def all_genotypes(self, delimiter: str = ",") -> str:
        return delimiter.join(self.variant.genotype_labels)

    def n_alleles(self, state: int) -> int:
        """Number of existing alleles in a genotype"""
        return self.variant.existing_alleles[self._check_state(state)]

    def n_alt_alleles(self, state: int) -> int:
        """Number of alternative alleles in a genotype"""
        return self.variant.alt_alleles[self._check_state(state)]

    def ternary_code(self, state: int) -> int:
        return self.variant.ternary_codes[self._check_state(state)]

    def is_variant(self, state: int) -> bool:
        """Whether a genotype differs from the root genotype"""
        return state != self.root_state

    def rate_matrix_frame(self) -> pd.DataFrame:
        """Rate matrix labelled by genotype"""
        labels: List[str] = list(self.variant.genotype_labels)
        return pd.DataFrame(self.rate_matrix, index=labels, columns=labels)

    def summary(self) -> str:
        """Return model summary"""
        lines = [
            f"=== Substitution model ({self.name}) ===",
            self.variant.description,
            f"deletion rate: {self.deletion_rate:g}",
            "",
            "Rate matrix (row: from, column: to):",
            self.rate_matrix_frame().to_string(float_format=lambda v: f"{v:8.4f}"),
        ]
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"SubstitutionModel(variant={self.name!r}, deletion_rate={self.deletion_rate:g})"


def get_substitution_model(selector: Union[ModelVariant, str, int] = 0, deletion_rate: float = 0.0) -> SubstitutionModel:
    """
    Create a substitution model from a selector

    Args:
        selector: 0 / 'mu_extended', 1 / 'mu_del', 'constrained_mu_del' or a ModelVariant
        deletion_rate: Deletion rate relative to the mutation rate

    Returns:
        SubstitutionModel: Configured model
    """
    return SubstitutionModel(get_model_variant(selector), deletion_rate=deletion_rate)
