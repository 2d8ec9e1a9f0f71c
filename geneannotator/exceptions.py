"""
Exceptions raised by the gene annotation pipeline

All of them derive from ValueError so callers validating inputs the usual way
keep working; catch GeneAnnotatorError to handle only this package's errors.
"""


class GeneAnnotatorError(Exception):
    """Base exception for gene annotation errors."""

    pass


class GenotypeFormatError(GeneAnnotatorError, ValueError):
    """Raised when a node's genotype vector is missing, has the wrong length or holds non-numeric calls."""

    pass


class InvalidTransitionError(GeneAnnotatorError, ValueError):
    """Raised when a substitution model is asked to classify a genotype pair it does not define."""

    def __init__(self, parent_state: int, child_state: int, model_name: str = ""):
        self.parent_state = parent_state
        self.child_state = child_state
        self.model_name = model_name
        where = f" under {model_name}" if model_name else ""
        super().__init__(
            f"Transition of genotypes from {parent_state} to {child_state} is illegal{where}"
        )


class ConfigurationError(GeneAnnotatorError, ValueError):
    """Raised for invalid model parameters or an unknown model selector."""

    pass
