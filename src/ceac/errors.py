"""
Exceptions raised by the CEAC pipeline.
"""


class CEACError(ValueError):
    """Base class for pipeline errors."""


class InputSchemaError(CEACError):
    """Input has the wrong column count, or values of the wrong type."""


class InputCardinalityError(CEACError):
    """Input rows do not form exactly one row per (run, strategy)."""


class AggregationInvariantError(CEACError):
    """Win proportions do not sum to 1 for some threshold."""
