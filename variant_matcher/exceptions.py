"""
Custom exceptions for variant matching.
Kept minimal - only what's needed for clear error handling.
"""


class MatchError(Exception):
    """Base exception for fatal matching errors."""
    pass


class SchemaError(MatchError):
    """Raised when an input table is missing required columns."""
    pass


class EmptyMatchError(MatchError):
    """Raised when no variant survives the chromosome/position pre-filter."""
    pass


class ThresholdError(MatchError):
    """Raised when fewer variants matched than the minimum required."""

    def __init__(self, n_matched: int, min_match: float):
        self.n_matched = n_matched
        self.min_match = min_match
        super().__init__(
            f"Not enough variants have been matched: {n_matched:,} matched, "
            f"at least {min_match:,.1f} required."
        )
