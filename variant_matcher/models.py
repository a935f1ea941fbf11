"""Data models for variant matching.

Defines the concordance outcomes of the allele classifier, the running report
collected during a match, and the result returned to callers.
"""

from dataclasses import dataclass, field
from enum import Enum

import pandas as pd

# Column names used on both sides of the join
CHR = "chr"
POS = "pos"
RSID = "rsid"
A0 = "a0"
A1 = "a1"
BETA = "beta"

# Internal columns added during matching
NUM_ID = "_NUM_ID_"
QUERY_SUFFIX = ".ss"
QUERY_NUM_ID = NUM_ID + QUERY_SUFFIX
FLIP = "_FLIP_"
REV = "_REV_"

# Columns overwritten on every match; dropped from inputs that already carry them
RESERVED_COLUMNS = [NUM_ID, QUERY_NUM_ID, FLIP, REV]


class Concordance(str, Enum):
    """Relationship between two allele pairs describing the same locus."""

    SAME = "SAME"                # Same reference allele (possibly after strand flip)
    REVERSED = "REVERSED"        # Reference and alternative swapped
    UNDECIDABLE = "UNDECIDABLE"  # Degenerate, mismatched or unknown alleles

    @property
    def as_bool(self) -> bool | None:
        """True for same reference, False for reversed, None when undecidable."""
        if self is Concordance.SAME:
            return True
        if self is Concordance.REVERSED:
            return False
        return None


@dataclass
class MatchReport:
    """Counts collected at each stage of a match.

    Observational only: nothing in the pipeline reads these values back to
    decide what to keep.
    """

    # Input sizes (before any filtering)
    n_query: int = 0
    n_reference: int = 0

    # Pre-filter and augmentation
    n_prefiltered: int = 0
    invalid_alleles: int = 0
    ambiguous_removed: int = 0
    n_augmented: int = 0

    # Join
    n_joined: int = 0
    hypothesis_collisions: int = 0
    multi_mapped: int = 0

    # Deduplication and validation
    duplicates_removed: int = 0
    n_matched: int = 0
    n_matched_query: int = 0
    n_flipped: int = 0
    n_reversed: int = 0
    min_match: float = 0.0

    @property
    def n_unmatched(self) -> int:
        """Query variants absent from the final result."""
        return self.n_query - self.n_matched_query

    @property
    def match_rate(self) -> float:
        """Matched variants as a fraction of the smaller input table."""
        smallest = min(self.n_query, self.n_reference)
        return self.n_matched / smallest if smallest else 0.0

    def to_dict(self) -> dict:
        """Counts including derived properties, for reports."""
        return {
            "n_query": self.n_query,
            "n_reference": self.n_reference,
            "n_prefiltered": self.n_prefiltered,
            "invalid_alleles": self.invalid_alleles,
            "ambiguous_removed": self.ambiguous_removed,
            "n_augmented": self.n_augmented,
            "n_joined": self.n_joined,
            "hypothesis_collisions": self.hypothesis_collisions,
            "multi_mapped": self.multi_mapped,
            "duplicates_removed": self.duplicates_removed,
            "n_matched": self.n_matched,
            "n_matched_query": self.n_matched_query,
            "n_unmatched": self.n_unmatched,
            "n_flipped": self.n_flipped,
            "n_reversed": self.n_reversed,
            "min_match": self.min_match,
            "match_rate": self.match_rate,
        }


@dataclass
class MatchResult:
    """Matched table together with the report describing how it was built."""

    table: pd.DataFrame
    report: MatchReport = field(default_factory=MatchReport)

    def __len__(self) -> int:
        return len(self.table)
