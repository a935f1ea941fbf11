"""
Allele-aware variant matching between summary statistics and reference panels.

Matches variants by chromosome, position (or rsID) and alleles while accounting
for strand flips and reversed reference/alternative alleles.
"""

from variant_matcher.concordance import Concordance, classify, same_ref
from variant_matcher.config import MatchOptions
from variant_matcher.exceptions import (
    EmptyMatchError,
    MatchError,
    SchemaError,
    ThresholdError,
)
from variant_matcher.matcher import match, snp_match
from variant_matcher.models import MatchReport, MatchResult

__version__ = "1.0.0"
__author__ = "Data Tecnica International"

__all__ = [
    "Concordance",
    "EmptyMatchError",
    "MatchError",
    "MatchOptions",
    "MatchReport",
    "MatchResult",
    "SchemaError",
    "ThresholdError",
    "classify",
    "match",
    "same_ref",
    "snp_match",
]
