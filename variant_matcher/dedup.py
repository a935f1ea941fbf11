"""Deduplication and validation of joined variants.

Steps, in order:
1. Remove physical duplicates (same chr/pos), keeping the first row encountered
2. Enforce the minimum match proportion on the original table sizes
3. Sort by chr/pos, chromosomes in natural order (2 before 10, X after 22)
4. Drop the provenance columns unless requested
"""

import logging

import pandas as pd

from variant_matcher.config import MatchOptions
from variant_matcher.exceptions import ThresholdError
from variant_matcher.models import CHR, FLIP, POS, QUERY_NUM_ID, REV, MatchReport
from variant_matcher.utils import chromosome_order

logger = logging.getLogger(__name__)


def find_position_duplicates(matched: pd.DataFrame) -> pd.Series:
    """Mark rows at a (chr, pos) already taken by an earlier row."""
    return matched.duplicated([CHR, POS], keep="first")


def remove_position_duplicates(matched: pd.DataFrame) -> tuple[pd.DataFrame, int]:
    """Keep only the first row at each physical position.

    No attempt is made to pick the best duplicate: the canonical join order
    decides.

    Returns:
        Tuple of (deduplicated table, number of rows removed)
    """
    dups = find_position_duplicates(matched)
    n_dups = int(dups.sum())
    if n_dups:
        logger.warning(f"Some duplicates were removed ({n_dups:,} rows at duplicated positions).")
        matched = matched[~dups]
    return matched, n_dups


def min_match_threshold(match_min_prop: float, n_query: int, n_reference: int) -> float:
    """Minimum number of matched variants required."""
    return match_min_prop * min(n_query, n_reference)


def check_match_threshold(n_matched: int, min_match: float) -> None:
    """Raise ThresholdError if strictly fewer than `min_match` variants matched."""
    if n_matched < min_match:
        raise ThresholdError(n_matched, min_match)


def _position_key(column: pd.Series) -> pd.Series:
    return chromosome_order(column) if column.name == CHR else column


def sort_by_position(matched: pd.DataFrame) -> pd.DataFrame:
    """Stable sort by chromosome (natural order) then position, with a fresh index."""
    return (
        matched.sort_values([CHR, POS], kind="mergesort", key=_position_key)
        .reset_index(drop=True)
    )


def drop_provenance(matched: pd.DataFrame) -> pd.DataFrame:
    """Remove the _FLIP_ and _REV_ columns."""
    return matched.drop(columns=[FLIP, REV])


def finalize(
    matched: pd.DataFrame,
    options: MatchOptions,
    report: MatchReport,
) -> pd.DataFrame:
    """Deduplicate, validate, sort and trim the joined table.

    Args:
        matched: Output of the keyed join, in canonical order
        options: Matching options
        report: Report holding the original table sizes; updated in place

    Returns:
        Final matched table

    Raises:
        ThresholdError: If too few variants remain
    """
    if options.remove_duplicates:
        matched, report.duplicates_removed = remove_position_duplicates(matched)

    report.n_matched = len(matched)
    report.n_matched_query = int(matched[QUERY_NUM_ID].nunique())
    report.n_flipped = int(matched[FLIP].sum())
    report.n_reversed = int(matched[REV].sum())

    logger.info(
        f"{report.n_matched:,} variants have been matched; "
        f"{report.n_flipped:,} were flipped and {report.n_reversed:,} were reversed."
    )
    logger.info(f"{report.n_unmatched:,} variants have not been matched.")

    report.min_match = min_match_threshold(
        options.match_min_prop, report.n_query, report.n_reference
    )
    check_match_threshold(report.n_matched, report.min_match)

    matched = sort_by_position(matched)

    if not options.include_provenance:
        matched = drop_provenance(matched)

    return matched
