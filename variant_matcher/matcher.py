"""Variant matching between summary statistics and reference variant information.

Pipeline:
1. Check required columns on both tables
2. Index rows and pre-filter the query on (chr, pos/rsid)
3. Augment the query with strand-flip and reversal hypotheses
4. Join with the reference on (chr, pos/rsid, a0, a1)
5. Deduplicate, validate the match rate, sort

Values in `beta` are multiplied by -1 for variants whose alleles were
reversed. Every count is recorded in the returned MatchReport; progress
messages go through logging only.
"""

import logging

import pandas as pd

from variant_matcher.augment import assign_row_index, augment
from variant_matcher.config import MatchOptions
from variant_matcher.dedup import finalize
from variant_matcher.exceptions import EmptyMatchError
from variant_matcher.join import (
    check_columns,
    check_suffix_collisions,
    count_hypothesis_collisions,
    count_multi_mapped,
    drop_reserved_columns,
    keyed_join,
    partitioned_join,
    prefilter,
    prepare_reference,
)
from variant_matcher.models import (
    A0,
    A1,
    BETA,
    CHR,
    NUM_ID,
    POS,
    QUERY_NUM_ID,
    MatchReport,
    MatchResult,
)

logger = logging.getLogger(__name__)


def match(
    query: pd.DataFrame,
    reference: pd.DataFrame,
    options: MatchOptions | None = None,
) -> MatchResult:
    """Match query variants against reference variants.

    Matches by ("chr", "a0", "a1") and ("pos" or "rsid"), accounting for
    possible strand flips and reversed reference alleles (opposite effects).

    Args:
        query: Summary statistics with columns "chr", "pos" (or "rsid"),
            "a0", "a1" and "beta"
        reference: Variant information with columns "chr", "pos", "a0", "a1"
            (and "rsid" when joining by rsid)
        options: Matching options (defaults to MatchOptions())

    Returns:
        MatchResult with the matched table and the match report. The table
        holds one row per matched variant: reference columns, query columns
        (".ss" suffix on name clashes), sign-adjusted "beta", the query row
        index "_NUM_ID_.ss" and reference row index "_NUM_ID_", sorted by
        chr and pos.

    Raises:
        SchemaError: If a required column is missing, or a query column
            cannot be renamed with the ".ss" suffix
        EmptyMatchError: If no query variant shares (chr, pos/rsid) with the reference
        ThresholdError: If fewer than match_min_prop * min(len(query), len(reference))
            variants are matched
    """
    if options is None:
        options = MatchOptions()

    query = pd.DataFrame(query)
    reference = pd.DataFrame(reference)

    check_columns(query, [CHR, options.id_column, A0, A1, BETA], "query")
    check_columns(reference, list(dict.fromkeys([CHR, options.id_column, A0, A1, POS])), "reference")

    query = drop_reserved_columns(query, "query")
    reference = drop_reserved_columns(reference, "reference")
    check_suffix_collisions(query, reference, options.join_key)

    report = MatchReport(n_query=len(query), n_reference=len(reference))
    logger.info(f"{report.n_query:,} variants to be matched.")

    query = assign_row_index(query, QUERY_NUM_ID)
    reference = assign_row_index(reference, NUM_ID)

    query = prefilter(query, reference, options.id_column)
    report.n_prefiltered = len(query)
    if query.empty:
        raise EmptyMatchError("No variant has been matched.")

    augmented = augment(query, options.try_strand_flip, report)
    reference = prepare_reference(reference)

    if options.n_workers > 1:
        matched = partitioned_join(augmented, reference, options.join_key, options.n_workers)
    else:
        matched = keyed_join(augmented, reference, options.join_key)
    report.n_joined = len(matched)

    report.hypothesis_collisions = count_hypothesis_collisions(matched)
    if report.hypothesis_collisions:
        logger.warning(
            f"{report.hypothesis_collisions:,} matches were found by more than one "
            "orientation hypothesis."
        )

    report.multi_mapped = count_multi_mapped(matched)
    if report.multi_mapped:
        logger.info(f"{report.multi_mapped:,} variants matched several reference variants.")

    table = finalize(matched, options, report)
    return MatchResult(table=table, report=report)


def snp_match(sumstats: pd.DataFrame, info_snp: pd.DataFrame, **options) -> pd.DataFrame:
    """Match alleles and return only the matched table.

    Keyword arguments are MatchOptions fields, e.g.
    `snp_match(sumstats, info_snp, try_strand_flip=False)`.
    """
    return match(sumstats, info_snp, MatchOptions(**options)).table
