"""Orientation augmentation of the query table.

Expands every query variant into one row per orientation hypothesis so that a
single equality join can find whichever hypothesis is physically correct:

    (no flip, no reverse)  as given
    (flip,    no reverse)  strand complement of both alleles
    (no flip, reverse)     alleles swapped, beta negated
    (flip,    reverse)     both

Flip hypotheses are only generated with `try_strand_flip`; in that case
ambiguous A/T and C/G variants are removed first since their complement is
themselves.
"""

import logging

import numpy as np
import pandas as pd

from variant_matcher.models import A0, A1, BETA, FLIP, REV, MatchReport
from variant_matcher.utils import ambiguous_mask, flip_strand, is_valid_allele, normalize_alleles

logger = logging.getLogger(__name__)


def assign_row_index(table: pd.DataFrame, column: str) -> pd.DataFrame:
    """Return a copy of `table` with a 0-based positional row index column."""
    table = table.reset_index(drop=True)
    return table.assign(**{column: np.arange(len(table), dtype=np.int64)})


def drop_invalid_alleles(query: pd.DataFrame) -> tuple[pd.DataFrame, int]:
    """Normalize alleles to uppercase and drop variants that cannot be matched.

    Returns:
        Tuple of (filtered copy, number of variants removed)
    """
    table = query.copy()
    table[A0] = normalize_alleles(table[A0])
    table[A1] = normalize_alleles(table[A1])

    valid = is_valid_allele(table[A0]) & is_valid_allele(table[A1])
    n_invalid = int((~valid).sum())
    if n_invalid:
        logger.warning(f"{n_invalid:,} variants with alleles other than A/C/G/T have been removed.")

    return table[valid], n_invalid


def add_strand_flips(table: pd.DataFrame) -> tuple[pd.DataFrame, int]:
    """Remove ambiguous variants and append a strand-flipped copy of the rest.

    Returns:
        Tuple of (table with `_FLIP_` column, number of ambiguous variants removed)
    """
    ambiguous = ambiguous_mask(table[A0], table[A1])
    n_ambiguous = int(ambiguous.sum())
    logger.info(f"{n_ambiguous:,} ambiguous SNPs have been removed.")

    kept = table[~ambiguous.to_numpy()].assign(**{FLIP: False})
    flipped = kept.assign(**{
        A0: flip_strand(kept[A0]),
        A1: flip_strand(kept[A1]),
        FLIP: True,
    })

    return pd.concat([kept, flipped], ignore_index=True), n_ambiguous


def add_reversals(table: pd.DataFrame) -> pd.DataFrame:
    """Append a copy of every row with alleles swapped and beta negated."""
    forward = table.assign(**{REV: False})
    reverse = table.assign(**{
        A0: table[A1],
        A1: table[A0],
        BETA: -table[BETA],
        REV: True,
    })
    return pd.concat([forward, reverse], ignore_index=True)


def augment(
    query: pd.DataFrame,
    try_strand_flip: bool = True,
    report: MatchReport | None = None,
) -> pd.DataFrame:
    """Expand the query table with every orientation hypothesis.

    Args:
        query: Query table with columns a0, a1 and beta (plus join columns)
        try_strand_flip: Whether to generate strand-flipped hypotheses
        report: Report to record removal counts in (optional)

    Returns:
        Augmented table with boolean `_FLIP_` and `_REV_` columns: 4 rows per
        kept variant with strand flips, 2 rows per variant without.
    """
    table, n_invalid = drop_invalid_alleles(query)

    if try_strand_flip:
        oriented, n_ambiguous = add_strand_flips(table)
    else:
        oriented, n_ambiguous = table.assign(**{FLIP: False}), 0

    augmented = add_reversals(oriented)

    if report is not None:
        report.invalid_alleles = n_invalid
        report.ambiguous_removed = n_ambiguous
        report.n_augmented = len(augmented)

    logger.debug(f"Augmented {len(table):,} variants to {len(augmented):,} orientation hypotheses")
    return augmented
