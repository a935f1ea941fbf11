"""Keyed join between the augmented query table and the reference table.

The join is an inner equality merge on (chr, pos or rsid, a0, a1). Because the
query was augmented with every orientation hypothesis, a plain merge finds the
matching hypothesis without any per-row allele logic.

Two data-quality conditions are counted here but never resolved:
- hypothesis collisions: the same query/reference pair reached through more
  than one hypothesis
- multi-mapping: one query variant joined to several reference variants
Physical duplicates (same chr/pos) are handled later by deduplication.
"""

import logging
from concurrent.futures import ProcessPoolExecutor, as_completed

import pandas as pd

from variant_matcher.exceptions import SchemaError
from variant_matcher.models import (
    A0,
    A1,
    CHR,
    FLIP,
    NUM_ID,
    QUERY_NUM_ID,
    QUERY_SUFFIX,
    RESERVED_COLUMNS,
    REV,
)
from variant_matcher.utils import normalize_alleles

logger = logging.getLogger(__name__)

# Augmentation block first, then query row, then reference row
MATCH_ORDER = [REV, FLIP, QUERY_NUM_ID, NUM_ID]


def check_columns(table: pd.DataFrame, required: list[str], name: str) -> None:
    """Raise SchemaError if `table` lacks any of the `required` columns."""
    missing = [col for col in required if col not in table.columns]
    if missing:
        raise SchemaError(
            f"Please use proper names for variables in '{name}'. "
            f"Expected '{', '.join(required)}'; missing '{', '.join(missing)}'."
        )


def drop_reserved_columns(table: pd.DataFrame, name: str) -> pd.DataFrame:
    """Remove row-index and provenance columns left by a previous match."""
    reserved = [col for col in RESERVED_COLUMNS if col in table.columns]
    if reserved:
        logger.info(f"Replacing columns '{', '.join(reserved)}' of '{name}'.")
        table = table.drop(columns=reserved)
    return table


def check_suffix_collisions(query: pd.DataFrame, reference: pd.DataFrame, join_key: list[str]) -> None:
    """Raise SchemaError if suffixing a query column would duplicate a column.

    Query columns also present in the reference (other than the join key) are
    renamed with the ".ss" suffix, so the suffixed name must be free in both
    tables.
    """
    shared = (set(query.columns) & set(reference.columns)) - set(join_key)
    taken = set(query.columns) | set(reference.columns)
    clashes = sorted(col + QUERY_SUFFIX for col in shared if col + QUERY_SUFFIX in taken)
    if clashes:
        raise SchemaError(
            f"Column(s) '{', '.join(clashes)}' already exist; 'query' columns shared with "
            f"'reference' are renamed with suffix '{QUERY_SUFFIX}'. Drop or rename them first."
        )


def prefilter(query: pd.DataFrame, reference: pd.DataFrame, id_column: str) -> pd.DataFrame:
    """Keep query variants whose (chr, pos/rsid) exists in the reference.

    Cheap filter run before augmentation so that only candidate variants are
    expanded.
    """
    keys = [CHR, id_column]
    in_reference = pd.MultiIndex.from_frame(query[keys]).isin(
        pd.MultiIndex.from_frame(reference[keys])
    )
    return query[in_reference]


def prepare_reference(reference: pd.DataFrame) -> pd.DataFrame:
    """Copy of the reference table with alleles normalized for joining."""
    return reference.assign(**{
        A0: normalize_alleles(reference[A0]),
        A1: normalize_alleles(reference[A1]),
    })


def order_matches(matched: pd.DataFrame) -> pd.DataFrame:
    """Put joined rows in their canonical order.

    The order defines which row is "first encountered" during deduplication,
    and makes a partitioned join identical to a serial one.
    """
    return matched.sort_values(MATCH_ORDER, kind="mergesort").reset_index(drop=True)


def _merge(augmented: pd.DataFrame, reference: pd.DataFrame, join_key: list[str]) -> pd.DataFrame:
    return augmented.merge(
        reference,
        on=join_key,
        how="inner",
        suffixes=(QUERY_SUFFIX, ""),
    )


def keyed_join(augmented: pd.DataFrame, reference: pd.DataFrame, join_key: list[str]) -> pd.DataFrame:
    """Inner join of the augmented query and the reference on `join_key`.

    Args:
        augmented: Output of `augment`
        reference: Reference table prepared with `prepare_reference`
        join_key: Join columns, e.g. ["chr", "pos", "a0", "a1"]

    Returns:
        Joined rows in canonical order. Query columns that clash with
        reference columns carry the ".ss" suffix.
    """
    matched = _merge(augmented, reference, join_key)
    logger.debug(f"Joined {len(augmented):,} hypotheses to {len(matched):,} reference rows")
    return order_matches(matched)


def partitioned_join(
    augmented: pd.DataFrame,
    reference: pd.DataFrame,
    join_key: list[str],
    n_workers: int,
) -> pd.DataFrame:
    """Same result as `keyed_join`, computed per chromosome in worker processes.

    Each worker only receives the query and reference rows of its own
    chromosome; results are concatenated and put in canonical order.
    """
    reference_by_chr = {
        chrom: part for chrom, part in reference.groupby(CHR, sort=False, observed=True)
    }

    parts: list[pd.DataFrame] = []
    with ProcessPoolExecutor(max_workers=n_workers) as executor:
        futures = {
            executor.submit(_merge, part, reference_by_chr[chrom], join_key): chrom
            for chrom, part in augmented.groupby(CHR, sort=False, observed=True)
            if chrom in reference_by_chr
        }
        for future in as_completed(futures):
            chrom = futures[future]
            result = future.result()
            logger.debug(f"chr{chrom}: {len(result):,} rows joined")
            parts.append(result)

    if not parts:
        return keyed_join(augmented.iloc[:0], reference.iloc[:0], join_key)

    logger.debug(f"Joined {len(parts)} chromosome partitions with {n_workers} workers")
    return order_matches(pd.concat(parts, ignore_index=True))


def count_hypothesis_collisions(matched: pd.DataFrame) -> int:
    """Rows joining a query/reference pair already joined by another hypothesis."""
    return int(matched.duplicated([QUERY_NUM_ID, NUM_ID]).sum())


def count_multi_mapped(matched: pd.DataFrame) -> int:
    """Query variants joined to more than one distinct reference variant."""
    if matched.empty:
        return 0
    n_refs = matched.groupby(QUERY_NUM_ID)[NUM_ID].nunique()
    return int((n_refs > 1).sum())
