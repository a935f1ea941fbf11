"""Allele concordance between two datasets.

Decides whether two (reference, alternative) allele pairs describe the same
variant with the same reference allele, with reference and alternative
swapped, or cannot be decided. Strand flips are accounted for, but whether a
flip happened is not part of the outcome: only the reference/alternative
order is.

Outcomes, in priority order:
1. Degenerate pair (ref == alt) on either side - undecidable
2. Same pair - SAME; swapped pair - REVERSED
3. Same pair after strand complement - SAME; swapped after complement - REVERSED
4. Anything else (e.g. A/C against A/G) - undecidable

Ambiguous pairs (A/T, C/G) are not removed here.
"""

from collections.abc import Sequence

import numpy as np
import pandas as pd

from variant_matcher.models import Concordance
from variant_matcher.utils import VALID_ALLELES, complement_pair, flip_strand, normalize_alleles


def _normalize(allele) -> str | None:
    if not isinstance(allele, str):
        return None
    allele = allele.strip().upper()
    return allele if allele in VALID_ALLELES else None


def classify(ref1: str, alt1: str, ref2: str, alt2: str) -> Concordance:
    """Classify the reference concordance of two allele pairs.

    Args:
        ref1: Reference allele of the first dataset
        alt1: Alternative allele of the first dataset
        ref2: Reference allele of the second dataset
        alt2: Alternative allele of the second dataset

    Returns:
        Concordance.SAME, Concordance.REVERSED or Concordance.UNDECIDABLE

    Example:
        >>> classify("A", "G", "G", "A")
        <Concordance.REVERSED: 'REVERSED'>
        >>> classify("A", "G", "T", "C")
        <Concordance.SAME: 'SAME'>
    """
    ref1, alt1, ref2, alt2 = (_normalize(a) for a in (ref1, alt1, ref2, alt2))

    if ref1 is None or alt1 is None or ref2 is None or alt2 is None:
        return Concordance.UNDECIDABLE

    if ref1 == alt1 or ref2 == alt2:
        return Concordance.UNDECIDABLE

    if (ref1, alt1) == (ref2, alt2):
        return Concordance.SAME
    if (ref1, alt1) == (alt2, ref2):
        return Concordance.REVERSED

    flip_ref1, flip_alt1 = complement_pair(ref1, alt1)
    if (flip_ref1, flip_alt1) == (ref2, alt2):
        return Concordance.SAME
    if (flip_ref1, flip_alt1) == (alt2, ref2):
        return Concordance.REVERSED

    return Concordance.UNDECIDABLE


def _as_alleles(values: Sequence[str] | pd.Series) -> pd.Series:
    alleles = normalize_alleles(pd.Series(values, dtype="object").reset_index(drop=True))
    return alleles.where(alleles.isin(VALID_ALLELES))


def same_ref(
    ref1: Sequence[str] | pd.Series,
    alt1: Sequence[str] | pd.Series,
    ref2: Sequence[str] | pd.Series,
    alt2: Sequence[str] | pd.Series,
) -> pd.Series:
    """Vectorized reference concordance.

    Element-wise equivalent of `classify`, for whole allele columns.

    Args:
        ref1: Reference alleles of the first dataset
        alt1: Alternative alleles of the first dataset
        ref2: Reference alleles of the second dataset
        alt2: Alternative alleles of the second dataset

    Returns:
        Nullable boolean Series: True where the reference alleles are the same,
        False where they are reversed, <NA> where undecidable (missing or
        unknown inputs, degenerate pairs, non-matching alleles).

    Raises:
        ValueError: If the inputs have different lengths

    Example:
        >>> same_ref(["A", "C", "T", "G", None],
        ...          ["C", "T", "C", "A", "A"],
        ...          ["A", "C", "A", "A", "C"],
        ...          ["C", "G", "G", "G", "A"]).tolist()
        [True, <NA>, True, False, <NA>]
    """
    lengths = {len(values) for values in (ref1, alt1, ref2, alt2)}
    if len(lengths) != 1:
        raise ValueError(f"Allele vectors must have the same length, got {sorted(lengths)}")

    r1, a1, r2, a2 = (_as_alleles(values) for values in (ref1, alt1, ref2, alt2))
    f1, g1 = flip_strand(r1), flip_strand(a1)

    def both(left: pd.Series, right: pd.Series) -> np.ndarray:
        return (left == right).fillna(False).to_numpy(dtype=bool)

    known = (r1.notna() & a1.notna() & r2.notna() & a2.notna()).to_numpy(dtype=bool)
    degenerate = both(r1, a1) | both(r2, a2)
    decided = known & ~degenerate

    same = both(r1, r2) & both(a1, a2)
    reversed_ = both(r1, a2) & both(a1, r2)
    flip_same = both(f1, r2) & both(g1, a2)
    flip_reversed = both(f1, a2) & both(g1, r2)

    result = pd.Series(pd.NA, index=r1.index, dtype="boolean")
    # Lowest priority first so that higher-priority outcomes overwrite
    result[decided & flip_reversed] = False
    result[decided & flip_same] = True
    result[decided & reversed_] = False
    result[decided & same] = True
    return result
