"""Allele helpers shared by the classifier and the matching engine.

Scalar helpers work on single bases; the Series helpers are their vectorized
counterparts used on full tables.
"""

import pandas as pd

# Complement lookup table for DNA bases
COMPLEMENT: dict[str, str] = {
    "A": "T",
    "T": "A",
    "C": "G",
    "G": "C",
}

VALID_ALLELES = frozenset(COMPLEMENT)

AMBIGUOUS_PAIRS = frozenset({("A", "T"), ("T", "A"), ("C", "G"), ("G", "C")})


def complement(allele: str) -> str | None:
    """Get the complement of a single DNA base.

    Args:
        allele: Single DNA base (case-insensitive)

    Returns:
        Complementary base (A<->T, C<->G), or None for anything else

    Example:
        >>> complement("A")
        'T'
        >>> complement("g")
        'C'
    """
    if not isinstance(allele, str):
        return None
    return COMPLEMENT.get(allele.upper())


def complement_pair(a0: str, a1: str) -> tuple[str | None, str | None]:
    """Get complements of an allele pair.

    Example:
        >>> complement_pair("A", "C")
        ('T', 'G')
    """
    return complement(a0), complement(a1)


def is_ambiguous(a0: str, a1: str) -> bool:
    """Check if an allele pair is strand-ambiguous (A/T or C/G).

    Ambiguous pairs equal their own strand complement, so strand orientation
    cannot be determined from the alleles alone.

    Example:
        >>> is_ambiguous("A", "T")
        True
        >>> is_ambiguous("A", "G")
        False
    """
    if not isinstance(a0, str) or not isinstance(a1, str):
        return False
    return (a0.upper(), a1.upper()) in AMBIGUOUS_PAIRS


def normalize_alleles(alleles: pd.Series) -> pd.Series:
    """Strip and uppercase an allele column, keeping missing values missing."""
    return alleles.astype("string").str.strip().str.upper()


def is_valid_allele(alleles: pd.Series) -> pd.Series:
    """Vectorized check that alleles are single bases from {A, C, G, T}."""
    return normalize_alleles(alleles).isin(VALID_ALLELES).fillna(False).astype(bool)


def flip_strand(alleles: pd.Series) -> pd.Series:
    """Vectorized strand complement.

    Anything that is not a single A/C/G/T base becomes missing.

    Example:
        >>> flip_strand(pd.Series(["A", "c", "N"])).tolist()
        ['T', 'G', <NA>]
    """
    return normalize_alleles(alleles).map(COMPLEMENT, na_action="ignore").astype("string")


def ambiguous_mask(a0: pd.Series, a1: pd.Series) -> pd.Series:
    """Vectorized `is_ambiguous` over two allele columns."""
    pairs = normalize_alleles(a0).fillna("") + " " + normalize_alleles(a1).fillna("")
    return pairs.isin({"A T", "T A", "C G", "G C"})


def normalize_chromosome(chr_val: str) -> str:
    """Normalize chromosome value to consistent format.

    Handles variations like "chr1" -> "1", "01" -> "1".

    Example:
        >>> normalize_chromosome("chr01")
        '1'
        >>> normalize_chromosome("X")
        'X'
    """
    chr_val = str(chr_val)
    if chr_val.lower().startswith("chr"):
        chr_val = chr_val[3:]

    if chr_val.isdigit():
        chr_val = str(int(chr_val))

    return chr_val


# Sex chromosomes and mitochondria after the autosomes, PLINK numbering
CHROMOSOME_CODES = {"X": 23, "Y": 24, "XY": 25, "M": 26, "MT": 26}


def chromosome_order(chrom: pd.Series) -> pd.Series:
    """Numeric sort key for a chromosome column.

    "2" sorts before "10", and X, Y, XY, MT follow the autosomes; other
    names sort last. Usable as `key` in `DataFrame.sort_values`.

    Example:
        >>> chromosome_order(pd.Series(["10", "chr2", "X"])).tolist()
        [10.0, 2.0, 23.0]
    """
    names = chrom.astype(str).str.strip().str.upper().str.replace(r"^CHR", "", regex=True)
    numeric = pd.to_numeric(names, errors="coerce")
    return numeric.fillna(names.map(CHROMOSOME_CODES)).fillna(float("inf")).astype(float)
