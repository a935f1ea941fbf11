"""Pytest fixtures for variant_matcher tests."""

from pathlib import Path

import pandas as pd
import pytest

from variant_matcher.logging_config import reset_logging


@pytest.fixture(autouse=True)
def clean_logging():
    """Undo any logging setup done by a test."""
    yield
    reset_logging()


@pytest.fixture
def info_snp() -> pd.DataFrame:
    """Reference variants.

    One variant per orientation case exercised by `sumstats`, plus a
    reference-only variant on chr2.
    """
    return pd.DataFrame({
        "chr": [1, 1, 1, 1, 1, 2, 2],
        "pos": [100, 200, 300, 400, 500, 100, 200],
        "rsid": ["rs1", "rs2", "rs3", "rs4", "rs5", "rs6", "rs7"],
        "a0": ["A", "C", "A", "A", "A", "C", "G"],
        "a1": ["G", "T", "G", "G", "T", "A", "T"],
    })


@pytest.fixture
def sumstats() -> pd.DataFrame:
    """Summary statistics matched against `info_snp`.

    Test cases:
    - 1:100 A/G: same alleles -> unchanged
    - 1:200 T/C: reversed (C/T in reference) -> beta negated
    - 1:300 T/C: strand flip of A/G -> flipped
    - 1:400 C/T: flip and reverse of A/G -> flipped, beta negated
    - 1:500 A/T: ambiguous -> removed when trying strand flips
    - 2:100 C/A: same alleles -> unchanged
    - 2:300 and 3:100: not in reference
    """
    return pd.DataFrame({
        "chr": [1, 1, 1, 1, 1, 2, 2, 3],
        "pos": [100, 200, 300, 400, 500, 100, 300, 100],
        "rsid": ["rs1", "rs2", "rs3", "rs4", "rs5", "rs6", "rs8", "rs9"],
        "a0": ["A", "T", "T", "C", "A", "C", "A", "A"],
        "a1": ["G", "C", "C", "T", "T", "A", "C", "G"],
        "beta": [0.1, 0.2, 0.3, 0.4, 0.5, -0.6, 0.7, 0.8],
    })


@pytest.fixture
def table_files(tmp_path: Path, sumstats: pd.DataFrame, info_snp: pd.DataFrame) -> dict[str, Path]:
    """Write `sumstats` and `info_snp` as tab-separated files."""
    query = tmp_path / "sumstats.tsv"
    reference = tmp_path / "info_snp.tsv"
    sumstats.to_csv(query, sep="\t", index=False)
    info_snp.to_csv(reference, sep="\t", index=False)
    return {"query": query, "reference": reference, "dir": tmp_path}
