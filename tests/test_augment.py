"""Tests for orientation augmentation of the query table."""

import numpy as np
import pandas as pd
import pytest

from variant_matcher.augment import (
    add_reversals,
    add_strand_flips,
    assign_row_index,
    augment,
    drop_invalid_alleles,
)
from variant_matcher.models import FLIP, QUERY_NUM_ID, REV, MatchReport


@pytest.fixture
def query(sumstats: pd.DataFrame) -> pd.DataFrame:
    return assign_row_index(sumstats, QUERY_NUM_ID)


class TestAssignRowIndex:

    def test_zero_based(self, sumstats: pd.DataFrame) -> None:
        indexed = assign_row_index(sumstats.set_index("rsid"), QUERY_NUM_ID)
        assert indexed[QUERY_NUM_ID].tolist() == list(range(len(sumstats)))
        assert indexed.index.tolist() == list(range(len(sumstats)))

    def test_input_not_modified(self, sumstats: pd.DataFrame) -> None:
        assign_row_index(sumstats, QUERY_NUM_ID)
        assert QUERY_NUM_ID not in sumstats.columns


class TestDropInvalidAlleles:

    def test_removes_non_dna_alleles(self) -> None:
        query = pd.DataFrame({
            "a0": ["A", "N", "AT", None, "c"],
            "a1": ["G", "G", "A", "T", "t"],
            "beta": [0.1, 0.2, 0.3, 0.4, 0.5],
        })
        table, n_invalid = drop_invalid_alleles(query)

        assert n_invalid == 3
        assert table["a0"].tolist() == ["A", "C"]
        assert table["a1"].tolist() == ["G", "T"]

    def test_input_not_modified(self) -> None:
        query = pd.DataFrame({"a0": ["a"], "a1": ["g"], "beta": [0.1]})
        drop_invalid_alleles(query)
        assert query["a0"].tolist() == ["a"]


class TestStrandFlips:

    def test_ambiguous_removed(self, query: pd.DataFrame) -> None:
        table, n_ambiguous = add_strand_flips(query)

        assert n_ambiguous == 1
        assert "rs5" not in table["rsid"].tolist()
        assert len(table) == 2 * (len(query) - 1)

    def test_flipped_alleles(self, query: pd.DataFrame) -> None:
        table, _ = add_strand_flips(query)
        flipped = table[table[FLIP]]

        # rs1 A/G -> T/C
        rs1 = flipped[flipped["rsid"] == "rs1"].iloc[0]
        assert (rs1["a0"], rs1["a1"]) == ("T", "C")
        assert rs1["beta"] == pytest.approx(0.1)


class TestReversals:

    def test_swaps_alleles_and_negates_beta(self, query: pd.DataFrame) -> None:
        table = add_reversals(query)
        reverse = table[table[REV]]

        assert len(table) == 2 * len(query)
        assert reverse["a0"].tolist() == query["a1"].tolist()
        assert reverse["a1"].tolist() == query["a0"].tolist()
        np.testing.assert_allclose(reverse["beta"], -query["beta"])


class TestAugment:

    def test_four_hypotheses_with_strand_flip(self, query: pd.DataFrame) -> None:
        report = MatchReport()
        augmented = augment(query, try_strand_flip=True, report=report)

        n_kept = len(query) - 1
        assert len(augmented) == 4 * n_kept
        assert report.ambiguous_removed == 1
        assert report.invalid_alleles == 0
        assert report.n_augmented == 4 * n_kept

    def test_two_hypotheses_without_strand_flip(self, query: pd.DataFrame) -> None:
        report = MatchReport()
        augmented = augment(query, try_strand_flip=False, report=report)

        assert len(augmented) == 2 * len(query)
        assert not augmented[FLIP].any()
        assert report.ambiguous_removed == 0

    def test_block_order(self, query: pd.DataFrame) -> None:
        """(no flip, no rev), (flip, no rev), (no flip, rev), (flip, rev)."""
        augmented = augment(query, try_strand_flip=True)
        n_kept = len(query) - 1

        blocks = [
            (bool(augmented[FLIP].iloc[i * n_kept]), bool(augmented[REV].iloc[i * n_kept]))
            for i in range(4)
        ]
        assert blocks == [(False, False), (True, False), (False, True), (True, True)]

    def test_each_variant_in_every_block(self, query: pd.DataFrame) -> None:
        augmented = augment(query, try_strand_flip=True)
        counts = augmented.groupby([FLIP, REV])[QUERY_NUM_ID].nunique()
        assert (counts == len(query) - 1).all()

    def test_beta_sign_follows_reversal(self, query: pd.DataFrame) -> None:
        augmented = augment(query, try_strand_flip=True)
        original = query.set_index(QUERY_NUM_ID)["beta"]
        expected = original.loc[augmented[QUERY_NUM_ID]].to_numpy()
        sign = np.where(augmented[REV], -1.0, 1.0)

        np.testing.assert_allclose(augmented["beta"].to_numpy(), sign * expected)

    def test_invalid_alleles_counted(self, query: pd.DataFrame) -> None:
        query.loc[0, "a0"] = "I"
        report = MatchReport()
        augmented = augment(query, try_strand_flip=True, report=report)

        assert report.invalid_alleles == 1
        assert 0 not in augmented[QUERY_NUM_ID].tolist()
