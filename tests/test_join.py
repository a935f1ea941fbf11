"""Tests for the keyed join between augmented query and reference."""

import pandas as pd
import pytest
from pandas.testing import assert_frame_equal

from variant_matcher.augment import assign_row_index, augment
from variant_matcher.exceptions import SchemaError
from variant_matcher.join import (
    check_columns,
    check_suffix_collisions,
    count_hypothesis_collisions,
    count_multi_mapped,
    drop_reserved_columns,
    keyed_join,
    order_matches,
    partitioned_join,
    prefilter,
    prepare_reference,
)
from variant_matcher.models import FLIP, NUM_ID, QUERY_NUM_ID, REV

JOIN_KEY = ["chr", "pos", "a0", "a1"]


@pytest.fixture
def query(sumstats: pd.DataFrame) -> pd.DataFrame:
    return assign_row_index(sumstats, QUERY_NUM_ID)


@pytest.fixture
def reference(info_snp: pd.DataFrame) -> pd.DataFrame:
    return prepare_reference(assign_row_index(info_snp, NUM_ID))


class TestCheckColumns:

    def test_all_present(self, sumstats: pd.DataFrame) -> None:
        check_columns(sumstats, ["chr", "pos", "a0", "a1", "beta"], "sumstats")

    def test_missing_column(self, sumstats: pd.DataFrame) -> None:
        with pytest.raises(SchemaError, match="missing 'beta'"):
            check_columns(sumstats.drop(columns="beta"), ["chr", "pos", "a0", "a1", "beta"], "sumstats")


class TestPreviousMatchColumns:

    def test_drop_reserved_columns(self, sumstats: pd.DataFrame) -> None:
        previous = sumstats.assign(**{NUM_ID: 0, QUERY_NUM_ID: 1, FLIP: False, REV: True})
        result = drop_reserved_columns(previous, "query")
        assert result.columns.tolist() == sumstats.columns.tolist()

    def test_nothing_to_drop(self, sumstats: pd.DataFrame) -> None:
        assert drop_reserved_columns(sumstats, "query") is sumstats

    def test_suffixed_column_in_query(self, sumstats: pd.DataFrame, info_snp: pd.DataFrame) -> None:
        with pytest.raises(SchemaError, match="rsid.ss"):
            check_suffix_collisions(sumstats.assign(**{"rsid.ss": "x"}), info_snp, JOIN_KEY)

    def test_suffixed_column_in_reference(self, sumstats: pd.DataFrame, info_snp: pd.DataFrame) -> None:
        with pytest.raises(SchemaError, match="rsid.ss"):
            check_suffix_collisions(sumstats, info_snp.assign(**{"rsid.ss": "x"}), JOIN_KEY)

    def test_unshared_suffixed_column_allowed(self, sumstats: pd.DataFrame, info_snp: pd.DataFrame) -> None:
        """'beta.ss' is harmless: 'beta' is not a reference column."""
        check_suffix_collisions(sumstats.assign(**{"beta.ss": 0.0}), info_snp, JOIN_KEY)


class TestPrefilter:

    def test_keeps_shared_positions(self, query: pd.DataFrame, reference: pd.DataFrame) -> None:
        kept = prefilter(query, reference, "pos")
        assert kept["rsid"].tolist() == ["rs1", "rs2", "rs3", "rs4", "rs5", "rs6"]

    def test_by_rsid(self, query: pd.DataFrame, reference: pd.DataFrame) -> None:
        kept = prefilter(query, reference, "rsid")
        assert len(kept) == 6

    def test_chromosome_is_part_of_key(self, query: pd.DataFrame, reference: pd.DataFrame) -> None:
        """3:100 shares a position with 1:100 but not a chromosome."""
        kept = prefilter(query, reference, "pos")
        assert 3 not in kept["chr"].tolist()


class TestKeyedJoin:

    def test_one_hypothesis_per_variant(self, query: pd.DataFrame, reference: pd.DataFrame) -> None:
        matched = keyed_join(augment(query), reference, JOIN_KEY)

        assert sorted(matched["rsid"].tolist()) == ["rs1", "rs2", "rs3", "rs4", "rs6"]
        assert count_hypothesis_collisions(matched) == 0

    def test_query_columns_suffixed(self, query: pd.DataFrame, reference: pd.DataFrame) -> None:
        matched = keyed_join(augment(query), reference, JOIN_KEY)

        assert "rsid.ss" in matched.columns
        assert QUERY_NUM_ID in matched.columns
        assert NUM_ID in matched.columns
        assert (matched["rsid"] == matched["rsid.ss"]).all()

    def test_canonical_order(self, query: pd.DataFrame, reference: pd.DataFrame) -> None:
        matched = keyed_join(augment(query), reference, JOIN_KEY)
        keys = list(zip(matched[REV], matched[FLIP], matched[QUERY_NUM_ID], matched[NUM_ID]))
        assert keys == sorted(keys)

    def test_no_match(self, query: pd.DataFrame, reference: pd.DataFrame) -> None:
        matched = keyed_join(augment(query.iloc[6:]), reference, JOIN_KEY)
        assert matched.empty


class TestCounts:

    def test_hypothesis_collision_on_degenerate_pair(self) -> None:
        """A/A is its own reversal, so both hypotheses join the same row."""
        query = assign_row_index(
            pd.DataFrame({"chr": [1], "pos": [10], "a0": ["A"], "a1": ["A"], "beta": [1.0]}),
            QUERY_NUM_ID,
        )
        reference = prepare_reference(assign_row_index(
            pd.DataFrame({"chr": [1], "pos": [10], "a0": ["A"], "a1": ["A"]}),
            NUM_ID,
        ))
        matched = keyed_join(augment(query, try_strand_flip=False), reference, JOIN_KEY)

        assert len(matched) == 2
        assert count_hypothesis_collisions(matched) == 1
        assert not matched[REV].iloc[0]

    def test_multi_mapped(self) -> None:
        query = assign_row_index(
            pd.DataFrame({"chr": [2], "pos": [500], "a0": ["A"], "a1": ["G"], "beta": [1.0]}),
            QUERY_NUM_ID,
        )
        reference = prepare_reference(assign_row_index(
            pd.DataFrame({"chr": [2, 2], "pos": [500, 500], "a0": ["A", "G"], "a1": ["G", "A"]}),
            NUM_ID,
        ))
        matched = keyed_join(augment(query), reference, JOIN_KEY)

        assert len(matched) == 2
        assert count_multi_mapped(matched) == 1
        assert count_hypothesis_collisions(matched) == 0

    def test_empty(self) -> None:
        empty = pd.DataFrame({QUERY_NUM_ID: [], NUM_ID: []})
        assert count_multi_mapped(empty) == 0
        assert count_hypothesis_collisions(empty) == 0


class TestPartitionedJoin:

    def test_same_as_serial(self, query: pd.DataFrame, reference: pd.DataFrame) -> None:
        augmented = augment(query)
        serial = keyed_join(augmented, reference, JOIN_KEY)
        parallel = partitioned_join(augmented, reference, JOIN_KEY, n_workers=2)

        assert_frame_equal(parallel, serial)

    def test_no_shared_chromosome(self, query: pd.DataFrame, reference: pd.DataFrame) -> None:
        augmented = augment(query[query["chr"] == 3])
        matched = partitioned_join(augmented, reference, JOIN_KEY, n_workers=2)
        assert matched.empty

    def test_order_matches_is_stable(self, query: pd.DataFrame, reference: pd.DataFrame) -> None:
        matched = keyed_join(augment(query), reference, JOIN_KEY)
        shuffled = matched.sample(frac=1, random_state=42)
        assert_frame_equal(order_matches(shuffled), matched)
