"""
tests/test_ordering
~~~~~~~~~~~~~~~~~~~
"""

import pandas as pd
import pytest

from rainprep import EmptyInputError, Ordering, RecordTable, derive, order_by_statistic


@pytest.mark.api
def test_statistic_ordering_sorts_by_mean_p_value(toy_table):
    """
    Ensures terms are ordered ascending by mean raw p-value.

    Args:
        toy_table (RecordTable): Toy records fixture.
    """
    ordering = order_by_statistic(toy_table)

    assert ordering.labels == ("t1", "t2")
    assert ordering.method == "mean_p_value"


@pytest.mark.api
def test_statistic_ordering_is_permutation_of_terms(grouped_table):
    """
    Ensures the ordering covers exactly the distinct terms.

    Args:
        grouped_table (RecordTable): Grouped toy records fixture.
    """
    ordering = order_by_statistic(grouped_table)

    assert ordering.is_permutation_of(grouped_table.terms)
    assert ordering.labels == ("c", "d", "a", "b")


@pytest.mark.api
def test_statistic_ordering_ties_keep_first_appearance():
    """
    Ensures equal means keep the order terms first appear in.
    """
    table = RecordTable.from_records(
        [
            {"response": "A", "term": "z", "estimate": 0.0, "p_value": 0.5},
            {"response": "A", "term": "m", "estimate": 0.0, "p_value": 0.5},
            {"response": "A", "term": "a", "estimate": 0.0, "p_value": 0.1},
        ]
    )
    assert order_by_statistic(table).labels == ("a", "z", "m")


@pytest.mark.api
def test_statistic_ordering_accepts_derived_table_and_other_statistics(toy_table):
    """
    Ensures other statistics/aggregations and DerivedTable inputs work.

    Args:
        toy_table (RecordTable): Toy records fixture.
    """
    ordering = order_by_statistic(derive(toy_table), "estimate", "max", ascending=False)

    assert ordering.labels == ("t1", "t2")


@pytest.mark.api
def test_statistic_ordering_rejects_bad_arguments(toy_table, empty_table):
    """
    Ensures unsupported arguments and empty tables raise.

    Args:
        toy_table (RecordTable): Toy records fixture.
        empty_table (RecordTable): Empty records fixture.
    """
    with pytest.raises(ValueError):
        order_by_statistic(toy_table, statistic="term")
    with pytest.raises(ValueError):
        order_by_statistic(toy_table, agg="sum")
    with pytest.raises(EmptyInputError):
        order_by_statistic(empty_table)


@pytest.mark.api
def test_ordering_apply_returns_ordered_categorical_copy(toy_table):
    """
    Ensures apply() converts a copy and leaves the input column untouched.

    Args:
        toy_table (RecordTable): Toy records fixture.
    """
    ordering = Ordering(("t2", "t1"))
    out = ordering.apply(toy_table.df)

    assert isinstance(out["term"].dtype, pd.CategoricalDtype)
    assert out["term"].cat.ordered
    assert list(out["term"].cat.categories) == ["t2", "t1"]
    assert not isinstance(toy_table.df["term"].dtype, pd.CategoricalDtype)
    assert ordering.codes(["t1", "t2", "t1"]).tolist() == [1, 0, 1]


@pytest.mark.api
def test_ordering_rejects_duplicates_and_unknown_labels(toy_table):
    """
    Ensures duplicate labels and uncovered values raise.

    Args:
        toy_table (RecordTable): Toy records fixture.
    """
    with pytest.raises(ValueError):
        Ordering(("t1", "t1"))
    with pytest.raises(ValueError):
        Ordering(("t1",)).apply(toy_table.df)
    with pytest.raises(KeyError):
        Ordering(("t1",)).codes(["t9"])
