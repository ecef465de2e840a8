"""
tests/test_pipeline
~~~~~~~~~~~~~~~~~~~
"""

import pandas as pd
import pytest

from rainprep import Pipeline, prepare


@pytest.mark.api
def test_finalize_requires_derive_and_order(toy_table):
    """
    Ensures finalize() refuses to run before derive() and order().

    Args:
        toy_table (RecordTable): Toy records fixture.

    Raises:
        RuntimeError: If derive() or order() has not been called.
    """
    with pytest.raises(RuntimeError):
        Pipeline(toy_table).finalize()
    with pytest.raises(RuntimeError):
        Pipeline(toy_table).derive().finalize()


@pytest.mark.api
def test_order_rejects_unknown_strategy(toy_table):
    """
    Ensures unsupported ordering strategies raise a ValueError.

    Args:
        toy_table (RecordTable): Toy records fixture.
    """
    with pytest.raises(ValueError):
        Pipeline(toy_table).order("alphabetical")
    with pytest.raises(ValueError):
        Pipeline(toy_table).order_responses("statistic")


@pytest.mark.api
def test_statistic_pipeline_produces_ordered_frame(toy_table):
    """
    Ensures the prepared frame carries ordered categoricals and axis positions.

    Args:
        toy_table (RecordTable): Toy records fixture.
    """
    result = Pipeline(toy_table).derive(ceiling=2.0).order("statistic").finalize().result
    frame = result.frame

    assert isinstance(frame["term"].dtype, pd.CategoricalDtype)
    assert list(frame["term"].cat.categories) == ["t1", "t2"]
    assert list(frame["response"].cat.categories) == ["A", "B"]
    assert frame["term_pos"].tolist() == [0, 0, 1, 1]
    assert frame["response_pos"].tolist() == [0, 1, 0, 1]
    assert (frame["capped_p"] <= 2.0).all()
    assert result.limits == pytest.approx((-0.5, 0.5))
    assert result.shape == (2, 2)
    assert result.dendrogram is None


@pytest.mark.api
def test_cluster_pipeline_attaches_dendrograms(toy_prepared, grouped_table):
    """
    Ensures cluster mode attaches term and response dendrograms matching the orderings.

    Args:
        toy_prepared (PreparedTable): Clustered prepared fixture.
        grouped_table (RecordTable): Grouped toy records fixture.
    """
    assert toy_prepared.dendrogram is not None
    assert toy_prepared.response_dendrogram is not None
    assert toy_prepared.dendrogram.ordered_labels == list(toy_prepared.term_ordering.labels)
    assert toy_prepared.response_dendrogram.ordered_labels == list(
        toy_prepared.response_ordering.labels
    )
    assert len(toy_prepared.frame) == grouped_table.n_records


@pytest.mark.api
def test_reordering_clears_stale_result_and_reuses_clusters(grouped_table):
    """
    Ensures order() resets the result and cluster results are cached per settings.

    Args:
        grouped_table (RecordTable): Grouped toy records fixture.
    """
    pipeline = Pipeline(grouped_table).derive().order("cluster").finalize()
    first = pipeline.dendrogram
    assert pipeline.result is not None

    pipeline.order("statistic")
    assert pipeline.result is None
    assert pipeline.dendrogram is None

    pipeline.order("cluster")
    assert pipeline.dendrogram is first


@pytest.mark.api
def test_prepare_one_shot_matches_pipeline(grouped_table):
    """
    Ensures prepare() equals the chained pipeline with the same settings.

    Args:
        grouped_table (RecordTable): Grouped toy records fixture.
    """
    one_shot = prepare(grouped_table, order_by="cluster", cluster_responses=True)
    chained = (
        Pipeline(grouped_table)
        .derive()
        .order("cluster")
        .order_responses("cluster")
        .finalize()
        .result
    )

    assert one_shot.term_ordering == chained.term_ordering
    assert one_shot.response_ordering == chained.response_ordering
    pd.testing.assert_frame_equal(one_shot.frame, chained.frame)


@pytest.mark.api
def test_pipeline_leaves_input_untouched(toy_table):
    """
    Ensures preparation does not mutate the record table.

    Args:
        toy_table (RecordTable): Toy records fixture.
    """
    before = toy_table.df.copy()
    prepare(toy_table, order_by="cluster")

    pd.testing.assert_frame_equal(toy_table.df, before)
