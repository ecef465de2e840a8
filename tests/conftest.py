"""
tests/conftest
~~~~~~~~~~~~~~
"""

import pandas as pd
import pytest

from rainprep import Pipeline, RecordTable


@pytest.fixture(scope="session")
def toy_df():
    """
    Returns the two-response, two-term example table.

    Returns:
        pd.DataFrame: Long-format records.
    """
    return pd.DataFrame(
        {
            "response": ["A", "A", "B", "B"],
            "term": ["t1", "t2", "t1", "t2"],
            "estimate": [0.5, -0.3, 0.4, -0.2],
            "p_value": [0.01, 0.2, 0.001, 0.3],
        }
    )


@pytest.fixture(scope="session")
def toy_table(toy_df):
    """
    Returns a RecordTable built from the toy DataFrame.

    Args:
        toy_df (pd.DataFrame): Toy input DataFrame.

    Returns:
        RecordTable: Validated toy records.
    """
    return RecordTable(toy_df)


@pytest.fixture(scope="session")
def grouped_table():
    """
    Returns four terms forming two well-separated groups over three responses.

    Returns:
        RecordTable: Records where {a, b} and {c, d} cluster together.
    """
    estimates = {
        "a": [0.0, 0.1, 0.2],
        "c": [5.0, 5.1, 5.3],
        "b": [0.1, 0.2, 0.2],
        "d": [5.2, 5.0, 5.1],
    }
    responses = ["r1", "r2", "r3"]
    rows = []
    for i, resp in enumerate(responses):
        for term, vals in estimates.items():
            rows.append(
                {
                    "response": resp,
                    "term": term,
                    "estimate": vals[i],
                    "p_value": 0.05 if term in ("a", "b") else 1e-20,
                }
            )
    return RecordTable.from_records(rows)


@pytest.fixture(scope="session")
def empty_table():
    """
    Returns a table with no records.

    Returns:
        RecordTable: Empty records.
    """
    return RecordTable.from_records([])


@pytest.fixture(scope="session")
def toy_prepared(grouped_table):
    """
    Returns a clustered, derived PreparedTable for plotting tests.

    Args:
        grouped_table (RecordTable): Grouped toy records.

    Returns:
        PreparedTable: Prepared output with term and response dendrograms.
    """
    return (
        Pipeline(grouped_table)
        .derive(ceiling=15.0)
        .order("cluster")
        .order_responses("cluster")
        .finalize()
        .result
    )
