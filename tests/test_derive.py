"""
tests/test_derive
~~~~~~~~~~~~~~~~~
"""

import numpy as np
import pytest

from rainprep import DomainError, EmptyInputError, RecordTable, derive
from rainprep.core.derive import CAPPED_P, NEG_LOG10_P


@pytest.mark.api
def test_derive_symmetric_limits_and_breaks(toy_table):
    """
    Ensures limits are symmetric around zero and span max |estimate|.

    Args:
        toy_table (RecordTable): Toy records fixture.
    """
    derived = derive(toy_table)

    assert derived.max_abs_estimate == pytest.approx(0.5)
    assert derived.limits == pytest.approx((-0.5, 0.5))
    assert -derived.limits[0] == derived.limits[1] == derived.max_abs_estimate
    assert derived.breaks == pytest.approx((-0.5, -0.25, 0.0, 0.25, 0.5))


@pytest.mark.api
def test_derive_transforms_and_caps_p_values(grouped_table):
    """
    Ensures -log10 p-values are capped at the ceiling and untouched below it.

    Args:
        grouped_table (RecordTable): Grouped toy records fixture.
    """
    derived = derive(grouped_table, ceiling=15.0)
    df = derived.df

    assert (df[CAPPED_P] <= 15.0).all()
    below = df[NEG_LOG10_P] <= 15.0
    assert np.allclose(df.loc[below, CAPPED_P], df.loc[below, NEG_LOG10_P])
    assert df.loc[~below, CAPPED_P].eq(15.0).all()
    assert derived.count_capped == 6
    assert df.loc[df["term"] == "a", NEG_LOG10_P].iloc[0] == pytest.approx(-np.log10(0.05))


@pytest.mark.api
def test_derive_is_idempotent(toy_table):
    """
    Ensures deriving a derived table with the same ceiling changes nothing.

    Args:
        toy_table (RecordTable): Toy records fixture.
    """
    once = derive(toy_table, ceiling=2.0)
    twice = derive(once, ceiling=2.0)

    assert once.equals(twice)
    assert NEG_LOG10_P not in toy_table.df.columns


@pytest.mark.api
def test_derive_rejects_non_positive_p_values():
    """
    Ensures p-values <= 0 raise DomainError.
    """
    table = RecordTable.from_records(
        [
            {"response": "A", "term": "x", "estimate": 0.1, "p_value": 0.0},
            {"response": "A", "term": "y", "estimate": 0.2, "p_value": 0.5},
        ]
    )
    with pytest.raises(DomainError):
        derive(table)


@pytest.mark.api
def test_derive_rejects_empty_table(empty_table):
    """
    Ensures deriving from zero records raises EmptyInputError.

    Args:
        empty_table (RecordTable): Empty records fixture.
    """
    with pytest.raises(EmptyInputError):
        derive(empty_table)


@pytest.mark.api
@pytest.mark.parametrize("ceiling", [0.0, -1.0])
def test_derive_rejects_non_positive_ceiling(toy_table, ceiling):
    """
    Ensures a ceiling <= 0 raises a ValueError.

    Args:
        toy_table (RecordTable): Toy records fixture.
        ceiling (float): Invalid ceiling.
    """
    with pytest.raises(ValueError):
        derive(toy_table, ceiling=ceiling)
