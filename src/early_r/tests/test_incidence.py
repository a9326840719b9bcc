import numpy as np
import pandas as pd
import pytest

from early_r.errors import InvalidInputError
from early_r.incidence import IncidenceSeries, as_incidence


def test_from_dates_counts_and_trailing_zeros():
    onsets = ["2024-05-01", "2024-05-03", "2024-05-03", "2024-05-04"]
    inc = IncidenceSeries.from_dates(onsets, last_date="2024-05-08")

    assert inc.start_date == pd.Timestamp("2024-05-01")
    assert inc.last_date == pd.Timestamp("2024-05-08")
    assert inc.counts.tolist() == [1, 0, 2, 1, 0, 0, 0, 0]
    assert len(inc) == 8


def test_from_dates_without_last_date_ends_at_last_onset():
    inc = IncidenceSeries.from_dates(["2024-01-02", "2024-01-01"])
    assert inc.counts.tolist() == [1, 1]
    assert inc.last_date == pd.Timestamp("2024-01-02")


def test_from_dates_ignores_time_of_day():
    inc = IncidenceSeries.from_dates([pd.Timestamp("2024-01-01 08:00"), pd.Timestamp("2024-01-01 20:00")])
    assert inc.counts.tolist() == [2]


def test_from_dates_last_date_before_last_onset_raises():
    with pytest.raises(InvalidInputError):
        IncidenceSeries.from_dates(["2024-05-01", "2024-05-10"], last_date="2024-05-05")


def test_from_dates_empty_raises():
    with pytest.raises(InvalidInputError):
        IncidenceSeries.from_dates([])


@pytest.mark.parametrize("counts", [[], [1, -1, 0], [1.5, 2], [[1, 2], [3, 4]], ["a", "b"], [1, float("nan")]])
def test_invalid_counts_raise(counts):
    with pytest.raises(InvalidInputError):
        IncidenceSeries(counts=counts)


def test_whole_floats_are_accepted():
    inc = IncidenceSeries(counts=[1.0, 0.0, 3.0])
    assert inc.counts.dtype.kind == "i"
    assert inc.counts.tolist() == [1, 0, 3]


def test_counts_are_an_immutable_copy():
    raw = np.array([1, 2, 3])
    inc = IncidenceSeries(counts=raw)
    raw[0] = 100
    assert inc.counts[0] == 1
    with pytest.raises(ValueError):
        inc.counts[0] = 5


def test_dates_index():
    undated = IncidenceSeries(counts=[1, 0, 0])
    assert list(undated.dates) == [0, 1, 2]
    assert undated.last_date is None

    dated = IncidenceSeries(counts=[1, 0, 0], start_date="2024-03-30")
    assert list(dated.dates) == list(pd.date_range("2024-03-30", "2024-04-01"))
    s = dated.to_series()
    assert s.loc[pd.Timestamp("2024-03-30")] == 1
    assert s.name == "incidence"


def test_as_incidence_passes_series_through():
    inc = IncidenceSeries(counts=[1, 2])
    assert as_incidence(inc) is inc
    assert as_incidence([3, 4]).counts.tolist() == [3, 4]
