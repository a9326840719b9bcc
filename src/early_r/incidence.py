# src/early_r/incidence.py
"""
Dense daily incidence series.

The likelihood assumes the series ends on the day R is estimated, so a series
built from onset dates must be padded with zero-count days up to that date
(use ``last_date``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Union

import logging

import numpy as np
import pandas as pd

from .errors import InvalidInputError

logger = logging.getLogger(__name__)


def validate_counts(counts: Sequence) -> np.ndarray:
    """Return counts as a 1D int array, raising InvalidInputError if malformed."""
    arr = np.asarray(counts)
    if arr.ndim != 1:
        raise InvalidInputError("incidence must be a 1D sequence of daily counts")
    if arr.size == 0:
        raise InvalidInputError("incidence series is empty")
    if not np.issubdtype(arr.dtype, np.number) or np.issubdtype(arr.dtype, np.complexfloating):
        raise InvalidInputError("incidence counts must be numeric")
    if not np.all(np.isfinite(arr)):
        raise InvalidInputError("incidence counts must be finite")
    if np.any(arr < 0):
        raise InvalidInputError("incidence counts must be >= 0")
    if np.any(arr != np.round(arr)):
        raise InvalidInputError("incidence counts must be whole numbers")
    return arr.astype(int)


@dataclass(frozen=True, eq=False)
class IncidenceSeries:
    """Daily case counts over a continuous date range.

    Attributes:
        counts (np.ndarray): read-only int array, one entry per day
        start_date (pd.Timestamp or None): date of ``counts[0]``; None when the
            series is indexed by day offset only
    """
    counts: np.ndarray
    start_date: Optional[pd.Timestamp] = None

    def __post_init__(self):
        arr = validate_counts(self.counts)
        arr.flags.writeable = False
        object.__setattr__(self, "counts", arr)
        if self.start_date is not None:
            object.__setattr__(self, "start_date", pd.Timestamp(self.start_date).normalize())

    def __len__(self):
        return int(self.counts.size)

    @property
    def dates(self) -> pd.Index:
        if self.start_date is None:
            return pd.RangeIndex(len(self), name="day")
        return pd.date_range(self.start_date, periods=len(self), freq="D", name="date")

    @property
    def last_date(self) -> Optional[pd.Timestamp]:
        if self.start_date is None:
            return None
        return self.start_date + pd.Timedelta(days=len(self) - 1)

    def to_series(self) -> pd.Series:
        return pd.Series(self.counts, index=self.dates, name="incidence")

    @classmethod
    def from_dates(
        cls,
        dates: Iterable,
        last_date=None,
    ) -> "IncidenceSeries":
        """Aggregate individual onset dates into daily counts.

        Args:
            dates: iterable of anything ``pd.to_datetime`` understands
            last_date: the current observation date; days between the last
                onset and this date are filled with zeros
        Returns:
            IncidenceSeries starting at the earliest onset
        Raises:
            InvalidInputError
        """
        onsets = pd.to_datetime(pd.Series(list(dates), dtype=object))
        if onsets.empty:
            raise InvalidInputError("at least one onset date is required")
        if onsets.isna().any():
            raise InvalidInputError("onset dates must not contain missing values")
        onsets = onsets.dt.normalize()

        first, last = onsets.min(), onsets.max()
        if last_date is not None:
            last_date = pd.Timestamp(last_date).normalize()
            if last_date < last:
                raise InvalidInputError(
                    f"last_date {last_date.date()} is before the last onset {last.date()}"
                )
            last = last_date

        days = pd.date_range(first, last, freq="D")
        counts = onsets.value_counts().reindex(days, fill_value=0)
        logger.debug("Aggregated %d onsets into %d days", len(onsets), len(days))
        return cls(counts=counts.to_numpy(dtype=int), start_date=first)


IncidenceLike = Union[IncidenceSeries, Sequence[int], np.ndarray]


def as_incidence(x: IncidenceLike) -> IncidenceSeries:
    if isinstance(x, IncidenceSeries):
        return x
    return IncidenceSeries(counts=x)
