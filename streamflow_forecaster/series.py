"""
Monthly time-series container and calendar helpers.

A ``MonthlySeries`` is an ordered, read-only sequence of monthly observations
anchored at (start_year, start_month). Missing observations are stored as NaN
and are never filled in by the forecasting code.
"""

import calendar

import numpy as np
import pandas as pd

from .exceptions import SeriesValidationError

PERIOD = 12
MONTH_NAMES = tuple(calendar.month_abbr[1:])


def adjust_month(month):
    """
    Map a month number (possibly > 12) onto the 1-12 annual cycle.

    Works on scalars and numpy arrays, e.g. ``adjust_month(14) == 2``.
    """
    if np.ndim(month):
        return ((np.asarray(month) - 1) % PERIOD) + 1
    return int(((month - 1) % PERIOD) + 1)


def forecast_months(start_month, n_months):
    """
    Calendar months covered by a forecast issued in ``start_month``.

    Step 1 is the month after ``start_month``, so (11, 4) gives [12, 1, 2, 3].
    """
    if not 1 <= int(start_month) <= 12:
        raise SeriesValidationError(f"start_month must be 1-12, got {start_month}")
    return [adjust_month(int(start_month) + i) for i in range(1, int(n_months) + 1)]


def month_name(month):
    return MONTH_NAMES[int(month) - 1]


class MonthlySeries:
    """
    Fixed-period (12) monthly series with an explicit calendar anchor.

    Index ``i`` maps to calendar month ``((start_month - 1 + i) mod 12) + 1``.
    Instances are never mutated; slicing and cleaning return new series.
    """

    def __init__(self, values, start_year, start_month, name="flow"):
        try:
            arr = np.array(values, dtype=float)
        except (TypeError, ValueError) as e:
            raise SeriesValidationError(f"Series values must be numeric: {e}") from e
        if arr.ndim != 1:
            raise SeriesValidationError(f"Series must be one-dimensional, got shape {arr.shape}")
        if arr.size == 0:
            raise SeriesValidationError("Series is empty")
        if not 1 <= int(start_month) <= 12:
            raise SeriesValidationError(f"start_month must be 1-12, got {start_month}")
        if np.isinf(arr).any():
            raise SeriesValidationError("Series contains infinite values")

        arr.setflags(write=False)
        self._values = arr
        self.start_year = int(start_year)
        self.start_month = int(start_month)
        self.name = name

    @classmethod
    def from_pandas(cls, series: pd.Series, name=None):
        """
        Build a series from a pandas Series indexed by consecutive months.

        Accepts a DatetimeIndex or a monthly PeriodIndex; the first entry
        provides the anchor.
        """
        if len(series) == 0:
            raise SeriesValidationError("Series is empty")
        index = series.index
        if isinstance(index, pd.DatetimeIndex):
            periods = index.to_period("M")
        elif isinstance(index, pd.PeriodIndex):
            periods = index.asfreq("M")
        else:
            raise SeriesValidationError("Series index must be a DatetimeIndex or PeriodIndex")

        expected = pd.period_range(periods[0], periods=len(periods), freq="M")
        if not periods.equals(expected):
            raise SeriesValidationError("Series index must contain consecutive months without gaps")

        return cls(
            pd.to_numeric(series, errors="coerce").to_numpy(dtype=float),
            start_year=periods[0].year,
            start_month=periods[0].month,
            name=name or series.name or "flow",
        )

    @property
    def values(self):
        return self._values

    @property
    def period(self):
        return PERIOD

    def __len__(self):
        return self._values.size

    def __repr__(self):
        return (
            f"MonthlySeries(name={self.name!r}, n={len(self)}, "
            f"start={self.start_year}-{self.start_month:02d}, end={self.end_year}-{self.end_month:02d})"
        )

    def month_of(self, i):
        return ((self.start_month - 1 + int(i)) % PERIOD) + 1

    @property
    def months(self):
        return ((self.start_month - 1 + np.arange(len(self))) % PERIOD) + 1

    @property
    def end_year(self):
        return self.start_year + (self.start_month - 1 + len(self) - 1) // PERIOD

    @property
    def end_month(self):
        return self.month_of(len(self) - 1)

    @property
    def dates(self):
        return pd.date_range(
            start=pd.Timestamp(year=self.start_year, month=self.start_month, day=1),
            periods=len(self),
            freq="MS",
        )

    @property
    def n_missing(self):
        return int(np.isnan(self._values).sum())

    @property
    def missing_pct(self):
        return 100.0 * self.n_missing / len(self)

    @property
    def n_observed(self):
        return len(self) - self.n_missing

    def has_missing(self):
        return self.n_missing > 0

    def to_pandas(self) -> pd.Series:
        """Series indexed by month-start dates (freq ``MS``)."""
        return pd.Series(np.array(self._values), index=self.dates, name=self.name)

    def values_for_month(self, month):
        """Non-missing observations falling in calendar month ``month``."""
        month_values = self._values[self.months == int(month)]
        return month_values[~np.isnan(month_values)]

    def slice(self, start=0, stop=None):
        """New series holding positions [start, stop), re-anchored at ``start``."""
        start, stop, _ = slice(start, stop).indices(len(self))
        if stop <= start:
            raise SeriesValidationError(f"Empty slice [{start}, {stop})")
        offset = self.start_month - 1 + start
        return MonthlySeries(
            self._values[start:stop],
            start_year=self.start_year + offset // PERIOD,
            start_month=(offset % PERIOD) + 1,
            name=self.name,
        )

    def with_values(self, values):
        """New series with the same anchor and replaced values."""
        values = np.asarray(values, dtype=float)
        if values.shape != self._values.shape:
            raise SeriesValidationError(
                f"Replacement values have shape {values.shape}, expected {self._values.shape}"
            )
        return MonthlySeries(values, self.start_year, self.start_month, name=self.name)
