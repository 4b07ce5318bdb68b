"""
Per-calendar-month statistics and empirical quantiles.

Observations are partitioned by calendar month (derived from the series
anchor), missing values are dropped per month, and descriptive statistics plus
type-7 (linear interpolation) quantiles are computed for each month.
"""

import logging
import warnings
from dataclasses import dataclass, field
from typing import Dict

import numpy as np
import pandas as pd
from statsmodels.distributions.empirical_distribution import ECDF

from .config import DEFAULT_CONFIG
from .data_validation import validate_series
from .exceptions import LowConfidenceWarning
from .series import month_name


def percentile_label(p):
    """Column label for a percentile, e.g. 0.15 -> "P15"."""
    return f"P{p * 100:.0f}"


def empirical_quantile(values, p):
    """
    Linear-interpolation empirical quantile (type 7).

    With sorted values v[0..n-1] and h = (n - 1) * p the result is
    v[floor(h)] + (h - floor(h)) * (v[ceil(h)] - v[floor(h)]).

    Args:
        values: Observations (NaN entries are ignored)
        p: Probability in [0, 1]

    Returns:
        float: Quantile, NaN when no observations remain
    """
    if not 0 <= p <= 1:
        raise ValueError(f"Percentile must lie in [0, 1], got {p}")
    values = np.asarray(values, dtype=float)
    values = values[~np.isnan(values)]
    if values.size == 0:
        return np.nan
    return float(np.quantile(values, p, method="linear"))


@dataclass
class MonthlyStatsRow:
    """Descriptive statistics of one calendar month."""

    month: int
    month_name: str
    count: int
    min: float = np.nan
    max: float = np.nan
    mean: float = np.nan
    sd: float = np.nan
    cv: float = np.nan
    percentiles: Dict[float, float] = field(default_factory=dict)
    low_confidence: bool = False

    def as_dict(self):
        row = {
            "month": self.month,
            "month_name": self.month_name,
            "count": self.count,
            "min": self.min,
        }
        row.update({percentile_label(p): v for p, v in self.percentiles.items()})
        row.update({
            "mean": self.mean,
            "max": self.max,
            "sd": self.sd,
            "cv": self.cv,
            "low_confidence": self.low_confidence,
        })
        return row


def _month_row(month, values, percentiles, min_observations):
    count = int(values.size)
    row = MonthlyStatsRow(
        month=month,
        month_name=month_name(month),
        count=count,
        percentiles={p: np.nan for p in percentiles},
        low_confidence=count < min_observations,
    )
    if count == 0:
        return row

    row.min = float(values.min())
    row.max = float(values.max())
    row.mean = float(values.mean())
    row.sd = float(values.std(ddof=1)) if count > 1 else np.nan
    # NaN rather than +/-inf when the mean is zero
    row.cv = row.sd / row.mean if row.mean != 0 and np.isfinite(row.sd) else np.nan
    row.percentiles = {p: empirical_quantile(values, p) for p in percentiles}
    return row


def monthly_stats(series, percentiles=None, config=DEFAULT_CONFIG):
    """
    Calculate descriptive statistics for every calendar month.

    Args:
        series: MonthlySeries
        percentiles: Percentiles to compute (defaults to ``config.percentiles``)
        config: ForecastConfig

    Returns:
        list[MonthlyStatsRow]: One row per month 1..12 in calendar order. Months
        without observations carry NaN statistics; months with fewer than
        ``config.min_month_observations`` are flagged ``low_confidence``.
    """
    log = config.logger
    percentiles = tuple(config.percentiles if percentiles is None else percentiles)
    for p in percentiles:
        if not 0 <= p <= 1:
            raise ValueError(f"Percentile must lie in [0, 1], got {p}")
    validate_series(series, min_length=config.min_series_length, log=log)

    rows = []
    for month in range(1, 13):
        row = _month_row(month, series.values_for_month(month), percentiles, config.min_month_observations)
        if row.count == 0:
            log.info(f"No observations for month {month}; statistics undefined")
        elif row.low_confidence:
            message = f"Month {month} has very few observations ({row.count})"
            log.warning(message)
            warnings.warn(message, LowConfidenceWarning, stacklevel=2)
        rows.append(row)
    return rows


def monthly_stats_table(series, percentiles=None, config=DEFAULT_CONFIG) -> pd.DataFrame:
    """``monthly_stats`` as a DataFrame, one row per calendar month."""
    rows = monthly_stats(series, percentiles, config=config)
    return pd.DataFrame([row.as_dict() for row in rows])


def percentile_table(series, percentiles=None, config=DEFAULT_CONFIG) -> pd.DataFrame:
    """
    Reference table of monthly percentiles.

    Columns: month, month_name, one ``P<nn>`` column per percentile, mean, n_obs.
    """
    percentiles = tuple(config.percentiles if percentiles is None else percentiles)
    validate_series(series, min_length=config.min_series_length, log=config.logger)

    records = []
    for month in range(1, 13):
        values = series.values_for_month(month)
        record = {"month": month, "month_name": month_name(month)}
        for p in percentiles:
            record[percentile_label(p)] = empirical_quantile(values, p)
        record["mean"] = float(values.mean()) if values.size else np.nan
        record["n_obs"] = int(values.size)
        records.append(record)
    return pd.DataFrame(records)


def monthly_ecdf(series, config=DEFAULT_CONFIG):
    """
    Empirical distribution function of each calendar month.

    Returns:
        dict: month -> ECDF, or None for months with fewer than
        ``config.min_month_observations`` observations
    """
    validate_series(series, min_length=config.min_series_length, log=config.logger)
    distributions = {}
    for month in range(1, 13):
        values = series.values_for_month(month)
        if values.size < config.min_month_observations:
            config.logger.warning(f"Month {month} has very few observations ({values.size})")
            distributions[month] = None
        else:
            distributions[month] = ECDF(values)
    return distributions
