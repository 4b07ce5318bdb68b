"""
Data validation and cleaning functions.

Contains the series checks every forecasting entry point runs first, plus the
upstream cleaning helpers (negative values, IQR outliers, missing value
filling). The forecasting code never fills missing values itself; cleaning is
applied by the caller before a series is handed to the engine.
"""

import logging
import warnings

import numpy as np
import pandas as pd

from .exceptions import MissingDataWarning, SeriesValidationError
from .series import MonthlySeries

logger = logging.getLogger(__name__)

FILL_METHODS = ("locf", "mean", "interpolate")


def validate_series(series, min_length=12, log=None):
    """
    Check that ``series`` is a usable monthly series.

    Args:
        series: MonthlySeries to check
        min_length: Minimum number of observations required
        log: Optional logger (defaults to the module logger)

    Returns:
        dict: n, n_missing, pct_missing, years, data_quality

    Raises:
        SeriesValidationError: If the input is not a MonthlySeries or is too short
    """
    log = log or logger
    if not isinstance(series, MonthlySeries):
        raise SeriesValidationError(
            f"Expected a MonthlySeries, got {type(series).__name__}"
        )
    if len(series) < min_length:
        raise SeriesValidationError(
            f"Series too short. Minimum: {min_length}, actual: {len(series)}"
        )

    report = {
        "n": len(series),
        "n_missing": series.n_missing,
        "pct_missing": series.missing_pct,
        "years": len(series) / series.period,
        "data_quality": _assess_data_quality(series),
    }

    if report["n_missing"] > 0:
        message = f"Series contains {report['n_missing']} NA values ({report['pct_missing']:.1f}%)"
        log.warning(message)
        warnings.warn(message, MissingDataWarning, stacklevel=2)

    return report


def _assess_data_quality(series):
    """Grade series length against the model family history requirements."""
    n = series.n_observed
    if n < 12:
        return "insufficient"
    elif n < 24:
        return "percentile_only"
    elif n < 36:
        return "limited"
    elif n < 48:
        return "good"
    else:
        return "excellent"


def detect_outliers(values, k=1.5):
    """
    Indices of values outside [Q1 - k*IQR, Q3 + k*IQR].

    Missing values are ignored when computing the quartiles and are never
    reported as outliers.
    """
    values = np.asarray(values, dtype=float)
    observed = values[~np.isnan(values)]
    if observed.size == 0:
        return np.array([], dtype=int)
    q1, q3 = np.quantile(observed, [0.25, 0.75])
    iqr = q3 - q1
    lower_bound = q1 - k * iqr
    upper_bound = q3 + k * iqr
    with np.errstate(invalid="ignore"):
        return np.flatnonzero((values < lower_bound) | (values > upper_bound))


def _constant_runs(values, min_run=7):
    """(start, length) of runs of identical observed values at least ``min_run`` long."""
    runs = []
    start = 0
    for i in range(1, len(values) + 1):
        if i < len(values) and values[i] == values[start]:
            continue
        if i - start >= min_run and not np.isnan(values[start]):
            runs.append((start, i - start))
        start = i
    return runs


def validate_and_clean(series, remove_outliers=False, outlier_k=3.0, log=None):
    """
    Detect and blank out suspicious observations.

    Negative flows are set to NA. When ``remove_outliers`` is set, IQR outliers
    (factor ``outlier_k``) are set to NA as well. Runs of more than 6 identical
    months are reported but left untouched.

    Returns:
        tuple: (clean MonthlySeries, issues dict)
    """
    log = log or logger
    values = np.array(series.values)
    issues = {}

    with np.errstate(invalid="ignore"):
        negative_idx = np.flatnonzero(values < 0)
    if negative_idx.size:
        issues["negative"] = negative_idx
        log.warning(f"Found {negative_idx.size} negative values")
        values[negative_idx] = np.nan

    if remove_outliers:
        outlier_idx = detect_outliers(series.values, k=outlier_k)
        if outlier_idx.size:
            issues["outliers"] = outlier_idx
            log.warning(f"Found {outlier_idx.size} outliers (k={outlier_k:.1f})")
            values[outlier_idx] = np.nan

    runs = _constant_runs(series.values)
    if runs:
        issues["constant_sequences"] = runs
        log.warning(f"Detected {len(runs)} suspiciously constant sequences")

    issues["n_issues"] = int(negative_idx.size + len(issues.get("outliers", ())))
    return series.with_values(values), issues


def fill_missing_values(series, method="locf", log=None):
    """
    Fill NA observations.

    Args:
        series: MonthlySeries with missing values
        method: "locf" (last observation carried forward), "mean" (calendar
            month mean) or "interpolate" (linear)

    Returns:
        MonthlySeries: New series; leading NAs stay missing for "locf", and
        NAs outside the first/last observation stay missing for "interpolate"
    """
    log = log or logger
    if method not in FILL_METHODS:
        raise ValueError(f"Unknown fill method: {method}")

    if not series.has_missing():
        log.info("No missing values to fill")
        return series

    log.info(f"Filling {series.n_missing} NAs using method: {method}")
    values = pd.Series(series.values)

    if method == "locf":
        filled = values.ffill()
    elif method == "mean":
        monthly_means = values.groupby(series.months).transform("mean")
        filled = values.fillna(monthly_means)
    else:
        filled = values.interpolate(method="linear", limit_area="inside")

    return series.with_values(filled.to_numpy(dtype=float))
