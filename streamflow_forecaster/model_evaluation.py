"""
Model comparison and time series cross-validation.

Compares model families on a chronological holdout and scores a family with
expanding-window (walk-forward) cross-validation. Failures of one family or
one fold are logged and excluded; they never abort the whole evaluation.
"""

from dataclasses import dataclass

import numpy as np
import pandas as pd

from .config import DEFAULT_CONFIG
from .data_validation import validate_series
from .exceptions import ForecastError, SeriesValidationError
from .metrics import calculate_forecast_metrics
from .models import get_model_family
from .utils import run_in_order

# Listing order doubles as the tie-break order of the comparison table
DEFAULT_COMPARISON_FAMILIES = ("arima", "ets", "arima_seasonal", "stl")
MIN_COMPARISON_LENGTH = 48

COMPARISON_COLUMNS = ["model", "RMSE", "MAE", "MAPE", "R2", "bias", "AIC", "BIC"]


def train_test_split(series, holdout_size):
    """
    Chronological split into (train, test).

    train = series[0 : n - holdout_size], test = series[n - holdout_size : n]
    """
    n = len(series)
    if not 1 <= holdout_size < n:
        raise SeriesValidationError(
            f"holdout_size must be between 1 and {n - 1}, got {holdout_size}"
        )
    return series.slice(0, n - holdout_size), series.slice(n - holdout_size, n)


def compare_models(series, holdout_size=12, families=None, config=DEFAULT_CONFIG):
    """
    Fit several model families on a training prefix and score them on the holdout.

    Args:
        series: MonthlySeries with at least 48 observations
        holdout_size: Number of trailing months held out for validation
        families: Family keys or ModelFamily instances (defaults to ARIMA, ETS,
            ARIMA_Seasonal, STL)
        config: ForecastConfig

    Returns:
        DataFrame: model, RMSE, MAE, MAPE, R2, bias, AIC, BIC sorted ascending
        by RMSE (ties keep listing order). Families that fail to fit or
        forecast are absent.
    """
    log = config.logger
    validate_series(series, min_length=MIN_COMPARISON_LENGTH, log=log)
    train, test = train_test_split(series, holdout_size)
    families = [get_model_family(f) for f in (families or DEFAULT_COMPARISON_FAMILIES)]

    log.info(f"Comparing models (validation: {holdout_size} months)...")

    def evaluate(family):
        try:
            fitted = family.fit(train, config)
            forecast = fitted.forecast(holdout_size, config.confidence_levels)
        except ForecastError as e:
            log.warning(f"Error fitting {family.label}: {e}")
            return None

        metrics = calculate_forecast_metrics(test.values, forecast["forecast"].to_numpy(), log=log)
        return {
            "model": family.label,
            "RMSE": metrics["RMSE"],
            "MAE": metrics["MAE"],
            "MAPE": metrics["MAPE"],
            "R2": metrics["R2"],
            "bias": metrics["bias"],
            "AIC": fitted.aic,
            "BIC": fitted.bic,
        }

    rows = [row for row in run_in_order(evaluate, families, config.max_workers) if row is not None]
    results = pd.DataFrame(rows, columns=COMPARISON_COLUMNS)
    results = results.sort_values("RMSE", kind="mergesort", na_position="last").reset_index(drop=True)

    if len(results):
        log.info("Comparison complete")
        log.info(f"Best model: {results['model'].iloc[0]} (RMSE = {results['RMSE'].iloc[0]:.3f})")
    else:
        log.warning("No model could be fitted for comparison")
    return results


@dataclass
class CVResult:
    """
    Walk-forward cross-validation errors.

    Attributes:
        errors: DataFrame (fold x horizon step) of actual - predicted; NaN for
            failed folds
        rmse: RMSE per horizon step 1..h
        mae: MAE per horizon step 1..h
        n_folds: Number of folds attempted
        family: Model family evaluated
    """

    errors: pd.DataFrame
    rmse: np.ndarray
    mae: np.ndarray
    n_folds: int
    family: str

    @property
    def horizon(self):
        return len(self.rmse)

    @property
    def n_failed(self):
        return int(self.errors.isna().all(axis=1).sum())

    def to_frame(self):
        """Per-step summary: horizon, RMSE, MAE, n (valid errors)."""
        return pd.DataFrame({
            "horizon": np.arange(1, self.horizon + 1),
            "RMSE": self.rmse,
            "MAE": self.mae,
            "n": self.errors.notna().sum(axis=0).to_numpy(),
        })


def cv_fold_windows(n, horizon, initial_window, window=None):
    """
    (train_start, train_end) of every fold, train_end exclusive.

    Fold k trains on [0, initial_window + k), or on its last ``window``
    values when ``window`` is given, and is scored on the following
    ``horizon`` values. Folds continue while train_end + horizon <= n,
    giving n - initial_window - horizon + 1 folds.
    """
    windows = []
    train_end = initial_window
    while train_end + horizon <= n:
        train_start = 0 if window is None else max(0, train_end - window)
        windows.append((train_start, train_end))
        train_end += 1
    return windows


def time_series_cv(series, horizon=6, initial_window=48, family="arima_seasonal", window=None,
                   config=DEFAULT_CONFIG):
    """
    Walk-forward cross-validation of one model family.

    Args:
        series: MonthlySeries
        horizon: Steps forecast from each origin
        initial_window: Training length of the first fold
        family: Family key or ModelFamily instance
        window: Fixed training length (rolling window); None for expanding

    Returns:
        CVResult: Signed errors per fold and step, with RMSE and MAE
        aggregated per horizon step across folds (never pooled across steps)
    """
    log = config.logger
    if horizon < 1:
        raise ValueError(f"horizon must be >= 1, got {horizon}")
    if window is not None and window < 1:
        raise ValueError(f"window must be >= 1, got {window}")
    validate_series(series, min_length=initial_window + horizon, log=log)
    family = get_model_family(family)

    windows = cv_fold_windows(len(series), horizon, initial_window, window)
    log.info(f"Running time series cross-validation: {len(windows)} folds, h={horizon}")

    def run_fold(fold):
        train_start, train_end = fold
        train = series.slice(train_start, train_end)
        actual = series.values[train_end:train_end + horizon]
        try:
            fitted = family.fit(train, config)
            predicted = fitted.forecast(horizon, config.confidence_levels)["forecast"].to_numpy()
        except ForecastError as e:
            log.warning(f"Cross-validation fold ending at {train_end} failed: {e}")
            return np.full(horizon, np.nan)
        return actual - predicted

    fold_errors = run_in_order(run_fold, windows, config.max_workers)
    errors = pd.DataFrame(
        np.vstack(fold_errors),
        columns=[f"h{step}" for step in range(1, horizon + 1)],
    )
    errors.index.name = "fold"

    with np.errstate(invalid="ignore"):
        values = errors.to_numpy()
        valid = ~np.isnan(values)
        counts = valid.sum(axis=0)
        squared = np.where(valid, values ** 2, 0.0).sum(axis=0)
        absolute = np.where(valid, np.abs(values), 0.0).sum(axis=0)
        rmse = np.where(counts > 0, np.sqrt(squared / np.maximum(counts, 1)), np.nan)
        mae = np.where(counts > 0, absolute / np.maximum(counts, 1), np.nan)

    if counts.size and counts[0] > 0:
        log.info(f"Mean RMSE (h=1): {rmse[0]:.3f}")
    return CVResult(errors=errors, rmse=rmse, mae=mae, n_folds=len(windows), family=family.name)
