"""
Metrics and evaluation functions for forecasting models.

Contains implementations of RMSE, MAE, MAPE, R² and bias computed on paired
(actual, predicted) values with missing pairs dropped.
"""

import logging

import numpy as np
from sklearn.metrics import mean_absolute_error, mean_squared_error

logger = logging.getLogger(__name__)

METRIC_NAMES = ("RMSE", "MAE", "MAPE", "R2", "bias")


def _valid_pairs(actual, predicted):
    """Drop any pair where either side is NaN."""
    actual = np.asarray(actual, dtype=float)
    predicted = np.asarray(predicted, dtype=float)
    if actual.shape != predicted.shape:
        raise ValueError(
            f"actual and predicted must have the same shape, got {actual.shape} and {predicted.shape}"
        )
    mask = ~np.isnan(actual) & ~np.isnan(predicted)
    return actual[mask], predicted[mask]


def rmse(actual, forecast):
    """
    Calculate Root Mean Squared Error (RMSE).

    Args:
        actual: Array of actual values
        forecast: Array of forecasted values

    Returns:
        RMSE value (lower is better), NaN without valid pairs
    """
    actual, forecast = _valid_pairs(actual, forecast)
    if actual.size == 0:
        return np.nan
    return float(np.sqrt(mean_squared_error(actual, forecast)))


def mae(actual, forecast):
    """Mean Absolute Error, NaN without valid pairs."""
    actual, forecast = _valid_pairs(actual, forecast)
    if actual.size == 0:
        return np.nan
    return float(mean_absolute_error(actual, forecast))


def mape(actual, forecast):
    """
    Mean Absolute Percentage Error in percent.

    Terms with a zero actual (and any other non-finite term) are excluded
    rather than propagated.
    """
    actual, forecast = _valid_pairs(actual, forecast)
    with np.errstate(divide="ignore", invalid="ignore"):
        pct_errors = np.abs(actual - forecast) / np.abs(actual) * 100
    pct_errors = pct_errors[np.isfinite(pct_errors)]
    if pct_errors.size == 0:
        return np.nan
    return float(np.mean(pct_errors))


def r_squared(actual, forecast):
    """Squared Pearson correlation; NaN when either side is constant."""
    actual, forecast = _valid_pairs(actual, forecast)
    if actual.size < 2 or np.std(actual) == 0 or np.std(forecast) == 0:
        return np.nan
    return float(np.corrcoef(actual, forecast)[0, 1] ** 2)


def bias(actual, forecast):
    """Mean signed error (actual - forecast); positive means under-forecasting."""
    actual, forecast = _valid_pairs(actual, forecast)
    if actual.size == 0:
        return np.nan
    return float(np.mean(actual - forecast))


def calculate_forecast_metrics(actual, predicted, log=None):
    """
    Calculate all forecast error metrics.

    Args:
        actual: Observed values
        predicted: Forecast values

    Returns:
        dict: n, valid, RMSE, MAE, MAPE, R2, bias. When no valid pairs remain,
        ``valid`` is False and every metric is NaN.
    """
    log = log or logger
    actual, predicted = _valid_pairs(actual, predicted)

    if actual.size == 0:
        log.warning("No valid values to compute metrics")
        metrics = {"n": 0, "valid": False}
        metrics.update({name: np.nan for name in METRIC_NAMES})
        return metrics

    return {
        "n": int(actual.size),
        "valid": True,
        "RMSE": rmse(actual, predicted),
        "MAE": mae(actual, predicted),
        "MAPE": mape(actual, predicted),
        "R2": r_squared(actual, predicted),
        "bias": bias(actual, predicted),
    }


def format_metrics(metrics):
    """Readable multi-line summary of ``calculate_forecast_metrics`` output."""
    if not metrics or not metrics.get("valid", False):
        return "No metrics available"
    return "\n".join([
        "=== PERFORMANCE METRICS ===",
        f"  N:     {metrics['n']} observations",
        f"  RMSE:  {metrics['RMSE']:.3f}",
        f"  MAE:   {metrics['MAE']:.3f}",
        f"  MAPE:  {metrics['MAPE']:.2f}%",
        f"  R²:    {metrics['R2']:.3f}",
        f"  Bias:  {metrics['bias']:.3f}",
    ])
