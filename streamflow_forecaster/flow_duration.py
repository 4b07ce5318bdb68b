"""
Flow duration curve forecasting.

Forecasts monthly flows from the historical empirical distribution of each
calendar month: a scenario forecast takes a fixed percentile of every target
month, and a persistence forecast first locates the current observation in its
month's distribution and carries that (adjusted) percentile forward.
"""

import numpy as np
import pandas as pd
from statsmodels.distributions.empirical_distribution import ECDF

from .config import DEFAULT_CONFIG
from .data_validation import validate_series
from .exceptions import ArgumentMismatchError, InsufficientDataError
from .monthly_statistics import empirical_quantile, percentile_label
from .series import forecast_months, month_name


def _forecast_frame(start_month, n_months):
    months = forecast_months(start_month, n_months)
    return pd.DataFrame({
        "step": np.arange(1, n_months + 1),
        "month": months,
        "month_name": [month_name(m) for m in months],
    })


def forecast_by_percentile(series, start_month, n_months=12, percentile=0.50,
                           adjustment=1.0, config=DEFAULT_CONFIG):
    """
    Forecast each month after ``start_month`` at a historical percentile.

    Args:
        series: Historical MonthlySeries
        start_month: Month the forecast is issued from (1-12); step 1 is the
            following month
        n_months: Number of months to forecast
        percentile: Reference percentile (0-1)
        adjustment: Multiplier applied to every forecast value

    Returns:
        DataFrame: step, month, month_name, percentile, value. Months without
        historical data get NaN.
    """
    validate_series(series, min_length=config.min_series_length, log=config.logger)
    return _percentile_forecast(series, start_month, n_months, percentile, adjustment, config.logger)


def _percentile_forecast(series, start_month, n_months, percentile, adjustment, log):
    """``forecast_by_percentile`` on a series the caller has already validated."""
    if not 0 <= percentile <= 1:
        raise ValueError(f"Percentile must lie in [0, 1], got {percentile}")
    if n_months < 1:
        raise ValueError("n_months must be >= 1")

    forecast = _forecast_frame(start_month, n_months)
    forecast["percentile"] = float(percentile)

    values = []
    for month in forecast["month"]:
        month_values = series.values_for_month(month)
        if month_values.size == 0:
            log.warning(f"No data for month {month}")
            values.append(np.nan)
        else:
            values.append(empirical_quantile(month_values, percentile) * adjustment)
    forecast["value"] = values
    return forecast


def forecast_scenarios(series, start_month, n_months=12, percentiles=None, labels=None,
                       config=DEFAULT_CONFIG):
    """
    Forecast several percentile scenarios (wet, normal, dry).

    Args:
        series: Historical MonthlySeries
        start_month: Month the forecast is issued from (1-12)
        n_months: Number of months to forecast
        percentiles: Scenario percentiles (defaults to ``config.percentiles``)
        labels: Scenario column names (defaults to ``config.scenario_labels``)

    Returns:
        DataFrame: step, month, month_name and one column per scenario, in the
        order the percentiles were given

    Raises:
        ArgumentMismatchError: If percentiles and labels differ in length
    """
    percentiles = tuple(config.percentiles if percentiles is None else percentiles)
    labels = tuple(config.scenario_labels if labels is None else labels)
    if len(percentiles) != len(labels):
        raise ArgumentMismatchError(
            f"Number of percentiles ({len(percentiles)}) and labels ({len(labels)}) must match"
        )
    if len(set(labels)) != len(labels):
        raise ArgumentMismatchError(f"Scenario labels must be unique: {labels}")

    validate_series(series, min_length=config.min_series_length, log=config.logger)

    result = _forecast_frame(start_month, n_months)
    for p, label in zip(percentiles, labels):
        config.logger.info(f"Computing scenario: {label} ({percentile_label(p)})")
        fc = _percentile_forecast(series, start_month, n_months, p, 1.0, config.logger)
        result[label] = fc["value"].to_numpy()
    return result


def get_flow_percentile(series, month, observed_value, config=DEFAULT_CONFIG):
    """
    Percentile (0-1) of an observed flow within its month's history.

    Evaluates the empirical CDF of the month's historical values, i.e. the
    fraction of historical values <= ``observed_value``.

    Raises:
        ValueError: If ``observed_value`` is missing or not finite
        InsufficientDataError: If the month has fewer than
            ``config.min_month_observations`` observations
    """
    if not 1 <= int(month) <= 12:
        raise ValueError(f"month must be 1-12, got {month}")
    # ECDF sorts NaN above every observation
    if observed_value is None or not np.isfinite(observed_value):
        raise ValueError(f"Observed flow must be a finite number, got {observed_value}")
    month_values = series.values_for_month(month)
    if month_values.size < config.min_month_observations:
        raise InsufficientDataError(
            f"Insufficient data for month {month}: {month_values.size} observations"
        )

    percentile = float(ECDF(month_values)(observed_value))
    config.logger.info(
        f"Flow {observed_value:.2f} in {month_name(month)} is at percentile {percentile * 100:.1f}%"
    )
    return percentile


def forecast_from_current(series, current_month, current_value, n_months=12,
                          persistence_factor=None, config=DEFAULT_CONFIG):
    """
    Forecast from the most recent observation.

    The current flow's percentile is multiplied by ``persistence_factor`` and
    the result is forecast with ``forecast_by_percentile``. A factor below 1
    moves the percentile toward 0 (the low end of the distribution), not toward
    the median.

    Args:
        series: Historical MonthlySeries
        current_month: Month of the latest observation (1-12)
        current_value: Latest observed flow
        n_months: Number of months to forecast
        persistence_factor: Percentile multiplier (defaults to
            ``config.persistence_factor``)

    Returns:
        DataFrame: ``forecast_by_percentile`` columns plus current_percentile
        and current_value
    """
    if persistence_factor is None:
        persistence_factor = config.persistence_factor
    validate_series(series, min_length=config.min_series_length, log=config.logger)

    current_percentile = get_flow_percentile(series, current_month, current_value, config=config)
    forecast_percentile = min(max(current_percentile * persistence_factor, 0.0), 1.0)

    config.logger.info(
        f"Current percentile: {current_percentile * 100:.1f}%, "
        f"adjusted percentile: {forecast_percentile * 100:.1f}%"
    )

    forecast = _percentile_forecast(series, current_month, n_months, forecast_percentile, 1.0, config.logger)
    forecast["current_percentile"] = current_percentile
    forecast["current_value"] = float(current_value)
    return forecast
