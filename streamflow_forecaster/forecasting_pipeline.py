"""
Main forecasting workflow orchestration.

Coordinates series validation, monthly statistics, flow duration scenarios,
persistence forecasting, model comparison, best-model forecasting and
cross-validation for a single monthly series. Loading, plotting and export are
left to the caller.
"""

import numpy as np

from .config import DEFAULT_CONFIG
from .data_validation import validate_series
from .exceptions import ForecastError, InsufficientDataError
from .flow_duration import forecast_from_current, forecast_scenarios
from .model_evaluation import MIN_COMPARISON_LENGTH, compare_models, time_series_cv
from .models import FAMILIES, generate_forecast
from .monthly_statistics import monthly_stats_table


def _last_observation(series):
    """(month, value) of the most recent non-missing observation."""
    observed = np.flatnonzero(~np.isnan(series.values))
    if observed.size == 0:
        raise InsufficientDataError("Series has no observations")
    i = observed[-1]
    return series.month_of(i), float(series.values[i])


def run_forecasting_pipeline(series, config=DEFAULT_CONFIG, current_month=None, current_value=None,
                             start_month=None, holdout_size=12, cv_horizon=6, cv_initial=48,
                             cv_family="arima_seasonal"):
    """
    Run every forecasting stage on one series.

    Args:
        series: Historical MonthlySeries (already cleaned upstream)
        config: ForecastConfig
        current_month, current_value: Latest observation for the persistence
            forecast; defaults to the last observed value of ``series``
        start_month: Month the scenario forecast is issued from (defaults to
            ``config.start_month``)
        holdout_size: Months held out for model comparison
        cv_horizon, cv_initial: Cross-validation horizon and initial window
        cv_family: Model family scored by cross-validation

    Returns:
        dict: report, monthly_stats, scenarios, current_forecast, comparison,
        best_model, model_forecast, cv. Stages that cannot run on this series
        are left as None.
    """
    log = config.logger
    report = validate_series(series, min_length=config.min_series_length, log=log)
    log.info(
        f"Series loaded: {report['n']} observations ({report['years']:.1f} years), "
        f"{series.start_year}-{series.start_month:02d} to {series.end_year}-{series.end_month:02d}"
    )

    results = {
        "report": report,
        "monthly_stats": None,
        "scenarios": None,
        "current_forecast": None,
        "comparison": None,
        "best_model": None,
        "model_forecast": None,
        "cv": None,
    }

    log.info("=== STAGE 1: MONTHLY STATISTICS ===")
    results["monthly_stats"] = monthly_stats_table(series, config=config)

    log.info("=== STAGE 2: FLOW DURATION SCENARIOS ===")
    results["scenarios"] = forecast_scenarios(
        series,
        start_month=config.start_month if start_month is None else start_month,
        n_months=config.forecast_months,
        config=config,
    )

    try:
        if current_month is None or current_value is None:
            current_month, current_value = _last_observation(series)
        results["current_forecast"] = forecast_from_current(
            series, current_month, current_value, n_months=config.forecast_months, config=config
        )
    except InsufficientDataError as e:
        log.warning(f"Persistence forecast skipped: {e}")

    log.info("=== STAGE 3: STATISTICAL MODELS ===")
    if len(series) < MIN_COMPARISON_LENGTH or holdout_size >= len(series):
        log.warning(
            f"Model comparison skipped: needs at least {MIN_COMPARISON_LENGTH} observations "
            f"and more than {holdout_size}, got {len(series)}"
        )
    else:
        comparison = compare_models(series, holdout_size=holdout_size, config=config)
        results["comparison"] = comparison
        if len(comparison):
            labels = {family.label: family for family in FAMILIES.values()}
            best = labels[comparison["model"].iloc[0]]
            try:
                fitted = best.fit(series, config)
                results["best_model"] = fitted
                results["model_forecast"] = generate_forecast(
                    fitted, config.forecast_months, config.confidence_levels, config=config
                )
            except ForecastError as e:
                log.warning(f"Refitting {best.label} on the full series failed: {e}")

    if len(series) >= cv_initial + cv_horizon:
        results["cv"] = time_series_cv(
            series, horizon=cv_horizon, initial_window=cv_initial, family=cv_family, config=config
        )
    else:
        log.warning(
            f"Cross-validation skipped: needs {cv_initial + cv_horizon} observations, got {len(series)}"
        )

    log.info("Forecasting pipeline complete")
    return results
