"""
Forecast configuration.

Centralised parameters for percentile scenarios, persistence forecasting,
statistical model search bounds and logging. A ``ForecastConfig`` is immutable;
derive variants with ``config.replace(...)``.
"""

import logging
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping, Tuple

from .exceptions import ArgumentMismatchError

PACKAGE_LOGGER_NAME = "streamflow_forecaster"

# Minimum history (months) per model family
MIN_HISTORY = MappingProxyType({
    "arima": 24,
    "arima_seasonal": 24,
    "ets": 24,
    "stl": 36,
    "nnar": 36,
    "ensemble": 48,
})

ENSEMBLE_WEIGHT_MODES = ("equal", "insample", "cv")
INFORMATION_CRITERIA = ("aic", "aicc", "bic")


def _default_logger():
    return logging.getLogger(PACKAGE_LOGGER_NAME)


@dataclass(frozen=True)
class ForecastConfig:
    """
    Parameters shared by every forecasting entry point.

    Args:
        percentiles: Scenario percentiles (0-1), wettest first
        scenario_labels: One label per percentile
        forecast_months: Default forecast horizon in months
        start_month: Default month the forecast is issued from (1-12)
        persistence_factor: Multiplier applied to the current percentile
        confidence_levels: Prediction interval levels in percent
        period: Seasonal period of the series
        min_series_length: Minimum length for percentile methods
        min_month_observations: Below this a month's statistics are low-confidence
        min_history: Minimum series length per model family
        max_p, max_q, max_P, max_Q, max_d, max_D: ARIMA order search bounds
        information_criterion: Criterion minimised by the order search
        nnar_max_p: Largest non-seasonal lag considered by the NNAR model
        nnar_networks: Number of networks averaged by the NNAR model
        nnar_paths: Simulated paths behind NNAR prediction intervals
        ensemble_families: Base families combined by the ensemble
        ensemble_weights: "equal", "insample" or "cv"
        ensemble_cv_horizon, ensemble_cv_folds: Cross-validation used by
            "cv" weighting
        max_workers: Thread pool size for independent fits
        logger: Logger receiving progress and warnings
    """

    percentiles: Tuple[float, ...] = (0.15, 0.30, 0.50, 0.70, 0.85)
    scenario_labels: Tuple[str, ...] = (
        "P15_Very_Wet",
        "P30_Wet",
        "P50_Normal",
        "P70_Dry",
        "P85_Very_Dry",
    )
    forecast_months: int = 12
    start_month: int = 8
    persistence_factor: float = 0.8
    confidence_levels: Tuple[float, ...] = (80, 95)
    period: int = 12
    min_series_length: int = 12
    min_month_observations: int = 3
    min_history: Mapping[str, int] = field(default_factory=lambda: MIN_HISTORY)
    max_p: int = 2
    max_q: int = 2
    max_P: int = 1
    max_Q: int = 1
    max_d: int = 2
    max_D: int = 1
    information_criterion: str = "aicc"
    nnar_max_p: int = 6
    nnar_networks: int = 20
    nnar_paths: int = 500
    ensemble_families: Tuple[str, ...] = ("arima_seasonal", "ets", "nnar", "stl")
    ensemble_weights: str = "insample"
    ensemble_cv_horizon: int = 12
    ensemble_cv_folds: int = 5
    max_workers: int = 1
    logger: logging.Logger = field(default_factory=_default_logger, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "percentiles", tuple(float(p) for p in self.percentiles))
        object.__setattr__(self, "scenario_labels", tuple(self.scenario_labels))
        object.__setattr__(self, "confidence_levels", tuple(self.confidence_levels))
        object.__setattr__(self, "ensemble_families", tuple(self.ensemble_families))
        object.__setattr__(self, "min_history", MappingProxyType({**MIN_HISTORY, **self.min_history}))

        if len(self.percentiles) != len(self.scenario_labels):
            raise ArgumentMismatchError(
                f"{len(self.percentiles)} percentiles but {len(self.scenario_labels)} scenario labels"
            )
        if any(p < 0 or p > 1 for p in self.percentiles):
            raise ValueError(f"Percentiles must lie in [0, 1]: {self.percentiles}")
        if not 1 <= self.start_month <= 12:
            raise ValueError(f"start_month must be 1-12, got {self.start_month}")
        if self.forecast_months < 1:
            raise ValueError("forecast_months must be >= 1")
        if any(level <= 0 or level >= 100 for level in self.confidence_levels):
            raise ValueError(f"Confidence levels must lie in (0, 100): {self.confidence_levels}")
        if self.ensemble_weights not in ENSEMBLE_WEIGHT_MODES:
            raise ValueError(f"Unknown ensemble weighting: {self.ensemble_weights}")
        if self.information_criterion not in INFORMATION_CRITERIA:
            raise ValueError(f"Unknown information criterion: {self.information_criterion}")
        if self.max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        if min(self.nnar_max_p, self.nnar_networks, self.nnar_paths) < 1:
            raise ValueError("nnar_max_p, nnar_networks and nnar_paths must be >= 1")
        if min(self.ensemble_cv_horizon, self.ensemble_cv_folds) < 1:
            raise ValueError("ensemble_cv_horizon and ensemble_cv_folds must be >= 1")

    def replace(self, **changes):
        """Return a copy with the given fields changed."""
        return replace(self, **changes)

    def history_required(self, family):
        return self.min_history.get(family, self.min_history["arima"])


DEFAULT_CONFIG = ForecastConfig()
