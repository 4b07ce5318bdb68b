# Streamflow forecasting package

"""
Monthly streamflow forecasting from historical records.

This package contains organized modules for:
- Forecast configuration (config)
- Error types (exceptions)
- Monthly series container and calendar helpers (series)
- Data validation and cleaning (data_validation)
- Per-month statistics and empirical quantiles (monthly_statistics)
- Flow duration / percentile scenario forecasting (flow_duration)
- Statistical model fitting and forecasting (models)
- Error metrics (metrics)
- Model comparison and cross-validation (model_evaluation)
- End-to-end pipeline orchestration (forecasting_pipeline)
"""

import logging

from .config import DEFAULT_CONFIG, ForecastConfig
from .exceptions import (
    ArgumentMismatchError,
    ForecastError,
    InsufficientDataError,
    InsufficientHistoryError,
    LowConfidenceWarning,
    MissingDataWarning,
    ModelFitError,
    SeriesValidationError,
)
from .series import MonthlySeries, adjust_month, forecast_months
from .monthly_statistics import (
    MonthlyStatsRow,
    empirical_quantile,
    monthly_ecdf,
    monthly_stats,
    monthly_stats_table,
    percentile_table,
)
from .flow_duration import (
    forecast_by_percentile,
    forecast_from_current,
    forecast_scenarios,
    get_flow_percentile,
)
from .models import FittedModel, fit_model, generate_forecast, get_model_family
from .metrics import calculate_forecast_metrics
from .model_evaluation import CVResult, compare_models, time_series_cv
from .forecasting_pipeline import run_forecasting_pipeline

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "1.0.0"
