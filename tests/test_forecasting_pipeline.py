"""
End-to-end tests for the forecasting pipeline.
"""

import logging
import unittest
import warnings

import numpy as np

from streamflow_forecaster import MonthlySeries, SeriesValidationError, run_forecasting_pipeline
from tests.synthetic_data import FAST_CONFIG, seasonal_flows


class TestForecastingPipeline(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        warnings.filterwarnings("ignore")

    def test_full_run(self):
        series = seasonal_flows(60)
        with self.assertLogs("streamflow_forecaster", level="INFO") as logs:
            results = run_forecasting_pipeline(series, config=FAST_CONFIG, cv_initial=48,
                                               cv_horizon=6, cv_family="arima")

        self.assertEqual(results["report"]["n"], 60)
        self.assertEqual(len(results["monthly_stats"]), 12)
        self.assertEqual(len(results["scenarios"]), FAST_CONFIG.forecast_months)
        for label in FAST_CONFIG.scenario_labels:
            self.assertIn(label, results["scenarios"].columns)
        self.assertEqual(results["scenarios"]["month"].iloc[0], 9)

        current = results["current_forecast"]
        self.assertEqual(current["month"].iloc[0], 1)
        self.assertEqual(current["current_value"].iloc[0], series.values[-1])

        self.assertGreater(len(results["comparison"]), 0)
        self.assertEqual(results["best_model"].name, results["comparison"]["model"].iloc[0])
        self.assertEqual(len(results["model_forecast"]), 12)
        self.assertEqual(results["cv"].n_folds, 7)
        self.assertTrue(any("pipeline complete" in line for line in logs.output))

    def test_explicit_current_observation(self):
        results = run_forecasting_pipeline(seasonal_flows(36), config=FAST_CONFIG,
                                           current_month=3, current_value=500.0, start_month=2)
        current = results["current_forecast"]
        self.assertEqual(current["current_percentile"].iloc[0], 1.0)
        self.assertEqual(current["month"].iloc[0], 4)
        self.assertEqual(results["scenarios"]["month"].iloc[0], 3)

    def test_short_series_skips_models(self):
        with self.assertLogs("streamflow_forecaster", level=logging.WARNING):
            results = run_forecasting_pipeline(seasonal_flows(24), config=FAST_CONFIG)
        self.assertEqual(len(results["monthly_stats"]), 12)
        self.assertIsNotNone(results["scenarios"])
        self.assertIsNone(results["current_forecast"])
        self.assertIsNone(results["comparison"])
        self.assertIsNone(results["model_forecast"])
        self.assertIsNone(results["cv"])

    def test_invalid_series_propagates(self):
        with self.assertRaises(SeriesValidationError):
            run_forecasting_pipeline(MonthlySeries(np.ones(6), 2020, 1), config=FAST_CONFIG)


if __name__ == "__main__":
    unittest.main()
