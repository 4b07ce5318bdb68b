"""
Tests for the monthly series container, calendar helpers and configuration.
"""

import dataclasses
import unittest

import numpy as np
import pandas as pd

from streamflow_forecaster import (
    DEFAULT_CONFIG,
    ArgumentMismatchError,
    ForecastConfig,
    MonthlySeries,
    SeriesValidationError,
    adjust_month,
    forecast_months,
)
from streamflow_forecaster.utils import run_in_order


class TestCalendarHelpers(unittest.TestCase):

    def test_adjust_month_wraps(self):
        self.assertEqual(adjust_month(14), 2)
        self.assertEqual(adjust_month(12), 12)
        self.assertEqual(adjust_month(0), 12)
        np.testing.assert_array_equal(adjust_month(np.array([13, 24, 25])), [1, 12, 1])

    def test_forecast_months_wraps_year_end(self):
        self.assertEqual(forecast_months(11, 4), [12, 1, 2, 3])
        self.assertEqual(forecast_months(8, 12)[0], 9)
        self.assertEqual(len(forecast_months(8, 12)), 12)

    def test_forecast_months_rejects_bad_month(self):
        with self.assertRaises(SeriesValidationError):
            forecast_months(13, 2)


class TestMonthlySeries(unittest.TestCase):

    def test_calendar_mapping(self):
        series = MonthlySeries([1.0, 2.0, 3.0], 2020, 11)
        np.testing.assert_array_equal(series.months, [11, 12, 1])
        self.assertEqual(series.month_of(2), 1)
        self.assertEqual(series.end_year, 2021)
        self.assertEqual(series.end_month, 1)

    def test_values_are_read_only(self):
        series = MonthlySeries([1.0, 2.0, 3.0], 2020, 1)
        with self.assertRaises(ValueError):
            series.values[0] = 10.0

    def test_input_array_is_copied(self):
        values = np.array([1.0, 2.0, 3.0])
        series = MonthlySeries(values, 2020, 1)
        values[0] = 99.0
        self.assertEqual(series.values[0], 1.0)

    def test_invalid_input(self):
        with self.assertRaises(SeriesValidationError):
            MonthlySeries([], 2020, 1)
        with self.assertRaises(SeriesValidationError):
            MonthlySeries([1.0, 2.0], 2020, 13)
        with self.assertRaises(SeriesValidationError):
            MonthlySeries([1.0, np.inf], 2020, 1)
        with self.assertRaises(SeriesValidationError):
            MonthlySeries(["a", "b"], 2020, 1)

    def test_missing_counts(self):
        series = MonthlySeries([1.0, np.nan, 3.0, np.nan], 2020, 1)
        self.assertEqual(series.n_missing, 2)
        self.assertEqual(series.n_observed, 2)
        self.assertAlmostEqual(series.missing_pct, 50.0)
        self.assertTrue(series.has_missing())

    def test_values_for_month_drops_missing(self):
        values = np.arange(36, dtype=float)
        values[12] = np.nan
        series = MonthlySeries(values, 2020, 1)
        np.testing.assert_array_equal(series.values_for_month(1), [0.0, 24.0])

    def test_slice_reanchors(self):
        series = MonthlySeries(np.arange(10, dtype=float), 2020, 11)
        part = series.slice(2, 5)
        self.assertEqual((part.start_year, part.start_month), (2021, 1))
        np.testing.assert_array_equal(part.values, [2.0, 3.0, 4.0])
        with self.assertRaises(SeriesValidationError):
            series.slice(5, 5)

    def test_pandas_round_trip(self):
        series = MonthlySeries([5.0, 6.0, 7.0], 2019, 12, name="inflow")
        frame = series.to_pandas()
        self.assertEqual(frame.index[0], pd.Timestamp("2019-12-01"))
        self.assertEqual(frame.index.freqstr, "MS")

        back = MonthlySeries.from_pandas(frame)
        self.assertEqual((back.start_year, back.start_month, back.name), (2019, 12, "inflow"))
        np.testing.assert_array_equal(back.values, series.values)

    def test_from_pandas_rejects_gaps(self):
        index = pd.to_datetime(["2020-01-01", "2020-02-01", "2020-04-01"])
        with self.assertRaises(SeriesValidationError):
            MonthlySeries.from_pandas(pd.Series([1.0, 2.0, 3.0], index=index))

    def test_with_values_checks_shape(self):
        series = MonthlySeries([1.0, 2.0], 2020, 1)
        with self.assertRaises(SeriesValidationError):
            series.with_values([1.0, 2.0, 3.0])


class TestForecastConfig(unittest.TestCase):

    def test_defaults(self):
        self.assertEqual(DEFAULT_CONFIG.percentiles, (0.15, 0.30, 0.50, 0.70, 0.85))
        self.assertEqual(DEFAULT_CONFIG.forecast_months, 12)
        self.assertEqual(DEFAULT_CONFIG.start_month, 8)
        self.assertEqual(DEFAULT_CONFIG.persistence_factor, 0.8)
        self.assertEqual(DEFAULT_CONFIG.history_required("stl"), 36)
        self.assertEqual(DEFAULT_CONFIG.history_required("ensemble"), 48)
        self.assertEqual(DEFAULT_CONFIG.history_required("nnar"), 36)
        self.assertIn("nnar", DEFAULT_CONFIG.ensemble_families)
        self.assertEqual(ForecastConfig(ensemble_weights="cv").ensemble_weights, "cv")

    def test_config_is_immutable(self):
        with self.assertRaises(dataclasses.FrozenInstanceError):
            DEFAULT_CONFIG.forecast_months = 6

    def test_replace_and_history_override(self):
        config = DEFAULT_CONFIG.replace(min_history={"stl": 48})
        self.assertEqual(config.history_required("stl"), 48)
        self.assertEqual(config.history_required("arima"), 24)
        self.assertEqual(DEFAULT_CONFIG.history_required("stl"), 36)

    def test_label_mismatch(self):
        with self.assertRaises(ArgumentMismatchError):
            ForecastConfig(percentiles=(0.1, 0.5), scenario_labels=("Wet",))

    def test_invalid_values(self):
        with self.assertRaises(ValueError):
            ForecastConfig(start_month=0)
        with self.assertRaises(ValueError):
            ForecastConfig(confidence_levels=(80, 100))
        with self.assertRaises(ValueError):
            ForecastConfig(ensemble_weights="median")
        with self.assertRaises(ValueError):
            ForecastConfig(nnar_networks=0)
        with self.assertRaises(ValueError):
            ForecastConfig(ensemble_cv_folds=0)


class TestRunInOrder(unittest.TestCase):

    def test_preserves_order_with_threads(self):
        items = list(range(20))
        self.assertEqual(run_in_order(lambda x: x * x, items, max_workers=4), [x * x for x in items])


if __name__ == "__main__":
    unittest.main()
