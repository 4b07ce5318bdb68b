"""
Tests for series validation and the upstream cleaning helpers.
"""

import unittest

import numpy as np

from streamflow_forecaster import MissingDataWarning, MonthlySeries, SeriesValidationError
from streamflow_forecaster.data_validation import (
    detect_outliers,
    fill_missing_values,
    validate_and_clean,
    validate_series,
)
from tests.synthetic_data import seasonal_flows


class TestValidateSeries(unittest.TestCase):

    def test_report(self):
        report = validate_series(seasonal_flows(120))
        self.assertEqual(report["n"], 120)
        self.assertEqual(report["n_missing"], 0)
        self.assertAlmostEqual(report["years"], 10.0)
        self.assertEqual(report["data_quality"], "excellent")

    def test_rejects_non_series(self):
        with self.assertRaises(SeriesValidationError):
            validate_series(np.arange(24, dtype=float))

    def test_rejects_short_series(self):
        with self.assertRaises(SeriesValidationError):
            validate_series(MonthlySeries(np.ones(11), 2020, 1))

    def test_missing_values_warn(self):
        values = np.arange(24, dtype=float)
        values[[3, 7]] = np.nan
        with self.assertWarns(MissingDataWarning):
            report = validate_series(MonthlySeries(values, 2020, 1))
        self.assertEqual(report["n_missing"], 2)
        self.assertEqual(report["data_quality"], "percentile_only")


class TestCleaning(unittest.TestCase):

    def test_negative_values_become_missing(self):
        series = MonthlySeries([1.0, -2.0, 3.0, 4.0], 2020, 1)
        clean, issues = validate_and_clean(series)
        self.assertTrue(np.isnan(clean.values[1]))
        np.testing.assert_array_equal(issues["negative"], [1])
        self.assertEqual(issues["n_issues"], 1)
        self.assertEqual(series.values[1], -2.0)

    def test_outliers_removed_on_request(self):
        values = np.full(24, 10.0) + np.arange(24) * 0.1
        values[5] = 1000.0
        series = MonthlySeries(values, 2020, 1)
        np.testing.assert_array_equal(detect_outliers(values), [5])

        kept, _ = validate_and_clean(series)
        self.assertEqual(kept.values[5], 1000.0)
        clean, issues = validate_and_clean(series, remove_outliers=True)
        self.assertTrue(np.isnan(clean.values[5]))
        np.testing.assert_array_equal(issues["outliers"], [5])

    def test_constant_runs_reported_not_changed(self):
        values = np.arange(24, dtype=float)
        values[4:12] = 7.0
        series = MonthlySeries(values, 2020, 1)
        clean, issues = validate_and_clean(series)
        self.assertEqual(issues["constant_sequences"], [(4, 8)])
        np.testing.assert_array_equal(clean.values, values)

    def test_fill_locf(self):
        series = MonthlySeries([np.nan, 1.0, np.nan, 3.0], 2020, 1)
        filled = fill_missing_values(series, "locf")
        np.testing.assert_array_equal(filled.values, [np.nan, 1.0, 1.0, 3.0])

    def test_fill_interpolate(self):
        series = MonthlySeries([1.0, np.nan, 3.0, np.nan], 2020, 1)
        filled = fill_missing_values(series, "interpolate")
        np.testing.assert_array_equal(filled.values, [1.0, 2.0, 3.0, np.nan])

    def test_fill_monthly_mean(self):
        values = np.arange(36, dtype=float)
        values[12] = np.nan
        filled = fill_missing_values(MonthlySeries(values, 2020, 1), "mean")
        self.assertEqual(filled.values[12], 12.0)

    def test_fill_unknown_method(self):
        with self.assertRaises(ValueError):
            fill_missing_values(MonthlySeries([1.0, np.nan], 2020, 1), "spline")

    def test_fill_without_missing_returns_same_series(self):
        series = MonthlySeries([1.0, 2.0], 2020, 1)
        self.assertIs(fill_missing_values(series), series)


if __name__ == "__main__":
    unittest.main()
