"""
Core model fitting and forecasting functions.

Contains the statistical model families used for monthly flow forecasting:
ARIMA (with or without a seasonal component, orders chosen by information
criterion), ETS exponential smoothing, STL decomposition + ARIMA, a neural
network autoregression (NNAR) and an ensemble combining the others. Every
family exposes ``fit(series, config)`` returning a ``FittedModel`` whose
``forecast(horizon, levels)`` produces point forecasts and prediction
intervals.
"""

import itertools
import warnings

import numpy as np
import pandas as pd
from sklearn.exceptions import ConvergenceWarning as MLPConvergenceWarning
from sklearn.neural_network import MLPRegressor
from sklearn.preprocessing import StandardScaler
from statsmodels.tsa.ar_model import ar_select_order
from statsmodels.tsa.exponential_smoothing.ets import ETSModel
from statsmodels.tsa.seasonal import STL
from statsmodels.tsa.statespace.sarimax import SARIMAX
from statsmodels.tsa.stattools import kpss

from .config import DEFAULT_CONFIG
from .exceptions import ForecastError, InsufficientHistoryError, ModelFitError
from .metrics import rmse
from .series import month_name
from .utils import quiet_statsmodels, run_in_order

KPSS_ALPHA = 0.05
SEASONAL_STRENGTH_THRESHOLD = 0.64


def level_label(level):
    return f"{float(level):g}"


# ============================================================================
# Fitted models
# ============================================================================

class FittedModel:
    """
    Result of fitting one model family to a training series.

    Attributes:
        family: Registry key of the family ("arima", "ets", ...)
        name: Display name ("ARIMA", "ETS", ...)
        train: Training MonthlySeries
        description: Selected specification, e.g. "ARIMA(1,1,1)(0,1,1)[12]"
        aic, aicc, bic: Information criteria (NaN when not defined)
        fitted_values: One-step in-sample predictions aligned with ``train``
        burn: Leading in-sample values excluded from in-sample error
    """

    def __init__(self, family, name, train, description, fitted_values,
                 aic=np.nan, aicc=np.nan, bic=np.nan, burn=0):
        self.family = family
        self.name = name
        self.train = train
        self.description = description
        self.fitted_values = np.asarray(fitted_values, dtype=float)
        self.aic = float(aic)
        self.aicc = float(aicc)
        self.bic = float(bic)
        self.burn = int(burn)

    def __repr__(self):
        return f"<{type(self).__name__} {self.description} n={len(self.train)}>"

    def in_sample_rmse(self):
        """RMSE of the one-step in-sample predictions after the burn-in."""
        start = min(self.burn, max(len(self.train) - 1, 0))
        return rmse(self.train.values[start:], self.fitted_values[start:])

    def future_dates(self, horizon):
        return pd.date_range(
            self.train.dates[-1] + pd.offsets.MonthBegin(1), periods=horizon, freq="MS"
        )

    def _predict(self, horizon, levels):
        """Return (mean, {level: (lower, upper)}) arrays for ``horizon`` steps."""
        raise NotImplementedError

    def forecast(self, horizon=12, levels=(80, 95)):
        """
        Point forecasts and prediction intervals.

        Returns:
            DataFrame: date, year, month, month_name, forecast and
            lower_<level>/upper_<level> per requested level
        """
        try:
            with quiet_statsmodels():
                mean, bounds = self._predict(int(horizon), tuple(levels))
        except ForecastError:
            raise
        except Exception as e:
            raise ModelFitError(self.family, f"Forecast failed: {e}") from e

        dates = self.future_dates(horizon)
        table = pd.DataFrame({
            "date": dates,
            "year": dates.year,
            "month": dates.month,
            "month_name": [month_name(m) for m in dates.month],
            "forecast": np.asarray(mean, dtype=float),
        })
        for level in levels:
            lower, upper = bounds[level]
            table[f"lower_{level_label(level)}"] = np.asarray(lower, dtype=float)
            table[f"upper_{level_label(level)}"] = np.asarray(upper, dtype=float)
        return table


class ArimaFit(FittedModel):
    def __init__(self, family, name, train, results, description, fitted_values=None, burn=None):
        super().__init__(
            family, name, train, description,
            fitted_values=results.fittedvalues if fitted_values is None else fitted_values,
            aic=results.aic, aicc=results.aicc, bic=results.bic,
            burn=results.loglikelihood_burn if burn is None else burn,
        )
        self.results = results

    def _predict(self, horizon, levels):
        prediction = self.results.get_forecast(horizon)
        mean = np.asarray(prediction.predicted_mean)
        bounds = {}
        for level in levels:
            interval = np.asarray(prediction.conf_int(alpha=1 - level / 100))
            bounds[level] = (interval[:, 0], interval[:, 1])
        return mean, bounds


class EtsFit(FittedModel):
    def __init__(self, family, name, train, results, description):
        super().__init__(
            family, name, train, description,
            fitted_values=results.fittedvalues,
            aic=results.aic, aicc=results.aicc, bic=results.bic,
        )
        self.results = results

    def _predict(self, horizon, levels):
        n = len(self.train)
        # Multiplicative specifications use simulated intervals; fix the seed
        prediction = self.results.get_prediction(start=n, end=n + horizon - 1, random_state=0)
        mean = None
        bounds = {}
        for level in levels:
            frame = prediction.summary_frame(alpha=1 - level / 100)
            mean = frame["mean"].to_numpy()
            bounds[level] = (frame["pi_lower"].to_numpy(), frame["pi_upper"].to_numpy())
        if mean is None:
            mean = np.asarray(prediction.predicted_mean)
        return mean, bounds


class StlArimaFit(FittedModel):
    """ARIMA on the seasonally adjusted series plus a seasonal naive component."""

    def __init__(self, family, name, train, arima_fit, seasonal, period):
        seasonal = np.asarray(seasonal, dtype=float)
        super().__init__(
            family, name, train, f"STL + {arima_fit.description}",
            fitted_values=arima_fit.fitted_values + seasonal,
            burn=arima_fit.burn,
        )
        self.arima_fit = arima_fit
        self.seasonal = seasonal
        self.period = period

    def seasonal_forecast(self, horizon):
        last_cycle = self.seasonal[-self.period:]
        return np.resize(last_cycle, horizon)

    def _predict(self, horizon, levels):
        mean, bounds = self.arima_fit._predict(horizon, levels)
        seasonal = self.seasonal_forecast(horizon)
        return mean + seasonal, {
            level: (lower + seasonal, upper + seasonal) for level, (lower, upper) in bounds.items()
        }


class NnarFit(FittedModel):
    """
    Averaged feed-forward networks on lagged, standardised values.

    Point forecasts iterate the averaged networks on their own output.
    Intervals come from simulated paths with gaussian innovations scaled to
    the in-sample residuals.
    """

    def __init__(self, family, name, train, networks, scaler, lags, sigma, n_paths, description):
        self.networks = networks
        self.scaler = scaler
        self.lags = tuple(lags)
        self.max_lag = max(self.lags)
        self.sigma = float(sigma)
        self.n_paths = int(n_paths)
        self.history = scaler.transform(train.values.reshape(-1, 1)).ravel()

        windows = np.lib.stride_tricks.sliding_window_view(self.history[:-1], self.max_lag)
        fitted = np.full(len(train), np.nan)
        fitted[self.max_lag:] = self._inverse(self._step(windows))
        super().__init__(family, name, train, description, fitted_values=fitted, burn=self.max_lag)

    def _step(self, windows):
        """Averaged one-step prediction for each row of (k, max_lag) windows."""
        X = windows[:, [-lag for lag in self.lags]]
        return np.mean([network.predict(X) for network in self.networks], axis=0)

    def _inverse(self, values):
        return self.scaler.inverse_transform(np.asarray(values).reshape(-1, 1)).ravel()

    def _predict(self, horizon, levels):
        window = self.history[-self.max_lag:][None, :]
        mean = []
        for _ in range(horizon):
            step = self._step(window)
            mean.append(step[0])
            window = np.hstack([window[:, 1:], step[:, None]])

        rng = np.random.default_rng(0)
        windows = np.tile(self.history[-self.max_lag:], (self.n_paths, 1))
        paths = np.empty((self.n_paths, horizon))
        for h in range(horizon):
            step = self._step(windows) + rng.normal(0.0, self.sigma, self.n_paths)
            paths[:, h] = step
            windows = np.hstack([windows[:, 1:], step[:, None]])
        paths = self._inverse(paths.ravel()).reshape(self.n_paths, horizon)

        bounds = {}
        for level in levels:
            tail = (1 - level / 100) / 2
            bounds[level] = (np.quantile(paths, tail, axis=0), np.quantile(paths, 1 - tail, axis=0))
        return self._inverse(mean), bounds


class EnsembleFit(FittedModel):
    """
    Weighted combination of member models.

    Point forecasts are the weighted sum of member forecasts; interval bounds
    are the envelope (lowest lower, highest upper) across members.
    """

    def __init__(self, family, name, train, members, weights, weighting):
        fitted = sum(w * m.fitted_values for m, w in zip(members, weights))
        super().__init__(
            family, name, train,
            f"Ensemble[{weighting}](" + ", ".join(m.name for m in members) + ")",
            fitted_values=fitted,
            burn=max(m.burn for m in members),
        )
        self.members = list(members)
        self.weights = dict(zip((m.family for m in members), (float(w) for w in weights)))
        self.weighting = weighting

    def _predict(self, horizon, levels):
        predictions = [member._predict(horizon, levels) for member in self.members]
        weights = np.array([self.weights[m.family] for m in self.members])
        mean = np.sum([w * np.asarray(p[0], dtype=float) for w, p in zip(weights, predictions)], axis=0)
        bounds = {}
        for level in levels:
            lowers = np.vstack([p[1][level][0] for p in predictions])
            uppers = np.vstack([p[1][level][1] for p in predictions])
            bounds[level] = (lowers.min(axis=0), uppers.max(axis=0))
        return mean, bounds


# ============================================================================
# Order selection helpers
# ============================================================================

def seasonal_strength(values, period=12):
    """
    STL seasonal strength, max(0, 1 - var(remainder) / var(seasonal + remainder)).

    Returns 0.0 when the series is too short or has missing values.
    """
    values = np.asarray(values, dtype=float)
    if values.size < 2 * period or np.isnan(values).any() or np.ptp(values) == 0:
        return 0.0
    with quiet_statsmodels():
        decomposition = STL(values, period=period, robust=True).fit()
    remainder = np.asarray(decomposition.resid)
    detrended = np.asarray(decomposition.seasonal) + remainder
    if np.var(detrended) == 0:
        return 0.0
    return float(max(0.0, 1 - np.var(remainder) / np.var(detrended)))


def seasonal_differences(values, period=12, max_D=1):
    """Seasonal differencing order: 1 when seasonal strength exceeds 0.64."""
    if max_D < 1:
        return 0
    return int(seasonal_strength(values, period) > SEASONAL_STRENGTH_THRESHOLD)


def ndiffs(values, max_d=2, alpha=KPSS_ALPHA):
    """
    Number of first differences needed for level stationarity.

    Differences repeatedly while the KPSS test rejects stationarity at
    ``alpha``, up to ``max_d``.
    """
    x = np.asarray(values, dtype=float)
    x = x[~np.isnan(x)]
    d = 0
    while d < max_d:
        if x.size < 4 or np.ptp(x) == 0:
            break
        with quiet_statsmodels():
            result = kpss(x, regression="c", nlags="auto")
        if result[1] >= alpha:
            break
        x = np.diff(x)
        d += 1
    return d


def _seasonal_difference(values, period):
    values = np.asarray(values, dtype=float)
    return values[period:] - values[:-period]


def _fit_sarimax(y, order, seasonal_order, trend):
    """Fit with stationarity constraints, relaxing them if the optimiser fails."""
    try:
        return SARIMAX(y, order=order, seasonal_order=seasonal_order, trend=trend,
                       enforce_stationarity=True,
                       enforce_invertibility=True).fit(disp=False, maxiter=100)
    except (ValueError, np.linalg.LinAlgError):
        return SARIMAX(y, order=order, seasonal_order=seasonal_order, trend=trend,
                       enforce_stationarity=False,
                       enforce_invertibility=False).fit(disp=False, maxiter=50)


def describe_arima(order, seasonal_order, trend):
    p, d, q = order
    text = f"ARIMA({p},{d},{q})"
    P, D, Q, s = seasonal_order
    if s:
        text += f"({P},{D},{Q})[{s}]"
    if trend == "c":
        text += " with drift" if d + D == 1 else " with mean"
    return text


def select_arima(y, seasonal, config=DEFAULT_CONFIG, family=None):
    """
    Search ARIMA orders and return the candidate minimising the criterion.

    ``d`` comes from repeated KPSS tests and ``D`` from STL seasonal strength;
    p, q (and P, Q when ``seasonal``) are searched exhaustively within the
    configured bounds in a fixed order, so the result is deterministic. Ties
    keep the first candidate.

    Args:
        y: pandas Series with a monthly DatetimeIndex
        seasonal: Include seasonal terms

    Returns:
        tuple: (results, order, seasonal_order, trend)
    """
    period = config.period
    values = y.to_numpy(dtype=float)

    D = seasonal_differences(values, period, config.max_D) if seasonal else 0
    d = ndiffs(_seasonal_difference(values, period) if D else values, config.max_d)
    trend = "c" if d + D < 2 else None

    if seasonal:
        seasonal_grid = [(P, D, Q, period) if (P or D or Q) else (0, 0, 0, 0)
                         for P in range(config.max_P + 1) for Q in range(config.max_Q + 1)]
    else:
        seasonal_grid = [(0, 0, 0, 0)]
    grid = [((p, d, q), s) for p in range(config.max_p + 1) for q in range(config.max_q + 1)
            for s in seasonal_grid]

    best = None
    best_score = np.inf
    last_error = None
    for order, seasonal_order in grid:
        try:
            with quiet_statsmodels():
                results = _fit_sarimax(y, order, seasonal_order, trend)
        except Exception as e:
            last_error = e
            continue
        score = getattr(results, config.information_criterion)
        if np.isfinite(score) and score < best_score:
            best_score = score
            best = (results, order, seasonal_order, trend)

    if best is None:
        family = family or ("arima_seasonal" if seasonal else "arima")
        raise ModelFitError(family,
                            f"No ARIMA candidate could be fitted: {last_error}")
    return best


# ============================================================================
# Model families
# ============================================================================

class ModelFamily:
    """Common interface: ``fit(series, config) -> FittedModel``."""

    name = None
    label = None

    def min_history(self, config=DEFAULT_CONFIG):
        return config.history_required(self.name)

    def fit(self, series, config=DEFAULT_CONFIG):
        """
        Fit the family to ``series``.

        Raises:
            InsufficientHistoryError: Series has fewer observations than the
                family's minimum history
            ModelFitError: Fitting failed
        """
        required = self.min_history(config)
        if series.n_observed < required:
            raise InsufficientHistoryError(self.name, required, series.n_observed)

        config.logger.info(f"Fitting {self.label} model...")
        try:
            fitted = self._fit(series, config)
        except ForecastError:
            raise
        except Exception as e:
            raise ModelFitError(self.name, str(e)) from e

        config.logger.info(
            f"{self.label}: selected {fitted.description} "
            f"(AIC: {fitted.aic:.2f}, BIC: {fitted.bic:.2f})"
        )
        return fitted

    def _fit(self, series, config):
        raise NotImplementedError

    def __repr__(self):
        return f"<{type(self).__name__} {self.name}>"


class ArimaFamily(ModelFamily):
    """Automatic ARIMA, optionally with seasonal (P, D, Q)[12] terms."""

    def __init__(self, seasonal=False):
        self.seasonal = seasonal
        self.name = "arima_seasonal" if seasonal else "arima"
        self.label = "ARIMA_Seasonal" if seasonal else "ARIMA"

    def _fit(self, series, config):
        results, order, seasonal_order, trend = select_arima(series.to_pandas(), self.seasonal, config)
        return ArimaFit(self.name, self.label, series, results,
                        describe_arima(order, seasonal_order, trend))


class EtsFamily(ModelFamily):
    """
    ETS exponential smoothing with automatic component selection.

    Error, trend (none, additive, damped additive) and seasonal (none,
    additive, multiplicative) components are searched; multiplicative
    components require strictly positive data.
    """

    name = "ets"
    label = "ETS"

    def candidates(self, positive):
        errors = ("add", "mul") if positive else ("add",)
        trends = ((None, False), ("add", False), ("add", True))
        seasonals = (None, "add", "mul") if positive else (None, "add")
        for error, (trend, damped), seasonal in itertools.product(errors, trends, seasonals):
            # Additive errors with multiplicative seasonality are numerically unstable
            if error == "add" and seasonal == "mul":
                continue
            yield error, trend, damped, seasonal

    def _fit(self, series, config):
        if series.has_missing():
            raise ModelFitError(self.name, "ETS requires a series without missing values")
        y = series.to_pandas()
        positive = bool((series.values > 0).all())

        best = None
        best_score = np.inf
        last_error = None
        for error, trend, damped, seasonal in self.candidates(positive):
            try:
                with quiet_statsmodels():
                    results = ETSModel(
                        y,
                        error=error,
                        trend=trend,
                        damped_trend=damped,
                        seasonal=seasonal,
                        seasonal_periods=config.period if seasonal else None,
                    ).fit(disp=False, maxiter=200)
            except Exception as e:
                last_error = e
                continue
            score = getattr(results, config.information_criterion)
            if np.isfinite(score) and score < best_score:
                best_score = score
                best = (results, error, trend, damped, seasonal)

        if best is None:
            raise ModelFitError(self.name, f"No ETS candidate could be fitted: {last_error}")

        results, error, trend, damped, seasonal = best
        code = "ETS({},{}{},{})".format(
            error[0].upper(),
            (trend or "n")[0].upper(),
            "d" if damped else "",
            (seasonal or "n")[0].upper(),
        )
        return EtsFit(self.name, self.label, series, results, code)


class StlArimaFamily(ModelFamily):
    """STL decomposition, ARIMA on the seasonally adjusted series."""

    name = "stl"
    label = "STL"

    def _fit(self, series, config):
        if series.has_missing():
            raise ModelFitError(self.name, "STL requires a series without missing values")
        y = series.to_pandas()
        with quiet_statsmodels():
            decomposition = STL(y, period=config.period, robust=True).fit()
        seasonal = decomposition.seasonal.to_numpy()
        adjusted = y - seasonal

        results, order, seasonal_order, trend = select_arima(adjusted, seasonal=False, config=config, family=self.name)
        arima_fit = ArimaFit(self.name, self.label, series.with_values(adjusted.to_numpy()),
                             results, describe_arima(order, seasonal_order, trend))
        return StlArimaFit(self.name, self.label, series, arima_fit, seasonal, config.period)


class NnarFamily(ModelFamily):
    """
    Neural network autoregression NNAR(p, 1, k)[12].

    Inputs are lags 1..p plus the seasonal lag, where p is the AIC-selected
    autoregressive order of the seasonally adjusted series. Each of
    ``config.nnar_networks`` single-hidden-layer networks with
    k = round((p + 2) / 2) nodes starts from a different seed and the
    predictions are averaged.
    """

    name = "nnar"
    label = "NNAR"

    def select_lags(self, y, config):
        with quiet_statsmodels():
            seasonal = STL(y, period=config.period, robust=True).fit().seasonal
            selection = ar_select_order((y - seasonal).to_numpy(), maxlag=config.nnar_max_p, ic="aic")
        p = max(selection.ar_lags) if selection.ar_lags else 1
        return p, sorted(set(range(1, p + 1)) | {config.period})

    def _fit(self, series, config):
        if series.has_missing():
            raise ModelFitError(self.name, "NNAR requires a series without missing values")
        y = series.to_pandas()
        p, lags = self.select_lags(y, config)
        size = int(round((p + 2) / 2))
        max_lag = max(lags)

        scaler = StandardScaler().fit(series.values.reshape(-1, 1))
        z = scaler.transform(series.values.reshape(-1, 1)).ravel()
        windows = np.lib.stride_tricks.sliding_window_view(z[:-1], max_lag)
        X = windows[:, [-lag for lag in lags]]
        target = z[max_lag:]

        networks = []
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", MLPConvergenceWarning)
            for seed in range(config.nnar_networks):
                network = MLPRegressor(hidden_layer_sizes=(size,), activation="logistic",
                                       solver="lbfgs", alpha=0.01, max_iter=500, random_state=seed)
                networks.append(network.fit(X, target))

        residuals = target - np.mean([network.predict(X) for network in networks], axis=0)
        sigma = float(np.std(residuals, ddof=1))
        if not np.isfinite(sigma):
            raise ModelFitError(self.name, "In-sample residual spread is undefined")
        return NnarFit(self.name, self.label, series, networks, scaler, lags, sigma,
                       config.nnar_paths, f"NNAR({p},1,{size})[{config.period}]")


class EnsembleFamily(ModelFamily):
    """
    Combination of several base families fitted on the same data.

    Weights are equal, proportional to the inverse in-sample RMSE of each
    member, or proportional to the inverse cross-validated RMSE ("cv"),
    normalised to sum to 1. Members that fail are left out.
    """

    name = "ensemble"
    label = "Ensemble"

    def _fit(self, series, config):
        families = [get_model_family(name) for name in config.ensemble_families
                    if name != self.name]

        def fit_member(family):
            try:
                return family, family.fit(series, config)
            except ForecastError as e:
                config.logger.warning(f"Ensemble member {family.label} skipped: {e}")
                return family, None

        fits = [(f, m) for f, m in run_in_order(fit_member, families, config.max_workers) if m is not None]
        if not fits:
            raise ModelFitError(self.name, "No ensemble member could be fitted")
        members = [m for _, m in fits]

        cv_errors = None
        if config.ensemble_weights == "cv":
            cv_errors = cv_member_errors(series, [f for f, _ in fits], config)
        weights = ensemble_weights(members, config.ensemble_weights, log=config.logger, cv_errors=cv_errors)
        config.logger.info(
            "Ensemble weights: " + ", ".join(f"{m.name}={w:.3f}" for m, w in zip(members, weights))
        )
        return EnsembleFit(self.name, self.label, series, members, weights, config.ensemble_weights)


def cv_member_errors(series, families, config=DEFAULT_CONFIG):
    """
    Mean cross-validated RMSE of each family over the last folds of ``series``.

    Uses ``config.ensemble_cv_folds`` expanding-window folds of horizon
    ``config.ensemble_cv_horizon``, starting no earlier than the longest
    minimum history among ``families``. Families that cannot be scored get NaN.
    """
    from .model_evaluation import time_series_cv

    n = len(series)
    horizon = config.ensemble_cv_horizon
    initial = max(
        max(family.min_history(config) for family in families),
        n - horizon - config.ensemble_cv_folds + 1,
    )
    if initial + horizon > n:
        config.logger.warning(
            f"Series too short for ensemble cross-validation ({n} < {initial + horizon})"
        )
        return [np.nan] * len(families)

    errors = []
    for family in families:
        result = time_series_cv(series, horizon=horizon, initial_window=initial, family=family,
                                config=config)
        scored = result.rmse[np.isfinite(result.rmse)]
        errors.append(float(scored.mean()) if scored.size else np.nan)
    return errors


def ensemble_weights(members, mode="insample", log=None, cv_errors=None):
    """
    Member weights summing to 1.

    ``"insample"`` weights are proportional to 1 / in-sample RMSE and ``"cv"``
    weights to 1 / ``cv_errors``; members with a zero error share all the
    weight. Falls back to equal weights when any error is undefined.
    """
    n = len(members)
    equal = np.full(n, 1.0 / n)
    if mode == "equal":
        return equal

    if mode == "cv":
        if cv_errors is None or len(cv_errors) != n:
            raise ValueError("cv weighting needs one cross-validation error per member")
        errors = np.asarray(cv_errors, dtype=float)
    else:
        errors = np.array([m.in_sample_rmse() for m in members], dtype=float)
    if not np.isfinite(errors).all():
        if log is not None:
            log.warning(f"{mode} error undefined for some members; using equal weights")
        return equal
    if (errors == 0).any():
        perfect = (errors == 0).astype(float)
        return perfect / perfect.sum()
    inverse = 1.0 / errors
    return inverse / inverse.sum()


FAMILIES = {
    "arima": ArimaFamily(seasonal=False),
    "arima_seasonal": ArimaFamily(seasonal=True),
    "ets": EtsFamily(),
    "stl": StlArimaFamily(),
    "nnar": NnarFamily(),
    "ensemble": EnsembleFamily(),
}


def get_model_family(name):
    """Look up a model family by key ("arima", "arima_seasonal", "ets", "stl", "nnar", "ensemble")."""
    if isinstance(name, ModelFamily):
        return name
    try:
        return FAMILIES[name]
    except KeyError:
        raise ValueError(f"Unknown model family: {name}. Available: {sorted(FAMILIES)}") from None


def fit_model(series, family="arima_seasonal", config=DEFAULT_CONFIG):
    """Fit the named (or given) model family to ``series``."""
    return get_model_family(family).fit(series, config)


def generate_forecast(fitted_model, horizon=12, confidence_levels=None, config=DEFAULT_CONFIG):
    """
    Generate a forecast with prediction intervals from a fitted model.

    Args:
        fitted_model: FittedModel
        horizon: Forecast horizon in months
        confidence_levels: Interval levels in percent (defaults to
            ``config.confidence_levels``)

    Returns:
        DataFrame: date, year, month, month_name, forecast, lower_<L>, upper_<L>
    """
    levels = tuple(config.confidence_levels if confidence_levels is None else confidence_levels)
    if int(horizon) < 1:
        raise ValueError(f"horizon must be >= 1, got {horizon}")
    for level in levels:
        if not 0 < level < 100:
            raise ValueError(f"Confidence levels must lie in (0, 100), got {level}")

    config.logger.info(f"Generating {horizon}-month forecast from {fitted_model.description}")
    return fitted_model.forecast(int(horizon), levels)
