"""
Error types raised by the forecasting engine.

Validation and argument errors are fatal to the operation that raised them.
Insufficient-data and model-fit errors are caught at the granularity of a
single month, model family or cross-validation fold so that sibling results
can still be produced.
"""


class ForecastError(Exception):
    """Base class for all forecasting errors."""


class SeriesValidationError(ForecastError, ValueError):
    """Input is not a valid monthly series or is too short for the operation."""


class ArgumentMismatchError(ForecastError, ValueError):
    """Caller passed inconsistent arguments (e.g. percentiles vs labels)."""


class InsufficientDataError(ForecastError):
    """Not enough observations to compute a statistic or fit a model."""


class InsufficientHistoryError(InsufficientDataError):
    """Series is shorter than the minimum history of a model family."""

    def __init__(self, family: str, required: int, actual: int):
        self.family = family
        self.required = required
        self.actual = actual
        super().__init__(
            f"{family} requires at least {required} observations, got {actual}"
        )


class ModelFitError(ForecastError):
    """A model family failed to fit or to produce a forecast."""

    def __init__(self, family: str, message: str = "Model fit failed"):
        self.family = family
        self.message = message
        super().__init__(f"{family}: {message}")


class MissingDataWarning(UserWarning):
    """Series contains missing observations; processing continues."""


class LowConfidenceWarning(UserWarning):
    """A calendar month has fewer observations than the working minimum."""
