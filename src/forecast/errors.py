# file: src/forecast/errors.py
"""
Forecast error taxonomy.

Every recoverable failure raised by the library is a ForecastError so callers
can catch one base class. Caller misuse (predicting with an unfit model) is a
NotFittedError and intentionally sits outside that hierarchy.
"""


class ForecastError(Exception):
    """Base class for recoverable forecasting errors"""


class InvalidRangeError(ForecastError, ValueError):
    """Start/end specification cannot be resolved against the series length"""


class InvalidParameterError(ForecastError, ValueError):
    """Smoothing coefficient, horizon, period or metric kind is out of bounds"""


class InsufficientDataError(ForecastError):
    """Training or test window holds fewer observations than required"""


class LengthMismatchError(ForecastError, ValueError):
    """Actual and forecast series disagree in row count"""


class IndeterminateError(ForecastError):
    """A metric could not be computed from the valid points available"""

    def __init__(self, message: str = "calculation result: indeterminate"):
        super().__init__(message)


class CancelledError(ForecastError):
    """Computation was aborted through a cancellation token"""


class UnsupportedError(ForecastError):
    """Requested feature is declared but not implemented"""


class NotFittedError(RuntimeError):
    """Model used before a successful fit"""
