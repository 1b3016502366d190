# file: src/forecast/__init__.py
"""
Exponential smoothing forecasting

- Range resolution for train/test splits
- Accuracy metrics (MAE, SSE, RMSE, MAPE)
- Simple Exponential Smoothing model
- Additive Holt-Winters model
"""

from .cancellation import CancellationToken
from .config import ForecastConfig, load_config
from .errors import (CancelledError, ForecastError, IndeterminateError,
                     InsufficientDataError, InvalidParameterError,
                     InvalidRangeError, LengthMismatchError, NotFittedError,
                     UnsupportedError)
from .holt_winters import (HoltWintersModel, HoltWintersParams, SeasonalMode,
                           initial_seasonal_components, initial_trend)
from .metrics import (AccuracyResult, ErrorOptions, MetricKind, MetricResult,
                      compute_all, compute_metric, mean_absolute_error,
                      mean_absolute_percentage_error, root_mean_squared_error,
                      sum_of_squared_errors)
from .models import DataType, ForecastModel, ModelFactory
from .ranges import Range, nrows, resolve
from .series import Series
from .ses import SESModel

__all__ = [
    # Ranges and series
    "Range",
    "resolve",
    "nrows",
    "Series",
    "CancellationToken",
    # Metrics
    "ErrorOptions",
    "MetricKind",
    "MetricResult",
    "AccuracyResult",
    "mean_absolute_error",
    "sum_of_squared_errors",
    "root_mean_squared_error",
    "mean_absolute_percentage_error",
    "compute_metric",
    "compute_all",
    # Models
    "ForecastModel",
    "ModelFactory",
    "DataType",
    "SESModel",
    "HoltWintersModel",
    "HoltWintersParams",
    "SeasonalMode",
    "initial_trend",
    "initial_seasonal_components",
    # Config
    "ForecastConfig",
    "load_config",
    # Errors
    "ForecastError",
    "InvalidRangeError",
    "InvalidParameterError",
    "InsufficientDataError",
    "LengthMismatchError",
    "IndeterminateError",
    "CancelledError",
    "UnsupportedError",
    "NotFittedError",
]
