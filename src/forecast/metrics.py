# file: src/forecast/metrics.py
"""
Forecast accuracy metrics

Computes MAE, SSE, RMSE and MAPE between an actual series and a forecast
series aligned position by position.

Invalid points (NaN/inf, and zero actuals for MAPE) fail loud by default:
an IndeterminateError is raised instead of returning NaN. With
skip_invalids=True they are masked out of both the sum and the count.

See: https://otexts.com/fpp2/accuracy.html
"""

import logging
from contextlib import ExitStack
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Dict, NamedTuple, Optional, Tuple

import numpy as np

from src.forecast.cancellation import CancellationToken, check_cancelled
from src.forecast.errors import (IndeterminateError, InvalidParameterError,
                                 LengthMismatchError)
from src.forecast.ranges import Range
from src.forecast.series import Series, as_series

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ErrorOptions:
    """Behaviour switches shared by every metric"""
    # Skip Inf/NaN values (and zero actuals for MAPE) instead of failing
    skip_invalids: bool = False
    # Caller already holds the series locks
    dont_lock: bool = False


class MetricResult(NamedTuple):
    """Metric value and the number of points it was computed over"""
    value: float
    n: int


class MetricKind(str, Enum):
    MAE = "MAE"
    SSE = "SSE"
    RMSE = "RMSE"
    MAPE = "MAPE"

    @classmethod
    def parse(cls, value) -> "MetricKind":
        """Accept a MetricKind or a case-insensitive name"""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            raise InvalidParameterError(
                f"Unknown metric kind: {value!r} (expected one of {[k.value for k in cls]})"
            ) from None


@dataclass(frozen=True)
class AccuracyResult:
    """Single tagged accuracy score"""
    kind: MetricKind
    value: float
    n: int

    def __str__(self) -> str:
        return f"{self.kind.value}={self.value:.6f} (n={self.n})"


def _aligned_errors(
    actual: Series,
    forecast: Series,
    range_spec: Optional[Range],
    opts: ErrorOptions,
    reject_zero_actual: bool = False,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Align actual[start..end] with forecast[0..] and mask invalid points

    Returns:
        (errors, actual_values) restricted to the valid points
    """
    n_pred = len(forecast)

    if range_spec is None:
        if n_pred > len(actual):
            raise LengthMismatchError(
                f"mismatch length: forecast has {n_pred} rows, actual only {len(actual)}"
            )
        range_spec = Range(start=-n_pred)

    n_test = range_spec.nrows(len(actual))
    if n_test != n_pred:
        raise LengthMismatchError(
            f"mismatch length: range selects {n_test} actual rows, forecast has {n_pred}"
        )

    start, end = range_spec.limits(len(actual))
    y_true = actual.view()[start:end + 1]
    y_pred = forecast.view()

    invalid = ~np.isfinite(y_true) | ~np.isfinite(y_pred)
    if reject_zero_actual:
        invalid |= (y_true == 0)

    if invalid.any() and not opts.skip_invalids:
        raise IndeterminateError(
            f"{int(invalid.sum())} invalid value(s) in range [{start}, {end}]"
        )

    valid_mask = ~invalid
    if valid_mask.sum() == 0:
        raise IndeterminateError("no valid points left after masking")

    return y_true[valid_mask] - y_pred[valid_mask], y_true[valid_mask]


def _hold_shared(stack: ExitStack, actual: Series, forecast: Series) -> None:
    """Take each distinct series' read lock once"""
    stack.enter_context(actual.shared())
    if forecast is not actual:
        stack.enter_context(forecast.shared())


def _locked(
    metric: Callable[[Series, Series, Optional[Range], ErrorOptions], MetricResult],
    actual,
    forecast,
    opts: Optional[ErrorOptions],
    range_spec: Optional[Range],
    token: Optional[CancellationToken],
) -> MetricResult:
    """Run a metric with both series held under the shared lock"""
    opts = opts or ErrorOptions()
    actual = as_series(actual, name="Actual")
    forecast = as_series(forecast, name="Forecast")

    with ExitStack() as stack:
        if not opts.dont_lock:
            _hold_shared(stack, actual, forecast)
        check_cancelled(token)
        return metric(actual, forecast, range_spec, opts)


def _mae(actual, forecast, range_spec, opts) -> MetricResult:
    errors, _ = _aligned_errors(actual, forecast, range_spec, opts)
    return MetricResult(float(np.mean(np.abs(errors))), len(errors))


def _sse(actual, forecast, range_spec, opts) -> MetricResult:
    errors, _ = _aligned_errors(actual, forecast, range_spec, opts)
    return MetricResult(float(np.sum(errors * errors)), len(errors))


def _mape(actual, forecast, range_spec, opts) -> MetricResult:
    errors, y_true = _aligned_errors(actual, forecast, range_spec, opts, reject_zero_actual=True)
    return MetricResult(float(100 * np.mean(np.abs(errors / y_true))), len(errors))


def mean_absolute_error(
    actual,
    forecast,
    opts: Optional[ErrorOptions] = None,
    range_spec: Optional[Range] = None,
    token: Optional[CancellationToken] = None,
) -> MetricResult:
    """
    Mean Absolute Error

    Args:
        actual: Observed values (Series or array-like)
        forecast: Predicted values, aligned with actual[range]
        opts: ErrorOptions
        range_spec: Rows of actual to compare; defaults to the last len(forecast) rows
        token: Optional cancellation token

    Returns:
        MetricResult(value, n)
    """
    return _locked(_mae, actual, forecast, opts, range_spec, token)


def sum_of_squared_errors(
    actual,
    forecast,
    opts: Optional[ErrorOptions] = None,
    range_spec: Optional[Range] = None,
    token: Optional[CancellationToken] = None,
) -> MetricResult:
    """Sum of Squared Errors"""
    return _locked(_sse, actual, forecast, opts, range_spec, token)


def root_mean_squared_error(
    actual,
    forecast,
    opts: Optional[ErrorOptions] = None,
    range_spec: Optional[Range] = None,
    token: Optional[CancellationToken] = None,
) -> MetricResult:
    """
    Root Mean Squared Error

    Defined as sqrt(SSE / n) over the same valid points SSE uses.
    """
    opts = opts or ErrorOptions()
    actual = as_series(actual, name="Actual")
    forecast = as_series(forecast, name="Forecast")

    with ExitStack() as stack:
        if not opts.dont_lock:
            _hold_shared(stack, actual, forecast)
        sse, n = sum_of_squared_errors(
            actual, forecast, replace(opts, dont_lock=True), range_spec, token
        )

    return MetricResult(float(np.sqrt(sse / n)), n)


def mean_absolute_percentage_error(
    actual,
    forecast,
    opts: Optional[ErrorOptions] = None,
    range_spec: Optional[Range] = None,
    token: Optional[CancellationToken] = None,
) -> MetricResult:
    """
    Mean Absolute Percentage Error (%)

    Zero actual values count as invalid points.
    """
    return _locked(_mape, actual, forecast, opts, range_spec, token)


METRIC_FUNCTIONS: Dict[MetricKind, Callable[..., MetricResult]] = {
    MetricKind.MAE: mean_absolute_error,
    MetricKind.SSE: sum_of_squared_errors,
    MetricKind.RMSE: root_mean_squared_error,
    MetricKind.MAPE: mean_absolute_percentage_error,
}


def compute_metric(
    kind,
    actual,
    forecast,
    opts: Optional[ErrorOptions] = None,
    range_spec: Optional[Range] = None,
    token: Optional[CancellationToken] = None,
) -> AccuracyResult:
    """Compute one metric selected by kind and tag the result"""
    kind = MetricKind.parse(kind)
    value, n = METRIC_FUNCTIONS[kind](actual, forecast, opts, range_spec, token)
    return AccuracyResult(kind=kind, value=value, n=n)


def compute_all(
    actual,
    forecast,
    opts: Optional[ErrorOptions] = None,
    range_spec: Optional[Range] = None,
    token: Optional[CancellationToken] = None,
) -> Dict[MetricKind, MetricResult]:
    """
    Compute all metrics at once

    Returns:
        Dictionary of MetricKind -> MetricResult
    """
    return {
        kind: fn(actual, forecast, opts, range_spec, token)
        for kind, fn in METRIC_FUNCTIONS.items()
    }
