# file: src/forecast/holt_winters.py
"""
Holt-Winters triple exponential smoothing (additive)

Level, trend and seasonal recursion over the training window of length L
with season length p:

    level_t    = alpha * (y_t - s_{t mod p}) + (1 - alpha) * (level_{t-1} + trend_{t-1})
    trend_t    = beta * (level_t - level_{t-1}) + (1 - beta) * trend_{t-1}
    s_{t mod p} = gamma * (y_t - level_{t-1} - trend_{t-1}) + (1 - gamma) * s_{t mod p}

Forecast m steps ahead:

    yhat_{L+m} = level + m * trend + s_{(m-1) mod p}

The seasonal phase of a forecast is taken from the step count, not from the
absolute position. It matches the true phase only when the training window
length is a whole number of seasons.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

import numpy as np
from rich.console import Console

from src.forecast.cancellation import CancellationToken, check_cancelled
from src.forecast.errors import (InsufficientDataError, InvalidParameterError,
                                 UnsupportedError)
from src.forecast.metrics import (AccuracyResult, ErrorOptions, MetricKind,
                                  compute_metric)
from src.forecast.models import (ForecastModel, ModelFactory,
                                 validate_coefficient)
from src.forecast.ranges import Range, resolve
from src.forecast.series import Series
from src.forecast.summary import columns_table, key_value_table, render

logger = logging.getLogger(__name__)

MIN_TEST_SIZE = 3


class SeasonalMode(str, Enum):
    """Seasonal update formula"""
    ADDITIVE = "additive"
    # Ratio-based update; reserved, rejected at fit time
    MULTIPLICATIVE = "multiplicative"


@dataclass(frozen=True)
class HoltWintersParams:
    """Validated Holt-Winters hyperparameters"""
    alpha: float
    beta: float
    gamma: float
    period: int
    mode: SeasonalMode = SeasonalMode.ADDITIVE

    def __post_init__(self):
        for name in ("alpha", "beta", "gamma"):
            object.__setattr__(self, name, validate_coefficient(name, getattr(self, name)))

        if isinstance(self.period, bool) or not isinstance(self.period, (int, np.integer)) or self.period <= 0:
            raise InvalidParameterError(f"period must be a positive integer, got {self.period!r}")
        object.__setattr__(self, "period", int(self.period))

        try:
            mode = SeasonalMode(self.mode)
        except ValueError:
            raise InvalidParameterError(f"Unknown seasonal mode: {self.mode!r}") from None
        if mode is not SeasonalMode.ADDITIVE:
            raise UnsupportedError(f"{mode.value} seasonality is not implemented")
        object.__setattr__(self, "mode", mode)


def _check_seasons(y: np.ndarray, period: int) -> None:
    if period <= 0:
        raise InvalidParameterError(f"period must be a positive integer, got {period}")
    if len(y) < 2 * period:
        raise InsufficientDataError(
            f"training window needs at least 2 full seasons ({2 * period} rows), got {len(y)}"
        )


def initial_trend(y, period: int) -> float:
    """
    Average slope between the first two seasons

    Mean over phases i of (y[p + i] - y[i]) / p.
    """
    y = np.asarray(y, dtype=np.float64)
    _check_seasons(y, period)
    return float(np.sum((y[period:2 * period] - y[:period]) / period) / period)


def initial_seasonal_components(y, period: int) -> np.ndarray:
    """
    Additive seasonal offsets, one per phase

    Each full season is centred on its own average, then the deviations are
    averaged across seasons phase by phase. The result sums to zero.
    """
    y = np.asarray(y, dtype=np.float64)
    _check_seasons(y, period)
    n_seasons = len(y) // period
    seasons = y[:n_seasons * period].reshape(n_seasons, period)
    season_averages = seasons.mean(axis=1, keepdims=True)
    return (seasons - season_averages).mean(axis=0)


def seasonal_forecast(
    level: float,
    trend: float,
    seasonals: np.ndarray,
    steps: int,
    token: Optional[CancellationToken] = None,
) -> List[float]:
    """level + m * trend + seasonal[(m - 1) mod p] for m = 1..steps"""
    period = len(seasonals)
    out = []
    for m in range(1, steps + 1):
        check_cancelled(token)
        out.append(level + m * trend + float(seasonals[(m - 1) % period]))
    return out


@ModelFactory.register
class HoltWintersModel(ForecastModel):
    """Additive Holt-Winters model scored with one selected metric"""

    name = "holt_winters"

    def __init__(self, series):
        super().__init__(series)
        self._params: Optional[HoltWintersParams] = None
        self._initial_level = 0.0
        self._initial_trend = 0.0
        self._initial_seasonals = np.empty(0)
        self._smoothing_level = 0.0
        self._trend_level = 0.0
        self._seasonals = np.empty(0)
        self._accuracy: Optional[AccuracyResult] = None

    def fit(
        self,
        alpha: float,
        beta: float,
        gamma: float,
        period: int,
        train_range: Optional[Range] = None,
        metric=MetricKind.MAE,
        mode=SeasonalMode.ADDITIVE,
        error_options: Optional[ErrorOptions] = None,
        token: Optional[CancellationToken] = None,
    ) -> "HoltWintersModel":
        """
        Split the series, initialise the components and train them

        Args:
            alpha, beta, gamma: Level, trend and seasonal coefficients in [0, 1]
            period: Season length
            train_range: Training window; defaults to the whole series
            metric: MetricKind (or its name) used to score the test forecast
            mode: SeasonalMode, only ADDITIVE is supported
            error_options: Options for the accuracy metric
            token: Optional cancellation token

        Returns:
            self, fitted
        """
        with self.data.shared():
            count = len(self.data)
            if count == 0:
                raise InsufficientDataError("no values in series range")

            start, end = resolve(train_range, count)
            params = HoltWintersParams(alpha=alpha, beta=beta, gamma=gamma, period=period, mode=mode)
            metric = MetricKind.parse(metric)

            n_test = count - (end + 1)
            if n_test < MIN_TEST_SIZE:
                raise InsufficientDataError(
                    f"There should be a minimum of {MIN_TEST_SIZE} data left as testing data, got {n_test}"
                )

            train_series = self.data.slice(start, end, name="Train Data")
            test_series = self.data.slice(end + 1, count - 1, name="Test Data")

        y = train_series.values
        p = params.period

        seasonals = initial_seasonal_components(y, p)
        initial_seasonals = seasonals.copy()
        trend = initial_trend(y, p)
        trend0 = trend
        level = float(y[0])

        logger.debug(f"Holt-Winters init: level={level}, trend={trend}, seasonals={initial_seasonals.tolist()}")

        for i in range(1, len(y)):
            check_cancelled(token)
            xt = float(y[i])
            phase = i % p
            prev_level, level = level, params.alpha * (xt - seasonals[phase]) + (1 - params.alpha) * (level + trend)
            prev_trend, trend = trend, params.beta * (level - prev_level) + (1 - params.beta) * trend
            seasonals[phase] = params.gamma * (xt - prev_level - prev_trend) + (1 - params.gamma) * seasonals[phase]

        fcast_series = Series(
            "Forecast Data",
            seasonal_forecast(level, trend, seasonals, len(test_series), token),
        )

        accuracy = compute_metric(metric, test_series, fcast_series, error_options or ErrorOptions(), token=token)

        self._params = params
        self._initial_level = float(y[0])
        self._initial_trend = trend0
        self._initial_seasonals = initial_seasonals
        self._smoothing_level = float(level)
        self._trend_level = float(trend)
        self._seasonals = seasonals
        self._train_data = train_series
        self._test_data = test_series
        self._fcast_data = fcast_series
        self._accuracy = accuracy
        self._fitted = True

        logger.info(
            f"Holt-Winters fitted: alpha={params.alpha}, beta={params.beta}, gamma={params.gamma}, "
            f"period={p}, train=[{start}, {end}], test={len(test_series)}, {accuracy}"
        )
        return self

    def _forecast(self, horizon: int, token: Optional[CancellationToken]) -> List[float]:
        return seasonal_forecast(self._smoothing_level, self._trend_level, self._seasonals, horizon, token)

    @property
    def params(self) -> HoltWintersParams:
        self._require_fitted()
        return self._params

    @property
    def alpha(self) -> float:
        return self.params.alpha

    @property
    def beta(self) -> float:
        return self.params.beta

    @property
    def gamma(self) -> float:
        return self.params.gamma

    @property
    def period(self) -> int:
        return self.params.period

    @property
    def initial_level(self) -> float:
        self._require_fitted()
        return self._initial_level

    @property
    def initial_trend(self) -> float:
        self._require_fitted()
        return self._initial_trend

    @property
    def initial_seasonal_components(self) -> np.ndarray:
        self._require_fitted()
        return self._initial_seasonals.copy()

    @property
    def smoothing_level(self) -> float:
        self._require_fitted()
        return self._smoothing_level

    @property
    def trend_level(self) -> float:
        self._require_fitted()
        return self._trend_level

    @property
    def seasonal_components(self) -> np.ndarray:
        self._require_fitted()
        return self._seasonals.copy()

    @property
    def accuracy(self) -> AccuracyResult:
        self._require_fitted()
        return self._accuracy

    def summary(self, console: Optional[Console] = None) -> None:
        self._require_fitted()
        params = self._params
        render([
            key_value_table("Holt-Winters Model", [
                ("Alpha", params.alpha),
                ("Beta", params.beta),
                ("Gamma", params.gamma),
                ("Period", params.period),
                ("Mode", params.mode.value),
            ]),
            key_value_table("Components", [
                ("Initial Smoothing Level", self._initial_level),
                ("Initial Trend Level", self._initial_trend),
                ("Smoothing Level", self._smoothing_level),
                ("Trend Level", self._trend_level),
            ]),
            columns_table("Seasonal Components", [
                Series("Initial Seasonal Components", self._initial_seasonals),
                Series("Seasonal Components", self._seasonals),
            ]),
            key_value_table("Accuracy", [(self._accuracy.kind.value, self._accuracy.value)]),
            columns_table("Test vs Forecast", [self._test_data, self._fcast_data]),
        ], console)
