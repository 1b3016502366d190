# file: src/forecast/ses.py
"""
Simple Exponential Smoothing

Level recursion over the training window:
    s_0 = y[start]
    s_t = alpha * y[t] + (1 - alpha) * s_{t-1}

Forecasts are bootstrapped from the last training observation (the origin):
    s = alpha * origin + (1 - alpha) * s
repeated once per step.

See: https://www.itl.nist.gov/div898/handbook/pmc/section4/pmc431.htm
"""

import logging
from typing import Dict, List, Optional

from rich.console import Console

from src.forecast.cancellation import CancellationToken, check_cancelled
from src.forecast.errors import InsufficientDataError
from src.forecast.metrics import (ErrorOptions, MetricKind, MetricResult,
                                  compute_all)
from src.forecast.models import (ForecastModel, ModelFactory,
                                 validate_coefficient)
from src.forecast.ranges import Range, resolve
from src.forecast.series import Series
from src.forecast.summary import columns_table, key_value_table, render

logger = logging.getLogger(__name__)

MIN_TEST_SIZE = 2


def bootstrap_forecast(
    level: float,
    origin: float,
    alpha: float,
    steps: int,
    token: Optional[CancellationToken] = None,
) -> List[float]:
    """Recurse the level towards the origin value, one value per step"""
    out = []
    for _ in range(steps):
        check_cancelled(token)
        level = alpha * origin + (1 - alpha) * level
        out.append(level)
    return out


@ModelFactory.register
class SESModel(ForecastModel):
    """Simple Exponential Smoothing with bootstrapped prediction"""

    name = "ses"

    def __init__(self, series):
        super().__init__(series)
        self._alpha = 0.0
        self._initial_level = 0.0
        self._origin_value = 0.0
        self._smoothing_level = 0.0
        self._accuracy: Dict[MetricKind, MetricResult] = {}

    def fit(
        self,
        alpha: float,
        train_range: Optional[Range] = None,
        error_options: Optional[ErrorOptions] = None,
        token: Optional[CancellationToken] = None,
    ) -> "SESModel":
        """
        Split the series and train the smoothing level

        Rows inside train_range are training data, every row after it is test
        data. Recent values receive more weight when alpha is closer to 1.

        Args:
            alpha: Smoothing coefficient in [0, 1]
            train_range: Training window; defaults to the whole series
            error_options: Options for the accuracy metrics
            token: Optional cancellation token

        Returns:
            self, fitted

        Raises:
            InsufficientDataError: empty series or fewer than 2 test rows
            InvalidRangeError: train_range does not fit the series
            InvalidParameterError: alpha outside [0, 1]
        """
        with self.data.shared():
            count = len(self.data)
            if count == 0:
                raise InsufficientDataError("no values in series range")

            start, end = resolve(train_range, count)

            alpha = validate_coefficient("alpha", alpha)

            y = self.data.view()
            if count - (end + 1) < MIN_TEST_SIZE:
                raise InsufficientDataError(
                    f"There should be a minimum of {MIN_TEST_SIZE} data left as testing data, "
                    f"got {count - (end + 1)}"
                )

            train_series = self.data.slice(start, end, name="Train Data")
            test_series = Series("Test Data", y[end + 1:])

            initial_level = float(y[start])
            level = initial_level
            for i in range(start + 1, end + 1):
                check_cancelled(token)
                level = alpha * float(y[i]) + (1 - alpha) * level
            origin = float(y[end])

        logger.debug(f"SES trained on rows [{start}, {end}]: initial={initial_level}, level={level}")

        fcast_series = Series(
            "Forecast Data",
            bootstrap_forecast(level, origin, alpha, len(test_series), token),
        )

        accuracy = compute_all(test_series, fcast_series, error_options or ErrorOptions(), token=token)

        self._alpha = alpha
        self._initial_level = initial_level
        self._origin_value = origin
        self._smoothing_level = level
        self._train_data = train_series
        self._test_data = test_series
        self._fcast_data = fcast_series
        self._accuracy = accuracy
        self._fitted = True

        logger.info(
            f"SES fitted: alpha={alpha}, train=[{start}, {end}], test={len(test_series)}, "
            f"RMSE={accuracy[MetricKind.RMSE].value:.4f}"
        )
        return self

    def _forecast(self, horizon: int, token: Optional[CancellationToken]) -> List[float]:
        return bootstrap_forecast(self._smoothing_level, self._origin_value, self._alpha, horizon, token)

    @property
    def alpha(self) -> float:
        self._require_fitted()
        return self._alpha

    @property
    def initial_level(self) -> float:
        self._require_fitted()
        return self._initial_level

    @property
    def origin_value(self) -> float:
        self._require_fitted()
        return self._origin_value

    @property
    def smoothing_level(self) -> float:
        self._require_fitted()
        return self._smoothing_level

    @property
    def accuracy(self) -> Dict[MetricKind, MetricResult]:
        self._require_fitted()
        return dict(self._accuracy)

    def summary(self, console: Optional[Console] = None) -> None:
        self._require_fitted()
        render([
            key_value_table("SES Model", [
                ("Alpha", self._alpha),
                ("Initial Level", self._initial_level),
                ("Smoothing Level", self._smoothing_level),
                ("Origin Value", self._origin_value),
            ]),
            key_value_table("Accuracy", [
                (kind.value, result.value) for kind, result in self._accuracy.items()
            ]),
            columns_table("Test vs Forecast", [self._test_data, self._fcast_data]),
        ], console)
