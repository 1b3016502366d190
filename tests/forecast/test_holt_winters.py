"""
Holt-Winters tests

Covers the pure initializers, the additive recursion, step-indexed seasonal
forecasting, single-metric scoring and validation gates.
"""

import numpy as np
import pytest
from rich.console import Console

from src.forecast.cancellation import CancellationToken
from src.forecast.errors import (CancelledError, InsufficientDataError,
                                 InvalidParameterError, NotFittedError,
                                 UnsupportedError)
from src.forecast.holt_winters import (HoltWintersModel, HoltWintersParams,
                                       SeasonalMode,
                                       initial_seasonal_components,
                                       initial_trend, seasonal_forecast)
from src.forecast.metrics import AccuracyResult, MetricKind
from src.forecast.models import DataType, ModelFactory
from src.forecast.ranges import Range
from src.forecast.series import Series

PATTERN = [1.0, -1.0, 2.0, -2.0]


def seasonal_series(n=16, slope=0.5, base=10.0):
    """Linear trend plus a period-4 additive pattern"""
    return [base + slope * t + PATTERN[t % 4] for t in range(n)]


def _fitted(alpha=0.3, beta=0.1, gamma=0.2, period=4, end=11, metric=MetricKind.MAE, n=16):
    model = HoltWintersModel(Series("y", seasonal_series(n)))
    return model.fit(alpha, beta, gamma, period, train_range=Range(end=end), metric=metric)


@pytest.mark.smoke
class TestInitialization:
    """Initial trend and seasonal offsets"""

    def test_initial_trend_recovers_slope(self):
        assert initial_trend(seasonal_series(12), 4) == pytest.approx(0.5)

    def test_initial_seasonal_components(self):
        seasonals = initial_seasonal_components(seasonal_series(12), 4)
        np.testing.assert_allclose(seasonals, [0.25, -1.25, 2.25, -1.25])

    @pytest.mark.parametrize("period,n_seasons", [(2, 3), (4, 2), (7, 5), (12, 3)])
    def test_seasonal_components_sum_to_zero(self, period, n_seasons):
        rng = np.random.default_rng(period)
        y = rng.normal(100, 15, size=period * n_seasons)

        seasonals = initial_seasonal_components(y, period)

        assert len(seasonals) == period
        assert seasonals.sum() == pytest.approx(0.0, abs=1e-9)

    def test_partial_last_season_ignored(self):
        full = seasonal_series(12)
        np.testing.assert_allclose(
            initial_seasonal_components(full + [999.0], 4),
            initial_seasonal_components(full, 4),
        )

    def test_initializers_need_two_seasons(self):
        with pytest.raises(InsufficientDataError):
            initial_trend([1.0, 2.0, 3.0, 4.0, 5.0], 4)
        with pytest.raises(InsufficientDataError):
            initial_seasonal_components([1.0, 2.0, 3.0], 2)

    def test_initializers_do_not_mutate_input(self):
        y = np.array(seasonal_series(8))
        before = y.copy()
        initial_seasonal_components(y, 4)
        initial_trend(y, 4)
        np.testing.assert_array_equal(y, before)


@pytest.mark.smoke
class TestHoltWintersFit:
    """End-to-end fit on a trending seasonal series"""

    def test_split(self):
        model = _fitted()

        assert len(model.train_data) == 12
        assert len(model.test_data) == 4
        assert len(model.forecast_data) == 4

    def test_initial_state(self):
        model = _fitted()

        assert model.initial_level == 11.0
        assert model.initial_trend == pytest.approx(0.5)
        np.testing.assert_allclose(model.initial_seasonal_components, [0.25, -1.25, 2.25, -1.25])

    def test_zero_coefficients_freeze_components(self):
        """alpha=beta=gamma=0 only rolls the level forward by the trend"""
        model = _fitted(alpha=0.0, beta=0.0, gamma=0.0)

        assert model.trend_level == pytest.approx(0.5)
        assert model.smoothing_level == pytest.approx(11.0 + 11 * 0.5)
        np.testing.assert_allclose(model.seasonal_components, model.initial_seasonal_components)

    def test_recursion_matches_reference(self):
        alpha, beta, gamma, p = 0.3, 0.1, 0.2, 4
        y = seasonal_series(12)
        seasonals = list(initial_seasonal_components(y, p))
        trend = initial_trend(y, p)
        level = y[0]
        for i in range(1, len(y)):
            prev_level = level
            level = alpha * (y[i] - seasonals[i % p]) + (1 - alpha) * (level + trend)
            prev_trend = trend
            trend = beta * (level - prev_level) + (1 - beta) * trend
            seasonals[i % p] = gamma * (y[i] - prev_level - prev_trend) + (1 - gamma) * seasonals[i % p]

        model = _fitted(alpha, beta, gamma, p)

        assert model.smoothing_level == pytest.approx(level)
        assert model.trend_level == pytest.approx(trend)
        np.testing.assert_allclose(model.seasonal_components, seasonals)

    def test_predict_formula(self):
        model = _fitted()
        pred = model.predict(6).values

        s = model.seasonal_components
        expected = [model.smoothing_level + m * model.trend_level + s[(m - 1) % 4] for m in range(1, 7)]

        np.testing.assert_allclose(pred, expected)

    def test_test_forecast_uses_step_phase(self):
        model = _fitted()
        np.testing.assert_allclose(model.forecast_data.values, model.predict(4).values)

    def test_predict_is_idempotent(self):
        model = _fitted()
        first = model.predict(9).values
        model.predict(3)
        np.testing.assert_array_equal(first, model.predict(9).values)

    @pytest.mark.parametrize("metric", list(MetricKind))
    def test_single_selected_metric(self, metric):
        model = _fitted(metric=metric)
        acc = model.accuracy

        assert isinstance(acc, AccuracyResult)
        assert acc.kind is metric
        assert acc.n == 4
        assert np.isfinite(acc.value)

    def test_metric_by_name(self):
        assert _fitted(metric="rmse").accuracy.kind is MetricKind.RMSE

    def test_mae_value(self):
        model = _fitted(metric=MetricKind.MAE)
        errors = model.test_data.values - model.forecast_data.values
        assert model.accuracy.value == pytest.approx(np.mean(np.abs(errors)))

    def test_params(self):
        model = _fitted(alpha=0.4, beta=0.2, gamma=0.6)
        assert (model.alpha, model.beta, model.gamma, model.period) == (0.4, 0.2, 0.6, 4)
        assert model.params.mode is SeasonalMode.ADDITIVE


@pytest.mark.fail_loud
class TestHoltWintersValidation:
    """Validation gates"""

    @pytest.mark.parametrize("coeffs", [(1.5, 0.1, 0.1), (0.1, -0.2, 0.1), (0.1, 0.1, 2.0)])
    def test_coefficients_out_of_bounds(self, coeffs):
        model = HoltWintersModel(Series("y", seasonal_series()))
        with pytest.raises(InvalidParameterError):
            model.fit(*coeffs, 4, train_range=Range(end=11))

    @pytest.mark.parametrize("period", [0, -4, 2.5])
    def test_bad_period(self, period):
        with pytest.raises(InvalidParameterError):
            HoltWintersParams(alpha=0.1, beta=0.1, gamma=0.1, period=period)

    def test_needs_three_test_points(self):
        with pytest.raises(InsufficientDataError):
            _fitted(end=13)

    def test_needs_two_seasons_of_training(self):
        with pytest.raises(InsufficientDataError):
            _fitted(period=8, end=11)

    def test_multiplicative_is_explicitly_unsupported(self):
        model = HoltWintersModel(Series("y", seasonal_series()))
        with pytest.raises(UnsupportedError):
            model.fit(0.1, 0.1, 0.1, 4, train_range=Range(end=11), mode=SeasonalMode.MULTIPLICATIVE)

    def test_unknown_metric(self):
        with pytest.raises(InvalidParameterError):
            _fitted(metric="MEDAE")

    def test_empty_series(self):
        with pytest.raises(InsufficientDataError):
            HoltWintersModel(Series("y", [])).fit(0.1, 0.1, 0.1, 4)

    def test_unfit_predict(self):
        with pytest.raises(NotFittedError):
            HoltWintersModel(Series("y", seasonal_series())).predict(3)

    def test_predict_horizon(self):
        with pytest.raises(InvalidParameterError):
            _fitted().predict(0)

    def test_optimize_unsupported(self):
        with pytest.raises(UnsupportedError):
            _fitted().optimize()


class TestHoltWintersRuntime:
    """Cancellation, reporting and factory"""

    def test_cancelled_fit(self):
        token = CancellationToken()
        token.cancel("user abort")
        model = HoltWintersModel(Series("y", seasonal_series()))

        with pytest.raises(CancelledError, match="user abort"):
            model.fit(0.3, 0.1, 0.2, 4, train_range=Range(end=11), token=token)
        assert not model.is_fitted

    def test_cancelled_forecast_helper(self):
        token = CancellationToken()
        token.cancel()
        with pytest.raises(CancelledError):
            seasonal_forecast(1.0, 0.0, np.zeros(4), 10, token)

    def test_summary(self):
        console = Console(record=True, width=140)
        _fitted(metric="SSE").summary(console)
        text = console.export_text()

        for label in ("Alpha", "Beta", "Gamma", "Period", "Initial Trend Level",
                      "Seasonal Components", "SSE", "Test Data", "Forecast Data"):
            assert label in text

    def test_describe(self):
        model = _fitted()
        assert model.describe(DataType.TRAIN)["count"] == 12
        assert model.describe(DataType.TEST)["count"] == 4

    def test_factory(self):
        assert isinstance(ModelFactory.create("holt_winters", seasonal_series()), HoltWintersModel)
