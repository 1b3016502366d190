# file: src/forecast/models.py
"""
Forecast model contract

Every smoothing engine follows the same lifecycle:
    model = Engine(series)
    model.fit(...)        # engine-specific hyperparameters
    model.predict(h)      # uniform
    model.summary()       # uniform
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, List, Optional, Type

import numpy as np
import pandas as pd
from rich.console import Console

from src.forecast.cancellation import CancellationToken
from src.forecast.errors import (InvalidParameterError, NotFittedError,
                                 UnsupportedError)
from src.forecast.series import Series, as_series

logger = logging.getLogger(__name__)


class DataType(str, Enum):
    """Which part of the data describe() reports on"""
    TRAIN = "train"
    TEST = "test"
    MAIN = "main"


class ForecastModel(ABC):
    """Base class for exponential smoothing models"""

    name = "model"

    def __init__(self, series):
        self.data: Series = as_series(series, name="Data")
        self._fitted = False
        self._train_data: Optional[Series] = None
        self._test_data: Optional[Series] = None
        self._fcast_data: Optional[Series] = None

    @abstractmethod
    def fit(self, *args, **kwargs) -> "ForecastModel":
        """Split the data, run the smoothing recursion and score the fit"""
        pass

    @abstractmethod
    def _forecast(self, horizon: int, token: Optional[CancellationToken]) -> List[float]:
        """Produce horizon values from the fitted state"""
        pass

    @abstractmethod
    def summary(self, console: Optional[Console] = None) -> None:
        """Render fitted state for human inspection"""
        pass

    @property
    def is_fitted(self) -> bool:
        return self._fitted

    def _require_fitted(self) -> None:
        if not self._fitted:
            raise NotFittedError(f"{self.name} model must be fit before use")

    def predict(self, horizon: int, token: Optional[CancellationToken] = None) -> Series:
        """
        Forecast horizon future periods

        Args:
            horizon: Number of periods, must be > 0
            token: Optional cancellation token polled every step

        Returns:
            New Series named "Prediction"
        """
        self._require_fitted()
        if isinstance(horizon, bool) or not isinstance(horizon, (int, np.integer)) or horizon <= 0:
            raise InvalidParameterError(f"horizon must be a positive integer, got {horizon!r}")

        return Series("Prediction", self._forecast(int(horizon), token))

    def optimize(self) -> "ForecastModel":
        """Parameter tuning is declared but not available"""
        raise UnsupportedError(f"optimize is not supported for {self.name}")

    @property
    def train_data(self) -> Series:
        self._require_fitted()
        return self._train_data

    @property
    def test_data(self) -> Series:
        self._require_fitted()
        return self._test_data

    @property
    def forecast_data(self) -> Series:
        self._require_fitted()
        return self._fcast_data

    def describe(self, which=DataType.MAIN) -> pd.Series:
        """Descriptive statistics for train, test or the full series"""
        try:
            which = DataType(which)
        except ValueError:
            raise ValueError(f"unrecognised data type selection: {which!r}") from None

        if which is DataType.MAIN:
            data = self.data
        elif which is DataType.TRAIN:
            data = self.train_data
        else:
            data = self.test_data

        with data.shared():
            return data.to_pandas().describe()


class ModelFactory:
    """Factory for creating model instances"""

    _models: Dict[str, Type[ForecastModel]] = {}

    @classmethod
    def register(cls, model_cls: Type[ForecastModel]) -> Type[ForecastModel]:
        cls._models[model_cls.name] = model_cls
        return model_cls

    @classmethod
    def create(cls, model_name: str, series) -> ForecastModel:
        """Create model by name"""
        if model_name not in cls._models:
            raise ValueError(f"Unknown model: {model_name}")

        return cls._models[model_name](series)

    @classmethod
    def list_models(cls) -> List[str]:
        """List available models"""
        return list(cls._models.keys())


def validate_coefficient(name: str, value: float) -> float:
    """Smoothing coefficients must lie in [0, 1]"""
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidParameterError(f"{name} must be a number, got {value!r}") from None
    if not (0.0 <= value <= 1.0):
        raise InvalidParameterError(f"{name} must be between [0,1], got {value}")
    return value
