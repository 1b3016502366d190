# file: src/forecast/config.py
"""
Forecast configuration

Defaults for smoothing hyperparameters and metric options. Values can be set
in the environment (prod) or a .env file (local) and overridden per call.
"""

import os
from dataclasses import dataclass, fields
from typing import Optional

from dotenv import load_dotenv

from src.forecast.errors import InvalidParameterError
from src.forecast.metrics import ErrorOptions, MetricKind
from src.forecast.ranges import Range

ENV_PREFIX = "FORECAST_"


@dataclass(frozen=True)
class ForecastConfig:
    """Configuration for fitting and scoring"""
    # Smoothing coefficients
    alpha: float = 0.5
    beta: float = 0.3
    gamma: float = 0.1

    # Holt-Winters season length
    period: int = 4

    # Scoring
    metric: str = "MAE"
    skip_invalids: bool = False

    # Prediction
    horizon: int = 5

    # Rows held out after the training window; None keeps the CLI --train-end
    test_size: Optional[int] = None

    log_level: str = "INFO"

    def metric_kind(self) -> MetricKind:
        return MetricKind.parse(self.metric)

    def error_options(self) -> ErrorOptions:
        return ErrorOptions(skip_invalids=self.skip_invalids)

    def train_range(self, train_end: int) -> Range:
        """Training window ending test_size rows before the end, else at train_end"""
        if self.test_size is None:
            return Range(end=train_end)
        if self.test_size <= 0:
            raise InvalidParameterError(f"test_size must be positive, got {self.test_size}")
        return Range(end=-(self.test_size + 1))


def _parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"Expected a boolean, got {raw!r}")


_FIELD_TYPES = {"test_size": int}


def _coerce(name: str, typ, raw: str):
    try:
        if typ is bool:
            return _parse_bool(raw)
        return typ(raw)
    except ValueError as e:
        raise ValueError(f"Invalid value for {ENV_PREFIX}{name.upper()}: {raw!r} ({e})") from None


def load_config(env_file: Optional[str] = None, **overrides) -> ForecastConfig:
    """
    Load configuration from environment

    Reads FORECAST_* variables from a .env file or the environment.
    Keyword overrides take precedence; None overrides are ignored.
    """
    load_dotenv(env_file)

    values = {}
    for f in fields(ForecastConfig):
        raw = os.getenv(f"{ENV_PREFIX}{f.name.upper()}")
        if raw is not None and raw != "":
            values[f.name] = _coerce(f.name, _FIELD_TYPES.get(f.name, type(f.default)), raw)

    values.update({k: v for k, v in overrides.items() if v is not None})

    unknown = set(values) - {f.name for f in fields(ForecastConfig)}
    if unknown:
        raise ValueError(f"Unknown config keys: {sorted(unknown)}")

    cfg = ForecastConfig(**values)
    cfg.metric_kind()
    return cfg
