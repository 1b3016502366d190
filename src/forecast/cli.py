# file: src/forecast/cli.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import pandas as pd
import typer
from rich.console import Console

from src.forecast.config import ForecastConfig, load_config
from src.forecast.errors import ForecastError
from src.forecast.holt_winters import HoltWintersModel
from src.forecast.models import ForecastModel
from src.forecast.series import Series
from src.forecast.ses import SESModel
from src.forecast.summary import columns_table

logger = logging.getLogger(__name__)
app = typer.Typer(add_completion=False)
console = Console()


def _setup_logging(cfg: ForecastConfig) -> None:
    logging.basicConfig(
        level=getattr(logging, cfg.log_level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(message)s",
    )


def _load_series(csv_path: Path, column: str) -> Series:
    df = pd.read_csv(csv_path)
    if column not in df.columns:
        raise typer.BadParameter(f"Column {column!r} not in {csv_path} (have {df.columns.tolist()})")
    return Series.from_pandas(df[column], name=column)


def _report(model: ForecastModel, horizon: int) -> None:
    model.summary(console)
    prediction = model.predict(horizon)
    console.print(columns_table("Prediction", [prediction]))


@app.command()
def ses(
    csv_path: Path = typer.Argument(..., exists=True, dir_okay=False),
    column: str = "y",
    alpha: Optional[float] = None,
    train_end: int = -3,
    test_size: Optional[int] = None,
    horizon: Optional[int] = None,
):
    """Fit simple exponential smoothing and print a forecast"""
    cfg = load_config(alpha=alpha, horizon=horizon, test_size=test_size)
    _setup_logging(cfg)

    try:
        model = SESModel(_load_series(csv_path, column))
        model.fit(cfg.alpha, cfg.train_range(train_end), error_options=cfg.error_options())
        _report(model, cfg.horizon)
    except ForecastError as e:
        logger.warning(f"SES failed: {e}")
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)


@app.command("holt-winters")
def holt_winters(
    csv_path: Path = typer.Argument(..., exists=True, dir_okay=False),
    column: str = "y",
    alpha: Optional[float] = None,
    beta: Optional[float] = None,
    gamma: Optional[float] = None,
    period: Optional[int] = None,
    metric: Optional[str] = None,
    train_end: int = -4,
    test_size: Optional[int] = None,
    horizon: Optional[int] = None,
):
    """Fit additive Holt-Winters and print a forecast"""
    cfg = load_config(
        alpha=alpha, beta=beta, gamma=gamma, period=period, metric=metric, horizon=horizon,
        test_size=test_size,
    )
    _setup_logging(cfg)

    try:
        model = HoltWintersModel(_load_series(csv_path, column))
        model.fit(
            cfg.alpha,
            cfg.beta,
            cfg.gamma,
            cfg.period,
            train_range=cfg.train_range(train_end),
            metric=cfg.metric_kind(),
            error_options=cfg.error_options(),
        )
        _report(model, cfg.horizon)
    except ForecastError as e:
        logger.warning(f"Holt-Winters failed: {e}")
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
