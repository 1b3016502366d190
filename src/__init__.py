"""
Exponential smoothing forecasting library

Modules:
- forecast: Range resolution, accuracy metrics, SES and Holt-Winters models,
  configuration and Typer CLI
"""
