"""
Test Suite

- forecast/test_ranges.py — range resolution
- forecast/test_metrics.py — accuracy metrics (fail-loud invalid handling)
- forecast/test_series.py — series storage, locking, cancellation
- forecast/test_ses.py — simple exponential smoothing
- forecast/test_holt_winters.py — Holt-Winters initialization and recursion
- forecast/test_config_cli.py — configuration and CLI
"""
