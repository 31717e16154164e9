"""Test package for quakestats.

This package contains:
- Unit tests (test_spatial.py, test_stats.py, test_temporal.py, test_events.py,
  test_telemetry.py, test_config.py)
- Integration tests (test_integration.py)
- Shared fixtures (conftest.py)
"""
