"""Configuration utilities."""

from .config_loader import AggregationSettings, ConfigLoader, get_config

__all__ = [
    "AggregationSettings",
    "ConfigLoader",
    "get_config",
]
