"""
Configuration loader for run profiles and environment variables.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, Optional
import yaml


class ConfigLoader:
    """Load and manage configuration from YAML files and environment."""

    CONFIG_DIR = Path(__file__).parent.parent / "configs"
    DEFAULT_PROFILE = "default"
    ENV_VAR = "QUAKESTATS_PROFILE"

    @classmethod
    def load_profile(cls, profile_name: str = DEFAULT_PROFILE, config_dir: Optional[Path] = None) -> Dict[str, Any]:
        """
        Load a run profile.

        Args:
            profile_name: Name of the profile (default, regional, ...)
            config_dir: Directory holding ``<profile>.yaml`` files (CONFIG_DIR if None)

        Returns:
            Dictionary with configuration values

        Raises:
            FileNotFoundError: If profile doesn't exist
        """
        config_dir = Path(config_dir) if config_dir is not None else cls.CONFIG_DIR
        profile_path = config_dir / f"{profile_name}.yaml"

        if not profile_path.exists():
            available = sorted(f.stem for f in config_dir.glob("*.yaml"))
            raise FileNotFoundError(
                f"Profile '{profile_name}' not found. Available profiles: {', '.join(available)}"
            )

        with open(profile_path, "r") as f:
            return yaml.safe_load(f) or {}

    @classmethod
    def get_profile_from_env(cls) -> Optional[str]:
        """Get profile name from QUAKESTATS_PROFILE environment variable."""
        return os.getenv(cls.ENV_VAR)

    @classmethod
    def load_default_or_env_profile(cls) -> Dict[str, Any]:
        """
        Load profile from environment variable or use the default profile.

        Returns:
            Configuration dictionary
        """
        profile = cls.get_profile_from_env() or cls.DEFAULT_PROFILE
        return cls.load_profile(profile)


@dataclass
class AggregationSettings:
    """Batch aggregation parameters from the ``aggregation`` profile section."""

    significance_threshold: float = 4.5
    max_concurrency: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "AggregationSettings":
        data = data or {}
        max_concurrency = data.get("max_concurrency")
        return cls(
            significance_threshold=float(data.get("significance_threshold", cls.significance_threshold)),
            max_concurrency=int(max_concurrency) if max_concurrency is not None else None,
        )


def get_config() -> Dict[str, Any]:
    """Convenience function to get current configuration."""
    return ConfigLoader.load_default_or_env_profile()
