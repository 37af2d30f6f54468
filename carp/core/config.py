"""
Configuration loading following kkb_fastapi pattern.

Each environment has its own TOML file under ``carp/config``.
"""
import logging
import os
import tomllib
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Any

from carp.utils.constants import DEFAULT_BASELINE_FACTOR_G_PER_KM, ConfigFile

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"

__all__ = [
    "Config",
    "ConfigFile",
    "get_baseline_factor_from_config",
    "get_config",
    "get_environment_config",
]


class Config:
    """Parsed configuration file."""

    def __init__(self, config_file: str, data: dict[str, Any]):
        self.config_file = config_file
        self.data = data

    def __repr__(self):
        return f"<Config: {self.config_file}>"


@lru_cache
def get_config(config_file: str) -> Config:
    """
    Load configuration from a TOML file.

    Args:
        config_file: Configuration file name (e.g., "development.toml")

    Returns:
        Config instance holding the parsed data
    """
    path = CONFIG_DIR / config_file
    with open(path, "rb") as f:
        data = tomllib.load(f)
    logger.debug(f"Loaded configuration from {path}")
    return Config(config_file, data)


def get_environment_config() -> Config:
    """Get the configuration of the environment named by $ENVIRONMENT."""
    env = os.getenv("ENVIRONMENT", "development")
    return get_config(f"{env}.toml")


def get_baseline_factor_from_config() -> Decimal:
    """
    Get the savings baseline factor (g CO2/km) for the current environment.

    Returns:
        Decimal: baseline factor from config, defaults to the average gasoline car
    """
    try:
        config = get_environment_config()
        value = config.data.get("emissions", {}).get(
            "baseline_factor_g_per_km", DEFAULT_BASELINE_FACTOR_G_PER_KM
        )
        return Decimal(str(value))
    except Exception as e:
        logger.warning(
            f"Failed to read baseline_factor_g_per_km from config: {e}. "
            f"Using default {DEFAULT_BASELINE_FACTOR_G_PER_KM}"
        )
        return DEFAULT_BASELINE_FACTOR_G_PER_KM
