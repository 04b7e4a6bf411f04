"""
Configuration Package

Settings classes for the datalayer package and its loguru logging setup.
"""

from .settings import BaseConfig, get_settings
from .loguru_config import get_logger, setup_logging

__all__ = [
    "BaseConfig",
    "get_settings",
    "get_logger",
    "setup_logging",
]
