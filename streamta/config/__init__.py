"""
Configuration management.
"""

from .config import (
    Config,
    get_config,
    LogConfig,
    ParityConfig,
)

__all__ = [
    "Config",
    "get_config",
    "LogConfig",
    "ParityConfig",
]
