"""
Configuration management for the indicator engine.
Loads settings from environment variables with sensible defaults.

Indicator parameters are NOT configured here: they are constructor
arguments, validated eagerly by each indicator. This module only covers
the ambient concerns around the engine (logging and the parity audit).
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class LogConfig:
    """Logging configuration."""
    level: str = "INFO"
    log_dir: str = "logs"
    log_to_file: bool = False


@dataclass
class ParityConfig:
    """
    Defaults for the streaming vs vectorized parity audit.

    tolerance: Maximum absolute difference accepted per output value.
    bars: Number of synthetic bars generated for the audit.
    seed: RNG seed for the synthetic series.
    """
    tolerance: float = 1e-9
    bars: int = 1000
    seed: int = 42

    def __post_init__(self):
        if not self.tolerance > 0:
            raise ValueError(
                f"STREAMTA_PARITY_TOLERANCE must be positive, got {self.tolerance}"
            )
        if self.bars < 2:
            raise ValueError(
                f"STREAMTA_PARITY_BARS must be >= 2, got {self.bars}"
            )


class Config:
    """
    Central configuration manager.

    Loads configuration from environment variables (after reading a .env
    file if present) and provides typed access to all settings.
    """

    _instance: Optional['Config'] = None

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, env_file: str = ".env"):
        if self._initialized:
            return

        env_path = Path(env_file)
        if env_path.exists():
            load_dotenv(env_path, override=False)

        self.log = self._load_log_config()
        self.parity = self._load_parity_config()

        self._initialized = True

    def _load_log_config(self) -> LogConfig:
        """Load logging configuration from environment."""
        return LogConfig(
            level=os.getenv("STREAMTA_LOG_LEVEL", "INFO").upper(),
            log_dir=os.getenv("STREAMTA_LOG_DIR", "logs"),
            log_to_file=_env_bool("STREAMTA_LOG_TO_FILE", "false"),
        )

    def _load_parity_config(self) -> ParityConfig:
        """Load parity audit defaults from environment."""
        try:
            return ParityConfig(
                tolerance=float(os.getenv("STREAMTA_PARITY_TOLERANCE", "1e-9")),
                bars=int(os.getenv("STREAMTA_PARITY_BARS", "1000")),
                seed=int(os.getenv("STREAMTA_PARITY_SEED", "42")),
            )
        except ValueError as e:
            raise ValueError(f"Invalid parity configuration: {e}") from e

    @classmethod
    def reload(cls, env_file: str = ".env") -> 'Config':
        """Drop the cached instance and re-read the environment."""
        cls._instance = None
        return cls(env_file)


def get_config(env_file: str = ".env") -> Config:
    """Get or create the global config instance."""
    return Config(env_file)
