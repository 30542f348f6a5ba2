"""
streamta - Streaming-consistent technical indicators

Every indicator produces identical values whether it is fed one observation
at a time (update) or a whole series at once (compute), using O(1) state per
update. Includes a pandas DataFrame front end, declarative YAML specs and a
parity audit against vectorized pandas implementations.
"""

import logging

__version__ = "1.0.0"

from .errors import (
    ConfigurationError,
    EmptyInputError,
    IndicatorError,
    InsufficientDataError,
)
from .indicators import (
    ADL,
    ATR,
    CMF,
    EMA,
    MACD,
    OBV,
    RSI,
    SMA,
    VROC,
    BandsResult,
    BollingerBands,
    Candle,
    Indicator,
    IndicatorKind,
    IndicatorPhase,
    IndicatorSpec,
    KeltnerChannels,
    MacdResult,
    StandardDeviation,
    StochasticOscillator,
    StochasticResult,
    WilliamsR,
    apply_indicators,
    create_indicator,
    list_indicators,
    load_indicator_specs,
)
from .config import get_config
from .utils import get_logger, setup_logger

# Library default: silent until the application calls setup_logger()
logging.getLogger("streamta").addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    "ConfigurationError",
    "EmptyInputError",
    "IndicatorError",
    "InsufficientDataError",
    "Candle",
    "Indicator",
    "IndicatorPhase",
    "IndicatorKind",
    "IndicatorSpec",
    "SMA",
    "EMA",
    "MACD",
    "MacdResult",
    "RSI",
    "StochasticOscillator",
    "StochasticResult",
    "WilliamsR",
    "BollingerBands",
    "BandsResult",
    "StandardDeviation",
    "ATR",
    "KeltnerChannels",
    "OBV",
    "ADL",
    "CMF",
    "VROC",
    "apply_indicators",
    "create_indicator",
    "list_indicators",
    "load_indicator_specs",
    "get_config",
    "get_logger",
    "setup_logger",
]
