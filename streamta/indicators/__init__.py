"""
Indicator Module: streaming-consistent technical indicators.

Every indicator exposes two entry points over one code path:
    update(value)  - streaming, one observation at a time, O(1)
    compute(data)  - batch over a full sequence (resets, then replays update)

Components:
- base: Indicator lifecycle (EMPTY -> WARMING_UP -> READY)
- candle: Candle observation type
- accumulators: running sums, seeded exponential smoothers, range/variance trackers
- trend / momentum / volatility / volume: the catalogue
- factory: create_indicator() from a type string and params
- spec: IndicatorSpec declarative definitions (YAML loadable)
- frame: apply_indicators() over pandas DataFrames
- reference: vectorized pandas implementations for auditing

Usage:
    from streamta.indicators import EMA, create_indicator, IndicatorSpec

    ema = EMA(length=5)
    for price in prices:
        value = ema.update(price)   # None until 5 prices seen

    rsi = create_indicator("rsi", {"length": 14})
    values = rsi.compute(prices)    # len(prices) - 14 outputs

    spec = IndicatorSpec(
        indicator_type="bbands",
        output_key="bb",            # publishes bb_middle, bb_upper, ...
        params={"length": 20, "std": 2.0},
    )
"""

from .candle import Candle, Observation, close_of
from .base import Indicator, IndicatorPhase
from .trend import EMA, MACD, SMA, MacdResult
from .momentum import RSI, StochasticOscillator, StochasticResult, WilliamsR
from .volatility import ATR, BandsResult, BollingerBands, KeltnerChannels, StandardDeviation
from .volume import ADL, CMF, OBV, VROC
from .factory import (
    IndicatorKind,
    create_indicator,
    list_indicators,
    output_fields,
    parse_kind,
    requires_candles,
)
from .spec import IndicatorSpec, load_indicator_specs, parse_indicator_specs
from .frame import apply_indicators, candles_from_frame

__all__ = [
    # Observations
    "Candle",
    "Observation",
    "close_of",
    # Lifecycle
    "Indicator",
    "IndicatorPhase",
    # Catalogue
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
    # Factory
    "IndicatorKind",
    "create_indicator",
    "list_indicators",
    "output_fields",
    "parse_kind",
    "requires_candles",
    # Specs
    "IndicatorSpec",
    "load_indicator_specs",
    "parse_indicator_specs",
    # DataFrame
    "apply_indicators",
    "candles_from_frame",
]
