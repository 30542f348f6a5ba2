"""
Factory and catalogue for streaming indicators.

The catalogue is closed: IndicatorKind enumerates every supported indicator,
and create_indicator() instantiates one from a type string and a parameter
dict. Unknown types and unknown parameter keys are configuration errors.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Any

from streamta.errors import ConfigurationError
from streamta.utils.logger import get_logger

from .base import Indicator
from .momentum import RSI, StochasticOscillator, WilliamsR
from .trend import EMA, MACD, SMA
from .volatility import ATR, BollingerBands, KeltnerChannels, StandardDeviation
from .volume import ADL, CMF, OBV, VROC

logger = get_logger(__name__)


class IndicatorKind(str, Enum):
    """Every indicator the engine can build."""

    SMA = "sma"
    EMA = "ema"
    MACD = "macd"
    RSI = "rsi"
    STOCH = "stoch"
    WILLR = "willr"
    BBANDS = "bbands"
    STDDEV = "stddev"
    ATR = "atr"
    KC = "kc"
    OBV = "obv"
    ADL = "adl"
    CMF = "cmf"
    VROC = "vroc"


# Indicators that read high/low/volume and therefore need Candle input
CANDLE_ONLY: frozenset[IndicatorKind] = frozenset({
    IndicatorKind.STOCH,
    IndicatorKind.WILLR,
    IndicatorKind.ATR,
    IndicatorKind.KC,
    IndicatorKind.OBV,
    IndicatorKind.ADL,
    IndicatorKind.CMF,
    IndicatorKind.VROC,
})

# Field names of record outputs; single-output indicators are absent
OUTPUT_FIELDS: dict[IndicatorKind, tuple[str, ...]] = {
    IndicatorKind.MACD: ("macd", "signal", "histogram"),
    IndicatorKind.STOCH: ("k", "d"),
    IndicatorKind.BBANDS: ("middle", "upper", "lower", "bandwidth"),
    IndicatorKind.KC: ("middle", "upper", "lower", "bandwidth"),
}


_VALID_PARAMS: dict[IndicatorKind, frozenset[str]] = {
    IndicatorKind.SMA: frozenset({"length"}),
    IndicatorKind.EMA: frozenset({"length"}),
    IndicatorKind.MACD: frozenset({"fast", "slow", "signal"}),
    IndicatorKind.RSI: frozenset({"length"}),
    IndicatorKind.STOCH: frozenset({"k", "d"}),
    IndicatorKind.WILLR: frozenset({"length"}),
    IndicatorKind.BBANDS: frozenset({"length", "std"}),
    IndicatorKind.STDDEV: frozenset({"length"}),
    IndicatorKind.ATR: frozenset({"length"}),
    IndicatorKind.KC: frozenset({"ema_length", "atr_length", "scalar"}),
    IndicatorKind.OBV: frozenset(),
    IndicatorKind.ADL: frozenset(),
    IndicatorKind.CMF: frozenset({"length"}),
    IndicatorKind.VROC: frozenset({"length"}),
}


_FACTORY: dict[IndicatorKind, Callable[[dict[str, Any]], Indicator]] = {
    IndicatorKind.SMA: lambda p: SMA(length=p.get("length", 20)),
    IndicatorKind.EMA: lambda p: EMA(length=p.get("length", 20)),
    IndicatorKind.MACD: lambda p: MACD(fast=p.get("fast", 12), slow=p.get("slow", 26), signal=p.get("signal", 9)),
    IndicatorKind.RSI: lambda p: RSI(length=p.get("length", 14)),
    IndicatorKind.STOCH: lambda p: StochasticOscillator(k_period=p.get("k", 14), d_period=p.get("d", 3)),
    IndicatorKind.WILLR: lambda p: WilliamsR(length=p.get("length", 14)),
    IndicatorKind.BBANDS: lambda p: BollingerBands(length=p.get("length", 20), std_dev=p.get("std", 2.0)),
    IndicatorKind.STDDEV: lambda p: StandardDeviation(length=p.get("length", 20)),
    IndicatorKind.ATR: lambda p: ATR(length=p.get("length", 14)),
    IndicatorKind.KC: lambda p: KeltnerChannels(ema_period=p.get("ema_length", 20), atr_period=p.get("atr_length", 10), multiplier=p.get("scalar", 2.0)),
    IndicatorKind.OBV: lambda _: OBV(),
    IndicatorKind.ADL: lambda _: ADL(),
    IndicatorKind.CMF: lambda p: CMF(length=p.get("length", 20)),
    IndicatorKind.VROC: lambda p: VROC(length=p.get("length", 14)),
}


def parse_kind(indicator_type: str | IndicatorKind) -> IndicatorKind:
    """
    Resolve a type string (case-insensitive) to an IndicatorKind.

    Raises:
        ConfigurationError: If the type is not in the catalogue.
    """
    if isinstance(indicator_type, IndicatorKind):
        return indicator_type
    try:
        return IndicatorKind(str(indicator_type).strip().lower())
    except ValueError:
        raise ConfigurationError(
            f"Unknown indicator type '{indicator_type}'. "
            f"Valid: {list_indicators()}\n"
            f"\n"
            f"Fix: create_indicator('ema', {{'length': 20}})",
            parameter="indicator_type",
            value=indicator_type,
        ) from None


def _validate_params(kind: IndicatorKind, params: dict[str, Any]) -> None:
    """Raise ConfigurationError if params contains unknown keys for this indicator."""
    valid = _VALID_PARAMS[kind]
    unknown = set(params.keys()) - valid
    if unknown:
        raise ConfigurationError(
            f"Unknown params for '{kind.value}': {sorted(unknown)}. "
            f"Valid: {sorted(valid)}",
            parameter=sorted(unknown)[0],
            value=params[sorted(unknown)[0]],
        )


def create_indicator(
    indicator_type: str | IndicatorKind,
    params: dict[str, Any] | None = None,
) -> Indicator:
    """
    Create an indicator from type and params.

    Missing params take the catalogue defaults.

    Raises:
        ConfigurationError: If the type is unknown, params contains unknown
            keys, or a parameter value is out of range.
    """
    params = dict(params or {})
    kind = parse_kind(indicator_type)
    _validate_params(kind, params)
    indicator = _FACTORY[kind](params)
    logger.debug("Created %s from params=%s", indicator, params)
    return indicator


def list_indicators() -> list[str]:
    """Type strings of every supported indicator."""
    return [kind.value for kind in IndicatorKind]


def requires_candles(indicator_type: str | IndicatorKind) -> bool:
    """True if the indicator reads high/low/volume and needs Candle input."""
    return parse_kind(indicator_type) in CANDLE_ONLY


def output_fields(indicator_type: str | IndicatorKind) -> tuple[str, ...]:
    """Record field names for multi-output indicators, () for scalar ones."""
    return OUTPUT_FIELDS.get(parse_kind(indicator_type), ())
