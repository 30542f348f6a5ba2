"""
Observation types consumed by indicators.

An observation is either a bare scalar price or a Candle (OHLCV bar).
Close-based indicators accept both; range and volume indicators need a
Candle because they read high/low/volume.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True, slots=True)
class Candle:
    """
    Single OHLCV bar.

    Immutable once produced. The engine does not validate timestamp ordering
    or price ranges; meaningful results from malformed data are the caller's
    responsibility.

    Attributes:
        timestamp: Bar open time in integer seconds.
        open: Open price.
        high: High price.
        low: Low price.
        close: Close price.
        volume: Traded volume.

    Example:
        >>> bar = Candle(timestamp=1618185600, open=100.0, high=105.0,
        ...              low=98.0, close=103.0, volume=1000.0)
        >>> bar.close
        103.0
    """

    timestamp: int
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    @classmethod
    def from_price(cls, price: float, timestamp: int = 0) -> Candle:
        """Flat bar where every price field equals `price` and volume is 0."""
        return cls(
            timestamp=timestamp,
            open=price,
            high=price,
            low=price,
            close=price,
            volume=0.0,
        )


Observation = Union[float, Candle]


def close_of(value: Observation) -> float:
    """Close price of an observation (the scalar itself for bare prices)."""
    if isinstance(value, Candle):
        return value.close
    return float(value)


def require_candle(value: Observation, indicator: str) -> Candle:
    """
    Return `value` as a Candle.

    Raises:
        TypeError: If `value` is not a Candle.
    """
    if isinstance(value, Candle):
        return value
    raise TypeError(
        f"{indicator} needs Candle input (high/low/close/volume), got "
        f"{type(value).__name__}\n"
        f"\n"
        f"Fix: {indicator}.update(Candle(timestamp=0, open=o, high=h, "
        f"low=l, close=c, volume=v))"
    )
