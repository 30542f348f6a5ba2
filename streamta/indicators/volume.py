"""
Volume accumulators: OBV, Accumulation/Distribution Line, Chaikin Money Flow
and Volume Rate of Change. All need Candle input.

Money-flow multiplier:
    mfm = ((close - low) - (high - close)) / (high - low)
        = (2 * close - high - low) / (high - low)
A bar with high == low has no intrabar range and contributes mfm = 0.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from streamta.errors import validate_period
from streamta.structures.primitives import RollingWindow

from .accumulators import RollingSum
from .base import Indicator
from .candle import Candle, Observation, require_candle


def money_flow_volume(bar: Candle) -> float:
    """Money-flow multiplier times volume; 0 for a zero-range bar."""
    span = bar.high - bar.low
    if span == 0.0:
        return 0.0
    return (2.0 * bar.close - bar.high - bar.low) / span * bar.volume


@dataclass
class OBV(Indicator):
    """
    On-Balance Volume.

    The first candle sets the baseline (output 0). Afterwards volume is added
    on an up close, subtracted on a down close, and ignored on an equal close.
    """

    _prev_close: float | None = field(default=None, init=False, repr=False)
    _obv: float = field(default=0.0, init=False, repr=False)

    @property
    def warmup_count(self) -> int:
        return 1

    def _step(self, value: Observation) -> float:
        bar = require_candle(value, self.name)
        if self._prev_close is not None:
            if bar.close > self._prev_close:
                self._obv += bar.volume
            elif bar.close < self._prev_close:
                self._obv -= bar.volume
        self._prev_close = bar.close
        return self._obv

    def _reset_state(self) -> None:
        self._prev_close = None
        self._obv = 0.0


@dataclass
class ADL(Indicator):
    """Accumulation/Distribution Line: cumulative money-flow volume."""

    _adl: float = field(default=0.0, init=False, repr=False)

    @property
    def warmup_count(self) -> int:
        return 1

    def _step(self, value: Observation) -> float:
        self._adl += money_flow_volume(require_candle(value, self.name))
        return self._adl

    def _reset_state(self) -> None:
        self._adl = 0.0


@dataclass
class CMF(Indicator):
    """
    Chaikin Money Flow.

    Formula:
        cmf = sum(mfv over length) / sum(volume over length)

    A window with zero total volume yields 0. Warm-up: `length` candles.
    """

    length: int = 20
    _mfv_sum: RollingSum = field(init=False, repr=False)
    _volume_sum: RollingSum = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.length = validate_period(self.length)
        self._mfv_sum = RollingSum(self.length)
        self._volume_sum = RollingSum(self.length)

    @property
    def warmup_count(self) -> int:
        return self.length

    def _step(self, value: Observation) -> float | None:
        bar = require_candle(value, self.name)
        self._mfv_sum.push(money_flow_volume(bar))
        self._volume_sum.push(bar.volume)
        if not self._volume_sum.is_full:
            return None
        total_volume = self._volume_sum.total
        if total_volume == 0.0:
            return 0.0
        return self._mfv_sum.total / total_volume

    def _reset_state(self) -> None:
        self._mfv_sum.reset()
        self._volume_sum.reset()


@dataclass
class VROC(Indicator):
    """
    Volume Rate of Change.

    Formula:
        vroc = (volume - volume[length]) / volume[length] * 100

    A zero reference volume yields 0. Warm-up: length + 1 candles.
    """

    length: int = 14
    _volumes: RollingWindow = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.length = validate_period(self.length)
        self._volumes = RollingWindow(self.length + 1)

    @property
    def warmup_count(self) -> int:
        return self.length + 1

    def _step(self, value: Observation) -> float | None:
        bar = require_candle(value, self.name)
        self._volumes.push(bar.volume)
        if not self._volumes.is_full():
            return None
        past = self._volumes.oldest()
        if past == 0.0:
            return 0.0
        return (bar.volume - past) / past * 100.0

    def _reset_state(self) -> None:
        self._volumes.clear()
