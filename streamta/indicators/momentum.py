"""
Momentum indicators: RSI, Stochastic Oscillator and Williams %R.

RSI accepts bare prices or Candles; the range-based oscillators need Candles.

Numeric edge-case policies (outputs, not errors):
- RSI with zero average loss is 100.
- Stochastic %K and Williams %R over a zero high/low range are 0.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from streamta.errors import validate_period

from .accumulators import GainLossSmoother, RangeTracker, RollingSum, rsi_from_averages
from .base import Indicator
from .candle import Observation, close_of, require_candle


@dataclass
class RSI(Indicator):
    """
    Relative Strength Index with O(1) updates.

    Uses Wilder smoothing (alpha = 1/length) of gains and losses:
        avg_gain[seed] = mean(gain over first `length` deltas)
        avg_gain = alpha * gain + (1 - alpha) * avg_gain_prev
        (same for avg_loss)
        rsi = 100 - 100 / (1 + avg_gain / avg_loss)

    Warm-up: length + 1 inputs (the first input only provides a delta base).
    """

    length: int = 14
    _smoother: GainLossSmoother = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.length = validate_period(self.length)
        self._smoother = GainLossSmoother(self.length)

    @property
    def warmup_count(self) -> int:
        return self.length + 1

    def _step(self, value: Observation) -> float | None:
        averages = self._smoother.push(close_of(value))
        if averages is None:
            return None
        return rsi_from_averages(*averages)

    def _reset_state(self) -> None:
        self._smoother.reset()


@dataclass(frozen=True, slots=True)
class StochasticResult:
    """One Stochastic output: fast %K and its %D average."""

    k: float
    d: float


@dataclass
class StochasticOscillator(Indicator):
    """
    Stochastic Oscillator with O(1) amortized updates.

    Formula:
        lowest_low = min(low over k_period)
        highest_high = max(high over k_period)
        %K = (close - lowest_low) / (highest_high - lowest_low) * 100
        %D = sma(%K, d_period)

    Warm-up: k_period + d_period - 1 candles.
    """

    k_period: int = 14
    d_period: int = 3
    _range: RangeTracker = field(init=False, repr=False)
    _k_sum: RollingSum = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.k_period = validate_period(self.k_period, "k_period")
        self.d_period = validate_period(self.d_period, "d_period")
        self._range = RangeTracker(self.k_period)
        self._k_sum = RollingSum(self.d_period)

    @property
    def warmup_count(self) -> int:
        return self.k_period + self.d_period - 1

    def _step(self, value: Observation) -> StochasticResult | None:
        bar = require_candle(value, self.name)
        self._range.push(bar.high, bar.low)
        if not self._range.is_full:
            return None

        k = self._range.position(bar.close)
        self._k_sum.push(k)
        d = self._k_sum.mean
        if d is None:
            return None
        return StochasticResult(k=k, d=d)

    def _reset_state(self) -> None:
        self._range.reset()
        self._k_sum.reset()


@dataclass
class WilliamsR(Indicator):
    """
    Williams %R with O(1) amortized updates.

    Formula:
        %R = (highest_high - close) / (highest_high - lowest_low) * -100

    Ranges over [-100, 0]. Warm-up: `length` candles.
    """

    length: int = 14
    _range: RangeTracker = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.length = validate_period(self.length)
        self._range = RangeTracker(self.length)

    @property
    def warmup_count(self) -> int:
        return self.length

    def _step(self, value: Observation) -> float | None:
        bar = require_candle(value, self.name)
        self._range.push(bar.high, bar.low)
        if not self._range.is_full:
            return None

        highest = self._range.highest
        lowest = self._range.lowest
        span = highest - lowest
        if span == 0.0:
            return 0.0
        return (highest - bar.close) / span * -100.0

    def _reset_state(self) -> None:
        self._range.reset()
