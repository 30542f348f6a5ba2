"""
Trend indicators: SMA, EMA and MACD.

All three accept bare prices or Candles (a Candle contributes its close).
"""

from __future__ import annotations

from dataclasses import dataclass, field

from streamta.errors import ConfigurationError, validate_period

from .accumulators import ExponentialSmoother, RollingSum
from .base import Indicator
from .candle import Observation, close_of


@dataclass
class SMA(Indicator):
    """
    Simple Moving Average with O(1) updates.

    Uses running sum technique:
        sma = (sum + new - evicted) / length

    Warm-up: `length` inputs.
    """

    length: int = 20
    _sum: RollingSum = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.length = validate_period(self.length)
        self._sum = RollingSum(self.length)

    @property
    def warmup_count(self) -> int:
        return self.length

    def _step(self, value: Observation) -> float | None:
        self._sum.push(close_of(value))
        return self._sum.mean

    def _reset_state(self) -> None:
        self._sum.reset()


@dataclass
class EMA(Indicator):
    """
    Exponential Moving Average with O(1) updates.

    Formula:
        alpha = 2 / (length + 1)
        ema[length-1] = mean(close[0:length])
        ema = alpha * close + (1 - alpha) * ema_prev

    Warm-up: `length` inputs; the first output is the plain mean.
    """

    length: int = 20
    _ema: ExponentialSmoother = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.length = validate_period(self.length)
        self._ema = ExponentialSmoother.ema(self.length)

    @property
    def warmup_count(self) -> int:
        return self.length

    def _step(self, value: Observation) -> float | None:
        return self._ema.push(close_of(value))

    def _reset_state(self) -> None:
        self._ema.reset()


@dataclass(frozen=True, slots=True)
class MacdResult:
    """One MACD output: line, signal line and histogram."""

    macd: float
    signal: float
    histogram: float


@dataclass
class MACD(Indicator):
    """
    Moving Average Convergence Divergence built from three EMAs.

    Components:
        macd_line = ema(close, fast) - ema(close, slow)
        signal = ema(macd_line, signal)
        histogram = macd_line - signal

    The line exists from input index slow - 1 (when the slow EMA seeds);
    the signal EMA is seeded with the mean of the first `signal` line values.

    Warm-up: slow + signal - 1 inputs.
    """

    fast: int = 12
    slow: int = 26
    signal: int = 9
    _fast_ema: ExponentialSmoother = field(init=False, repr=False)
    _slow_ema: ExponentialSmoother = field(init=False, repr=False)
    _signal_ema: ExponentialSmoother = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.fast = validate_period(self.fast, "fast")
        self.slow = validate_period(self.slow, "slow")
        self.signal = validate_period(self.signal, "signal")
        if self.fast >= self.slow:
            raise ConfigurationError(
                f"fast must be < slow, got fast={self.fast}, slow={self.slow}\n"
                f"\n"
                f"Fix: MACD(fast=12, slow=26, signal=9)",
                parameter="fast",
                value=self.fast,
            )
        self._fast_ema = ExponentialSmoother.ema(self.fast)
        self._slow_ema = ExponentialSmoother.ema(self.slow)
        self._signal_ema = ExponentialSmoother.ema(self.signal)

    @property
    def warmup_count(self) -> int:
        return self.slow + self.signal - 1

    def _step(self, value: Observation) -> MacdResult | None:
        close = close_of(value)
        fast = self._fast_ema.push(close)
        slow = self._slow_ema.push(close)
        if fast is None or slow is None:
            return None

        line = fast - slow
        signal = self._signal_ema.push(line)
        if signal is None:
            return None
        return MacdResult(macd=line, signal=signal, histogram=line - signal)

    def _reset_state(self) -> None:
        self._fast_ema.reset()
        self._slow_ema.reset()
        self._signal_ema.reset()
