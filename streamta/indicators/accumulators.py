"""
Numeric accumulators: the minimal sufficient statistics behind each indicator.

Each accumulator owns its state, is updated one observation at a time in
O(1) (amortized for range tracking), and never rescans history:

- RollingSum: windowed running sum (SMA, CMF)
- ExponentialSmoother: EMA / Wilder recurrence seeded with the period mean
- GainLossSmoother: Wilder-smoothed average gain and loss (RSI)
- RangeTracker: sliding highest high / lowest low (Stochastic, Williams %R)
- RollingVariance: windowed Welford mean and M2 (Bollinger, StdDev)
- TrueRange: per-bar range including the gap from the previous close (ATR)

Seeding rule (shared by every exponential accumulator):
    seed = mean(first `period` inputs)
    state = alpha * x + (1 - alpha) * state     for every later input

Seeding with the first raw observation instead is a different indicator and
breaks batch/streaming agreement with any reference that uses the mean seed.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from streamta.errors import validate_period
from streamta.structures.primitives import MonotonicDeque, RollingWindow


def ema_alpha(period: int) -> float:
    """Standard EMA smoothing factor 2 / (period + 1)."""
    return 2.0 / (period + 1)


def wilder_alpha(period: int) -> float:
    """Wilder (RMA) smoothing factor 1 / period."""
    return 1.0 / period


@dataclass
class RollingSum:
    """
    Running sum over the last `period` values.

    sum += new - evicted on every push once the window is full.
    """

    period: int
    _window: RollingWindow = field(init=False, repr=False)
    _sum: float = field(default=0.0, init=False)

    def __post_init__(self) -> None:
        self.period = validate_period(self.period, "period")
        self._window = RollingWindow(self.period)

    def push(self, value: float) -> None:
        evicted = self._window.push(value)
        self._sum += value
        if evicted is not None:
            self._sum -= evicted

    @property
    def total(self) -> float:
        return self._sum

    @property
    def mean(self) -> float | None:
        """Window mean once full, else None."""
        if not self._window.is_full():
            return None
        return self._sum / self.period

    @property
    def is_full(self) -> bool:
        return self._window.is_full()

    @property
    def window(self) -> RollingWindow:
        return self._window

    def reset(self) -> None:
        self._window.clear()
        self._sum = 0.0


@dataclass
class ExponentialSmoother:
    """
    Exponential recurrence with a period-mean seed.

    No window is kept: during warm-up only the sum of the first `period`
    inputs is tracked, then the state is a single float.

    Attributes:
        period: Number of inputs averaged into the seed.
        alpha: Smoothing factor in (0, 1]; use ema_alpha() or wilder_alpha().
    """

    period: int
    alpha: float
    _state: float | None = field(default=None, init=False)
    _count: int = field(default=0, init=False)
    _seed_sum: float = field(default=0.0, init=False)

    def __post_init__(self) -> None:
        self.period = validate_period(self.period, "period")

    @classmethod
    def ema(cls, period: int) -> ExponentialSmoother:
        return cls(period=period, alpha=ema_alpha(validate_period(period, "period")))

    @classmethod
    def wilder(cls, period: int) -> ExponentialSmoother:
        return cls(period=period, alpha=wilder_alpha(validate_period(period, "period")))

    def push(self, value: float) -> float | None:
        """Feed one input; returns the smoothed value once seeded."""
        self._count += 1
        if self._count <= self.period:
            self._seed_sum += value
            if self._count == self.period:
                self._state = self._seed_sum / self.period
            return self._state
        self._state = self.alpha * value + (1.0 - self.alpha) * self._state
        return self._state

    @property
    def value(self) -> float | None:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is not None

    def reset(self) -> None:
        self._state = None
        self._count = 0
        self._seed_sum = 0.0


def rsi_from_averages(avg_gain: float, avg_loss: float) -> float:
    """
    RSI = 100 - 100 / (1 + avg_gain / avg_loss).

    avg_loss == 0 means no downside in the smoothing horizon and is defined
    as 100 (this includes the flat case where avg_gain is also 0).
    """
    if avg_loss == 0.0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100.0 - 100.0 / (1.0 + rs)


@dataclass
class GainLossSmoother:
    """
    Wilder-smoothed average gain and average loss of successive deltas.

    The first input only establishes the previous price. Both smoothers are
    seeded from the mean gain/loss over the first `period` deltas, so the
    first result appears on input `period + 1`.
    """

    period: int
    _gain: ExponentialSmoother = field(init=False, repr=False)
    _loss: ExponentialSmoother = field(init=False, repr=False)
    _prev: float | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        self.period = validate_period(self.period, "period")
        self._gain = ExponentialSmoother.wilder(self.period)
        self._loss = ExponentialSmoother.wilder(self.period)

    def push(self, price: float) -> tuple[float, float] | None:
        """Feed one price; returns (avg_gain, avg_loss) once seeded."""
        if self._prev is None:
            self._prev = price
            return None
        change = price - self._prev
        self._prev = price
        avg_gain = self._gain.push(max(0.0, change))
        avg_loss = self._loss.push(max(0.0, -change))
        if avg_gain is None or avg_loss is None:
            return None
        return avg_gain, avg_loss

    def reset(self) -> None:
        self._gain.reset()
        self._loss.reset()
        self._prev = None


@dataclass
class RangeTracker:
    """
    Highest high and lowest low over the last `period` bars.

    Backed by two monotonic deques, so each push is O(1) amortized.
    """

    period: int
    _max_high: MonotonicDeque = field(init=False, repr=False)
    _min_low: MonotonicDeque = field(init=False, repr=False)
    _idx: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        self.period = validate_period(self.period, "period")
        self._max_high = MonotonicDeque(window_size=self.period, mode="max")
        self._min_low = MonotonicDeque(window_size=self.period, mode="min")

    def push(self, high: float, low: float) -> None:
        self._max_high.push(self._idx, high)
        self._min_low.push(self._idx, low)
        self._idx += 1

    @property
    def is_full(self) -> bool:
        return self._idx >= self.period

    @property
    def highest(self) -> float | None:
        return self._max_high.get()

    @property
    def lowest(self) -> float | None:
        return self._min_low.get()

    def position(self, close: float) -> float:
        """
        Where `close` sits in the range, as a 0..100 percentage.

        A zero range carries no directional information and yields 0.
        """
        highest = self._max_high.get()
        lowest = self._min_low.get()
        if highest is None or lowest is None:
            return 0.0
        span = highest - lowest
        if span == 0.0:
            return 0.0
        return 100.0 * (close - lowest) / span

    def reset(self) -> None:
        self._max_high.clear()
        self._min_low.clear()
        self._idx = 0


@dataclass
class RollingVariance:
    """
    Windowed mean and population variance with O(1) insert/evict.

    Welford's update generalized to a sliding window:
        growing:  mean' = mean + (x - mean) / n
                  M2'   = M2 + (x - mean) * (x - mean')
        sliding:  mean' = mean + (x - y) / n          (y = evicted)
                  M2'   = M2 + (x - y) * (x - mean' + y - mean)

    Population variance (divisor = window length, not length - 1).
    Round-off can push M2 slightly below zero; it is clamped.
    """

    period: int
    _window: RollingWindow = field(init=False, repr=False)
    _mean: float = field(default=0.0, init=False)
    _m2: float = field(default=0.0, init=False)

    def __post_init__(self) -> None:
        self.period = validate_period(self.period, "period")
        self._window = RollingWindow(self.period)

    def push(self, value: float) -> None:
        evicted = self._window.push(value)
        if evicted is None:
            n = len(self._window)
            delta = value - self._mean
            self._mean += delta / n
            self._m2 += delta * (value - self._mean)
        else:
            old_mean = self._mean
            self._mean += (value - evicted) / self.period
            self._m2 += (value - evicted) * (value - self._mean + evicted - old_mean)
        if self._m2 < 0.0:
            self._m2 = 0.0

    @property
    def is_full(self) -> bool:
        return self._window.is_full()

    @property
    def mean(self) -> float | None:
        if len(self._window) == 0:
            return None
        return self._mean

    @property
    def variance(self) -> float | None:
        """Population variance of the current window contents."""
        n = len(self._window)
        if n == 0:
            return None
        return self._m2 / n

    @property
    def std(self) -> float | None:
        variance = self.variance
        if variance is None:
            return None
        return math.sqrt(variance)

    def reset(self) -> None:
        self._window.clear()
        self._mean = 0.0
        self._m2 = 0.0


@dataclass
class TrueRange:
    """
    True Range of successive bars.

    TR = max(high - low, |high - prev_close|, |low - prev_close|).
    The first bar has no previous close and uses high - low only.
    """

    _prev_close: float | None = field(default=None, init=False)

    def push(self, high: float, low: float, close: float) -> float:
        high_low = high - low
        if self._prev_close is None:
            tr = high_low
        else:
            tr = max(
                high_low,
                abs(high - self._prev_close),
                abs(low - self._prev_close),
            )
        self._prev_close = close
        return tr

    def reset(self) -> None:
        self._prev_close = None
