"""
Volatility indicators: Bollinger Bands, rolling standard deviation, ATR and
Keltner Channels.

Standard deviation is the POPULATION form (divisor = window length). Tools
that default to the sample form (ddof=1) will report wider bands for the
same window; pass their output through sqrt(n / (n - 1)) to compare.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from streamta.errors import validate_period, validate_positive

from .accumulators import ExponentialSmoother, RollingSum, RollingVariance, TrueRange
from .base import Indicator
from .candle import Observation, close_of, require_candle


@dataclass(frozen=True, slots=True)
class BandsResult:
    """
    One band output (Bollinger or Keltner).

    bandwidth = (upper - lower) / middle, defined as 0 when middle is 0.
    """

    middle: float
    upper: float
    lower: float
    bandwidth: float

    @classmethod
    def around(cls, middle: float, half_width: float) -> BandsResult:
        upper = middle + half_width
        lower = middle - half_width
        bandwidth = (upper - lower) / middle if middle != 0.0 else 0.0
        return cls(middle=middle, upper=upper, lower=lower, bandwidth=bandwidth)


@dataclass
class BollingerBands(Indicator):
    """
    Bollinger Bands with O(1) updates.

    Output:
        middle = sma(close, length)
        upper = middle + std_dev * sigma
        lower = middle - std_dev * sigma

    sigma is the population standard deviation of the same window, kept by a
    windowed Welford accumulator. The middle band comes from the plain running
    sum so it matches SMA(length) exactly.

    Warm-up: `length` inputs.
    """

    length: int = 20
    std_dev: float = 2.0
    _sum: RollingSum = field(init=False, repr=False)
    _variance: RollingVariance = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.length = validate_period(self.length)
        self.std_dev = validate_positive(self.std_dev, "std_dev")
        self._sum = RollingSum(self.length)
        self._variance = RollingVariance(self.length)

    @property
    def warmup_count(self) -> int:
        return self.length

    def _step(self, value: Observation) -> BandsResult | None:
        close = close_of(value)
        self._sum.push(close)
        self._variance.push(close)
        middle = self._sum.mean
        if middle is None:
            return None
        return BandsResult.around(middle, self.std_dev * self._variance.std)

    def _reset_state(self) -> None:
        self._sum.reset()
        self._variance.reset()


@dataclass
class StandardDeviation(Indicator):
    """Rolling population standard deviation. Warm-up: `length` inputs."""

    length: int = 20
    _variance: RollingVariance = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.length = validate_period(self.length)
        self._variance = RollingVariance(self.length)

    @property
    def warmup_count(self) -> int:
        return self.length

    def _step(self, value: Observation) -> float | None:
        self._variance.push(close_of(value))
        if not self._variance.is_full:
            return None
        return self._variance.std

    def _reset_state(self) -> None:
        self._variance.reset()


@dataclass
class ATR(Indicator):
    """
    Average True Range with O(1) updates.

    Uses Wilder's smoothing:
        tr = max(high-low, |high-prev_close|, |low-prev_close|)
        atr[length-1] = mean(tr[0:length])     (tr[0] = high - low)
        atr = alpha * tr + (1 - alpha) * atr_prev,  alpha = 1/length

    Warm-up: `length` candles.
    """

    length: int = 14
    _tr: TrueRange = field(init=False, repr=False)
    _atr: ExponentialSmoother = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.length = validate_period(self.length)
        self._tr = TrueRange()
        self._atr = ExponentialSmoother.wilder(self.length)

    @property
    def warmup_count(self) -> int:
        return self.length

    def _step(self, value: Observation) -> float | None:
        bar = require_candle(value, self.name)
        return self._atr.push(self._tr.push(bar.high, bar.low, bar.close))

    def _reset_state(self) -> None:
        self._tr.reset()
        self._atr.reset()


@dataclass
class KeltnerChannels(Indicator):
    """
    Keltner Channels: EMA basis with ATR-scaled bands.

    Formula:
        middle = ema(close, ema_period)
        upper = middle + multiplier * atr(atr_period)
        lower = middle - multiplier * atr(atr_period)

    The ATR is Wilder-smoothed exactly as in ATR. Warm-up:
    max(ema_period, atr_period) candles.
    """

    ema_period: int = 20
    atr_period: int = 10
    multiplier: float = 2.0
    _ema: ExponentialSmoother = field(init=False, repr=False)
    _atr: ATR = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.ema_period = validate_period(self.ema_period, "ema_period")
        self.atr_period = validate_period(self.atr_period, "atr_period")
        self.multiplier = validate_positive(self.multiplier, "multiplier")
        self._ema = ExponentialSmoother.ema(self.ema_period)
        self._atr = ATR(length=self.atr_period)

    @property
    def warmup_count(self) -> int:
        return max(self.ema_period, self.atr_period)

    def _step(self, value: Observation) -> BandsResult | None:
        bar = require_candle(value, self.name)
        middle = self._ema.push(bar.close)
        atr = self._atr.update(bar)
        if middle is None or atr is None:
            return None
        return BandsResult.around(middle, self.multiplier * atr)

    def _reset_state(self) -> None:
        self._ema.reset()
        self._atr.reset()
