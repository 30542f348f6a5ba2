"""
Vectorized reference implementations (pandas/numpy).

An independent batch path over whole columns, used to audit the streaming
indicators. It shares no state or accumulator code with them: windows come
from pandas rolling(), exponential smoothing from ewm(adjust=False).

Conventions (identical to the streaming engine):
- Every exponential average is seeded with the mean of its first `period`
  valid inputs; earlier positions are NaN.
- Standard deviation is the population form (ddof=0).
- Zero-denominator cases resolve to the same values as the streaming
  policies (RSI 100, range oscillators 0, money flow 0, bandwidth 0).

Every function returns values index-aligned with its input, NaN during
warm-up (the streaming `compute` output equals the non-NaN tail).
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import numpy as np
import pandas as pd

from .accumulators import ema_alpha, wilder_alpha
from .factory import IndicatorKind, parse_kind


def seeded_ewm(series: pd.Series, period: int, alpha: float) -> pd.Series:
    """
    Exponential recurrence seeded with the mean of the first `period` valid values.

    Leading NaNs (e.g. from diff() or an upstream warm-up) are skipped.
    """
    values = series.astype(float).copy()
    valid = np.flatnonzero(values.notna().to_numpy())
    if len(valid) < period:
        return pd.Series(np.nan, index=series.index)

    first = valid[0]
    seed_pos = first + period - 1
    seed = values.iloc[first:seed_pos + 1].mean()
    values.iloc[:seed_pos] = np.nan
    values.iloc[seed_pos] = seed
    return values.ewm(alpha=alpha, adjust=False).mean()


def true_range(high: pd.Series, low: pd.Series, close: pd.Series) -> pd.Series:
    """True range; the first bar uses high - low."""
    prev_close = close.shift(1)
    tr = pd.concat(
        [high - low, (high - prev_close).abs(), (low - prev_close).abs()],
        axis=1,
    ).max(axis=1)
    if len(tr):
        tr.iloc[0] = high.iloc[0] - low.iloc[0]
    return tr


def _money_flow_volume(df: pd.DataFrame) -> pd.Series:
    span = df["high"] - df["low"]
    mfv = (2.0 * df["close"] - df["high"] - df["low"]) / span * df["volume"]
    return mfv.where(span != 0, 0.0)


def sma(close: pd.Series, length: int = 20) -> pd.Series:
    return close.rolling(length).mean()


def ema(close: pd.Series, length: int = 20) -> pd.Series:
    return seeded_ewm(close, length, ema_alpha(length))


def macd(close: pd.Series, fast: int = 12, slow: int = 26, signal: int = 9) -> pd.DataFrame:
    line = ema(close, fast) - ema(close, slow)
    signal_line = seeded_ewm(line, signal, ema_alpha(signal))
    return pd.DataFrame({
        "macd": line.where(signal_line.notna()),
        "signal": signal_line,
        "histogram": line - signal_line,
    })


def rsi(close: pd.Series, length: int = 14) -> pd.Series:
    delta = close.diff()
    avg_gain = seeded_ewm(delta.clip(lower=0.0), length, wilder_alpha(length))
    avg_loss = seeded_ewm((-delta).clip(lower=0.0), length, wilder_alpha(length))
    result = 100.0 - 100.0 / (1.0 + avg_gain / avg_loss)
    return result.where(avg_loss != 0, 100.0).where(avg_loss.notna())


def stoch(df: pd.DataFrame, k: int = 14, d: int = 3) -> pd.DataFrame:
    lowest = df["low"].rolling(k).min()
    highest = df["high"].rolling(k).max()
    span = highest - lowest
    pct_k = (100.0 * (df["close"] - lowest) / span).where(span != 0, 0.0).where(span.notna())
    pct_d = pct_k.rolling(d).mean()
    return pd.DataFrame({"k": pct_k.where(pct_d.notna()), "d": pct_d})


def willr(df: pd.DataFrame, length: int = 14) -> pd.Series:
    lowest = df["low"].rolling(length).min()
    highest = df["high"].rolling(length).max()
    span = highest - lowest
    return ((highest - df["close"]) / span * -100.0).where(span != 0, 0.0).where(span.notna())


def _bands(middle: pd.Series, half_width: pd.Series) -> pd.DataFrame:
    upper = middle + half_width
    lower = middle - half_width
    bandwidth = ((upper - lower) / middle).where(middle != 0, 0.0).where(middle.notna())
    return pd.DataFrame({
        "middle": middle,
        "upper": upper,
        "lower": lower,
        "bandwidth": bandwidth,
    })


def bbands(close: pd.Series, length: int = 20, std: float = 2.0) -> pd.DataFrame:
    middle = close.rolling(length).mean()
    sigma = close.rolling(length).std(ddof=0)
    return _bands(middle, std * sigma)


def stddev(close: pd.Series, length: int = 20) -> pd.Series:
    return close.rolling(length).std(ddof=0)


def atr(df: pd.DataFrame, length: int = 14) -> pd.Series:
    tr = true_range(df["high"], df["low"], df["close"])
    return seeded_ewm(tr, length, wilder_alpha(length))


def kc(df: pd.DataFrame, ema_length: int = 20, atr_length: int = 10, scalar: float = 2.0) -> pd.DataFrame:
    middle = ema(df["close"], ema_length)
    width = atr(df, atr_length)
    both = middle.notna() & width.notna()
    return _bands(middle.where(both), (scalar * width).where(both))


def obv(df: pd.DataFrame) -> pd.Series:
    direction = np.sign(df["close"].diff()).fillna(0.0)
    return (direction * df["volume"]).cumsum()


def adl(df: pd.DataFrame) -> pd.Series:
    return _money_flow_volume(df).cumsum()


def cmf(df: pd.DataFrame, length: int = 20) -> pd.Series:
    mfv_sum = _money_flow_volume(df).rolling(length).sum()
    volume_sum = df["volume"].rolling(length).sum()
    return (mfv_sum / volume_sum).where(volume_sum != 0, 0.0).where(volume_sum.notna())


def vroc(df: pd.DataFrame, length: int = 14) -> pd.Series:
    past = df["volume"].shift(length)
    return ((df["volume"] - past) / past * 100.0).where(past != 0, 0.0).where(past.notna())


_REFERENCE: dict[IndicatorKind, Callable[[pd.DataFrame, dict[str, Any]], pd.Series | pd.DataFrame]] = {
    IndicatorKind.SMA: lambda df, p: sma(df["close"], **p),
    IndicatorKind.EMA: lambda df, p: ema(df["close"], **p),
    IndicatorKind.MACD: lambda df, p: macd(df["close"], **p),
    IndicatorKind.RSI: lambda df, p: rsi(df["close"], **p),
    IndicatorKind.STOCH: lambda df, p: stoch(df, **p),
    IndicatorKind.WILLR: lambda df, p: willr(df, **p),
    IndicatorKind.BBANDS: lambda df, p: bbands(df["close"], **p),
    IndicatorKind.STDDEV: lambda df, p: stddev(df["close"], **p),
    IndicatorKind.ATR: lambda df, p: atr(df, **p),
    IndicatorKind.KC: lambda df, p: kc(df, **p),
    IndicatorKind.OBV: lambda df, p: obv(df),
    IndicatorKind.ADL: lambda df, p: adl(df),
    IndicatorKind.CMF: lambda df, p: cmf(df, **p),
    IndicatorKind.VROC: lambda df, p: vroc(df, **p),
}


def compute_reference(
    indicator_type: str | IndicatorKind,
    df: pd.DataFrame,
    params: dict[str, Any] | None = None,
) -> pd.Series | pd.DataFrame:
    """
    Vectorized value of one catalogue indicator over an OHLCV frame.

    params use the same keys as create_indicator(). Multi-output indicators
    return a DataFrame with one column per record field.
    """
    kind = parse_kind(indicator_type)
    return _REFERENCE[kind](df, dict(params or {}))
