"""
DataFrame application of indicator specs.

Each spec is streamed over the frame's rows with a fresh indicator, so the
columns written here are exactly the values update() produces live. Warm-up
rows are NaN; a frame shorter than the warm-up yields an all-NaN column
instead of an error.

The engine uses only values available at or before the current row (no
look-ahead).
"""

from __future__ import annotations

import numpy as np
import pandas as pd

from streamta.utils.logger import get_logger

from .candle import Candle
from .spec import IndicatorSpec, validate_unique_keys

logger = get_logger(__name__)

OHLCV_COLUMNS = ("open", "high", "low", "close", "volume")


def _require_columns(df: pd.DataFrame, columns: tuple[str, ...]) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ValueError(
            f"DataFrame missing columns {missing} (has {list(df.columns)})\n"
            f"\n"
            f"Fix: df.rename(columns={{'Close': 'close', ...}}) so that "
            f"{list(columns)} are present"
        )


def _require_finite(df: pd.DataFrame, columns: tuple[str, ...]) -> None:
    # One NaN would stay in every running sum and smoother from that row on
    bad = [c for c in columns if not np.isfinite(df[c].to_numpy(dtype=float)).all()]
    if bad:
        raise ValueError(
            f"Columns {bad} contain NaN or infinite values\n"
            f"\n"
            f"Fix: df = df.dropna(subset={bad}) or fill the gaps "
            f"(e.g. df[{bad[0]!r}] = df[{bad[0]!r}].ffill()) before applying indicators"
        )


def _timestamps(df: pd.DataFrame) -> list[int]:
    """Integer-second timestamps from a `timestamp` column, else row positions."""
    if "timestamp" not in df.columns:
        return list(range(len(df)))
    ts = df["timestamp"]
    if pd.api.types.is_datetime64_any_dtype(ts):
        return [int(t.timestamp()) for t in ts]
    return [int(t) for t in ts]


def candles_from_frame(df: pd.DataFrame) -> list[Candle]:
    """
    Convert OHLCV rows to Candles.

    Raises:
        ValueError: If any of open/high/low/close/volume is missing.
    """
    _require_columns(df, OHLCV_COLUMNS)
    return [
        Candle(
            timestamp=ts,
            open=float(o),
            high=float(h),
            low=float(l),
            close=float(c),
            volume=float(v),
        )
        for ts, o, h, l, c, v in zip(
            _timestamps(df),
            df["open"].to_numpy(dtype=float),
            df["high"].to_numpy(dtype=float),
            df["low"].to_numpy(dtype=float),
            df["close"].to_numpy(dtype=float),
            df["volume"].to_numpy(dtype=float),
        )
    ]


def apply_indicators(df: pd.DataFrame, specs: list[IndicatorSpec]) -> pd.DataFrame:
    """
    Add one column per published key of each spec.

    The input frame is not modified; a copy with the new columns is returned,
    index-aligned with the input.

    Raises:
        ValueError: If required columns are missing, hold NaN or infinite
            values, or output keys collide with each other or with existing
            columns.
    """
    validate_unique_keys(specs)
    clashes = [k for spec in specs for k in spec.output_keys_list if k in df.columns]
    if clashes:
        raise ValueError(
            f"Output keys already present as columns: {clashes}\n"
            f"\n"
            f"Fix: choose output_key values that are not existing column names"
        )

    result = df.copy()
    if not specs:
        return result

    _require_columns(df, ("close",))
    _require_finite(df, ("close",))
    closes = df["close"].to_numpy(dtype=float).tolist()
    candles = None
    if any(spec.requires_candles for spec in specs):
        candles = candles_from_frame(df)
        _require_finite(df, OHLCV_COLUMNS)

    for spec in specs:
        indicator = spec.build()
        observations = candles if spec.requires_candles else closes
        outputs = [indicator.update(obs) for obs in observations]

        if spec.is_multi_output:
            for name in spec.fields:
                result[spec.get_output_key(name)] = np.array(
                    [np.nan if out is None else getattr(out, name) for out in outputs],
                    dtype=float,
                )
        else:
            result[spec.output_key] = np.array(
                [np.nan if out is None else out for out in outputs],
                dtype=float,
            )

        logger.debug(
            "Applied %s as '%s' (warmup=%d, rows=%d)",
            spec.indicator_type, spec.output_key, indicator.warmup_count, len(df),
        )

    logger.info("Applied %d indicators to %d rows", len(specs), len(df))
    return result
