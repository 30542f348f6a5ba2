"""
Shared fixtures for the indicator test suite.
"""

import logging

import pytest

from streamta.audit.parity import generate_synthetic_ohlcv
from streamta.config import Config
from streamta.indicators import Candle, candles_from_frame
from streamta.utils.logger import ROOT_LOGGER_NAME


def make_candle(high: float, low: float, close: float, volume: float = 0.0,
                open: float | None = None, timestamp: int = 0) -> Candle:
    """Candle from the fields a test cares about; open defaults to close."""
    return Candle(
        timestamp=timestamp,
        open=close if open is None else open,
        high=high,
        low=low,
        close=close,
        volume=volume,
    )


@pytest.fixture
def candle():
    """Factory fixture: candle(high, low, close, volume=0.0, ...)."""
    return make_candle


@pytest.fixture
def ramp_prices() -> list[float]:
    """Ten strictly rising prices: 10.0 .. 19.0."""
    return [float(p) for p in range(10, 20)]


@pytest.fixture
def hlc_bars() -> list[Candle]:
    """Four bars with widening highs, used for range and ATR scenarios."""
    return [
        make_candle(high=10.0, low=8.0, close=9.0, timestamp=0),
        make_candle(high=11.0, low=9.0, close=10.0, timestamp=60),
        make_candle(high=12.0, low=9.0, close=11.0, timestamp=120),
        make_candle(high=13.0, low=12.0, close=12.5, timestamp=180),
    ]


@pytest.fixture(scope="session")
def ohlcv_frame():
    """300 bars of seeded synthetic OHLCV (includes flat and zero-volume bars)."""
    return generate_synthetic_ohlcv(bars=300, seed=7)


@pytest.fixture(scope="session")
def ohlcv_candles(ohlcv_frame) -> list[Candle]:
    return candles_from_frame(ohlcv_frame)


@pytest.fixture(scope="session")
def ohlcv_closes(ohlcv_frame) -> list[float]:
    return ohlcv_frame["close"].tolist()


@pytest.fixture
def fresh_config(monkeypatch, tmp_path):
    """
    Isolated Config singleton.

    Runs from an empty directory (no stray .env) with all STREAMTA_* variables
    cleared; the cached instance is dropped before and after the test.
    """
    monkeypatch.chdir(tmp_path)
    for name in (
        "STREAMTA_LOG_LEVEL",
        "STREAMTA_LOG_DIR",
        "STREAMTA_LOG_TO_FILE",
        "STREAMTA_PARITY_TOLERANCE",
        "STREAMTA_PARITY_BARS",
        "STREAMTA_PARITY_SEED",
    ):
        # setenv records the prior state, so teardown also clears values a .env loaded
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    Config._instance = None
    yield
    Config._instance = None


@pytest.fixture
def clean_root_logger():
    """Restore the package logger's handlers and flags after the test."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield logger
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)
    logger.propagate = propagate
