"""
Streaming vs vectorized parity audit.

Runs every catalogue indicator two ways over the same synthetic OHLCV series:
    streaming:   Indicator.compute() (one update() per bar)
    vectorized:  reference.compute_reference() (pandas rolling / ewm)
and reports the largest absolute difference per indicator. The two paths
share no accumulator code, so agreement is evidence that the O(1) state
machines compute the textbook formulas.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np
import pandas as pd
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from streamta.config import get_config
from streamta.indicators.factory import create_indicator, list_indicators, output_fields, requires_candles
from streamta.indicators.frame import candles_from_frame
from streamta.indicators.reference import compute_reference
from streamta.utils.logger import get_logger

logger = get_logger(__name__)


# (indicator_type, params) pairs checked by default; catalogue defaults
# plus short periods that exercise the seeding boundary
DEFAULT_CASES: list[tuple[str, dict[str, Any]]] = [
    *[(name, {}) for name in list_indicators()],
    ("ema", {"length": 1}),
    ("rsi", {"length": 2}),
    ("macd", {"fast": 3, "slow": 5, "signal": 2}),
    ("stoch", {"k": 5, "d": 1}),
    ("kc", {"ema_length": 5, "atr_length": 12, "scalar": 1.5}),
]


@dataclass
class IndicatorParityResult:
    """Result of comparing a single indicator."""

    indicator: str
    params: dict[str, Any]
    passed: bool
    max_abs_diff: float
    mean_abs_diff: float
    valid_comparisons: int
    warmup_bars: int
    outputs_checked: list[str] = field(default_factory=list)
    error_message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "indicator": self.indicator,
            "params": dict(self.params),
            "passed": self.passed,
            "max_abs_diff": self.max_abs_diff,
            "mean_abs_diff": self.mean_abs_diff,
            "valid_comparisons": self.valid_comparisons,
            "warmup_bars": self.warmup_bars,
            "outputs_checked": list(self.outputs_checked),
            "error_message": self.error_message,
        }


@dataclass
class ParityAuditResult:
    """Result of the complete parity audit."""

    success: bool
    total_indicators: int
    passed_indicators: int
    failed_indicators: int
    tolerance: float
    bars_tested: int
    seed: int
    results: list[IndicatorParityResult] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON serialization."""
        return {
            "success": self.success,
            "total_indicators": self.total_indicators,
            "passed_indicators": self.passed_indicators,
            "failed_indicators": self.failed_indicators,
            "tolerance": self.tolerance,
            "bars_tested": self.bars_tested,
            "seed": self.seed,
            "results": [r.to_dict() for r in self.results],
        }

    def print_summary(self, console: Console | None = None) -> None:
        """Print a human-readable summary table."""
        if console is None:
            console = Console()

        status = "[bold green]PASS[/]" if self.success else "[bold red]FAIL[/]"
        console.print()
        console.print(Panel(
            f"{status}  {self.passed_indicators}/{self.total_indicators} indicators match\n"
            f"[dim]Bars: {self.bars_tested}  Seed: {self.seed}  Tolerance: {self.tolerance:.1e}[/]",
            title="Streaming vs Vectorized Parity",
        ))

        table = Table(show_header=True, header_style="bold")
        table.add_column("Indicator", width=10)
        table.add_column("Params", width=28)
        table.add_column("Outputs", width=30)
        table.add_column("Warmup", justify="right", width=7)
        table.add_column("Compared", justify="right", width=9)
        table.add_column("Max diff", justify="right", width=10)
        table.add_column("Status", width=8)

        for r in self.results:
            table.add_row(
                r.indicator,
                ", ".join(f"{k}={v}" for k, v in r.params.items()) or "-",
                ", ".join(r.outputs_checked),
                str(r.warmup_bars),
                str(r.valid_comparisons),
                f"{r.max_abs_diff:.2e}",
                "[green]PASS[/]" if r.passed else "[red]FAIL[/]",
            )
        console.print(table)

        for r in self.results:
            if r.error_message:
                console.print(f"[red]{r.indicator}:[/] {r.error_message}")


def generate_synthetic_ohlcv(bars: int = 1000, seed: int = 42) -> pd.DataFrame:
    """
    Generate synthetic OHLCV data for testing.

    Creates a geometric random walk with:
    - Volatility-scaled high/low ranges (high >= close >= low)
    - Open at the previous close
    - Occasional flat bars (high == low) and zero-volume bars, so the
      zero-denominator policies are exercised
    """
    rng = np.random.default_rng(seed)

    returns = rng.standard_normal(bars) * 0.02
    close = 100 * np.exp(np.cumsum(returns))

    volatility = np.abs(returns) + 0.005
    high = close * (1 + volatility * rng.uniform(0.5, 1.5, bars))
    low = close * (1 - volatility * rng.uniform(0.5, 1.5, bars))
    high = np.maximum(high, close)
    low = np.minimum(low, close)

    open_prices = np.roll(close, 1)
    open_prices[0] = close[0]

    volume = np.abs(rng.standard_normal(bars)) * 1_000_000 + 500_000

    flat = rng.uniform(size=bars) < 0.02
    high[flat] = close[flat]
    low[flat] = close[flat]
    open_prices[flat] = close[flat]
    volume[rng.uniform(size=bars) < 0.02] = 0.0

    return pd.DataFrame({
        "timestamp": np.arange(bars, dtype=np.int64) * 60,
        "open": open_prices,
        "high": high,
        "low": low,
        "close": close,
        "volume": volume,
    })


def _compare_arrays(
    streaming: np.ndarray,
    vectorized: np.ndarray,
) -> tuple[float, float, int, str | None]:
    """
    Compare streaming outputs against the vectorized tail.

    Returns: (max_diff, mean_diff, valid_comparisons, error)
    """
    if len(streaming) != len(vectorized):
        return float("inf"), float("inf"), 0, (
            f"length mismatch: streaming={len(streaming)} vectorized={len(vectorized)}"
        )

    nan_mismatch = np.isnan(streaming) != np.isnan(vectorized)
    if nan_mismatch.any():
        first = int(np.flatnonzero(nan_mismatch)[0])
        return float("inf"), float("inf"), 0, f"NaN mismatch at output {first}"

    valid_mask = ~np.isnan(streaming)
    valid_count = int(valid_mask.sum())
    if valid_count == 0:
        return 0.0, 0.0, 0, None

    diffs = np.abs(streaming[valid_mask] - vectorized[valid_mask])
    return float(np.max(diffs)), float(np.mean(diffs)), valid_count, None


def audit_indicator(
    df: pd.DataFrame,
    indicator_type: str,
    params: dict[str, Any],
    tolerance: float,
) -> IndicatorParityResult:
    """Compare one indicator's streaming and vectorized outputs over `df`."""
    indicator = create_indicator(indicator_type, params)
    if requires_candles(indicator_type):
        observations = candles_from_frame(df)
    else:
        observations = df["close"].to_numpy(dtype=float).tolist()

    streamed = indicator.compute(observations)
    warmup = indicator.warmup_count
    reference = compute_reference(indicator_type, df, params).iloc[warmup - 1:]

    fields = output_fields(indicator_type)
    if fields:
        columns = {
            name: (np.array([getattr(out, name) for out in streamed], dtype=float),
                   reference[name].to_numpy(dtype=float))
            for name in fields
        }
    else:
        columns = {
            "value": (np.array(streamed, dtype=float), reference.to_numpy(dtype=float)),
        }

    max_diffs, mean_diffs, counts, errors = [], [], [], []
    for name, (streaming_values, vectorized_values) in columns.items():
        max_diff, mean_diff, count, error = _compare_arrays(streaming_values, vectorized_values)
        max_diffs.append(max_diff)
        mean_diffs.append(mean_diff)
        counts.append(count)
        if error:
            errors.append(f"{name}: {error}")

    max_abs_diff = max(max_diffs)
    return IndicatorParityResult(
        indicator=indicator.name,
        params=dict(params),
        passed=not errors and max_abs_diff <= tolerance,
        max_abs_diff=max_abs_diff,
        mean_abs_diff=float(np.mean(mean_diffs)),
        valid_comparisons=min(counts),
        warmup_bars=warmup,
        outputs_checked=list(columns),
        error_message="; ".join(errors) or None,
    )


def run_parity_audit(
    bars: int | None = None,
    tolerance: float | None = None,
    seed: int | None = None,
    cases: list[tuple[str, dict[str, Any]]] | None = None,
) -> ParityAuditResult:
    """
    Run the complete streaming vs vectorized parity audit.

    Args:
        bars: Number of synthetic bars (default: STREAMTA_PARITY_BARS)
        tolerance: Maximum allowed absolute difference (default: STREAMTA_PARITY_TOLERANCE)
        seed: Random seed for reproducibility (default: STREAMTA_PARITY_SEED)
        cases: (indicator_type, params) pairs to check (default: DEFAULT_CASES)

    Returns:
        ParityAuditResult with one entry per case
    """
    parity_config = get_config().parity
    bars = parity_config.bars if bars is None else bars
    tolerance = parity_config.tolerance if tolerance is None else tolerance
    seed = parity_config.seed if seed is None else seed
    cases = DEFAULT_CASES if cases is None else cases

    logger.info("Parity audit: %d cases over %d bars (seed=%d, tolerance=%.1e)",
                len(cases), bars, seed, tolerance)
    df = generate_synthetic_ohlcv(bars=bars, seed=seed)

    results = []
    for indicator_type, params in cases:
        try:
            result = audit_indicator(df, indicator_type, params, tolerance)
        except Exception as e:
            logger.exception("Parity audit of %s%s raised", indicator_type, params)
            result = IndicatorParityResult(
                indicator=indicator_type,
                params=dict(params),
                passed=False,
                max_abs_diff=float("inf"),
                mean_abs_diff=float("inf"),
                valid_comparisons=0,
                warmup_bars=0,
                error_message=f"{type(e).__name__}: {e}",
            )
        if not result.passed:
            logger.warning("Parity FAIL %s %s: max_diff=%.3e %s", result.indicator,
                           result.params, result.max_abs_diff, result.error_message or "")
        results.append(result)

    passed_count = sum(1 for r in results if r.passed)
    failed_count = len(results) - passed_count
    logger.info("Parity audit finished: %d/%d passed", passed_count, len(results))

    return ParityAuditResult(
        success=(failed_count == 0),
        total_indicators=len(results),
        passed_indicators=passed_count,
        failed_indicators=failed_count,
        tolerance=tolerance,
        bars_tested=bars,
        seed=seed,
        results=results,
    )
