"""
Base class for streaming-consistent indicators.

All indicators inherit from Indicator, which owns the lifecycle and the two
entry points:

    update(value) -> output | None    streaming, one observation at a time
    compute(data) -> list[output]     batch, over a full sequence

compute() is defined in terms of update(): it resets the instance and feeds
every observation through the same code path, so the batch result always
equals the non-None streaming results for the same sequence.

Lifecycle:
    EMPTY --update--> WARMING_UP --(warmup_count inputs)--> READY
    READY is terminal until reset() returns the instance to EMPTY.

Subclasses declare their parameters as dataclass fields, validate them in
__post_init__, and implement _step(), _reset_state() and warmup_count.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from streamta.errors import EmptyInputError, InsufficientDataError

from .candle import Observation


class IndicatorPhase(str, Enum):
    """Lifecycle phase of an indicator instance."""

    EMPTY = "empty"
    WARMING_UP = "warming_up"
    READY = "ready"


@dataclass
class Indicator(ABC):
    """
    Streaming indicator with a batch entry point.

    Configuration fields are fixed after construction. State is owned
    exclusively by the instance; separate instances share nothing and can be
    driven from different threads. A single instance is not thread-safe.
    """

    _count: int = field(default=0, init=False, repr=False)
    _value: Any = field(default=None, init=False, repr=False)

    @property
    @abstractmethod
    def warmup_count(self) -> int:
        """Number of inputs consumed before the first output (inclusive)."""
        ...

    @abstractmethod
    def _step(self, value: Observation) -> Any:
        """
        Advance state by one observation.

        Must return the output once `warmup_count` inputs have been seen,
        and may return None before that.
        """
        ...

    @abstractmethod
    def _reset_state(self) -> None:
        """Clear windows and accumulators; keep configuration."""
        ...

    @property
    def name(self) -> str:
        return type(self).__name__

    def update(self, value: Observation) -> Any:
        """
        Feed one observation.

        A NaN or infinite input is not filtered: it propagates into the
        running sums and smoothers and stays there until reset().

        Returns:
            None while warming up, then exactly one output per call.
        """
        result = self._step(value)
        self._count += 1
        if self._count < self.warmup_count:
            return None
        self._value = result
        return result

    def compute(self, data: Iterable[Observation]) -> list[Any]:
        """
        Batch computation over a full sequence.

        Resets the instance first, so repeated calls with the same input give
        identical output. The input is read, never modified. After the call the
        instance holds the state at the end of `data` and can keep streaming.

        Returns:
            len(data) - warmup_count + 1 outputs; output i corresponds to
            input index warmup_count - 1 + i.

        Raises:
            EmptyInputError: If data is empty.
            InsufficientDataError: If len(data) < warmup_count.
        """
        values = list(data)
        required = self.warmup_count
        if not values:
            raise EmptyInputError(self.name, required)
        if len(values) < required:
            raise InsufficientDataError(self.name, required, len(values))

        self.reset()
        outputs = []
        for value in values:
            result = self.update(value)
            if result is not None:
                outputs.append(result)
        return outputs

    def reset(self) -> None:
        """Return to EMPTY; configuration parameters survive."""
        self._count = 0
        self._value = None
        self._reset_state()

    @property
    def value(self) -> Any:
        """Latest output, or None before the instance is ready."""
        return self._value

    @property
    def is_ready(self) -> bool:
        return self._count >= self.warmup_count

    @property
    def phase(self) -> IndicatorPhase:
        if self._count == 0:
            return IndicatorPhase.EMPTY
        if self._count < self.warmup_count:
            return IndicatorPhase.WARMING_UP
        return IndicatorPhase.READY

    @property
    def observations(self) -> int:
        """Number of observations fed since construction or the last reset."""
        return self._count
