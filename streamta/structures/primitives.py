"""
Incremental state primitives for O(1) hot-loop operations.

Provides the bounded buffers every streaming indicator is built on:
- RollingWindow: Fixed-capacity FIFO window that hands back the evicted value
- MonotonicDeque: O(1) amortized sliding window min/max

Performance Contract:
- RollingWindow.push(): O(1), returns the evicted value once full
- RollingWindow.__getitem__(): O(1)
- MonotonicDeque.push(): O(1) amortized
- MonotonicDeque.get(): O(1)

Memory for both is bounded by the window size for the lifetime of the
instance; nothing retains history beyond it.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator
from typing import Literal

import numpy as np

from streamta.errors import ConfigurationError


class RollingWindow:
    """
    Fixed-capacity circular window over the most recent observations.

    Elements are accessed by index where 0 is the oldest element
    and len-1 is the most recently pushed element. Once the window is
    full, every push evicts exactly one element (the oldest) and returns
    it, so callers maintaining aggregates can subtract its contribution.

    Example:
        >>> win = RollingWindow(capacity=3)
        >>> win.push(1.0), win.push(2.0), win.push(3.0)
        (None, None, None)
        >>> win.is_full()
        True
        >>> win.push(4.0)  # evicts 1.0
        1.0
        >>> list(win)
        [2.0, 3.0, 4.0]

    Attributes:
        capacity: Maximum number of elements the window can hold.
    """

    __slots__ = ("capacity", "_buffer", "_head", "_count")

    def __init__(self, capacity: int) -> None:
        """
        Initialize window with fixed capacity.

        Args:
            capacity: Maximum number of elements (must be >= 1).

        Raises:
            ConfigurationError: If capacity < 1.
        """
        if capacity < 1:
            raise ConfigurationError(
                f"capacity must be >= 1, got {capacity}\n"
                f"\n"
                f"Fix: RollingWindow(capacity=20)",
                parameter="capacity",
                value=capacity,
            )
        self.capacity = capacity
        self._buffer = np.full(capacity, np.nan, dtype=np.float64)
        self._head = 0  # Next write position
        self._count = 0  # Number of elements stored

    def push(self, value: float) -> float | None:
        """
        Append a value, evicting the oldest if the window is full.

        Args:
            value: Value to add.

        Returns:
            The evicted value, or None while the window is still filling.
        """
        evicted: float | None = None
        if self._count == self.capacity:
            # The oldest element sits at the write position when full
            evicted = float(self._buffer[self._head])
        else:
            self._count += 1
        self._buffer[self._head] = value
        self._head = (self._head + 1) % self.capacity
        return evicted

    def __getitem__(self, idx: int) -> float:
        """
        Get element by logical index (0 = oldest, count-1 = newest).

        Negative indices count from the newest element.

        Raises:
            IndexError: If idx is out of range.
        """
        if idx < 0:
            idx += self._count
        if idx < 0 or idx >= self._count:
            raise IndexError(
                f"Index {idx} out of range [0, {self._count})\n"
                f"\n"
                f"Window has {self._count} elements."
            )
        physical = (self._head - self._count + idx) % self.capacity
        return float(self._buffer[physical])

    def __iter__(self) -> Iterator[float]:
        """Iterate from oldest to newest."""
        for i in range(self._count):
            physical = (self._head - self._count + i) % self.capacity
            yield float(self._buffer[physical])

    def __len__(self) -> int:
        return self._count

    def is_full(self) -> bool:
        """True once the window holds exactly `capacity` elements."""
        return self._count == self.capacity

    def newest(self) -> float | None:
        """Most recently pushed value, or None when empty."""
        if self._count == 0:
            return None
        return float(self._buffer[(self._head - 1) % self.capacity])

    def oldest(self) -> float | None:
        """Oldest retained value, or None when empty."""
        if self._count == 0:
            return None
        return float(self._buffer[(self._head - self._count) % self.capacity])

    def clear(self) -> None:
        """Drop all contents; capacity is unchanged."""
        self._buffer.fill(np.nan)
        self._head = 0
        self._count = 0

    def to_array(self) -> np.ndarray:
        """
        Return a copy of the window contents in logical order.

        Returns:
            numpy array with oldest element first, newest last.
            Length equals current count (not capacity).
        """
        if self._count == 0:
            return np.array([], dtype=np.float64)
        start = (self._head - self._count) % self.capacity
        return np.roll(self._buffer, -start)[: self._count].copy()


class MonotonicDeque:
    """
    O(1) amortized sliding window min or max.

    Maintains a monotonic invariant so the front element is always
    the min (or max) within the current window.

    Algorithm:
    - MIN mode: deque values increase (front = smallest)
    - MAX mode: deque values decrease (front = largest)

    Each element is pushed at most once and popped at most once,
    giving O(1) amortized cost per push.

    Example:
        >>> dq = MonotonicDeque(window_size=3, mode="min")
        >>> dq.push(0, 5.0)
        >>> dq.push(1, 3.0)
        >>> dq.push(2, 4.0)
        >>> dq.get()
        3.0
        >>> dq.push(3, 2.0)
        >>> dq.get()
        2.0
    """

    __slots__ = ("window_size", "mode", "_deque")

    def __init__(self, window_size: int, mode: Literal["min", "max"]) -> None:
        """
        Initialize monotonic deque.

        Args:
            window_size: Size of the sliding window (must be >= 1).
            mode: "min" to track minimum, "max" to track maximum.

        Raises:
            ConfigurationError: If window_size < 1 or mode is invalid.
        """
        if window_size < 1:
            raise ConfigurationError(
                f"window_size must be >= 1, got {window_size}\n"
                f"\n"
                f"Fix: MonotonicDeque(window_size=20, mode='min')",
                parameter="window_size",
                value=window_size,
            )
        if mode not in ("min", "max"):
            raise ConfigurationError(
                f"mode must be 'min' or 'max', got '{mode}'\n"
                f"\n"
                f"Fix: MonotonicDeque(window_size=20, mode='min')",
                parameter="mode",
                value=mode,
            )
        self.window_size = window_size
        self.mode = mode
        self._deque: deque[tuple[int, float]] = deque()

    def push(self, idx: int, value: float) -> None:
        """
        Add a value to the window at the given index.

        The index must be monotonically increasing across calls.
        Elements outside the window are evicted automatically.
        """
        while self._deque and self._deque[0][0] <= idx - self.window_size:
            self._deque.popleft()

        if self.mode == "min":
            while self._deque and self._deque[-1][1] >= value:
                self._deque.pop()
        else:
            while self._deque and self._deque[-1][1] <= value:
                self._deque.pop()

        self._deque.append((idx, value))

    def get(self) -> float | None:
        """Current min or max, or None if the window is empty."""
        if not self._deque:
            return None
        return self._deque[0][1]

    def __len__(self) -> int:
        return len(self._deque)

    def clear(self) -> None:
        self._deque.clear()
