"""
Tests for the bounded buffers behind the accumulators.

Validates that:
1. RollingWindow evicts exactly the oldest element once full
2. Logical indexing is oldest-first and supports negative indices
3. MonotonicDeque tracks sliding min/max and expires old indices
"""

import numpy as np
import pytest

from streamta.errors import ConfigurationError
from streamta.structures import MonotonicDeque, RollingWindow


class TestRollingWindow:
    """Fixed-capacity FIFO window."""

    def test_push_returns_none_while_filling(self):
        """No eviction until capacity is reached."""
        win = RollingWindow(capacity=3)
        assert [win.push(v) for v in (1.0, 2.0, 3.0)] == [None, None, None]
        assert win.is_full()
        assert len(win) == 3

    def test_push_evicts_oldest_once_full(self):
        """Each push past capacity hands back the oldest value."""
        win = RollingWindow(capacity=3)
        for v in (1.0, 2.0, 3.0):
            win.push(v)
        assert win.push(4.0) == 1.0
        assert win.push(5.0) == 2.0
        assert list(win) == [3.0, 4.0, 5.0]
        assert len(win) == 3

    def test_logical_indexing(self):
        """Index 0 is the oldest, -1 the newest."""
        win = RollingWindow(capacity=4)
        for v in (1.0, 2.0, 3.0, 4.0, 5.0, 6.0):
            win.push(v)
        assert win[0] == 3.0
        assert win[3] == 6.0
        assert win[-1] == 6.0
        assert win[-4] == 3.0
        assert win.oldest() == 3.0
        assert win.newest() == 6.0

    def test_index_out_of_range(self):
        win = RollingWindow(capacity=4)
        win.push(1.0)
        with pytest.raises(IndexError):
            win[1]
        with pytest.raises(IndexError):
            win[-2]

    def test_empty_window(self):
        win = RollingWindow(capacity=2)
        assert len(win) == 0
        assert not win.is_full()
        assert win.newest() is None
        assert win.oldest() is None
        assert win.to_array().size == 0

    def test_to_array_is_ordered_copy(self):
        """to_array() wraps correctly and does not alias the buffer."""
        win = RollingWindow(capacity=3)
        for v in (1.0, 2.0, 3.0, 4.0):
            win.push(v)
        arr = win.to_array()
        np.testing.assert_array_equal(arr, [2.0, 3.0, 4.0])
        arr[0] = 99.0
        assert win[0] == 2.0

    def test_clear_keeps_capacity(self):
        win = RollingWindow(capacity=2)
        win.push(1.0)
        win.push(2.0)
        win.clear()
        assert len(win) == 0
        assert win.capacity == 2
        assert win.push(7.0) is None
        assert list(win) == [7.0]

    def test_capacity_one(self):
        """A window of one evicts on every push after the first."""
        win = RollingWindow(capacity=1)
        assert win.push(1.0) is None
        assert win.push(2.0) == 1.0
        assert list(win) == [2.0]

    @pytest.mark.parametrize("capacity", [0, -3])
    def test_invalid_capacity(self, capacity):
        with pytest.raises(ConfigurationError) as exc_info:
            RollingWindow(capacity=capacity)
        assert exc_info.value.parameter == "capacity"


class TestMonotonicDeque:
    """Sliding window min/max."""

    def test_min_mode(self):
        dq = MonotonicDeque(window_size=3, mode="min")
        dq.push(0, 5.0)
        dq.push(1, 3.0)
        dq.push(2, 4.0)
        assert dq.get() == 3.0
        dq.push(3, 6.0)
        assert dq.get() == 3.0
        dq.push(4, 7.0)  # index 1 leaves the window
        assert dq.get() == 4.0

    def test_max_mode(self):
        dq = MonotonicDeque(window_size=2, mode="max")
        dq.push(0, 1.0)
        dq.push(1, 9.0)
        assert dq.get() == 9.0
        dq.push(2, 2.0)
        assert dq.get() == 9.0
        dq.push(3, 3.0)
        assert dq.get() == 3.0

    def test_matches_brute_force(self):
        """Sliding max equals max() over each window."""
        rng = np.random.default_rng(1)
        values = rng.normal(size=200).tolist()
        dq = MonotonicDeque(window_size=7, mode="max")
        for i, v in enumerate(values):
            dq.push(i, v)
            assert dq.get() == max(values[max(0, i - 6):i + 1])

    def test_clear(self):
        dq = MonotonicDeque(window_size=3, mode="max")
        dq.push(0, 1.0)
        dq.clear()
        assert dq.get() is None
        assert len(dq) == 0

    def test_invalid_arguments(self):
        with pytest.raises(ConfigurationError):
            MonotonicDeque(window_size=0, mode="min")
        with pytest.raises(ConfigurationError) as exc_info:
            MonotonicDeque(window_size=3, mode="median")
        assert exc_info.value.parameter == "mode"
