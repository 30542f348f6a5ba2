"""
Fixed-capacity numeric structures behind the indicator accumulators.

Primitives (from primitives.py):
    RollingWindow    - Ring buffer of the last N floats, O(1) push/evict
    MonotonicDeque   - O(1) amortized sliding window min/max
"""

from .primitives import MonotonicDeque, RollingWindow

__all__ = [
    "MonotonicDeque",
    "RollingWindow",
]
