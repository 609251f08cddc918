"""
Streaming mean and standard deviation over a sliding window.

StreamStats keeps a running count, sum and sum of squares so that adding or
evicting a sample is O(1). The caller owns the window: every value passed to
`evict` must be one that was previously passed to `add` and not yet evicted.
"""

import math


class StreamStats:
    """
    O(1) add/evict accumulator for the mean and population standard deviation.

    Uses the plain sum/sum-of-squares formulation so that eviction is the exact
    inverse of addition. The variance is clamped at zero to absorb cancellation
    error.
    """

    def __init__(self) -> None:
        self._count = 0
        self._sum = 0.0
        self._sum_sq = 0.0

    @property
    def count(self) -> int:
        return self._count

    def add(self, value: float) -> None:
        self._count += 1
        self._sum += value
        self._sum_sq += value * value

    def evict(self, value: float) -> None:
        self._count -= 1
        self._sum -= value
        self._sum_sq -= value * value

    def get_mean(self) -> float:
        """Mean of the values in the window, 0.0 when the window is empty."""
        if self._count == 0:
            return 0.0
        return self._sum / self._count

    def get_std(self) -> float:
        """Population standard deviation, 0.0 when the window is empty."""
        if self._count == 0:
            return 0.0
        mean = self._sum / self._count
        return math.sqrt(max(0.0, self._sum_sq / self._count - mean * mean))

    def __repr__(self) -> str:
        return (
            f"StreamStats(count={self._count}, mean={self.get_mean():.3f}, "
            f"std={self.get_std():.3f})"
        )
