"""Incremental sample statistics for Monte Carlo estimators."""

from __future__ import annotations

from collections.abc import Iterable

import numpy as np

from .exceptions import ValidationError

__all__ = ["Statistics"]


class Statistics:
    """Running mean / variance accumulator.

    Samples are folded in one at a time (Welford) or a batch at a time; two
    accumulators can be merged with :meth:`combine` using the pairwise update
    of Chan, Golub & LeVeque (1979)::

        n    = n_a + n_b
        d    = mean_b - mean_a
        mean = mean_a + d * n_b / n
        M2   = M2_a + M2_b + d^2 * n_a * n_b / n

    The sample count never decreases except through :meth:`reset`.
    """

    __slots__ = ("_count", "_mean", "_m2", "_min", "_max")

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self._count = 0
        self._mean = 0.0
        self._m2 = 0.0
        self._min = np.inf
        self._max = -np.inf

    def __repr__(self) -> str:
        return f"Statistics(samples={self._count}, mean={self._mean:.6g})"

    # ------------------------------------------------------------------
    # accumulation
    # ------------------------------------------------------------------

    def add(self, value: float) -> None:
        """Add a single sample."""
        value = float(value)
        if not np.isfinite(value):
            raise ValidationError(f"cannot accumulate non-finite sample {value}")
        self._count += 1
        delta = value - self._mean
        self._mean += delta / self._count
        self._m2 += delta * (value - self._mean)
        self._min = min(self._min, value)
        self._max = max(self._max, value)

    def add_sequence(self, values: Iterable[float] | np.ndarray) -> None:
        """Add a batch of samples (two-pass within the batch, merged with Chan)."""
        arr = np.asarray(values if isinstance(values, np.ndarray) else list(values), dtype=float)
        if arr.size == 0:
            return
        if not np.all(np.isfinite(arr)):
            raise ValidationError("cannot accumulate non-finite samples")
        batch = Statistics()
        batch._count = int(arr.size)
        batch._mean = float(np.mean(arr))
        batch._m2 = float(np.sum((arr - batch._mean) ** 2))
        batch._min = float(np.min(arr))
        batch._max = float(np.max(arr))
        self.merge(batch)

    def merge(self, other: "Statistics") -> None:
        """Fold ``other`` into this accumulator in place."""
        if other._count == 0:
            return
        if self._count == 0:
            self._count = other._count
            self._mean = other._mean
            self._m2 = other._m2
            self._min = other._min
            self._max = other._max
            return
        n = self._count + other._count
        delta = other._mean - self._mean
        self._mean += delta * other._count / n
        self._m2 += other._m2 + delta * delta * self._count * other._count / n
        self._count = n
        self._min = min(self._min, other._min)
        self._max = max(self._max, other._max)

    @classmethod
    def combine(cls, first: "Statistics", second: "Statistics") -> "Statistics":
        """Return a new accumulator holding the samples of both inputs."""
        out = cls()
        out.merge(first)
        out.merge(second)
        return out

    # ------------------------------------------------------------------
    # inspectors
    # ------------------------------------------------------------------

    @property
    def samples(self) -> int:
        return self._count

    @property
    def mean(self) -> float:
        if self._count == 0:
            raise ValidationError("mean undefined: no samples accumulated")
        return self._mean

    @property
    def variance(self) -> float:
        """Unbiased sample variance."""
        if self._count < 2:
            raise ValidationError("variance undefined: fewer than two samples accumulated")
        return self._m2 / (self._count - 1)

    @property
    def standard_deviation(self) -> float:
        return float(np.sqrt(self.variance))

    @property
    def error_estimate(self) -> float:
        """Standard error of the mean."""
        return float(np.sqrt(self.variance / self._count))

    @property
    def min(self) -> float:
        if self._count == 0:
            raise ValidationError("min undefined: no samples accumulated")
        return self._min

    @property
    def max(self) -> float:
        if self._count == 0:
            raise ValidationError("max undefined: no samples accumulated")
        return self._max
