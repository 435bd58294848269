"""Interest-rate and discount-curve term structures.

Every curve exposes the same small interface (:class:`YieldTermStructure`):
a reference date, a day count, discount factors and continuously-compounded
zero yields at dates or year fractions, and an ``implied`` factory that
re-anchors the curve at a later reference date.  Curves are immutable, so an
engine may hold one without synchronisation.
"""

from __future__ import annotations

import datetime as dt
import warnings
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import numpy as np

from .enums import DayCountConvention
from .exceptions import ValidationError
from .utils import calculate_year_fraction, time_from_reference

__all__ = [
    "YieldTermStructure",
    "DiscountCurve",
    "ImpliedTermStructure",
]

# Year fraction used to approximate instantaneous rates at t = 0.
_SHORT_END = 1.0e-4


@runtime_checkable
class YieldTermStructure(Protocol):
    reference_date: dt.datetime

    @property
    def day_count_convention(self) -> DayCountConvention: ...

    def year_fraction(self, start_date: dt.datetime, end_date: dt.datetime) -> float: ...

    def discount(self, date_or_time: dt.datetime | float) -> float: ...

    def zero_yield(self, date_or_time: dt.datetime | float) -> float: ...

    def implied(self, reference_date: dt.datetime) -> "YieldTermStructure": ...


class _TermStructureMixin:
    """Date handling and derived rates shared by the concrete curves."""

    __slots__ = ()

    def year_fraction(self, start_date: dt.datetime, end_date: dt.datetime) -> float:
        return calculate_year_fraction(start_date, end_date, self.day_count_convention)

    def time_from_reference(self, date_or_time: dt.datetime | float) -> float:
        return time_from_reference(self.reference_date, date_or_time, self.day_count_convention)

    def zero_yield(self, date_or_time: dt.datetime | float) -> float:
        """Continuously-compounded zero yield from the reference date.

        At the reference date itself the instantaneous short rate is returned.
        """
        t = self.time_from_reference(date_or_time)
        if t <= _SHORT_END:
            return float(-np.log(self.discount(_SHORT_END)) / _SHORT_END)
        return float(-np.log(self.discount(t)) / t)

    def forward_rate(self, start: dt.datetime | float, end: dt.datetime | float) -> float:
        """Return continuously-compounded forward rate on ``[start, end]``."""
        t0 = self.time_from_reference(start)
        t1 = self.time_from_reference(end)
        if t1 <= t0:
            raise ValidationError("Need end > start")
        return float((np.log(self.discount(t0)) - np.log(self.discount(t1))) / (t1 - t0))

    def implied(self, reference_date: dt.datetime) -> "ImpliedTermStructure":
        """Return a view of this curve re-anchored at ``reference_date``."""
        return ImpliedTermStructure(original=self, reference_date=reference_date)


@dataclass(frozen=True, slots=True)
class DiscountCurve(_TermStructureMixin):
    """Deterministic discount curve with log-linear interpolation.

    times are year fractions from reference_date and must be strictly increasing.
    dfs are positive discount factors, typically with df(0)=1.
    Values > 1 are permitted (negative rates) but trigger a warning.
    A curve built with ``flat_rate`` extrapolates exactly beyond its grid.
    """

    reference_date: dt.datetime
    times: np.ndarray
    dfs: np.ndarray
    flat_rate: float | None = None
    day_count: DayCountConvention = DayCountConvention.ACT_365F

    def __post_init__(self) -> None:
        if not isinstance(self.reference_date, dt.datetime):
            raise ValidationError(
                f"reference_date must be a datetime, got {type(self.reference_date).__name__}"
            )
        t = np.asarray(self.times, dtype=float)
        df = np.asarray(self.dfs, dtype=float)
        if t.ndim != 1 or df.ndim != 1 or t.shape != df.shape:
            raise ValidationError("times and dfs must be 1D arrays of the same length")
        if np.any(np.diff(t) <= 0.0):
            raise ValidationError("times must be strictly increasing")
        if np.any(df <= 0.0):
            raise ValidationError("discount factors must be positive")
        if np.any(df > 1.0 + 1e-12):
            warnings.warn(
                "Discount factors > 1 detected (negative rates)",
                stacklevel=2,
            )
        if self.flat_rate is not None and not np.isfinite(float(self.flat_rate)):
            raise ValidationError("flat_rate must be finite when provided")
        if self.flat_rate is not None:
            implied = np.exp(-float(self.flat_rate) * t)
            if not np.allclose(df, implied, rtol=1e-10, atol=1e-12):
                raise ValidationError(
                    "flat_rate is only allowed when consistent with the provided discount factors"
                )
        object.__setattr__(self, "times", t)
        object.__setattr__(self, "dfs", df)

    @property
    def day_count_convention(self) -> DayCountConvention:
        return self.day_count

    @classmethod
    def from_zero_rates(
        cls,
        reference_date: dt.datetime,
        times: np.ndarray,
        zero_rates: np.ndarray,
        day_count: DayCountConvention = DayCountConvention.ACT_365F,
    ) -> "DiscountCurve":
        """Build a curve from continuously-compounded zero (spot) rates.

        Parameters
        ----------
        reference_date
            Date at which the discount factor is 1.
        times
            Year-fraction grid.  Shape ``(N,)``.
            Must be strictly increasing and start at 0.
        zero_rates
            Continuously-compounded zero rates at each time.  Shape ``(N,)``.
            The rate at ``times[0] = 0`` is cosmetic (DF is always 1 there).
        """
        times = np.asarray(times, dtype=float)
        zero_rates = np.asarray(zero_rates, dtype=float)
        if times.ndim != 1 or zero_rates.ndim != 1:
            raise ValidationError("times and zero_rates must be 1-D arrays")
        if times.size != zero_rates.size:
            raise ValidationError("times and zero_rates must have the same length")
        if times.size < 2:
            raise ValidationError("times must include at least [0, T]")
        if not np.isclose(times[0], 0.0):
            raise ValidationError("times must start at 0.0")
        dfs = np.exp(-zero_rates * times)
        return cls(reference_date=reference_date, times=times, dfs=dfs, day_count=day_count)

    @classmethod
    def flat(
        cls,
        reference_date: dt.datetime,
        rate: float,
        end_time: float,
        steps: int = 1,
        day_count: DayCountConvention = DayCountConvention.ACT_365F,
    ) -> "DiscountCurve":
        """Build a flat continuously-compounded discount curve.

        Parameters
        ----------
        reference_date
            Date at which the discount factor is 1.
        rate
            Flat continuously-compounded annual rate.
        end_time
            Final grid point in years.
        steps
            Number of intervals used to discretize ``[0, end_time]``.

        Returns
        -------
        DiscountCurve
            Discount curve consistent with the supplied flat rate.
        """
        if end_time <= 0.0:
            raise ValidationError("end_time must be positive")
        if steps < 1:
            raise ValidationError("steps must be >= 1")
        times = np.linspace(0.0, float(end_time), int(steps) + 1)
        dfs = np.exp(-float(rate) * times)
        return cls(
            reference_date=reference_date,
            times=times,
            dfs=dfs,
            flat_rate=float(rate),
            day_count=day_count,
        )

    def df(self, t: float | np.ndarray) -> np.ndarray:
        """Interpolate discount factors with log-linear interpolation.

        Parameters
        ----------
        t
            Scalar or array of year fractions.

        Returns
        -------
        np.ndarray
            Interpolated discount factors.
        """
        t = np.asarray(t, dtype=float)
        if self.flat_rate is not None:
            return np.exp(-self.flat_rate * t)
        t_min, t_max = float(self.times[0]), float(self.times[-1])
        outside = (t < t_min) | (t > t_max)
        if np.any(outside):
            warnings.warn(
                f"Extrapolating discount curve outside "
                f"[{t_min:.4f}, {t_max:.4f}] - flat log-DF assumed",
                stacklevel=2,
            )
        log_df = np.log(self.dfs)
        out = np.interp(t, self.times, log_df, left=log_df[0], right=log_df[-1])
        return np.exp(out)

    def discount(self, date_or_time: dt.datetime | float) -> float:
        return float(self.df(self.time_from_reference(date_or_time)))

    def zero_yield(self, date_or_time: dt.datetime | float) -> float:
        if self.flat_rate is not None:
            return float(self.flat_rate)
        return _TermStructureMixin.zero_yield(self, date_or_time)


@dataclass(frozen=True, slots=True)
class ImpliedTermStructure(_TermStructureMixin):
    """Curve implied by ``original`` when viewed from a later reference date.

    Discount factors are forward discount factors of the original curve::

        P_implied(t) = P(t_ref + t) / P(t_ref)

    so rates between the original reference date and ``reference_date`` no
    longer contribute.
    """

    original: YieldTermStructure
    reference_date: dt.datetime

    def __post_init__(self) -> None:
        if not isinstance(self.reference_date, dt.datetime):
            raise ValidationError(
                f"reference_date must be a datetime, got {type(self.reference_date).__name__}"
            )
        if self.reference_date < self.original.reference_date:
            raise ValidationError(
                "implied reference_date must not precede the original curve's reference date"
            )

    @property
    def day_count_convention(self) -> DayCountConvention:
        return self.original.day_count_convention

    @property
    def anchor_time(self) -> float:
        """Year fraction of the new reference date on the original curve."""
        return self.original.year_fraction(self.original.reference_date, self.reference_date)

    def discount(self, date_or_time: dt.datetime | float) -> float:
        t_ref = self.anchor_time
        t = self.time_from_reference(date_or_time)
        return self.original.discount(t_ref + t) / self.original.discount(t_ref)
