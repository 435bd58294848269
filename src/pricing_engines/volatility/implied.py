"""Black volatility structure viewed from a later reference date."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass

import numpy as np

from ..enums import DayCountConvention
from ..exceptions import ValidationError
from .surface import _SHORT_END, BlackVolTermStructure, _BlackVolMixin


@dataclass(frozen=True, slots=True)
class ImpliedVolTermStructure(_BlackVolMixin):
    """Forward variance of ``original`` measured from ``reference_date``::

        sigma_implied^2(t, K) * t = sigma^2(t_ref + t, K) * (t_ref + t) - sigma^2(t_ref, K) * t_ref

    This is exact when the original volatility depends on time only.  With a
    strike (or spot) dependent smile it freezes the smile observed today,
    which is wrong in general: a local or stochastic volatility model would be
    needed to project it forward.
    """

    original: BlackVolTermStructure
    reference_date: dt.datetime

    def __post_init__(self) -> None:
        if not isinstance(self.reference_date, dt.datetime):
            raise ValidationError(
                f"reference_date must be a datetime, got {type(self.reference_date).__name__}"
            )
        if self.reference_date < self.original.reference_date:
            raise ValidationError(
                "implied reference_date must not precede the original surface's reference date"
            )

    @property
    def day_count_convention(self) -> DayCountConvention:
        return self.original.day_count_convention

    @property
    def anchor_time(self) -> float:
        return self.original.year_fraction(self.original.reference_date, self.reference_date)

    def black_variance(self, date_or_time: dt.datetime | float, strike: float) -> float:
        t_ref = self.anchor_time
        t = self.time_from_reference(date_or_time)
        variance = self.original.black_variance(t_ref + t, strike) - self.original.black_variance(
            t_ref, strike
        )
        if variance < -1e-14:
            raise ValidationError(
                f"negative forward variance {variance:.6g} implied at t={t:.6g}, strike={strike}"
            )
        return max(variance, 0.0)

    def black_vol(self, date_or_time: dt.datetime | float, strike: float) -> float:
        t = max(self.time_from_reference(date_or_time), _SHORT_END)
        return float(np.sqrt(self.black_variance(t, strike) / t))
