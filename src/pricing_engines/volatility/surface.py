"""Black volatility term structures: constant vol and quote-interpolated surface."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import numpy as np
from scipy.interpolate import griddata

from ..enums import DayCountConvention
from ..exceptions import ValidationError
from ..utils import calculate_year_fraction, time_from_reference

# Year fraction used to approximate the instantaneous vol at t = 0.
_SHORT_END = 1.0e-4


@runtime_checkable
class BlackVolTermStructure(Protocol):
    reference_date: dt.datetime

    @property
    def day_count_convention(self) -> DayCountConvention: ...

    def year_fraction(self, start_date: dt.datetime, end_date: dt.datetime) -> float: ...

    def black_vol(self, date_or_time: dt.datetime | float, strike: float) -> float: ...

    def black_variance(self, date_or_time: dt.datetime | float, strike: float) -> float: ...

    def implied(self, reference_date: dt.datetime) -> "BlackVolTermStructure": ...


class _BlackVolMixin:
    """Date handling shared by the concrete vol structures."""

    __slots__ = ()

    def year_fraction(self, start_date: dt.datetime, end_date: dt.datetime) -> float:
        return calculate_year_fraction(start_date, end_date, self.day_count_convention)

    def time_from_reference(self, date_or_time: dt.datetime | float) -> float:
        return time_from_reference(self.reference_date, date_or_time, self.day_count_convention)

    def black_variance(self, date_or_time: dt.datetime | float, strike: float) -> float:
        t = self.time_from_reference(date_or_time)
        vol = self.black_vol(t, strike)
        return vol * vol * t

    def implied(self, reference_date: dt.datetime):
        """Return a view of this structure re-anchored at ``reference_date``."""
        from .implied import ImpliedVolTermStructure

        return ImpliedVolTermStructure(original=self, reference_date=reference_date)


@dataclass(frozen=True, slots=True)
class BlackConstantVol(_BlackVolMixin):
    """Volatility that is constant in both time and strike."""

    reference_date: dt.datetime
    volatility: float
    day_count: DayCountConvention = DayCountConvention.ACT_365F

    def __post_init__(self) -> None:
        if not isinstance(self.reference_date, dt.datetime):
            raise ValidationError(
                f"reference_date must be a datetime, got {type(self.reference_date).__name__}"
            )
        vol = float(self.volatility)
        if not np.isfinite(vol) or vol < 0.0:
            raise ValidationError("volatility must be finite and non-negative")
        object.__setattr__(self, "volatility", vol)

    @property
    def day_count_convention(self) -> DayCountConvention:
        return self.day_count

    def black_vol(self, date_or_time: dt.datetime | float, strike: float) -> float:
        return self.volatility


@dataclass(frozen=True)
class VolatilityQuote:
    """Single volatility quote.

    Parameters
    ----------
    strike : float
        Strike price
    expiry : float
        Time to expiry in years
    implied_volatility : float
        Implied volatility (annualized)
    """

    strike: float
    expiry: float
    implied_volatility: float

    def __post_init__(self):
        """Validate parameters."""
        if self.strike <= 0:
            raise ValidationError("strike must be positive")
        if self.expiry <= 0:
            raise ValidationError("expiry must be positive")
        if self.implied_volatility < 0:
            raise ValidationError("implied_volatility must be non-negative")


class VolatilitySurface(_BlackVolMixin):
    """Black volatility surface interpolated from (strike, expiry) quotes.

    Strikes and expiries outside the quoted range are clamped to the nearest
    quoted value (flat extrapolation).

    Parameters
    ----------
    reference_date : datetime
        Date from which quote expiries are measured.
    quotes : list[VolatilityQuote]
        List of volatility quotes
    interpolation_method : str, optional
        Interpolation method: 'linear', 'cubic', 'nearest' (default: 'linear')
    day_count : DayCountConvention, optional
        Day count used to turn dates into expiries.
    """

    __slots__ = ("reference_date", "quotes", "interpolation_method", "day_count", "_points", "_vols")

    def __init__(
        self,
        reference_date: dt.datetime,
        quotes: list[VolatilityQuote],
        interpolation_method: str = "linear",
        day_count: DayCountConvention = DayCountConvention.ACT_365F,
    ):
        if not quotes:
            raise ValidationError("quotes list cannot be empty")
        if not isinstance(reference_date, dt.datetime):
            raise ValidationError(
                f"reference_date must be a datetime, got {type(reference_date).__name__}"
            )

        self.reference_date = reference_date
        self.quotes = tuple(quotes)
        self.interpolation_method = interpolation_method
        self.day_count = day_count
        self._points = np.array([(q.strike, q.expiry) for q in self.quotes], dtype=float)
        self._vols = np.array([q.implied_volatility for q in self.quotes], dtype=float)

    @property
    def day_count_convention(self) -> DayCountConvention:
        return self.day_count

    @property
    def strikes(self) -> list[float]:
        return sorted(set(float(k) for k in self._points[:, 0]))

    @property
    def expiries(self) -> list[float]:
        return sorted(set(float(t) for t in self._points[:, 1]))

    def get_vol(self, strike: float, expiry: float) -> float:
        """Get interpolated volatility for given strike and expiry.

        Parameters
        ----------
        strike : float
            Strike price
        expiry : float
            Time to expiry in years

        Returns
        -------
        float
            Interpolated implied volatility

        Raises
        ------
        ValidationError
            If the quotes do not cover the clamped point
        """
        strikes, expiries = self._points[:, 0], self._points[:, 1]
        k = float(np.clip(strike, strikes.min(), strikes.max()))
        t = float(np.clip(expiry, expiries.min(), expiries.max()))

        # Degenerate grids (single smile or single term structure) are 1-D.
        if np.unique(strikes).size == 1:
            order = np.argsort(expiries)
            return float(np.interp(t, expiries[order], self._vols[order]))
        if np.unique(expiries).size == 1:
            order = np.argsort(strikes)
            return float(np.interp(k, strikes[order], self._vols[order]))

        vol = griddata(
            self._points,
            self._vols,
            (k, t),
            method=self.interpolation_method,
            fill_value=np.nan,
        )

        if np.isnan(vol):
            raise ValidationError(f"No volatility available for strike={strike}, expiry={expiry}")

        return float(vol)

    def black_vol(self, date_or_time: dt.datetime | float, strike: float) -> float:
        return self.get_vol(strike, self.time_from_reference(date_or_time))
