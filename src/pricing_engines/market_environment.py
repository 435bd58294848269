"""Immutable market data snapshots consumed by pricing engines."""

from __future__ import annotations

from dataclasses import dataclass, replace as dc_replace
import datetime as dt

import numpy as np

from .exceptions import ValidationError
from .rates import YieldTermStructure
from .volatility import BlackVolTermStructure


@dataclass(frozen=True, slots=True)
class MarketData:
    """Versioned snapshot of the market inputs an option engine reads.

    Snapshots are never mutated: :meth:`bump` returns a new snapshot with the
    requested fields replaced and ``version`` incremented, so an engine that
    captured an earlier snapshot keeps pricing off consistent data.
    """

    pricing_date: dt.datetime
    spot: float
    risk_free_curve: YieldTermStructure
    dividend_curve: YieldTermStructure
    vol_surface: BlackVolTermStructure
    version: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.pricing_date, dt.datetime):
            raise ValidationError(
                f"pricing_date must be a datetime, got {type(self.pricing_date).__name__}"
            )
        try:
            spot = float(self.spot)
        except (TypeError, ValueError) as exc:
            raise ValidationError("spot must be numeric") from exc
        if not np.isfinite(spot) or spot <= 0.0:
            raise ValidationError("spot must be finite and positive")
        object.__setattr__(self, "spot", spot)
        if not isinstance(self.risk_free_curve, YieldTermStructure):
            raise ValidationError(
                f"risk_free_curve must be a YieldTermStructure, "
                f"got {type(self.risk_free_curve).__name__}"
            )
        if not isinstance(self.dividend_curve, YieldTermStructure):
            raise ValidationError(
                f"dividend_curve must be a YieldTermStructure, "
                f"got {type(self.dividend_curve).__name__}"
            )
        if not isinstance(self.vol_surface, BlackVolTermStructure):
            raise ValidationError(
                f"vol_surface must be a BlackVolTermStructure, "
                f"got {type(self.vol_surface).__name__}"
            )

    def bump(self, **kwargs: object) -> "MarketData":
        """Create the next version of this snapshot with modified fields.

        Parameters
        ----------
        **kwargs
            Fields to override (spot, risk_free_curve, dividend_curve,
            vol_surface, pricing_date)

        Returns
        -------
        MarketData
            New snapshot with ``version`` incremented by one
        """
        if "version" in kwargs:
            raise ValidationError("version is assigned by bump() and cannot be overridden")
        return dc_replace(self, version=self.version + 1, **kwargs)
