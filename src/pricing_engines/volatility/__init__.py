"""Black volatility term structures.

This module provides:
- BlackConstantVol: flat volatility
- VolatilitySurface: container for volatility quotes and interpolation
- ImpliedVolTermStructure: forward-variance view re-anchored at a later date
"""

from .surface import BlackVolTermStructure, BlackConstantVol, VolatilitySurface, VolatilityQuote
from .implied import ImpliedVolTermStructure

__all__ = [
    "BlackVolTermStructure",
    "BlackConstantVol",
    "VolatilitySurface",
    "VolatilityQuote",
    "ImpliedVolTermStructure",
]
