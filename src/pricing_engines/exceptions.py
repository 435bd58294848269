"""Custom exception hierarchy for the pricing_engines library.

All library-specific exceptions inherit from :class:`PricingEngineError`,
enabling callers to catch *any* library error with a single ``except`` clause::

    try:
        engine.calculate()
    except PricingEngineError as exc:
        log.error("Pricing failed: %s", exc)
"""

from __future__ import annotations


class PricingEngineError(Exception):
    """Base exception for all library errors."""


# ── Input validation ────────────────────────────────────────────────


class ValidationError(PricingEngineError):
    """Invalid input values (null, out-of-range, non-finite, inconsistent dates, etc.)."""


class ConfigurationError(PricingEngineError):
    """Wrong types passed to a public API (e.g. raw str instead of enum)."""


class TypeMismatchError(ConfigurationError):
    """A decorator engine was given a wrapped engine of the wrong arguments/results shape."""


# ── Feature support ─────────────────────────────────────────────────


class UnsupportedFeatureError(PricingEngineError):
    """Requested feature combination is not (yet) supported."""


# ── Numerical issues ────────────────────────────────────────────────


class NumericalError(PricingEngineError):
    """Base for errors arising from numerical computation."""


class ConvergenceError(NumericalError):
    """A sampling or iterative procedure failed to reach the requested tolerance."""
