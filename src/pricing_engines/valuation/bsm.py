"""Black-Scholes-Merton European option engine with continuous dividend yield."""

from __future__ import annotations

from typing import NamedTuple
import logging

import numpy as np
from scipy.stats import norm

from ..enums import ExerciseType, OptionType
from ..exceptions import UnsupportedFeatureError, ValidationError
from .core import GenericEngine, PlainOptionArguments, PlainOptionResults

logger = logging.getLogger(__name__)


class _BSMInputs(NamedTuple):
    """Pre-computed inputs shared across all BSM Greek calculations."""

    spot: float
    strike: float
    volatility: float
    time_to_maturity: float
    df_r: float
    df_q: float
    risk_free_rate: float
    dividend_yield: float
    d1: float
    d2: float


def _calculate_d_values(
    spot: float,
    strike: float,
    std_dev: float,
    df_r: float,
    df_q: float,
) -> tuple[float, float]:
    """Calculate d1 and d2 for the BSM model.

    Parameters
    ----------
    spot
        Current spot price.
    strike
        Strike price.
    std_dev
        Square root of the Black variance to maturity.
    df_r
        Risk-free discount factor $P(0,T)$.
    df_q
        Dividend discount factor $D_q(0,T)$.

    Returns
    -------
    tuple[float, float]
        Pair ``(d1, d2)``.
    """
    forward = spot * df_q / df_r

    if std_dev < 1e-300 or strike == 0.0:
        # Deterministic limit.
        # d1 = d2 = +inf when forward > strike  →  N(d) = 1
        # d1 = d2 = -inf when forward < strike  →  N(d) = 0
        # d1 = d2 = 0    when forward == strike →  N(d) = 0.5
        if forward > strike:
            return np.inf, np.inf
        elif forward < strike:
            return -np.inf, -np.inf
        else:
            return 0.0, 0.0

    d1 = (np.log(forward / strike) + 0.5 * std_dev**2) / std_dev
    d2 = d1 - std_dev
    return d1, d2


class AnalyticEuropeanEngine(GenericEngine[PlainOptionArguments, PlainOptionResults]):
    """Closed-form Black-Scholes-Merton engine for European calls and puts.

    Rates and dividend yields are read as zero yields to maturity, the
    volatility as the Black vol at (maturity, strike).  All Greeks, the strike
    sensitivity included, are filled in raw units (see PlainOptionResults).
    """

    def __init__(self) -> None:
        super().__init__(PlainOptionArguments(), PlainOptionResults())

    def _bsm_inputs(self) -> _BSMInputs:
        """Compute the full set of BSM inputs needed by pricing and Greeks."""
        args = self._arguments
        spot = float(args.underlying)
        strike = float(args.strike)
        time_to_maturity = args.maturity_time()
        df_r = args.risk_free_curve.discount(args.maturity)
        df_q = args.dividend_curve.discount(args.maturity)
        variance = args.vol_surface.black_variance(args.maturity, strike)
        if variance < 0.0:
            raise ValidationError("negative Black variance to maturity")
        std_dev = float(np.sqrt(variance))
        d1, d2 = _calculate_d_values(spot, strike, std_dev, df_r, df_q)
        return _BSMInputs(
            spot=spot,
            strike=strike,
            volatility=std_dev / np.sqrt(time_to_maturity),
            time_to_maturity=time_to_maturity,
            df_r=df_r,
            df_q=df_q,
            risk_free_rate=args.risk_free_curve.zero_yield(args.maturity),
            dividend_yield=args.dividend_curve.zero_yield(args.maturity),
            d1=d1,
            d2=d2,
        )

    def calculate(self) -> None:
        self.validate()
        if self._arguments.exercise_type is not ExerciseType.EUROPEAN:
            raise UnsupportedFeatureError(
                "AnalyticEuropeanEngine only prices European exercise; "
                f"got {self._arguments.exercise_type.name}"
            )

        inp = self._bsm_inputs()
        s, k, t = inp.spot, inp.strike, inp.time_to_maturity
        sqrt_t = np.sqrt(t)
        n_prime_d1 = norm.pdf(inp.d1)
        std_dev = inp.volatility * sqrt_t

        if std_dev > 0.0:
            gamma = inp.df_q * n_prime_d1 / (s * std_dev)
        else:
            gamma = 0.0
        vega = s * inp.df_q * n_prime_d1 * sqrt_t
        decay = -(s * inp.df_q * n_prime_d1 * inp.volatility) / (2 * sqrt_t)

        if self._arguments.option_type is OptionType.CALL:
            nd1, nd2 = norm.cdf(inp.d1), norm.cdf(inp.d2)
            value = s * inp.df_q * nd1 - k * inp.df_r * nd2
            delta = inp.df_q * nd1
            theta = (
                decay
                - inp.risk_free_rate * k * inp.df_r * nd2
                + inp.dividend_yield * s * inp.df_q * nd1
            )
            rho = k * t * inp.df_r * nd2
            dividend_rho = -s * t * inp.df_q * nd1
            strike_sensitivity = -inp.df_r * nd2
        else:  # PUT
            nmd1, nmd2 = norm.cdf(-inp.d1), norm.cdf(-inp.d2)
            value = k * inp.df_r * nmd2 - s * inp.df_q * nmd1
            delta = -inp.df_q * nmd1
            theta = (
                decay
                + inp.risk_free_rate * k * inp.df_r * nmd2
                - inp.dividend_yield * s * inp.df_q * nmd1
            )
            rho = -k * t * inp.df_r * nmd2
            dividend_rho = s * t * inp.df_q * nmd1
            strike_sensitivity = inp.df_r * nmd2

        logger.debug(
            "BSM %s S=%.6g K=%.6g T=%.6g vol=%.6g value=%.6g",
            self._arguments.option_type.name,
            s,
            k,
            t,
            inp.volatility,
            value,
        )
        self._publish_results(
            value=value,
            delta=delta,
            gamma=gamma,
            theta=theta,
            vega=vega,
            rho=rho,
            dividend_rho=dividend_rho,
            strike_sensitivity=strike_sensitivity,
        )
