"""Shared pytest fixtures for pricing_engines tests."""

import datetime as dt

import pytest

from pricing_engines.enums import OptionType
from pricing_engines.market_environment import MarketData
from pricing_engines.rates import DiscountCurve
from pricing_engines.valuation import ForwardOptionArguments, PlainOptionArguments
from pricing_engines.volatility import BlackConstantVol

from pricing_engines.tests.helpers import flat_curve


# ---------------------------------------------------------------------------
# Scalar constants
# ---------------------------------------------------------------------------

PRICING_DATE = dt.datetime(2025, 1, 1)
MATURITY = dt.datetime(2026, 1, 1)  # 1.0y ACT/365F
RESET_DATE = PRICING_DATE + dt.timedelta(days=182.5)  # 0.5y ACT/365F
SPOT = 100.0
STRIKE = 100.0
RATE = 0.05
DIV_YIELD = 0.0
VOL = 0.20

# Black-Scholes reference values for SPOT, STRIKE, RATE, VOL, T=1, no dividends
BS_CALL_ATM = 10.450583572185565
BS_PUT_ATM = 5.573526022256971


@pytest.fixture()
def pricing_date() -> dt.datetime:
    return PRICING_DATE


@pytest.fixture()
def maturity() -> dt.datetime:
    return MATURITY


@pytest.fixture()
def reset_date() -> dt.datetime:
    return RESET_DATE


# ---------------------------------------------------------------------------
# Curves / Market Data
# ---------------------------------------------------------------------------


@pytest.fixture()
def risk_free_curve() -> DiscountCurve:
    """Flat 5% curve over [PRICING_DATE, MATURITY]."""
    return flat_curve(PRICING_DATE, MATURITY, RATE)


@pytest.fixture()
def dividend_curve() -> DiscountCurve:
    return flat_curve(PRICING_DATE, MATURITY, DIV_YIELD)


@pytest.fixture()
def vol_surface() -> BlackConstantVol:
    return BlackConstantVol(PRICING_DATE, VOL)


@pytest.fixture()
def market_data(risk_free_curve, dividend_curve, vol_surface) -> MarketData:
    return MarketData(
        pricing_date=PRICING_DATE,
        spot=SPOT,
        risk_free_curve=risk_free_curve,
        dividend_curve=dividend_curve,
        vol_surface=vol_surface,
    )


# ---------------------------------------------------------------------------
# Arguments
# ---------------------------------------------------------------------------


@pytest.fixture()
def call_arguments(market_data: MarketData) -> PlainOptionArguments:
    """ATM European call, 1y."""
    args = PlainOptionArguments(option_type=OptionType.CALL, strike=STRIKE, maturity=MATURITY)
    args.set_market_data(market_data)
    return args


@pytest.fixture()
def forward_call_arguments(market_data: MarketData) -> ForwardOptionArguments:
    """ATM forward-starting call, reset at 6m, maturity 1y."""
    args = ForwardOptionArguments(
        option_type=OptionType.CALL,
        maturity=MATURITY,
        moneyness=1.0,
        reset_date=RESET_DATE,
    )
    args.set_market_data(market_data)
    return args
