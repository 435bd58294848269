"""Tests for the engine contract: arguments, results, market snapshots and errors."""

import datetime as dt

import pytest

from pricing_engines import exceptions
from pricing_engines.enums import ExerciseType, OptionType
from pricing_engines.exceptions import ConfigurationError, ValidationError
from pricing_engines.market_environment import MarketData
from pricing_engines.valuation import GenericEngine, PlainOptionArguments, PlainOptionResults
from pricing_engines.volatility import BlackConstantVol

from pricing_engines.tests.conftest import MATURITY, PRICING_DATE, SPOT
from pricing_engines.tests.helpers import StubPlainEngine, flat_curve, load_arguments


# ---------------------------------------------------------------------------
# Arguments
# ---------------------------------------------------------------------------


class TestPlainOptionArguments:
    def test_valid_arguments(self, call_arguments):
        call_arguments.validate()
        assert call_arguments.maturity_time() == pytest.approx(1.0)

    def test_defaults(self):
        args = PlainOptionArguments()
        assert args.exercise_type is ExerciseType.EUROPEAN
        assert args.stopping_times == ()
        assert args.strike is None

    def test_set_market_data(self, market_data):
        args = PlainOptionArguments()
        args.set_market_data(market_data)
        assert args.underlying == SPOT
        assert args.risk_free_curve is market_data.risk_free_curve
        assert args.vol_surface is market_data.vol_surface

    def test_update_rejects_unknown_fields(self, call_arguments):
        with pytest.raises(ConfigurationError, match="has no field"):
            call_arguments.update(strike=90.0, notional=1e6)
        assert call_arguments.strike == 100.0

    @pytest.mark.parametrize(
        "overrides, match",
        [
            ({"option_type": None}, "option_type: null option type given"),
            ({"underlying": None}, "underlying: null underlying given"),
            ({"underlying": 0.0}, "underlying: negative or zero underlying given"),
            ({"underlying": float("nan")}, "underlying: non-finite underlying given"),
            ({"strike": None}, "strike: null strike given"),
            ({"strike": -1.0}, "strike: negative strike given"),
            ({"dividend_curve": None}, "dividend_curve: null term structure given"),
            ({"risk_free_curve": None}, "risk_free_curve: null term structure given"),
            ({"vol_surface": None}, "vol_surface: null volatility surface given"),
            ({"maturity": None}, "maturity: null maturity given"),
            ({"maturity": PRICING_DATE}, "maturity not after the reference date"),
            (
                {"exercise_type": ExerciseType.BERMUDAN},
                "BERMUDAN exercise needs stopping times",
            ),
        ],
    )
    def test_invalid_values_raise(self, call_arguments, overrides, match):
        call_arguments.update(**overrides)
        with pytest.raises(ValidationError, match=match):
            call_arguments.validate()

    @pytest.mark.parametrize(
        "overrides, match",
        [
            ({"option_type": "call"}, "option_type must be OptionType enum"),
            ({"exercise_type": "european"}, "exercise_type must be ExerciseType enum"),
            ({"strike": "atm"}, "strike must be numeric"),
            ({"risk_free_curve": 0.05}, "risk_free_curve must be a YieldTermStructure"),
            ({"vol_surface": 0.2}, "vol_surface must be a BlackVolTermStructure"),
            ({"maturity": 1.0}, "maturity must be a datetime"),
        ],
    )
    def test_wrong_types_raise(self, call_arguments, overrides, match):
        call_arguments.update(**overrides)
        with pytest.raises(ConfigurationError, match=match):
            call_arguments.validate()

    def test_zero_strike_is_allowed(self, call_arguments):
        call_arguments.strike = 0.0
        call_arguments.validate()


# ---------------------------------------------------------------------------
# Results / engine
# ---------------------------------------------------------------------------


class TestResults:
    def test_all_fields_start_empty(self):
        results = PlainOptionResults()
        assert set(results.as_dict()) == {
            "value",
            "delta",
            "gamma",
            "theta",
            "vega",
            "rho",
            "dividend_rho",
            "strike_sensitivity",
            "error_estimate",
        }
        assert all(v is None for v in results.as_dict().values())

    def test_reset(self):
        results = PlainOptionResults(value=1.0, delta=0.5)
        results.reset()
        assert results.value is None
        assert results.delta is None


class TestGenericEngine:
    def test_is_abstract(self):
        with pytest.raises(TypeError):
            GenericEngine(PlainOptionArguments(), PlainOptionResults())

    def test_accessors_return_owned_objects(self):
        engine = StubPlainEngine(value=1.0)
        assert engine.arguments() is engine.arguments()
        assert engine.results() is engine.results()

    def test_validate_delegates_to_arguments(self):
        engine = StubPlainEngine(value=1.0)
        with pytest.raises(ValidationError, match="null option type given"):
            engine.validate()

    def test_publish_replaces_all_results(self, call_arguments):
        engine = load_arguments(StubPlainEngine(value=2.0), call_arguments)
        engine.results().delta = 0.3
        engine.calculate()
        assert engine.results().value == 2.0
        assert engine.results().delta is None

    def test_publish_rejects_unknown_fields(self, call_arguments):
        engine = load_arguments(StubPlainEngine(value=2.0, charm=0.1), call_arguments)
        with pytest.raises(ConfigurationError, match="has no field"):
            engine.calculate()

    def test_published_values_are_floats(self, call_arguments):
        engine = load_arguments(StubPlainEngine(value=2), call_arguments)
        engine.calculate()
        assert isinstance(engine.results().value, float)

    def test_non_numeric_value_leaves_results_untouched(self, call_arguments):
        engine = load_arguments(StubPlainEngine(value=2.0, delta=0.5), call_arguments)
        engine.calculate()
        engine.values = {"value": 3.0, "delta": "n/a"}
        with pytest.raises(ConfigurationError, match="values must be numeric"):
            engine.calculate()
        assert engine.results().value == 2.0
        assert engine.results().delta == 0.5


# ---------------------------------------------------------------------------
# Market data
# ---------------------------------------------------------------------------


class TestMarketData:
    def test_bump_creates_new_version(self, market_data):
        bumped = market_data.bump(spot=110.0)
        assert bumped.version == market_data.version + 1
        assert bumped.spot == 110.0
        assert market_data.spot == SPOT
        assert bumped.risk_free_curve is market_data.risk_free_curve

    def test_bump_twice(self, market_data):
        bumped = market_data.bump(vol_surface=BlackConstantVol(PRICING_DATE, 0.3)).bump(spot=90.0)
        assert bumped.version == 2
        assert bumped.vol_surface.volatility == 0.3

    def test_version_cannot_be_overridden(self, market_data):
        with pytest.raises(ValidationError, match="version is assigned by bump"):
            market_data.bump(version=10)

    def test_is_frozen(self, market_data):
        with pytest.raises(AttributeError):
            market_data.spot = 1.0

    @pytest.mark.parametrize("spot", [0.0, -5.0, float("inf"), "abc"])
    def test_invalid_spot_raises(self, market_data, spot):
        with pytest.raises(ValidationError, match="spot must be"):
            market_data.bump(spot=spot)

    def test_invalid_curve_raises(self, vol_surface):
        curve = flat_curve(PRICING_DATE, MATURITY, 0.05)
        with pytest.raises(ValidationError, match="dividend_curve must be a YieldTermStructure"):
            MarketData(PRICING_DATE, SPOT, curve, 0.0, vol_surface)

    def test_pricing_date_type_checked(self, risk_free_curve, dividend_curve, vol_surface):
        with pytest.raises(ValidationError, match="pricing_date must be a datetime"):
            MarketData(dt.date(2025, 1, 1), SPOT, risk_free_curve, dividend_curve, vol_surface)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class TestExceptionHierarchy:
    @pytest.mark.parametrize(
        "name",
        [
            "ValidationError",
            "ConfigurationError",
            "TypeMismatchError",
            "UnsupportedFeatureError",
            "NumericalError",
            "ConvergenceError",
        ],
    )
    def test_library_errors_share_a_base(self, name):
        assert issubclass(getattr(exceptions, name), exceptions.PricingEngineError)

    def test_specialisations(self):
        assert issubclass(exceptions.TypeMismatchError, exceptions.ConfigurationError)
        assert issubclass(exceptions.ConvergenceError, exceptions.NumericalError)

    def test_option_type_values(self):
        assert OptionType("call") is OptionType.CALL
