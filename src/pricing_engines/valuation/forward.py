"""Forward-starting (strike-resetting) option engines.

A forward-starting option fixes its strike at ``moneyness * S(reset_date)``.
Both engines here are decorators: they hold a plain-option engine, price the
option as a plain option living from ``reset_date`` to maturity (curves and
volatility re-anchored at the reset date, strike ``moneyness * underlying``)
and map the wrapped results back to today.  Any plain-option engine works,
analytic or Monte Carlo.

Greeks that the wrapped engine does not produce (None) stay None.
"""

from __future__ import annotations

from dataclasses import dataclass
import datetime as dt
import logging
from typing import ClassVar

from ..enums import EngineState
from ..exceptions import ConfigurationError, NumericalError, TypeMismatchError, ValidationError
from .core import (
    GenericEngine,
    PlainOptionArguments,
    PlainOptionResults,
    _require_number,
)

logger = logging.getLogger(__name__)

__all__ = [
    "ForwardOptionArguments",
    "ForwardEngine",
    "ForwardPerformanceEngine",
]


def _scaled(factor: float, value: float | None) -> float | None:
    return None if value is None else factor * value


@dataclass(slots=True)
class ForwardOptionArguments(PlainOptionArguments):
    """Plain option arguments plus the strike-reset terms.

    Attributes
    ==========
    moneyness: float
        strike as a multiple of the underlying at the reset date
    reset_date: datetime
        date at which the strike is fixed

    ``strike`` may be left unset: the engines derive it from ``moneyness``.
    """

    moneyness: float | None = None
    reset_date: dt.datetime | None = None

    strike_required: ClassVar[bool] = False

    def validate(self) -> None:
        PlainOptionArguments.validate(self)
        owner = type(self).__name__
        if self.moneyness is None:
            raise ValidationError(f"{owner}.moneyness: null moneyness given")
        if _require_number(owner, "moneyness", self.moneyness) <= 0.0:
            raise ValidationError(f"{owner}.moneyness: negative or zero moneyness given")
        if self.reset_date is None:
            raise ValidationError(f"{owner}.reset_date: null reset date given")
        if not isinstance(self.reset_date, dt.datetime):
            raise ConfigurationError(
                f"reset_date must be a datetime, got {type(self.reset_date).__name__}"
            )
        reset_time = self.reset_time()
        if reset_time < 0.0:
            raise ValidationError(f"{owner}.reset_date: negative reset time given")
        if reset_time > self.maturity_time():
            raise ValidationError(f"{owner}.reset_date: reset time greater than maturity")

    def reset_time(self) -> float:
        """Year fraction from the risk-free curve's reference date to the reset date."""
        return self.risk_free_curve.year_fraction(
            self.risk_free_curve.reference_date, self.reset_date
        )


class ForwardEngine(GenericEngine[ForwardOptionArguments, PlainOptionResults]):
    """Prices a forward-starting option through a wrapped plain-option engine.

    With ``discQ`` the dividend discount factor to the reset date::

        value        = discQ * V
        delta        = discQ * (delta + moneyness * dV/dK)
        gamma        = 0
        theta        = q(reset) * value
        vega         = discQ * vega
        rho          = discQ * rho
        dividend_rho = -reset_time * value + discQ * dividend_rho

    Gamma is zero under this approximation; it is not estimated.  The
    re-anchored volatility is exact only for volatility depending on time
    alone (see ImpliedVolTermStructure).

    Every calculation resets the wrapped engine first.

    Parameters
    ==========
    original_engine: GenericEngine[PlainOptionArguments, PlainOptionResults]
        shared engine pricing the equivalent plain option
    """

    original_arguments_type: type = PlainOptionArguments
    original_results_type: type = PlainOptionResults

    def __init__(
        self, original_engine: GenericEngine[PlainOptionArguments, PlainOptionResults]
    ) -> None:
        if not isinstance(original_engine, GenericEngine):
            raise TypeMismatchError(
                f"{type(self).__name__}: null engine or wrong engine type "
                f"({type(original_engine).__name__})"
            )
        arguments = original_engine.arguments()
        results = original_engine.results()
        if not isinstance(arguments, self.original_arguments_type):
            raise TypeMismatchError(
                f"{type(self).__name__}: wrapped engine arguments must be "
                f"{self.original_arguments_type.__name__}, got {type(arguments).__name__}"
            )
        if not isinstance(results, self.original_results_type):
            raise TypeMismatchError(
                f"{type(self).__name__}: wrapped engine results must be "
                f"{self.original_results_type.__name__}, got {type(results).__name__}"
            )
        super().__init__(ForwardOptionArguments(), PlainOptionResults())
        self._original_engine = original_engine
        self._state = EngineState.UNCONFIGURED

    @property
    def original_engine(self) -> GenericEngine[PlainOptionArguments, PlainOptionResults]:
        return self._original_engine

    @property
    def state(self) -> EngineState:
        return self._state

    def set_original_arguments(self) -> None:
        """Load the equivalent plain option into the wrapped engine's arguments."""
        self.validate()
        args = self._arguments
        # The underlying level is copied as well: surfaces need it to
        # interpolate the smile.
        self._original_engine.arguments().update(
            option_type=args.option_type,
            underlying=args.underlying,
            strike=args.moneyness * args.underlying,
            dividend_curve=args.dividend_curve.implied(args.reset_date),
            risk_free_curve=args.risk_free_curve.implied(args.reset_date),
            vol_surface=args.vol_surface.implied(args.reset_date),
            exercise_type=args.exercise_type,
            stopping_times=args.stopping_times,
            maturity=args.maturity,
        )
        self._original_engine.arguments().validate()

    def calculate(self) -> None:
        self._original_engine.reset()
        self._calculate_through_original()

    def _calculate_through_original(self) -> None:
        self.set_original_arguments()
        self._original_engine.calculate()
        self.get_original_results()
        self._state = EngineState.READY
        logger.debug(
            "%s reset=%s moneyness=%.6g value=%.6g",
            type(self).__name__,
            self._arguments.reset_date,
            self._arguments.moneyness,
            self._results.value,
        )

    def _original_value(self) -> float:
        value = self._original_engine.results().value
        if value is None:
            raise NumericalError(
                f"{type(self._original_engine).__name__} did not produce a value"
            )
        return value

    def get_original_results(self) -> None:
        """Map the wrapped plain-option results to forward-option results."""
        args = self._arguments
        original = self._original_engine.results()
        reset_time = args.reset_time()
        disc_q = args.dividend_curve.discount(args.reset_date)

        value = disc_q * self._original_value()
        if original.delta is None or original.strike_sensitivity is None:
            delta = None
        else:
            delta = disc_q * (original.delta + args.moneyness * original.strike_sensitivity)
        if original.dividend_rho is None:
            dividend_rho = None
        else:
            dividend_rho = -reset_time * value + disc_q * original.dividend_rho

        self._publish_results(
            value=value,
            delta=delta,
            gamma=0.0,
            theta=args.dividend_curve.zero_yield(args.reset_date) * value,
            vega=_scaled(disc_q, original.vega),
            rho=_scaled(disc_q, original.rho),
            dividend_rho=dividend_rho,
            error_estimate=_scaled(disc_q, original.error_estimate),
        )


class ForwardPerformanceEngine(ForwardEngine):
    """Prices a forward-starting performance option, whose payoff is divided
    by the underlying level at the reset date.

    With ``discR`` the risk-free discount factor to the reset date divided by
    the underlying::

        value        = discR * V
        delta        = 0
        gamma        = 0
        theta        = r(reset) * value
        vega         = discR * vega
        rho          = -reset_time * value + discR * rho
        dividend_rho = discR * dividend_rho

    Unlike :class:`ForwardEngine`, calculate() does NOT reset the wrapped
    engine: when a calculation fails, the wrapped engine still holds the
    results of its previous run.
    """

    def calculate(self) -> None:
        self._calculate_through_original()

    def get_original_results(self) -> None:
        args = self._arguments
        original = self._original_engine.results()
        reset_time = args.reset_time()
        disc_r = args.risk_free_curve.discount(args.reset_date) / args.underlying

        value = disc_r * self._original_value()
        if original.rho is None:
            rho = None
        else:
            rho = -reset_time * value + disc_r * original.rho

        self._publish_results(
            value=value,
            delta=0.0,
            gamma=0.0,
            theta=args.risk_free_curve.zero_yield(args.reset_date) * value,
            vega=_scaled(disc_r, original.vega),
            rho=rho,
            dividend_rho=_scaled(disc_r, original.dividend_rho),
            error_estimate=_scaled(disc_r, original.error_estimate),
        )
