"""The pricing-engine contract shared by every engine and decorator.

An engine owns one mutable *arguments* object and one *results* object.
Clients fill ``engine.arguments()``, call ``engine.calculate()`` and read
``engine.results()``.  ``calculate()`` validates first, never mutates the
arguments, and publishes results only once every number is computed, so a
failed calculation leaves the previous results in place.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING, ClassVar, Generic, TypeVar
import datetime as dt

import numpy as np

from ..enums import ExerciseType, OptionType
from ..exceptions import ConfigurationError, ValidationError
from ..rates import YieldTermStructure
from ..volatility import BlackVolTermStructure

if TYPE_CHECKING:
    from ..market_environment import MarketData

__all__ = [
    "Arguments",
    "Results",
    "GenericEngine",
    "PlainOptionArguments",
    "PlainOptionResults",
]


class Arguments(ABC):
    """Inputs of a pricing engine. Subclasses are mutable dataclasses."""

    __slots__ = ()

    @abstractmethod
    def validate(self) -> None:
        """Raise ValidationError naming the first offending field."""

    def update(self, **kwargs: object) -> None:
        """Set several fields at once; unknown field names are rejected."""
        known = {f.name for f in fields(self)}
        unknown = sorted(set(kwargs) - known)
        if unknown:
            raise ConfigurationError(
                f"{type(self).__name__} has no field(s) {', '.join(unknown)}"
            )
        for name, value in kwargs.items():
            setattr(self, name, value)


class Results(ABC):
    """Outputs of a pricing engine. Every field is None until computed."""

    __slots__ = ()

    def reset(self) -> None:
        for f in fields(self):
            setattr(self, f.name, None)

    def as_dict(self) -> dict[str, float | None]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


ArgumentsT = TypeVar("ArgumentsT", bound=Arguments)
ResultsT = TypeVar("ResultsT", bound=Results)


class GenericEngine(ABC, Generic[ArgumentsT, ResultsT]):
    """Engine owning one arguments and one results instance.

    Methods
    =======
    arguments:
        the engine's arguments, to be filled by the client
    results:
        the engine's results, to be read after calculate()
    reset:
        clear the results
    validate:
        check the arguments
    calculate:
        validate and compute the results
    """

    def __init__(self, arguments: ArgumentsT, results: ResultsT) -> None:
        self._arguments = arguments
        self._results = results

    def arguments(self) -> ArgumentsT:
        return self._arguments

    def results(self) -> ResultsT:
        return self._results

    def reset(self) -> None:
        self._results.reset()

    def validate(self) -> None:
        self._arguments.validate()

    @abstractmethod
    def calculate(self) -> None:
        """Validate the arguments and overwrite the results."""

    def _publish_results(self, **values: float | None) -> None:
        """Replace all results at once; fields not given become None."""
        known = {f.name for f in fields(self._results)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ConfigurationError(
                f"{type(self._results).__name__} has no field(s) {', '.join(unknown)}"
            )
        try:
            converted = {
                name: None if value is None else float(value) for name, value in values.items()
            }
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(
                f"{type(self._results).__name__} values must be numeric"
            ) from exc
        self._results.reset()
        for name, value in converted.items():
            setattr(self._results, name, value)


def _require_number(owner: str, name: str, value: object) -> float:
    if value is None:
        raise ValidationError(f"{owner}.{name}: null {name} given")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{owner}.{name} must be numeric") from exc
    if not np.isfinite(number):
        raise ValidationError(f"{owner}.{name}: non-finite {name} given")
    return number


@dataclass(slots=True)
class PlainOptionArguments(Arguments):
    """Arguments of a plain (vanilla) option engine.

    Attributes
    ==========
    option_type: OptionType
        CALL or PUT
    underlying: float
        current level of the underlying
    strike: float
        strike price
    dividend_curve: YieldTermStructure
        continuous dividend yield curve
    risk_free_curve: YieldTermStructure
        risk-free discount curve; its reference date and day count define
        the option's time to maturity
    vol_surface: BlackVolTermStructure
        Black volatility term structure
    exercise_type: ExerciseType
        exercise style
    stopping_times: tuple[datetime, ...]
        exercise dates for non-European exercise
    maturity: datetime
        expiry date
    """

    option_type: OptionType | None = None
    underlying: float | None = None
    strike: float | None = None
    dividend_curve: YieldTermStructure | None = None
    risk_free_curve: YieldTermStructure | None = None
    vol_surface: BlackVolTermStructure | None = None
    exercise_type: ExerciseType = ExerciseType.EUROPEAN
    stopping_times: tuple[dt.datetime, ...] = field(default_factory=tuple)
    maturity: dt.datetime | None = None

    strike_required: ClassVar[bool] = True

    def validate(self) -> None:
        owner = type(self).__name__
        if self.option_type is None:
            raise ValidationError(f"{owner}.option_type: null option type given")
        if not isinstance(self.option_type, OptionType):
            raise ConfigurationError(
                f"option_type must be OptionType enum, got {type(self.option_type).__name__}"
            )
        if not isinstance(self.exercise_type, ExerciseType):
            raise ConfigurationError(
                f"exercise_type must be ExerciseType enum, got {type(self.exercise_type).__name__}"
            )

        underlying = _require_number(owner, "underlying", self.underlying)
        if underlying <= 0.0:
            raise ValidationError(f"{owner}.underlying: negative or zero underlying given")
        if self.strike is not None or self.strike_required:
            strike = _require_number(owner, "strike", self.strike)
            if strike < 0.0:
                raise ValidationError(f"{owner}.strike: negative strike given")

        for name in ("dividend_curve", "risk_free_curve"):
            curve = getattr(self, name)
            if curve is None:
                raise ValidationError(f"{owner}.{name}: null term structure given")
            if not isinstance(curve, YieldTermStructure):
                raise ConfigurationError(
                    f"{name} must be a YieldTermStructure, got {type(curve).__name__}"
                )
        if self.vol_surface is None:
            raise ValidationError(f"{owner}.vol_surface: null volatility surface given")
        if not isinstance(self.vol_surface, BlackVolTermStructure):
            raise ConfigurationError(
                f"vol_surface must be a BlackVolTermStructure, "
                f"got {type(self.vol_surface).__name__}"
            )

        if self.maturity is None:
            raise ValidationError(f"{owner}.maturity: null maturity given")
        if not isinstance(self.maturity, dt.datetime):
            raise ConfigurationError(
                f"maturity must be a datetime, got {type(self.maturity).__name__}"
            )
        if self.maturity_time() <= 0.0:
            raise ValidationError(f"{owner}.maturity: maturity not after the reference date")
        if self.exercise_type is not ExerciseType.EUROPEAN and not self.stopping_times:
            raise ValidationError(
                f"{owner}.stopping_times: {self.exercise_type.name} exercise needs stopping times"
            )

    def maturity_time(self) -> float:
        """Year fraction from the risk-free curve's reference date to maturity."""
        return self.risk_free_curve.year_fraction(
            self.risk_free_curve.reference_date, self.maturity
        )

    def set_market_data(self, market_data: MarketData) -> None:
        """Fill the market-dependent fields from a snapshot."""
        self.update(
            underlying=market_data.spot,
            dividend_curve=market_data.dividend_curve,
            risk_free_curve=market_data.risk_free_curve,
            vol_surface=market_data.vol_surface,
        )


@dataclass(slots=True)
class PlainOptionResults(Results):
    """Value and sensitivities of a plain option.

    Greeks are raw derivatives: vega per unit of volatility, rho and
    dividend_rho per unit of rate, theta per year.  ``strike_sensitivity`` is
    dV/dK.  ``error_estimate`` is the standard error of simulation engines.
    """

    value: float | None = None
    delta: float | None = None
    gamma: float | None = None
    theta: float | None = None
    vega: float | None = None
    rho: float | None = None
    dividend_rho: float | None = None
    strike_sensitivity: float | None = None
    error_estimate: float | None = None
