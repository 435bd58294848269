import datetime as dt
from dataclasses import fields

from pricing_engines.rates import DiscountCurve
from pricing_engines.utils import calculate_year_fraction
from pricing_engines.valuation import (
    Arguments,
    GenericEngine,
    PlainOptionArguments,
    PlainOptionResults,
)


def flat_curve(
    pricing_date: dt.datetime,
    maturity: dt.datetime,
    rate: float,
) -> DiscountCurve:
    """Flat continuously-compounded curve anchored at pricing_date."""
    ttm = calculate_year_fraction(pricing_date, maturity)
    return DiscountCurve.flat(pricing_date, rate, end_time=ttm)


def load_arguments(engine: GenericEngine, source: Arguments) -> GenericEngine:
    """Copy every field of ``source`` into the engine's arguments."""
    engine.arguments().update(**{f.name: getattr(source, f.name) for f in fields(source)})
    return engine


class StubPlainEngine(GenericEngine[PlainOptionArguments, PlainOptionResults]):
    """Plain-option engine returning fixed results, recording its calls."""

    def __init__(self, **values: float) -> None:
        super().__init__(PlainOptionArguments(), PlainOptionResults())
        self.values = values
        self.calculations = 0
        self.resets = 0

    def reset(self) -> None:
        self.resets += 1
        super().reset()

    def calculate(self) -> None:
        self.validate()
        self.calculations += 1
        self._publish_results(**self.values)
