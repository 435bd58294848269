"""Option pricing engines.

Every engine follows one contract: fill ``engine.arguments()``, call
``engine.calculate()``, read ``engine.results()``.

Public API
----------
Contract:
    GenericEngine: Abstract engine owning arguments and results
    PlainOptionArguments / PlainOptionResults: Vanilla option inputs and outputs

Engines:
    AnalyticEuropeanEngine: Black-Scholes-Merton closed form
    MCEuropeanEngine: Monte Carlo European engine
    ForwardEngine: Forward-starting decorator over a plain-option engine
    ForwardPerformanceEngine: Forward-performance decorator over a plain-option engine

Monte Carlo building blocks:
    McEuropean, MonteCarloModel, PathPricer, EuropeanPathPricer

Parameter classes:
    MonteCarloParams: Configuration for Monte Carlo pricing
"""

from .core import (
    Arguments,
    Results,
    GenericEngine,
    PlainOptionArguments,
    PlainOptionResults,
)
from .params import MonteCarloParams
from .bsm import AnalyticEuropeanEngine
from .monte_carlo import (
    PathPricer,
    EuropeanPathPricer,
    MonteCarloModel,
    McEuropean,
    MCEuropeanEngine,
)
from .forward import ForwardOptionArguments, ForwardEngine, ForwardPerformanceEngine

__all__ = [
    # Engine contract
    "Arguments",
    "Results",
    "GenericEngine",
    "PlainOptionArguments",
    "PlainOptionResults",
    # Parameter classes
    "MonteCarloParams",
    # Engines
    "AnalyticEuropeanEngine",
    "MCEuropeanEngine",
    "ForwardOptionArguments",
    "ForwardEngine",
    "ForwardPerformanceEngine",
    # Monte Carlo building blocks
    "PathPricer",
    "EuropeanPathPricer",
    "MonteCarloModel",
    "McEuropean",
]
