from .enums import DayCountConvention, EngineState, ExerciseType, OptionType
from .exceptions import (
    PricingEngineError,
    ValidationError,
    ConfigurationError,
    TypeMismatchError,
    UnsupportedFeatureError,
    NumericalError,
    ConvergenceError,
)
from .market_environment import MarketData
from .rates import DiscountCurve, ImpliedTermStructure, YieldTermStructure
from .statistics import Statistics
from .stochastic_processes import GaussianPathGenerator, Path
from .volatility import BlackConstantVol, ImpliedVolTermStructure, VolatilitySurface
from .valuation import (
    AnalyticEuropeanEngine,
    ForwardEngine,
    ForwardOptionArguments,
    ForwardPerformanceEngine,
    GenericEngine,
    MCEuropeanEngine,
    McEuropean,
    MonteCarloParams,
    PlainOptionArguments,
    PlainOptionResults,
)


__all__ = [
    "DayCountConvention",
    "EngineState",
    "ExerciseType",
    "OptionType",
    "PricingEngineError",
    "ValidationError",
    "ConfigurationError",
    "TypeMismatchError",
    "UnsupportedFeatureError",
    "NumericalError",
    "ConvergenceError",
    "MarketData",
    "DiscountCurve",
    "ImpliedTermStructure",
    "YieldTermStructure",
    "Statistics",
    "GaussianPathGenerator",
    "Path",
    "BlackConstantVol",
    "ImpliedVolTermStructure",
    "VolatilitySurface",
    "AnalyticEuropeanEngine",
    "ForwardEngine",
    "ForwardOptionArguments",
    "ForwardPerformanceEngine",
    "GenericEngine",
    "MCEuropeanEngine",
    "McEuropean",
    "MonteCarloParams",
    "PlainOptionArguments",
    "PlainOptionResults",
]
