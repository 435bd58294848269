"""Monte Carlo simulation pricing: path pricers, the sampling model and engines."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
import logging

import numpy as np
import pandas as pd

from ..enums import ExerciseType, OptionType
from ..exceptions import (
    ConfigurationError,
    ConvergenceError,
    UnsupportedFeatureError,
    ValidationError,
)
from ..statistics import Statistics
from ..stochastic_processes import GaussianPathGenerator, Path, PathBatch
from ..utils import log_timing
from .core import GenericEngine, PlainOptionArguments, PlainOptionResults
from .params import MonteCarloParams

logger = logging.getLogger(__name__)


def _warn_if_high_std_error(
    *,
    std_error: float,
    value: float,
    samples: int,
    warn_ratio: float | None,
    label: str,
) -> None:
    """Emit a warning log if MC standard error is high relative to the estimate."""
    if warn_ratio is None:
        return
    scale = max(abs(value), 1.0e-12)
    ratio = std_error / scale
    logger.debug(
        "MC %s std_error=%.6g ratio=%.6g samples=%d",
        label,
        std_error,
        ratio,
        samples,
    )
    if ratio > warn_ratio:
        logger.warning(
            "MC %s standard error high: std_error=%.6g ratio=%.6g (>%.3g) samples=%d",
            label,
            std_error,
            ratio,
            warn_ratio,
            samples,
        )


def _vanilla_payoff(option_type: OptionType, strike: float, spot: np.ndarray) -> np.ndarray:
    """Vectorized vanilla payoff: max(S-K,0) for calls, max(K-S,0) for puts."""
    if option_type is OptionType.CALL:
        return np.maximum(spot - strike, 0.0)
    return np.maximum(strike - spot, 0.0)


# ---------------------------------------------------------------------------
# Path pricers
# ---------------------------------------------------------------------------


class PathPricer(ABC):
    """Maps one simulated path to one discounted payoff sample."""

    @abstractmethod
    def __call__(self, path: Path) -> float:
        """Discounted payoff of a single path."""

    def price_batch(self, batch: PathBatch) -> np.ndarray:
        """Discounted payoff of every path in ``batch``."""
        return np.array(
            [
                self(Path(times=batch.times, drift=batch.drift, diffusion=diffusion))
                for diffusion in batch.diffusion
            ],
            dtype=float,
        )


class EuropeanPathPricer(PathPricer):
    """Discounted European payoff of the terminal price ``S0 * exp(log_return)``.

    With ``antithetic_variance`` each sample is the average of the payoff on
    the path and on its reflection (diffusion negated about the drift).
    """

    def __init__(
        self,
        option_type: OptionType,
        underlying: float,
        strike: float,
        discount: float,
        antithetic_variance: bool = False,
    ) -> None:
        if not isinstance(option_type, OptionType):
            raise ConfigurationError(
                f"option_type must be OptionType enum, got {type(option_type).__name__}"
            )
        if underlying <= 0.0:
            raise ValidationError("underlying must be positive")
        if strike < 0.0:
            raise ValidationError("strike must be >= 0")
        if discount <= 0.0:
            raise ValidationError("discount must be positive")
        self.option_type = option_type
        self.underlying = float(underlying)
        self.strike = float(strike)
        self.discount = float(discount)
        self.antithetic_variance = bool(antithetic_variance)

    def _payoff(self, log_returns: np.ndarray | float) -> np.ndarray:
        spot = self.underlying * np.exp(log_returns)
        return _vanilla_payoff(self.option_type, self.strike, spot)

    def __call__(self, path: Path) -> float:
        payoff = self._payoff(path.log_return())
        if self.antithetic_variance:
            payoff = 0.5 * (payoff + self._payoff(path.antithetic().log_return()))
        return float(self.discount * payoff)

    def price_batch(self, batch: PathBatch) -> np.ndarray:
        payoff = self._payoff(batch.log_returns())
        if self.antithetic_variance:
            payoff = 0.5 * (payoff + self._payoff(batch.log_returns(antithetic=True)))
        return self.discount * payoff


# ---------------------------------------------------------------------------
# Sampling model
# ---------------------------------------------------------------------------


class MonteCarloModel:
    """Accumulates path-pricer samples into a Statistics object.

    Samples are drawn in batches of ``batch_size``; batch ``i`` (counted over
    the model's lifetime) always draws from ``path_generator.substream(i)``
    and batch statistics are merged in batch order.  The estimate therefore
    depends on the seed and the sequence of ``add_samples`` calls, never on
    ``workers``.
    """

    def __init__(
        self,
        path_generator: GaussianPathGenerator,
        path_pricer: PathPricer,
        statistics: Statistics | None = None,
        batch_size: int = 50_000,
        workers: int = 1,
    ) -> None:
        if batch_size < 1:
            raise ValidationError("batch_size must be >= 1")
        if workers < 1:
            raise ValidationError("workers must be >= 1")
        self.path_generator = path_generator
        self.path_pricer = path_pricer
        self._statistics = Statistics() if statistics is None else statistics
        self.batch_size = int(batch_size)
        self.workers = int(workers)
        self._batches_drawn = 0

    def sample_accumulator(self) -> Statistics:
        return self._statistics

    def _sample_batch(self, index: int, size: int) -> Statistics:
        paths = self.path_generator.substream(index).next_batch(size)
        partial = Statistics()
        partial.add_sequence(self.path_pricer.price_batch(paths))
        return partial

    def add_samples(self, samples: int) -> None:
        """Draw ``samples`` more paths and accumulate their prices."""
        if samples < 1:
            raise ValidationError(f"samples must be >= 1, got {samples}")
        sizes = [self.batch_size] * (samples // self.batch_size)
        if samples % self.batch_size:
            sizes.append(samples % self.batch_size)
        indices = range(self._batches_drawn, self._batches_drawn + len(sizes))
        self._batches_drawn += len(sizes)

        if self.workers == 1 or len(sizes) == 1:
            partials = [self._sample_batch(i, n) for i, n in zip(indices, sizes)]
        else:
            with ThreadPoolExecutor(max_workers=self.workers) as executor:
                partials = list(executor.map(self._sample_batch, indices, sizes))

        for partial in partials:
            self._statistics.merge(partial)
        logger.debug(
            "MC added samples=%d batches=%d total=%d",
            samples,
            len(sizes),
            self._statistics.samples,
        )


# ---------------------------------------------------------------------------
# European Monte Carlo pricer
# ---------------------------------------------------------------------------


class McEuropean:
    """Monte Carlo pricer of a European option under Black-Scholes dynamics.

    The log-price drifts at ``r - q - sigma^2/2`` with variance ``sigma^2``
    over ``residual_time``; payoffs are discounted at ``exp(-r T)``.  Inputs
    are checked here, at construction, rather than during simulation.

    Parameters
    ==========
    option_type: OptionType
        CALL or PUT
    underlying: float
        spot level
    strike: float
        strike price
    dividend_yield: float
        continuous dividend yield
    risk_free_rate: float
        continuously-compounded risk-free rate
    residual_time: float
        time to maturity in years
    volatility: float
        Black volatility
    antithetic_variance: bool
        pair each path with its reflection
    seed: int
        seed of the path generator
    """

    min_samples = 1023

    def __init__(
        self,
        option_type: OptionType,
        underlying: float,
        strike: float,
        dividend_yield: float,
        risk_free_rate: float,
        residual_time: float,
        volatility: float,
        antithetic_variance: bool = True,
        seed: int = 42,
        time_steps: int = 1,
        batch_size: int = 50_000,
        workers: int = 1,
    ) -> None:
        if not np.isfinite(residual_time) or residual_time <= 0.0:
            raise ValidationError(
                f"residual_time must be positive and finite, got {residual_time}"
            )
        if not np.isfinite(volatility) or volatility <= 0.0:
            raise ValidationError(f"volatility must be positive and finite, got {volatility}")
        if not np.isfinite(dividend_yield) or not np.isfinite(risk_free_rate):
            raise ValidationError("dividend_yield and risk_free_rate must be finite")

        mu = risk_free_rate - dividend_yield - 0.5 * volatility * volatility
        path_generator = GaussianPathGenerator(
            drift=mu,
            variance=volatility * volatility,
            length=residual_time,
            time_steps=time_steps,
            seed=seed,
        )
        path_pricer = EuropeanPathPricer(
            option_type,
            underlying,
            strike,
            float(np.exp(-risk_free_rate * residual_time)),
            antithetic_variance,
        )
        self._model = MonteCarloModel(
            path_generator,
            path_pricer,
            Statistics(),
            batch_size=batch_size,
            workers=workers,
        )

    def sample_accumulator(self) -> Statistics:
        return self._model.sample_accumulator()

    def value_with_samples(self, samples: int) -> float:
        """Estimate with exactly ``samples`` samples in total."""
        drawn = self.sample_accumulator().samples
        if samples < drawn:
            raise ValidationError(
                f"{samples} samples requested but {drawn} already drawn; "
                "the sample count cannot decrease"
            )
        if samples > drawn:
            self._model.add_samples(samples - drawn)
        return self.sample_accumulator().mean

    def value(self, tolerance: float, max_samples: int = 10_000_000) -> float:
        """Add samples until the standard error falls below ``tolerance``.

        Each round aims for the sample count the current error suggests
        (error scales as 1/sqrt(n)), slightly undershooting to avoid
        overdrawing.

        Raises
        ======
        ConvergenceError
            if reaching ``tolerance`` needs more than ``max_samples`` samples
        """
        if tolerance <= 0.0:
            raise ValidationError(f"tolerance must be positive, got {tolerance}")
        stats = self.sample_accumulator()
        if max_samples < 2:
            raise ValidationError(f"max_samples must be >= 2, got {max_samples}")
        initial = min(self.min_samples, max_samples)
        if stats.samples < initial:
            self._model.add_samples(initial - stats.samples)

        error = stats.error_estimate
        while error > tolerance:
            samples = stats.samples
            order = (error / tolerance) ** 2
            next_batch = max(int(samples * order * 0.8 - samples), self.min_samples)
            next_batch = min(next_batch, max_samples - samples)
            if next_batch <= 0:
                raise ConvergenceError(
                    f"max number of samples ({max_samples}) reached with "
                    f"error estimate {error:.6g} > tolerance {tolerance:.6g}"
                )
            self._model.add_samples(next_batch)
            error = stats.error_estimate
        return stats.mean

    def error_estimate(self) -> float:
        return self.sample_accumulator().error_estimate

    def convergence_table(self, sample_counts: Iterable[int]) -> pd.DataFrame:
        """Estimate and standard error after each cumulative sample count.

        Returns
        =======
        pd.DataFrame
            columns ``value`` and ``error_estimate`` indexed by ``samples``
        """
        rows = []
        for samples in sorted(set(int(n) for n in sample_counts)):
            value = self.value_with_samples(samples)
            rows.append(
                {"samples": samples, "value": value, "error_estimate": self.error_estimate()}
            )
        return pd.DataFrame(rows, columns=["samples", "value", "error_estimate"]).set_index(
            "samples"
        )


class MCEuropeanEngine(GenericEngine[PlainOptionArguments, PlainOptionResults]):
    """Monte Carlo engine for European options.

    Reads the risk-free rate and dividend yield as zero yields to maturity and
    the volatility as the Black vol at (maturity, strike), then runs a fresh
    :class:`McEuropean` seeded with ``params.random_seed`` on every
    calculation, so unchanged arguments reproduce identical results.

    Only ``value`` and ``error_estimate`` are produced; Greeks stay None.
    """

    def __init__(self, params: MonteCarloParams | None = None) -> None:
        super().__init__(PlainOptionArguments(), PlainOptionResults())
        if params is None:
            params = MonteCarloParams()
        if not isinstance(params, MonteCarloParams):
            raise ConfigurationError(
                f"MCEuropeanEngine requires MonteCarloParams, got {type(params).__name__}"
            )
        self.params = params

    def _build_pricer(self) -> McEuropean:
        args = self._arguments
        return McEuropean(
            option_type=args.option_type,
            underlying=float(args.underlying),
            strike=float(args.strike),
            dividend_yield=args.dividend_curve.zero_yield(args.maturity),
            risk_free_rate=args.risk_free_curve.zero_yield(args.maturity),
            residual_time=args.maturity_time(),
            volatility=args.vol_surface.black_vol(args.maturity, float(args.strike)),
            antithetic_variance=self.params.antithetic_variance,
            seed=self.params.random_seed,
            time_steps=self.params.time_steps,
            batch_size=self.params.batch_size,
            workers=self.params.workers,
        )

    def calculate(self) -> None:
        self.validate()
        if self._arguments.exercise_type is not ExerciseType.EUROPEAN:
            raise UnsupportedFeatureError(
                "MCEuropeanEngine only prices European exercise; "
                f"got {self._arguments.exercise_type.name}"
            )

        pricer = self._build_pricer()
        with log_timing(logger, "MC European calculate", self.params.log_timings):
            if self.params.samples is not None:
                value = pricer.value_with_samples(self.params.samples)
            else:
                value = pricer.value(self.params.tolerance, self.params.max_samples)
        error = pricer.error_estimate()
        _warn_if_high_std_error(
            std_error=error,
            value=value,
            samples=pricer.sample_accumulator().samples,
            warn_ratio=self.params.std_error_warn_ratio,
            label="European",
        )
        self._publish_results(value=value, error_estimate=error)
