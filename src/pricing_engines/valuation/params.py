"""Parameter classes for method-specific valuation configuration.

Each pricing method has its own parameter class that explicitly documents the
configuration options available for that method.
"""

from dataclasses import dataclass

from ..exceptions import ValidationError


@dataclass(frozen=True, slots=True)
class MonteCarloParams:
    """Parameters for Monte Carlo option valuation.

    Exactly one stopping rule applies: a fixed ``samples`` count, or a target
    ``tolerance`` on the standard error (bounded by ``max_samples``).

    Attributes
    ==========
    samples:
        Fixed number of samples to draw. Default: 100_000.
    tolerance:
        Target absolute standard error of the estimate. If set, samples are
        added until the error estimate falls below it.
    max_samples:
        Upper bound on samples when pricing to a tolerance. Default: 10_000_000.
    antithetic_variance:
        Average each path with its reflection. Default: True.
    random_seed:
        Seed fixed at engine construction so repeated calculations reproduce
        identical results. Default: 42.
    time_steps:
        Steps per path. One step suffices for European payoffs. Default: 1.
    batch_size:
        Paths drawn per batch; batch ``i`` always uses random substream ``i``.
        Default: 50_000.
    workers:
        Threads sampling batches concurrently. Results do not depend on it.
        Default: 1.
    std_error_warn_ratio:
        Log a warning when std_error / |value| exceeds this ratio. None disables.
    log_timings:
        Log wall-clock timings of the sampling loop at debug level.
    """

    samples: int | None = 100_000
    tolerance: float | None = None
    max_samples: int = 10_000_000
    antithetic_variance: bool = True
    random_seed: int = 42
    time_steps: int = 1
    batch_size: int = 50_000
    workers: int = 1
    std_error_warn_ratio: float | None = 0.05
    log_timings: bool = False

    def __post_init__(self):
        if (self.samples is None) == (self.tolerance is None):
            raise ValidationError("Exactly one of samples and tolerance must be set")
        if self.samples is not None and self.samples < 2:
            raise ValidationError(f"samples must be >= 2, got {self.samples}")
        if self.tolerance is not None and self.tolerance <= 0:
            raise ValidationError(f"tolerance must be positive, got {self.tolerance}")
        if self.max_samples < 2:
            raise ValidationError(f"max_samples must be >= 2, got {self.max_samples}")
        if self.time_steps < 1:
            raise ValidationError(f"time_steps must be >= 1, got {self.time_steps}")
        if self.batch_size < 1:
            raise ValidationError(f"batch_size must be >= 1, got {self.batch_size}")
        if self.workers < 1:
            raise ValidationError(f"workers must be >= 1, got {self.workers}")
        if self.std_error_warn_ratio is not None and self.std_error_warn_ratio <= 0:
            raise ValidationError(
                f"std_error_warn_ratio must be positive, got {self.std_error_warn_ratio}"
            )
