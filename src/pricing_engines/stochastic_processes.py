"""Gaussian path generation for one-factor log-price processes."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .exceptions import ValidationError

__all__ = ["Path", "PathBatch", "GaussianPathGenerator"]


@dataclass(frozen=True, slots=True)
class Path:
    """One simulated path of log-price increments.

    Attributes
    ==========
    times: np.ndarray
        end time of each step, shape (time_steps,)
    drift: np.ndarray
        deterministic part of each log increment, shape (time_steps,)
    diffusion: np.ndarray
        random part of each log increment, shape (time_steps,)
    """

    times: np.ndarray
    drift: np.ndarray
    diffusion: np.ndarray

    def __len__(self) -> int:
        return self.drift.size

    def log_return(self) -> float:
        """Total log-return over the path."""
        return float(np.sum(self.drift) + np.sum(self.diffusion))

    def antithetic(self) -> "Path":
        """The reflected path: same drift, negated diffusion."""
        return Path(times=self.times, drift=self.drift, diffusion=-self.diffusion)


@dataclass(frozen=True, slots=True)
class PathBatch:
    """Several paths sharing one time grid; diffusion has shape (n_paths, time_steps)."""

    times: np.ndarray
    drift: np.ndarray
    diffusion: np.ndarray

    def __len__(self) -> int:
        return self.diffusion.shape[0]

    def log_returns(self, antithetic: bool = False) -> np.ndarray:
        """Total log-return of each path (of its reflection if ``antithetic``)."""
        total_diffusion = np.sum(self.diffusion, axis=1)
        if antithetic:
            total_diffusion = -total_diffusion
        return float(np.sum(self.drift)) + total_diffusion


class GaussianPathGenerator:
    """Generates paths of a Brownian motion with constant drift.

    The log-price follows ``d ln S = drift dt + sqrt(variance) dW`` on an
    evenly spaced grid over ``[0, length]``; with ``drift = r - q - sigma^2/2``
    and ``variance = sigma^2`` this is risk-neutral geometric Brownian motion.

    The generator is an infinite iterator over :class:`Path` objects.  The
    sequence is fixed by ``seed``: :meth:`reset` restarts it from the first
    path, and :meth:`substream` hands out further independent, equally
    reproducible sequences (one per batch index) for parallel sampling.

    Parameters
    ==========
    drift: float
        drift of the log-price per unit time
    variance: float
        variance of the log-price per unit time
    length: float
        time horizon in years
    time_steps: int
        number of equal steps in the horizon
    seed: int | np.random.SeedSequence, optional
        seed of the pseudo-random source; if None fresh entropy is drawn once
        and kept, so reset() still replays the same sequence
    """

    def __init__(
        self,
        drift: float,
        variance: float,
        length: float,
        time_steps: int = 1,
        seed: int | np.random.SeedSequence | None = None,
    ) -> None:
        if not np.isfinite(drift):
            raise ValidationError("drift must be finite")
        if not np.isfinite(variance) or variance < 0.0:
            raise ValidationError("variance must be finite and non-negative")
        if not np.isfinite(length) or length <= 0.0:
            raise ValidationError("length must be positive and finite")
        if time_steps < 1:
            raise ValidationError("time_steps must be >= 1")

        self.drift = float(drift)
        self.variance = float(variance)
        self.length = float(length)
        self.time_steps = int(time_steps)
        if isinstance(seed, np.random.SeedSequence):
            self._seed_sequence = seed
        else:
            self._seed_sequence = np.random.SeedSequence(seed)

        dt = self.length / self.time_steps
        self.times = np.linspace(dt, self.length, self.time_steps)
        self._step_drift = np.full(self.time_steps, self.drift * dt)
        self._step_std = np.sqrt(self.variance * dt)
        self.reset()

    def reset(self) -> None:
        """Restart the path sequence from its first path."""
        self._rng = np.random.default_rng(self._seed_sequence)

    def __iter__(self) -> "GaussianPathGenerator":
        return self

    def __next__(self) -> Path:
        return self.next()

    def next(self) -> Path:
        """Draw the next path of the sequence."""
        z = self._rng.standard_normal(self.time_steps)
        return Path(times=self.times, drift=self._step_drift, diffusion=self._step_std * z)

    def next_batch(self, n_paths: int) -> PathBatch:
        """Draw the next ``n_paths`` paths at once."""
        if n_paths < 1:
            raise ValidationError("n_paths must be >= 1")
        z = self._rng.standard_normal((n_paths, self.time_steps))
        return PathBatch(times=self.times, drift=self._step_drift, diffusion=self._step_std * z)

    def substream(self, index: int) -> "GaussianPathGenerator":
        """Independent generator for batch ``index``, reproducible from this seed."""
        if index < 0:
            raise ValidationError("substream index must be >= 0")
        child = np.random.SeedSequence(
            entropy=self._seed_sequence.entropy,
            spawn_key=tuple(self._seed_sequence.spawn_key) + (int(index),),
        )
        return GaussianPathGenerator(
            drift=self.drift,
            variance=self.variance,
            length=self.length,
            time_steps=self.time_steps,
            seed=child,
        )
