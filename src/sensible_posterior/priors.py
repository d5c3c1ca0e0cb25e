"""Prior densities over parameters of a ParameterSpace.

Every prior governs a fixed set of parameters and evaluates its log-density
at whatever values the bound ParameterSpace currently holds. Priors never
write parameter values themselves.
"""
from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Iterator, List, Sequence, Tuple

import numpy as np
from scipy.stats import multivariate_normal

from .inference import split_gaussian_logpdf, split_gaussian_mass
from .params import Parameter, ParameterDescription, ParameterSpace


__all__ = [
    "LogPrior",
    "FlatPrior",
    "GaussPrior",
    "DiscretePrior",
    "MultivariateGaussPrior",
]


def _bind(space: ParameterSpace, source: Parameter) -> Parameter:
    """Return the parameter of the same name in space, declaring it if needed."""
    return space.declare(source.name, source.value, source.min, source.max)


def _check_range(name: str, range: Tuple[float, float]) -> Tuple[float, float]:
    lo, hi = float(range[0]), float(range[1])
    if not (math.isfinite(lo) and math.isfinite(hi) and lo < hi):
        raise ValueError(f"Range for {name!r} must be finite with min < max, got ({lo}, {hi}).")
    return lo, hi


class LogPrior(ABC):
    """Abstract base for log-prior components."""

    def __init__(self, space: ParameterSpace, descriptions: Sequence[ParameterDescription]):
        self._space = space
        self._descriptions: List[ParameterDescription] = list(descriptions)

    @property
    def parameters(self) -> ParameterSpace:
        return self._space

    def __iter__(self) -> Iterator[ParameterDescription]:
        return iter(self._descriptions)

    def __len__(self) -> int:
        return len(self._descriptions)

    def names(self) -> Tuple[str, ...]:
        return tuple(d.name for d in self._descriptions)

    def __call__(self) -> float:
        return self.evaluate()

    @abstractmethod
    def evaluate(self) -> float:
        """Return the log-density at the current parameter values."""

    @abstractmethod
    def clone(self, space: ParameterSpace) -> "LogPrior":
        """Return the same prior bound to the parameters of `space`."""


class FlatPrior(LogPrior):
    """Uniform density over [min, max]."""

    def __init__(self, space: ParameterSpace, name: str, range: Tuple[float, float]):
        lo, hi = _check_range(name, range)
        parameter = space.declare(name, 0.5 * (lo + hi), lo, hi)
        super().__init__(space, [ParameterDescription(parameter)])
        self.range = (lo, hi)
        self._log_density = -math.log(hi - lo)

    def evaluate(self) -> float:
        x = self._descriptions[0].value
        lo, hi = self.range
        if x < lo or x > hi:
            return -math.inf
        return self._log_density

    def clone(self, space: ParameterSpace) -> "FlatPrior":
        _bind(space, self._descriptions[0].parameter)
        return FlatPrior(space, self._descriptions[0].name, self.range)

    def __repr__(self) -> str:
        return f"FlatPrior({self._descriptions[0].name!r}, range={self.range})"


class GaussPrior(LogPrior):
    """Two-sided Gaussian, truncated to and normalised over `range`.

    `lower` and `upper` are the one-sigma points below and above `central`.
    """

    def __init__(
        self,
        space: ParameterSpace,
        name: str,
        range: Tuple[float, float],
        lower: float,
        central: float,
        upper: float,
    ):
        lo, hi = _check_range(name, range)
        lower, central, upper = float(lower), float(central), float(upper)
        if not (lower < central < upper):
            raise ValueError(
                f"GaussPrior for {name!r} requires lower < central < upper, got ({lower}, {central}, {upper})."
            )
        mass = split_gaussian_mass(lo, hi, lower, central, upper)
        if not mass > 0.0:
            raise ValueError(f"GaussPrior for {name!r} has no probability mass inside {lo, hi}.")

        parameter = space.declare(name, min(max(central, lo), hi), lo, hi)
        super().__init__(space, [ParameterDescription(parameter)])
        self.range = (lo, hi)
        self.lower = lower
        self.central = central
        self.upper = upper
        self._log_norm = -math.log(mass)

    def evaluate(self) -> float:
        x = self._descriptions[0].value
        lo, hi = self.range
        if x < lo or x > hi:
            return -math.inf
        return split_gaussian_logpdf(x, self.lower, self.central, self.upper) + self._log_norm

    def clone(self, space: ParameterSpace) -> "GaussPrior":
        _bind(space, self._descriptions[0].parameter)
        return GaussPrior(
            space, self._descriptions[0].name, self.range, self.lower, self.central, self.upper
        )

    def __repr__(self) -> str:
        return (
            f"GaussPrior({self._descriptions[0].name!r}, range={self.range}, "
            f"lower={self.lower}, central={self.central}, upper={self.upper})"
        )


class DiscretePrior(LogPrior):
    """Uniform probability over a finite set of values."""

    def __init__(self, space: ParameterSpace, name: str, values: Sequence[float]):
        vals = tuple(sorted(set(float(v) for v in values)))
        if not vals:
            raise ValueError(f"DiscretePrior for {name!r} requires at least one value.")
        parameter = space.declare(name, vals[0], vals[0], vals[-1])
        super().__init__(space, [ParameterDescription(parameter, discrete=True)])
        self.values = vals
        self._log_density = -math.log(len(vals))

    def evaluate(self) -> float:
        x = self._descriptions[0].value
        if x in self.values:
            return self._log_density
        return -math.inf

    def clone(self, space: ParameterSpace) -> "DiscretePrior":
        _bind(space, self._descriptions[0].parameter)
        return DiscretePrior(space, self._descriptions[0].name, self.values)

    def __repr__(self) -> str:
        return f"DiscretePrior({self._descriptions[0].name!r}, values={self.values})"


class MultivariateGaussPrior(LogPrior):
    """Correlated Gaussian over several parameters.

    Parameters not yet present in `space` are declared at the mean with
    bounds of mean ± 5 sigma (marginal).
    """

    def __init__(
        self,
        space: ParameterSpace,
        names: Sequence[str],
        mean: Sequence[float],
        covariance: Sequence[Sequence[float]],
    ):
        names = tuple(str(n) for n in names)
        mu = np.asarray(mean, dtype=float).reshape((-1,))
        cov = np.asarray(covariance, dtype=float)
        if len(names) == 0:
            raise ValueError("MultivariateGaussPrior requires at least one parameter name.")
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate parameter names in MultivariateGaussPrior: {names}.")
        if mu.shape != (len(names),):
            raise ValueError(f"mean shape {mu.shape} does not match {len(names)} parameter names.")
        if cov.shape != (len(names), len(names)):
            raise ValueError(f"covariance shape {cov.shape} != ({len(names)}, {len(names)}).")
        if not np.allclose(cov, cov.T):
            raise ValueError("covariance must be symmetric.")

        # Raises for covariances that are not positive semi-definite.
        self._dist = multivariate_normal(mean=mu, cov=cov)

        sig = np.sqrt(np.diag(cov))
        descriptions = []
        for j, n in enumerate(names):
            p = space.declare(n, mu[j], mu[j] - 5.0 * sig[j], mu[j] + 5.0 * sig[j])
            descriptions.append(ParameterDescription(p))
        super().__init__(space, descriptions)
        self.mean = mu
        self.covariance = cov

    def evaluate(self) -> float:
        x = np.array([d.value for d in self._descriptions], dtype=float)
        return float(self._dist.logpdf(x))

    def clone(self, space: ParameterSpace) -> "MultivariateGaussPrior":
        for d in self._descriptions:
            _bind(space, d.parameter)
        return MultivariateGaussPrior(space, self.names(), self.mean, self.covariance)

    def __repr__(self) -> str:
        return f"MultivariateGaussPrior({self.names()})"
