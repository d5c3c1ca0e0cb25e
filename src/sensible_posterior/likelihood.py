from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Mapping, Optional, Protocol, Tuple

import numpy as np

from .inference import chi_squared, gaussian_loglike
from .params import ParameterSpace

Observable = Callable[[Mapping[str, float]], float]


class Likelihood(Protocol):
    """What an Analysis needs from a likelihood."""

    @property
    def parameters(self) -> ParameterSpace: ...

    def evaluate(self) -> float: ...

    def bootstrap_p_value(self, simulated_datasets: int) -> Tuple[float, float]: ...

    def number_of_observations(self) -> int: ...

    def clone(self) -> "Likelihood": ...


@dataclass(frozen=True)
class Measurement:
    observable: Observable
    mean: float
    sigma: float
    name: str = ""


class GaussianLikelihood:
    """Independent Gaussian measurements of observables.

    Observables are callables receiving {name: value} of the parameter
    space. Predictions are cached by evaluate() and reused by
    bootstrap_p_value().
    """

    def __init__(
        self,
        parameters: Optional[ParameterSpace] = None,
        *,
        rng: Optional[np.random.Generator] = None,
    ):
        self._parameters = ParameterSpace() if parameters is None else parameters
        self._rng = np.random.default_rng() if rng is None else rng
        self._measurements: List[Measurement] = []
        self._predictions: Optional[np.ndarray] = None

    @property
    def parameters(self) -> ParameterSpace:
        return self._parameters

    @property
    def measurements(self) -> Tuple[Measurement, ...]:
        return tuple(self._measurements)

    def add(self, observable: Observable, mean: float, sigma: float, *, name: str = "") -> None:
        """Register one measurement `mean ± sigma` of `observable`."""
        if not callable(observable):
            raise TypeError("observable must be callable.")
        sigma = float(sigma)
        if not (np.isfinite(sigma) and sigma > 0.0):
            raise ValueError(f"sigma must be finite and > 0, got {sigma}.")
        label = name or getattr(observable, "__name__", "")
        self._measurements.append(
            Measurement(observable=observable, mean=float(mean), sigma=sigma, name=label)
        )
        self._predictions = None

    def number_of_observations(self) -> int:
        return len(self._measurements)

    def _arrays(self) -> Tuple[np.ndarray, np.ndarray]:
        mean = np.array([m.mean for m in self._measurements], dtype=float)
        sigma = np.array([m.sigma for m in self._measurements], dtype=float)
        return mean, sigma

    def predictions(self) -> np.ndarray:
        """Recompute all observables at the current parameter values."""
        values = self._parameters.as_dict()
        pred = np.array([float(m.observable(values)) for m in self._measurements], dtype=float)
        self._predictions = pred
        return pred

    def evaluate(self) -> float:
        pred = self.predictions()
        if pred.size == 0:
            return 0.0
        mean, sigma = self._arrays()
        return gaussian_loglike(pred, mean, sigma)

    def __call__(self) -> float:
        return self.evaluate()

    def chi_squared(self) -> float:
        """Chi-square of the measurements against the cached predictions."""
        pred = self._predictions if self._predictions is not None else self.predictions()
        mean, sigma = self._arrays()
        return chi_squared(pred, mean, sigma)

    def bootstrap_p_value(self, simulated_datasets: int) -> Tuple[float, float]:
        """Fraction of simulated datasets at least as discrepant as the data.

        Datasets are drawn around the cached predictions, so evaluate() must
        run at the point of interest first. Returns (p_value, stderr).
        """
        n = int(simulated_datasets)
        if n <= 0:
            raise ValueError(f"simulated_datasets must be positive, got {simulated_datasets!r}.")

        pred = self._predictions if self._predictions is not None else self.predictions()
        mean, sigma = self._arrays()
        observed = chi_squared(pred, mean, sigma)

        z = self._rng.normal(size=(n, pred.size))
        simulated = np.sum(z * z, axis=1)

        p = float(np.count_nonzero(simulated >= observed)) / n
        stderr = float(np.sqrt(p * (1.0 - p) / n))
        return p, stderr

    def clone(self) -> "GaussianLikelihood":
        """Deep copy with an independent parameter space and generator."""
        seed = int(self._rng.integers(0, 2**63 - 1))
        out = GaussianLikelihood(self._parameters.clone(), rng=np.random.default_rng(seed))
        out._measurements = list(self._measurements)
        return out

    def __repr__(self) -> str:
        names = [m.name for m in self._measurements]
        return f"GaussianLikelihood(observations={names})"
