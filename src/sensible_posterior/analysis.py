from __future__ import annotations

import logging
import math
from typing import List, NamedTuple, Optional, Sequence, Tuple
from warnings import warn

import numpy as np

from .backends import minimize_simplex
from .errors import DimensionMismatchError, UndefinedPriorError, UnknownParameterError
from .inference import dof_corrected_p_value
from .likelihood import Likelihood
from .options import OptimizationOptions
from .params import Parameter, ParameterDescription, ParameterSpace
from .priors import LogPrior

logger = logging.getLogger(__name__)


class Mode(NamedTuple):
    """Result of Analysis.optimize."""

    parameters: np.ndarray
    log_posterior: float


class GoodnessOfFit(NamedTuple):
    """Result of Analysis.goodness_of_fit."""

    p_empirical: float
    p_analytical: float


def _format_point(values: Sequence[float]) -> str:
    return "( " + " ".join(repr(float(v)) for v in values) + " )"


class Analysis:
    """Posterior built from a likelihood and independent prior components.

    The analysis shares the likelihood's ParameterSpace. Priors added via
    add() are cloned into that space, so a prior constructed against any
    other space can be registered. No parameter may be governed by two
    priors.

    An Analysis is not safe for concurrent evaluation: every evaluation
    writes a candidate point into the shared parameter space first.
    """

    def __init__(self, likelihood: Likelihood):
        self._likelihood = likelihood
        self._parameters: ParameterSpace = likelihood.parameters
        self._priors: List[LogPrior] = []
        self._descriptions: List[ParameterDescription] = []
        self._names: set[str] = set()

    # ---- registration ----
    def add(self, prior: LogPrior, nuisance: bool = False) -> bool:
        """Register a prior component.

        Returns False, leaving the analysis untouched, if any parameter of
        `prior` is already governed by a registered prior.
        """
        names = prior.names()
        if len(set(names)) != len(names) or any(n in self._names for n in names):
            logger.debug("Rejected prior %r: parameter already registered", prior)
            return False

        clone = prior.clone(self._parameters)
        for d in clone:
            d.nuisance = bool(nuisance)
            self._descriptions.append(d)
            self._names.add(d.name)
        self._priors.append(clone)
        return True

    # ---- accessors ----
    @property
    def parameters(self) -> ParameterSpace:
        return self._parameters

    @property
    def likelihood(self) -> Likelihood:
        return self._likelihood

    @property
    def priors(self) -> Tuple[LogPrior, ...]:
        return tuple(self._priors)

    @property
    def parameter_descriptions(self) -> Tuple[ParameterDescription, ...]:
        return tuple(self._descriptions)

    def __len__(self) -> int:
        return len(self._descriptions)

    def __getitem__(self, index: int) -> Parameter:
        return self._descriptions[index].parameter

    def index(self, name: str) -> int:
        """Position of `name` among the registered parameters."""
        for i, d in enumerate(self._descriptions):
            if d.name == name:
                return i
        raise UnknownParameterError(name)

    def nuisance(self, name: str) -> bool:
        """Nuisance flag of `name`; False for unknown names."""
        try:
            i = self.index(name)
        except UnknownParameterError:
            return False
        return self._descriptions[i].nuisance

    def prior_for(self, name: str) -> Optional[LogPrior]:
        """First registered prior governing `name`, or None."""
        for p in self._priors:
            if name in p.names():
                return p
        return None

    # ---- evaluation ----
    def set_point(self, values: Sequence[float]) -> None:
        """Write `values` into the registered parameters, in registration order."""
        x = self._check_point("set_point", values)
        for d, v in zip(self._descriptions, x):
            d.parameter.set(v)

    def log_prior(self) -> float:
        if not self._priors:
            raise UndefinedPriorError("Analysis.log_prior(): prior is undefined")
        # Components are independent: logs add up.
        return float(sum(p.evaluate() for p in self._priors))

    def log_likelihood(self) -> float:
        return float(self._likelihood.evaluate())

    def log_posterior(self) -> float:
        return self.log_prior() + self.log_likelihood()

    def _check_point(self, operation: str, values: Sequence[float]) -> np.ndarray:
        x = np.asarray(values, dtype=float).reshape((-1,))
        if x.shape[0] != len(self._descriptions):
            raise DimensionMismatchError(f"Analysis.{operation}", len(self._descriptions), x.shape[0])
        return x

    def _negative_log_posterior(self, x: np.ndarray) -> float:
        for d, v in zip(self._descriptions, x):
            d.parameter.set(v)
        return -(self.log_prior() + self.log_likelihood())

    # ---- optimisation ----
    def optimize(
        self,
        initial_guess: Sequence[float],
        options: Optional[OptimizationOptions] = None,
    ) -> Mode:
        """Find the posterior mode with a Nelder-Mead simplex search.

        Initial steps are (max - min) * options.initial_step_size per
        parameter. If the search does not end strictly below the negative
        log-posterior at `initial_guess`, the initial guess is returned
        unchanged together with its log-posterior.

        The parameter space holds the returned point afterwards.
        """
        x0 = self._check_point("optimize", initial_guess)
        options = OptimizationOptions.defaults() if options is None else options

        initial_minimum = self._negative_log_posterior(x0)
        if math.isnan(initial_minimum):
            initial_minimum = math.inf

        steps = np.array(
            [(d.max - d.min) * options.initial_step_size for d in self._descriptions],
            dtype=float,
        )
        res = minimize_simplex(self._negative_log_posterior, x0, steps, options)

        if not res.converged:
            warn(
                f"Simplex algorithm did not converge within {options.maximum_iterations} iterations.",
                UserWarning,
                stacklevel=2,
            )

        if not res.fun < initial_minimum:
            warn("Simplex algorithm did not improve on initial guess", UserWarning, stacklevel=2)
            self.set_point(x0)
            return Mode(parameters=x0.copy(), log_posterior=-initial_minimum)

        self.set_point(res.x)
        logger.info(
            "Results: maximum of posterior = %r at %s", -res.fun, _format_point(res.x)
        )
        return Mode(parameters=res.x.copy(), log_posterior=-res.fun)

    # ---- goodness of fit ----
    def goodness_of_fit(
        self, parameter_values: Sequence[float], simulated_datasets: int
    ) -> GoodnessOfFit:
        """p-values of the data at `parameter_values`.

        Returns the empirical p-value from `simulated_datasets` bootstrap
        datasets, and the analytic p-value obtained by converting it into a
        chi-square statistic with n_observations degrees of freedom and
        reading that statistic off a chi-square distribution with
        n_observations - n_parameters degrees of freedom.
        """
        x = self._check_point("goodness_of_fit", parameter_values)
        self.set_point(x)
        logger.info("Calculating p-value at parameters %s", _format_point(x))

        # Refreshes the likelihood's cached predictions at this point.
        self._likelihood.evaluate()

        sim = self._likelihood.bootstrap_p_value(simulated_datasets)
        p_empirical = float(sim[0])

        n_obs = int(self._likelihood.number_of_observations())
        p_analytical, chi_sq, dof = dof_corrected_p_value(p_empirical, n_obs, len(self._descriptions))
        if dof <= 0:
            warn(
                f"goodness_of_fit: {n_obs} observations and {len(self._descriptions)} parameters "
                f"leave {dof} degrees of freedom; analytic p-value is degenerate.",
                UserWarning,
                stacklevel=2,
            )

        logger.info(
            "p-value after applying DoF correction and using the chi^2-distribution "
            "(chi^2 = %r, dof = %d) has a value of %r",
            chi_sq,
            dof,
            p_analytical,
        )
        return GoodnessOfFit(p_empirical=p_empirical, p_analytical=p_analytical)

    # ---- cloning ----
    def clone(self) -> "Analysis":
        """Independent copy: new likelihood, new parameter space, cloned priors."""
        result = Analysis(self._likelihood.clone())
        for p in self._priors:
            nuisance = any(d.nuisance for d in p)
            result.add(p.clone(result.parameters), nuisance)
        return result

    def __repr__(self) -> str:
        return f"Analysis(parameters={[d.name for d in self._descriptions]}, priors={len(self._priors)})"
