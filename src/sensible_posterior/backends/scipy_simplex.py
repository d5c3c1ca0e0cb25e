from __future__ import annotations

import logging
import math
from typing import Any, Dict

import numpy as np
from scipy.optimize import minimize

from ..options import OptimizationOptions
from .common import Objective, SimplexResult

logger = logging.getLogger(__name__)


def initial_simplex(x0: np.ndarray, steps: np.ndarray) -> np.ndarray:
    """Vertices x0 and x0 + steps[i] * e_i, shape (P+1, P)."""
    x0 = np.asarray(x0, dtype=float).reshape((-1,))
    steps = np.asarray(steps, dtype=float).reshape((-1,))
    if steps.shape != x0.shape:
        raise ValueError(f"steps shape {steps.shape} != x0 shape {x0.shape}.")
    sim = np.tile(x0, (x0.size + 1, 1))
    sim[1:] += np.diag(steps)
    return sim


def minimize_simplex(
    objective: Objective,
    x0: np.ndarray,
    steps: np.ndarray,
    options: OptimizationOptions,
) -> SimplexResult:
    """Minimise `objective` with the Nelder-Mead simplex algorithm.

    The search stops once every vertex lies within
    options.maximum_simplex_size of the best vertex, or after
    options.maximum_iterations iterations. Running out of iterations is
    reported through `converged=False`, not raised.
    """
    x0 = np.asarray(x0, dtype=float).reshape((-1,))

    def f(v: np.ndarray) -> float:
        val = float(objective(np.asarray(v, dtype=float)))
        # Non-finite values (zero prior density, failed predictions) rank last.
        return val if not math.isnan(val) else math.inf

    if x0.size == 0:
        return SimplexResult(
            x=x0.copy(),
            fun=f(x0),
            nit=0,
            nfev=1,
            converged=True,
            message="no free parameters",
        )

    iteration = [0]

    def _log_step(intermediate_result: Any) -> None:
        iteration[0] += 1
        logger.debug("iteration %d: f() = %r", iteration[0], float(intermediate_result.fun))

    nm_options: Dict[str, Any] = {
        "initial_simplex": initial_simplex(x0, steps),
        "maxiter": options.maximum_iterations,
        # Convergence is decided by the simplex size alone.
        "xatol": options.maximum_simplex_size,
        "fatol": math.inf,
    }

    res = minimize(f, x0, method="Nelder-Mead", options=nm_options, callback=_log_step)

    nit = int(getattr(res, "nit", iteration[0]) or 0)
    converged = bool(res.success)
    if converged:
        logger.info("Simplex algorithm converged after %d iterations", nit)
    else:
        logger.info("Simplex algorithm stopped after %d iterations: %s", nit, res.message)

    return SimplexResult(
        x=np.asarray(res.x, dtype=float),
        fun=float(res.fun),
        nit=nit,
        nfev=int(getattr(res, "nfev", 0) or 0),
        converged=converged,
        message=str(res.message),
    )
