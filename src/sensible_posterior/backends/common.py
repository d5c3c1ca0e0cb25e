from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import numpy as np


@dataclass(frozen=True)
class SimplexResult:
    """Normalized result of one simplex minimisation."""

    x: np.ndarray  # best vertex, shape (P,)
    fun: float  # objective at x
    nit: int = 0
    nfev: int = 0
    converged: bool = True
    message: str = ""


class Objective(Protocol):
    """Scalar function of a parameter vector, to be minimised."""

    def __call__(self, x: np.ndarray) -> float: ...
