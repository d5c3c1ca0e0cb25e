from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping


@dataclass(frozen=True)
class OptimizationOptions:
    """Settings for Analysis.optimize.

    - initial_step_size: initial simplex step per parameter, as a fraction
      of that parameter's (max - min). In (0, 1].
    - maximum_iterations: iteration budget; reaching it is not an error.
    - maximum_simplex_size: convergence threshold on the simplex size. In (0, 1].
    """

    initial_step_size: float = 0.1
    maximum_iterations: int = 1000
    maximum_simplex_size: float = 1e-3

    def __post_init__(self) -> None:
        step = float(self.initial_step_size)
        if not (0.0 < step <= 1.0):
            raise ValueError(f"initial_step_size must lie in (0, 1], got {step}.")
        size = float(self.maximum_simplex_size)
        if not (0.0 < size <= 1.0):
            raise ValueError(f"maximum_simplex_size must lie in (0, 1], got {size}.")
        if isinstance(self.maximum_iterations, bool) or int(self.maximum_iterations) != self.maximum_iterations:
            raise TypeError(f"maximum_iterations must be an integer, got {self.maximum_iterations!r}.")
        if int(self.maximum_iterations) < 1:
            raise ValueError(f"maximum_iterations must be positive, got {self.maximum_iterations}.")

        object.__setattr__(self, "initial_step_size", step)
        object.__setattr__(self, "maximum_simplex_size", size)
        object.__setattr__(self, "maximum_iterations", int(self.maximum_iterations))

    @staticmethod
    def defaults() -> "OptimizationOptions":
        return OptimizationOptions()

    @staticmethod
    def from_mapping(options: Mapping[str, Any]) -> "OptimizationOptions":
        """Build options from a plain dict, e.g. loaded from a config file."""
        known = {f.name for f in fields(OptimizationOptions)}
        unknown = sorted(set(options) - known)
        if unknown:
            raise KeyError(f"Unknown optimization options {unknown}. Available: {sorted(known)}")
        return OptimizationOptions(**dict(options))
