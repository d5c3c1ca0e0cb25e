"""Optimizer implementations."""

from __future__ import annotations

from .common import Objective, SimplexResult
from .scipy_simplex import initial_simplex, minimize_simplex

__all__ = ["Objective", "SimplexResult", "initial_simplex", "minimize_simplex"]
