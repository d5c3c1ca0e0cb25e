"""Exceptions raised by the analysis core."""

from __future__ import annotations


class AnalysisError(Exception):
    """Base class for hard failures of an Analysis operation."""


class DimensionMismatchError(AnalysisError, ValueError):
    """A parameter vector does not match the number of registered parameters."""

    def __init__(self, operation: str, expected: int, got: int):
        self.operation = operation
        self.expected = int(expected)
        self.got = int(got)
        super().__init__(
            f"{operation}: point has dimension {self.got}, expected {self.expected}."
        )


class UndefinedPriorError(AnalysisError, RuntimeError):
    """log_prior() was requested before any prior was registered."""


class UnknownParameterError(AnalysisError, KeyError):
    """No parameter of the requested name exists."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"no such parameter {self.name!r}"
