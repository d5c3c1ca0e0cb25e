from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, Mapping, Tuple

from .errors import UnknownParameterError


__all__ = [
    "Parameter",
    "ParameterSpace",
    "ParameterDescription",
]


@dataclass
class Parameter:
    """A named scalar with bounds. Mutated in place during evaluation."""

    name: str
    value: float
    min: float
    max: float

    @property
    def bounds(self) -> Tuple[float, float]:
        return (self.min, self.max)

    def set(self, value: float) -> None:
        # Bounds are deliberately not enforced here.
        self.value = float(value)


class ParameterSpace(Mapping[str, Parameter]):
    """Ordered mapping name -> Parameter shared by priors and a likelihood."""

    def __init__(self, parameters: Mapping[str, Tuple[float, float, float]] | None = None):
        self._items: Dict[str, Parameter] = {}
        for name, (value, lo, hi) in (parameters or {}).items():
            self.declare(name, value, lo, hi)

    def declare(self, name: str, value: float, min: float, max: float) -> Parameter:
        """Create a parameter, or return the existing one of that name unchanged."""
        existing = self._items.get(name)
        if existing is not None:
            return existing
        lo = float(min)
        hi = float(max)
        if hi < lo:
            raise ValueError(f"Invalid bounds for {name!r}: require min <= max, got ({lo}, {hi}).")
        p = Parameter(name=str(name), value=float(value), min=lo, max=hi)
        self._items[p.name] = p
        return p

    def __getitem__(self, key: str) -> Parameter:  # type: ignore[override]
        try:
            return self._items[key]
        except KeyError:
            raise UnknownParameterError(key) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __repr__(self) -> str:
        inner = ", ".join(f"{n}={p.value!r}" for n, p in self._items.items())
        return f"ParameterSpace({inner})"

    def names(self) -> Tuple[str, ...]:
        return tuple(self._items)

    def as_dict(self) -> Dict[str, float]:
        """Return name->value (extracting .value)."""
        return {k: p.value for k, p in self._items.items()}

    def clone(self) -> "ParameterSpace":
        """Deep copy; the clone shares no Parameter objects with self."""
        out = ParameterSpace()
        for p in self._items.values():
            out.declare(p.name, p.value, p.min, p.max)
        return out


@dataclass
class ParameterDescription:
    """A reference to one Parameter plus the flags it was registered with."""

    parameter: Parameter
    nuisance: bool = False
    discrete: bool = False

    @property
    def name(self) -> str:
        return self.parameter.name

    @property
    def value(self) -> float:
        return self.parameter.value

    @property
    def min(self) -> float:
        return self.parameter.min

    @property
    def max(self) -> float:
        return self.parameter.max
