"""Weighted choice among strategies."""

from typing import Generic, List, Sequence, Tuple, TypeVar

from ..core.errors import ConfigurationError
from ..core.randomness import Random

T = TypeVar('T')


class WeightedSelector(Generic[T]):
    """Picks one item with probability proportional to its weight."""

    def __init__(self, items: Sequence[Tuple[T, float]], name: str = "strategy"):
        if not items:
            raise ConfigurationError(f"At least one {name} is required")
        if any(weight < 0 for _, weight in items):
            raise ConfigurationError(f"{name} weights must be non-negative")
        if sum(weight for _, weight in items) <= 0:
            raise ConfigurationError(f"{name} weights must not all be zero")

        self.items: List[T] = [item for item, _ in items]
        self.weights: List[float] = [float(weight) for _, weight in items]

    def select(self, random: Random) -> T:
        if len(self.items) == 1:
            return self.items[0]
        return self.items[random.weighted(self.weights)]

    def __len__(self) -> int:
        return len(self.items)
