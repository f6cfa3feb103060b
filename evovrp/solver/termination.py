"""Stopping criteria evaluated between generations."""

import numpy as np
from abc import ABC, abstractmethod
from collections import deque
from typing import List

from ..core.errors import ConfigurationError
from .context import RefinementContext


class Termination(ABC):

    @abstractmethod
    def is_termination(self, context: RefinementContext) -> bool:
        ...


class MaxTime(Termination):
    """Wall-clock limit in seconds."""

    def __init__(self, limit: float):
        if limit <= 0:
            raise ConfigurationError(f"Max time must be positive: {limit}")
        self.limit = limit

    def is_termination(self, context: RefinementContext) -> bool:
        return context.elapsed() >= self.limit


class MaxGeneration(Termination):

    def __init__(self, limit: int):
        if limit < 1:
            raise ConfigurationError(f"Max generations must be positive: {limit}")
        self.limit = limit

    def is_termination(self, context: RefinementContext) -> bool:
        return context.generation >= self.limit


class CostVariation(Termination):
    """
    Stops when the coefficient of variation of the best cost over the last
    `sample` generations drops to `threshold` or below.
    """

    def __init__(self, sample: int, threshold: float, key: str = "cost_variation"):
        if sample < 1:
            raise ConfigurationError(f"Variation sample must be positive: {sample}")
        if threshold < 0:
            raise ConfigurationError(f"Variation threshold must be non-negative: {threshold}")
        self.sample = sample
        self.threshold = threshold
        self.key = key

    def is_termination(self, context: RefinementContext) -> bool:
        best = context.population.best()
        if best is None:
            return False

        costs = context.state.setdefault(self.key, deque(maxlen=self.sample))
        costs.append(best.cost)
        if len(costs) < self.sample:
            return False

        values = np.array(costs, dtype=np.float64)
        # a flat window has no variation, std may still carry rounding error
        if values.max() == values.min():
            return True

        mean = values.mean()
        std = values.std()
        cv = std / abs(mean) if mean != 0 else std
        return cv <= self.threshold


class CompositeTermination(Termination):
    """Stops when any inner criterion is met. Without criteria it never stops."""

    def __init__(self, terminations: List[Termination]):
        self.terminations = list(terminations)

    def is_termination(self, context: RefinementContext) -> bool:
        # evaluate all so stateful criteria see every generation
        results = [t.is_termination(context) for t in self.terminations]
        return any(results)
