"""Population contract."""

import threading
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from ..core.solution import Solution


class Population(ABC):
    """
    Bounded archive of individuals.

    `add` is serialized by a lock since eviction depends on the whole
    archive; `select` may run alongside it and see a slightly stale view.
    """

    def __init__(self):
        self._lock = threading.Lock()

    def add(self, individual: Solution) -> bool:
        """Returns True if the individual became the new best."""
        with self._lock:
            return self._add(individual)

    def add_all(self, individuals: Iterable[Solution]) -> bool:
        improved = False
        for individual in individuals:
            improved = self.add(individual) or improved
        return improved

    def on_generation(self, generation: int):
        """Hook invoked once per generation."""

    @abstractmethod
    def _add(self, individual: Solution) -> bool:
        ...

    @abstractmethod
    def select(self) -> List[Solution]:
        ...

    @abstractmethod
    def best(self) -> Optional[Solution]:
        ...

    @abstractmethod
    def ranked(self) -> List[Solution]:
        """All kept individuals, best first."""

    def size(self) -> int:
        return len(self.ranked())
