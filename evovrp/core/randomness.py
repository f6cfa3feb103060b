"""Random source injected into every strategy."""

import random
import threading
from typing import List, Optional, Sequence, TypeVar

T = TypeVar('T')


class Random:
    """
    Pseudo-random generator shared by all strategies of one run.

    Access is serialized with a lock so that one instance can be used
    from several worker threads. Pass a seed for reproducible runs
    (with a single worker).
    """

    def __init__(self, seed: Optional[int] = None):
        self._rng = random.Random(seed)
        self._lock = threading.Lock()

    def uniform_int(self, low: int, high: int) -> int:
        """Integer in the closed range [low, high]."""
        if low >= high:
            return low
        with self._lock:
            return self._rng.randint(low, high)

    def uniform_real(self, low: float, high: float) -> float:
        if low >= high:
            return low
        with self._lock:
            return self._rng.uniform(low, high)

    def is_head_not_tails(self) -> bool:
        with self._lock:
            return self._rng.random() < 0.5

    def is_hit(self, probability: float) -> bool:
        if probability >= 1.0:
            return True
        if probability <= 0.0:
            return False
        with self._lock:
            return self._rng.random() < probability

    def weighted(self, weights: Sequence[float]) -> int:
        """Index picked with probability proportional to its weight."""
        with self._lock:
            return self._rng.choices(range(len(weights)), weights=weights, k=1)[0]

    def choice(self, items: Sequence[T]) -> T:
        with self._lock:
            return self._rng.choice(items)

    def sample(self, items: Sequence[T], k: int) -> List[T]:
        with self._lock:
            return self._rng.sample(list(items), k)

    def shuffle(self, items: List[T]) -> None:
        with self._lock:
            self._rng.shuffle(items)
