"""Growing self-organizing map used to keep structurally diverse individuals."""

import math
import numpy as np
from collections import deque
from typing import Any, Callable, Dict, Generic, Iterator, List, Tuple, TypeVar

T = TypeVar('T')

Coordinate = Tuple[int, int]

_OFFSETS = ((1, 0), (-1, 0), (0, 1), (0, -1))


class Node(Generic[T]):
    """A map cell: weight vector, accumulated error, recent hits and a small store."""

    def __init__(self, coordinate: Coordinate, weights: np.ndarray, hit_memory: int):
        self.coordinate = coordinate
        self.weights = np.array(weights, dtype=np.float64)
        self.error = 0.0
        self.hits: deque = deque(maxlen=hit_memory)
        self.storage: List[Tuple[T, np.ndarray]] = []

    def recent_hits(self, time: int, window: int) -> int:
        return sum(1 for t in self.hits if time - t <= window)

    def distance(self, vector: np.ndarray) -> float:
        return float(np.linalg.norm(self.weights - vector))


class Network(Generic[T]):
    """
    GSOM network (Alahakoon et al.) with per-node storage.

    Items are mapped to their best matching node; nodes on the boundary
    grow new neighbors once their error exceeds the growing threshold,
    inner nodes spread their error to neighbors instead.
    """

    def __init__(self, roots: List[np.ndarray], key: Callable[[T], Any],
                 spread_factor: float, distribution_factor: float,
                 learning_rate: float, hit_memory: int, max_node_size: int):
        self.key = key
        self.distribution_factor = distribution_factor
        self.learning_rate = learning_rate
        self.hit_memory = hit_memory
        self.max_node_size = max_node_size
        self.dimension = len(roots[0])
        self.growing_threshold = -self.dimension * math.log(spread_factor)
        self.time = 0

        self.nodes: Dict[Coordinate, Node[T]] = {}
        for coordinate, weights in zip(((0, 0), (0, 1), (1, 0), (1, 1)), roots):
            self.nodes[coordinate] = Node(coordinate, weights, hit_memory)

    def store(self, item: T, vector: np.ndarray):
        self.time += 1
        self._train(item, np.asarray(vector, dtype=np.float64), grow=True)

    def items(self) -> Iterator[T]:
        for node in self.nodes.values():
            for item, _ in node.storage:
                yield item

    def size(self) -> int:
        return len(self.nodes)

    def representatives(self) -> List[T]:
        """Best stored item of every non-empty node."""
        return [node.storage[0][0] for node in self.nodes.values() if node.storage]

    def compact(self, reduction_factor: float):
        """Drop nodes without recent hits, damp errors and retrain stored items."""
        stale = [c for c, node in self.nodes.items()
                 if node.recent_hits(self.time, self.hit_memory) == 0]
        if len(stale) < len(self.nodes):
            for coordinate in stale:
                del self.nodes[coordinate]

        data = []
        for node in self.nodes.values():
            data.extend(node.storage)
            node.storage = []
            node.error *= reduction_factor

        for item, vector in data:
            self._train(item, vector, grow=False)

    def _neighbors(self, coordinate: Coordinate) -> List[Node[T]]:
        x, y = coordinate
        return [self.nodes[(x + dx, y + dy)] for dx, dy in _OFFSETS if (x + dx, y + dy) in self.nodes]

    def _find_bmu(self, vector: np.ndarray) -> Node[T]:
        return min(self.nodes.values(), key=lambda node: node.distance(vector))

    def _train(self, item: T, vector: np.ndarray, grow: bool):
        node = self._find_bmu(vector)
        node.hits.append(self.time)
        self._put(node, item, vector)

        node.error += node.distance(vector)
        if grow and node.error > self.growing_threshold:
            self._grow(node)

        self._adapt(node, vector)

    def _put(self, node: Node[T], item: T, vector: np.ndarray):
        node.storage.append((item, vector))
        node.storage.sort(key=lambda entry: self.key(entry[0]))
        del node.storage[self.max_node_size:]

    def _grow(self, node: Node[T]):
        x, y = node.coordinate
        free = [(x + dx, y + dy) for dx, dy in _OFFSETS if (x + dx, y + dy) not in self.nodes]

        if free:
            for cx, cy in free:
                opposite = self.nodes.get((2 * x - cx, 2 * y - cy))
                if opposite is not None:
                    weights = 2 * node.weights - opposite.weights
                else:
                    weights = node.weights.copy()
                self.nodes[(cx, cy)] = Node((cx, cy), weights, self.hit_memory)
            node.error = 0.0
        else:
            node.error = self.growing_threshold / 2
            for neighbor in self._neighbors(node.coordinate):
                neighbor.error += self.distribution_factor * neighbor.error

    def _adapt(self, node: Node[T], vector: np.ndarray):
        node.weights += self.learning_rate * (vector - node.weights)
        for neighbor in self._neighbors(node.coordinate):
            neighbor.weights += 0.5 * self.learning_rate * (vector - neighbor.weights)
