"""Mutations combining ruin, recreate and other mutations."""

from abc import ABC, abstractmethod
from typing import List, Sequence, Tuple

from ..core.errors import ConfigurationError
from ..core.solution import Solution
from .recreate import Recreate
from .ruin import Ruin
from .selector import WeightedSelector

# ([(ruin, probability)], group weight)
RuinGroup = Tuple[List[Tuple[Ruin, float]], float]


class Mutation(ABC):
    """Produces a new individual from a parent. The parent is never modified."""

    @abstractmethod
    def mutate(self, context, individual: Solution) -> Solution:
        ...


class CompositeRuin(Ruin):
    """
    Picks one ruin group by weight, then applies every method of the group
    whose probability hits, in order.
    """

    def __init__(self, groups: Sequence[RuinGroup]):
        for methods, _ in groups:
            if not methods:
                raise ConfigurationError("Ruin group must contain at least one method")
            if any(probability < 0 for _, probability in methods):
                raise ConfigurationError("Ruin probabilities must be non-negative")
        self.selector = WeightedSelector([(methods, weight) for methods, weight in groups], "ruin group")

    def run(self, context, solution: Solution) -> Solution:
        methods = self.selector.select(context.random)
        for ruin, probability in methods:
            if context.random.is_hit(probability):
                solution = ruin.run(context, solution)
        return solution


class CompositeRecreate(Recreate):
    """Picks one recreate method by weight."""

    def __init__(self, recreates: Sequence[Tuple[Recreate, float]]):
        self.selector = WeightedSelector(recreates, "recreate method")

    def run(self, context, solution: Solution) -> Solution:
        return self.selector.select(context.random).run(context, solution)

    def insert_all(self, context, solution: Solution):
        self.selector.select(context.random).insert_all(context, solution)


class RuinAndRecreate(Mutation):
    """Copies the parent, ruins it, then recreates it."""

    def __init__(self, ruin: Ruin, recreate: Recreate):
        self.ruin = ruin
        self.recreate = recreate

    def mutate(self, context, individual: Solution) -> Solution:
        solution = individual.copy()
        solution = self.ruin.run(context, solution)
        return self.recreate.run(context, solution)


class CompositeMutation(Mutation):
    """
    Pipeline of inner mutations, each applied when its probability hits.
    The first inner mutation runs when none hits.
    """

    def __init__(self, inners: Sequence[Tuple[Mutation, float]]):
        if not inners:
            raise ConfigurationError("Composite mutation needs at least one inner mutation")
        self.inners = list(inners)

    def mutate(self, context, individual: Solution) -> Solution:
        applied = False
        for mutation, probability in self.inners:
            if context.random.is_hit(probability):
                individual = mutation.mutate(context, individual)
                applied = True

        if not applied:
            individual = self.inners[0][0].mutate(context, individual)
        return individual


class WeightedMutation(Mutation):
    """Runs exactly one variant, chosen by weight."""

    def __init__(self, variants: Sequence[Tuple[Mutation, float]]):
        self.selector = WeightedSelector(variants, "mutation")

    def mutate(self, context, individual: Solution) -> Solution:
        return self.selector.select(context.random).mutate(context, individual)
