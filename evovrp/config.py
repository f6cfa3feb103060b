"""
Declarative solver configuration.

The JSON document uses camelCase keys; every section is optional and
strategy variants are tagged by their `type` field.
"""

import logging
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from .core.errors import ConfigurationError
from .core.problem import Problem
from .mutation import (
    AdjustedStringRemoval, BlinkInsertion, CheapestInsertion, ClusterRemoval, CompositeMutation,
    CompositeRecreate, CompositeRuin, GapsInsertion, InterRouteBest, InterRouteRandom,
    IntraRouteRandom, LocalSearch, Mutation, NearestNeighborInsertion, NeighbourRemoval,
    RandomJobRemoval, RandomRouteRemoval, Recreate, RegretInsertion, RemovalLimit, Ruin,
    RuinAndRecreate, WorstJobRemoval
)
from .population import ElitismConfig, RosomaxaConfig
from .solver import Builder

logger = logging.getLogger(__name__)


class ConfigModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra='forbid')


# ===== RECREATE =====

class CheapestMethod(ConfigModel):
    type: Literal['cheapest']
    weight: float = 1.0


class RegretMethod(ConfigModel):
    type: Literal['regret']
    weight: float = 1.0
    start: int = 2
    end: int = 3


class BlinksMethod(ConfigModel):
    type: Literal['blinks']
    weight: float = 1.0


class GapsMethod(ConfigModel):
    type: Literal['gaps']
    weight: float = 1.0
    min: int = 2


class NearestMethod(ConfigModel):
    type: Literal['nearest']
    weight: float = 1.0


RecreateMethod = Annotated[
    Union[CheapestMethod, RegretMethod, BlinksMethod, GapsMethod, NearestMethod],
    Field(discriminator='type')
]


# ===== RUIN =====

class AdjustedStringMethod(ConfigModel):
    type: Literal['adjusted-string']
    probability: float = 1.0
    lmax: int = 10
    cavg: int = 10
    alpha: float = 0.01


class LimitedRuinMethod(ConfigModel):
    probability: float = 1.0
    min: int = 1
    max: int = 8
    threshold: float = 0.2


class NeighbourMethod(LimitedRuinMethod):
    type: Literal['neighbour']


class RandomJobMethod(LimitedRuinMethod):
    type: Literal['random-job']


class RandomRouteMethod(LimitedRuinMethod):
    type: Literal['random-route']


class WorstJobMethod(LimitedRuinMethod):
    type: Literal['worst-job']
    skip: int = 4


class ClusterMethod(LimitedRuinMethod):
    type: Literal['cluster']
    cmin: int = 3
    cmax: int = 9


RuinMethod = Annotated[
    Union[AdjustedStringMethod, NeighbourMethod, RandomJobMethod, RandomRouteMethod,
          WorstJobMethod, ClusterMethod],
    Field(discriminator='type')
]


class RuinGroupConfig(ConfigModel):
    methods: List[RuinMethod]
    weight: float = 1.0


# ===== LOCAL SEARCH =====

class LocalOperatorConfig(ConfigModel):
    type: Literal['inter-route-best', 'inter-route-random', 'intra-route-random']
    weight: float = 1.0


class TimesConfig(ConfigModel):
    min: int = 1
    max: int = 2


# ===== MUTATION =====

class RuinRecreateMutation(ConfigModel):
    type: Literal['ruin-recreate']
    probability: float = 1.0
    ruins: List[RuinGroupConfig]
    recreates: List[RecreateMethod]


class LocalSearchMutation(ConfigModel):
    type: Literal['local-search']
    probability: float = 1.0
    times: TimesConfig = TimesConfig()
    operators: List[LocalOperatorConfig]


class CompositeMutationConfig(ConfigModel):
    type: Literal['composite']
    probability: float = 1.0
    inners: List['MutationConfig']


MutationConfig = Annotated[
    Union[RuinRecreateMutation, LocalSearchMutation, CompositeMutationConfig],
    Field(discriminator='type')
]

CompositeMutationConfig.model_rebuild()


# ===== POPULATION =====

class ElitismPopulation(ConfigModel):
    type: Literal['elitism']
    max_size: int = 4
    selection_size: int = 4


class RosomaxaPopulation(ConfigModel):
    type: Literal['rosomaxa']
    selection_size: int = 8
    max_elite_size: int = 2
    max_node_size: int = 2
    spread_factor: float = 0.25
    reduction_factor: float = 0.1
    distribution_factor: float = 0.25
    learning_rate: float = 0.1
    hit_memory: int = 1000
    rebalance_count: int = 10
    exploration_ratio: float = 0.9


PopulationType = Annotated[Union[ElitismPopulation, RosomaxaPopulation], Field(discriminator='type')]


# ===== DOCUMENT =====

class InitialConfig(ConfigModel):
    methods: Optional[List[RecreateMethod]] = None
    size: Optional[int] = None


class EvolutionConfig(ConfigModel):
    initial: Optional[InitialConfig] = None
    population: Optional[PopulationType] = None


class VariationConfig(ConfigModel):
    sample: int
    cv: float


class TerminationConfig(ConfigModel):
    max_time: Optional[float] = None
    max_generations: Optional[int] = None
    variation: Optional[VariationConfig] = None


class LoggingConfig(ConfigModel):
    enabled: bool = True


class TelemetryConfig(ConfigModel):
    logging: Optional[LoggingConfig] = None


class EnvironmentConfig(ConfigModel):
    parallelism: Optional[int] = None
    seed: Optional[int] = None


class Config(ConfigModel):
    evolution: Optional[EvolutionConfig] = None
    mutation: Optional[MutationConfig] = None
    termination: Optional[TerminationConfig] = None
    telemetry: Optional[TelemetryConfig] = None
    environment: Optional[EnvironmentConfig] = None


def read_config(text: str) -> Config:
    """Parses a JSON configuration document."""
    try:
        return Config.model_validate_json(text)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


# ===== BUILDER MAPPING =====

def _create_recreate(method) -> Recreate:
    if method.type == 'cheapest':
        return CheapestInsertion()
    if method.type == 'regret':
        return RegretInsertion(method.start, method.end)
    if method.type == 'blinks':
        return BlinkInsertion()
    if method.type == 'gaps':
        return GapsInsertion(method.min)
    return NearestNeighborInsertion()


def _create_ruin(problem: Problem, method) -> Ruin:
    if method.type == 'adjusted-string':
        return AdjustedStringRemoval(method.lmax, method.cavg, method.alpha)
    if method.type == 'random-route':
        return RandomRouteRemoval(method.min, method.max, method.threshold)

    limit = RemovalLimit(method.min, method.max, method.threshold)
    if method.type == 'neighbour':
        return NeighbourRemoval(limit)
    if method.type == 'random-job':
        return RandomJobRemoval(limit)
    if method.type == 'worst-job':
        return WorstJobRemoval(method.skip, limit)
    return ClusterRemoval(problem, (method.cmin, method.cmax), limit)


LOCAL_OPERATORS = {
    'inter-route-best': InterRouteBest,
    'inter-route-random': InterRouteRandom,
    'intra-route-random': IntraRouteRandom,
}


def _create_mutation(problem: Problem, config) -> Mutation:
    if config.type == 'ruin-recreate':
        ruin = CompositeRuin([
            ([(_create_ruin(problem, method), method.probability) for method in group.methods], group.weight)
            for group in config.ruins
        ])
        recreate = CompositeRecreate([(_create_recreate(method), method.weight) for method in config.recreates])
        return RuinAndRecreate(ruin, recreate)

    if config.type == 'local-search':
        operators = [(LOCAL_OPERATORS[op.type](), op.weight) for op in config.operators]
        return LocalSearch(operators, (config.times.min, config.times.max))

    return CompositeMutation([(_create_mutation(problem, inner), inner.probability) for inner in config.inners])


def _create_population(config) -> Union[ElitismConfig, RosomaxaConfig]:
    values = config.model_dump(exclude={'type'})
    if config.type == 'elitism':
        return ElitismConfig(**values)
    return RosomaxaConfig(**values)


def create_builder_from_config(problem: Problem, config: Config) -> Builder:
    """Maps a parsed document onto a `Builder`; unset sections keep builder defaults."""
    # strategies such as cluster removal read the problem when created
    problem.validate()
    builder = Builder(problem)

    telemetry = config.telemetry
    if telemetry is not None and telemetry.logging is not None:
        builder.with_logging(telemetry.logging.enabled)

    environment = config.environment
    if environment is not None:
        builder.with_seed(environment.seed)
        if environment.parallelism is not None:
            builder.with_parallelism(environment.parallelism)

    evolution = config.evolution
    if evolution is not None:
        if evolution.initial is not None:
            if evolution.initial.methods:
                builder.with_initial_methods([(_create_recreate(m), m.weight) for m in evolution.initial.methods])
            if evolution.initial.size is not None:
                builder.with_initial_size(evolution.initial.size)
        if evolution.population is not None:
            builder.with_population(_create_population(evolution.population))

    if config.mutation is not None:
        builder.with_mutation(_create_mutation(problem, config.mutation))

    termination = config.termination
    if termination is not None:
        builder.with_max_time(termination.max_time)
        builder.with_max_generations(termination.max_generations)
        if termination.variation is not None:
            builder.with_cost_variation((termination.variation.sample, termination.variation.cv))

    logger.debug(f"Builder configured from document: {config.model_dump(exclude_none=True)}")
    return builder
