import json

import pytest

from evovrp.config import Config, create_builder_from_config, read_config
from evovrp.core import ConfigurationError, Fleet, Job, Problem, TransportCost
from evovrp.mutation import CompositeMutation, LocalSearch, RuinAndRecreate
from evovrp.population import ElitismConfig, RosomaxaConfig
from evovrp.solver import CostVariation, MaxGeneration, MaxTime
from evovrp.solver.builder import logger as builder_logger

FULL_DOCUMENT = {
    "evolution": {
        "initial": {"methods": [{"type": "cheapest", "weight": 1}, {"type": "regret", "weight": 1,
                                                                    "start": 2, "end": 3}],
                    "size": 2},
        "population": {"type": "rosomaxa", "selectionSize": 12, "maxEliteSize": 2, "maxNodeSize": 2,
                       "spreadFactor": 0.5, "reductionFactor": 0.1, "distributionFactor": 0.25,
                       "learningRate": 0.1, "hitMemory": 1000, "rebalanceCount": 10,
                       "explorationRatio": 0.9},
    },
    "mutation": {
        "type": "composite",
        "inners": [
            {
                "type": "ruin-recreate",
                "probability": 1,
                "ruins": [
                    {"weight": 100, "methods": [
                        {"type": "adjusted-string", "probability": 1, "lmax": 10, "cavg": 10, "alpha": 0.01},
                    ]},
                    {"weight": 10, "methods": [
                        {"type": "neighbour", "probability": 1, "min": 2, "max": 8, "threshold": 0.5},
                        {"type": "random-job", "probability": 0.05, "min": 1, "max": 4, "threshold": 0.2},
                    ]},
                    {"weight": 5, "methods": [
                        {"type": "worst-job", "probability": 1, "min": 1, "max": 4, "threshold": 0.1, "skip": 4},
                        {"type": "random-route", "probability": 0.1, "min": 1, "max": 2, "threshold": 0.1},
                    ]},
                    {"weight": 5, "methods": [
                        {"type": "cluster", "probability": 1, "min": 3, "max": 9, "threshold": 0.3,
                         "cmin": 3, "cmax": 9},
                    ]},
                ],
                "recreates": [
                    {"type": "cheapest", "weight": 20},
                    {"type": "regret", "weight": 20, "start": 2, "end": 3},
                    {"type": "blinks", "weight": 50},
                    {"type": "gaps", "weight": 5, "min": 2},
                    {"type": "nearest", "weight": 5},
                ],
            },
            {
                "type": "local-search",
                "probability": 0.05,
                "times": {"min": 1, "max": 2},
                "operators": [
                    {"type": "inter-route-best", "weight": 100},
                    {"type": "inter-route-random", "weight": 30},
                    {"type": "intra-route-random", "weight": 30},
                ],
            },
        ],
    },
    "termination": {"maxTime": 300, "maxGenerations": 3000, "variation": {"sample": 3000, "cv": 0.01}},
    "telemetry": {"logging": {"enabled": False}},
    "environment": {"parallelism": 2, "seed": 5},
}


def test_read_full_document():
    config = read_config(json.dumps(FULL_DOCUMENT))

    assert config.evolution.population.selection_size == 12
    assert config.evolution.initial.size == 2
    assert config.mutation.type == "composite"
    assert [inner.type for inner in config.mutation.inners] == ["ruin-recreate", "local-search"]
    assert config.termination.variation.cv == 0.01
    assert config.telemetry.logging.enabled is False


def test_builder_from_full_document(problem):
    builder = create_builder_from_config(problem, read_config(json.dumps(FULL_DOCUMENT)))
    config = builder.build_config()

    assert config.population == RosomaxaConfig(selection_size=12, spread_factor=0.5)
    assert config.initial_size == 2
    assert len(config.initial_methods) == 2
    assert config.parallelism == 2

    mutation = config.mutations.select(config.random)
    assert isinstance(mutation, CompositeMutation)
    assert isinstance(mutation.inners[0][0], RuinAndRecreate)
    assert isinstance(mutation.inners[1][0], LocalSearch)
    assert mutation.inners[1][1] == 0.05

    kinds = {type(t) for t in config.termination.terminations}
    assert kinds == {MaxTime, MaxGeneration, CostVariation}

    assert config.logger != builder_logger.info


def test_empty_document_uses_defaults(problem):
    config = read_config("{}")
    assert config == Config()

    solver_config = create_builder_from_config(problem, config).build_config()
    assert solver_config.population == ElitismConfig()
    assert solver_config.initial_size == 1


def test_document_runs(problem):
    document = {
        "evolution": {"population": {"type": "elitism", "maxSize": 2, "selectionSize": 2}},
        "termination": {"maxGenerations": 5},
        "telemetry": {"logging": {"enabled": False}},
        "environment": {"seed": 1},
    }
    solver = create_builder_from_config(problem, read_config(json.dumps(document))).build()

    best, stats = solver.solve()
    assert stats.generation == 5
    assert best.unassigned == {}


@pytest.mark.parametrize("document", [
    '{"mutation": {"type": "unknown"}}',
    '{"evolution": {"population": {"type": "greedy"}}}',
    '{"mutation": {"type": "ruin-recreate", "ruins": [{"methods": [{"type": "nope"}]}], "recreates": []}}',
    '{"mutation": {"type": "ruin-recreate", "ruins": [], "recreates": [{"type": "magic"}]}}',
    '{"termination": {"maxGenerations": "many"}}',
    '{"unexpected": 1}',
    'not json',
])
def test_malformed_documents(document):
    with pytest.raises(ConfigurationError):
        read_config(document)


def test_invalid_values_fail_at_build(problem):
    document = {"evolution": {"population": {"type": "elitism", "maxSize": 0}}}
    with pytest.raises(ConfigurationError):
        create_builder_from_config(problem, read_config(json.dumps(document))).build()


def test_cluster_ruin_on_problem_without_vehicles_is_rejected():
    problem = Problem(jobs=[Job("a", 1), Job("b", 2)], fleet=Fleet([]),
                      transport=TransportCost.from_coordinates([(0, 0), (1, 0), (2, 0)]))
    document = {"mutation": {"type": "ruin-recreate",
                             "ruins": [{"methods": [{"type": "cluster", "cmin": 3, "cmax": 5}]}],
                             "recreates": [{"type": "cheapest"}]}}

    with pytest.raises(ConfigurationError, match="no vehicles"):
        create_builder_from_config(problem, read_config(json.dumps(document)))


def test_snake_case_keys_are_accepted():
    config = read_config('{"termination": {"max_generations": 7}}')
    assert config.termination.max_generations == 7
