"""
Command-line entry point: solve a Solomon instance with the evolutionary solver.

Usage:
    python main.py data/solomon/rc101.txt --config config.json --output solution.json
"""

import argparse
import json
import logging
import os
from pathlib import Path

from evovrp.api.routes import format_solution
from evovrp.config import Config, create_builder_from_config, read_config
from evovrp.core import read_solomon

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Evolutionary ruin and recreate VRP solver")

    parser.add_argument('instance', type=str,
                        help='Path to a Solomon instance file')
    parser.add_argument('--config', type=str, default=None,
                        help='Path to a JSON solver configuration')
    parser.add_argument('--max-time', type=float, default=None,
                        help='Override termination time limit (seconds)')
    parser.add_argument('--max-generations', type=int, default=None,
                        help='Override termination generation limit')
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed')
    parser.add_argument('--output', type=str, default=None,
                        help='Write the solution as JSON to this path')

    args = parser.parse_args()

    problem = read_solomon(Path(args.instance).read_text())
    config = read_config(Path(args.config).read_text()) if args.config else Config()

    builder = create_builder_from_config(problem, config)
    if args.max_time is not None:
        builder.with_max_time(args.max_time)
    if args.max_generations is not None:
        builder.with_max_generations(args.max_generations)
    if args.seed is not None:
        builder.with_seed(args.seed)

    logger.info(f"Loaded '{problem.name}': {problem.n_jobs} jobs, {len(problem.fleet.vehicles)} vehicles")
    best, stats = builder.build().solve()
    result = format_solution(problem, best, stats)

    logger.info(f"Vehicles: {result.vehicles}, cost: {result.cost}, unassigned: {len(result.unassigned)}")

    if args.output:
        os.makedirs(os.path.dirname(args.output) or '.', exist_ok=True)
        with open(args.output, 'w') as f:
            json.dump(result.model_dump(), f, indent=2)
        logger.info(f"Solution written to {args.output}")


if __name__ == "__main__":
    main()
