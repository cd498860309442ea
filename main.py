# main.py

"""
Scores a batch of candidate rules against a CSV data set.

Loads config.yaml, builds the FeatureDatabase, mines reference rules with a
Decision Tree, generates random candidate rules (plus mutated and crossed
variants), snaps them onto the range lookup table and reports the best ones.

    python main.py --config config.yaml --data data.csv --target label --top-k 10 --output report.json
"""

import argparse
import json
import logging
import random
import sys

import data_handling
import fitness
import utils
from config import ConfigParameters, load_config
from constants import LOG_FORMAT, LOG_DATE_FORMAT
from lookup_table import RangeLookupTable
from reference_rules import mine_reference_rules, resolve_feature_id
from rule_manager import crossover_rules, mutate_rule, random_rule

logger = logging.getLogger("rule_fitness")


def setup_logging(level_name: str) -> None:
    level = getattr(logging, level_name.upper(), logging.INFO)
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)


def generate_candidates(database, params: ConfigParameters, consequent_id, rng: random.Random):
    """Random rules plus one round of mutated and crossed variants."""
    base = [random_rule(database.value_ranges, params.max_antecedents, consequent_id, rng)
            for _ in range(params.population_size)]
    mutants = [mutate_rule(r, database.value_ranges, params.mutation_rate, rng=rng) for r in base]
    children = []
    for _ in range(params.population_size // 2):
        p1, p2 = rng.sample(base, 2) if len(base) >= 2 else (base[0], base[0])
        children.append(crossover_rules(p1, p2, rng))
    return base + mutants + children


def run(args) -> int:
    config = load_config(args.config)
    params = config or ConfigParameters()
    setup_logging(args.log_level or params.logging_level)
    if config is None:
        logger.warning("Running with default parameters.")

    data_path = args.data or params.data_path
    if not data_path:
        logger.error("No data file given (use --data or data.data_path in the config).")
        return 1
    target = args.target or params.target_feature
    seed = args.seed if args.seed is not None else params.random_seed
    rng = random.Random(seed)

    database = data_handling.load_database(data_path, max_cache_size=params.cache_size)
    if isinstance(target, str) and target.isdigit() and target not in database.feature_names:
        # Numeric --target values are feature ids unless a column has that name
        target = int(target)
    consequent_id = resolve_feature_id(database, target) if target is not None else None

    reference = []
    if consequent_id is not None:
        reference = mine_reference_rules(database, consequent_id,
                                         max_depth=params.reference_tree_depth,
                                         min_samples_leaf=params.reference_min_samples_leaf,
                                         n_bins=params.reference_bins,
                                         random_state=seed)
    else:
        logger.info("No target feature configured; novelty term disabled.")

    evaluator = fitness.FitnessEvaluator(database, reference, config)
    lookup = RangeLookupTable(database, params.lookup_bins)

    candidates = generate_candidates(database, params, consequent_id, rng)
    for rule in candidates:
        lookup.snap_rule(rule)

    fitness.evaluate_rules(evaluator, candidates, workers=params.parallel_workers)
    diversity = utils.calculate_population_diversity(evaluator, candidates, random_state=seed)
    ranked = sorted(candidates, key=lambda r: r.fitness, reverse=True)
    top = ranked[:args.top_k]

    logger.info(f"Scored {len(candidates)} candidate rules (diversity {diversity:.2f}, "
                f"{len(reference)} reference rules, cache {database.cache_info()}).")
    database.clear_cache()
    for i, rule in enumerate(top, 1):
        print(f"{i:>3}. {rule.fitness:8.3f}  {rule.to_string(database.feature_names)}")

    if args.output:
        report = {
            'data_path': data_path,
            'target': target,
            'weights': {
                'base': evaluator.base_weight,
                'novelty': evaluator.novelty_weight,
                'completeness': evaluator.completeness_weight,
                'min_coverage': evaluator.min_coverage,
            },
            'diversity': diversity,
            'num_candidates': len(candidates),
            'num_reference_rules': len(reference),
            'top_rules': [utils.rule_to_dict(r, database.feature_names) for r in top],
        }
        with open(args.output, 'w') as f:
            json.dump(utils.make_json_serializable(report), f, indent=2)
        logger.info(f"Report written to {args.output}")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Score candidate association rules against a data set.")
    parser.add_argument('--config', type=str, default='config.yaml', help='Path to config.yaml')
    parser.add_argument('--data', type=str, default=None, help='CSV data file (overrides the config)')
    parser.add_argument('--target', type=str, default=None, help='Consequent feature name or id (overrides the config)')
    parser.add_argument('--top-k', type=int, default=10, help='Number of rules to print')
    parser.add_argument('--seed', type=int, default=None, help='Random seed (overrides the config)')
    parser.add_argument('--output', type=str, default=None, help='Write a JSON report here')
    parser.add_argument('--log-level', type=str, default=None, help='DEBUG, INFO, WARNING...')
    args = parser.parse_args(argv)

    try:
        return run(args)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Run aborted: {e}", exc_info=True)
        return 1


if __name__ == '__main__':
    sys.exit(main())
