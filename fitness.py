# fitness.py

"""
Fitness evaluation of candidate rules.

fitness = base_weight         * basic term        (accuracy, coverage, range coverage)
        + ext1 (novelty) weight * novelty term    (distance to the reference rules, if any)
        + ext2 (completeness) weight * completeness term

Each term is on a 0-100 scale; the overall range depends only on the weights.
"""

import logging
import multiprocessing
import os
from typing import List, Optional, Sequence

import rule_manager
from config import ConfigParameters
from constants import (
    BASIC_ACCURACY_WEIGHT,
    BASIC_COVERAGE_WEIGHT,
    BASIC_RANGE_WEIGHT,
    DEFAULT_BASE_FITNESS_WEIGHT,
    DEFAULT_EXT1_FITNESS_WEIGHT,
    DEFAULT_EXT2_FITNESS_WEIGHT,
    DEFAULT_MIN_COVERAGE,
    FITNESS_SCALE,
    MAX_NORMALIZED_DISTANCE,
)
from rule import Rule

logger = logging.getLogger(__name__)


class FitnessEvaluator:
    """
    Computes the fitness of rules against a FeatureDatabase.

    Weights are fixed for the lifetime of the evaluator. The reference rules
    are only read; build a new evaluator to compare against a different set.
    """

    def __init__(self, database, reference_rules: Optional[Sequence[Rule]] = None,
                 config: Optional[ConfigParameters] = None):
        """
        Args:
            database: Object exposing evaluate_rule(rule), normally a FeatureDatabase.
            reference_rules: Rules mined by a classical learner, compared against for
                novelty. May be empty.
            config: Source of the weights. If None the defaults apply (base term only,
                min coverage 0.005).
        """
        if config is None:
            logger.warning("FitnessEvaluator created without ConfigParameters; using default weights.")
            self._base_weight = DEFAULT_BASE_FITNESS_WEIGHT
            self._ext1_weight = DEFAULT_EXT1_FITNESS_WEIGHT
            self._ext2_weight = DEFAULT_EXT2_FITNESS_WEIGHT
            self._min_coverage = DEFAULT_MIN_COVERAGE
        else:
            self._base_weight = config.base_fitness_weight
            self._ext1_weight = config.ext1_fitness_weight
            self._ext2_weight = config.ext2_fitness_weight
            self._min_coverage = config.min_coverage

        self._database = database
        self._reference_rules = tuple(reference_rules or ())

    # --- Read-only configuration ---

    @property
    def base_weight(self) -> float:
        return self._base_weight

    @property
    def novelty_weight(self) -> float:
        return self._ext1_weight

    @property
    def completeness_weight(self) -> float:
        return self._ext2_weight

    @property
    def min_coverage(self) -> float:
        return self._min_coverage

    @property
    def reference_rules(self) -> tuple:
        return self._reference_rules

    # --- Fitness ---

    def fitness_of(self, rule: Rule) -> float:
        """
        Calculates the fitness of a rule.

        Side effect: the database caches accuracy, coverage, completeness and
        range coverage on the rule. Invalid rules return 0.0 without touching
        the database and have their metrics zeroed; rules below min coverage
        return 0.0.
        """
        if not rule_manager.is_valid_rule(rule):
            rule.reset_metrics()
            return 0.0

        self._database.evaluate_rule(rule)

        if rule.coverage < self._min_coverage:
            return 0.0

        novelty = self._ext1_weight * self.novelty_term(rule) if self._reference_rules else 0.0
        return (self._base_weight * self.basic_term(rule)
                + novelty
                + self._ext2_weight * self.completeness_term(rule))

    def basic_term(self, rule: Rule) -> float:
        """Accuracy, coverage and range coverage combined. Value between 0.0 and 100.0."""
        return (BASIC_ACCURACY_WEIGHT * rule.accuracy
                + BASIC_COVERAGE_WEIGHT * rule.coverage
                + BASIC_RANGE_WEIGHT * rule.range_coverage) * FITNESS_SCALE

    def hamming_distance(self, r1: Rule, r2: Rule) -> float:
        """
        Number of positions whose participation differs between the two rules,
        normalized to 0.0-100.0. Bounds are not compared.

        Both rules must have the same length and feature order; this is not checked.
        """
        reqs1 = r1.get_feature_reqs()
        reqs2 = r2.get_feature_reqs()
        distance = 0
        for i in range(len(reqs1)):
            if reqs1[i].participation != reqs2[i].participation:
                distance += 1
        return distance / len(reqs1) * FITNESS_SCALE

    def novelty_term(self, rule: Rule) -> float:
        """Smallest hamming distance between the rule and any reference rule."""
        smallest_distance = MAX_NORMALIZED_DISTANCE
        for reference_rule in self._reference_rules:
            dist = self.hamming_distance(rule, reference_rule)
            if dist < smallest_distance:
                smallest_distance = dist
        return smallest_distance

    def completeness_term(self, rule: Rule) -> float:
        """Value between 0.0 and 100.0."""
        return rule.completeness * FITNESS_SCALE


# --- Batch evaluation (serial or parallel) ---

_WORKER_EVALUATOR: Optional[FitnessEvaluator] = None


def _init_worker(evaluator: FitnessEvaluator) -> None:
    global _WORKER_EVALUATOR
    _WORKER_EVALUATOR = evaluator


def _score_rule(evaluator: FitnessEvaluator, rule: Rule):
    try:
        score = evaluator.fitness_of(rule)
    except Exception as e:
        logger.error(f"Worker {os.getpid()}: error evaluating rule {rule.to_string()}: {e}", exc_info=True)
        return None
    return score, rule.accuracy, rule.coverage, rule.completeness, rule.range_coverage


def evaluate_rule_fitness_parallel(rule: Rule):
    """Pool worker. Returns (fitness, accuracy, coverage, completeness, range_coverage) or None."""
    return _score_rule(_WORKER_EVALUATOR, rule)


def evaluate_rules(evaluator: FitnessEvaluator, rules: List[Rule], workers: int = 1) -> List[float]:
    """
    Scores a batch of rules and stores the result in rule.fitness.

    With workers > 1 the rules are spread over a multiprocessing.Pool, one task
    per rule; metrics computed in the workers are copied back onto the rules.
    A rule that fails to evaluate gets fitness and metrics of 0.0 and is logged.

    Returns:
        list: fitness of each rule, same order as `rules`.
    """
    if workers > 1 and len(rules) > 1:
        logger.debug(f"Starting parallel fitness evaluation of {len(rules)} rules with {workers} workers.")
        with multiprocessing.Pool(processes=workers, initializer=_init_worker, initargs=(evaluator,)) as pool:
            results = pool.map(evaluate_rule_fitness_parallel, rules)
    else:
        results = [_score_rule(evaluator, rule) for rule in rules]

    fitness_values = []
    failed = 0
    for rule, result in zip(rules, results):
        if result is None:
            failed += 1
            rule.reset_metrics()
        else:
            score, accuracy, coverage, completeness, range_coverage = result
            rule.set_metrics(accuracy, coverage, completeness, range_coverage)
            rule.fitness = score
        fitness_values.append(rule.fitness)

    if failed:
        logger.warning(f"Only {len(rules) - failed}/{len(rules)} rules evaluated successfully.")
    return fitness_values
