# utils.py

import logging
from typing import List, Any

import numpy as np

logger = logging.getLogger(__name__)


def calculate_population_diversity(evaluator, rules: List[Any], sample_size: int = 20,
                                   random_state: int = None) -> float:
    """
    Estimates how diverse a set of rules is from the mean hamming distance
    (participation pattern) between random pairs of rules.

    Returns a score from 0.0 (all identical) to 100.0 (every position differs).
    """
    if not rules or len(rules) < 2:
        return 0.0

    rng = np.random.default_rng(random_state)
    # Pairs are drawn from a sample to avoid N^2 comparisons
    n_sample = min(len(rules), sample_size * 2)
    sample_indices = rng.choice(len(rules), n_sample, replace=False)

    distances = []
    for i in range(0, len(sample_indices) - 1, 2):
        r1 = rules[sample_indices[i]]
        r2 = rules[sample_indices[i + 1]]
        distances.append(evaluator.hamming_distance(r1, r2))

    if not distances:
        return 0.0
    return float(np.mean(distances))


def make_json_serializable(obj):
    """Recursively converts sets and numpy arrays within nested structures to lists."""
    if isinstance(obj, dict):
        return {k: make_json_serializable(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple, set)):
        return [make_json_serializable(item) for item in obj]
    elif isinstance(obj, (np.ndarray, np.generic)):
        return obj.tolist()
    return obj


def rule_to_dict(rule, feature_names=None) -> dict:
    """Flattens a scored rule for JSON reports."""
    return {
        'rule': rule.to_string(feature_names),
        'fitness': rule.fitness,
        'accuracy': rule.accuracy,
        'coverage': rule.coverage,
        'completeness': rule.completeness,
        'range_coverage': rule.range_coverage,
        'participation': list(rule.participation_vector()),
    }
