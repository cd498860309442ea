# metrics.py
#
# Centralised rule-quality metrics.
# Every function works on boolean numpy masks over the records of the data set:
#   antecedent_mask[i] -> record i satisfies every ANTECEDENT requirement
#   consequent_mask[i] -> record i satisfies every CONSEQUENT requirement

import logging
from typing import Dict, Iterable, Tuple

import numpy as np
from sklearn.metrics import precision_score, recall_score

logger = logging.getLogger(__name__)


def calculate_coverage(antecedent_mask: np.ndarray) -> float:
    """Fraction of records matched by the antecedent."""
    if antecedent_mask.size == 0:
        return 0.0
    return float(np.count_nonzero(antecedent_mask)) / antecedent_mask.size


def calculate_accuracy(antecedent_mask: np.ndarray, consequent_mask: np.ndarray) -> float:
    """
    Fraction of antecedent matches for which the consequent also holds.

    Equivalent to the precision of 'antecedent' as a predictor of 'consequent'.
    Returns 0.0 when the antecedent matches nothing.
    """
    if antecedent_mask.size == 0:
        return 0.0
    try:
        return float(precision_score(consequent_mask, antecedent_mask, zero_division=0))
    except Exception as e:
        logger.error(f"Error calculating rule accuracy: {e}", exc_info=True)
        return 0.0


def calculate_completeness(antecedent_mask: np.ndarray, consequent_mask: np.ndarray) -> float:
    """
    Fraction of consequent matches that the antecedent also catches, i.e. how
    much of the target concept the rule captures (recall).
    """
    if consequent_mask.size == 0:
        return 0.0
    try:
        return float(recall_score(consequent_mask, antecedent_mask, zero_division=0))
    except Exception as e:
        logger.error(f"Error calculating rule completeness: {e}", exc_info=True)
        return 0.0


def calculate_range_coverage(ranges: Iterable[Tuple[float, float]], spans: Iterable[Tuple[float, float]]) -> float:
    """
    Scores how tightly the rule's ranges sit inside the observed feature ranges.

    For each participating feature the score is 1 - width / span, clipped to
    [0, 1]; the result is the mean over those features. A feature whose
    observed span is zero counts as fully tight.

    Args:
        ranges: (lower, upper) of each participating requirement.
        spans: (min, max) observed in the data for the same features, same order.

    Returns:
        float: Value in [0, 1]; 0.0 if no feature participates.
    """
    scores = []
    for (lower, upper), (feat_min, feat_max) in zip(ranges, spans):
        span = feat_max - feat_min
        if span <= 0:
            scores.append(1.0)
            continue
        scores.append(float(np.clip(1.0 - (upper - lower) / span, 0.0, 1.0)))
    if not scores:
        return 0.0
    return float(np.mean(scores))


# --- Convenience ---

def calculate_all_metrics(antecedent_mask: np.ndarray, consequent_mask: np.ndarray,
                          ranges: Iterable[Tuple[float, float]],
                          spans: Iterable[Tuple[float, float]]) -> Dict[str, float]:
    """
    Computes every metric cached on a Rule.

    Returns:
        dict: keys 'accuracy', 'coverage', 'completeness', 'range_coverage'.
    """
    return {
        'accuracy': calculate_accuracy(antecedent_mask, consequent_mask),
        'coverage': calculate_coverage(antecedent_mask),
        'completeness': calculate_completeness(antecedent_mask, consequent_mask),
        'range_coverage': calculate_range_coverage(ranges, spans),
    }
