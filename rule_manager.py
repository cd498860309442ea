# rule_manager.py

"""
Rule-level helpers used by the GA driver: the validity check consulted by the
FitnessEvaluator, random rule construction, mutation and crossover.
"""

import logging
import random
from typing import Dict, Optional, Tuple

from feature_requirement import FeatureRequirement, InvalidRangeError, Participation
from constants import PARTICIPATION_IGNORE, PARTICIPATION_ANTECEDENT, PARTICIPATION_CONSEQUENT
from rule import Rule

logger = logging.getLogger(__name__)


# --- Validation ---

def is_valid_rule(rule: Rule) -> bool:
    """
    A rule is valid when it has at least one antecedent, at least one
    consequent, and every requirement keeps lower_bound <= upper_bound.
    The last check catches ranges written through the unchecked set_bound_range.
    Pure, no side effects.
    """
    has_antecedent = False
    has_consequent = False
    for req in rule.get_feature_reqs():
        if req.lower_bound > req.upper_bound:
            return False
        if req.participation == Participation.ANTECEDENT:
            has_antecedent = True
        elif req.participation == Participation.CONSEQUENT:
            has_consequent = True
    return has_antecedent and has_consequent


# --- Construction ---

def _random_sub_range(bounds: Tuple[float, float], rng) -> Tuple[float, float]:
    min_val, max_val = bounds
    if (max_val - min_val) < 1e-9:
        return min_val, max_val
    a, b = rng.uniform(min_val, max_val), rng.uniform(min_val, max_val)
    return (a, b) if a <= b else (b, a)


def random_rule(value_ranges: Dict[int, Tuple[float, float]], max_antecedents: int = 3,
                consequent_id: Optional[int] = None, rng: Optional[random.Random] = None) -> Rule:
    """
    Builds a random valid rule over the features of `value_ranges`.

    Args:
        value_ranges: {feature_id: (min, max)} observed in the data, ids 0..n-1.
        max_antecedents: Upper limit on the number of ANTECEDENT features.
        consequent_id: Feature used as the consequent. Random if None.
        rng: Random source. Defaults to the module-level `random`.

    Returns:
        Rule: one requirement per feature, ranges inside the observed ranges.

    Raises:
        ValueError: If there are fewer than two features.
    """
    rng = rng or random
    feature_ids = sorted(value_ranges)
    if len(feature_ids) < 2:
        raise ValueError("A rule needs at least two features (one antecedent, one consequent).")

    if consequent_id is None:
        consequent_id = rng.choice(feature_ids)
    candidates = [f for f in feature_ids if f != consequent_id]
    n_antecedents = rng.randint(1, max(1, min(max_antecedents, len(candidates))))
    antecedents = set(rng.sample(candidates, n_antecedents))

    reqs = []
    for feature_id in feature_ids:
        if feature_id == consequent_id:
            code = PARTICIPATION_CONSEQUENT
        elif feature_id in antecedents:
            code = PARTICIPATION_ANTECEDENT
        else:
            code = PARTICIPATION_IGNORE
        lower, upper = _random_sub_range(value_ranges[feature_id], rng)
        reqs.append(FeatureRequirement(feature_id, code, lower, upper))
    return Rule(reqs)


# --- Operators ---

def mutate_rule(rule: Rule, value_ranges: Dict[int, Tuple[float, float]], mutation_rate: float = 0.1,
                perturbation_factor: float = 0.1, rng: Optional[random.Random] = None) -> Rule:
    """
    Returns a mutated copy of `rule`; the original is left untouched.

    Each requirement mutates with probability `mutation_rate`: half of the time
    its participation is re-rolled, otherwise one of its bounds is nudged by up
    to `perturbation_factor` of the feature's observed span. Bound changes go
    through the checked setters; a change that would invert the range is dropped.
    """
    rng = rng or random
    mutant = rule.copy()
    # Metrics belong to the parent
    mutant.reset_metrics()
    for req in mutant.get_feature_reqs():
        if rng.random() >= mutation_rate:
            continue
        if rng.random() < 0.5:
            # Codes outside 0..2 map to IGNORE
            req.set_participation(rng.randint(PARTICIPATION_IGNORE - 1, PARTICIPATION_CONSEQUENT + 1))
            continue

        min_val, max_val = value_ranges.get(req.feature_id, (req.lower_bound, req.upper_bound))
        delta = (max_val - min_val) * perturbation_factor * rng.uniform(-1.0, 1.0)
        try:
            if rng.random() < 0.5:
                req.set_lower_bound(max(min_val, min(req.lower_bound + delta, max_val)))
            else:
                req.set_upper_bound(max(min_val, min(req.upper_bound + delta, max_val)))
        except InvalidRangeError as e:
            logger.debug(f"Bound mutation dropped for feature {req.feature_id}: {e}")
    return mutant


def crossover_rules(parent1: Rule, parent2: Rule, rng: Optional[random.Random] = None) -> Rule:
    """
    Uniform crossover: each position of the child is a copy of the same
    position in one of the parents.

    Raises:
        ValueError: If the parents have different lengths.
    """
    rng = rng or random
    if len(parent1) != len(parent2):
        raise ValueError(f"Cannot cross rules of different lengths ({len(parent1)} vs {len(parent2)}).")
    child_reqs = []
    for req1, req2 in zip(parent1.get_feature_reqs(), parent2.get_feature_reqs()):
        chosen = req1 if rng.random() < 0.5 else req2
        child_reqs.append(chosen.copy())
    return Rule(child_reqs)
