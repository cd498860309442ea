# reference_rules.py
"""
Reference rule mining with a Decision Tree.

A classical learner supplies the baseline the FitnessEvaluator measures
novelty against:
1. the target feature is discretised into quantile bins,
2. a DecisionTreeClassifier is fitted on the remaining features,
3. every root->leaf path becomes a Rule: the path's features are
   ANTECEDENTs bounded by the split thresholds, the target is the CONSEQUENT
   bounded by the observed range of the leaf's majority bin.
"""

import logging
from typing import Dict, List, Tuple, Union

import numpy as np
import pandas as pd
from sklearn.tree import DecisionTreeClassifier, _tree

from constants import RANDOM_SEED, PARTICIPATION_IGNORE, PARTICIPATION_ANTECEDENT, PARTICIPATION_CONSEQUENT
from feature_requirement import FeatureRequirement, InvalidRangeError
from rule import Rule

logger = logging.getLogger(__name__)


def resolve_feature_id(database, feature: Union[int, str]) -> int:
    """Accepts a feature id or a column name."""
    if isinstance(feature, str):
        try:
            return database.feature_names.index(feature)
        except ValueError:
            raise ValueError(f"Feature '{feature}' not found. Available: {database.feature_names}") from None
    feature_id = int(feature)
    if not 0 <= feature_id < database.num_features:
        raise ValueError(f"Feature id {feature_id} out of range (0..{database.num_features - 1}).")
    return feature_id


def extract_tree_paths(dt_model: DecisionTreeClassifier) -> List[Tuple[List[Tuple[int, str, float]], int]]:
    """
    Walks the fitted tree and returns every root->leaf path.

    Returns:
        list of (conditions, class_index) where conditions is [(column_index, '<=' | '>', threshold), ...]
        in root-to-leaf order and class_index indexes dt_model.classes_.
    """
    tree = dt_model.tree_
    paths = []

    def recurse(node: int, conditions: List[Tuple[int, str, float]]):
        if tree.feature[node] == _tree.TREE_UNDEFINED:
            class_index = int(np.argmax(tree.value[node][0]))
            paths.append((conditions, class_index))
            return
        column = int(tree.feature[node])
        threshold = float(tree.threshold[node])
        recurse(tree.children_left[node], conditions + [(column, '<=', threshold)])
        recurse(tree.children_right[node], conditions + [(column, '>', threshold)])

    recurse(0, [])
    return paths


def _path_to_rule(conditions, column_to_feature: List[int], target_id: int,
                  target_range: Tuple[float, float], value_ranges: Dict[int, Tuple[float, float]]) -> Rule:
    bounds = {fid: list(value_ranges[fid]) for fid in value_ranges}
    antecedents = set()
    for column, operator, threshold in conditions:
        feature_id = column_to_feature[column]
        antecedents.add(feature_id)
        if operator == '<=':
            bounds[feature_id][1] = min(bounds[feature_id][1], threshold)
        else:
            # '>' is exclusive, requirements are inclusive
            bounds[feature_id][0] = max(bounds[feature_id][0], float(np.nextafter(threshold, np.inf)))

    reqs = []
    for feature_id in sorted(value_ranges):
        if feature_id == target_id:
            reqs.append(FeatureRequirement(feature_id, PARTICIPATION_CONSEQUENT, *target_range))
        elif feature_id in antecedents:
            lower, upper = bounds[feature_id]
            reqs.append(FeatureRequirement(feature_id, PARTICIPATION_ANTECEDENT, lower, upper))
        else:
            lower, upper = value_ranges[feature_id]
            reqs.append(FeatureRequirement(feature_id, PARTICIPATION_IGNORE, lower, upper))
    return Rule(reqs)


def mine_reference_rules(database, target_feature: Union[int, str], max_depth: int = 4,
                         min_samples_leaf: int = 20, n_bins: int = 3,
                         random_state: int = RANDOM_SEED) -> List[Rule]:
    """
    Mines reference rules for `target_feature` from a FeatureDatabase.

    Args:
        database: FeatureDatabase with the records.
        target_feature: Name or id of the feature used as the consequent.
        max_depth: Maximum depth of the Decision Tree.
        min_samples_leaf: Minimum records per leaf.
        n_bins: Number of quantile bins for the target.
        random_state: Seed for the tree.

    Returns:
        List of Rules aligned with the database features. Empty if the target
        cannot be split into at least two bins or no feature besides the target exists.
    """
    target_id = resolve_feature_id(database, target_feature)
    if database.num_features < 2:
        logger.warning("Reference mining needs at least one feature besides the target.")
        return []

    frame = database.to_frame()
    target_name = database.feature_names[target_id]
    frame = frame[frame[target_name].notna()]
    y_raw = frame[target_name]
    X = frame.drop(columns=[target_name])
    X = X.fillna(X.median())
    column_to_feature = [fid for fid in range(database.num_features) if fid != target_id]

    if y_raw.nunique() < 2:
        logger.warning(f"Target '{target_name}' has fewer than two distinct values; no reference rules mined.")
        return []

    labels = pd.qcut(y_raw, q=n_bins, labels=False, duplicates='drop')
    if labels.nunique() < 2:
        logger.warning(f"Target '{target_name}' could not be split into {n_bins} bins; no reference rules mined.")
        return []
    bin_ranges = {int(b): (float(y_raw[labels == b].min()), float(y_raw[labels == b].max()))
                  for b in labels.unique()}

    dt_model = DecisionTreeClassifier(max_depth=max_depth, min_samples_leaf=min_samples_leaf,
                                      random_state=random_state)
    dt_model.fit(X.to_numpy(), labels.to_numpy())

    rules = []
    seen = set()
    for conditions, class_index in extract_tree_paths(dt_model):
        if not conditions:
            continue
        predicted_bin = int(dt_model.classes_[class_index])
        try:
            rule = _path_to_rule(conditions, column_to_feature, target_id,
                                 bin_ranges[predicted_bin], database.value_ranges)
        except InvalidRangeError as e:
            logger.debug(f"Skipping empty tree path {conditions}: {e}")
            continue
        key = rule.key()
        if key in seen:
            continue
        seen.add(key)
        rules.append(rule)

    logger.info(f"Reference mining: {len(rules)} rules extracted from {dt_model.tree_.node_count} tree nodes "
                f"(target '{target_name}', {len(bin_ranges)} bins).")
    return rules
