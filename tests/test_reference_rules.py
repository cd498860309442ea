import numpy as np
import pandas as pd
import pytest

from database import FeatureDatabase
from reference_rules import mine_reference_rules, resolve_feature_id
from rule_manager import is_valid_rule


@pytest.fixture
def linear_db() -> FeatureDatabase:
    x = np.arange(100, dtype=float)
    rng = np.random.default_rng(0)
    return FeatureDatabase(pd.DataFrame({'x': x, 'y': 2 * x, 'z': rng.uniform(0, 1, 100)}))


def test_resolve_feature_id(linear_db) -> None:
    assert resolve_feature_id(linear_db, 'y') == 1
    assert resolve_feature_id(linear_db, 2) == 2
    with pytest.raises(ValueError):
        resolve_feature_id(linear_db, 'missing')
    with pytest.raises(ValueError):
        resolve_feature_id(linear_db, 5)


def test_mined_rules_are_aligned_and_valid(linear_db) -> None:
    rules = mine_reference_rules(linear_db, 'y', max_depth=2, min_samples_leaf=5, n_bins=2)
    assert len(rules) == 2
    for rule in rules:
        assert len(rule) == linear_db.num_features
        assert rule.consequent_ids() == [1]
        assert rule.antecedent_ids() == [0]
        assert is_valid_rule(rule)


def test_mined_rule_bounds_follow_split(linear_db) -> None:
    rules = mine_reference_rules(linear_db, 'y', max_depth=2, min_samples_leaf=5, n_bins=2)
    low_rule = min(rules, key=lambda r: r.get_feature_reqs()[0].lower_bound)
    x_req, y_req = low_rule.get_feature_reqs()[0], low_rule.get_feature_reqs()[1]
    assert (x_req.lower_bound, x_req.upper_bound) == (0.0, 49.5)
    assert (y_req.lower_bound, y_req.upper_bound) == (0.0, 98.0)

    linear_db.evaluate_rule(low_rule)
    assert low_rule.coverage == pytest.approx(0.5)
    assert low_rule.accuracy == pytest.approx(1.0)
    assert low_rule.completeness == pytest.approx(1.0)


def test_split_greater_than_is_exclusive(linear_db) -> None:
    rules = mine_reference_rules(linear_db, 'y', max_depth=2, min_samples_leaf=5, n_bins=2)
    high_rule = max(rules, key=lambda r: r.get_feature_reqs()[0].lower_bound)
    x_req = high_rule.get_feature_reqs()[0]
    assert x_req.lower_bound > 49.5
    assert not x_req.evaluate(49.5)
    assert x_req.evaluate(50.0)


def test_constant_target_gives_no_rules() -> None:
    db = FeatureDatabase(pd.DataFrame({'a': [1.0, 2.0, 3.0], 't': [5.0, 5.0, 5.0]}))
    assert mine_reference_rules(db, 't') == []


def test_single_feature_gives_no_rules() -> None:
    db = FeatureDatabase(pd.DataFrame({'t': [1.0, 2.0, 3.0]}))
    assert mine_reference_rules(db, 't') == []
