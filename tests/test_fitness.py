import pytest

import fitness
from config import ConfigParameters
from database import FeatureDatabase
from fitness import FitnessEvaluator


def test_defaults_when_no_config(recording_db) -> None:
    evaluator = FitnessEvaluator(recording_db, [])
    assert evaluator.base_weight == 1.0
    assert evaluator.novelty_weight == 0.0
    assert evaluator.completeness_weight == 0.0
    assert evaluator.min_coverage == 0.005


def test_weights_come_from_config(recording_db) -> None:
    config = ConfigParameters(base_fitness_weight=2.0, ext1_fitness_weight=0.5,
                              ext2_fitness_weight=0.25, min_coverage=0.1)
    evaluator = FitnessEvaluator(recording_db, [], config)
    assert (evaluator.base_weight, evaluator.novelty_weight,
            evaluator.completeness_weight, evaluator.min_coverage) == (2.0, 0.5, 0.25, 0.1)


def test_invalid_rule_scores_zero_without_database_call(recording_db, make_rule) -> None:
    evaluator = FitnessEvaluator(recording_db, [])
    no_consequent = make_rule([1, 1, 0])
    assert evaluator.fitness_of(no_consequent) == 0.0
    assert recording_db.calls == 0
    assert no_consequent.coverage == 0.0


def test_low_coverage_scores_zero(recording_db, make_rule) -> None:
    recording_db.metrics = (1.0, 0.001, 1.0, 1.0)
    config = ConfigParameters(ext2_fitness_weight=1.0, min_coverage=0.005)
    evaluator = FitnessEvaluator(recording_db, [], config)
    rule = make_rule([1, 2])
    assert evaluator.fitness_of(rule) == 0.0
    assert recording_db.calls == 1
    assert rule.coverage == 0.001


def test_coverage_equal_to_minimum_is_kept(recording_db, make_rule) -> None:
    recording_db.metrics = (1.0, 0.005, 0.0, 0.0)
    evaluator = FitnessEvaluator(recording_db, [])
    assert evaluator.fitness_of(make_rule([1, 2])) > 0.0


def test_perfect_rule_scores_exactly_100(recording_db, make_rule) -> None:
    evaluator = FitnessEvaluator(recording_db, [], ConfigParameters(min_coverage=0.0))
    assert evaluator.fitness_of(make_rule([1, 2, 0])) == 100.0


def test_basic_term_sub_weights(recording_db, make_rule) -> None:
    evaluator = FitnessEvaluator(recording_db, [])
    rule = make_rule([1, 2])
    rule.set_metrics(accuracy=1.0, coverage=0.0, completeness=0.0, range_coverage=0.0)
    assert evaluator.basic_term(rule) == pytest.approx(50.0)
    rule.set_metrics(accuracy=0.0, coverage=1.0, completeness=0.0, range_coverage=0.0)
    assert evaluator.basic_term(rule) == pytest.approx(15.0)
    rule.set_metrics(accuracy=0.0, coverage=0.0, completeness=0.0, range_coverage=1.0)
    assert evaluator.basic_term(rule) == pytest.approx(35.0)


def test_completeness_term(recording_db, make_rule) -> None:
    evaluator = FitnessEvaluator(recording_db, [])
    rule = make_rule([1, 2])
    rule.completeness = 0.4
    assert evaluator.completeness_term(rule) == pytest.approx(40.0)


def test_hamming_distance_uses_real_division(recording_db, make_rule) -> None:
    evaluator = FitnessEvaluator(recording_db, [])
    r1 = make_rule([1, 0, 2, 0])
    r2 = make_rule([1, 0, 2, 1])
    assert evaluator.hamming_distance(r1, r2) == 25.0


def test_hamming_distance_ignores_bounds(recording_db, make_rule) -> None:
    evaluator = FitnessEvaluator(recording_db, [])
    r1 = make_rule([1, 2, 0], [(0, 1), (0, 1), (0, 1)])
    r2 = make_rule([1, 2, 0], [(5, 6), (2, 9), (3, 3)])
    assert evaluator.hamming_distance(r1, r2) == 0.0
    assert evaluator.hamming_distance(r1, make_rule([2, 1, 1])) == 100.0


def test_novelty_is_min_distance_over_references(recording_db, make_rule) -> None:
    references = [make_rule([2, 1, 1, 1]), make_rule([1, 0, 2, 1]), make_rule([0, 0, 0, 0])]
    evaluator = FitnessEvaluator(recording_db, references)
    assert evaluator.novelty_term(make_rule([1, 0, 2, 0])) == 25.0


def test_novelty_sentinel_is_100(recording_db, make_rule) -> None:
    evaluator = FitnessEvaluator(recording_db, [])
    assert evaluator.novelty_term(make_rule([1, 2])) == 100.0


def test_novelty_replaces_sentinel_for_long_rules(recording_db, make_rule) -> None:
    # 200 features: a raw-length sentinel would be 200, the normalized one is 100
    codes = [1, 2] + [0] * 198
    reference = list(codes)
    reference[5] = 1
    evaluator = FitnessEvaluator(recording_db, [make_rule(reference)])
    assert evaluator.novelty_term(make_rule(codes)) == pytest.approx(0.5)


def test_empty_reference_set_disables_novelty(recording_db, make_rule) -> None:
    recording_db.metrics = (0.8, 0.4, 0.3, 0.6)
    base_only = FitnessEvaluator(recording_db, [], ConfigParameters(min_coverage=0.0))
    with_novelty = FitnessEvaluator(recording_db, [], ConfigParameters(ext1_fitness_weight=1000.0, min_coverage=0.0))
    rule = make_rule([1, 2, 0])
    assert with_novelty.fitness_of(rule) == base_only.fitness_of(rule)


def test_all_terms_are_weighted(recording_db, make_rule) -> None:
    recording_db.metrics = (1.0, 1.0, 0.5, 1.0)
    config = ConfigParameters(base_fitness_weight=0.5, ext1_fitness_weight=0.1,
                              ext2_fitness_weight=0.2, min_coverage=0.0)
    references = [make_rule([1, 0, 2, 1])]
    evaluator = FitnessEvaluator(recording_db, references, config)
    # base 100 * 0.5 + novelty 25 * 0.1 + completeness 50 * 0.2
    assert evaluator.fitness_of(make_rule([1, 0, 2, 0])) == pytest.approx(50.0 + 2.5 + 10.0)


def test_reference_rules_are_frozen(recording_db, make_rule) -> None:
    references = [make_rule([1, 2])]
    evaluator = FitnessEvaluator(recording_db, references)
    references.append(make_rule([2, 1]))
    assert len(evaluator.reference_rules) == 1


def test_fitness_with_real_database(small_db, make_rule) -> None:
    evaluator = FitnessEvaluator(small_db, [], ConfigParameters(min_coverage=0.0))
    rule = make_rule([1, 2, 0], [(6, 10), (1, 1), (0, 0)])
    expected = 100 * (0.50 * 1.0 + 0.15 * 0.5 + 0.35 * ((5 / 9 + 1.0) / 2))
    assert evaluator.fitness_of(rule) == pytest.approx(expected)


def test_evaluate_rules_serial_assigns_fitness(small_db, make_rule) -> None:
    evaluator = FitnessEvaluator(small_db, [], ConfigParameters(min_coverage=0.0))
    rules = [make_rule([1, 2, 0], [(6, 10), (1, 1), (0, 0)]), make_rule([1, 1, 0])]
    scores = fitness.evaluate_rules(evaluator, rules)
    assert scores[1] == 0.0
    assert scores[0] > 0.0
    assert [r.fitness for r in rules] == scores


def test_evaluate_rules_failure_gets_zero(small_db, make_rule) -> None:
    evaluator = FitnessEvaluator(small_db, [])
    misaligned = make_rule([1, 2])
    assert fitness.evaluate_rules(evaluator, [misaligned]) == [0.0]


def test_evaluate_rules_parallel_matches_serial(small_frame, make_rule) -> None:
    evaluator = FitnessEvaluator(FeatureDatabase(small_frame), [], ConfigParameters(min_coverage=0.0))
    bounds = [(6, 10), (1, 1), (0, 100)]
    serial_rules = [make_rule([1, 2, 0], bounds), make_rule([1, 0, 2], [(4, 10), (0, 1), (40, 100)])]
    parallel_rules = [r.copy() for r in serial_rules]

    serial = fitness.evaluate_rules(evaluator, serial_rules, workers=1)
    parallel = fitness.evaluate_rules(evaluator, parallel_rules, workers=2)
    assert parallel == pytest.approx(serial)
    assert parallel_rules[1].coverage == pytest.approx(serial_rules[1].coverage)


def test_invalid_copy_does_not_report_parent_metrics(recording_db, make_rule) -> None:
    recording_db.metrics = (0.9, 0.8, 0.7, 0.6)
    evaluator = FitnessEvaluator(recording_db, [])
    parent = make_rule([1, 2, 0])
    fitness.evaluate_rules(evaluator, [parent])
    assert parent.coverage == 0.8

    child = parent.copy()
    child.get_feature_reqs()[1].set_participation(0)
    assert fitness.evaluate_rules(evaluator, [child]) == [0.0]
    assert (child.accuracy, child.coverage, child.completeness, child.range_coverage) == (0.0, 0.0, 0.0, 0.0)
    assert (parent.accuracy, parent.coverage) == (0.9, 0.8)


def test_failed_rule_metrics_are_reset(small_db, make_rule) -> None:
    evaluator = FitnessEvaluator(small_db, [])
    misaligned = make_rule([1, 2])
    misaligned.set_metrics(0.5, 0.5, 0.5, 0.5)
    fitness.evaluate_rules(evaluator, [misaligned])
    assert misaligned.coverage == 0.0 and misaligned.accuracy == 0.0
