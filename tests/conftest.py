import pandas as pd
import pytest

from feature_requirement import FeatureRequirement
from rule import Rule
from database import FeatureDatabase


def build_rule(codes, bounds=None):
    """Rule from participation codes; bounds default to (0, 1) per feature."""
    bounds = bounds or [(0.0, 1.0)] * len(codes)
    return Rule([FeatureRequirement(i, code, lower, upper)
                 for i, (code, (lower, upper)) in enumerate(zip(codes, bounds))])


class RecordingDatabase:
    """Stand-in database: writes preset metrics on the rule and counts calls."""

    def __init__(self, accuracy=1.0, coverage=1.0, completeness=1.0, range_coverage=1.0):
        self.metrics = (accuracy, coverage, completeness, range_coverage)
        self.calls = 0

    def evaluate_rule(self, rule):
        self.calls += 1
        rule.set_metrics(*self.metrics)


@pytest.fixture
def make_rule():
    return build_rule


@pytest.fixture
def recording_db():
    return RecordingDatabase()


@pytest.fixture
def small_frame() -> pd.DataFrame:
    return pd.DataFrame({
        'a': [1, 2, 3, 4, 5, 6, 7, 8, 9, 10],
        'b': [0, 0, 0, 0, 0, 1, 1, 1, 1, 1],
        'c': [10, 20, 30, 40, 50, 60, 70, 80, 90, 100],
    })


@pytest.fixture
def small_db(small_frame) -> FeatureDatabase:
    return FeatureDatabase(small_frame)
