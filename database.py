# database.py

"""
FeatureDatabase: the tabular data set the rules are mined from.

Feature ids are column positions of the DataFrame the database is built
from. evaluate_rule populates a Rule's accuracy, coverage, completeness and
range_coverage in place and caches the result per rule signature.
"""

import logging
from typing import Dict, List, Tuple

import numpy as np
import pandas as pd

import metrics
from constants import DEFAULT_CACHE_SIZE
from feature_requirement import Participation
from rule import Rule

logger = logging.getLogger(__name__)


class FeatureDatabase:
    """
    Holds the records (one numpy column per feature) and computes rule metrics.
    """

    def __init__(self, data: pd.DataFrame, max_cache_size: int = DEFAULT_CACHE_SIZE):
        """
        Args:
            data: DataFrame with numeric columns only. Column order defines feature ids.
            max_cache_size: Number of rule signatures kept in the metric cache.
                The oldest entries are evicted first. 0 disables caching.

        Raises:
            ValueError: If the DataFrame is empty of columns, has non-numeric columns,
                or max_cache_size is negative.
        """
        if max_cache_size < 0:
            raise ValueError(f"max_cache_size must be >= 0, got {max_cache_size}")
        if data.shape[1] == 0:
            raise ValueError("FeatureDatabase needs at least one feature column.")
        non_numeric = [c for c in data.columns if not pd.api.types.is_numeric_dtype(data[c])]
        if non_numeric:
            raise ValueError(f"Non-numeric feature columns are not supported: {non_numeric}")

        self.feature_names: List[str] = [str(c) for c in data.columns]
        self._columns: List[np.ndarray] = [data[c].to_numpy(dtype=float) for c in data.columns]
        self.num_records = int(data.shape[0])

        self.value_ranges: Dict[int, Tuple[float, float]] = {}
        for feature_id, col in enumerate(self._columns):
            if col.size and not np.all(np.isnan(col)):
                self.value_ranges[feature_id] = (float(np.nanmin(col)), float(np.nanmax(col)))
            else:
                self.value_ranges[feature_id] = (0.0, 0.0)

        self._cache: Dict[tuple, Tuple[float, float, float, float]] = {}
        self._max_cache_size = int(max_cache_size)
        self._hits = 0
        self._misses = 0
        logger.info(f"FeatureDatabase loaded: {self.num_records} records, {self.num_features} features.")

    @property
    def num_features(self) -> int:
        return len(self._columns)

    def column(self, feature_id: int) -> np.ndarray:
        return self._columns[feature_id]

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({name: col for name, col in zip(self.feature_names, self._columns)})

    # --- Rule evaluation ---

    def _side_mask(self, rule: Rule, flag: Participation) -> np.ndarray:
        """Records satisfying every requirement of one side of the rule (AND)."""
        mask = np.ones(self.num_records, dtype=bool)
        for req in rule.get_feature_reqs():
            if req.participation != flag:
                continue
            col = self._columns[req.feature_id]
            mask &= (col >= req.lower_bound) & (col <= req.upper_bound)
        return mask

    def match(self, rule: Rule) -> Tuple[np.ndarray, np.ndarray]:
        """Returns (antecedent_mask, consequent_mask) for the rule."""
        return self._side_mask(rule, Participation.ANTECEDENT), self._side_mask(rule, Participation.CONSEQUENT)

    def evaluate_rule(self, rule: Rule) -> None:
        """
        Populates rule.accuracy, rule.coverage, rule.completeness and
        rule.range_coverage. Idempotent; results are cached per rule.key().

        Raises:
            ValueError: If the rule's requirement vector does not match the number of features.
        """
        if len(rule) != self.num_features:
            raise ValueError(f"Rule has {len(rule)} feature requirements, database has {self.num_features} features.")

        key = rule.key()
        cached = self._cache.get(key)
        if cached is not None:
            self._hits += 1
            rule.set_metrics(*cached)
            return

        self._misses += 1
        antecedent_mask, consequent_mask = self.match(rule)
        participating = [req for req in rule.get_feature_reqs() if req.participation != Participation.IGNORE]
        values = metrics.calculate_all_metrics(
            antecedent_mask, consequent_mask,
            ranges=[(req.lower_bound, req.upper_bound) for req in participating],
            spans=[self.value_ranges[req.feature_id] for req in participating],
        )
        result = (values['accuracy'], values['coverage'], values['completeness'], values['range_coverage'])
        self._store(key, result)
        rule.set_metrics(*result)
        logger.debug(f"Evaluated rule {rule.to_string(self.feature_names)} -> {values}")

    # --- Cache ---

    def _store(self, key: tuple, result: Tuple[float, float, float, float]) -> None:
        if self._max_cache_size == 0:
            return
        # dicts keep insertion order, so the first key is the oldest
        while len(self._cache) >= self._max_cache_size:
            del self._cache[next(iter(self._cache))]
        self._cache[key] = result

    def clear_cache(self) -> None:
        self._cache.clear()
        self._hits = 0
        self._misses = 0

    def cache_info(self) -> Dict[str, int]:
        return {'hits': self._hits, 'misses': self._misses, 'size': len(self._cache)}
