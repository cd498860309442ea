# lookup_table.py

"""
Quantile lookup table of feature ranges.

Each feature's observed values are cut into quantile bins once; rules can then
snap their ranges onto bin edges so that nearby ranges share a signature (and
a cache entry in the FeatureDatabase).
"""

import logging
from typing import Dict

import numpy as np

logger = logging.getLogger(__name__)


class RangeLookupTable:
    """Sorted quantile edges per feature, computed from a FeatureDatabase."""

    def __init__(self, database, n_bins: int = 10):
        """
        Args:
            database: FeatureDatabase providing num_features and column(feature_id).
            n_bins (int): Number of quantile bins per feature. Must be >= 1.
        """
        if n_bins < 1:
            raise ValueError(f"n_bins must be >= 1, got {n_bins}")
        self.n_bins = n_bins
        self._edges: Dict[int, np.ndarray] = {}
        quantiles = np.linspace(0.0, 1.0, n_bins + 1)
        for feature_id in range(database.num_features):
            col = database.column(feature_id)
            col = col[~np.isnan(col)]
            if col.size == 0:
                self._edges[feature_id] = np.array([0.0, 0.0])
                continue
            # np.unique sorts, so consecutive edges always satisfy lower <= upper
            self._edges[feature_id] = np.unique(np.quantile(col, quantiles))
        logger.debug(f"RangeLookupTable built with {n_bins} bins for {len(self._edges)} features.")

    def bin_edges(self, feature_id: int) -> np.ndarray:
        return self._edges[feature_id]

    def snap(self, requirement) -> None:
        """
        Widens a requirement's range outward to the nearest enclosing bin edges.

        Uses set_bound_range, which does not validate: the new lower edge is
        taken at or below the old lower bound and the new upper edge at or above
        the old upper bound, both from the sorted edge array, so the pair is
        ordered whenever the requirement was. Bounds outside the observed range
        are clamped to the outermost edges.
        """
        edges = self._edges[requirement.feature_id]
        lower_idx = np.searchsorted(edges, requirement.lower_bound, side='right') - 1
        upper_idx = np.searchsorted(edges, requirement.upper_bound, side='left')
        lower_idx = int(np.clip(lower_idx, 0, len(edges) - 1))
        upper_idx = int(np.clip(upper_idx, 0, len(edges) - 1))
        requirement.set_bound_range(float(edges[lower_idx]), float(edges[upper_idx]))

    def snap_rule(self, rule) -> None:
        """Snaps every requirement of a rule in place."""
        for req in rule.get_feature_reqs():
            self.snap(req)
