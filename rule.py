# rule.py

"""
Defines the Rule class: an ordered vector of FeatureRequirements, one per
data set feature, plus the quality metrics cached on it by the FeatureDatabase.
"""

from typing import List, Sequence, Tuple, Optional

from feature_requirement import FeatureRequirement, Participation


class Rule:
    """
    Represents a candidate association rule IF <antecedents> THEN <consequents>.

    The requirement vector is positionally aligned with the features of the
    database the rule was built against: feature_reqs[i] constrains feature i.
    All rules of a run share this alignment; nothing here re-checks it.
    """
    def __init__(self, feature_reqs: Sequence[FeatureRequirement]):
        """
        Args:
            feature_reqs (sequence of FeatureRequirement): One requirement per feature, in feature order.
        """
        self.feature_reqs: List[FeatureRequirement] = list(feature_reqs)
        # Populated by FeatureDatabase.evaluate_rule
        self.accuracy = 0.0
        self.coverage = 0.0
        self.completeness = 0.0
        self.range_coverage = 0.0
        # Populated by the GA driver (see fitness.evaluate_rules)
        self.fitness = 0.0

    def get_feature_reqs(self) -> List[FeatureRequirement]:
        return self.feature_reqs

    def __len__(self):
        return len(self.feature_reqs)

    # --- Participation helpers ---

    def _ids_with(self, flag: Participation) -> List[int]:
        return [i for i, req in enumerate(self.feature_reqs) if req.participation == flag]

    def antecedent_ids(self) -> List[int]:
        """Positions of the features used on the IF side."""
        return self._ids_with(Participation.ANTECEDENT)

    def consequent_ids(self) -> List[int]:
        """Positions of the features used on the THEN side."""
        return self._ids_with(Participation.CONSEQUENT)

    def participation_vector(self) -> Tuple[int, ...]:
        return tuple(req.participation_code for req in self.feature_reqs)

    def key(self) -> Tuple[Tuple[int, Optional[float], Optional[float]], ...]:
        """
        Hashable signature of everything that affects the rule's metrics.
        Bounds of ignored features do not change the metrics, so they are left out.
        """
        signature = []
        for req in self.feature_reqs:
            if req.participation == Participation.IGNORE:
                signature.append((0, None, None))
            else:
                signature.append((req.participation_code, req.lower_bound, req.upper_bound))
        return tuple(signature)

    def set_metrics(self, accuracy: float, coverage: float, completeness: float, range_coverage: float) -> None:
        self.accuracy = accuracy
        self.coverage = coverage
        self.completeness = completeness
        self.range_coverage = range_coverage

    def reset_metrics(self) -> None:
        """Zeroes the metrics and the fitness, e.g. after the requirements changed."""
        self.set_metrics(0.0, 0.0, 0.0, 0.0)
        self.fitness = 0.0

    def copy(self) -> 'Rule':
        """Copies every requirement (no shared state) and carries the cached metrics over."""
        clone = Rule([req.copy() for req in self.feature_reqs])
        clone.set_metrics(self.accuracy, self.coverage, self.completeness, self.range_coverage)
        clone.fitness = self.fitness
        return clone

    # --- Representation ---

    def to_string(self, feature_names: Optional[Sequence[str]] = None) -> str:
        """
        Formats the rule as 'IF f0 in [a, b] AND ... THEN f3 in [c, d]'.

        Args:
            feature_names (sequence of str, optional): Names indexed by feature id.
                Defaults to 'f<id>'.
        """
        def clause(req: FeatureRequirement) -> str:
            name = feature_names[req.feature_id] if feature_names else f"f{req.feature_id}"
            return f"{name} in [{req.lower_bound:.4f}, {req.upper_bound:.4f}]"

        antecedents = [clause(self.feature_reqs[i]) for i in self.antecedent_ids()]
        consequents = [clause(self.feature_reqs[i]) for i in self.consequent_ids()]
        lhs = " AND ".join(antecedents) if antecedents else "TRUE"
        rhs = " AND ".join(consequents) if consequents else "TRUE"
        return f"IF {lhs} THEN {rhs}"

    def __str__(self):
        return (f"{self.to_string()} (fitness={self.fitness:.4f}, acc={self.accuracy:.4f}, "
                f"cov={self.coverage:.4f}, comp={self.completeness:.4f}, range={self.range_coverage:.4f})")

    def __repr__(self):
        return f"Rule({self.feature_reqs!r})"
