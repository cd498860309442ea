# feature_requirement.py

"""
Defines the FeatureRequirement class, one feature's participation flag and
value range inside a Rule.
"""

from enum import IntEnum

from constants import PARTICIPATION_IGNORE, PARTICIPATION_ANTECEDENT, PARTICIPATION_CONSEQUENT


class Participation(IntEnum):
    """How a feature takes part in a rule."""
    IGNORE = PARTICIPATION_IGNORE
    ANTECEDENT = PARTICIPATION_ANTECEDENT
    CONSEQUENT = PARTICIPATION_CONSEQUENT


class InvalidRangeError(ValueError):
    """Raised when a bound change would leave lower_bound > upper_bound."""


def participation_from_code(code) -> Participation:
    """
    Maps an integer code to a Participation flag.

    Total mapping: 0, 1 and 2 select IGNORE, ANTECEDENT and CONSEQUENT, any other
    code selects IGNORE. Genetic operators may hand in garbage codes and the
    search must keep running, so this never raises.
    """
    if code == PARTICIPATION_ANTECEDENT:
        return Participation.ANTECEDENT
    elif code == PARTICIPATION_CONSEQUENT:
        return Participation.CONSEQUENT
    elif code == PARTICIPATION_IGNORE:
        return Participation.IGNORE
    else:
        return Participation.IGNORE  # ignore by default


class FeatureRequirement:
    """
    Associates a feature of the data set with a participation flag and a
    closed value range [lower_bound, upper_bound].
    """
    def __init__(self, feature_id: int, participation, lower: float, upper: float):
        """
        Initializes a FeatureRequirement with a validated range.

        Args:
            feature_id (int): Position of the feature in the data set. Immutable.
            participation (int): Participation code (0 ignore, 1 antecedent, 2 consequent).
                Unknown codes fall back to IGNORE.
            lower (float): Lower bound of the range.
            upper (float): Upper bound of the range.

        Raises:
            InvalidRangeError: If lower <= upper does not hold (inverted range or NaN bound).
        """
        if not lower <= upper:
            raise InvalidRangeError(f"Invalid range [{lower}, {upper}] for feature {feature_id}")
        self._feature_id = int(feature_id)
        self.participation = participation_from_code(participation)
        self.lower_bound = float(lower)
        self.upper_bound = float(upper)

    @property
    def feature_id(self) -> int:
        return self._feature_id

    @property
    def participation_code(self) -> int:
        """Numeric value of the participation flag."""
        return int(self.participation)

    # --- Setters ---

    def set_participation(self, code) -> None:
        """Sets participation from an integer code. Unknown codes become IGNORE."""
        self.participation = participation_from_code(code)

    def set_upper_bound(self, upper_bound: float) -> None:
        if not self.lower_bound <= upper_bound:
            raise InvalidRangeError(f"Attempted to set invalid upper bound {upper_bound} (lower bound is {self.lower_bound})")
        self.upper_bound = float(upper_bound)

    def set_lower_bound(self, lower_bound: float) -> None:
        if not lower_bound <= self.upper_bound:
            raise InvalidRangeError(f"Attempted to set invalid lower bound {lower_bound} (upper bound is {self.upper_bound})")
        self.lower_bound = float(lower_bound)

    def set_bound_range(self, lower_bound: float, upper_bound: float) -> None:
        """
        Sets both bounds at once WITHOUT checking lower_bound <= upper_bound.

        Callers must pass a pre-validated pair. Range tables that only know
        about bounds (see lookup_table.py) use this path so they do not depend
        on the rule error types.
        """
        self.lower_bound = float(lower_bound)
        self.upper_bound = float(upper_bound)

    # --- Evaluation ---

    def evaluate(self, value: float) -> bool:
        """
        Checks if a value lies inside [lower_bound, upper_bound], both ends inclusive.

        Does not check that the value actually comes from feature `feature_id`.
        """
        return self.lower_bound <= value <= self.upper_bound

    def width(self) -> float:
        return self.upper_bound - self.lower_bound

    def copy(self) -> 'FeatureRequirement':
        """Returns an independent copy, safe to mutate during crossover/mutation."""
        clone = FeatureRequirement.__new__(FeatureRequirement)
        clone._feature_id = self._feature_id
        clone.participation = self.participation
        clone.lower_bound = self.lower_bound
        clone.upper_bound = self.upper_bound
        return clone

    def __eq__(self, other):
        if not isinstance(other, FeatureRequirement):
            return NotImplemented
        return (self._feature_id == other._feature_id and
                self.participation == other.participation and
                self.lower_bound == other.lower_bound and
                self.upper_bound == other.upper_bound)

    __hash__ = None

    def __repr__(self):
        return (f"FeatureRequirement(feature_id={self._feature_id}, participation={self.participation.name}, "
                f"lower={self.lower_bound}, upper={self.upper_bound})")
