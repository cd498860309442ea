# constants.py

"""
Global constants used by the rule fitness engine.
Participation codes, default fitness weights and the fixed sub-weights of the basic fitness term.
"""

# --- Participation codes ---

# Numeric codes accepted by FeatureRequirement.set_participation
PARTICIPATION_IGNORE = 0
PARTICIPATION_ANTECEDENT = 1
PARTICIPATION_CONSEQUENT = 2

# --- Fitness weights ---

# Used when no ConfigParameters is handed to the FitnessEvaluator
DEFAULT_BASE_FITNESS_WEIGHT = 1.0
DEFAULT_EXT1_FITNESS_WEIGHT = 0.0   # novelty vs. reference rules
DEFAULT_EXT2_FITNESS_WEIGHT = 0.0   # completeness
DEFAULT_MIN_COVERAGE = 0.005

# Sub-weights of the basic term. They sum to 1 for legibility, not as a requirement.
BASIC_ACCURACY_WEIGHT = 0.50
BASIC_COVERAGE_WEIGHT = 0.15
BASIC_RANGE_WEIGHT = 0.35

# Every fitness term is reported on a 0-100 scale
FITNESS_SCALE = 100.0

# Largest value hamming_distance can return; starting point of the novelty search
MAX_NORMALIZED_DISTANCE = 100.0

# --- Evaluation cache ---

# Rule signatures kept by FeatureDatabase before the oldest are evicted
DEFAULT_CACHE_SIZE = 100_000

# --- Reproducibility ---

RANDOM_SEED = 42

# --- Logging ---

LOG_FORMAT = '%(asctime)s [%(levelname)-8s] %(name)s: %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
