# config.py

"""
ConfigParameters and YAML loading.

Expected layout of config.yaml (every key optional):

    fitness:
      base_fitness_weight: 1.0
      ext1_fitness_weight: 0.0     # novelty vs. reference rules
      ext2_fitness_weight: 0.0     # completeness
      min_coverage: 0.005
    data:
      data_path: data.csv
      target_feature: label
      lookup_bins: 10
      cache_size: 100000          # rule signatures kept by FeatureDatabase
    ga:
      population_size: 50
      max_antecedents: 3
      mutation_rate: 0.1
      parallel_workers: 1
    reference_rules:
      max_depth: 4
      min_samples_leaf: 20
      n_bins: 3
    experiment_settings:
      random_seed: 42
      logging_level: INFO
"""

import logging
from typing import Any, Dict, Optional

import yaml

from constants import (
    DEFAULT_BASE_FITNESS_WEIGHT,
    DEFAULT_CACHE_SIZE,
    DEFAULT_EXT1_FITNESS_WEIGHT,
    DEFAULT_EXT2_FITNESS_WEIGHT,
    DEFAULT_MIN_COVERAGE,
    RANDOM_SEED,
)

logger = logging.getLogger(__name__)


class ConfigParameters:
    """Run parameters. Fitness weights are read once by the FitnessEvaluator."""

    def __init__(self,
                 base_fitness_weight: float = DEFAULT_BASE_FITNESS_WEIGHT,
                 ext1_fitness_weight: float = DEFAULT_EXT1_FITNESS_WEIGHT,
                 ext2_fitness_weight: float = DEFAULT_EXT2_FITNESS_WEIGHT,
                 min_coverage: float = DEFAULT_MIN_COVERAGE,
                 data_path: Optional[str] = None,
                 target_feature: Optional[str] = None,
                 lookup_bins: int = 10,
                 cache_size: int = DEFAULT_CACHE_SIZE,
                 population_size: int = 50,
                 max_antecedents: int = 3,
                 mutation_rate: float = 0.1,
                 parallel_workers: int = 1,
                 reference_tree_depth: int = 4,
                 reference_min_samples_leaf: int = 20,
                 reference_bins: int = 3,
                 random_seed: int = RANDOM_SEED,
                 logging_level: str = 'INFO'):
        self.base_fitness_weight = float(base_fitness_weight)
        self.ext1_fitness_weight = float(ext1_fitness_weight)
        self.ext2_fitness_weight = float(ext2_fitness_weight)
        self.min_coverage = float(min_coverage)
        self.data_path = data_path
        self.target_feature = target_feature
        self.lookup_bins = int(lookup_bins)
        self.cache_size = int(cache_size)
        self.population_size = int(population_size)
        self.max_antecedents = int(max_antecedents)
        self.mutation_rate = float(mutation_rate)
        self.parallel_workers = int(parallel_workers)
        self.reference_tree_depth = int(reference_tree_depth)
        self.reference_min_samples_leaf = int(reference_min_samples_leaf)
        self.reference_bins = int(reference_bins)
        self.random_seed = int(random_seed)
        self.logging_level = str(logging_level).upper()

    @classmethod
    def from_dict(cls, config_data: Dict[str, Any]) -> 'ConfigParameters':
        """Builds parameters from the sectioned dict produced by yaml.safe_load."""
        fitness = config_data.get('fitness') or {}
        data = config_data.get('data') or {}
        ga = config_data.get('ga') or {}
        reference = config_data.get('reference_rules') or {}
        settings = config_data.get('experiment_settings') or {}
        return cls(
            base_fitness_weight=fitness.get('base_fitness_weight', DEFAULT_BASE_FITNESS_WEIGHT),
            ext1_fitness_weight=fitness.get('ext1_fitness_weight', DEFAULT_EXT1_FITNESS_WEIGHT),
            ext2_fitness_weight=fitness.get('ext2_fitness_weight', DEFAULT_EXT2_FITNESS_WEIGHT),
            min_coverage=fitness.get('min_coverage', DEFAULT_MIN_COVERAGE),
            data_path=data.get('data_path'),
            target_feature=data.get('target_feature'),
            lookup_bins=data.get('lookup_bins', 10),
            cache_size=data.get('cache_size', DEFAULT_CACHE_SIZE),
            population_size=ga.get('population_size', 50),
            max_antecedents=ga.get('max_antecedents', 3),
            mutation_rate=ga.get('mutation_rate', 0.1),
            parallel_workers=ga.get('parallel_workers', 1),
            reference_tree_depth=reference.get('max_depth', 4),
            reference_min_samples_leaf=reference.get('min_samples_leaf', 20),
            reference_bins=reference.get('n_bins', 3),
            random_seed=settings.get('random_seed', RANDOM_SEED),
            logging_level=settings.get('logging_level', 'INFO'),
        )

    def __repr__(self):
        return (f"ConfigParameters(base={self.base_fitness_weight}, ext1={self.ext1_fitness_weight}, "
                f"ext2={self.ext2_fitness_weight}, min_coverage={self.min_coverage})")


def load_config(config_path: str = "config.yaml") -> Optional[ConfigParameters]:
    """Loads ConfigParameters from a YAML file. Returns None (and logs) if it cannot."""
    try:
        with open(config_path, 'r') as f:
            config_data = yaml.safe_load(f)
    except FileNotFoundError:
        logger.error(f"Config file not found: {config_path}")
        return None
    except yaml.YAMLError as e:
        logger.error(f"Error parsing config {config_path}: {e}")
        return None

    if not isinstance(config_data, dict):
        logger.error(f"Config file {config_path} empty/invalid.")
        return None

    try:
        params = ConfigParameters.from_dict(config_data)
    except (TypeError, ValueError, AttributeError) as e:
        logger.error(f"Invalid values in config {config_path}: {e}")
        return None
    logger.info(f"Configuration loaded successfully from {config_path}")
    return params
