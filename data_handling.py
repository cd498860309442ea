# data_handling.py

import logging
import os
from typing import List, Optional

import pandas as pd

from constants import DEFAULT_CACHE_SIZE
from database import FeatureDatabase

logger = logging.getLogger(__name__)


def load_dataframe(data_path: str, columns: Optional[List[str]] = None) -> pd.DataFrame:
    """
    Reads a CSV file and keeps its numeric columns.

    Args:
        data_path: Path to the CSV file (header row expected).
        columns: Optional subset of columns to keep, in this order.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If requested columns are missing or no numeric column remains.
    """
    if not os.path.exists(data_path):
        logger.error(f"Data file not found: {data_path}")
        raise FileNotFoundError(f"Data file not found: {data_path}")

    df = pd.read_csv(data_path)
    if columns:
        missing = [c for c in columns if c not in df.columns]
        if missing:
            raise ValueError(f"Columns not found in {data_path}: {missing}")
        df = df[columns]

    numeric_df = df.select_dtypes(include='number')
    dropped = [c for c in df.columns if c not in numeric_df.columns]
    if dropped:
        logger.warning(f"Ignoring non-numeric columns: {dropped}")
    if numeric_df.shape[1] == 0:
        raise ValueError(f"No numeric columns in {data_path}")

    logger.info(f"Loaded {len(numeric_df)} records with {numeric_df.shape[1]} numeric features from {data_path}")
    return numeric_df


def load_database(data_path: str, columns: Optional[List[str]] = None,
                  max_cache_size: int = DEFAULT_CACHE_SIZE) -> FeatureDatabase:
    """Loads a CSV straight into a FeatureDatabase."""
    return FeatureDatabase(load_dataframe(data_path, columns), max_cache_size=max_cache_size)
