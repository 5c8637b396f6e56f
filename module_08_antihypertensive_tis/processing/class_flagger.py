"""
Antihypertensive Class Flagger
==============================

Derive one binary indicator column per recognized medication class from the
record's class label.
"""

import logging
import pandas as pd
from pathlib import Path
from typing import List, Optional
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from config.tis_config import TISConfig, TIS_CONFIG

logger = logging.getLogger(__name__)


def normalize_class_label(label) -> Optional[str]:
    """
    Normalize a class label for matching.

    Args:
        label: Raw class string (may be missing)

    Returns:
        Lowercased, trimmed label or None
    """
    if label is None or pd.isna(label):
        return None
    label = str(label).strip().lower()
    return label or None


def flag_classes(df: pd.DataFrame, config: TISConfig = TIS_CONFIG) -> pd.DataFrame:
    """
    Add class_<name> indicator columns (0/1) for each recognized class.

    Matching is case-insensitive on the trimmed label. Unrecognized labels get
    all-zero indicators.

    Args:
        df: Records with the class label column
        config: TIS configuration

    Returns:
        Copy of df with one indicator column per recognized class
    """
    df = df.copy()
    labels = df[config.columns.med_class].map(normalize_class_label)

    for class_name in config.recognized_classes:
        df[config.indicator_column(class_name)] = (
            labels == config.class_key(class_name)
        ).astype(int)

    unrecognized = unrecognized_labels(labels, config)
    if unrecognized:
        logger.warning(
            f"{len(unrecognized)} unrecognized class label(s) excluded from TIS: {unrecognized}"
        )

    return df


def unrecognized_labels(labels: pd.Series, config: TISConfig = TIS_CONFIG) -> List[str]:
    """List distinct normalized labels that match no recognized class."""
    known = {config.class_key(c) for c in config.recognized_classes}
    return sorted(set(labels.dropna()) - known)
