"""
Class Aggregator
================

Score every configured antihypertensive class, writing one TIS_<class> column
per class. The class list comes from configuration only; a class left out of
the configuration is left out of every downstream total.
"""

import logging
import pandas as pd
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from config.tis_config import TISConfig, TIS_CONFIG
from processing.class_flagger import flag_classes
from processing.dose_scorer import compute_doses, compute_scores, compute_class_tis

logger = logging.getLogger(__name__)


def aggregate_classes(df: pd.DataFrame, config: TISConfig = TIS_CONFIG) -> pd.DataFrame:
    """
    Add dose/score intermediates and a TIS column for each recognized class.

    Indicator columns are derived first if the input does not carry them.

    Args:
        df: Dispensing records
        config: TIS configuration

    Returns:
        Copy of df with dose1..3, score1..3 and TIS_<class> columns
    """
    if not set(config.indicator_columns).issubset(df.columns):
        df = flag_classes(df, config)

    scored = compute_scores(compute_doses(df, config), config)

    for class_name in config.recognized_classes:
        tis_col = config.tis_column(class_name)
        scored[tis_col] = compute_class_tis(scored, class_name, config)
        logger.debug(f"{tis_col}: {scored[tis_col].notna().sum():,} scored records")

    return scored
