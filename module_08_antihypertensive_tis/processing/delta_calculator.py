"""Delta TIS between the configured previous and new periods."""

import logging
import numpy as np
import pandas as pd
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from config.tis_config import TISConfig, TIS_CONFIG, DELTA_COLUMN

logger = logging.getLogger(__name__)


def compute_delta(wide: pd.DataFrame, config: TISConfig = TIS_CONFIG) -> pd.DataFrame:
    """
    Add delta_tis = tis_<new> - tis_<previous>.

    A patient missing either period gets a null delta, not zero.

    Args:
        wide: One row per patient with tis_<period> columns
        config: TIS configuration

    Returns:
        Copy of wide with both period columns present and delta_tis appended
    """
    wide = wide.copy()
    previous_col = config.period_column(config.periods.previous)
    new_col = config.period_column(config.periods.new)

    for col in (previous_col, new_col):
        if col not in wide.columns:
            logger.warning(f"No records for period column '{col}'; delta will be null")
            wide[col] = np.nan

    wide[DELTA_COLUMN] = (wide[new_col] - wide[previous_col]).round(config.rounding_decimals)

    n_missing = int(wide[DELTA_COLUMN].isna().sum())
    if n_missing:
        logger.info(f"{n_missing:,} patient(s) missing a period; delta_tis left null")

    return wide
