"""
Dose Scorer
===========

Per-class Therapeutic Intensity Score from up to three ingredient slots.

    dose_i  = strength_i * rxamt / rxsup
    score_i = dose_i / maxdose_i
    TIS     = round(score_1 [+ score_2 [+ score_3]], 2)

Slots are contiguous: a slot only contributes when every slot before it has a
score. Without score_1 the class TIS is 0. Days' supply of zero or missing
leaves the doses undefined rather than infinite; a zero maximum dose leaves
that slot's score undefined.

Rounding uses numpy.round (half-to-even on the binary value), so 0.125 -> 0.12
and 0.375 -> 0.38.
"""

import logging
import numpy as np
import pandas as pd
from pathlib import Path
from typing import Mapping, Optional
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from config.tis_config import TISConfig, TIS_CONFIG

logger = logging.getLogger(__name__)


# =============================================================================
# DOSES AND SCORES
# =============================================================================

def usable_days_supply(rxsup: pd.Series) -> pd.Series:
    """Days' supply with zero replaced by NaN."""
    rxsup = pd.to_numeric(rxsup, errors='coerce').astype(float)
    return rxsup.where(rxsup != 0)


def compute_doses(df: pd.DataFrame, config: TISConfig = TIS_CONFIG) -> pd.DataFrame:
    """
    Add prescribed daily dose columns dose1..dose3.

    Args:
        df: Records with strength, rxamt, rxsup columns
        config: TIS configuration

    Returns:
        Copy of df with dose columns
    """
    cols = config.columns
    df = df.copy()

    rxsup = usable_days_supply(df[cols.rxsup])
    n_hazard = int((rxsup.isna() & df[cols.rxsup].notna()).sum())
    if n_hazard:
        logger.warning(f"{n_hazard} record(s) with zero days' supply; doses left undefined")

    rxamt = df[cols.rxamt].astype(float)
    for strength_col, dose_col in zip(cols.strength_cols, cols.dose_cols):
        df[dose_col] = df[strength_col].astype(float) * rxamt / rxsup

    return df


def compute_scores(df: pd.DataFrame, config: TISConfig = TIS_CONFIG) -> pd.DataFrame:
    """Add score1..score3 = dose / maxdose where both are defined."""
    cols = config.columns
    df = df.copy()

    for dose_col, maxdose_col, score_col in zip(cols.dose_cols, cols.maxdose_cols, cols.score_cols):
        maxdose = df[maxdose_col].astype(float)
        # NaN propagates through the division when either side is missing
        df[score_col] = df[dose_col] / maxdose.where(maxdose != 0)

    return df


def combine_scores(df: pd.DataFrame, config: TISConfig = TIS_CONFIG) -> pd.Series:
    """
    Sum the contiguous defined prefix of score1..score3 and round.

    Returns:
        Series of class TIS (0 where score1 is undefined)
    """
    total = pd.Series(0.0, index=df.index)
    contiguous = pd.Series(True, index=df.index)

    for score_col in config.columns.score_cols:
        score = df[score_col]
        contiguous = contiguous & score.notna()
        total = total + score.where(contiguous, 0.0)

    return pd.Series(np.round(total.to_numpy(), config.rounding_decimals), index=df.index)


# =============================================================================
# CLASS TIS
# =============================================================================

def compute_class_tis(
    df: pd.DataFrame,
    class_name: str,
    config: TISConfig = TIS_CONFIG,
) -> pd.Series:
    """
    Compute TIS for one class, defined only where the class indicator is 1.

    Args:
        df: Flagged records with strength/dose inputs
        class_name: Recognized class name (e.g. 'CCB')
        config: TIS configuration

    Returns:
        Float Series, NaN for records outside the class
    """
    scored = df
    if not set(config.columns.score_cols).issubset(df.columns):
        scored = compute_scores(compute_doses(df, config), config)

    tis = combine_scores(scored, config)
    in_class = df[config.indicator_column(class_name)] == 1
    return tis.where(in_class)


def score_record(
    record: Mapping,
    indicator: int,
    config: TISConfig = TIS_CONFIG,
) -> Optional[float]:
    """
    Scalar form of the class TIS contract for a single record.

    Args:
        record: Mapping with strength, rxamt, rxsup, maxdose keys
        indicator: Class indicator value for the class being scored
        config: TIS configuration

    Returns:
        Rounded class TIS, or None when indicator != 1
    """
    if indicator != 1:
        return None

    cols = config.columns
    rxamt = _value(record.get(cols.rxamt))
    rxsup = _value(record.get(cols.rxsup))
    if rxsup == 0:
        rxsup = None

    total = 0.0
    for strength_col, maxdose_col in zip(cols.strength_cols, cols.maxdose_cols):
        strength = _value(record.get(strength_col))
        maxdose = _value(record.get(maxdose_col))
        if None in (strength, maxdose, rxamt, rxsup) or maxdose == 0:
            break
        total += strength * rxamt / rxsup / maxdose

    return float(np.round(total, config.rounding_decimals))


def _value(x) -> Optional[float]:
    if x is None or pd.isna(x):
        return None
    return float(x)
