"""
TIS Reshaper
============

Per-record class TIS columns -> one row per patient with one TIS column per
period.

Steps:
    A. select_tis_columns   keep patient, period, indicators and TIS_<class>
    B. deduplicate_rows     distinct rows, sorted by patient and period
    C. pivot_long           one row per patient/period/class
    D. sum_by_period        total TIS per patient/period (nulls count as 0)
    E. pivot_wide           one tis_<period> column per period
    F. include_all_patients patients with no usable period kept as all-null rows
"""

import logging
import pandas as pd
from pathlib import Path
from typing import List
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from config.tis_config import (
    TISConfig,
    TIS_CONFIG,
    TIS_PREFIX,
    LONG_CLASS_COLUMN,
    LONG_TIS_COLUMN,
)

logger = logging.getLogger(__name__)


def _key_columns(config: TISConfig) -> List[str]:
    return [config.columns.patient_id, config.columns.period]


# =============================================================================
# STEP A/B: SELECT AND DEDUPLICATE
# =============================================================================

def select_tis_columns(df: pd.DataFrame, config: TISConfig = TIS_CONFIG) -> pd.DataFrame:
    """Keep key, indicator and class TIS columns; drop dose/score intermediates."""
    columns = _key_columns(config) + config.indicator_columns + config.tis_columns
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise KeyError(f"Scored records are missing columns: {missing}")
    return df[columns].copy()


def deduplicate_rows(df: pd.DataFrame, config: TISConfig = TIS_CONFIG) -> pd.DataFrame:
    """Distinct rows over all retained columns, sorted by patient then period."""
    n_before = len(df)
    df = df.drop_duplicates()
    if len(df) < n_before:
        logger.info(f"Dropped {n_before - len(df):,} duplicate patient-period rows")
    return df.sort_values(_key_columns(config), kind='stable').reset_index(drop=True)


# =============================================================================
# STEP C: LONG PIVOT
# =============================================================================

def pivot_long(df: pd.DataFrame, config: TISConfig = TIS_CONFIG) -> pd.DataFrame:
    """
    Melt class TIS columns into one row per patient/period/class.

    Args:
        df: Rows with key and TIS_<class> columns

    Returns:
        DataFrame with patient, period, med_class (prefix stripped), tis
    """
    keys = _key_columns(config)
    long = df.melt(
        id_vars=keys,
        value_vars=config.tis_columns,
        var_name=LONG_CLASS_COLUMN,
        value_name=LONG_TIS_COLUMN,
    )
    long[LONG_CLASS_COLUMN] = long[LONG_CLASS_COLUMN].str.slice(len(TIS_PREFIX))
    return long


def pivot_classes_wide(long: pd.DataFrame, config: TISConfig = TIS_CONFIG) -> pd.DataFrame:
    """
    Inverse of pivot_long over distinct patient/period/class triples.

    Returns:
        One row per patient/period with TIS_<class> columns
    """
    keys = _key_columns(config)
    wide = (
        long.groupby(keys + [LONG_CLASS_COLUMN], observed=True, sort=True)[LONG_TIS_COLUMN]
        .first()
        .unstack(LONG_CLASS_COLUMN)
    )
    wide.columns = [f"{TIS_PREFIX}{c}" for c in wide.columns]
    ordered = [c for c in config.tis_columns if c in wide.columns]
    wide = wide[ordered].reset_index()
    wide.columns.name = None
    return wide


# =============================================================================
# STEP D/E: AGGREGATE AND WIDE PIVOT
# =============================================================================

def sum_by_period(long: pd.DataFrame, config: TISConfig = TIS_CONFIG) -> pd.DataFrame:
    """
    Total class TIS per patient/period.

    Missing class values count as zero, so a patient/period with no scored
    class still gets a total of 0.
    """
    keys = _key_columns(config)
    totals = (
        long.groupby(keys, observed=True, sort=True)[LONG_TIS_COLUMN]
        .sum(min_count=0)
        .round(config.rounding_decimals)
        .reset_index()
    )
    return totals


def pivot_wide(totals: pd.DataFrame, config: TISConfig = TIS_CONFIG) -> pd.DataFrame:
    """
    One row per patient, one tis_<period> column per period.

    Patients without a given period get NaN in that column.
    """
    cols = config.columns
    if totals.empty:
        return pd.DataFrame({cols.patient_id: pd.Series(dtype=object)})

    wide = totals.pivot(index=cols.patient_id, columns=cols.period, values=LONG_TIS_COLUMN)
    wide.columns = [config.period_column(str(p)) for p in wide.columns]
    wide = wide.reset_index()
    wide.columns.name = None
    return wide


def include_all_patients(
    wide: pd.DataFrame,
    selected: pd.DataFrame,
    config: TISConfig = TIS_CONFIG,
) -> pd.DataFrame:
    """
    Add an all-null row for patients whose records all lack a period.

    Rows without a patient id cannot be placed and are dropped with a warning.
    """
    cols = config.columns

    n_no_patient = int(selected[cols.patient_id].isna().sum())
    if n_no_patient:
        logger.warning(f"{n_no_patient:,} record(s) without a patient id dropped from TIS")

    n_no_period = int((selected[cols.patient_id].notna() & selected[cols.period].isna()).sum())
    if n_no_period:
        logger.warning(f"{n_no_period:,} record(s) without a period; not counted in any period total")

    patients = pd.Index(selected[cols.patient_id].dropna().unique(), name=cols.patient_id)
    return wide.set_index(cols.patient_id).reindex(patients).reset_index()


def reshape_tis(df: pd.DataFrame, config: TISConfig = TIS_CONFIG) -> pd.DataFrame:
    """
    Run steps A-E on scored records.

    Args:
        df: Output of aggregate_classes
        config: TIS configuration

    Returns:
        Wide per-patient DataFrame of period totals, one row for every
        patient in the input
    """
    selected = deduplicate_rows(select_tis_columns(df, config), config)
    long = pivot_long(selected, config)
    totals = sum_by_period(long, config)
    wide = include_all_patients(pivot_wide(totals, config), selected, config)

    logger.info(
        f"Reshaped {len(selected):,} patient-period rows into {len(wide):,} patients"
    )
    return wide
