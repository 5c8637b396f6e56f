"""
Dispensing Record Loader
========================

Loads antihypertensive dispensing records from CSV/TXT or parquet and coerces
the numeric columns, rejecting values that are present but not numeric.
"""

import logging
import numpy as np
import pandas as pd
from pathlib import Path
from typing import Optional, Union
from io import StringIO
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from config.tis_config import TISConfig, TIS_CONFIG

logger = logging.getLogger(__name__)


class InvalidDispensingError(ValueError):
    """A dispensing record has a malformed value or the table lacks a column."""

    def __init__(
        self,
        message: str,
        column: Optional[str] = None,
        row_index=None,
        patient_id=None,
        value=None,
    ):
        super().__init__(message)
        self.column = column
        self.row_index = row_index
        self.patient_id = patient_id
        self.value = value


def check_required_columns(df: pd.DataFrame, config: TISConfig = TIS_CONFIG) -> None:
    """Raise InvalidDispensingError if any configured input column is absent."""
    missing = [c for c in config.columns.required_columns if c not in df.columns]
    if missing:
        raise InvalidDispensingError(f"Dispensing data is missing columns: {missing}")


def coerce_numeric(df: pd.DataFrame, config: TISConfig = TIS_CONFIG) -> pd.DataFrame:
    """
    Convert strength, quantity and max-dose columns to float.

    Blank strings become missing. Any other non-numeric value raises
    InvalidDispensingError naming the column, row and patient.

    Args:
        df: Raw dispensing records
        config: TIS configuration

    Returns:
        Copy of df with float numeric columns
    """
    df = df.copy()
    patient_col = config.columns.patient_id

    for col in config.columns.numeric_columns:
        raw = df[col]
        if not pd.api.types.is_numeric_dtype(raw):
            blank = raw.map(lambda v: isinstance(v, str) and not v.strip()).astype(bool)
            raw = raw.mask(blank)
        coerced = pd.to_numeric(raw, errors='coerce')

        bad = raw.notna() & coerced.isna()
        if bad.any():
            row_index = bad[bad].index[0]
            patient_id = df.at[row_index, patient_col] if patient_col in df.columns else None
            value = raw.at[row_index]
            raise InvalidDispensingError(
                f"Non-numeric value {value!r} in column '{col}' "
                f"(row {row_index}, patient {patient_id})",
                column=col,
                row_index=row_index,
                patient_id=patient_id,
                value=value,
            )

        df[col] = coerced.to_numpy(dtype=float, na_value=np.nan)

    return df


class DispensingLoader:
    """Load dispensing records for TIS scoring."""

    COLUMN_DTYPES = {
        'patient_id': str,
        'period': str,
        'med_class': str,
    }

    def __init__(
        self,
        path: Union[str, Path],
        config: TISConfig = TIS_CONFIG,
        sep: str = ',',
    ):
        """
        Initialize loader.

        Args:
            path: CSV/TXT or parquet file
            config: TIS configuration
            sep: Field delimiter for text files
        """
        self.path = Path(path)
        self.config = config
        self.sep = sep

    def _dtypes(self):
        cols = self.config.columns
        return {
            cols.patient_id: self.COLUMN_DTYPES['patient_id'],
            cols.period: self.COLUMN_DTYPES['period'],
            cols.med_class: self.COLUMN_DTYPES['med_class'],
        }

    def parse_text(self, data: Union[str, StringIO, Path]) -> pd.DataFrame:
        """
        Parse delimited text data.

        Args:
            data: File path or StringIO

        Returns:
            Raw DataFrame (numeric columns not yet coerced)
        """
        return pd.read_csv(
            data,
            sep=self.sep,
            dtype=self._dtypes(),
            keep_default_na=True,
            low_memory=False,
        )

    def read_raw(self) -> pd.DataFrame:
        """Read the file without validation."""
        if self.path.suffix.lower() == '.parquet':
            return pd.read_parquet(self.path)
        return self.parse_text(self.path)

    def load(self) -> pd.DataFrame:
        """
        Read, check columns and coerce numeric fields.

        Returns:
            Validated dispensing records
        """
        logger.info(f"Loading dispensing records from {self.path}")
        df = self.read_raw()
        check_required_columns(df, self.config)
        df = coerce_numeric(df, self.config)
        logger.info(
            f"Loaded {len(df):,} records for {df[self.config.columns.patient_id].nunique():,} patients"
        )
        return df
