# pipeline.py
"""
Module 08: Antihypertensive Therapeutic Intensity Pipeline
==========================================================

Dispensing records -> class indicators -> per-class TIS -> per-period
totals -> delta between the previous and new period.
"""

import pandas as pd
from pathlib import Path
from typing import Optional, Union
import logging
import sys

sys.path.insert(0, str(Path(__file__).parent))

from config.tis_config import (
    DISPENSING_FILE,
    GOLD_DIR,
    DELTA_COLUMN,
    TISConfig,
    TIS_CONFIG,
    PeriodConfig,
    load_tis_config,
    ensure_directories,
)
from extractors.dispensing_loader import DispensingLoader, check_required_columns, coerce_numeric
from processing.class_flagger import flag_classes
from processing.class_aggregator import aggregate_classes
from processing.reshaper import reshape_tis
from processing.delta_calculator import compute_delta
from validation.tis_validators import run_all_validations

logger = logging.getLogger(__name__)


def compute_tis(df: pd.DataFrame, config: TISConfig = TIS_CONFIG) -> pd.DataFrame:
    """
    Compute per-patient TIS by period and the delta between periods.

    Args:
        df: Dispensing records with numeric columns already coerced
        config: TIS configuration

    Returns:
        One row per patient: patient id, tis_<period> columns, delta_tis
    """
    return TISPipeline(config=config).process_data(df)


class TISPipeline:
    """Main pipeline for antihypertensive TIS scoring."""

    def __init__(
        self,
        input_path: Optional[Union[str, Path]] = None,
        config: TISConfig = TIS_CONFIG,
        sep: str = ',',
    ):
        """
        Initialize pipeline.

        Args:
            input_path: Dispensing CSV/TXT or parquet (default: DISPENSING_FILE)
            config: TIS configuration
            sep: Field delimiter for text input
        """
        self.input_path = Path(input_path) if input_path else DISPENSING_FILE
        self.config = config
        self.sep = sep
        self.scored: Optional[pd.DataFrame] = None

    def score_records(self, df: pd.DataFrame) -> pd.DataFrame:
        """Flag classes and compute per-class TIS for each record."""
        check_required_columns(df, self.config)
        df = coerce_numeric(df, self.config)
        flagged = flag_classes(df, self.config)
        return aggregate_classes(flagged, self.config)

    def process_data(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Run the scoring core on pre-loaded records.

        Args:
            df: Dispensing records

        Returns:
            Per-patient TIS table
        """
        self.scored = self.score_records(df)
        wide = reshape_tis(self.scored, self.config)
        result = compute_delta(wide, self.config)

        # Configured periods first, then any others, then the delta
        cfg = self.config
        patient_col = cfg.columns.patient_id
        period_cols = [
            cfg.period_column(cfg.periods.previous),
            cfg.period_column(cfg.periods.new),
        ]
        other_cols = [c for c in result.columns if c not in [patient_col, DELTA_COLUMN] + period_cols]
        return result[[patient_col] + period_cols + other_cols + [DELTA_COLUMN]]

    def run(self, output_dir: Optional[Union[str, Path]] = None, validate: bool = True) -> pd.DataFrame:
        """
        Run full pipeline: load, score, reshape, save.

        Args:
            output_dir: Output directory (default: module gold dir)
            validate: Print validation reports after scoring

        Returns:
            Per-patient TIS table
        """
        print("=" * 60)
        print("Module 08: Antihypertensive Therapeutic Intensity")
        print("=" * 60)

        if output_dir is None:
            ensure_directories()
        output_dir = Path(output_dir) if output_dir else GOLD_DIR

        print(f"\n1. Loading dispensing records: {self.input_path}")
        df = DispensingLoader(self.input_path, self.config, sep=self.sep).load()
        print(f"   Records: {len(df):,}")
        print(f"   Patients: {df[self.config.columns.patient_id].nunique():,}")

        print(f"\n2. Scoring {len(self.config.recognized_classes)} classes: "
              f"{', '.join(self.config.recognized_classes)}")
        result = self.process_data(df)

        if validate:
            print("\n3. Validating...")
            passed = run_all_validations(self.scored, result, self.config)
            if not passed:
                logger.warning("TIS validation reported failures")

        print(f"\n4. Saving to {output_dir}...")
        output_dir.mkdir(parents=True, exist_ok=True)
        output_path = output_dir / "tis_by_patient.parquet"
        result.to_parquet(output_path, index=False)

        # Summary
        cfg = self.config
        previous_col = cfg.period_column(cfg.periods.previous)
        new_col = cfg.period_column(cfg.periods.new)
        print("\n" + "=" * 60)
        print("TIS Summary")
        print("=" * 60)
        print(f"   Patients: {len(result):,}")
        print(f"   Mean {previous_col}: {result[previous_col].mean():.2f}")
        print(f"   Mean {new_col}: {result[new_col].mean():.2f}")
        print(f"   Patients with delta: {result[DELTA_COLUMN].notna().sum():,}")
        if result[DELTA_COLUMN].notna().any():
            print(f"   Mean {DELTA_COLUMN}: {result[DELTA_COLUMN].mean():.2f}")
            print(f"   Intensified: {(result[DELTA_COLUMN] > 0).sum():,}")
            print(f"   De-intensified: {(result[DELTA_COLUMN] < 0).sum():,}")

        print(f"\n   Output: {output_path}")
        print("=" * 60)

        return result


# =============================================================================
# CLI
# =============================================================================

if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Compute antihypertensive therapeutic intensity scores")
    parser.add_argument('--input', type=str, default=None, help='Dispensing CSV/TXT or parquet')
    parser.add_argument('--output-dir', type=str, default=None, help='Output directory')
    parser.add_argument('--config', type=str, default=None, help='Class definitions YAML')
    parser.add_argument('--sep', type=str, default=',', help='Delimiter for text input')
    parser.add_argument('--previous', type=str, default=None, help='Previous period name')
    parser.add_argument('--new', type=str, default=None, help='New period name')
    parser.add_argument('--no-validate', action='store_true', help='Skip validation reports')
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    config = load_tis_config(args.config)
    if args.previous or args.new:
        config = TISConfig(
            recognized_classes=config.recognized_classes,
            columns=config.columns,
            periods=PeriodConfig(
                previous=args.previous or config.periods.previous,
                new=args.new or config.periods.new,
            ),
            rounding_decimals=config.rounding_decimals,
        )

    pipeline = TISPipeline(input_path=args.input, config=config, sep=args.sep)
    pipeline.run(output_dir=args.output_dir, validate=not args.no_validate)
