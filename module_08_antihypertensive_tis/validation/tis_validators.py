"""
TIS Validators
==============

Consistency checks on scored records and on the per-patient TIS table.

- Class TIS only present for records flagged in that class
- Class TIS finite and non-negative
- One row per patient in the output
- delta_tis equals tis_<new> - tis_<previous> where both exist
- delta_tis null where a period is missing
"""

import numpy as np
import pandas as pd
from pathlib import Path
from typing import List
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from config.tis_config import TISConfig, TIS_CONFIG, DELTA_COLUMN


class ValidationResult:
    """Container for validation results."""

    def __init__(self, name: str):
        self.name = name
        self.checks = []
        self.passed = 0
        self.failed = 0

    @property
    def ok(self) -> bool:
        return self.failed == 0

    def add_check(self, description: str, passed: bool, details: str = ""):
        self.checks.append({
            'description': description,
            'passed': bool(passed),
            'details': details,
        })
        if passed:
            self.passed += 1
        else:
            self.failed += 1

    def summary(self) -> str:
        status = "PASS" if self.failed == 0 else "FAIL"
        return f"{self.name}: {status} ({self.passed}/{self.passed + self.failed} checks)"

    def failures(self) -> List[str]:
        """Descriptions of failed checks, with details where recorded."""
        return [
            f"{c['description']}: {c['details']}" if c['details'] else c['description']
            for c in self.checks
            if not c['passed']
        ]

    def report(self) -> str:
        """Summary line, then one line per failed check."""
        lines = [self.summary()]
        lines.extend(f"  ✗ {failure}" for failure in self.failures())
        return "\n".join(lines)


def validate_class_tis(df: pd.DataFrame, config: TISConfig = TIS_CONFIG) -> ValidationResult:
    """Validate per-record class TIS columns."""
    result = ValidationResult("Class TIS")

    for class_name in config.recognized_classes:
        tis_col = config.tis_column(class_name)
        indicator_col = config.indicator_column(class_name)

        if tis_col not in df.columns or indicator_col not in df.columns:
            result.add_check(f"{tis_col} present", False, "Column missing")
            continue

        in_class = df[indicator_col] == 1
        leaked = int((df[tis_col].notna() & ~in_class).sum())
        result.add_check(
            f"{tis_col} only set for {indicator_col} == 1",
            leaked == 0,
            f"{leaked:,} records outside class" if leaked else "",
        )

        values = df.loc[in_class, tis_col]
        bad = int((~np.isfinite(values) | (values < 0)).sum())
        result.add_check(
            f"{tis_col} finite and non-negative",
            bad == 0,
            f"{bad:,} invalid values" if bad else f"{len(values):,} records",
        )

    return result


def validate_tis_output(wide: pd.DataFrame, config: TISConfig = TIS_CONFIG) -> ValidationResult:
    """Validate the per-patient TIS table."""
    result = ValidationResult("Patient TIS")
    patient_col = config.columns.patient_id
    previous_col = config.period_column(config.periods.previous)
    new_col = config.period_column(config.periods.new)

    required = [patient_col, previous_col, new_col, DELTA_COLUMN]
    missing = [c for c in required if c not in wide.columns]
    result.add_check(
        "Required columns present",
        not missing,
        f"Missing: {missing}" if missing else "",
    )
    if missing:
        return result

    n_dupes = int(wide[patient_col].duplicated().sum())
    result.add_check(
        "One row per patient",
        n_dupes == 0,
        f"{len(wide):,} patients" if n_dupes == 0 else f"{n_dupes:,} duplicated patients",
    )

    both = wide[previous_col].notna() & wide[new_col].notna()
    expected = (wide.loc[both, new_col] - wide.loc[both, previous_col]).round(config.rounding_decimals)
    mismatched = int((~np.isclose(wide.loc[both, DELTA_COLUMN], expected)).sum())
    result.add_check(
        "delta_tis matches period difference",
        mismatched == 0,
        f"{mismatched:,} mismatches" if mismatched else f"{int(both.sum()):,} patients with both periods",
    )

    leaked = int(wide.loc[~both, DELTA_COLUMN].notna().sum())
    result.add_check(
        "delta_tis null when a period is missing",
        leaked == 0,
        f"{leaked:,} patients" if leaked else f"{int((~both).sum()):,} patients missing a period",
    )

    period_cols = [previous_col, new_col]
    negative = int((wide[period_cols] < 0).sum().sum())
    result.add_check("Period totals non-negative", negative == 0)

    return result


def run_all_validations(
    scored: pd.DataFrame,
    wide: pd.DataFrame,
    config: TISConfig = TIS_CONFIG,
    verbose: bool = True,
) -> bool:
    """Run both validators and print their reports."""
    results = [
        validate_class_tis(scored, config),
        validate_tis_output(wide, config),
    ]

    if verbose:
        for r in results:
            print(r.report())

    return all(r.ok for r in results)
