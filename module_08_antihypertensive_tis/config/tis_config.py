"""
Module 8: Antihypertensive Therapeutic Intensity Configuration
==============================================================

Central configuration for the TIS scoring pipeline.
"""

from pathlib import Path
from dataclasses import dataclass, field
from typing import Dict, List, Optional
import yaml


# =============================================================================
# PATH CONFIGURATION
# =============================================================================

# Base paths
MODULE_ROOT = Path(__file__).resolve().parent.parent
PROJECT_ROOT = MODULE_ROOT.parent
DATA_DIR = PROJECT_ROOT / "Data"

# Input data
DISPENSING_FILE = DATA_DIR / "antihypertensive_dispensing.csv"

# Output directories
BRONZE_DIR = MODULE_ROOT / "data" / "bronze"
SILVER_DIR = MODULE_ROOT / "data" / "silver"
GOLD_DIR = MODULE_ROOT / "data" / "gold"

# Config files
CONFIG_DIR = MODULE_ROOT / "config"
CLASSES_YAML = CONFIG_DIR / "antihypertensive_classes.yaml"


# =============================================================================
# COLUMN NAMING CONVENTIONS
# =============================================================================

CLASS_PREFIX = "class_"        # class indicator columns, e.g. class_ccb
TIS_PREFIX = "TIS_"            # per-class TIS columns, e.g. TIS_ccb
PERIOD_TIS_PREFIX = "tis_"     # per-period totals, e.g. tis_New
DELTA_COLUMN = "delta_tis"

# Long-format column names
LONG_CLASS_COLUMN = "med_class"
LONG_TIS_COLUMN = "tis"

N_SLOTS = 3


# =============================================================================
# INPUT COLUMNS
# =============================================================================

@dataclass
class ColumnConfig:
    """Input column names for dispensing records."""

    patient_id: str = "patient_id"
    period: str = "period"
    med_class: str = "med_class"

    # Dispensing quantities
    rxamt: str = "rxamt"    # dispensed amount
    rxsup: str = "rxsup"    # days' supply

    # Active-ingredient slots
    strength_cols: List[str] = field(default_factory=lambda: [
        f"strength{i}" for i in range(1, N_SLOTS + 1)
    ])
    maxdose_cols: List[str] = field(default_factory=lambda: [
        f"maxdose{i}" for i in range(1, N_SLOTS + 1)
    ])

    # Intermediates written by the dose scorer
    dose_cols: List[str] = field(default_factory=lambda: [
        f"dose{i}" for i in range(1, N_SLOTS + 1)
    ])
    score_cols: List[str] = field(default_factory=lambda: [
        f"score{i}" for i in range(1, N_SLOTS + 1)
    ])

    @property
    def numeric_columns(self) -> List[str]:
        return [*self.strength_cols, self.rxamt, self.rxsup, *self.maxdose_cols]

    @property
    def required_columns(self) -> List[str]:
        return [self.patient_id, self.period, self.med_class, *self.numeric_columns]


# =============================================================================
# PERIOD CONFIGURATION
# =============================================================================

@dataclass
class PeriodConfig:
    """Names of the two periods compared by the delta."""

    previous: str = "Previous"
    new: str = "New"


# =============================================================================
# TIS CONFIGURATION
# =============================================================================

@dataclass
class TISConfig:
    """Recognized classes, column names and period names for TIS scoring."""

    # Order is kept for output columns
    recognized_classes: List[str] = field(default_factory=lambda: [
        'CCB',
        'ARB',
        'Thiazide',
        'ACEI_Thiazide',
    ])

    columns: ColumnConfig = field(default_factory=ColumnConfig)
    periods: PeriodConfig = field(default_factory=PeriodConfig)

    rounding_decimals: int = 2

    def __post_init__(self):
        if not self.recognized_classes:
            raise ValueError("recognized_classes must name at least one class")

        keys = [c.strip().lower() for c in self.recognized_classes]
        duplicates = sorted({k for k in keys if keys.count(k) > 1})
        if duplicates:
            raise ValueError(f"Duplicate recognized classes: {duplicates}")

        if self.periods.previous == self.periods.new:
            raise ValueError(
                f"Previous and new period must differ, got '{self.periods.new}' for both"
            )

    @staticmethod
    def class_key(class_name: str) -> str:
        """Normalized class name used in column suffixes."""
        return class_name.strip().lower()

    def indicator_column(self, class_name: str) -> str:
        return f"{CLASS_PREFIX}{self.class_key(class_name)}"

    def tis_column(self, class_name: str) -> str:
        return f"{TIS_PREFIX}{self.class_key(class_name)}"

    def period_column(self, period: str) -> str:
        return f"{PERIOD_TIS_PREFIX}{period}"

    @property
    def indicator_columns(self) -> List[str]:
        return [self.indicator_column(c) for c in self.recognized_classes]

    @property
    def tis_columns(self) -> List[str]:
        return [self.tis_column(c) for c in self.recognized_classes]


TIS_CONFIG = TISConfig()


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def load_class_definitions(path: Optional[Path] = None) -> Dict:
    """Load antihypertensive class definitions from YAML."""
    path = Path(path) if path else CLASSES_YAML
    with open(path, 'r') as f:
        return yaml.safe_load(f) or {}


def load_tis_config(path: Optional[Path] = None) -> TISConfig:
    """
    Build a TISConfig from the class definitions YAML.

    Args:
        path: YAML file (default: config/antihypertensive_classes.yaml)

    Returns:
        TISConfig with the YAML's classes and periods
    """
    definitions = load_class_definitions(path)

    kwargs = {}
    classes = definitions.get('recognized_classes')
    if classes is not None:
        kwargs['recognized_classes'] = [str(c) for c in classes]

    periods = definitions.get('periods') or {}
    if periods:
        kwargs['periods'] = PeriodConfig(
            previous=str(periods.get('previous', PeriodConfig.previous)),
            new=str(periods.get('new', PeriodConfig.new)),
        )

    columns = definitions.get('columns') or {}
    if columns:
        kwargs['columns'] = ColumnConfig(**columns)

    if 'rounding_decimals' in definitions:
        kwargs['rounding_decimals'] = int(definitions['rounding_decimals'])

    return TISConfig(**kwargs)


def ensure_directories():
    """Create all required output directories."""
    for dir_path in [BRONZE_DIR, SILVER_DIR, GOLD_DIR]:
        dir_path.mkdir(parents=True, exist_ok=True)


# =============================================================================
# MAIN
# =============================================================================

if __name__ == "__main__":
    # Print configuration summary
    print("=" * 60)
    print("Module 8: Antihypertensive TIS Configuration")
    print("=" * 60)
    print(f"\nModule Root: {MODULE_ROOT}")
    print(f"Input Dispensing File: {DISPENSING_FILE}")
    config = load_tis_config()
    print(f"\nRecognized Classes ({len(config.recognized_classes)}):")
    for name in config.recognized_classes:
        print(f"  {name}: {config.indicator_column(name)} -> {config.tis_column(name)}")
    print(f"\nPeriods: {config.periods.previous} -> {config.periods.new}")
    print("=" * 60)
