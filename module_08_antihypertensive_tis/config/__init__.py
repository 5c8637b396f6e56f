"""
Module 8 Configuration Package
"""

from .tis_config import (
    # Paths
    PROJECT_ROOT,
    MODULE_ROOT,
    DATA_DIR,
    DISPENSING_FILE,
    BRONZE_DIR,
    SILVER_DIR,
    GOLD_DIR,
    CLASSES_YAML,

    # Naming
    CLASS_PREFIX,
    TIS_PREFIX,
    PERIOD_TIS_PREFIX,
    DELTA_COLUMN,
    LONG_CLASS_COLUMN,
    LONG_TIS_COLUMN,

    # Configs
    ColumnConfig,
    PeriodConfig,
    TISConfig,
    TIS_CONFIG,

    # Helpers
    load_class_definitions,
    load_tis_config,
    ensure_directories,
)

__all__ = [
    'PROJECT_ROOT',
    'MODULE_ROOT',
    'DATA_DIR',
    'DISPENSING_FILE',
    'BRONZE_DIR',
    'SILVER_DIR',
    'GOLD_DIR',
    'CLASSES_YAML',
    'CLASS_PREFIX',
    'TIS_PREFIX',
    'PERIOD_TIS_PREFIX',
    'DELTA_COLUMN',
    'LONG_CLASS_COLUMN',
    'LONG_TIS_COLUMN',
    'ColumnConfig',
    'PeriodConfig',
    'TISConfig',
    'TIS_CONFIG',
    'load_class_definitions',
    'load_tis_config',
    'ensure_directories',
]
