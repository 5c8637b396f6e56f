"""
Module 8 Extractors
===================

Load and coerce antihypertensive dispensing records.
"""

from .dispensing_loader import (
    InvalidDispensingError,
    DispensingLoader,
    check_required_columns,
    coerce_numeric,
)

__all__ = [
    'InvalidDispensingError',
    'DispensingLoader',
    'check_required_columns',
    'coerce_numeric',
]
