"""
Module 8 Validation
===================

Consistency checks on TIS outputs.
"""

from .tis_validators import (
    ValidationResult,
    validate_class_tis,
    validate_tis_output,
    run_all_validations,
)

__all__ = [
    'ValidationResult',
    'validate_class_tis',
    'validate_tis_output',
    'run_all_validations',
]
