"""
Validation Framework

Shared result types and helpers for message validators.
"""

from fin_engine.protocols.validators.base_validator import (
    BaseValidator,
    ValidationIssue,
    ValidationResult,
    ValidationSeverity,
    validate_bic,
    validate_logical_terminal,
)

__all__ = [
    "BaseValidator",
    "ValidationIssue",
    "ValidationResult",
    "ValidationSeverity",
    "validate_bic",
    "validate_logical_terminal",
]
