"""
Validation Framework

Issue and result types plus the abstract validator used by the FIN validators.
A validator reports what it finds in a ValidationResult; invalid data is never
an exception.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class ValidationSeverity(Enum):
    """How much an issue matters."""

    WARNING = "warning"  # reported, result stays valid unless strict
    ERROR = "error"  # result is invalid
    CRITICAL = "critical"  # message structure unusable


@dataclass
class ValidationIssue:
    """One finding: a code, a readable message and where it was found."""

    code: str
    message: str
    field_name: str = ""
    severity: ValidationSeverity = ValidationSeverity.ERROR
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_warning(self) -> bool:
        return self.severity is ValidationSeverity.WARNING

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "code": self.code,
            "message": self.message,
            "field": self.field_name,
            "severity": self.severity.name,
        }
        if self.details:
            data["details"] = dict(self.details)
        return data


@dataclass
class ValidationResult:
    """Outcome of one validation run."""

    validator_name: str = ""
    validator_version: str = "1.0"
    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)
    is_valid: bool = True
    validated_at: datetime = field(default_factory=datetime.now)

    def add_error(
        self,
        code: str,
        message: str,
        field: str = "",
        severity: ValidationSeverity = ValidationSeverity.ERROR,
        **details: Any,
    ) -> None:
        """Record an error; the result becomes invalid."""
        if severity is ValidationSeverity.WARNING:
            raise ValueError("Use add_warning for warnings")
        self.errors.append(ValidationIssue(code, message, field, severity, details))
        self.is_valid = False

    def add_warning(self, code: str, message: str, field: str = "", **details: Any) -> None:
        """Record a warning; validity is left to the validator."""
        self.warnings.append(
            ValidationIssue(code, message, field, ValidationSeverity.WARNING, details)
        )

    def merge(self, other: "ValidationResult") -> None:
        self.errors += other.errors
        self.warnings += other.warnings
        self.is_valid = self.is_valid and other.is_valid

    def error_codes(self) -> List[str]:
        return [issue.code for issue in self.errors]

    def warning_codes(self) -> List[str]:
        return [issue.code for issue in self.warnings]

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    @property
    def has_critical_errors(self) -> bool:
        return any(issue.severity is ValidationSeverity.CRITICAL for issue in self.errors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "validator_name": self.validator_name,
            "validator_version": self.validator_version,
            "is_valid": self.is_valid,
            "errors": [issue.to_dict() for issue in self.errors],
            "warnings": [issue.to_dict() for issue in self.warnings],
            "validated_at": self.validated_at.isoformat(),
        }


class BaseValidator(ABC):
    """Common base for message validators.

    Subclasses provide ``name``, ``version`` and ``validate``. With ``strict``
    set, any warning also makes the result invalid.
    """

    def __init__(self, strict: bool = True):
        self.strict = strict

    @property
    @abstractmethod
    def name(self) -> str:
        """Validator name recorded on each result."""

    @property
    @abstractmethod
    def version(self) -> str:
        """Validator version recorded on each result."""

    @abstractmethod
    def validate(self, data: Any) -> ValidationResult:
        """Check ``data`` and return every issue found."""

    def _create_result(self) -> ValidationResult:
        return ValidationResult(validator_name=self.name, validator_version=self.version)

    def _finish(self, result: ValidationResult) -> ValidationResult:
        if self.strict and result.warnings:
            result.is_valid = False
        return result


def _upper_letters(text: str) -> bool:
    return len(text) > 0 and all("A" <= ch <= "Z" for ch in text)


def _upper_alnum(text: str) -> bool:
    return len(text) > 0 and all("A" <= ch <= "Z" or "0" <= ch <= "9" for ch in text)


def validate_bic(bic: Optional[str]) -> Optional[str]:
    """
    Check a BIC of 8 or 11 characters.

    Layout: institution (4 letters), country (2 letters), location
    (2 alphanumerics), optional branch (3 alphanumerics).

    Returns:
        Error message, or None when the BIC is well formed
    """
    if not bic:
        return "BIC is required"
    if len(bic) not in (8, 11):
        return f"BIC must have 8 or 11 characters, got {len(bic)}"
    if not _upper_letters(bic[:4]):
        return "BIC institution code must be 4 uppercase letters"
    if not _upper_letters(bic[4:6]):
        return "BIC country code must be 2 uppercase letters"
    if not _upper_alnum(bic[6:8]):
        return "BIC location code must be 2 uppercase alphanumerics"
    if len(bic) == 11 and not _upper_alnum(bic[8:]):
        return "BIC branch code must be 3 uppercase alphanumerics"
    return None


def validate_logical_terminal(address: Optional[str]) -> Optional[str]:
    """
    Check a 12-character logical terminal address.

    BIC8, one terminal code character, then a 3-character branch code.
    Returns an error message, or None when the address is well formed.
    """
    if not address:
        return "Logical terminal address is required"
    if len(address) != 12:
        return f"Logical terminal address must have 12 characters, got {len(address)}"

    error = validate_bic(address[:8])
    if error:
        return error
    if not _upper_alnum(address[8]):
        return "Logical terminal code must be an uppercase alphanumeric"
    if not _upper_alnum(address[9:]):
        return "Logical terminal branch code must be 3 uppercase alphanumerics"
    return None
