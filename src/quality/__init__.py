"""
Report Quality Module
"""
from .validators import (
    ReportValidator,
    ValidationResult,
    ValidationSeverity,
    ValidationStatus,
    create_report_validator,
)

__all__ = [
    "ReportValidator",
    "ValidationResult",
    "ValidationSeverity",
    "ValidationStatus",
    "create_report_validator",
]
