"""
Field rules for the Bug resource.

Every validator is a pure function returning a ValidationResult; nothing here
raises. validate_bug_data runs all of them and collects every failure so a
client sees all problems in one response.
"""

from typing import Any, Dict, List, NamedTuple, Optional, Type
from enum import Enum

from models import BugStatus, BugPriority, BugSeverity

__all__ = [
    "ValidationResult",
    "BugValidationResult",
    "BUG_FIELDS",
    "validate_title",
    "validate_description",
    "validate_status",
    "validate_priority",
    "validate_severity",
    "validate_created_by",
    "validate_bug_data",
    "validate_status_patch",
    "sanitize_bug_data",
]

TITLE_MIN, TITLE_MAX = 3, 100
DESCRIPTION_MIN, DESCRIPTION_MAX = 10, 1000
CREATED_BY_MIN, CREATED_BY_MAX = 2, 50

# Fields accepted in a bug body, in wire (camelCase) form
BUG_FIELDS = ("title", "description", "status", "priority", "severity", "createdBy")
ENUM_FIELDS = ("status", "priority", "severity")


class ValidationResult(NamedTuple):
    is_valid: bool
    error: Optional[str] = None


class BugValidationResult(NamedTuple):
    is_valid: bool
    errors: List[Dict[str, str]]


_VALID = ValidationResult(True, None)


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _validate_text(value: Any, label: str, min_len: int, max_len: int) -> ValidationResult:
    if _is_missing(value):
        return ValidationResult(False, f"{label} is required")
    if not isinstance(value, str):
        return ValidationResult(False, f"{label} must be a string")
    length = len(value.strip())
    if length < min_len:
        return ValidationResult(False, f"{label} must be at least {min_len} characters")
    if length > max_len:
        return ValidationResult(False, f"{label} must not exceed {max_len} characters")
    return _VALID


def _validate_choice(value: Any, label: str, enum_cls: Type[Enum], required: bool) -> ValidationResult:
    if _is_missing(value):
        if required:
            return ValidationResult(False, f"{label} is required")
        return _VALID
    allowed = [member.value for member in enum_cls]
    if value not in allowed:
        return ValidationResult(False, f"{label} must be one of: {', '.join(allowed)}")
    return _VALID


def validate_title(title: Any) -> ValidationResult:
    return _validate_text(title, "Title", TITLE_MIN, TITLE_MAX)


def validate_description(description: Any) -> ValidationResult:
    return _validate_text(description, "Description", DESCRIPTION_MIN, DESCRIPTION_MAX)


def validate_status(status: Any, required: bool = False) -> ValidationResult:
    """Status is optional on create (the store defaults it to open)."""
    return _validate_choice(status, "Status", BugStatus, required)


def validate_priority(priority: Any) -> ValidationResult:
    return _validate_choice(priority, "Priority", BugPriority, required=True)


def validate_severity(severity: Any) -> ValidationResult:
    return _validate_choice(severity, "Severity", BugSeverity, required=True)


def validate_created_by(created_by: Any) -> ValidationResult:
    return _validate_text(created_by, "CreatedBy", CREATED_BY_MIN, CREATED_BY_MAX)


def validate_bug_data(data: Dict[str, Any], require_status: bool = False) -> BugValidationResult:
    """
    Validate a complete bug body.

    Args:
        data: Bug fields keyed by wire name (createdBy, not created_by)
        require_status: True for full replace, where status must be resupplied

    Returns:
        BugValidationResult with one {field, message} entry per failing field
    """
    checks = (
        ("title", validate_title(data.get("title"))),
        ("description", validate_description(data.get("description"))),
        ("status", validate_status(data.get("status"), required=require_status)),
        ("priority", validate_priority(data.get("priority"))),
        ("severity", validate_severity(data.get("severity"))),
        ("createdBy", validate_created_by(data.get("createdBy"))),
    )
    errors = [
        {"field": field, "message": result.error}
        for field, result in checks
        if not result.is_valid
    ]
    return BugValidationResult(is_valid=not errors, errors=errors)


def validate_status_patch(data: Dict[str, Any]) -> BugValidationResult:
    """Partial patch: only status is required, nothing else is inspected."""
    result = validate_status(data.get("status"), required=True)
    if result.is_valid:
        return BugValidationResult(True, [])
    return BugValidationResult(False, [{"field": "status", "message": result.error}])


def sanitize_bug_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """Trim string fields and lower-case enum fields. Absent keys stay absent."""
    sanitized: Dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, str):
            value = value.strip()
            if key in ENUM_FIELDS:
                value = value.lower()
        sanitized[key] = value
    return sanitized
