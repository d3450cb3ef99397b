"""
Workforce Domain Layer
======================

Contains:
- Value Objects: Coverage
- Domain Services: StaffingCalculator (1:8 rule, coverage status)
- Validation: staff field checks and bulk-row checks

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from seva.workforce.domain.validation import (
    RowError,
    email_error,
    normalize_phone,
    validate_bulk_row,
    validate_staff_fields,
)
from seva.workforce.domain.value_objects import (
    Coverage,
    StaffingCalculator,
    team_capacity_percent,
)

__all__ = [
    "Coverage",
    "StaffingCalculator",
    "team_capacity_percent",
    "RowError",
    "email_error",
    "normalize_phone",
    "validate_bulk_row",
    "validate_staff_fields",
]
