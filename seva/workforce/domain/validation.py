"""
Staff Field Validation
======================

Checks applied before any staff write, both for the add/edit form and for
each row of a bulk upload.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional

from seva.config import VALID_ROLES, VALID_SHIFTS, settings

E164_PATTERN = re.compile(r"^\+[1-9]\d{7,14}$")
LOCAL_MOBILE_PATTERN = re.compile(r"^[6-9]\d{9}$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# Common domain typos -> suggestion shown to the operator
EMAIL_TYPO_HINTS = {
    "gmail.con": "Did you mean gmail.com?",
}


@dataclass(frozen=True)
class RowError:
    """One failed check in a bulk upload; `row` is 1-based, header excluded."""
    row: int
    field: str
    error: str


def normalize_phone(raw: Optional[str], country_code: Optional[str] = None) -> str:
    """
    Strip separators and prefix local 10-digit mobiles with the country code.

    "98765 43210" -> "+919876543210"; numbers already starting with "+" are
    only stripped of spaces and dashes.
    """
    if not raw:
        return ""
    phone = re.sub(r"[\s\-()]", "", raw.strip())
    if LOCAL_MOBILE_PATTERN.match(phone):
        return f"{country_code or settings.default_country_code}{phone}"
    return phone


def phone_error(phone: str) -> Optional[str]:
    if not phone:
        return "Mobile number is required"
    if not E164_PATTERN.match(phone):
        return "Mobile must be in E.164 format (+91XXXXXXXXXX)"
    return None


def email_error(email: Optional[str]) -> Optional[str]:
    if not email or not email.strip():
        return None
    email = email.strip()
    for typo, hint in EMAIL_TYPO_HINTS.items():
        if typo in email.lower():
            return hint
    if not EMAIL_PATTERN.match(email):
        return "Please enter a valid email address"
    return None


def name_error(name: Optional[str]) -> Optional[str]:
    if not name or not name.strip():
        return "Name is required"
    if len(name.strip()) < 2:
        return "Name must be at least 2 characters"
    return None


def validate_staff_fields(
    name: Optional[str] = None,
    phone: Optional[str] = None,
    email: Optional[str] = None,
    role: Optional[str] = None,
    shift: Optional[str] = None,
    partial: bool = False,
) -> Dict[str, str]:
    """
    Validate staff fields and return {field: message} for every failure.

    With `partial=True` (updates) fields passed as None are skipped.
    `phone` must already be normalized.
    """
    errors: Dict[str, str] = {}

    if not partial or name is not None:
        if message := name_error(name):
            errors["name"] = message

    if not partial or phone is not None:
        if message := phone_error(phone or ""):
            errors["phone"] = message

    if message := email_error(email):
        errors["email"] = message

    if not partial or role is not None:
        if not role:
            errors["role"] = "Role is required"
        elif role not in VALID_ROLES:
            errors["role"] = f"Role must be one of {', '.join(VALID_ROLES)}"

    if shift is not None and shift not in VALID_SHIFTS:
        errors["shift"] = f"Shift must be one of {', '.join(VALID_SHIFTS)}"

    return errors


def validate_bulk_row(row: Dict[str, str], row_number: int) -> List[RowError]:
    """
    Validate one mapped spreadsheet row (keys: name, mobile, role, email, shift, ...).

    Role and shift are compared case-insensitively.
    """
    errors = validate_staff_fields(
        name=row.get("name"),
        phone=normalize_phone(row.get("mobile")),
        email=row.get("email"),
        role=(row.get("role") or "").strip().lower(),
        shift=(row.get("shift") or "").strip().lower() or None,
    )
    # Bulk files call the phone column "mobile".
    field_names = {"phone": "mobile"}
    return [
        RowError(row=row_number, field=field_names.get(field, field), error=message)
        for field, message in errors.items()
    ]
