import re
from typing import Any, Dict, List, Optional

from .matching import meaningful_words
from .normalize import normalize_company_name, normalize_email

REQUIRED_STR_FIELDS = ["first_name", "last_name", "email", "organization_name"]
OPTIONAL_STR_FIELDS = ["company_id", "company_name"]

MAX_NAME_LENGTH = 50
MAX_EMAIL_LENGTH = 254
MAX_ORGANIZATION_LENGTH = 100
MIN_ORGANIZATION_LENGTH = 2
MAX_BULK_USERS = 100

EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
# Bulk rows use the looser check the upload form always used.
BULK_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PERSON_NAME_RE = re.compile(r"^[a-zA-Z\s'-]+$")


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def validate_contact(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    """
    errors: List[str] = []

    for f in REQUIRED_STR_FIELDS:
        if f not in data:
            errors.append(f"Missing required field: {f}")
        elif not _is_non_empty_str(data[f]):
            errors.append(f"Field '{f}' must be a non-empty string")

    for f in OPTIONAL_STR_FIELDS:
        if data.get(f) is not None and not isinstance(data[f], str):
            errors.append(f"Field '{f}' must be a string if provided")

    if errors:
        return errors

    for f, label in (("first_name", "First name"), ("last_name", "Last name")):
        if not PERSON_NAME_RE.match(data[f].strip()[:MAX_NAME_LENGTH]):
            errors.append(f"{label} contains invalid characters")

    if not EMAIL_RE.match(normalize_email(data["email"])[:MAX_EMAIL_LENGTH]):
        errors.append("Invalid email format")

    if len(data["organization_name"].strip()) > MAX_ORGANIZATION_LENGTH:
        errors.append(
            f"Field 'organization_name' exceeds maximum length of {MAX_ORGANIZATION_LENGTH} characters"
        )

    return errors


def sanitize_contact(data: Dict[str, Any]) -> Dict[str, Any]:
    """Trimmed and truncated copy of a contact request; email lowercased."""
    clean = dict(data)
    clean["first_name"] = data["first_name"].strip()[:MAX_NAME_LENGTH]
    clean["last_name"] = data["last_name"].strip()[:MAX_NAME_LENGTH]
    clean["email"] = normalize_email(data["email"])[:MAX_EMAIL_LENGTH]
    clean["organization_name"] = data["organization_name"].strip()[:MAX_ORGANIZATION_LENGTH]
    for f in OPTIONAL_STR_FIELDS:
        if isinstance(data.get(f), str):
            clean[f] = data[f].strip() or None
    return clean


def validate_organization_name(name: Optional[str]) -> List[str]:
    if not _is_non_empty_str(name):
        return ["Organization name is required and cannot be empty"]
    name = name.strip()
    if len(name) < MIN_ORGANIZATION_LENGTH:
        return [f"Organization name must be at least {MIN_ORGANIZATION_LENGTH} characters long"]
    if len(name) > MAX_ORGANIZATION_LENGTH:
        return [f"Organization name is too long (maximum {MAX_ORGANIZATION_LENGTH} characters)"]
    if not meaningful_words(normalize_company_name(name)):
        return ["Organization name must contain meaningful words (at least 3 characters)"]
    return []


def validate_bulk_user(user: Dict[str, Any]) -> Optional[str]:
    """First problem found in one CSV row, or None."""
    if not _is_non_empty_str(user.get("first_name")):
        return "First name is required"
    if not _is_non_empty_str(user.get("last_name")):
        return "Last name is required"
    if not _is_non_empty_str(user.get("email")):
        return "Email is required"
    if not BULK_EMAIL_RE.match(user["email"].strip()):
        return "Invalid email format"
    return None


def validate_bulk_upload(users: List[Dict[str, Any]]) -> List[str]:
    if not users:
        return ["Users list is required and must not be empty"]
    if len(users) > MAX_BULK_USERS:
        return [f"Too many users. Maximum allowed: {MAX_BULK_USERS}"]
    return []
