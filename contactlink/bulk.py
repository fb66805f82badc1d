"""
Bulk contact upload from CSV.

All rows go to one organization chosen up front. A row that fails never
stops the batch; it is reported with its 1-based row number instead.
"""

import csv
import io
import time
from typing import Any, Dict, List, Optional

from .contacts import create_contact
from .errors import ContactLinkError, ErrorCodes, ValidationError, log_error
from .logger import get_logger
from .normalize import mask_email, normalize_email
from .schema import MAX_BULK_USERS, validate_bulk_upload, validate_bulk_user

CSV_COLUMNS = ["firstName", "lastName", "email"]
CSV_TEMPLATE = (
    "firstName,lastName,email\n"
    "John,Doe,john.doe@example.com\n"
    "Jane,Smith,jane.smith@example.com\n"
)


def parse_users_csv(text: str) -> List[Dict[str, str]]:
    """
    Parse firstName,lastName,email rows. The first line is a header and is
    skipped; blank lines are ignored and missing columns read as "".
    """
    users = []
    rows = csv.reader(io.StringIO(text))
    next(rows, None)
    for row in rows:
        if not any(col.strip() for col in row):
            continue
        cols = [col.strip() for col in row] + [""] * len(CSV_COLUMNS)
        users.append({"first_name": cols[0], "last_name": cols[1], "email": cols[2]})
    return users


def summarize_errors(errors: List[Dict[str, Any]]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for err in errors:
        text = err["error"].lower()
        if "already exists" in text or "409" in text:
            bucket = "Duplicate emails"
        elif "invalid email" in text:
            bucket = "Invalid email format"
        elif "required" in text or "missing" in text:
            bucket = "Missing required fields"
        else:
            bucket = "Other errors"
        counts[bucket] = counts.get(bucket, 0) + 1
    return counts


def _masked(user: Dict[str, str]) -> Dict[str, Optional[str]]:
    return {
        "first_name": user.get("first_name"),
        "last_name": user.get("last_name"),
        "email": mask_email(user.get("email")),
    }


def bulk_upload(
    client,
    users: List[Dict[str, str]],
    organization_id: str,
    organization_name: str,
    audit=None,
    pause: float = 0.1,
) -> Dict[str, Any]:
    """
    Create every user as a contact of one organization.

    Args:
        client: HubSpotClient (or anything with the same methods)
        users: Rows from parse_users_csv
        organization_id: HubSpot company id to associate every contact with
        organization_name: Company name stored on each contact
        audit: Optional AuditLogger
        pause: Seconds between rows, doubled once more than 5 rows have failed

    Returns:
        Summary dict: success, total, successful, failed, errors,
        success_rate, common_errors, message
    """
    logger = get_logger()
    problems = validate_bulk_upload(users)
    if problems:
        if len(users) > MAX_BULK_USERS:
            raise ContactLinkError(
                problems[0], ErrorCodes.FILE_PROCESSING_ERROR, 400,
                {"user_count": len(users), "max_allowed": MAX_BULK_USERS},
            )
        raise ValidationError(problems[0], {"user_count": len(users)})
    if not (organization_id or "").strip():
        raise ValidationError("Organization ID is required and must not be empty")
    if not (organization_name or "").strip():
        raise ValidationError("Organization name is required and must not be empty")

    successful = 0
    errors: List[Dict[str, Any]] = []

    for i, user in enumerate(users):
        row = i + 1
        problem = validate_bulk_user(user)
        if problem:
            errors.append({"row": row, "user": user, "error": problem})
            continue

        logger.record_contact_attempt()
        try:
            contact_id = create_contact(
                client,
                user["first_name"].strip(),
                user["last_name"].strip(),
                normalize_email(user["email"]),
                company_id=organization_id,
                company_name=organization_name,
            )
        except ContactLinkError as e:
            logger.record_contact_failure(e.code)
            log_error(e, operation="bulk_upload", row=row, user=_masked(user))
            errors.append({"row": row, "user": user, "error": e.message})
        else:
            successful += 1
            logger.record_contact_success()
            logger.info("Created contact from bulk upload", row=row, contact_id=contact_id)

        if pause and i < len(users) - 1:
            time.sleep(pause * (2 if len(errors) > 5 else 1))

    total = len(users)
    failed = len(errors)
    if failed == 0:
        message = (
            f"Bulk upload completed successfully. All {successful} users created "
            f'in organization "{organization_name}".'
        )
    elif successful:
        message = (
            f"Bulk upload partially completed. {successful} users created successfully, "
            f'{failed} failed in organization "{organization_name}".'
        )
    else:
        message = f"Bulk upload failed. No users were created. {failed} users failed processing."

    if audit is not None:
        audit.log_bulk_upload(total, organization_name, successful, failed, successful > 0)
    logger.info(message, total=total, successful=successful, failed=failed)

    return {
        "success": successful > 0,
        "total": total,
        "successful": successful,
        "failed": failed,
        "errors": errors,
        "success_rate": successful / total,
        "common_errors": summarize_errors(errors),
        "message": message,
    }
