"""
Contact creation in HubSpot.

A contact is created without its email first: HubSpot auto-associates new
contacts with whatever company owns the email domain, and the association
has to come from the organization match instead.
"""

from typing import Any, Dict, Optional

from .companies import resolve_organization
from .errors import ContactLinkError, ValidationError, log_error
from .logger import get_logger
from .matching import ACCEPTANCE_THRESHOLD, PREFIX_BOOST
from .normalize import mask_email
from .schema import sanitize_contact, validate_contact


def create_contact(
    client,
    first_name: str,
    last_name: str,
    email: str,
    company_id: Optional[str] = None,
    company_name: Optional[str] = None,
) -> str:
    """
    Create a contact and optionally associate it with a company.

    Returns:
        The new contact id

    Raises:
        ContactLinkError: If the contact cannot be created or updated.
        A failed association is logged and does not raise.
    """
    logger = get_logger()
    contact_id = client.create_contact({
        "firstname": first_name,
        "lastname": last_name,
        "active_in_okta": "yes",
        "lifecyclestage": "lead",
    })
    logger.debug("Contact created without email", contact_id=contact_id)

    update = {"email": email}
    if company_name:
        update["company"] = company_name
    client.update_contact(contact_id, update)

    if company_id:
        try:
            client.associate_contact_with_company(contact_id, company_id)
            logger.info("Associated contact with company", contact_id=contact_id, company_id=company_id)
        except ContactLinkError as e:
            log_error(e, operation="associate", contact_id=contact_id, company_id=company_id)

    return contact_id


def create_contact_for_organization(
    client,
    data: Dict[str, Any],
    audit=None,
    threshold: float = ACCEPTANCE_THRESHOLD,
    prefix_boost: float = PREFIX_BOOST,
) -> Dict[str, Any]:
    """
    Validate a contact request, find its company and create it in HubSpot.

    data holds first_name, last_name, email and organization_name; an explicit
    company_id (and company_name) skips the organization lookup.

    Returns:
        Dict with contact_id, company_id, associated_company and message
    """
    logger = get_logger()
    errors = validate_contact(data)
    if errors:
        if audit is not None:
            audit.log_validation_error(errors)
        raise ValidationError(f"Validation failed: {', '.join(errors)}", {"errors": errors})

    clean = sanitize_contact(data)
    company_id = clean.get("company_id")
    company_name = clean.get("company_name")

    if not company_id:
        try:
            result = resolve_organization(
                client, clean["organization_name"], threshold=threshold, prefix_boost=prefix_boost
            )
        except ContactLinkError as e:
            # Lookup problems never block the contact itself.
            log_error(e, operation="resolve_organization", organization_name=clean["organization_name"])
        else:
            if result.matched:
                company_id = result.candidate.id
                company_name = result.candidate.name
                logger.info(
                    "Matched organization",
                    organization_name=clean["organization_name"],
                    company_id=company_id,
                    company_name=company_name,
                    score=round(result.score, 3),
                )

    logger.record_contact_attempt()
    try:
        contact_id = create_contact(
            client,
            clean["first_name"],
            clean["last_name"],
            clean["email"],
            company_id=company_id,
            company_name=company_name,
        )
    except ContactLinkError as error:
        logger.record_contact_failure(error.code)
        log_error(error, operation="create_contact", email=mask_email(clean["email"]))
        if audit is not None:
            audit.log_contact_creation(
                clean["first_name"], clean["last_name"], clean["email"],
                company_name or clean["organization_name"], False, error_message=error.message,
            )
        raise

    logger.record_contact_success()
    if audit is not None:
        audit.log_contact_creation(
            clean["first_name"], clean["last_name"], clean["email"],
            company_name or clean["organization_name"], True, contact_id=contact_id,
        )

    message = f'User "{clean["first_name"]} {clean["last_name"]}" created successfully.'
    if company_name:
        message += f' Associated with company "{company_name}".'
    else:
        message += " No matching organization found, user created without company association."

    return {
        "contact_id": contact_id,
        "company_id": company_id,
        "associated_company": company_name,
        "message": message,
    }
