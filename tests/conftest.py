"""
Pytest configuration and shared fixtures.
"""

import pytest
from typing import Any, Dict, List

from contactlink.errors import ErrorCodes, HubSpotError
from contactlink.logger import get_logger, reset_logger
from contactlink.matching import CandidateRecord


@pytest.fixture(autouse=True)
def quiet_logger(tmp_path):
    """Route the global logger to a temp dir for every test."""
    reset_logger()
    get_logger(log_dir=tmp_path / "logs", enable_console=False)
    yield
    reset_logger()


@pytest.fixture
def sample_candidates() -> List[CandidateRecord]:
    """Company records as the lookup would return them."""
    return [
        CandidateRecord(id="101", name="Acme Corporation", domain="acme.com"),
        CandidateRecord(id="102", name="Acme Widgets LLC", domain="acmewidgets.com"),
        CandidateRecord(id="103", name="Zylo Systems"),
        CandidateRecord(id="104", name="Northwind Traders Inc."),
    ]


@pytest.fixture
def company_results() -> List[Dict[str, Any]]:
    """Raw HubSpot company rows, including unusable ones."""
    return [
        {"id": "101", "properties": {"name": "Acme Corporation", "domain": "acme.com"}},
        {"id": "102", "properties": {"name": " Acme Widgets LLC ", "domain": ""}},
        {"id": "103", "properties": {"name": "Zylo Systems", "domain": None}},
        {"id": "104", "properties": {"name": "Northwind Traders Inc."}},
        {"id": "105", "properties": {"name": None}},
        {"properties": {"name": "No Id Ltd"}},
    ]


@pytest.fixture
def valid_contact() -> Dict[str, Any]:
    """Valid single-contact request."""
    return {
        "first_name": "Jane",
        "last_name": "Doe",
        "email": "  Jane.Doe@Example.com ",
        "organization_name": "ACME Inc",
    }


class FakeHubSpotClient:
    """In-memory stand-in for HubSpotClient."""

    def __init__(self, companies=None):
        self.companies = companies or []
        self.created: List[Dict[str, str]] = []
        self.updates: List[tuple] = []
        self.associations: List[tuple] = []
        self.list_calls = 0
        self.duplicate_emails = set()
        self.fail_listing = False
        self.fail_association = False
        self.fail_create = False

    def list_companies(self, limit=100, after=None):
        self.list_calls += 1
        if self.fail_listing:
            raise HubSpotError("HubSpot API is temporarily unavailable.", ErrorCodes.HUBSPOT_API_ERROR, 503)
        return self.companies[:limit]

    def create_contact(self, properties):
        if self.fail_create:
            raise HubSpotError("HubSpot authentication failed.", ErrorCodes.AUTHENTICATION_ERROR, 401)
        self.created.append(dict(properties))
        return str(len(self.created))

    def update_contact(self, contact_id, properties):
        if properties.get("email") in self.duplicate_emails:
            raise HubSpotError("User already exists in HubSpot.", ErrorCodes.USER_ALREADY_EXISTS, 409)
        self.updates.append((contact_id, dict(properties)))

    def associate_contact_with_company(self, contact_id, company_id):
        if self.fail_association:
            raise HubSpotError("HubSpot resource not found.", ErrorCodes.COMPANY_NOT_FOUND, 404)
        self.associations.append((contact_id, company_id))

    def get_contact(self, contact_id, properties=None):
        return {"id": contact_id, "properties": {"firstname": "Jane", "lastname": "Doe",
                                                 "email": "jane.doe@example.com"}}

    def get_contact_company_ids(self, contact_id):
        return [company_id for cid, company_id in self.associations if cid == contact_id]


@pytest.fixture
def fake_client(company_results) -> FakeHubSpotClient:
    return FakeHubSpotClient(companies=company_results)


@pytest.fixture
def audit_logger(tmp_path):
    from contactlink.audit import AuditLogger
    return AuditLogger(tmp_path / "audit.db", client_id="tester@host")
