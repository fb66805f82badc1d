"""
Minimal HubSpot CRM client.

Covers the handful of v3 endpoints ContactLink needs: listing companies,
creating and updating contacts, and associating a contact with a company.
Every failure is raised as a ContactLinkError (see errors.py).
"""

from typing import Any, Dict, Iterable, List, Optional

import requests

from .errors import error_from_exception
from .logger import get_logger

DEFAULT_BASE_URL = "https://api.hubapi.com"
COMPANY_PROPERTIES = ["name", "domain"]
CONTACT_PROPERTIES = ["email", "firstname", "lastname"]


class HubSpotClient:
    def __init__(
        self,
        access_token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 15,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
        }

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        logger = get_logger()
        logger.record_api_call()
        logger.debug("HubSpot request", method=method, path=path)
        try:
            resp = self.session.request(method, url, headers=self.headers, timeout=self.timeout, **kwargs)
            resp.raise_for_status()
        except requests.exceptions.RequestException as e:
            error = error_from_exception(e)
            logger.warning("HubSpot request failed", method=method, path=path, code=error.code,
                           status=error.status_code)
            raise error from e
        if resp.status_code == 204 or not resp.content:
            return {}
        return resp.json()

    def list_companies(self, limit: int = 100, after: Optional[str] = None) -> List[Dict[str, Any]]:
        """One page of companies with their name and domain properties."""
        params: Dict[str, Any] = {"limit": limit, "properties": ",".join(COMPANY_PROPERTIES)}
        if after:
            params["after"] = after
        data = self._request("GET", "/crm/v3/objects/companies", params=params)
        return data.get("results") or []

    def create_contact(self, properties: Dict[str, str]) -> str:
        data = self._request("POST", "/crm/v3/objects/contacts", json={"properties": properties})
        return str(data["id"])

    def update_contact(self, contact_id: str, properties: Dict[str, str]) -> None:
        self._request("PATCH", f"/crm/v3/objects/contacts/{contact_id}", json={"properties": properties})

    def get_contact(self, contact_id: str, properties: Iterable[str] = CONTACT_PROPERTIES) -> Dict[str, Any]:
        params = {"properties": ",".join(properties)}
        return self._request("GET", f"/crm/v3/objects/contacts/{contact_id}", params=params)

    def get_contact_company_ids(self, contact_id: str) -> List[str]:
        data = self._request("GET", f"/crm/v3/objects/contacts/{contact_id}/associations/companies")
        return [str(r["id"]) for r in data.get("results", []) if r.get("id")]

    def associate_contact_with_company(self, contact_id: str, company_id: str) -> None:
        payload = {
            "inputs": [
                {
                    "from": {"id": contact_id},
                    "to": {"id": company_id},
                    "type": "contact_to_company",
                }
            ]
        }
        self._request("POST", "/crm/v3/associations/contacts/companies/batch/create", json=payload)
