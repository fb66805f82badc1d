"""
Error types and CRM error translation.

HubSpot failures arrive as requests exceptions; they are translated into
ContactLinkError so callers deal with one exception family carrying a code,
an HTTP-style status and optional details.
"""

import re
from typing import Any, Dict, Optional

import requests

from .logger import get_logger


class ErrorCodes:
    VALIDATION_ERROR = "VALIDATION_ERROR"
    HUBSPOT_API_ERROR = "HUBSPOT_API_ERROR"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"
    COMPANY_NOT_FOUND = "COMPANY_NOT_FOUND"
    USER_ALREADY_EXISTS = "USER_ALREADY_EXISTS"
    FILE_PROCESSING_ERROR = "FILE_PROCESSING_ERROR"
    ASSOCIATION_ERROR = "ASSOCIATION_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


class ContactLinkError(Exception):
    """Base error with a machine-readable code."""

    def __init__(
        self,
        message: str,
        code: str = ErrorCodes.INTERNAL_SERVER_ERROR,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "message": self.message,
            "code": self.code,
            "status_code": self.status_code,
        }
        if self.details:
            data["details"] = self.details
        return data


class ValidationError(ContactLinkError):
    """Raised when operator input is rejected before reaching the CRM."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCodes.VALIDATION_ERROR, 400, details)


class HubSpotError(ContactLinkError):
    pass


class ConfigurationError(ContactLinkError):
    def __init__(self, message: str):
        super().__init__(message, ErrorCodes.CONFIGURATION_ERROR, 500)


def _payload_message(payload: Any, default: str) -> str:
    if isinstance(payload, dict) and payload.get("message"):
        return sanitize_error_message(str(payload["message"]))
    return default


def error_from_status(status: int, payload: Any = None) -> HubSpotError:
    """Translate a HubSpot HTTP status into a HubSpotError."""
    details = payload if isinstance(payload, dict) else None
    if status == 400:
        return HubSpotError(
            f"Invalid request: {_payload_message(payload, 'Bad request')}",
            ErrorCodes.VALIDATION_ERROR, 400, details,
        )
    if status == 401:
        return HubSpotError(
            "HubSpot authentication failed. Please check API credentials.",
            ErrorCodes.AUTHENTICATION_ERROR, 401, details,
        )
    if status == 403:
        return HubSpotError(
            "Insufficient permissions for HubSpot API operation.",
            ErrorCodes.AUTHENTICATION_ERROR, 403, details,
        )
    if status == 404:
        return HubSpotError("HubSpot resource not found.", ErrorCodes.COMPANY_NOT_FOUND, 404, details)
    if status == 409:
        return HubSpotError("User already exists in HubSpot.", ErrorCodes.USER_ALREADY_EXISTS, 409, details)
    if status == 429:
        return HubSpotError(
            "HubSpot API rate limit exceeded. Please try again later.",
            ErrorCodes.RATE_LIMIT_EXCEEDED, 429, details,
        )
    if status in (500, 502, 503):
        return HubSpotError("HubSpot API is temporarily unavailable.", ErrorCodes.HUBSPOT_API_ERROR, 503, details)
    return HubSpotError(
        f"HubSpot API error: {_payload_message(payload, 'Unknown error')}",
        ErrorCodes.HUBSPOT_API_ERROR, status, details,
    )


def error_from_exception(exc: Exception) -> ContactLinkError:
    """Translate any exception raised around a HubSpot call."""
    if isinstance(exc, ContactLinkError):
        return exc
    if isinstance(exc, requests.exceptions.HTTPError) and exc.response is not None:
        try:
            payload = exc.response.json()
        except ValueError:
            payload = None
        return error_from_status(exc.response.status_code, payload)
    if isinstance(exc, (requests.exceptions.ConnectionError, requests.exceptions.Timeout)):
        return HubSpotError(
            "Unable to connect to HubSpot API. Please check network connection.",
            ErrorCodes.NETWORK_ERROR, 503, {"original_error": type(exc).__name__},
        )
    return HubSpotError(
        f"Unexpected HubSpot API error: {exc}",
        ErrorCodes.HUBSPOT_API_ERROR, 500, {"original_error": str(exc)},
    )


# Single pass so placeholders are never redacted again.
_REDACTIONS = re.compile(
    r"(?P<ip>\b\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}\b)"
    r"|(?P<email>[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})"
    r"|(?P<token>\b[A-Za-z0-9]{20,}\b)"
    r"|(?P<secret>password|token|key|secret|api)",
    re.IGNORECASE,
)
_PLACEHOLDERS = {
    "ip": "[IP_ADDRESS]",
    "email": "[EMAIL]",
    "token": "[TOKEN]",
    "secret": "[REDACTED]",
}


def sanitize_error_message(message: str) -> str:
    """Strip addresses, emails and credentials before showing an error."""
    sanitized = _REDACTIONS.sub(lambda m: _PLACEHOLDERS[m.lastgroup], message)
    return sanitized[:200]


def log_error(error: Exception, **context) -> None:
    fields: Dict[str, Any] = {"error_type": type(error).__name__, **context}
    if isinstance(error, ContactLinkError):
        fields.update(code=error.code, status_code=error.status_code)
        if error.details:
            fields["details"] = error.details
    get_logger().error(str(error), **fields)
