"""
SheepCRM API client.
Handles form responses, journal notes, review comments and membership lookups.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from faib_tools.config import Settings, get_settings

logger = logging.getLogger(__name__)

TRAINING_PROVIDER_MEMBERSHIP = "First Aid Training Provider"
VALID_MEMBERSHIP_STATUSES = ("active", "future")


class SheepCRMError(RuntimeError):
    """Raised when the SheepCRM API returns an error response."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class CrmUri:
    """Components of a SheepCRM URI (/bucket/resource_type/uid/)."""

    bucket: str
    resource_type: str
    uid: str

    @classmethod
    def parse(cls, uri: str) -> "CrmUri":
        parts = [p for p in uri.split("/") if p]
        if len(parts) < 3:
            raise ValueError(f"Invalid SheepCRM URI format: {uri}")
        return cls(bucket=parts[0], resource_type=parts[1], uid=parts[2])


@dataclass
class CertificateData:
    """Licence certificate fields for a training provider."""

    company_name: str
    company_address: str
    licence_number: str
    membership_start_date: str
    membership_end_date: str

    def to_dict(self) -> dict:
        return {
            "company_name": self.company_name,
            "company_address": self.company_address,
            "licence_number": self.licence_number,
            "membership_start_date": self.membership_start_date,
            "membership_end_date": self.membership_end_date,
        }


def format_membership_date(value: str) -> str:
    """Trim a SheepCRM ISO timestamp ("2026-09-01T00:00:00") to its date."""
    return (value or "").split("T")[0]


def format_address(record: dict) -> str:
    """Build a comma-separated address from an organisation or person record."""
    data = record.get("data") or {}
    parts: list[str] = []

    if isinstance(data.get("address_lines"), list):
        # Organisation format
        parts = list(data["address_lines"])
        for key in ("locality", "region", "postal_code", "country"):
            if data.get(key):
                parts.append(data[key])
    elif isinstance(data.get("address"), list):
        # Person format
        parts = list(data["address"])

    return ", ".join(str(p) for p in parts if p)


class SheepCRMClient:
    """Client for the SheepCRM REST API."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self._transport = transport

    def is_configured(self) -> bool:
        """Check if SheepCRM credentials are configured."""
        return self.settings.is_sheepcrm_configured()

    def _get_headers(self) -> dict:
        if not self.settings.sheepcrm_api_key:
            raise ValueError("SHEEPCRM_API_KEY not configured")
        return {
            "Authorization": f"Bearer {self.settings.sheepcrm_api_key}",
            "Content-Type": "application/json",
        }

    def _request(
        self,
        method: str,
        endpoint: str,
        json: Optional[dict] = None,
        params: Optional[dict] = None,
    ) -> Any:
        """Make an authenticated request and return the decoded JSON body."""
        url = f"{self.settings.sheepcrm_base_url.rstrip('/')}{endpoint}"

        with httpx.Client(
            transport=self._transport,
            timeout=self.settings.sheepcrm_timeout_seconds,
        ) as client:
            response = client.request(method, url, headers=self._get_headers(), json=json, params=params)

        if response.is_error:
            try:
                detail = response.json().get("error") or response.reason_phrase
            except (ValueError, AttributeError):
                detail = response.reason_phrase
            logger.error("SheepCRM %s %s failed (%s): %s", method, endpoint, response.status_code, detail)
            raise SheepCRMError(
                f"SheepCRM API Error ({response.status_code}): {detail}",
                status_code=response.status_code,
            )

        return response.json()

    # =========================================================================
    # Contacts and memberships
    # =========================================================================
    def get_contact_name(self, contact_uri: str) -> str:
        """Get the display name of a person or organisation."""
        uri = CrmUri.parse(contact_uri)
        data = self._request("GET", f"/api/v1/{uri.bucket}/{uri.resource_type}/{uri.uid}/display")
        return data.get("display_value", "")

    def get_full_record(self, uri: str) -> dict:
        """Get a full contact, organisation or member record."""
        return self._request("GET", f"/api/v1{uri}")

    def get_contact_address(self, contact_uri: str) -> str:
        """Get a contact address as a single comma-separated string."""
        address = format_address(self.get_full_record(contact_uri))
        if not address:
            raise SheepCRMError(f"No address found for contact {contact_uri}")
        return address

    def get_person_memberships(self, contact_uri: str) -> dict:
        return self._request("GET", f"/api/v1{contact_uri}membership/all")

    def get_active_membership(self, contact_uri: str) -> dict:
        """
        Get the active (or future) First Aid Training Provider membership.

        Only training providers are eligible for licence certificates.
        """
        response = self.get_person_memberships(contact_uri)
        for membership in response.get("memberships") or []:
            is_provider = TRAINING_PROVIDER_MEMBERSHIP in (membership.get("display_value") or "")
            status = (membership.get("membership_record_status") or "").lower()
            if is_provider and status in VALID_MEMBERSHIP_STATUSES:
                return membership

        raise SheepCRMError(
            f'No "{TRAINING_PROVIDER_MEMBERSHIP}" membership found for contact {contact_uri}'
        )

    def get_certificate_data_from_member(self, member_uri: str) -> CertificateData:
        """Get licence certificate data from a member record URI."""
        record = self.get_full_record(member_uri)
        data = record.get("data") or {}

        membership_type = (data.get("membership_type") or {}).get("display_value") or ""
        if TRAINING_PROVIDER_MEMBERSHIP not in membership_type:
            raise SheepCRMError(
                f'Only "{TRAINING_PROVIDER_MEMBERSHIP}" memberships are eligible for certificates'
            )

        contact_uri = (data.get("member") or {}).get("ref", "")
        return CertificateData(
            company_name=self.get_contact_name(contact_uri),
            company_address=self.get_contact_address(contact_uri),
            licence_number=data.get("membership_number", ""),
            membership_start_date=format_membership_date(data.get("start_date", "")),
            membership_end_date=format_membership_date(data.get("end_date", "")),
        )

    # =========================================================================
    # Form responses
    # =========================================================================
    def get_form_response(self, form_response_uri: str) -> dict:
        """Get a form response (renewal or assessor application)."""
        return self._request("GET", f"/api/v1{form_response_uri}")

    def list_form_responses(self, form_uri: str, limit: int = 50) -> list[dict]:
        """List the responses to a form."""
        data = self._request("GET", f"/api/v1{form_uri}responses/", params={"limit": limit})
        return data.get("results") or data.get("form_responses") or []

    def update_form_response(
        self,
        form_response_uri: str,
        internal_comments: str,
        status: Optional[str] = None,
    ) -> dict:
        """Post review comments to a form response, optionally updating its status."""
        payload = {"overall_internal_comments": internal_comments}
        if status:
            payload["status"] = status
        return self._request("PATCH", f"/api/v1{form_response_uri}", json=payload)

    # =========================================================================
    # Journal
    # =========================================================================
    def create_journal_note(self, contact_uri: str, subject: str, note: str) -> dict:
        """
        Create a journal note on a contact's profile.

        Args:
            contact_uri: URI of the organisation or person
            subject: Title of the journal entry
            note: Note body (markdown supported)

        Returns:
            The created journal entry
        """
        uri = CrmUri.parse(contact_uri)
        payload = {
            "entity": contact_uri,
            "title": subject,
            "body": note,
            "entry_type": "note",
        }
        return self._request("POST", f"/api/v1/{uri.bucket}/journal/", json=payload)
