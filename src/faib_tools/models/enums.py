"""
Enum definitions for FAIB Internal Tools.

This module centralizes the enum types shared by the form parsers,
the analysis service and the API.
"""

import enum


class ApplicationStatus(enum.Enum):
    """Status of a SheepCRM form response."""

    STARTED = "started"  # Form opened but not submitted
    SUBMITTED = "submitted"  # Awaiting review
    WITHDRAWN = "withdrawn"
    ACCEPTED = "accepted"
    REJECTED = "rejected"

    @classmethod
    def from_crm(cls, value) -> "ApplicationStatus":
        """Map a raw CRM status string, defaulting to SUBMITTED."""
        if not value:
            return cls.SUBMITTED
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.SUBMITTED


class AttachmentKind(enum.Enum):
    """Which list an uploaded file belongs to."""

    REQUIRED = "required"  # Matched the required-document checklist
    ADDITIONAL = "additional"  # Anything else that was uploaded


class Recommendation(enum.Enum):
    """Reviewer recommendation for a trainer/assessor application."""

    APPROVE = "approve"
    REQUEST_MORE_INFO = "request_more_info"
    REJECT = "reject"

    @property
    def label(self) -> str:
        return {
            Recommendation.APPROVE: "✅ APPROVE",
            Recommendation.REQUEST_MORE_INFO: "⚠️ REQUEST MORE INFORMATION",
            Recommendation.REJECT: "❌ REJECT",
        }[self]
