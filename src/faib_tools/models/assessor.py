"""
Normalized Trainer/Assessor application.

Built by the assessor form parser from a raw SheepCRM form response.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Optional

from faib_tools.models.enums import ApplicationStatus


@dataclass(frozen=True)
class Attachment:
    """A file uploaded against a form field."""

    url: str
    filename: str
    file_size: Optional[int] = None
    content_type: Optional[str] = None
    uploaded_at: Optional[str] = None


@dataclass(frozen=True)
class PersonalInfo:
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    date_of_birth: Optional[str] = None


@dataclass(frozen=True)
class Qualifications:
    first_aid_certificates: list[str] = field(default_factory=list)
    teaching_qualifications: list[str] = field(default_factory=list)
    other_qualifications: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class AssessorApplication:
    """A parsed Trainer/Assessor application form response."""

    form_response_uri: str
    form_response_id: str
    applicant_uri: str
    applicant_name: str
    status: ApplicationStatus
    personal_info: PersonalInfo
    qualifications: Qualifications
    required_attachments: list[Attachment] = field(default_factory=list)
    additional_attachments: list[Attachment] = field(default_factory=list)
    submission_date: Optional[str] = None
    overall_feedback: Optional[str] = None
    internal_comments: Optional[str] = None

    # Raw form data for AI analysis
    raw_response: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary format for API responses."""
        return {
            "form_response_uri": self.form_response_uri,
            "form_response_id": self.form_response_id,
            "applicant": {"uri": self.applicant_uri, "name": self.applicant_name},
            "submission_date": self.submission_date,
            "status": self.status.value,
            "personal_info": asdict(self.personal_info),
            "qualifications": asdict(self.qualifications),
            "attachments": {
                "required": [asdict(a) for a in self.required_attachments],
                "additional": [asdict(a) for a in self.additional_attachments],
            },
            "overall_feedback": self.overall_feedback,
            "internal_comments": self.internal_comments,
        }
