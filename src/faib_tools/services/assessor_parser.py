"""
Parser for Trainer/Assessor application form responses from SheepCRM.

Uploaded files are split into required documents (matched against a fixed
checklist of field-name patterns) and additional documents. The split is a
heuristic: any file field that does not match a required pattern is kept as
additional so that unexpected uploads still reach the reviewer.
"""

import logging
from typing import Any, Optional

from faib_tools.models import (
    ApplicationStatus,
    AssessorApplication,
    Attachment,
    AttachmentKind,
    PersonalInfo,
    Qualifications,
)
from faib_tools.services.form_fields import as_dict, ensure_list, find_first_partial

logger = logging.getLogger(__name__)

# Field-name patterns for required documents (case-insensitive substring)
REQUIRED_DOCUMENT_PATTERNS: tuple[str, ...] = (
    "first-aid-certificate",
    "teaching-qualification",
    "teaching-certificate",
    "assessor-qualification",
    "assessor-certificate",
    "dbs-check",
    "dbs-certificate",
    "id-document",
    "identification",
    "proof-of-identity",
    "insurance",
    "professional-indemnity",
)

# Path segments that mark a URL string as an uploaded file
FILE_URL_MARKERS: tuple[str, ...] = ("/file/", "/upload/", "/attachment/")

REQUIRED_DOCUMENT_CHECKLIST: tuple[str, ...] = (
    "First Aid Certificate",
    "Teaching/Assessor Qualification",
    "DBS Check",
    "Proof of Identity",
    "Professional Indemnity Insurance",
)

# Personal info fallback chains, tried in order
FULL_NAME_FIELDS = ("full-name", "name")
EMAIL_FIELDS = ("email",)
PHONE_FIELDS = ("phone", "telephone", "mobile")
ADDRESS_FIELDS = ("address",)
DATE_OF_BIRTH_FIELDS = ("date-of-birth", "dob")

FIRST_AID_CERTIFICATE_FIELDS = ("first-aid-certificate", "first-aid-qualification")
TEACHING_QUALIFICATION_FIELDS = (
    "teaching-qualification",
    "teaching-certificate",
    "assessor-qualification",
)
OTHER_QUALIFICATION_FIELDS = ("other-qualification", "additional-qualification")


def get_required_document_checklist() -> list[str]:
    """The required documents a reviewer checks an application against."""
    return list(REQUIRED_DOCUMENT_CHECKLIST)


def _is_file_object(value: Any) -> bool:
    return isinstance(value, dict) and bool(value.get("url") or value.get("filename"))


def _is_file_url(value: Any) -> bool:
    return (
        isinstance(value, str)
        and value.startswith("http")
        and any(marker in value for marker in FILE_URL_MARKERS)
    )


def is_file_field(value: Any) -> bool:
    """Check whether a form answer holds one or more uploaded files."""
    if not value:
        return False
    if isinstance(value, list):
        return any(_is_file_object(item) or _is_file_url(item) for item in value)
    return _is_file_object(value) or _is_file_url(value)


def classify_attachment_field(field_key: str) -> AttachmentKind:
    """Required if the key matches a required-document pattern, otherwise additional."""
    key = field_key.lower()
    if any(pattern in key for pattern in REQUIRED_DOCUMENT_PATTERNS):
        return AttachmentKind.REQUIRED
    return AttachmentKind.ADDITIONAL


def _optional_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def parse_file_object(file: Any) -> Attachment:
    """Normalize a URL string or a file descriptor object into an Attachment."""
    if isinstance(file, str):
        filename = file.rstrip("/").split("/")[-1] or "unknown"
        return Attachment(url=file, filename=filename)

    return Attachment(
        url=file.get("url") or file.get("href") or "",
        filename=file.get("filename") or file.get("name") or "unknown",
        file_size=_optional_int(file.get("size") or file.get("fileSize")),
        content_type=file.get("contentType") or file.get("type") or file.get("mimeType"),
        uploaded_at=file.get("uploadedAt") or file.get("created"),
    )


def _file_values(value: Any) -> list:
    items = value if isinstance(value, list) else [value]
    return [item for item in items if _is_file_object(item) or _is_file_url(item)]


def parse_attachments(response: dict[str, Any]) -> tuple[list[Attachment], list[Attachment]]:
    """
    Collect every uploaded file in a form response.

    Returns:
        Tuple of (required, additional) attachment lists
    """
    required: list[Attachment] = []
    additional: list[Attachment] = []

    for field_key, value in response.items():
        if not is_file_field(value):
            continue

        attachments = [parse_file_object(file) for file in _file_values(value)]
        if classify_attachment_field(field_key) is AttachmentKind.REQUIRED:
            required.extend(attachments)
        else:
            additional.extend(attachments)

    return required, additional


def _text(value: Any):
    """Flatten a personal-info answer to a single string."""
    if value is None:
        return None
    if isinstance(value, list):
        return ", ".join(ensure_list(value)) or None
    if isinstance(value, dict):
        return None
    text = str(value).strip()
    return text or None


def parse_assessor_form_response(form_response: dict[str, Any]) -> AssessorApplication:
    """Parse a SheepCRM form response into a structured assessor application."""
    uri = form_response.get("uri", "")
    data = as_dict(form_response.get("data"))
    response = as_dict(data.get("response"))

    form_response_id = next((p for p in reversed(uri.split("/")) if p), "")

    contact = as_dict(data.get("contact_ref"))
    applicant_uri = contact.get("ref", "")
    applicant_name = contact.get("display_value", "")

    personal_info = PersonalInfo(
        full_name=_text(find_first_partial(response, FULL_NAME_FIELDS)) or applicant_name or None,
        email=_text(find_first_partial(response, EMAIL_FIELDS)),
        phone=_text(find_first_partial(response, PHONE_FIELDS)),
        address=_text(find_first_partial(response, ADDRESS_FIELDS)),
        date_of_birth=_text(find_first_partial(response, DATE_OF_BIRTH_FIELDS)),
    )

    qualifications = Qualifications(
        first_aid_certificates=_qualification_list(response, FIRST_AID_CERTIFICATE_FIELDS),
        teaching_qualifications=_qualification_list(response, TEACHING_QUALIFICATION_FIELDS),
        other_qualifications=_qualification_list(response, OTHER_QUALIFICATION_FIELDS),
    )

    required, additional = parse_attachments(response)

    logger.debug(
        "Parsed assessor application %s: %s required, %s additional attachments",
        form_response_id,
        len(required),
        len(additional),
    )

    return AssessorApplication(
        form_response_uri=uri,
        form_response_id=form_response_id,
        applicant_uri=applicant_uri,
        applicant_name=applicant_name,
        status=ApplicationStatus.from_crm(data.get("status")),
        personal_info=personal_info,
        qualifications=qualifications,
        required_attachments=required,
        additional_attachments=additional,
        submission_date=data.get("submission_date"),
        overall_feedback=data.get("overall_feedback"),
        internal_comments=data.get("overall_internal_comments"),
        raw_response=dict(response),
    )


def _qualification_list(response: dict[str, Any], partials: tuple[str, ...]) -> list[str]:
    value = find_first_partial(response, partials)
    # Upload fields share these names; their files are reported as attachments
    if is_file_field(value):
        return [parse_file_object(f).filename for f in _file_values(value)]
    return ensure_list(value)
