"""
Parser for training-provider renewal form responses from SheepCRM.
"""

import logging
from typing import Any

from faib_tools.models import ApplicationStatus, CertificateCounts, RenewalSubmission
from faib_tools.services.form_fields import (
    as_dict,
    ensure_list,
    find_count,
    find_first_partial,
)

logger = logging.getLogger(__name__)

# Certificate count fields, each an ordered chain of key suffixes.
# BLS+AED has been spelled differently across form revisions.
CERTIFICATE_SUFFIXES: dict[str, tuple[str, ...]] = {
    "efaw": (".efaw",),
    "pfa": (".pfa",),
    "epfa": (".epfa",),
    "bls_aed": (".bls+aed", ".bls-+-aed", ".bls-aed", ".blsaed"),
    "faw": (".faw",),
}

TRAINER_NAME_FIELDS = ("trainer-names", "names-of-trainers", "trainers-renewing", "trainer-name")

# Compliance checkbox fields (comma-joined strings of ticked items)
COMPLIANCE_FIELDS: dict[str, tuple[str, ...]] = {
    "admin_system_records": ("admin-system", "administration-system", "records-kept"),
    "certificate_content": ("certificate-content", "certificates-include", "certificate-contains"),
    "portfolio_items": ("portfolio",),
    "qa_coverage": ("quality-assurance", "qa-coverage", "qa-"),
    "teaching_materials": ("acceptable-teaching-materials", "teaching-materials"),
}


def parse_renewal_form_response(form_response: dict[str, Any]) -> RenewalSubmission:
    """
    Parse a SheepCRM renewal form response into a RenewalSubmission.

    Identity comes from the structural ``contact_ref`` / ``organisation_ref``
    fields; everything under ``data.response`` is treated as untrusted.
    """
    data = as_dict(form_response.get("data"))
    response = as_dict(data.get("response"))

    contact = as_dict(data.get("contact_ref"))
    contact_uri = contact.get("ref", "")
    contact_name = contact.get("display_value", "")

    # Renewals submitted directly from the organisation record have no separate ref
    organisation = as_dict(data.get("organisation_ref")) or contact
    organization_uri = organisation.get("ref", contact_uri)
    organization_name = organisation.get("display_value", contact_name)

    counts = CertificateCounts(
        **{name: find_count(response, suffixes) for name, suffixes in CERTIFICATE_SUFFIXES.items()}
    )

    trainer_names = ensure_list(find_first_partial(response, TRAINER_NAME_FIELDS))

    compliance = {
        name: ensure_list(find_first_partial(response, partials))
        for name, partials in COMPLIANCE_FIELDS.items()
    }

    submission = RenewalSubmission(
        form_response_uri=form_response.get("uri", ""),
        organization_uri=organization_uri,
        organization_name=organization_name,
        contact_uri=contact_uri,
        contact_name=contact_name,
        certificate_counts=counts,
        trainer_names=trainer_names,
        submission_date=data.get("submission_date"),
        status=ApplicationStatus.from_crm(data.get("status")),
        raw_response=dict(response),
        **compliance,
    )

    logger.debug(
        "Parsed renewal for %s: %s certificates, %s trainers",
        submission.organization_name,
        counts.total,
        submission.number_of_trainers,
    )
    return submission
