"""
Review workflows for renewal forms and Trainer/Assessor applications.

Ties together the SheepCRM client, the form parsers, the pricing calculator,
the AI analysis service and the note formatter.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from faib_tools.config import Settings, get_settings
from faib_tools.models import (
    ApplicationStatus,
    AssessorAnalysis,
    AssessorApplication,
    RenewalAnalysis,
    RenewalSubmission,
)
from faib_tools.services.analysis_service import AnalysisService
from faib_tools.services.assessor_parser import parse_assessor_form_response
from faib_tools.services.form_fields import as_dict
from faib_tools.services.note_formatter import format_assessor_review_note, format_renewal_note
from faib_tools.services.pricing import PricingBreakdown, calculate_renewal_pricing
from faib_tools.services.renewal_parser import parse_renewal_form_response
from faib_tools.services.sheepcrm_service import SheepCRMClient

logger = logging.getLogger(__name__)

REVIEW_STATUSES = (ApplicationStatus.ACCEPTED, ApplicationStatus.REJECTED)


@dataclass
class RenewalReview:
    """Outcome of reviewing one renewal form submission."""

    submission: RenewalSubmission
    pricing: PricingBreakdown
    analysis: RenewalAnalysis
    note: str
    journal_entry_uri: Optional[str] = None

    @property
    def posted(self) -> bool:
        return self.journal_entry_uri is not None

    def to_dict(self) -> dict:
        return {
            **self.submission.to_dict(),
            "pricing": self.pricing.to_dict(),
            "analysis": self.analysis.to_dict(),
            "note": {
                "content": self.note,
                "posted": self.posted,
                "journal_entry_uri": self.journal_entry_uri,
            },
        }


@dataclass
class AssessorReview:
    """Outcome of reviewing one Trainer/Assessor application."""

    application: AssessorApplication
    analysis: AssessorAnalysis
    note: str
    posted: bool = False

    def to_dict(self) -> dict:
        return {
            "application": self.application.to_dict(),
            "analysis": self.analysis.to_dict(),
            "note": {"content": self.note, "posted": self.posted},
        }


class ReviewService:
    """Service for reviewing SheepCRM form submissions."""

    def __init__(
        self,
        crm: Optional[SheepCRMClient] = None,
        analysis: Optional[AnalysisService] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.crm = crm or SheepCRMClient(self.settings)
        self.analysis = analysis or AnalysisService(self.settings)

    def form_response_uri(self, form_response_id: str) -> str:
        """Build a form response URI from its id."""
        bucket = self.settings.sheepcrm_bucket or "faib"
        return f"/{bucket}/form_response/{form_response_id}/"

    # =========================================================================
    # Renewals
    # =========================================================================
    def review_renewal(
        self,
        form_response_uri: str,
        post_to_crm: bool = False,
        today: Optional[date] = None,
    ) -> RenewalReview:
        """
        Fetch, price and analyze a renewal form submission.

        Args:
            form_response_uri: URI of the renewal form response
            post_to_crm: Whether to create a journal note on the organisation
            today: Date used in the journal note title (defaults to today)
        """
        form_response = self.crm.get_form_response(form_response_uri)
        submission = parse_renewal_form_response(form_response)

        logger.info(
            "Reviewing renewal for %s: %s certificates, %s trainers",
            submission.organization_name,
            submission.certificates_issued,
            submission.number_of_trainers,
        )

        pricing = calculate_renewal_pricing(submission.certificates_issued, submission.number_of_trainers)
        analysis = self.analysis.analyze_renewal(submission)
        note = format_renewal_note(submission, analysis, pricing)

        review = RenewalReview(submission=submission, pricing=pricing, analysis=analysis, note=note)

        if post_to_crm:
            today = today or date.today()
            entry = self.crm.create_journal_note(
                submission.organization_uri,
                f"Renewal Form Submission - {today.isoformat()}",
                note,
            )
            review.journal_entry_uri = entry.get("uri", "")
            logger.info("Journal note created for %s: %s", submission.organization_name, review.journal_entry_uri)

        return review

    # =========================================================================
    # Trainer/Assessor applications
    # =========================================================================
    def list_assessor_applications(
        self,
        status: Optional[ApplicationStatus] = None,
        limit: int = 50,
    ) -> list[dict]:
        """List assessor application summaries, optionally filtered by status."""
        responses = self.crm.list_form_responses(self.settings.assessor_form_uri, limit=limit)

        applications = []
        for item in responses:
            data = as_dict(item.get("data"))
            if status and data.get("status") != status.value:
                continue
            uri = item.get("uri", "")
            contact = as_dict(data.get("contact_ref"))
            applications.append({
                "uri": uri,
                "id": next((p for p in reversed(uri.split("/")) if p), ""),
                "applicant_name": contact.get("display_value") or "Unknown",
                "applicant_uri": contact.get("ref", ""),
                "submission_date": data.get("submission_date"),
                "status": data.get("status") or "unknown",
                "has_internal_comments": bool(data.get("overall_internal_comments")),
                "has_feedback": bool(data.get("overall_feedback")),
            })
        return applications

    def get_assessor_application(self, form_response_id: str) -> AssessorApplication:
        form_response = self.crm.get_form_response(self.form_response_uri(form_response_id))
        return parse_assessor_form_response(form_response)

    def review_assessor_application(
        self,
        form_response_id: str,
        post_to_crm: bool = False,
        today: Optional[date] = None,
    ) -> AssessorReview:
        """Fetch and analyze an application, optionally posting the review."""
        application = self.get_assessor_application(form_response_id)
        analysis = self.analysis.analyze_assessor_application(application)
        note = format_assessor_review_note(analysis, review_date=today)

        review = AssessorReview(application=application, analysis=analysis, note=note)
        if post_to_crm:
            self.post_assessor_review(form_response_id, note)
            review.posted = True
        return review

    def post_assessor_review(
        self,
        form_response_id: str,
        review_content: str,
        update_status: Optional[ApplicationStatus] = None,
    ) -> dict:
        """
        Save a review to an application's internal comments.

        Raises:
            ValueError: if the review is empty or the status is not accepted/rejected
        """
        if not review_content or not review_content.strip():
            raise ValueError("Review content is required")
        if update_status is not None and update_status not in REVIEW_STATUSES:
            raise ValueError(f"Cannot set review status to {update_status.value}")

        uri = self.form_response_uri(form_response_id)
        self.crm.update_form_response(
            uri,
            review_content,
            status=update_status.value if update_status else None,
        )
        logger.info("Review posted to %s", uri)
        return {
            "form_response_uri": uri,
            "review_posted": True,
            "status_updated": update_status.value if update_status else None,
        }
