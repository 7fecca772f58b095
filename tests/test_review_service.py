"""
Tests for the renewal and assessor review workflows.
"""

from datetime import date

import pytest

from factories import (
    APPLICATION_ID,
    APPLICATION_URI,
    ORG_URI,
    RENEWAL_URI,
    FakeCRM,
    make_assessor_response,
    make_renewal_response,
    make_settings,
)

from faib_tools.models import ApplicationStatus
from faib_tools.services.review_service import ReviewService


@pytest.fixture
def crm():
    return FakeCRM(
        form_responses={
            RENEWAL_URI: make_renewal_response(),
            APPLICATION_URI: make_assessor_response(),
        },
        listing=[
            make_assessor_response(),
            {"uri": "/faib/form_response/65bb00000000000000000009/", "data": {
                "contact_ref": {"ref": "/faib/person/1/", "display_value": "Alex Reid"},
                "status": "accepted",
                "overall_internal_comments": "Approved",
            }},
        ],
    )


class TestRenewalReview:
    def test_review_without_posting(self, crm, renewal_analysis_service):
        service = ReviewService(crm=crm, analysis=renewal_analysis_service, settings=make_settings())
        review = service.review_renewal(RENEWAL_URI)

        assert review.submission.certificates_issued == 268
        assert review.pricing.bracket_description == "0-500 certificates"
        assert "**TOTAL RENEWAL COST: £468.00 (inc. VAT)**" in review.note
        assert not review.posted
        assert crm.journal_notes == []

    def test_review_and_post(self, crm, renewal_analysis_service):
        service = ReviewService(crm=crm, analysis=renewal_analysis_service, settings=make_settings())
        review = service.review_renewal(RENEWAL_URI, post_to_crm=True, today=date(2025, 1, 14))

        assert review.journal_entry_uri == "/faib/journal/1/"
        note = crm.journal_notes[0]
        assert note["entity"] == ORG_URI
        assert note["title"] == "Renewal Form Submission - 2025-01-14"
        assert note["body"] == review.note

    def test_to_dict(self, crm, renewal_analysis_service):
        service = ReviewService(crm=crm, analysis=renewal_analysis_service, settings=make_settings())
        data = service.review_renewal(RENEWAL_URI).to_dict()
        assert data["organization"]["name"] == "Acme First Aid Ltd"
        assert data["pricing"]["total"]["inc_vat"] == 468.0
        assert data["note"]["posted"] is False


class TestAssessorReview:
    def test_form_response_uri(self, crm, assessor_analysis_service):
        service = ReviewService(crm=crm, analysis=assessor_analysis_service, settings=make_settings())
        assert service.form_response_uri(APPLICATION_ID) == APPLICATION_URI

    def test_list(self, crm, assessor_analysis_service):
        service = ReviewService(crm=crm, analysis=assessor_analysis_service, settings=make_settings())
        applications = service.list_assessor_applications()
        assert [a["applicant_name"] for a in applications] == ["Sam Taylor", "Alex Reid"]
        assert applications[0]["id"] == APPLICATION_ID
        assert applications[1]["has_internal_comments"] is True

    def test_list_filtered(self, crm, assessor_analysis_service):
        service = ReviewService(crm=crm, analysis=assessor_analysis_service, settings=make_settings())
        applications = service.list_assessor_applications(status=ApplicationStatus.ACCEPTED)
        assert [a["applicant_name"] for a in applications] == ["Alex Reid"]

    def test_review_and_post(self, crm, assessor_analysis_service):
        service = ReviewService(crm=crm, analysis=assessor_analysis_service, settings=make_settings())
        review = service.review_assessor_application(APPLICATION_ID, post_to_crm=True, today=date(2025, 2, 3))

        assert review.posted
        assert "**Review Date:** 2025-02-03" in review.note
        assert crm.updates == [{"uri": APPLICATION_URI, "internal_comments": review.note, "status": None}]

    def test_post_review_with_status(self, crm, assessor_analysis_service):
        service = ReviewService(crm=crm, analysis=assessor_analysis_service, settings=make_settings())
        result = service.post_assessor_review(APPLICATION_ID, "Approved", ApplicationStatus.ACCEPTED)
        assert result == {"form_response_uri": APPLICATION_URI, "review_posted": True, "status_updated": "accepted"}
        assert crm.updates[0]["status"] == "accepted"

    def test_post_review_validation(self, crm, assessor_analysis_service):
        service = ReviewService(crm=crm, analysis=assessor_analysis_service, settings=make_settings())
        with pytest.raises(ValueError, match="Review content is required"):
            service.post_assessor_review(APPLICATION_ID, "   ")
        with pytest.raises(ValueError, match="Cannot set review status"):
            service.post_assessor_review(APPLICATION_ID, "text", ApplicationStatus.WITHDRAWN)
        assert crm.updates == []
