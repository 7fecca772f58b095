"""
Shared pytest fixtures for the FAIB Internal Tools test suite.
No fixture talks to SheepCRM, Claude or S3.
"""

import pytest

from factories import (
    FakeAnthropic,
    make_assessor_response,
    make_renewal_response,
    make_settings,
)

from faib_tools.services.analysis_service import AnalysisService
from faib_tools.services.assessor_parser import parse_assessor_form_response
from faib_tools.services.renewal_parser import parse_renewal_form_response


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def renewal_response():
    return make_renewal_response()


@pytest.fixture
def renewal_submission(renewal_response):
    return parse_renewal_form_response(renewal_response)


@pytest.fixture
def assessor_response():
    return make_assessor_response()


@pytest.fixture
def assessor_application(assessor_response):
    return parse_assessor_form_response(assessor_response)


@pytest.fixture
def renewal_ai_payload():
    return {
        "summary": "Acme First Aid Ltd has submitted a complete renewal.",
        "missingItems": [],
        "complianceIssues": ["Paper registers used alongside high volumes"],
        "trainerDetails": "2 trainers: Jane Smith, John Doe",
    }


@pytest.fixture
def assessor_ai_payload():
    return {
        "summary": "A strong application with most documents supplied.",
        "requiredDocuments": [
            {"name": "First Aid Certificate", "present": True, "notes": "FAW 2024"},
            {"name": "DBS Check", "present": True},
            {"name": "Proof of Identity", "present": False, "notes": "Not uploaded"},
        ],
        "additionalDocuments": [{"filename": "Sam_Taylor_CV.pdf", "notes": "Curriculum vitae"}],
        "complianceIssues": ["No proof of identity"],
        "strengths": ["Level 3 teaching qualification"],
        "recommendation": "request_more_info",
        "recommendationReason": "Proof of identity is missing.",
    }


@pytest.fixture
def renewal_analysis_service(settings, renewal_ai_payload):
    return AnalysisService(settings, client=FakeAnthropic.returning_json(renewal_ai_payload))


@pytest.fixture
def assessor_analysis_service(settings, assessor_ai_payload):
    return AnalysisService(settings, client=FakeAnthropic.returning_json(assessor_ai_payload, fenced=True))
