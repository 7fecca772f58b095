"""
Tests for the Trainer/Assessor application parser.
"""

import pytest

from factories import APPLICATION_ID, CONTACT_URI, FILE_HOST, make_assessor_response, make_file

from faib_tools.models import ApplicationStatus, AttachmentKind
from faib_tools.services.assessor_parser import (
    classify_attachment_field,
    get_required_document_checklist,
    is_file_field,
    parse_assessor_form_response,
    parse_attachments,
    parse_file_object,
)


class TestClassification:
    @pytest.mark.parametrize(
        "key",
        [
            "application.first-aid-certificate",
            "application.DBS-Check",
            "application.proof-of-identity",
            "application.professional-indemnity-insurance",
        ],
    )
    def test_required_fields(self, key):
        assert classify_attachment_field(key) is AttachmentKind.REQUIRED

    def test_unrecognized_field_is_additional(self):
        assert classify_attachment_field("application.misc-uploads-2") is AttachmentKind.ADDITIONAL

    def test_unrecognized_upload_lands_in_additional(self):
        required, additional = parse_attachments({"application.misc-uploads-2": [make_file("extra.pdf")]})
        assert required == []
        assert [a.filename for a in additional] == ["extra.pdf"]


class TestFileFields:
    def test_detects_file_objects_and_urls(self):
        assert is_file_field([make_file("a.pdf")])
        assert is_file_field(make_file("a.pdf"))
        assert is_file_field(f"{FILE_HOST}/a.pdf")

    def test_plain_answers_are_not_files(self):
        assert not is_file_field("yes")
        assert not is_file_field("https://example.com/about")
        assert not is_file_field([])
        assert not is_file_field(None)

    def test_parse_file_object(self):
        attachment = parse_file_object(make_file("DBS_2024.pdf", size=2048))
        assert attachment.filename == "DBS_2024.pdf"
        assert attachment.file_size == 2048
        assert attachment.content_type == "application/pdf"

    def test_unrepresentable_size_is_dropped(self):
        attachment = parse_file_object({"url": "https://x/file/1", "filename": "cv.pdf", "size": float("inf")})
        assert attachment.filename == "cv.pdf"
        assert attachment.file_size is None

        application = parse_assessor_form_response(make_assessor_response({
            "application.cv": {"url": "https://x/file/1", "filename": "cv.pdf", "size": float("inf")},
        }))
        assert [a.filename for a in application.additional_attachments] == ["cv.pdf"]

    def test_parse_file_url(self):
        attachment = parse_file_object(f"{FILE_HOST}/scan.jpg")
        assert attachment.filename == "scan.jpg"
        assert attachment.file_size is None

    def test_alternate_keys(self):
        attachment = parse_file_object({"href": "https://x/file/1", "name": "id.png", "fileSize": "77", "mimeType": "image/png"})
        assert (attachment.url, attachment.filename, attachment.file_size, attachment.content_type) == (
            "https://x/file/1", "id.png", 77, "image/png",
        )


class TestParseApplication:
    def test_identity(self, assessor_application):
        assert assessor_application.form_response_id == APPLICATION_ID
        assert assessor_application.applicant_uri == CONTACT_URI
        assert assessor_application.applicant_name == "Sam Taylor"
        assert assessor_application.status is ApplicationStatus.SUBMITTED

    def test_personal_info(self, assessor_application):
        info = assessor_application.personal_info
        assert info.full_name == "Samantha Taylor"
        assert info.email == "sam@example.com"
        assert info.phone == "07700 900123"
        assert info.address == "1 High Street, Leeds, LS1 1AA"
        assert info.date_of_birth == "1985-06-01"

    def test_full_name_falls_back_to_contact(self):
        application = parse_assessor_form_response(make_assessor_response({"application.email": "x@y.z"}))
        assert application.personal_info.full_name == "Sam Taylor"
        assert application.personal_info.phone is None

    def test_structured_full_name_falls_back_to_contact(self):
        application = parse_assessor_form_response(make_assessor_response({
            "application.full-name": {"first": "Sam", "last": "Taylor"},
        }))
        assert application.personal_info.full_name == "Sam Taylor"

    def test_string_contact_ref(self):
        application = parse_assessor_form_response({
            "uri": "/faib/form_response/abc/",
            "data": {"contact_ref": "/faib/person/1/", "response": {}},
        })
        assert application.form_response_id == "abc"
        assert application.applicant_uri == ""
        assert application.personal_info.full_name is None

    @pytest.mark.parametrize("data", [None, "oops", ["x"], {"response": "oops"}, {"response": ["a", "b"]}])
    def test_malformed_data_block(self, data):
        application = parse_assessor_form_response({"uri": "/faib/form_response/abc/", "data": data})
        assert application.required_attachments == []
        assert application.additional_attachments == []
        assert application.raw_response == {}

    def test_attachments_split(self, assessor_application):
        required = [a.filename for a in assessor_application.required_attachments]
        additional = [a.filename for a in assessor_application.additional_attachments]
        assert required == ["FAW_Certificate_2024.pdf", "AET_Level3.pdf", "DBS_2024.pdf"]
        assert additional == ["Sam_Taylor_CV.pdf"]

    def test_qualifications(self, assessor_application):
        quals = assessor_application.qualifications
        assert quals.first_aid_certificates == ["FAW_Certificate_2024.pdf"]
        assert quals.teaching_qualifications == ["AET_Level3.pdf"]
        assert quals.other_qualifications == ["Mental Health First Aid", "Paediatric First Aid"]

    def test_review_fields(self):
        application = parse_assessor_form_response(make_assessor_response(
            status="accepted",
            overall_internal_comments="Looks good",
        ))
        assert application.status is ApplicationStatus.ACCEPTED
        assert application.internal_comments == "Looks good"

    def test_to_dict(self, assessor_application):
        data = assessor_application.to_dict()
        assert data["applicant"] == {"uri": CONTACT_URI, "name": "Sam Taylor"}
        assert len(data["attachments"]["required"]) == 3
        assert data["attachments"]["additional"][0]["filename"] == "Sam_Taylor_CV.pdf"


def test_checklist():
    checklist = get_required_document_checklist()
    assert checklist[0] == "First Aid Certificate"
    assert "DBS Check" in checklist
    checklist.append("mutated")
    assert "mutated" not in get_required_document_checklist()
