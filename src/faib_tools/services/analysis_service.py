"""
AI review service for renewal forms and Trainer/Assessor applications.
Uses the Claude API to turn form answers into a structured review.

When the API is unavailable or returns something unparseable, a basic
fallback review is produced instead so that a note can still be posted
for manual review.
"""

import json
import logging
import re
from typing import Any, Optional

from faib_tools.config import Settings, get_settings
from faib_tools.models import (
    AdditionalDocument,
    AssessorAnalysis,
    AssessorApplication,
    DocumentCheck,
    Recommendation,
    RenewalAnalysis,
    RenewalSubmission,
)
from faib_tools.services.assessor_parser import get_required_document_checklist

logger = logging.getLogger(__name__)

# Lazy import to avoid startup issues if anthropic not installed
anthropic = None


def get_anthropic_client(settings: Optional[Settings] = None):
    """Lazily initialize the Anthropic client."""
    global anthropic
    if anthropic is None:
        import anthropic as _anthropic

        anthropic = _anthropic
    settings = settings or get_settings()
    if not settings.anthropic_api_key:
        raise ValueError("ANTHROPIC_API_KEY not configured")
    return anthropic.Anthropic(api_key=settings.anthropic_api_key)


RENEWAL_PROMPT = """You are analyzing a training provider renewal form submission for FAIB (First Aid Industry Body).

FORM SUBMISSION DATA:
Organization: {organization_name}
Certificates Issued: {certificates_issued}
Number of Trainers: {number_of_trainers}
Trainer Names: {trainer_names}

FORM ANSWERS:
{form_answers}

TASK:
Provide a summary of what the training provider HAS submitted. Focus on what they HAVE done, not what they haven't.

CRITICAL RULES:
- Checkbox answers list the items that WERE ticked by the provider
- Do NOT mention compliance items that don't appear in the FORM ANSWERS above
- Do NOT use outside knowledge of FAIB requirements to infer what "should" be there
- Leave missingItems empty [] unless you can clearly see an option exists but wasn't checked

SPECIAL CHECKS:
- FAIB Books: find the answer whose key contains "acceptable-teaching-materials". If it is missing, or does not contain
  the text "Are you using the new FAIB First Aid books" (case-insensitive), flag a CRITICAL compliance issue stating
  they are NOT using FAIB books. Otherwise do not flag it.
- Blended Courses: note if they run blended courses
- Name discrepancies: flag mismatches between the form data and the organization name
- Manual record systems combined with high certificate volumes

Return ONLY valid JSON in this exact format:
{{
  "summary": "Brief 2-3 sentence overview emphasizing what they HAVE submitted",
  "missingItems": [],
  "complianceIssues": ["Issue 1", "Issue 2"],
  "trainerDetails": "Summary of trainer information (names, count, any issues)"
}}
"""


ASSESSOR_PROMPT = """You are analyzing a Trainer/Assessor application for FAIB (First Aid Industry Body).

APPLICATION DATA:
Applicant: {applicant_name}
Submission Date: {submission_date}
Status: {status}

PERSONAL INFORMATION:
{personal_info}

QUALIFICATIONS:
{qualifications}

REQUIRED DOCUMENTS CHECKLIST:
{checklist}

UPLOADED DOCUMENTS (Required):
{required_uploads}

UPLOADED DOCUMENTS (Additional):
{additional_uploads}

FORM ANSWERS:
{form_answers}

TASK:
1. Required Documents Check: for each checklist item decide whether it is present based on the uploaded filenames
2. Additional Documents: note any extra uploads and what they appear to be
3. Compliance Issues: missing checklist documents, incomplete personal information, expired certificates
   (if dates are visible), unanswered 3-year / 12-month course count questions
4. Strengths: positive aspects of the application
5. Recommendation: "approve", "request_more_info" or "reject"

CRITICAL RULES:
- ONLY check for the documents in the REQUIRED DOCUMENTS CHECKLIST
- Base the analysis ONLY on the form answers and uploaded documents
- A filename that suggests a requirement (e.g. "First_Aid_Certificate.pdf") counts as present
- Optional documents are noted positively, never as missing

Return ONLY valid JSON in this exact format:
{{
  "summary": "2-3 sentence overview of the application quality",
  "requiredDocuments": [{{"name": "Document Name", "present": true, "notes": "Optional notes"}}],
  "additionalDocuments": [{{"filename": "file.pdf", "notes": "What this document appears to be"}}],
  "complianceIssues": ["Issue 1"],
  "strengths": ["Strength 1"],
  "recommendation": "approve|request_more_info|reject",
  "recommendationReason": "Clear explanation of why this recommendation"
}}
"""


def extract_json(text: str) -> dict:
    """Extract a JSON object from a model response, handling markdown code blocks."""
    json_text = text.strip()

    code_block = re.search(r"```(?:json)?\s*([\s\S]*?)\s*```", json_text)
    if code_block:
        json_text = code_block.group(1).strip()
    else:
        braces = re.search(r"\{[\s\S]*\}", json_text)
        if braces:
            json_text = braces.group()

    data = json.loads(json_text)
    if not isinstance(data, dict):
        raise ValueError("Expected a JSON object in the model response")
    return data


def _numbered(items: list[str], empty: str) -> str:
    if not items:
        return empty
    return "\n".join(f"{i}. {item}" for i, item in enumerate(items, 1))


def _str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if v]


class AnalysisService:
    """Service for AI reviews of renewal and assessor application forms."""

    def __init__(self, settings: Optional[Settings] = None, client=None):
        self.settings = settings or get_settings()
        self._client = client

    @property
    def client(self):
        """Get or create the Anthropic client."""
        if self._client is None:
            self._client = get_anthropic_client(self.settings)
        return self._client

    def _complete(self, prompt: str, max_tokens: int) -> str:
        response = self.client.messages.create(
            model=self.settings.claude_model,
            max_tokens=max_tokens,
            messages=[{"role": "user", "content": prompt}],
        )
        content = response.content[0]
        if getattr(content, "type", "text") != "text":
            raise ValueError("Unexpected response type from Claude")
        return content.text

    # =========================================================================
    # Renewal forms
    # =========================================================================
    def build_renewal_prompt(self, submission: RenewalSubmission) -> str:
        return RENEWAL_PROMPT.format(
            organization_name=submission.organization_name,
            certificates_issued=submission.certificates_issued,
            number_of_trainers=submission.number_of_trainers,
            trainer_names=", ".join(submission.trainer_names),
            form_answers=json.dumps(submission.raw_response, indent=2, default=str),
        )

    def analyze_renewal(self, submission: RenewalSubmission) -> RenewalAnalysis:
        """
        Review a renewal submission.

        Counts in the result always come from the parsed submission, never
        from the model.
        """
        try:
            text = self._complete(
                self.build_renewal_prompt(submission),
                self.settings.renewal_analysis_max_tokens,
            )
            data = extract_json(text)
        except Exception as e:
            logger.exception("Renewal analysis failed for %s", submission.organization_name)
            return self.fallback_renewal_analysis(submission, str(e))

        return RenewalAnalysis(
            summary=str(data.get("summary") or ""),
            certificate_count=submission.certificates_issued,
            trainer_count=submission.number_of_trainers,
            missing_items=_str_list(data.get("missingItems")),
            compliance_issues=_str_list(data.get("complianceIssues")),
            trainer_details=str(data.get("trainerDetails") or ""),
        )

    @staticmethod
    def fallback_renewal_analysis(submission: RenewalSubmission, error: str) -> RenewalAnalysis:
        """Basic review used when the AI call fails."""
        return RenewalAnalysis(
            summary=f"Renewal submission received for {submission.organization_name}",
            certificate_count=submission.certificates_issued,
            trainer_count=submission.number_of_trainers,
            missing_items=[],
            compliance_issues=[f"AI analysis failed: {error or 'Unknown error'}", "Manual review required"],
            trainer_details=(
                f"{submission.number_of_trainers} trainer(s): {', '.join(submission.trainer_names)}"
            ),
        )

    # =========================================================================
    # Trainer/Assessor applications
    # =========================================================================
    def build_assessor_prompt(self, application: AssessorApplication) -> str:
        info = application.to_dict()
        return ASSESSOR_PROMPT.format(
            applicant_name=application.applicant_name,
            submission_date=application.submission_date or "Not specified",
            status=application.status.value,
            personal_info=json.dumps(info["personal_info"], indent=2),
            qualifications=json.dumps(info["qualifications"], indent=2),
            checklist=_numbered(get_required_document_checklist(), ""),
            required_uploads=_numbered(
                [a.filename for a in application.required_attachments],
                "(None uploaded in required fields)",
            ),
            additional_uploads=_numbered(
                [a.filename for a in application.additional_attachments],
                "(No additional documents)",
            ),
            form_answers=json.dumps(application.raw_response, indent=2, default=str),
        )

    def analyze_assessor_application(self, application: AssessorApplication) -> AssessorAnalysis:
        """Review a Trainer/Assessor application."""
        try:
            text = self._complete(
                self.build_assessor_prompt(application),
                self.settings.assessor_analysis_max_tokens,
            )
            data = extract_json(text)
        except Exception as e:
            logger.exception("Assessor analysis failed for %s", application.applicant_name)
            return self.fallback_assessor_analysis(application, str(e))

        try:
            recommendation = Recommendation(data.get("recommendation"))
        except ValueError:
            recommendation = Recommendation.REQUEST_MORE_INFO

        required_documents = [
            DocumentCheck(
                name=str(doc.get("name", "")),
                present=bool(doc.get("present")),
                notes=doc.get("notes") or None,
            )
            for doc in data.get("requiredDocuments") or []
            if isinstance(doc, dict)
        ]
        additional_documents = [
            AdditionalDocument(filename=str(doc.get("filename", "")), notes=doc.get("notes") or None)
            for doc in data.get("additionalDocuments") or []
            if isinstance(doc, dict)
        ]

        return AssessorAnalysis(
            summary=str(data.get("summary") or ""),
            applicant_name=application.applicant_name,
            submission_date=application.submission_date or "Not specified",
            recommendation=recommendation,
            recommendation_reason=str(data.get("recommendationReason") or ""),
            required_documents=required_documents,
            additional_documents=additional_documents,
            compliance_issues=_str_list(data.get("complianceIssues")),
            strengths=_str_list(data.get("strengths")),
        )

    @staticmethod
    def fallback_assessor_analysis(application: AssessorApplication, error: str) -> AssessorAnalysis:
        """Basic review used when the AI call fails."""
        return AssessorAnalysis(
            summary=(
                f"Application received from {application.applicant_name}. "
                "AI analysis failed - manual review required."
            ),
            applicant_name=application.applicant_name,
            submission_date=application.submission_date or "Not specified",
            recommendation=Recommendation.REQUEST_MORE_INFO,
            recommendation_reason="Automated analysis unavailable - requires manual review",
            required_documents=[
                DocumentCheck(name=doc, present=False, notes="Manual verification required")
                for doc in get_required_document_checklist()
            ],
            additional_documents=[
                AdditionalDocument(filename=att.filename, notes="Review manually")
                for att in application.additional_attachments
            ],
            compliance_issues=[f"AI analysis failed: {error or 'Unknown error'}", "Manual review required"],
            strengths=[],
        )
