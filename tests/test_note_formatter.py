"""
Tests for journal note and review comment formatting.
"""

from datetime import date

from faib_tools.models import (
    AdditionalDocument,
    AssessorAnalysis,
    DocumentCheck,
    Recommendation,
    RenewalAnalysis,
)
from faib_tools.services.note_formatter import (
    FOOTER,
    format_assessor_review_note,
    format_pricing_breakdown,
    format_renewal_note,
)
from faib_tools.services.pricing import calculate_renewal_pricing


def make_renewal_analysis(**overrides):
    values = {
        "summary": "Complete renewal submitted.",
        "certificate_count": 268,
        "trainer_count": 2,
        "missing_items": [],
        "compliance_issues": [],
        "trainer_details": "",
    }
    values.update(overrides)
    return RenewalAnalysis(**values)


def make_assessor_analysis(**overrides):
    values = {
        "summary": "Strong application.",
        "applicant_name": "Sam Taylor",
        "submission_date": "2025-02-01T10:05:00",
        "recommendation": Recommendation.APPROVE,
        "recommendation_reason": "All documents supplied.",
        "required_documents": [
            DocumentCheck("First Aid Certificate", True, "FAW 2024"),
            DocumentCheck("DBS Check", False),
        ],
    }
    values.update(overrides)
    return AssessorAnalysis(**values)


class TestPricingBreakdown:
    def test_block(self):
        text = format_pricing_breakdown(calculate_renewal_pricing(100, 2))
        assert text.startswith("**RENEWAL PRICING BREAKDOWN**")
        assert "Membership Fee (0-500 certificates):" in text
        assert "  £350.00 + VAT (£70.00) = £420.00" in text
        assert "Trainer Fees (2 trainers × £20):" in text
        assert "**TOTAL RENEWAL COST: £468.00 (inc. VAT)**" in text
        assert "(£390.00 + £78.00 VAT)" in text

    def test_single_trainer(self):
        text = format_pricing_breakdown(calculate_renewal_pricing(100, 1))
        assert "Trainer Fees (1 trainer × £20):" in text

    def test_no_trainers_omits_trainer_section(self):
        text = format_pricing_breakdown(calculate_renewal_pricing(100, 0))
        assert "Trainer Fees" not in text
        assert "**TOTAL RENEWAL COST: £420.00 (inc. VAT)**" in text


class TestRenewalNote:
    def test_sections(self, renewal_submission):
        pricing = calculate_renewal_pricing(renewal_submission.certificates_issued, renewal_submission.number_of_trainers)
        note = format_renewal_note(
            renewal_submission,
            make_renewal_analysis(trainer_details="Jane Smith, John Doe", compliance_issues=["Issue A"]),
            pricing,
        )
        assert note.startswith("**RENEWAL FORM SUBMISSION ANALYSIS**")
        assert "- Certificates Issued: 268" in note
        assert "- Trainers Renewing: 2" in note
        assert "**Trainers:**\nJane Smith, John Doe" in note
        assert "**⚠️ Compliance Issues:**\n- Issue A" in note
        assert note.endswith(FOOTER)

    def test_empty_lists_omit_sections(self, renewal_submission):
        pricing = calculate_renewal_pricing(268, 2)
        note = format_renewal_note(renewal_submission, make_renewal_analysis(), pricing)
        assert "Missing/Unchecked Items" not in note
        assert "Compliance Issues" not in note
        assert "**Trainers:**" not in note

    def test_thousands_separator(self, renewal_submission):
        from dataclasses import replace
        from faib_tools.models import CertificateCounts

        big = replace(renewal_submission, certificate_counts=CertificateCounts(efaw=12_345))
        note = format_renewal_note(big, make_renewal_analysis(), calculate_renewal_pricing(12_345, 2))
        assert "- Certificates Issued: 12,345" in note

    def test_idempotent(self, renewal_submission):
        analysis = make_renewal_analysis(missing_items=["QA policy"], compliance_issues=["Issue"])
        pricing = calculate_renewal_pricing(268, 2)
        first = format_renewal_note(renewal_submission, analysis, pricing)
        second = format_renewal_note(renewal_submission, analysis, pricing)
        assert first == second


class TestAssessorReviewNote:
    def test_content(self):
        note = format_assessor_review_note(make_assessor_analysis(), review_date=date(2025, 2, 3))
        assert "**Applicant:** Sam Taylor" in note
        assert "**Review Date:** 2025-02-03" in note
        assert "✅ First Aid Certificate\n   ↳ FAW 2024" in note
        assert "❌ DBS Check" in note
        assert "**✅ APPROVE**" in note
        assert note.endswith(FOOTER)

    def test_optional_sections(self):
        bare = format_assessor_review_note(make_assessor_analysis(), review_date=date(2025, 2, 3))
        assert "Additional Documents" not in bare
        assert "Strengths" not in bare
        assert "Issues/Concerns" not in bare

        full = format_assessor_review_note(
            make_assessor_analysis(
                additional_documents=[AdditionalDocument("cv.pdf", "CV")],
                strengths=["Experienced"],
                compliance_issues=["No ID"],
                recommendation=Recommendation.REQUEST_MORE_INFO,
            ),
            review_date=date(2025, 2, 3),
        )
        assert "📎 cv.pdf\n   ↳ CV" in full
        assert "**✅ Strengths:**\n- Experienced" in full
        assert "**⚠️ Issues/Concerns:**\n- No ID" in full
        assert "**⚠️ REQUEST MORE INFORMATION**" in full

    def test_idempotent(self):
        analysis = make_assessor_analysis()
        assert format_assessor_review_note(analysis, date(2025, 2, 3)) == format_assessor_review_note(
            analysis, date(2025, 2, 3)
        )
