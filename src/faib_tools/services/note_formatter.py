"""
Plain-text report formatting for SheepCRM journal notes and review comments.

Reports use markdown-style emphasis (**bold**, "-" bullets). Sections whose
list content is empty are left out. Output depends only on the inputs.
"""

from datetime import date
from typing import Optional

from faib_tools.models import AssessorAnalysis, RenewalAnalysis, RenewalSubmission
from faib_tools.services.pricing import TRAINER_FEE, PricingBreakdown, format_money

RULE = "─────────────────────────────"
FOOTER = "*Auto-generated by FAIB Internal Tools*"


def format_pricing_breakdown(breakdown: PricingBreakdown) -> str:
    """Format a pricing breakdown as the renewal cost block of a note."""
    lines: list[str] = []

    lines.append("**RENEWAL PRICING BREAKDOWN**")
    lines.append("")

    lines.append(f"Membership Fee ({breakdown.bracket_description}):")
    lines.append(
        f"  {format_money(breakdown.membership_fee_ex_vat)} + VAT "
        f"({format_money(breakdown.membership_vat)}) = {format_money(breakdown.membership_fee_inc_vat)}"
    )
    lines.append("")

    trainers = breakdown.number_of_trainers
    if trainers > 0:
        plural = "s" if trainers > 1 else ""
        lines.append(f"Trainer Fees ({trainers} trainer{plural} × £{TRAINER_FEE}):")
        lines.append(
            f"  {format_money(breakdown.trainer_fee_ex_vat)} + VAT "
            f"({format_money(breakdown.trainer_vat)}) = {format_money(breakdown.trainer_fee_inc_vat)}"
        )
        lines.append("")

    lines.append(RULE)
    lines.append(f"**TOTAL RENEWAL COST: {format_money(breakdown.total_inc_vat)} (inc. VAT)**")
    lines.append(f"({format_money(breakdown.total_ex_vat)} + {format_money(breakdown.total_vat)} VAT)")

    return "\n".join(lines)


def format_renewal_note(
    submission: RenewalSubmission,
    analysis: RenewalAnalysis,
    pricing: PricingBreakdown,
) -> str:
    """Render the renewal review note posted to the organisation's journal."""
    lines: list[str] = []

    lines.append("**RENEWAL FORM SUBMISSION ANALYSIS**")
    lines.append("")

    lines.append("**Summary:**")
    lines.append(analysis.summary)
    lines.append("")

    lines.append("**Key Metrics:**")
    lines.append(f"- Certificates Issued: {submission.certificates_issued:,}")
    lines.append(f"- Trainers Renewing: {submission.number_of_trainers}")
    lines.append("")

    if analysis.trainer_details:
        lines.append("**Trainers:**")
        lines.append(analysis.trainer_details)
        lines.append("")

    if analysis.missing_items:
        lines.append("**⚠️ Missing/Unchecked Items:**")
        lines.extend(f"- {item}" for item in analysis.missing_items)
        lines.append("")

    if analysis.compliance_issues:
        lines.append("**⚠️ Compliance Issues:**")
        lines.extend(f"- {issue}" for issue in analysis.compliance_issues)
        lines.append("")

    lines.append("")
    lines.append(format_pricing_breakdown(pricing))
    lines.append("")

    lines.append(RULE)
    lines.append(FOOTER)

    return "\n".join(lines)


def format_assessor_review_note(analysis: AssessorAnalysis, review_date: Optional[date] = None) -> str:
    """Render the review posted to an application's internal comments."""
    review_date = review_date or date.today()
    lines: list[str] = []

    lines.append("**TRAINER/ASSESSOR APPLICATION REVIEW**")
    lines.append("")

    lines.append(f"**Applicant:** {analysis.applicant_name}")
    lines.append(f"**Submission Date:** {analysis.submission_date}")
    lines.append(f"**Review Date:** {review_date.isoformat()}")
    lines.append("")

    lines.append("**Summary:**")
    lines.append(analysis.summary)
    lines.append("")

    lines.append("**Required Documents Checklist:**")
    for doc in analysis.required_documents:
        status = "✅" if doc.present else "❌"
        lines.append(f"{status} {doc.name}")
        if doc.notes:
            lines.append(f"   ↳ {doc.notes}")
    lines.append("")

    if analysis.additional_documents:
        lines.append("**Additional Documents Uploaded:**")
        for doc in analysis.additional_documents:
            lines.append(f"📎 {doc.filename}")
            if doc.notes:
                lines.append(f"   ↳ {doc.notes}")
        lines.append("")

    if analysis.strengths:
        lines.append("**✅ Strengths:**")
        lines.extend(f"- {strength}" for strength in analysis.strengths)
        lines.append("")

    if analysis.compliance_issues:
        lines.append("**⚠️ Issues/Concerns:**")
        lines.extend(f"- {issue}" for issue in analysis.compliance_issues)
        lines.append("")

    lines.append("**RECOMMENDATION:**")
    lines.append(f"**{analysis.recommendation.label}**")
    lines.append("")
    lines.append(analysis.recommendation_reason)
    lines.append("")

    lines.append(RULE)
    lines.append(FOOTER)

    return "\n".join(lines)
