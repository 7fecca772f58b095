"""
Service layer for FAIB Internal Tools.
"""

from faib_tools.services.pricing import (
    PRICING_BRACKETS,
    PricingBracket,
    PricingBreakdown,
    calculate_renewal_pricing,
    find_pricing_bracket,
    format_money,
    get_bracket_description,
)
from faib_tools.services.form_fields import (
    ensure_list,
    find_by_partial,
    find_by_suffix,
    find_count,
    parse_count,
)
from faib_tools.services.renewal_parser import parse_renewal_form_response
from faib_tools.services.assessor_parser import (
    classify_attachment_field,
    get_required_document_checklist,
    parse_assessor_form_response,
    parse_attachments,
)
from faib_tools.services.note_formatter import (
    format_assessor_review_note,
    format_pricing_breakdown,
    format_renewal_note,
)
from faib_tools.services.analysis_service import AnalysisService
from faib_tools.services.sheepcrm_service import CertificateData, SheepCRMClient, SheepCRMError
from faib_tools.services.storage_service import StorageService, get_storage_service
from faib_tools.services.review_service import AssessorReview, RenewalReview, ReviewService
from faib_tools.services.webhooks import resolve_form_response_uri, verify_webhook_signature

__all__ = [
    # Pricing
    "PRICING_BRACKETS",
    "PricingBracket",
    "PricingBreakdown",
    "calculate_renewal_pricing",
    "find_pricing_bracket",
    "format_money",
    "get_bracket_description",
    # Form parsing
    "ensure_list",
    "find_by_partial",
    "find_by_suffix",
    "find_count",
    "parse_count",
    "parse_renewal_form_response",
    "classify_attachment_field",
    "get_required_document_checklist",
    "parse_assessor_form_response",
    "parse_attachments",
    # Notes
    "format_assessor_review_note",
    "format_pricing_breakdown",
    "format_renewal_note",
    # External services
    "AnalysisService",
    "CertificateData",
    "SheepCRMClient",
    "SheepCRMError",
    "StorageService",
    "get_storage_service",
    # Workflows
    "AssessorReview",
    "RenewalReview",
    "ReviewService",
    "resolve_form_response_uri",
    "verify_webhook_signature",
]
