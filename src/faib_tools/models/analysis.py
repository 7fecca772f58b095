"""
AI review results for renewal forms and assessor applications.
"""

from dataclasses import asdict, dataclass, field
from typing import Optional

from faib_tools.models.enums import Recommendation


@dataclass(frozen=True)
class RenewalAnalysis:
    """Structured review of a renewal submission."""

    summary: str
    certificate_count: int
    trainer_count: int
    missing_items: list[str] = field(default_factory=list)
    compliance_issues: list[str] = field(default_factory=list)
    trainer_details: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class DocumentCheck:
    """Whether one required document was found among the uploads."""

    name: str
    present: bool
    notes: Optional[str] = None


@dataclass(frozen=True)
class AdditionalDocument:
    filename: str
    notes: Optional[str] = None


@dataclass(frozen=True)
class AssessorAnalysis:
    """Structured review of a Trainer/Assessor application."""

    summary: str
    applicant_name: str
    submission_date: str
    recommendation: Recommendation = Recommendation.REQUEST_MORE_INFO
    recommendation_reason: str = ""
    required_documents: list[DocumentCheck] = field(default_factory=list)
    additional_documents: list[AdditionalDocument] = field(default_factory=list)
    compliance_issues: list[str] = field(default_factory=list)
    strengths: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        result = asdict(self)
        result["recommendation"] = self.recommendation.value
        return result
