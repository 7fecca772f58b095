"""
Normalized training-provider renewal submission.

Built by the renewal form parser from a raw SheepCRM form response.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from faib_tools.models.enums import ApplicationStatus

FAIB_BOOKS_MARKER = "are you using the new faib first aid books"


@dataclass(frozen=True)
class CertificateCounts:
    """Certificates issued in the previous year, by course category."""

    efaw: int = 0  # Emergency First Aid at Work
    pfa: int = 0  # Paediatric First Aid
    epfa: int = 0  # Emergency Paediatric First Aid
    bls_aed: int = 0  # Basic Life Support + AED
    faw: int = 0  # First Aid at Work

    @property
    def total(self) -> int:
        return self.efaw + self.pfa + self.epfa + self.bls_aed + self.faw

    def to_dict(self) -> dict:
        return {
            "efaw": self.efaw,
            "pfa": self.pfa,
            "epfa": self.epfa,
            "bls_aed": self.bls_aed,
            "faw": self.faw,
            "total": self.total,
        }


@dataclass(frozen=True)
class RenewalSubmission:
    """A parsed renewal form submission."""

    form_response_uri: str
    organization_uri: str
    organization_name: str
    contact_uri: str
    contact_name: str
    certificate_counts: CertificateCounts
    trainer_names: list[str] = field(default_factory=list)
    submission_date: Optional[str] = None
    status: ApplicationStatus = ApplicationStatus.SUBMITTED

    # Compliance checkboxes (items the provider ticked)
    admin_system_records: list[str] = field(default_factory=list)
    certificate_content: list[str] = field(default_factory=list)
    portfolio_items: list[str] = field(default_factory=list)
    qa_coverage: list[str] = field(default_factory=list)
    teaching_materials: list[str] = field(default_factory=list)

    # Untouched form answers, passed on to the AI review
    raw_response: dict[str, Any] = field(default_factory=dict)

    @property
    def number_of_trainers(self) -> int:
        """Derived from the parsed names so the two can never disagree."""
        return len(self.trainer_names)

    @property
    def certificates_issued(self) -> int:
        return self.certificate_counts.total

    @property
    def uses_faib_books(self) -> bool:
        """True when the FAIB books checkbox appears among the teaching materials."""
        return any(FAIB_BOOKS_MARKER in item.lower() for item in self.teaching_materials)

    def to_dict(self) -> dict:
        """Convert to dictionary format for API responses."""
        return {
            "form_response_uri": self.form_response_uri,
            "organization": {"uri": self.organization_uri, "name": self.organization_name},
            "contact": {"uri": self.contact_uri, "name": self.contact_name},
            "submission_date": self.submission_date,
            "status": self.status.value,
            "certificates": {
                "breakdown": self.certificate_counts.to_dict(),
                "total": self.certificates_issued,
            },
            "trainers": {
                "count": self.number_of_trainers,
                "names": list(self.trainer_names),
            },
            "compliance": {
                "admin_system_records": list(self.admin_system_records),
                "certificate_content": list(self.certificate_content),
                "portfolio_items": list(self.portfolio_items),
                "qa_coverage": list(self.qa_coverage),
                "teaching_materials": list(self.teaching_materials),
                "uses_faib_books": self.uses_faib_books,
            },
        }
