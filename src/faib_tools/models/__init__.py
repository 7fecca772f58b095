"""
Data models for FAIB Internal Tools.

This module exports the normalized form structures, review results and enums.
"""

# Enums
from faib_tools.models.enums import (
    ApplicationStatus,
    AttachmentKind,
    Recommendation,
)

# Renewal models
from faib_tools.models.renewal import (
    CertificateCounts,
    RenewalSubmission,
)

# Assessor application models
from faib_tools.models.assessor import (
    AssessorApplication,
    Attachment,
    PersonalInfo,
    Qualifications,
)

# Review results
from faib_tools.models.analysis import (
    AdditionalDocument,
    AssessorAnalysis,
    DocumentCheck,
    RenewalAnalysis,
)

__all__ = [
    # Enums
    "ApplicationStatus",
    "AttachmentKind",
    "Recommendation",
    # Renewal models
    "CertificateCounts",
    "RenewalSubmission",
    # Assessor application models
    "AssessorApplication",
    "Attachment",
    "PersonalInfo",
    "Qualifications",
    # Review results
    "AdditionalDocument",
    "AssessorAnalysis",
    "DocumentCheck",
    "RenewalAnalysis",
]
