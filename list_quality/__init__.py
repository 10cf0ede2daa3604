"""Top-level package for the lead list quality engine."""

from . import models  # noqa: F401
from .analysis import ListAnalyzer, analyze_leads  # noqa: F401
from .avatar import AvatarExtractor, extract_avatar, validate_avatar  # noqa: F401
from .cleaner import Cleaner  # noqa: F401
from .models import (
    AvatarSpec,
    CleaningAnalysis,
    CleaningOptions,
    CleaningProgress,
    CleaningResult,
    CleaningSession,
    CleaningStep,
    DuplicateGroup,
    IssueRecord,
    Lead,
    SessionStatus,
    VerificationResult,
    VerificationSummary,
)
from .normalize import normalize_email, normalize_phone  # noqa: F401
from .orchestrator import VerificationOrchestrator  # noqa: F401

__all__ = [
    "AvatarExtractor",
    "AvatarSpec",
    "CleaningAnalysis",
    "CleaningOptions",
    "CleaningProgress",
    "CleaningResult",
    "CleaningSession",
    "CleaningStep",
    "Cleaner",
    "DuplicateGroup",
    "IssueRecord",
    "Lead",
    "ListAnalyzer",
    "SessionStatus",
    "VerificationOrchestrator",
    "VerificationResult",
    "VerificationSummary",
    "analyze_leads",
    "extract_avatar",
    "normalize_email",
    "normalize_phone",
    "validate_avatar",
    "stores",
    "orchestrator",
]
