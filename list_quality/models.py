"""Unified data models for the list quality analyzer, cleaner, and verifier."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from .errors import DataError, InvalidTransition, ValidationError

PLACEHOLDER_NAME = "Unnamed Lead"
FALLBACK_NAME = "Unknown Lead"
SAMPLE_LIMIT = 10


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


# --- Lead Records ---

@dataclass(slots=True)
class Lead:
    """A contact record as held by the lead store."""

    id: Optional[str]
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    title: Optional[str] = None
    source_url: Optional[str] = None
    source_platform: Optional[str] = None
    custom_fields: Dict[str, Any] = field(default_factory=dict)

    def display_name(self) -> str:
        """Return a readable name for logs and issue listings."""
        if self.name and self.name.strip():
            return self.name.strip()
        return "Unknown"

    @property
    def has_name(self) -> bool:
        return not _blank(self.name) and self.name.strip() != PLACEHOLDER_NAME

    @property
    def has_phone(self) -> bool:
        return not _blank(self.phone)

    @property
    def has_email(self) -> bool:
        return not _blank(self.email)

    @property
    def has_company(self) -> bool:
        return not _blank(self.company)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Lead":
        """Build a lead from a ``list_leads`` row."""

        lead_id = row.get("id")
        custom_fields = row.get("custom_fields") or {}
        return cls(
            id=str(lead_id) if lead_id not in (None, "") else None,
            name=row.get("name"),
            email=row.get("email"),
            phone=row.get("phone"),
            company=row.get("company_name", row.get("company")),
            title=row.get("job_title", row.get("title")),
            source_url=row.get("source_url"),
            source_platform=row.get("source_platform"),
            custom_fields=dict(custom_fields) if isinstance(custom_fields, Mapping) else {},
        )


# --- Analysis Models ---

@dataclass(slots=True)
class IssueRecord:
    """A malformed phone or email value together with the proposed fix."""

    lead_id: str
    field_name: str
    current_value: str
    issue_kind: str
    suggested_fix: str
    fix_is_valid: bool = True
    lead_name: str = "Unknown"


@dataclass(slots=True)
class DuplicateGroup:
    """Leads sharing one canonical phone or email, in discovery order."""

    field_kind: str
    canonical_value: str
    member_lead_ids: List[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.member_lead_ids)

    @property
    def retained_id(self) -> str:
        return self.member_lead_ids[0]

    @property
    def removable_ids(self) -> List[str]:
        return list(self.member_lead_ids[1:])


@dataclass
class CleaningAnalysis:
    """Snapshot of a list's data quality.

    ``phone_issues``, ``email_issues`` and ``duplicate_groups`` are complete;
    the ``*_samples`` properties are capped projections for display only.
    """

    list_id: Optional[str] = None
    total_leads: int = 0
    duplicate_phones: int = 0
    duplicate_emails: int = 0
    invalid_phones: int = 0
    invalid_emails: int = 0
    missing_phones: int = 0
    missing_emails: int = 0
    missing_names: int = 0
    missing_companies: int = 0
    missing_contact: int = 0
    phone_issues: List[IssueRecord] = field(default_factory=list)
    email_issues: List[IssueRecord] = field(default_factory=list)
    duplicate_groups: List[DuplicateGroup] = field(default_factory=list)

    @property
    def phone_groups(self) -> List[DuplicateGroup]:
        return [group for group in self.duplicate_groups if group.field_kind == "phone"]

    @property
    def email_groups(self) -> List[DuplicateGroup]:
        return [group for group in self.duplicate_groups if group.field_kind == "email"]

    @property
    def phone_issue_samples(self) -> List[IssueRecord]:
        return self.phone_issues[:SAMPLE_LIMIT]

    @property
    def email_issue_samples(self) -> List[IssueRecord]:
        return self.email_issues[:SAMPLE_LIMIT]

    @property
    def duplicate_group_samples(self) -> List[DuplicateGroup]:
        return self.duplicate_groups[:SAMPLE_LIMIT]

    @property
    def total_issues(self) -> int:
        return (
            self.duplicate_phones
            + self.duplicate_emails
            + self.invalid_phones
            + self.invalid_emails
            + self.missing_phones
            + self.missing_emails
        )

    @property
    def quality_score(self) -> int:
        """Return the 0-100 share of clean issue axes across all leads."""

        max_possible = self.total_leads * 6
        if max_possible <= 0:
            return 0
        score = (max_possible - self.total_issues) / max_possible * 100
        return round(max(0.0, min(100.0, score)))


# --- Cleaning Models ---

class CleaningStep(Enum):
    """Remediation steps in their fixed execution order."""

    FIX_PHONE_FORMATS = ("fix_phone_formats", "Fixing phone formats", "Standardizing phone numbers...")
    REMOVE_DUPLICATE_PHONES = (
        "remove_duplicate_phones",
        "Removing duplicate phones",
        "Removing duplicate phone numbers...",
    )
    REMOVE_DUPLICATE_EMAILS = (
        "remove_duplicate_emails",
        "Removing duplicate emails",
        "Removing duplicate email addresses...",
    )
    FIX_EMAIL_FORMATS = ("fix_email_formats", "Fixing email formats", "Standardizing email addresses...")
    REMOVE_EMPTY_LEADS = (
        "remove_empty_leads",
        "Removing empty leads",
        "Removing leads with no contact information...",
    )
    STANDARDIZE_NAMES = ("standardize_names", "Standardizing names", "Standardizing name formats...")

    @property
    def option(self) -> str:
        return self.value[0]

    @property
    def label(self) -> str:
        return self.value[1]

    @property
    def action(self) -> str:
        return self.value[2]


@dataclass(slots=True)
class CleaningOptions:
    """Which remediation steps a cleaning run should execute."""

    fix_phone_formats: bool = True
    remove_duplicate_phones: bool = True
    remove_duplicate_emails: bool = True
    fix_email_formats: bool = True
    remove_empty_leads: bool = True
    standardize_names: bool = True

    def enabled(self, step: CleaningStep) -> bool:
        return bool(getattr(self, step.option))

    def selected_steps(self) -> List[CleaningStep]:
        return [step for step in CleaningStep if self.enabled(step)]


@dataclass(slots=True)
class CleaningProgress:
    """Progress notification emitted after every unit of cleaning work."""

    step_label: str
    completed: int
    total: int
    current_action: str


@dataclass
class CleaningResult:
    """Counters describing what a cleaning run changed."""

    phones_fixed: int = 0
    duplicates_removed: int = 0
    emails_fixed: int = 0
    empty_leads_removed: int = 0
    names_standardized: int = 0
    skipped: int = 0
    steps_completed: List[CleaningStep] = field(default_factory=list)

    @property
    def operations(self) -> int:
        return (
            self.phones_fixed
            + self.duplicates_removed
            + self.emails_fixed
            + self.empty_leads_removed
            + self.names_standardized
        )

    @property
    def message(self) -> str:
        return f"List cleaned successfully! Processed {self.operations} operations."


# --- Avatar Models ---

@dataclass(slots=True)
class EmployeeRange:
    min: Optional[int] = None
    max: Optional[int] = None


@dataclass(slots=True)
class ContactRules:
    require_email: bool = True
    require_personal_phone: bool = False
    require_company_domain: bool = True


@dataclass(slots=True)
class Weighting:
    """Scoring weights; expected to sum to 1.0 but not enforced."""

    firmographic: float = 0.35
    role: float = 0.25
    intent: float = 0.20
    tech: float = 0.10
    contactability: float = 0.10


@dataclass(slots=True)
class Thresholds:
    accept_min: float = 0.70
    review_min: float = 0.50


def _default_excluded_titles() -> List[str]:
    return ["Intern", "Assistant", "Recruiter", "Student"]


@dataclass
class AvatarSpec:
    """Structured description of the ideal customer used for scoring."""

    name: str = ""
    geography: List[str] = field(default_factory=list)
    industries: List[str] = field(default_factory=list)
    employee_range: EmployeeRange = field(default_factory=EmployeeRange)
    revenue_min_usd: Optional[int] = None
    roles_primary: List[str] = field(default_factory=list)
    roles_secondary: List[str] = field(default_factory=list)
    exclude_title_substrings: List[str] = field(default_factory=_default_excluded_titles)
    intent_signals: List[str] = field(default_factory=list)
    tech_signals: List[str] = field(default_factory=list)
    contact_rules: ContactRules = field(default_factory=ContactRules)
    weighting: Weighting = field(default_factory=Weighting)
    thresholds: Thresholds = field(default_factory=Thresholds)

    def to_payload(self) -> Dict[str, Any]:
        """Return the wire representation sent to the scoring webhook."""

        return {
            "name": self.name,
            "geo": list(self.geography),
            "industries": list(self.industries),
            "employee_range": {"min": self.employee_range.min, "max": self.employee_range.max},
            "company_revenue_usd": {"min": self.revenue_min_usd, "max": None},
            "roles_primary": list(self.roles_primary),
            "roles_secondary": list(self.roles_secondary),
            "exclude_titles_contains": list(self.exclude_title_substrings),
            "intent_signals_any": list(self.intent_signals),
            "tech_signals_any": list(self.tech_signals),
            "contact_rules": {
                "require_email": self.contact_rules.require_email,
                "require_personal_phone": self.contact_rules.require_personal_phone,
                "company_domain_required": self.contact_rules.require_company_domain,
            },
            "weighting": {
                "firmographic": self.weighting.firmographic,
                "role": self.weighting.role,
                "intent": self.weighting.intent,
                "tech": self.weighting.tech,
                "contactability": self.weighting.contactability,
            },
            "thresholds": {
                "accept_min": self.thresholds.accept_min,
                "review_min": self.thresholds.review_min,
            },
        }

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AvatarSpec":
        """Build a spec from form data using the wire key names."""

        employee = data.get("employee_range") or {}
        revenue = data.get("company_revenue_usd") or {}
        rules = data.get("contact_rules") or {}
        weights = data.get("weighting") or {}
        thresholds = data.get("thresholds") or {}
        defaults_rules = ContactRules()
        defaults_weights = Weighting()
        defaults_thresholds = Thresholds()

        return cls(
            name=str(data.get("name") or ""),
            geography=_string_list(data.get("geo", data.get("geography"))),
            industries=_string_list(data.get("industries")),
            employee_range=EmployeeRange(
                min=_optional_int(employee.get("min"), "employee_range"),
                max=_optional_int(employee.get("max"), "employee_range"),
            ),
            revenue_min_usd=_optional_int(revenue.get("min"), "company_revenue_usd"),
            roles_primary=_string_list(data.get("roles_primary")),
            roles_secondary=_string_list(data.get("roles_secondary")),
            exclude_title_substrings=_string_list(data["exclude_titles_contains"])
            if "exclude_titles_contains" in data
            else _default_excluded_titles(),
            intent_signals=_string_list(data.get("intent_signals_any")),
            tech_signals=_string_list(data.get("tech_signals_any")),
            contact_rules=ContactRules(
                require_email=bool(rules.get("require_email", defaults_rules.require_email)),
                require_personal_phone=bool(rules.get("require_personal_phone", defaults_rules.require_personal_phone)),
                require_company_domain=bool(
                    rules.get("company_domain_required", defaults_rules.require_company_domain)
                ),
            ),
            weighting=Weighting(
                firmographic=_number(weights.get("firmographic", defaults_weights.firmographic), "weighting"),
                role=_number(weights.get("role", defaults_weights.role), "weighting"),
                intent=_number(weights.get("intent", defaults_weights.intent), "weighting"),
                tech=_number(weights.get("tech", defaults_weights.tech), "weighting"),
                contactability=_number(weights.get("contactability", defaults_weights.contactability), "weighting"),
            ),
            thresholds=Thresholds(
                accept_min=_number(thresholds.get("accept_min", defaults_thresholds.accept_min), "thresholds"),
                review_min=_number(thresholds.get("review_min", defaults_thresholds.review_min), "thresholds"),
            ),
        )


def _string_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return [str(item).strip() for item in value if str(item).strip()]


def _optional_int(value: Any, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(field_name, f"{field_name} must be a whole number, got {value!r}") from exc


def _number(value: Any, field_name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(field_name, f"{field_name} must be a number, got {value!r}") from exc


# --- Verification Session Models ---

class SessionStatus(str, Enum):
    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class VerificationSummary:
    """Counts returned by the scoring webhook for one batch."""

    accept_count: int
    review_count: int
    reject_count: int
    average_score: float
    raw: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_response(cls, data: Any) -> "VerificationSummary":
        """Parse a webhook response body, raising :class:`DataError` on bad shapes."""

        if not isinstance(data, Mapping):
            raise DataError("Scoring webhook returned a non-object response")
        summary = data.get("summary")
        if not isinstance(summary, Mapping):
            raise DataError("Scoring webhook response is missing 'summary'")
        try:
            return cls(
                accept_count=int(summary.get("accept_count") or 0),
                review_count=int(summary.get("review_count") or 0),
                reject_count=int(summary.get("reject_count") or 0),
                average_score=float(summary.get("average_score") or 0.0),
                raw=dict(data),
            )
        except (TypeError, ValueError) as exc:
            raise DataError(f"Scoring webhook summary is malformed: {exc}") from exc

    @property
    def status_line(self) -> str:
        return (
            f"{self.accept_count} ACCEPT, {self.review_count} REVIEW, "
            f"{self.reject_count} REJECT, avg score {self.average_score:.2f}"
        )


@dataclass(frozen=True)
class Queued:
    pass


@dataclass(frozen=True)
class Running:
    started_at: datetime


@dataclass(frozen=True)
class Completed:
    started_at: datetime
    completed_at: datetime
    summary: VerificationSummary


@dataclass(frozen=True)
class Failed:
    completed_at: datetime
    error: str
    started_at: Optional[datetime] = None


SessionState = Union[Queued, Running, Completed, Failed]

_STATUS_BY_STATE = {
    Queued: SessionStatus.QUEUED,
    Running: SessionStatus.RUNNING,
    Completed: SessionStatus.COMPLETED,
    Failed: SessionStatus.FAILED,
}


@dataclass
class CleaningSession:
    """Durable record of one avatar verification batch."""

    owner_id: str
    avatar_spec: Dict[str, Any]
    avatar_id: str
    batch_id: str
    batch_size: int
    lead_count: int
    id: Optional[str] = None
    state: SessionState = field(default_factory=Queued)

    @property
    def status(self) -> SessionStatus:
        return _STATUS_BY_STATE[type(self.state)]

    @property
    def is_terminal(self) -> bool:
        return isinstance(self.state, (Completed, Failed))

    @property
    def started_at(self) -> Optional[datetime]:
        return getattr(self.state, "started_at", None)

    @property
    def completed_at(self) -> Optional[datetime]:
        return getattr(self.state, "completed_at", None)

    @property
    def summary(self) -> Optional[Dict[str, Any]]:
        if isinstance(self.state, Completed):
            return dict(self.state.summary.raw)
        if isinstance(self.state, Failed):
            return {"error": self.state.error}
        return None

    def start(self, now: datetime) -> None:
        if not isinstance(self.state, Queued):
            raise InvalidTransition(f"Cannot start a session that is {self.status.value}")
        self.state = Running(started_at=now)

    def complete(self, summary: VerificationSummary, now: datetime) -> None:
        if not isinstance(self.state, Running):
            raise InvalidTransition(f"Cannot complete a session that is {self.status.value}")
        self.state = Completed(started_at=self.state.started_at, completed_at=now, summary=summary)

    def fail(self, error: str, now: datetime) -> None:
        if self.is_terminal:
            raise InvalidTransition(f"Cannot fail a session that is {self.status.value}")
        self.state = Failed(completed_at=now, error=error, started_at=self.started_at)

    def to_record(self) -> Dict[str, Any]:
        """Return the fields used to create the session in the session store."""

        return {
            "owner_id": self.owner_id,
            "avatar_spec": self.avatar_spec,
            "avatar_id": self.avatar_id,
            "batch_id": self.batch_id,
            "batch_size": self.batch_size,
            "lead_count": self.lead_count,
            "status": self.status.value,
        }

    def state_fields(self) -> Dict[str, Any]:
        """Return the fields that changed with the latest state transition."""

        fields: Dict[str, Any] = {"status": self.status.value}
        if isinstance(self.state, Running):
            fields["started_at"] = self.state.started_at.isoformat()
        elif isinstance(self.state, (Completed, Failed)):
            fields["completed_at"] = self.state.completed_at.isoformat()
            fields["summary"] = self.summary
        return fields


@dataclass
class VerificationResult:
    """Caller-visible outcome of a verification session."""

    ok: bool
    session: Optional[CleaningSession]
    summary: Optional[VerificationSummary] = None
    error: Optional[str] = None

    @property
    def status_line(self) -> str:
        if self.summary is not None:
            return self.summary.status_line
        return ""

    @property
    def message(self) -> str:
        if self.ok:
            return f"Avatar verification completed! {self.status_line}"
        return f"Avatar verification failed: {self.error or 'Unknown error'}"
