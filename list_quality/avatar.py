"""Derivation and validation of ideal-customer avatar specs.

Free text is matched against fixed keyword tables; nothing here guesses or
scores, so the same description always produces the same spec. Each category
is extracted independently and unmatched categories stay empty.
"""
from __future__ import annotations

import copy
import logging
import re
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .errors import ValidationError
from .models import AvatarSpec, EmployeeRange

LOGGER = logging.getLogger(__name__)

DEFAULT_AVATAR_NAME = "Custom Avatar"
MAX_NAME_LENGTH = 50

# keyword -> display label; several keywords may share a label
GEOGRAPHY: Dict[str, str] = {
    "nyc": "New York",
    "new york": "New York",
    "san francisco": "San Francisco",
    "sf": "San Francisco",
    "bay area": "Bay Area",
    "los angeles": "Los Angeles",
    "chicago": "Chicago",
    "boston": "Boston",
    "seattle": "Seattle",
    "austin": "Austin",
    "denver": "Denver",
    "atlanta": "Atlanta",
    "miami": "Miami",
    "dallas": "Dallas",
    "houston": "Houston",
    "phoenix": "Phoenix",
    "philadelphia": "Philadelphia",
    "detroit": "Detroit",
    "washington dc": "Washington DC",
    "portland": "Portland",
    "nashville": "Nashville",
    "charlotte": "Charlotte",
    "raleigh": "Raleigh",
    "tampa": "Tampa",
    "orlando": "Orlando",
    "las vegas": "Las Vegas",
    "salt lake city": "Salt Lake City",
    "minneapolis": "Minneapolis",
    "kansas city": "Kansas City",
    "columbus": "Columbus",
    "indianapolis": "Indianapolis",
    "new orleans": "New Orleans",
    "us": "United States",
    "usa": "United States",
    "united states": "United States",
    "north america": "North America",
    "canada": "Canada",
    "toronto": "Toronto",
    "vancouver": "Vancouver",
    "montreal": "Montreal",
    "calgary": "Calgary",
    "ottawa": "Ottawa",
    "uk": "United Kingdom",
    "united kingdom": "United Kingdom",
    "london": "London",
    "europe": "Europe",
    "australia": "Australia",
}

INDUSTRIES: Dict[str, Tuple[str, ...]] = {
    "Technology": ("tech", "software", "saas", "ai", "fintech", "edtech", "proptech", "martech"),
    "Healthcare": ("healthcare", "medical", "pharma", "biotech", "health"),
    "Financial Services": ("finance", "banking", "investment", "insurance", "wealth"),
    "Professional Services": ("consulting", "legal", "accounting", "advisory"),
    "Manufacturing": ("manufacturing", "industrial", "automotive"),
    "Retail": ("retail", "e-commerce", "ecommerce", "consumer"),
    "Real Estate": ("real estate", "property", "construction"),
    "Education": ("education", "university", "school", "training"),
}

SIZE_BUCKETS: Sequence[Tuple[Tuple[str, ...], EmployeeRange]] = (
    (("startup", "small"), EmployeeRange(min=1, max=50)),
    (("medium", "mid-size", "midsize"), EmployeeRange(min=51, max=200)),
    (("large", "enterprise"), EmployeeRange(min=201, max=None)),
)

PRIMARY_ROLES: Dict[str, str] = {
    "founder": "Founder",
    "co-founder": "Co-Founder",
    "ceo": "CEO",
    "owner": "Owner",
    "president": "President",
    "managing director": "Managing Director",
    "managing partner": "Managing Partner",
}

SECONDARY_ROLES: Dict[str, str] = {
    "vp": "VP",
    "vice president": "Vice President",
    "head": "Head",
    "director": "Director",
    "c-suite": "C-Suite",
    "cto": "CTO",
    "cfo": "CFO",
    "cmo": "CMO",
    "coo": "COO",
}

INTENT_SIGNALS: Dict[str, str] = {
    "hiring": "Hiring since Aug 2025",
    "recruiting": "Hiring since Aug 2025",
    "growth": "Expansion",
    "expanding": "Expansion",
    "funding": "Recent funding",
    "raised": "Recent funding",
}

TECH_SIGNALS: Dict[str, str] = {
    "hubspot": "Hubspot",
    "salesforce": "Salesforce",
    "calendly": "Calendly",
    "wordpress": "Wordpress",
    "shopify": "Shopify",
    "stripe": "Stripe",
    "slack": "Slack",
    "zoom": "Zoom",
    "microsoft": "Microsoft",
    "google workspace": "Google Workspace",
}

_EMPLOYEE_RANGE = re.compile(r"(\d+)\s*[-–]\s*(\d+)\s*employees?")
_REVENUE_PATTERNS = (
    re.compile(r"\$(\d+)([mk]?)\+?\s*(?:in\s+)?(?:annual\s+)?revenue"),
    re.compile(r"revenue\s*(?:of\s*|over\s*|above\s*)?\$(\d+)([mk]?)"),
)
_REVENUE_SCALE = {"m": 1_000_000, "k": 1_000, "": 1}
_SHORT_KEYWORD_LENGTH = 3
_WHOLE_WORD_KEYWORDS = {"head"}


def _keyword_pattern(keyword: str) -> re.Pattern[str]:
    escaped = re.escape(keyword)
    if len(keyword) <= _SHORT_KEYWORD_LENGTH or keyword in _WHOLE_WORD_KEYWORDS:
        # short keys only match as whole words, optionally pluralised
        return re.compile(rf"(?<![a-z0-9]){escaped}(?:s|es)?(?![a-z0-9])")
    return re.compile(rf"(?<![a-z0-9]){escaped}")


def _mentions(text: str, keyword: str) -> bool:
    return bool(_keyword_pattern(keyword).search(text))


def _append_unique(target: List[str], value: str) -> None:
    if value not in target:
        target.append(value)


def _collect(text: str, table: Mapping[str, str], target: List[str]) -> None:
    for keyword, label in table.items():
        if _mentions(text, keyword):
            _append_unique(target, label)


def derive_name(description: str) -> str:
    first_sentence = description.split(".")[0].strip()
    if not first_sentence:
        return DEFAULT_AVATAR_NAME
    if len(first_sentence) > MAX_NAME_LENGTH:
        return first_sentence[: MAX_NAME_LENGTH - 3] + "..."
    return first_sentence


def extract_employee_range(text: str) -> EmployeeRange:
    match = _EMPLOYEE_RANGE.search(text)
    if match:
        return EmployeeRange(min=int(match.group(1)), max=int(match.group(2)))
    for keywords, bucket in SIZE_BUCKETS:
        if any(_mentions(text, keyword) for keyword in keywords):
            return EmployeeRange(min=bucket.min, max=bucket.max)
    return EmployeeRange()


def extract_revenue_min(text: str) -> Optional[int]:
    for pattern in _REVENUE_PATTERNS:
        match = pattern.search(text)
        if match:
            return int(match.group(1)) * _REVENUE_SCALE[match.group(2)]
    return None


def extract_avatar(description: str, *, base: Optional[AvatarSpec] = None) -> AvatarSpec:
    """Turn a free-form description into an :class:`AvatarSpec`.

    ``base`` supplies the non-extracted settings (exclusions, contact rules,
    weighting, thresholds); the defaults are used when it is omitted.
    """

    text = description.lower()
    template = base or AvatarSpec()
    spec = AvatarSpec(
        name=derive_name(description),
        exclude_title_substrings=list(template.exclude_title_substrings),
        contact_rules=copy.copy(template.contact_rules),
        weighting=copy.copy(template.weighting),
        thresholds=copy.copy(template.thresholds),
    )

    _collect(text, GEOGRAPHY, spec.geography)
    for industry, keywords in INDUSTRIES.items():
        if any(_mentions(text, keyword) for keyword in keywords):
            _append_unique(spec.industries, industry)
    spec.employee_range = extract_employee_range(text)
    spec.revenue_min_usd = extract_revenue_min(text)
    _collect(text, PRIMARY_ROLES, spec.roles_primary)
    _collect(text, SECONDARY_ROLES, spec.roles_secondary)
    _collect(text, INTENT_SIGNALS, spec.intent_signals)
    _collect(text, TECH_SIGNALS, spec.tech_signals)

    LOGGER.debug(
        "Extracted avatar '%s': %s geographies, %s industries, %s primary roles",
        spec.name,
        len(spec.geography),
        len(spec.industries),
        len(spec.roles_primary),
    )
    return spec


def validate_avatar(spec: AvatarSpec) -> AvatarSpec:
    """Check the minimum an avatar needs before it can be scored against."""

    if not spec.name or not spec.name.strip():
        raise ValidationError("name", "Avatar name is required")
    if not spec.geography and not spec.industries:
        raise ValidationError("geography", "Please specify either geography or industries")
    if not spec.roles_primary:
        raise ValidationError("roles_primary", "At least one primary role is required (roles_primary)")
    if spec.thresholds.accept_min < spec.thresholds.review_min:
        raise ValidationError("thresholds", "Accept threshold must not be lower than the review threshold")
    return spec


class AvatarExtractor:
    """Entry point accepting either a structured form or a description."""

    def __init__(self, base: Optional[AvatarSpec] = None) -> None:
        self._base = base

    def from_form(self, form: Union[AvatarSpec, Mapping[str, Any]]) -> AvatarSpec:
        spec = form if isinstance(form, AvatarSpec) else AvatarSpec.from_mapping(form)
        return validate_avatar(spec)

    def from_text(self, description: str) -> AvatarSpec:
        """Best-effort extraction; the result is not validated."""

        if not description or not description.strip():
            raise ValidationError("description", "Please provide an avatar description")
        return extract_avatar(description, base=self._base)

    def resolve(
        self,
        *,
        form: Union[AvatarSpec, Mapping[str, Any], None] = None,
        description: Optional[str] = None,
    ) -> AvatarSpec:
        """Produce a validated spec from exactly one of ``form`` or ``description``."""

        if (form is None) == (description is None):
            raise ValidationError("avatar", "Provide either a structured avatar or a description, not both")
        if form is not None:
            return self.from_form(form)
        return validate_avatar(self.from_text(description or ""))


__all__ = [
    "AvatarExtractor",
    "DEFAULT_AVATAR_NAME",
    "derive_name",
    "extract_avatar",
    "extract_employee_range",
    "extract_revenue_min",
    "validate_avatar",
]
