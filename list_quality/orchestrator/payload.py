"""Translation of leads into the scoring webhook's batch format."""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import urlparse

from ..models import Lead
from ..normalize import MIN_PHONE_DIGITS, dialable, normalize_email


def _company_domain(source_url: Optional[str]) -> str:
    if not source_url:
        return ""
    try:
        return (urlparse(source_url).hostname or "").lower()
    except ValueError:
        return ""


def lead_to_payload(lead: Lead) -> Dict[str, Any]:
    """Return the scoring representation of one lead."""

    emails: List[str] = []
    if lead.has_email:
        check = normalize_email(lead.email)
        if normalize_email(check.clean).is_valid:
            emails.append(check.clean)

    phones: List[str] = []
    if lead.has_phone:
        phone = dialable(lead.phone)
        if len(phone) >= MIN_PHONE_DIGITS:
            phones.append(phone)

    full_name = (lead.name or "").strip()
    first_name, _, last_name = full_name.partition(" ")
    custom = lead.custom_fields or {}

    return {
        "id": lead.id,
        "emails": emails,
        "phones": phones,
        "full_name": full_name,
        "first_name": first_name,
        "last_name": last_name.strip(),
        "title": lead.title or "",
        "company": lead.company or "",
        "company_domain": _company_domain(lead.source_url),
        "linkedin_url": lead.source_url or "",
        "source_slug": lead.source_platform or "manual",
        "country": str(custom.get("country") or ""),
        "state": str(custom.get("state") or ""),
        "city": str(custom.get("city") or ""),
        "site_signals": [],
        "social_signals": [],
        "tech_stack": [],
    }


def build_lead_batch(leads: Iterable[Lead]) -> List[Dict[str, Any]]:
    """Convert leads, dropping any without an id."""

    return [lead_to_payload(lead) for lead in leads if lead.id]


__all__ = ["build_lead_batch", "lead_to_payload"]
