"""Duplicate and format analysis over the complete set of leads in a list."""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List

from .errors import AnalysisError, ListQualityError
from .models import CleaningAnalysis, DuplicateGroup, IssueRecord, Lead
from .normalize import is_valid_phone, normalize_email, normalize_phone
from .stores.base import LeadStore

LOGGER = logging.getLogger(__name__)

INVALID_FORMAT = "Invalid format"


def analyze_leads(leads: Iterable[Lead], *, list_id: str | None = None) -> CleaningAnalysis:
    """Scan ``leads`` once and collect duplicate groups and format issues."""

    analysis = CleaningAnalysis(list_id=list_id)
    phone_map: Dict[str, List[str]] = {}
    email_map: Dict[str, List[str]] = {}

    for lead in leads:
        analysis.total_leads += 1
        lead_id = lead.id or ""

        if not lead.has_name:
            analysis.missing_names += 1
        if not lead.has_company:
            analysis.missing_companies += 1
        if not lead.has_phone and not lead.has_email:
            analysis.missing_contact += 1

        if not lead.has_phone:
            analysis.missing_phones += 1
        else:
            check = normalize_phone(lead.phone)
            if check.can_match:
                phone_map.setdefault(check.clean, []).append(lead_id)
            if not check.is_valid:
                analysis.invalid_phones += 1
                analysis.phone_issues.append(
                    IssueRecord(
                        lead_id=lead_id,
                        field_name="phone",
                        current_value=str(lead.phone),
                        issue_kind=INVALID_FORMAT,
                        suggested_fix=check.suggested_fix,
                        fix_is_valid=is_valid_phone(check.suggested_fix),
                        lead_name=lead.display_name(),
                    )
                )

        if not lead.has_email:
            analysis.missing_emails += 1
        else:
            check = normalize_email(lead.email)
            email_map.setdefault(check.clean, []).append(lead_id)
            if not check.is_valid:
                analysis.invalid_emails += 1
                analysis.email_issues.append(
                    IssueRecord(
                        lead_id=lead_id,
                        field_name="email",
                        current_value=str(lead.email),
                        issue_kind=INVALID_FORMAT,
                        suggested_fix=check.clean,
                        fix_is_valid=normalize_email(check.clean).is_valid,
                        lead_name=lead.display_name(),
                    )
                )

    for kind, dedup_map in (("phone", phone_map), ("email", email_map)):
        for value, lead_ids in dedup_map.items():
            if len(lead_ids) < 2:
                continue
            analysis.duplicate_groups.append(
                DuplicateGroup(field_kind=kind, canonical_value=value, member_lead_ids=list(lead_ids))
            )

    analysis.duplicate_phones = sum(group.count - 1 for group in analysis.phone_groups)
    analysis.duplicate_emails = sum(group.count - 1 for group in analysis.email_groups)
    return analysis


class ListAnalyzer:
    """Fetches every lead of a list and analyses it."""

    def __init__(self, lead_store: LeadStore) -> None:
        self._lead_store = lead_store

    def analyze(self, list_id: str) -> CleaningAnalysis:
        try:
            leads = self._lead_store.fetch_leads(list_id)
        except ListQualityError as exc:
            LOGGER.exception("Error analyzing list %s", list_id)
            raise AnalysisError("Failed to analyze list data") from exc

        analysis = analyze_leads(leads, list_id=list_id)
        LOGGER.info(
            "Analyzed list %s: %s leads, %s duplicate groups, quality score %s",
            list_id,
            analysis.total_leads,
            len(analysis.duplicate_groups),
            analysis.quality_score,
        )
        return analysis


__all__ = ["INVALID_FORMAT", "ListAnalyzer", "analyze_leads"]
