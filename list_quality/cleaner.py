"""Applies remediation steps planned by a :class:`CleaningAnalysis`.

Steps run sequentially in :class:`CleaningStep` order and every store call is
finished before the next one starts. A record that vanished after the
analysis was taken is skipped; any other failure stops the run with
:class:`CleaningAborted` without undoing the steps already committed.
"""
from __future__ import annotations

import logging
from typing import Callable, List, Optional, Set

from .errors import CleaningAborted, NotFoundError, ValidationError
from .models import (
    FALLBACK_NAME,
    PLACEHOLDER_NAME,
    CleaningAnalysis,
    CleaningOptions,
    CleaningProgress,
    CleaningResult,
    CleaningStep,
    DuplicateGroup,
    IssueRecord,
    Lead,
)
from .normalize import title_case
from .stores.base import LeadStore

LOGGER = logging.getLogger(__name__)

ProgressCallback = Callable[[CleaningProgress], None]

_STEP_ORDER = list(CleaningStep)
_REFETCHING_STEPS = {CleaningStep.REMOVE_EMPTY_LEADS, CleaningStep.STANDARDIZE_NAMES}


def standardized_name(name: Optional[str]) -> Optional[str]:
    """Return the replacement for ``name`` or ``None`` when it is already fine."""

    text = (name or "").strip()
    if not text or text == PLACEHOLDER_NAME:
        return FALLBACK_NAME
    if text.isupper() or text.islower():
        candidate = title_case(text)
        return candidate if candidate != name else None
    return None


class _ProgressTracker:
    def __init__(self, total: int, callback: Optional[ProgressCallback]) -> None:
        self.total = total
        self.completed = 0
        self._callback = callback
        self._step: Optional[CleaningStep] = None

    def begin(self, step: CleaningStep) -> None:
        self._step = step
        self._emit()

    def adjust(self, estimated: int, actual: int) -> None:
        self.total += actual - estimated

    def tick(self) -> None:
        self.completed += 1
        self._emit()

    def _emit(self) -> None:
        if self._callback is None or self._step is None:
            return
        self._callback(
            CleaningProgress(
                step_label=self._step.label,
                completed=self.completed,
                total=self.total,
                current_action=self._step.action,
            )
        )


class Cleaner:
    """Executes the selected cleaning steps against a lead store."""

    def __init__(self, lead_store: LeadStore) -> None:
        self._lead_store = lead_store

    def clean(
        self,
        analysis: CleaningAnalysis,
        options: Optional[CleaningOptions] = None,
        *,
        progress: Optional[ProgressCallback] = None,
        resume_from: Optional[CleaningStep] = None,
    ) -> CleaningResult:
        """Run the selected steps and return what changed.

        ``resume_from`` skips every step ordered before it, which lets a caller
        continue a run that raised :class:`CleaningAborted`.
        """

        options = options or CleaningOptions()
        steps = options.selected_steps()
        if resume_from is not None:
            first = _STEP_ORDER.index(resume_from)
            steps = [step for step in steps if _STEP_ORDER.index(step) >= first]

        if analysis.list_id is None and _REFETCHING_STEPS.intersection(steps):
            raise ValidationError("list_id", "The analysis has no list id to re-fetch leads from")

        tracker = _ProgressTracker(sum(self._estimate(analysis, step) for step in steps), progress)
        result = CleaningResult()
        removed: Set[str] = set()

        for step in steps:
            LOGGER.info("%s for list %s", step.label, analysis.list_id)
            tracker.begin(step)
            try:
                self._run_step(step, analysis, result, removed, tracker)
            except Exception as exc:
                LOGGER.exception("Cleaning step '%s' failed for list %s", step.label, analysis.list_id)
                raise CleaningAborted(step, result, exc) from exc
            result.steps_completed.append(step)

        LOGGER.info(
            "Cleaned list %s: %s phones fixed, %s duplicates removed, %s emails fixed, %s skipped",
            analysis.list_id,
            result.phones_fixed,
            result.duplicates_removed,
            result.emails_fixed,
            result.skipped,
        )
        return result

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------
    def _run_step(
        self,
        step: CleaningStep,
        analysis: CleaningAnalysis,
        result: CleaningResult,
        removed: Set[str],
        tracker: _ProgressTracker,
    ) -> None:
        if step is CleaningStep.FIX_PHONE_FORMATS:
            result.phones_fixed += self._apply_fixes(analysis.phone_issues, removed, result, tracker)
        elif step is CleaningStep.REMOVE_DUPLICATE_PHONES:
            result.duplicates_removed += self._remove_duplicates(analysis.phone_groups, removed, result, tracker)
        elif step is CleaningStep.REMOVE_DUPLICATE_EMAILS:
            result.duplicates_removed += self._remove_duplicates(analysis.email_groups, removed, result, tracker)
        elif step is CleaningStep.FIX_EMAIL_FORMATS:
            result.emails_fixed += self._apply_fixes(analysis.email_issues, removed, result, tracker)
        elif step is CleaningStep.REMOVE_EMPTY_LEADS:
            result.empty_leads_removed += self._remove_empty_leads(analysis, removed, result, tracker)
        elif step is CleaningStep.STANDARDIZE_NAMES:
            result.names_standardized += self._standardize_names(analysis, result, tracker)

    def _apply_fixes(
        self,
        issues: List[IssueRecord],
        removed: Set[str],
        result: CleaningResult,
        tracker: _ProgressTracker,
    ) -> int:
        fixed = 0
        for issue in issues:
            if not issue.lead_id or issue.lead_id in removed:
                result.skipped += 1
            elif issue.suggested_fix == issue.current_value:
                LOGGER.warning(
                    "Not applying %s fix for lead %s: %r would leave the value unchanged",
                    issue.field_name,
                    issue.lead_id,
                    issue.suggested_fix,
                )
                result.skipped += 1
            elif not issue.fix_is_valid:
                LOGGER.warning(
                    "Not applying %s fix for lead %s: %r does not validate",
                    issue.field_name,
                    issue.lead_id,
                    issue.suggested_fix,
                )
                result.skipped += 1
            else:
                try:
                    self._lead_store.update_lead(issue.lead_id, {issue.field_name: issue.suggested_fix})
                    fixed += 1
                except NotFoundError:
                    LOGGER.warning("Lead %s disappeared before its %s could be fixed", issue.lead_id, issue.field_name)
                    removed.add(issue.lead_id)
                    result.skipped += 1
            tracker.tick()
        return fixed

    def _remove_duplicates(
        self,
        groups: List[DuplicateGroup],
        removed: Set[str],
        result: CleaningResult,
        tracker: _ProgressTracker,
    ) -> int:
        deleted = 0
        for group in groups:
            survivors = [lead_id for lead_id in group.member_lead_ids if lead_id and lead_id not in removed]
            doomed = survivors[1:]
            if doomed:
                count = self._delete(doomed)
                removed.update(doomed)
                deleted += count
                result.skipped += len(doomed) - count
            tracker.tick()
        return deleted

    def _remove_empty_leads(
        self,
        analysis: CleaningAnalysis,
        removed: Set[str],
        result: CleaningResult,
        tracker: _ProgressTracker,
    ) -> int:
        leads = self._lead_store.fetch_leads(analysis.list_id)
        empty = [lead for lead in leads if lead.id and not lead.has_phone and not lead.has_email]
        tracker.adjust(analysis.missing_contact, len(empty))

        deleted = 0
        for lead in empty:
            count = self._delete([lead.id])
            removed.add(lead.id)
            deleted += count
            result.skipped += 1 - count
            tracker.tick()
        return deleted

    def _standardize_names(
        self,
        analysis: CleaningAnalysis,
        result: CleaningResult,
        tracker: _ProgressTracker,
    ) -> int:
        leads: List[Lead] = self._lead_store.fetch_leads(analysis.list_id)
        targets = [(lead, standardized_name(lead.name)) for lead in leads if lead.id]
        targets = [(lead, name) for lead, name in targets if name is not None]
        tracker.adjust(analysis.missing_names, len(targets))

        updated = 0
        for lead, name in targets:
            try:
                self._lead_store.update_lead(lead.id, {"name": name})
                updated += 1
            except NotFoundError:
                LOGGER.warning("Lead %s disappeared before its name could be standardized", lead.id)
                result.skipped += 1
            tracker.tick()
        return updated

    # ------------------------------------------------------------------
    def _delete(self, lead_ids: List[str]) -> int:
        try:
            return self._lead_store.delete_leads(lead_ids)
        except NotFoundError:
            LOGGER.warning("Leads %s were already deleted", ", ".join(lead_ids))
            return 0

    @staticmethod
    def _estimate(analysis: CleaningAnalysis, step: CleaningStep) -> int:
        if step is CleaningStep.FIX_PHONE_FORMATS:
            return len(analysis.phone_issues)
        if step is CleaningStep.REMOVE_DUPLICATE_PHONES:
            return len(analysis.phone_groups)
        if step is CleaningStep.REMOVE_DUPLICATE_EMAILS:
            return len(analysis.email_groups)
        if step is CleaningStep.FIX_EMAIL_FORMATS:
            return len(analysis.email_issues)
        if step is CleaningStep.REMOVE_EMPTY_LEADS:
            return analysis.missing_contact
        return analysis.missing_names


__all__ = ["Cleaner", "ProgressCallback", "standardized_name"]
