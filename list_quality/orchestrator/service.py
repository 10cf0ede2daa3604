"""Verification orchestrator that scores a list against an avatar."""
from __future__ import annotations

import logging
import random
import re
import string
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Protocol

from ..avatar import validate_avatar
from ..errors import EmptyListError, TransportError
from ..models import (
    AvatarSpec,
    CleaningSession,
    Completed,
    Running,
    VerificationResult,
    VerificationSummary,
)
from ..stores.base import LeadStore, SessionStore
from .payload import build_lead_batch

LOGGER = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 500

Clock = Callable[[], datetime]


class WebhookProtocol(Protocol):
    """Interface of the scoring webhook client."""

    def submit(self, payload: Mapping[str, Any]) -> Dict[str, Any]:  # pragma: no cover - runtime protocol
        """Send a batch and return the decoded response."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _epoch_ms(now: datetime) -> int:
    return int(now.timestamp() * 1000)


def make_batch_id(now: datetime) -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"batch_{_epoch_ms(now)}_{suffix}"


def make_avatar_id(name: str, now: datetime) -> str:
    slug = re.sub(r"[^a-zA-Z0-9]", "", name or "").lower()
    return slug or f"avatar_{_epoch_ms(now)}"


def _user_message(exc: BaseException) -> str:
    if isinstance(exc, TransportError) and exc.status_code is not None:
        return f"Webhook failed: {exc.status_code}"
    return str(exc) or exc.__class__.__name__


class VerificationOrchestrator:
    """Runs one verification session per call to :meth:`verify`.

    The session moves ``queued -> running -> completed | failed``. Once a
    session exists every failure is recorded on it, so no session is left in
    ``running``; failures before creation propagate to the caller and leave
    nothing behind.
    """

    def __init__(
        self,
        lead_store: LeadStore,
        session_store: SessionStore,
        webhook: WebhookProtocol,
        *,
        owner_id: str,
        batch_size: int = DEFAULT_BATCH_SIZE,
        clock: Clock = _utcnow,
    ) -> None:
        self._lead_store = lead_store
        self._session_store = session_store
        self._webhook = webhook
        self._owner_id = owner_id
        self._batch_size = batch_size
        self._clock = clock

    def verify(self, list_id: str, avatar: AvatarSpec) -> VerificationResult:
        validate_avatar(avatar)
        leads = self._lead_store.fetch_leads(list_id)
        if not leads:
            raise EmptyListError(list_id)

        now = self._clock()
        session = CleaningSession(
            owner_id=self._owner_id,
            avatar_spec=avatar.to_payload(),
            avatar_id=make_avatar_id(avatar.name, now),
            batch_id=make_batch_id(now),
            batch_size=self._batch_size,
            lead_count=len(leads),
        )
        row = self._session_store.create_session(session.to_record())
        session.id = str(row["id"])
        LOGGER.info("Queued verification session %s (batch %s) for %s leads", session.id, session.batch_id, len(leads))

        try:
            session.start(self._clock())
            self._session_store.update_session(session.id, session.state_fields())

            payload = {
                "avatar": session.avatar_spec,
                "avatar_id": session.avatar_id,
                "batch_id": session.batch_id,
                "batch_size": session.batch_size,
                "leads": build_lead_batch(leads),
            }
            if len(payload["leads"]) < len(leads):
                LOGGER.warning("Dropped %s leads without an id from batch %s", len(leads) - len(payload["leads"]), session.batch_id)

            response = self._webhook.submit(payload)
            summary = VerificationSummary.from_response(response)
            session.complete(summary, self._clock())
            self._session_store.update_session(session.id, session.state_fields())
        except Exception as exc:
            LOGGER.exception("Verification session %s failed", session.id)
            return self._fail(session, exc)

        LOGGER.info("Verification session %s completed: %s", session.id, summary.status_line)
        return VerificationResult(ok=True, session=session, summary=summary)

    def _fail(self, session: CleaningSession, exc: BaseException) -> VerificationResult:
        if isinstance(session.state, Completed):
            # completion was never persisted
            session.state = Running(started_at=session.state.started_at)
        session.fail(str(exc) or exc.__class__.__name__, self._clock())
        try:
            self._session_store.update_session(session.id, session.state_fields())
        except Exception:
            LOGGER.exception("Could not record failure of verification session %s", session.id)
        return VerificationResult(ok=False, session=session, error=_user_message(exc))


__all__ = [
    "DEFAULT_BATCH_SIZE",
    "VerificationOrchestrator",
    "WebhookProtocol",
    "make_avatar_id",
    "make_batch_id",
]
