"""Interfaces the engine expects from the lead and session stores."""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Protocol, Sequence

from ..models import Lead


class LeadStore(Protocol):
    """Owner-scoped access to the leads of a list."""

    def fetch_leads(self, list_id: str) -> List[Lead]:  # pragma: no cover - runtime protocol
        """Return every lead of ``list_id``; no pagination is exposed to callers."""

    def update_lead(self, lead_id: str, fields: Mapping[str, Any]) -> None:  # pragma: no cover - runtime protocol
        """Update a lead, raising :class:`~list_quality.errors.NotFoundError` if it is gone."""

    def delete_leads(self, lead_ids: Sequence[str]) -> int:  # pragma: no cover - runtime protocol
        """Delete leads and return how many rows were actually removed."""


class SessionStore(Protocol):
    """Persistence for verification session records."""

    def create_session(self, fields: Mapping[str, Any]) -> Dict[str, Any]:  # pragma: no cover - runtime protocol
        """Insert a session and return the stored row including its ``id``."""

    def update_session(self, session_id: str, fields: Mapping[str, Any]) -> None:  # pragma: no cover - runtime protocol
        """Update an existing session row."""
