"""Supabase backed lead and session stores.

Both stores talk to the tables used by the dashboard:

* ``list_leads`` rows are scoped by ``list_id`` and the owning ``user_id``.
* ``cleaning_sessions`` rows hold one verification batch each.

Client library and network errors are re-raised as :class:`~list_quality.errors.TransportError`.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

import httpx
from postgrest.exceptions import APIError
from supabase import Client, create_client

from ..errors import ConfigurationError, NotFoundError, TransportError
from ..models import Lead

LOGGER = logging.getLogger(__name__)

_COLUMN_NAMES = {
    "company": "company_name",
    "title": "job_title",
}

# postgrest reports query errors, httpx reports connection failures
_CLIENT_ERRORS = (APIError, httpx.HTTPError)


def _describe(exc: Exception) -> str:
    return getattr(exc, "message", None) or str(exc) or exc.__class__.__name__


def _build_client(client: Optional[Client], url: Optional[str], key: Optional[str]) -> Client:
    if client is not None:
        return client
    if not url or not key:
        raise ConfigurationError("Supabase stores require 'url' and 'key' options")
    return create_client(url, key)


class SupabaseLeadStore:
    """Lead store over the ``list_leads`` table."""

    def __init__(
        self,
        client: Optional[Client] = None,
        *,
        owner_id: str,
        url: Optional[str] = None,
        key: Optional[str] = None,
        table: str = "list_leads",
        page_size: int = 1000,
    ) -> None:
        if not owner_id:
            raise ConfigurationError("SupabaseLeadStore requires an 'owner_id'")
        self.client = _build_client(client, url, key)
        self._owner_id = owner_id
        self._table = table
        self._page_size = page_size

    def fetch_leads(self, list_id: str) -> List[Lead]:
        """Return every lead of the list, paging past the server's row cap."""

        rows: List[Dict[str, Any]] = []
        start = 0
        while True:
            try:
                result = (
                    self.client.table(self._table)
                    .select("*")
                    .eq("list_id", list_id)
                    .eq("user_id", self._owner_id)
                    .order("id")
                    .range(start, start + self._page_size - 1)
                    .execute()
                )
            except _CLIENT_ERRORS as exc:
                raise TransportError(f"Failed to fetch leads for list {list_id}: {_describe(exc)}") from exc
            page = result.data or []
            rows.extend(page)
            if len(page) < self._page_size:
                break
            start += self._page_size

        LOGGER.debug("Fetched %s leads for list %s", len(rows), list_id)
        return [Lead.from_row(row) for row in rows]

    def update_lead(self, lead_id: str, fields: Mapping[str, Any]) -> None:
        columns = {_COLUMN_NAMES.get(key, key): value for key, value in fields.items()}
        try:
            result = (
                self.client.table(self._table)
                .update(columns)
                .eq("id", lead_id)
                .eq("user_id", self._owner_id)
                .execute()
            )
        except _CLIENT_ERRORS as exc:
            raise TransportError(f"Failed to update lead {lead_id}: {_describe(exc)}") from exc
        if not result.data:
            raise NotFoundError(lead_id)

    def delete_leads(self, lead_ids: Sequence[str]) -> int:
        ids = list(lead_ids)
        if not ids:
            return 0
        try:
            result = (
                self.client.table(self._table)
                .delete()
                .in_("id", ids)
                .eq("user_id", self._owner_id)
                .execute()
            )
        except _CLIENT_ERRORS as exc:
            raise TransportError(f"Failed to delete {len(ids)} leads: {_describe(exc)}") from exc
        return len(result.data or [])


class SupabaseSessionStore:
    """Session store over the ``cleaning_sessions`` table."""

    def __init__(
        self,
        client: Optional[Client] = None,
        *,
        url: Optional[str] = None,
        key: Optional[str] = None,
        table: str = "cleaning_sessions",
    ) -> None:
        self.client = _build_client(client, url, key)
        self._table = table

    def create_session(self, fields: Mapping[str, Any]) -> Dict[str, Any]:
        try:
            result = self.client.table(self._table).insert(dict(fields)).execute()
        except _CLIENT_ERRORS as exc:
            raise TransportError(f"Failed to create cleaning session: {_describe(exc)}") from exc
        if not result.data:
            raise TransportError("Session store returned no row for the new cleaning session")
        return dict(result.data[0])

    def update_session(self, session_id: str, fields: Mapping[str, Any]) -> None:
        try:
            result = self.client.table(self._table).update(dict(fields)).eq("id", session_id).execute()
        except _CLIENT_ERRORS as exc:
            raise TransportError(f"Failed to update cleaning session {session_id}: {_describe(exc)}") from exc
        if not result.data:
            raise NotFoundError(session_id, kind="session")


__all__ = ["SupabaseLeadStore", "SupabaseSessionStore"]
