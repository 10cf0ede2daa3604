"""In-process stores used for tests, demos and dry runs."""
from __future__ import annotations

import copy
import threading
import uuid
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from ..errors import NotFoundError
from ..models import Lead


class InMemoryLeadStore:
    """Lead store keeping leads per list in insertion order."""

    def __init__(self, leads_by_list: Optional[Mapping[str, Iterable[Lead]]] = None) -> None:
        self._lock = threading.Lock()
        self._lists: Dict[str, List[Lead]] = {}
        for list_id, leads in (leads_by_list or {}).items():
            self.add_leads(list_id, leads)

    def add_leads(self, list_id: str, leads: Iterable[Lead]) -> None:
        with self._lock:
            self._lists.setdefault(list_id, []).extend(copy.deepcopy(list(leads)))

    def fetch_leads(self, list_id: str) -> List[Lead]:
        with self._lock:
            return copy.deepcopy(self._lists.get(list_id, []))

    def update_lead(self, lead_id: str, fields: Mapping[str, Any]) -> None:
        with self._lock:
            lead = self._find(lead_id)
            if lead is None:
                raise NotFoundError(lead_id)
            for key, value in fields.items():
                if not hasattr(lead, key):
                    raise ValueError(f"Lead has no field '{key}'")
                setattr(lead, key, value)

    def delete_leads(self, lead_ids: Sequence[str]) -> int:
        targets = set(lead_ids)
        removed = 0
        with self._lock:
            for list_id, leads in self._lists.items():
                kept = [lead for lead in leads if lead.id not in targets]
                removed += len(leads) - len(kept)
                self._lists[list_id] = kept
        return removed

    def get(self, lead_id: str) -> Optional[Lead]:
        with self._lock:
            lead = self._find(lead_id)
            return copy.deepcopy(lead) if lead is not None else None

    def _find(self, lead_id: str) -> Optional[Lead]:
        for leads in self._lists.values():
            for lead in leads:
                if lead.id == lead_id:
                    return lead
        return None


class InMemorySessionStore:
    """Session store assigning UUID4 ids and keeping rows as dictionaries."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.sessions: Dict[str, Dict[str, Any]] = {}

    def create_session(self, fields: Mapping[str, Any]) -> Dict[str, Any]:
        session_id = str(uuid.uuid4())
        row = {"id": session_id, **copy.deepcopy(dict(fields))}
        with self._lock:
            self.sessions[session_id] = row
        return dict(row)

    def update_session(self, session_id: str, fields: Mapping[str, Any]) -> None:
        with self._lock:
            row = self.sessions.get(session_id)
            if row is None:
                raise NotFoundError(session_id, kind="session")
            row.update(copy.deepcopy(dict(fields)))
