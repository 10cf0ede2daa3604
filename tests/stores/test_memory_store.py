"""Tests for the in-memory stores."""
from __future__ import annotations

import pytest

from list_quality.errors import NotFoundError
from list_quality.models import Lead
from list_quality.stores import InMemoryLeadStore, InMemorySessionStore, LeadStore, SessionStore


def test_lead_store_round_trip() -> None:
    store = InMemoryLeadStore({"list-1": [Lead(id="a", name="Ada"), Lead(id="b", name="Bea")]})
    store.add_leads("list-2", [Lead(id="c")])

    assert [lead.id for lead in store.fetch_leads("list-1")] == ["a", "b"]
    assert [lead.id for lead in store.fetch_leads("list-2")] == ["c"]
    assert store.fetch_leads("missing") == []


def test_fetched_leads_are_copies() -> None:
    store = InMemoryLeadStore({"list-1": [Lead(id="a", name="Ada")]})

    store.fetch_leads("list-1")[0].name = "Changed"

    assert store.get("a").name == "Ada"


def test_update_lead() -> None:
    store = InMemoryLeadStore({"list-1": [Lead(id="a", phone="555")]})

    store.update_lead("a", {"phone": "+15551234567"})

    assert store.get("a").phone == "+15551234567"
    with pytest.raises(NotFoundError):
        store.update_lead("zzz", {"phone": "1"})
    with pytest.raises(ValueError):
        store.update_lead("a", {"shoe_size": 9})


def test_delete_leads_counts_existing_only() -> None:
    store = InMemoryLeadStore({"list-1": [Lead(id="a"), Lead(id="b"), Lead(id="c")]})

    assert store.delete_leads(["a", "c", "ghost"]) == 2
    assert store.delete_leads(["a"]) == 0
    assert [lead.id for lead in store.fetch_leads("list-1")] == ["b"]


def test_session_store() -> None:
    store = InMemorySessionStore()

    row = store.create_session({"status": "queued", "lead_count": 3})
    store.update_session(row["id"], {"status": "running"})

    assert store.sessions[row["id"]] == {"id": row["id"], "status": "running", "lead_count": 3}
    with pytest.raises(NotFoundError) as excinfo:
        store.update_session("missing", {"status": "failed"})
    assert excinfo.value.kind == "session"


def test_memory_stores_satisfy_protocols() -> None:
    lead_store: LeadStore = InMemoryLeadStore()
    session_store: SessionStore = InMemorySessionStore()

    assert lead_store.fetch_leads("x") == []
    assert session_store.create_session({})["id"]
