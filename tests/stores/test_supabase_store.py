"""Tests for the Supabase stores using a mocked client."""
from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

pytest.importorskip("supabase")

import httpx  # noqa: E402
from postgrest.exceptions import APIError  # noqa: E402

from list_quality.analysis import ListAnalyzer  # noqa: E402
from list_quality.errors import AnalysisError, ConfigurationError, NotFoundError, TransportError  # noqa: E402
from list_quality.stores.supabase import SupabaseLeadStore, SupabaseSessionStore  # noqa: E402


def result(data):
    return SimpleNamespace(data=data)


def select_chain(client: MagicMock) -> MagicMock:
    table = client.table.return_value
    return table.select.return_value.eq.return_value.eq.return_value.order.return_value.range.return_value


def test_fetch_leads_pages_until_short_page() -> None:
    client = MagicMock()
    rows = [{"id": str(n), "name": f"Lead {n}", "company_name": "Acme", "job_title": "CEO"} for n in range(5)]
    select_chain(client).execute.side_effect = [result(rows[:2]), result(rows[2:4]), result(rows[4:])]
    store = SupabaseLeadStore(client, owner_id="owner-1", page_size=2)

    leads = store.fetch_leads("list-1")

    assert [lead.id for lead in leads] == ["0", "1", "2", "3", "4"]
    assert leads[0].company == "Acme"
    assert leads[0].title == "CEO"
    client.table.assert_called_with("list_leads")
    ranges = client.table.return_value.select.return_value.eq.return_value.eq.return_value.order.return_value.range
    assert [call.args for call in ranges.call_args_list] == [(0, 1), (2, 3), (4, 5)]
    table = client.table.return_value
    table.select.return_value.eq.assert_called_with("list_id", "list-1")
    table.select.return_value.eq.return_value.eq.assert_called_with("user_id", "owner-1")


def test_fetch_leads_wraps_api_errors() -> None:
    client = MagicMock()
    select_chain(client).execute.side_effect = APIError({"message": "permission denied"})
    store = SupabaseLeadStore(client, owner_id="owner-1")

    with pytest.raises(TransportError, match="permission denied"):
        store.fetch_leads("list-1")


def test_network_failures_become_transport_errors() -> None:
    client = MagicMock()
    select_chain(client).execute.side_effect = httpx.ConnectError("connection refused")
    client.table.return_value.insert.return_value.execute.side_effect = httpx.ReadTimeout("timed out")

    with pytest.raises(TransportError, match="connection refused"):
        SupabaseLeadStore(client, owner_id="owner-1").fetch_leads("list-1")
    with pytest.raises(TransportError, match="timed out"):
        SupabaseSessionStore(client).create_session({"status": "queued"})


def test_analyzer_reports_unreachable_store() -> None:
    client = MagicMock()
    select_chain(client).execute.side_effect = httpx.ConnectError("connection refused")

    with pytest.raises(AnalysisError):
        ListAnalyzer(SupabaseLeadStore(client, owner_id="owner-1")).analyze("list-1")


def test_update_lead_maps_columns() -> None:
    client = MagicMock()
    chain = client.table.return_value.update.return_value.eq.return_value.eq.return_value
    chain.execute.return_value = result([{"id": "a"}])
    store = SupabaseLeadStore(client, owner_id="owner-1")

    store.update_lead("a", {"company": "Acme", "phone": "+15551234567"})

    client.table.return_value.update.assert_called_once_with({"company_name": "Acme", "phone": "+15551234567"})


def test_update_missing_lead_raises_not_found() -> None:
    client = MagicMock()
    chain = client.table.return_value.update.return_value.eq.return_value.eq.return_value
    chain.execute.return_value = result([])
    store = SupabaseLeadStore(client, owner_id="owner-1")

    with pytest.raises(NotFoundError):
        store.update_lead("a", {"name": "Ada"})


def test_delete_leads_returns_deleted_count() -> None:
    client = MagicMock()
    chain = client.table.return_value.delete.return_value.in_.return_value.eq.return_value
    chain.execute.return_value = result([{"id": "a"}])
    store = SupabaseLeadStore(client, owner_id="owner-1")

    assert store.delete_leads(["a", "b"]) == 1
    client.table.return_value.delete.return_value.in_.assert_called_once_with("id", ["a", "b"])
    assert store.delete_leads([]) == 0


def test_lead_store_requires_credentials() -> None:
    with pytest.raises(ConfigurationError):
        SupabaseLeadStore(owner_id="owner-1")
    with pytest.raises(ConfigurationError):
        SupabaseLeadStore(MagicMock(), owner_id="")


def test_session_store_create_and_update() -> None:
    client = MagicMock()
    table = client.table.return_value
    table.insert.return_value.execute.return_value = result([{"id": "s-1", "status": "queued"}])
    table.update.return_value.eq.return_value.execute.return_value = result([{"id": "s-1"}])
    store = SupabaseSessionStore(client)

    row = store.create_session({"status": "queued"})
    store.update_session("s-1", {"status": "running"})

    assert row == {"id": "s-1", "status": "queued"}
    client.table.assert_called_with("cleaning_sessions")
    table.update.return_value.eq.assert_called_once_with("id", "s-1")


def test_session_store_errors() -> None:
    client = MagicMock()
    table = client.table.return_value
    table.insert.return_value.execute.return_value = result([])
    table.update.return_value.eq.return_value.execute.return_value = result([])
    store = SupabaseSessionStore(client)

    with pytest.raises(TransportError):
        store.create_session({"status": "queued"})
    with pytest.raises(NotFoundError):
        store.update_session("missing", {"status": "failed"})
