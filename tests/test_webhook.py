"""Tests for the scoring webhook client."""
from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import requests

from list_quality.errors import DataError, TransportError
from list_quality.webhook import DEFAULT_TIMEOUT_SECONDS, ScoringWebhookClient

URL = "https://scoring.example.com/hook"


def make_response(status: int = 200, payload=None, text: str = "") -> MagicMock:
    response = MagicMock()
    response.status_code = status
    response.ok = status < 400
    response.text = text
    response.json.return_value = payload
    return response


@patch("list_quality.webhook.requests.post")
def test_submit_posts_json_with_timeout(mock_post) -> None:
    mock_post.return_value = make_response(payload={"summary": {"accept_count": 1}})
    client = ScoringWebhookClient(URL, headers={"Authorization": "Bearer t"})

    data = client.submit({"leads": [{"id": "a"}]})

    assert data == {"summary": {"accept_count": 1}}
    args, kwargs = mock_post.call_args
    assert args == (URL,)
    assert kwargs["json"] == {"leads": [{"id": "a"}]}
    assert kwargs["timeout"] == DEFAULT_TIMEOUT_SECONDS
    assert kwargs["headers"]["Authorization"] == "Bearer t"
    assert kwargs["headers"]["Content-Type"] == "application/json"


@patch("list_quality.webhook.requests.post")
def test_non_ok_status_raises_transport_error(mock_post) -> None:
    mock_post.return_value = make_response(status=500, text="boom")

    with pytest.raises(TransportError) as excinfo:
        ScoringWebhookClient(URL).submit({"leads": []})

    assert excinfo.value.status_code == 500
    assert excinfo.value.body == "boom"
    assert str(excinfo.value) == "Webhook failed: 500 - boom"


@patch("list_quality.webhook.requests.post")
def test_non_ok_without_body(mock_post) -> None:
    mock_post.return_value = make_response(status=502)

    with pytest.raises(TransportError, match=r"^Webhook failed: 502$"):
        ScoringWebhookClient(URL).submit({"leads": []})


@patch("list_quality.webhook.requests.post")
def test_redirect_status_is_a_failure(mock_post) -> None:
    response = make_response(status=302, payload={"summary": {}})
    response.ok = True
    mock_post.return_value = response

    with pytest.raises(TransportError) as excinfo:
        ScoringWebhookClient(URL).submit({"leads": []})

    assert excinfo.value.status_code == 302


@patch("list_quality.webhook.requests.post")
def test_connection_error_raises_transport_error(mock_post) -> None:
    mock_post.side_effect = requests.exceptions.ConnectionError("refused")

    with pytest.raises(TransportError) as excinfo:
        ScoringWebhookClient(URL).submit({"leads": []})

    assert excinfo.value.status_code is None
    assert "refused" in str(excinfo.value)


@patch("list_quality.webhook.requests.post")
def test_timeout_raises_transport_error(mock_post) -> None:
    mock_post.side_effect = requests.exceptions.Timeout("slow")

    with pytest.raises(TransportError):
        ScoringWebhookClient(URL, timeout=1).submit({"leads": []})

    assert mock_post.call_args.kwargs["timeout"] == 1


@patch("list_quality.webhook.requests.post")
def test_invalid_json_raises_data_error(mock_post) -> None:
    response = make_response()
    response.json.side_effect = ValueError("no json")
    mock_post.return_value = response

    with pytest.raises(DataError):
        ScoringWebhookClient(URL).submit({"leads": []})


@patch("list_quality.webhook.requests.post")
def test_non_object_json_raises_data_error(mock_post) -> None:
    mock_post.return_value = make_response(payload=[1, 2, 3])

    with pytest.raises(DataError):
        ScoringWebhookClient(URL).submit({"leads": []})


def test_session_is_used_when_given() -> None:
    session = MagicMock()
    session.post.return_value = make_response(payload={"summary": {}})

    ScoringWebhookClient(URL, session=session).submit({"leads": []})

    session.post.assert_called_once()
