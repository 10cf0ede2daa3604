"""HTTP client for the external lead scoring webhook."""
from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

import requests

from .errors import DataError, TransportError

LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 60.0
_BODY_PREVIEW = 500


class ScoringWebhookClient:
    """Posts one verification batch to the scoring webhook.

    Parameters
    ----------
    url:
        Webhook endpoint receiving the JSON batch.
    timeout:
        Seconds to wait for the response. The scoring service is outside
        our control, so a timeout is always applied.
    headers:
        Extra headers, e.g. an authorization token.
    session:
        Optional :class:`requests.Session` to reuse connections.
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        headers: Optional[Mapping[str, str]] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._headers = {"Content-Type": "application/json", **dict(headers or {})}
        self._session = session

    def submit(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """Send ``payload`` and return the decoded JSON response."""

        poster = self._session.post if self._session is not None else requests.post
        LOGGER.debug("Posting %s leads to scoring webhook", len(payload.get("leads", [])))
        try:
            response = poster(self.url, json=dict(payload), headers=self._headers, timeout=self.timeout)
        except requests.exceptions.RequestException as exc:
            raise TransportError(f"Webhook request failed: {exc}") from exc

        if not 200 <= response.status_code < 300:
            body = response.text or ""
            LOGGER.error("Scoring webhook returned %s: %s", response.status_code, body[:_BODY_PREVIEW])
            message = f"Webhook failed: {response.status_code}"
            if body:
                message = f"{message} - {body[:_BODY_PREVIEW]}"
            raise TransportError(
                message,
                status_code=response.status_code,
                body=body,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise DataError("Scoring webhook returned a response that is not JSON") from exc
        if not isinstance(data, dict):
            raise DataError("Scoring webhook returned a non-object response")
        return data


__all__ = ["DEFAULT_TIMEOUT_SECONDS", "ScoringWebhookClient"]
