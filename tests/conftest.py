"""Shared fixtures for the Marvin MCP server tests."""

import json
from typing import Any, Optional

import httpx
import pytest

from shared.config import MarvinSettings
from shared.models import CredentialPair

API_URL = "https://marvin.test/api"


class RecordingTransport:
    """
    httpx transport double that records every outbound request.

    Replies with a fixed status and JSON body, or raises ``error`` when set.
    """

    def __init__(
        self,
        status_code: int = 200,
        body: Any = None,
        text: Optional[str] = None,
        error: Optional[Exception] = None
    ) -> None:
        self.status_code = status_code
        self.body = {"ok": True} if body is None else body
        self.text = text
        self.error = error
        self.requests: list[httpx.Request] = []
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last.content)


@pytest.fixture
def marvin_settings() -> MarvinSettings:
    return MarvinSettings(api_url=API_URL, api_token=None, full_access_token=None)


@pytest.fixture
def credentials() -> CredentialPair:
    return CredentialPair(api_token="api-secret", full_access_token="full-secret")


@pytest.fixture
def recorder() -> RecordingTransport:
    return RecordingTransport()
