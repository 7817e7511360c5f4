"""HTTP client for the Amazing Marvin REST API.

One client is created per inbound connection and closed with it. Each
``send`` issues exactly one request carrying exactly one credential header.
"""

from typing import Any, Optional

import httpx

from shared.config import MarvinSettings
from shared.logging import get_logger
from shared.models import CredentialPair, OutboundCall

logger = get_logger(__name__)


class MarvinClient:
    """
    Thin async wrapper around ``httpx.AsyncClient``.

    Does not retry, cache or translate responses: non-success statuses
    raise ``httpx.HTTPStatusError`` and transport failures raise
    ``httpx.RequestError`` for the caller to surface.
    """

    def __init__(
        self,
        settings: MarvinSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> None:
        self.base_url = settings.api_url
        self.timeout = settings.timeout_seconds
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def send(self, call: OutboundCall, credentials: CredentialPair) -> Any:
        """
        Issue one outbound call.

        Returns:
            The decoded JSON body, or the raw text if the body is not JSON
        """
        client = self._get_client()

        logger.debug(
            "Calling Marvin API",
            method=call.method.value,
            path=call.path,
            tier=call.tier.value
        )

        response = await client.request(
            call.method.value,
            call.path,
            params=call.params,
            json=call.json_body,
            headers=credentials.header_for(call.tier),
        )
        response.raise_for_status()
        return self._decode(response)

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "MarvinClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
