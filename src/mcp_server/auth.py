"""Credential resolution for inbound MCP requests.

Every request resolves its own credential pair; nothing is cached or
shared between requests. Environment values are defaults consulted as
part of that per-request resolution.

API token precedence, highest first:
1. ``Authorization: Bearer <token>``
2. ``MARVIN_API_TOKEN``
3. ``x-api-token`` header

Full-access token: ``MARVIN_FULL_ACCESS_TOKEN``, then the
``x-full-access-token`` header.
"""

from typing import Mapping, Optional

from shared.config import MarvinSettings
from shared.errors import MissingCredentialsError
from shared.logging import get_logger
from shared.models import CredentialPair

logger = get_logger(__name__)

API_TOKEN_HEADER = "x-api-token"
FULL_ACCESS_TOKEN_HEADER = "x-full-access-token"
BEARER_PREFIX = "Bearer "


def bearer_token(headers: Mapping[str, str]) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer`` header."""
    authorization = headers.get("authorization")
    if authorization and authorization.startswith(BEARER_PREFIX):
        return authorization[len(BEARER_PREFIX):].strip() or None
    return None


def _first(*candidates: Optional[str]) -> Optional[str]:
    for candidate in candidates:
        if candidate:
            return candidate
    return None


def resolve_credentials(
    headers: Mapping[str, str],
    settings: MarvinSettings
) -> CredentialPair:
    """
    Resolve the credential pair for one inbound request.

    Args:
        headers: Case-insensitive request headers
        settings: Marvin settings holding the environment defaults

    Returns:
        The resolved credential pair

    Raises:
        MissingCredentialsError: If either tier is unresolved
    """
    api_token = _first(
        bearer_token(headers),
        settings.api_token,
        headers.get(API_TOKEN_HEADER),
    )
    full_access_token = _first(
        settings.full_access_token,
        headers.get(FULL_ACCESS_TOKEN_HEADER),
    )

    missing = [
        name for name, value in (
            ("api_token", api_token),
            ("full_access_token", full_access_token),
        )
        if not value
    ]
    if missing:
        logger.warning("Authorization failed: missing credentials", missing=missing)
        raise MissingCredentialsError(missing)

    return CredentialPair(api_token=api_token, full_access_token=full_access_token)
