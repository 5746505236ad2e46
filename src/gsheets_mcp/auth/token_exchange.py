"""OAuth2 refresh-token exchange against Google's token endpoint.

This module trades a long-lived refresh token for a fresh access token.
It performs exactly one POST per call and never persists the result.

Environment Variables:
    GOOGLE_CLIENT_ID: Google OAuth client ID (required by ``from_env``)
    GOOGLE_CLIENT_SECRET: Google OAuth client secret (required by ``from_env``)
"""

import logging
import os
from typing import Any

import httpx
from pydantic import ValidationError

from gsheets_mcp.auth.models import TokenResponse, redact
from gsheets_mcp.errors import RemoteApiFailure, SerializationFailure

logger = logging.getLogger(__name__)

GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"  # nosec B105 - public endpoint


class GoogleAuthService:
    """Client for the Google OAuth2 token endpoint.

    Attributes:
        client_id: Google OAuth client ID.
        client_secret: Google OAuth client secret.
        token_url: Token endpoint URL.

    Example:
        ```python
        service = GoogleAuthService.from_env()
        token = await service.refresh_token("1//0g...")
        print(token.access_token)
        ```
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        http_client: httpx.AsyncClient | None = None,
        token_url: str = GOOGLE_TOKEN_URL,
    ) -> None:
        """Initialize the auth service.

        Args:
            client_id: Google OAuth client ID.
            client_secret: Google OAuth client secret.
            http_client: Optional client to send the exchange with. A
                short-lived client is created per exchange if omitted.
            token_url: Token endpoint URL.
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.token_url = token_url
        self._http_client = http_client

    @classmethod
    def from_env(cls) -> "GoogleAuthService":
        """Build a service from GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET.

        Raises:
            ValueError: If either environment variable is missing.
        """
        values = {}
        for name in ("GOOGLE_CLIENT_ID", "GOOGLE_CLIENT_SECRET"):
            value = os.environ.get(name)
            if not value:
                raise ValueError(f"Environment variable missing: {name}")
            values[name] = value
        return cls(values["GOOGLE_CLIENT_ID"], values["GOOGLE_CLIENT_SECRET"])

    async def refresh_token(self, refresh_token: str) -> TokenResponse:
        """Exchange a refresh token for a new access token.

        Args:
            refresh_token: Long-lived OAuth refresh token.

        Returns:
            The parsed token response.

        Raises:
            RemoteApiFailure: If the endpoint is unreachable or answers non-2xx.
            SerializationFailure: If the response body is not a valid token.
        """
        payload = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "refresh_token": refresh_token,
            "grant_type": "refresh_token",
        }
        return await self._exchange_token(payload)

    async def _exchange_token(self, payload: dict[str, Any]) -> TokenResponse:
        logger.debug(
            "Token exchange: client_id=%s refresh_token=%s",
            payload["client_id"],
            redact(payload.get("refresh_token")),
        )

        try:
            if self._http_client is not None:
                response = await self._http_client.post(self.token_url, json=payload)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.post(self.token_url, json=payload)
        except httpx.HTTPError as e:
            raise RemoteApiFailure(f"Google API error: {e}") from e

        if not response.is_success:
            body = response.text or "Unknown error"
            raise RemoteApiFailure(f"Google API error: {body}", status_code=response.status_code)

        try:
            return TokenResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise SerializationFailure(f"Token parse error: {e}") from e
