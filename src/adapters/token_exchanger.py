"""OAuth2 token endpoint client.

Posts form-encoded grant parameters and hands back the raw JSON body. Parsing
is left to `core.token_parsing` so callers can print the response unchanged.
"""

from __future__ import annotations

import logging

import httpx

from adapters.http_client import build_async_client
from core.config import AppSettings, CredentialsConfig
from core.errors import TokenRequestError
from core.grants import client_credentials_params, password_params, refresh_token_params

logger = logging.getLogger(__name__)


class TokenExchanger:
    """Requests tokens from a single authorization endpoint."""

    def __init__(
        self,
        authentication_url: str,
        settings: AppSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._authentication_url = authentication_url
        self._settings = settings or AppSettings()
        self._transport = transport

    @property
    def authentication_url(self) -> str:
        return self._authentication_url

    async def request_token(self, grant_params: dict[str, str]) -> str:
        """POST `grant_params` and return the response body as text.

        Raises:
            TokenRequestError: non-200 status or transport failure.
        """

        logger.debug(
            "POST %s (grant_type=%s)",
            self._authentication_url,
            grant_params.get("grant_type"),
        )
        try:
            async with build_async_client(self._settings, transport=self._transport) as client:
                response = await client.post(self._authentication_url, data=grant_params)
        except httpx.HTTPError as exc:
            raise TokenRequestError(f"Error sending token request: {exc}") from exc

        if response.status_code != 200:
            raise TokenRequestError(
                f"POST failed. Received HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return response.text

    async def client_credentials(self, credentials: CredentialsConfig) -> str:
        return await self.request_token(client_credentials_params(credentials))

    async def resource_owner_password(
        self,
        credentials: CredentialsConfig,
        *,
        request_refresh_token: bool = False,
    ) -> str:
        return await self.request_token(
            password_params(credentials, request_refresh_token=request_refresh_token)
        )

    async def refresh(self, credentials: CredentialsConfig, refresh_token: str) -> str:
        return await self.request_token(refresh_token_params(credentials, refresh_token))
