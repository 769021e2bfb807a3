"""Lecturas REST autenticadas (Case, Study, StainTest).

Devuelven el cuerpo crudo: la CLI lo imprime formateado y el flujo de ejemplo
extrae solo los campos que necesita.
"""

from __future__ import annotations

import logging

import httpx

from adapters.http_client import TokenAuth, build_api_url, build_async_client
from core.config import AppSettings
from core.errors import ApiRequestError

logger = logging.getLogger(__name__)


class AuthenticatedReader:
    """GET requests against `{server_url}/api/v1/` with a token header."""

    def __init__(
        self,
        server_url: str,
        token_type: str,
        access_token: str,
        settings: AppSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._server_url = server_url
        self._token_type = token_type
        self._access_token = access_token
        self._settings = settings or AppSettings()
        self._transport = transport

    async def get_json(self, url: str) -> str:
        return await get_json(
            url,
            self._token_type,
            self._access_token,
            settings=self._settings,
            transport=self._transport,
        )

    def case_url(self, case_id: int) -> str:
        return build_api_url(self._server_url, f"Case({case_id})")

    def study_url(self, study_id: int) -> str:
        return build_api_url(self._server_url, f"Study({study_id})")

    def stain_tests_url(self, skip: int) -> str:
        return build_api_url(self._server_url, f"StainTest?$skip={skip}")

    async def get_case_by_id(self, case_id: int) -> str:
        return await self.get_json(self.case_url(case_id))

    async def get_study_by_id(self, study_id: int) -> str:
        return await self.get_json(self.study_url(study_id))

    async def get_paged_stain_tests(self, skip: int) -> str:
        return await self.get_json(self.stain_tests_url(skip))


async def get_json(
    url: str,
    token_type: str,
    access_token: str,
    *,
    settings: AppSettings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """GET `url` with `Authorization: <token_type> <access_token>`.

    Raises:
        ApiRequestError: non-200 status or transport failure.
    """

    logger.debug("GET %s", url)
    auth = TokenAuth(access_token, token_type)
    try:
        async with build_async_client(settings, auth=auth, transport=transport) as client:
            response = await client.get(url)
    except httpx.HTTPError as exc:
        raise ApiRequestError(f"Error sending GET request: {exc}") from exc

    if response.status_code != 200:
        raise ApiRequestError(
            f"GET failed. Received HTTP {response.status_code}",
            status_code=response.status_code,
        )
    return response.text
