"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts, headers y autenticación de todas las peticiones.
- Facilita testeo: se puede inyectar un `httpx.MockTransport`.
"""

from __future__ import annotations

from typing import Generator
from urllib.parse import urljoin

import httpx

from core.config import AppSettings

API_PATH = "api/v1/"


class TokenAuth(httpx.Auth):
    """Añade `Authorization: <token_type> <access_token>` a cada request."""

    def __init__(self, access_token: str, token_type: str = "Bearer") -> None:
        self._header = f"{token_type} {access_token}"

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers["Authorization"] = self._header
        yield request


def build_async_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
    auth: httpx.Auth | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` con defaults seguros.

    Por qué un builder:
    - Centraliza timeouts/headers para que todos los adaptadores se comporten igual.
    - `transport` permite sustituir la red en tests.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        auth=auth,
        transport=transport,
    )


def build_api_url(server_url: str, path: str = "") -> str:
    """Resuelve `path` contra `{server_url}/api/v1/`.

    `server_url` puede venir con o sin barra final.
    """

    base = urljoin(server_url.rstrip("/") + "/", API_PATH)
    return urljoin(base, path) if path else base
