"""Cliente OData mínimo para la API Prima.

Implementa `core.interfaces.record_lookup.RecordLookup` sobre httpx:
- `find`: GET `<set>?$filter=<expr>`
- `invoke`: POST `<set>/<action>` con cuerpo JSON

No es un cliente OData general: no lee `$metadata` ni construye consultas.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping
from urllib.parse import quote

import httpx

from adapters.http_client import TokenAuth, build_api_url, build_async_client
from core.config import AppSettings
from core.domain.models import TrackableIdentifier
from core.errors import ApiRequestError, ResponseFormatError
from core.interfaces.record_lookup import RecordLookup

logger = logging.getLogger(__name__)

SLIDE_ENTITY_SET = "Slide"
FIND_BY_BARCODE_ACTION = "FindByBarcode"


def escape_odata_literal(value: str) -> str:
    """Escapa un literal string OData (las comillas simples se duplican)."""

    return value.replace("'", "''")


def barcode_filter(barcode_content: str) -> str:
    return f"barcodeContent eq '{escape_odata_literal(barcode_content)}'"


def _records_from_payload(payload: Any) -> list[dict[str, Any]]:
    if isinstance(payload, dict):
        payload = payload.get("value", [])
    if not isinstance(payload, list):
        raise ResponseFormatError("OData response has no 'value' collection")
    return [item for item in payload if isinstance(item, dict)]


class PrimaODataClient:
    """Consultas OData autenticadas con `Bearer <token>`."""

    def __init__(
        self,
        server_url: str,
        access_token: str,
        settings: AppSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = build_api_url(server_url)
        self._auth = TokenAuth(access_token, "Bearer")
        self._settings = settings or AppSettings()
        self._transport = transport

    def _action_path(self, entity_set: str, action: str) -> str:
        namespace = self._settings.odata_action_namespace
        if namespace:
            action = f"{namespace}.{action}"
        return f"{entity_set}/{action}"

    async def _send(self, method: str, url: str, *, body: Mapping[str, Any] | None = None) -> Any:
        logger.debug("%s %s", method, url)
        try:
            async with build_async_client(
                self._settings,
                auth=self._auth,
                transport=self._transport,
            ) as client:
                response = await client.request(method, url, json=body)
        except httpx.HTTPError as exc:
            raise ApiRequestError(f"Error sending {method} request: {exc}") from exc

        if not response.is_success:
            raise ApiRequestError(
                f"{method} failed. Received HTTP {response.status_code}",
                status_code=response.status_code,
            )
        if not response.content:
            return []
        try:
            return response.json()
        except ValueError as exc:
            # JSONDecodeError and UnicodeDecodeError both land here.
            raise ResponseFormatError(f"{method} {url} returned invalid JSON: {exc}") from exc

    async def find(self, entity_set: str, filter_expr: str) -> list[dict[str, Any]]:
        encoded = quote(filter_expr, safe="'")
        url = f"{self._base_url}{entity_set}?$filter={encoded}"
        return _records_from_payload(await self._send("GET", url))

    async def invoke(
        self,
        entity_set: str,
        action: str,
        params: Mapping[str, Any],
    ) -> list[dict[str, Any]]:
        url = f"{self._base_url}{self._action_path(entity_set, action)}"
        return _records_from_payload(await self._send("POST", url, body=dict(params)))


async def find_slide_by_barcode_content(lookup: RecordLookup, barcode_content: str) -> dict[str, Any] | None:
    """First `Slide` record whose `barcodeContent` matches, or None."""

    records = await lookup.find(SLIDE_ENTITY_SET, barcode_filter(barcode_content))
    return records[0] if records else None


async def translate_barcodes_to_identifiers(
    lookup: RecordLookup,
    barcodes: Iterable[str],
) -> list[TrackableIdentifier]:
    records = await lookup.invoke(
        SLIDE_ENTITY_SET,
        FIND_BY_BARCODE_ACTION,
        {"barcodes": list(barcodes)},
    )
    return [TrackableIdentifier.from_record(record) for record in records]
