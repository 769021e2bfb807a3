"""Extracción de campos de la respuesta del endpoint de tokens.

Por qué funciones puras:
- El cuerpo crudo se imprime tal cual; solo después se extraen los valores
  que necesita el siguiente paso.
- Un JSON inválido no debe abortar el resto del ejemplo: se registra un
  warning y se devuelven valores ausentes.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from core.domain.models import TokenResponse

logger = logging.getLogger(__name__)


def parse_token_response(raw: str | None) -> TokenResponse | None:
    """Devuelve el `TokenResponse` o `None` si el cuerpo no es un objeto JSON válido."""

    if not raw:
        return TokenResponse()
    try:
        return TokenResponse.model_validate_json(raw)
    except ValidationError as exc:
        logger.warning("Failed to parse token response: %s", exc.errors()[0].get("msg", exc))
        return None


def extract_access_token(raw: str | None) -> tuple[str | None, str | None]:
    """Return `(access_token, token_type)`; either may be None."""

    parsed = parse_token_response(raw)
    if parsed is None:
        logger.warning("Failed to parse token response to retrieve access token.")
        return None, None
    return parsed.access_token, parsed.token_type


def extract_refresh_token(raw: str | None) -> str | None:
    parsed = parse_token_response(raw)
    if parsed is None:
        logger.warning("Failed to parse token response to retrieve refresh token.")
        return None
    return parsed.refresh_token
