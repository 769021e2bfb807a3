"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Sustituye el acceso dinámico a JSON (`json["campo"]`) por estructuras
  tipadas con manejo explícito de campos opcionales.
- Facilita normalizar registros OData heterogéneos.

Nota:
- Estos modelos describen *qué* es la información, no *cómo* se obtiene.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class GrantType(str, Enum):
    """Flujos OAuth2 soportados por el endpoint de tokens."""

    CLIENT_CREDENTIALS = "client_credentials"
    PASSWORD = "password"
    REFRESH_TOKEN = "refresh_token"


class TokenResponse(BaseModel):
    """Respuesta JSON del endpoint de tokens.

    Todos los campos son opcionales: un `{}` es una respuesta válida (pero
    inútil) y se representa con valores ausentes en lugar de fallar.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    access_token: str | None = Field(
        default=None,
        min_length=1,
        description="Token de acceso opaco.",
    )
    token_type: str | None = Field(
        default=None,
        min_length=1,
        description="Tipo de token (típicamente 'Bearer').",
    )
    refresh_token: str | None = Field(
        default=None,
        min_length=1,
        description="Refresh token (solo si se pidió offline_access).",
    )
    # Campos que no se leen: se aceptan con cualquier forma.
    expires_in: Any = Field(
        default=None,
        description="Vida del token en segundos (se ignora).",
    )
    scope: Any = Field(default=None)


class TrackableIdentifier(BaseModel):
    """Proyección de solo lectura de un registro remoto (p.ej. un Slide)."""

    model_config = ConfigDict(frozen=True)

    alternate_identifier: str = Field(default="")
    barcode_content: str = Field(default="")
    primary_identifier: str = Field(default="")

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "TrackableIdentifier":
        """Construye el identificador desde un registro OData.

        Valores ausentes o no-string se normalizan a cadena vacía.
        """

        def _text(key: str) -> str:
            value = record.get(key)
            return value if isinstance(value, str) else ""

        return cls(
            alternate_identifier=_text("alternateIdentifier"),
            barcode_content=_text("barcodeContent"),
            primary_identifier=_text("savedIdentifier"),
        )
