"""Errores del cliente.

Los adaptadores lanzan estas excepciones; el flujo de ejemplo las captura por
paso y las convierte en mensajes.
"""

from __future__ import annotations


class PrimaClientError(Exception):
    """Base exception for the client."""


class ConfigError(PrimaClientError):
    """The configuration file is missing or invalid."""


class ApiRequestError(PrimaClientError):
    """An HTTP request failed (non-success status or transport error).

    `status_code` is None for transport failures; the underlying httpx
    exception is chained as `__cause__`.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TokenRequestError(ApiRequestError):
    """The token endpoint rejected the request or could not be reached."""


class ResponseFormatError(PrimaClientError):
    """A response body could not be decoded as the expected JSON."""


__all__ = [
    "ApiRequestError",
    "ConfigError",
    "PrimaClientError",
    "ResponseFormatError",
    "TokenRequestError",
]
