"""Form fields for each OAuth2 grant type.

Pure functions: they only build the field maps that `TokenExchanger` posts.
"""

from __future__ import annotations

from core.config import CredentialsConfig
from core.domain.models import GrantType

OFFLINE_ACCESS_SCOPE = "offline_access"


def client_credentials_params(credentials: CredentialsConfig) -> dict[str, str]:
    return {
        "grant_type": GrantType.CLIENT_CREDENTIALS.value,
        "scope": credentials.scope,
        "client_id": credentials.client_id,
        "client_secret": credentials.client_secret,
    }


def password_params(
    credentials: CredentialsConfig,
    *,
    request_refresh_token: bool = False,
) -> dict[str, str]:
    """Resource-owner password grant.

    With `request_refresh_token` the scope is widened with `offline_access`
    so the server also issues a refresh token.
    """

    if not credentials.username or not credentials.password:
        raise ValueError("username and password are required for the password grant")

    scope = credentials.scope
    if request_refresh_token and OFFLINE_ACCESS_SCOPE not in scope.split():
        scope = f"{scope} {OFFLINE_ACCESS_SCOPE}"

    return {
        "grant_type": GrantType.PASSWORD.value,
        "scope": scope,
        "client_id": credentials.client_id,
        "client_secret": credentials.client_secret,
        "username": credentials.username,
        "password": credentials.password,
    }


def refresh_token_params(credentials: CredentialsConfig, refresh_token: str) -> dict[str, str]:
    if not refresh_token:
        raise ValueError("refresh_token must be a non-empty string")

    # refresh_token goes right after grant_type in the encoded body.
    return {
        "grant_type": GrantType.REFRESH_TOKEN.value,
        "refresh_token": refresh_token,
        "client_id": credentials.client_id,
        "client_secret": credentials.client_secret,
    }


def build_grant_params(
    grant: GrantType,
    credentials: CredentialsConfig,
    *,
    offline: bool = False,
    refresh_token: str | None = None,
) -> dict[str, str]:
    """Dispatch helper used by the CLI `token` command."""

    if grant is GrantType.CLIENT_CREDENTIALS:
        return client_credentials_params(credentials)
    if grant is GrantType.PASSWORD:
        return password_params(credentials, request_refresh_token=offline)
    return refresh_token_params(credentials, refresh_token or "")
