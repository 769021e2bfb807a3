"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Carga y valida `appsettings.json` (ApiConfig) en un único punto.
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError
from pydantic.config import ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.errors import ConfigError

APP_DIR_NAME = "prima-rest-client"
CONFIG_FILE_NAME = "appsettings.json"


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / APP_DIR_NAME
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_DIR_NAME

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / APP_DIR_NAME
    return Path.home() / ".config" / APP_DIR_NAME


def get_user_config_file() -> Path:
    return get_user_config_dir() / CONFIG_FILE_NAME


class CredentialsConfig(BaseModel):
    """Credenciales OAuth2 del cliente y del usuario (resource owner)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    client_id: str = Field(..., min_length=1, alias="ClientId")
    client_secret: str = Field(..., min_length=1, alias="ClientSecret")
    username: str | None = Field(default=None, alias="Username")
    password: str | None = Field(default=None, alias="Password")
    scope: str = Field(
        default="api_read_all",
        min_length=1,
        alias="Scope",
        description="Scope base solicitado en los grants client_credentials y password.",
    )


class ApiConfig(BaseModel):
    """Sección `ApiConfig` de `appsettings.json`."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    server_url: str = Field(..., min_length=8, alias="ServerUrl")
    authentication_url: str = Field(..., min_length=8, alias="AuthenticationUrl")
    credentials: CredentialsConfig = Field(..., alias="Credentials")


class AppSettings(BaseSettings):
    """Configuración de runtime (env vars / `.env`).

    Por qué separado de `ApiConfig`:
    - `appsettings.json` describe el servidor y las credenciales.
    - Las env vars ajustan el comportamiento del cliente (timeouts, logging).
    """

    model_config = SettingsConfigDict(
        env_prefix="PRIMA_CLIENT_",
        extra="ignore",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout por request (segundos).",
    )
    user_agent: str = Field(
        default="prima-rest-client/0.1",
        min_length=1,
        description="User-Agent enviado en todas las peticiones.",
    )
    config_path: Path | None = Field(
        default=None,
        description="Ruta explícita a appsettings.json.",
    )
    log_level: str = Field(
        default="WARNING",
        description="Nivel de logging (DEBUG, INFO, WARNING, ERROR).",
    )

    stain_test_skip: int = Field(
        default=100,
        ge=0,
        description="Elementos a saltar al paginar StainTest en el ejemplo.",
    )
    example_barcode: str = Field(
        default="1>2U>3",
        min_length=1,
        description="Barcode usado para buscar un slide en el ejemplo.",
    )
    example_barcodes: list[str] = Field(
        default_factory=lambda: [
            "2*2U*1*1",
            "2*2U*2*1",
            "2*2U*1Y*1",
            "1>2U>1",
            "1>2U>2",
            "1>2U>3",
        ],
        description="Barcodes traducidos a identificadores con la acción FindByBarcode.",
    )
    odata_action_namespace: str | None = Field(
        default=None,
        description="Namespace con el que calificar acciones OData (p.ej. 'Default').",
    )


def resolve_config_path(explicit: Path | None = None, settings: AppSettings | None = None) -> Path:
    """Decide qué `appsettings.json` usar.

    Orden: ruta explícita, `PRIMA_CLIENT_CONFIG_PATH`, directorio actual y
    finalmente el directorio de configuración del usuario.
    """

    if explicit is not None:
        return explicit
    settings = settings or AppSettings()
    if settings.config_path is not None:
        return settings.config_path

    local = Path.cwd() / CONFIG_FILE_NAME
    if local.exists():
        return local
    return get_user_config_file()


def load_api_config(path: Path) -> ApiConfig:
    """Lee y valida la sección `ApiConfig` del archivo JSON."""

    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Configuration file is not valid JSON: {path} ({exc})") from exc

    if not isinstance(data, dict) or not isinstance(data.get("ApiConfig"), dict):
        raise ConfigError(f"Configuration file has no 'ApiConfig' section: {path}")

    try:
        return ApiConfig.model_validate(data["ApiConfig"])
    except ValidationError as exc:
        raise ConfigError(f"Invalid 'ApiConfig' section in {path}: {exc}") from exc


def write_api_config(config: ApiConfig, path: Path | None = None) -> Path:
    """Escribe `ApiConfig` en formato appsettings.json (por defecto, config de usuario)."""

    path = path or get_user_config_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {"ApiConfig": config.model_dump(mode="json", by_alias=True)}
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
    return path
