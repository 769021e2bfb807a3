"""Doctor command for configuration diagnostics."""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client
from core.config import (
    ApiConfig,
    AppSettings,
    CredentialsConfig,
    get_user_config_file,
    load_api_config,
    resolve_config_path,
    write_api_config,
)
from core.errors import ConfigError

app = typer.Typer(no_args_is_help=True, help="Configuration checks and setup.")

_console = Console()


async def _check_http(url: str) -> tuple[bool, str]:
    try:
        async with build_async_client() as client:
            response = await client.get(url)
        return True, f"HTTP {response.status_code}"
    except Exception as exc:
        return False, str(exc)


@app.command()
def run(
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to appsettings.json."),
) -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()
    path = resolve_config_path(config, settings)

    table = Table(title="Prima REST Client Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    try:
        api_config = load_api_config(path)
    except ConfigError as exc:
        table.add_row("Config file", "FAIL", str(exc))
        _console.print(table)
        _console.print("\n[yellow]Note:[/yellow] run `doctor init-config` to create a configuration file.")
        raise typer.Exit(code=1) from exc

    table.add_row("Config file", "OK", str(path))
    table.add_row("Client id", "OK", api_config.credentials.client_id)
    if api_config.credentials.username and api_config.credentials.password:
        table.add_row("Resource owner", "OK", api_config.credentials.username)
    else:
        table.add_row("Resource owner", "OPTIONAL", "No username/password -> password grants are skipped")
    table.add_row("Scope", "OK", api_config.credentials.scope)

    # Connectivity (best-effort): any HTTP answer means the host is reachable.
    for label, url in (
        ("Server", api_config.server_url),
        ("Token endpoint", api_config.authentication_url),
    ):
        ok, detail = asyncio.run(_check_http(url))
        table.add_row(label, "OK" if ok else "FAIL", f"{url} ({detail})")

    _console.print(table)


@app.command(name="init-config")
def init_config(
    output: Path | None = typer.Option(None, "--output", "-o", help="Where to write appsettings.json."),
) -> None:
    """Interactive setup: writes appsettings.json (user config dir by default)."""

    server_url = typer.prompt("Server URL").strip()
    authentication_url = typer.prompt("Authentication (token) URL").strip()
    client_id = typer.prompt("Client id").strip()
    client_secret = typer.prompt("Client secret", hide_input=True).strip()
    username = typer.prompt("Username (optional)", default="", show_default=False).strip()
    password = ""
    if username:
        password = typer.prompt("Password", hide_input=True).strip()
    scope = typer.prompt("Scope", default="api_read_all", show_default=True).strip()

    if not server_url or not authentication_url or not client_id or not client_secret:
        raise typer.BadParameter("server URL, authentication URL, client id and client secret are required")

    api_config = ApiConfig(
        server_url=server_url,
        authentication_url=authentication_url,
        credentials=CredentialsConfig(
            client_id=client_id,
            client_secret=client_secret,
            username=username or None,
            password=password or None,
            scope=scope or "api_read_all",
        ),
    )
    path = write_api_config(api_config, output or get_user_config_file())
    _console.print(f"[green]Saved API config to:[/green] {path}")
