"""CLI principal (Typer).

Comandos:
- `demo`: recorre los grants OAuth2 y las lecturas de ejemplo.
- `token`: una única petición de token.
- `doctor`: diagnóstico de configuración/conectividad.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console

from adapters.token_exchanger import TokenExchanger
from cli import doctor
from cli.ui_components import build_slides_table, print_banner, print_response, print_step
from core.config import ApiConfig, AppSettings, load_api_config, resolve_config_path
from core.domain.models import GrantType
from core.errors import ConfigError, PrimaClientError
from core.grants import build_grant_params
from core.logging_setup import configure_logging
from core.services.example_flow import FlowHooks, run_example_flow

app = typer.Typer(
    no_args_is_help=True,
    help="Example client for the Prima REST/OData API.",
)
app.add_typer(doctor.app, name="doctor")

_console = Console()

ConfigOption = typer.Option(
    None,
    "--config",
    "-c",
    help="Path to appsettings.json (defaults to ./appsettings.json or the user config dir).",
)


def _load(config: Path | None, settings: AppSettings) -> ApiConfig:
    path = resolve_config_path(config, settings)
    try:
        return load_api_config(path)
    except ConfigError as exc:
        _console.print(str(exc), style="red", markup=False)
        _console.print("Run [bold]doctor init-config[/bold] to create one.")
        raise typer.Exit(code=1) from exc


@app.command()
def demo(
    config: Path | None = ConfigOption,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    no_banner: bool = typer.Option(False, "--no-banner", help="Do not print the banner."),
) -> None:
    """Run every grant type and the example data reads."""

    settings = AppSettings()
    configure_logging("DEBUG" if verbose else settings.log_level)
    api_config = _load(config, settings)

    if not no_banner:
        print_banner(_console)

    hooks = FlowHooks(
        step_start=lambda _name, description: _console.print(f"{description}...", markup=False),
        step_done=lambda step: print_step(_console, step),
        slides_found=lambda slides: _console.print(build_slides_table(slides)),
    )
    result = asyncio.run(run_example_flow(api_config, settings, hooks=hooks))

    if result.slide is not None:
        _console.print(
            f"Found slide for barcode '{settings.example_barcode}': {result.slide.primary_identifier}",
            markup=False,
        )
    if result.failed:
        _console.print(f"[yellow]{len(result.failed)} step(s) failed.[/yellow]")


@app.command()
def token(
    grant: GrantType = typer.Argument(..., help="Grant type to request."),
    config: Path | None = ConfigOption,
    offline: bool = typer.Option(False, "--offline", help="Ask for offline_access (password grant)."),
    refresh_token: str | None = typer.Option(None, "--refresh-token", help="Refresh token (refresh_token grant)."),
) -> None:
    """Request a single token and print the raw response."""

    settings = AppSettings()
    configure_logging(settings.log_level)
    api_config = _load(config, settings)

    if grant is GrantType.REFRESH_TOKEN and not refresh_token:
        raise typer.BadParameter("--refresh-token is required for the refresh_token grant")

    try:
        params = build_grant_params(
            grant,
            api_config.credentials,
            offline=offline,
            refresh_token=refresh_token,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    exchanger = TokenExchanger(api_config.authentication_url, settings)
    try:
        body = asyncio.run(exchanger.request_token(params))
    except PrimaClientError as exc:
        _console.print(str(exc), style="red", markup=False)
        raise typer.Exit(code=1) from exc

    print_response(_console, body)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
