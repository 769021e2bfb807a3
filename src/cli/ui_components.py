"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

import json

from rich.align import Align
from rich.console import Console
from rich.json import JSON
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import TrackableIdentifier
from core.services.example_flow import StepResult


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida."""

    title = Text("PRIMA REST CLIENT", style="bold cyan")
    subtitle = Text("OAuth2 grants • REST • OData", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def print_response(console: Console, raw: str | None) -> None:
    """Imprime un cuerpo de respuesta como JSON indentado.

    Si el cuerpo no es JSON se imprime tal cual.
    """

    console.print("Response:")
    if not raw:
        console.print(Text("<empty>", style="dim"))
        return
    try:
        json.loads(raw)
    except json.JSONDecodeError:
        console.print(Text(raw))
        return
    console.print(JSON(raw, indent=2))


def print_step(console: Console, step: StepResult) -> None:
    if step.skipped:
        console.print(Text(f"Skipped {step.name}: {step.error}", style="dim"))
        console.print()
        return
    if step.ok:
        print_response(console, step.body)
    else:
        console.print(Text(f"Response:\n{step.error}", style="red"))
    console.print()


def build_slides_table(slides: list[TrackableIdentifier]) -> Table:
    """Tabla Rich con los slides encontrados por barcode."""

    table = Table(title="Slides")
    table.add_column("Primary identifier", style="cyan", no_wrap=True)
    table.add_column("Alternate identifier", style="white")
    table.add_column("Barcode", style="magenta")
    for slide in slides:
        table.add_row(slide.primary_identifier, slide.alternate_identifier, slide.barcode_content)
    return table
