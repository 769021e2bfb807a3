"""Contrato de consulta de registros (OData).

Por qué Protocol:
- El flujo de ejemplo solo necesita dos capacidades de lectura.
- Permite sustituir el cliente OData por un stub en tests.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable


@runtime_checkable
class RecordLookup(Protocol):
    """Lecturas OData autenticadas.

    Reglas de diseño:
    - Ambas operaciones son asíncronas porque hacen I/O (HTTP).
    - Devuelven los registros crudos (dicts); la proyección es del llamador.
    """

    async def find(self, entity_set: str, filter_expr: str) -> list[dict[str, Any]]:
        """Registros de `entity_set` que cumplen `filter_expr` ($filter)."""

        ...

    async def invoke(
        self,
        entity_set: str,
        action: str,
        params: Mapping[str, Any],
    ) -> list[dict[str, Any]]:
        """Ejecuta una acción ligada a la colección y devuelve sus registros."""

        ...
