"""Contrato de fuentes de historial de revisiones.

Por qué Protocol:
- Contrato estructural (duck typing) sin herencia rígida.
- Permite sustituir el adapter de git por un fake en memoria en los tests.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import CommitRecord


@runtime_checkable
class CommitRangeResolver(Protocol):
    """Contrato mínimo para convertir dos refs en commits.

    Reglas de diseño:
    - `start_ref` es un límite inferior exclusivo: no se devuelve nada alcanzable desde él.
    - El resultado va del más antiguo al más reciente, con ids únicos.
    - Los fallos lanzan `core.errors.RangeResolutionError`; nunca se devuelve un rango parcial.
    """

    def resolve(self, start_ref: str, end_ref: str) -> list[CommitRecord]:
        ...
