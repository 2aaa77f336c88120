"""Contrato de comprobación de existencia en el issue tracker."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import IssueLookup, TicketKey


@runtime_checkable
class IssueExistenceChecker(Protocol):
    """Pregunta al tracker si un ticket existe.

    Reglas de diseño:
    - `exists` es async porque hace una única llamada HTTP.
    - Nunca lanza por fallos remotos: vuelven como un `IssueLookup`
      con veredicto `LOOKUP_FAILED`.
    """

    async def exists(self, ticket_key: TicketKey) -> IssueLookup:
        ...
