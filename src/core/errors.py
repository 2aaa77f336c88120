"""Taxonomía de errores del Core.

Solo las condiciones fatales para la ejecución son excepciones. Lo que falla en
un único commit (sin clave, 404, auth, transporte) se guarda como valor en el
registro de ese commit.
"""

from __future__ import annotations


class TicketGateError(Exception):
    """Clase base de todos los errores de este paquete."""


class RangeResolutionError(TicketGateError):
    """El rango de revisiones no se pudo convertir en una lista de commits.

    Siempre termina la ejecución: nunca se devuelve un rango parcial.
    """


class RepositoryNotFoundError(RangeResolutionError):
    def __init__(self, path: str, detail: str = "") -> None:
        self.path = path
        self.detail = detail
        message = f"Failed to open repository at '{path}'"
        super().__init__(f"{message}: {detail}" if detail else message)


class RefResolutionError(RangeResolutionError):
    """Una ref indicada por el usuario no resolvió a ningún objeto."""

    def __init__(self, ref: str, detail: str = "", *, role: str = "ref") -> None:
        self.ref = ref
        self.role = role
        self.detail = detail
        message = f"Failed to resolve {role} '{ref}'"
        super().__init__(f"{message}: {detail}" if detail else message)


class RefNotCommit(RangeResolutionError):
    """La ref inicial resolvió, pero no a un commit (p. ej. un tag sobre un tree)."""

    def __init__(self, ref: str) -> None:
        self.ref = ref
        super().__init__(f"start_ref '{ref}' does not point to a commit")


class TraversalError(RangeResolutionError):
    """Falló el recorrido del historial entre las dos refs."""


class CommitLookupError(RangeResolutionError):
    def __init__(self, oid: str, detail: str = "") -> None:
        self.oid = oid
        self.detail = detail
        message = f"Failed to find commit {oid}"
        super().__init__(f"{message}: {detail}" if detail else message)


class ConfigurationError(TicketGateError):
    """Faltan settings obligatorios (URL del tracker, usuario, token)."""
