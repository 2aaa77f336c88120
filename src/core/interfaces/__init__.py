"""Interfaces/abstracciones del Core.

Por qué:
- Define contratos (Protocol) que implementan los adapters concretos.
- Invierte dependencias: el Core depende de abstracciones.
"""

from core.interfaces.history import CommitRangeResolver
from core.interfaces.tracker import IssueExistenceChecker

__all__ = [
    "CommitRangeResolver",
    "IssueExistenceChecker",
]
