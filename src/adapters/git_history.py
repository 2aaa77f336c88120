"""Resolver de rangos sobre el binario `git`.

Por qué un adaptador:
- Recorrer el historial es I/O (subprocess); el Core solo ve `CommitRecord`s.
- Cada fallo de git se traduce a una clase de `core.errors` para que la CLI
  imprima un único diagnóstico y termine.

Semántica:
- `start_ref` se oculta junto con todo lo que alcanza (rango `start..end`),
  nunca se incluye.
- git recorre del más reciente al más antiguo; el resultado se invierte.
- Los datos de todos los commits se leen con una sola llamada a `git log`.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

from core.domain.models import CommitRecord
from core.errors import (
    CommitLookupError,
    RefNotCommit,
    RefResolutionError,
    RepositoryNotFoundError,
    TraversalError,
)

logger = logging.getLogger(__name__)

# Separador de unidad: no aparece en un hash y es rarísimo en un subject.
_FIELD_SEP = "\x1f"
_LOG_FORMAT = f"--format=%H{_FIELD_SEP}%h{_FIELD_SEP}%s"


@dataclass(frozen=True)
class GitResult:
    """Resultado de una invocación de git."""

    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0

    @property
    def error(self) -> str:
        return self.stderr.strip() or self.stdout.strip() or f"git exited with status {self.returncode}"


def _describe_oids(oids: list[str]) -> str:
    if len(oids) == 1:
        return oids[0]
    return f"{oids[0][:12]} (and {len(oids) - 1} more)"


class GitRangeResolver:
    """Convierte `start_ref..end_ref` en commits del repositorio en `repo_path`."""

    def __init__(self, repo_path: Path | str = ".") -> None:
        self.repo_path = Path(repo_path)

    def _run_git(self, args: list[str], *, stdin: str | None = None) -> GitResult:
        logger.debug("git %s (cwd=%s)", " ".join(args), self.repo_path)
        try:
            proc = subprocess.run(
                ["git", *args],
                cwd=self.repo_path,
                input=stdin,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except OSError as exc:
            # Sin binario git o con un cwd inutilizable no se puede leer nada.
            raise RepositoryNotFoundError(str(self.repo_path), str(exc)) from exc
        return GitResult(returncode=proc.returncode, stdout=proc.stdout, stderr=proc.stderr)

    def ensure_repository(self) -> None:
        result = self._run_git(["rev-parse", "--git-dir"])
        if not result.success:
            raise RepositoryNotFoundError(str(self.repo_path), result.error)

    def resolve_ref(self, ref: str, *, role: str = "ref") -> str:
        """Resuelve una ref escrita por el usuario a un object id completo."""

        if not ref or ref.startswith("-"):
            raise RefResolutionError(ref, "not a valid revision", role=role)
        result = self._run_git(["rev-parse", "--verify", "--quiet", f"{ref}^{{object}}"])
        oid = result.stdout.strip()
        if not result.success or not oid:
            raise RefResolutionError(ref, result.stderr.strip() or "unknown revision", role=role)
        return oid

    def peel_to_commit(self, oid: str) -> str | None:
        """Commit al que apunta `oid`, o None para trees/blobs."""

        result = self._run_git(["rev-parse", "--verify", "--quiet", f"{oid}^{{commit}}"])
        peeled = result.stdout.strip()
        if not result.success or not peeled:
            return None
        return peeled

    def walk(self, end_oid: str, hidden_oid: str) -> list[str]:
        """Commits alcanzables desde `end_oid` pero no desde `hidden_oid`, el más reciente primero."""

        result = self._run_git(["rev-list", end_oid, f"^{hidden_oid}"])
        if not result.success:
            raise TraversalError(f"Error during revwalk: {result.error}")
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def lookup_commits(self, oids: list[str]) -> list[CommitRecord]:
        """Lee id corto y subject de cada commit, en el orden de `oids`.

        Los ids van por stdin, así rangos grandes no chocan con el límite de argv.
        """

        if not oids:
            return []

        result = self._run_git(
            [
                "log",
                "--no-walk=unsorted",
                "--stdin",
                "--no-color",
                "--no-show-signature",
                _LOG_FORMAT,
            ],
            stdin="\n".join(oids) + "\n",
        )
        if not result.success:
            raise CommitLookupError(_describe_oids(oids), result.error)

        by_oid: dict[str, CommitRecord] = {}
        for line in result.stdout.splitlines():
            full_id, sep, rest = line.partition(_FIELD_SEP)
            short_id, sep2, summary = rest.partition(_FIELD_SEP)
            if not sep or not sep2 or not short_id:
                raise CommitLookupError(full_id or "?", f"unexpected git output: {line!r}")
            by_oid[full_id.strip()] = CommitRecord(id=short_id.strip(), summary=summary.strip())

        commits: list[CommitRecord] = []
        for oid in oids:
            record = by_oid.get(oid)
            if record is None:
                raise CommitLookupError(oid, "missing from git log output")
            commits.append(record)
        return commits

    def resolve(self, start_ref: str, end_ref: str) -> list[CommitRecord]:
        """Commits de `start_ref..end_ref`, el más antiguo primero.

        Cualquier fallo lanza una subclase de `RangeResolutionError`; nunca se
        devuelve nada parcial.
        """

        self.ensure_repository()

        start_oid = self.resolve_ref(start_ref, role="start_ref")
        end_oid = self.resolve_ref(end_ref, role="end_ref")

        # rev-list ignora los trees en silencio, así que el punto de partida se comprueba aquí.
        end_commit = self.peel_to_commit(end_oid)
        if end_commit is None:
            raise TraversalError(f"Failed to start revwalk: end_ref '{end_ref}' does not point to a commit")

        start_commit = self.peel_to_commit(start_oid)
        if start_commit is None:
            raise RefNotCommit(start_ref)

        oids = self.walk(end_commit, start_commit)
        commits = self.lookup_commits(oids)
        commits.reverse()

        logger.debug("Resolved %s..%s to %d commit(s)", start_ref, end_ref, len(commits))
        return commits
