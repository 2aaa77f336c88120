"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Validación estricta y documentación autocontenida (Field) sin acoplar el
  Core a librerías de I/O.
- Los reportes se serializan a JSON para artefactos de CI sin capa de mapeo extra.

Nota:
- Estos modelos describen *qué* es una validación, no *cómo* se obtienen los datos.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, SecretStr, computed_field, model_validator
from pydantic.config import ConfigDict

TicketKey = str


class CommitRecord(BaseModel):
    """Un commit del rango resuelto.

    Lo crea el resolver del rango; después es de solo lectura.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Identificador corto y estable del commit (hash abreviado).",
    )
    summary: str = Field(
        default="",
        description="Primera línea del mensaje del commit (puede estar vacía).",
    )


class ExistenceVerdict(str, Enum):
    """Resultado de tres vías de una consulta al tracker."""

    EXISTS = "exists"
    NOT_FOUND = "not_found"
    LOOKUP_FAILED = "lookup_failed"


class IssueLookup(BaseModel):
    """Resultado de preguntar al tracker si un ticket existe.

    Los fallos de consulta son valores, no excepciones: una consulta fallida solo
    invalida el commit que la originó.
    """

    model_config = ConfigDict(frozen=True)

    ticket_key: TicketKey
    verdict: ExistenceVerdict
    detail: str | None = Field(
        default=None,
        description="Texto de diagnóstico; obligatorio cuando la consulta falló.",
    )
    status_code: int | None = Field(
        default=None,
        description="Status HTTP devuelto por el tracker (None en errores de transporte).",
    )
    url: str | None = None

    @model_validator(mode="after")
    def _detail_matches_verdict(self) -> "IssueLookup":
        if self.verdict is ExistenceVerdict.LOOKUP_FAILED and not self.detail:
            raise ValueError("a failed lookup must carry a detail message")
        return self

    @classmethod
    def exists(cls, key: TicketKey, *, status_code: int = 200, url: str | None = None) -> "IssueLookup":
        return cls(ticket_key=key, verdict=ExistenceVerdict.EXISTS, status_code=status_code, url=url)

    @classmethod
    def not_found(cls, key: TicketKey, *, status_code: int = 404, url: str | None = None) -> "IssueLookup":
        return cls(ticket_key=key, verdict=ExistenceVerdict.NOT_FOUND, status_code=status_code, url=url)

    @classmethod
    def failed(
        cls,
        key: TicketKey,
        detail: str,
        *,
        status_code: int | None = None,
        url: str | None = None,
    ) -> "IssueLookup":
        return cls(
            ticket_key=key,
            verdict=ExistenceVerdict.LOOKUP_FAILED,
            detail=detail,
            status_code=status_code,
            url=url,
        )


class Verdict(str, Enum):
    VALID = "valid"
    INVALID = "invalid"


class ValidationRecord(BaseModel):
    """Resultado de validación de un commit.

    Invariante: `verdict` es VALID sii se encontró al menos una clave y el
    tracker confirmó la primera. `reason` existe sii es INVALID.
    """

    model_config = ConfigDict(frozen=True)

    commit: CommitRecord
    ticket_keys: tuple[TicketKey, ...] = Field(
        default=(),
        description="Claves encontradas en el summary, en orden de aparición (con duplicados).",
    )
    verdict: Verdict
    reason: str | None = Field(
        default=None,
        description="Explicación legible cuando el commit es inválido.",
    )
    checked_key: TicketKey | None = Field(
        default=None,
        description="Clave enviada al tracker (siempre la primera encontrada).",
    )
    status_code: int | None = Field(
        default=None,
        description="Status HTTP del tracker para `checked_key`, si llegó a recibirse.",
    )

    @model_validator(mode="after")
    def _reason_matches_verdict(self) -> "ValidationRecord":
        if self.verdict is Verdict.INVALID and not self.reason:
            raise ValueError("an invalid record must carry a reason")
        if self.verdict is Verdict.VALID:
            if self.reason is not None:
                raise ValueError("a valid record cannot carry a reason")
            if not self.ticket_keys:
                raise ValueError("a valid record needs at least one ticket key")
        return self

    @property
    def is_valid(self) -> bool:
        return self.verdict is Verdict.VALID


class ValidationSummary(BaseModel):
    """Conteos agregados de una ejecución. `invalid` es siempre `total - valid`."""

    model_config = ConfigDict(frozen=True)

    total: int = Field(default=0, ge=0)
    valid: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _valid_within_total(self) -> "ValidationSummary":
        if self.valid > self.total:
            raise ValueError("valid count cannot exceed total count")
        return self

    @computed_field  # type: ignore[prop-decorator]
    @property
    def invalid(self) -> int:
        return self.total - self.valid

    @computed_field  # type: ignore[prop-decorator]
    @property
    def success(self) -> bool:
        # Cero commits es un éxito trivial.
        return self.invalid == 0

    @classmethod
    def from_records(cls, records: list[ValidationRecord] | tuple[ValidationRecord, ...]) -> "ValidationSummary":
        return cls(total=len(records), valid=sum(1 for r in records if r.is_valid))


class ValidationReport(BaseModel):
    """Agregado de una ejecución completa: todos los registros, en orden de commit, más el resumen."""

    start_ref: str
    end_ref: str
    records: list[ValidationRecord] = Field(default_factory=list)
    summary: ValidationSummary = Field(default_factory=ValidationSummary)
    generated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Momento en que se generó el reporte (UTC).",
    )

    @property
    def invalid_records(self) -> list[ValidationRecord]:
        return [r for r in self.records if not r.is_valid]


class TrackerCredentials(BaseModel):
    """Credenciales opacas que recibe el checker de existencia.

    Hoy: HTTP Basic con usuario + API token. El token es un `SecretStr`
    para que nunca aparezca en reprs, logs ni reportes exportados.
    """

    model_config = ConfigDict(frozen=True)

    username: str = Field(..., min_length=1)
    api_token: SecretStr

    def basic_auth(self) -> tuple[str, str]:
        return self.username, self.api_token.get_secret_value()


class TrackerConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    base_url: str = Field(
        ...,
        min_length=1,
        description="URL base del tracker; se tolera una barra final.",
    )
    credentials: TrackerCredentials

    @property
    def api_root(self) -> str:
        return self.base_url.rstrip("/")
