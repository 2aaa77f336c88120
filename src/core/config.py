"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que los adaptadores (git/HTTP) lean config de forma consistente.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.models import TrackerConfig, TrackerCredentials
from core.errors import ConfigurationError


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias).

    Objetivo: que runners de CI y equipos de desarrollo guarden las credenciales
    del tracker fuera del repositorio que se valida.
    """

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "ticket-gate"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "ticket-gate"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "ticket-gate"
    return Path.home() / ".config" / "ticket-gate"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str | None], *, env_path: Path | None = None) -> Path:
    """Escribe/actualiza variables en el .env global del usuario."""

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# TICKET-GATE user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin meter lógica en el Core.
    - Un único contrato de configuración para CLI/adaptadores.
    """

    model_config = SettingsConfigDict(
        env_prefix="TICKET_GATE_",
        extra="ignore",
        case_sensitive=False,
        # Gana el último archivo: el .env del usuario pisa al .env del proyecto.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    jira_url: str | None = Field(
        default=None,
        description="URL base de la instancia de Jira (p. ej. https://example.atlassian.net).",
    )
    jira_username: str | None = Field(
        default=None,
        description="Usuario (normalmente el email de la cuenta) para HTTP Basic auth.",
    )
    jira_api_token: SecretStr | None = Field(
        default=None,
        description="API token asociado a `jira_username`.",
    )

    repo_path: Path = Field(
        default=Path("."),
        description="Working tree (o cualquier ruta dentro) del repositorio a validar.",
    )

    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout por request al tracker (segundos).",
    )
    user_agent: str = Field(
        default="ticket-gate/0.1 (+https://local)",
        min_length=1,
        description="User-Agent enviado al tracker.",
    )
    max_concurrency: int = Field(
        default=1,
        ge=1,
        le=32,
        description="Máximo de consultas al tracker en vuelo. 1 mantiene la ejecución estrictamente secuencial.",
    )

    def tracker_config(self) -> TrackerConfig:
        """Construye el contrato del tracker; falla listando todos los settings que faltan."""

        url, username, token = self.jira_url, self.jira_username, self.jira_api_token
        if not url or not username or not token:
            missing = [
                name
                for name, value in (
                    ("jira_url", url),
                    ("jira_username", username),
                    ("jira_api_token", token),
                )
                if not value
            ]
            names = ", ".join(f"{self.model_config['env_prefix']}{n.upper()}" for n in missing)
            raise ConfigurationError(f"Missing tracker settings: {names}")

        return TrackerConfig(
            base_url=url,
            credentials=TrackerCredentials(username=username, api_token=token),
        )
