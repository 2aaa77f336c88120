"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts y headers para todas las llamadas al tracker.
- Facilita testeo: se puede inyectar un cliente con `httpx.MockTransport`.
"""

from __future__ import annotations

import httpx

from core.config import AppSettings


def build_async_client(settings: AppSettings | None = None) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` con defaults seguros.

    Por qué un builder:
    - Centraliza timeouts/headers para que todas las llamadas se comporten igual.
    - La auth la añade el llamador por request, así un cliente sirve para cualquier tracker.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json",
    }
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
    )


def describe_transport_error(exc: Exception) -> str:
    """Texto legible de un fallo de transporte (algunos errores de httpx tienen str() vacío)."""

    text = str(exc).strip()
    return text or exc.__class__.__name__
