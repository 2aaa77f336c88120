"""Extracción de claves de ticket desde el texto del commit.

Función pura, sin I/O: solo lee un string.

Regla:
- Una clave es una o más letras ASCII mayúsculas, un guion y uno o más dígitos
  (`ABC-123`). Los códigos en minúscula (`abc-123`) no son claves.
- Coincidencias sin solapamiento, de izquierda a derecha; se conservan duplicados.
"""

from __future__ import annotations

import re

from core.domain.models import TicketKey

TICKET_KEY_RE = re.compile(r"[A-Z]+-[0-9]+")


def extract_ticket_keys(text: str) -> list[TicketKey]:
    """Devuelve todas las claves de `text`, en orden de aparición."""

    if not text:
        return []
    return TICKET_KEY_RE.findall(text)
