"""Exportación JSON del reporte de validación.

Por qué JSON:
- Los sistemas de CI pueden archivar la ejecución como artefacto o pasarla a otros gates.
- Deja un registro legible por máquina junto al reporte de consola.
"""

from __future__ import annotations

import json
from pathlib import Path

from core.domain.models import ValidationReport


def export_report_json(*, report: ValidationReport, output_path: Path) -> Path:
    """Exporta un `ValidationReport` como JSON UTF-8 con un layout estable."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = report.model_dump(mode="json")
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return output_path
