from __future__ import annotations

from pathlib import Path
from typing import List


BASE_DIR = Path(__file__).resolve().parents[1]
OUT_DIR = BASE_DIR / "out"

LOGO_FILENAME = "logo-r.png"

TAX_RATE = 0.16
DATE_SENTINEL = "__/__/____"
CURRENCY_FALLBACK = "$0.00"

AUTHORIZERS: List[str] = [
    "Dirección General",
    "Dirección Operativa",
    "Dirección Administrativa",
    "Dirección Tecnología",
]

DEFAULT_DESCRIPTION = "Sin descripción"
DEFAULT_COMMENTS = "Sin comentarios"

# Field bounds enforced on ingest
FOLIO_MAX_LEN = 50
DESCRIPTION_MIN_LEN = 10
DESCRIPTION_MAX_LEN = 1000
COMMENTS_MAX_LEN = 2000
AMOUNT_MAX = 999_999_999

DOCUMENT_TITLE = "ORDEN DE AUTORIZACIÓN Y COMPRA"
DOCUMENT_SUBTITLE = "RUN SOLUTIONS | GRUPO NEARLINK 360"
WATERMARK_LINES = ("RUN SOLUTIONS", "GRUPO NEARLINK 360")
INTRO_TEXT = "Documento interno de autorización y compra."
DATES_LEGEND = (
    "Las fechas proporcionadas son aproximadas y siempre se recomienda "
    "considerar la fecha máxima de pago."
)
CONFIDENTIALITY_LEGEND = (
    "ESTE ES UN DOCUMENTO CONFIDENCIAL Y DE USO INTERNO DE GRUPO NEARLINK 360 Y RUN SOLUTIONS. "
    "Es válido, tanto interna como externamente, como orden de compra y como soporte para la "
    "emisión de facturas y demás comprobantes fiscales relacionados. "
    "La aceptación y/o ejecución de esta orden de compra formaliza la relación comercial con "
    "RUN Solutions y Grupo Nearlink 360 y se rige por los contratos, acuerdos marco y términos "
    "y condiciones comerciales vigentes entre las partes."
)
CLOSING_TEXT = "Documento generado electrónicamente para fines de control interno."


def logo_candidates(cwd: Path | None = None) -> List[Path]:
    """Ordered logo locations, one per deployment layout; the first usable one wins."""
    root = cwd or Path.cwd()
    return [
        root / "public" / LOGO_FILENAME,
        root / LOGO_FILENAME,
        root / ".next" / "standalone" / "public" / LOGO_FILENAME,
        Path("/app") / "public" / LOGO_FILENAME,
        root.parent / "public" / LOGO_FILENAME,
    ]


def set_out_dir(path: Path) -> None:
    global OUT_DIR
    OUT_DIR = path
