from __future__ import annotations

import time
from pathlib import Path

from slugify import slugify

from . import config


FILE_PREFIX = "Orden_Autorizacion_Compra"

ARTIFACT_SUFFIXES = {
    "pdf": ".pdf",
    "preview": ".png",
    "error": ".error.log",
}


def safe_folio(folio: str) -> str:
    token = slugify(folio or "", separator="_", lowercase=False, regex_pattern=r"[^A-Za-z0-9]+")
    return token or "sin_folio"


def output_filename(folio: str, timestamp_ms: int | None = None) -> str:
    stamp = int(time.time() * 1000) if timestamp_ms is None else int(timestamp_ms)
    return f"{FILE_PREFIX}_{safe_folio(folio)}_{stamp}.pdf"


def output_dir(base_dir: Path | None = None) -> Path:
    root = base_dir or config.OUT_DIR
    root.mkdir(parents=True, exist_ok=True)
    return root


def pdf_path(folio: str, base_dir: Path | None = None, timestamp_ms: int | None = None) -> Path:
    return output_dir(base_dir) / output_filename(folio, timestamp_ms)


def artifact_path(pdf: Path, artifact_type: str) -> Path:
    """Sibling file of a rendered PDF (preview image, error log)."""
    return pdf.with_name(pdf.stem + ARTIFACT_SUFFIXES[artifact_type])


def error_path(folio: str, base_dir: Path | None = None) -> Path:
    return output_dir(base_dir) / f"{safe_folio(folio)}{ARTIFACT_SUFFIXES['error']}"
