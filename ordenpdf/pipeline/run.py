from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from .. import config
from ..models import OrderRecord
from ..storage import error_path, pdf_path
from .render_pdf import write_order_pdf
from .render_preview import render_preview


logger = logging.getLogger(__name__)


def _write_error(folio: str, message: str) -> Path:
    path = error_path(folio, base_dir=config.OUT_DIR)
    path.write_text(message, encoding="utf-8")
    return path


def process_record(
    record: OrderRecord,
    logo_paths: Optional[Sequence[Path]] = None,
    preview: bool = False,
) -> tuple[Path, List[str]]:
    output = pdf_path(record.folio, base_dir=config.OUT_DIR)
    result = write_order_pdf(record, output, logo_paths=logo_paths)
    for warning in result.warnings:
        logger.info("%s: %s", record.folio, warning)
    if preview:
        render_preview(output)
    return output, result.warnings


def run_batch(
    records: Iterable[OrderRecord],
    logo_paths: Optional[Sequence[Path]] = None,
    preview: bool = False,
) -> dict[str, list]:
    results: dict[str, list] = {"READY": [], "FAILED": []}
    for record in records:
        try:
            output, _ = process_record(record, logo_paths=logo_paths, preview=preview)
        except Exception as exc:
            logger.exception("Render failed for %s", record.folio)
            _write_error(record.folio, str(exc) or exc.__class__.__name__)
            results["FAILED"].append(record.folio)
            continue
        results["READY"].append(output)
    return results
