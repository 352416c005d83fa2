from __future__ import annotations

import logging
from pathlib import Path

import fitz  # PyMuPDF

from ..storage import artifact_path

logger = logging.getLogger(__name__)


def _render_page_to_png(doc: fitz.Document, page_index: int, out_path: Path, min_px: int) -> None:
    page = doc.load_page(page_index)

    # scale so the short side of the raster reaches at least min_px
    rect = page.rect
    short_side = min(rect.width, rect.height)
    zoom = max(1.0, min_px / float(short_side))
    mat = fitz.Matrix(zoom, zoom)

    pix = page.get_pixmap(matrix=mat, alpha=False)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    pix.save(str(out_path))


def render_preview(pdf_path: Path, out_path: Path | None = None, min_px: int = 1600) -> Path:
    target = out_path or artifact_path(pdf_path, "preview")
    with fitz.open(str(pdf_path)) as doc:
        if doc.page_count < 1:
            raise ValueError(f"PDF has no pages: {pdf_path}")
        _render_page_to_png(doc, 0, target, min_px)
    logger.info("Preview written to %s", target)
    return target
