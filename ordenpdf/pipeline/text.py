from __future__ import annotations

import logging
import re
from typing import List, Optional

from reportlab.pdfbase import pdfmetrics

from ..models import Diagnostics

logger = logging.getLogger(__name__)

_WS_RE = re.compile(r"\s+")


def normalize_text(text: Optional[str]) -> str:
    if not text or not isinstance(text, str):
        return ""
    return _WS_RE.sub(" ", text).strip()


def text_width(text: str, font_name: str, font_size: float) -> float:
    return pdfmetrics.stringWidth(text, font_name, font_size)


def wrap_text(
    text: Optional[str],
    font_name: str,
    font_size: float,
    max_width: float,
    diagnostics: Optional[Diagnostics] = None,
) -> List[str]:
    """
    Greedy word wrap by measured width.

    A word that does not fit on an empty line is still placed there, so no
    word is ever dropped and no returned line is empty. A failed measurement
    counts as "does not fit" for that candidate only.
    """
    normalized = normalize_text(text)
    if not normalized:
        return []

    lines: List[str] = []
    current = ""

    for word in normalized.split(" "):
        candidate = f"{current} {word}" if current else word
        try:
            fits = text_width(candidate, font_name, font_size) <= max_width
        except Exception as exc:
            if diagnostics is not None:
                diagnostics.warn(logger, "Width measurement failed for %r: %s", candidate, exc)
            else:
                logger.warning("Width measurement failed for %r: %s", candidate, exc)
            fits = False

        if fits or not current:
            current = candidate
            continue

        lines.append(current)
        current = word

    if current:
        lines.append(current)

    return lines
