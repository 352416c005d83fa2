from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, TypeVar

from PIL import Image

from ..models import Diagnostics

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Decoders are tried in this order for every candidate file.
LOGO_FORMATS: Tuple[str, ...] = ("PNG", "JPEG")


class AssetNotFound(LookupError):
    def __init__(self, message: str, failures: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.failures = list(failures)


def first_success(attempts: Iterable[Tuple[str, Callable[[], T]]]) -> T:
    """
    Run labelled attempts in order and return the first result.

    An attempt fails by raising; the error is remembered and the next one
    runs. Exhausting the chain raises AssetNotFound listing every failure.
    """
    failures: List[str] = []
    for label, attempt in attempts:
        try:
            return attempt()
        except Exception as exc:
            failures.append(f"{label}: {exc}")
    raise AssetNotFound("No attempt succeeded", failures)


def decode_image(path: Path) -> Image.Image:
    def _decoder(fmt: str) -> Callable[[], Image.Image]:
        def _open() -> Image.Image:
            with Image.open(path, formats=[fmt]) as img:
                img.load()
                return img.copy()

        return _open

    return first_success((fmt, _decoder(fmt)) for fmt in LOGO_FORMATS)


def _load_candidate(path: Path) -> Callable[[], Tuple[Path, Image.Image]]:
    def _load() -> Tuple[Path, Image.Image]:
        if not path.is_file():
            raise FileNotFoundError(path)
        try:
            return path, decode_image(path)
        except AssetNotFound as exc:
            raise ValueError("; ".join(exc.failures)) from exc

    return _load


def resolve_logo(
    candidates: Sequence[Path],
    diagnostics: Optional[Diagnostics] = None,
) -> Optional[Tuple[Path, Image.Image]]:
    """First candidate that exists and decodes as PNG or JPEG, or None."""
    try:
        path, image = first_success((str(p), _load_candidate(Path(p))) for p in candidates)
    except AssetNotFound as exc:
        message = "Logo not found; tried: %s"
        detail = ", ".join(str(p) for p in candidates) or "(no candidates)"
        if diagnostics is not None:
            diagnostics.warn(logger, message, detail)
        else:
            logger.warning(message, detail)
        for failure in exc.failures:
            logger.debug("Logo candidate failed: %s", failure)
        return None
    logger.info("Logo loaded from %s (%s)", path, image.format or image.mode)
    return path, image
