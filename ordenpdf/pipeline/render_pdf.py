from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Callable, Dict, List, NamedTuple, Optional, Sequence

from PIL import Image
from reportlab.lib import colors
from reportlab.lib.pagesizes import LETTER
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas

from .. import config
from ..models import AmountMode, Diagnostics, OrderRecord, Primitive, RenderResult
from .assets import resolve_logo
from .formatting import format_currency, format_date
from .money import breakdown
from .text import normalize_text, text_width, wrap_text

logger = logging.getLogger(__name__)

MM = 2.83465

PAGE_W, PAGE_H = LETTER
MARGIN_X = 15 * MM
CONTENT_W = PAGE_W - 2 * MARGIN_X
HEADER_H = 20 * MM

INTRO_GAP = 8 * MM
META_GAP = 8 * MM
META_BOX_H = 32 * MM
META_FIRST_ROW = 7 * MM
META_ROW_STEP = 6 * MM
LABEL_VALUE_GAP = 3 * MM

DATES_LEGEND_GAP = 5 * MM
SMALL_LINE_H = 9
BODY_LINE_H = 12
SECTION_GAP = 8 * MM
BAR_H = 7 * MM
BODY_FIRST_BASELINE = 7 * MM
BODY_BOTTOM_PAD = 3 * MM

DESCRIPTION_BOX_MIN = 40 * MM
DESCRIPTION_BOX_MAX = 55 * MM
COMMENTS_BOX_MIN = 30 * MM
COMMENTS_BOX_MAX = 55 * MM
SUMMARY_BOX_H = 18 * MM
SUMMARY_FIRST_ROW = 6 * MM
SUMMARY_ROW_STEP = 5 * MM

SIGNATURE_GAP = 18 * MM
SIGNATURE_FLOOR = 46 * MM
SIGNATURE_HALF_W = 35 * MM
SIGNATURE_CAPTION_STEP = 6 * MM
LEGEND_GAP = 6 * MM
LEGEND_FLOOR = 28 * MM
LEGEND_BOX_H = 20 * MM
CLOSING_GAP = 5 * MM

LOGO_W = 42 * MM
LOGO_H = 14 * MM
LOGO_TOP_PAD = 3 * MM

SIGNATURE_ROLE = "Dirección General"
SIGNATURE_CAPTIONS = ("AUTORIZA", "DIRECCIÓN GENERAL")

PALETTE: Dict[str, str] = {
    "header": "#C80000",
    "white": "#FFFFFF",
    "black": "#000000",
    "bar": "#F0F0F0",
    "legend_fill": "#FAFAFA",
    "muted_text": "#787878",
    "dark_text": "#505050",
    "watermark": "#F5F5F5",
    "border": "#B4B4B4",
    "border_light": "#C8C8C8",
    "legend_border": "#DCDCDC",
}


def _hex(value: str, default=colors.black) -> colors.Color:
    if not value:
        return default
    try:
        return colors.HexColor("#" + str(value).lstrip("#"))
    except Exception:
        return default


def _c(name: str) -> colors.Color:
    return _hex(PALETTE.get(name, ""))


class RenderError(Exception):
    """The page could not be produced at all."""


class FontSet(NamedTuple):
    regular: str
    bold: str
    italic: str
    times_italic: str


STANDARD_FONTS = FontSet(
    regular="Helvetica",
    bold="Helvetica-Bold",
    italic="Helvetica-Oblique",
    times_italic="Times-Italic",
)
# WinAnsi, the encoding reportlab uses for the standard fonts
STANDARD_ENCODING = "cp1252"


def load_fonts(fonts: FontSet) -> FontSet:
    for name in fonts:
        try:
            pdfmetrics.getFont(name)
        except Exception as exc:
            logger.exception("Font %s could not be loaded", name)
            raise RenderError(f"Could not load PDF fonts: {exc}") from exc
    return fonts


class LayoutCursor:
    """
    Vertical position where the next section starts.

    It only moves down the page, except through `clamp`, which lifts it to a
    floor measured from the bottom edge. Named marks record where each
    section landed.
    """

    def __init__(self, top: float) -> None:
        self._y = float(top)
        self.positions: Dict[str, float] = {}
        self.clamped: List[str] = []

    def current(self) -> float:
        return self._y

    def advance(self, amount: float) -> float:
        if amount < 0:
            raise ValueError(f"Cursor can only move down the page (got {amount})")
        self._y -= amount
        return self._y

    def mark(self, name: str) -> float:
        self.positions[name] = self._y
        return self._y

    def clamp(self, floor: float, name: str) -> bool:
        if self._y >= floor:
            return False
        self._y = float(floor)
        self.clamped.append(name)
        return True


class PageCanvas:
    """
    One Letter page. Drawing calls are recorded in insertion order; a call
    that fails is reported to the diagnostics and skipped.
    """

    def __init__(self, buffer: io.BytesIO, diagnostics: Diagnostics, title: str = "") -> None:
        self.width = PAGE_W
        self.height = PAGE_H
        self.diagnostics = diagnostics
        self.primitives: List[Primitive] = []
        self._buffer = buffer
        self._canv = canvas.Canvas(buffer, pagesize=(PAGE_W, PAGE_H))
        if title:
            self._canv.setTitle(title)
        self._canv.setAuthor("RUN Solutions | Grupo Nearlink 360")
        self._canv.setCreator("ordenpdf")

    def embed_fonts(self, fonts: FontSet) -> FontSet:
        for name in fonts:
            # setFont registers the font resource even before any text uses it
            self._canv.setFont(name, 10)
        return fonts

    def measure(self, text: str, font: str, size: float) -> float:
        try:
            return text_width(text, font, size)
        except Exception as exc:
            self.diagnostics.warn(logger, "Width measurement failed for %r: %s", text, exc)
            return 0.0

    def _emit(self, primitive: Primitive, draw: Callable[[canvas.Canvas], None]) -> bool:
        self._canv.saveState()
        try:
            draw(self._canv)
        except Exception as exc:
            self.diagnostics.warn(
                logger,
                "Skipped %s at (%.1f, %.1f): %s",
                primitive.kind,
                primitive.x,
                primitive.y,
                exc,
            )
            return False
        finally:
            self._canv.restoreState()
        self.primitives.append(primitive)
        return True

    def text(
        self,
        x: float,
        y: float,
        text: str,
        font: str,
        size: float,
        color: colors.Color,
        rotate: float = 0.0,
    ) -> bool:
        def _draw(c: canvas.Canvas) -> None:
            c.setFont(font, size)
            c.setFillColor(color)
            if rotate:
                c.translate(x, y)
                c.rotate(rotate)
                c.drawString(0, 0, text)
            else:
                c.drawString(x, y, text)

        try:
            text.encode(STANDARD_ENCODING)
        except UnicodeEncodeError as exc:
            self.diagnostics.warn(
                logger, "Text %r has characters the standard fonts cannot show: %r", text, exc.object[exc.start : exc.end]
            )
        return self._emit(Primitive("text", x, y, text=text, font=font, size=size), _draw)

    def centered_text(self, y: float, text: str, font: str, size: float, color: colors.Color) -> bool:
        x = (self.width - self.measure(text, font, size)) / 2
        return self.text(x, y, text, font, size, color)

    def rect(
        self,
        x: float,
        y: float,
        w: float,
        h: float,
        fill: Optional[colors.Color] = None,
        stroke: Optional[colors.Color] = None,
        line_width: float = 0.85,
    ) -> bool:
        def _draw(c: canvas.Canvas) -> None:
            c.setLineWidth(line_width)
            if fill is not None:
                c.setFillColor(fill)
            if stroke is not None:
                c.setStrokeColor(stroke)
            c.rect(x, y, w, h, stroke=1 if stroke is not None else 0, fill=1 if fill is not None else 0)

        return self._emit(Primitive("rect", x, y, width=w, height=h), _draw)

    def line(self, x1: float, y1: float, x2: float, y2: float, color: colors.Color, thickness: float = 0.85) -> bool:
        def _draw(c: canvas.Canvas) -> None:
            c.setStrokeColor(color)
            c.setLineWidth(thickness)
            c.line(x1, y1, x2, y2)

        return self._emit(Primitive("line", x1, y1, width=x2 - x1, height=y2 - y1), _draw)

    def image(self, image: Image.Image, x: float, y: float, w: float, h: float) -> bool:
        def _draw(c: canvas.Canvas) -> None:
            c.drawImage(
                ImageReader(image),
                x,
                y,
                width=w,
                height=h,
                mask="auto",
                preserveAspectRatio=True,
                anchor="e",
            )

        return self._emit(Primitive("image", x, y, width=w, height=h), _draw)

    def save(self) -> bytes:
        try:
            self._canv.showPage()
            self._canv.save()
        except Exception as exc:
            logger.exception("PDF serialization failed")
            raise RenderError(f"Error serializing PDF: {exc}") from exc
        return self._buffer.getvalue()


# -------------------- Sections --------------------
def _draw_watermark(page: PageCanvas, fonts: FontSet) -> None:
    cx = page.width / 2
    cy = page.height / 2
    low, high = config.WATERMARK_LINES
    page.text(cx, cy - 22 * MM, low, fonts.bold, 30, _c("watermark"), rotate=35)
    page.text(cx, cy + 28 * MM, high, fonts.bold, 30, _c("watermark"), rotate=35)


def _draw_header(page: PageCanvas, fonts: FontSet, cursor: LayoutCursor, logo_paths: Sequence[Path]) -> None:
    top = cursor.current()
    page.rect(0, top - HEADER_H, page.width, HEADER_H, fill=_c("header"))
    page.centered_text(top - 9 * MM, config.DOCUMENT_TITLE, fonts.bold, 14, _c("white"))
    page.centered_text(top - 16 * MM, config.DOCUMENT_SUBTITLE, fonts.bold, 9, _c("white"))

    logo = resolve_logo(logo_paths, page.diagnostics)
    if logo is not None:
        _, image = logo
        page.image(image, page.width - MARGIN_X - LOGO_W, top - LOGO_TOP_PAD - LOGO_H, LOGO_W, LOGO_H)

    cursor.advance(HEADER_H)
    cursor.mark("header_bottom")


def _label_value(page: PageCanvas, fonts: FontSet, x: float, y: float, label: str, value: str) -> None:
    page.text(x, y, label, fonts.bold, 10, _c("black"))
    value_x = x + page.measure(label, fonts.bold, 10) + LABEL_VALUE_GAP
    page.text(value_x, y, value, fonts.regular, 10, _c("black"))


def _draw_metadata(page: PageCanvas, fonts: FontSet, cursor: LayoutCursor, record: OrderRecord) -> None:
    cursor.advance(META_GAP)
    top = cursor.mark("metadata_top")
    page.rect(MARGIN_X, top - META_BOX_H, CONTENT_W, META_BOX_H, stroke=_c("border"))

    left = MARGIN_X + 2 * MM
    right = MARGIN_X + CONTENT_W / 2
    row = top - META_FIRST_ROW

    _label_value(page, fonts, left, row, "Folio:", normalize_text(record.folio) or "________")
    _label_value(page, fonts, right, row, "Fecha creación OC:", format_date(record.created_date))

    row -= META_ROW_STEP
    authorizer = normalize_text(record.authorizer) or "______________________"
    _label_value(page, fonts, left, row, "Solicitante / Quien autoriza:", authorizer)

    row -= META_ROW_STEP
    _label_value(page, fonts, left, row, "Monto autorizado (MXN):", format_currency(record.amount))

    row -= META_ROW_STEP
    _label_value(page, fonts, left, row, "Fecha mínima de pago:", format_date(record.min_pay_date))
    _label_value(page, fonts, right, row, "Fecha máxima de pago:", format_date(record.max_pay_date))

    cursor.advance(META_BOX_H)
    cursor.mark("metadata_bottom")


def _draw_dates_legend(page: PageCanvas, fonts: FontSet, cursor: LayoutCursor) -> None:
    cursor.advance(DATES_LEGEND_GAP)
    first = cursor.mark("dates_legend_top")
    lines = wrap_text(config.DATES_LEGEND, fonts.regular, 8, CONTENT_W, page.diagnostics)
    for index, line in enumerate(lines):
        page.text(MARGIN_X, first - index * SMALL_LINE_H, line, fonts.regular, 8, _c("dark_text"))
    cursor.advance(len(lines) * SMALL_LINE_H)
    cursor.mark("dates_legend_bottom")


def _draw_section_bar(page: PageCanvas, fonts: FontSet, cursor: LayoutCursor, name: str, label: str) -> float:
    cursor.advance(SECTION_GAP)
    top = cursor.mark(f"{name}_top")
    page.rect(MARGIN_X, top - BAR_H, CONTENT_W, BAR_H, fill=_c("bar"))
    page.text(MARGIN_X + 2 * MM, top - 5 * MM, label, fonts.bold, 10, _c("black"))
    return cursor.advance(BAR_H)


def _text_box_height(line_count: int, min_h: float, max_h: float) -> float:
    needed = BODY_FIRST_BASELINE + BODY_LINE_H * max(line_count - 1, 0) + BODY_BOTTOM_PAD
    return min(max(min_h, needed), max_h)


def _draw_text_section(
    page: PageCanvas,
    fonts: FontSet,
    cursor: LayoutCursor,
    name: str,
    label: str,
    body: str,
    min_h: float,
    max_h: float,
) -> List[str]:
    box_top = _draw_section_bar(page, fonts, cursor, name, label)
    lines = wrap_text(body, fonts.regular, 10, CONTENT_W - 6 * MM, page.diagnostics)
    box_h = _text_box_height(len(lines), min_h, max_h)
    page.rect(MARGIN_X, box_top - box_h, CONTENT_W, box_h, stroke=_c("border_light"))
    for index, line in enumerate(lines):
        page.text(
            MARGIN_X + 3 * MM,
            box_top - BODY_FIRST_BASELINE - index * BODY_LINE_H,
            line,
            fonts.regular,
            10,
            _c("black"),
        )
    cursor.advance(box_h)
    cursor.mark(f"{name}_bottom")
    return lines


def _draw_summary(page: PageCanvas, fonts: FontSet, cursor: LayoutCursor, amount: float, mode: AmountMode) -> None:
    box_top = _draw_section_bar(page, fonts, cursor, "summary", "RESUMEN DE MONTOS")
    page.rect(MARGIN_X, box_top - SUMMARY_BOX_H, CONTENT_W, SUMMARY_BOX_H, stroke=_c("border_light"))

    money = breakdown(amount, mode)
    label_x = MARGIN_X + 3 * MM
    value_right = MARGIN_X + CONTENT_W - 3 * MM
    rows = [
        ("Subtotal:", money.subtotal, fonts.regular),
        ("IVA 16%:", money.tax, fonts.regular),
        ("Total:", money.total, fonts.bold),
    ]
    y = box_top - SUMMARY_FIRST_ROW
    for label, value, font in rows:
        page.text(label_x, y, label, font, 10, _c("black"))
        text = format_currency(value)
        page.text(value_right - page.measure(text, font, 10), y, text, font, 10, _c("black"))
        y -= SUMMARY_ROW_STEP

    cursor.advance(SUMMARY_BOX_H)
    cursor.mark("summary_bottom")


def _draw_signature(page: PageCanvas, fonts: FontSet, cursor: LayoutCursor) -> None:
    cursor.advance(SIGNATURE_GAP)
    if cursor.clamp(SIGNATURE_FLOOR, "signature"):
        page.diagnostics.warn(logger, "Signature lifted to bottom floor; it may overlap the amounts summary")
    y = cursor.mark("signature_line")
    cx = page.width / 2

    page.line(cx - SIGNATURE_HALF_W, y, cx + SIGNATURE_HALF_W, y, _c("black"))
    role_w = page.measure(SIGNATURE_ROLE, fonts.times_italic, 14)
    page.text(cx - role_w / 2, y + 1 * MM, SIGNATURE_ROLE, fonts.times_italic, 14, _c("black"))

    for caption in SIGNATURE_CAPTIONS:
        cursor.advance(SIGNATURE_CAPTION_STEP)
        width = page.measure(caption, fonts.bold, 10)
        page.text(cx - width / 2, cursor.current(), caption, fonts.bold, 10, _c("black"))
    cursor.mark("signature_caption")


def _draw_confidentiality(page: PageCanvas, fonts: FontSet, cursor: LayoutCursor) -> None:
    cursor.advance(LEGEND_GAP)
    if cursor.clamp(LEGEND_FLOOR, "legend"):
        page.diagnostics.warn(logger, "Confidentiality legend lifted to bottom floor; it may overlap the signature")
    top = cursor.mark("legend_top")

    page.rect(
        MARGIN_X,
        top - LEGEND_BOX_H,
        CONTENT_W,
        LEGEND_BOX_H,
        fill=_c("legend_fill"),
        stroke=_c("legend_border"),
    )
    lines = wrap_text(config.CONFIDENTIALITY_LEGEND, fonts.regular, 8, CONTENT_W - 6 * MM, page.diagnostics)
    for index, line in enumerate(lines):
        page.text(
            MARGIN_X + 3 * MM,
            top - BODY_FIRST_BASELINE - index * SMALL_LINE_H,
            line,
            fonts.regular,
            8,
            _c("muted_text"),
        )
    cursor.advance(LEGEND_BOX_H)
    cursor.mark("legend_bottom")


def _draw_closing(page: PageCanvas, fonts: FontSet, cursor: LayoutCursor) -> None:
    cursor.advance(CLOSING_GAP)
    y = cursor.mark("closing")
    page.centered_text(y, config.CLOSING_TEXT, fonts.regular, 8, _c("muted_text"))


# -------------------- Entry points --------------------
REQUIRED_FIELDS = ("folio", "description", "amount", "created_date", "authorizer")


def _missing_fields(record: OrderRecord) -> List[str]:
    return [name for name in REQUIRED_FIELDS if not getattr(record, name, None)]


def _amount_mode(value) -> AmountMode:
    try:
        return AmountMode(value)
    except ValueError:
        return AmountMode.PLUS_TAX


def render_order(record: OrderRecord, logo_paths: Optional[Sequence[Path]] = None) -> RenderResult:
    """
    Lay out one purchase order on a single Letter page.

    Sections are emitted top to bottom in a fixed order; each starts where
    the previous one ended. Font and serialization failures raise
    RenderError; any other drawing problem is skipped and listed in
    RenderResult.warnings.
    """
    if record is None:
        raise RenderError("Order record is required")
    missing = _missing_fields(record)
    if missing:
        raise RenderError(f"Missing required record fields: {', '.join(missing)}")

    paths = list(logo_paths) if logo_paths is not None else config.logo_candidates()
    mode = _amount_mode(record.amount_mode)
    diagnostics = Diagnostics()

    fonts = load_fonts(STANDARD_FONTS)

    try:
        page = PageCanvas(io.BytesIO(), diagnostics, title=f"Orden de Autorización y Compra {record.folio}")
        page.embed_fonts(fonts)
        cursor = LayoutCursor(page.height)

        # watermark first so everything else draws over it
        _draw_watermark(page, fonts)
        _draw_header(page, fonts, cursor, paths)

        cursor.advance(INTRO_GAP)
        intro_y = cursor.mark("intro")
        page.text(MARGIN_X, intro_y, config.INTRO_TEXT, fonts.regular, 10, _c("black"))

        _draw_metadata(page, fonts, cursor, record)
        _draw_dates_legend(page, fonts, cursor)
        _draw_text_section(
            page,
            fonts,
            cursor,
            "description",
            "DESCRIPCIÓN / CONCEPTO",
            normalize_text(record.description) or config.DEFAULT_DESCRIPTION,
            DESCRIPTION_BOX_MIN,
            DESCRIPTION_BOX_MAX,
        )
        _draw_text_section(
            page,
            fonts,
            cursor,
            "comments",
            "COMENTARIOS / NOTAS ADICIONALES",
            normalize_text(record.comments) or config.DEFAULT_COMMENTS,
            COMMENTS_BOX_MIN,
            COMMENTS_BOX_MAX,
        )
        _draw_summary(page, fonts, cursor, record.amount, mode)
        _draw_signature(page, fonts, cursor)
        _draw_confidentiality(page, fonts, cursor)
        _draw_closing(page, fonts, cursor)

        pdf = page.save()
    except RenderError:
        raise
    except Exception as exc:
        logger.exception("Unexpected failure rendering %s", record.folio)
        raise RenderError(f"Unexpected error generating PDF: {exc}") from exc

    return RenderResult(
        pdf=pdf,
        warnings=list(diagnostics.warnings),
        primitives=list(page.primitives),
        positions=dict(cursor.positions),
    )


def write_order_pdf(
    record: OrderRecord,
    output_path: Path,
    logo_paths: Optional[Sequence[Path]] = None,
) -> RenderResult:
    result = render_order(record, logo_paths=logo_paths)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(result.pdf)
    return result
