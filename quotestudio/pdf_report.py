"""PDF rendering of a calculation summary.

The layout is drawn directly on a reportlab canvas.  Vertical positions are
expressed in millimetres from the top edge of the page and carried between
drawing steps in an immutable :class:`PageCursor`.
"""

from __future__ import annotations

import io
import logging
import threading
from dataclasses import dataclass, replace
from datetime import date
from importlib import resources
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_LEFT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen.canvas import Canvas
from reportlab.platypus import Paragraph, Table, TableStyle

from .config import PdfConfig
from .formatting import format_date, format_days, format_money, format_number, format_percent
from .models import CalculationSummary, TaskCalculation

logger = logging.getLogger(__name__)

PDF_FONT_REGULAR = "QuoteSans"
PDF_FONT_BOLD = "QuoteSans-Bold"
BUNDLED_FONTS = ("DejaVuSans.ttf", "DejaVuSans-Bold.ttf")
_PDF_FONT_STATE: Dict[Tuple[Optional[Path], Optional[Path]], Tuple[str, str]] = {}
_PDF_FONT_LOCK = threading.Lock()

PAGE_WIDTH, PAGE_HEIGHT = A4
HEADER_FILL = colors.Color(59 / 255, 130 / 255, 246 / 255)
STRIPE_FILL = colors.HexColor("#f5f5f5")

TITLE = "Расчет стоимости перевода"
SUMMARY_TITLE = "Общий итог"
TOTAL_LABEL = "ИТОГО"
TASK_HEADER = ["Параметр", "Значение"]
SUMMARY_HEADER = ["Задание", "Слов", "Стоимость", "Сроки"]

TITLE_Y = 20.0
DATE_Y = 30.0
HEADING_GAP = 8.0
HEADING_LINE = 6.0
HEADING_FONT_SIZE = 12
TABLE_GAP = 15.0


@dataclass(frozen=True)
class PageCursor:
    """Current page number and vertical position in millimetres from the top."""

    page: int = 1
    y: float = 0.0

    def advance(self, distance: float) -> "PageCursor":
        return replace(self, y=self.y + distance)

    def next_page(self, top: float) -> "PageCursor":
        return PageCursor(page=self.page + 1, y=top)


def ensure_pdf_fonts_registered(config: PdfConfig) -> Tuple[str, str]:
    """Register a Unicode-capable font pair and return (base, bold).

    Configured font files take precedence over the DejaVu Sans pair shipped
    in ``quotestudio/fonts``.  Helvetica has no Cyrillic glyphs and is only
    used when neither pair can be loaded.
    """

    key = config.font_paths()
    with _PDF_FONT_LOCK:
        if key in _PDF_FONT_STATE:
            return _PDF_FONT_STATE[key]

        fonts: Optional[Tuple[str, str]] = None
        regular_path, bold_path = key
        if regular_path is not None and bold_path is not None:
            try:
                fonts = _register_font_pair(str(regular_path), str(bold_path))
            except Exception:
                logger.warning(
                    "Failed to register fonts %s / %s; using bundled DejaVu Sans",
                    regular_path,
                    bold_path,
                    exc_info=True,
                )

        if fonts is None:
            try:
                fonts = _register_font_pair(*(_bundled_font(name) for name in BUNDLED_FONTS))
            except Exception:
                logger.warning("Bundled fonts could not be loaded; falling back to Helvetica", exc_info=True)
                fonts = ("Helvetica", "Helvetica-Bold")

        _PDF_FONT_STATE[key] = fonts
        return fonts


def _register_font_pair(regular: Union[str, io.BytesIO], bold: Union[str, io.BytesIO]) -> Tuple[str, str]:
    suffix = f"-{len(_PDF_FONT_STATE)}" if _PDF_FONT_STATE else ""
    base_name = f"{PDF_FONT_REGULAR}{suffix}"
    bold_name = f"{PDF_FONT_BOLD}{suffix}"
    pdfmetrics.registerFont(TTFont(base_name, regular))
    pdfmetrics.registerFont(TTFont(bold_name, bold))
    pdfmetrics.registerFontFamily(
        base_name,
        normal=base_name,
        bold=bold_name,
        italic=base_name,
        boldItalic=bold_name,
    )
    return base_name, bold_name


def _bundled_font(filename: str) -> io.BytesIO:
    return io.BytesIO((resources.files("quotestudio") / "fonts" / filename).read_bytes())


def wrap_text(text: str, font_name: str, font_size: float, width: float) -> List[str]:
    """Split ``text`` into lines no wider than ``width`` points.

    Words longer than a line are broken between characters.
    """

    lines: List[str] = []
    for line in simpleSplit(text, font_name, font_size, width):
        while len(line) > 1 and pdfmetrics.stringWidth(line, font_name, font_size) > width:
            cut = len(line) - 1
            while cut > 1 and pdfmetrics.stringWidth(line[:cut], font_name, font_size) > width:
                cut -= 1
            lines.append(line[:cut])
            line = line[cut:]
        lines.append(line)
    return lines or [""]


def build_task_rows(calc: TaskCalculation) -> List[List[str]]:
    """Return the eleven parameter/value rows describing one task."""

    task = calc.task
    return [
        ["Новых слов", format_number(task.new_words, "integer")],
        ["Повторов", format_number(task.repeats, "integer")],
        ["Повторов через файл", format_number(task.cross_file_repeats, "integer")],
        ["Всего слов", format_number(calc.total_words, "integer")],
        ["Стоимость за слово", format_money(task.cost_per_word)],
        [
            "Скидка на повторы",
            f"{format_percent(task.repeat_discount)}% ({format_money(calc.cost_per_repeat)})",
        ],
        ["Слов в день", format_number(task.words_per_day, "integer")],
        ["Стоимость новых слов", format_money(calc.new_words_cost)],
        ["Стоимость повторов", format_money(calc.repeat_cost)],
        ["Итоговая стоимость", format_money(calc.total_cost)],
        ["Сроки", format_days(calc)],
    ]


def build_summary_rows(summary: CalculationSummary) -> List[List[str]]:
    """Return one row per task followed by the totals row."""

    rows = [
        [
            calc.task.name,
            format_number(calc.total_words, "integer"),
            format_money(calc.total_cost),
            format_days(calc, "short"),
        ]
        for calc in summary.tasks
    ]
    rows.append(
        [
            TOTAL_LABEL,
            format_number(summary.total_words, "integer"),
            format_money(summary.grand_total),
            "",
        ]
    )
    return rows


def render_pdf(
    summary: CalculationSummary,
    config: Optional[PdfConfig] = None,
    generated_on: Optional[date] = None,
) -> bytes:
    """Render ``summary`` into a PDF document and return its bytes."""

    config = config or PdfConfig()
    buffer = io.BytesIO()
    canvas = Canvas(
        buffer,
        pagesize=A4,
        pageCompression=1 if config.compress else 0,
    )
    canvas.setTitle(TITLE)
    draw_report(canvas, summary, config, generated_on or date.today())
    canvas.save()
    buffer.seek(0)
    return buffer.getvalue()


def draw_report(
    canvas: Canvas,
    summary: CalculationSummary,
    config: PdfConfig,
    generated_on: date,
) -> PageCursor:
    """Draw the full report on ``canvas`` and return the final cursor."""

    fonts = ensure_pdf_fonts_registered(config)
    cursor = _draw_title(canvas, fonts, config, generated_on)

    last_index = len(summary.tasks) - 1
    for index, calc in enumerate(summary.tasks):
        cursor = _draw_task(canvas, fonts, config, cursor, calc)
        if cursor.y > config.task_break_y and index < last_index:
            cursor = _new_page(canvas, config, cursor)

    if len(summary.tasks) > 1:
        if cursor.y > config.summary_break_y:
            cursor = _new_page(canvas, config, cursor)
        cursor = _draw_summary(canvas, fonts, config, cursor, summary)
    return cursor


def _draw_title(canvas: Canvas, fonts: Tuple[str, str], config: PdfConfig, generated_on: date) -> PageCursor:
    base_font, _ = fonts
    canvas.setFont(base_font, 18)
    canvas.drawCentredString(PAGE_WIDTH / 2, _to_canvas(TITLE_Y), TITLE)
    canvas.setFont(base_font, 10)
    canvas.drawString(config.margin * mm, _to_canvas(DATE_Y), f"Дата: {format_date(generated_on)}")
    return PageCursor(page=1, y=config.first_task_y)


def _draw_task(
    canvas: Canvas,
    fonts: Tuple[str, str],
    config: PdfConfig,
    cursor: PageCursor,
    calc: TaskCalculation,
) -> PageCursor:
    base_font, _ = fonts
    content_width = PAGE_WIDTH - 2 * config.margin * mm
    canvas.setFont(base_font, HEADING_FONT_SIZE)
    # the last line keeps the regular gap above the table
    for line in wrap_text(calc.task.name, base_font, HEADING_FONT_SIZE, content_width):
        canvas.drawString(config.margin * mm, _to_canvas(cursor.y), line)
        cursor = cursor.advance(HEADING_LINE)
    cursor = cursor.advance(HEADING_GAP - HEADING_LINE)

    table = Table(
        [TASK_HEADER, *build_task_rows(calc)],
        colWidths=[content_width / 2, content_width / 2],
        repeatRows=1,
    )
    table.setStyle(_table_style(fonts))
    cursor = _draw_table(canvas, config, cursor, table)
    return cursor.advance(TABLE_GAP)


def _draw_summary(
    canvas: Canvas,
    fonts: Tuple[str, str],
    config: PdfConfig,
    cursor: PageCursor,
    summary: CalculationSummary,
) -> PageCursor:
    base_font, bold_font = fonts
    canvas.setFont(base_font, 14)
    canvas.drawString(config.margin * mm, _to_canvas(cursor.y), SUMMARY_TITLE)
    cursor = cursor.advance(HEADING_GAP)

    name_style = ParagraphStyle(
        "SummaryTaskName",
        fontName=base_font,
        fontSize=10,
        leading=12,
        alignment=TA_LEFT,
    )
    rows: List[List[object]] = [SUMMARY_HEADER]
    summary_rows = build_summary_rows(summary)
    for row in summary_rows[:-1]:
        rows.append([Paragraph(escape(row[0]), name_style), *row[1:]])
    rows.append(summary_rows[-1])

    content_width = PAGE_WIDTH - 2 * config.margin * mm
    table = Table(
        rows,
        colWidths=[content_width * 0.4, content_width * 0.15, content_width * 0.25, content_width * 0.2],
        repeatRows=1,
    )
    style = _table_style(fonts)
    style.add("FONTNAME", (0, -1), (-1, -1), bold_font)
    table.setStyle(style)
    return _draw_table(canvas, config, cursor, table)


def _draw_table(canvas: Canvas, config: PdfConfig, cursor: PageCursor, table: Table) -> PageCursor:
    """Draw ``table`` at the cursor, continuing on new pages when it does not fit."""

    content_width = PAGE_WIDTH - 2 * config.margin * mm
    while True:
        available = (PAGE_HEIGHT / mm - config.bottom_margin - cursor.y) * mm
        _, height = table.wrapOn(canvas, content_width, available)
        if height <= available:
            table.drawOn(canvas, config.margin * mm, _to_canvas(cursor.y) - height)
            return cursor.advance(height / mm)

        parts: Sequence[Table] = table.split(content_width, available) if available > 0 else []
        if len(parts) < 2:
            if cursor.y <= config.top:
                # taller than an empty page and cannot be split further
                table.drawOn(canvas, config.margin * mm, _to_canvas(cursor.y) - height)
                return cursor.advance(height / mm)
            cursor = _new_page(canvas, config, cursor)
            continue

        head, table = parts[0], parts[1]
        _, head_height = head.wrapOn(canvas, content_width, available)
        head.drawOn(canvas, config.margin * mm, _to_canvas(cursor.y) - head_height)
        cursor = _new_page(canvas, config, cursor)


def _new_page(canvas: Canvas, config: PdfConfig, cursor: PageCursor) -> PageCursor:
    canvas.showPage()
    return cursor.next_page(config.top)


def _table_style(fonts: Tuple[str, str]) -> TableStyle:
    base_font, bold_font = fonts
    return TableStyle(
        [
            ("BACKGROUND", (0, 0), (-1, 0), HEADER_FILL),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
            ("FONTNAME", (0, 0), (-1, 0), bold_font),
            ("FONTNAME", (0, 1), (-1, -1), base_font),
            ("FONTSIZE", (0, 0), (-1, -1), 10),
            ("ALIGN", (0, 0), (-1, -1), "LEFT"),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ("TOPPADDING", (0, 0), (-1, -1), 4),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
            ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, STRIPE_FILL]),
        ]
    )


def _to_canvas(y: float) -> float:
    return PAGE_HEIGHT - y * mm
