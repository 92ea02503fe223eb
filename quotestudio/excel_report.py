"""XLSX rendering of a calculation summary."""

from __future__ import annotations

import io
import re
from typing import Any, Iterable, List, Optional, Sequence, Set

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from .config import ExcelConfig
from .formatting import format_days
from .models import CalculationSummary, TaskCalculation

ILLEGAL_SHEET_CHARS = re.compile(r"[\\/?*\[\]:]")
FALLBACK_SHEET_NAME = "Sheet"
RESERVED_SHEET_NAME = "History"

SUMMARY_TITLE = "Общий итог"
TOTAL_LABEL = "ИТОГО"


def safe_sheet_name(name: str, max_length: int = 31, filler: str = "-") -> str:
    """Replace characters Excel rejects in sheet titles and truncate ``name``.

    The result never exceeds ``max_length``, whatever the length of ``filler``.
    """

    cleaned = ILLEGAL_SHEET_CHARS.sub(filler, name)
    # Excel also rejects titles that start or end with an apostrophe
    cleaned = cleaned.strip("'")[:max_length].rstrip("'")
    if not cleaned:
        return FALLBACK_SHEET_NAME
    if cleaned.casefold() == RESERVED_SHEET_NAME.casefold():
        cleaned = (cleaned + filler)[:max_length]
    return cleaned


def unique_sheet_name(base: str, taken: Set[str], max_length: int = 31) -> str:
    """Return ``base`` or ``base (n)`` so that it is not already in ``taken``.

    Sheet names are compared case-insensitively, as Excel does.
    """

    lowered = {name.casefold() for name in taken}
    if base.casefold() not in lowered:
        return base
    counter = 2
    while True:
        suffix = f" ({counter})"
        candidate = base[: max_length - len(suffix)] + suffix
        if candidate.casefold() not in lowered:
            return candidate
        counter += 1


def build_task_sheet_rows(calc: TaskCalculation) -> List[List[Any]]:
    task = calc.task
    return [
        [task.name],
        [],
        ["Параметр", "Значение"],
        ["Новых слов", task.new_words],
        ["Повторов", task.repeats],
        ["Повторов через файл", task.cross_file_repeats],
        ["Всего слов", calc.total_words],
        ["Стоимость за слово (руб.)", task.cost_per_word],
        ["Скидка на повторы (%)", task.repeat_discount],
        ["Стоимость за повтор (руб.)", calc.cost_per_repeat],
        ["Слов в день", task.words_per_day],
        [],
        ["Расчеты"],
        ["Стоимость новых слов (руб.)", calc.new_words_cost],
        ["Стоимость повторов (руб.)", calc.repeat_cost],
        ["Итоговая стоимость (руб.)", calc.total_cost],
        ["Сроки", format_days(calc)],
    ]


def build_summary_sheet_rows(summary: CalculationSummary) -> List[List[Any]]:
    return [
        [SUMMARY_TITLE],
        [],
        ["Задание", "Слов", "Стоимость (руб.)", "Сроки"],
        *(
            [calc.task.name, calc.total_words, calc.total_cost, format_days(calc, "sheet")]
            for calc in summary.tasks
        ),
        [],
        [TOTAL_LABEL, summary.total_words, summary.grand_total, ""],
    ]


def render_xlsx(summary: CalculationSummary, config: Optional[ExcelConfig] = None) -> bytes:
    """Render ``summary`` into an XLSX workbook and return its bytes."""

    config = config or ExcelConfig()
    workbook = Workbook()
    workbook.remove(workbook.active)
    taken: Set[str] = set()

    for calc in summary.tasks:
        title = _claim_title(calc.task.name, taken, config)
        worksheet = workbook.create_sheet(title=title)
        _write_rows(worksheet, build_task_sheet_rows(calc))
        worksheet["A1"].font = Font(bold=True)
        worksheet["A13"].font = Font(bold=True)
        _set_column_widths(worksheet, config.task_column_widths)

    if len(summary.tasks) > 1:
        title = _claim_title(config.summary_sheet_name, taken, config)
        worksheet = workbook.create_sheet(title=title)
        rows = build_summary_sheet_rows(summary)
        _write_rows(worksheet, rows)
        worksheet["A1"].font = Font(bold=True)
        for cell in worksheet[len(rows)]:
            cell.font = Font(bold=True)
        _set_column_widths(worksheet, config.summary_column_widths)

    if not workbook.worksheets:
        workbook.create_sheet(title=FALLBACK_SHEET_NAME)

    buffer = io.BytesIO()
    workbook.save(buffer)
    buffer.seek(0)
    return buffer.getvalue()


def _claim_title(name: str, taken: Set[str], config: ExcelConfig) -> str:
    base = safe_sheet_name(name, config.sheet_name_max_length, config.sheet_name_filler)
    title = unique_sheet_name(base, taken, config.sheet_name_max_length)
    taken.add(title)
    return title


def _write_rows(worksheet: Worksheet, rows: Iterable[Sequence[Any]]) -> None:
    for row_index, row in enumerate(rows, start=1):
        for col_index, value in enumerate(row, start=1):
            if value == "" and col_index > 1:
                continue
            worksheet.cell(row=row_index, column=col_index, value=value)


def _set_column_widths(worksheet: Worksheet, widths: Sequence[float]) -> None:
    for index, width in enumerate(widths, start=1):
        worksheet.column_dimensions[get_column_letter(index)].width = width
