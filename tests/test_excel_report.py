from __future__ import annotations

import io

import pytest
from openpyxl import load_workbook

from quotestudio.config import ExcelConfig
from quotestudio.engine import calculate_summary
from quotestudio.excel_report import ILLEGAL_SHEET_CHARS, render_xlsx, safe_sheet_name, unique_sheet_name

from conftest import build_task


def _load(summary, config=None):
    return load_workbook(io.BytesIO(render_xlsx(summary, config)))


def test_single_task_workbook_has_no_summary_sheet(single_summary) -> None:
    workbook = _load(single_summary)
    assert workbook.sheetnames == ["Задание 1"]


def test_task_sheet_layout_uses_raw_numbers(single_summary) -> None:
    calc = single_summary.tasks[0]
    sheet = _load(single_summary)["Задание 1"]

    assert sheet["A1"].value == "Задание 1"
    assert sheet["A2"].value is None
    assert [sheet["A3"].value, sheet["B3"].value] == ["Параметр", "Значение"]
    assert sheet["B4"].value == 1000
    assert sheet["B5"].value == 100
    assert sheet["B6"].value == 50
    assert sheet["B7"].value == calc.total_words
    assert sheet["B8"].value == pytest.approx(3.9)
    assert sheet["B9"].value == pytest.approx(30)
    assert sheet["B10"].value == pytest.approx(calc.cost_per_repeat)
    assert sheet["B11"].value == 1750
    assert sheet["A12"].value is None
    assert sheet["A13"].value == "Расчеты"
    assert sheet["B14"].value == pytest.approx(calc.new_words_cost)
    assert sheet["B15"].value == pytest.approx(calc.repeat_cost)
    assert sheet["B16"].value == pytest.approx(calc.total_cost)
    assert sheet["B17"].value == "2 дней"
    assert sheet.column_dimensions["A"].width == 30


def test_deadline_cell_is_text_for_individual_quote() -> None:
    summary = calculate_summary([build_task(new_words=30000)])
    sheet = _load(summary).worksheets[0]
    assert sheet["B17"].value == "Рассчитывается индивидуально"


def test_summary_sheet_totals_row(summary) -> None:
    workbook = _load(summary)
    assert workbook.sheetnames[-1] == "Итог"
    sheet = workbook["Итог"]

    assert sheet["A1"].value == "Общий итог"
    assert [cell.value for cell in sheet[3]] == ["Задание", "Слов", "Стоимость (руб.)", "Сроки"]
    assert sheet["A4"].value == summary.tasks[0].task.name
    assert sheet["B5"].value == summary.tasks[1].total_words
    assert sheet["A6"].value is None

    totals = [cell.value for cell in sheet[7]]
    assert totals[0] == "ИТОГО"
    assert totals[1] == summary.total_words
    assert totals[2] == pytest.approx(summary.grand_total)
    assert totals[3] is None
    labels = [row[0].value for row in sheet.iter_rows()]
    assert labels.count("ИТОГО") == 1


def test_sheets_follow_task_order(summary) -> None:
    names = _load(summary).sheetnames
    assert names == ["Руководство пользователя", "Маркетинг", "Итог"]


def test_safe_sheet_name_truncates_and_replaces_illegal_characters() -> None:
    assert safe_sheet_name("a/b\\c?d*e[f]g:h") == "a-b-c-d-e-f-g-h"
    assert len(safe_sheet_name("x" * 40)) == 31
    assert safe_sheet_name("") == "Sheet"
    assert safe_sheet_name("a/b", filler="_") == "a_b"


def test_generated_sheet_names_are_legal() -> None:
    names = ["Отчёт [черновик] 2024/03", "Q1: итоги?", "*" * 50, "Обычное имя"]
    summary = calculate_summary([build_task(index, name=name) for index, name in enumerate(names)])

    for title in _load(summary).sheetnames:
        assert len(title) <= 31
        assert not ILLEGAL_SHEET_CHARS.search(title)


def test_colliding_sheet_names_get_suffix() -> None:
    long_name = "Очень длинное название задания номер"
    summary = calculate_summary(
        [
            build_task(0, name="Сайт"),
            build_task(1, name="сайт"),
            build_task(2, name=long_name + " один"),
            build_task(3, name=long_name + " два"),
            build_task(4, name="Итог"),
        ]
    )
    names = _load(summary).sheetnames

    assert names[0] == "Сайт"
    assert names[1] == "сайт (2)"
    assert names[2] == long_name[:31]
    assert names[3].endswith(" (2)") and len(names[3]) == 31
    assert names[4] == "Итог"
    assert names[5] == "Итог (2)"


def test_unique_sheet_name_counts_up() -> None:
    assert unique_sheet_name("A", set()) == "A"
    assert unique_sheet_name("A", {"A", "A (2)"}) == "A (3)"


def test_empty_summary_still_produces_a_workbook() -> None:
    workbook = _load(calculate_summary([]))
    assert workbook.sheetnames == ["Sheet"]


def test_custom_summary_sheet_name(summary) -> None:
    workbook = _load(summary, ExcelConfig(summary_sheet_name="Summary"))
    assert workbook.sheetnames[-1] == "Summary"


def test_reserved_history_name_gets_filler() -> None:
    assert safe_sheet_name("History") == "History-"
    assert safe_sheet_name("history", filler="_") == "history_"
    assert safe_sheet_name("History of changes") == "History of changes"

    summary = calculate_summary([build_task(0, name="History"), build_task(1, name="HISTORY")])
    names = _load(summary).sheetnames
    assert names[:2] == ["History-", "HISTORY- (2)"]


def test_multi_character_filler_respects_max_length() -> None:
    assert len(safe_sheet_name("/" * 31, filler="__")) == 31
    assert safe_sheet_name("a/b", max_length=4, filler="---") == "a---"

    summary = calculate_summary([build_task(0, name="?" * 40)])
    for title in _load(summary, ExcelConfig(sheet_name_filler="__")).sheetnames:
        assert len(title) <= 31
