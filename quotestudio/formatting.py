"""Display formatting shared by the report renderers.

Numbers follow Russian conventions: a no-break space groups thousands and a
comma separates decimals.
"""

from __future__ import annotations

from datetime import date
from typing import Literal

from .models import TaskCalculation

NBSP = "\u00A0"
CURRENCY_SUFFIX = "руб."

NumberKind = Literal["integer", "currency"]


def format_number(value: float, kind: NumberKind = "currency") -> str:
    """Format ``value`` as an integer count or a two-decimal currency amount."""

    if kind == "integer":
        return f"{int(round(value)):,}".replace(",", NBSP)
    if kind == "currency":
        return f"{float(value):,.2f}".replace(",", NBSP).replace(".", ",")
    raise ValueError(f"Unknown number kind: {kind!r}")


def format_money(value: float) -> str:
    return f"{format_number(value, 'currency')} {CURRENCY_SUFFIX}"


def format_percent(value: float) -> str:
    """Render a percentage the way it was entered (``30``, ``12.5``)."""

    return f"{float(value):g}"


def format_days(calc: TaskCalculation, style: Literal["full", "short", "sheet"] = "full") -> str:
    """Render the deadline cell for ``calc``.

    ``full`` is used in per-task tables, ``short`` in the PDF totals table and
    ``sheet`` in the spreadsheet totals sheet.
    """

    if calc.requires_individual_quote or calc.estimated_days is None:
        return {
            "full": "Рассчитывается индивидуально",
            "short": "Индивид.",
            "sheet": "Индивидуально",
        }[style]
    if style == "short":
        return f"{calc.estimated_days} дн."
    return f"{calc.estimated_days} дней"


def format_date(day: date) -> str:
    return day.strftime("%d.%m.%Y")
