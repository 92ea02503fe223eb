"""Export operations turning a summary into downloadable documents."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Optional, Sequence

from .config import AppConfig
from .engine import calculate_summary, summary_matches
from .exceptions import RenderError
from .excel_report import render_xlsx
from .models import CalculationSummary, Task
from .pdf_report import render_pdf

logger = logging.getLogger(__name__)

PDF_MEDIA_TYPE = "application/pdf"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@dataclass(frozen=True)
class ExportedDocument:
    """Rendered report payload together with its delivery metadata."""

    content: bytes
    filename: str
    media_type: str

    @property
    def content_disposition(self) -> str:
        return f'attachment; filename="{self.filename}"'


def export_pdf(
    summary: CalculationSummary,
    config: Optional[AppConfig] = None,
    generated_on: Optional[date] = None,
) -> ExportedDocument:
    config = config or AppConfig()
    try:
        content = render_pdf(summary, config.pdf, generated_on=generated_on)
    except Exception as exc:
        logger.exception("PDF export error: %s", exc)
        raise RenderError("pdf", "Failed to generate PDF") from exc
    logger.info("Rendered PDF report for %d task(s), %d bytes", len(summary.tasks), len(content))
    return ExportedDocument(content=content, filename=config.pdf.filename, media_type=PDF_MEDIA_TYPE)


def export_excel(summary: CalculationSummary, config: Optional[AppConfig] = None) -> ExportedDocument:
    config = config or AppConfig()
    try:
        content = render_xlsx(summary, config.excel)
    except Exception as exc:
        logger.exception("Excel export error: %s", exc)
        raise RenderError("xlsx", "Failed to generate Excel") from exc
    logger.info("Rendered Excel report for %d task(s), %d bytes", len(summary.tasks), len(content))
    return ExportedDocument(content=content, filename=config.excel.filename, media_type=XLSX_MEDIA_TYPE)


def check_summary_consistency(
    tasks: Sequence[Task],
    summary: CalculationSummary,
    config: Optional[AppConfig] = None,
) -> bool:
    """Recompute the summary from ``tasks`` and warn if it disagrees with ``summary``.

    The submitted summary is what gets rendered either way.
    """

    if not tasks:
        return True
    config = config or AppConfig()
    recomputed = calculate_summary(tasks, config.estimation)
    consistent = summary_matches(recomputed, summary, config.summary_tolerance)
    if not consistent:
        logger.warning(
            "Submitted summary differs from recomputation: grand total %.2f vs %.2f, words %d vs %d",
            summary.grand_total,
            recomputed.grand_total,
            summary.total_words,
            recomputed.total_words,
        )
    return consistent


def write_document(document: ExportedDocument, directory: Path) -> Path:
    """Persist ``document`` inside ``directory`` and return the written path."""

    directory.mkdir(parents=True, exist_ok=True)
    path = directory / document.filename
    path.write_bytes(document.content)
    logger.info("Wrote %s", path)
    return path


__all__ = [
    "ExportedDocument",
    "PDF_MEDIA_TYPE",
    "XLSX_MEDIA_TYPE",
    "check_summary_consistency",
    "export_excel",
    "export_pdf",
    "write_document",
]
