"""Quote Studio core package.

This package estimates the cost and delivery time of translation tasks and
renders the resulting quote as PDF and XLSX documents.  The same building
blocks back the HTTP export API and the command line interface shipped with
this repository.
"""

from .config import AppConfig, EstimationConfig, ExcelConfig, PdfConfig, TaskDefaults, load_config
from .engine import calculate_summary, calculate_task, has_billable_work
from .exceptions import ExportValidationError, QuoteStudioError, RenderError
from .formatting import format_number
from .models import CalculationSummary, Task, TaskCalculation, make_task
from .reporting import ExportedDocument, export_excel, export_pdf
from .schema import parse_export_request

__all__ = [
    "AppConfig",
    "CalculationSummary",
    "EstimationConfig",
    "ExcelConfig",
    "ExportValidationError",
    "ExportedDocument",
    "PdfConfig",
    "QuoteStudioError",
    "RenderError",
    "Task",
    "TaskCalculation",
    "TaskDefaults",
    "calculate_summary",
    "calculate_task",
    "export_excel",
    "export_pdf",
    "format_number",
    "has_billable_work",
    "load_config",
    "make_task",
    "parse_export_request",
]
