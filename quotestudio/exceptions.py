"""Exceptions raised by Quote Studio."""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class QuoteStudioError(Exception):
    """Base class for all Quote Studio errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message}


class ExportValidationError(QuoteStudioError):
    """The export request body does not have the expected shape."""

    status_code = 400

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = errors or []


class RenderError(QuoteStudioError):
    """A report could not be produced from a valid summary."""

    status_code = 500

    def __init__(self, report_format: str, message: str):
        super().__init__(message)
        self.report_format = report_format
