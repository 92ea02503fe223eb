"""Configuration loading utilities for Quote Studio."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml


@dataclass
class EstimationConfig:
    """Policy constants used by the estimation engine."""

    individual_quote_threshold: int = 25000
    buffer_days: int = 1


@dataclass
class TaskDefaults:
    """Tariff values a freshly created task starts with."""

    cost_per_word: float = 3.9
    repeat_discount: float = 30.0
    words_per_day: int = 1750
    name_template: str = "Задание {number}"


@dataclass
class PdfConfig:
    """Layout and font settings for the PDF report."""

    filename: str = "raschet-perevoda.pdf"
    font_regular: Optional[Path] = None
    font_bold: Optional[Path] = None
    compress: bool = True
    margin: float = 14.0
    top: float = 20.0
    bottom_margin: float = 10.0
    first_task_y: float = 40.0
    task_break_y: float = 250.0
    summary_break_y: float = 220.0

    def resolved(self, base_path: Path) -> "PdfConfig":
        return PdfConfig(
            filename=self.filename,
            font_regular=_resolve_optional(self.font_regular, base_path),
            font_bold=_resolve_optional(self.font_bold, base_path),
            compress=self.compress,
            margin=self.margin,
            top=self.top,
            bottom_margin=self.bottom_margin,
            first_task_y=self.first_task_y,
            task_break_y=self.task_break_y,
            summary_break_y=self.summary_break_y,
        )

    def font_paths(self) -> tuple[Optional[Path], Optional[Path]]:
        """Return the configured font pair, or ``(None, None)`` for the bundled one."""

        if self.font_regular and self.font_bold:
            return self.font_regular, self.font_bold
        return None, None


@dataclass
class ExcelConfig:
    """Workbook settings for the spreadsheet report."""

    filename: str = "raschet-perevoda.xlsx"
    sheet_name_max_length: int = 31
    sheet_name_filler: str = "-"
    summary_sheet_name: str = "Итог"
    task_column_widths: List[float] = field(default_factory=lambda: [30, 25])
    summary_column_widths: List[float] = field(default_factory=lambda: [30, 12, 18, 18])


@dataclass
class AppConfig:
    """Container for everything the engine, renderers and entry points need."""

    estimation: EstimationConfig = field(default_factory=EstimationConfig)
    defaults: TaskDefaults = field(default_factory=TaskDefaults)
    pdf: PdfConfig = field(default_factory=PdfConfig)
    excel: ExcelConfig = field(default_factory=ExcelConfig)
    summary_tolerance: float = 0.005

    def resolved(self, base_path: Path) -> "AppConfig":
        return AppConfig(
            estimation=self.estimation,
            defaults=self.defaults,
            pdf=self.pdf.resolved(base_path),
            excel=self.excel,
            summary_tolerance=self.summary_tolerance,
        )


def load_config(path: Optional[Path] = None) -> AppConfig:
    """Load :class:`AppConfig` from a YAML file.

    When ``path`` is omitted the built-in defaults are returned.
    """

    if path is None:
        return AppConfig()

    config_path = Path(path).expanduser()
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file '{config_path}' does not exist")

    with config_path.open("r", encoding="utf-8") as stream:
        raw_config: Mapping[str, Any] = yaml.safe_load(stream) or {}

    if not isinstance(raw_config, Mapping):
        raise ValueError("Configuration root must be a mapping")

    unknown = set(raw_config) - {"estimation", "defaults", "pdf", "excel", "summary_tolerance"}
    if unknown:
        raise ValueError(f"Unknown configuration sections: {', '.join(sorted(unknown))}")

    config = AppConfig(
        estimation=_build_section(EstimationConfig, raw_config.get("estimation")),
        defaults=_build_section(TaskDefaults, raw_config.get("defaults")),
        pdf=_build_section(PdfConfig, _parse_pdf_section(raw_config.get("pdf") or {})),
        excel=_build_section(ExcelConfig, raw_config.get("excel")),
        summary_tolerance=float(raw_config.get("summary_tolerance", 0.005)),
    )
    return config.resolved(config_path.parent)


def _build_section(cls, section: Optional[Mapping[str, Any]]):
    if section is None:
        return cls()
    if not isinstance(section, Mapping):
        raise ValueError(f"Section for {cls.__name__} must be a mapping")
    known = {field_info.name for field_info in fields(cls)}
    unknown = set(section) - known
    if unknown:
        raise ValueError(f"Unknown keys for {cls.__name__}: {', '.join(sorted(unknown))}")
    return cls(**section)


def _parse_pdf_section(section: Mapping[str, Any]) -> Dict[str, Any]:
    if not isinstance(section, Mapping):
        raise ValueError("Section for PdfConfig must be a mapping")
    parsed: Dict[str, Any] = dict(section)
    for key in ("font_regular", "font_bold"):
        if parsed.get(key):
            parsed[key] = Path(parsed[key])
    return parsed


def _resolve_optional(path: Optional[Path], base_path: Path) -> Optional[Path]:
    if path is None:
        return None
    expanded = Path(path).expanduser()
    if expanded.is_absolute():
        return expanded
    return (base_path / expanded).resolve()
