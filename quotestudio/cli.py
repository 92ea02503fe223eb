"""Command line interface for producing translation quotes."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional

import pandas as pd
import yaml

from .config import AppConfig, TaskDefaults, load_config
from .engine import calculate_summary, has_billable_work
from .exceptions import QuoteStudioError
from .formatting import format_days, format_number
from .models import CalculationSummary, Task, make_task
from .reporting import export_excel, export_pdf, write_document
from .schema import parse_tasks

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/config.yaml")
FORMATS = ("pdf", "xlsx")

_FIELD_ALIASES = {
    "newWords": "new_words",
    "crossFileRepeats": "cross_file_repeats",
    "costPerWord": "cost_per_word",
    "repeatDiscount": "repeat_discount",
    "wordsPerDay": "words_per_day",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Estimate translation cost and delivery and export the quote")
    parser.add_argument("--tasks", type=Path, required=True, help="YAML or JSON file with the task list")
    parser.add_argument("--config", type=Path, help="Path to YAML configuration")
    parser.add_argument("--output-dir", type=Path, default=Path("output"), help="Directory for generated reports")
    parser.add_argument(
        "--format",
        dest="formats",
        action="append",
        choices=FORMATS,
        help="Report format to write; may be repeated (default: both)",
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING)")
    parser.add_argument("--quiet", action="store_true", help="Suppress console summary output")
    return parser


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    try:
        config = _load_cli_config(args.config)
        tasks = load_tasks(args.tasks, config.defaults)
    except Exception as exc:
        logger.error("Failed to load input: %s", exc)
        return 1

    summary = calculate_summary(tasks, config.estimation)
    if not args.quiet:
        _print_summary(summary)

    if not has_billable_work(summary):
        logger.warning("Nothing to export: every task has a zero cost")
        return 2

    for report_format in args.formats or FORMATS:
        try:
            if report_format == "pdf":
                document = export_pdf(summary, config)
            else:
                document = export_excel(summary, config)
            write_document(document, args.output_dir)
        except QuoteStudioError as exc:
            logger.error("%s", exc.message)
            return 1
        except OSError as exc:
            logger.exception("Failed to write report: %s", exc)
            return 1

    return 0


def load_tasks(path: Path, defaults: Optional[TaskDefaults] = None) -> List[Task]:
    """Read a task file, fill in missing fields from ``defaults`` and validate it.

    The file holds either a list of tasks or a mapping with a ``tasks`` key.
    Field names may be camelCase or snake_case.
    """

    with Path(path).open("r", encoding="utf-8") as stream:
        if path.suffix.lower() == ".json":
            raw: Any = json.load(stream)
        else:
            raw = yaml.safe_load(stream)

    if isinstance(raw, Mapping):
        raw = raw.get("tasks")
    if not isinstance(raw, list):
        raise ValueError(f"Task file '{path}' must contain a list of tasks")

    completed = []
    for index, entry in enumerate(raw):
        if not isinstance(entry, Mapping):
            raise ValueError(f"Task #{index + 1} must be a mapping")
        overrides = {_FIELD_ALIASES.get(key, key): value for key, value in entry.items()}
        completed.append(make_task(index, defaults, **overrides).as_dict())
    return parse_tasks({"tasks": completed})


def _load_cli_config(path: Optional[Path]) -> AppConfig:
    if path is not None:
        return load_config(path)
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return AppConfig()


def _print_summary(summary: CalculationSummary) -> None:
    if not summary.tasks:
        print("No tasks to calculate.")
        return

    frame = pd.DataFrame(
        [
            {
                "task": calc.task.name,
                "words": format_number(calc.total_words, "integer"),
                "cost": format_number(calc.total_cost, "currency"),
                "deadline": format_days(calc, "short"),
            }
            for calc in summary.tasks
        ]
    )
    print("Translation quote:")
    print(frame.to_string(index=False))
    print(
        f"Total: {format_number(summary.total_words, 'integer')} words, "
        f"{format_number(summary.grand_total, 'currency')} руб."
    )


if __name__ == "__main__":  # pragma: no cover - manual execution entry point
    raise SystemExit(main())
