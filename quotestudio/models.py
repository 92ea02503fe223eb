"""Domain records shared by the engine, the renderers and the boundary."""

from __future__ import annotations

import secrets
import string
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

from .config import TaskDefaults

_ID_ALPHABET = string.digits + string.ascii_lowercase
_ID_LENGTH = 9


@dataclass(frozen=True)
class Task:
    """A single translation work item with its word counts and tariff."""

    id: str
    name: str
    new_words: int = 0
    repeats: int = 0
    cross_file_repeats: int = 0
    cost_per_word: float = 0.0
    repeat_discount: float = 0.0
    words_per_day: int = 1

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "newWords": self.new_words,
            "repeats": self.repeats,
            "crossFileRepeats": self.cross_file_repeats,
            "costPerWord": self.cost_per_word,
            "repeatDiscount": self.repeat_discount,
            "wordsPerDay": self.words_per_day,
        }


@dataclass(frozen=True)
class TaskCalculation:
    """Cost and schedule breakdown derived from one :class:`Task`."""

    task: Task
    total_words: int
    new_words_cost: float
    repeat_cost: float
    total_repeats: int
    cost_per_repeat: float
    total_cost: float
    estimated_days: Optional[int]
    requires_individual_quote: bool

    def as_dict(self) -> Dict[str, Any]:
        return {
            "task": self.task.as_dict(),
            "totalWords": self.total_words,
            "newWordsCost": self.new_words_cost,
            "repeatCost": self.repeat_cost,
            "totalRepeats": self.total_repeats,
            "costPerRepeat": self.cost_per_repeat,
            "totalCost": self.total_cost,
            "estimatedDays": self.estimated_days,
            "requiresIndividualQuote": self.requires_individual_quote,
        }


@dataclass(frozen=True)
class CalculationSummary:
    """Ordered per-task breakdowns plus the aggregate totals."""

    tasks: Tuple[TaskCalculation, ...] = field(default_factory=tuple)
    grand_total: float = 0.0
    total_words: int = 0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "tasks": [calc.as_dict() for calc in self.tasks],
            "grandTotal": self.grand_total,
            "totalWords": self.total_words,
        }


def new_task_id() -> str:
    """Return a fresh 9-character base-36 identifier."""

    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_LENGTH))


def make_task(index: int, defaults: Optional[TaskDefaults] = None, **overrides: Any) -> Task:
    """Create the ``index``-th task with a placeholder name and default tariff."""

    defaults = defaults or TaskDefaults()
    values: Dict[str, Any] = {
        "id": new_task_id(),
        "name": defaults.name_template.format(number=index + 1),
        "new_words": 0,
        "repeats": 0,
        "cross_file_repeats": 0,
        "cost_per_word": defaults.cost_per_word,
        "repeat_discount": defaults.repeat_discount,
        "words_per_day": defaults.words_per_day,
    }
    values.update({key: value for key, value in overrides.items() if value is not None})
    return Task(**values)


def rename_task(task: Task, name: str) -> Task:
    trimmed = name.strip()
    if not trimmed:
        raise ValueError("Task name must not be empty")
    return replace(task, name=trimmed)


def default_tasks(defaults: Optional[TaskDefaults] = None) -> List[Task]:
    """The task list a new or reset calculator starts with."""

    return [make_task(0, defaults)]
