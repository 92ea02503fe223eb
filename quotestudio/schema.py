"""Validation of request payloads arriving at the HTTP and CLI boundary."""

from __future__ import annotations

from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import ExportValidationError
from .models import CalculationSummary, Task, TaskCalculation


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class TaskPayload(_WireModel):
    id: str
    name: str
    new_words: int = Field(alias="newWords", ge=0)
    repeats: int = Field(ge=0)
    cross_file_repeats: int = Field(alias="crossFileRepeats", ge=0)
    cost_per_word: float = Field(alias="costPerWord", ge=0)
    repeat_discount: float = Field(alias="repeatDiscount", ge=0, le=100)
    words_per_day: int = Field(alias="wordsPerDay", ge=1)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("name must not be empty")
        return trimmed

    def to_task(self) -> Task:
        return Task(
            id=self.id,
            name=self.name,
            new_words=self.new_words,
            repeats=self.repeats,
            cross_file_repeats=self.cross_file_repeats,
            cost_per_word=self.cost_per_word,
            repeat_discount=self.repeat_discount,
            words_per_day=self.words_per_day,
        )


class TaskCalculationPayload(_WireModel):
    task: TaskPayload
    total_words: int = Field(alias="totalWords", ge=0)
    new_words_cost: float = Field(alias="newWordsCost", ge=0)
    repeat_cost: float = Field(alias="repeatCost", ge=0)
    total_repeats: int = Field(alias="totalRepeats", ge=0)
    cost_per_repeat: float = Field(alias="costPerRepeat", ge=0)
    total_cost: float = Field(alias="totalCost", ge=0)
    estimated_days: Optional[int] = Field(default=None, alias="estimatedDays", ge=0)
    requires_individual_quote: bool = Field(alias="requiresIndividualQuote")

    def to_calculation(self) -> TaskCalculation:
        return TaskCalculation(
            task=self.task.to_task(),
            total_words=self.total_words,
            new_words_cost=self.new_words_cost,
            repeat_cost=self.repeat_cost,
            total_repeats=self.total_repeats,
            cost_per_repeat=self.cost_per_repeat,
            total_cost=self.total_cost,
            estimated_days=None if self.requires_individual_quote else self.estimated_days,
            requires_individual_quote=self.requires_individual_quote,
        )


class CalculationSummaryPayload(_WireModel):
    tasks: List[TaskCalculationPayload]
    grand_total: float = Field(alias="grandTotal", ge=0)
    total_words: int = Field(alias="totalWords", ge=0)

    def to_summary(self) -> CalculationSummary:
        return CalculationSummary(
            tasks=tuple(item.to_calculation() for item in self.tasks),
            grand_total=self.grand_total,
            total_words=self.total_words,
        )


class ExportRequestPayload(_WireModel):
    tasks: List[TaskPayload] = Field(default_factory=list)
    summary: CalculationSummaryPayload


class CalculateRequestPayload(_WireModel):
    tasks: List[TaskPayload]


def parse_export_request(payload: Any) -> Tuple[List[Task], CalculationSummary]:
    """Validate an export request body and return domain records.

    Raises :class:`ExportValidationError` when the summary is missing, when
    ``summary.tasks`` is not a list or when any field violates its range.
    """

    if not isinstance(payload, dict):
        raise ExportValidationError("Invalid request body")
    summary = payload.get("summary")
    if not isinstance(summary, dict) or not isinstance(summary.get("tasks"), list):
        raise ExportValidationError("Invalid request body")

    try:
        request = ExportRequestPayload.model_validate(payload)
    except ValidationError as exc:
        raise ExportValidationError(_describe(exc), _errors(exc)) from exc
    return [item.to_task() for item in request.tasks], request.summary.to_summary()


def parse_tasks(payload: Any) -> List[Task]:
    """Validate a ``{"tasks": [...]}`` body."""

    try:
        request = CalculateRequestPayload.model_validate(payload)
    except ValidationError as exc:
        raise ExportValidationError(_describe(exc), _errors(exc)) from exc
    return [item.to_task() for item in request.tasks]


def _errors(exc: ValidationError) -> List[dict]:
    return [
        {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
        for error in exc.errors()
    ]


def _describe(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    return f"Invalid request body: {location}: {first['msg']}"
