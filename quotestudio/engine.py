"""Cost and delivery estimation for translation tasks."""

from __future__ import annotations

import math
from typing import Iterable, Optional

from .config import EstimationConfig
from .models import CalculationSummary, Task, TaskCalculation


def calculate_task(task: Task, config: Optional[EstimationConfig] = None) -> TaskCalculation:
    """Return the cost and schedule breakdown for ``task``.

    Repeats and cross-file repeats are both priced at the discounted rate and
    both count toward the individual quote threshold.  The buffer days are
    added to the real-valued quotient before rounding up.
    """

    config = config or EstimationConfig()

    total_words = task.new_words + task.repeats + task.cross_file_repeats
    new_words_cost = task.new_words * task.cost_per_word
    cost_per_repeat = task.cost_per_word * (task.repeat_discount / 100)
    total_repeats = task.repeats + task.cross_file_repeats
    repeat_cost = total_repeats * cost_per_repeat
    total_cost = new_words_cost + repeat_cost

    requires_individual_quote = total_words > config.individual_quote_threshold
    estimated_days: Optional[int] = None
    if not requires_individual_quote:
        estimated_days = math.ceil(total_words / task.words_per_day + config.buffer_days)

    return TaskCalculation(
        task=task,
        total_words=total_words,
        new_words_cost=new_words_cost,
        repeat_cost=repeat_cost,
        total_repeats=total_repeats,
        cost_per_repeat=cost_per_repeat,
        total_cost=total_cost,
        estimated_days=estimated_days,
        requires_individual_quote=requires_individual_quote,
    )


def calculate_summary(
    tasks: Iterable[Task], config: Optional[EstimationConfig] = None
) -> CalculationSummary:
    """Calculate every task in order and aggregate the totals."""

    calculations = tuple(calculate_task(task, config) for task in tasks)
    grand_total = sum((calc.total_cost for calc in calculations), 0.0)
    total_words = sum(calc.total_words for calc in calculations)
    return CalculationSummary(tasks=calculations, grand_total=grand_total, total_words=total_words)


def has_billable_work(summary: CalculationSummary) -> bool:
    """True when at least one task carries a non-zero cost."""

    return any(calc.total_cost != 0 for calc in summary.tasks)


def summary_matches(
    expected: CalculationSummary, actual: CalculationSummary, tolerance: float = 0.005
) -> bool:
    if len(expected.tasks) != len(actual.tasks):
        return False
    for left, right in zip(expected.tasks, actual.tasks):
        if left.task.id != right.task.id or left.total_words != right.total_words:
            return False
        if abs(left.total_cost - right.total_cost) > tolerance:
            return False
    if expected.total_words != actual.total_words:
        return False
    return abs(expected.grand_total - actual.grand_total) <= tolerance
