from __future__ import annotations

import math
from dataclasses import replace

import pytest

from quotestudio.config import EstimationConfig
from quotestudio.engine import calculate_summary, calculate_task, has_billable_work, summary_matches

from conftest import build_task


def test_calculate_task_breakdown() -> None:
    calc = calculate_task(build_task(new_words=1000, repeats=100, cross_file_repeats=50))

    assert calc.total_words == 1150
    assert calc.total_repeats == 150
    assert calc.new_words_cost == pytest.approx(3900.0)
    assert calc.cost_per_repeat == pytest.approx(1.17)
    assert calc.repeat_cost == pytest.approx(175.5)
    assert calc.total_cost == calc.new_words_cost + calc.repeat_cost
    assert calc.requires_individual_quote is False
    assert calc.estimated_days == 2


def test_repeat_cost_uses_discounted_rate_for_both_repeat_kinds() -> None:
    calc = calculate_task(
        build_task(new_words=0, repeats=10, cross_file_repeats=30, cost_per_word=2.0, repeat_discount=50)
    )
    assert calc.repeat_cost == pytest.approx((10 + 30) * 2.0 * 0.5)
    assert calc.new_words_cost == 0


@pytest.mark.parametrize(
    "total_words, expected_days",
    [
        (0, 1),
        (1000, 2),
        (1750, 2),
        (1751, 3),
        (3500, 3),
        (25000, math.ceil(25000 / 1750 + 1)),
    ],
)
def test_estimated_days_adds_buffer_inside_ceiling(total_words: int, expected_days: int) -> None:
    calc = calculate_task(build_task(new_words=total_words, repeats=0, cross_file_repeats=0))
    assert calc.estimated_days == expected_days


def test_individual_quote_threshold_counts_repeats() -> None:
    at_limit = calculate_task(build_task(new_words=20000, repeats=4000, cross_file_repeats=1000))
    over_limit = calculate_task(build_task(new_words=20000, repeats=4000, cross_file_repeats=1001))

    assert at_limit.total_words == 25000
    assert at_limit.requires_individual_quote is False
    assert at_limit.estimated_days is not None

    assert over_limit.total_words == 25001
    assert over_limit.requires_individual_quote is True
    assert over_limit.estimated_days is None


def test_threshold_and_buffer_are_configurable() -> None:
    config = EstimationConfig(individual_quote_threshold=100, buffer_days=2)
    calc = calculate_task(build_task(new_words=100, repeats=0, cross_file_repeats=0, words_per_day=50), config)
    assert calc.estimated_days == 4
    assert calculate_task(build_task(new_words=101, repeats=0, cross_file_repeats=0), config).estimated_days is None


def test_calculate_task_is_deterministic() -> None:
    task = build_task(new_words=1234, repeats=56, cross_file_repeats=7, cost_per_word=1.1, repeat_discount=33)
    assert calculate_task(task) == calculate_task(task)


def test_calculate_summary_empty() -> None:
    summary = calculate_summary([])
    assert summary.tasks == ()
    assert summary.grand_total == 0
    assert summary.total_words == 0
    assert summary.as_dict() == {"tasks": [], "grandTotal": 0, "totalWords": 0}


def test_calculate_summary_preserves_order_and_totals(tasks) -> None:
    summary = calculate_summary(tasks)

    assert [calc.task.id for calc in summary.tasks] == [task.id for task in tasks]
    assert summary.total_words == sum(calc.total_words for calc in summary.tasks)
    assert summary.grand_total == pytest.approx(sum(calc.total_cost for calc in summary.tasks))


def test_has_billable_work() -> None:
    assert has_billable_work(calculate_summary([build_task(new_words=0, repeats=0, cross_file_repeats=0)])) is False
    assert has_billable_work(calculate_summary([build_task()])) is True
    assert has_billable_work(calculate_summary([])) is False


def test_summary_matches_detects_tampering(tasks, summary) -> None:
    assert summary_matches(summary, calculate_summary(tasks))

    tampered = calculate_summary([tasks[0]])
    assert not summary_matches(summary, tampered)

    inflated = calculate_summary([tasks[0], replace(tasks[1], new_words=5000)])
    assert not summary_matches(summary, inflated)
