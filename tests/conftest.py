from __future__ import annotations

from pathlib import Path
from typing import List
import sys

import pytest

# Ensure project root is on sys.path for absolute imports
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from quotestudio import CalculationSummary, Task, calculate_summary


def build_task(index: int = 0, **overrides) -> Task:
    values = {
        "id": f"task{index:05d}",
        "name": f"Задание {index + 1}",
        "new_words": 1000,
        "repeats": 100,
        "cross_file_repeats": 50,
        "cost_per_word": 3.9,
        "repeat_discount": 30.0,
        "words_per_day": 1750,
    }
    values.update(overrides)
    return Task(**values)


@pytest.fixture
def tasks() -> List[Task]:
    return [
        build_task(0, name="Руководство пользователя", new_words=12000, repeats=1500, cross_file_repeats=300),
        build_task(1, name="Маркетинг", new_words=4000, repeats=200, cross_file_repeats=0, cost_per_word=4.5),
    ]


@pytest.fixture
def summary(tasks: List[Task]) -> CalculationSummary:
    return calculate_summary(tasks)


@pytest.fixture
def single_summary() -> CalculationSummary:
    return calculate_summary([build_task(0)])
