"""
Chart series helpers.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, List, Sequence, TypeVar

T = TypeVar("T")

SAMPLE_EVERY = 12


@dataclass(frozen=True)
class ChartPoint:
    """A labelled value for a line/bar chart (e.g. "Year 3" -> 125000.00)."""

    label: str
    value: Decimal


def sample_series(
    rows: Sequence[T],
    label: Callable[[T], str],
    value: Callable[[T], Decimal],
    every: int = SAMPLE_EVERY,
    include_last: bool = True,
) -> List[ChartPoint]:
    """
    Sample every ``every``-th row starting with the first one.

    When include_last is set the final row is always appended, even if it
    was already sampled, so the chart ends on the terminal value.
    """
    chart = [ChartPoint(label(row), value(row)) for row in rows[::every]]
    if include_last and rows:
        last = rows[-1]
        chart.append(ChartPoint(label(last), value(last)))
    return chart
