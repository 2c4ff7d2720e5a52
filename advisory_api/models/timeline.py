"""
Cash-flow timeline for a simulation's movements.

Recurring movement definitions are unrolled into a flat, date-ordered ledger
over a window of calendar years. No compounding happens here; the ledger feeds
cash-flow charts independently of the projection engine.
"""

from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel, Field, ValidationError

from .errors import ProjectionValidationError
from .snapshot import DayDate, MovementDirection, RecurringMovement
from .time_grid import TimeGrid, iter_occurrences


class TimelineEntry(BaseModel):
    """One dated occurrence of a movement."""

    date: DayDate
    direction: MovementDirection
    amount: float
    description: str = ""
    source_movement_id: Optional[int] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "date": self.date.isoformat(),
            "year": self.date.year,
            "direction": self.direction,
            "amount": self.amount,
            "description": self.description,
            "source_movement_id": self.source_movement_id,
        }


class YearSummary(BaseModel):
    """Income, expense and net cash flow of one year."""

    year: int
    income: float = Field(default=0.0)
    expense: float = Field(default=0.0)
    net: float = Field(default=0.0)


def build_window(window_start: int, window_end: int) -> TimeGrid:
    """
    Validate a year window.

    Raises:
        ProjectionValidationError: If the years are out of range or reversed
    """
    try:
        return TimeGrid(start_year=window_start, end_year=window_end)
    except ValidationError as exc:
        raise ProjectionValidationError.from_pydantic(exc) from exc


def expand_movement(
    movement: RecurringMovement, window: TimeGrid
) -> List[TimelineEntry]:
    """Occurrences of a single movement that fall inside ``window``."""
    # Open-ended movements run to the end of the window
    last_day = min(movement.end_date or window.last_day, window.last_day)

    if movement.recurrence == "UNICA":
        dates = [movement.start_date]
    else:
        dates = iter_occurrences(movement.start_date, movement.recurrence, last_day)

    return [
        TimelineEntry(
            date=day,
            direction=movement.direction,
            amount=movement.amount,
            description=movement.description,
            source_movement_id=movement.id,
        )
        for day in dates
        if window.contains(day)
    ]


def expand_timeline(
    movements: Sequence[RecurringMovement], window_start: int, window_end: int
) -> List[TimelineEntry]:
    """
    Unroll movements into a chronological ledger.

    Args:
        movements: Movement definitions in their original order
        window_start: First calendar year of the window
        window_end: Last calendar year of the window (inclusive)

    Returns:
        Entries sorted by date; same-day entries keep the movement order

    Raises:
        ProjectionValidationError: If the window is invalid
    """
    window = build_window(window_start, window_end)

    entries: List[TimelineEntry] = []
    for movement in movements:
        entries.extend(expand_movement(movement, window))

    # sorted() is stable, so movement order breaks same-day ties
    return sorted(entries, key=lambda entry: entry.date)


def summarize_timeline(
    entries: Sequence[TimelineEntry], window_start: int, window_end: int
) -> List[YearSummary]:
    """Yearly totals for every year of the window, including empty years."""
    window = build_window(window_start, window_end)
    summaries = {year: YearSummary(year=year) for year in window.get_years()}
    for entry in entries:
        summary = summaries[entry.date.year]
        if entry.direction == "ENTRADA":
            summary.income += entry.amount
        else:
            summary.expense += entry.amount
    for summary in summaries.values():
        summary.net = summary.income - summary.expense
    return list(summaries.values())
