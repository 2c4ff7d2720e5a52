"""
Time grid utilities for projections and movement timelines.

This module provides year windows, the calendar labels used by the projection
engine and the month/year date stepping used to unroll recurring movements.
"""

from datetime import date
from typing import Iterator, List, Literal

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, Field, ValidationInfo, field_validator

Step = Literal["MENSAL", "ANUAL"]

MIN_YEAR = 1900
MAX_YEAR = 2200


class TimeGrid(BaseModel):
    """Inclusive range of calendar years."""

    start_year: int = Field(..., ge=MIN_YEAR, le=MAX_YEAR, description="First year")
    end_year: int = Field(..., ge=MIN_YEAR, le=MAX_YEAR, description="Last year")

    @field_validator("end_year")
    @classmethod
    def validate_end_year(cls, v: int, info: ValidationInfo) -> int:
        if "start_year" in info.data and v < info.data["start_year"]:
            raise ValueError("End year must be >= start year")
        return v

    @property
    def first_day(self) -> date:
        return date(self.start_year, 1, 1)

    @property
    def last_day(self) -> date:
        return date(self.end_year, 12, 31)

    def get_years(self) -> List[int]:
        """Get list of years in the time grid."""
        return list(range(self.start_year, self.end_year + 1))

    def contains(self, day: date) -> bool:
        """Whether ``day`` falls inside the window."""
        return self.first_day <= day <= self.last_day


def projection_years(start_date: date, horizon_years: int) -> List[int]:
    """
    Calendar labels for a projection.

    The first projected year is the one after the simulation start date.

    Args:
        start_date: Simulation start date
        horizon_years: Number of projected years

    Returns:
        List of years, one per projected index
    """
    return [start_date.year + index + 1 for index in range(horizon_years)]


def step_offset(step: Step, count: int) -> relativedelta:
    """Offset of ``count`` months or years."""
    if step == "MENSAL":
        return relativedelta(months=count)
    return relativedelta(years=count)


def iter_occurrences(start: date, step: Step, until: date) -> Iterator[date]:
    """
    Yield start, start + 1 step, start + 2 steps, ... while not past ``until``.

    Each date is computed from ``start`` rather than from the previous one, so
    a day-of-month clamped in a short month (Jan 31 -> Feb 28) is restored in
    the following months (Mar 31).

    Args:
        start: First occurrence
        step: MENSAL or ANUAL
        until: Last acceptable day (inclusive)
    """
    count = 0
    current = start
    while current <= until:
        yield current
        count += 1
        current = start + step_offset(step, count)

