"""
Starting values for a projection.

Each asset starts from its latest valuation recorded strictly before the
simulation start date, or from its registered value when no such record
exists. Insurance starts from the plain sum of insured values.
"""

from datetime import date
from typing import Optional, Sequence

from pydantic import BaseModel, Field

from .snapshot import SimulationSnapshot, ValuationRecord


class StartingTotals(BaseModel):
    """Category totals at the simulation start date."""

    financial: float = Field(default=0.0, description="Financial assets")
    real_estate: float = Field(default=0.0, description="Real-estate assets")
    insurance: float = Field(default=0.0, description="Insured values")


def latest_record_before(
    records: Sequence[ValuationRecord], as_of: date
) -> Optional[ValuationRecord]:
    """
    Find the most recent record dated strictly before ``as_of``.

    When several records share the winning date, the one that appears last in
    ``records`` wins.

    Args:
        records: Valuation records in insertion order
        as_of: Cutoff date (excluded)

    Returns:
        The selected record, or None when nothing qualifies
    """
    selected: Optional[ValuationRecord] = None
    for record in records:
        if record.date >= as_of:
            continue
        if selected is None or record.date >= selected.date:
            selected = record
    return selected


def resolve_initial_value(
    records: Sequence[ValuationRecord], nominal_value: float, as_of: date
) -> float:
    """Starting value of one asset; falls back to ``nominal_value``."""
    record = latest_record_before(records, as_of)
    if record is None:
        return float(nominal_value or 0.0)
    return float(record.value)


def compute_starting_totals(snapshot: SimulationSnapshot) -> StartingTotals:
    """Sum resolved asset values per category, plus total insured value."""
    financial = 0.0
    real_estate = 0.0
    for asset in snapshot.assets:
        value = resolve_initial_value(
            asset.valuation_history, asset.nominal_value, snapshot.start_date
        )
        if asset.category == "FINANCEIRA":
            financial += value
        else:
            real_estate += value

    insurance = sum((policy.insured_value for policy in snapshot.insurances), 0.0)

    return StartingTotals(
        financial=financial, real_estate=real_estate, insurance=float(insurance)
    )
