"""
Read-only simulation snapshot consumed by the projection and timeline engine.

A snapshot is assembled fresh for every call from whatever store backs the
application. Everything here is frozen: the engine never mutates its input.
"""

from datetime import date, datetime
from typing import Annotated, Any, List, Literal, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator

AssetCategory = Literal["FINANCEIRA", "IMOBILIZADA"]
MovementDirection = Literal["ENTRADA", "SAIDA"]
Recurrence = Literal["UNICA", "MENSAL", "ANUAL"]


def coerce_date(value: Any) -> Any:
    """Reduce datetimes (objects or ISO strings) to day precision."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and "T" in value:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    return value


DayDate = Annotated[date, BeforeValidator(coerce_date)]


class ValuationRecord(BaseModel):
    """Historical valuation of an asset on a given day."""

    model_config = ConfigDict(frozen=True)

    date: DayDate = Field(..., description="Valuation date")
    value: float = Field(..., ge=0, description="Asset value on that date")


class AssetSnapshot(BaseModel):
    """An allocation together with its ordered valuation history."""

    model_config = ConfigDict(frozen=True)

    id: Optional[int] = Field(default=None, description="Source allocation id")
    name: str = Field(default="", description="Allocation name")
    category: AssetCategory = Field(..., description="Financial or real-estate asset")
    nominal_value: float = Field(default=0.0, ge=0, description="Registered value")
    valuation_history: List[ValuationRecord] = Field(
        default_factory=list, description="Valuation records in insertion order"
    )


class InsurancePolicy(BaseModel):
    """Insurance coverage attached to a simulation."""

    model_config = ConfigDict(frozen=True)

    id: Optional[int] = Field(default=None, description="Source insurance id")
    name: str = Field(default="", description="Policy name")
    insured_value: float = Field(..., ge=0, description="Insured value")
    start_date: DayDate = Field(..., description="Policy start date")
    duration_months: int = Field(default=0, ge=0, description="Coverage in months")


class RecurringMovement(BaseModel):
    """One-off or recurring cash movement."""

    model_config = ConfigDict(frozen=True)

    id: Optional[int] = Field(default=None, description="Source movement id")
    direction: MovementDirection = Field(..., description="Income or expense")
    amount: float = Field(..., gt=0, description="Amount per occurrence")
    recurrence: Recurrence = Field(..., description="UNICA, MENSAL or ANUAL")
    start_date: DayDate = Field(..., description="First occurrence")
    end_date: Optional[DayDate] = Field(
        default=None, description="Last possible day; open-ended when missing"
    )
    description: str = Field(default="", description="Free-text label")

    @model_validator(mode="after")
    def validate_date_range(self):
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("End date must be >= start date")
        return self


class SimulationSnapshot(BaseModel):
    """Everything the engine needs to know about one simulation."""

    model_config = ConfigDict(frozen=True)

    simulation_id: int = Field(..., description="Simulation id")
    start_date: DayDate = Field(..., description="Simulation start date")
    real_rate: float = Field(default=0.0, description="Simulation real rate")
    assets: List[AssetSnapshot] = Field(default_factory=list)
    insurances: List[InsurancePolicy] = Field(default_factory=list)
    movements: List[RecurringMovement] = Field(default_factory=list)
