"""
Pydantic request models for the back-office CRUD endpoints.

Updates are validated by merging the stored row with the submitted fields and
running the result through the matching create model, so a partial update can
never leave a row in a state a create would have rejected.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from .snapshot import AssetCategory, DayDate, MovementDirection, Recurrence

EditableSimulationStatus = Literal["ATIVO", "INATIVO"]
InsuranceType = Literal["VIDA", "INVALIDEZ", "OUTRO"]


class ClientCreate(BaseModel):
    """Client registration data."""

    name: str = Field(..., min_length=1, max_length=255, description="Client name")
    email: EmailStr = Field(..., description="Contact e-mail")
    phone: Optional[str] = Field(None, max_length=50, description="Phone number")
    address: Optional[str] = Field(None, description="Postal address")
    is_active: bool = Field(default=True, description="Whether the client is active")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        # Uniqueness is checked case-insensitively
        return v.lower()


class SimulationCreate(BaseModel):
    """A new financial plan for a client."""

    client_id: int = Field(..., gt=0, description="Owning client")
    name: str = Field(..., min_length=3, max_length=255, description="Plan name")
    description: Optional[str] = Field(None, description="Free-form notes")
    status: EditableSimulationStatus = Field(default="ATIVO", description="Plan status")
    start_date: DayDate = Field(..., description="Date the plan starts from")
    real_rate: float = Field(default=0.0, ge=0, description="Annual real return rate")


class RecordCreate(BaseModel):
    """Dated valuation of an allocation."""

    date: DayDate = Field(..., description="Valuation date")
    value: float = Field(..., ge=0, description="Value on that date")
    notes: Optional[str] = Field(None, description="Notes")


class AllocationCreate(BaseModel):
    """An asset held within a simulation."""

    type: AssetCategory = Field(..., description="Financial or real-estate asset")
    name: str = Field(..., min_length=1, max_length=255, description="Asset name")
    value: float = Field(..., ge=0, description="Registered value")
    start_date: Optional[DayDate] = Field(None, description="Acquisition date")
    installments: Optional[int] = Field(None, ge=0, description="Financing installments")
    interest_rate: Optional[float] = Field(None, ge=0, description="Financing interest rate")
    records: List[RecordCreate] = Field(
        default_factory=list, description="Initial valuation records"
    )


class MovementCreate(BaseModel):
    """A one-off or recurring cash movement."""

    type: MovementDirection = Field(..., description="Inflow or outflow")
    value: float = Field(..., gt=0, description="Amount per occurrence")
    description: str = Field(default="", description="Description")
    frequency: Recurrence = Field(..., description="Recurrence")
    start_date: DayDate = Field(..., description="First occurrence")
    end_date: Optional[DayDate] = Field(None, description="Last possible occurrence")
    category: Optional[str] = Field(None, max_length=100, description="Category")

    @model_validator(mode="after")
    def validate_dates(self):
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self


class InsuranceCreate(BaseModel):
    """Insurance policy attached to a simulation."""

    name: str = Field(..., min_length=1, max_length=255, description="Policy name")
    type: InsuranceType = Field(default="VIDA", description="Coverage type")
    start_date: DayDate = Field(..., description="Coverage start")
    duration_months: int = Field(..., ge=0, description="Coverage length in months")
    premium: float = Field(default=0.0, ge=0, description="Monthly premium")
    insured_value: float = Field(..., ge=0, description="Insured value")


class DuplicateRequest(BaseModel):
    """Optional name for a duplicated simulation."""

    name: Optional[str] = Field(None, min_length=3, max_length=255)
