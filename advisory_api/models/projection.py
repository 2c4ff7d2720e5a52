"""
Patrimony projection engine.

This module compounds financial assets, real-estate assets and insurance
coverage year by year from the simulation's starting totals. Financial assets
earn the full real return rate, real estate 80% of it, and insurance follows
the life-status rule selected by the caller.
"""

from typing import Any, Dict, List, Optional

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ComputationError, ProjectionValidationError
from .initial_values import StartingTotals, compute_starting_totals
from .snapshot import SimulationSnapshot
from .status_rules import LifeStatus, StatusRule, get_status_rule
from .time_grid import projection_years

REAL_ESTATE_RATE_FACTOR = 0.8
MAX_HORIZON_YEARS = 100


class ProjectionParameters(BaseModel):
    """Caller-supplied projection parameters."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    simulation_id: int = Field(
        ..., gt=0, alias="simulationId", description="Simulation to project"
    )
    life_status: LifeStatus = Field(..., alias="status", description="Life status")
    annual_real_rate: float = Field(
        default=0.04,
        ge=0,
        alias="realReturnRate",
        description="Annual real return rate (0.04 = 4%)",
    )
    horizon_years: int = Field(
        default=35,
        ge=1,
        le=MAX_HORIZON_YEARS,
        alias="projectionYears",
        description="Number of projected years",
    )
    include_insurance: bool = Field(
        default=True,
        alias="includeInsurances",
        description="Whether insurance counts towards the total",
    )

    @classmethod
    def parse(cls, data: Dict[str, Any]) -> "ProjectionParameters":
        """
        Validate raw input.

        Snake-case keys (``real_return_rate``, ``projection_years``,
        ``include_insurances``) are accepted next to the field names and the
        camelCase aliases.

        Raises:
            ProjectionValidationError: If any field is missing or out of range
        """
        renames = {
            "real_return_rate": "annual_real_rate",
            "projection_years": "horizon_years",
            "include_insurances": "include_insurance",
            "status": "life_status",
        }
        normalized = {renames.get(key, key): value for key, value in data.items()}
        try:
            return cls.model_validate(normalized)
        except ValidationError as exc:
            raise ProjectionValidationError.from_pydantic(exc) from exc


class SeriesTriple(BaseModel):
    """Projection without insurance, for side-by-side comparison."""

    financial: List[float]
    real_estate: List[float]
    total: List[float]


class ProjectionResult(BaseModel):
    """Year-by-year projection; all series are indexed like ``years``."""

    years: List[int]
    financial: List[float]
    real_estate: List[float]
    insurance: List[float]
    total: List[float]
    without_insurance: Optional[SeriesTriple] = None
    starting_totals: StartingTotals
    metadata: Dict[str, Any] = Field(default_factory=dict)

    def to_response(self) -> Dict[str, Any]:
        """JSON body served by the projections endpoint."""
        projections: Dict[str, Any] = {
            "total": self.total,
            "financial": self.financial,
            "real_estate": self.real_estate,
            "insurance": self.insurance,
        }
        if self.without_insurance is not None:
            projections["without_insurance"] = self.without_insurance.model_dump()
        return {
            "years": self.years,
            "projections": projections,
            "starting_totals": self.starting_totals.model_dump(),
            "metadata": {
                **self.metadata,
                "starting_totals": self.starting_totals.model_dump(),
            },
        }


class ProjectionEngine:
    """Runs the yearly compounding loop for one set of parameters."""

    def __init__(self, status_rule: StatusRule):
        """Initialize the engine.

        Args:
            status_rule: Rule applied to the insurance series
        """
        self.status_rule = status_rule

    @classmethod
    def for_status(cls, status: str) -> "ProjectionEngine":
        return cls(get_status_rule(status))

    def project(
        self, params: ProjectionParameters, snapshot: SimulationSnapshot
    ) -> ProjectionResult:
        """
        Project the snapshot forward ``params.horizon_years`` years.

        Args:
            params: Validated projection parameters
            snapshot: Simulation snapshot

        Returns:
            ProjectionResult with ``horizon_years`` values per series

        Raises:
            ComputationError: If any projected value is not finite
        """
        if params.life_status != self.status_rule.status:
            raise ProjectionValidationError(
                "Life status does not match the engine rule",
                [{"field": "status", "message": "Status does not match the rule"}],
            )

        starting = compute_starting_totals(snapshot)
        rate = params.annual_real_rate
        horizon = params.horizon_years

        financial: List[float] = []
        real_estate: List[float] = []
        insurance: List[float] = []
        total: List[float] = []

        prev_financial = starting.financial
        prev_real_estate = starting.real_estate
        prev_insurance = starting.insurance

        for year_index in range(horizon):
            prev_financial = prev_financial * (1 + rate)
            prev_real_estate = prev_real_estate * (1 + rate * REAL_ESTATE_RATE_FACTOR)
            prev_insurance = self.status_rule.next_insurance(
                prev_insurance, year_index, rate
            )

            financial.append(prev_financial)
            real_estate.append(prev_real_estate)
            insurance.append(prev_insurance)
            total.append(
                prev_financial
                + prev_real_estate
                + (prev_insurance if params.include_insurance else 0.0)
            )

        without_insurance = None
        if params.include_insurance:
            without_insurance = SeriesTriple(
                financial=list(financial),
                real_estate=list(real_estate),
                total=[f + r for f, r in zip(financial, real_estate)],
            )

        _ensure_finite(
            financial=financial,
            real_estate=real_estate,
            insurance=insurance,
            total=total,
        )

        return ProjectionResult(
            years=projection_years(snapshot.start_date, horizon),
            financial=financial,
            real_estate=real_estate,
            insurance=insurance,
            total=total,
            without_insurance=without_insurance,
            starting_totals=starting,
            metadata={
                "simulation_id": params.simulation_id,
                "status": params.life_status,
                "real_return_rate": rate,
                "include_insurances": params.include_insurance,
                "projection_years": horizon,
            },
        )


def _ensure_finite(**series: List[float]) -> None:
    for name, values in series.items():
        array = np.asarray(values, dtype=np.float64)
        if not np.all(np.isfinite(array)):
            bad_index = int(np.argmin(np.isfinite(array)))
            raise ComputationError(
                f"Non-finite value in {name} series at year index {bad_index}"
            )
