"""
Life-status rules for the insurance series of a projection.

Each rule maps the previous year's insurance value to the next one. Financial
and real-estate assets are not affected by life status.
"""

from abc import ABC, abstractmethod
from typing import Dict, Literal, Type

from .errors import ProjectionValidationError

LifeStatus = Literal["VIVO", "MORTO", "INVALIDO"]

# Insurance earns half of the real return rate
INSURANCE_RATE_FACTOR = 0.5
# One-time payout discount applied the first year after death
DEATH_PAYOUT_FACTOR = 0.5
# Disability reductions start at this year index
DISABILITY_GRACE_YEARS = 5
DISABILITY_ANNUAL_REDUCTION = 0.1


class StatusRule(ABC):
    """Abstract base class for insurance status rules."""

    status: LifeStatus

    @abstractmethod
    def next_insurance(
        self, prev_insurance: float, year_index: int, annual_real_rate: float
    ) -> float:
        """
        Calculate the insurance value for a projected year.

        Args:
            prev_insurance: Value of the previous year (or the starting total)
            year_index: Projected year (0-based)
            annual_real_rate: Annual real return rate

        Returns:
            Insurance value for ``year_index``
        """


class AliveRule(StatusRule):
    """Insurance keeps growing at half the real return rate."""

    status = "VIVO"

    def next_insurance(
        self, prev_insurance: float, year_index: int, annual_real_rate: float
    ) -> float:
        return prev_insurance * (1 + annual_real_rate * INSURANCE_RATE_FACTOR)


class DeceasedRule(StatusRule):
    """Payout is halved once, then held flat with no reinvestment."""

    status = "MORTO"

    def next_insurance(
        self, prev_insurance: float, year_index: int, annual_real_rate: float
    ) -> float:
        if year_index == 0:
            return max(0.0, prev_insurance * DEATH_PAYOUT_FACTOR)
        return prev_insurance


class DisabledRule(StatusRule):
    """Alive growth during the grace years, then a straight-line reduction."""

    status = "INVALIDO"

    def next_insurance(
        self, prev_insurance: float, year_index: int, annual_real_rate: float
    ) -> float:
        if year_index < DISABILITY_GRACE_YEARS:
            return prev_insurance * (1 + annual_real_rate * INSURANCE_RATE_FACTOR)
        return prev_insurance * self.reduction_factor(year_index)

    @staticmethod
    def reduction_factor(year_index: int) -> float:
        """Factor applied at ``year_index``; 0.9 at index 5, zero from 14 on."""
        return max(
            0.0,
            1 - (year_index - (DISABILITY_GRACE_YEARS - 1)) * DISABILITY_ANNUAL_REDUCTION,
        )


STATUS_RULES: Dict[str, Type[StatusRule]] = {
    "VIVO": AliveRule,
    "MORTO": DeceasedRule,
    "INVALIDO": DisabledRule,
}


def get_status_rule(status: str) -> StatusRule:
    """
    Get the rule for a life status.

    Raises:
        ProjectionValidationError: If the status is unknown
    """
    try:
        return STATUS_RULES[status]()
    except KeyError:
        raise ProjectionValidationError(
            "Invalid life status",
            [{"field": "status", "message": "Status must be VIVO, MORTO or INVALIDO"}],
        ) from None
