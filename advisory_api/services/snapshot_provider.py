"""
SQLAlchemy-backed snapshot provider.

Translates the persisted simulation graph into the frozen snapshot types the
engine consumes. Money columns come back as Decimal and are converted to float
here, so the engine only ever sees plain numbers.
"""

import logging
from typing import List

from sqlalchemy.orm import Session, selectinload

from advisory_api.database.models import Allocation, Movement, Simulation
from advisory_api.models.errors import SimulationNotFoundError
from advisory_api.models.snapshot import (
    AssetSnapshot,
    InsurancePolicy,
    RecurringMovement,
    SimulationSnapshot,
    ValuationRecord,
)

logger = logging.getLogger(__name__)


def _movement_snapshot(movement: Movement) -> RecurringMovement:
    return RecurringMovement(
        id=movement.id,
        direction=movement.type,
        amount=float(movement.value),
        recurrence=movement.frequency,
        start_date=movement.start_date,
        end_date=movement.end_date,
        description=movement.description or "",
    )


def _asset_snapshot(allocation: Allocation) -> AssetSnapshot:
    return AssetSnapshot(
        id=allocation.id,
        name=allocation.name,
        category=allocation.type,
        nominal_value=float(allocation.value or 0),
        valuation_history=[
            ValuationRecord(date=record.date, value=float(record.value))
            for record in allocation.records
        ],
    )


class SqlAlchemySnapshotProvider:
    """Snapshot provider reading from the application database."""

    def __init__(self, session: Session):
        """Initialize the provider.

        Args:
            session: Open database session, owned by the caller
        """
        self.session = session

    def _get_simulation(self, simulation_id: int, *options) -> Simulation:
        simulation = (
            self.session.query(Simulation)
            .options(*options)
            .filter(Simulation.id == simulation_id)
            .first()
        )
        if simulation is None:
            logger.info(f"Simulation {simulation_id} not found")
            raise SimulationNotFoundError(simulation_id)
        return simulation

    def load_snapshot(self, simulation_id: int) -> SimulationSnapshot:
        simulation = self._get_simulation(
            simulation_id,
            selectinload(Simulation.allocations).selectinload(Allocation.records),
            selectinload(Simulation.movements),
            selectinload(Simulation.insurances),
        )

        return SimulationSnapshot(
            simulation_id=simulation.id,
            start_date=simulation.start_date,
            real_rate=simulation.real_rate or 0.0,
            assets=[
                _asset_snapshot(allocation)
                for allocation in sorted(simulation.allocations, key=lambda a: a.id)
            ],
            insurances=[
                InsurancePolicy(
                    id=insurance.id,
                    name=insurance.name,
                    insured_value=float(insurance.insured_value),
                    start_date=insurance.start_date,
                    duration_months=insurance.duration_months,
                )
                for insurance in sorted(simulation.insurances, key=lambda i: i.id)
            ],
            movements=[
                _movement_snapshot(movement)
                for movement in sorted(simulation.movements, key=lambda m: m.id)
            ],
        )

    def load_movements(self, simulation_id: int) -> List[RecurringMovement]:
        self._get_simulation(simulation_id)
        movements = (
            self.session.query(Movement)
            .filter(Movement.simulation_id == simulation_id)
            .order_by(Movement.id)
            .all()
        )
        return [_movement_snapshot(movement) for movement in movements]
