"""
Simulation versioning service.

Versions are full copies: duplicating a simulation copies its allocations (with
their valuation records), movements and insurances into a new row whose
base_id points back at the simulation it came from.
"""

import logging
from datetime import date
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from advisory_api.database.models import (
    Allocation,
    AssetRecord,
    Insurance,
    Movement,
    Simulation,
)
from advisory_api.models.errors import SimulationNotFoundError

CURRENT_SITUATION = "SITUACAO_ATUAL"

logger = logging.getLogger(__name__)


def _copy_children(source: Simulation, target: Simulation) -> None:
    for allocation in source.allocations:
        target.allocations.append(
            Allocation(
                type=allocation.type,
                name=allocation.name,
                value=allocation.value,
                start_date=allocation.start_date,
                installments=allocation.installments,
                interest_rate=allocation.interest_rate,
                records=[
                    AssetRecord(date=record.date, value=record.value, notes=record.notes)
                    for record in allocation.records
                ],
            )
        )
    for movement in source.movements:
        target.movements.append(
            Movement(
                type=movement.type,
                value=movement.value,
                description=movement.description,
                frequency=movement.frequency,
                start_date=movement.start_date,
                end_date=movement.end_date,
                category=movement.category,
            )
        )
    for insurance in source.insurances:
        target.insurances.append(
            Insurance(
                name=insurance.name,
                type=insurance.type,
                start_date=insurance.start_date,
                duration_months=insurance.duration_months,
                premium=insurance.premium,
                insured_value=insurance.insured_value,
            )
        )


class SimulationVersioningService:
    """Copies, versions and guards simulations."""

    def __init__(self, db_session: Session):
        self.db = db_session

    def get_simulation(self, simulation_id: int) -> Simulation:
        """
        Load a simulation.

        Raises:
            SimulationNotFoundError: If simulation_id does not exist
        """
        simulation = self.db.query(Simulation).filter(Simulation.id == simulation_id).first()
        if simulation is None:
            raise SimulationNotFoundError(simulation_id)
        return simulation

    def duplicate(self, simulation_id: int, name: Optional[str] = None) -> Simulation:
        """
        Deep-copy a simulation into a new version.

        Args:
            simulation_id: Simulation to copy
            name: Name of the copy, defaults to "Cópia de <original name>"

        Returns:
            The new simulation, with base_id set to the original
        """
        original = self.get_simulation(simulation_id)

        copy = Simulation(
            client_id=original.client_id,
            base_id=original.id,
            name=name or f"Cópia de {original.name}",
            description=original.description,
            status="ATIVO" if original.status == CURRENT_SITUATION else original.status,
            start_date=original.start_date,
            real_rate=original.real_rate,
        )
        _copy_children(original, copy)

        self.db.add(copy)
        self.db.commit()
        self.db.refresh(copy)

        logger.info(f"Duplicated simulation {simulation_id} into {copy.id}")
        return copy

    def find_current_situation(self, base: Simulation) -> Optional[Simulation]:
        """The current situation already taken from ``base``'s plan, if any."""
        return (
            self.db.query(Simulation)
            .filter(
                Simulation.client_id == base.client_id,
                Simulation.name == base.name,
                Simulation.status == CURRENT_SITUATION,
            )
            .first()
        )

    def create_current_situation(
        self, simulation_id: int, today: Optional[date] = None
    ) -> Simulation:
        """
        Create the "current situation" of a plan, dated today.

        An existing current situation with the same name and client is
        returned unchanged instead of creating a second one.
        """
        base = self.get_simulation(simulation_id)

        existing = self.find_current_situation(base)
        if existing is not None:
            return existing

        current = Simulation(
            client_id=base.client_id,
            base_id=base.base_id or base.id,
            name=base.name,
            description=base.description,
            status=CURRENT_SITUATION,
            start_date=today or date.today(),
            real_rate=base.real_rate,
        )
        _copy_children(base, current)

        self.db.add(current)
        self.db.commit()
        self.db.refresh(current)

        logger.info(f"Created current situation {current.id} from simulation {simulation_id}")
        return current

    def latest_simulations(self, client_id: Optional[int] = None) -> List[Simulation]:
        """Most recent simulation of each name, ordered by name."""
        query = self.db.query(Simulation)
        if client_id is not None:
            query = query.filter(Simulation.client_id == client_id)

        latest: Dict[str, Simulation] = {}
        for simulation in query.order_by(Simulation.name, Simulation.id).all():
            # Later ids were created later
            latest[simulation.name] = simulation
        return list(latest.values())

    def history(self, name: str) -> List[Simulation]:
        """Every version carrying ``name``, newest first."""
        return (
            self.db.query(Simulation)
            .filter(Simulation.name == name)
            .order_by(Simulation.id.desc())
            .all()
        )

    def is_legacy_version(self, simulation: Simulation) -> bool:
        """A copy is legacy once a newer copy of the same base exists."""
        if simulation.base_id is None:
            return False
        newer = (
            self.db.query(Simulation)
            .filter(Simulation.base_id == simulation.base_id, Simulation.id > simulation.id)
            .first()
        )
        return newer is not None

    def can_edit(self, simulation: Simulation) -> bool:
        if simulation.status == CURRENT_SITUATION:
            return False
        return not self.is_legacy_version(simulation)

    def can_delete(self, simulation: Simulation) -> bool:
        return simulation.status != CURRENT_SITUATION
