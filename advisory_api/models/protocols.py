"""
Protocol interfaces for the projection engine's collaborators.

The engine never talks to a database. It receives a snapshot provider, so any
store (SQLAlchemy, an in-memory fixture, a remote API) can back a projection.
"""

from typing import List, Protocol

from .snapshot import RecurringMovement, SimulationSnapshot


class SnapshotProvider(Protocol):
    """
    Loads read-only simulation snapshots.

    Implementations must return a fresh snapshot on every call and must not
    hand out objects that are shared with other callers.
    """

    def load_snapshot(self, simulation_id: int) -> SimulationSnapshot:
        """
        Load allocations with their records, movements and insurances.

        Args:
            simulation_id: Simulation to load

        Returns:
            SimulationSnapshot for the simulation

        Raises:
            SimulationNotFoundError: If the simulation does not exist
        """
        ...

    def load_movements(self, simulation_id: int) -> List[RecurringMovement]:
        """
        Load only the movements of a simulation, in creation order.

        Raises:
            SimulationNotFoundError: If the simulation does not exist
        """
        ...
