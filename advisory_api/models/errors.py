"""
Exceptions raised by the projection and timeline engine.

Validation problems are reported before any snapshot is loaded; the other two
errors can only happen once the engine is running.
"""

from typing import Any, Dict, List, Optional


class EngineError(Exception):
    """Base exception for projection and timeline errors."""


class ProjectionValidationError(EngineError):
    """Raised when projection or timeline parameters are out of range."""

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []

    @classmethod
    def from_pydantic(cls, exc: Any) -> "ProjectionValidationError":
        """Build from a pydantic ValidationError, keeping the offending fields."""
        errors = [
            {
                "field": ".".join(str(part) for part in error.get("loc", ())),
                "message": error.get("msg", ""),
            }
            for error in exc.errors()
        ]
        return cls("Invalid projection parameters", errors)


class SimulationNotFoundError(EngineError):
    """Raised when the snapshot provider has no simulation for the given id."""

    def __init__(self, simulation_id: int):
        super().__init__(f"Simulation {simulation_id} not found")
        self.simulation_id = simulation_id


class ComputationError(EngineError):
    """Raised when a projected series contains a non-finite value."""
