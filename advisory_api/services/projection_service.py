"""
Projection service for running patrimony projections and movement timelines.

This service validates caller parameters, loads the simulation snapshot through
an injected provider and hands it to the engine. Parameters are always
validated before the provider is touched.
"""

import logging
from typing import Any, Dict, List, Mapping, Tuple, Union

from advisory_api.models.errors import EngineError
from advisory_api.models.projection import (
    ProjectionEngine,
    ProjectionParameters,
    ProjectionResult,
)
from advisory_api.models.protocols import SnapshotProvider
from advisory_api.models.timeline import (
    TimelineEntry,
    YearSummary,
    build_window,
    expand_timeline,
    summarize_timeline,
)


class ProjectionService:
    """Service for projections and timelines of stored simulations."""

    def __init__(self, provider: SnapshotProvider) -> None:
        """Initialize the projection service.

        Args:
            provider: Source of simulation snapshots
        """
        self.provider = provider
        self.logger = logging.getLogger(__name__)

    def project(
        self, params: Union[ProjectionParameters, Mapping[str, Any]]
    ) -> ProjectionResult:
        """Run a projection for a stored simulation.

        Args:
            params: Validated parameters, or a raw mapping to validate

        Returns:
            ProjectionResult for the simulation

        Raises:
            ProjectionValidationError: If parameters are invalid (no I/O done)
            SimulationNotFoundError: If the simulation does not exist
            ComputationError: If the projection produced non-finite values
        """
        if not isinstance(params, ProjectionParameters):
            params = ProjectionParameters.parse(dict(params))
        engine = ProjectionEngine.for_status(params.life_status)

        try:
            self.logger.info(
                f"Starting projection for simulation {params.simulation_id} "
                f"(status={params.life_status}, rate={params.annual_real_rate}, "
                f"years={params.horizon_years})"
            )
            snapshot = self.provider.load_snapshot(params.simulation_id)
            result = engine.project(params, snapshot)
            self.logger.info(
                f"Completed projection for simulation {params.simulation_id}"
            )
            return result

        except EngineError as e:
            self.logger.error(
                f"Projection for simulation {params.simulation_id} failed: {str(e)}"
            )
            raise

    def timeline(
        self, simulation_id: int, start_year: int, end_year: int
    ) -> Tuple[List[TimelineEntry], List[YearSummary]]:
        """Expand the movements of a stored simulation over a year window.

        Returns:
            Tuple of (chronological entries, per-year summaries)

        Raises:
            ProjectionValidationError: If the window is invalid (no I/O done)
            SimulationNotFoundError: If the simulation does not exist
        """
        build_window(start_year, end_year)

        try:
            movements = self.provider.load_movements(simulation_id)
            entries = expand_timeline(movements, start_year, end_year)
            self.logger.info(
                f"Expanded {len(movements)} movements of simulation {simulation_id} "
                f"into {len(entries)} entries for {start_year}-{end_year}"
            )
            return entries, summarize_timeline(entries, start_year, end_year)

        except EngineError as e:
            self.logger.error(
                f"Timeline for simulation {simulation_id} failed: {str(e)}"
            )
            raise

    def timeline_response(
        self, simulation_id: int, start_year: int, end_year: int
    ) -> Dict[str, Any]:
        """Timeline in the JSON shape served by the movements endpoint."""
        entries, summaries = self.timeline(simulation_id, start_year, end_year)
        return {
            "simulation_id": simulation_id,
            "start_year": start_year,
            "end_year": end_year,
            "entries": [entry.to_dict() for entry in entries],
            "summary": [summary.model_dump() for summary in summaries],
        }
