"""
Tests for the projection service.

The service must validate its inputs before touching the snapshot provider.
"""

from datetime import date

import pytest

from advisory_api.models.errors import ProjectionValidationError, SimulationNotFoundError
from advisory_api.models.snapshot import RecurringMovement
from advisory_api.services.projection_service import ProjectionService


class TestProjectionService:
    """Test cases for ProjectionService."""

    def test_project_from_mapping(self, fake_provider):
        service = ProjectionService(fake_provider)

        result = service.project(
            {"simulation_id": 1, "status": "VIVO", "projection_years": 3}
        )

        assert result.total[0] == pytest.approx(1472160)
        assert fake_provider.calls == [("load_snapshot", 1)]

    def test_invalid_parameters_skip_provider(self, fake_provider):
        service = ProjectionService(fake_provider)

        with pytest.raises(ProjectionValidationError):
            service.project({"simulation_id": 1, "status": "VIVO", "projection_years": 0})

        assert fake_provider.calls == []

    def test_unknown_status_skips_provider(self, fake_provider):
        service = ProjectionService(fake_provider)

        with pytest.raises(ProjectionValidationError):
            service.project({"simulation_id": 1, "status": "DESCONHECIDO"})

        assert fake_provider.calls == []

    def test_missing_simulation(self, fake_provider):
        service = ProjectionService(fake_provider)

        with pytest.raises(SimulationNotFoundError) as exc_info:
            service.project({"simulation_id": 99, "status": "MORTO"})

        assert exc_info.value.simulation_id == 99

    def test_repeated_projections_are_identical(self, fake_provider):
        service = ProjectionService(fake_provider)
        request = {"simulationId": 1, "status": "INVALIDO", "projectionYears": 40}

        assert service.project(request).model_dump() == service.project(request).model_dump()


class TestTimelineService:
    """Test timeline expansion through the service."""

    @pytest.fixture
    def provider(self, make_provider):
        movements = [
            RecurringMovement(
                id=5,
                direction="SAIDA",
                amount=2500,
                recurrence="MENSAL",
                start_date=date(2025, 1, 10),
                end_date=date(2025, 12, 31),
                description="Aluguel",
            ),
            RecurringMovement(
                id=6,
                direction="ENTRADA",
                amount=40000,
                recurrence="UNICA",
                start_date=date(2025, 12, 20),
                description="Bônus",
            ),
        ]
        return make_provider(movements={1: movements})

    def test_timeline(self, provider):
        entries, summaries = ProjectionService(provider).timeline(1, 2025, 2026)

        assert len(entries) == 13
        assert entries[-1].source_movement_id == 6
        assert summaries[0].expense == 30000
        assert summaries[0].net == 10000
        assert summaries[1].net == 0

    def test_reversed_window_skips_provider(self, provider):
        with pytest.raises(ProjectionValidationError):
            ProjectionService(provider).timeline(1, 2026, 2025)

        assert provider.calls == []

    def test_missing_simulation(self, provider):
        with pytest.raises(SimulationNotFoundError):
            ProjectionService(provider).timeline(2, 2025, 2026)

    def test_timeline_response(self, provider):
        response = ProjectionService(provider).timeline_response(1, 2025, 2025)

        assert response["simulation_id"] == 1
        assert response["start_year"] == 2025
        assert response["end_year"] == 2025
        assert response["entries"][0]["date"] == "2025-01-10"
        assert response["summary"] == [
            {"year": 2025, "income": 40000.0, "expense": 30000.0, "net": 10000.0}
        ]
