"""
Projections blueprint.

Runs the patrimony projection engine for a stored simulation. Parameters are
validated before the database is touched.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from flask import Blueprint, current_app, jsonify

from advisory_api.config import Settings, get_global_settings
from advisory_api.database.base import db_session
from advisory_api.models.errors import (
    ComputationError,
    ProjectionValidationError,
    SimulationNotFoundError,
)
from advisory_api.models.projection import ProjectionParameters
from advisory_api.services.projection_service import ProjectionService
from advisory_api.services.snapshot_provider import SqlAlchemySnapshotProvider

from .responses import error_response, internal_error, invalid_data, json_body, not_found

projections_bp = Blueprint("projections", __name__, url_prefix="/api")


def _with_defaults(data: Dict[str, Any], settings: Settings) -> Dict[str, Any]:
    """Fill rate and horizon from settings when the caller left them out."""
    data = dict(data)
    if not {"real_return_rate", "realReturnRate", "annual_real_rate"} & data.keys():
        data["real_return_rate"] = settings.default_real_return_rate
    if not {"projection_years", "projectionYears", "horizon_years"} & data.keys():
        data["projection_years"] = settings.default_projection_years
    return data


@projections_bp.route("/projections", methods=["POST"])
def run_projection() -> Any:
    """Project a simulation's patrimony year by year.

    Request body:
        simulation_id, status (VIVO | MORTO | INVALIDO), real_return_rate,
        projection_years, include_insurances; camelCase aliases accepted

    Returns:
        JSON with year labels, the projected series and metadata
    """
    settings = get_global_settings()
    try:
        params = ProjectionParameters.parse(_with_defaults(json_body(), settings))
    except ProjectionValidationError as e:
        return invalid_data(e)

    if params.horizon_years > settings.max_projection_years:
        return error_response(
            "Invalid data",
            400,
            [
                {
                    "field": "projection_years",
                    "message": f"Must be at most {settings.max_projection_years}",
                }
            ],
        )

    try:
        with db_session() as db:
            service = ProjectionService(SqlAlchemySnapshotProvider(db))
            result = service.project(params)

        response = result.to_response()
        response["metadata"]["calculated_at"] = datetime.now(timezone.utc).isoformat()
        return jsonify(response), 200

    except SimulationNotFoundError:
        return not_found("Simulation")
    except ComputationError as e:
        current_app.logger.error(f"Projection produced invalid values: {str(e)}")
        return error_response("Projection produced invalid values", 500)
    except Exception as e:
        current_app.logger.error(f"Error running projection: {str(e)}")
        return internal_error()
