"""
Movements blueprint.

CRUD endpoints for cash movements and the expanded timeline of a simulation's
movements over a window of years.
"""

from typing import Any

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from advisory_api.config import get_global_settings
from advisory_api.database.base import db_session
from advisory_api.database.models import Movement, Simulation
from advisory_api.models.errors import ProjectionValidationError, SimulationNotFoundError
from advisory_api.models.schemas import MovementCreate
from advisory_api.models.time_grid import MAX_YEAR
from advisory_api.services.projection_service import ProjectionService
from advisory_api.services.simulation_service import SimulationVersioningService
from advisory_api.services.snapshot_provider import SqlAlchemySnapshotProvider

from .responses import internal_error, invalid_data, json_body, merged, not_found, read_only

movements_bp = Blueprint("movements", __name__, url_prefix="/api")


@movements_bp.route("/simulations/<int:simulation_id>/movements", methods=["GET"])
def list_movements(simulation_id: int) -> Any:
    try:
        with db_session() as db:
            simulation = db.query(Simulation).filter(Simulation.id == simulation_id).first()
            if not simulation:
                return not_found("Simulation")

            movements = (
                db.query(Movement)
                .filter(Movement.simulation_id == simulation_id)
                .order_by(Movement.start_date, Movement.id)
                .all()
            )
            return jsonify([movement.to_dict() for movement in movements]), 200

    except Exception as e:
        current_app.logger.error(f"Error listing movements: {str(e)}")
        return internal_error()


@movements_bp.route("/simulations/<int:simulation_id>/movements", methods=["POST"])
def create_movement(simulation_id: int) -> Any:
    try:
        payload = MovementCreate.model_validate(json_body())
    except ValidationError as e:
        return invalid_data(e)

    try:
        with db_session() as db:
            simulation = db.query(Simulation).filter(Simulation.id == simulation_id).first()
            if not simulation:
                return not_found("Simulation")
            if not SimulationVersioningService(db).can_edit(simulation):
                return read_only()

            movement = Movement(simulation_id=simulation_id, **payload.model_dump())
            db.add(movement)
            db.commit()
            db.refresh(movement)
            return jsonify(movement.to_dict()), 201

    except Exception as e:
        current_app.logger.error(f"Error creating movement: {str(e)}")
        return internal_error()


@movements_bp.route(
    "/simulations/<int:simulation_id>/movements/timeline", methods=["GET"]
)
def movement_timeline(simulation_id: int) -> Any:
    """Expanded movement ledger with yearly totals.

    Query parameters:
        start_year: First year of the window (default: simulation start year)
        end_year: Last year of the window (default: start_year plus the
            default projection horizon, capped at the last supported year)

    Returns:
        JSON with entries sorted by date and a per-year summary
    """
    start_year = request.args.get("start_year", type=int)
    end_year = request.args.get("end_year", type=int)

    try:
        with db_session() as db:
            if start_year is None:
                simulation = (
                    db.query(Simulation).filter(Simulation.id == simulation_id).first()
                )
                if not simulation:
                    return not_found("Simulation")
                start_year = simulation.start_date.year
            if end_year is None:
                default_end = start_year + get_global_settings().default_projection_years - 1
                end_year = min(default_end, MAX_YEAR)

            service = ProjectionService(SqlAlchemySnapshotProvider(db))
            return jsonify(
                service.timeline_response(simulation_id, start_year, end_year)
            ), 200

    except ProjectionValidationError as e:
        return invalid_data(e)
    except SimulationNotFoundError:
        return not_found("Simulation")
    except Exception as e:
        current_app.logger.error(f"Error building movement timeline: {str(e)}")
        return internal_error()


@movements_bp.route("/movements/<int:movement_id>", methods=["GET"])
def get_movement(movement_id: int) -> Any:
    try:
        with db_session() as db:
            movement = db.query(Movement).filter(Movement.id == movement_id).first()
            if not movement:
                return not_found("Movement")
            return jsonify(movement.to_dict()), 200

    except Exception as e:
        current_app.logger.error(f"Error getting movement: {str(e)}")
        return internal_error()


@movements_bp.route("/movements/<int:movement_id>", methods=["PUT"])
def update_movement(movement_id: int) -> Any:
    try:
        with db_session() as db:
            movement = db.query(Movement).filter(Movement.id == movement_id).first()
            if not movement:
                return not_found("Movement")
            if not SimulationVersioningService(db).can_edit(movement.simulation):
                return read_only()

            try:
                payload = merged(MovementCreate, movement.to_dict(), json_body())
            except ValidationError as e:
                return invalid_data(e)

            for key, value in payload.model_dump().items():
                setattr(movement, key, value)
            db.commit()
            db.refresh(movement)
            return jsonify(movement.to_dict()), 200

    except Exception as e:
        current_app.logger.error(f"Error updating movement: {str(e)}")
        return internal_error()


@movements_bp.route("/movements/<int:movement_id>", methods=["DELETE"])
def delete_movement(movement_id: int) -> Any:
    try:
        with db_session() as db:
            movement = db.query(Movement).filter(Movement.id == movement_id).first()
            if not movement:
                return not_found("Movement")
            if not SimulationVersioningService(db).can_edit(movement.simulation):
                return read_only()
            db.delete(movement)
            db.commit()
            return jsonify({"id": movement_id, "deleted": True}), 200

    except Exception as e:
        current_app.logger.error(f"Error deleting movement: {str(e)}")
        return internal_error()
