"""
Simulations blueprint.

CRUD endpoints for financial plans plus the versioning operations: duplicate,
"current situation" and the per-name history. Current situations and legacy
versions are read-only.
"""

from typing import Any

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from advisory_api.database.base import db_session
from advisory_api.database.models import Client, Simulation
from advisory_api.models.errors import SimulationNotFoundError
from advisory_api.models.schemas import DuplicateRequest, SimulationCreate
from advisory_api.services.simulation_service import SimulationVersioningService

from .responses import (
    error_response,
    internal_error,
    invalid_data,
    json_body,
    merged,
    not_found,
    read_only,
)

simulations_bp = Blueprint("simulations", __name__, url_prefix="/api")


@simulations_bp.route("/simulations", methods=["GET"])
def list_simulations() -> Any:
    """List simulations.

    Query parameters:
        client_id: Only simulations of this client
        latest: When "true", only the most recent version of each name

    Returns:
        JSON list of simulations
    """
    try:
        client_id = request.args.get("client_id", type=int)
        latest = request.args.get("latest", "false").lower() == "true"

        with db_session() as db:
            if latest:
                service = SimulationVersioningService(db)
                simulations = service.latest_simulations(client_id)
            else:
                query = db.query(Simulation)
                if client_id is not None:
                    query = query.filter(Simulation.client_id == client_id)
                simulations = query.order_by(Simulation.id.desc()).all()
            return jsonify([simulation.to_dict() for simulation in simulations]), 200

    except Exception as e:
        current_app.logger.error(f"Error listing simulations: {str(e)}")
        return internal_error()


@simulations_bp.route("/simulations", methods=["POST"])
def create_simulation() -> Any:
    try:
        payload = SimulationCreate.model_validate(json_body())
    except ValidationError as e:
        return invalid_data(e)

    try:
        with db_session() as db:
            client = db.query(Client).filter(Client.id == payload.client_id).first()
            if not client:
                return not_found("Client")

            simulation = Simulation(**payload.model_dump())
            db.add(simulation)
            db.commit()
            db.refresh(simulation)
            return jsonify(simulation.to_dict()), 201

    except Exception as e:
        current_app.logger.error(f"Error creating simulation: {str(e)}")
        return internal_error()


@simulations_bp.route("/simulations/history", methods=["GET"])
def simulation_history() -> Any:
    """All versions of a simulation name, newest first."""
    name = request.args.get("name", "").strip()
    if not name:
        return error_response(
            "Invalid data", 400, [{"field": "name", "message": "Field required"}]
        )

    try:
        with db_session() as db:
            simulations = SimulationVersioningService(db).history(name)
            return jsonify([simulation.to_dict() for simulation in simulations]), 200

    except Exception as e:
        current_app.logger.error(f"Error getting simulation history: {str(e)}")
        return internal_error()


@simulations_bp.route("/simulations/<int:simulation_id>", methods=["GET"])
def get_simulation(simulation_id: int) -> Any:
    """Get a simulation with its editing flags."""
    try:
        with db_session() as db:
            service = SimulationVersioningService(db)
            simulation = service.get_simulation(simulation_id)

            data = simulation.to_dict()
            data["can_edit"] = service.can_edit(simulation)
            data["can_delete"] = service.can_delete(simulation)
            data["is_legacy"] = service.is_legacy_version(simulation)
            return jsonify(data), 200

    except SimulationNotFoundError:
        return not_found("Simulation")
    except Exception as e:
        current_app.logger.error(f"Error getting simulation: {str(e)}")
        return internal_error()


@simulations_bp.route("/simulations/<int:simulation_id>", methods=["PUT"])
def update_simulation(simulation_id: int) -> Any:
    try:
        with db_session() as db:
            service = SimulationVersioningService(db)
            simulation = service.get_simulation(simulation_id)
            if not service.can_edit(simulation):
                return read_only()

            changes = json_body()
            # Ownership is fixed at creation
            changes.pop("client_id", None)
            try:
                payload = merged(SimulationCreate, simulation.to_dict(), changes)
            except ValidationError as e:
                return invalid_data(e)

            for key, value in payload.model_dump(exclude={"client_id"}).items():
                setattr(simulation, key, value)
            db.commit()
            db.refresh(simulation)
            return jsonify(simulation.to_dict()), 200

    except SimulationNotFoundError:
        return not_found("Simulation")
    except Exception as e:
        current_app.logger.error(f"Error updating simulation: {str(e)}")
        return internal_error()


@simulations_bp.route("/simulations/<int:simulation_id>", methods=["DELETE"])
def delete_simulation(simulation_id: int) -> Any:
    try:
        with db_session() as db:
            service = SimulationVersioningService(db)
            simulation = service.get_simulation(simulation_id)
            if not service.can_delete(simulation):
                return error_response("Current situations cannot be deleted", 409)

            db.delete(simulation)
            db.commit()
            return jsonify({"id": simulation_id, "deleted": True}), 200

    except SimulationNotFoundError:
        return not_found("Simulation")
    except Exception as e:
        current_app.logger.error(f"Error deleting simulation: {str(e)}")
        return internal_error()


@simulations_bp.route("/simulations/<int:simulation_id>/duplicate", methods=["POST"])
def duplicate_simulation(simulation_id: int) -> Any:
    """Deep-copy a simulation with its allocations, movements and insurances."""
    try:
        payload = DuplicateRequest.model_validate(json_body())
    except ValidationError as e:
        return invalid_data(e)

    try:
        with db_session() as db:
            copy = SimulationVersioningService(db).duplicate(simulation_id, payload.name)
            return jsonify(copy.to_dict()), 201

    except SimulationNotFoundError:
        return not_found("Simulation")
    except Exception as e:
        current_app.logger.error(f"Error duplicating simulation: {str(e)}")
        return internal_error()


@simulations_bp.route(
    "/simulations/<int:simulation_id>/current-situation", methods=["POST"]
)
def create_current_situation(simulation_id: int) -> Any:
    """Create the current situation of a plan, or return the existing one."""
    try:
        with db_session() as db:
            service = SimulationVersioningService(db)
            existing = service.find_current_situation(service.get_simulation(simulation_id))
            if existing is not None:
                return jsonify(existing.to_dict()), 200

            current = service.create_current_situation(simulation_id)
            return jsonify(current.to_dict()), 201

    except SimulationNotFoundError:
        return not_found("Simulation")
    except Exception as e:
        current_app.logger.error(f"Error creating current situation: {str(e)}")
        return internal_error()
