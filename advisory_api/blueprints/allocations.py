"""
Allocations blueprint.

Assets of a simulation and their dated valuation records. The projection
engine takes each asset's starting value from these records.
"""

from typing import Any

from flask import Blueprint, current_app, jsonify
from pydantic import ValidationError

from advisory_api.database.base import db_session
from advisory_api.database.models import Allocation, AssetRecord, Simulation
from advisory_api.models.schemas import AllocationCreate, RecordCreate
from advisory_api.services.simulation_service import SimulationVersioningService

from .responses import internal_error, invalid_data, json_body, merged, not_found, read_only

allocations_bp = Blueprint("allocations", __name__, url_prefix="/api")


@allocations_bp.route("/simulations/<int:simulation_id>/allocations", methods=["GET"])
def list_allocations(simulation_id: int) -> Any:
    """List the allocations of a simulation, each with its records."""
    try:
        with db_session() as db:
            simulation = db.query(Simulation).filter(Simulation.id == simulation_id).first()
            if not simulation:
                return not_found("Simulation")

            allocations = (
                db.query(Allocation)
                .filter(Allocation.simulation_id == simulation_id)
                .order_by(Allocation.id)
                .all()
            )
            return jsonify(
                [allocation.to_dict(include_records=True) for allocation in allocations]
            ), 200

    except Exception as e:
        current_app.logger.error(f"Error listing allocations: {str(e)}")
        return internal_error()


@allocations_bp.route("/simulations/<int:simulation_id>/allocations", methods=["POST"])
def create_allocation(simulation_id: int) -> Any:
    """Create an allocation, optionally with its first valuation records."""
    try:
        payload = AllocationCreate.model_validate(json_body())
    except ValidationError as e:
        return invalid_data(e)

    try:
        with db_session() as db:
            simulation = db.query(Simulation).filter(Simulation.id == simulation_id).first()
            if not simulation:
                return not_found("Simulation")
            if not SimulationVersioningService(db).can_edit(simulation):
                return read_only()

            allocation = Allocation(
                simulation_id=simulation_id,
                **payload.model_dump(exclude={"records"}),
            )
            allocation.records = [
                AssetRecord(**record.model_dump()) for record in payload.records
            ]
            db.add(allocation)
            db.commit()
            db.refresh(allocation)
            return jsonify(allocation.to_dict(include_records=True)), 201

    except Exception as e:
        current_app.logger.error(f"Error creating allocation: {str(e)}")
        return internal_error()


@allocations_bp.route("/allocations/<int:allocation_id>", methods=["GET"])
def get_allocation(allocation_id: int) -> Any:
    try:
        with db_session() as db:
            allocation = db.query(Allocation).filter(Allocation.id == allocation_id).first()
            if not allocation:
                return not_found("Allocation")
            return jsonify(allocation.to_dict(include_records=True)), 200

    except Exception as e:
        current_app.logger.error(f"Error getting allocation: {str(e)}")
        return internal_error()


@allocations_bp.route("/allocations/<int:allocation_id>", methods=["PUT"])
def update_allocation(allocation_id: int) -> Any:
    """Update allocation fields. Records are managed through their own endpoint."""
    try:
        with db_session() as db:
            allocation = db.query(Allocation).filter(Allocation.id == allocation_id).first()
            if not allocation:
                return not_found("Allocation")
            if not SimulationVersioningService(db).can_edit(allocation.simulation):
                return read_only()

            changes = json_body()
            changes.pop("records", None)
            try:
                payload = merged(AllocationCreate, allocation.to_dict(), changes)
            except ValidationError as e:
                return invalid_data(e)

            for key, value in payload.model_dump(exclude={"records"}).items():
                setattr(allocation, key, value)
            db.commit()
            db.refresh(allocation)
            return jsonify(allocation.to_dict(include_records=True)), 200

    except Exception as e:
        current_app.logger.error(f"Error updating allocation: {str(e)}")
        return internal_error()


@allocations_bp.route("/allocations/<int:allocation_id>", methods=["DELETE"])
def delete_allocation(allocation_id: int) -> Any:
    try:
        with db_session() as db:
            allocation = db.query(Allocation).filter(Allocation.id == allocation_id).first()
            if not allocation:
                return not_found("Allocation")
            if not SimulationVersioningService(db).can_edit(allocation.simulation):
                return read_only()
            db.delete(allocation)
            db.commit()
            return jsonify({"id": allocation_id, "deleted": True}), 200

    except Exception as e:
        current_app.logger.error(f"Error deleting allocation: {str(e)}")
        return internal_error()


@allocations_bp.route("/allocations/<int:allocation_id>/records", methods=["GET"])
def list_records(allocation_id: int) -> Any:
    """Valuation records of an allocation in insertion order."""
    try:
        with db_session() as db:
            allocation = db.query(Allocation).filter(Allocation.id == allocation_id).first()
            if not allocation:
                return not_found("Allocation")
            return jsonify([record.to_dict() for record in allocation.records]), 200

    except Exception as e:
        current_app.logger.error(f"Error listing records: {str(e)}")
        return internal_error()


@allocations_bp.route("/allocations/<int:allocation_id>/records", methods=["POST"])
def add_record(allocation_id: int) -> Any:
    try:
        payload = RecordCreate.model_validate(json_body())
    except ValidationError as e:
        return invalid_data(e)

    try:
        with db_session() as db:
            allocation = db.query(Allocation).filter(Allocation.id == allocation_id).first()
            if not allocation:
                return not_found("Allocation")
            if not SimulationVersioningService(db).can_edit(allocation.simulation):
                return read_only()

            record = AssetRecord(allocation_id=allocation_id, **payload.model_dump())
            db.add(record)
            db.commit()
            db.refresh(record)
            return jsonify(record.to_dict()), 201

    except Exception as e:
        current_app.logger.error(f"Error adding record: {str(e)}")
        return internal_error()
