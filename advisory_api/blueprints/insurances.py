"""Insurances blueprint."""

from typing import Any

from flask import Blueprint, current_app, jsonify
from pydantic import ValidationError

from advisory_api.database.base import db_session
from advisory_api.database.models import Insurance, Simulation
from advisory_api.models.schemas import InsuranceCreate
from advisory_api.services.simulation_service import SimulationVersioningService

from .responses import internal_error, invalid_data, json_body, merged, not_found, read_only

insurances_bp = Blueprint("insurances", __name__, url_prefix="/api")


@insurances_bp.route("/simulations/<int:simulation_id>/insurances", methods=["GET"])
def list_insurances(simulation_id: int) -> Any:
    try:
        with db_session() as db:
            simulation = db.query(Simulation).filter(Simulation.id == simulation_id).first()
            if not simulation:
                return not_found("Simulation")

            insurances = (
                db.query(Insurance)
                .filter(Insurance.simulation_id == simulation_id)
                .order_by(Insurance.id)
                .all()
            )
            return jsonify([insurance.to_dict() for insurance in insurances]), 200

    except Exception as e:
        current_app.logger.error(f"Error listing insurances: {str(e)}")
        return internal_error()


@insurances_bp.route("/simulations/<int:simulation_id>/insurances", methods=["POST"])
def create_insurance(simulation_id: int) -> Any:
    try:
        payload = InsuranceCreate.model_validate(json_body())
    except ValidationError as e:
        return invalid_data(e)

    try:
        with db_session() as db:
            simulation = db.query(Simulation).filter(Simulation.id == simulation_id).first()
            if not simulation:
                return not_found("Simulation")
            if not SimulationVersioningService(db).can_edit(simulation):
                return read_only()

            insurance = Insurance(simulation_id=simulation_id, **payload.model_dump())
            db.add(insurance)
            db.commit()
            db.refresh(insurance)
            return jsonify(insurance.to_dict()), 201

    except Exception as e:
        current_app.logger.error(f"Error creating insurance: {str(e)}")
        return internal_error()


@insurances_bp.route("/insurances/<int:insurance_id>", methods=["GET"])
def get_insurance(insurance_id: int) -> Any:
    try:
        with db_session() as db:
            insurance = db.query(Insurance).filter(Insurance.id == insurance_id).first()
            if not insurance:
                return not_found("Insurance")
            return jsonify(insurance.to_dict()), 200

    except Exception as e:
        current_app.logger.error(f"Error getting insurance: {str(e)}")
        return internal_error()


@insurances_bp.route("/insurances/<int:insurance_id>", methods=["PUT"])
def update_insurance(insurance_id: int) -> Any:
    try:
        with db_session() as db:
            insurance = db.query(Insurance).filter(Insurance.id == insurance_id).first()
            if not insurance:
                return not_found("Insurance")
            if not SimulationVersioningService(db).can_edit(insurance.simulation):
                return read_only()

            try:
                payload = merged(InsuranceCreate, insurance.to_dict(), json_body())
            except ValidationError as e:
                return invalid_data(e)

            for key, value in payload.model_dump().items():
                setattr(insurance, key, value)
            db.commit()
            db.refresh(insurance)
            return jsonify(insurance.to_dict()), 200

    except Exception as e:
        current_app.logger.error(f"Error updating insurance: {str(e)}")
        return internal_error()


@insurances_bp.route("/insurances/<int:insurance_id>", methods=["DELETE"])
def delete_insurance(insurance_id: int) -> Any:
    try:
        with db_session() as db:
            insurance = db.query(Insurance).filter(Insurance.id == insurance_id).first()
            if not insurance:
                return not_found("Insurance")
            if not SimulationVersioningService(db).can_edit(insurance.simulation):
                return read_only()
            db.delete(insurance)
            db.commit()
            return jsonify({"id": insurance_id, "deleted": True}), 200

    except Exception as e:
        current_app.logger.error(f"Error deleting insurance: {str(e)}")
        return internal_error()
