"""
Clients blueprint.

CRUD endpoints for the advisory firm's clients. Deleting a client removes its
simulations and everything attached to them.
"""

from typing import Any

from flask import Blueprint, current_app, jsonify
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

from advisory_api.database.base import db_session
from advisory_api.database.models import Client
from advisory_api.models.schemas import ClientCreate

from .responses import error_response, internal_error, invalid_data, json_body, merged, not_found

clients_bp = Blueprint("clients", __name__, url_prefix="/api")


@clients_bp.route("/clients", methods=["GET"])
def list_clients() -> Any:
    """List all clients ordered by name."""
    try:
        with db_session() as db:
            clients = db.query(Client).order_by(Client.name, Client.id).all()
            return jsonify([client.to_dict() for client in clients]), 200

    except Exception as e:
        current_app.logger.error(f"Error listing clients: {str(e)}")
        return internal_error()


@clients_bp.route("/clients", methods=["POST"])
def create_client() -> Any:
    """Register a new client.

    Returns:
        JSON response with the created client, 409 if the e-mail is taken
    """
    try:
        payload = ClientCreate.model_validate(json_body())
    except ValidationError as e:
        return invalid_data(e)

    try:
        with db_session() as db:
            client = Client(**payload.model_dump())
            db.add(client)
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                return error_response("E-mail already registered", 409)
            db.refresh(client)
            return jsonify(client.to_dict()), 201

    except Exception as e:
        current_app.logger.error(f"Error creating client: {str(e)}")
        return internal_error()


@clients_bp.route("/clients/<int:client_id>", methods=["GET"])
def get_client(client_id: int) -> Any:
    try:
        with db_session() as db:
            client = db.query(Client).filter(Client.id == client_id).first()
            if not client:
                return not_found("Client")
            return jsonify(client.to_dict()), 200

    except Exception as e:
        current_app.logger.error(f"Error getting client: {str(e)}")
        return internal_error()


@clients_bp.route("/clients/<int:client_id>", methods=["PUT"])
def update_client(client_id: int) -> Any:
    """Update some or all fields of a client."""
    try:
        with db_session() as db:
            client = db.query(Client).filter(Client.id == client_id).first()
            if not client:
                return not_found("Client")

            try:
                payload = merged(ClientCreate, client.to_dict(), json_body())
            except ValidationError as e:
                return invalid_data(e)

            for key, value in payload.model_dump().items():
                setattr(client, key, value)
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                return error_response("E-mail already registered", 409)
            db.refresh(client)
            return jsonify(client.to_dict()), 200

    except Exception as e:
        current_app.logger.error(f"Error updating client: {str(e)}")
        return internal_error()


@clients_bp.route("/clients/<int:client_id>", methods=["DELETE"])
def delete_client(client_id: int) -> Any:
    try:
        with db_session() as db:
            client = db.query(Client).filter(Client.id == client_id).first()
            if not client:
                return not_found("Client")
            db.delete(client)
            db.commit()
            return jsonify({"id": client_id, "deleted": True}), 200

    except Exception as e:
        current_app.logger.error(f"Error deleting client: {str(e)}")
        return internal_error()
