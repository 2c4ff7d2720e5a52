"""Shared JSON error responses for the API blueprints."""

from typing import Any, Dict, List, Optional

from flask import jsonify, request
from pydantic import BaseModel, ValidationError

from advisory_api.models.errors import ProjectionValidationError


def error_response(
    message: str, status_code: int, errors: Optional[List[Dict[str, Any]]] = None
) -> Any:
    body: Dict[str, Any] = {"status": "error", "message": message}
    if errors is not None:
        body["errors"] = errors
    return jsonify(body), status_code


def invalid_data(exc: Any) -> Any:
    """400 response for a pydantic or engine validation failure."""
    if isinstance(exc, ValidationError):
        exc = ProjectionValidationError.from_pydantic(exc)
    return error_response("Invalid data", 400, exc.errors)


def not_found(what: str) -> Any:
    return error_response(f"{what} not found", 404)


def internal_error() -> Any:
    return error_response("Internal server error", 500)


def json_body() -> Dict[str, Any]:
    """Request body as a dict; anything else counts as empty."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def merged(schema: type, current: Dict[str, Any], changes: Dict[str, Any]) -> BaseModel:
    """Validate ``changes`` applied on top of a stored row's fields."""
    fields = {key: value for key, value in current.items() if key in schema.model_fields}
    fields.update(changes)
    return schema.model_validate(fields)


def read_only() -> Any:
    """409 for changes to a current situation or a legacy version."""
    return error_response("Current situations and legacy versions cannot be edited", 409)
