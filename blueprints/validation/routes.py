# blueprints/validation/routes.py
from __future__ import annotations

from flask import Blueprint, jsonify, request
from pydantic_core import to_jsonable_python

from extensions import dashboard
from .rules import SCHEMAS

api_bp = Blueprint("validation_api", __name__)


@api_bp.get("/validate")
def api_schemas():
    return jsonify({"schemas": sorted(SCHEMAS)})


@api_bp.post("/validate/<schema_name>")
def api_validate(schema_name: str):
    if schema_name not in SCHEMAS:
        return jsonify({"error": "unknown_schema", "detail": schema_name}), 404
    payload = request.get_json(silent=True) or {}
    result = dashboard.session.validate(schema_name, payload)
    if result.ok:
        return jsonify({"ok": True, "value": to_jsonable_python(result.value)})
    return jsonify({"ok": False, "errors": result.errors}), 422
