# blueprints/assignments/routes.py
from __future__ import annotations
from dataclasses import asdict

from flask import Blueprint, jsonify, request

from extensions import dashboard
from blueprints.core.services import assignment_json, snapshot_json

api_bp = Blueprint("assignments_api", __name__)


def _json_err(code: str, http: int = 400, detail: str | None = None):
    body = {"error": code}
    if detail:
        body["detail"] = detail
    return jsonify(body), http


def _mutation_response(assignment, http: int = 200):
    session = dashboard.session
    return jsonify({
        "ok": True,
        "assignment": assignment_json(assignment),
        "dashboard": snapshot_json(session.snapshot()),
    }), http


@api_bp.get("/assignments")
def api_list():
    # ad hoc ?status= / ?q= do not touch the session's saved view
    try:
        items = dashboard.session.visible_assignments(
            status=request.args.get("status"),
            search_text=request.args.get("q"),
        )
    except ValueError as ve:
        return _json_err("bad_filter", 400, str(ve))
    return jsonify({"items": [assignment_json(a) for a in items], "meta": {"total": len(items)}})


@api_bp.get("/assignments/<int:assignment_id>")
def api_get(assignment_id: int):
    return jsonify(assignment_json(dashboard.session.store.get(assignment_id)))


@api_bp.get("/assignments/stats")
def api_stats():
    return jsonify(asdict(dashboard.session.store.stats()))


@api_bp.get("/assignments/upcoming")
def api_upcoming():
    session = dashboard.session
    try:
        limit = int(request.args.get("limit", session.upcoming_limit))
    except ValueError:
        return _json_err("bad_limit", 400)
    if limit < 0:
        return _json_err("bad_limit", 400)
    return jsonify({"items": [assignment_json(a) for a in session.store.upcoming_deadlines(limit)]})


@api_bp.get("/courses")
def api_courses():
    return jsonify({"items": [c.model_dump() for c in dashboard.session.store.courses()]})


@api_bp.post("/assignments")
def api_create():
    payload = request.get_json(silent=True) or {}
    a = dashboard.session.create_assignment(payload)
    return _mutation_response(a, 201)


@api_bp.put("/assignments/<int:assignment_id>")
def api_update(assignment_id: int):
    payload = request.get_json(silent=True) or {}
    a = dashboard.session.update_assignment(assignment_id, payload)
    return _mutation_response(a)


@api_bp.post("/assignments/<int:assignment_id>/submit")
def api_submit(assignment_id: int):
    payload = request.get_json(silent=True) or {}
    files = payload.get("files") or []
    if not isinstance(files, list):
        return _json_err("bad_files", 400, "files must be a list")
    a = dashboard.session.submit_assignment(assignment_id, files, payload.get("comments"))
    return _mutation_response(a)


@api_bp.post("/assignments/<int:assignment_id>/grade")
def api_grade(assignment_id: int):
    payload = request.get_json(silent=True) or {}
    a = dashboard.session.grade_assignment(assignment_id, payload.get("score"), payload.get("feedback"))
    return _mutation_response(a)
