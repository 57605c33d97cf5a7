from __future__ import annotations
import json, logging
from datetime import datetime, timezone

from flask import g, jsonify, request
from werkzeug.wrappers.response import Response

from errors import DashboardError
from extensions import dashboard

from . import bp, api_bp
from .services import activity_json, snapshot_json

log = logging.getLogger(__name__)

_EXTRA_KEYS = (
    "event", "path", "method", "status", "duration_ms",
    "assignment_id", "notification_id", "grade", "files",
)


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for key in _EXTRA_KEYS:
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _setup_structured_logging(app):
    # app logger plus every service module under blueprints.*
    for logger in (app.logger, logging.getLogger("blueprints")):
        has_json = any(
            isinstance(h, logging.StreamHandler)
            and isinstance(getattr(h, "formatter", None), JSONFormatter)
            for h in logger.handlers
        )
        if not has_json:
            handler = logging.StreamHandler()
            handler.setFormatter(JSONFormatter())
            logger.addHandler(handler)
            logger.setLevel(logging.INFO)


@bp.before_app_request
def _start_timer():
    g._req_start = datetime.now(timezone.utc)


@bp.after_app_request
def _log_request(response: Response):
    start = getattr(g, "_req_start", None)
    duration_ms = int((datetime.now(timezone.utc) - start).total_seconds() * 1000) if start else None
    extra = {
        "event": "http_request",
        "path": request.path,
        "method": request.method,
        "status": response.status_code,
        "duration_ms": duration_ms,
    }
    log.info("request handled", extra=extra)
    return response


@bp.app_errorhandler(DashboardError)
def _handle_dashboard_error(err: DashboardError):
    log.info("operation rejected", extra={"event": err.code, "assignment_id": err.assignment_id})
    return jsonify(err.to_dict()), err.http_status


@bp.record_once
def _on_register(state):
    _setup_structured_logging(state.app)


@bp.get("/health")
def health():
    return jsonify({
        "status": "ok",
        "ts": datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z"),
        "arrivals_running": dashboard.session.arrivals.running,
    })


# ---------- API ----------
@api_bp.get("/dashboard")
def api_dashboard():
    return jsonify(snapshot_json(dashboard.session.snapshot()))


@api_bp.put("/view/filter")
def api_set_filter():
    payload = request.get_json(silent=True) or {}
    try:
        dashboard.session.set_filter(payload.get("status"))
    except ValueError as ve:
        return jsonify({"error": "bad_filter", "detail": str(ve)}), 400
    return jsonify({"ok": True, "dashboard": snapshot_json(dashboard.session.snapshot())})


@api_bp.put("/view/search")
def api_set_search():
    payload = request.get_json(silent=True) or {}
    text = payload.get("text")
    if text is not None and not isinstance(text, str):
        return jsonify({"error": "bad_search", "detail": "text must be a string"}), 400
    dashboard.session.set_search_text(text)
    return jsonify({"ok": True, "dashboard": snapshot_json(dashboard.session.snapshot())})


@api_bp.get("/activity")
def api_activity():
    try:
        limit = int(request.args.get("limit", 10))
    except ValueError:
        return jsonify({"error": "bad_limit"}), 400
    if limit < 0:
        return jsonify({"error": "bad_limit"}), 400
    entries = dashboard.session.store.recent_activity(limit)
    return jsonify({"items": [activity_json(e) for e in entries]})
